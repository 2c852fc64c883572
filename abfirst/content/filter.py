"""
AB FIRST - Content Filter
=========================
Removes the variants a visitor is not assigned to from page content.

Only top-level test containers are filtered (``next24hr/section`` blocks and
``vc_row`` modules). Every kept variant that matched an assignment is
recorded as an exposure in ``decorated.abTests.userAssignments``.
"""

import logging
from typing import Any, List, Optional, Tuple

from abfirst.content.formats import ContentFormat, CONTENT_FORMATS
from abfirst.decorator import ab_tests_section
from abfirst.models import (
    Assignment,
    AssignmentResolution,
    ORIGINAL_VARIANT,
    find_assignment,
    normalize_variant_name,
)

logger = logging.getLogger(__name__)


def assignment_list(assignments: Any) -> List[Any]:
    """
    Normalise the accepted assignment inputs to a plain list.

    Accepts an AssignmentResolution, a list of assignments, or the raw
    service response (``{"data": {"testAssignments": [...]}}``).
    Anything else counts as no assignments.
    """
    if isinstance(assignments, AssignmentResolution):
        return assignments.assignments
    if isinstance(assignments, (list, tuple)):
        return list(assignments)
    if isinstance(assignments, dict):
        data = assignments.get("data")
        if isinstance(data, dict) and isinstance(data.get("testAssignments"), list):
            return data["testAssignments"]
    return []


def should_keep(
    node: Any,
    content_format: ContentFormat,
    assignments: List[Any]
) -> Tuple[bool, Optional[Assignment]]:
    """
    Decide whether a top-level node survives filtering.

    Returns:
        Tuple of (keep, matched_assignment). The assignment is set only
        when the node was kept because it is the visitor's variant.
    """
    if content_format.type_name_of(node) != content_format.container_type:
        return True, None

    ab_data = content_format.ab_data_of(node)
    if not ab_data or not ab_data.get("useAbTesting"):
        return True, None

    variant_name = normalize_variant_name(ab_data.get("abTestVariantName"))
    assignment = find_assignment(assignments, ab_data.get("abTestUuid"))

    if assignment is not None and assignment.variant == variant_name:
        return True, assignment

    if assignment is None and variant_name == ORIGINAL_VARIANT:
        # Test not live yet: only the original is shown
        return True, None

    return False, None


def filter_format(data: dict, content_format: ContentFormat, assignments: List[Any]) -> int:
    """Filter one format's top-level nodes in place. Returns the number dropped."""
    nodes = content_format.nodes_of(data)
    if not isinstance(nodes, list):
        return 0

    kept = []
    for node in nodes:
        keep, assignment = should_keep(node, content_format, assignments)
        if not keep:
            continue
        kept.append(node)
        if assignment is not None:
            section = ab_tests_section(data)
            section.setdefault("userAssignments", []).append(assignment.to_exposure())

    data[content_format.content_key] = kept
    return len(nodes) - len(kept)


def filter_non_assigned_variants(data: Any, assignments: Any) -> Any:
    """
    Drop every test variant the visitor is not assigned to.

    Args:
        data: Page document holding ``blocks`` and/or ``vc_content``
        assignments: The visitor's assignments (see ``assignment_list``)

    Returns:
        The same document, filtered in place
    """
    if not isinstance(data, dict):
        return data

    resolved = assignment_list(assignments)
    for content_format in CONTENT_FORMATS:
        dropped = filter_format(data, content_format, resolved)
        if dropped:
            logger.debug(f"Dropped {dropped} non-assigned {content_format.name} variants")

    return data
