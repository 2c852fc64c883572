"""
AB FIRST - Data Models
======================
Pydantic models for assignment service requests and responses.
"""

import logging
from typing import Optional, List, Dict, Any

from pydantic import BaseModel, ConfigDict, Field, ValidationError

logger = logging.getLogger(__name__)

ORIGINAL_VARIANT = "original"


def normalize_variant_name(value: Any) -> Optional[str]:
    """Variant names compare as strings; numbers in content or responses are coerced."""
    if value is None or isinstance(value, str):
        return value
    return str(value)


class _ServiceModel(BaseModel):
    """Base for camelCase service payloads."""
    model_config = ConfigDict(populate_by_name=True, extra="allow")


# =============================================================================
# CONTENT
# =============================================================================

class DeclaredTest(_ServiceModel):
    """A test/variant pair declared by one node in the page content."""
    test_uuid: str = Field(..., alias="testUuid")
    variant_name: Optional[str] = Field(None, alias="variantName")

    def to_payload(self) -> Dict[str, Any]:
        return {"testUuid": self.test_uuid, "variantName": self.variant_name}


# =============================================================================
# ASSIGNMENTS
# =============================================================================

class Assignment(_ServiceModel):
    """The variant a visitor was assigned for one test."""
    model_config = ConfigDict(coerce_numbers_to_str=True)

    test_uuid: Optional[str] = Field(None, alias="testUuid")
    test_name: Optional[str] = Field(None, alias="testName")
    variant: Optional[str] = None
    participant: Optional[Any] = None

    def to_exposure(self) -> Dict[str, Any]:
        return {
            "abTestUuid": self.test_uuid,
            "abTestName": self.test_name,
            "variant": self.variant,
            "participant": self.participant,
        }


class AssignmentResolution(BaseModel):
    """Merged outcome of the assignment and goal-page calls."""
    assignments: List[Assignment] = Field(default_factory=list)
    tests_with_page_as_goal: List[Any] = Field(default_factory=list)
    cookie_hash: Optional[str] = None

    def find_assignment(self, test_uuid: str) -> Optional[Assignment]:
        return find_assignment(self.assignments, test_uuid)


def parse_assignments(items: Any) -> List[Assignment]:
    """
    Parse a raw list of assignments, skipping entries that are not objects.
    """
    if not isinstance(items, list):
        return []

    assignments = []
    for item in items:
        if isinstance(item, Assignment):
            assignments.append(item)
            continue
        try:
            assignments.append(Assignment.model_validate(item))
        except ValidationError as e:
            logger.warning(f"Skipping malformed assignment {item!r}: {e.error_count()} errors")
    return assignments


def find_assignment(assignments: Any, test_uuid: str) -> Optional[Assignment]:
    """
    Return the first assignment for ``test_uuid``.

    Merged lists may hold more than one assignment for a test; the first
    occurrence wins. Raw mappings are accepted alongside models.
    """
    if not isinstance(assignments, (list, tuple)):
        return None

    for item in assignments:
        if isinstance(item, Assignment):
            assignment = item
        elif isinstance(item, dict):
            try:
                assignment = Assignment.model_validate(item)
            except ValidationError:
                continue
        else:
            continue

        if assignment.test_uuid is not None and assignment.test_uuid == test_uuid:
            return assignment
    return None
