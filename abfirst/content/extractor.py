"""
AB FIRST - Test Data Extractor
==============================
Collects the A/B tests declared in page content.

Result shape:
    {
        "someAbTestUuid": [
            DeclaredTest(testUuid="someAbTestUuid", variantName="original"),
            DeclaredTest(testUuid="someAbTestUuid", variantName="B"),
        ],
    }
"""

import logging
from typing import Any, Dict, Iterable, List

from abfirst.content.formats import ContentFormat, GUTENBERG, VISUAL_COMPOSER, CONTENT_FORMATS
from abfirst.content.tree import find_modules
from abfirst.models import DeclaredTest, normalize_variant_name

logger = logging.getLogger(__name__)

DeclaredTests = Dict[str, List[DeclaredTest]]


def extract_ab_tests(
    nodes: Any,
    content_format: ContentFormat,
    type_names: Iterable[str]
) -> DeclaredTests:
    """
    Group the tests declared on matching nodes by test uuid.

    Every matching node with ``useAbTesting`` set contributes one entry,
    in document order. Duplicates are kept.
    """
    modules = find_modules(nodes, *type_names, content_format=content_format)

    ab_tests: DeclaredTests = {}
    for module in modules:
        ab_data = content_format.ab_data_of(module)
        if not ab_data or not ab_data.get("useAbTesting"):
            continue

        test_uuid = ab_data.get("abTestUuid")
        if not isinstance(test_uuid, str) or not test_uuid:
            logger.warning(f"Skipping {content_format.name} node with A/B testing but no test uuid")
            continue

        variant_name = normalize_variant_name(ab_data.get("abTestVariantName"))

        ab_tests.setdefault(test_uuid, []).append(DeclaredTest(
            test_uuid=test_uuid,
            variant_name=variant_name,
        ))

    return ab_tests


def extract_from_document(
    data: Any,
    content_format: ContentFormat,
    block_names: Iterable[str] = ()
) -> DeclaredTests:
    """Extract tests from a page document using the format's default node types."""
    type_names = (*content_format.default_type_names, *block_names)
    return extract_ab_tests(content_format.nodes_of(data), content_format, type_names)


def get_ab_test_data_from_gutenberg_blocks(data: Any, block_names: Iterable[str] = ()) -> DeclaredTests:
    """Extract tests declared on Gutenberg blocks."""
    return extract_from_document(data, GUTENBERG, block_names)


def get_ab_test_data_from_vc_modules(data: Any, block_names: Iterable[str] = ()) -> DeclaredTests:
    """Extract tests declared on Visual Composer modules."""
    return extract_from_document(data, VISUAL_COMPOSER, block_names)


def get_ab_test_data_from_content(data: Any, block_names: Iterable[str] = ()) -> DeclaredTests:
    """
    Extract tests from whichever format the page uses.

    Gutenberg blocks are tried first; Visual Composer modules only when the
    blocks declare no tests. Results are never merged.
    """
    block_names = tuple(block_names)
    for content_format in CONTENT_FORMATS:
        ab_tests = extract_from_document(data, content_format, block_names)
        if ab_tests:
            logger.debug(f"Found {len(ab_tests)} A/B tests in {content_format.name} content")
            return ab_tests
    return {}


def to_request_payload(ab_tests: DeclaredTests) -> Dict[str, List[Dict[str, Any]]]:
    """Serialise declared tests for the assignment request body."""
    return {
        test_uuid: [
            test.to_payload() if isinstance(test, DeclaredTest) else test
            for test in tests
        ]
        for test_uuid, tests in ab_tests.items()
    }
