"""Content - tree search, test extraction and variant filtering"""
from .formats import ContentFormat, GUTENBERG, VISUAL_COMPOSER, CONTENT_FORMATS
from .tree import find_nodes, find_modules
from .extractor import (
    extract_ab_tests,
    get_ab_test_data_from_content,
    get_ab_test_data_from_gutenberg_blocks,
    get_ab_test_data_from_vc_modules,
)
from .filter import filter_non_assigned_variants

__all__ = [
    "ContentFormat",
    "GUTENBERG",
    "VISUAL_COMPOSER",
    "CONTENT_FORMATS",
    "find_nodes",
    "find_modules",
    "extract_ab_tests",
    "get_ab_test_data_from_content",
    "get_ab_test_data_from_gutenberg_blocks",
    "get_ab_test_data_from_vc_modules",
    "filter_non_assigned_variants",
]
