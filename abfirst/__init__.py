"""
AB First - A/B Tests for Page Content
=====================================
Test extraction, variant assignment and content filtering.
"""

from .config import AbTestsConfig
from .models import DeclaredTest, Assignment, AssignmentResolution, ORIGINAL_VARIANT
from .content import (
    find_nodes,
    find_modules,
    get_ab_test_data_from_content,
    get_ab_test_data_from_gutenberg_blocks,
    get_ab_test_data_from_vc_modules,
    filter_non_assigned_variants,
)
from .client import AssignmentClient, FetchError, Ok, Err
from .decorator import decorate_data
from .core.exceptions import (
    AbFirstException,
    ConfigurationException,
    MissingConfigException,
    FetchException,
)
from .service import AbFirst

__all__ = [
    # Config
    "AbTestsConfig",
    # Models
    "DeclaredTest", "Assignment", "AssignmentResolution", "ORIGINAL_VARIANT",
    # Content
    "find_nodes", "find_modules",
    "get_ab_test_data_from_content",
    "get_ab_test_data_from_gutenberg_blocks",
    "get_ab_test_data_from_vc_modules",
    "filter_non_assigned_variants",
    "decorate_data",
    # Client
    "AssignmentClient", "FetchError", "Ok", "Err",
    # Errors
    "AbFirstException", "ConfigurationException", "MissingConfigException", "FetchException",
    # Service
    "AbFirst",
]

__version__ = "1.0.0"
