"""
AB FIRST - Page Service
=======================
One configured entry point for the host rendering pipeline.

Usage:
    async with AbFirst({"abTestsHost": "https://ab.example.com", "apiToken": "..."}) as ab:
        page = await ab.process_page(page, cookie=cookie_hash, origin="resource-aggregator")
"""

import logging
from typing import Any, Dict, Iterable, Mapping, Optional, Union

import httpx

from abfirst.client.assignments import AssignmentClient
from abfirst.client.http import Err, Result
from abfirst.config import AbTestsConfig
from abfirst.content import extractor
from abfirst.content.extractor import DeclaredTests
from abfirst.content.filter import filter_non_assigned_variants
from abfirst.core.exceptions import FetchException
from abfirst.core.logging import set_page_id
from abfirst.decorator import decorate_data
from abfirst.models import AssignmentResolution

logger = logging.getLogger(__name__)


class AbFirst:
    """
    A/B test handling for page content.

    Holds its own immutable configuration and HTTP client, so several
    instances (e.g. one per tenant) can coexist.
    """

    def __init__(
        self,
        settings: Union[AbTestsConfig, Mapping[str, Any], None] = None,
        http_client: Optional[httpx.AsyncClient] = None
    ):
        if isinstance(settings, AbTestsConfig):
            self.config = settings
        else:
            self.config = AbTestsConfig.from_settings(settings)

        self.client = AssignmentClient(self.config, http_client=http_client)
        logger.info(f"✅ AB First initialized for {self.config.abtests_host}")

    async def close(self):
        await self.client.close()

    async def __aenter__(self) -> "AbFirst":
        return self

    async def __aexit__(self, exc_type, exc, tb):
        await self.close()

    # =========================================================================
    # CONTENT
    # =========================================================================

    def extract_tests_from_content(self, data: Any, block_names: Iterable[str] = ()) -> DeclaredTests:
        return extractor.get_ab_test_data_from_content(data, block_names)

    def get_ab_test_data_from_gutenberg_blocks(self, data: Any, block_names: Iterable[str] = ()) -> DeclaredTests:
        return extractor.get_ab_test_data_from_gutenberg_blocks(data, block_names)

    def get_ab_test_data_from_vc_modules(self, data: Any, block_names: Iterable[str] = ()) -> DeclaredTests:
        return extractor.get_ab_test_data_from_vc_modules(data, block_names)

    def filter_non_assigned_variants(self, data: Any, assignments: Any) -> Any:
        return filter_non_assigned_variants(data, assignments)

    def decorate_data(
        self,
        data: Dict[str, Any],
        resolution: Optional[AssignmentResolution] = None,
        cookie: Optional[str] = None,
        origin: Any = None,
        **kwargs
    ) -> Dict[str, Any]:
        return decorate_data(data, resolution, cookie, origin, **kwargs)

    # =========================================================================
    # ASSIGNMENT SERVICE
    # =========================================================================

    async def create_assignments(
        self,
        declared_tests: DeclaredTests,
        page_id: Any,
        cookie_hash: Optional[str] = None,
        security_headers: Optional[Dict[str, str]] = None,
        preview: Optional[bool] = None,
        query_string: str = ""
    ) -> Result:
        """Resolve the visitor's assignments. See AssignmentClient.resolve_assignments."""
        return await self.client.resolve_assignments(
            declared_tests,
            page_id,
            cookie_hash=cookie_hash,
            security_headers=security_headers,
            preview=preview,
            query_string=query_string,
        )

    async def get_tests_with_page_as_goal(
        self,
        page_id: Any,
        cookie_hash: Optional[str] = None,
        security_headers: Optional[Dict[str, str]] = None
    ) -> Result:
        return await self.client.get_tests_with_page_as_goal(page_id, cookie_hash, security_headers)

    # =========================================================================
    # PIPELINE
    # =========================================================================

    async def process_page(
        self,
        data: Dict[str, Any],
        cookie: Optional[str] = None,
        origin: Any = None,
        security_headers: Optional[Dict[str, str]] = None,
        query_string: str = "",
        preview: Optional[bool] = None,
        block_names: Iterable[str] = (),
        fail_open: bool = False
    ) -> Dict[str, Any]:
        """
        Extract, resolve, filter and decorate one page.

        Args:
            data: Page document; needs the page id under 'id'
            cookie: The visitor's A/B cookie hash, if any
            origin: Where this data is being produced
            security_headers: Extra headers forwarded to the service
            query_string: Raw request query string
            preview: Force preview mode (detected from query_string if None)
            block_names: Additional node types that may declare tests
            fail_open: Return the page unfiltered when the service fails
                instead of raising FetchException

        Returns:
            The filtered and decorated page data
        """
        set_page_id(data.get("id"))
        declared_tests = self.extract_tests_from_content(data, block_names)

        result = await self.create_assignments(
            declared_tests,
            data.get("id"),
            cookie_hash=cookie,
            security_headers=security_headers,
            preview=preview,
            query_string=query_string,
        )

        if isinstance(result, Err):
            if not fail_open:
                raise FetchException(result.error)
            logger.warning(
                f"A/B test service unavailable for page {data.get('id')} "
                f"({result.error.status}); returning unfiltered content"
            )
            return data

        resolution = result.data
        self.filter_non_assigned_variants(data, resolution)
        return self.decorate_data(data, resolution, cookie=cookie, origin=origin)
