"""
AB FIRST - Assignment Client
============================
Resolves the visitor's variant assignments with the A/B test service.

Endpoints:
    POST {host}/api/assignments                                  create/fetch assignments
    POST {host}/api/assignments?<query>                          preview a forced variant
    GET  {host}/api/assignments/goal-page/{pageId}/{cookieHash}  tests with page as goal
"""

import asyncio
import logging
from typing import Any, Dict, Optional
from urllib.parse import parse_qs

import httpx

from abfirst.client.http import AbTestsHttpClient, Ok, Err, Result
from abfirst.config import AbTestsConfig
from abfirst.content.extractor import DeclaredTests, to_request_payload
from abfirst.models import AssignmentResolution, parse_assignments

logger = logging.getLogger(__name__)

PREVIEW_QUERY_PARAM = "abTestPreview"


def is_preview_query(query_string: Optional[str]) -> bool:
    """Whether the raw query string asks for an A/B test preview."""
    if not query_string:
        return False
    query = parse_qs(query_string.lstrip("?"), keep_blank_values=True)
    values = query.get(PREVIEW_QUERY_PARAM)
    return bool(values) and any(values)


def _response_data(response: Any) -> Dict[str, Any]:
    if isinstance(response, dict) and isinstance(response.get("data"), dict):
        return response["data"]
    return {}


class AssignmentClient:
    """
    Client for the assignment endpoints of the A/B test service.

    Usage:
        client = AssignmentClient(AbTestsConfig(abtests_host="https://ab.example.com", api_token="..."))
        result = await client.resolve_assignments(declared_tests, page_id=42, cookie_hash=None)
        resolution = result.unwrap()
    """

    def __init__(
        self,
        config: AbTestsConfig,
        http_client: Optional[httpx.AsyncClient] = None
    ):
        self.config = config
        self.http = AbTestsHttpClient(
            api_token=config.api_token,
            timeout=config.timeout,
            client=http_client
        )

    async def close(self):
        await self.http.close()

    # =========================================================================
    # GOAL PAGE
    # =========================================================================

    async def get_tests_with_page_as_goal(
        self,
        page_id: Any,
        cookie_hash: Optional[str] = None,
        security_headers: Optional[Dict[str, str]] = None
    ) -> Result:
        """
        Fetch all tests that have the visited page as their goal.

        Returns:
            Ok with the raw response (``data.testsWithPageAsGoal`` and
            ``data.testsWithPageAsGoalAssignments``), or Err
        """
        url = self.config.goal_page_url(page_id, cookie_hash)
        return await self.http.get(url, security_headers)

    # =========================================================================
    # ASSIGNMENTS
    # =========================================================================

    async def preview_assignments(
        self,
        query_string: str,
        security_headers: Optional[Dict[str, str]] = None
    ) -> Result:
        """Fetch the forced assignments for a preview request."""
        url = f"{self.config.assignments_url}?{query_string.lstrip('?')}"
        result = await self.http.post(url, {}, security_headers)
        return result.map(lambda response: AssignmentResolution(
            assignments=parse_assignments(_response_data(response).get("testAssignments")),
        ))

    async def resolve_assignments(
        self,
        declared_tests: DeclaredTests,
        page_id: Any,
        cookie_hash: Optional[str] = None,
        security_headers: Optional[Dict[str, str]] = None,
        preview: Optional[bool] = None,
        query_string: str = ""
    ) -> Result:
        """
        Get or create the visitor's assignments for the declared tests.

        The assignment request and the goal-page lookup run concurrently and
        both must succeed. Goal-page assignments are appended after the
        direct ones, so a visitor landing straight on a goal page is still
        attributed; lookups take the first assignment per test.

        Args:
            declared_tests: Tests extracted from the page content
            page_id: Id of the visited page
            cookie_hash: Hash from the visitor's A/B cookie, if any
            security_headers: Extra headers forwarded to the service
            preview: Force preview mode (detected from query_string if None)
            query_string: Raw request query string

        Returns:
            Ok(AssignmentResolution) or the Err of the first failing call
        """
        if preview is None:
            preview = is_preview_query(query_string)

        if preview:
            logger.info(f"A/B test preview requested for page {page_id}")
            return await self.preview_assignments(query_string, security_headers)

        body = {
            "cookieHash": cookie_hash,
            "abTests": to_request_payload(declared_tests),
        }

        assignments_result, goal_page_result = await asyncio.gather(
            self.http.post(self.config.assignments_url, body, security_headers),
            self.get_tests_with_page_as_goal(page_id, cookie_hash, security_headers),
        )

        if isinstance(assignments_result, Err):
            return assignments_result
        if isinstance(goal_page_result, Err):
            return goal_page_result

        assignments_data = _response_data(assignments_result.data)
        goal_page_data = _response_data(goal_page_result.data)

        assignments = parse_assignments(assignments_data.get("testAssignments"))
        assignments.extend(parse_assignments(goal_page_data.get("testsWithPageAsGoalAssignments")))

        tests_with_page_as_goal = goal_page_data.get("testsWithPageAsGoal")
        if not isinstance(tests_with_page_as_goal, list):
            tests_with_page_as_goal = []

        issued_hash = assignments_data.get("cookieHash")
        resolution = AssignmentResolution(
            assignments=assignments,
            tests_with_page_as_goal=tests_with_page_as_goal,
            cookie_hash=issued_hash if isinstance(issued_hash, str) and issued_hash else cookie_hash,
        )

        logger.debug(
            f"Resolved {len(resolution.assignments)} assignments for page {page_id} "
            f"({len(tests_with_page_as_goal)} tests with page as goal)"
        )
        return Ok(resolution)
