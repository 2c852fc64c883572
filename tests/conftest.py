"""
AB FIRST - Pytest Configuration
Shared fixtures: sample page documents and a fake A/B test service.
"""

import json
from typing import Any, Dict, List, Optional

import httpx
import pytest

HOST = "https://ab.example.com"
TOKEN = "test-token"


def ab(test_uuid: str, variant: str, use: bool = True) -> Dict[str, Any]:
    return {"useAbTesting": use, "abTestUuid": test_uuid, "abTestVariantName": variant}


# =============================================================================
# FAKE SERVICE
# =============================================================================

class FakeAbService:
    """In-process stand-in for the A/B test service."""

    def __init__(self):
        self.requests: List[httpx.Request] = []
        self.test_assignments: List[Dict[str, Any]] = []
        self.cookie_hash: Optional[str] = "new-cookie-hash"
        self.goal_page_tests: List[Dict[str, Any]] = []
        self.goal_page_assignments: List[Dict[str, Any]] = []
        self.assignments_status = 200
        self.goal_page_status = 200
        self.preview_assignments: List[Dict[str, Any]] = []

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        path = request.url.path

        if path.startswith("/api/assignments/goal-page/"):
            if self.goal_page_status != 200:
                return httpx.Response(self.goal_page_status, text="goal page failure")
            return httpx.Response(200, json={"data": {
                "testsWithPageAsGoal": self.goal_page_tests,
                "testsWithPageAsGoalAssignments": self.goal_page_assignments,
            }})

        if path == "/api/assignments" and request.method == "POST":
            if self.assignments_status != 200:
                return httpx.Response(self.assignments_status, json={"error": "assignment failure"})
            if request.url.query:
                return httpx.Response(200, json={"data": {"testAssignments": self.preview_assignments}})
            return httpx.Response(200, json={"data": {
                "testAssignments": self.test_assignments,
                "cookieHash": self.cookie_hash,
            }})

        return httpx.Response(404, json={"error": "not found"})

    def client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(transport=httpx.MockTransport(self.handler))

    def paths(self) -> List[str]:
        return [request.url.path for request in self.requests]

    def body_of(self, index: int) -> Any:
        return json.loads(self.requests[index].content)


@pytest.fixture
def fake_service() -> FakeAbService:
    return FakeAbService()


@pytest.fixture
def settings() -> Dict[str, str]:
    return {"abTestsHost": HOST, "apiToken": TOKEN}


# =============================================================================
# SAMPLE CONTENT
# =============================================================================

@pytest.fixture
def gutenberg_page() -> Dict[str, Any]:
    """Block-tree page with test t1 on sections and t2 on nested buttons."""
    return {
        "id": 42,
        "blocks": [
            {"blockName": "core/paragraph", "blocks": []},
            {
                "blockName": "next24hr/section",
                "abFirst": ab("t1", "original"),
                "blocks": [{"blockName": "button", "abFirst": ab("t2", "original")}],
            },
            {
                "blockName": "next24hr/section",
                "abFirst": ab("t1", "B"),
                "blocks": [{"blockName": "button", "abFirst": ab("t2", "B")}],
            },
            {"blockName": "next24hr/section", "abFirst": ab("t3", "B", use=False)},
        ],
    }


@pytest.fixture
def vc_page() -> Dict[str, Any]:
    """Module-tree page with two variants of test t1."""
    return {
        "id": 7,
        "vc_content": [
            {"name": "vc_column_text", "attributes": {}},
            {
                "name": "vc_row",
                "attributes": {"abFirst": ab("t1", "original")},
                "children": [{"name": "vc_column", "attributes": {}, "children": []}],
            },
            {
                "name": "vc_row",
                "attributes": {"abFirst": ab("t1", "B")},
                "children": [],
            },
            {"name": "vc_row", "attributes": {}},
        ],
    }
