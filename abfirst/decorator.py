"""
AB FIRST - Response Decorator
Adds A/B test bookkeeping for the rendering layer to the page data.
"""

from typing import Any, Dict, Optional


def ab_tests_section(data: Dict[str, Any]) -> Dict[str, Any]:
    """Return ``data["decorated"]["abTests"]``, creating it if needed."""
    decorated = data.get("decorated")
    if not isinstance(decorated, dict):
        decorated = data["decorated"] = {}

    ab_tests = decorated.get("abTests")
    if not isinstance(ab_tests, dict):
        ab_tests = decorated["abTests"] = {}

    return ab_tests


def decorate_data(
    data: Dict[str, Any],
    resolution: Any = None,
    cookie: Optional[str] = None,
    origin: Any = None,
    cookie_hash: Optional[str] = None,
    tests_with_page_as_goal: Optional[list] = None
) -> Dict[str, Any]:
    """
    Attach cookie and goal-page data to the page data.

    Merges into any ``decorated`` structure already present. Repeated calls
    overwrite the keys they set rather than appending.

    Args:
        data: Page data returned to the rendering layer
        resolution: AssignmentResolution; supplies the cookie hash and goal-page
            tests unless they are passed explicitly
        cookie: The visitor's existing A/B cookie, if any
        origin: Where this data was produced, e.g. 'resource-aggregator'
        cookie_hash: Hash from the A/B service to set as the cookie
        tests_with_page_as_goal: Tests that have this page as their goal

    Returns:
        The same data object
    """
    if resolution is not None:
        if cookie_hash is None:
            cookie_hash = resolution.cookie_hash
        if tests_with_page_as_goal is None:
            tests_with_page_as_goal = resolution.tests_with_page_as_goal

    section = ab_tests_section(data)

    # Only set a cookie if the visitor did not already have one
    if not cookie and cookie_hash:
        section["cookieHash"] = {
            "value": cookie_hash,
            "origin": origin,
        }

    if tests_with_page_as_goal:
        section["testsWithPageAsGoal"] = list(tests_with_page_as_goal)

    return data
