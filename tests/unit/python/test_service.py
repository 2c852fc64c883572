"""
AB FIRST - Page Service Tests
End-to-end flow: extract, resolve, filter, decorate.
"""

import pytest

from abfirst import AbFirst, AbTestsConfig
from abfirst.client.http import Err, Ok
from abfirst.core.exceptions import FetchException, MissingConfigException, ConfigurationException


def assignment(test_uuid, variant, name="Hero test"):
    return {"testUuid": test_uuid, "testName": name, "variant": variant, "participant": "p-1"}


class TestConstruction:

    def test_from_settings(self, settings):
        ab = AbFirst(settings)
        assert ab.config.abtests_host == "https://ab.example.com"
        assert ab.config.api_token == "test-token"

    def test_trailing_slash_is_stripped(self):
        ab = AbFirst({"abTestsHost": "https://ab.example.com/", "apiToken": "t"})
        assert ab.config.assignments_url == "https://ab.example.com/api/assignments"

    @pytest.mark.parametrize("settings,missing", [
        ({"apiToken": "t"}, "abTestsHost"),
        ({"abTestsHost": "https://ab.example.com"}, "apiToken"),
        ({"abTestsHost": "", "apiToken": "t"}, "abTestsHost"),
        (None, "abTestsHost"),
    ])
    def test_missing_settings_fail_immediately(self, settings, missing):
        with pytest.raises(MissingConfigException) as exc_info:
            AbFirst(settings)
        assert exc_info.value.config_key == missing

    def test_invalid_timeout(self):
        with pytest.raises(ConfigurationException):
            AbTestsConfig(abtests_host="https://ab.example.com", api_token="t", timeout=0)

    def test_from_env(self, monkeypatch):
        monkeypatch.setenv("AB_TESTS_HOST", "https://env.example.com")
        monkeypatch.setenv("AB_TESTS_API_TOKEN", "env-token")
        monkeypatch.setenv("AB_TESTS_TIMEOUT", "2.5")

        config = AbTestsConfig.from_env()

        assert config == AbTestsConfig("https://env.example.com", "env-token", 2.5)

    def test_from_env_missing(self, monkeypatch):
        monkeypatch.delenv("AB_TESTS_HOST", raising=False)
        monkeypatch.delenv("AB_TESTS_API_TOKEN", raising=False)

        with pytest.raises(MissingConfigException):
            AbTestsConfig.from_env()

    def test_instances_are_independent(self):
        first = AbFirst({"abTestsHost": "https://a.example.com", "apiToken": "a"})
        second = AbFirst({"abTestsHost": "https://b.example.com", "apiToken": "b"})

        assert first.config.abtests_host == "https://a.example.com"
        assert second.client.http.api_token == "b"


class TestProcessPage:

    @pytest.mark.asyncio
    async def test_vc_page_end_to_end(self, settings, fake_service, vc_page):
        fake_service.test_assignments = [assignment("t1", "B")]

        async with AbFirst(settings, http_client=fake_service.client()) as ab:
            page = await ab.process_page(vc_page, cookie=None, origin="resource-aggregator")

        rows = [m for m in page["vc_content"] if m["name"] == "vc_row" and m["attributes"].get("abFirst")]
        assert [r["attributes"]["abFirst"]["abTestVariantName"] for r in rows] == ["B"]

        ab_tests = page["decorated"]["abTests"]
        assert ab_tests["userAssignments"] == [{
            "abTestUuid": "t1",
            "abTestName": "Hero test",
            "variant": "B",
            "participant": "p-1",
        }]
        assert ab_tests["cookieHash"] == {"value": "new-cookie-hash", "origin": "resource-aggregator"}
        assert "testsWithPageAsGoal" not in ab_tests

    @pytest.mark.asyncio
    async def test_gutenberg_page_before_launch(self, settings, fake_service, gutenberg_page):
        async with AbFirst(settings, http_client=fake_service.client()) as ab:
            page = await ab.process_page(gutenberg_page, cookie="existing")

        sections = [b for b in page["blocks"] if b["blockName"] == "next24hr/section"]
        assert [s["abFirst"]["abTestVariantName"] for s in sections] == ["original", "B"]
        assert sections[1]["abFirst"]["useAbTesting"] is False
        assert "cookieHash" not in page["decorated"]["abTests"]
        assert "userAssignments" not in page["decorated"]["abTests"]

    @pytest.mark.asyncio
    async def test_goal_page_visit(self, settings, fake_service):
        fake_service.goal_page_tests = [{"uuid": "t9", "name": "Signup"}]
        fake_service.goal_page_assignments = [assignment("t9", "original")]
        page = {"id": 99, "blocks": [{"blockName": "core/paragraph"}]}

        async with AbFirst(settings, http_client=fake_service.client()) as ab:
            await ab.process_page(page)

        assert page["decorated"]["abTests"]["testsWithPageAsGoal"] == [{"uuid": "t9", "name": "Signup"}]
        assert "/api/assignments/goal-page/99/" in fake_service.paths()

    @pytest.mark.asyncio
    async def test_preview_request(self, settings, fake_service, vc_page):
        fake_service.preview_assignments = [assignment("t1", "B")]

        async with AbFirst(settings, http_client=fake_service.client()) as ab:
            page = await ab.process_page(vc_page, query_string="abTestPreview=1&variant=B")

        assert fake_service.paths() == ["/api/assignments"]
        assert [e["variant"] for e in page["decorated"]["abTests"]["userAssignments"]] == ["B"]

    @pytest.mark.asyncio
    async def test_service_failure_raises(self, settings, fake_service, vc_page):
        fake_service.assignments_status = 500

        async with AbFirst(settings, http_client=fake_service.client()) as ab:
            with pytest.raises(FetchException) as exc_info:
                await ab.process_page(vc_page)

        assert exc_info.value.status == 500
        assert len(vc_page["vc_content"]) == 4

    @pytest.mark.asyncio
    async def test_service_failure_fail_open(self, settings, fake_service, vc_page):
        fake_service.goal_page_status = 502

        async with AbFirst(settings, http_client=fake_service.client()) as ab:
            page = await ab.process_page(vc_page, fail_open=True)

        assert len(page["vc_content"]) == 4
        assert "decorated" not in page


class TestOperations:

    @pytest.mark.asyncio
    async def test_create_assignments_returns_result(self, settings, fake_service, vc_page):
        fake_service.test_assignments = [assignment("t1", "original")]

        async with AbFirst(settings, http_client=fake_service.client()) as ab:
            declared = ab.extract_tests_from_content(vc_page)
            result = await ab.create_assignments(declared, vc_page["id"], cookie_hash="h")

            assert isinstance(result, Ok)
            ab.filter_non_assigned_variants(vc_page, result.data)
            ab.decorate_data(vc_page, result.data, cookie="h")

        variants = [m["attributes"]["abFirst"]["abTestVariantName"]
                    for m in vc_page["vc_content"] if m["attributes"].get("abFirst")]
        assert variants == ["original"]

    @pytest.mark.asyncio
    async def test_get_tests_with_page_as_goal_error(self, settings, fake_service):
        fake_service.goal_page_status = 404

        async with AbFirst(settings, http_client=fake_service.client()) as ab:
            result = await ab.get_tests_with_page_as_goal(5, "h")

        assert isinstance(result, Err)
        assert result.error.status == 404

    def test_format_specific_extraction(self, settings, gutenberg_page, vc_page):
        ab = AbFirst(settings)

        assert list(ab.get_ab_test_data_from_gutenberg_blocks(gutenberg_page)) == ["t1", "t2"]
        assert list(ab.get_ab_test_data_from_vc_modules(vc_page)) == ["t1"]
        assert ab.get_ab_test_data_from_vc_modules(gutenberg_page) == {}
