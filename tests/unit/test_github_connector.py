"""GitHub 连接器单元测试（httpx.MockTransport，不访问网络）。"""

from datetime import UTC, datetime

import httpx
import pytest

from src.core.config import settings
from src.modules.sources.domain.entities import DataSource, SourceType, Timespan
from src.modules.sources.domain.exceptions import SourceFetchError, UnsupportedSourceError
from src.modules.sources.infrastructure.connectors.factory import (
    InfrastructureConnectorFactory,
)
from src.modules.sources.infrastructure.connectors.github import GitHubConnector

pytestmark = pytest.mark.anyio

NOW = datetime(2026, 10, 19, 12, 0, tzinfo=UTC)
BASE_URL = "https://api.github.com"


def _connector(handler, **kwargs) -> GitHubConnector:
    client = httpx.AsyncClient(transport=httpx.MockTransport(handler), base_url=BASE_URL)
    kwargs.setdefault("token", "")
    return GitHubConnector(client=client, request_delay_sec=0, **kwargs)


def _search_handler(payload_for):
    def handler(request: httpx.Request) -> httpx.Response:
        assert request.url.path == "/search/repositories"
        return httpx.Response(200, json=payload_for(request))

    return handler


class TestWindowQueries:
    def test_query_order_and_window(self):
        connector = GitHubConnector(token="", request_delay_sec=0)
        queries = connector.build_window_queries(Timespan.DAILY, now=NOW)

        assert len(queries) == 1 + len(GitHubConnector.AI_KEYWORDS) + len(
            GitHubConnector.AI_TOPICS
        )
        assert queries[0] == f"created:>2026-10-18 stars:>{settings.FETCH_MIN_STARS_BASE}"
        assert queries[1] == (
            f"langchain created:>2026-10-18 stars:>{settings.FETCH_MIN_STARS_VARIANT}"
        )
        assert queries[-1].startswith("topic:transformer created:>2026-10-18")

    @pytest.mark.parametrize(
        ("timespan", "since"),
        [
            (Timespan.DAILY, "2026-10-18"),
            (Timespan.WEEKLY, "2026-10-12"),
            (Timespan.MONTHLY, "2026-09-19"),
        ],
    )
    def test_window_start_per_timespan(self, timespan, since):
        connector = GitHubConnector(token="", request_delay_sec=0)
        assert f"created:>{since}" in connector.build_window_queries(timespan, now=NOW)[0]


class TestFetch:
    async def test_fetch_by_query_maps_records(self, github_repo):
        def payload(request):
            assert request.url.params["sort"] == "stars"
            assert request.url.params["per_page"] == "25"
            return {"items": [github_repo(11), github_repo(12), {"name": "no-id"}]}

        connector = _connector(_search_handler(payload))
        records = await connector.fetch_by_query("llm", 25)

        assert [r.external_id for r in records] == ["11", "12"]
        assert all(r.source_name == "github" for r in records)
        assert records[0].data["full_name"] == "acme/awesome-langchain-tools"

    async def test_page_size_is_capped(self, github_repo):
        seen = []

        def payload(request):
            seen.append(request.url.params["per_page"])
            return {"items": []}

        await _connector(_search_handler(payload)).fetch_by_query("llm", 500)
        assert seen == ["100"]

    async def test_fetch_window_batches_one_per_query(self, github_repo):
        calls = []

        def payload(request):
            calls.append(request.url.params["q"])
            return {"items": [github_repo(len(calls))]}

        connector = _connector(_search_handler(payload))
        batches = await connector.fetch_window_batches(Timespan.WEEKLY, now=NOW)

        assert len(batches) == len(calls)
        assert calls == connector.build_window_queries(Timespan.WEEKLY, now=NOW)

    async def test_fetch_window_concatenates(self, github_repo):
        connector = _connector(_search_handler(lambda r: {"items": [github_repo(1)]}))
        records = await connector.fetch_window(Timespan.DAILY)
        assert len(records) == len(connector.build_window_queries(Timespan.DAILY))

    async def test_client_error_becomes_fetch_error(self):
        connector = _connector(lambda request: httpx.Response(422, json={"message": "bad"}))
        with pytest.raises(SourceFetchError, match="422"):
            await connector.fetch_by_query("llm", 10)

    async def test_malformed_payload_becomes_fetch_error(self):
        connector = _connector(lambda request: httpx.Response(200, json={"total_count": 0}))
        with pytest.raises(SourceFetchError):
            await connector.fetch_by_query("llm", 10)

    async def test_window_fetch_stops_on_first_failure(self):
        calls = []

        def handler(request):
            calls.append(request)
            return httpx.Response(403, json={"message": "rate limited"})

        connector = _connector(handler)
        with pytest.raises(SourceFetchError):
            await connector.fetch_window_batches(Timespan.DAILY)
        assert len(calls) == 1

    async def test_server_error_is_retried(self, github_repo):
        responses = [
            httpx.Response(502),
            httpx.Response(200, json={"items": [github_repo(5)]}),
        ]
        connector = _connector(lambda request: responses.pop(0))

        records = await connector.fetch_by_query("llm", 10)

        assert [r.external_id for r in records] == ["5"]


class TestConnection:
    async def test_anonymous_probe_uses_rate_limit(self):
        paths = []

        def handler(request):
            paths.append(request.url.path)
            return httpx.Response(200, json={})

        assert await _connector(handler).test_connection() is True
        assert paths == ["/rate_limit"]

    async def test_token_probe_uses_user(self):
        paths = []

        def handler(request):
            paths.append(request.url.path)
            return httpx.Response(401)

        assert await _connector(handler, token="ghp_x").test_connection() is False
        assert paths == ["/user"]

    async def test_transport_error_returns_false(self):
        def handler(request):
            raise httpx.ConnectError("unreachable", request=request)

        assert await _connector(handler).test_connection() is False

    async def test_injected_client_is_not_closed(self):
        connector = _connector(lambda request: httpx.Response(200, json={}))
        client = connector.client
        await connector.aclose()
        assert client.is_closed is False
        await client.aclose()


class TestConfigAndFactory:
    def test_validate_config(self):
        assert GitHubConnector(token="").validate_config() == (True, None)

        valid, error = GitHubConnector(token="", base_url="ftp://example").validate_config()
        assert valid is False
        assert "HTTP" in error

    def test_factory_builds_connector_from_source(self):
        source = DataSource(
            name="github",
            type=SourceType.REPOSITORY,
            display_name="GitHub",
            base_url="https://github.example.com/api/v3",
        )
        connector = InfrastructureConnectorFactory().create(source)

        assert isinstance(connector, GitHubConnector)
        assert connector.base_url == "https://github.example.com/api/v3"

    def test_factory_rejects_unknown_source(self):
        source = DataSource(name="arxiv", type=SourceType.PAPER, display_name="arXiv")
        factory = InfrastructureConnectorFactory()

        assert factory.supports("github")
        assert not factory.supports("arxiv")
        with pytest.raises(UnsupportedSourceError):
            factory.create(source)
