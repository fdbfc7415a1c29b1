"""GitHub repository search connector."""

from __future__ import annotations

from datetime import datetime
from typing import Any
from urllib.parse import urlparse

import httpx
from loguru import logger
from tenacity import (
    retry,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from src.core.config import settings
from src.core.domain.base_entity import utc_now
from src.modules.sources.domain.connector import RawRecord
from src.modules.sources.domain.entities import DataSource, Timespan
from src.modules.sources.domain.exceptions import SourceFetchError
from src.modules.sources.infrastructure.connectors.base import BaseSourceConnector


class GitHubServerError(Exception):
    """5xx from the GitHub API; worth retrying."""


class GitHubConnector(BaseSourceConnector):
    """Search recently created AI/LLM repositories through the GitHub REST API."""

    source_name = "github"

    AI_KEYWORDS = (
        "langchain",
        "llm",
        "ai-agent",
        "chatgpt",
        "openai",
        "anthropic",
        "huggingface",
        "transformers",
        "autogen",
        "crewai",
        "langgraph",
        "llamaindex",
        "rag",
        "vector-database",
    )

    AI_TOPICS = (
        "artificial-intelligence",
        "machine-learning",
        "deep-learning",
        "natural-language-processing",
        "chatbot",
        "llm",
        "ai-agent",
        "langchain",
        "openai",
        "gpt",
        "transformer",
    )

    MAX_PAGE_SIZE = 100

    def __init__(
        self,
        config: dict[str, Any] | None = None,
        *,
        token: str | None = None,
        base_url: str | None = None,
        client: httpx.AsyncClient | None = None,
        page_size: int | None = None,
        request_delay_sec: float | None = None,
    ):
        super().__init__(config, page_size, request_delay_sec)
        self.token = token if token is not None else settings.GITHUB_TOKEN
        self.base_url = (
            base_url or self.config.get("base_url") or settings.GITHUB_API_BASE_URL
        ).rstrip("/")
        self._client = client
        self._owns_client = client is None

    @classmethod
    def from_source(cls, source: DataSource) -> GitHubConnector:
        config = dict(source.api_config)
        if source.base_url:
            config.setdefault("base_url", source.base_url)
        return cls(config)

    @property
    def client(self) -> httpx.AsyncClient:
        if self._client is None:
            headers = {
                "Accept": "application/vnd.github+json",
                "X-GitHub-Api-Version": settings.GITHUB_API_VERSION,
                "User-Agent": settings.GITHUB_USER_AGENT,
            }
            if self.token:
                headers["Authorization"] = f"Bearer {self.token}"
            self._client = httpx.AsyncClient(
                base_url=self.base_url,
                headers=headers,
                timeout=settings.GITHUB_TIMEOUT_SEC,
                follow_redirects=False,
            )
        return self._client

    async def aclose(self) -> None:
        if self._client is not None and self._owns_client:
            await self._client.aclose()
            self._client = None

    def validate_config(self) -> tuple[bool, str | None]:
        parsed = urlparse(self.base_url)
        if parsed.scheme not in ("http", "https") or not parsed.hostname:
            return False, "base_url must be an HTTP(S) URL"
        if not 1 <= self.page_size <= self.MAX_PAGE_SIZE:
            return False, f"page_size must be between 1 and {self.MAX_PAGE_SIZE}"
        return True, None

    async def test_connection(self) -> bool:
        # 有 token 时校验身份，否则只探测 API 可达
        path = "/user" if self.token else "/rate_limit"
        try:
            response = await self.client.get(path)
        except httpx.HTTPError as exc:
            logger.warning(f"GitHub connection test failed: {exc}")
            return False
        if response.status_code != 200:
            logger.warning(f"GitHub connection test returned HTTP {response.status_code}")
            return False
        return True

    def build_window_queries(
        self, timespan: Timespan, now: datetime | None = None
    ) -> list[str]:
        since = timespan.window_start(now or utc_now()).date().isoformat()
        base_stars = settings.FETCH_MIN_STARS_BASE
        variant_stars = settings.FETCH_MIN_STARS_VARIANT

        queries = [f"created:>{since} stars:>{base_stars}"]
        queries.extend(
            f"{keyword} created:>{since} stars:>{variant_stars}"
            for keyword in self.AI_KEYWORDS
        )
        queries.extend(
            f"topic:{topic} created:>{since} stars:>{variant_stars}"
            for topic in self.AI_TOPICS
        )
        return queries

    async def fetch_by_query(self, query: str, page_size: int) -> list[RawRecord]:
        try:
            payload = await self._search(query, page_size)
        except httpx.HTTPStatusError as exc:
            raise SourceFetchError(
                f"GitHub search HTTP {exc.response.status_code} for '{query}'"
            ) from exc
        except (httpx.HTTPError, GitHubServerError) as exc:
            raise SourceFetchError(f"GitHub search failed for '{query}': {exc}") from exc

        items = payload.get("items") if isinstance(payload, dict) else None
        if not isinstance(items, list):
            raise SourceFetchError(f"GitHub search response missing items for '{query}'")

        records: list[RawRecord] = []
        for repo in items:
            if not isinstance(repo, dict) or repo.get("id") is None:
                continue
            records.append(
                RawRecord(
                    source_name=self.source_name,
                    external_id=str(repo["id"]),
                    data=repo,
                )
            )
        return records

    @retry(
        retry=retry_if_exception_type((httpx.TransportError, GitHubServerError)),
        stop=stop_after_attempt(settings.GITHUB_MAX_RETRIES),
        wait=wait_exponential(multiplier=1, min=1, max=5),
        reraise=True,
    )
    async def _search(self, query: str, page_size: int) -> dict[str, Any]:
        response = await self.client.get(
            "/search/repositories",
            params={
                "q": query,
                "sort": "stars",
                "order": "desc",
                "per_page": min(page_size, self.MAX_PAGE_SIZE),
            },
        )
        if response.status_code >= 500:
            raise GitHubServerError(f"HTTP {response.status_code}")
        response.raise_for_status()
        return response.json()
