"""Pytest configuration and fixtures."""

from collections.abc import Callable
from datetime import UTC, datetime
from typing import Any

import pytest

from stack_discovery.consts import SEARCH_RESULTS_LIMIT, TRENDING_RESULTS_LIMIT
from stack_discovery.models.model_config import ClientConfig, RateLimitConfig
from stack_discovery.models.model_tool import RawToolRecord, SourceType
from stack_discovery.scrapers.base_scraper import BaseSourceAdapter

FIXED_NOW = datetime(2024, 6, 1, 12, 0, tzinfo=UTC)


class FakeClock:
    """Monotonic clock whose sleep advances time instantly."""

    def __init__(self, start: float = 1000.0):
        self.time = start
        self.sleeps: list[float] = []

    def __call__(self) -> float:
        return self.time

    def advance(self, seconds: float) -> None:
        self.time += seconds

    async def sleep(self, seconds: float) -> None:
        self.sleeps.append(seconds)
        self.time += seconds


class FakeAdapter(BaseSourceAdapter):
    """In-memory adapter returning canned records or raising a canned error."""

    def __init__(
        self,
        source_type: SourceType,
        trending: list[RawToolRecord] | None = None,
        results: list[RawToolRecord] | None = None,
        error: Exception | None = None,
    ):
        self.source_type = source_type
        super().__init__()
        self.trending = trending or []
        self.results = results or []
        self.error = error
        self.trending_calls: list[int] = []
        self.search_calls: list[tuple[str, int]] = []
        self.cleared = 0
        self.closed = False

    def default_client_config(self) -> ClientConfig:
        return ClientConfig(
            base_url="https://example.invalid",
            rate_limit=RateLimitConfig(max_requests=10, window_seconds=1.0),
        )

    def transform_to_raw_record(self, native: dict[str, Any], **extra: Any) -> RawToolRecord:
        return RawToolRecord(source_type=self.source_type, **native)

    async def fetch_trending(self, limit: int = TRENDING_RESULTS_LIMIT) -> list[RawToolRecord]:
        self.trending_calls.append(limit)
        if self.error is not None:
            raise self.error
        return self.trending[:limit]

    async def search(self, query: str, limit: int = SEARCH_RESULTS_LIMIT) -> list[RawToolRecord]:
        self.search_calls.append((query, limit))
        if self.error is not None:
            raise self.error
        return self.results[:limit]

    def clear_cache(self) -> None:
        self.cleared += 1

    async def aclose(self) -> None:
        self.closed = True


@pytest.fixture
def fake_clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def now() -> datetime:
    return FIXED_NOW


@pytest.fixture
def make_record() -> Callable[..., RawToolRecord]:
    """Factory for records with sensible defaults."""

    def _make(name: str = "tool", source_type: SourceType = SourceType.NPM, **fields: Any):
        fields.setdefault("source_id", name)
        return RawToolRecord(name=name, source_type=source_type, **fields)

    return _make


@pytest.fixture
def sample_record() -> RawToolRecord:
    """A well-documented npm package."""
    return RawToolRecord(
        name="Test Tool",
        description="A helpful utility for backend developers.",
        category="backend",
        source_type=SourceType.NPM,
        source_id="test-tool",
        source_url="https://www.npmjs.com/package/test-tool",
        repository_url="https://github.com/example/test-tool",
        documentation_url="https://docs.example.com/test-tool",
        homepage_url="https://example.com/test-tool",
        languages=["TypeScript", "JavaScript"],
        frameworks=["express"],
        tags=["api", "backend"],
        keywords=["api", "server"],
        github_stars=1200,
        github_forks=180,
        npm_weekly_downloads=5400,
        license="MIT",
        version="1.2.3",
        last_updated=FIXED_NOW,
    )


@pytest.fixture
def fake_adapter() -> type[FakeAdapter]:
    """The FakeAdapter class, for building aggregators without network access."""
    return FakeAdapter


@pytest.fixture(autouse=True)
def _isolate_env(monkeypatch: pytest.MonkeyPatch) -> None:
    """Keep the developer's DISCOVERY_SOURCES and GITHUB_TOKEN out of the tests."""
    monkeypatch.delenv("DISCOVERY_SOURCES", raising=False)
    monkeypatch.delenv("GITHUB_TOKEN", raising=False)
