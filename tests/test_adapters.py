"""Tests for the source adapters and their shared heuristics."""

from datetime import timedelta

import httpx
import pytest

from stack_discovery.consts import GITHUB_AWESOME_QUERY, GITHUB_AWESOME_SEED
from stack_discovery.exceptions import SourceHTTPError
from stack_discovery.models.model_tool import DifficultyLevel, SourceType
from stack_discovery.scrapers import DockerHubAdapter, GitHubAdapter, NpmAdapter, PyPIAdapter
from stack_discovery.scrapers.heuristics import (
    DifficultyVocabulary,
    LogSignal,
    TaxonomyBucket,
    categorize,
    estimate_popularity,
    parse_timestamp,
    recency_bonus,
    split_keywords,
    vote_difficulty,
)
from stack_discovery.scrapers.pypi.pypi import normalize_project_name


class TestHeuristics:
    """Tests for the per-source heuristic helpers."""

    def test_categorize_first_matching_bucket_wins(self) -> None:
        buckets = (
            TaxonomyBucket("frontend", keywords=frozenset({"react"})),
            TaxonomyBucket("backend", name_terms=("react",)),
        )
        assert categorize(buckets, "library", "react-server", keywords=["react"]) == "frontend"
        assert categorize(buckets, "library", "react-server") == "backend"
        assert categorize(buckets, "library", "lodash") == "library"

    def test_categorize_by_language(self) -> None:
        buckets = (TaxonomyBucket("backend", languages=frozenset({"go"})),)
        assert categorize(buckets, "library", "thing", language="Go") == "backend"

    def test_log_signal(self) -> None:
        signal = LogSignal(cap=50.0, full_at=10_000)
        assert signal.points(None) == 0.0
        assert signal.points(0) == 0.0
        assert signal.points(10_000) == pytest.approx(50.0)
        assert signal.points(10**9) == 50.0
        assert 0 < signal.points(100) < 50

    def test_recency_bonus(self, now) -> None:
        assert recency_bonus(now - timedelta(days=3), now) == 10.0
        assert recency_bonus(now - timedelta(days=60), now) == 5.0
        assert recency_bonus(now - timedelta(days=200), now) == 0.0
        assert recency_bonus(None, now) == 0.0

    def test_estimate_popularity_capped(self, now) -> None:
        signal = LogSignal(cap=80.0, full_at=10)
        score = estimate_popularity([(signal, 1000)], last_updated=now, now=now, base=30)
        assert score == 100.0

    def test_vote_difficulty(self) -> None:
        vocabulary = DifficultyVocabulary(expert=("advanced",), beginner=("simple", "easy"))
        assert vote_difficulty(vocabulary, "advanced-tool") == DifficultyLevel.EXPERT
        assert vote_difficulty(vocabulary, "tool", "simple and easy") == DifficultyLevel.BEGINNER
        assert vote_difficulty(vocabulary, "tool", "simple but advanced") == DifficultyLevel.INTERMEDIATE

    def test_parse_timestamp(self) -> None:
        parsed = parse_timestamp("2024-05-30T10:00:00Z")
        assert parsed is not None
        assert parsed.tzinfo is not None
        assert parse_timestamp("not a date") is None
        assert parse_timestamp(None) is None

    def test_split_keywords(self) -> None:
        assert split_keywords("web, api,,") == ["web", "api"]
        assert split_keywords(["a", " ", "b"]) == ["a", "b"]
        assert split_keywords(None) == []


class TestNpmAdapter:
    """Tests for NpmAdapter."""

    def test_transform(self, now) -> None:
        adapter = NpmAdapter()
        native = {
            "name": "react-table",
            "description": "Hooks for building tables",
            "keywords": ["react", "table"],
            "version": "8.0.0",
            "license": "MIT",
            "date": (now - timedelta(days=7)).isoformat(),
            "links": {
                "npm": "https://www.npmjs.com/package/react-table",
                "repository": "https://github.com/tanstack/table",
                "homepage": "https://tanstack.com/table",
            },
        }

        record = adapter.transform_to_raw_record(native, downloads=1_000_000, now=now)

        assert record.source_type == SourceType.NPM
        assert record.source_id == "react-table"
        assert record.category == "frontend"
        assert record.frameworks == ["react"]
        assert record.npm_weekly_downloads == 1_000_000
        assert record.package_downloads == 1_000_000
        assert record.repository_url == "https://github.com/tanstack/table"
        assert record.license == "MIT"
        # 50 downloads points + 10 recency + 10 GitHub-hosted
        assert record.popularity_score == 70.0

    def test_transform_without_downloads(self, now) -> None:
        record = NpmAdapter().transform_to_raw_record(
            {"name": "left-pad", "license": {"type": "WTFPL"}}, now=now
        )
        assert record.npm_weekly_downloads is None
        assert record.license == "WTFPL"
        assert record.popularity_score == 0.0
        assert record.category == "library"

    @pytest.mark.asyncio
    async def test_search_with_downloads(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            if request.url.host == "registry.npmjs.org":
                assert request.url.params["text"] == "react"
                return httpx.Response(
                    200,
                    json={
                        "objects": [
                            {"package": {"name": "react", "version": "18.3.1"}},
                            {"package": {"name": "left-pad"}},
                            {"package": {"name": ""}},
                        ]
                    },
                )
            if request.url.path.endswith("/react"):
                return httpx.Response(200, json={"downloads": 5000})
            return httpx.Response(500)

        adapter = NpmAdapter(transport=httpx.MockTransport(handler))
        records = await adapter.search("react", limit=10)

        assert [r.name for r in records] == ["react", "left-pad"]
        assert records[0].npm_weekly_downloads == 5000
        assert records[1].npm_weekly_downloads is None
        await adapter.aclose()

    @pytest.mark.asyncio
    async def test_search_failure_propagates(self) -> None:
        adapter = NpmAdapter(transport=httpx.MockTransport(lambda r: httpx.Response(502)))
        with pytest.raises(SourceHTTPError):
            await adapter.search("react")
        await adapter.aclose()

    @pytest.mark.asyncio
    async def test_get_package_info_is_cached(self) -> None:
        paths: list[str] = []

        def handler(request: httpx.Request) -> httpx.Response:
            paths.append(request.url.path)
            return httpx.Response(
                200,
                json={
                    "name": "react",
                    "description": "React is a JavaScript library for building user interfaces.",
                    "dist-tags": {"latest": "18.3.1"},
                    "license": "MIT",
                },
            )

        adapter = NpmAdapter(transport=httpx.MockTransport(handler))
        packument = await adapter.get_package_info("react")
        await adapter.get_package_info("react")

        assert paths == ["/react"]
        record = adapter.transform_to_raw_record(packument)
        assert record.version == "18.3.1"
        assert record.license == "MIT"
        await adapter.aclose()


class TestPyPIAdapter:
    """Tests for PyPIAdapter."""

    def test_normalize_project_name(self) -> None:
        assert normalize_project_name("Flask_SQLAlchemy") == "flask-sqlalchemy"
        assert normalize_project_name("zope.interface") == "zope-interface"

    def test_transform(self, now) -> None:
        native = {
            "info": {
                "name": "fastapi",
                "summary": "FastAPI framework, high performance",
                "version": "0.110.0",
                "license": "MIT",
                "keywords": "web,api",
                "project_urls": {
                    "Documentation": "https://fastapi.tiangolo.com",
                    "Repository": "https://github.com/tiangolo/fastapi",
                },
            },
            "releases": {
                "0.110.0": [{"upload_time_iso_8601": (now - timedelta(days=12)).isoformat()}]
            },
        }

        record = PyPIAdapter().transform_to_raw_record(native, now=now)

        assert record.source_type == SourceType.PYPI
        assert record.category == "backend"
        assert record.languages == ["python"]
        assert record.keywords == ["web", "api"]
        assert record.documentation_url == "https://fastapi.tiangolo.com"
        assert record.repository_url == "https://github.com/tiangolo/fastapi"
        assert record.package_downloads is None
        # base 20 + 10 recency
        assert record.popularity_score == 30.0

    def test_well_known_bonus(self, now) -> None:
        record = PyPIAdapter().transform_to_raw_record(
            {"info": {"name": "requests", "summary": "HTTP for Humans."}}, now=now
        )
        assert record.popularity_score == 70.0

    def test_classifier_fallback(self, now) -> None:
        native = {
            "info": {
                "name": "bottle-cork",
                "summary": "Auth for bottle",
                "classifiers": ["Framework :: Bottle"],
            }
        }
        assert PyPIAdapter().transform_to_raw_record(native, now=now).category == "backend"

    @pytest.mark.asyncio
    async def test_search_falls_back_to_normalized_name(self) -> None:
        seen: list[str] = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request.url.path)
            if request.url.path == "/pypi/flask-login/json":
                return httpx.Response(200, json={"info": {"name": "Flask-Login"}})
            return httpx.Response(404)

        adapter = PyPIAdapter(transport=httpx.MockTransport(handler))
        records = await adapter.search("Flask_Login")

        assert [r.name for r in records] == ["Flask-Login"]
        assert seen == ["/pypi/Flask_Login/json", "/pypi/flask-login/json"]
        await adapter.aclose()

    @pytest.mark.asyncio
    async def test_search_unknown_project(self) -> None:
        adapter = PyPIAdapter(transport=httpx.MockTransport(lambda r: httpx.Response(404)))
        assert await adapter.search("no-such-project") == []
        await adapter.aclose()

    @pytest.mark.asyncio
    async def test_search_server_error_propagates(self) -> None:
        adapter = PyPIAdapter(transport=httpx.MockTransport(lambda r: httpx.Response(500)))
        with pytest.raises(SourceHTTPError) as exc_info:
            await adapter.search("requests")
        assert exc_info.value.status_code == 500
        await adapter.aclose()


class TestGitHubAdapter:
    """Tests for GitHubAdapter."""

    def test_explicit_token(self) -> None:
        adapter = GitHubAdapter(token="abc")
        assert adapter.token == "abc"
        assert adapter.client.config.api_key == "abc"
        assert adapter.client.limiter.max_requests == 5000

    def test_token_from_env(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("GITHUB_TOKEN", "from-env")
        assert GitHubAdapter().token == "from-env"

    def test_anonymous_budget(self) -> None:
        adapter = GitHubAdapter()
        assert adapter.token is None
        assert adapter.client.limiter.max_requests == 60

    def test_transform(self, now) -> None:
        native = {
            "name": "fastdb",
            "full_name": "acme/fastdb",
            "description": "A fast database",
            "html_url": "https://github.com/acme/fastdb",
            "homepage": "",
            "stargazers_count": 10_000,
            "forks_count": 1_000,
            "language": "C",
            "topics": ["database"],
            "license": {"name": "MIT License"},
            "pushed_at": (now - timedelta(days=2)).isoformat(),
            "default_branch": "main",
        }

        record = GitHubAdapter().transform_to_raw_record(native, now=now)

        assert record.source_id == "acme/fastdb"
        assert record.category == "database"
        assert record.languages == ["c"]
        assert record.github_stars == 10_000
        assert record.documentation_url == "https://github.com/acme/fastdb"
        assert record.homepage_url is None
        assert record.version is None
        assert record.license == "MIT License"
        # 50 stars + 20 forks + 10 recency
        assert record.popularity_score == 80.0

    @pytest.mark.asyncio
    async def test_trending_queries_recent_repositories(self) -> None:
        requests: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            requests.append(request)
            return httpx.Response(
                200, json={"items": [{"name": "newlib", "full_name": "acme/newlib"}]}
            )

        adapter = GitHubAdapter(token="abc", transport=httpx.MockTransport(handler))
        adapter.trending_seeds = ("topic:api",)

        records = await adapter.fetch_trending()

        assert [r.source_id for r in records] == ["acme/newlib"]
        params = requests[0].url.params
        assert params["q"].startswith("topic:api created:>")
        assert params["sort"] == "stars"
        assert params["per_page"] == "5"
        assert requests[0].headers["Authorization"] == "Bearer abc"
        await adapter.aclose()

    @pytest.mark.asyncio
    async def test_trending_includes_awesome_lists(self) -> None:
        requests: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            requests.append(request)
            items = [{"name": f"awesome-{i}", "full_name": f"acme/awesome-{i}"} for i in range(8)]
            return httpx.Response(200, json={"items": items})

        assert GITHUB_AWESOME_SEED in GitHubAdapter.trending_seeds
        adapter = GitHubAdapter(token="abc", transport=httpx.MockTransport(handler))
        adapter.trending_seeds = (GITHUB_AWESOME_SEED,)

        records = await adapter.fetch_trending()

        assert [r.name for r in records] == [f"awesome-{i}" for i in range(5)]
        params = requests[0].url.params
        assert params["q"] == GITHUB_AWESOME_QUERY
        assert params["per_page"] == "50"
        await adapter.aclose()

    @pytest.mark.asyncio
    async def test_get_repository_info_is_cached(self) -> None:
        paths: list[str] = []

        def handler(request: httpx.Request) -> httpx.Response:
            paths.append(request.url.path)
            return httpx.Response(
                200,
                json={"name": "react", "full_name": "facebook/react", "stargazers_count": 220_000},
            )

        adapter = GitHubAdapter(token="abc", transport=httpx.MockTransport(handler))
        repo = await adapter.get_repository_info("facebook", "react")
        await adapter.get_repository_info("facebook", "react")

        assert paths == ["/repos/facebook/react"]
        assert adapter.transform_to_raw_record(repo).github_stars == 220_000
        await adapter.aclose()


class TestDockerHubAdapter:
    """Tests for DockerHubAdapter."""

    def test_transform_official_image(self, now) -> None:
        native = {
            "repo_name": "postgres",
            "short_description": "The PostgreSQL object-relational database system",
            "pull_count": 1_000_000,
            "star_count": 100,
            "is_official": True,
        }

        record = DockerHubAdapter().transform_to_raw_record(native, now=now)

        assert record.category == "database"
        assert record.source_url == "https://hub.docker.com/_/postgres"
        assert record.tags == ["official"]
        assert record.docker_pulls == 1_000_000
        assert record.popularity_score == 70.0

    def test_transform_community_image(self, now) -> None:
        record = DockerHubAdapter().transform_to_raw_record(
            {"repo_name": "acme/widget", "pull_count": 0}, now=now
        )
        assert record.source_url == "https://hub.docker.com/r/acme/widget"
        assert record.category == "container"
        assert record.tags == []

    @pytest.mark.asyncio
    async def test_search_drops_nameless_results(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            assert request.url.params["query"] == "redis"
            return httpx.Response(
                200, json={"results": [{"repo_name": ""}, {"repo_name": "redis"}, "junk"]}
            )

        adapter = DockerHubAdapter(transport=httpx.MockTransport(handler))
        records = await adapter.search("redis")

        assert [r.name for r in records] == ["redis"]
        await adapter.aclose()

    @pytest.mark.asyncio
    async def test_get_repository_info(self) -> None:
        paths: list[str] = []

        def handler(request: httpx.Request) -> httpx.Response:
            paths.append(request.url.path)
            return httpx.Response(
                200, json={"name": "postgres", "namespace": "library", "pull_count": 1_000_000}
            )

        adapter = DockerHubAdapter(transport=httpx.MockTransport(handler))
        repo = await adapter.get_repository_info("library", "postgres")
        await adapter.get_repository_info("library", "postgres")

        assert paths == ["/v2/repositories/library/postgres/"]
        record = adapter.transform_to_raw_record(repo)
        assert record.name == "postgres"
        assert record.docker_pulls == 1_000_000
        await adapter.aclose()

    @pytest.mark.asyncio
    async def test_trending_skips_failed_seed(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            if request.url.params["query"] == "nginx":
                return httpx.Response(500)
            return httpx.Response(200, json={"results": [{"repo_name": "redis"}]})

        adapter = DockerHubAdapter(transport=httpx.MockTransport(handler))
        adapter.trending_seeds = ("nginx", "redis")

        records = await adapter.fetch_trending()

        assert [r.name for r in records] == ["redis"]
        await adapter.aclose()

    @pytest.mark.asyncio
    async def test_trending_raises_when_every_seed_fails(self) -> None:
        adapter = DockerHubAdapter(transport=httpx.MockTransport(lambda r: httpx.Response(503)))
        adapter.trending_seeds = ("nginx", "redis")

        with pytest.raises(SourceHTTPError):
            await adapter.fetch_trending()
        await adapter.aclose()

    @pytest.mark.asyncio
    async def test_trending_respects_limit(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            query = request.url.params["query"]
            return httpx.Response(
                200, json={"results": [{"repo_name": f"{query}-{i}"} for i in range(3)]}
            )

        adapter = DockerHubAdapter(transport=httpx.MockTransport(handler))
        adapter.trending_seeds = ("a", "b", "c")

        records = await adapter.fetch_trending(limit=4)

        assert len(records) == 4
        await adapter.aclose()
