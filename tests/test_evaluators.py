"""Tests for popularity, quality, difficulty and cost evaluation."""

from datetime import timedelta

import pytest
from pydantic import ValidationError

from stack_discovery.evaluators import (
    PopularityEvaluator,
    QualityEvaluator,
    assess_difficulty,
    estimate_cost,
)
from stack_discovery.models.model_config import ScoringWeights
from stack_discovery.models.model_tool import DifficultyLevel, PricingModel


class TestPopularityEvaluator:
    """Tests for PopularityEvaluator."""

    def test_single_signal_sources_are_not_penalized(self, make_record, now) -> None:
        evaluator = PopularityEvaluator()
        stars_only = make_record("repo", source_type="github", github_stars=50)
        downloads_only = make_record("pkg", npm_weekly_downloads=50_000)

        stars_score = evaluator.evaluate(stars_only, now)
        downloads_score = evaluator.evaluate(downloads_only, now)

        assert stars_score > 0
        assert downloads_score > 0
        assert stars_score == pytest.approx(31.0, abs=0.1)
        assert downloads_score == pytest.approx(83.5, abs=0.1)

    def test_zero_counts_do_not_take_part(self, make_record, now) -> None:
        evaluator = PopularityEvaluator()
        without = make_record("repo", github_stars=50)
        with_zero_forks = make_record("repo", github_stars=50, github_forks=0)
        assert evaluator.evaluate(without, now) == evaluator.evaluate(with_zero_forks, now)

    def test_saturated_signals_score_100(self, make_record, now) -> None:
        record = make_record(
            "big",
            github_stars=10**9,
            github_forks=10**9,
            npm_weekly_downloads=10**12,
            last_updated=now,
            documentation_url="https://docs.example.com",
        )
        assert PopularityEvaluator().evaluate(record, now) == 100.0

    def test_recency_decays_per_week(self, make_record, now) -> None:
        evaluator = PopularityEvaluator()
        recent = make_record("x", last_updated=now - timedelta(weeks=2))
        stale = make_record("x", last_updated=now - timedelta(weeks=30))

        # recency 18/20 at weight 0.15, documentation 0/15 at weight 0.1
        assert evaluator.evaluate(recent, now) == 60.0
        assert evaluator.evaluate(stale, now) == 0.0

    def test_no_signals(self, make_record, now) -> None:
        assert PopularityEvaluator().evaluate(make_record("bare"), now) == 0.0

    def test_docker_pulls_count_as_downloads(self, make_record, now) -> None:
        evaluator = PopularityEvaluator()
        pulls = make_record("img", source_type="docker", docker_pulls=50_000)
        downloads = make_record("img", npm_weekly_downloads=50_000)
        assert evaluator.evaluate(pulls, now) == evaluator.evaluate(downloads, now)

    def test_custom_weights(self, make_record, now) -> None:
        weights = ScoringWeights(stars=1.0, forks=0.0, downloads=0.0, recency=0.0, documentation=0.0)
        record = make_record("repo", github_stars=10_000)
        assert PopularityEvaluator(weights).evaluate(record, now) == pytest.approx(80.0, abs=0.1)

    def test_bounds(self, sample_record, now) -> None:
        score = PopularityEvaluator().evaluate(sample_record, now)
        assert 0.0 <= score <= 100.0


class TestScoringWeights:
    """Tests for ScoringWeights validation."""

    def test_defaults_sum_to_one(self) -> None:
        weights = ScoringWeights()
        total = weights.stars + weights.forks + weights.downloads + weights.recency
        assert total + weights.documentation == pytest.approx(1.0)

    def test_rejects_bad_sum(self) -> None:
        with pytest.raises(ValidationError, match="sum to 1.0"):
            ScoringWeights(stars=0.5)


class TestQualityEvaluator:
    """Tests for QualityEvaluator."""

    def test_full_marks(self, make_record) -> None:
        record = make_record(
            "tool",
            license="MIT",
            documentation_url="https://docs.example.com",
            repository_url="https://github.com/example/tool",
            description="x" * 120,
            keywords=["a", "b", "c", "d", "e", "f"],
            version="1.2.3",
        )
        assert QualityEvaluator().evaluate(record) == 100.0

    def test_empty_record(self, make_record) -> None:
        assert QualityEvaluator().evaluate(make_record("tool")) == 0.0

    def test_partial_indicators(self, make_record) -> None:
        record = make_record(
            "tool",
            license="GPL-3.0",
            documentation_url="https://github.com/example/tool",
            repository_url="https://github.com/example/tool",
            description="x" * 60,
            keywords=["a", "b", "c"],
            version="main",
        )
        indicators = QualityEvaluator().indicators(record)

        assert indicators == {
            "license": 0.5,
            "documentation": 0.5,
            "description": 0.75,
            "keywords": 0.66,
            "version": 0.5,
        }
        assert QualityEvaluator().evaluate(record) == 58.2


class TestAssessDifficulty:
    """Tests for assess_difficulty."""

    def test_expert(self, make_record) -> None:
        record = make_record("engine", description="Advanced distributed compiler toolkit")
        assert assess_difficulty(record) == DifficultyLevel.EXPERT

    def test_beginner(self, make_record) -> None:
        record = make_record("starter-kit", description="A simple, easy setup")
        assert assess_difficulty(record) == DifficultyLevel.BEGINNER

    def test_single_vote_is_not_enough(self, make_record) -> None:
        record = make_record("engine", description="An advanced tool")
        assert assess_difficulty(record) == DifficultyLevel.INTERMEDIATE

    def test_tie_is_intermediate(self, make_record) -> None:
        record = make_record("engine", description="Simple and easy, yet advanced and complex")
        assert assess_difficulty(record) == DifficultyLevel.INTERMEDIATE

    def test_keywords_vote(self, make_record) -> None:
        record = make_record("engine", keywords=["kubernetes", "microservices"])
        assert assess_difficulty(record) == DifficultyLevel.EXPERT


class TestEstimateCost:
    """Tests for estimate_cost."""

    def test_open_license_is_free(self, make_record) -> None:
        estimate = estimate_cost(make_record("tool", license="MIT", description="Enterprise grade"))
        assert estimate.pricing_model == PricingModel.FREE
        assert estimate.estimated_monthly_cost == 0.0
        assert estimate.cost_category == "free"

    def test_free_wording(self, make_record) -> None:
        estimate = estimate_cost(make_record("tool", description="Free tier, paid upgrades"))
        assert estimate.pricing_model == PricingModel.FREE

    def test_open_source_wording(self, make_record) -> None:
        estimate = estimate_cost(make_record("tool", description="Open-source alternative"))
        assert estimate.pricing_model == PricingModel.FREE

    def test_enterprise(self, make_record) -> None:
        estimate = estimate_cost(make_record("tool", description="Enterprise observability suite"))
        assert estimate.pricing_model == PricingModel.ENTERPRISE
        assert estimate.estimated_monthly_cost == 500.0

    def test_enterprise_name(self, make_record) -> None:
        estimate = estimate_cost(make_record("acme-enterprise-gateway"))
        assert estimate.pricing_model == PricingModel.ENTERPRISE

    def test_paid(self, make_record) -> None:
        estimate = estimate_cost(make_record("tool", description="Pro plan for teams"))
        assert estimate.pricing_model == PricingModel.PAID
        assert estimate.cost_category == "medium"

    def test_freemium(self, make_record) -> None:
        estimate = estimate_cost(make_record("tool", description="Freemium analytics platform"))
        assert estimate.pricing_model == PricingModel.FREEMIUM
        assert estimate.estimated_monthly_cost == 25.0

    def test_free_is_word_bounded(self, make_record) -> None:
        estimate = estimate_cost(make_record("tool", description="A carefree pro toolkit"))
        assert estimate.pricing_model == PricingModel.PAID

    def test_unknown_defaults_to_free(self, make_record) -> None:
        estimate = estimate_cost(make_record("tool", license="Proprietary"))
        assert estimate.pricing_model == PricingModel.FREE
