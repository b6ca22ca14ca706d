"""Popularity evaluator: weighted log-scaled signals normalized by what is present."""

import math
from datetime import datetime
from typing import NamedTuple

from stack_discovery.models.model_config import ScoringWeights
from stack_discovery.models.model_tool import RawToolRecord

STARS_CAP = 50.0
STARS_SCALE = 10.0
FORKS_CAP = 25.0
FORKS_SCALE = 8.0
DOWNLOADS_CAP = 40.0
DOWNLOADS_SCALE = 8.0
RECENCY_CAP = 20.0
DOCUMENTATION_POINTS = 15.0


class Signal(NamedTuple):
    points: float
    cap: float
    weight: float


def downloads_of(record: RawToolRecord) -> int:
    """npm weekly downloads, else package downloads, else docker pulls."""
    return record.npm_weekly_downloads or record.package_downloads or record.docker_pulls or 0


class PopularityEvaluator:
    """Composite popularity score in [0, 100].

    Signals (points, cap, weight):
    - stars: min(50, log10(stars + 1) * 10), weight ``stars``
    - forks: min(25, log10(forks + 1) * 8), weight ``forks``
    - downloads or pulls: min(40, log10(n + 1) * 8), weight ``downloads``
    - recency: max(0, 20 - weeks since update), weight ``recency``
    - documentation: 15 with a documentation or homepage URL, weight ``documentation``

    Count signals only take part when positive and recency only when the
    update time is known; documentation always takes part. The score is the
    weighted sum divided by the best weighted sum the present signals allow,
    so a record is never penalized for metrics its source does not expose.
    """

    def __init__(self, weights: ScoringWeights | None = None):
        self.weights = weights or ScoringWeights()

    def signals(self, record: RawToolRecord, now: datetime) -> list[Signal]:
        """Signals present on the record."""
        w = self.weights
        present: list[Signal] = []

        if record.github_stars:
            points = min(STARS_CAP, math.log10(record.github_stars + 1) * STARS_SCALE)
            present.append(Signal(points, STARS_CAP, w.stars))

        if record.github_forks:
            points = min(FORKS_CAP, math.log10(record.github_forks + 1) * FORKS_SCALE)
            present.append(Signal(points, FORKS_CAP, w.forks))

        downloads = downloads_of(record)
        if downloads:
            points = min(DOWNLOADS_CAP, math.log10(downloads + 1) * DOWNLOADS_SCALE)
            present.append(Signal(points, DOWNLOADS_CAP, w.downloads))

        if record.last_updated is not None:
            weeks = (now - record.last_updated).total_seconds() / (7 * 86400)
            points = max(0.0, min(RECENCY_CAP, RECENCY_CAP - weeks))
            present.append(Signal(points, RECENCY_CAP, w.recency))

        has_docs = bool(record.documentation_url or record.homepage_url)
        present.append(
            Signal(DOCUMENTATION_POINTS if has_docs else 0.0, DOCUMENTATION_POINTS, w.documentation)
        )
        return present

    def evaluate(self, record: RawToolRecord, now: datetime) -> float:
        present = self.signals(record, now)
        achieved = sum(s.points * s.weight for s in present)
        achievable = sum(s.cap * s.weight for s in present)
        if achievable <= 0:
            return 0.0
        return round(min(100.0, max(0.0, achieved / achievable * 100)), 1)
