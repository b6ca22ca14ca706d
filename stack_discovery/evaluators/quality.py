"""Quality evaluator: mean of five metadata indicators."""

import re
from datetime import datetime
from typing import Final

from stack_discovery.models.model_tool import RawToolRecord

PREFERRED_LICENSES: Final[frozenset[str]] = frozenset({"MIT", "Apache-2.0", "BSD-3-Clause", "ISC"})

SEMVER_RE: Final = re.compile(r"^\d+\.\d+\.\d+")

# (minimum length exclusive, indicator value), checked in order
DESCRIPTION_TIERS: Final[tuple[tuple[int, float], ...]] = ((100, 1.0), (50, 0.75), (0, 0.5))
KEYWORD_TIERS: Final[tuple[tuple[int, float], ...]] = ((5, 1.0), (2, 0.66), (0, 0.33))


def _tier(value: int, tiers: tuple[tuple[int, float], ...]) -> float:
    for threshold, indicator in tiers:
        if value > threshold:
            return indicator
    return 0.0


class QualityEvaluator:
    """Quality score in [0, 100] from license, docs, description, keywords and version."""

    def indicators(self, record: RawToolRecord) -> dict[str, float]:
        """Each indicator in [0, 1]."""
        if not record.license:
            license_value = 0.0
        elif record.license in PREFERRED_LICENSES:
            license_value = 1.0
        else:
            license_value = 0.5

        if not record.documentation_url:
            docs_value = 0.0
        elif record.documentation_url != record.repository_url:
            docs_value = 1.0
        else:
            docs_value = 0.5

        if not record.version:
            version_value = 0.0
        elif SEMVER_RE.match(record.version):
            version_value = 1.0
        else:
            version_value = 0.5

        return {
            "license": license_value,
            "documentation": docs_value,
            "description": _tier(len(record.description), DESCRIPTION_TIERS),
            "keywords": _tier(len(record.keywords), KEYWORD_TIERS),
            "version": version_value,
        }

    def evaluate(self, record: RawToolRecord, now: datetime | None = None) -> float:
        values = self.indicators(record)
        return round(sum(values.values()) / len(values) * 100, 1)
