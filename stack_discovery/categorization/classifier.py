"""Weighted rule-based category classifier."""

import logging
from collections.abc import Sequence

from stack_discovery.categorization.category_rules import DEFAULT_CATEGORY_RULES, CategoryRule
from stack_discovery.models.model_tool import RawToolRecord

logger = logging.getLogger(__name__)

PATTERN_MULTIPLIER = 1.5
LANGUAGE_MULTIPLIER = 0.8
PRIORITY_STEP = 0.1


class CategoryClassifier:
    """Scores a record against every rule and picks the best category.

    Scoring per rule:
    - each rule keyword found in the name, description or any keyword: +weight
    - each pattern matching the name or description: +weight * 1.5
    - each rule language among the record languages: +weight * 0.8
    - total multiplied by (1 + priority * 0.1)

    The highest strictly positive score wins, earlier rules win ties, and
    a record matching nothing keeps its source category.
    """

    def __init__(self, rules: Sequence[CategoryRule] | None = None):
        self.rules: tuple[CategoryRule, ...] = tuple(
            rules if rules is not None else DEFAULT_CATEGORY_RULES
        )

    def score(self, record: RawToolRecord) -> dict[str, float]:
        """Score of every rule, in declaration order."""
        name = record.name.lower()
        description = record.description.lower()
        keywords = [k.lower() for k in record.keywords]
        languages = {lang.lower() for lang in record.languages}

        scores: dict[str, float] = {}
        for rule in self.rules:
            total = 0.0

            for keyword in rule.keywords:
                term = keyword.lower()
                if term in name or term in description or any(term in k for k in keywords):
                    total += rule.weight

            for pattern in rule.patterns:
                if pattern.search(name) or pattern.search(description):
                    total += rule.weight * PATTERN_MULTIPLIER

            matched_languages = sum(1 for lang in rule.languages if lang.lower() in languages)
            total += matched_languages * rule.weight * LANGUAGE_MULTIPLIER

            total *= 1 + rule.priority * PRIORITY_STEP
            # Keep the first rule's score when two rules share a name
            scores.setdefault(rule.name, total)
        return scores

    def classify(self, record: RawToolRecord) -> str:
        """Best-scoring category, or the record's own category when nothing matches."""
        best_category: str | None = None
        best_score = 0.0
        for category, value in self.score(record).items():
            if value > best_score:
                best_category, best_score = category, value

        if best_category is None:
            return record.category
        if best_category != record.category:
            logger.debug(f"Reclassified {record.name}: {record.category} -> {best_category}")
        return best_category
