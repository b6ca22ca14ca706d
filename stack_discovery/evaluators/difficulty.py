"""Difficulty assessment by vocabulary vote."""

from typing import Final

from stack_discovery.models.model_tool import DifficultyLevel, RawToolRecord

EXPERT_TERMS: Final[tuple[str, ...]] = (
    "advanced",
    "complex",
    "low-level",
    "kernel",
    "compiler",
    "distributed",
    "microservices",
    "kubernetes",
    "webpack",
)
BEGINNER_TERMS: Final[tuple[str, ...]] = (
    "simple",
    "easy",
    "starter",
    "tutorial",
    "beginner",
    "basic",
    "minimal",
    "lightweight",
    "quick",
)
MIN_VOTES: Final[int] = 2


def _votes(terms: tuple[str, ...], name: str, description: str, keywords: list[str]) -> int:
    return sum(
        1
        for term in terms
        if term in name or term in description or any(term in k for k in keywords)
    )


def assess_difficulty(record: RawToolRecord) -> DifficultyLevel:
    """Expert or beginner needs at least two votes and a strict majority."""
    name = record.name.lower()
    description = record.description.lower()
    keywords = [k.lower() for k in record.keywords]

    expert = _votes(EXPERT_TERMS, name, description, keywords)
    beginner = _votes(BEGINNER_TERMS, name, description, keywords)

    if expert > beginner and expert >= MIN_VOTES:
        return DifficultyLevel.EXPERT
    if beginner > expert and beginner >= MIN_VOTES:
        return DifficultyLevel.BEGINNER
    return DifficultyLevel.INTERMEDIATE
