"""Base evaluator protocol defining the contract for score evaluators."""

from datetime import datetime
from typing import Protocol

from stack_discovery.models.model_tool import RawToolRecord


class BaseEvaluator(Protocol):
    """Evaluators are pure: same record and time, same score in [0, 100]."""

    def evaluate(self, record: RawToolRecord, now: datetime) -> float:
        """Score the record on this dimension.

        Args:
            record: The record to evaluate.
            now: Reference time for age-based signals.

        Returns:
            Score between 0-100.
        """
        ...
