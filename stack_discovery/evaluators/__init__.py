from stack_discovery.evaluators.base import BaseEvaluator
from stack_discovery.evaluators.cost import CostEstimate, estimate_cost
from stack_discovery.evaluators.difficulty import assess_difficulty
from stack_discovery.evaluators.popularity import PopularityEvaluator
from stack_discovery.evaluators.quality import QualityEvaluator

__all__ = [
    "BaseEvaluator",
    "CostEstimate",
    "PopularityEvaluator",
    "QualityEvaluator",
    "assess_difficulty",
    "estimate_cost",
]
