from stack_discovery.models.model_config import (
    ClientConfig,
    DiscoveryConfig,
    RateLimitConfig,
    ScoringWeights,
)
from stack_discovery.models.model_dto import (
    Badges,
    DiscoveryToolDto,
    Provenance,
    RecommendationsResponse,
    SourceStatus,
    TechStack,
    ToolMetrics,
)
from stack_discovery.models.model_tool import (
    DifficultyLevel,
    PricingModel,
    RawToolRecord,
    SourceType,
    ToolEvaluation,
)

__all__ = [
    "Badges",
    "ClientConfig",
    "DifficultyLevel",
    "DiscoveryConfig",
    "DiscoveryToolDto",
    "PricingModel",
    "Provenance",
    "RateLimitConfig",
    "RawToolRecord",
    "RecommendationsResponse",
    "ScoringWeights",
    "SourceStatus",
    "SourceType",
    "TechStack",
    "ToolEvaluation",
    "ToolMetrics",
]
