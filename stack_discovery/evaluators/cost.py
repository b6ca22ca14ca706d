"""Cost estimation from license and pricing vocabulary."""

import re
from typing import Final, NamedTuple

from stack_discovery.models.model_tool import PricingModel, RawToolRecord


class CostEstimate(NamedTuple):
    pricing_model: PricingModel
    estimated_monthly_cost: float
    cost_category: str


FREE: Final = CostEstimate(PricingModel.FREE, 0.0, "free")
FREEMIUM: Final = CostEstimate(PricingModel.FREEMIUM, 25.0, "low")
PAID: Final = CostEstimate(PricingModel.PAID, 50.0, "medium")
ENTERPRISE: Final = CostEstimate(PricingModel.ENTERPRISE, 500.0, "enterprise")

OPEN_LICENSES: Final[frozenset[str]] = frozenset(
    {"MIT", "Apache-2.0", "BSD-3-Clause", "BSD-2-Clause", "ISC", "GPL", "GPL-3.0", "MPL-2.0"}
)

FREE_RE: Final = re.compile(r"\bfree\b|\bopen[- ]source\b")
ENTERPRISE_RE: Final = re.compile(r"enterprise")
PAID_RE: Final = re.compile(r"\b(?:premium|pro|paid)\b")
FREEMIUM_RE: Final = re.compile(r"freemium")


def estimate_cost(record: RawToolRecord) -> CostEstimate:
    """Pick a pricing tier.

    Order: open license or free wording, enterprise, paid, freemium, then
    free as the default for everything else.
    """
    name = record.name.lower()
    description = record.description.lower()

    if (record.license and record.license in OPEN_LICENSES) or FREE_RE.search(description):
        return FREE
    if ENTERPRISE_RE.search(description) or ENTERPRISE_RE.search(name):
        return ENTERPRISE
    if PAID_RE.search(description):
        return PAID
    if FREEMIUM_RE.search(description):
        return FREEMIUM
    return FREE
