"""
Account Metrics

Deal health scoring derived from the account aggregate.
"""

from .deal_health import (
    DealHealth,
    DealHealthWeights,
    HealthBand,
    calculate_deal_health,
    health_band,
    score_deal_health
)

__all__ = [
    "DealHealth",
    "DealHealthWeights",
    "HealthBand",
    "calculate_deal_health",
    "health_band",
    "score_deal_health"
]
