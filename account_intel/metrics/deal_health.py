"""
Deal Health Score

A 0-100 score summarizing how well a deal is qualified:
- Stage progression (pipeline position, full marks at legal)
- Information gaps resolved
- Champion identified
- Economic buyer identified
- Recency of the last call
- Key metrics captured
"""

import math
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Optional

from ..core.entities import Account
from ..core.vocabulary import StakeholderRole, stage_order
from ..layers.reconciliation.metrics import captured_metric_count


FULL_STAGE_ORDER = 5  # legal


class HealthBand(str, Enum):
    HEALTHY = "healthy"
    AT_RISK = "at_risk"
    CRITICAL = "critical"


@dataclass(frozen=True)
class DealHealthWeights:
    """Points available per component (sum to 100)."""
    stage: float = 20
    gaps: float = 20
    champion: float = 15
    economic_buyer: float = 15
    activity: float = 15
    metrics: float = 15


@dataclass
class DealHealth:
    """A calculated score with its per-component breakdown."""
    score: int
    breakdown: dict = field(default_factory=dict)

    @property
    def band(self) -> HealthBand:
        return health_band(self.score)


def health_band(score: int) -> HealthBand:
    if score >= 70:
        return HealthBand.HEALTHY
    if score >= 40:
        return HealthBand.AT_RISK
    return HealthBand.CRITICAL


def _activity_factor(account: Account, now: datetime) -> float:
    if not account.transcripts:
        return 0.0
    last_call = account.transcripts[-1].added_at
    if (last_call.tzinfo is None) != (now.tzinfo is None):
        last_call = last_call.replace(tzinfo=None)
        now = now.replace(tzinfo=None)
    days_since = (now - last_call).days
    if days_since <= 7:
        return 1.0
    if days_since <= 14:
        return 0.7
    if days_since <= 30:
        return 0.4
    return 0.0


def score_deal_health(
    account: Optional[Account],
    now: Optional[datetime] = None,
    min_metrics: int = 3,
    weights: DealHealthWeights = DealHealthWeights()
) -> DealHealth:
    """Score an account and keep the contribution of each component."""
    if account is None:
        return DealHealth(score=0)

    now = now or datetime.now()
    roles = {s.role for s in account.stakeholders}
    gaps = account.information_gaps
    resolved = sum(1 for g in gaps if g.is_resolved)

    breakdown = {
        "stage": min(stage_order(account.stage) / FULL_STAGE_ORDER, 1.0) * weights.stage,
        "gaps": (resolved / (len(gaps) or 1)) * weights.gaps,
        "champion": weights.champion if StakeholderRole.CHAMPION.value in roles else 0.0,
        "economic_buyer": (
            weights.economic_buyer if StakeholderRole.ECONOMIC_BUYER.value in roles else 0.0
        ),
        "activity": _activity_factor(account, now) * weights.activity,
        "metrics": min(captured_metric_count(account.metrics) / max(min_metrics, 1), 1.0) * weights.metrics,
    }

    # halves round up
    score = int(math.floor(sum(breakdown.values()) + 0.5))
    return DealHealth(score=max(0, min(score, 100)), breakdown=breakdown)


def calculate_deal_health(
    account: Optional[Account],
    now: Optional[datetime] = None,
    min_metrics: int = 3
) -> int:
    """Deal health as an integer 0-100."""
    return score_deal_health(account, now=now, min_metrics=min_metrics).score
