"""
Business Area Reconciliation

Folds newly extracted observations into the per-topic business area
records. Observations accumulate; they are never overwritten. Confidence
is recomputed from the merged observation volume on every merge.

Priority and the irrelevant flag are owned by the action applier and
pass through this path untouched.
"""

import logging
from dataclasses import replace
from datetime import datetime
from typing import Any, Optional

from ...core.entities import BusinessArea
from .normalization import reconcile_sequence, estimate_confidence, field_value


logger = logging.getLogger(__name__)

_SEQUENCE_FIELDS = (
    ("current_state", "currentState"),
    ("opportunities", "opportunities"),
    ("quotes", "quotes"),
)


def _incoming_sequence(incoming: Any, attr: str, wire_key: str) -> list:
    if isinstance(incoming, dict):
        value = incoming.get(wire_key, incoming.get(attr))
    else:
        value = field_value(incoming, attr)
    if not isinstance(value, (list, tuple)):
        return []
    return list(value)


def merge_area(
    existing: Optional[BusinessArea],
    incoming: Any,
    now: Optional[datetime] = None
) -> BusinessArea:
    """
    Merge one topic's incoming observations into its existing record.

    ``incoming`` may be a BusinessArea, a pydantic model or a wire dict;
    missing or null sequences count as empty.
    """
    base = existing if existing is not None else BusinessArea()

    merged = {
        attr: reconcile_sequence(
            getattr(base, attr),
            _incoming_sequence(incoming, attr, wire_key)
        )
        for attr, wire_key in _SEQUENCE_FIELDS
    }

    observation_count = len(merged["current_state"]) + len(merged["opportunities"])

    return replace(
        base,
        current_state=merged["current_state"],
        opportunities=merged["opportunities"],
        quotes=merged["quotes"],
        confidence=estimate_confidence(observation_count),
        last_updated=now or datetime.now(),
    )


def reconcile_business_areas(
    existing: Optional[dict],
    incoming: Optional[dict],
    now: Optional[datetime] = None
) -> dict:
    """
    Merge a batch of per-topic observations into the business area map.

    Topics absent from ``incoming`` are left untouched.
    """
    merged = dict(existing or {})
    stamp = now or datetime.now()

    for area_id, new_area in (incoming or {}).items():
        merged[area_id] = merge_area(merged.get(area_id), new_area, now=stamp)

    logger.debug("Merged %d business areas", len(incoming or {}))
    return merged
