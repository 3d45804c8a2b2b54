"""
Metric Reconciliation

Last writer wins for every metric with a non-null incoming value. Metrics
that are null or missing from the incoming batch are left alone; a merge
never deletes.
"""

from datetime import datetime
from typing import Any, Optional

from ...core.entities import Metric


def reconcile_metrics(
    existing: Optional[dict],
    incoming_values: Optional[dict],
    incoming_context: Optional[dict] = None,
    now: Optional[datetime] = None
) -> dict:
    """Merge measured values and their provenance into the metric map."""
    merged = dict(existing or {})
    context = incoming_context or {}
    stamp = now or datetime.now()

    for key, value in (incoming_values or {}).items():
        if value is None:
            continue
        merged[key] = Metric(
            value=value,
            context=context.get(key) or None,
            last_updated=stamp,
        )

    return merged


def captured_metric_count(metrics: Optional[dict]) -> int:
    """Number of metrics holding a value."""
    count = 0
    for metric in (metrics or {}).values():
        value: Any = metric.value if isinstance(metric, Metric) else metric
        if value is not None:
            count += 1
    return count
