"""
Reconciliation Layer

Pure merge functions that fold new observations into the account
aggregate without duplication or data loss:

- Normalization: null-safe comparable strings, sequence union, confidence
- Business areas: cumulative observations with derived confidence
- Stakeholders: identity by case-insensitive name
- Metrics: last writer wins for non-null values
- Information gaps: identity by case-insensitive question text
"""

from .normalization import (
    to_comparable_string,
    reconcile_sequence,
    estimate_confidence
)
from .business_areas import merge_area, reconcile_business_areas
from .stakeholders import reconcile_stakeholders
from .metrics import reconcile_metrics
from .gaps import reconcile_gaps
from .analysis import merge_analysis

__all__ = [
    "to_comparable_string",
    "reconcile_sequence",
    "estimate_confidence",
    "merge_area",
    "reconcile_business_areas",
    "reconcile_stakeholders",
    "reconcile_metrics",
    "reconcile_gaps",
    "merge_analysis"
]
