"""
Account Intel

Account reconciliation engine for a sales CRM workspace: folds transcript
analysis, free-text notes and assistant actions into one canonical
account aggregate without duplicating or losing what is already known.
"""

__version__ = "0.1.0"

from .layers.reconciliation import (
    reconcile_business_areas,
    reconcile_stakeholders,
    reconcile_metrics,
    reconcile_gaps,
    merge_analysis
)
from .layers.orchestration import interpret_command, apply_actions

__all__ = [
    "reconcile_business_areas",
    "reconcile_stakeholders",
    "reconcile_metrics",
    "reconcile_gaps",
    "merge_analysis",
    "interpret_command",
    "apply_actions"
]
