"""
Intelligence Layer

Transcript understanding: the analysis payload schema and the
structured-output analyzer that produces it.
"""

from .schemas import (
    AnalysisPayload,
    AreaObservation,
    PersonObservation,
    GapObservation
)
from .analyzer import TranscriptAnalyzer

__all__ = [
    "AnalysisPayload",
    "AreaObservation",
    "PersonObservation",
    "GapObservation",
    "TranscriptAnalyzer"
]
