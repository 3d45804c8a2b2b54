"""
Core domain model: the account aggregate and its fixed vocabularies.
"""

from .entities import (
    Account,
    BusinessArea,
    Stakeholder,
    Metric,
    InformationGap,
    Note,
    TranscriptRecord,
    IdGenerator,
    generate_id
)
from .exceptions import (
    AccountIntelError,
    AccountNotFoundError,
    StorageError,
    AnalysisError
)
from .vocabulary import (
    ConfidenceTier,
    AreaPriority,
    StakeholderRole,
    GapStatus
)

__all__ = [
    "Account",
    "BusinessArea",
    "Stakeholder",
    "Metric",
    "InformationGap",
    "Note",
    "TranscriptRecord",
    "IdGenerator",
    "generate_id",
    "AccountIntelError",
    "AccountNotFoundError",
    "StorageError",
    "AnalysisError",
    "ConfidenceTier",
    "AreaPriority",
    "StakeholderRole",
    "GapStatus"
]
