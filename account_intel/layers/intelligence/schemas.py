"""
Pydantic Schemas for Transcript Analysis Output

These schemas define the analysis payload produced by the transcript
understanding step. They double as the structured-output contract for the
chat model and as a tolerant parser for payloads arriving over the wire:
nulls become empty collections and malformed items are dropped.
"""

from typing import Any, Dict, List, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator


def _drop_nulls(value: Any) -> list:
    if not isinstance(value, (list, tuple)):
        return []
    return [item for item in value if item is not None]


def _text_items(value: Any) -> list:
    return [str(item) for item in _drop_nulls(value)]


class _WireModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")


# =============================================================================
# Business Area Observations
# =============================================================================

class AreaObservation(_WireModel):
    """Observations extracted for one business area."""
    current_state: List[str] = Field(
        default_factory=list,
        alias="currentState",
        description="How the prospect handles this area today"
    )
    opportunities: List[str] = Field(
        default_factory=list,
        description="Pain points or openings where the product could help"
    )
    quotes: List[str] = Field(
        default_factory=list,
        description="Verbatim quotes from the prospect about this area"
    )

    @field_validator("current_state", "opportunities", "quotes", mode="before")
    @classmethod
    def _coerce_text_list(cls, value: Any) -> list:
        return _text_items(value)


# =============================================================================
# Stakeholder Observations
# =============================================================================

class PersonObservation(_WireModel):
    """A person mentioned or present on the call."""
    name: Optional[str] = Field(
        default=None,
        description="Full name of the person"
    )
    title: Optional[str] = Field(
        default=None,
        description="Job title if mentioned"
    )
    department: Optional[str] = Field(
        default=None,
        description="Department or function"
    )
    role: Optional[str] = Field(
        default=None,
        description="Buying role: Champion, Economic Buyer, Technical Buyer, "
                    "User Buyer, Influencer, Blocker or Unknown"
    )
    notes: Optional[str] = Field(
        default=None,
        description="Anything notable about this person"
    )

    @field_validator("name", "title", "department", "role", "notes", mode="before")
    @classmethod
    def _coerce_text(cls, value: Any) -> Optional[str]:
        if value is None:
            return None
        return str(value)


# =============================================================================
# Information Gaps
# =============================================================================

class GapObservation(_WireModel):
    """An open question that still needs an answer."""
    question: Optional[str] = Field(
        default=None,
        description="The question, phrased so it can be asked on the next call"
    )
    category: str = Field(
        default="business",
        description="business or technical"
    )
    meddicc_category: Optional[str] = Field(
        default=None,
        alias="meddiccCategory",
        description="MEDDICC element this question qualifies"
    )

    @field_validator("category", mode="before")
    @classmethod
    def _default_category(cls, value: Any) -> str:
        return str(value) if value else "business"

    @field_validator("question", "meddicc_category", mode="before")
    @classmethod
    def _coerce_text(cls, value: Any) -> Optional[str]:
        if value is None:
            return None
        return str(value)


# =============================================================================
# Full Analysis
# =============================================================================

class AnalysisPayload(_WireModel):
    """Everything extracted from one call transcript."""
    summary: Optional[str] = Field(
        default=None,
        description="Two to three sentence summary of the call"
    )
    call_date: Optional[str] = Field(
        default=None,
        alias="callDate",
        description="Date of the call (YYYY-MM-DD) if stated"
    )
    call_type: Optional[str] = Field(
        default=None,
        alias="callType",
        description="intro, discovery, demo, pricing, negotiation, follow_up or other"
    )
    attendees: List[str] = Field(
        default_factory=list,
        description="Names of people on the call"
    )
    business_areas: Dict[str, AreaObservation] = Field(
        default_factory=dict,
        alias="businessAreas",
        description="Observations keyed by business area id"
    )
    stakeholders: List[PersonObservation] = Field(
        default_factory=list,
        description="People identified on or mentioned in the call"
    )
    metrics: Dict[str, Any] = Field(
        default_factory=dict,
        description="Metric values keyed by metric id; null when not mentioned"
    )
    metrics_context: Dict[str, Optional[str]] = Field(
        default_factory=dict,
        alias="metricsContext",
        description="Where each metric value came from"
    )
    information_gaps: List[Union[GapObservation, str]] = Field(
        default_factory=list,
        alias="informationGaps",
        description="Questions still open after this call"
    )

    @field_validator("attendees", mode="before")
    @classmethod
    def _coerce_attendees(cls, value: Any) -> list:
        return _text_items(value)

    @field_validator("stakeholders", mode="before")
    @classmethod
    def _coerce_people(cls, value: Any) -> list:
        return [p for p in _drop_nulls(value) if isinstance(p, (dict, BaseModel))]

    @field_validator("information_gaps", mode="before")
    @classmethod
    def _coerce_gaps(cls, value: Any) -> list:
        return [g for g in _drop_nulls(value) if isinstance(g, (str, dict, BaseModel))]

    @field_validator("business_areas", mode="before")
    @classmethod
    def _coerce_areas(cls, value: Any) -> dict:
        if not isinstance(value, dict):
            return {}
        return {k: v for k, v in value.items() if k is not None and isinstance(v, (dict, BaseModel))}

    @field_validator("metrics", mode="before")
    @classmethod
    def _coerce_metrics(cls, value: Any) -> dict:
        if not isinstance(value, dict):
            return {}
        return {k: v for k, v in value.items() if k is not None}

    @field_validator("metrics_context", mode="before")
    @classmethod
    def _coerce_context(cls, value: Any) -> dict:
        if not isinstance(value, dict):
            return {}
        return {
            k: (None if v is None else str(v))
            for k, v in value.items() if k is not None
        }
