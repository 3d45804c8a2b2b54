"""
Account Aggregate - System of Record

The account is the single canonical aggregate every observation is folded
into. It is mutated only by the reconcilers and the action applier, and it
is never partially constructed: absent maps and collections default to
empty before any merge.

Entities:
- Account: the deal being worked, root of the aggregate
- BusinessArea: observations accumulated against one CapEx topic
- Stakeholder: a person on the buying committee
- Metric: a named scalar measurement with provenance context
- InformationGap: an open question the account owner needs answered
- Note: free-text note, append-only
- TranscriptRecord: a processed call, opaque to the reconcilers

Wire format is the camelCase JSON shape shared with the storage backends
and the dashboard (``currentState``, ``addedAt``, ...).
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Callable, Optional
from uuid import uuid4

from .vocabulary import (
    ConfidenceTier,
    GapStatus,
    StakeholderRole,
    DEFAULT_GAP_CATEGORY,
    DEFAULT_NOTE_CATEGORY,
    DEFAULT_STAGE,
    empty_business_areas,
    empty_meddicc,
    metrics_for_account,
)


IdGenerator = Callable[[], str]


def generate_id() -> str:
    """Default id generator."""
    return str(uuid4())


def _iso(value: Optional[datetime]) -> Optional[str]:
    return value.isoformat() if value else None


def _parse_dt(value: Any) -> Optional[datetime]:
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return value
    try:
        return datetime.fromisoformat(str(value).replace("Z", "+00:00"))
    except ValueError:
        return None


def _str_list(value: Any) -> list:
    if not value:
        return []
    return list(value)


@dataclass
class BusinessArea:
    """
    Observations accumulated against one business area.

    ``confidence`` is derived from observation volume at merge time and
    is never set directly.
    """
    current_state: list = field(default_factory=list)
    opportunities: list = field(default_factory=list)
    quotes: list = field(default_factory=list)
    confidence: ConfidenceTier = ConfidenceTier.NONE
    priority: Optional[str] = None
    irrelevant: bool = False
    irrelevant_reason: Optional[str] = None
    last_updated: Optional[datetime] = None

    def to_dict(self) -> dict:
        return {
            "currentState": list(self.current_state),
            "opportunities": list(self.opportunities),
            "quotes": list(self.quotes),
            "confidence": ConfidenceTier(self.confidence).value,
            "priority": self.priority,
            "irrelevant": self.irrelevant,
            "irrelevantReason": self.irrelevant_reason,
            "lastUpdated": _iso(self.last_updated),
        }

    @classmethod
    def from_dict(cls, data: Optional[dict]) -> "BusinessArea":
        data = data or {}
        try:
            confidence = ConfidenceTier(data.get("confidence") or ConfidenceTier.NONE.value)
        except ValueError:
            confidence = ConfidenceTier.NONE
        return cls(
            current_state=_str_list(data.get("currentState")),
            opportunities=_str_list(data.get("opportunities")),
            quotes=_str_list(data.get("quotes")),
            confidence=confidence,
            priority=data.get("priority"),
            irrelevant=bool(data.get("irrelevant", False)),
            irrelevant_reason=data.get("irrelevantReason"),
            last_updated=_parse_dt(data.get("lastUpdated")),
        )


@dataclass
class Stakeholder:
    """
    A person on the buying committee.

    ``name`` is the identity key (case-insensitive); the first-seen casing
    is canonical. Once a role other than ``Unknown`` is known, merges never
    regress it.
    """
    id: str = field(default_factory=generate_id)
    name: str = ""
    title: Optional[str] = None
    department: Optional[str] = None
    role: str = StakeholderRole.UNKNOWN.value
    notes: Optional[str] = None
    added_at: datetime = field(default_factory=datetime.now)
    last_updated: Optional[datetime] = None

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "title": self.title,
            "department": self.department,
            "role": self.role,
            "notes": self.notes,
            "addedAt": _iso(self.added_at),
            "lastUpdated": _iso(self.last_updated),
        }

    @classmethod
    def from_dict(cls, data: dict) -> "Stakeholder":
        return cls(
            id=str(data.get("id") or generate_id()),
            name=data.get("name") or "",
            title=data.get("title"),
            department=data.get("department"),
            role=data.get("role") or StakeholderRole.UNKNOWN.value,
            notes=data.get("notes"),
            added_at=_parse_dt(data.get("addedAt")) or datetime.now(),
            last_updated=_parse_dt(data.get("lastUpdated")),
        )


@dataclass
class Metric:
    """A measured value with the context it was captured in (last writer wins)."""
    value: Any = None
    context: Optional[str] = None
    last_updated: Optional[datetime] = None

    def to_dict(self) -> dict:
        return {
            "value": self.value,
            "context": self.context,
            "lastUpdated": _iso(self.last_updated),
        }

    @classmethod
    def from_dict(cls, data: Any) -> "Metric":
        if not isinstance(data, dict):
            # Bare scalars from older records
            return cls(value=data)
        return cls(
            value=data.get("value"),
            context=data.get("context"),
            last_updated=_parse_dt(data.get("lastUpdated")),
        )


@dataclass
class InformationGap:
    """An open question, identified by its question text (case-insensitive)."""
    id: str = field(default_factory=generate_id)
    question: str = ""
    category: str = DEFAULT_GAP_CATEGORY
    meddicc_category: Optional[str] = None
    status: GapStatus = GapStatus.OPEN
    resolution: Optional[str] = None
    added_at: datetime = field(default_factory=datetime.now)
    resolved_at: Optional[datetime] = None

    @property
    def is_resolved(self) -> bool:
        return self.status == GapStatus.RESOLVED

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "question": self.question,
            "category": self.category,
            "meddiccCategory": self.meddicc_category,
            "status": GapStatus(self.status).value,
            "resolution": self.resolution,
            "addedAt": _iso(self.added_at),
            "resolvedAt": _iso(self.resolved_at),
        }

    @classmethod
    def from_dict(cls, data: dict) -> "InformationGap":
        try:
            status = GapStatus(data.get("status") or GapStatus.OPEN.value)
        except ValueError:
            status = GapStatus.OPEN
        return cls(
            id=str(data.get("id") or generate_id()),
            question=data.get("question") or "",
            category=data.get("category") or DEFAULT_GAP_CATEGORY,
            meddicc_category=data.get("meddiccCategory"),
            status=status,
            resolution=data.get("resolution"),
            added_at=_parse_dt(data.get("addedAt")) or datetime.now(),
            resolved_at=_parse_dt(data.get("resolvedAt")),
        )


@dataclass
class Note:
    id: str = field(default_factory=generate_id)
    category: str = DEFAULT_NOTE_CATEGORY
    content: str = ""
    added_at: datetime = field(default_factory=datetime.now)

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "category": self.category,
            "content": self.content,
            "addedAt": _iso(self.added_at),
        }

    @classmethod
    def from_dict(cls, data: dict) -> "Note":
        return cls(
            id=str(data.get("id") or generate_id()),
            category=data.get("category") or DEFAULT_NOTE_CATEGORY,
            content=data.get("content") or "",
            # older records stamped notes with "timestamp"
            added_at=_parse_dt(data.get("addedAt") or data.get("timestamp")) or datetime.now(),
        )


@dataclass
class TranscriptRecord:
    """A processed call. The reconcilers never look inside it."""
    id: str = field(default_factory=generate_id)
    text: str = ""
    date: Optional[str] = None
    call_type: str = "other"
    attendees: list = field(default_factory=list)
    summary: Optional[str] = None
    source: str = "manual"
    added_at: datetime = field(default_factory=datetime.now)

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "text": self.text,
            "date": self.date,
            "callType": self.call_type,
            "attendees": list(self.attendees),
            "summary": self.summary,
            "source": self.source,
            "addedAt": _iso(self.added_at),
        }

    @classmethod
    def from_dict(cls, data: dict) -> "TranscriptRecord":
        return cls(
            id=str(data.get("id") or generate_id()),
            text=data.get("text") or "",
            date=data.get("date"),
            call_type=data.get("callType") or "other",
            attendees=_str_list(data.get("attendees")),
            summary=data.get("summary"),
            source=data.get("source") or "manual",
            added_at=_parse_dt(data.get("addedAt")) or datetime.now(),
        )


@dataclass
class Account:
    """
    Root aggregate for a deal.

    Business areas and metrics are maps keyed by fixed vocabularies;
    stakeholders, gaps, notes and transcripts are ordered collections
    that only grow through reconciliation.
    """
    id: str = field(default_factory=generate_id)
    name: str = ""
    url: Optional[str] = None
    stage: str = DEFAULT_STAGE
    vertical: Optional[str] = None
    ownership_type: Optional[str] = None

    business_areas: dict = field(default_factory=dict)
    meddicc: dict = field(default_factory=dict)
    metrics: dict = field(default_factory=dict)
    stakeholders: list = field(default_factory=list)
    information_gaps: list = field(default_factory=list)
    notes: list = field(default_factory=list)
    transcripts: list = field(default_factory=list)

    created_at: datetime = field(default_factory=datetime.now)
    last_updated: Optional[datetime] = None

    @classmethod
    def create(
        cls,
        name: str,
        url: Optional[str] = None,
        stage: str = DEFAULT_STAGE,
        vertical: Optional[str] = None,
        ownership_type: Optional[str] = None,
        id_generator: IdGenerator = generate_id
    ) -> "Account":
        """Create an account with every business area, applicable metric and MEDDICC category in zero state."""
        return cls(
            id=id_generator(),
            name=name,
            url=url,
            stage=stage or DEFAULT_STAGE,
            vertical=vertical,
            ownership_type=ownership_type,
            business_areas=empty_business_areas(),
            meddicc=empty_meddicc(),
            metrics={m.id: Metric() for m in metrics_for_account(vertical, ownership_type)},
        )

    def find_stakeholder(self, name: str) -> Optional[Stakeholder]:
        """Case-insensitive lookup by name."""
        wanted = str(name or "").strip().lower()
        for stakeholder in self.stakeholders:
            if stakeholder.name and stakeholder.name.strip().lower() == wanted:
                return stakeholder
        return None

    def find_gap(self, gap_id: str) -> Optional[InformationGap]:
        for gap in self.information_gaps:
            if gap.id == gap_id:
                return gap
        return None

    def open_gaps(self) -> list:
        return [g for g in self.information_gaps if not g.is_resolved]

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "url": self.url,
            "stage": self.stage,
            "vertical": self.vertical,
            "ownershipType": self.ownership_type,
            "businessAreas": {k: v.to_dict() for k, v in self.business_areas.items()},
            "meddicc": dict(self.meddicc),
            "metrics": {k: v.to_dict() for k, v in self.metrics.items()},
            "stakeholders": [s.to_dict() for s in self.stakeholders],
            "informationGaps": [g.to_dict() for g in self.information_gaps],
            "notes": [n.to_dict() for n in self.notes],
            "transcripts": [t.to_dict() for t in self.transcripts],
            "createdAt": _iso(self.created_at),
            "lastUpdated": _iso(self.last_updated),
        }

    @classmethod
    def from_dict(cls, data: dict) -> "Account":
        return cls(
            id=str(data.get("id") or generate_id()),
            name=data.get("name") or "",
            url=data.get("url"),
            stage=data.get("stage") or DEFAULT_STAGE,
            vertical=data.get("vertical"),
            ownership_type=data.get("ownershipType"),
            business_areas={
                k: BusinessArea.from_dict(v)
                for k, v in (data.get("businessAreas") or {}).items()
            },
            meddicc=dict(data.get("meddicc") or {}),
            metrics={
                k: Metric.from_dict(v)
                for k, v in (data.get("metrics") or {}).items()
            },
            stakeholders=[Stakeholder.from_dict(s) for s in data.get("stakeholders") or [] if s],
            information_gaps=[InformationGap.from_dict(g) for g in data.get("informationGaps") or [] if g],
            notes=[Note.from_dict(n) for n in data.get("notes") or [] if n],
            transcripts=[TranscriptRecord.from_dict(t) for t in data.get("transcripts") or [] if t],
            created_at=_parse_dt(data.get("createdAt")) or datetime.now(),
            last_updated=_parse_dt(data.get("lastUpdated")),
        )
