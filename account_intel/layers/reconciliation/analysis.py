"""
Analysis Folding

Folds one transcript analysis into an account: records the transcript,
then runs the four entity reconcilers (business areas, stakeholders,
metrics, gaps) against the existing aggregate. The account passed in is
not modified.
"""

import logging
from dataclasses import replace
from datetime import datetime
from typing import Any, Optional, Union

from ...core.entities import Account, TranscriptRecord, IdGenerator, generate_id
from ...core.vocabulary import empty_business_areas
from ..intelligence.schemas import AnalysisPayload
from .business_areas import reconcile_business_areas
from .stakeholders import reconcile_stakeholders
from .metrics import captured_metric_count, reconcile_metrics
from .gaps import reconcile_gaps


logger = logging.getLogger(__name__)


def coerce_analysis(analysis: Union[AnalysisPayload, dict, None]) -> AnalysisPayload:
    """Validate a wire payload into an AnalysisPayload (null -> empty)."""
    if isinstance(analysis, AnalysisPayload):
        return analysis
    return AnalysisPayload.model_validate(analysis or {})


def merge_analysis(
    account: Account,
    analysis: Union[AnalysisPayload, dict, None],
    id_generator: IdGenerator = generate_id,
    transcript_text: Optional[str] = None,
    source: str = "manual",
    transcript_meta: Optional[dict] = None,
    now: Optional[datetime] = None
) -> Account:
    """
    Merge an analysis payload into the account.

    When ``transcript_text`` is given a TranscriptRecord is appended;
    ``transcript_meta`` may override its date, call type and attendees
    (e.g. from the call recorder's own metadata).
    """
    payload = coerce_analysis(analysis)
    stamp = now or datetime.now()
    meta = transcript_meta or {}

    transcripts = list(account.transcripts)
    if transcript_text is not None:
        transcripts.append(TranscriptRecord(
            id=id_generator(),
            text=transcript_text,
            date=meta.get("date") or payload.call_date or stamp.date().isoformat(),
            call_type=meta.get("callType") or payload.call_type or "other",
            attendees=meta.get("attendees") or list(payload.attendees),
            summary=payload.summary,
            source=source,
            added_at=stamp,
        ))

    business_areas = account.business_areas or empty_business_areas()

    merged = replace(
        account,
        transcripts=transcripts,
        stakeholders=reconcile_stakeholders(
            account.stakeholders, payload.stakeholders, id_generator, now=stamp
        ),
        business_areas=reconcile_business_areas(
            business_areas, payload.business_areas, now=stamp
        ),
        metrics=reconcile_metrics(
            account.metrics, payload.metrics, payload.metrics_context, now=stamp
        ),
        information_gaps=reconcile_gaps(
            account.information_gaps, payload.information_gaps, id_generator, now=stamp
        ),
        last_updated=stamp,
    )

    logger.info(
        "Merged analysis into account %s: %d stakeholders, %d gaps, %d metrics",
        account.id,
        len(merged.stakeholders),
        len(merged.information_gaps),
        captured_metric_count(merged.metrics),
    )
    return merged


def new_entities(before: Account, after: Account) -> dict[str, list[Any]]:
    """Stakeholders, gaps, notes and transcripts present in ``after`` but not ``before``."""
    def _added(old: list, new: list) -> list:
        known = {item.id for item in old}
        return [item for item in new if item.id not in known]

    return {
        "stakeholders": _added(before.stakeholders, after.stakeholders),
        "information_gaps": _added(before.information_gaps, after.information_gaps),
        "notes": _added(before.notes, after.notes),
        "transcripts": _added(before.transcripts, after.transcripts),
    }
