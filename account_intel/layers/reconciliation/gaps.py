"""
Information Gap Reconciliation

Open questions are identified by their question text (case-insensitive,
exact). A question already on the account, open or resolved, is never
added again however often it is re-extracted.
"""

from datetime import datetime
from typing import Any, Iterable, Optional

from ...core.entities import InformationGap, IdGenerator, generate_id
from ...core.vocabulary import GapStatus, DEFAULT_GAP_CATEGORY
from .normalization import to_comparable_string, field_value


def normalize_gap_input(gap: Any) -> tuple[Optional[str], str, Optional[str]]:
    """
    Normalize a gap to (question, category, meddicc_category).

    Accepts the legacy bare-string shape and the structured shape.
    """
    if isinstance(gap, str):
        return gap, DEFAULT_GAP_CATEGORY, None

    question = field_value(gap, "question")
    category = field_value(gap, "category") or DEFAULT_GAP_CATEGORY
    meddicc = field_value(gap, "meddiccCategory") if isinstance(gap, dict) else None
    if meddicc is None:
        meddicc = field_value(gap, "meddicc_category")
    return question, category, meddicc


def has_question(gaps: Iterable[InformationGap], question: Any) -> bool:
    wanted = to_comparable_string(question)
    return any(
        g.question and to_comparable_string(g.question) == wanted
        for g in gaps
    )


def reconcile_gaps(
    existing: Optional[Iterable[InformationGap]],
    incoming: Optional[Iterable[Any]],
    id_generator: IdGenerator = generate_id,
    now: Optional[datetime] = None
) -> list:
    """Append incoming questions that are not already tracked."""
    merged = list(existing or [])
    stamp = now or datetime.now()

    for gap in incoming or []:
        question, category, meddicc_category = normalize_gap_input(gap)

        if not question or not str(question).strip():
            continue
        if has_question(merged, question):
            continue

        merged.append(InformationGap(
            id=id_generator(),
            question=str(question),
            category=category,
            meddicc_category=meddicc_category,
            status=GapStatus.OPEN,
            added_at=stamp,
        ))

    return merged
