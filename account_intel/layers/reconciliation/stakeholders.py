"""
Stakeholder Reconciliation

Resolves person observations against the known buying committee by
case-insensitive name and merges their fields:

- First-seen name casing is canonical
- Title and department are only replaced by non-empty values
- Role is never regressed to "Unknown"
- Notes are appended, never replaced
"""

import logging
from dataclasses import replace
from datetime import datetime
from typing import Any, Iterable, Optional

from ...core.entities import Stakeholder, IdGenerator, generate_id
from ...core.vocabulary import StakeholderRole
from .normalization import to_comparable_string, field_value


logger = logging.getLogger(__name__)

UNKNOWN_ROLE = StakeholderRole.UNKNOWN.value


def _role_value(role: Any) -> Optional[str]:
    if role is None:
        return None
    return getattr(role, "value", role)


def _append_notes(existing: Optional[str], incoming: Optional[str]) -> Optional[str]:
    if not incoming:
        return existing
    return f"{existing or ''} {incoming}".strip()


def _find_by_name(stakeholders: list, name: Any) -> int:
    wanted = to_comparable_string(name)
    for index, person in enumerate(stakeholders):
        if person.name and to_comparable_string(person.name) == wanted:
            return index
    return -1


def reconcile_stakeholders(
    existing: Optional[Iterable[Stakeholder]],
    incoming: Optional[Iterable[Any]],
    id_generator: IdGenerator = generate_id,
    now: Optional[datetime] = None
) -> list:
    """
    Merge person observations into the stakeholder list.

    Observations without a name are skipped. Returns a new list; neither
    input is modified.
    """
    merged = list(existing or [])
    stamp = now or datetime.now()

    for person in incoming or []:
        name = field_value(person, "name")
        if not name:
            continue

        title = field_value(person, "title")
        department = field_value(person, "department")
        role = _role_value(field_value(person, "role"))
        notes = field_value(person, "notes")

        index = _find_by_name(merged, name)

        if index >= 0:
            current = merged[index]
            merged[index] = replace(
                current,
                title=title or current.title,
                department=department or current.department,
                role=role if role and role != UNKNOWN_ROLE else current.role,
                notes=_append_notes(current.notes, notes),
                last_updated=stamp,
            )
        else:
            merged.append(Stakeholder(
                id=id_generator(),
                name=name,
                title=title,
                department=department,
                role=role or UNKNOWN_ROLE,
                notes=notes,
                added_at=stamp,
                last_updated=stamp,
            ))
            logger.debug("New stakeholder: %s", name)

    return merged
