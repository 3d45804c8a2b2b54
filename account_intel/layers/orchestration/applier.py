"""
Action Applier - Batch State Transition

Applies a batch of typed actions to an account and reports one
user-facing message per outcome. Used for both manual-note commands and
AI-assistant suggestions.

Contract:
- Actions apply in array order; for conflicting edits the last one wins
- Unresolvable references (stakeholder, gap, area) produce a warning and
  leave the account unchanged
- Unknown action types are logged and skipped
- A delete_account anywhere in the batch is authoritative: no field
  edits are applied and the result is flagged as deleted
- The input account is never modified
"""

import copy
import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Callable, Iterable, Optional

from ...core.entities import Account, BusinessArea, InformationGap, Metric, Note, IdGenerator, generate_id
from ...core.vocabulary import (
    AreaPriority,
    BUSINESS_AREAS,
    DEFAULT_GAP_CATEGORY,
    DEFAULT_NOTE_CATEGORY,
    GapStatus,
)
from ..reconciliation.gaps import has_question
from ..reconciliation.normalization import to_comparable_string
from .actions import (
    ActionBase,
    AddGap,
    AddMetric,
    AddNote,
    DeleteAccount,
    MalformedAction,
    MarkAreaIrrelevant,
    Message,
    MessageLevel,
    RenameAccount,
    ResolveGap,
    SetAreaPriority,
    UnmarkAreaIrrelevant,
    UpdateOwnership,
    UpdateStage,
    UpdateStakeholderRole,
    UpdateVertical,
    coerce_action,
)


logger = logging.getLogger(__name__)

_AREA_PRIORITY = {area.id: area.priority.value for area in BUSINESS_AREAS}
_PRIORITIES = {p.value for p in AreaPriority}


@dataclass
class ApplyResult:
    """Outcome of applying a batch of actions."""
    account: Account
    messages: list = field(default_factory=list)
    deleted: bool = False

    @property
    def warnings(self) -> list:
        return [m for m in self.messages if m.level == MessageLevel.WARNING]


@dataclass
class _ApplyContext:
    account: Account
    id_generator: IdGenerator
    now: datetime
    messages: list = field(default_factory=list)

    def success(self, action: ActionBase, default: str) -> None:
        self.messages.append(Message.success(action.message or default))

    def warn(self, text: str) -> None:
        self.messages.append(Message.warning(text))


def _norm_name(value: Any) -> str:
    return to_comparable_string(value).strip()


def _area(ctx: _ApplyContext, area_id: Optional[str]) -> Optional[BusinessArea]:
    """Resolve an area, creating the zero state for known topics."""
    if not area_id:
        ctx.warn("Business area not specified")
        return None

    areas = ctx.account.business_areas
    if area_id not in areas:
        if area_id not in _AREA_PRIORITY:
            ctx.warn(f'Business area "{area_id}" not found')
            return None
        areas[area_id] = BusinessArea(priority=_AREA_PRIORITY[area_id])
    return areas[area_id]


# =============================================================================
# Handlers
# =============================================================================

def _update_stakeholder_role(ctx: _ApplyContext, action: UpdateStakeholderRole) -> None:
    if not action.name or not action.new_role:
        ctx.warn("Role update needs a stakeholder name and a role")
        return

    wanted = _norm_name(action.name)
    matched = [s for s in ctx.account.stakeholders if s.name and _norm_name(s.name) == wanted]

    if not matched:
        ctx.warn(
            f'Stakeholder "{action.name}" not found. '
            "Please add them first or check the spelling."
        )
        return

    for stakeholder in matched:
        stakeholder.role = action.new_role
        stakeholder.last_updated = ctx.now

    ctx.success(action, f"Updated {matched[0].name} to {action.new_role}")


def _add_metric(ctx: _ApplyContext, action: AddMetric) -> None:
    if not action.metric or action.value is None:
        ctx.warn("Metric update needs a metric id and a value")
        return

    ctx.account.metrics[action.metric] = Metric(
        value=action.value,
        context=action.context or "Added via assistant",
        last_updated=ctx.now,
    )
    ctx.success(action, f"Set {action.metric} to {action.value}")


def _add_note(ctx: _ApplyContext, action: AddNote) -> None:
    if action.content is None:
        ctx.warn("Note has no content")
        return

    ctx.account.notes.append(Note(
        id=ctx.id_generator(),
        category=action.category or DEFAULT_NOTE_CATEGORY,
        content=action.content,
        added_at=ctx.now,
    ))
    ctx.success(action, f"Added {(action.category or DEFAULT_NOTE_CATEGORY).lower()} note")


def _mark_area_irrelevant(ctx: _ApplyContext, action: MarkAreaIrrelevant) -> None:
    area = _area(ctx, action.area_id)
    if area is None:
        return
    area.irrelevant = True
    area.irrelevant_reason = action.reason
    area.last_updated = ctx.now
    ctx.success(action, f"Marked {action.area_id} as not relevant")


def _unmark_area_irrelevant(ctx: _ApplyContext, action: UnmarkAreaIrrelevant) -> None:
    area = _area(ctx, action.area_id)
    if area is None:
        return
    area.irrelevant = False
    area.irrelevant_reason = None
    area.last_updated = ctx.now
    ctx.success(action, f"Marked {action.area_id} as relevant")


def _set_area_priority(ctx: _ApplyContext, action: SetAreaPriority) -> None:
    priority = (action.priority or "").lower()
    if priority not in _PRIORITIES:
        ctx.warn(f'Unknown priority "{action.priority}"')
        return

    area = _area(ctx, action.area_id)
    if area is None:
        return
    area.priority = priority
    area.last_updated = ctx.now
    ctx.success(action, f"Set {action.area_id} priority to {priority}")


def _field_setter(attr: str, source: str, label: str) -> Callable:
    def handler(ctx: _ApplyContext, action: ActionBase) -> None:
        value = getattr(action, source)
        if not value:
            ctx.warn(f"No {label} given")
            return
        setattr(ctx.account, attr, value)
        ctx.success(action, f"Updated {label} to {value}")

    return handler


def _resolve_gap(ctx: _ApplyContext, action: ResolveGap) -> None:
    gap = ctx.account.find_gap(action.gap_id) if action.gap_id else None
    if gap is None:
        ctx.warn(f'Information gap "{action.gap_id}" not found')
        return

    already = gap.status == GapStatus.RESOLVED and gap.resolution == action.resolution
    gap.status = GapStatus.RESOLVED
    gap.resolution = action.resolution
    if not already or gap.resolved_at is None:
        gap.resolved_at = ctx.now
    ctx.success(action, f"Resolved: {gap.question}")


def _add_gap(ctx: _ApplyContext, action: AddGap) -> None:
    if not action.question or not action.question.strip():
        ctx.warn("Gap has no question")
        return

    if has_question(ctx.account.information_gaps, action.question):
        ctx.warn(f'Already tracking "{action.question}"')
        return

    ctx.account.information_gaps.append(InformationGap(
        id=ctx.id_generator(),
        question=action.question,
        category=action.category or DEFAULT_GAP_CATEGORY,
        meddicc_category=action.meddicc_category,
        status=GapStatus.OPEN,
        added_at=ctx.now,
    ))
    ctx.success(action, f"Added gap: {action.question}")


_HANDLERS: dict[type, Callable] = {
    UpdateStakeholderRole: _update_stakeholder_role,
    AddMetric: _add_metric,
    AddNote: _add_note,
    MarkAreaIrrelevant: _mark_area_irrelevant,
    UnmarkAreaIrrelevant: _unmark_area_irrelevant,
    SetAreaPriority: _set_area_priority,
    UpdateStage: _field_setter("stage", "stage", "stage"),
    UpdateVertical: _field_setter("vertical", "vertical", "vertical"),
    UpdateOwnership: _field_setter("ownership_type", "ownership", "ownership"),
    RenameAccount: _field_setter("name", "name", "account name"),
    ResolveGap: _resolve_gap,
    AddGap: _add_gap,
}


# =============================================================================
# Entry point
# =============================================================================

def _coerce_batch(actions: Iterable[Any], messages: list) -> list:
    typed = []
    for raw in actions or []:
        try:
            action = coerce_action(raw)
        except MalformedAction as e:
            logger.warning(str(e))
            messages.append(Message.warning(f"Skipped malformed {e.action_type} action"))
            continue
        if action is not None:
            typed.append(action)
    return typed


def apply_actions(
    actions: Iterable[Any],
    account: Account,
    id_generator: IdGenerator = generate_id,
    now: Optional[datetime] = None
) -> ApplyResult:
    """
    Apply a batch of actions to an account.

    ``actions`` may hold typed actions or wire dicts. Never raises for
    well-formed actions.
    """
    messages: list = []
    typed = _coerce_batch(actions, messages)

    if any(isinstance(a, DeleteAccount) for a in typed):
        delete = next(a for a in typed if isinstance(a, DeleteAccount))
        messages.append(Message.success(delete.message or f"Deleted account {account.name}"))
        logger.info("Account %s deleted by action batch", account.id)
        return ApplyResult(account=account, messages=messages, deleted=True)

    ctx = _ApplyContext(
        account=copy.deepcopy(account),
        id_generator=id_generator,
        now=now or datetime.now(),
        messages=messages,
    )

    for action in typed:
        handler = _HANDLERS.get(type(action))
        if handler is None:
            logger.warning("No handler for action type: %s", getattr(action, "type", action))
            continue
        handler(ctx, action)

    if any(m.level == MessageLevel.SUCCESS for m in ctx.messages):
        ctx.account.last_updated = ctx.now

    return ApplyResult(account=ctx.account, messages=ctx.messages)
