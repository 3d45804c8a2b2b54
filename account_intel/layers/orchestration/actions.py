"""
Account Actions - Typed Point Edits

An action is a transient, typed edit to one account, produced by the
command interpreter or by the AI assistant and consumed exactly once by
the action applier. Actions form a closed union discriminated on
``type``.

Wire payloads use camelCase keys (``newRole``, ``areaId``, ``gapId``).
Unrecognized fields are ignored. Type-specific fields are optional at
the schema level so that an action missing a required field becomes a
no-op in the applier instead of a validation failure.
"""

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Annotated, Any, Literal, Optional, Union

from pydantic import (
    AliasChoices,
    BaseModel,
    ConfigDict,
    Field,
    TypeAdapter,
    ValidationError
)


logger = logging.getLogger(__name__)


class ActionBase(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    message: Optional[str] = Field(
        default=None,
        description="User-facing confirmation text"
    )


class UpdateStakeholderRole(ActionBase):
    type: Literal["update_stakeholder_role"] = "update_stakeholder_role"
    name: Optional[str] = None
    new_role: Optional[str] = Field(
        default=None,
        validation_alias=AliasChoices("newRole", "new_role", "role"),
        serialization_alias="newRole"
    )


class AddMetric(ActionBase):
    type: Literal["add_metric"] = "add_metric"
    metric: Optional[str] = None
    value: Any = None
    context: Optional[str] = None


class AddNote(ActionBase):
    type: Literal["add_note"] = "add_note"
    category: Optional[str] = None
    content: Optional[str] = None


class MarkAreaIrrelevant(ActionBase):
    type: Literal["mark_area_irrelevant"] = "mark_area_irrelevant"
    area_id: Optional[str] = Field(default=None, alias="areaId")
    reason: Optional[str] = None


class SetAreaPriority(ActionBase):
    type: Literal["set_area_priority"] = "set_area_priority"
    area_id: Optional[str] = Field(default=None, alias="areaId")
    priority: Optional[str] = None


class UnmarkAreaIrrelevant(ActionBase):
    type: Literal["unmark_area_irrelevant"] = "unmark_area_irrelevant"
    area_id: Optional[str] = Field(default=None, alias="areaId")


class UpdateStage(ActionBase):
    type: Literal["update_stage"] = "update_stage"
    stage: Optional[str] = None


class UpdateVertical(ActionBase):
    type: Literal["update_vertical"] = "update_vertical"
    vertical: Optional[str] = None


class UpdateOwnership(ActionBase):
    type: Literal["update_ownership"] = "update_ownership"
    ownership: Optional[str] = None


class ResolveGap(ActionBase):
    type: Literal["resolve_gap"] = "resolve_gap"
    gap_id: Optional[str] = Field(default=None, alias="gapId")
    resolution: Optional[str] = None


class AddGap(ActionBase):
    type: Literal["add_gap"] = "add_gap"
    question: Optional[str] = None
    category: Optional[str] = None
    meddicc_category: Optional[str] = Field(default=None, alias="meddiccCategory")


class RenameAccount(ActionBase):
    type: Literal["rename_account"] = "rename_account"
    name: Optional[str] = None


class DeleteAccount(ActionBase):
    type: Literal["delete_account"] = "delete_account"


Action = Annotated[
    Union[
        UpdateStakeholderRole,
        AddMetric,
        AddNote,
        MarkAreaIrrelevant,
        SetAreaPriority,
        UnmarkAreaIrrelevant,
        UpdateStage,
        UpdateVertical,
        UpdateOwnership,
        ResolveGap,
        AddGap,
        RenameAccount,
        DeleteAccount,
    ],
    Field(discriminator="type")
]

ACTION_TYPES = {
    "update_stakeholder_role",
    "add_metric",
    "add_note",
    "mark_area_irrelevant",
    "set_area_priority",
    "unmark_area_irrelevant",
    "update_stage",
    "update_vertical",
    "update_ownership",
    "resolve_gap",
    "add_gap",
    "rename_account",
    "delete_account",
}

# Older clients emitted manual notes as "note"
LEGACY_TYPES = {"note": "add_note"}

_action_adapter = TypeAdapter(Action)


class MalformedAction(Exception):
    """A known action type whose payload could not be validated."""

    def __init__(self, action_type: str, detail: str):
        super().__init__(f"Malformed {action_type} action: {detail}")
        self.action_type = action_type


def coerce_action(raw: Any) -> Optional[ActionBase]:
    """
    Turn a wire payload into a typed action.

    Returns None for unknown action types (logged). Raises
    MalformedAction when a known type fails validation.
    """
    if isinstance(raw, ActionBase):
        return raw

    if not isinstance(raw, dict):
        logger.warning("Skipping non-object action: %r", raw)
        return None

    action_type = raw.get("type")
    if not isinstance(action_type, str):
        logger.warning("Unknown action type: %r", action_type)
        return None
    action_type = LEGACY_TYPES.get(action_type, action_type)

    if action_type not in ACTION_TYPES:
        logger.warning("Unknown action type: %s", action_type)
        return None

    try:
        return _action_adapter.validate_python({**raw, "type": action_type})
    except ValidationError as e:
        raise MalformedAction(action_type, str(e)) from e


def action_to_dict(action: ActionBase) -> dict:
    """Wire form of an action (camelCase, nulls dropped)."""
    return action.model_dump(by_alias=True, exclude_none=True)


class MessageLevel(str, Enum):
    SUCCESS = "success"
    WARNING = "warning"


@dataclass
class Message:
    """User-facing outcome of applying one action."""
    level: MessageLevel
    text: str

    @classmethod
    def success(cls, text: str) -> "Message":
        return cls(MessageLevel.SUCCESS, text)

    @classmethod
    def warning(cls, text: str) -> "Message":
        return cls(MessageLevel.WARNING, text)

    def to_dict(self) -> dict:
        return {"type": self.level.value, "text": self.text}
