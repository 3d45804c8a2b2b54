"""
Orchestration Layer

Turns user and assistant intent into edits on the account:

- Actions: the closed union of typed point edits
- Command interpreter: rule-based free text -> actions
- Action applier: batch state transition with user-facing messages
"""

from .actions import (
    Action,
    ActionBase,
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
    Message,
    MessageLevel,
    coerce_action,
    action_to_dict
)
from .commands import CommandRule, CommandInterpreter, interpret_command
from .applier import ApplyResult, apply_actions

__all__ = [
    "Action",
    "ActionBase",
    "UpdateStakeholderRole",
    "AddMetric",
    "AddNote",
    "MarkAreaIrrelevant",
    "SetAreaPriority",
    "UnmarkAreaIrrelevant",
    "UpdateStage",
    "UpdateVertical",
    "UpdateOwnership",
    "ResolveGap",
    "AddGap",
    "RenameAccount",
    "DeleteAccount",
    "Message",
    "MessageLevel",
    "coerce_action",
    "action_to_dict",
    "CommandRule",
    "CommandInterpreter",
    "interpret_command",
    "ApplyResult",
    "apply_actions"
]
