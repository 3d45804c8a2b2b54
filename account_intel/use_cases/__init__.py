"""
Use Case Implementations

Account workspace: the accounts collection, the selected account, and
the edit paths (transcript analysis, manual notes, assistant actions).
"""

from .workspace import AccountWorkspace, WorkspaceResult, EDITABLE_FIELDS

__all__ = [
    "AccountWorkspace",
    "WorkspaceResult",
    "EDITABLE_FIELDS"
]
