"""
Errors raised at the edges of the engine.

The reconcilers and the action applier never raise for well-formed
input; these are for storage adapters and use cases.
"""


class AccountIntelError(Exception):
    """Base class for account intelligence errors."""


class AccountNotFoundError(AccountIntelError):
    """Raised when an account id does not resolve in a repository."""

    def __init__(self, account_id: str):
        super().__init__(f"Account not found: {account_id}")
        self.account_id = account_id


class StorageError(AccountIntelError):
    """Raised when a storage backend cannot be reached or initialized."""


class AnalysisError(AccountIntelError):
    """Raised when transcript analysis fails or returns nothing usable."""
