"""
Storage Port

The reconciliation core is storage-agnostic; each backend implements
this small repository contract. Adapters differ in atomicity: a
key-value store writes the whole aggregate at once, a relational store
issues one call per sub-entity with no cross-call transaction. Either
way the outcome is reported as a BatchResult: what was applied and
which calls failed. Partial failure is a result, not an exception.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Optional

from ...core.entities import Account
from ...core.exceptions import AccountNotFoundError


@dataclass
class BatchResult:
    """Best-effort outcome of a multi-call persistence operation."""
    applied: list = field(default_factory=list)
    errors: list = field(default_factory=list)

    @property
    def has_errors(self) -> bool:
        return bool(self.errors)

    @property
    def succeeded(self) -> bool:
        """True when at least one call landed or nothing needed writing."""
        return bool(self.applied) or not self.errors

    def record(self, label: str) -> None:
        self.applied.append(label)

    def fail(self, label: str, error: Exception) -> None:
        self.errors.append(f"{label}: {error}")

    def extend(self, other: "BatchResult") -> None:
        self.applied.extend(other.applied)
        self.errors.extend(other.errors)

    def summary(self) -> str:
        if not self.errors:
            return f"Succeeded ({len(self.applied)} applied)"
        return f"Succeeded with {len(self.errors)} errors ({len(self.applied)} applied)"


class AccountRepository(ABC):
    """
    Abstract interface for account storage.

    Lifecycle: init -> load/save/delete/list -> clear.
    """

    @abstractmethod
    def init(self) -> None:
        """Prepare the backend (connect, create tables)."""
        pass

    @abstractmethod
    def load(self, account_id: str) -> Optional[Account]:
        """Load an account, or None if it does not exist."""
        pass

    @abstractmethod
    def save(self, account: Account) -> BatchResult:
        """Persist an account (insert or update)."""
        pass

    @abstractmethod
    def delete(self, account_id: str) -> BatchResult:
        """Remove an account and everything it owns."""
        pass

    @abstractmethod
    def list_accounts(self) -> list:
        """All stored accounts."""
        pass

    @abstractmethod
    def clear(self) -> None:
        """Remove every account."""
        pass

    def get(self, account_id: str) -> Account:
        """Load an account or raise AccountNotFoundError."""
        account = self.load(account_id)
        if account is None:
            raise AccountNotFoundError(account_id)
        return account
