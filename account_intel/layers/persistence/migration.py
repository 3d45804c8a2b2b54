"""
Store Migration

Best-effort copy of every account from one repository into another,
typically the key-value store into the relational one. A failed account
or sub-entity is recorded and the migration moves on.
"""

import logging
from dataclasses import dataclass, field
from typing import Callable, Optional

from .ports import AccountRepository


logger = logging.getLogger(__name__)


@dataclass
class MigrationProgress:
    current: int
    total: int
    item: str


@dataclass
class MigrationReport:
    """Counts of migrated entities plus every error encountered."""
    accounts: int = 0
    stakeholders: int = 0
    information_gaps: int = 0
    notes: int = 0
    transcripts: int = 0
    errors: list = field(default_factory=list)

    @property
    def success(self) -> bool:
        return not self.errors

    def to_dict(self) -> dict:
        return {
            "accounts": self.accounts,
            "stakeholders": self.stakeholders,
            "informationGaps": self.information_gaps,
            "notes": self.notes,
            "transcripts": self.transcripts,
            "errors": list(self.errors),
        }


def migration_summary(source: AccountRepository) -> dict:
    """Preview what a migration would move."""
    accounts = source.list_accounts()
    summary = {
        "accounts": len(accounts),
        "stakeholders": sum(len(a.stakeholders) for a in accounts),
        "information_gaps": sum(len(a.information_gaps) for a in accounts),
        "notes": sum(len(a.notes) for a in accounts),
        "transcripts": sum(len(a.transcripts) for a in accounts),
    }
    summary["total_items"] = sum(summary.values())
    return summary


def migrate_accounts(
    source: AccountRepository,
    target: AccountRepository,
    on_progress: Optional[Callable[[MigrationProgress], None]] = None,
    clear_source: bool = False
) -> MigrationReport:
    """
    Copy all accounts from ``source`` to ``target``.

    The source is cleared only when ``clear_source`` is set and nothing
    failed.
    """
    report = MigrationReport()
    accounts = source.list_accounts()
    total = len(accounts)

    for index, account in enumerate(accounts, start=1):
        try:
            result = target.save(account)
        except Exception as e:
            report.errors.append(f'Failed to migrate account "{account.name}": {e}')
            logger.warning("Migration of account %s failed: %s", account.id, e)
            continue

        for label in result.applied:
            kind = label.split(":", 1)[0]
            if kind == "account":
                report.accounts += 1
            elif hasattr(report, kind):
                setattr(report, kind, getattr(report, kind) + 1)
        for error in result.errors:
            report.errors.append(f'Account "{account.name}": {error}')

        if on_progress:
            on_progress(MigrationProgress(current=index, total=total, item=account.name))

    if clear_source and report.success:
        source.clear()

    logger.info(
        "Migrated %d/%d accounts with %d errors",
        report.accounts, total, len(report.errors)
    )
    return report
