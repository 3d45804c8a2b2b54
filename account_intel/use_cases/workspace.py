"""
Use Case: Account Workspace

The seller's working set of accounts and the one currently selected.
Every edit follows the same path:

1. Resolve the account from the working set
2. Compute the new aggregate with a pure reconciler or the action applier
3. Persist through the repository (best effort, errors reported)
4. Replace the account in the working set

Sources of edits:
- Transcript analysis (from the analyzer or a pre-computed payload)
- Free-text manual notes (rule-based command interpreter)
- AI-assistant action batches
- Direct field edits and manual stakeholder entry
"""

import logging
from dataclasses import dataclass, field, replace
from datetime import datetime
from typing import Any, Callable, Iterable, Optional

from ..core.entities import Account, IdGenerator, generate_id
from ..core.exceptions import AccountNotFoundError, AnalysisError
from ..core.vocabulary import DEFAULT_STAGE
from ..layers.orchestration.actions import Message, MessageLevel
from ..layers.orchestration.applier import apply_actions
from ..layers.orchestration.commands import interpret_command
from ..layers.persistence.ports import AccountRepository, BatchResult
from ..layers.reconciliation.analysis import merge_analysis
from ..layers.reconciliation.stakeholders import reconcile_stakeholders


logger = logging.getLogger(__name__)

EDITABLE_FIELDS = ("name", "url", "stage", "vertical", "ownership_type")


@dataclass
class WorkspaceResult:
    """Outcome of one workspace edit."""
    account: Optional[Account]
    messages: list = field(default_factory=list)
    persistence: BatchResult = field(default_factory=BatchResult)
    deleted: bool = False

    @property
    def changed(self) -> bool:
        return bool(self.persistence.applied) or self.deleted


class AccountWorkspace:
    """
    Holds the accounts collection and the selected account id.

    Load with ``open()`` before use.
    """

    def __init__(
        self,
        repository: AccountRepository,
        analyzer=None,
        id_generator: IdGenerator = generate_id,
        clock: Callable[[], datetime] = datetime.now
    ):
        self._repository = repository
        self._analyzer = analyzer
        self._id_generator = id_generator
        self._clock = clock

        self._accounts: dict[str, Account] = {}
        self.selected_account_id: Optional[str] = None

    # -------------------------------------------------------------------------
    # Collection
    # -------------------------------------------------------------------------

    def open(self) -> "AccountWorkspace":
        """Initialize the repository and load every account."""
        self._repository.init()
        self._accounts = {a.id: a for a in self._repository.list_accounts()}
        logger.info("Workspace opened with %d accounts", len(self._accounts))
        return self

    @property
    def accounts(self) -> list:
        return list(self._accounts.values())

    @property
    def selected_account(self) -> Optional[Account]:
        if self.selected_account_id is None:
            return None
        return self._accounts.get(self.selected_account_id)

    def get(self, account_id: str) -> Account:
        account = self._accounts.get(account_id)
        if account is None:
            raise AccountNotFoundError(account_id)
        return account

    def select(self, account_id: Optional[str]) -> Optional[Account]:
        """Select an account (None clears the selection)."""
        if account_id is None:
            self.selected_account_id = None
            return None
        account = self.get(account_id)
        self.selected_account_id = account_id
        return account

    def _commit(self, account: Account) -> BatchResult:
        result = self._repository.save(account)
        if result.has_errors:
            logger.warning("Account %s saved %s", account.id, result.summary().lower())
        self._accounts[account.id] = account
        return result

    # -------------------------------------------------------------------------
    # Lifecycle
    # -------------------------------------------------------------------------

    def create_account(
        self,
        name: str,
        url: Optional[str] = None,
        stage: str = DEFAULT_STAGE,
        vertical: Optional[str] = None,
        ownership_type: Optional[str] = None
    ) -> WorkspaceResult:
        """Create, persist and select a new account."""
        if not name or not name.strip():
            raise ValueError("Account name is required")

        account = Account.create(
            name.strip(),
            url=url,
            stage=stage,
            vertical=vertical,
            ownership_type=ownership_type,
            id_generator=self._id_generator,
        )
        account.created_at = self._clock()
        account.last_updated = account.created_at

        persistence = self._commit(account)
        self.selected_account_id = account.id
        return WorkspaceResult(
            account=account,
            messages=[Message.success(f"Created account {account.name}")],
            persistence=persistence,
        )

    def delete_account(self, account_id: str) -> WorkspaceResult:
        """Remove the account everywhere and drop it from the selection."""
        account = self.get(account_id)
        persistence = self._repository.delete(account_id)
        self._accounts.pop(account_id, None)
        if self.selected_account_id == account_id:
            self.selected_account_id = None
        logger.info("Deleted account %s", account_id)
        return WorkspaceResult(
            account=None,
            messages=[Message.success(f"Deleted account {account.name}")],
            persistence=persistence,
            deleted=True,
        )

    def update_account(self, account_id: str, **changes: Any) -> WorkspaceResult:
        """Direct edit of scalar account fields."""
        unknown = set(changes) - set(EDITABLE_FIELDS)
        if unknown:
            raise ValueError(f"Fields not editable: {', '.join(sorted(unknown))}")

        account = self.get(account_id)
        updated = replace(account, last_updated=self._clock(), **changes)
        return WorkspaceResult(account=updated, persistence=self._commit(updated))

    # -------------------------------------------------------------------------
    # Observation streams
    # -------------------------------------------------------------------------

    def ingest_analysis(
        self,
        account_id: str,
        analysis: Any,
        transcript_text: Optional[str] = None,
        source: str = "manual",
        transcript_meta: Optional[dict] = None
    ) -> WorkspaceResult:
        """Fold a transcript analysis payload into the account."""
        account = self.get(account_id)
        merged = merge_analysis(
            account,
            analysis,
            id_generator=self._id_generator,
            transcript_text=transcript_text,
            source=source,
            transcript_meta=transcript_meta,
            now=self._clock(),
        )
        return WorkspaceResult(account=merged, persistence=self._commit(merged))

    def add_transcript(
        self,
        account_id: str,
        transcript: str,
        source: str = "manual",
        transcript_meta: Optional[dict] = None
    ) -> WorkspaceResult:
        """Analyze a transcript with the configured analyzer, then ingest it."""
        if self._analyzer is None:
            raise AnalysisError("No transcript analyzer configured")

        account = self.get(account_id)
        analysis = self._analyzer.analyze(transcript, account)
        return self.ingest_analysis(
            account_id,
            analysis,
            transcript_text=transcript,
            source=source,
            transcript_meta=transcript_meta,
        )

    def add_stakeholder(self, account_id: str, **fields: Any) -> WorkspaceResult:
        """Manual stakeholder entry, resolved by name like any other."""
        if not str(fields.get("name") or "").strip():
            return WorkspaceResult(
                account=self.get(account_id),
                messages=[Message.warning("Stakeholder name is required")],
            )

        account = self.get(account_id)
        now = self._clock()
        updated = replace(
            account,
            stakeholders=reconcile_stakeholders(
                account.stakeholders, [fields], self._id_generator, now=now
            ),
            last_updated=now,
        )
        return WorkspaceResult(
            account=updated,
            messages=[Message.success(f"Saved stakeholder {fields['name']}")],
            persistence=self._commit(updated),
        )

    def handle_manual_note(self, account_id: str, text: Optional[str]) -> WorkspaceResult:
        """Interpret a free-text note and apply the resulting actions."""
        account = self.get(account_id)
        if not text or not text.strip():
            return WorkspaceResult(account=account, messages=[Message.warning("Note is empty")])
        return self.apply_assistant_actions(account_id, interpret_command(text))

    def apply_assistant_actions(self, account_id: str, actions: Iterable[Any]) -> WorkspaceResult:
        """Apply an action batch; a delete removes the account from the workspace."""
        account = self.get(account_id)
        result = apply_actions(actions, account, self._id_generator, now=self._clock())

        if result.deleted:
            deletion = self.delete_account(account_id)
            return WorkspaceResult(
                account=None,
                messages=result.messages,
                persistence=deletion.persistence,
                deleted=True,
            )

        if not any(m.level == MessageLevel.SUCCESS for m in result.messages):
            # nothing applied
            return WorkspaceResult(account=account, messages=result.messages)

        return WorkspaceResult(
            account=result.account,
            messages=result.messages,
            persistence=self._commit(result.account),
        )
