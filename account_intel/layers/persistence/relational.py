"""
Relational Account Store - SQLAlchemy Core

Normalized layout: one ``accounts`` row holding the scalar fields and the
map-shaped state (business areas, MEDDICC, metrics) as JSON, plus one
table per owned collection.

A save is NOT one transaction. The account row is written first, then
every new or changed stakeholder and gap, and every new note and
transcript, each in its own call. A failing call is logged and collected;
the rest still land.
"""

import logging
import os
from datetime import datetime, timezone
from typing import Any, Callable, Optional

from sqlalchemy import (
    Column,
    DateTime,
    Integer,
    JSON,
    MetaData,
    String,
    Table,
    Text,
    create_engine,
    delete,
    insert,
    select,
    update,
)
from sqlalchemy.engine import Engine
from sqlalchemy.pool import StaticPool

from ...core.entities import (
    Account,
    BusinessArea,
    InformationGap,
    Metric,
    Note,
    Stakeholder,
    TranscriptRecord,
)
from ...core.exceptions import StorageError
from ...core.vocabulary import GapStatus
from .ports import AccountRepository, BatchResult


logger = logging.getLogger(__name__)


metadata = MetaData()

accounts_table = Table(
    "accounts", metadata,
    Column("id", String(64), primary_key=True),
    Column("owner_id", String(64), nullable=True, index=True),
    Column("name", String(255), nullable=False),
    Column("url", String(512)),
    Column("stage", String(32)),
    Column("vertical", String(64)),
    Column("ownership_type", String(32)),
    Column("business_areas", JSON),
    Column("meddicc", JSON),
    Column("metrics", JSON),
    Column("created_at", DateTime),
    Column("last_updated", DateTime),
)

stakeholders_table = Table(
    "stakeholders", metadata,
    Column("id", String(64), primary_key=True),
    Column("account_id", String(64), nullable=False, index=True),
    Column("position", Integer, nullable=False),
    Column("name", String(255), nullable=False),
    Column("title", String(255)),
    Column("department", String(255)),
    Column("role", String(64)),
    Column("notes", Text),
    Column("added_at", DateTime),
    Column("last_updated", DateTime),
)

gaps_table = Table(
    "information_gaps", metadata,
    Column("id", String(64), primary_key=True),
    Column("account_id", String(64), nullable=False, index=True),
    Column("position", Integer, nullable=False),
    Column("question", Text, nullable=False),
    Column("category", String(64)),
    Column("meddicc_category", String(64)),
    Column("status", String(16)),
    Column("resolution", Text),
    Column("added_at", DateTime),
    Column("resolved_at", DateTime),
)

notes_table = Table(
    "notes", metadata,
    Column("id", String(64), primary_key=True),
    Column("account_id", String(64), nullable=False, index=True),
    Column("position", Integer, nullable=False),
    Column("category", String(64)),
    Column("content", Text),
    Column("added_at", DateTime),
)

transcripts_table = Table(
    "transcripts", metadata,
    Column("id", String(64), primary_key=True),
    Column("account_id", String(64), nullable=False, index=True),
    Column("position", Integer, nullable=False),
    Column("text", Text),
    Column("date", String(32)),
    Column("call_type", String(32)),
    Column("attendees", JSON),
    Column("summary", Text),
    Column("source", String(32)),
    Column("added_at", DateTime),
)

CHILD_TABLES = (stakeholders_table, gaps_table, notes_table, transcripts_table)


def _naive(value: Optional[datetime]) -> Optional[datetime]:
    # stored as naive UTC; SQLite DateTime columns do not keep tzinfo
    if value is not None and value.tzinfo is not None:
        return value.astimezone(timezone.utc).replace(tzinfo=None)
    return value


# =============================================================================
# Row mapping
# =============================================================================

def _account_row(account: Account, owner_id: Optional[str]) -> dict:
    return {
        "id": account.id,
        "owner_id": owner_id,
        "name": account.name,
        "url": account.url,
        "stage": account.stage,
        "vertical": account.vertical,
        "ownership_type": account.ownership_type,
        "business_areas": {k: v.to_dict() for k, v in account.business_areas.items()},
        "meddicc": dict(account.meddicc),
        "metrics": {k: v.to_dict() for k, v in account.metrics.items()},
        "created_at": _naive(account.created_at),
        "last_updated": _naive(account.last_updated),
    }


def _stakeholder_row(s: Stakeholder, account_id: str, position: int) -> dict:
    return {
        "id": s.id,
        "account_id": account_id,
        "position": position,
        "name": s.name,
        "title": s.title,
        "department": s.department,
        "role": s.role,
        "notes": s.notes,
        "added_at": _naive(s.added_at),
        "last_updated": _naive(s.last_updated),
    }


def _gap_row(g: InformationGap, account_id: str, position: int) -> dict:
    return {
        "id": g.id,
        "account_id": account_id,
        "position": position,
        "question": g.question,
        "category": g.category,
        "meddicc_category": g.meddicc_category,
        "status": GapStatus(g.status).value,
        "resolution": g.resolution,
        "added_at": _naive(g.added_at),
        "resolved_at": _naive(g.resolved_at),
    }


def _note_row(n: Note, account_id: str, position: int) -> dict:
    return {
        "id": n.id,
        "account_id": account_id,
        "position": position,
        "category": n.category,
        "content": n.content,
        "added_at": _naive(n.added_at),
    }


def _transcript_row(t: TranscriptRecord, account_id: str, position: int) -> dict:
    return {
        "id": t.id,
        "account_id": account_id,
        "position": position,
        "text": t.text,
        "date": t.date,
        "call_type": t.call_type,
        "attendees": list(t.attendees),
        "summary": t.summary,
        "source": t.source,
        "added_at": _naive(t.added_at),
    }


def _to_stakeholder(row: dict) -> Stakeholder:
    return Stakeholder(
        id=row["id"],
        name=row["name"],
        title=row["title"],
        department=row["department"],
        role=row["role"] or "Unknown",
        notes=row["notes"],
        added_at=row["added_at"] or datetime.now(),
        last_updated=row["last_updated"],
    )


def _to_gap(row: dict) -> InformationGap:
    return InformationGap(
        id=row["id"],
        question=row["question"],
        category=row["category"] or "business",
        meddicc_category=row["meddicc_category"],
        status=GapStatus(row["status"] or GapStatus.OPEN.value),
        resolution=row["resolution"],
        added_at=row["added_at"] or datetime.now(),
        resolved_at=row["resolved_at"],
    )


def _to_note(row: dict) -> Note:
    return Note(
        id=row["id"],
        category=row["category"] or "General",
        content=row["content"] or "",
        added_at=row["added_at"] or datetime.now(),
    )


def _to_transcript(row: dict) -> TranscriptRecord:
    return TranscriptRecord(
        id=row["id"],
        text=row["text"] or "",
        date=row["date"],
        call_type=row["call_type"] or "other",
        attendees=list(row["attendees"] or []),
        summary=row["summary"],
        source=row["source"] or "manual",
        added_at=row["added_at"] or datetime.now(),
    )


# (table, collection attribute, to-row, from-row, update existing rows?)
_COLLECTIONS: tuple = (
    (stakeholders_table, "stakeholders", _stakeholder_row, _to_stakeholder, True),
    (gaps_table, "information_gaps", _gap_row, _to_gap, True),
    (notes_table, "notes", _note_row, _to_note, False),
    (transcripts_table, "transcripts", _transcript_row, _to_transcript, False),
)


class RelationalAccountStore(AccountRepository):
    """
    Account storage on a relational database via SQLAlchemy Core.

    Scoped to one owner when ``owner_id`` is set.
    """

    def __init__(
        self,
        database_url: Optional[str] = None,
        engine: Optional[Engine] = None,
        owner_id: Optional[str] = None,
        echo: bool = False
    ):
        if engine is None:
            if not database_url:
                raise StorageError("RelationalAccountStore needs a database_url or an engine")
            engine = self._create_engine(database_url, echo)
        self._engine = engine
        self._owner_id = owner_id

    @staticmethod
    def _create_engine(database_url: str, echo: bool) -> Engine:
        if database_url.startswith("sqlite"):
            kwargs: dict[str, Any] = {"connect_args": {"check_same_thread": False}}
            if ":memory:" in database_url or database_url in ("sqlite://", "sqlite:///"):
                # one shared connection, otherwise each checkout sees an empty db
                kwargs["poolclass"] = StaticPool
            return create_engine(database_url, echo=echo, **kwargs)
        return create_engine(database_url, echo=echo, pool_pre_ping=True)

    @classmethod
    def from_settings(cls, config=None, owner_id: Optional[str] = None) -> "RelationalAccountStore":
        from ...config.settings import get_settings
        settings = get_settings()
        config = config or settings.storage
        return cls(
            database_url=config.database_url,
            owner_id=owner_id or settings.default_owner_id,
            echo=config.echo_sql,
        )

    @property
    def engine(self) -> Engine:
        return self._engine

    def init(self) -> None:
        """Create the tables if they do not exist."""
        database = self._engine.url.database
        if self._engine.url.get_backend_name() == "sqlite" and database and database != ":memory:":
            directory = os.path.dirname(database)
            if directory:
                os.makedirs(directory, exist_ok=True)
        try:
            metadata.create_all(self._engine)
        except Exception as e:
            raise StorageError(f"Could not initialize relational store: {e}") from e

    # -------------------------------------------------------------------------
    # Single calls
    # -------------------------------------------------------------------------

    def _upsert(self, table: Table, row: dict, exists: bool) -> None:
        """Write one row in its own transaction."""
        with self._engine.begin() as conn:
            if exists:
                values = {k: v for k, v in row.items() if k != "id"}
                conn.execute(update(table).where(table.c.id == row["id"]).values(**values))
            else:
                conn.execute(insert(table).values(**row))

    def _run(self, result: BatchResult, label: str, call: Callable[[], None]) -> None:
        try:
            call()
            result.record(label)
        except Exception as e:
            logger.warning("Storage call failed for %s: %s", label, e)
            result.fail(label, e)

    def _read(self, result: BatchResult, label: str, call: Callable[[], Any]) -> Any:
        """Run a lookup; on failure record it and return None."""
        try:
            return call()
        except Exception as e:
            logger.warning("Storage read failed for %s: %s", label, e)
            result.fail(label, e)
            return None

    def _account_exists(self, account_id: str) -> bool:
        with self._engine.connect() as conn:
            return conn.execute(
                select(accounts_table.c.id).where(accounts_table.c.id == account_id)
            ).first() is not None

    def _existing_rows(self, table: Table, account_id: str) -> dict:
        with self._engine.connect() as conn:
            rows = conn.execute(
                select(table).where(table.c.account_id == account_id)
            ).mappings().all()
        return {row["id"]: dict(row) for row in rows}

    def _account_query(self, account_id: str):
        query = select(accounts_table).where(accounts_table.c.id == account_id)
        if self._owner_id is not None:
            query = query.where(accounts_table.c.owner_id == self._owner_id)
        return query

    # -------------------------------------------------------------------------
    # Repository contract
    # -------------------------------------------------------------------------

    def load(self, account_id: str) -> Optional[Account]:
        with self._engine.connect() as conn:
            row = conn.execute(self._account_query(account_id)).mappings().first()
            if row is None:
                return None

            collections: dict[str, list] = {}
            for table, attr, _, from_row, _ in _COLLECTIONS:
                child_rows = conn.execute(
                    select(table)
                    .where(table.c.account_id == account_id)
                    .order_by(table.c.position)
                ).mappings().all()
                collections[attr] = [from_row(dict(r)) for r in child_rows]

        return Account(
            id=row["id"],
            name=row["name"],
            url=row["url"],
            stage=row["stage"] or "qualifying",
            vertical=row["vertical"],
            ownership_type=row["ownership_type"],
            business_areas={
                k: BusinessArea.from_dict(v) for k, v in (row["business_areas"] or {}).items()
            },
            meddicc=dict(row["meddicc"] or {}),
            metrics={k: Metric.from_dict(v) for k, v in (row["metrics"] or {}).items()},
            created_at=row["created_at"] or datetime.now(),
            last_updated=row["last_updated"],
            **collections,
        )

    def save(self, account: Account) -> BatchResult:
        """
        Persist account fields, then each new or changed owned entity.

        Notes and transcripts are append-only: existing rows are left alone.
        A failed lookup is reported like a failed write; a collection whose
        stored rows cannot be read is skipped.
        """
        result = BatchResult()

        exists = self._read(result, "account:read", lambda: self._account_exists(account.id))
        if exists is None:
            # insert vs update cannot be decided
            logger.warning("Saved account %s: %s", account.id, result.summary())
            return result

        self._run(
            result,
            f"account:{account.id}",
            lambda: self._upsert(accounts_table, _account_row(account, self._owner_id), exists),
        )
        if not exists and result.has_errors:
            # owned rows would be orphans
            return result

        for table, attr, to_row, _, updatable in _COLLECTIONS:
            stored = self._read(
                result, f"{attr}:read", lambda t=table: self._existing_rows(t, account.id)
            )
            if stored is None:
                continue
            for position, entity in enumerate(getattr(account, attr)):
                row = to_row(entity, account.id, position)
                previous = stored.get(entity.id)
                if previous is not None and (not updatable or previous == row):
                    continue
                label = f"{attr}:{entity.id}"
                self._run(
                    result,
                    label,
                    lambda t=table, r=row, e=previous is not None: self._upsert(t, r, e),
                )

        if result.has_errors:
            logger.warning("Saved account %s: %s", account.id, result.summary())
        else:
            logger.debug("Saved account %s: %s", account.id, result.summary())
        return result

    def delete(self, account_id: str) -> BatchResult:
        result = BatchResult()
        for table in CHILD_TABLES:
            def _delete_children(t=table):
                with self._engine.begin() as conn:
                    conn.execute(delete(t).where(t.c.account_id == account_id))
            self._run(result, f"{table.name}:{account_id}", _delete_children)

        def _delete_account():
            with self._engine.begin() as conn:
                conn.execute(delete(accounts_table).where(accounts_table.c.id == account_id))
        self._run(result, f"account:{account_id}", _delete_account)
        return result

    def list_accounts(self) -> list:
        query = select(accounts_table.c.id).order_by(accounts_table.c.created_at)
        if self._owner_id is not None:
            query = query.where(accounts_table.c.owner_id == self._owner_id)
        with self._engine.connect() as conn:
            ids = [row[0] for row in conn.execute(query)]
        accounts = [self.load(account_id) for account_id in ids]
        return [a for a in accounts if a is not None]

    def clear(self) -> None:
        with self._engine.begin() as conn:
            for table in CHILD_TABLES:
                conn.execute(delete(table))
            conn.execute(delete(accounts_table))
