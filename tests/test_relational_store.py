"""
Tests for the relational account store on in-memory SQLite, including
best-effort partial failure.
"""

from datetime import datetime, timedelta, timezone

import pytest
from sqlalchemy import text

from account_intel.core.entities import Account, Note, Stakeholder
from account_intel.core.exceptions import StorageError
from account_intel.layers.orchestration import apply_actions
from account_intel.layers.persistence import RelationalAccountStore
from account_intel.layers.reconciliation import merge_analysis


@pytest.fixture
def store():
    store = RelationalAccountStore("sqlite:///:memory:")
    store.init()
    return store


class TestRoundTrip:

    def test_save_and_load(self, store, account, analysis_payload, ids, now):
        account = merge_analysis(account, analysis_payload, ids, transcript_text="call", now=now)
        account = apply_actions([{"type": "add_note", "content": "Budget is $2M", "category": "Budget"}],
                                account, ids, now=now).account

        result = store.save(account)
        assert result.errors == []

        loaded = store.load(account.id)
        assert loaded.to_dict() == account.to_dict()

    def test_one_call_per_entity(self, store, account):
        result = store.save(account)
        assert result.applied == [
            f"account:{account.id}",
            "stakeholders:stk-1",
            "information_gaps:gap-1",
        ]

    def test_unchanged_entities_not_rewritten(self, store, account):
        store.save(account)
        result = store.save(account)
        assert result.applied == [f"account:{account.id}"]

    def test_changed_stakeholder_updated(self, store, account):
        store.save(account)
        account.stakeholders[0].title = "Director"
        result = store.save(account)
        assert "stakeholders:stk-1" in result.applied
        assert store.load(account.id).stakeholders[0].title == "Director"

    def test_missing_account(self, store):
        assert store.load("missing") is None

    def test_needs_url_or_engine(self):
        with pytest.raises(StorageError):
            RelationalAccountStore()


class TestPartialFailure:

    def test_failed_insert_does_not_stop_the_rest(self, store, account, monkeypatch):
        account.stakeholders.extend([
            Stakeholder(id="stk-2", name="Bob"),
            Stakeholder(id="stk-3", name="Carol"),
        ])
        original = store._upsert

        def flaky(table, row, exists):
            if row.get("name") == "Bob":
                raise RuntimeError("network timeout")
            return original(table, row, exists)

        monkeypatch.setattr(store, "_upsert", flaky)
        result = store.save(account)

        assert len(result.errors) == 1
        assert "stakeholders:stk-2" in result.errors[0]
        assert result.summary().startswith("Succeeded with 1 errors")

        names = [s.name for s in store.load(account.id).stakeholders]
        assert names == ["John Doe", "Carol"]

    def test_retry_after_failure_persists_remainder(self, store, account, monkeypatch):
        account.stakeholders.append(Stakeholder(id="stk-2", name="Bob"))
        original = store._upsert

        def flaky(table, row, exists):
            if row.get("name") == "Bob":
                raise RuntimeError("down")
            return original(table, row, exists)

        monkeypatch.setattr(store, "_upsert", flaky)
        store.save(account)
        monkeypatch.setattr(store, "_upsert", original)

        result = store.save(account)
        assert result.applied == [f"account:{account.id}", "stakeholders:stk-2"]

    def test_failed_account_row_skips_children(self, store, account, monkeypatch):
        def fail(table, row, exists):
            raise RuntimeError("db offline")

        monkeypatch.setattr(store, "_upsert", fail)
        result = store.save(account)
        assert result.applied == []
        assert len(result.errors) == 1

    def test_unreadable_collection_is_skipped(self, store, account):
        store.save(account)
        with store.engine.begin() as conn:
            conn.execute(text("DROP TABLE stakeholders"))
        account.stakeholders.append(Stakeholder(id="stk-2", name="Bob"))
        account.notes.append(Note(id="note-1", content="Budget approved"))

        result = store.save(account)

        assert result.has_errors
        assert [e.split(":")[0] for e in result.errors] == ["stakeholders"]
        assert "stakeholders:read" in result.errors[0]
        assert "notes:note-1" in result.applied

    def test_failed_existence_check_is_collected(self, store, account, monkeypatch):
        def offline(account_id):
            raise RuntimeError("connection reset")

        monkeypatch.setattr(store, "_account_exists", offline)
        result = store.save(account)
        assert result.applied == []
        assert result.errors == ["account:read: connection reset"]


class TestTimestamps:

    def test_aware_timestamps_stored_as_utc(self, store, account):
        account.created_at = datetime(2025, 3, 14, 11, 30, tzinfo=timezone(timedelta(hours=2)))
        store.save(account)
        assert store.load(account.id).created_at == datetime(2025, 3, 14, 9, 30)


class TestLifecycle:

    def test_delete_removes_children(self, store, account):
        store.save(account)
        result = store.delete(account.id)
        assert not result.has_errors
        assert store.load(account.id) is None
        assert store.list_accounts() == []

    def test_owner_scoping(self, account, ids):
        shared = RelationalAccountStore("sqlite:///:memory:", owner_id="alice")
        shared.init()
        shared.save(account)
        bob = RelationalAccountStore(engine=shared.engine, owner_id="bob")
        assert bob.load(account.id) is None
        assert bob.list_accounts() == []
        assert [a.id for a in shared.list_accounts()] == [account.id]

    def test_clear(self, store, account, ids):
        store.save(account)
        store.save(Account.create("Other", id_generator=ids))
        store.clear()
        assert store.list_accounts() == []
