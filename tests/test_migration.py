"""
Tests for best-effort migration from the key-value store into the
relational store.
"""

import pytest

from account_intel.core.entities import Account, Note, Stakeholder, TranscriptRecord
from account_intel.layers.persistence import (
    KeyValueAccountStore,
    RelationalAccountStore,
    migrate_accounts,
    migration_summary,
)
from account_intel.layers.persistence.ports import BatchResult


@pytest.fixture
def source(account, ids, now):
    account.notes.append(Note(id="n1", content="Budget is $2M", added_at=now))
    account.transcripts.append(TranscriptRecord(id="t1", text="call", added_at=now))

    other = Account.create("Beacon Senior Living", id_generator=ids)
    other.stakeholders.append(Stakeholder(id="stk-9", name="Lee"))

    store = KeyValueAccountStore()
    store.init()
    store.save(account)
    store.save(other)
    return store


@pytest.fixture
def target():
    store = RelationalAccountStore("sqlite:///:memory:")
    store.init()
    return store


class TestMigrationSummary:

    def test_counts(self, source):
        summary = migration_summary(source)
        assert summary["accounts"] == 2
        assert summary["stakeholders"] == 2
        assert summary["information_gaps"] == 1
        assert summary["notes"] == 1
        assert summary["transcripts"] == 1
        assert summary["total_items"] == 7


class TestMigrateAccounts:

    def test_copies_everything(self, source, target):
        progress = []
        report = migrate_accounts(source, target, on_progress=progress.append)

        assert report.success
        assert report.to_dict() == {
            "accounts": 2,
            "stakeholders": 2,
            "informationGaps": 1,
            "notes": 1,
            "transcripts": 1,
            "errors": [],
        }
        assert [p.current for p in progress] == [1, 2]
        assert progress[-1].total == 2

        for original in source.list_accounts():
            assert target.load(original.id).to_dict() == original.to_dict()

    def test_continues_after_failed_account(self, source, target, monkeypatch):
        original_save = target.save

        def flaky_save(account):
            if account.name == "Harbor Residential":
                raise RuntimeError("connection reset")
            return original_save(account)

        monkeypatch.setattr(target, "save", flaky_save)
        report = migrate_accounts(source, target, clear_source=True)

        assert report.accounts == 1
        assert len(report.errors) == 1
        assert "Harbor Residential" in report.errors[0]
        assert [a.name for a in target.list_accounts()] == ["Beacon Senior Living"]
        # source kept because something failed
        assert len(source.list_accounts()) == 2

    def test_sub_entity_errors_recorded(self, source):
        class PartialTarget(KeyValueAccountStore):
            def save(self, account):
                result = BatchResult()
                result.record(f"account:{account.id}")
                result.fail("stakeholders:x", RuntimeError("bad row"))
                return result

        report = migrate_accounts(source, PartialTarget())
        assert report.accounts == 2
        assert len(report.errors) == 2
        assert not report.success

    def test_clear_source_on_success(self, source, target):
        migrate_accounts(source, target, clear_source=True)
        assert source.list_accounts() == []
        assert len(target.list_accounts()) == 2
