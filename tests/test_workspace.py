"""
Tests for the account workspace use case.
"""

import pytest

from account_intel.core.exceptions import AccountNotFoundError, AnalysisError
from account_intel.layers.intelligence import AnalysisPayload
from account_intel.layers.orchestration import MessageLevel
from account_intel.layers.persistence import KeyValueAccountStore
from account_intel.use_cases import AccountWorkspace


class StubAnalyzer:
    """Returns a canned payload and remembers what it was asked."""

    def __init__(self, payload):
        self.payload = payload
        self.calls = []

    def analyze(self, transcript, account=None):
        self.calls.append((transcript, account.id if account else None))
        return AnalysisPayload.model_validate(self.payload)


@pytest.fixture
def store():
    return KeyValueAccountStore()


@pytest.fixture
def analyzer(analysis_payload):
    return StubAnalyzer(analysis_payload)


@pytest.fixture
def workspace(store, analyzer, ids, now):
    return AccountWorkspace(store, analyzer=analyzer, id_generator=ids, clock=lambda: now).open()


@pytest.fixture
def account_id(workspace):
    return workspace.create_account("Harbor Residential", vertical="multifamily").account.id


class TestCollection:

    def test_create_selects_and_persists(self, workspace, store, account_id, now):
        assert workspace.selected_account_id == account_id
        assert workspace.selected_account.name == "Harbor Residential"
        assert store.load(account_id).created_at == now

    def test_blank_name_rejected(self, workspace):
        with pytest.raises(ValueError):
            workspace.create_account("   ")

    def test_open_loads_existing(self, store, account, ids):
        store.save(account)
        workspace = AccountWorkspace(store, id_generator=ids).open()
        assert [a.id for a in workspace.accounts] == [account.id]

    def test_select_unknown_raises(self, workspace):
        with pytest.raises(AccountNotFoundError):
            workspace.select("missing")

    def test_select_none_clears(self, workspace, account_id):
        workspace.select(None)
        assert workspace.selected_account is None

    def test_update_account(self, workspace, store, account_id):
        workspace.update_account(account_id, stage="proposal", name="Harbor Living")
        assert store.load(account_id).stage == "proposal"
        assert workspace.get(account_id).name == "Harbor Living"

    def test_update_rejects_unknown_fields(self, workspace, account_id):
        with pytest.raises(ValueError):
            workspace.update_account(account_id, stakeholders=[])


class TestObservationStreams:

    def test_ingest_analysis(self, workspace, store, account_id, analysis_payload):
        result = workspace.ingest_analysis(account_id, analysis_payload, transcript_text="call")
        assert not result.persistence.has_errors
        stored = store.load(account_id)
        assert [s.name for s in stored.stakeholders] == ["Dana Lee"]
        assert len(stored.transcripts) == 1

    def test_add_transcript_uses_analyzer(self, workspace, analyzer, account_id):
        result = workspace.add_transcript(account_id, "Dana: we use Excel")
        assert analyzer.calls == [("Dana: we use Excel", account_id)]
        assert result.account.transcripts[0].text == "Dana: we use Excel"
        assert result.account.business_areas["budgeting"].current_state

    def test_add_transcript_without_analyzer(self, store, ids, account):
        store.save(account)
        workspace = AccountWorkspace(store, id_generator=ids).open()
        with pytest.raises(AnalysisError):
            workspace.add_transcript(account.id, "text")

    def test_add_stakeholder(self, workspace, account_id):
        workspace.add_stakeholder(account_id, name="Sam Ortiz", title="Controller")
        result = workspace.add_stakeholder(account_id, name="sam ortiz", role="Influencer")
        people = result.account.stakeholders
        assert len(people) == 1
        assert (people[0].name, people[0].title, people[0].role) == ("Sam Ortiz", "Controller", "Influencer")

    def test_add_stakeholder_requires_name(self, workspace, account_id):
        result = workspace.add_stakeholder(account_id, title="CFO")
        assert result.messages[0].level == MessageLevel.WARNING
        assert workspace.get(account_id).stakeholders == []


class TestManualNotes:

    def test_role_note_updates_stakeholder(self, workspace, account_id, analysis_payload):
        workspace.ingest_analysis(account_id, analysis_payload)
        result = workspace.handle_manual_note(account_id, "Dana Lee is a blocker")
        assert result.messages[0].level == MessageLevel.SUCCESS
        assert workspace.get(account_id).stakeholders[0].role == "Blocker"

    def test_unknown_person_warns_without_saving(self, workspace, account_id):
        result = workspace.handle_manual_note(account_id, "Nobody is the champion")
        assert result.messages[0].level == MessageLevel.WARNING
        assert result.persistence.applied == []

    def test_general_note(self, workspace, store, account_id):
        workspace.handle_manual_note(account_id, "Met the team at the site walk")
        assert store.load(account_id).notes[0].category == "General"

    @pytest.mark.parametrize("text", ["", "   ", None])
    def test_blank_note_rejected(self, workspace, account_id, text):
        result = workspace.handle_manual_note(account_id, text)
        assert result.messages[0].level == MessageLevel.WARNING
        assert workspace.get(account_id).notes == []


class TestAssistantActions:

    def test_batch_persisted(self, workspace, store, account_id):
        result = workspace.apply_assistant_actions(account_id, [
            {"type": "update_stage", "stage": "proposal"},
            {"type": "add_metric", "metric": "num_units", "value": 1200},
        ])
        assert [m.level for m in result.messages] == [MessageLevel.SUCCESS, MessageLevel.SUCCESS]
        stored = store.load(account_id)
        assert stored.stage == "proposal"
        assert stored.metrics["num_units"].value == 1200

    def test_delete_removes_and_clears_selection(self, workspace, store, account_id):
        result = workspace.apply_assistant_actions(account_id, [
            {"type": "update_stage", "stage": "legal"},
            {"type": "delete_account"},
        ])
        assert result.deleted
        assert result.account is None
        assert workspace.selected_account_id is None
        assert workspace.accounts == []
        assert store.load(account_id) is None

    def test_delete_other_account_keeps_selection(self, workspace, account_id):
        other_id = workspace.create_account("Beacon").account.id
        workspace.select(account_id)
        workspace.delete_account(other_id)
        assert workspace.selected_account_id == account_id
        assert [a.id for a in workspace.accounts] == [account_id]
