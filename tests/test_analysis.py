"""
Tests for folding a transcript analysis into an account, and for the
tolerant analysis payload schema.
"""

from account_intel import merge_analysis
from account_intel.core.vocabulary import ConfidenceTier
from account_intel.layers.intelligence import AnalysisPayload, GapObservation
from account_intel.layers.reconciliation.analysis import new_entities


class TestAnalysisPayload:

    def test_nulls_become_empty(self):
        payload = AnalysisPayload.model_validate({
            "businessAreas": None,
            "stakeholders": None,
            "metrics": None,
            "metricsContext": None,
            "informationGaps": None,
            "attendees": None,
        })
        assert payload.business_areas == {}
        assert payload.stakeholders == []
        assert payload.metrics == {}
        assert payload.information_gaps == []
        assert payload.attendees == []

    def test_wrong_types_dropped(self):
        payload = AnalysisPayload.model_validate({
            "businessAreas": {"budgeting": "not an object", "bidding": {"currentState": ["x", None]}},
            "stakeholders": [None, "Dana", {"name": "Dana"}],
            "informationGaps": [None, "Budget?", {"question": "ERP?"}, 42],
        })
        assert list(payload.business_areas) == ["bidding"]
        assert payload.business_areas["bidding"].current_state == ["x"]
        assert [p.name for p in payload.stakeholders] == ["Dana"]
        assert payload.information_gaps[0] == "Budget?"
        assert isinstance(payload.information_gaps[1], GapObservation)
        assert len(payload.information_gaps) == 2

    def test_extra_fields_ignored(self):
        payload = AnalysisPayload.model_validate({"unexpected": True, "summary": "ok"})
        assert payload.summary == "ok"

    def test_gap_category_defaults(self):
        gap = GapObservation.model_validate({"question": "Who?", "category": None})
        assert gap.category == "business"


class TestMergeAnalysis:

    def test_folds_all_entities(self, account, analysis_payload, ids, now):
        merged = merge_analysis(account, analysis_payload, ids, transcript_text="call text", now=now)

        budgeting = merged.business_areas["budgeting"]
        assert budgeting.current_state == ["Budgets in Excel", "Annual planning cycle"]
        assert budgeting.confidence == ConfidenceTier.MEDIUM

        assert [s.name for s in merged.stakeholders] == ["John Doe", "Dana Lee"]
        assert merged.metrics["annual_construction_spend"].value == "$40M"
        assert merged.metrics["annual_construction_spend"].context == "Stated on discovery call"
        assert merged.metrics["num_properties"].value is None

        questions = [g.question for g in merged.information_gaps]
        assert questions == ["Who is the buyer?", "Who signs off on software spend?", "What ERP do they use?"]
        assert merged.information_gaps[2].category == "technical"
        assert merged.last_updated == now

    def test_records_transcript(self, account, analysis_payload, ids, now):
        merged = merge_analysis(
            account, analysis_payload, ids, transcript_text="call text", source="gong", now=now
        )
        assert len(merged.transcripts) == 1
        record = merged.transcripts[0]
        assert record.text == "call text"
        assert record.call_type == "discovery"
        assert record.summary == "Discovery call with the VP of Construction."
        assert record.source == "gong"
        assert record.date == "2025-03-14"

    def test_transcript_meta_overrides(self, account, analysis_payload, ids, now):
        merged = merge_analysis(
            account, analysis_payload, ids,
            transcript_text="t",
            transcript_meta={"date": "2025-03-01", "callType": "demo", "attendees": ["A", "B"]},
            now=now,
        )
        record = merged.transcripts[0]
        assert (record.date, record.call_type, record.attendees) == ("2025-03-01", "demo", ["A", "B"])

    def test_no_transcript_text_no_record(self, account, analysis_payload, ids, now):
        merged = merge_analysis(account, analysis_payload, ids, now=now)
        assert merged.transcripts == []

    def test_reprocessing_same_analysis_is_idempotent(self, account, analysis_payload, ids, now):
        once = merge_analysis(account, analysis_payload, ids, now=now)
        twice = merge_analysis(once, analysis_payload, ids, now=now)
        assert twice.to_dict() == once.to_dict()

    def test_input_account_untouched(self, account, analysis_payload, ids, now):
        before = account.to_dict()
        merge_analysis(account, analysis_payload, ids, transcript_text="t", now=now)
        assert account.to_dict() == before

    def test_null_analysis_only_stamps(self, account, ids, now):
        merged = merge_analysis(account, None, ids, now=now)
        assert merged.stakeholders == account.stakeholders
        assert merged.information_gaps == account.information_gaps


class TestNewEntities:

    def test_reports_only_additions(self, account, analysis_payload, ids, now):
        merged = merge_analysis(account, analysis_payload, ids, transcript_text="t", now=now)
        added = new_entities(account, merged)
        assert [s.name for s in added["stakeholders"]] == ["Dana Lee"]
        assert len(added["information_gaps"]) == 2
        assert len(added["transcripts"]) == 1
        assert added["notes"] == []
