#!/usr/bin/env python3
"""
Account Intel - Main Demo

Walks one account through the reconciliation engine:
1. Create an account in the in-memory key-value store
2. Fold two transcript analyses (the second repeats and extends the first)
3. Apply manual notes through the command interpreter
4. Apply an assistant action batch
5. Score deal health
6. Migrate the workspace into a relational store

Set LLM_PROVIDER and the matching API key to also run a live
transcript analysis.
"""

from account_intel.config import configure_logging, get_settings
from account_intel.layers.intelligence import TranscriptAnalyzer
from account_intel.layers.persistence import (
    KeyValueAccountStore,
    RelationalAccountStore,
    migrate_accounts,
    migration_summary,
)
from account_intel.metrics import score_deal_health
from account_intel.use_cases import AccountWorkspace


FIRST_CALL = {
    "summary": "Discovery call with the VP of Construction.",
    "callType": "discovery",
    "attendees": ["Dana Lee", "Sam Ortiz"],
    "businessAreas": {
        "budgeting": {
            "currentState": ["Budgets live in Excel per property"],
            "opportunities": ["Portfolio-level capital plan"],
            "quotes": ["We rebuild the five-year plan every spring by hand"],
        },
        "invoicing": {
            "currentState": ["Draws approved by email"],
        },
    },
    "stakeholders": [
        {"name": "Dana Lee", "title": "VP Construction", "role": "Unknown"},
        {"name": "Sam Ortiz", "title": "Controller", "department": "Finance"},
    ],
    "metrics": {"annual_construction_spend": "$40M", "num_properties": None},
    "metricsContext": {"annual_construction_spend": "Stated by Dana on discovery call"},
    "informationGaps": [
        {"question": "Who signs off on software spend?", "meddiccCategory": "economic_buyer"},
        "What is the current draw approval cycle time?",
    ],
}

SECOND_CALL = {
    "summary": "Follow-up demo with finance.",
    "callType": "demo",
    "businessAreas": {
        "budgeting": {
            "currentState": ["budgets live in excel per property", "No variance reporting"],
        },
    },
    "stakeholders": [
        {"name": "dana lee", "role": "Champion", "notes": "Pushing for a Q3 decision"},
        {"name": "Priya Shah", "title": "CFO", "role": "Economic Buyer"},
    ],
    "metrics": {"num_properties": 85, "annual_construction_spend": None},
    "informationGaps": ["WHO signs off on software spend?", "Is there an existing PM tool contract?"],
}


def print_section(title: str) -> None:
    print()
    print("=" * 60)
    print(title)
    print("=" * 60)


def print_messages(messages) -> None:
    for message in messages:
        print(f"  [{message.level.value}] {message.text}")


def run_reconciliation_demo(workspace: AccountWorkspace) -> str:
    print_section("1. ACCOUNT + TRANSCRIPT RECONCILIATION")

    account = workspace.create_account(
        "Harbor Residential", url="https://harbor.example.com", vertical="multifamily"
    ).account
    print(f"Created account: {account.name} ({account.id})")

    workspace.ingest_analysis(account.id, FIRST_CALL, transcript_text="<first call transcript>")
    account = workspace.ingest_analysis(
        account.id, SECOND_CALL, transcript_text="<second call transcript>"
    ).account

    area = account.business_areas["budgeting"]
    print(f"Budgeting ({area.confidence.value} confidence):")
    for observation in area.current_state:
        print(f"  - {observation}")

    print("Stakeholders:")
    for stakeholder in account.stakeholders:
        print(f"  - {stakeholder.name:<12} {stakeholder.role:<16} {stakeholder.title or ''}")

    print("Metrics:")
    for key, metric in account.metrics.items():
        if metric.value is None:
            continue
        print(f"  - {key}: {metric.value} ({metric.context or 'no context'})")

    print(f"Open gaps: {len(account.open_gaps())} of {len(account.information_gaps)}")
    return account.id


def run_command_demo(workspace: AccountWorkspace, account_id: str) -> None:
    print_section("2. MANUAL NOTES")

    for text in (
        "Sam Ortiz is an influencer",
        "Budget approved for next fiscal year",
        "Go-live target is January",
        "Nobody by that name is a champion",
    ):
        print(f"> {text}")
        print_messages(workspace.handle_manual_note(account_id, text).messages)


def run_assistant_demo(workspace: AccountWorkspace, account_id: str) -> None:
    print_section("3. ASSISTANT ACTIONS")

    account = workspace.get(account_id)
    gap = account.open_gaps()[0]
    actions = [
        {"type": "update_stage", "stage": "solution_validation"},
        {"type": "resolve_gap", "gapId": gap.id, "resolution": "Priya signs off above $250K"},
        {"type": "mark_area_irrelevant", "areaId": "unit_renos", "reason": "No unit renovation program"},
        {"type": "add_metric", "metric": "num_units", "value": 4200},
        {"type": "update_stakeholder_role", "name": "Chris Park", "newRole": "Blocker"},
        {"type": "teleport_account"},
    ]
    result = workspace.apply_assistant_actions(account_id, actions)
    print_messages(result.messages)
    print(f"Persistence: {result.persistence.summary()}")


def run_health_demo(workspace: AccountWorkspace, account_id: str) -> None:
    print_section("4. DEAL HEALTH")

    health = score_deal_health(
        workspace.get(account_id), min_metrics=get_settings().deal_health_min_metrics
    )
    print(f"Score: {health.score} ({health.band.value})")
    for component, points in health.breakdown.items():
        print(f"  {component:<16} {points:5.1f}")


def run_migration_demo(source: KeyValueAccountStore) -> None:
    print_section("5. KEY-VALUE -> RELATIONAL MIGRATION")

    summary = migration_summary(source)
    print(f"To migrate: {summary}")

    target = RelationalAccountStore("sqlite:///:memory:")
    target.init()
    report = migrate_accounts(
        source,
        target,
        on_progress=lambda p: print(f"  [{p.current}/{p.total}] {p.item}"),
    )
    print(f"Migrated: {report.to_dict()}")

    reloaded = target.list_accounts()[0]
    print(f"Reloaded {reloaded.name}: {len(reloaded.stakeholders)} stakeholders, "
          f"{len(reloaded.information_gaps)} gaps, {len(reloaded.notes)} notes")


def run_live_analysis_demo(workspace: AccountWorkspace, account_id: str) -> None:
    settings = get_settings()
    if not (settings.llm.openai_api_key or settings.llm.anthropic_api_key):
        return

    print_section("6. LIVE TRANSCRIPT ANALYSIS")
    transcript = """
    Rep: How do you approve contractor draws today?
    Dana: Email chains. It takes us about three weeks per draw.
    Rep: Who else should be involved?
    Dana: Our Director of Asset Management, Morgan Wu, owns the capex plan.
    """
    account = workspace.add_transcript(account_id, transcript, source="demo").account
    print(f"Transcripts: {len(account.transcripts)}, stakeholders: {len(account.stakeholders)}")


def main():
    """Main entry point."""
    configure_logging()

    print()
    print("+" + "=" * 58 + "+")
    print("|            ACCOUNT INTEL RECONCILIATION DEMO             |")
    print("+" + "=" * 58 + "+")

    store = KeyValueAccountStore()
    workspace = AccountWorkspace(store, analyzer=TranscriptAnalyzer()).open()

    account_id = run_reconciliation_demo(workspace)
    run_command_demo(workspace, account_id)
    run_assistant_demo(workspace, account_id)
    run_health_demo(workspace, account_id)
    run_migration_demo(store)
    run_live_analysis_demo(workspace, account_id)

    print()
    print("=" * 60)
    print("DEMONSTRATION COMPLETE")
    print("=" * 60)
    print()


if __name__ == "__main__":
    main()
