"""
Shared fixtures for the account intel test suite.
"""

import itertools
from datetime import datetime

import pytest

from account_intel.core.entities import Account, InformationGap, Stakeholder
from account_intel.core.vocabulary import GapStatus


FIXED_NOW = datetime(2025, 3, 14, 9, 30, 0)


class SequentialIds:
    """Deterministic id generator: id-1, id-2, ..."""

    def __init__(self, prefix: str = "id"):
        self._prefix = prefix
        self._counter = itertools.count(1)
        self.issued = []

    def __call__(self) -> str:
        value = f"{self._prefix}-{next(self._counter)}"
        self.issued.append(value)
        return value


@pytest.fixture
def now():
    return FIXED_NOW


@pytest.fixture
def ids():
    return SequentialIds()


@pytest.fixture
def account(ids, now):
    """An account with one known stakeholder and one open gap."""
    account = Account.create("Harbor Residential", url="https://harbor.example.com", id_generator=ids)
    account.created_at = now
    account.stakeholders.append(Stakeholder(
        id="stk-1", name="John Doe", title="Manager", role="Champion", added_at=now
    ))
    account.information_gaps.append(InformationGap(
        id="gap-1", question="Who is the buyer?", status=GapStatus.OPEN, added_at=now
    ))
    return account


@pytest.fixture
def analysis_payload():
    """Wire-shaped analysis for one discovery call."""
    return {
        "summary": "Discovery call with the VP of Construction.",
        "callType": "discovery",
        "attendees": ["Dana Lee"],
        "businessAreas": {
            "budgeting": {
                "currentState": ["Budgets in Excel", "Annual planning cycle"],
                "opportunities": ["Portfolio capital plan"],
                "quotes": ["We rebuild the plan by hand"],
            },
        },
        "stakeholders": [
            {"name": "Dana Lee", "title": "VP Construction", "role": "Champion"},
        ],
        "metrics": {"annual_construction_spend": "$40M", "num_properties": None},
        "metricsContext": {"annual_construction_spend": "Stated on discovery call"},
        "informationGaps": [
            "Who signs off on software spend?",
            {"question": "What ERP do they use?", "category": "technical"},
        ],
    }
