"""
Fixed Vocabularies for Account Intelligence

The account aggregate is keyed by closed vocabularies:
- Business areas (the 16 CapEx topics observations accumulate against)
- Metrics (core, vertical-specific and third-party manager measurements)
- Pipeline stages, verticals and ownership types
- Stakeholder roles and MEDDICC qualification categories

Everything here is static reference data. Empty-state factories build
the zero state an account starts from.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Optional


class ConfidenceTier(str, Enum):
    """Coarse confidence derived from observation volume."""
    NONE = "none"
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


class AreaPriority(str, Enum):
    """Priority of a business area for the deal."""
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"
    NONE = "none"


class StakeholderRole(str, Enum):
    """
    Buying-committee roles (MEDDICC-aligned).

    Stakeholder records keep the role as plain text, so values produced
    outside this list (e.g. by an assistant) survive a round trip.
    """
    CHAMPION = "Champion"
    ECONOMIC_BUYER = "Economic Buyer"
    EXECUTIVE_SPONSOR = "Executive Sponsor"
    TECHNICAL_BUYER = "Technical Buyer"
    USER_BUYER = "User Buyer"
    INFLUENCER = "Influencer"
    BLOCKER = "Blocker"
    UNKNOWN = "Unknown"


class GapStatus(str, Enum):
    """Lifecycle of an information gap."""
    OPEN = "open"
    RESOLVED = "resolved"


@dataclass(frozen=True)
class BusinessAreaDefinition:
    id: str
    label: str
    description: str
    priority: AreaPriority


@dataclass(frozen=True)
class MetricDefinition:
    id: str
    label: str
    type: str  # number, currency, percent
    unit: str


BUSINESS_AREAS = [
    BusinessAreaDefinition("budgeting", "Budgeting", "Site walks, budget creation, capital planning", AreaPriority.HIGH),
    BusinessAreaDefinition("project_tracking", "Project Tracking", "Source of truth, trackers, project status", AreaPriority.HIGH),
    BusinessAreaDefinition("project_design", "Project Design", "Scope documents, bid templates, specs", AreaPriority.MEDIUM),
    BusinessAreaDefinition("bidding", "Bidding", "RFP process, bid leveling, vendor selection", AreaPriority.HIGH),
    BusinessAreaDefinition("rfa_process", "RFA Process", "Request for approval creation and workflow", AreaPriority.HIGH),
    BusinessAreaDefinition("contracting", "Contracting", "Contract creation, signatures, tracking", AreaPriority.HIGH),
    BusinessAreaDefinition("project_management", "Project Management", "Scheduling, tasks, updates, meeting minutes", AreaPriority.MEDIUM),
    BusinessAreaDefinition("invoicing", "Invoicing", "Invoice submission, review, approval, payment", AreaPriority.HIGH),
    BusinessAreaDefinition("cm_fees", "CM Fees", "Construction management fee tracking and projection", AreaPriority.MEDIUM),
    BusinessAreaDefinition("change_orders", "Change Orders", "Change order submission and approval", AreaPriority.MEDIUM),
    BusinessAreaDefinition("project_closeout", "Project Close Out", "Close out process and documentation", AreaPriority.LOW),
    BusinessAreaDefinition("reporting", "Reporting", "Reports, analytics, dashboards", AreaPriority.HIGH),
    BusinessAreaDefinition("unit_renos", "Unit Renos", "Unit renovation tracking and workflow", AreaPriority.MEDIUM),
    BusinessAreaDefinition("data_loading", "Data Loading", "Data entry, imports, system updates", AreaPriority.LOW),
    BusinessAreaDefinition("due_diligence", "Due Diligence", "Acquisition DD process and budgeting", AreaPriority.LOW),
    BusinessAreaDefinition("asset_tracking", "Asset Tracking", "Asset inventory, warranties, conditions", AreaPriority.LOW),
]

BUSINESS_AREA_IDS = [area.id for area in BUSINESS_AREAS]


CORE_METRICS = [
    MetricDefinition("annual_construction_spend", "Annual Construction Spend", "currency", "$"),
    MetricDefinition("num_properties", "Number of Properties", "number", "properties"),
]

_NUM_UNITS = MetricDefinition("num_units", "Number of Units", "number", "units")
_NUM_BEDS = MetricDefinition("num_beds", "Number of Beds", "number", "beds")
_SQFT = MetricDefinition("sqft_portfolio", "Portfolio Sq Ft", "number", "sq ft")

VERTICAL_METRICS = {
    "multifamily": [
        _NUM_UNITS,
        MetricDefinition("unit_renos_per_year", "Unit Renos per Year", "number", "renos"),
        MetricDefinition("avg_rent", "Average Rent", "currency", "$/month"),
    ],
    "builder_developer": [MetricDefinition("num_projects", "Number of Projects", "number", "projects")],
    "iwl": [_SQFT],
    "senior": [_NUM_UNITS, _NUM_BEDS],
    "student": [_NUM_UNITS, _NUM_BEDS],
    "hospitality": [MetricDefinition("num_rooms", "Number of Rooms", "number", "rooms")],
    "healthcare_medical": [_SQFT],
    "office": [_SQFT],
    "retail": [_SQFT],
    "corporate": [],
    "government": [],
    "mixed_use": [_NUM_UNITS, _SQFT],
}

THIRD_PARTY_METRICS = [
    MetricDefinition("num_clients", "Number of Clients", "number", "clients"),
]

# Legacy flat list; transcript analysis still reports against these ids
KEY_METRICS = [
    *CORE_METRICS,
    _NUM_UNITS,
    MetricDefinition("unit_renos_per_year", "Unit Renos per Year", "number", "renos"),
    MetricDefinition("avg_rent", "Average Rent", "currency", "$/month"),
    MetricDefinition("num_projects", "Number of Projects", "number", "projects"),
    _SQFT,
    *THIRD_PARTY_METRICS,
    MetricDefinition("cm_fee_rate", "CM Fee Rate", "percent", "%"),
    MetricDefinition("num_ftes", "Number of FTEs", "number", "FTEs"),
]

METRIC_IDS = [metric.id for metric in KEY_METRICS]


STAGES = [
    "qualifying",
    "active_pursuit",
    "solution_validation",
    "proposal",
    "legal",
    "closed_won",
    "closed_lost",
]

VERTICALS = [
    "multifamily",
    "builder_developer",
    "iwl",
    "senior",
    "student",
    "hospitality",
    "healthcare_medical",
    "office",
    "retail",
    "corporate",
    "government",
    "mixed_use",
]

OWNERSHIP_TYPES = ["own", "own_and_manage", "third_party_manage"]

MEDDICC_CATEGORIES = [
    "metrics",
    "economic_buyer",
    "decision_criteria",
    "decision_process",
    "identify_pain",
    "champion",
    "competition",
]

NOTE_CATEGORIES = ["General", "Budget", "Timeline", "Fees", "Technical", "Competition"]

DEFAULT_STAGE = "qualifying"
DEFAULT_GAP_CATEGORY = "business"
DEFAULT_NOTE_CATEGORY = "General"


def stage_order(stage: Optional[str]) -> int:
    """1-based position of a stage in the pipeline (unknown stages count as 1)."""
    if stage in STAGES:
        return STAGES.index(stage) + 1
    return 1


def metrics_for_account(vertical: Optional[str], ownership_type: Optional[str]) -> list[MetricDefinition]:
    """Metrics that apply to an account given its vertical and ownership."""
    metrics = list(CORE_METRICS)

    if vertical and vertical in VERTICAL_METRICS:
        metrics.extend(VERTICAL_METRICS[vertical])

    if ownership_type == "third_party_manage":
        metrics.extend(THIRD_PARTY_METRICS)

    return metrics


def empty_business_areas() -> dict:
    """Zero state for every business area, keyed by topic id."""
    from .entities import BusinessArea

    return {
        area.id: BusinessArea(priority=area.priority.value)
        for area in BUSINESS_AREAS
    }


def empty_meddicc() -> dict:
    """Zero state for every MEDDICC category."""
    return {
        key: {
            "status": "unknown",
            "notes": [],
            "confidence": ConfidenceTier.NONE.value,
            "lastUpdated": None,
        }
        for key in MEDDICC_CATEGORIES
    }
