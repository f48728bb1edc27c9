"""Domain Types: rich types that replace bare primitives across the codebase.

Invariants:
    - UserId and ReportId wrap UUIDs; domain logic never passes bare UUIDs
    - All closed value sets are str Enums; no raw string matching in core
    - TraitCategory declaration order is the report's category order

Design Decisions:
    - NewType over dataclass wrappers: zero runtime cost, full type-checker support
    - str Enums serialize to JSON without custom encoders (reports are stored as JSON)
"""

from enum import Enum
from typing import NewType
from uuid import UUID


# ─── Identity Types ──────────────────────────────────────────────

UserId = NewType("UserId", UUID)
ReportId = NewType("ReportId", UUID)


# ─── Parser Limits ───────────────────────────────────────────────

FORMAT_SNIFF_LINES = 50     # header lines inspected for a vendor marker
DEBUG_SAMPLE_LINES = 5
DEBUG_SAMPLE_SNPS = 10


# ─── Enums ───────────────────────────────────────────────────────

class FileFormat(str, Enum):
    """Vendor of a raw genotype export."""
    TWENTY_THREE_AND_ME = "23andme"
    ANCESTRY = "ancestry"
    UNKNOWN = "unknown"


class ConfidenceLevel(str, Enum):
    """Strength of the published evidence behind an interpretation."""
    HIGH = "high"
    MODERATE = "moderate"
    LOW = "low"


class RiskLevel(str, Enum):
    """How favourable a genotype is for the trait."""
    LOW = "low"
    OPTIMAL = "optimal"
    HIGH = "high"


class TraitCategory(str, Enum):
    """Report sections, in display order."""
    DIET = "diet"
    FITNESS = "fitness"
    WELLNESS = "wellness"
    SUPPLEMENTS = "supplements"


class Plan(str, Enum):
    """Billing plan. Only PAID users see the full report."""
    FREE = "free"
    PAID = "paid"
