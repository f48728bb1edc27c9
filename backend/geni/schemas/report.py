"""Report Schemas: API shapes for analysis results and saved reports.

Invariants:
    - Insight enums serialize as their string values
    - Free-tier responses never include more than the preview count of insights
"""

from uuid import UUID

from pydantic import BaseModel

from geni.core.analyze_traits import InsightResult
from geni.core.domain_types import ConfidenceLevel, FileFormat, RiskLevel, TraitCategory


class InsightSchema(BaseModel):
    trait_id: str
    title: str
    genotype: str
    summary: str
    confidence: ConfidenceLevel
    confidence_note: str
    what_to_do_next: list[str]
    risk_level: RiskLevel
    category: TraitCategory

    @classmethod
    def from_result(cls, insight: InsightResult) -> "InsightSchema":
        return cls(**insight.to_dict())


class AnalyzeResponse(BaseModel):
    """Result of POST /reports/analyze."""
    insights: list[InsightSchema]
    total_insights: int
    is_paid: bool
    snp_count: int
    format: FileFormat
    warnings: list[str] = []


class SaveReportResponse(BaseModel):
    report_id: UUID
    insight_count: int
    snp_count: int
    format: FileFormat


class MyReportResponse(BaseModel):
    """The caller's latest saved report (GET /reports/me)."""
    is_paid: bool
    saved_insights: list[InsightSchema] | None = None
    snp_count: int | None = None
    format: FileFormat | None = None


class DeleteReportsResponse(BaseModel):
    deleted: int


class ReportResponse(BaseModel):
    """One saved report (GET /reports/{report_id})."""
    report_id: UUID
    insights: list[InsightSchema]
    snp_count: int
    format: FileFormat
    created_at: str | None = None
