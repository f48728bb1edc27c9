"""Report Routes: analyze an uploaded genotype file, save and read the encrypted report.

Invariants:
    - Uploads larger than max_upload_bytes are rejected (413) before parsing
    - Bytes are decoded as UTF-8 with replacement characters (never fails on encoding);
      a leading byte-order mark is dropped
    - Free callers see at most preview_insight_count insights; total_insights is always exact
    - Only paid users can save; reads and deletes are scoped to the caller's user id
    - The raw upload is never persisted or logged; saved reports hold trait SNPs only

Design Decisions:
    - Parsing runs in a worker thread: a 50 MB export would otherwise stall the event loop
    - POST /reports re-analyzes the upload server-side rather than trusting client insights
"""

import asyncio
import logging
from datetime import datetime, timezone
from uuid import UUID

from fastapi import APIRouter, Depends, File, UploadFile, status
from sqlalchemy.ext.asyncio import AsyncSession

from geni.api.dependencies import (
    get_current_user, get_optional_user, get_report_vault, require_paid_user,
)
from geni.config import Settings, get_settings
from geni.core.analyze_traits import (
    InsightResult, analyze_all_traits, build_report_data, preview_insights,
    report_format,
)
from geni.core.auth_tokens import TokenUser
from geni.core.domain_types import ReportId
from geni.core.errors import (
    ErrorContext, NoSNPsFoundError, ResourceNotFoundError, UploadTooLargeError,
)
from geni.core.parse_genome import ParseResult, parse_genetic_file
from geni.infrastructure.database import get_db
from geni.schemas.report import (
    AnalyzeResponse, DeleteReportsResponse, InsightSchema,
    MyReportResponse, ReportResponse, SaveReportResponse,
)
from geni.services.report_vault import ReportVaultService, as_user_id

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/v1/reports", tags=["reports"])


async def read_genome_upload(file: UploadFile, limit: int) -> str:
    """Read at most limit bytes; raise UploadTooLargeError past that."""
    raw = await file.read(limit + 1)
    if len(raw) > limit:
        raise UploadTooLargeError(file.size or len(raw), limit)
    return raw.decode("utf-8-sig", errors="replace")


async def analyze_genome_text(text: str) -> tuple[ParseResult, list[InsightResult]]:
    parsed = await asyncio.to_thread(parse_genetic_file, text)
    if parsed.snp_count == 0:
        raise NoSNPsFoundError(parsed.debug.total_lines)
    insights = analyze_all_traits(parsed.data)
    logger.info(
        "Analyzed genotype file",
        extra={
            "snp_count": parsed.snp_count,
            "format": parsed.format.value,
            "insight_count": len(insights),
        },
    )
    return parsed, insights


@router.post("/analyze", response_model=AnalyzeResponse)
async def analyze_upload(
    file: UploadFile = File(...),
    user: TokenUser | None = Depends(get_optional_user),
    settings: Settings = Depends(get_settings),
):
    """Parse and interpret an upload. Paid callers get every insight."""
    text = await read_genome_upload(file, settings.max_upload_bytes)
    parsed, insights = await analyze_genome_text(text)

    is_paid = user is not None and user.is_paid
    visible = insights if is_paid else preview_insights(
        insights, settings.preview_insight_count,
    )
    return AnalyzeResponse(
        insights=[InsightSchema.from_result(i) for i in visible],
        total_insights=len(insights),
        is_paid=is_paid,
        snp_count=parsed.snp_count,
        format=parsed.format,
        warnings=parsed.warnings,
    )


@router.post(
    "", response_model=SaveReportResponse,
    status_code=status.HTTP_201_CREATED,
)
async def save_report(
    file: UploadFile = File(...),
    user: TokenUser = Depends(require_paid_user),
    vault: ReportVaultService = Depends(get_report_vault),
    db: AsyncSession = Depends(get_db),
    settings: Settings = Depends(get_settings),
):
    """Analyze the upload and store it encrypted for the caller."""
    text = await read_genome_upload(file, settings.max_upload_bytes)
    parsed, insights = await analyze_genome_text(text)

    report_data = build_report_data(parsed, insights, datetime.now(timezone.utc))
    report_id = await vault.save_report(as_user_id(user.user_id), report_data)
    await db.commit()

    return SaveReportResponse(
        report_id=report_id,
        insight_count=len(insights),
        snp_count=parsed.snp_count,
        format=parsed.format,
    )


@router.get("/me", response_model=MyReportResponse)
async def get_my_report(
    user: TokenUser | None = Depends(get_optional_user),
    vault: ReportVaultService = Depends(get_report_vault),
):
    """The caller's latest saved report, decrypted."""
    if user is None:
        return MyReportResponse(is_paid=False)

    report = await vault.get_latest_report(as_user_id(user.user_id))
    if report is None:
        return MyReportResponse(is_paid=user.is_paid)

    return MyReportResponse(
        is_paid=user.is_paid,
        saved_insights=[InsightSchema(**i) for i in report.get("insights", [])],
        snp_count=report.get("snp_count"),
        format=report.get("format"),
    )


@router.delete("/me", response_model=DeleteReportsResponse)
async def delete_my_reports(
    user: TokenUser = Depends(get_current_user),
    vault: ReportVaultService = Depends(get_report_vault),
    db: AsyncSession = Depends(get_db),
):
    deleted = await vault.delete_reports(as_user_id(user.user_id))
    await db.commit()
    if deleted == 0:
        logger.info(
            "No reports to delete", extra={"user_id": user.user_id},
        )
    return DeleteReportsResponse(deleted=deleted)


@router.get("/{report_id}", response_model=ReportResponse)
async def get_saved_report(
    report_id: UUID,
    user: TokenUser = Depends(get_current_user),
    vault: ReportVaultService = Depends(get_report_vault),
):
    """One of the caller's saved reports, decrypted."""
    report = await vault.get_report(as_user_id(user.user_id), ReportId(report_id))
    if report is None:
        raise ResourceNotFoundError(
            "Report", str(report_id), ErrorContext(user_id=user.user_id),
        )
    return ReportResponse(
        report_id=report_id,
        insights=[InsightSchema(**i) for i in report.get("insights", [])],
        snp_count=report.get("snp_count", 0),
        format=report_format(report),
        created_at=report.get("created_at"),
    )
