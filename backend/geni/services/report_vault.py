"""Report Vault: encrypted persistence of report documents.

Invariants:
    - Only ciphertext, iv and auth_tag are stored; snp_count and format stay in clear
    - Each saved report is encrypted under the owner's derived key (salt = user id)
    - Reads are always scoped to the owner: another user's report id yields None
    - Methods flush, never commit

Design Decisions:
    - Secret and KDF iterations injected from Settings so tests can run a low count
    - get_latest_report orders by created_at desc: re-uploads replace what the user sees
"""

import logging
from uuid import UUID

from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from geni.core.domain_types import ReportId, UserId
from geni.core.report_crypto import (
    DEFAULT_ITERATIONS, EncryptedData, decrypt_report, encrypt_report,
)
from geni.models.report import Report

logger = logging.getLogger(__name__)


class ReportVaultService:
    """ReportVault implementation over the reports table."""

    def __init__(
        self, db: AsyncSession, secret: str, iterations: int = DEFAULT_ITERATIONS,
    ):
        self.db = db
        self.secret = secret
        self.iterations = iterations

    async def save_report(self, user_id: UserId, report_data: dict) -> ReportId:
        encrypted = encrypt_report(
            report_data, str(user_id), self.secret, self.iterations,
        )
        report = Report(
            user_id=user_id,
            encrypted_payload=encrypted.ciphertext,
            iv=encrypted.iv,
            auth_tag=encrypted.auth_tag,
            snp_count=int(report_data.get("snp_count", 0)),
            format=str(report_data.get("format", "unknown")),
        )
        self.db.add(report)
        await self.db.flush()
        logger.info(
            "Saved encrypted report",
            extra={
                "user_id": str(user_id),
                "report_id": str(report.id),
                "snp_count": report.snp_count,
                "format": report.format,
            },
        )
        return ReportId(report.id)

    async def get_latest_report(self, user_id: UserId) -> dict | None:
        result = await self.db.execute(
            select(Report)
            .where(Report.user_id == user_id)
            .order_by(Report.created_at.desc())
            .limit(1),
        )
        report = result.scalar_one_or_none()
        return self._decrypt(report) if report else None

    async def get_report(self, user_id: UserId, report_id: ReportId) -> dict | None:
        result = await self.db.execute(
            select(Report).where(
                Report.id == report_id, Report.user_id == user_id,
            ),
        )
        report = result.scalar_one_or_none()
        return self._decrypt(report) if report else None

    async def delete_reports(self, user_id: UserId) -> int:
        result = await self.db.execute(
            delete(Report).where(Report.user_id == user_id),
        )
        await self.db.flush()
        deleted = result.rowcount or 0
        logger.info(
            f"Deleted {deleted} report(s)", extra={"user_id": str(user_id)},
        )
        return deleted

    def _decrypt(self, report: Report) -> dict:
        encrypted = EncryptedData(
            ciphertext=report.encrypted_payload,
            iv=report.iv,
            auth_tag=report.auth_tag,
        )
        return decrypt_report(
            encrypted, str(report.user_id), self.secret, self.iterations,
        )


def as_user_id(value: str | UUID) -> UserId:
    """Token claims carry the user id as text; the vault keys on UUID."""
    return UserId(value if isinstance(value, UUID) else UUID(value))
