"""Boundary Protocols: contracts between core and shell.

Invariants:
    - Core NEVER imports from shell; dependency arrows point inward only
    - The three third-party touch points are exactly these contracts:
      send email (EmailSender), verify purchase (PurchaseVerifier),
      persist blob (ReportVault)
    - Implementations are provided by the shell via FastAPI dependencies

Design Decisions:
    - Protocol over ABC: structural subtyping, test fakes need no inheritance
    - Async methods: every implementation does IO
"""

from typing import Protocol

from geni.core.domain_types import ReportId, UserId


class EmailSender(Protocol):
    """Transactional email (implemented by infrastructure/resend_client.py)."""
    async def send_magic_link(self, email: str, token: str) -> bool: ...


class PurchaseVerifier(Protocol):
    """Checkout lookup (implemented by infrastructure/polar_client.py)."""
    async def get_checkout(self, checkout_id: str) -> dict: ...


class ReportVault(Protocol):
    """Encrypted report persistence (implemented by services/report_vault.py)."""
    async def save_report(self, user_id: UserId, report_data: dict) -> ReportId: ...
    async def get_latest_report(self, user_id: UserId) -> dict | None: ...
    async def get_report(self, user_id: UserId, report_id: ReportId) -> dict | None: ...
    async def delete_reports(self, user_id: UserId) -> int: ...
