"""Services Layer: user, report-vault, magic-link and session-token operations.

Invariants:
    - Every service takes an AsyncSession; none opens its own
    - Services flush, routes commit (the route layer owns the transaction boundary)

Design Decisions:
    - One service class per aggregate for locality
"""
