"""ORM Models: SQLAlchemy declarative models for all persisted entities.

Invariants:
    - All models inherit from Base (db/base.py)
    - User is the aggregate root; reports are scoped by user_id
    - No plaintext genotype data and no raw tokens are ever stored

Design Decisions:
    - One file per entity for locality
    - All models imported here so SQLAlchemy resolves string-based relationship()
      references before any query runs
"""

from geni.models.user import User  # noqa: F401
from geni.models.report import Report  # noqa: F401
from geni.models.magic_link import MagicLink  # noqa: F401
from geni.models.jwt_token_log import JwtTokenLog  # noqa: F401
