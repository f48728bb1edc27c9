"""Auth token tests: HS256 session tokens, magic tokens, hashing.

Tests cover:
    - Claims carried by a signed token
    - Each fixed verification failure message
    - Input validation on generate_token
    - SHA-256 token hashing and magic-token shape
"""

from datetime import datetime, timedelta, timezone

import jwt
import pytest

from geni.core.auth_tokens import (
    MSG_EXPIRED, MSG_FORMAT, MSG_INVALID, MSG_REQUIRED, MSG_SIGNATURE,
    TokenUser, generate_magic_token, generate_token, hash_token, verify_token,
)
from geni.core.domain_types import Plan
from geni.core.errors import ConfigurationError, InvalidTokenError

SECRET = "unit-test-secret-with-at-least-32-bytes"
USER = TokenUser(
    user_id="0b9f3c8a-1d2e-4f50-8a7b-6c5d4e3f2a10",
    email="buyer@example.com",
    plan=Plan.PAID,
)


def _verify_message(token, secret=SECRET) -> str:
    with pytest.raises(InvalidTokenError) as exc_info:
        verify_token(token, secret)
    assert exc_info.value.http_status == 401
    return exc_info.value.message


def test_round_trip_carries_identity():
    user = verify_token(generate_token(USER, SECRET), SECRET)
    assert user == USER
    assert user.is_paid


def test_claims_expire_after_seven_days():
    issued = datetime(2026, 3, 1, tzinfo=timezone.utc)
    token = generate_token(USER, SECRET, now=issued)
    claims = jwt.decode(token, SECRET, algorithms=["HS256"], options={"verify_exp": False})
    assert claims["iat"] == int(issued.timestamp())
    assert claims["exp"] - claims["iat"] == 7 * 24 * 60 * 60
    assert claims["plan"] == "paid"
    assert claims["user_id"] == USER.user_id


def test_free_plan_is_not_paid():
    free = TokenUser(user_id="u1", email="a@b.c", plan=Plan.FREE)
    assert verify_token(generate_token(free, SECRET), SECRET).is_paid is False


def test_missing_token():
    assert _verify_message("") == MSG_REQUIRED
    assert _verify_message(None) == MSG_REQUIRED


def test_wrong_segment_count():
    assert _verify_message("abc.def") == MSG_FORMAT
    assert _verify_message("a.b.c.d") == MSG_FORMAT


def test_wrong_secret():
    token = generate_token(USER, SECRET)
    assert _verify_message(token, secret="x" * 40) == MSG_SIGNATURE


def test_tampered_payload():
    header, _, signature = generate_token(USER, SECRET).split(".")
    forged_payload = jwt.encode(
        {"user_id": "attacker", "email": "a@b.c", "plan": "paid", "iat": 1, "exp": 9999999999},
        "y" * 40, algorithm="HS256",
    ).split(".")[1]
    assert _verify_message(f"{header}.{forged_payload}.{signature}") == MSG_SIGNATURE


def test_expired_token():
    issued = datetime.now(timezone.utc) - timedelta(days=8)
    token = generate_token(USER, SECRET, now=issued)
    assert _verify_message(token) == MSG_EXPIRED


def test_garbage_segments():
    assert _verify_message("not.a.token") == MSG_INVALID


def test_token_without_iat_rejected():
    token = jwt.encode(
        {"user_id": "u1", "email": "a@b.c", "plan": "paid", "exp": 9999999999},
        SECRET, algorithm="HS256",
    )
    assert _verify_message(token) == MSG_INVALID


def test_unknown_plan_rejected():
    token = jwt.encode(
        {"user_id": "u1", "email": "a@b.c", "plan": "gold", "iat": 1, "exp": 9999999999},
        SECRET, algorithm="HS256",
    )
    assert _verify_message(token) == MSG_INVALID


def test_generate_requires_user_id_and_email():
    with pytest.raises(ValueError):
        generate_token(TokenUser(user_id="", email="a@b.c", plan=Plan.FREE), SECRET)
    with pytest.raises(ValueError):
        generate_token(TokenUser(user_id="u1", email="", plan=Plan.FREE), SECRET)


def test_generate_requires_secret():
    with pytest.raises(ConfigurationError):
        generate_token(USER, "")


def test_hash_token_is_sha256_hex():
    digest = hash_token("abc")
    assert digest == "ba7816bf8f01cfea414140de5dae2223b00361a396177a9cb410ff61f20015ad"


def test_magic_tokens_are_random_hex():
    first, second = generate_magic_token(), generate_magic_token()
    assert len(first) == 64
    int(first, 16)
    assert first != second
