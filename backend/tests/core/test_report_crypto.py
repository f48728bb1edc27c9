"""Report crypto tests: AES-256-GCM with a PBKDF2-derived per-user key.

Tests cover:
    - Encrypt/decrypt of a report document
    - Fresh nonce per encryption, 12-byte iv and 16-byte tag
    - Authentication failures: tampered ciphertext/tag, wrong user, wrong secret
    - Missing secret refused
"""

import base64
import json

import pytest

from geni.core.errors import ConfigurationError, ReportDecryptionError
from geni.core.report_crypto import (
    EncryptedData, derive_key, encrypt_data, decrypt_data,
    encrypt_report, decrypt_report,
)

SECRET = "unit-test-secret"
USER_ID = "7f1c1f8e-3c57-4b3e-9d63-2c1d1f0b6a11"
ITERATIONS = 1000


def _flip_first_byte(b64: str) -> str:
    raw = bytearray(base64.b64decode(b64))
    raw[0] ^= 0x01
    return base64.b64encode(bytes(raw)).decode("ascii")


def test_derive_key_is_deterministic_per_user():
    key = derive_key(SECRET, USER_ID, ITERATIONS)
    assert len(key) == 32
    assert key == derive_key(SECRET, USER_ID, ITERATIONS)
    assert key != derive_key(SECRET, "another-user", ITERATIONS)


def test_derive_key_requires_secret():
    with pytest.raises(ConfigurationError):
        derive_key("", USER_ID, ITERATIONS)


def test_report_round_trip():
    report = {"insights": [{"trait_id": "alcohol-flush"}], "snp_count": 3, "format": "23andme"}
    encrypted = encrypt_report(report, USER_ID, SECRET, ITERATIONS)
    assert decrypt_report(encrypted, USER_ID, SECRET, ITERATIONS) == report


def test_ciphertext_does_not_contain_plaintext():
    encrypted = encrypt_data("rs671:GG", USER_ID, SECRET, ITERATIONS)
    assert b"rs671" not in base64.b64decode(encrypted.ciphertext)


def test_iv_and_tag_lengths():
    encrypted = encrypt_data("x", USER_ID, SECRET, ITERATIONS)
    assert len(base64.b64decode(encrypted.iv)) == 12
    assert len(base64.b64decode(encrypted.auth_tag)) == 16


def test_each_encryption_uses_a_fresh_nonce():
    first = encrypt_data("same", USER_ID, SECRET, ITERATIONS)
    second = encrypt_data("same", USER_ID, SECRET, ITERATIONS)
    assert first.iv != second.iv
    assert first.ciphertext != second.ciphertext


def test_tampered_ciphertext_rejected():
    encrypted = encrypt_data("hello world", USER_ID, SECRET, ITERATIONS)
    tampered = EncryptedData(
        ciphertext=_flip_first_byte(encrypted.ciphertext),
        iv=encrypted.iv,
        auth_tag=encrypted.auth_tag,
    )
    with pytest.raises(ReportDecryptionError):
        decrypt_data(tampered, USER_ID, SECRET, ITERATIONS)


def test_tampered_tag_rejected():
    encrypted = encrypt_data("hello world", USER_ID, SECRET, ITERATIONS)
    tampered = EncryptedData(
        ciphertext=encrypted.ciphertext,
        iv=encrypted.iv,
        auth_tag=_flip_first_byte(encrypted.auth_tag),
    )
    with pytest.raises(ReportDecryptionError):
        decrypt_data(tampered, USER_ID, SECRET, ITERATIONS)


def test_wrong_user_rejected():
    encrypted = encrypt_report({"a": 1}, USER_ID, SECRET, ITERATIONS)
    with pytest.raises(ReportDecryptionError):
        decrypt_report(encrypted, "someone-else", SECRET, ITERATIONS)


def test_wrong_secret_rejected():
    encrypted = encrypt_report({"a": 1}, USER_ID, SECRET, ITERATIONS)
    with pytest.raises(ReportDecryptionError):
        decrypt_report(encrypted, USER_ID, "rotated-secret", ITERATIONS)


def test_malformed_base64_rejected():
    encrypted = encrypt_data("x", USER_ID, SECRET, ITERATIONS)
    broken = EncryptedData(ciphertext="***", iv=encrypted.iv, auth_tag=encrypted.auth_tag)
    with pytest.raises(ReportDecryptionError):
        decrypt_data(broken, USER_ID, SECRET, ITERATIONS)


def test_unicode_survives_round_trip():
    report = {"note": "café ☕"}
    encrypted = encrypt_report(report, USER_ID, SECRET, ITERATIONS)
    assert json.dumps(decrypt_report(encrypted, USER_ID, SECRET, ITERATIONS)) == json.dumps(report)
