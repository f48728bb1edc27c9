"""Report Crypto: AES-256-GCM encryption at rest with a per-user derived key.

Invariants:
    - Key = PBKDF2-HMAC-SHA256(server secret, salt=user_id UTF-8, iterations, 32 bytes)
    - Fresh random 12-byte nonce per encryption; never reused with a key
    - Ciphertext, nonce (iv) and 16-byte tag are stored as separate base64 strings
    - Any authentication failure raises ReportDecryptionError (no partial plaintext)
    - An empty server secret raises ConfigurationError (no fallback secret)

Design Decisions:
    - One encrypted blob per report (genotypes + insights together): each blob
      carries its own iv/tag, so a row never shares a nonce across ciphertexts
    - Iterations passed in (from Settings) so tests can use a low count
"""

import base64
import json
import os
from dataclasses import dataclass

from cryptography.exceptions import InvalidTag
from cryptography.hazmat.primitives import hashes
from cryptography.hazmat.primitives.ciphers.aead import AESGCM
from cryptography.hazmat.primitives.kdf.pbkdf2 import PBKDF2HMAC

from geni.core.errors import ConfigurationError, ReportDecryptionError, ErrorContext

KEY_LENGTH = 32
NONCE_LENGTH = 12
TAG_LENGTH = 16
DEFAULT_ITERATIONS = 310_000


@dataclass(frozen=True)
class EncryptedData:
    """Base64-encoded ciphertext with its nonce and authentication tag."""
    ciphertext: str
    iv: str
    auth_tag: str


def derive_key(
    secret: str, user_id: str, iterations: int = DEFAULT_ITERATIONS,
) -> bytes:
    """Derive the per-user AES key from the server secret."""
    if not secret:
        raise ConfigurationError("jwt_secret")
    kdf = PBKDF2HMAC(
        algorithm=hashes.SHA256(),
        length=KEY_LENGTH,
        salt=user_id.encode("utf-8"),
        iterations=iterations,
    )
    return kdf.derive(secret.encode("utf-8"))


def encrypt_data(
    plaintext: str,
    user_id: str,
    secret: str,
    iterations: int = DEFAULT_ITERATIONS,
) -> EncryptedData:
    key = derive_key(secret, user_id, iterations)
    nonce = os.urandom(NONCE_LENGTH)
    sealed = AESGCM(key).encrypt(nonce, plaintext.encode("utf-8"), None)
    # AESGCM appends the tag to the ciphertext
    ciphertext, tag = sealed[:-TAG_LENGTH], sealed[-TAG_LENGTH:]
    return EncryptedData(
        ciphertext=_b64(ciphertext),
        iv=_b64(nonce),
        auth_tag=_b64(tag),
    )


def decrypt_data(
    encrypted: EncryptedData,
    user_id: str,
    secret: str,
    iterations: int = DEFAULT_ITERATIONS,
) -> str:
    key = derive_key(secret, user_id, iterations)
    try:
        nonce = base64.b64decode(encrypted.iv, validate=True)
        sealed = (
            base64.b64decode(encrypted.ciphertext, validate=True)
            + base64.b64decode(encrypted.auth_tag, validate=True)
        )
        plaintext = AESGCM(key).decrypt(nonce, sealed, None)
    except (InvalidTag, ValueError) as e:
        raise ReportDecryptionError(
            context=ErrorContext(user_id=user_id),
        ) from e
    return plaintext.decode("utf-8")


def encrypt_report(
    report_data: dict,
    user_id: str,
    secret: str,
    iterations: int = DEFAULT_ITERATIONS,
) -> EncryptedData:
    """JSON-serialize then encrypt a report document."""
    payload = json.dumps(report_data, ensure_ascii=False, separators=(",", ":"))
    return encrypt_data(payload, user_id, secret, iterations)


def decrypt_report(
    encrypted: EncryptedData,
    user_id: str,
    secret: str,
    iterations: int = DEFAULT_ITERATIONS,
) -> dict:
    """Decrypt then JSON-parse a report document."""
    return json.loads(decrypt_data(encrypted, user_id, secret, iterations))


def _b64(raw: bytes) -> str:
    return base64.b64encode(raw).decode("ascii")
