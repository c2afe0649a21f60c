"""Password-based authenticated encryption for backups.

A key is derived from the password with PBKDF2-HMAC-SHA256 over a fresh
random salt and used with AES-256-GCM under a fresh random nonce. The
resulting blob records everything decryption needs apart from the password.
"""

import base64
import binascii
import logging
import os
from dataclasses import dataclass
from typing import Any, Callable

from cryptography.exceptions import InvalidTag
from cryptography.hazmat.primitives import hashes
from cryptography.hazmat.primitives.ciphers.aead import AESGCM
from cryptography.hazmat.primitives.kdf.pbkdf2 import PBKDF2HMAC

from billtrack.domain.errors import AuthenticationError, MalformedBlobError, PasswordRequiredError

logger = logging.getLogger(__name__)

ALGORITHM = "AES-256-GCM"
KDF = "PBKDF2-SHA256"
DEFAULT_ITERATIONS = 600_000
KEY_LENGTH = 32
SALT_LENGTH = 16
NONCE_LENGTH = 12
TAG_LENGTH = 16

RandomBytes = Callable[[int], bytes]


def _b64(data: bytes) -> str:
    return base64.b64encode(data).decode("ascii")


def _b64_decode(value: Any, field: str) -> bytes:
    if not isinstance(value, str):
        raise MalformedBlobError(f"Encrypted blob field '{field}' must be a base64 string")
    try:
        return base64.b64decode(value, validate=True)
    except (binascii.Error, ValueError) as exc:
        raise MalformedBlobError(f"Encrypted blob field '{field}' is not valid base64: {exc}") from exc


@dataclass(frozen=True)
class EncryptedBlob:
    """Self-describing ciphertext envelope."""

    algorithm: str
    kdf: str
    iterations: int
    salt: bytes
    nonce: bytes
    ciphertext: bytes
    tag: bytes

    def to_dict(self) -> dict[str, Any]:
        return {
            "algorithm": self.algorithm,
            "kdf": self.kdf,
            "iterations": self.iterations,
            "salt": _b64(self.salt),
            "nonce": _b64(self.nonce),
            "ciphertext": _b64(self.ciphertext),
            "tag": _b64(self.tag),
        }

    @staticmethod
    def from_dict(raw: Any) -> "EncryptedBlob":
        """Parse a blob from its JSON form.

        Raises:
            MalformedBlobError: If fields are missing, mis-encoded or have
                the wrong length, or the algorithm is not supported
        """
        if not isinstance(raw, dict):
            raise MalformedBlobError("Encrypted blob must be an object")

        required = ["algorithm", "kdf", "iterations", "salt", "nonce", "ciphertext", "tag"]
        missing = [key for key in required if raw.get(key) is None]
        if missing:
            raise MalformedBlobError(f"Encrypted blob missing required fields: {missing}")

        if raw["algorithm"] != ALGORITHM:
            raise MalformedBlobError(f"Unsupported encryption algorithm: {raw['algorithm']}")
        if raw["kdf"] != KDF:
            raise MalformedBlobError(f"Unsupported key derivation function: {raw['kdf']}")

        iterations = raw["iterations"]
        if isinstance(iterations, bool) or not isinstance(iterations, int) or iterations < 1:
            raise MalformedBlobError("Encrypted blob iterations must be a positive integer")

        blob = EncryptedBlob(
            algorithm=raw["algorithm"],
            kdf=raw["kdf"],
            iterations=iterations,
            salt=_b64_decode(raw["salt"], "salt"),
            nonce=_b64_decode(raw["nonce"], "nonce"),
            ciphertext=_b64_decode(raw["ciphertext"], "ciphertext"),
            tag=_b64_decode(raw["tag"], "tag"),
        )
        _validate_lengths(blob)
        return blob


def _validate_lengths(blob: EncryptedBlob) -> None:
    if len(blob.salt) < 8:
        raise MalformedBlobError("Encrypted blob salt is too short")
    if len(blob.nonce) != NONCE_LENGTH:
        raise MalformedBlobError(f"Encrypted blob nonce must be {NONCE_LENGTH} bytes")
    if len(blob.tag) != TAG_LENGTH:
        raise MalformedBlobError(f"Encrypted blob tag must be {TAG_LENGTH} bytes")


class EncryptionCodec:
    """Encrypts and decrypts strings with a password."""

    def __init__(self, iterations: int = DEFAULT_ITERATIONS, random_bytes: RandomBytes = os.urandom):
        """Initialize codec.

        Args:
            iterations: PBKDF2 iteration count used for new blobs
            random_bytes: Source of salts and nonces
        """
        if iterations < 1:
            raise ValueError("iterations must be positive")
        self.iterations = iterations
        self._random_bytes = random_bytes

    @staticmethod
    def derive_key(password: str, salt: bytes, iterations: int) -> bytes:
        kdf = PBKDF2HMAC(
            algorithm=hashes.SHA256(),
            length=KEY_LENGTH,
            salt=salt,
            iterations=iterations,
        )
        return kdf.derive(password.encode("utf-8"))

    def encrypt(self, plaintext: str, password: str) -> EncryptedBlob:
        """Encrypt plaintext under a key derived from password.

        Raises:
            PasswordRequiredError: If password is empty
        """
        if not password:
            raise PasswordRequiredError("A password is required for encryption")

        salt = self._random_bytes(SALT_LENGTH)
        nonce = self._random_bytes(NONCE_LENGTH)
        key = self.derive_key(password, salt, self.iterations)

        sealed = AESGCM(key).encrypt(nonce, plaintext.encode("utf-8"), None)
        return EncryptedBlob(
            algorithm=ALGORITHM,
            kdf=KDF,
            iterations=self.iterations,
            salt=salt,
            nonce=nonce,
            ciphertext=sealed[:-TAG_LENGTH],
            tag=sealed[-TAG_LENGTH:],
        )

    def decrypt(self, blob: EncryptedBlob, password: str) -> str:
        """Verify and decrypt a blob.

        Raises:
            PasswordRequiredError: If password is empty
            MalformedBlobError: If the blob is structurally invalid
            AuthenticationError: If the password is wrong or the blob was
                modified
        """
        if not password:
            raise PasswordRequiredError()
        if blob.algorithm != ALGORITHM or blob.kdf != KDF:
            raise MalformedBlobError(f"Unsupported blob algorithm: {blob.algorithm}/{blob.kdf}")
        _validate_lengths(blob)

        key = self.derive_key(password, blob.salt, blob.iterations)
        try:
            plaintext = AESGCM(key).decrypt(blob.nonce, blob.ciphertext + blob.tag, None)
        except InvalidTag as exc:
            logger.warning("Rejected encrypted blob: authentication failed")
            raise AuthenticationError(
                "Decryption failed: wrong password or corrupted data"
            ) from exc

        try:
            return plaintext.decode("utf-8")
        except UnicodeDecodeError as exc:
            raise MalformedBlobError("Decrypted data is not valid UTF-8") from exc
