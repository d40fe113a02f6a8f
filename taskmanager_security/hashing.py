"""
Password Hashing — Salted, iterated SHA-256 records.

Record format: ``base64(salt) + ":" + hex(digest)`` where ``digest`` is
SHA-256 applied ITERATIONS times starting from ``salt || utf8(password)``.

Records are never compared as strings; verification recomputes the digest
and compares the raw bytes in constant time.
"""
import os
import base64
import binascii
import hashlib
import logging
from typing import Optional

from .crypto import constant_time_equals, encode_text
from .exceptions import InvalidArgument

logger = logging.getLogger("taskmanager.security")

SALT_SIZE = 32  # 256-bit salt
ITERATIONS = 10_000
DIGEST_SIZE = hashlib.sha256().digest_size
SEPARATOR = ":"


def _digest(salt: bytes, password: bytes) -> bytes:
    value = salt + password
    for _ in range(ITERATIONS):
        value = hashlib.sha256(value).digest()
    return value


class PasswordHasher:
    """Hashes and verifies user passwords.

    Records do not carry their round count, so every record is produced and
    checked with the fixed ITERATIONS; a different count would make existing
    records unverifiable.
    """

    iterations = ITERATIONS

    def hash(self, password: str) -> str:
        """Return a new Password Hash Record for ``password``.

        Every call draws a fresh salt, so hashing the same password twice
        yields two different records.

        Raises:
            InvalidArgument: If password is None, empty or not UTF-8 text.
        """
        if not password:
            raise InvalidArgument("Password cannot be null or empty")
        secret = encode_text(password, "Password")
        salt = os.urandom(SALT_SIZE)
        digest = _digest(salt, secret)
        return base64.b64encode(salt).decode("ascii") + SEPARATOR + digest.hex()

    def _split(self, encoded: str) -> Optional[tuple[bytes, bytes]]:
        parts = encoded.split(SEPARATOR)
        if len(parts) != 2:
            return None
        try:
            salt = base64.b64decode(parts[0], validate=True)
            stored = bytes.fromhex(parts[1])
        except (binascii.Error, ValueError):
            return None
        if not salt or not stored:
            return None
        return salt, stored

    def verify(self, password: str, encoded: str) -> bool:
        """Check ``password`` against a stored record.

        Fails closed: malformed records, None or empty arguments all
        return False instead of raising.
        """
        if not password or not encoded:
            return False
        if not isinstance(password, str) or not isinstance(encoded, str):
            return False
        parts = self._split(encoded)
        if parts is None:
            logger.debug("Password verification on malformed hash record")
            return False
        try:
            secret = password.encode("utf-8")
        except UnicodeEncodeError:
            return False
        salt, stored = parts
        candidate = _digest(salt, secret)
        return constant_time_equals(candidate, stored)

    def needs_rehash(self, encoded: str) -> bool:
        """Return True when ``encoded`` is not a current-format record."""
        if not encoded:
            return True
        parts = self._split(encoded)
        if parts is None:
            return True
        salt, stored = parts
        return len(salt) != SALT_SIZE or len(stored) != DIGEST_SIZE
