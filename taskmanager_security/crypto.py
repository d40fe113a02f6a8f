"""
Security Crypto Core — Key derivation, field encryption and safe comparison.

- Key material: PBKDF2-HMAC-SHA256(secret, salt, N) → 32-byte key
- Field encryption: AEAD(key) with a random 96-bit nonce per call
  Blob format: base64([nonce 12B][ciphertext + tag 16B])

Security Note:
    Never log plaintext, ciphertext or key values.
    Nonces are random 96-bit; collision probability negligible under normal usage.
"""
import os
import hmac
import base64
import binascii
import logging
import threading
from typing import Optional, Union

from cryptography.exceptions import InvalidTag
from cryptography.hazmat.primitives import hashes
from cryptography.hazmat.primitives.kdf.pbkdf2 import PBKDF2HMAC
from cryptography.hazmat.primitives.ciphers.aead import AESGCM, ChaCha20Poly1305

from .config import SecurityConfig
from .exceptions import (
    ConfigurationError,
    DecodeError,
    DecryptionError,
    EncryptionError,
    InvalidArgument,
)

logger = logging.getLogger("taskmanager.security")

NONCE_SIZE = 12  # 96-bit nonce
TAG_SIZE = 16
KEY_LENGTH = 32  # AES-256

DEFAULT_KEY_SALT = "taskmanager.security.default-salt"

_CIPHERS = {
    "aesgcm": AESGCM,
    "chacha20": ChaCha20Poly1305,
}


def constant_time_equals(a: Union[str, bytes], b: Union[str, bytes]) -> bool:
    """Compare two values without leaking the mismatch position.

    Strings are compared on their UTF-8 encoding. Values of different length,
    and text that has no UTF-8 encoding, compare unequal.
    """
    if a is None or b is None:
        return False
    try:
        if isinstance(a, str):
            a = a.encode("utf-8")
        if isinstance(b, str):
            b = b.encode("utf-8")
    except UnicodeEncodeError:
        return False
    return hmac.compare_digest(a, b)


def encode_text(value: str, what: str) -> bytes:
    """Return ``value`` as UTF-8, rejecting anything that is not encodable text.

    Raises:
        InvalidArgument: If value is not a str or holds lone surrogates.
    """
    if not isinstance(value, str):
        raise InvalidArgument(f"{what} must be text")
    try:
        return value.encode("utf-8")
    except UnicodeEncodeError as err:
        raise InvalidArgument(f"{what} is not valid UTF-8 text") from err


# ---------------------------------------------------------------------------
# Key derivation
# ---------------------------------------------------------------------------

def derive_key(secret: str, salt: bytes, iterations: int) -> bytes:
    """Derive a 32-byte encryption key using PBKDF2-HMAC-SHA256.

    Args:
        secret: Master secret string.
        salt: Salt bytes for the derivation.
        iterations: PBKDF2 iteration count.

    Returns:
        32-byte derived key.
    """
    kdf = PBKDF2HMAC(
        algorithm=hashes.SHA256(),
        length=KEY_LENGTH,
        salt=salt,
        iterations=iterations,
    )
    return kdf.derive(secret.encode("utf-8"))


class KeyMaterialProvider:
    """Derives the symmetric key from a SecurityConfig.

    Stateless besides the immutable config: safe to share across threads.
    """

    def __init__(self, config: SecurityConfig):
        self._config = config

    def __repr__(self) -> str:
        return (
            f"<KeyMaterialProvider iterations={self._config.kdf_iterations} "
            f"configured={self._config.has_secret}>"
        )

    @property
    def salt(self) -> bytes:
        return (self._config.key_salt or DEFAULT_KEY_SALT).encode("utf-8")

    def derive_key(self) -> bytes:
        """Return the derived key for the configured secret.

        Raises:
            ConfigurationError: If the secret is unset or empty.
        """
        secret = self._config.encryption_key.get_secret_value()
        if not secret:
            raise ConfigurationError("Encryption key is not configured")
        return derive_key(secret, self.salt, self._config.kdf_iterations)


# ---------------------------------------------------------------------------
# Field encryption
# ---------------------------------------------------------------------------

class DataEncryptor:
    """Encrypts sensitive text fields for storage.

    The derived key is computed on first use and kept in memory for the
    lifetime of the encryptor; each call builds its own AEAD object.
    """

    def __init__(
        self,
        keys: KeyMaterialProvider,
        cipher_backend: str = "aesgcm",
    ):
        if cipher_backend not in _CIPHERS:
            raise ConfigurationError(f"Unsupported cipher backend: {cipher_backend}")
        self._keys = keys
        self._cipher_cls = _CIPHERS[cipher_backend]
        self._key: Optional[bytes] = None
        self._key_lock = threading.Lock()

    def __repr__(self) -> str:
        return f"<DataEncryptor cipher={self._cipher_cls.__name__}>"

    def _cipher(self):
        if self._key is None:
            with self._key_lock:
                if self._key is None:
                    self._key = self._keys.derive_key()
        return self._cipher_cls(self._key)

    def encrypt_bytes(self, data: bytes, associated_data: Optional[bytes] = None) -> bytes:
        """Encrypt raw bytes.

        Format: [nonce 12B][encrypted_payload + tag 16B]

        Raises:
            InvalidArgument: If data is empty.
            ConfigurationError: If key derivation fails.
            EncryptionError: If the cipher fails.
        """
        if not data:
            raise InvalidArgument("Data to encrypt cannot be empty")
        cipher = self._cipher()
        nonce = os.urandom(NONCE_SIZE)
        try:
            ct = cipher.encrypt(nonce, data, associated_data)
        except Exception as err:
            logger.error("Encryption failed: %s", type(err).__name__)
            raise EncryptionError("Encryption failed") from err
        return nonce + ct

    def decrypt_bytes(self, payload: bytes, associated_data: Optional[bytes] = None) -> bytes:
        """Decrypt bytes produced by ``encrypt_bytes``.

        Raises:
            InvalidArgument: If payload is empty.
            DecodeError: If payload is too short to hold nonce and tag.
            DecryptionError: If authentication fails.
        """
        if not payload:
            raise InvalidArgument("Data to decrypt cannot be empty")
        _min = NONCE_SIZE + TAG_SIZE
        if len(payload) < _min:
            raise DecodeError(
                f"Encrypted payload too short: {len(payload)} bytes "
                f"(minimum {_min})"
            )
        cipher = self._cipher()
        nonce = payload[:NONCE_SIZE]
        ct = payload[NONCE_SIZE:]
        try:
            return cipher.decrypt(nonce, ct, associated_data)
        except InvalidTag as err:
            logger.error("Decryption failed: authentication tag mismatch")
            raise DecryptionError("Decryption failed") from err

    def encrypt(self, plaintext: str, associated_data: Optional[bytes] = None) -> str:
        """Encrypt a text value and return it base64-encoded.

        Args:
            plaintext: Text to protect; must be non-empty.
            associated_data: Optional context bound to the ciphertext.

        Returns:
            Encrypted Blob as ASCII text.
        """
        if not plaintext:
            raise InvalidArgument("Plaintext cannot be null or empty")
        data = encode_text(plaintext, "Plaintext")
        blob = self.encrypt_bytes(data, associated_data)
        return base64.b64encode(blob).decode("ascii")

    def decrypt(self, encoded: str, associated_data: Optional[bytes] = None) -> str:
        """Decrypt a value produced by ``encrypt``.

        Args:
            encoded: Encrypted Blob text.
            associated_data: Context given at encryption time, if any.

        Returns:
            The original text.
        """
        if not encoded:
            raise InvalidArgument("Encrypted text cannot be null or empty")
        try:
            blob = base64.b64decode(encoded, validate=True)
        except (binascii.Error, ValueError) as err:
            raise DecodeError("Encrypted text is not valid base64") from err
        if not blob:
            raise DecodeError("Encrypted text decodes to an empty payload")
        data = self.decrypt_bytes(blob, associated_data)
        try:
            return data.decode("utf-8")
        except UnicodeDecodeError as err:
            raise DecryptionError("Decrypted payload is not valid UTF-8") from err
