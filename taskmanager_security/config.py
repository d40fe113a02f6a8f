"""
Security Configuration — Secret loading and validated settings.

Reads the master secret and tuning knobs from environment variables:
    TASKMANAGER_ENCRYPTION_KEY = <master secret string>
    TASKMANAGER_KEY_SALT = <optional salt string>
    TASKMANAGER_KDF_ITERATIONS = <integer, >= 10000>
    TASKMANAGER_CIPHER_BACKEND = aesgcm | chacha20
    TASKMANAGER_TOKEN_TTL = <seconds>
    TASKMANAGER_TOKEN_SWEEP_INTERVAL = <seconds>
    TASKMANAGER_MIN_PASSWORD_LENGTH = <integer>

Security Note:
    Never log key material. The secret is held as a ``SecretStr`` so it is
    masked in ``repr()`` and in validation errors.
"""
import os
import base64
import secrets
import logging
from typing import Optional

from pydantic import BaseModel, Field, SecretStr, ValidationError, field_validator

from .exceptions import ConfigurationError, InvalidArgument

logger = logging.getLogger("taskmanager.security")

ENV_PREFIX = "TASKMANAGER_"

MIN_KDF_ITERATIONS = 10_000
DEFAULT_KDF_ITERATIONS = 100_000
DEFAULT_TOKEN_TTL = 24 * 3600

_SUPPORTED_CIPHERS = ("aesgcm", "chacha20")

# env suffix -> field name, for the optional integer/str knobs
_ENV_FIELDS = {
    "KEY_SALT": "key_salt",
    "KDF_ITERATIONS": "kdf_iterations",
    "CIPHER_BACKEND": "cipher_backend",
    "TOKEN_TTL": "token_ttl",
    "TOKEN_SWEEP_INTERVAL": "token_sweep_interval",
    "MIN_PASSWORD_LENGTH": "min_password_length",
}


def generate_master_key() -> str:
    """Generate a random 32-byte master secret and return it as base64.

    This is a utility for operators provisioning TASKMANAGER_ENCRYPTION_KEY.

    Returns:
        Base64-encoded 32-byte key string.
    """
    return base64.b64encode(secrets.token_bytes(32)).decode("ascii")


def generate_api_key(prefix: str = "ak", nbytes: int = 32) -> str:
    """Generate an API key of the form ``<prefix>_<urlsafe random>``.

    Args:
        prefix: Optional label; an empty prefix yields the bare key.
        nbytes: Random bytes of entropy (minimum 16).

    Returns:
        API key string without base64 padding.
    """
    if nbytes < 16:
        raise InvalidArgument("API key must carry at least 16 random bytes")
    key = secrets.token_urlsafe(nbytes).rstrip("=")
    return f"{prefix}_{key}" if prefix else key


class SecurityConfig(BaseModel):
    """Validated, immutable security configuration."""

    encryption_key: SecretStr = Field(default=SecretStr(""))
    key_salt: Optional[str] = None
    kdf_iterations: int = Field(default=DEFAULT_KDF_ITERATIONS, ge=MIN_KDF_ITERATIONS)
    cipher_backend: str = Field(default="aesgcm")
    token_ttl: int = Field(default=DEFAULT_TOKEN_TTL, ge=1)
    token_sweep_interval: int = Field(default=60, ge=0)
    min_password_length: int = Field(default=8, ge=1)

    model_config = {"frozen": True}

    @field_validator("cipher_backend")
    @classmethod
    def validate_cipher(cls, v: str) -> str:
        """Validate cipher backend is supported."""
        v = v.lower()
        if v not in _SUPPORTED_CIPHERS:
            raise ValueError(f"Unsupported cipher backend: {v}")
        return v

    @field_validator("key_salt")
    @classmethod
    def empty_salt_is_unset(cls, v: Optional[str]) -> Optional[str]:
        return v or None

    @property
    def has_secret(self) -> bool:
        return bool(self.encryption_key.get_secret_value())

    @classmethod
    def from_env(cls, environ: Optional[dict] = None) -> "SecurityConfig":
        """Create SecurityConfig by loading values from environment.

        A missing encryption key is not an error here; it surfaces as
        ``ConfigurationError`` the first time key material is derived.

        Args:
            environ: Mapping to read from (defaults to ``os.environ``).

        Returns:
            Populated SecurityConfig instance.

        Raises:
            ConfigurationError: If any value fails validation.
        """
        env = os.environ if environ is None else environ
        values = {
            "encryption_key": env.get(f"{ENV_PREFIX}ENCRYPTION_KEY", ""),
        }
        for suffix, field in _ENV_FIELDS.items():
            raw = env.get(f"{ENV_PREFIX}{suffix}")
            if raw is not None and raw != "":
                values[field] = raw
        try:
            config = cls(**values)
        except ValidationError as err:
            fields = sorted({str(e["loc"][0]) for e in err.errors() if e["loc"]})
            raise ConfigurationError(
                f"Invalid security configuration for: {', '.join(fields)}"
            ) from err
        if not config.has_secret:
            logger.warning(
                "%sENCRYPTION_KEY is not set; key derivation will fail on first use",
                ENV_PREFIX,
            )
        logger.debug(
            "Security config loaded: cipher=%s kdf_iterations=%d token_ttl=%d",
            config.cipher_backend, config.kdf_iterations, config.token_ttl,
        )
        return config
