"""
SecurityService — One object wiring the security primitives together.

Provides the public API consumed by the service layer:
- ``hash_password()`` / ``verify_password()`` — credential records
- ``encrypt()`` / ``decrypt()`` — sensitive field protection
- ``generate_token()`` / ``validate_token()`` / ``revoke_token()`` — sessions
- ``is_password_strong()`` / ``reset_password()`` — password policy
- ``from_env()`` — factory reading SecurityConfig from the environment

Each instance owns its own token store; use it as a context manager (or call
``close()``) so the store is cleared when the owner shuts down.
"""
import logging
from typing import Optional

from .config import SecurityConfig
from .crypto import DataEncryptor, KeyMaterialProvider
from .exceptions import InvalidArgument
from .hashing import PasswordHasher
from .strength import PasswordStrengthValidator
from .tokens import TokenService

logger = logging.getLogger("taskmanager.security")


class SecurityService:
    """Facade over the key provider, hasher, encryptor, tokens and policy."""

    def __init__(self, config: SecurityConfig, tokens: Optional[TokenService] = None):
        self.config = config
        self.keys = KeyMaterialProvider(config)
        self.hasher = PasswordHasher()
        self.encryptor = DataEncryptor(self.keys, config.cipher_backend)
        self.tokens = tokens or TokenService(
            ttl=config.token_ttl,
            sweep_interval=config.token_sweep_interval,
        )
        self.policy = PasswordStrengthValidator(config.min_password_length)

    def __repr__(self) -> str:
        return f"<SecurityService cipher={self.config.cipher_backend} tokens={self.tokens!r}>"

    # ------------------------------------------------------------------
    # Passwords
    # ------------------------------------------------------------------

    def hash_password(self, password: str) -> str:
        return self.hasher.hash(password)

    def verify_password(self, password: str, encoded: str) -> bool:
        return self.hasher.verify(password, encoded)

    def is_password_strong(self, password: str) -> bool:
        return self.policy.is_strong(password)

    def reset_password(self, new_password: str) -> str:
        """Validate ``new_password`` against the policy and hash it.

        Returns:
            The new Password Hash Record, ready to persist.

        Raises:
            InvalidArgument: If the password is empty or too weak.
        """
        if not new_password:
            raise InvalidArgument("Password cannot be null or empty")
        missing = self.policy.missing_requirements(new_password)
        if missing:
            logger.warning("Password reset rejected: missing %s", ", ".join(missing))
            raise InvalidArgument(
                f"Password does not meet policy: missing {', '.join(missing)}"
            )
        return self.hasher.hash(new_password)

    # ------------------------------------------------------------------
    # Sensitive fields
    # ------------------------------------------------------------------

    def encrypt(self, plaintext: str) -> str:
        return self.encryptor.encrypt(plaintext)

    def decrypt(self, encoded: str) -> str:
        return self.encryptor.decrypt(encoded)

    # ------------------------------------------------------------------
    # Tokens
    # ------------------------------------------------------------------

    def generate_token(self, subject: str) -> str:
        return self.tokens.generate_token(subject)

    def validate_token(self, subject: str, token: str) -> bool:
        return self.tokens.validate_token(subject, token)

    def revoke_token(self, subject: str) -> None:
        self.tokens.revoke(subject)

    def stats(self) -> dict:
        """Non-sensitive status summary."""
        return {
            "configured": self.config.has_secret,
            "cipher": self.config.cipher_backend,
            "kdf_iterations": self.config.kdf_iterations,
            **self.tokens.stats(),
        }

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def close(self) -> None:
        self.tokens.close()

    def __enter__(self) -> "SecurityService":
        return self

    def __exit__(self, *exc) -> None:
        self.close()

    @classmethod
    def from_env(cls, environ: Optional[dict] = None) -> "SecurityService":
        """Build a SecurityService from TASKMANAGER_* environment variables."""
        config = SecurityConfig.from_env(environ)
        return cls(config)
