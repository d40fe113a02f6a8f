"""
Security Exceptions — Error taxonomy for the security primitives.

Every error raised by this package derives from ``SecurityError`` and also
from the builtin a caller would naturally catch (``ValueError`` for bad
input, ``RuntimeError`` for bad configuration).

Security Note:
    Messages never carry passwords, keys, tokens or plaintext.
"""


class SecurityError(Exception):
    """Base class for all taskmanager_security errors."""


class InvalidArgument(SecurityError, ValueError):
    """Caller input is null, empty or malformed."""


class ConfigurationError(SecurityError, RuntimeError):
    """Secret material is missing or invalid."""


class DecodeError(SecurityError, ValueError):
    """An encoded payload could not be decoded or is truncated."""


class EncryptionError(SecurityError):
    """The cipher failed while encrypting."""


class DecryptionError(SecurityError):
    """The cipher rejected a payload (wrong key or corrupt ciphertext)."""
