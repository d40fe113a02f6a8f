"""Security primitives for the task manager backend.

Password hashing, sensitive-field encryption and ephemeral session tokens,
all safe to call from concurrent request-handling threads.

Security Note (Threat Model):
    Derived keys and live tokens are held in process memory for the
    lifetime of their owning instance. A memory dump of the application
    process could expose them. Mitigation requires HSM/secure enclave
    integration which is out of scope.
"""

from .version import __version__
from .config import SecurityConfig, generate_master_key, generate_api_key
from .crypto import DataEncryptor, KeyMaterialProvider, constant_time_equals
from .exceptions import (
    SecurityError,
    InvalidArgument,
    ConfigurationError,
    DecodeError,
    EncryptionError,
    DecryptionError,
)
from .hashing import PasswordHasher
from .service import SecurityService
from .strength import PasswordStrengthValidator, generate_password
from .tokens import TokenService

__all__ = [
    "__version__",
    "SecurityConfig",
    "SecurityService",
    "KeyMaterialProvider",
    "DataEncryptor",
    "PasswordHasher",
    "TokenService",
    "PasswordStrengthValidator",
    "constant_time_equals",
    "generate_master_key",
    "generate_api_key",
    "generate_password",
    "SecurityError",
    "InvalidArgument",
    "ConfigurationError",
    "DecodeError",
    "EncryptionError",
    "DecryptionError",
]
