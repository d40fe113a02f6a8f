"""Password strength policy and secure password generation."""
import string
import secrets
from typing import Optional

from .exceptions import InvalidArgument

DEFAULT_MIN_LENGTH = 8
MIN_GENERATED_LENGTH = 12

SPECIAL_CHARACTERS = "!@#$%^&*()_+-=[]{}|;:,.<>?"


class PasswordStrengthValidator:
    """Checks a password against length and character-class rules.

    A strong password has at least ``min_length`` characters and contains
    an uppercase letter, a lowercase letter, a digit and one other
    character.
    """

    def __init__(self, min_length: int = DEFAULT_MIN_LENGTH):
        if min_length < 1:
            raise InvalidArgument("Minimum password length must be positive")
        self.min_length = min_length

    @staticmethod
    def _classes(password: str) -> tuple[bool, bool, bool, bool]:
        upper = lower = digit = other = False
        for c in password:
            if c.isupper():
                upper = True
            elif c.islower():
                lower = True
            elif c.isdigit():
                digit = True
            elif not c.isalnum():
                other = True
            if upper and lower and digit and other:
                break
        return upper, lower, digit, other

    def is_strong(self, password: Optional[str]) -> bool:
        if not password or not isinstance(password, str):
            return False
        if len(password) < self.min_length:
            return False
        return all(self._classes(password))

    def missing_requirements(self, password: Optional[str]) -> list[str]:
        """Name every rule ``password`` fails, in a stable order."""
        if not password or not isinstance(password, str):
            return ["length", "uppercase", "lowercase", "digit", "special"]
        missing = []
        if len(password) < self.min_length:
            missing.append("length")
        names = ("uppercase", "lowercase", "digit", "special")
        missing.extend(
            name for name, present in zip(names, self._classes(password)) if not present
        )
        return missing


def generate_password(length: int = 16, special: bool = True) -> str:
    """Generate a random password with one character from every class.

    Args:
        length: Password length (minimum 12).
        special: Include characters from SPECIAL_CHARACTERS.

    Returns:
        Generated password.

    Raises:
        InvalidArgument: If length is below 12.
    """
    if length < MIN_GENERATED_LENGTH:
        raise InvalidArgument(
            f"Password length must be at least {MIN_GENERATED_LENGTH} characters"
        )
    pools = [string.ascii_lowercase, string.ascii_uppercase, string.digits]
    if special:
        pools.append(SPECIAL_CHARACTERS)
    alphabet = "".join(pools)
    chars = [secrets.choice(pool) for pool in pools]
    chars.extend(secrets.choice(alphabet) for _ in range(length - len(chars)))
    secrets.SystemRandom().shuffle(chars)
    return "".join(chars)
