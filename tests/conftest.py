"""Shared fixtures for taskmanager_security tests."""
import pytest

from taskmanager_security.config import SecurityConfig, MIN_KDF_ITERATIONS


class FakeClock:
    """Manually advanced clock for expiry tests."""

    def __init__(self, start: float = 1_700_000_000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def config():
    """Config with a secret and the minimum KDF cost to keep tests fast."""
    return SecurityConfig(
        encryption_key="unit-test-master-secret",
        key_salt="unit-test-salt",
        kdf_iterations=MIN_KDF_ITERATIONS,
    )


@pytest.fixture
def unconfigured():
    """Config with no encryption key."""
    return SecurityConfig(kdf_iterations=MIN_KDF_ITERATIONS)
