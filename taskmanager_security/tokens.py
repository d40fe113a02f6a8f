"""
Token Service — Opaque session tokens with server-side, expiry-aware storage.

Per subject the lifecycle is::

    NoToken -> Active(token, expires_at) -> Expired | Revoked -> NoToken

Tokens are random text with no embedded structure; the subject and expiry
live only in the server-side TokenEntry. Issuing a token for a subject
supersedes the previous one. Tokens are only valid against the TokenService
instance that issued them.

Security Note:
    Never log token values. Only log subjects, counts and operations.
"""
import time
import secrets
import logging
import threading
from typing import Callable, NamedTuple, Optional

from .crypto import constant_time_equals, encode_text
from .exceptions import InvalidArgument

logger = logging.getLogger("taskmanager.security")

TOKEN_ENTROPY_BYTES = 32  # 256 bits
DEFAULT_TTL = 24 * 3600
DEFAULT_SWEEP_INTERVAL = 60


class TokenEntry(NamedTuple):
    """Stored state for one subject."""
    token: str
    expires_at: float

    def expired(self, now: float) -> bool:
        return now >= self.expires_at


class TokenService:
    """Issues, validates and revokes per-subject session tokens.

    The subject -> TokenEntry map is owned by the instance and every
    mutation happens under ``self._lock``. Token material is produced
    outside the lock, so issuers only contend on the map update itself.
    """

    def __init__(
        self,
        ttl: int = DEFAULT_TTL,
        sweep_interval: int = DEFAULT_SWEEP_INTERVAL,
        clock: Optional[Callable[[], float]] = None,
    ):
        if ttl <= 0:
            raise InvalidArgument("Token TTL must be positive")
        if sweep_interval < 0:
            raise InvalidArgument("Sweep interval cannot be negative")
        self._ttl = ttl
        self._sweep_interval = sweep_interval
        self._clock = clock or time.time
        self._tokens: dict[str, TokenEntry] = {}
        self._lock = threading.Lock()
        self._last_sweep = self._clock()

    def __repr__(self) -> str:
        return f"<TokenService ttl={self._ttl} active={len(self._tokens)}>"

    @property
    def ttl(self) -> int:
        return self._ttl

    # ------------------------------------------------------------------
    # Internals (caller holds the lock)
    # ------------------------------------------------------------------

    def _sweep(self, now: float) -> int:
        expired = [s for s, entry in self._tokens.items() if entry.expired(now)]
        for subject in expired:
            del self._tokens[subject]
        self._last_sweep = now
        return len(expired)

    def _maybe_sweep(self, now: float) -> None:
        if now - self._last_sweep >= self._sweep_interval:
            removed = self._sweep(now)
            if removed:
                logger.debug("Token sweep removed %d expired token(s)", removed)

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def generate_token(self, subject: str) -> str:
        """Issue a new token for ``subject``, replacing any previous one.

        Args:
            subject: Identifier the token is bound to (e.g. username).

        Returns:
            Opaque token text.

        Raises:
            InvalidArgument: If subject is None, empty or not UTF-8 text.
        """
        if not subject:
            raise InvalidArgument("Subject cannot be null or empty")
        encode_text(subject, "Subject")
        now = self._clock()
        expires_at = now + self._ttl
        token = secrets.token_urlsafe(TOKEN_ENTROPY_BYTES)
        with self._lock:
            self._tokens[subject] = TokenEntry(token, expires_at)
            self._maybe_sweep(now)
        logger.debug("Issued token for subject=%s", subject)
        return token

    def validate_token(self, subject: str, token: str) -> bool:
        """Return True if ``token`` is the live token for ``subject``.

        Never raises. Unknown subjects, mismatches and expired entries
        return False; an expired entry is removed as a side effect.
        """
        if not subject or not token:
            return False
        if not isinstance(subject, str) or not isinstance(token, str):
            return False
        now = self._clock()
        with self._lock:
            entry = self._tokens.get(subject)
            if entry is None:
                logger.warning("Token validation failed: no token for subject=%s", subject)
                return False
            if entry.expired(now):
                del self._tokens[subject]
                logger.warning("Token validation failed: token expired for subject=%s", subject)
                return False
            valid = constant_time_equals(token, entry.token)
        if not valid:
            logger.warning("Token validation failed: token mismatch for subject=%s", subject)
        return valid

    def revoke(self, subject: str) -> None:
        """Remove the token for ``subject``; a no-op when there is none."""
        if not subject:
            return
        with self._lock:
            removed = self._tokens.pop(subject, None)
        if removed is not None:
            logger.debug("Revoked token for subject=%s", subject)

    def purge_expired(self) -> int:
        """Drop every expired entry now and return how many were removed."""
        with self._lock:
            return self._sweep(self._clock())

    @property
    def active_count(self) -> int:
        """Number of unexpired tokens currently held."""
        now = self._clock()
        with self._lock:
            return sum(1 for entry in self._tokens.values() if not entry.expired(now))

    def stats(self) -> dict:
        """Return a status snapshot safe to expose (no token values)."""
        now = self._clock()
        with self._lock:
            total = len(self._tokens)
            expired = sum(1 for entry in self._tokens.values() if entry.expired(now))
        return {
            "tokens": total,
            "active": total - expired,
            "expired": expired,
            "ttl": self._ttl,
        }

    # ------------------------------------------------------------------
    # Disposal
    # ------------------------------------------------------------------

    def clear(self) -> None:
        """Drop every stored token."""
        with self._lock:
            count = len(self._tokens)
            self._tokens.clear()
        logger.debug("Cleared %d token(s)", count)

    def close(self) -> None:
        self.clear()

    def __enter__(self) -> "TokenService":
        return self

    def __exit__(self, *exc) -> None:
        self.close()
