"""
Presenter Auth Guard

Validates the shared presenter password and throttles clients that keep
getting it wrong. Every mutating request is checked on its own; there is
no session or token.
"""

import asyncio
import hmac
import time
from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable

import structlog

from speechcast.core.errors import ConfigurationError

logger = structlog.get_logger()


DEFAULT_MAX_ATTEMPTS = 5
DEFAULT_WINDOW_SECONDS = 15 * 60


class AuthFailure(str, Enum):
    """Reasons a credential check can fail."""

    MALFORMED_REQUEST = "malformed_request"
    INVALID_CREDENTIAL = "invalid_credential"
    RATE_LIMITED = "rate_limited"


@dataclass
class AttemptRecord:
    """Failed attempts from one client inside the current window."""

    count: int
    first_attempt: float


@dataclass(frozen=True)
class AuthDecision:
    """Result of a credential check."""

    reason: AuthFailure | None = None

    @property
    def authorized(self) -> bool:
        return self.reason is None

    @classmethod
    def allow(cls) -> "AuthDecision":
        return cls()

    @classmethod
    def deny(cls, reason: AuthFailure) -> "AuthDecision":
        return cls(reason=reason)


class AuthGuard:
    """
    Shared-secret check with a per-client failure window.

    Features:
    - Malformed credentials rejected before any accounting
    - At most ``max_attempts`` failures per ``window_seconds`` per client
    - Success clears the client's record
    - Background pruning of expired records
    """

    def __init__(
        self,
        secret: str,
        max_attempts: int = DEFAULT_MAX_ATTEMPTS,
        window_seconds: float = DEFAULT_WINDOW_SECONDS,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        if not secret:
            raise ConfigurationError("A presenter password is required")

        self._secret = secret.encode("utf-8", "surrogatepass")
        self._max_attempts = max_attempts
        self._window_seconds = window_seconds
        self._clock = clock

        # Failed attempts by client identifier
        self._attempts: dict[str, AttemptRecord] = {}

        # Background task for pruning
        self._cleanup_task: asyncio.Task | None = None

    @property
    def max_attempts(self) -> int:
        return self._max_attempts

    @property
    def window_seconds(self) -> float:
        return self._window_seconds

    def check(self, client_id: str, credential: Any) -> AuthDecision:
        """
        Check a credential presented by ``client_id``.

        Args:
            client_id: Identifier of the caller, usually its network address
            credential: The submitted password, as received

        Returns:
            AuthDecision, authorized or carrying the failure reason
        """
        if not isinstance(credential, str) or not credential:
            logger.info("Auth rejected", client_id=client_id, reason=AuthFailure.MALFORMED_REQUEST.value)
            return AuthDecision.deny(AuthFailure.MALFORMED_REQUEST)

        now = self._clock()
        record = self._current_record(client_id, now)

        if record and record.count >= self._max_attempts:
            logger.warning(
                "Auth rejected",
                client_id=client_id,
                reason=AuthFailure.RATE_LIMITED.value,
                attempts=record.count,
            )
            return AuthDecision.deny(AuthFailure.RATE_LIMITED)

        if hmac.compare_digest(credential.encode("utf-8", "surrogatepass"), self._secret):
            self._attempts.pop(client_id, None)
            logger.debug("Auth accepted", client_id=client_id)
            return AuthDecision.allow()

        if record:
            record.count += 1
        else:
            record = AttemptRecord(count=1, first_attempt=now)
            self._attempts[client_id] = record

        logger.info(
            "Auth rejected",
            client_id=client_id,
            reason=AuthFailure.INVALID_CREDENTIAL.value,
            attempts=record.count,
        )
        return AuthDecision.deny(AuthFailure.INVALID_CREDENTIAL)

    def attempts(self, client_id: str) -> AttemptRecord | None:
        """The live attempt record for a client, if any."""
        return self._current_record(client_id, self._clock())

    def retry_after(self, client_id: str) -> float | None:
        """Seconds until a locked-out client may try again, None if not locked out."""
        record = self.attempts(client_id)
        if record is None or record.count < self._max_attempts:
            return None
        return max(0.0, record.first_attempt + self._window_seconds - self._clock())

    def prune(self) -> int:
        """Drop every record whose window has elapsed. Returns the number removed."""
        now = self._clock()
        expired = [
            client_id
            for client_id, record in self._attempts.items()
            if now - record.first_attempt > self._window_seconds
        ]
        for client_id in expired:
            del self._attempts[client_id]
        return len(expired)

    def _current_record(self, client_id: str, now: float) -> AttemptRecord | None:
        record = self._attempts.get(client_id)
        if record and now - record.first_attempt > self._window_seconds:
            del self._attempts[client_id]
            return None
        return record

    # ──────────────────────────────────────────────────────────
    # Background pruning
    # ──────────────────────────────────────────────────────────

    async def start(self, interval_seconds: float = 60) -> None:
        """Start pruning expired records in the background."""
        self._cleanup_task = asyncio.create_task(self._cleanup_loop(interval_seconds))
        logger.info("AuthGuard started")

    async def stop(self) -> None:
        """Stop the background pruning task."""
        if self._cleanup_task:
            self._cleanup_task.cancel()
            try:
                await self._cleanup_task
            except asyncio.CancelledError:
                pass
            self._cleanup_task = None

        logger.info("AuthGuard stopped")

    async def _cleanup_loop(self, interval_seconds: float) -> None:
        while True:
            await asyncio.sleep(interval_seconds)
            removed = self.prune()
            if removed:
                logger.info("Pruned expired auth records", count=removed)

    def get_stats(self) -> dict[str, Any]:
        return {
            "tracked_clients": len(self._attempts),
            "max_attempts": self._max_attempts,
            "window_seconds": self._window_seconds,
        }
