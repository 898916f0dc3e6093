"""
VerificationCodeService -- one-time login codes.

Responsibility:
    Issues six-digit codes for a known identity (the user's email) and
    verifies them.  Delivery is delegated to a callable; by default the
    code is only logged at DEBUG.

Architecture position:
    Services -- external collaborator adapter.  Resolves identities via a
    lookup callable (``TenancyService.find_user_by_username`` in the
    engine); never writes to the record store.

Invariants enforced:
    - Identities are case-insensitive.
    - A code is valid for ``ttl_seconds`` and is deleted on successful
      verification, so it works once.
    - Issuing a new code replaces any outstanding code for the identity.
    - Codes are compared in constant time.
    - The code table has its own lock.
"""

from __future__ import annotations

import secrets
import threading
from collections.abc import Callable
from dataclasses import dataclass
from datetime import datetime, timedelta

from workforce_kernel.domain.clock import Clock, SystemClock
from workforce_kernel.domain.records import User
from workforce_kernel.logging_config import get_logger

logger = get_logger("services.otp")

DEFAULT_CODE_TTL_SECONDS = 300


def random_code() -> str:
    """Uniform six-digit code, 100000-999999."""
    return str(100000 + secrets.randbelow(900000))


@dataclass(frozen=True)
class IssueCodeResult:
    success: bool
    message: str


@dataclass(frozen=True)
class _PendingCode:
    code: str
    expires_at: datetime


def _log_delivery(identity: str, code: str) -> None:
    logger.debug("verification_code_delivery", extra={"identity": identity, "code": code})


class VerificationCodeService:
    def __init__(
        self,
        lookup: Callable[[str], User | None],
        clock: Clock | None = None,
        ttl_seconds: float = DEFAULT_CODE_TTL_SECONDS,
        deliver: Callable[[str, str], None] | None = None,
        code_factory: Callable[[], str] = random_code,
    ):
        if ttl_seconds <= 0:
            raise ValueError(f"ttl_seconds must be positive, got {ttl_seconds}")
        self._lookup = lookup
        self._clock = clock or SystemClock()
        self._ttl = timedelta(seconds=ttl_seconds)
        self._deliver = deliver or _log_delivery
        self._code_factory = code_factory
        self._codes: dict[str, _PendingCode] = {}
        self._lock = threading.Lock()

    def issue_code(self, identity: str) -> IssueCodeResult:
        key = identity.strip().lower()
        if self._lookup(key) is None:
            logger.info("verification_code_refused", extra={"identity": key})
            return IssueCodeResult(success=False, message="No account found with that email.")

        code = self._code_factory()
        with self._lock:
            self._codes[key] = _PendingCode(code=code, expires_at=self._clock.now() + self._ttl)
        self._deliver(key, code)
        logger.info("verification_code_issued", extra={"identity": key})
        return IssueCodeResult(success=True, message=f"Verification code sent to {identity}.")

    def verify_code(self, identity: str, code: str) -> User | None:
        """The user for a correct, unexpired code; otherwise None."""
        key = identity.strip().lower()
        with self._lock:
            pending = self._codes.get(key)
            valid = (
                pending is not None
                and secrets.compare_digest(pending.code.encode(), code.encode())
                and pending.expires_at >= self._clock.now()
            )
            if valid:
                del self._codes[key]

        if not valid:
            logger.info("verification_code_rejected", extra={"identity": key})
            return None
        logger.info("verification_code_accepted", extra={"identity": key})
        return self._lookup(key)

    def pending_count(self) -> int:
        with self._lock:
            return len(self._codes)
