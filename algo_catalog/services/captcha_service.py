"""Arithmetic captcha used to gate public submissions.

Challenges are kept in memory only. Each one can be checked exactly once:
validation removes it whether or not the answer is right, so a client cannot
keep guessing against the same challenge.
"""

from __future__ import annotations

import logging
import secrets
import threading
import time
from dataclasses import dataclass
from typing import Callable

logger = logging.getLogger(__name__)

OPERAND_MIN = 1
OPERAND_MAX = 20
DEFAULT_TTL_SECONDS = 600


@dataclass(frozen=True)
class CaptchaChallenge:
    """A stored challenge. ``answer`` never leaves the server."""

    id: str
    question: str
    answer: int
    expires_at: float


def _random_operand() -> int:
    return OPERAND_MIN + secrets.randbelow(OPERAND_MAX - OPERAND_MIN + 1)


class CaptchaStore:
    """Thread-safe, in-memory store of one-time captcha challenges."""

    def __init__(
        self,
        *,
        ttl_seconds: float = DEFAULT_TTL_SECONDS,
        clock: Callable[[], float] = time.time,
    ) -> None:
        if ttl_seconds <= 0:
            raise ValueError("ttl_seconds must be > 0")
        self._ttl = ttl_seconds
        self._clock = clock
        self._lock = threading.Lock()
        self._challenges: dict[str, CaptchaChallenge] = {}

    def __len__(self) -> int:
        with self._lock:
            return len(self._challenges)

    def create(self) -> CaptchaChallenge:
        """Issue a new "What is A + B?" challenge with A, B in [1, 20]."""
        a = _random_operand()
        b = _random_operand()
        challenge = CaptchaChallenge(
            id=secrets.token_hex(16),
            question=f"What is {a} + {b}?",
            answer=a + b,
            expires_at=self._clock() + self._ttl,
        )
        with self._lock:
            self._challenges[challenge.id] = challenge

        logger.debug("captcha.created", extra={"captcha_id": challenge.id})
        return challenge

    def validate(self, captcha_id: str, answer: int | None) -> bool:
        """Consume the challenge and report whether ``answer`` solves it.

        The challenge is deleted before anything else is checked, so at most
        one call per challenge can ever return True.
        """
        if not captcha_id:
            return False

        with self._lock:
            challenge = self._challenges.pop(captcha_id, None)

        if challenge is None:
            logger.info("captcha.rejected", extra={"captcha_id": captcha_id, "reason": "unknown"})
            return False

        if self._clock() > challenge.expires_at:
            logger.info("captcha.rejected", extra={"captcha_id": captcha_id, "reason": "expired"})
            return False

        ok = answer is not None and answer == challenge.answer
        logger.info(
            "captcha.validated" if ok else "captcha.rejected",
            extra={"captcha_id": captcha_id, "reason": None if ok else "wrong_answer"},
        )
        return ok

    def sweep(self) -> int:
        """Delete every expired challenge and return how many were removed."""
        now = self._clock()
        with self._lock:
            expired = [cid for cid, c in self._challenges.items() if now > c.expires_at]
            for cid in expired:
                del self._challenges[cid]
        if expired:
            logger.debug("captcha.swept", extra={"removed": len(expired)})
        return len(expired)
