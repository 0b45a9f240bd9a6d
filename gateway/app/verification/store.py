"""
Verification Code Store
=======================

In-memory store of short-lived verification codes sent by email or SMS.

Each record is looked up by an opaque token handed to the client; the
client later presents the token together with the code it received.
Records expire after a TTL and are destroyed after too many wrong
attempts. A background task removes expired records periodically.
"""

import asyncio
import logging
import secrets
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from enum import Enum
from typing import Callable, Dict, Optional

logger = logging.getLogger(__name__)


class Channel(str, Enum):
    EMAIL = "email"
    SMS = "sms"


@dataclass
class VerificationRecord:
    code: str
    channel: Channel
    contact: str
    expires_at: datetime
    created_at: datetime
    attempts: int = 0


@dataclass(frozen=True)
class VerificationResult:
    success: bool
    message: str
    contact: Optional[str] = None


def generate_code() -> str:
    """Six-digit numeric code."""
    return str(100000 + secrets.randbelow(900000))


def generate_token() -> str:
    """64 hex characters."""
    return secrets.token_hex(32)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class VerificationStore:
    """
    TTL store for verification codes.

    Thread-safe implementation using asyncio.Lock.
    """

    def __init__(
        self,
        ttl_minutes: int = 15,
        max_attempts: int = 3,
        clock: Callable[[], datetime] = _utcnow,
    ):
        self._records: Dict[str, VerificationRecord] = {}
        self._lock = asyncio.Lock()
        self._ttl = timedelta(minutes=ttl_minutes)
        self._max_attempts = max_attempts
        self._clock = clock

    @property
    def ttl_seconds(self) -> int:
        return int(self._ttl.total_seconds())

    async def store(self, token: str, code: str, channel: Channel, contact: str) -> None:
        """Store (or replace) the code for a token, restarting its TTL and attempts."""
        now = self._clock()
        async with self._lock:
            self._records[token] = VerificationRecord(
                code=code,
                channel=channel,
                contact=contact,
                expires_at=now + self._ttl,
                created_at=now,
            )
        logger.debug(f"Stored verification code, expires at {now + self._ttl}")

    async def verify(self, token: str, code: str) -> VerificationResult:
        """
        Check a code against the record for a token.

        Unknown, expired and exhausted records fail; a wrong code consumes
        one attempt; the right code consumes the record.
        """
        async with self._lock:
            record = self._records.get(token)

            if record is None:
                return VerificationResult(False, "Invalid or expired verification token")

            if self._clock() > record.expires_at:
                del self._records[token]
                return VerificationResult(False, "Verification code has expired")

            if record.attempts >= self._max_attempts:
                del self._records[token]
                return VerificationResult(
                    False, "Too many failed attempts. Please request a new code."
                )

            record.attempts += 1

            if not secrets.compare_digest(record.code, str(code)):
                remaining = self._max_attempts - record.attempts
                return VerificationResult(False, f"Invalid code. {remaining} attempts remaining.")

            del self._records[token]
            return VerificationResult(True, "Verification successful", contact=record.contact)

    async def details(self, token: str) -> Optional[VerificationRecord]:
        """Return the live record for a token, or None if unknown or expired."""
        async with self._lock:
            record = self._records.get(token)
            if record is None or self._clock() > record.expires_at:
                return None
            return record

    async def is_valid(self, token: str) -> bool:
        async with self._lock:
            record = self._records.get(token)
            if record is None:
                return False
            if self._clock() > record.expires_at:
                del self._records[token]
                return False
            return True

    async def cleanup(self) -> int:
        """
        Remove expired records.

        Returns:
            Number of records removed
        """
        now = self._clock()
        async with self._lock:
            expired = [token for token, record in self._records.items() if now > record.expires_at]
            for token in expired:
                del self._records[token]

        if expired:
            logger.info(f"Removed {len(expired)} expired verification codes")
        return len(expired)

    def __len__(self) -> int:
        return len(self._records)


async def run_cleanup(store: VerificationStore, interval_seconds: float) -> None:
    """Call store.cleanup() every interval until cancelled."""
    while True:
        await asyncio.sleep(interval_seconds)
        try:
            await store.cleanup()
        except Exception as e:
            logger.error(f"Verification cleanup failed: {e}", exc_info=True)
