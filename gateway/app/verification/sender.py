"""
Verification message delivery.

Delivery providers (SMTP, SMS gateways) live outside the gateway. The
CodeSender protocol is the seam they plug into; LoggingCodeSender is the
default and only records that a message would have been sent.
"""

import logging
from typing import Optional, Protocol

from .store import Channel

logger = logging.getLogger(__name__)


class DeliveryError(Exception):
    """Raised when a verification or welcome message cannot be delivered."""


class CodeSender(Protocol):
    async def send_code(
        self, channel: Channel, contact: str, code: str, name: Optional[str] = None
    ) -> None: ...

    async def send_welcome(self, channel: Channel, contact: str, name: str) -> None: ...


class LoggingCodeSender:
    """Sender that logs instead of delivering. Codes are never written to the log."""

    async def send_code(
        self, channel: Channel, contact: str, code: str, name: Optional[str] = None
    ) -> None:
        logger.info(
            "Verification code issued",
            extra={"channel": channel.value, "contact": _mask(contact)},
        )

    async def send_welcome(self, channel: Channel, contact: str, name: str) -> None:
        logger.info(
            "Welcome message issued",
            extra={"channel": channel.value, "contact": _mask(contact)},
        )


def _mask(contact: str) -> str:
    if "@" in contact:
        local, _, domain = contact.partition("@")
        return f"{local[:1]}***@{domain}"
    return f"***{contact[-3:]}"
