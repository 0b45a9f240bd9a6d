"""
Verification Package

Short-lived verification codes for confirming an email address or phone
number during registration.

Modules:
- store: TTL code store with attempt limits and periodic cleanup
- phone: phone number normalisation
- sender: delivery seam (CodeSender) and the logging default
- routes: send / resend / verify endpoints under /api/auth
"""

from .routes import verification_router
from .sender import CodeSender, LoggingCodeSender
from .store import VerificationStore, run_cleanup

__all__ = [
    "verification_router",
    "CodeSender",
    "LoggingCodeSender",
    "VerificationStore",
    "run_cleanup",
]
