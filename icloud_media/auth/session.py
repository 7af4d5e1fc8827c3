"""
Authenticated session handle and its lifecycle states.
"""
from dataclasses import dataclass
from enum import Enum
from typing import Any


class SessionState(str, Enum):
    """Lifecycle of a session within one adapter invocation."""
    UNAUTHENTICATED = "unauthenticated"
    AUTHENTICATING = "authenticating"
    MFA_PENDING = "mfa-pending"
    READY = "ready"
    FAILED = "failed"
    TIMED_OUT = "timed-out"

    @property
    def is_terminal(self) -> bool:
        return self in (SessionState.READY, SessionState.FAILED, SessionState.TIMED_OUT)


@dataclass
class Session:
    """A ready client handle. Only the establisher creates these."""
    client: Any
    strategy: str
    state: SessionState = SessionState.READY
