"""
core/cancellation.py - Cooperative cancellation

Long sweeps (curve generation, heel sweeps, trim iterations) check a
CancellationToken between iterations. Cancelling produces
CalculationCancelledError instead of a silently truncated result.
"""

from __future__ import annotations
from typing import Optional
import threading
import time

from navhydro.errors import CalculationCancelledError


class CancellationToken:
    """
    Cancellation signal with an optional deadline.

    Safe to share between the thread running a calculation and the thread
    requesting cancellation.
    """

    def __init__(self, deadline: Optional[float] = None):
        """
        Args:
            deadline: Absolute time.monotonic() value after which the token
                reports cancelled, or None for no deadline
        """
        self._event = threading.Event()
        self._deadline = deadline
        self._reason = ""

    @classmethod
    def with_timeout(cls, seconds: float) -> "CancellationToken":
        """Token that cancels itself after `seconds`."""
        return cls(deadline=time.monotonic() + seconds)

    def cancel(self, reason: str = "cancelled by caller") -> None:
        self._reason = reason
        self._event.set()

    @property
    def is_cancelled(self) -> bool:
        if self._event.is_set():
            return True
        return self._deadline is not None and time.monotonic() >= self._deadline

    @property
    def reason(self) -> str:
        if self._event.is_set():
            return self._reason
        if self.is_cancelled:
            return "deadline exceeded"
        return ""

    def raise_if_cancelled(self, operation: str = "", progress: Optional[str] = None) -> None:
        """Raise CalculationCancelledError if cancellation was requested."""
        if self.is_cancelled:
            raise CalculationCancelledError(operation=operation, reason=self.reason, progress=progress)


def check_cancelled(
    token: Optional[CancellationToken],
    operation: str = "",
    progress: Optional[str] = None,
) -> None:
    """raise_if_cancelled() for an optional token."""
    if token is not None:
        token.raise_if_cancelled(operation, progress)
