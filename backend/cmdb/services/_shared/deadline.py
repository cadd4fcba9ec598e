"""Caller-supplied time bound for a single service operation."""

from __future__ import annotations

import time
from dataclasses import dataclass

from cmdb.services._shared.errors import DeadlineExceeded


@dataclass(frozen=True, slots=True)
class Deadline:
    """
    Monotonic deadline checked between the steps of an operation.

    A ``Deadline`` never retries and never interrupts a statement that is
    already running; it is checked before each store round-trip so that an
    expired request stops before doing more work.

    :param expires_at: ``time.monotonic()`` value after which work must stop.
    """

    expires_at: float

    @classmethod
    def after(cls, seconds: float | None) -> Deadline | None:
        """Return a deadline ``seconds`` from now, or ``None`` for no bound."""
        if seconds is None or seconds <= 0:
            return None
        return cls(expires_at=time.monotonic() + float(seconds))

    def remaining(self) -> float:
        return max(0.0, self.expires_at - time.monotonic())

    def expired(self) -> bool:
        return time.monotonic() >= self.expires_at

    def check(self) -> None:
        """
        :raises DeadlineExceeded: If the deadline has passed.
        """
        if self.expired():
            raise DeadlineExceeded()


def check_deadline(deadline: Deadline | None) -> None:
    if deadline is not None:
        deadline.check()
