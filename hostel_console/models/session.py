"""Per-chat console session dataclass."""

from __future__ import annotations

import time
from dataclasses import dataclass

from ..console import HostelConsole


@dataclass
class ConsoleSession:
    """A logged-in console owned by one chat until logout or expiry."""

    console: HostelConsole
    email: str
    logged_in_at: float
    expires_at: float

    def expired(self, now: float | None = None) -> bool:
        return (time.monotonic() if now is None else now) >= self.expires_at

    def remaining_s(self, now: float | None = None) -> float:
        return max(0.0, self.expires_at - (time.monotonic() if now is None else now))
