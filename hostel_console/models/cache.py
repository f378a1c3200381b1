"""Cache-related dataclasses."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any


@dataclass
class CacheEntry:
    """Cached payload with the monotonic time it was stored."""

    value: Any
    stored_at: float
