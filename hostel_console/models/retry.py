"""Retry bookkeeping dataclass."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass
class RetryState:
    """Progress of one executor call: failed attempts so far and the next wait."""

    attempt: int
    delay: float
