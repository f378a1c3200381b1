"""Debug cache dataclasses and helpers."""

from __future__ import annotations

from dataclasses import dataclass

from .retry import RetryState


@dataclass
class DebugEntry:
    timestamp: float
    message: str
    details: str | None = None


class DebugRecorder:
    def __init__(self, state) -> None:
        self._state = state

    def record(self, command: str, message: str, details: str | None = None) -> None:
        self._state.add_debug(command, message, details)

    def retry_sink(self, command: str):
        """Return an ``on_retry`` callback that logs retries under ``command``."""

        def _sink(retry: RetryState, exc: Exception) -> None:
            self._state.metrics_for(command).retries += 1
            self._state.add_debug(
                command,
                f"retry {retry.attempt} in {retry.delay:.2f}s",
                f"{type(exc).__name__}: {exc}",
            )

        return _sink
