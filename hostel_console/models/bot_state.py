"""Bot runtime state (console sessions, metrics, debug log)."""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass, field

from ..console import HostelConsole
from .debug import DebugEntry, DebugRecorder
from .metrics import CommandMetrics
from .session import ConsoleSession

logger = logging.getLogger(__name__)

MAX_LATENCY_SAMPLES = 200
_DEBUG_TTL_S = 60 * 60
_DEBUG_MAX_PER_CMD = 50
_DEFAULT_SESSION_TTL_S = 6 * 60 * 60


@dataclass
class BotState:
    """Runtime state for the bot: one console session per chat plus metrics."""

    session_ttl_s: float = _DEFAULT_SESSION_TTL_S
    sessions: dict[int, ConsoleSession] = field(default_factory=dict)
    command_metrics: dict[str, CommandMetrics] = field(default_factory=dict)
    debug_cache: dict[str, list[DebugEntry]] = field(default_factory=dict)

    _debug_recorder: DebugRecorder | None = field(default=None, init=False, repr=False)

    async def open_session(
        self, chat_id: int, console: HostelConsole, email: str
    ) -> ConsoleSession:
        """Attach ``console`` to ``chat_id``, tearing down any previous session."""
        await self.close_session(chat_id)
        now = time.monotonic()
        session = ConsoleSession(
            console=console,
            email=email,
            logged_in_at=now,
            expires_at=now + self.session_ttl_s,
        )
        self.sessions[chat_id] = session
        logger.info("Opened console session for chat %s (%s)", chat_id, email)
        return session

    async def get_session(self, chat_id: int) -> ConsoleSession | None:
        """Return the live session for ``chat_id``; expired sessions are closed."""
        session = self.sessions.get(chat_id)
        if session is None:
            return None
        if session.expired():
            logger.info("Console session for chat %s expired", chat_id)
            await self.close_session(chat_id)
            return None
        return session

    async def close_session(self, chat_id: int) -> bool:
        session = self.sessions.pop(chat_id, None)
        if session is None:
            return False
        try:
            await session.console.teardown()
        except Exception:
            logger.exception("Failed to tear down console for chat %s", chat_id)
        return True

    async def close_all(self) -> None:
        for chat_id in list(self.sessions):
            await self.close_session(chat_id)

    def _prune_debug(self, command: str) -> None:
        entries = self.debug_cache.get(command, [])
        if not entries:
            return
        cutoff = time.time() - _DEBUG_TTL_S
        kept = [entry for entry in entries if entry.timestamp >= cutoff]
        if kept:
            self.debug_cache[command] = kept[-_DEBUG_MAX_PER_CMD:]
        else:
            self.debug_cache.pop(command, None)

    def add_debug(self, command: str, message: str, details: str | None = None) -> None:
        if not command:
            return
        self._prune_debug(command)
        entry = DebugEntry(timestamp=time.time(), message=message, details=details)
        self.debug_cache.setdefault(command, []).append(entry)
        self.debug_cache[command] = self.debug_cache[command][-_DEBUG_MAX_PER_CMD:]

    def get_debug(self, command: str | None = None) -> dict[str, list[DebugEntry]]:
        if command:
            self._prune_debug(command)
            entries = list(self.debug_cache.get(command, []))
            return {command: entries} if entries else {}
        for key in list(self.debug_cache.keys()):
            self._prune_debug(key)
        return {
            key: list(entries) for key, entries in self.debug_cache.items() if entries
        }

    def debug_recorder(self) -> DebugRecorder:
        if self._debug_recorder is None:
            self._debug_recorder = DebugRecorder(self)
        return self._debug_recorder

    def metrics_for(self, name: str) -> CommandMetrics:
        return self.command_metrics.setdefault(name, CommandMetrics())

    def record_command(
        self, name: str, latency_s: float, ok: bool, error_msg: str | None
    ) -> None:
        metrics = self.metrics_for(name)
        metrics.count += 1
        metrics.last_run_ts = time.time()
        if ok:
            metrics.success += 1
        else:
            metrics.error += 1
            metrics.last_error = error_msg
        metrics.total_latency_s += latency_s
        metrics.max_latency_s = max(metrics.max_latency_s, latency_s)
        metrics.latencies_s.append(latency_s)
        if len(metrics.latencies_s) > MAX_LATENCY_SAMPLES:
            metrics.latencies_s.pop(0)

    def record_rate_limited(self, name: str) -> None:
        metrics = self.metrics_for(name)
        metrics.rate_limited += 1


BOT_STATE_KEY = "state"
