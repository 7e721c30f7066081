"""
utils/diagnostics.py — Optional diagnostic events
===================================================
The signal-processing hot path reports what it saw ("peaks_detected",
"ibi_filtered", ...) through an observer object instead of printing.  The
default observer does nothing, so the pipeline stays quiet and cheap unless
a caller opts in.

    processor = PPGProcessor(observer=LoggingObserver())
"""

from typing import Any, Protocol

from utils.logger import get_logger


class DiagnosticsObserver(Protocol):
    def on_event(self, name: str, **fields: Any) -> None: ...


class NullObserver:
    """Discards every event."""

    def on_event(self, name: str, **fields: Any) -> None:
        return None


class LoggingObserver:
    """Forwards events to the project logger at DEBUG level."""

    def __init__(self, name: str = "rppg.diagnostics"):
        self._logger = get_logger(name)

    def on_event(self, name: str, **fields: Any) -> None:
        detail = ", ".join(f"{k}={v}" for k, v in sorted(fields.items()))
        self._logger.debug("%s: %s", name, detail)


class RecordingObserver:
    """Keeps every event in memory; handy for tests and offline analysis."""

    def __init__(self):
        self.events: list[tuple[str, dict[str, Any]]] = []

    def on_event(self, name: str, **fields: Any) -> None:
        self.events.append((name, dict(fields)))

    def named(self, name: str) -> list[dict[str, Any]]:
        return [fields for event, fields in self.events if event == name]

    def clear(self) -> None:
        self.events.clear()
