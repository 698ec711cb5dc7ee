"""Progress reporting and cancellation primitives for long-running scans."""

from __future__ import annotations

import threading
from dataclasses import dataclass, field
from typing import Any, Callable, Optional

ProgressCallback = Callable[[int], None]


class OperationCancelled(RuntimeError):
    """Raised by a scan that observed its cancellation token."""


class CancellationToken:
    """Thread-safe flag a caller sets to stop a running scan.

    Pass a ``multiprocessing`` manager event to share the flag with a
    worker process.
    """

    def __init__(self, event: Any = None) -> None:
        self._event = event if event is not None else threading.Event()

    def cancel(self) -> None:
        self._event.set()

    @property
    def cancelled(self) -> bool:
        return self._event.is_set()

    def raise_if_cancelled(self) -> None:
        if self._event.is_set():
            raise OperationCancelled("operation cancelled")


@dataclass(slots=True)
class ProgressTracker:
    """Polled progress state with an optional push callback.

    ``percent`` always holds the last reported value so callers that prefer
    polling over callbacks can read it between scheduler turns.
    """

    total: int
    callback: Optional[ProgressCallback] = None
    processed: int = 0
    percent: int = 0
    history: list[int] = field(default_factory=list)

    def advance(self, count: int = 1) -> int:
        self.processed += count
        return self.processed

    def report(self, percent: Optional[int] = None) -> int:
        if percent is None:
            percent = round(self.processed / self.total * 100) if self.total else 100
        percent = max(0, min(100, percent))
        self.percent = percent
        self.history.append(percent)
        if self.callback is not None:
            self.callback(percent)
        return percent
