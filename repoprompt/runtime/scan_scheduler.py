"""Background single-flight scan worker.

At most one scan runs at a time. Scheduling a new scan cancels the running
one and replaces any pending request, so the latest request wins.
"""

from __future__ import annotations

import logging
import threading
from collections.abc import Callable
from dataclasses import dataclass
from pathlib import Path
from queue import Empty, Queue

from ..binary_detection import BinaryDetectionOptions
from ..errors import ScanFatalError
from ..file_tree_model import ScanProgress, ScanResult, walk_directory

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ScanRequest:
    """One queued scan job."""

    request_id: int
    root: Path
    options: BinaryDetectionOptions | None
    cancel_event: threading.Event


@dataclass(frozen=True)
class ScanProgressEvent:
    """Progress event tagged with the request that produced it."""

    request_id: int
    progress: ScanProgress


@dataclass(frozen=True)
class ScanOutcome:
    """Completed scan: either ``result`` or ``error`` is set."""

    request: ScanRequest
    result: ScanResult | None = None
    error: Exception | None = None


class ScanScheduler:
    """Run scans on a daemon thread; hosts drain progress and results."""

    def __init__(self, walk: Callable[..., ScanResult] = walk_directory) -> None:
        self._walk = walk
        self._lock = threading.Lock()
        self._pending: ScanRequest | None = None
        self._active: ScanRequest | None = None
        self._running = False
        self._next_request_id = 1
        self._progress: Queue[ScanProgressEvent] = Queue()
        self._results: Queue[ScanOutcome] = Queue()
        self._idle = threading.Event()
        self._idle.set()

    def _worker(self) -> None:
        while True:
            with self._lock:
                request = self._pending
                self._pending = None
                self._active = request
                if request is None:
                    self._running = False
                    self._idle.set()
                    return

            def on_progress(progress: ScanProgress, request_id: int = request.request_id) -> None:
                self._progress.put(ScanProgressEvent(request_id=request_id, progress=progress))

            try:
                result = self._walk(
                    request.root,
                    request.options,
                    on_progress=on_progress,
                    cancel_event=request.cancel_event,
                )
            except ScanFatalError as exc:
                self._results.put(ScanOutcome(request=request, error=exc))
                continue
            except Exception as exc:
                logger.exception("Scan of %s failed", request.root)
                self._results.put(ScanOutcome(request=request, error=exc))
                continue
            self._results.put(ScanOutcome(request=request, result=result))

    def schedule(self, root: Path | str, options: BinaryDetectionOptions | None = None) -> int:
        """Queue a scan of ``root``, cancelling in-flight work, and return its request id."""
        with self._lock:
            request_id = self._next_request_id
            self._next_request_id += 1
            if self._active is not None:
                self._active.cancel_event.set()
            if self._pending is not None:
                self._pending.cancel_event.set()
            self._pending = ScanRequest(
                request_id=request_id,
                root=Path(root),
                options=options,
                cancel_event=threading.Event(),
            )
            if self._running:
                return request_id
            self._running = True
            self._idle.clear()

        worker = threading.Thread(
            target=self._worker,
            name="repoprompt-scan",
            daemon=True,
        )
        worker.start()
        return request_id

    def cancel(self) -> None:
        """Cancel the running scan and drop any pending request."""
        with self._lock:
            if self._active is not None:
                self._active.cancel_event.set()
            self._pending = None

    def wait_idle(self, timeout: float | None = None) -> bool:
        """Block until no scan is running or pending."""
        return self._idle.wait(timeout)

    def drain_progress(self) -> list[ScanProgressEvent]:
        """Drain all queued progress events."""
        out: list[ScanProgressEvent] = []
        while True:
            try:
                out.append(self._progress.get_nowait())
            except Empty:
                break
        return out

    def drain_results(self) -> list[ScanOutcome]:
        """Drain all completed scan outcomes."""
        out: list[ScanOutcome] = []
        while True:
            try:
                out.append(self._results.get_nowait())
            except Empty:
                break
        return out


__all__ = [
    "ScanRequest",
    "ScanProgressEvent",
    "ScanOutcome",
    "ScanScheduler",
]
