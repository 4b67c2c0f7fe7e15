"""Runtime services around the scanning core.

Holds the background scan scheduler and persisted user configuration.
"""

from __future__ import annotations

from .scan_scheduler import ScanOutcome, ScanProgressEvent, ScanRequest, ScanScheduler

__all__ = [
    "ScanOutcome",
    "ScanProgressEvent",
    "ScanRequest",
    "ScanScheduler",
]
