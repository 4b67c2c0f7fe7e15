"""Exceptions raised by scanning, ignore matching, and selection."""

from __future__ import annotations

from pathlib import Path


class RepoPromptError(Exception):
    """Base class for repoprompt failures that reach the caller."""


class ScanFatalError(RepoPromptError):
    """Scan root could not be read; the whole scan is aborted.

    Unreadable subdirectories never raise this; they are recorded as
    ``ScanIssue`` rows on the result instead.
    """

    def __init__(self, root: Path, message: str):
        self.root = root
        self.message = message
        super().__init__(f"cannot scan {root}: {message}")


class IgnoreRulesNotLoadedError(RepoPromptError, RuntimeError):
    """``should_ignore`` was called before the ignore file was loaded."""


class InvalidSelectionActionError(RepoPromptError, ValueError):
    """A selection action referenced an unknown key or an unsettable state."""


class SelectionBusyError(RepoPromptError, RuntimeError):
    """A selection transition was dispatched while another one was running."""


__all__ = [
    "RepoPromptError",
    "ScanFatalError",
    "IgnoreRulesNotLoadedError",
    "InvalidSelectionActionError",
    "SelectionBusyError",
]
