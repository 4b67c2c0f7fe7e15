"""Binary-file heuristics used to keep non-text files out of prompts.

Checks run in a fixed order: size, extension, then a sampled prefix of the
file content. The first positive check wins. I/O failures are reported as
binary results rather than raised.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, fields, replace
from pathlib import Path

logger = logging.getLogger(__name__)

BINARY_EXTENSIONS: frozenset[str] = frozenset(
    {
        # Images
        ".png", ".jpg", ".jpeg", ".gif", ".bmp", ".tiff", ".ico", ".webp", ".svg",
        # Archives
        ".zip", ".gz", ".tar", ".rar", ".7z", ".jar", ".war", ".ear",
        # Executables
        ".exe", ".dll", ".so", ".dylib", ".bin", ".apk", ".app",
        # Media
        ".mp3", ".mp4", ".avi", ".mov", ".flv", ".wmv", ".wav", ".ogg", ".webm",
        # Office documents
        ".doc", ".docx", ".xls", ".xlsx", ".ppt", ".pptx", ".pdf",
        # Database / compiled data
        ".db", ".sqlite", ".dat", ".class", ".obj", ".o", ".pyc",
        # Fonts
        ".ttf", ".woff", ".woff2", ".eot", ".otf",
    }
)

REASON_SIZE = "size"
REASON_EXTENSION = "extension"
REASON_CONTENT = "content"

DEFAULT_MAX_SIZE_BYTES = 1024 * 1024
DEFAULT_SAMPLE_SIZE = 512
DEFAULT_BINARY_THRESHOLD = 10.0


@dataclass(frozen=True)
class BinaryDetectionOptions:
    """Binary-detection settings.

    ``max_size_bytes`` defaults to 1 MiB, ``sample_size`` to 512 bytes and
    ``binary_threshold`` to 10 percent of sampled bytes being control bytes.
    Both content and extension checks are enabled by default.
    """

    max_size_bytes: int = DEFAULT_MAX_SIZE_BYTES
    check_content: bool = True
    check_extension: bool = True
    sample_size: int = DEFAULT_SAMPLE_SIZE
    binary_threshold: float = DEFAULT_BINARY_THRESHOLD

    def __post_init__(self) -> None:
        if isinstance(self.max_size_bytes, bool) or not isinstance(self.max_size_bytes, int):
            raise ValueError("max_size_bytes must be an integer")
        if self.max_size_bytes < 0:
            raise ValueError("max_size_bytes must be >= 0")
        if isinstance(self.sample_size, bool) or not isinstance(self.sample_size, int):
            raise ValueError("sample_size must be an integer")
        if self.sample_size <= 0:
            raise ValueError("sample_size must be >= 1")
        if isinstance(self.binary_threshold, bool) or not isinstance(self.binary_threshold, (int, float)):
            raise ValueError("binary_threshold must be a number")
        if not 0 <= self.binary_threshold <= 100:
            raise ValueError("binary_threshold must be within [0, 100]")
        if not isinstance(self.check_content, bool) or not isinstance(self.check_extension, bool):
            raise ValueError("check_content and check_extension must be booleans")

    def with_overrides(self, **overrides: object) -> BinaryDetectionOptions:
        """Return a copy with non-``None`` overrides applied (validated again)."""
        known = {field.name for field in fields(self)}
        unknown = set(overrides) - known
        if unknown:
            raise ValueError(f"unknown binary detection option(s): {', '.join(sorted(unknown))}")
        return replace(self, **{name: value for name, value in overrides.items() if value is not None})


DEFAULT_BINARY_OPTIONS = BinaryDetectionOptions()


@dataclass(frozen=True)
class BinaryCheckResult:
    """Outcome of ``classify_file``; ``reason`` is set only when binary."""

    is_binary: bool
    reason: str | None = None
    details: str | None = None


@dataclass(frozen=True)
class ContentSample:
    is_binary: bool
    non_text_percentage: float


def format_file_size(size_bytes: int) -> str:
    """Format bytes as ``B``/``KB``/``MB``/``GB`` with one decimal place."""
    if size_bytes < 1024:
        return f"{size_bytes} B"
    if size_bytes < 1024 * 1024:
        return f"{size_bytes / 1024:.1f} KB"
    if size_bytes < 1024 * 1024 * 1024:
        return f"{size_bytes / (1024 * 1024):.1f} MB"
    return f"{size_bytes / (1024 * 1024 * 1024):.1f} GB"


def is_likely_binary_by_extension(path: Path | str) -> bool:
    return Path(path).suffix.lower() in BINARY_EXTENSIONS


def _is_non_text_code(code: int) -> bool:
    # NUL and C0 controls outside the 9..13 whitespace run.
    return code < 9 or 13 < code < 32


def sample_file_content(
    path: Path | str,
    sample_size: int = DEFAULT_SAMPLE_SIZE,
    binary_threshold: float = DEFAULT_BINARY_THRESHOLD,
) -> ContentSample:
    """Sample the first ``sample_size`` bytes and measure control-byte density.

    Bytes are decoded as latin-1 so each byte maps to exactly one character.
    Raises ``OSError`` when the file cannot be read.
    """
    with open(path, "rb") as handle:
        sample = handle.read(sample_size).decode("latin-1")
    if not sample:
        return ContentSample(is_binary=False, non_text_percentage=0.0)
    non_text = sum(1 for ch in sample if _is_non_text_code(ord(ch)))
    percentage = non_text / len(sample) * 100
    return ContentSample(is_binary=percentage > binary_threshold, non_text_percentage=percentage)


def classify_file(
    path: Path | str,
    options: BinaryDetectionOptions = DEFAULT_BINARY_OPTIONS,
) -> BinaryCheckResult:
    """Classify ``path`` as text or binary using ``options``."""
    path = Path(path)
    try:
        size = path.stat().st_size
        if size > options.max_size_bytes:
            return BinaryCheckResult(
                is_binary=True,
                reason=REASON_SIZE,
                details=f"File exceeds maximum size ({format_file_size(size)})",
            )

        if options.check_extension and is_likely_binary_by_extension(path):
            return BinaryCheckResult(
                is_binary=True,
                reason=REASON_EXTENSION,
                details=f"File has binary extension ({path.suffix})",
            )

        if options.check_content:
            sample = sample_file_content(path, options.sample_size, options.binary_threshold)
            if sample.is_binary:
                return BinaryCheckResult(
                    is_binary=True,
                    reason=REASON_CONTENT,
                    details=(
                        "Content appears to be binary "
                        f"({sample.non_text_percentage:.1f}% non-text characters)"
                    ),
                )
    except OSError as exc:
        logger.warning("Error checking if file is binary: %s: %s", path, exc)
        return BinaryCheckResult(
            is_binary=True,
            reason=REASON_CONTENT,
            details=f"Error checking file: {exc}",
        )

    return BinaryCheckResult(is_binary=False)


__all__ = [
    "BINARY_EXTENSIONS",
    "REASON_SIZE",
    "REASON_EXTENSION",
    "REASON_CONTENT",
    "BinaryDetectionOptions",
    "DEFAULT_BINARY_OPTIONS",
    "BinaryCheckResult",
    "ContentSample",
    "format_file_size",
    "is_likely_binary_by_extension",
    "sample_file_content",
    "classify_file",
]
