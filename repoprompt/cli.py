"""Command-line front door for repoprompt.

Scans a directory, selects files, and writes the assembled prompt payload to
a file or stdout.
"""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path

from .errors import ScanFatalError
from .file_tree_model import ScanResult, walk_directory
from .highlight import DEFAULT_STYLE, render_payload
from .ignore import glob_to_regex
from .prompt import Payload, assemble_prompt
from .runtime import config
from .selection import SelectionStats, SelectionStore, selection_stats

logger = logging.getLogger(__name__)

LOG_FORMAT = "%(levelname)s %(name)s: %(message)s"


def setup_logging(verbose: bool = False) -> None:
    logging.basicConfig(level=logging.DEBUG if verbose else logging.WARNING, format=LOG_FORMAT, stream=sys.stderr)


def _positive_int(value: str) -> int:
    """argparse type for positive integer values."""
    try:
        parsed = int(value)
    except ValueError as exc:
        raise argparse.ArgumentTypeError(f"invalid integer value: {value!r}") from exc
    if parsed <= 0:
        raise argparse.ArgumentTypeError("value must be >= 1")
    return parsed


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="repoprompt",
        description="Scan a directory and assemble selected files into a token-budgeted prompt.",
    )
    parser.add_argument("path", help="Directory to scan.")
    parser.add_argument(
        "--include",
        action="append",
        default=[],
        metavar="GLOB",
        help="Select files whose relative path matches GLOB (repeatable; ** spans directories).",
    )
    parser.add_argument("--all", action="store_true", help="Select every selectable file (default without --include).")
    parser.add_argument("--token-limit", type=_positive_int, default=None, help="Token budget for embedded files.")
    parser.add_argument("--max-size", type=_positive_int, default=None, metavar="BYTES", help="Skip files larger than BYTES.")
    parser.add_argument("--no-content-check", action="store_true", help="Do not sample file content for binary data.")
    parser.add_argument("--no-extension-check", action="store_true", help="Do not skip files by binary extension.")
    parser.add_argument("--output", "-o", default=None, metavar="FILE", help="Write the payload to FILE instead of stdout.")
    parser.add_argument("--stats", action="store_true", help="Print scan and selection statistics to stderr.")
    parser.add_argument("--style", default=DEFAULT_STYLE, help="Pygments style name for terminal output.")
    parser.add_argument("--no-color", action="store_true", help="Disable color output even on TTY.")
    parser.add_argument("--verbose", "-v", action="store_true", help="Enable debug logging.")
    return parser


def select_files(store: SelectionStore, scan: ScanResult, includes: list[str], select_all: bool) -> None:
    """Apply CLI selection flags to ``store``."""
    if select_all or not includes:
        store.select_all()
        return
    patterns = [glob_to_regex(pattern) for pattern in includes]
    keys = [
        entry.key
        for entry in scan.files
        if entry.is_selectable and any(regex.match(entry.relative_path) for regex in patterns)
    ]
    store.select_all(keys)


def format_stats(scan: ScanResult, selection: SelectionStats, payload: Payload) -> str:
    stats = scan.stats
    lines = [
        f"Scanned {stats.file_count} entries ({stats.total_size} bytes, ~{stats.total_tokens} tokens)",
        f"Skipped {stats.skipped_count} ({stats.binary_count} binary, {stats.size_skipped_count} too large,"
        f" {stats.ignored_count} ignored)",
        f"Selected {selection.total_files} files, ~{selection.total_tokens} tokens"
        f" ({selection.token_usage_percentage:.1f}% of {selection.token_limit})",
    ]
    for ext in selection.by_extension:
        lines.append(f"  .{ext.extension}: {ext.count} files, ~{ext.tokens} tokens")
    lines.append(f"Embedded {payload.embedded_files} of {payload.total_files} files, ~{payload.tokens_approx} tokens")
    if payload.truncation_note:
        lines.append(payload.truncation_note)
    for error in payload.errors:
        lines.append(f"Failed to read {error.relative_path}: {error.message}")
    for issue in scan.issues:
        lines.append(f"Unreadable directory {issue.relative_path}: {issue.message}")
    return "\n".join(lines) + "\n"


def main(argv: list[str] | None = None) -> int:
    """Parse CLI arguments, scan, select, and write the prompt payload.

    Returns the process exit code: ``1`` when the root cannot be scanned or
    the output file cannot be written.
    """
    args = build_parser().parse_args(argv)
    setup_logging(args.verbose)

    options = config.load_binary_detection_options().with_overrides(
        max_size_bytes=args.max_size,
        check_content=False if args.no_content_check else None,
        check_extension=False if args.no_extension_check else None,
    )
    token_limit = args.token_limit if args.token_limit is not None else config.load_token_limit()

    root = Path(args.path)
    try:
        scan = walk_directory(root, options)
    except ScanFatalError as exc:
        sys.stderr.write(f"repoprompt: cannot scan {exc.root}: {exc.message}\n")
        return 1

    store = SelectionStore(scan.entries)
    select_files(store, scan, args.include, args.all)
    selected = store.selected_files()
    logger.debug("Selected %d of %d files", len(selected), len(scan.files))

    payload = assemble_prompt(selected, scan.entries, token_limit, root_name=scan.root_path.name)

    if args.output is not None:
        try:
            Path(args.output).write_text(payload.text, encoding="utf-8")
        except OSError as exc:
            sys.stderr.write(f"repoprompt: cannot write {args.output}: {exc}\n")
            return 1
    elif sys.stdout.isatty():
        sys.stdout.write(render_payload(payload, args.style, args.no_color))
    else:
        sys.stdout.write(payload.text)

    if args.stats:
        sys.stderr.write(format_stats(scan, selection_stats(selected, token_limit), payload))
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
