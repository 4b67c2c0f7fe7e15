"""Ignore-file path filtering utilities.

Compiles ``.repopromptignore`` glob lines into anchored regular expressions.
The scanner consults an ``IgnoreManager`` to prune whole subtrees.
"""

from __future__ import annotations

import logging
import os
import re
from collections import OrderedDict
from dataclasses import dataclass
from pathlib import Path

from .errors import IgnoreRulesNotLoadedError

logger = logging.getLogger(__name__)

IGNORE_FILENAME = ".repopromptignore"
DEFAULT_IGNORE_PATTERNS: tuple[str, ...] = ("node_modules/**", ".git/**")
IGNORE_RULES_CACHE_MAX = 64
_RECURSIVE_SUFFIX = "/**"


@dataclass(frozen=True)
class IgnoreRule:
    """One normalized ignore pattern and its compiled matcher."""

    pattern: str
    regex: re.Pattern[str]

    def matches(self, relative_path: str) -> bool:
        return self.regex.fullmatch(relative_path) is not None


@dataclass(frozen=True)
class IgnoreRuleSet:
    """Ordered ignore rules evaluated against root-relative posix paths."""

    rules: tuple[IgnoreRule, ...]
    from_file: bool = False

    @property
    def patterns(self) -> tuple[str, ...]:
        return tuple(rule.pattern for rule in self.rules)

    def matches(self, relative_path: str) -> bool:
        """Return whether any rule matches ``relative_path``."""
        return any(rule.matches(relative_path) for rule in self.rules)


def glob_to_regex(pattern: str) -> re.Pattern[str]:
    """Translate an ignore glob into an anchored regex.

    ``**`` spans path separators, ``*`` and ``?`` stay within one segment and
    every other character is literal.
    """
    out: list[str] = []
    idx = 0
    while idx < len(pattern):
        ch = pattern[idx]
        if ch == "*":
            if pattern.startswith("**", idx):
                out.append(".*")
                idx += 2
                continue
            out.append("[^/]*")
        elif ch == "?":
            out.append("[^/]")
        else:
            out.append(re.escape(ch))
        idx += 1
    return re.compile("^" + "".join(out) + "$", re.DOTALL)


def normalize_pattern(line: str) -> str:
    """Expand a bare name into ``name/**`` so it matches everything below it."""
    if "/" not in line and not line.endswith(_RECURSIVE_SUFFIX):
        return f"{line}{_RECURSIVE_SUFFIX}"
    return line


def parse_ignore_lines(text: str) -> list[str]:
    """Return normalized patterns from ignore-file text, dropping comments and blanks."""
    patterns: list[str] = []
    for raw in text.splitlines():
        line = raw.strip()
        if not line or line.startswith("#"):
            continue
        patterns.append(normalize_pattern(line))
    return patterns


def _implies_default(pattern: str, default: str) -> bool:
    """Return whether ``pattern`` already ignores everything ``default`` ignores."""
    if pattern == default:
        return True
    stem = default[: -len(_RECURSIVE_SUFFIX)]
    regex = glob_to_regex(pattern)
    return all(regex.match(sample) is not None for sample in (f"{stem}/x", f"{stem}/x/y"))


def _with_required_defaults(patterns: list[str]) -> list[str]:
    out = list(patterns)
    for default in DEFAULT_IGNORE_PATTERNS:
        if not any(_implies_default(pattern, default) for pattern in out):
            out.append(default)
    return out


def compile_rule_set(patterns: list[str] | tuple[str, ...], from_file: bool = False) -> IgnoreRuleSet:
    """Compile normalized patterns into a rule set. Raises ``re.error`` on bad input."""
    return IgnoreRuleSet(
        rules=tuple(IgnoreRule(pattern=pattern, regex=glob_to_regex(pattern)) for pattern in patterns),
        from_file=from_file,
    )


def default_rule_set() -> IgnoreRuleSet:
    return compile_rule_set(DEFAULT_IGNORE_PATTERNS)


def _load_rule_set(root: Path) -> IgnoreRuleSet:
    """Read ``root/.repopromptignore`` and compile it.

    Missing files and any read, decode, or compile failure degrade to the
    default rule set.
    """
    ignore_path = root / IGNORE_FILENAME
    if not ignore_path.is_file():
        return default_rule_set()
    try:
        text = ignore_path.read_text(encoding="utf-8")
        patterns = _with_required_defaults(parse_ignore_lines(text))
        return compile_rule_set(patterns, from_file=True)
    except (OSError, UnicodeDecodeError, re.error) as exc:
        logger.warning("Falling back to default ignore rules for %s: %s", root, exc)
        return default_rule_set()


@dataclass(frozen=True)
class _RuleSetCacheEntry:
    rule_set: IgnoreRuleSet
    ignore_file_mtime_ns: int | None


_IGNORE_RULES_CACHE: OrderedDict[str, _RuleSetCacheEntry] = OrderedDict()


def clear_ignore_cache() -> None:
    """Clear cached ignore rule sets."""
    _IGNORE_RULES_CACHE.clear()


def get_ignore_rules(root: Path) -> IgnoreRuleSet:
    """Return cached rules for ``root``, reloading when the ignore file changes."""
    key = str(Path(root).absolute())
    try:
        mtime_ns: int | None = int((Path(root) / IGNORE_FILENAME).stat().st_mtime_ns)
    except OSError:
        mtime_ns = None

    cached = _IGNORE_RULES_CACHE.get(key)
    if cached is not None and cached.ignore_file_mtime_ns == mtime_ns:
        _IGNORE_RULES_CACHE.move_to_end(key)
        return cached.rule_set

    rule_set = _load_rule_set(Path(root))
    _IGNORE_RULES_CACHE[key] = _RuleSetCacheEntry(rule_set=rule_set, ignore_file_mtime_ns=mtime_ns)
    _IGNORE_RULES_CACHE.move_to_end(key)
    while len(_IGNORE_RULES_CACHE) > IGNORE_RULES_CACHE_MAX:
        _IGNORE_RULES_CACHE.popitem(last=False)
    return rule_set


def relative_posix_path(root: Path, path: Path | str) -> str:
    """Return ``path`` relative to ``root`` with ``/`` separators (``""`` for root)."""
    rel = os.path.relpath(os.fspath(path), os.fspath(root))
    if rel == os.curdir:
        return ""
    return rel.replace(os.sep, "/")


class IgnoreManager:
    """Root-bound ignore matcher; ``load()`` must run before ``should_ignore``."""

    def __init__(self, root: Path | str) -> None:
        self.root = Path(root)
        self._rules: IgnoreRuleSet | None = None

    @property
    def loaded(self) -> bool:
        return self._rules is not None

    @property
    def rules(self) -> IgnoreRuleSet:
        if self._rules is None:
            raise IgnoreRulesNotLoadedError("Ignore patterns not loaded yet; call load() first.")
        return self._rules

    def load(self) -> IgnoreRuleSet:
        self._rules = get_ignore_rules(self.root)
        return self._rules

    def should_ignore(self, path: Path | str) -> bool:
        """Return whether ``path`` matches any loaded rule."""
        rules = self.rules
        return rules.matches(relative_posix_path(self.root, path))


__all__ = [
    "IGNORE_FILENAME",
    "DEFAULT_IGNORE_PATTERNS",
    "IgnoreRule",
    "IgnoreRuleSet",
    "IgnoreManager",
    "glob_to_regex",
    "normalize_pattern",
    "parse_ignore_lines",
    "compile_rule_set",
    "default_rule_set",
    "get_ignore_rules",
    "clear_ignore_cache",
    "relative_posix_path",
]
