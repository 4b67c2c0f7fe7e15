"""Persistent JSON config helpers.

Stores binary-detection defaults and the prompt token limit.
All access is defensive: malformed or missing config falls back safely.
"""

from __future__ import annotations

import json
from dataclasses import asdict, fields
from pathlib import Path

from platformdirs import user_config_dir

from ..binary_detection import DEFAULT_BINARY_OPTIONS, BinaryDetectionOptions
from ..prompt.assembler import DEFAULT_TOKEN_LIMIT

APP_NAME = "repoprompt"
CONFIG_FILENAME = "config.json"
CONFIG_PATH = Path(user_config_dir(APP_NAME, appauthor=False)) / CONFIG_FILENAME


def load_config() -> dict[str, object]:
    """Load the persisted JSON config object.

    Returns an empty dict when the file is missing, unreadable, malformed, or
    does not decode to a top-level JSON object.
    """
    try:
        data = json.loads(CONFIG_PATH.read_text(encoding="utf-8"))
    except (OSError, ValueError):
        return {}
    return data if isinstance(data, dict) else {}


def save_config(data: dict[str, object]) -> None:
    """Persist config data as pretty-printed JSON.

    Filesystem errors are ignored to keep runtime behavior non-fatal when
    config cannot be written.
    """
    try:
        CONFIG_PATH.parent.mkdir(parents=True, exist_ok=True)
        CONFIG_PATH.write_text(json.dumps(data, indent=2) + "\n", encoding="utf-8")
    except OSError:
        pass


def load_binary_detection_options() -> BinaryDetectionOptions:
    """Load binary-detection options, dropping fields that fail validation.

    Each persisted field is applied on its own so one bad value does not
    discard the rest.
    """
    raw = load_config().get("binary_detection")
    options = DEFAULT_BINARY_OPTIONS
    if not isinstance(raw, dict):
        return options
    for field in fields(BinaryDetectionOptions):
        if field.name not in raw:
            continue
        try:
            options = options.with_overrides(**{field.name: raw[field.name]})
        except (TypeError, ValueError):
            continue
    return options


def save_binary_detection_options(options: BinaryDetectionOptions) -> None:
    config = load_config()
    config["binary_detection"] = asdict(options)
    save_config(config)


def load_token_limit() -> int:
    """Return the persisted token limit, or ``DEFAULT_TOKEN_LIMIT`` when unset/invalid."""
    value = load_config().get("token_limit")
    if isinstance(value, bool) or not isinstance(value, int) or value <= 0:
        return DEFAULT_TOKEN_LIMIT
    return value


def save_token_limit(token_limit: int) -> None:
    if token_limit <= 0:
        return
    config = load_config()
    config["token_limit"] = int(token_limit)
    save_config(config)


__all__ = [
    "APP_NAME",
    "CONFIG_PATH",
    "DEFAULT_TOKEN_LIMIT",
    "load_config",
    "save_config",
    "load_binary_detection_options",
    "save_binary_detection_options",
    "load_token_limit",
    "save_token_limit",
]
