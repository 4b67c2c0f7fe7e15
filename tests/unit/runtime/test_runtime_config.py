"""Tests for persisted configuration helpers."""

from __future__ import annotations

import json
import tempfile
import unittest
from pathlib import Path
from unittest import mock

from repoprompt.binary_detection import DEFAULT_BINARY_OPTIONS, BinaryDetectionOptions
from repoprompt.prompt import DEFAULT_TOKEN_LIMIT
from repoprompt.runtime import config


class ConfigBehaviorTests(unittest.TestCase):
    def test_missing_config_uses_defaults(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            with mock.patch("repoprompt.runtime.config.CONFIG_PATH", Path(tmp) / "missing" / "config.json"):
                self.assertEqual(config.load_config(), {})
                self.assertEqual(config.load_binary_detection_options(), DEFAULT_BINARY_OPTIONS)
                self.assertEqual(config.load_token_limit(), DEFAULT_TOKEN_LIMIT)

    def test_malformed_config_uses_defaults(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            config_path = Path(tmp) / "config.json"
            config_path.write_text("{not json", encoding="utf-8")
            with mock.patch("repoprompt.runtime.config.CONFIG_PATH", config_path):
                self.assertEqual(config.load_config(), {})

            config_path.write_text("[1, 2]", encoding="utf-8")
            with mock.patch("repoprompt.runtime.config.CONFIG_PATH", config_path):
                self.assertEqual(config.load_config(), {})

    def test_binary_detection_options_round_trip(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            config_path = Path(tmp) / "nested" / "config.json"
            options = BinaryDetectionOptions(max_size_bytes=2048, check_content=False)
            with mock.patch("repoprompt.runtime.config.CONFIG_PATH", config_path):
                config.save_binary_detection_options(options)
                config.save_token_limit(5000)

                self.assertEqual(config.load_binary_detection_options(), options)
                self.assertEqual(config.load_token_limit(), 5000)
                saved = json.loads(config_path.read_text(encoding="utf-8"))
                self.assertEqual(saved["token_limit"], 5000)
                self.assertEqual(saved["binary_detection"]["max_size_bytes"], 2048)

    def test_invalid_fields_are_dropped_individually(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            config_path = Path(tmp) / "config.json"
            config_path.write_text(
                json.dumps(
                    {
                        "binary_detection": {"max_size_bytes": -5, "sample_size": 64, "check_extension": "no"},
                        "token_limit": True,
                    }
                ),
                encoding="utf-8",
            )
            with mock.patch("repoprompt.runtime.config.CONFIG_PATH", config_path):
                options = config.load_binary_detection_options()
                token_limit = config.load_token_limit()

            self.assertEqual(options.max_size_bytes, DEFAULT_BINARY_OPTIONS.max_size_bytes)
            self.assertEqual(options.sample_size, 64)
            self.assertTrue(options.check_extension)
            self.assertEqual(token_limit, DEFAULT_TOKEN_LIMIT)

    def test_save_ignores_write_errors(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            blocker = Path(tmp) / "blocker"
            blocker.write_text("file, not directory", encoding="utf-8")
            with mock.patch("repoprompt.runtime.config.CONFIG_PATH", blocker / "config.json"):
                config.save_token_limit(10)
                self.assertEqual(config.load_token_limit(), DEFAULT_TOKEN_LIMIT)


if __name__ == "__main__":
    unittest.main()
