"""Tests for speedcore.config -- configuration persistence."""

import json
import os
import tempfile
import unittest
from unittest import mock

from speedcore.config import (
    DEFAULTS,
    get_config_value,
    load_config,
    save_config,
    set_config_value,
)


class TestConfigDefaults(unittest.TestCase):
    def test_defaults_have_required_keys(self):
        for key in ("concurrent", "duration", "ping_count", "upload_size",
                    "token", "source", "no_icmp", "no_pre_allocate"):
            self.assertIn(key, DEFAULTS)

    def test_default_values(self):
        self.assertEqual(DEFAULTS["concurrent"], 4)
        self.assertEqual(DEFAULTS["ping_count"], 10)
        self.assertEqual(DEFAULTS["upload_size"], 1024)


class TestLoadSaveConfig(unittest.TestCase):
    def setUp(self):
        self._tmp = tempfile.TemporaryDirectory()
        self.path = os.path.join(self._tmp.name, "sub", "config.json")
        patcher = mock.patch("speedcore.config._config_path", return_value=self.path)
        patcher.start()
        self.addCleanup(patcher.stop)
        self.addCleanup(self._tmp.cleanup)

    def test_load_defaults_when_missing(self):
        self.assertEqual(load_config(), DEFAULTS)

    def test_save_and_load_roundtrip(self):
        cfg = dict(DEFAULTS, token="abc", concurrent=8)
        self.assertEqual(save_config(cfg), self.path)
        loaded = load_config()
        self.assertEqual(loaded["token"], "abc")
        self.assertEqual(loaded["concurrent"], 8)

    def test_partial_file_merges_defaults(self):
        os.makedirs(os.path.dirname(self.path))
        with open(self.path, "w", encoding="utf-8") as fh:
            json.dump({"duration": 5.0}, fh)
        cfg = load_config()
        self.assertEqual(cfg["duration"], 5.0)
        self.assertEqual(cfg["ping_count"], DEFAULTS["ping_count"])

    def test_corrupt_file_uses_defaults(self):
        os.makedirs(os.path.dirname(self.path))
        with open(self.path, "w", encoding="utf-8") as fh:
            fh.write("{not json")
        self.assertEqual(load_config(), DEFAULTS)

    def test_set_config_value_coerces(self):
        set_config_value("concurrent", "16")
        set_config_value("duration", "7.5")
        set_config_value("no_icmp", "true")
        set_config_value("token", "secret")
        self.assertEqual(get_config_value("concurrent"), 16)
        self.assertEqual(get_config_value("duration"), 7.5)
        self.assertIs(get_config_value("no_icmp"), True)
        self.assertEqual(get_config_value("token"), "secret")

    def test_set_config_value_rejects_unknown_key(self):
        with self.assertRaises(KeyError):
            set_config_value("colour", "blue")

    def test_set_config_value_rejects_bad_number(self):
        with self.assertRaises(ValueError):
            set_config_value("ping_count", "many")


if __name__ == "__main__":
    unittest.main()
