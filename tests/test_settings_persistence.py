"""Unit tests for settings persistence."""

import json
import os
import shutil
import tempfile
import unittest
from pathlib import Path

from columnmark.settings_persistence import DEFAULTS_KEY, SettingsPersistence, get_persistence


class TestSettingsPersistence(unittest.TestCase):
    """Test settings persistence functionality."""

    def setUp(self):
        self.temp_dir = tempfile.mkdtemp()
        self.persistence = SettingsPersistence(config_dir=Path(self.temp_dir) / "config")
        self.test_doc_path = os.path.join(self.temp_dir, "module.py")

    def tearDown(self):
        if os.path.exists(self.temp_dir):
            shutil.rmtree(self.temp_dir)

    def test_save_and_load_settings(self):
        settings = {"column_limit": 100, "include_comments": False}
        self.assertTrue(self.persistence.save_settings(self.test_doc_path, settings))
        self.assertEqual(self.persistence.load_settings(self.test_doc_path), settings)

    def test_settings_survive_new_instance(self):
        self.persistence.save_settings(self.test_doc_path, {"column_limit": 72})
        fresh = SettingsPersistence(config_dir=Path(self.temp_dir) / "config")
        self.assertEqual(fresh.load_settings(self.test_doc_path), {"column_limit": 72})

    def test_load_nonexistent_document(self):
        self.assertEqual(self.persistence.load_settings("/nonexistent/document.py"), {})

    def test_none_document_path(self):
        self.assertFalse(self.persistence.save_settings(None, {"column_limit": 80}))
        self.assertEqual(self.persistence.load_settings(None), {})

    def test_save_merges_with_existing(self):
        self.persistence.save_settings(self.test_doc_path, {"column_limit": 72})
        self.persistence.save_settings(self.test_doc_path, {"include_comments": False})
        self.assertEqual(
            self.persistence.load_settings(self.test_doc_path),
            {"column_limit": 72, "include_comments": False},
        )

    def test_relative_paths_are_normalized(self):
        cwd = os.getcwd()
        try:
            os.chdir(self.temp_dir)
            self.persistence.save_settings("module.py", {"column_limit": 90})
        finally:
            os.chdir(cwd)
        self.assertEqual(self.persistence.load_settings(self.test_doc_path), {"column_limit": 90})

    def test_refuses_invalid_setting(self):
        self.assertFalse(self.persistence.save_settings(self.test_doc_path, {"column_limit": 0}))
        self.assertEqual(self.persistence.load_settings(self.test_doc_path), {})

    def test_invalid_values_on_disk_are_ignored(self):
        config_file = Path(self.temp_dir) / "config" / "settings.json"
        config_file.parent.mkdir(parents=True)
        key = os.path.abspath(self.test_doc_path)
        config_file.write_text(json.dumps({key: {"column_limit": "wide", "include_comments": True}}))
        self.assertEqual(self.persistence.load_settings(self.test_doc_path), {"include_comments": True})

    def test_corrupted_file_is_ignored(self):
        config_file = Path(self.temp_dir) / "config" / "settings.json"
        config_file.parent.mkdir(parents=True)
        config_file.write_text("{not json")
        with self.assertLogs("columnmark.settings_persistence", level="WARNING"):
            self.assertEqual(self.persistence.load_settings(self.test_doc_path), {})

    def test_non_dict_file_is_ignored(self):
        config_file = Path(self.temp_dir) / "config" / "settings.json"
        config_file.parent.mkdir(parents=True)
        config_file.write_text("[1, 2, 3]")
        self.assertEqual(self.persistence.load_settings(self.test_doc_path), {})

    def test_atomic_save_leaves_no_temp_file(self):
        self.persistence.save_settings(self.test_doc_path, {"column_limit": 80})
        config_dir = Path(self.temp_dir) / "config"
        self.assertEqual(sorted(p.name for p in config_dir.iterdir()), ["settings.json"])

    def test_load_overflow_settings_layers_defaults(self):
        self.persistence.save_settings(DEFAULTS_KEY, {"column_limit": 100, "include_comments": False})
        self.persistence.save_settings(self.test_doc_path, {"column_limit": 72})
        settings = self.persistence.load_overflow_settings(self.test_doc_path)
        self.assertEqual(settings.column_limit, 72)
        self.assertFalse(settings.include_comments)
        other = self.persistence.load_overflow_settings(os.path.join(self.temp_dir, "other.py"))
        self.assertEqual(other.column_limit, 100)

    def test_validate_setting(self):
        validate = self.persistence.validate_setting
        self.assertTrue(validate("column_limit", 72))
        self.assertFalse(validate("column_limit", True))
        self.assertTrue(validate("include_comments", False))
        self.assertFalse(validate("include_comments", "no"))
        self.assertTrue(validate("highlight_style", {"inherit": "error"}))
        self.assertFalse(validate("highlight_style", {"inherit": "sparkly"}))
        self.assertFalse(validate("highlight_style", "red"))
        self.assertTrue(validate("future_setting", object()))
        self.assertTrue(validate("column_limit", None))

    def test_clear_cache_rereads_disk(self):
        self.persistence.save_settings(self.test_doc_path, {"column_limit": 72})
        config_file = Path(self.temp_dir) / "config" / "settings.json"
        config_file.write_text(json.dumps({os.path.abspath(self.test_doc_path): {"column_limit": 64}}))
        self.assertEqual(self.persistence.load_settings(self.test_doc_path), {"column_limit": 72})
        self.persistence.clear_cache()
        self.assertEqual(self.persistence.load_settings(self.test_doc_path), {"column_limit": 64})


def test_get_persistence_is_singleton():
    assert get_persistence() is get_persistence()
