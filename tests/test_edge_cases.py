"""
Edge case unit tests

Edge cases of the filesystem helpers, process directory checks and data models.
"""

import os
import shutil
import tempfile
import unittest
from pathlib import Path
from unittest.mock import patch

from folderimport.cli import _process_directory
from folderimport.exceptions import FileOperationError, ValidationError
from folderimport.models import BuildResult, PluginReturnValue, Rule, StepOutcome
from folderimport.storage_provider import StorageProvider


class TestStorageProviderEdgeCases(unittest.TestCase):
    """StorageProvider edge case tests"""

    def setUp(self):
        self.storage = StorageProvider()
        self.temp_dir = Path(tempfile.mkdtemp())

    def tearDown(self):
        shutil.rmtree(self.temp_dir, ignore_errors=True)

    def test_listings_are_sorted(self):
        for name in ("b", "a", "C"):
            (self.temp_dir / name).mkdir()
        for name in ("z.tif", "m.tif"):
            (self.temp_dir / "a" / name).write_bytes(b"image")
        (self.temp_dir / "file.txt").write_text("x")

        self.assertEqual(self.storage.list_entries(self.temp_dir), ["C", "a", "b", "file.txt"])
        self.assertEqual(self.storage.list_subfolders(self.temp_dir), ["C", "a", "b"])
        self.assertEqual(
            [p.name for p in self.storage.list_files(self.temp_dir / "a")],
            ["m.tif", "z.tif"]
        )

    def test_list_files_ignores_directories(self):
        (self.temp_dir / "nested").mkdir()
        (self.temp_dir / "image.tif").write_bytes(b"image")

        self.assertEqual([p.name for p in self.storage.list_files(self.temp_dir)], ["image.tif"])

    def test_missing_directory(self):
        missing = self.temp_dir / "missing"

        with self.assertRaises(FileOperationError):
            self.storage.list_entries(missing)
        with self.assertRaises(FileOperationError):
            self.storage.list_subfolders(missing)
        with self.assertRaises(FileOperationError):
            self.storage.list_files(missing)

    def test_copy_permission_denied(self):
        source = self.temp_dir / "a.tif"
        source.write_bytes(b"image")

        with patch('shutil.copy2', side_effect=PermissionError("Permission denied")):
            with self.assertRaises(FileOperationError) as context:
                self.storage.copy_file(source, self.temp_dir / "b.tif")

        self.assertIn("Permission denied", str(context.exception))

    def test_copy_keeps_modification_time(self):
        source = self.temp_dir / "a.tif"
        source.write_bytes(b"image")
        os.utime(source, (1000000000, 1000000000))

        self.storage.copy_file(source, self.temp_dir / "b.tif")

        self.assertEqual(int((self.temp_dir / "b.tif").stat().st_mtime), 1000000000)

    def test_create_directories_over_file(self):
        (self.temp_dir / "images").write_text("not a directory")

        with self.assertRaises(FileOperationError):
            self.storage.create_directories(self.temp_dir / "images" / "title_master")

    def test_delete_missing_file(self):
        self.storage.delete_file(self.temp_dir / "missing.tif")


class TestProcessDirectoryEdgeCases(unittest.TestCase):
    """Process directory checks of the command line"""

    def setUp(self):
        self.temp_dir = Path(tempfile.mkdtemp())
        (self.temp_dir / "meta.json").write_text("{}")

    def tearDown(self):
        shutil.rmtree(self.temp_dir, ignore_errors=True)

    def test_process_directory(self):
        self.assertEqual(_process_directory(str(self.temp_dir), writable=True), self.temp_dir.resolve())

    def test_missing_directory(self):
        with self.assertRaises(ValidationError):
            _process_directory(str(self.temp_dir / "missing"))

    def test_file_is_not_a_directory(self):
        with self.assertRaises(ValidationError):
            _process_directory(str(self.temp_dir / "meta.json"))

    def test_missing_metadata_file(self):
        (self.temp_dir / "meta.json").unlink()

        with self.assertRaises(ValidationError) as context:
            _process_directory(str(self.temp_dir))

        self.assertIn("meta.json", str(context.exception))

    def test_not_writable_directory(self):
        with patch('os.access', side_effect=lambda path, mode: mode != os.W_OK):
            _process_directory(str(self.temp_dir))
            with self.assertRaises(ValidationError) as context:
                _process_directory(str(self.temp_dir), writable=True)

        self.assertIn("not writable", str(context.exception))

    def test_home_directory_is_expanded(self):
        with patch.dict(os.environ, {'HOME': str(self.temp_dir)}):
            self.assertEqual(_process_directory("~"), self.temp_dir.resolve())


class TestModelEdgeCases(unittest.TestCase):
    """Data model edge case tests"""

    def test_rule_matches_case_insensitive(self):
        rule = Rule('Titelblatt', 'Cover')

        self.assertTrue(rule.matches('TITELBLATT'))
        self.assertTrue(rule.matches('titelblatt'))
        self.assertFalse(rule.matches('Titelblatt 2'))

    def test_build_result_errors(self):
        result = BuildResult(next_image_index=3, outcomes=[
            StepOutcome('a.tif', 'success'),
            StepOutcome('Thumbs.db', 'skipped'),
            StepOutcome('b.tif', 'failed', 'CopyFailed', 'Not enough disk space'),
        ])

        self.assertEqual([o.unit for o in result.errors], ['b.tif'])

    def test_plugin_return_values(self):
        self.assertEqual([value.name for value in PluginReturnValue], ['FINISH', 'ERROR'])


if __name__ == '__main__':
    unittest.main()
