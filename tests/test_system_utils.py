"""
Tests for system_utils.

Covers size and duration formatting, output size labels, and temp probe file
tracking and cleanup.
"""

import os
import shutil
import tempfile
import unittest
from pathlib import Path

from lazy_shrink.core.modules.system.system_utils import (
    TEMP_FILES, cleanup_temp_files, file_exists, format_duration,
    format_size, size_label, temporary_file,
)


class TestFormatting(unittest.TestCase):
    """Human readable sizes and durations."""

    def test_format_size(self):
        self.assertEqual(format_size(0), "0 B")
        self.assertEqual(format_size(500), "500 B")
        self.assertEqual(format_size(1536), "1.50 KB")
        self.assertEqual(format_size(2097152), "2.00 MB")
        self.assertEqual(format_size(-2048), "-2.00 KB")

    def test_size_label_uses_decimal_thousands(self):
        self.assertEqual(size_label(0), (0, "B"))
        self.assertEqual(size_label(999), (999, "B"))
        self.assertEqual(size_label(1000), (1, "KB"))
        self.assertEqual(size_label(1999), (1, "KB"))
        self.assertEqual(size_label(2_500_000), (2, "MB"))
        self.assertEqual(size_label(7 * 10**9), (7, "GB"))
        self.assertEqual(size_label(10**12), (1, "TB"))

    def test_size_label_beyond_terabytes_stays_in_bytes(self):
        self.assertEqual(size_label(10**15), (10**15, "B"))

    def test_format_duration(self):
        self.assertEqual(format_duration(0.25), "250ms")
        self.assertEqual(format_duration(12.34), "12.3s")
        self.assertEqual(format_duration(90), "1.5m")
        self.assertEqual(format_duration(3 * 3600 + 125), "3h 2m")


class TestTemporaryFiles(unittest.TestCase):
    """Tracked probe files."""

    def setUp(self):
        self.test_dir = Path(tempfile.mkdtemp())

    def tearDown(self):
        cleanup_temp_files()
        if self.test_dir.exists():
            shutil.rmtree(self.test_dir)

    def test_temporary_file_is_tracked_then_removed(self):
        with temporary_file(suffix=".png", directory=self.test_dir) as path:
            self.assertTrue(path.exists())
            self.assertEqual(path.parent, self.test_dir)
            self.assertTrue(path.name.startswith("lazy_shrink_"))
            self.assertTrue(path.name.endswith(".png"))
            self.assertIn(str(path), TEMP_FILES)

        self.assertFalse(path.exists())
        self.assertNotIn(str(path), TEMP_FILES)

    def test_temporary_file_removed_on_error(self):
        with self.assertRaises(RuntimeError):
            with temporary_file(directory=self.test_dir) as path:
                raise RuntimeError("search blew up")
        self.assertFalse(path.exists())

    def test_temporary_file_creates_directory(self):
        nested = self.test_dir / "probes" / "deep"
        with temporary_file(directory=nested) as path:
            self.assertTrue(nested.is_dir())
            self.assertTrue(path.exists())

    def test_cleanup_removes_tracked_files(self):
        stray = self.test_dir / "stray.gif"
        stray.write_bytes(b"gif")
        TEMP_FILES.add(str(stray))

        cleanup_temp_files()

        self.assertFalse(stray.exists())
        self.assertNotIn(str(stray), TEMP_FILES)

    def test_tracking_ignores_duplicates(self):
        path = str(self.test_dir / "dup.png")
        TEMP_FILES.add(path)
        TEMP_FILES.add(path)
        self.assertEqual(TEMP_FILES.count(path), 1)
        TEMP_FILES.discard(path)
        self.assertNotIn(path, TEMP_FILES)

    def test_file_exists(self):
        present = self.test_dir / "here.txt"
        present.write_text("x")
        self.assertTrue(file_exists(present))
        self.assertFalse(file_exists(os.path.join(str(self.test_dir), "absent.txt")))


if __name__ == '__main__':
    unittest.main()
