"""
Unit tests for file_handler.py

Tests file logging functionality including:
- File and directory creation
- Size-based rotation
- Backup count and age retention
- Compression of rotated files
- Thread safety
"""

import gzip
import os
import shutil
import tempfile
import threading
import time
import unittest
from pathlib import Path

from lklogger.file_handler import RotatingFileHandler


class TestRotatingFileHandler(unittest.TestCase):
    """Test RotatingFileHandler class"""

    def setUp(self):
        """Set up test fixtures"""
        self.temp_dir = tempfile.mkdtemp()
        self.log_file = Path(self.temp_dir) / "test.log"

    def tearDown(self):
        """Clean up temp directory"""
        shutil.rmtree(self.temp_dir, ignore_errors=True)

    def _backup(self, index: int, suffix: str = "") -> Path:
        return Path(f"{self.log_file}.{index}{suffix}")

    def test_handler_initialization(self):
        """Test handler is initialized correctly and lazily"""
        handler = RotatingFileHandler(str(self.log_file), max_bytes=1024, backup_count=3, max_age_days=2)

        self.assertEqual(handler.filepath, self.log_file)
        self.assertEqual(handler.max_bytes, 1024)
        self.assertEqual(handler.backup_count, 3)
        self.assertEqual(handler.max_age_days, 2)
        self.assertFalse(handler.compress)
        self.assertFalse(self.log_file.exists())

        handler.close()

    def test_creates_log_directory_on_first_write(self):
        """Test that handler creates log directory on first write"""
        nested_log = Path(self.temp_dir) / "subdir" / "logs" / "test.log"

        handler = RotatingFileHandler(str(nested_log))
        self.assertFalse(nested_log.parent.exists())

        handler.write("Test message\n")
        handler.close()

        self.assertTrue(nested_log.exists())

    def test_writes_to_file(self):
        """Test that handler appends to file"""
        self.log_file.write_text("existing\n", encoding="utf-8")
        handler = RotatingFileHandler(str(self.log_file))

        handler.write("Test message 1\n")
        handler.write("Test message 2\n")
        handler.close()

        content = self.log_file.read_text(encoding="utf-8")
        self.assertEqual(content, "existing\nTest message 1\nTest message 2\n")

    def test_rotates_before_exceeding_size(self):
        """Test that a write that would exceed max_bytes lands in a fresh file"""
        handler = RotatingFileHandler(str(self.log_file), max_bytes=30, backup_count=3)

        handler.write("a" * 19 + "\n")
        handler.write("b" * 9 + "\n")  # exactly 30 bytes, fits
        handler.write("c" * 9 + "\n")  # would be 40 bytes, rotates
        handler.close()

        self.assertEqual(self._backup(1).read_text(encoding="utf-8"), "a" * 19 + "\n" + "b" * 9 + "\n")
        self.assertEqual(self.log_file.read_text(encoding="utf-8"), "c" * 9 + "\n")
        self.assertFalse(self._backup(2).exists())

    def test_oversized_record_written_whole(self):
        """Test that a record bigger than max_bytes is still written"""
        handler = RotatingFileHandler(str(self.log_file), max_bytes=10)

        handler.write("x" * 50 + "\n")
        handler.close()

        self.assertEqual(len(self.log_file.read_bytes()), 51)
        self.assertEqual(handler.backups(), [])

    def test_backup_count_limit(self):
        """Test that only backup_count backup files are kept, newest first"""
        handler = RotatingFileHandler(str(self.log_file), max_bytes=10, backup_count=2)

        for i in range(5):
            handler.write(f"message{i}\n")
        handler.close()

        self.assertEqual(self.log_file.read_text(encoding="utf-8"), "message4\n")
        self.assertEqual(self._backup(1).read_text(encoding="utf-8"), "message3\n")
        self.assertEqual(self._backup(2).read_text(encoding="utf-8"), "message2\n")
        self.assertFalse(self._backup(3).exists())

    def test_zero_backup_count_keeps_all(self):
        """Test that backup_count=0 disables the count limit"""
        handler = RotatingFileHandler(str(self.log_file), max_bytes=10, backup_count=0, max_age_days=0)

        for i in range(5):
            handler.write(f"message{i}\n")
        handler.close()

        self.assertEqual([index for index, _ in handler.backups()], [1, 2, 3, 4])

    def test_age_limit_removes_old_backups(self):
        """Test that backups older than max_age_days are removed on rotation"""
        stale = self._backup(1)
        stale.write_text("old\n", encoding="utf-8")
        ten_days_ago = time.time() - 10 * 24 * 60 * 60
        os.utime(stale, (ten_days_ago, ten_days_ago))

        handler = RotatingFileHandler(str(self.log_file), max_bytes=10, backup_count=5, max_age_days=7)
        handler.write("message0\n")
        handler.write("message1\n")
        handler.close()

        self.assertEqual(self._backup(1).read_text(encoding="utf-8"), "message0\n")
        self.assertFalse(self._backup(2).exists(), "Stale backup shifted to .2 should be removed")

    def test_compression(self):
        """Test that rotated files are gzipped when compress is set"""
        handler = RotatingFileHandler(str(self.log_file), max_bytes=10, backup_count=2, compress=True)

        for i in range(4):
            handler.write(f"message{i}\n")
        handler.close()

        self.assertFalse(self._backup(1).exists())
        with gzip.open(self._backup(1, ".gz"), "rt", encoding="utf-8") as f:
            self.assertEqual(f.read(), "message2\n")
        with gzip.open(self._backup(2, ".gz"), "rt", encoding="utf-8") as f:
            self.assertEqual(f.read(), "message1\n")
        self.assertFalse(self._backup(3, ".gz").exists())

    def test_no_compression_by_default(self):
        """Test that rotated files stay plain text without compress"""
        handler = RotatingFileHandler(str(self.log_file), max_bytes=10, backup_count=2)

        handler.write("message0\n")
        handler.write("message1\n")
        handler.close()

        self.assertTrue(self._backup(1).exists())
        self.assertFalse(self._backup(1, ".gz").exists())

    def test_flush(self):
        """Test flush method"""
        handler = RotatingFileHandler(str(self.log_file))

        handler.write("Test message\n")
        handler.flush()

        self.assertIn("Test message", self.log_file.read_text(encoding="utf-8"))

        handler.close()

    def test_write_after_close_reopens(self):
        """Test that the handler reopens the file after close"""
        handler = RotatingFileHandler(str(self.log_file))
        handler.write("first\n")
        handler.close()
        handler.write("second\n")
        handler.close()

        self.assertEqual(self.log_file.read_text(encoding="utf-8"), "first\nsecond\n")

    def test_context_manager(self):
        """Test handler works as context manager"""
        with RotatingFileHandler(str(self.log_file)) as handler:
            handler.write("Test message\n")

        self.assertIn("Test message", self.log_file.read_text(encoding="utf-8"))

    def test_unicode_content(self):
        """Test writing Unicode content and sizing by encoded bytes"""
        handler = RotatingFileHandler(str(self.log_file))

        handler.write("Message with émojis: 🎉 ✅ 🚀\n")
        handler.write("Chinese: 你好世界\n")
        handler.close()

        content = self.log_file.read_text(encoding="utf-8")
        self.assertIn("🎉", content)
        self.assertIn("你好世界", content)

    def test_concurrent_writes_keep_lines_whole(self):
        """Test that concurrent writers interleave only at line boundaries"""
        handler = RotatingFileHandler(str(self.log_file), max_bytes=2000, backup_count=0, max_age_days=0)

        def writer(thread_id):
            for i in range(50):
                handler.write(f"thread-{thread_id}-line-{i:03d}-" + "x" * 20 + "\n")

        threads = [threading.Thread(target=writer, args=(n,)) for n in range(4)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()
        handler.close()

        lines = self.log_file.read_text(encoding="utf-8").splitlines()
        for _, path in handler.backups():
            lines.extend(path.read_text(encoding="utf-8").splitlines())

        self.assertEqual(len(lines), 200)
        for line in lines:
            self.assertRegex(line, r"^thread-\d-line-\d{3}-x{20}$")


if __name__ == "__main__":
    unittest.main()
