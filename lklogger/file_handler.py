"""
File Handler - rotating file sink for lklogger

Appends log lines to one file and rotates it when the next write would
push it past the size limit. Retention is bounded by backup count and
age, and rotated files can be gzip-compressed.

Rotation pattern:
    All.log       -> All.log.1 (or All.log.1.gz)
    All.log.1     -> All.log.2
    ...
    All.log.N     -> deleted (if N > backup_count)

Usage:
    from lklogger.file_handler import RotatingFileHandler

    handler = RotatingFileHandler("./log/API.log", max_bytes=10485760, backup_count=7, max_age_days=7)
    handler.write("Log message\n")
    handler.close()
"""

import gzip
import os
import re
import shutil
import time
from pathlib import Path
from threading import Lock
from beartype.typing import List, Tuple

SECONDS_PER_DAY = 24 * 60 * 60


class RotatingFileHandler:
    """
    Thread-safe size-based rotating file handler.

    A backup_count or max_age_days of 0 disables that retention limit.

    Example:
        handler = RotatingFileHandler("./log/Worker.log", max_bytes=1024, backup_count=3, compress=True)
        handler.write("2024-01-20 10:15:30.123 [INFO] worker.py:10 | Job done\n")
        handler.close()
    """

    def __init__(
        self,
        filepath: str,
        max_bytes: int = 10485760,  # 10MB
        backup_count: int = 7,
        max_age_days: int = 7,
        compress: bool = False,
        encoding: str = "utf-8",
    ):
        self.filepath = Path(filepath)
        self.max_bytes = max_bytes
        self.backup_count = backup_count
        self.max_age_days = max_age_days
        self.compress = compress
        self.encoding = encoding
        self._file = None
        self._size = 0
        self._lock = Lock()
        self._backup_pattern = re.compile(re.escape(self.filepath.name) + r"\.(\d+)(\.gz)?$")

    def write(self, content: str):
        """
        Write content to file with automatic rotation.

        Args:
            content: Content to write (should include newline if needed)
        """
        data = content.encode(self.encoding)
        with self._lock:
            if self._file is None or self._file.closed:
                self._open()

            if self._size > 0 and self._size + len(data) > self.max_bytes:
                self._rotate()
                self._open()

            self._file.write(data)
            self._file.flush()
            self._size += len(data)

    def _open(self):
        self.filepath.parent.mkdir(parents=True, exist_ok=True)
        self._file = open(self.filepath, "ab")
        self._size = self._file.tell()

    def _rotate(self):
        """Close the active file, shift the backups up by one and archive it as .1"""
        self._close_file()

        for index, path in reversed(self.backups()):
            suffix = ".gz" if path.name.endswith(".gz") else ""
            path.replace(self._backup_path(index + 1, suffix))

        first_backup = self._backup_path(1, "")
        if self.filepath.exists():
            self.filepath.replace(first_backup)
            if self.compress:
                self._compress(first_backup)

        self._remove_expired()

    def _compress(self, path: Path):
        target = path.with_name(path.name + ".gz")
        with open(path, "rb") as src, gzip.open(target, "wb") as dst:
            shutil.copyfileobj(src, dst)
        shutil.copystat(path, target)
        path.unlink()

    def _remove_expired(self):
        cutoff = time.time() - self.max_age_days * SECONDS_PER_DAY
        for index, path in self.backups():
            too_many = self.backup_count > 0 and index > self.backup_count
            try:
                too_old = self.max_age_days > 0 and path.stat().st_mtime < cutoff
                if too_many or too_old:
                    path.unlink()
            except FileNotFoundError:
                pass

    def _backup_path(self, index: int, suffix: str) -> Path:
        return self.filepath.with_name(f"{self.filepath.name}.{index}{suffix}")

    def backups(self) -> List[Tuple[int, Path]]:
        """
        List rotated files, newest first.

        Returns:
            (index, path) pairs sorted by index
        """
        if not self.filepath.parent.exists():
            return []
        found = []
        for path in self.filepath.parent.iterdir():
            match = self._backup_pattern.match(path.name)
            if match:
                found.append((int(match.group(1)), path))
        return sorted(found)

    def flush(self):
        """
        Flush file buffer.

        Ensures all buffered data is written to disk.
        """
        with self._lock:
            if self._file and not self._file.closed:
                self._file.flush()
                os.fsync(self._file.fileno())

    def _close_file(self):
        if self._file and not self._file.closed:
            self._file.flush()
            self._file.close()
        self._file = None

    def close(self):
        """
        Close file handle.

        The handler reopens the file on the next write.
        """
        with self._lock:
            self._close_file()

    def __enter__(self):
        """Context manager entry"""
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        """Context manager exit"""
        self.close()
