"""
System utilities for lazy_shrink.

This module provides system-level utilities including:
- Temporary probe file tracking and cleanup
- File system helpers
- Size and duration formatting
"""

import os
import sys
import signal
import atexit
import tempfile
import contextlib
from pathlib import Path
from typing import Optional, Tuple, Union

from ....utils.logging import get_logger

logger = get_logger("system_utils")


class _TempFilesList(list):
    """Ordered list of tracked temp paths with a membership guard for uniqueness."""

    def __init__(self):
        super().__init__()
        self._membership: set = set()

    def append(self, item):  # type: ignore[override]
        key = str(item)
        if key not in self._membership:
            self._membership.add(key)
            super().append(item)

    def add(self, item):
        self.append(item)

    def discard(self, item):
        key = str(item)
        if key in self._membership:
            self._membership.remove(key)
        for i, existing in enumerate(list(self)):
            if str(existing) == key:
                del self[i]
                break

    def clear(self):
        self._membership.clear()
        super().clear()


TEMP_FILES = _TempFilesList()


def file_exists(path: Union[str, os.PathLike, Path]) -> bool:
    """Thin existence wrapper; returns False on OSError instead of raising."""
    try:
        return Path(path).exists()
    except OSError:
        return False


def _cleanup():
    """Cleanup temporary files on exit"""
    for f in list(TEMP_FILES):
        path_str = str(f)
        try:
            if file_exists(path_str):
                os.remove(path_str)
                logger.cleanup(f"removed {path_str}")
        except OSError as e:
            logger.warn(f"Could not remove temp file {path_str}: {e}")
        finally:
            TEMP_FILES.discard(f)


def cleanup_temp_files():
    """Remove every tracked temporary file."""
    _cleanup()


atexit.register(_cleanup)
for sig in (signal.SIGINT, signal.SIGTERM):
    signal.signal(sig, lambda s, f: sys.exit(1))


@contextlib.contextmanager
def temporary_file(suffix: str = ".tmp", prefix: str = "lazy_shrink_",
                   directory: Optional[Union[str, Path]] = None):
    """
    Context manager for temporary files with automatic cleanup.

    Ensures temp files are tracked in TEMP_FILES and removed on exit from the
    block, or at interpreter exit if the process is interrupted.

    Args:
        suffix: File extension (default: .tmp)
        prefix: Filename prefix (default: lazy_shrink_)
        directory: Directory to create the file in (default: system temp dir)

    Yields:
        Path: Path to the temporary file
    """
    temp_file = None
    try:
        if directory is not None:
            Path(directory).mkdir(parents=True, exist_ok=True)
        fd, temp_path = tempfile.mkstemp(suffix=suffix, prefix=prefix,
                                         dir=str(directory) if directory else None)
        os.close(fd)
        temp_file = Path(temp_path)
        TEMP_FILES.add(str(temp_file))

        yield temp_file

    finally:
        if temp_file:
            try:
                if file_exists(temp_file):
                    temp_file.unlink()
            except OSError as e:
                logger.debug(f"Failed to cleanup temp file {temp_file}: {e}")
            finally:
                TEMP_FILES.discard(str(temp_file))


def format_size(bytes_size: int) -> str:
    """Convert bytes to human readable format:
    - Bytes: integer no decimal ("500 B", "0 B")
    - >= KB: two decimals ("1.50 KB", "2.00 MB")
    """
    negative = bytes_size < 0
    size = float(abs(bytes_size))
    units = ['B', 'KB', 'MB', 'GB', 'TB', 'PB']
    unit_index = 0
    while unit_index < len(units) - 1 and size >= 1024.0:
        size /= 1024.0
        unit_index += 1
    unit = units[unit_index]
    if unit == 'B':
        formatted = f"{int(size)} {unit}"
    else:
        formatted = f"{size:.2f} {unit}"
    return f"-{formatted}" if negative else formatted


def size_label(bytes_size: int) -> Tuple[int, str]:
    """Scale a byte count by decimal thousands for output file names.

    Integer division, so 1999 bytes is (1, "KB") and 999 bytes is (999, "B").
    Anything from a petabyte up stays in bytes.
    """
    size = int(bytes_size)
    for unit, factor in (("TB", 10**12), ("GB", 10**9), ("MB", 10**6), ("KB", 10**3)):
        if factor <= size < factor * 1000:
            return size // factor, unit
    return size, "B"


def format_duration(seconds: float) -> str:
    """Format duration in seconds to a human-readable string"""
    if seconds < 1:
        return f"{seconds * 1000:.0f}ms"
    if seconds < 60:
        return f"{seconds:.1f}s"
    elif seconds < 3600:
        return f"{seconds/60:.1f}m"
    else:
        hours = int(seconds // 3600)
        minutes = int((seconds % 3600) // 60)
        return f"{hours}h {minutes}m"
