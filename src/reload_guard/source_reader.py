# Copyright (c) 2025 Henru Wang
# All rights reserved.

"""Source file reading for import extraction.

Reads a file's full text with UTF-8 decoding and a latin-1 fallback, refusing
files above a size limit. Every failure surfaces as FileReadError; nothing is
retried.
"""

import logging
from pathlib import Path
from typing import Callable

from reload_guard.errors import FileReadError

logger = logging.getLogger(__name__)

# Any callable with this signature can stand in for SourceReader
ReadSource = Callable[[str], str]

DEFAULT_MAX_FILE_SIZE_KB = 1024


class SourceReader:
    """Reads source files for the checker.

    Usage:
        reader = SourceReader(max_file_size_kb=512)
        text = reader("/project/src/app.js")
    """

    def __init__(self, max_file_size_kb: int = DEFAULT_MAX_FILE_SIZE_KB) -> None:
        """Initialize the reader.

        Args:
            max_file_size_kb: Files larger than this are refused.
        """
        self.max_file_size_bytes = max_file_size_kb * 1024

    def __call__(self, filepath: str) -> str:
        return self.read(filepath)

    def read(self, filepath: str) -> str:
        """Read the full text of a file.

        Args:
            filepath: Path to the file.

        Returns:
            File contents as a string.

        Raises:
            FileReadError: If the file is missing, not a regular file, too
                large, not readable, or the read fails.
        """
        path = Path(filepath)

        try:
            if not path.exists():
                raise FileReadError(filepath, "file not found")
            if not path.is_file():
                raise FileReadError(filepath, "not a regular file")

            file_size = path.stat().st_size
            if file_size > self.max_file_size_bytes:
                raise FileReadError(
                    filepath,
                    f"{file_size} bytes exceeds limit ({self.max_file_size_bytes})",
                )

            raw = path.read_bytes()
        except PermissionError as e:
            raise FileReadError(filepath, "permission denied") from e
        except OSError as e:
            raise FileReadError(filepath, e.strerror or str(e)) from e

        try:
            return raw.decode("utf-8-sig")
        except UnicodeDecodeError:
            # latin-1 accepts all byte values
            logger.warning(f"⚠️ File {filepath} is not UTF-8, using latin-1 fallback encoding")
            return raw.decode("latin-1")
