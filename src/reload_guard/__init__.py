# Copyright (c) 2025 Henru Wang
# All rights reserved.

"""Dynamic import validation for hot-reload tooling."""

from .checker import DynamicImportChecker
from .config import Config, ConfigurationError
from .errors import FileReadError, NotDynamicallyImportedError, ParseError, ReloadGuardError
from .extractors import (
    EcmaScriptImportExtractor,
    ExtractorRegistry,
    ImportExtractor,
    PythonImportExtractor,
)
from .file_watcher import FileWatcher
from .models import CheckerStatistics, ImportRecord
from .source_reader import SourceReader

__version__ = "0.1.0"

__all__ = [
    "DynamicImportChecker",
    "Config",
    "ConfigurationError",
    "ReloadGuardError",
    "FileReadError",
    "ParseError",
    "NotDynamicallyImportedError",
    "ImportExtractor",
    "ExtractorRegistry",
    "PythonImportExtractor",
    "EcmaScriptImportExtractor",
    "FileWatcher",
    "ImportRecord",
    "CheckerStatistics",
    "SourceReader",
]
