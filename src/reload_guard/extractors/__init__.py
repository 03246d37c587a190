# Copyright (c) 2025 Henru Wang
# All rights reserved.

"""Extractor plugins that find import statements in source text.

Components:
- ImportExtractor: Abstract base class for extractor plugins
- ExtractorRegistry: Suffix-based registry for extractor plugins
- PythonImportExtractor: ast-based extractor for .py/.pyi files
- EcmaScriptImportExtractor: tree-sitter extractor for JavaScript/TypeScript
"""

from reload_guard.extractors.base import ImportExtractor
from reload_guard.extractors.ecmascript_extractor import EcmaScriptImportExtractor
from reload_guard.extractors.python_extractor import PythonImportExtractor
from reload_guard.extractors.registry import ExtractorRegistry

__all__ = [
    "ImportExtractor",
    "ExtractorRegistry",
    "PythonImportExtractor",
    "EcmaScriptImportExtractor",
]
