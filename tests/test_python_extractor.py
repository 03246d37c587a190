# Copyright (c) 2025 Henru Wang
# All rights reserved.

"""Tests for PythonImportExtractor.

Tests cover:
- import / from...import statements (absolute and relative)
- importlib.import_module, import_module, __import__
- Conditional and computed loader arguments
- Configured extra loader names
- Syntax errors
"""

import pytest

from reload_guard.errors import ParseError
from reload_guard.extractors import PythonImportExtractor
from reload_guard.models import ImportRecord


def _extract(code: str, extractor: PythonImportExtractor = None):
    return (extractor or PythonImportExtractor()).extract(code, "/project/app.py")


class TestExtractorBasics:
    def test_extractor_name(self):
        assert PythonImportExtractor().name() == "PythonImportExtractor"

    def test_suffixes(self):
        assert PythonImportExtractor().suffixes() == frozenset([".py", ".pyi"])

    def test_no_imports_returns_empty_list(self):
        code = """
x = 1
y = 2
print(x + y)
"""
        assert _extract(code) == []


class TestStaticImports:
    def test_simple_import(self):
        assert _extract("import os") == [ImportRecord("os", False, 1)]

    def test_multiple_names(self):
        records = _extract("import os, app.plugins as plugins")
        assert [r.module_specifier for r in records] == ["os", "app.plugins"]
        assert not any(r.is_dynamic for r in records)

    def test_from_import(self):
        assert _extract("from app.plugins import loader") == [
            ImportRecord("app.plugins", False, 1)
        ]

    def test_relative_imports_keep_dots(self):
        code = "from . import utils\nfrom ..core import models\n"
        records = _extract(code)
        assert [r.module_specifier for r in records] == [".", "..core"]

    def test_nested_imports_are_found(self):
        code = """
def load():
    import json
    return json
"""
        assert _extract(code) == [ImportRecord("json", False, 3)]


class TestDynamicImports:
    def test_importlib_import_module(self):
        code = "import importlib\nplugin = importlib.import_module('app.plugin')\n"
        assert _extract(code) == [
            ImportRecord("importlib", False, 1),
            ImportRecord("app.plugin", True, 2),
        ]

    def test_bare_import_module(self):
        code = "from importlib import import_module\nimport_module('.plugin', package=__package__)\n"
        records = _extract(code)
        assert records[1] == ImportRecord(".plugin", True, 2)

    def test_dunder_import(self):
        assert _extract("mod = __import__('app.plugin')") == [
            ImportRecord("app.plugin", True, 1)
        ]

    def test_name_keyword(self):
        assert _extract("importlib.import_module(name='app.plugin')") == [
            ImportRecord("app.plugin", True, 1)
        ]

    def test_conditional_argument(self):
        records = _extract("importlib.import_module('a.dev' if DEBUG else 'a.prod')")
        assert [r.module_specifier for r in records] == ["a.dev", "a.prod"]
        assert all(r.is_dynamic for r in records)

    def test_bool_op_argument(self):
        records = _extract("importlib.import_module(override or 'a.default')")
        assert [r.module_specifier for r in records] == [None, "a.default"]

    def test_fstring_without_placeholders(self):
        assert _extract("importlib.import_module(f'app.plugin')")[0].module_specifier == (
            "app.plugin"
        )

    def test_computed_argument(self):
        records = _extract("importlib.import_module(f'app.{name}')")
        assert records == [ImportRecord(None, True, 1)]

    def test_missing_argument(self):
        assert _extract("importlib.import_module()") == [ImportRecord(None, True, 1)]

    def test_other_calls_ignored(self):
        assert _extract("importlib.reload(module)\nload_plugin('app.plugin')\n") == []

    def test_configured_loader_names(self):
        extractor = PythonImportExtractor(["load_plugin", "plugins.registry.fetch"])
        code = "load_plugin('app.a')\nregistry.fetch('app.b')\n"
        records = _extract(code, extractor)
        assert records == [
            ImportRecord("app.a", True, 1),
            ImportRecord("app.b", True, 2),
        ]

    def test_records_in_source_order(self):
        code = """
def later():
    return importlib.import_module('app.late')

import importlib
"""
        records = _extract(code)
        assert [r.line_number for r in records] == [3, 5]


class TestParseErrors:
    def test_syntax_error(self):
        with pytest.raises(ParseError) as exc_info:
            _extract("def broken(:\n    pass\n")
        assert exc_info.value.line_number == 1
        assert "/project/app.py" in str(exc_info.value)

    def test_null_bytes(self):
        with pytest.raises(ParseError):
            _extract("import os\x00\n")
