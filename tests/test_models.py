# Copyright (c) 2025 Henru Wang
# All rights reserved.

"""Tests for core data models and the error taxonomy."""

import dataclasses
import json

import pytest

from reload_guard.errors import (
    FileReadError,
    NotDynamicallyImportedError,
    ParseError,
    ReloadGuardError,
)
from reload_guard.models import CheckerStatistics, ImportRecord


class TestImportRecord:
    def test_instantiation_minimal(self):
        record = ImportRecord("./plugin.js", True)

        assert record.module_specifier == "./plugin.js"
        assert record.is_dynamic is True
        assert record.line_number == 0

    def test_frozen(self):
        record = ImportRecord("./plugin.js", True, 3)
        with pytest.raises(dataclasses.FrozenInstanceError):
            record.is_dynamic = False  # type: ignore[misc]

    def test_matches_dynamic_exact(self):
        assert ImportRecord("./plugin.js", True).matches("./plugin.js")

    def test_static_never_matches(self):
        assert not ImportRecord("./plugin.js", False).matches("./plugin.js")

    def test_no_normalization(self):
        record = ImportRecord("./plugin.js", True)
        assert not record.matches("./plugin")
        assert not record.matches("plugin.js")
        assert not record.matches("././plugin.js")

    def test_computed_specifier_never_matches(self):
        assert not ImportRecord(None, True).matches("./plugin.js")


class TestCheckerStatistics:
    def test_defaults(self):
        stats = CheckerStatistics()
        assert stats.hits == 0
        assert stats.misses == 0
        assert stats.invalidations == 0
        assert stats.violations == 0

    def test_to_dict_is_json_compatible(self):
        stats = CheckerStatistics(hits=3, misses=1, violations=2, cached_pair_count=1)

        data = stats.to_dict()

        assert data["hits"] == 3
        assert data["violations"] == 2
        assert json.loads(json.dumps(data)) == data


class TestErrors:
    def test_hierarchy(self):
        assert issubclass(FileReadError, ReloadGuardError)
        assert issubclass(ParseError, ReloadGuardError)
        assert issubclass(NotDynamicallyImportedError, ReloadGuardError)

    def test_file_read_error(self):
        error = FileReadError("/p/app.js", "file not found")

        assert error.filepath == "/p/app.js"
        assert error.reason == "file not found"
        assert str(error) == "Cannot read /p/app.js: file not found"

    def test_parse_error_with_line(self):
        error = ParseError("/p/app.js", "syntax error", 7)

        assert error.line_number == 7
        assert str(error) == "Cannot parse imports in /p/app.js:7: syntax error"

    def test_parse_error_without_line(self):
        error = ParseError("/p/app.rb", "no extractor for suffix .rb")

        assert error.line_number is None
        assert str(error) == "Cannot parse imports in /p/app.rb: no extractor for suffix .rb"

    def test_not_dynamically_imported_message(self):
        error = NotDynamicallyImportedError("./plugin.js", "/p/src/app.js", "src/app.js")

        assert error.specifier == "./plugin.js"
        assert error.parent_path == "/p/src/app.js"
        assert error.relative_parent == "src/app.js"
        assert str(error) == (
            'The import "./plugin.js" is not imported dynamically from src/app.js.\n'
            "You must use dynamic import to make it reloadable (HMR) with reload-guard."
        )
