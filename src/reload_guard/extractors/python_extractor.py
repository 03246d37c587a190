# Copyright (c) 2025 Henru Wang
# All rights reserved.

"""Import extractor for Python source files.

Static (declaration form):
- import package.module
- from package import name
- from . import name, from ..pkg import name (specifier keeps its dots)

Dynamic (expression form):
- importlib.import_module("package.plugin")
- import_module(".plugin", package=__package__)
- __import__("package.plugin")
- Any extra loader names configured via dynamic_import_functions

Conditional arguments (``import_module("a" if debug else "b")``, ``x or "b"``)
produce one dynamic record per literal branch. Non-literal arguments produce a
single record with module_specifier=None.
"""

import ast
import logging
from typing import FrozenSet, Iterable, List, Optional

from reload_guard.errors import ParseError
from reload_guard.extractors.base import ImportExtractor
from reload_guard.models import ImportRecord

logger = logging.getLogger(__name__)


class PythonImportExtractor(ImportExtractor):
    """AST-based extractor for Python import statements.

    Uses the standard library ast module; the source is parsed but never
    compiled or executed.
    """

    DEFAULT_DYNAMIC_FUNCTIONS = frozenset(["import_module", "__import__"])

    SUFFIXES = frozenset([".py", ".pyi"])

    def __init__(self, dynamic_import_functions: Optional[Iterable[str]] = None) -> None:
        """Initialize the extractor.

        Args:
            dynamic_import_functions: Extra callable names treated as dynamic
                loaders. Dotted names match on their last component, so
                "plugins.load" matches both ``load(...)`` and ``plugins.load(...)``.
        """
        extra = {name.rsplit(".", 1)[-1] for name in (dynamic_import_functions or [])}
        self._dynamic_functions: FrozenSet[str] = self.DEFAULT_DYNAMIC_FUNCTIONS | extra

    def extract(self, source: str, filepath: str) -> List[ImportRecord]:
        try:
            tree = ast.parse(source, filename=filepath, mode="exec")
        except SyntaxError as e:
            raise ParseError(filepath, e.msg or "invalid syntax", e.lineno) from e
        except (ValueError, RecursionError) as e:
            # ValueError: source contains null bytes
            raise ParseError(filepath, str(e) or type(e).__name__) from e

        records: List[ImportRecord] = []
        for node in ast.walk(tree):
            if isinstance(node, ast.Import):
                for alias in node.names:
                    records.append(ImportRecord(alias.name, False, node.lineno))
            elif isinstance(node, ast.ImportFrom):
                specifier = "." * (node.level or 0) + (node.module or "")
                records.append(ImportRecord(specifier, False, node.lineno))
            elif isinstance(node, ast.Call) and self._is_dynamic_loader(node.func):
                argument = self._specifier_argument(node)
                for specifier in self._literal_values(argument):
                    records.append(ImportRecord(specifier, True, node.lineno))

        # ast.walk is breadth-first; restore source order
        records.sort(key=lambda r: r.line_number)
        logger.debug(f"Extracted {len(records)} imports from {filepath}")
        return records

    def _is_dynamic_loader(self, func: ast.expr) -> bool:
        if isinstance(func, ast.Name):
            return func.id in self._dynamic_functions
        if isinstance(func, ast.Attribute):
            return func.attr in self._dynamic_functions
        return False

    @staticmethod
    def _specifier_argument(call: ast.Call) -> Optional[ast.expr]:
        """Return the expression naming the module in a loader call."""
        if call.args and not isinstance(call.args[0], ast.Starred):
            return call.args[0]
        for keyword in call.keywords:
            if keyword.arg == "name":
                return keyword.value
        return None

    def _literal_values(self, node: Optional[ast.expr]) -> List[Optional[str]]:
        """Resolve a specifier expression to its possible literal values.

        Returns [None] for anything that is not statically known.
        """
        if isinstance(node, ast.Constant) and isinstance(node.value, str):
            return [node.value]
        if isinstance(node, ast.IfExp):
            return self._literal_values(node.body) + self._literal_values(node.orelse)
        if isinstance(node, ast.BoolOp):
            values: List[Optional[str]] = []
            for operand in node.values:
                values.extend(self._literal_values(operand))
            return values
        if isinstance(node, ast.JoinedStr) and all(
            isinstance(part, ast.Constant) for part in node.values
        ):
            # f-string without placeholders
            return ["".join(str(part.value) for part in node.values)]  # type: ignore[attr-defined]
        return [None]

    def suffixes(self) -> FrozenSet[str]:
        return self.SUFFIXES

    def name(self) -> str:
        return "PythonImportExtractor"
