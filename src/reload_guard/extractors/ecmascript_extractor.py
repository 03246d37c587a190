# Copyright (c) 2025 Henru Wang
# All rights reserved.

"""Import extractor for JavaScript and TypeScript modules.

Parses with tree-sitter (JavaScript, TypeScript and TSX grammars) and walks
the concrete syntax tree for:

Static (declaration form):
- import x from './a.js', import { y } from './a.js', import './a.js'
- export { y } from './a.js', export * from './a.js'
- import x = require('./a')  (TypeScript)

Dynamic (expression form):
- import('./a.js')
- import(flag ? './a.js' : './b.js'), import(a || './b.js'), import(a ?? './b.js')
- import(`./a.js`)  (template literal without substitutions)

Any other argument is computed at runtime and yields a dynamic record with
module_specifier=None.
"""

import logging
from pathlib import Path
from typing import Dict, FrozenSet, List, Optional

import tree_sitter_javascript
import tree_sitter_typescript
from tree_sitter import Language, Node, Parser

from reload_guard.errors import ParseError
from reload_guard.extractors.base import ImportExtractor
from reload_guard.models import ImportRecord

logger = logging.getLogger(__name__)

# Grammar per dialect; parsers are created lazily and reused
_GRAMMARS = {
    "javascript": tree_sitter_javascript.language,
    "typescript": tree_sitter_typescript.language_typescript,
    "tsx": tree_sitter_typescript.language_tsx,
}

# Binary operators whose operands may each be the module actually loaded
_FALLBACK_OPERATORS = frozenset(["||", "??"])


class EcmaScriptImportExtractor(ImportExtractor):
    """tree-sitter based extractor for ECMAScript module syntax."""

    DIALECT_BY_SUFFIX = {
        ".js": "javascript",
        ".mjs": "javascript",
        ".cjs": "javascript",
        ".jsx": "javascript",
        ".ts": "typescript",
        ".mts": "typescript",
        ".cts": "typescript",
        ".tsx": "tsx",
    }

    def __init__(self) -> None:
        self._parsers: Dict[str, Parser] = {}

    def _get_parser(self, dialect: str) -> Parser:
        """Get or create the tree-sitter parser for a dialect."""
        parser = self._parsers.get(dialect)
        if parser is None:
            parser = Parser(Language(_GRAMMARS[dialect]()))
            self._parsers[dialect] = parser
        return parser

    def dialect_for(self, filepath: str) -> str:
        """Return the grammar dialect for a file path (javascript by default)."""
        return self.DIALECT_BY_SUFFIX.get(Path(filepath).suffix.lower(), "javascript")

    def extract(self, source: str, filepath: str) -> List[ImportRecord]:
        tree = self._get_parser(self.dialect_for(filepath)).parse(source.encode("utf-8"))
        root = tree.root_node
        if root.has_error:
            error_node = _first_error(root)
            line = error_node.start_point[0] + 1 if error_node is not None else None
            raise ParseError(filepath, "syntax error", line)

        records: List[ImportRecord] = []
        stack: List[Node] = [root]
        while stack:
            node = stack.pop()
            if node.type in ("import_statement", "export_statement"):
                specifier = self._declaration_source(node)
                if specifier is not None:
                    records.append(ImportRecord(specifier, False, _line(node)))
            elif node.type == "call_expression" and self._is_dynamic_import(node):
                for specifier in self._literal_values(self._first_argument(node)):
                    records.append(ImportRecord(specifier, True, _line(node)))
            # Push children reversed so traversal follows source order
            stack.extend(reversed(node.children))

        logger.debug(f"Extracted {len(records)} imports from {filepath}")
        return records

    def _declaration_source(self, node: Node) -> Optional[str]:
        source = node.child_by_field_name("source")
        if source is None:
            # TypeScript: import x = require('./a')
            for child in node.named_children:
                if child.type == "import_require_clause":
                    source = child.child_by_field_name("source")
                    break
        if source is None:
            # export const x = 1 and friends
            return None
        return _string_value(source)

    @staticmethod
    def _is_dynamic_import(node: Node) -> bool:
        function = node.child_by_field_name("function")
        return function is not None and function.type == "import"

    @staticmethod
    def _first_argument(node: Node) -> Optional[Node]:
        arguments = node.child_by_field_name("arguments")
        if arguments is None:
            return None
        for child in arguments.named_children:
            if child.type != "comment":
                return child
        return None

    def _literal_values(self, node: Optional[Node]) -> List[Optional[str]]:
        """Resolve an import() argument to its possible literal values."""
        if node is None:
            return [None]
        if node.type in ("string", "template_string"):
            return [_string_value(node)]
        if node.type == "parenthesized_expression" and node.named_child_count == 1:
            return self._literal_values(node.named_children[0])
        if node.type == "ternary_expression":
            return self._literal_values(
                node.child_by_field_name("consequence")
            ) + self._literal_values(node.child_by_field_name("alternative"))
        if node.type == "binary_expression":
            operator = node.child_by_field_name("operator")
            if operator is not None and operator.type in _FALLBACK_OPERATORS:
                return self._literal_values(
                    node.child_by_field_name("left")
                ) + self._literal_values(node.child_by_field_name("right"))
        return [None]

    def suffixes(self) -> FrozenSet[str]:
        return frozenset(self.DIALECT_BY_SUFFIX)

    def name(self) -> str:
        return "EcmaScriptImportExtractor"


def _line(node: Node) -> int:
    return node.start_point[0] + 1


def _string_value(node: Node) -> Optional[str]:
    """Return the raw text inside quotes, or None for interpolated templates."""
    if node.type == "template_string":
        if any(child.type == "template_substitution" for child in node.named_children):
            return None
    elif node.type != "string":
        return None
    text = node.text.decode("utf-8") if node.text is not None else ""
    return text[1:-1]


def _first_error(root: Node) -> Optional[Node]:
    stack = [root]
    while stack:
        node = stack.pop()
        if node.type == "ERROR" or node.is_missing:
            return node
        if node.has_error:
            stack.extend(reversed(node.children))
    return None
