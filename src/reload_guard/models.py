# Copyright (c) 2025 Henru Wang
# All rights reserved.

"""Data models for dynamic import validation.

- ImportRecord: one import statement found in a source file
- CheckerStatistics: counters reported by DynamicImportChecker
"""

from dataclasses import dataclass
from typing import Any, Dict, Optional


@dataclass(frozen=True)
class ImportRecord:
    """A single import statement extracted from source text.

    Records are transient: produced fresh by each extraction and discarded
    once the checker has scanned them.
    """

    module_specifier: Optional[str]  # Raw import target; None if computed at runtime
    is_dynamic: bool  # True for import()/import_module(), False for declarations
    line_number: int = 0  # 1-based line of the statement

    def matches(self, specifier: str) -> bool:
        """Check if this record is a dynamic import of exactly ``specifier``."""
        return self.is_dynamic and self.module_specifier == specifier


@dataclass
class CheckerStatistics:
    """Counters for DynamicImportChecker cache behavior."""

    hits: int = 0  # Checks answered from the cache
    misses: int = 0  # Checks that read and parsed the parent
    invalidations: int = 0  # invalidate_cache calls that removed a parent
    violations: int = 0  # NotDynamicallyImportedError raised (cached or fresh)
    cached_parent_count: int = 0
    cached_pair_count: int = 0

    def to_dict(self) -> Dict[str, Any]:
        """Serialize to JSON-compatible dict."""
        return {
            "hits": self.hits,
            "misses": self.misses,
            "invalidations": self.invalidations,
            "violations": self.violations,
            "cached_parent_count": self.cached_parent_count,
            "cached_pair_count": self.cached_pair_count,
        }
