# Copyright (c) 2025 Henru Wang
# All rights reserved.

"""Base interface for import extractor plugins.

An extractor turns the source text of one file into the import statements it
contains, tagging each as static (declaration form) or dynamic (expression
form). Extractors are language-specific and selected by file suffix through
ExtractorRegistry, so the checker never needs to know which dialect it is
looking at.
"""

from abc import ABC, abstractmethod
from typing import FrozenSet, List

from reload_guard.models import ImportRecord


class ImportExtractor(ABC):
    """Abstract base class for import extractor plugins.

    Contract:
    - Static analysis only: source is never executed
    - Source with no imports returns an empty list
    - Unparseable source raises ParseError
    - Extractors hold no per-file state between calls
    """

    @abstractmethod
    def extract(self, source: str, filepath: str) -> List[ImportRecord]:
        """Extract import records from source text.

        Args:
            source: Full source text of one file.
            filepath: Path of the file, used only in error messages.

        Returns:
            Import records in source order. Empty list if there are no imports.

        Raises:
            ParseError: If the source cannot be parsed.
        """
        pass

    @abstractmethod
    def suffixes(self) -> FrozenSet[str]:
        """Return the file suffixes (with leading dot) this extractor handles."""
        pass

    @abstractmethod
    def name(self) -> str:
        """Return extractor name for logging and debugging."""
        pass
