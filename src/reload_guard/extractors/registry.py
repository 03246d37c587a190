# Copyright (c) 2025 Henru Wang
# All rights reserved.

"""Registry mapping file suffixes to import extractor plugins."""

import logging
from pathlib import Path
from typing import Dict, Iterable, List, Optional

from ..errors import ParseError
from .base import ImportExtractor
from .ecmascript_extractor import EcmaScriptImportExtractor
from .python_extractor import PythonImportExtractor

logger = logging.getLogger(__name__)


class ExtractorRegistry:
    """Registry of import extractors keyed by file suffix.

    Suffix lookup is case-insensitive. Registering an extractor for a suffix
    that already has one replaces the previous extractor.

    Thread Safety:
    - NOT thread-safe for registration: register all extractors during
      initialization, before checks start
    - Lookups are read-only and safe from any thread
    """

    def __init__(self) -> None:
        """Initialize empty extractor registry."""
        self._by_suffix: Dict[str, ImportExtractor] = {}

    @classmethod
    def default(
        cls, dynamic_import_functions: Optional[Iterable[str]] = None
    ) -> "ExtractorRegistry":
        """Build a registry with the Python and ECMAScript extractors.

        Args:
            dynamic_import_functions: Extra Python loader names, passed to
                PythonImportExtractor.
        """
        registry = cls()
        registry.register(PythonImportExtractor(dynamic_import_functions))
        registry.register(EcmaScriptImportExtractor())
        return registry

    def register(self, extractor: ImportExtractor) -> None:
        """Register an extractor for every suffix it declares.

        Raises:
            TypeError: If extractor is not an ImportExtractor instance.
        """
        if not isinstance(extractor, ImportExtractor):
            raise TypeError(f"Extractor must be an ImportExtractor instance, got {type(extractor)}")

        for suffix in extractor.suffixes():
            previous = self._by_suffix.get(suffix.lower())
            if previous is not None and previous is not extractor:
                logger.debug(f"Replacing extractor '{previous.name()}' for {suffix}")
            self._by_suffix[suffix.lower()] = extractor

        logger.debug(
            f"Registered extractor '{extractor.name()}' for {sorted(extractor.suffixes())}"
        )

    def get(self, filepath: str) -> Optional[ImportExtractor]:
        """Return the extractor for a file path, or None if unsupported."""
        return self._by_suffix.get(Path(filepath).suffix.lower())

    def get_for(self, filepath: str) -> ImportExtractor:
        """Return the extractor for a file path.

        Raises:
            ParseError: If no extractor handles the file's suffix.
        """
        extractor = self.get(filepath)
        if extractor is None:
            suffix = Path(filepath).suffix or "<none>"
            raise ParseError(filepath, f"no extractor for suffix {suffix}")
        return extractor

    def supports(self, filepath: str) -> bool:
        """Check if some extractor handles the file's suffix."""
        return self.get(filepath) is not None

    def suffixes(self) -> List[str]:
        """Return all registered suffixes, sorted."""
        return sorted(self._by_suffix)

    def clear(self) -> None:
        """Remove all registered extractors."""
        self._by_suffix.clear()
