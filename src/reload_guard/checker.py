# Copyright (c) 2025 Henru Wang
# All rights reserved.

"""Dynamic import validation with per-file result caching.

A module can only be hot-reloaded if its parent reaches it through a dynamic
import (``import('./plugin.js')``, ``importlib.import_module("app.plugin")``);
a static import binds it for the lifetime of the process. DynamicImportChecker
verifies that invariant for a (parent file, specifier) pair and remembers the
answer so the parent is read and parsed at most once until it changes.

Cache Semantics:
- Nested dict: parent_path -> {specifier -> bool}
- Positive and negative outcomes are both cached
- A cached outcome is authoritative until invalidate_cache(parent_path);
  nothing expires on its own
- Read and parse failures leave no cache entry

Thread Safety:
- _lock protects _cache and _stats
- The lock is never held during file reads or parsing; two concurrent misses
  on the same pair both parse and the last write wins (the result is the same)
- A miss records the parent's generation before reading and drops its
  result if invalidate_cache or clear ran in the meantime
- invalidate_cache is safe to call from the file watcher thread
"""

import asyncio
import logging
import os
from pathlib import Path
from threading import Lock
from typing import Dict, Optional, Tuple, Union

from reload_guard.config import Config
from reload_guard.errors import FileReadError, NotDynamicallyImportedError, ParseError
from reload_guard.extractors.registry import ExtractorRegistry
from reload_guard.models import CheckerStatistics
from reload_guard.source_reader import DEFAULT_MAX_FILE_SIZE_KB, ReadSource, SourceReader

logger = logging.getLogger(__name__)

PathLike = Union[str, "os.PathLike[str]"]


class DynamicImportChecker:
    """Checks that reloadable modules are imported dynamically by their parent.

    Usage:
        checker = DynamicImportChecker(project_root="/path/to/project")
        checker.ensure_dynamic("/path/to/project/src/app.js", "./plugin.js")
        watcher.register_invalidation_callback(checker.invalidate_cache)
    """

    def __init__(
        self,
        project_root: PathLike,
        registry: Optional[ExtractorRegistry] = None,
        reader: Optional[ReadSource] = None,
        config: Optional[Config] = None,
    ) -> None:
        """Initialize the checker with an empty cache.

        Args:
            project_root: Base path used to render relative paths in error
                messages. Never part of a cache key.
            registry: Extractors by file suffix. Defaults to
                ExtractorRegistry.default() with config's extra loader names.
            reader: Callable returning a file's text or raising FileReadError.
                Defaults to a SourceReader sized from config.
            config: Optional configuration supplying defaults for the above.
        """
        self.project_root = os.path.abspath(os.fspath(project_root))

        if registry is None:
            registry = ExtractorRegistry.default(
                config.dynamic_import_functions if config is not None else None
            )
        if reader is None:
            reader = SourceReader(
                config.max_file_size_kb if config is not None else DEFAULT_MAX_FILE_SIZE_KB
            )

        self._registry = registry
        self._reader = reader

        self._cache: Dict[str, Dict[str, bool]] = {}
        # Bumped by invalidate_cache; clear() bumps _epoch for every parent
        self._generations: Dict[str, int] = {}
        self._epoch = 0
        self._stats = CheckerStatistics()
        self._lock = Lock()

        logger.debug(
            f"DynamicImportChecker initialized for {self.project_root} "
            f"(suffixes: {', '.join(registry.suffixes())})"
        )

    @classmethod
    def from_config(
        cls, project_root: PathLike, config_path: Optional[Path] = None
    ) -> "DynamicImportChecker":
        """Create a checker configured from .reload_guard.yml.

        Args:
            project_root: Project root directory.
            config_path: Configuration file. Defaults to
                {project_root}/.reload_guard.yml.
        """
        if config_path is None:
            config_path = Path(os.fspath(project_root)) / ".reload_guard.yml"
        return cls(project_root, config=Config(config_path))

    @property
    def registry(self) -> ExtractorRegistry:
        return self._registry

    def ensure_dynamic(self, parent_path: PathLike, specifier: str) -> bool:
        """Ensure ``specifier`` is imported dynamically from ``parent_path``.

        Args:
            parent_path: Absolute path of the importing file.
            specifier: Module specifier exactly as written in the import
                (compared by string equality, no normalization).

        Returns:
            True when some dynamic import of ``specifier`` exists in the parent.

        Raises:
            NotDynamicallyImportedError: If the parent only imports the
                specifier statically or not at all. Cached before raising.
            FileReadError: If the parent cannot be read. Nothing is cached.
            ParseError: If the parent cannot be parsed or its suffix has no
                extractor. Nothing is cached.
        """
        parent = os.fspath(parent_path)

        with self._lock:
            cached = self._cache.get(parent, {}).get(specifier)
            generation = self._generation(parent)
            if cached is not None:
                self._stats.hits += 1
                if not cached:
                    self._stats.violations += 1

        if cached is not None:
            logger.debug(f"Cache hit: {specifier} from {parent} -> {cached}")
            if not cached:
                raise self._violation(parent, specifier)
            return True

        try:
            extractor = self._registry.get_for(parent)
            source = self._reader(parent)
            records = extractor.extract(source, parent)
        except (FileReadError, ParseError) as e:
            logger.warning(f"⚠️ Cannot check imports of {parent}: {e}")
            raise

        is_dynamic = any(record.matches(specifier) for record in records)

        with self._lock:
            stale = self._generation(parent) != generation
            if not stale:
                self._cache.setdefault(parent, {})[specifier] = is_dynamic
            self._stats.misses += 1
            if not is_dynamic:
                self._stats.violations += 1

        logger.debug(
            f"Cache miss: {specifier} from {parent} -> {is_dynamic} "
            f"({len(records)} imports scanned by {extractor.name()})"
        )
        if stale:
            logger.debug(f"{parent} was invalidated during the check, result not cached")

        if not is_dynamic:
            error = self._violation(parent, specifier)
            logger.warning(f"⚠️ {error}")
            raise error

        return True

    async def ensure_dynamic_async(self, parent_path: PathLike, specifier: str) -> bool:
        """Awaitable form of ensure_dynamic.

        Cached pairs are answered inline; a cache miss reads and parses the
        parent in a worker thread so the event loop is not blocked.
        """
        if self.is_cached(parent_path, specifier):
            return self.ensure_dynamic(parent_path, specifier)
        return await asyncio.to_thread(self.ensure_dynamic, parent_path, specifier)

    def _generation(self, parent: str) -> Tuple[int, int]:
        # Caller holds _lock
        return (self._epoch, self._generations.get(parent, 0))

    def _violation(self, parent: str, specifier: str) -> NotDynamicallyImportedError:
        return NotDynamicallyImportedError(specifier, parent, self.relative_path(parent))

    def relative_path(self, filepath: str) -> str:
        """Render a path relative to the project root for messages."""
        try:
            return os.path.relpath(os.path.abspath(filepath), self.project_root)
        except ValueError:
            # Windows: path on a different drive than the project root
            return filepath

    def invalidate_cache(self, parent_path: PathLike) -> None:
        """Drop every cached outcome for a parent file.

        No-op if the parent has no cached entries. Entries of other parents
        are untouched.

        Args:
            parent_path: Parent file path, exactly as passed to ensure_dynamic.
        """
        parent = os.fspath(parent_path)
        with self._lock:
            removed = self._cache.pop(parent, None)
            self._generations[parent] = self._generations.get(parent, 0) + 1
            if removed is not None:
                self._stats.invalidations += 1

        if removed is not None:
            logger.debug(f"Invalidated {len(removed)} cached checks for {parent}")

    def is_cached(self, parent_path: PathLike, specifier: str) -> bool:
        """Check if an outcome is cached for a (parent, specifier) pair."""
        with self._lock:
            return specifier in self._cache.get(os.fspath(parent_path), {})

    def clear(self) -> None:
        """Drop every cached outcome."""
        with self._lock:
            self._cache.clear()
            self._generations.clear()
            self._epoch += 1

        logger.debug("Dynamic import cache cleared")

    def get_statistics(self) -> CheckerStatistics:
        """Get cache statistics.

        Returns:
            A copy of the current counters.
        """
        with self._lock:
            return CheckerStatistics(
                hits=self._stats.hits,
                misses=self._stats.misses,
                invalidations=self._stats.invalidations,
                violations=self._stats.violations,
                cached_parent_count=len(self._cache),
                cached_pair_count=sum(len(entries) for entries in self._cache.values()),
            )
