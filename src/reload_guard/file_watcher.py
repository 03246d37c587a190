# Copyright (c) 2025 Henru Wang
# All rights reserved.

"""File system watcher that keeps the dynamic import cache fresh.

A cached check outcome stays authoritative until its parent file is
invalidated, so every edit to a parent must reach
DynamicImportChecker.invalidate_cache. FileWatcher watches a project tree with
watchdog and forwards modify, delete and move-from events for source files to
registered invalidation callbacks.

Filtering:
- Only suffixes with a registered import extractor are reported
- Dependency and tooling directories are always ignored
- .gitignore patterns and user-configured ignore_patterns are honored

Known Limitations:
- Callbacks run on the watchdog observer thread
- Events are reported under project_root as given (absolute, symlinks not
  resolved), matching the parent paths callers pass to the checker
"""

import fnmatch
import logging
import os
from pathlib import Path
from typing import TYPE_CHECKING, Callable, Iterable, List, Optional, Set

from watchdog.events import FileMovedEvent, FileSystemEvent, FileSystemEventHandler
from watchdog.observers import Observer

from reload_guard.config import Config

if TYPE_CHECKING:
    from watchdog.observers.api import BaseObserver

logger = logging.getLogger(__name__)

# Callback signature: (filepath: str) -> None
InvalidationCallback = Callable[[str], None]


class FileWatcher:
    """Watches a project tree and reports changed source files.

    Usage:
        checker = DynamicImportChecker(project_root)
        watcher = FileWatcher(project_root, suffixes=checker.registry.suffixes())
        watcher.register_invalidation_callback(checker.invalidate_cache)
        watcher.start()
        # ...
        watcher.stop()
    """

    ALWAYS_IGNORED = {
        ".git",
        "node_modules",
        "__pycache__",
        ".venv",
        "venv",
        ".tox",
        ".pytest_cache",
        ".mypy_cache",
        ".ruff_cache",
        "*.egg-info",
        "dist",
        "build",
        "coverage",
    }

    def __init__(
        self,
        project_root: str,
        suffixes: Iterable[str],
        gitignore_path: Optional[str] = None,
        user_ignore_patterns: Optional[Set[str]] = None,
    ):
        """Initialize FileWatcher.

        Args:
            project_root: Root directory to watch.
            suffixes: File suffixes (with leading dot) to report.
            gitignore_path: Path to .gitignore (defaults to {project_root}/.gitignore).
            user_ignore_patterns: Additional glob patterns to ignore.
        """
        self.project_root = Path(os.path.abspath(project_root))
        self._resolved_root = self.project_root.resolve()
        self.suffixes = frozenset(s.lower() for s in suffixes)
        self.gitignore_path = (
            Path(gitignore_path) if gitignore_path else self.project_root / ".gitignore"
        )
        self.user_ignore_patterns = user_ignore_patterns or set()

        self._gitignore_patterns: Set[str] = self._load_gitignore()
        self._invalidation_callbacks: List[InvalidationCallback] = []

        self._observer: Optional[BaseObserver] = None
        self._event_handler = _FileEventHandler(self)

        logger.info(f"FileWatcher initialized for {self.project_root}")

    @classmethod
    def from_config(
        cls, project_root: str, suffixes: Iterable[str], config: Config
    ) -> "FileWatcher":
        """Create a watcher using ignore_patterns from config."""
        return cls(
            project_root,
            suffixes,
            user_ignore_patterns=set(config.ignore_patterns),
        )

    def _load_gitignore(self) -> Set[str]:
        """Load .gitignore patterns, skipping blanks, comments and negations."""
        patterns: Set[str] = set()

        if not self.gitignore_path.exists():
            logger.debug(f"No .gitignore found at {self.gitignore_path}")
            return patterns

        try:
            with open(self.gitignore_path, encoding="utf-8") as f:
                for line in f:
                    line = line.strip()
                    if not line or line.startswith(("#", "!")):
                        continue
                    # "build/" should match the directory component "build"
                    patterns.add(line.rstrip("/") or line)
        except (OSError, UnicodeDecodeError) as e:
            logger.warning(f"Failed to read .gitignore: {e}")

        logger.debug(f"Loaded {len(patterns)} patterns from .gitignore")
        return patterns

    def should_ignore(self, file_path: str) -> bool:
        """Check if a path is excluded from reporting.

        Args:
            file_path: Absolute or relative file path.

        Returns:
            True if the path matches an ignore rule.
        """
        path = Path(file_path)
        rel_path = path
        # Paths may arrive in either the symlinked or the resolved form
        for root in (self.project_root, self._resolved_root):
            try:
                rel_path = path.relative_to(root)
                break
            except ValueError:
                continue
        rel_path_str = rel_path.as_posix()
        directories = rel_path.parts[:-1]

        for pattern in self.ALWAYS_IGNORED:
            if any(fnmatch.fnmatch(part, pattern) for part in directories):
                return True

        for pattern in self._gitignore_patterns | self.user_ignore_patterns:
            if fnmatch.fnmatch(rel_path_str, pattern) or fnmatch.fnmatch(path.name, pattern):
                return True
            if any(fnmatch.fnmatch(part, pattern) for part in directories):
                return True

        return False

    def is_supported_file(self, file_path: str) -> bool:
        """Check if the file's suffix is one being watched."""
        return Path(file_path).suffix.lower() in self.suffixes

    def register_invalidation_callback(self, callback: InvalidationCallback) -> None:
        """Register a callback invoked with the path of each changed file.

        Callbacks run synchronously on the watcher thread and should return
        quickly.

        Example:
            watcher.register_invalidation_callback(checker.invalidate_cache)
        """
        if callback not in self._invalidation_callbacks:
            self._invalidation_callbacks.append(callback)
            logger.debug(f"Registered invalidation callback: {callback}")

    def unregister_invalidation_callback(self, callback: InvalidationCallback) -> None:
        """Unregister a previously registered invalidation callback."""
        if callback in self._invalidation_callbacks:
            self._invalidation_callbacks.remove(callback)
            logger.debug(f"Unregistered invalidation callback: {callback}")

    def notify(self, file_path: str) -> None:
        """Report a changed file to every registered callback."""
        for callback in self._invalidation_callbacks:
            try:
                callback(file_path)
            except Exception as e:
                # One failing callback must not starve the others
                logger.error(f"Invalidation callback failed for {file_path}: {e}")

    def start(self) -> None:
        """Start watching the project tree.

        Raises:
            RuntimeError: If the watcher is already running.
        """
        if self.is_running():
            raise RuntimeError("FileWatcher is already running")

        self._observer = Observer()
        self._observer.schedule(  # type: ignore  # watchdog types vary by version
            self._event_handler, str(self.project_root), recursive=True
        )
        self._observer.start()  # type: ignore  # watchdog types vary by version

        logger.info(f"FileWatcher started, monitoring {self.project_root}")

    def stop(self) -> None:
        """Stop watching; blocks until the observer thread exits (5s timeout)."""
        if self.is_running():
            assert self._observer is not None
            self._observer.stop()  # type: ignore  # watchdog types vary by version
            self._observer.join(timeout=5.0)
            logger.info("FileWatcher stopped")

    def is_running(self) -> bool:
        return self._observer is not None and self._observer.is_alive()


class _FileEventHandler(FileSystemEventHandler):
    """Internal watchdog handler; filters events and delegates to FileWatcher."""

    def __init__(self, watcher: FileWatcher):
        super().__init__()
        self.watcher = watcher

    def _report(self, file_path: str, event_type: str) -> None:
        if self.watcher.should_ignore(file_path) or not self.watcher.is_supported_file(file_path):
            return
        logger.debug(f"Event: {event_type} - {file_path}")
        self.watcher.notify(file_path)

    def on_modified(self, event: FileSystemEvent) -> None:
        if not event.is_directory:
            self._report(str(event.src_path), event.event_type)

    def on_deleted(self, event: FileSystemEvent) -> None:
        if not event.is_directory:
            self._report(str(event.src_path), event.event_type)

    def on_moved(self, event: FileSystemEvent) -> None:
        """Old path is gone; a file moved onto an existing path replaced it."""
        if event.is_directory or not isinstance(event, FileMovedEvent):
            return
        self._report(str(event.src_path), "moved_from")
        self._report(str(event.dest_path), "moved_to")
