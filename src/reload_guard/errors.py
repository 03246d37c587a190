# Copyright (c) 2025 Henru Wang
# All rights reserved.

"""Exception taxonomy for dynamic import validation.

- FileReadError: parent source file missing or unreadable
- ParseError: parent source could not be analyzed for imports
- NotDynamicallyImportedError: specifier is not reached through a dynamic import

None of these are recovered inside the package; callers decide whether to
report a configuration error or treat the file as unusable.
"""

from typing import Optional


class ReloadGuardError(Exception):
    """Base class for all reload_guard failures."""

    pass


class FileReadError(ReloadGuardError):
    """Raised when a source file cannot be read."""

    def __init__(self, filepath: str, reason: str):
        self.filepath = filepath
        self.reason = reason
        super().__init__(f"Cannot read {filepath}: {reason}")


class ParseError(ReloadGuardError):
    """Raised when import syntax in a source file cannot be analyzed."""

    def __init__(self, filepath: str, reason: str, line_number: Optional[int] = None):
        self.filepath = filepath
        self.reason = reason
        self.line_number = line_number
        location = f"{filepath}:{line_number}" if line_number else filepath
        super().__init__(f"Cannot parse imports in {location}: {reason}")


class NotDynamicallyImportedError(ReloadGuardError):
    """Raised when a reloadable module is not imported dynamically by its parent.

    Attributes:
        specifier: Module specifier exactly as the caller passed it.
        parent_path: Path of the parent file as the caller passed it.
        relative_parent: parent_path rendered relative to the project root.
    """

    def __init__(self, specifier: str, parent_path: str, relative_parent: str):
        self.specifier = specifier
        self.parent_path = parent_path
        self.relative_parent = relative_parent
        super().__init__(
            f'The import "{specifier}" is not imported dynamically from {relative_parent}.\n'
            "You must use dynamic import to make it reloadable (HMR) with reload-guard."
        )
