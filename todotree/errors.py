"""Exception types raised by the todotree core.

Every error derives from `TodoTreeError` so callers can catch the whole family. Disk
failures are not wrapped: reading or writing the tree file or a note blob lets the builtin
`OSError` propagate, and the in-memory tree stays untouched.
"""

from __future__ import annotations


class TodoTreeError(Exception):
    pass


class DependencyConflict(TodoTreeError):
    """A todo cannot own a note and a nested list at the same time."""


class NoNote(TodoTreeError):
    pass


class NoDependency(TodoTreeError):
    pass


class ParseError(TodoTreeError, ValueError):
    def __init__(self, message: str, *, line: int | None = None) -> None:
        self.line = line
        if line is not None:
            message = f"line {line}: {message}"
        super().__init__(message)
