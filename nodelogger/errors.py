"""
NodeLogger - nodelogger/errors.py
Exception taxonomy for node-map logging and persistence.

All of these are recovered at the SessionController boundary. None of them
is allowed to escape into the host loop.
"""

from __future__ import annotations

from pathlib import Path


class NodeLoggerError(Exception):
    """Base class for every NodeLogger failure."""


class NodeMapNotFound(NodeLoggerError):
    """Raised when a node-map file to load does not exist."""

    def __init__(self, path: Path):
        super().__init__(f"File not found: {path}")
        self.path = path


class NodeMapIOError(NodeLoggerError):
    """Raised when a node-map file cannot be read, written or created."""

    def __init__(self, path: Path, reason: str):
        super().__init__(f"{path}: {reason}")
        self.path = path
        self.reason = reason


class MalformedLine(NodeLoggerError):
    """Raised for a single node-map line that does not parse to a cell."""

    def __init__(self, line: str):
        super().__init__(f"Malformed node line: {line!r}")
        self.line = line


class NoHistory(NodeLoggerError):
    """Raised by undo when there is nothing left to undo."""
