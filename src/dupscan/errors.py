from pathlib import Path


class DupscanError(Exception):
    """Base class for errors raised while scanning for duplicates."""


class TraversalError(DupscanError):
    """The root directory or one of its entries could not be listed.

    A scan without a complete file list is meaningless, so this always aborts the run.
    """

    def __init__(self, path: Path, message: str):
        super().__init__(f"{message}: {path}")
        self.path = path


class FileAccessError(DupscanError):
    """A single file could not be read for hashing or stat-ed for sizing.

    The underlying OSError is chained as __cause__.

    Attributes:
        path: The file that failed
        operation: 'hash' or 'stat'
    """

    def __init__(self, path: Path, operation: str, reason: str):
        super().__init__(f"Cannot {operation} {path}: {reason}")
        self.path = path
        self.operation = operation
        self.reason = reason


class ReportWriteError(DupscanError):
    """The report destination could not be created or written."""

    def __init__(self, path: Path, reason: str):
        super().__init__(f"Cannot write report {path}: {reason}")
        self.path = path
