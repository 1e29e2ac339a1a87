"""
Exceptions raised while loading JUnit reports and selecting failures from them.
"""

from typing import Optional


class JUnitReporterError(Exception):
    """Base class for all reporter errors."""


class ReportParseError(JUnitReporterError):
    """A report could not be read or parsed.

    Callers that only care whether a report loaded can catch this class; the
    subclasses tell a missing file apart from a permission problem.
    """

    def __init__(self, message: str, path=None, cause: Optional[BaseException] = None):
        super().__init__(message)
        self.path = str(path) if path is not None else None
        self.cause = cause


class ReportNotFoundError(ReportParseError):
    """The report path does not exist or is not a regular file."""


class ReportAccessDeniedError(ReportParseError):
    """The report exists but cannot be opened for reading."""


class ReportDownloadError(ReportParseError):
    """A remote report could not be downloaded."""


class SelectionError(JUnitReporterError):
    """A group or failure selection could not be resolved."""


class EmptyReportError(SelectionError, ValueError):
    """Selection was attempted on an empty or missing result."""


class IndexOutOfRangeError(SelectionError, IndexError):
    """A group or failure index does not exist in the result."""

    def __init__(self, message: str, index: Optional[int] = None):
        super().__init__(message)
        self.index = index
