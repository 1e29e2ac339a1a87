"""JUnit XML failure reporter: parses reports and groups failures by test class."""

from .exceptions import (
    EmptyReportError,
    IndexOutOfRangeError,
    JUnitReporterError,
    ReportAccessDeniedError,
    ReportDownloadError,
    ReportNotFoundError,
    ReportParseError,
    SelectionError,
)
from .junit_parser import JUnitParser, extract_grouped_failures, parse_time
from .models import ClassFailureGroup, FailureRecord, GroupedFailures

__version__ = "0.1.0"
