"""
JUnit XML report parser.

Reads a JUnit-style XML report and groups every failing or erroring test case
by its declaring class. Attribute values are taken leniently: blank ``type``,
``message`` and ``time`` values fall back to defaults instead of failing the
whole report.

Reports are parsed without namespace processing: element names are matched
exactly as written, so a default ``xmlns`` on the root does not hide test
cases and undeclared attribute prefixes are accepted.
"""

import logging
import math
import os
import re
import threading
from concurrent.futures import ThreadPoolExecutor
from pathlib import Path
from typing import Iterable, Optional
from xml.dom.minidom import Element, Node

from defusedxml import expatbuilder

from .exceptions import ReportAccessDeniedError, ReportNotFoundError, ReportParseError
from .models import ClassFailureGroup, FailureRecord, GroupedFailures

logger = logging.getLogger(__name__)

TESTCASE_TAG = "testcase"
FAILURE_TAG = "failure"
ERROR_TAG = "error"
SYSTEM_OUT_TAG = "system-out"

NAME_ATTR = "name"
CLASSNAME_ATTR = "classname"
TIME_ATTR = "time"
TYPE_ATTR = "type"
MESSAGE_ATTR = "message"

DEFAULT_MESSAGE = "No message provided"
DISPLAY_NAME_PATTERN = re.compile(r"display-name:\s*([^\r\n]+)")

# Plain decimal or scientific notation; float() alone would also take "1_000"
TIME_PATTERN = re.compile(r"^[+-]?(\d+\.?\d*|\.\d+)([eE][+-]?\d+)?$")

# Reports with more test cases than this are processed on a thread pool
PARALLEL_THRESHOLD = 1000

_TEXT_NODE_TYPES = (Node.TEXT_NODE, Node.CDATA_SECTION_NODE)


def parse_time(value: Optional[str]) -> float:
    """Parse a ``time`` attribute value in seconds.

    Blank, non-numeric and non-finite values (``NaN``, ``Infinity``) all
    yield ``0.0``. Never raises.
    """
    if value is None or not value.strip():
        return 0.0
    if not TIME_PATTERN.match(value.strip()):
        return 0.0
    parsed = float(value)
    return parsed if math.isfinite(parsed) else 0.0


def get_attribute_or_default(element: Element, name: str, default: str) -> str:
    """Return the attribute value, or ``default`` if it is missing or blank."""
    value = element.getAttribute(name)
    return default if not value.strip() else value


def _text_content(node: Node) -> str:
    parts = []
    for child in node.childNodes:
        if child.nodeType in _TEXT_NODE_TYPES:
            parts.append(child.data)
        elif child.nodeType == Node.ELEMENT_NODE:
            parts.append(_text_content(child))
    return "".join(parts)


def get_text_content_trimmed(element: Element) -> str:
    """Return the text of the element and all its descendants, stripped.

    CDATA sections count as text; comments and processing instructions do not.
    """
    return _text_content(element).strip()


def extract_display_name(testcase: Element) -> str:
    """Find the ``display-name:`` line printed to a test case's system-out.

    Every ``system-out`` block below the test case is searched in document
    order and the first match wins. Returns an empty string when no block
    carries a display name.
    """
    for system_out in testcase.getElementsByTagName(SYSTEM_OUT_TAG):
        match = DISPLAY_NAME_PATTERN.search(get_text_content_trimmed(system_out))
        if match:
            return match.group(1).strip()
    return ""


def create_failure(testcase: Element, failure_element: Element, default_type: str) -> FailureRecord:
    """Build a FailureRecord from a test case and one of its failure/error elements."""
    return FailureRecord(
        test_name=testcase.getAttribute(NAME_ATTR),
        display_name=extract_display_name(testcase),
        class_name=testcase.getAttribute(CLASSNAME_ATTR),
        failure_type=get_attribute_or_default(failure_element, TYPE_ATTR, default_type),
        failure_message=get_attribute_or_default(failure_element, MESSAGE_ATTR, DEFAULT_MESSAGE),
        stack_trace=get_text_content_trimmed(failure_element),
        time=parse_time(testcase.getAttribute(TIME_ATTR)),
    )


def validate_file(path) -> None:
    """Check that ``path`` is an existing, readable regular file.

    Raises:
        ReportNotFoundError: the path does not exist or is not a file
        ReportAccessDeniedError: the file cannot be read
    """
    path = Path(path)
    try:
        if not path.exists():
            raise ReportNotFoundError(f"File does not exist: {path}", path=path)
        if not path.is_file():
            raise ReportNotFoundError(f"Not a regular file: {path}", path=path)
        if not os.access(path, os.R_OK):
            raise ReportAccessDeniedError(f"File is not readable: {path}", path=path)
    except PermissionError as e:
        raise ReportAccessDeniedError(f"Cannot access file: {path}", path=path, cause=e) from e


class _FailureAccumulator:
    """Collects failures into per-class groups from any number of threads."""

    def __init__(self):
        self._groups: dict[str, ClassFailureGroup] = {}
        self._lock = threading.Lock()

    def _group_for(self, class_name: str) -> ClassFailureGroup:
        group = self._groups.get(class_name)
        if group is None:
            with self._lock:
                group = self._groups.get(class_name)
                if group is None:
                    group = ClassFailureGroup(class_name)
                    self._groups[class_name] = group
        return group

    def add(self, failure: FailureRecord) -> None:
        self._group_for(failure.class_name).add_failure(failure)

    def finalize(self) -> GroupedFailures:
        with self._lock:
            groups = dict(self._groups)
        for group in groups.values():
            group.sort_failures()
        return {name: groups[name] for name in sorted(groups)}


class JUnitParser:
    """Parses JUnit XML reports into failures grouped by test class."""

    def __init__(self, parallel_threshold: int = PARALLEL_THRESHOLD,
                 max_workers: Optional[int] = None):
        """
        Args:
            parallel_threshold: Process test cases on a thread pool when a
                report has more test cases than this
            max_workers: Thread pool size (ThreadPoolExecutor default if None)
        """
        self.parallel_threshold = parallel_threshold
        self.max_workers = max_workers

    def parse_file(self, path) -> GroupedFailures:
        """Extract the failures of a report file, grouped by class name.

        Args:
            path: Path to the JUnit XML file

        Returns:
            dict of class name -> ClassFailureGroup, in class name order

        Raises:
            ValueError: if path is None
            ReportParseError: if the file is missing, unreadable or malformed
        """
        if path is None:
            raise ValueError("XML file path cannot be None")

        path = os.fspath(path)
        validate_file(path)

        try:
            with open(path, "rb") as fh:
                document = expatbuilder.parse(fh, namespaces=False)
            return self.parse_test_cases(list(document.getElementsByTagName(TESTCASE_TAG)))
        except PermissionError as e:
            raise ReportAccessDeniedError(f"Cannot access file: {path}", path=path, cause=e) from e
        except Exception as e:
            raise ReportParseError(f"Failed to parse XML file: {path}", path=path, cause=e) from e

    def parse_test_cases(self, testcases: list[Element]) -> GroupedFailures:
        """Group the failures and errors of the given test case elements."""
        accumulator = _FailureAccumulator()

        if len(testcases) > self.parallel_threshold:
            logger.debug(f"Processing {len(testcases)} test cases in parallel")
            with ThreadPoolExecutor(max_workers=self.max_workers) as executor:
                # consume the results so worker exceptions propagate
                list(executor.map(lambda tc: _process_test_case(tc, accumulator), testcases))
        else:
            logger.debug(f"Processing {len(testcases)} test cases")
            for testcase in testcases:
                _process_test_case(testcase, accumulator)

        return accumulator.finalize()


def _process_failure_elements(elements: Iterable[Element], testcase: Element,
                              accumulator: _FailureAccumulator, default_type: str) -> None:
    for element in elements:
        accumulator.add(create_failure(testcase, element, default_type))


def _process_test_case(testcase: Element, accumulator: _FailureAccumulator) -> None:
    _process_failure_elements(testcase.getElementsByTagName(FAILURE_TAG), testcase, accumulator, FAILURE_TAG)
    # errors are reported as failures too
    _process_failure_elements(testcase.getElementsByTagName(ERROR_TAG), testcase, accumulator, ERROR_TAG)


_default_parser = JUnitParser()


def extract_grouped_failures(path, parallel_threshold: int = PARALLEL_THRESHOLD,
                             max_workers: Optional[int] = None) -> GroupedFailures:
    """Extract the failures of a report file, grouped by class name."""
    if parallel_threshold == PARALLEL_THRESHOLD and max_workers is None:
        return _default_parser.parse_file(path)
    return JUnitParser(parallel_threshold, max_workers).parse_file(path)
