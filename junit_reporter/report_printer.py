"""
Text rendering of grouped JUnit failures.

All functions return strings; printing is left to the caller. Group and
failure numbers shown to users are 1-based.
"""

import math
import re
from decimal import Decimal
from typing import Mapping, Optional

from .exceptions import EmptyReportError, IndexOutOfRangeError
from .models import ClassFailureGroup, FailureRecord

DEFAULT_INDENT = 8
HEADER_MIN_WIDTH = 50
SUMMARY_TITLE = "JUnit Failures Summary"

SELECTION_PATTERN = re.compile(r"^(\d+)(?:\.(\d+))?$")


def indent(text: Optional[str], indent_size: int = DEFAULT_INDENT) -> Optional[str]:
    """Prefix every line of ``text`` with ``indent_size`` spaces."""
    if text is None:
        return None
    if indent_size < 0:
        raise ValueError("Indent size cannot be negative")
    if indent_size == 0 or not text:
        return text
    prefix = " " * indent_size
    return "\n".join(prefix + line for line in text.splitlines())


def format_seconds(value: float) -> str:
    """Render seconds as plain decimals between 0.001 and 10^7 (``0.25``,
    ``12.0``) and as ``1.0E-5`` / ``1.2345678E7`` outside that range."""
    value = float(value)
    if value == 0 or not math.isfinite(value) or 1e-3 <= abs(value) < 1e7:
        return repr(value)
    sign, digits, exponent = Decimal(repr(value)).as_tuple()
    scientific_exponent = len(digits) + exponent - 1
    significant = "".join(map(str, digits)).rstrip("0")
    mantissa = f"{significant[0]}.{significant[1:] or '0'}"
    return f"{'-' if sign else ''}{mantissa}E{scientific_exponent}"


def format_header(title: str) -> str:
    separator = "-" * max(len(title), HEADER_MIN_WIDTH)
    return f"\n{separator}\n{title}\n{separator}\n\n"


def format_failure(failure: FailureRecord, group_index: Optional[int] = None,
                   failure_index: Optional[int] = None) -> str:
    """Render one failure without its stack trace.

    The ``[group.failure]`` prefix is added only when both indices are given.
    """
    prefix = ""
    if group_index is not None and failure_index is not None:
        prefix = f"[{group_index}.{failure_index}] "
    return (f"{prefix}Test: {failure.test_name}\n"
            f"    - Name: {failure.display_name}\n"
            f"    - Type: {failure.failure_type}\n"
            f"    - Message:\n"
            f"{indent(failure.failure_message.strip())}\n"
            f"    - Time: {format_seconds(failure.time)}s")


def format_stack_trace(failure: FailureRecord) -> str:
    if not failure.stack_trace:
        return ""
    return f"    - Trace:\n{indent(failure.stack_trace)}\n"


def format_failure_with_stack_trace(failure: FailureRecord, group_index: int,
                                    failure_index: int) -> str:
    """Render one failure under its class header, stack trace included.

    Indices are 0-based.
    """
    group_number = group_index + 1
    return (format_header(f"[{group_number}] {failure.class_name}")
            + format_failure(failure, group_number, failure_index + 1) + "\n"
            + format_stack_trace(failure))


def format_failures(group: ClassFailureGroup, group_index: int) -> str:
    """Render every failure of a group (0-based ``group_index``)."""
    group_number = group_index + 1
    parts = [format_header(f"[{group_number}] {group.class_name}")]
    for number, failure in enumerate(group.failures, start=1):
        parts.append(format_failure(failure, group_number, number) + "\n\n")
    return "".join(parts)


def _summary_test_name(failure: FailureRecord) -> str:
    display_name = failure.display_name
    if not display_name.strip() or display_name == failure.test_name:
        return failure.test_name
    return f"{failure.test_name} ({display_name})"


def format_summary(grouped: Mapping[str, ClassFailureGroup]) -> str:
    """Render one line per class and one line per failing test."""
    lines = []
    total_failures = 0
    for group_number, group in enumerate(grouped.values(), start=1):
        total_failures += group.total_failures
        lines.append(f"[{group_number}] {group.class_name} "
                     f"({group.total_failures} failures, {group.total_time:.3f}s)\n")
        for failure_number, failure in enumerate(group.failures, start=1):
            lines.append(f"  - [{group_number}.{failure_number}] {_summary_test_name(failure)}\n")

    return format_header(SUMMARY_TITLE) + "".join(lines) + f"\nTotal Failures: {total_failures}\n"


def get_failures_by_group_index(grouped: Optional[Mapping[str, ClassFailureGroup]],
                                index: int) -> ClassFailureGroup:
    """Return the group at the 0-based ``index``.

    Raises:
        EmptyReportError: if there are no groups to select from
        IndexOutOfRangeError: if the index does not exist
    """
    if not grouped:
        raise EmptyReportError("The grouped failures cannot be None or empty")
    if index < 0 or index >= len(grouped):
        raise IndexOutOfRangeError("The group index is out of bounds", index=index)
    return list(grouped.values())[index]


def parse_selection(selection: str) -> tuple[int, Optional[int]]:
    """Turn ``"g"`` or ``"g.f"`` (1-based) into 0-based indices."""
    match = SELECTION_PATTERN.match(selection or "")
    if not match:
        raise ValueError(f"Invalid selection: {selection!r} (expected N or N.M)")
    group_index = int(match.group(1)) - 1
    failure_index = int(match.group(2)) - 1 if match.group(2) is not None else None
    return group_index, failure_index


def format_details(selection: str, grouped: Mapping[str, ClassFailureGroup]) -> str:
    """Render a group (``"2"``) or a single failure (``"2.1"``) in detail."""
    group_index, failure_index = parse_selection(selection)
    group = get_failures_by_group_index(grouped, group_index)

    if failure_index is None:
        return format_failures(group, group_index)

    failures = group.failures
    if failure_index < 0 or failure_index >= len(failures):
        raise IndexOutOfRangeError("The failure index is out of bounds", index=failure_index)
    return format_failure_with_stack_trace(failures[failure_index], group_index, failure_index)


def format_all(grouped: Mapping[str, ClassFailureGroup]) -> str:
    """Render every group in detail."""
    return "".join(format_failures(group, index) for index, group in enumerate(grouped.values()))
