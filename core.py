#!/usr/bin/env python3
"""
Core operations shared between MCP server and CLI.
Contains the logic for locating, loading and rendering JUnit reports.
"""

import json
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from junit_reporter import report_printer
from junit_reporter.config import get_default_report_file
from junit_reporter.junit_parser import extract_grouped_failures
from junit_reporter.models import GroupedFailures
from junit_reporter.report_fetcher import ReportFetcher, is_remote

logger = logging.getLogger(__name__)

EXIT_SUCCESS = 0
EXIT_FAILURE = 1

OUTPUT_FORMATS = ("text", "json")

# Global report fetcher (singleton)
_fetcher = None


def get_fetcher() -> ReportFetcher:
    """Get or create the ReportFetcher singleton."""
    global _fetcher
    if _fetcher is None:
        _fetcher = ReportFetcher()
    return _fetcher


@dataclass
class ReportResult:
    """Rendered report and the exit status it maps to."""
    status: int
    output: str
    total_failures: int = 0


def resolve_report_file(report_file: Optional[str] = None, build_dir: Optional[str] = None) -> Path:
    """
    Work out which report file to read.

    Args:
        report_file: Explicit report path or http(s) URL
        build_dir: Build directory used for the default location

    Returns:
        Local path of the report (remote reports are downloaded first)
    """
    if report_file and is_remote(report_file):
        return get_fetcher().fetch(str(report_file))
    if report_file:
        return Path(report_file)
    return get_default_report_file(Path(build_dir) if build_dir else None)


def load_report(report_file) -> GroupedFailures:
    """Parse a report and group its failures by class name."""
    logger.debug(f"Reading JUnit report: {report_file}")
    grouped = extract_grouped_failures(report_file)
    total = sum(group.total_failures for group in grouped.values())
    logger.info(f"Found {total} failures in {len(grouped)} classes ({report_file})")
    return grouped


def report_to_dict(grouped: GroupedFailures) -> dict:
    """Convert grouped failures to a JSON-serializable dict."""
    groups = []
    for index, group in enumerate(grouped.values(), start=1):
        groups.append({
            "index": index,
            "class_name": group.class_name,
            "total_failures": group.total_failures,
            "total_time": group.total_time,
            "failures": [
                {
                    "index": f"{index}.{failure_index}",
                    "test_name": f.test_name,
                    "display_name": f.display_name,
                    "failure_type": f.failure_type,
                    "failure_message": f.failure_message,
                    "stack_trace": f.stack_trace,
                    "time": f.time,
                }
                for failure_index, f in enumerate(group.failures, start=1)
            ],
        })
    return {
        "total_failures": sum(g["total_failures"] for g in groups),
        "groups": groups,
    }


def render_report(grouped: GroupedFailures, index: Optional[str] = None, show_all: bool = False) -> str:
    """
    Render grouped failures as text.

    Args:
        grouped: Result of load_report
        index: "N" for one class or "N.M" for one failure (1-based)
        show_all: Render every class in detail

    Returns:
        Rendered text; the summary when neither index nor show_all is given
    """
    if show_all:
        return report_printer.format_all(grouped)
    if index is not None:
        return report_printer.format_details(index, grouped)
    return report_printer.format_summary(grouped)


def run_report(
    report_file: Optional[str] = None,
    build_dir: Optional[str] = None,
    index: Optional[str] = None,
    show_all: bool = False,
    fail_on_summary: bool = False,
    output_format: str = "text"
) -> ReportResult:
    """
    Load a report and render it.

    An empty report is a success with no text output. Otherwise the status is
    a failure only when fail_on_summary is set.

    Raises:
        ReportParseError: if the report cannot be loaded
        SelectionError: if index does not match the report
        ValueError: if index or output_format is malformed
    """
    if output_format not in OUTPUT_FORMATS:
        raise ValueError(f"Unknown output format: {output_format}")

    path = resolve_report_file(report_file, build_dir)
    grouped = load_report(path)
    total = sum(group.total_failures for group in grouped.values())

    if output_format == "json":
        output = json.dumps(report_to_dict(grouped), indent=2)
    elif grouped:
        output = render_report(grouped, index=index, show_all=show_all)
    else:
        output = ""

    if not grouped:
        return ReportResult(status=EXIT_SUCCESS, output=output, total_failures=0)

    status = EXIT_FAILURE if fail_on_summary else EXIT_SUCCESS
    return ReportResult(status=status, output=output, total_failures=total)
