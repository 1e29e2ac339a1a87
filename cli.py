#!/usr/bin/env python3
"""CLI for the JUnit failure reporter."""

import argparse
import logging
import re
import sys

import core
from junit_reporter.config import get_fail_on_summary
from junit_reporter.exceptions import ReportParseError, SelectionError

logger = logging.getLogger(__name__)

INDEX_PATTERN = re.compile(r"^\d+(?:\.\d+)?$")


def setup_logging(verbose: bool = False, silent: bool = False):
    if silent:
        level = logging.CRITICAL
    else:
        level = logging.DEBUG if verbose else logging.WARNING
    logging.basicConfig(
        level=level,
        format='%(levelname)s: %(message)s'
    )


def index_arg(value: str) -> str:
    """argparse type for group (N) or failure (N.M) selections."""
    if not INDEX_PATTERN.match(value):
        raise argparse.ArgumentTypeError(f"invalid index '{value}' (expected N or N.M)")
    return value


def _run(args, index=None, show_all=False):
    """Run the report and print it. Errors are logged as a single line."""
    try:
        result = core.run_report(
            report_file=args.report_file,
            build_dir=args.build_dir,
            index=index,
            show_all=show_all,
            fail_on_summary=args.fail_on_summary,
            output_format=args.format,
        )
    except ReportParseError as e:
        if not args.silent:
            logger.error(f"Failed to parse JUnit report: {e}")
        return core.EXIT_FAILURE
    except SelectionError as e:
        if not args.silent:
            logger.error(str(e))
        return core.EXIT_FAILURE
    except Exception as e:
        if not args.silent:
            logger.error(f"Unexpected error: {e}", exc_info=logger.isEnabledFor(logging.DEBUG))
        return core.EXIT_FAILURE

    if result.output:
        print(result.output, end="" if result.output.endswith("\n") else "\n")
    return result.status


def cmd_summary(args):
    """Print one line per failing class and test."""
    return _run(args)


def cmd_details(args):
    """Print a class (N) or a single failure with its stack trace (N.M)."""
    return _run(args, index=args.index)


def cmd_all(args):
    """Print every failing class in detail."""
    return _run(args, show_all=True)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description='JUnit XML failure reporter')
    parser.add_argument('-v', '--verbose', action='store_true')
    parser.add_argument('--silent', action='store_true', help='Do not log errors')
    parser.add_argument('--report-file', '-r',
                        help='JUnit XML report path or http(s) URL '
                             '(default: <build-dir>/test-results/test/TEST-junit-jupiter.xml)')
    parser.add_argument('--build-dir', help='Build directory used to locate the default report')
    parser.add_argument('--fail-on-summary', action='store_true', default=None,
                        help='Exit with status 1 whenever failures are reported')
    parser.add_argument('--format', '-f', choices=core.OUTPUT_FORMATS, default='text')

    sub = parser.add_subparsers(dest='command')

    sub.add_parser('summary', help='Summary of failures grouped by class (default)')

    p = sub.add_parser('details', help='Details of a class or a single failure')
    p.add_argument('index', type=index_arg, help='Class number (N) or failure number (N.M), 1-based')

    sub.add_parser('all', help='Details of every failing class')

    return parser


def main(argv=None):
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.fail_on_summary is None:
        args.fail_on_summary = get_fail_on_summary()

    setup_logging(args.verbose, args.silent)

    cmds = {
        'summary': cmd_summary,
        'details': cmd_details,
        'all': cmd_all,
    }
    return cmds[args.command or 'summary'](args)


if __name__ == '__main__':
    sys.exit(main())
