#!/usr/bin/env python3
"""
MCP Server for the JUnit failure reporter.
Provides tools for summarizing and drilling into JUnit XML test reports.
"""

import asyncio
import json
import logging

from fastmcp import FastMCP

import core
from junit_reporter.config import get_mcp_port

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)

# FastMCP server
mcp = FastMCP("junit-reporter")


def _error(e: Exception) -> str:
    return json.dumps({"error": str(e), "error_type": type(e).__name__})


async def _render(report_file: str = None, index: str = None, show_all: bool = False) -> str:
    # parsing is blocking, keep it off the event loop
    result = await asyncio.to_thread(
        core.run_report, report_file=report_file, index=index, show_all=show_all
    )
    return result.output or "No failures found."


@mcp.tool(
    name="junit_summary",
    description="""Summarize the failures of a JUnit XML report, grouped by test class.
        Args:
            report_file: Report path or http(s) URL (uses the configured build directory if not specified)

        Each class and failure is numbered; use the numbers with junit_details.
    """
)
async def junit_summary(report_file: str = None) -> str:
    try:
        return await _render(report_file)
    except Exception as e:
        logger.error(f"Error in junit_summary: {str(e)}")
        return _error(e)


@mcp.tool(
    name="junit_details",
    description="""Show the failures of one test class, or one failure with its stack trace.
        Args:
            index: "N" for the Nth class or "N.M" for the Mth failure of the Nth class (1-based, as in junit_summary)
            report_file: Report path or http(s) URL (uses the configured build directory if not specified)
    """
)
async def junit_details(index: str, report_file: str = None) -> str:
    try:
        return await _render(report_file, index=index)
    except Exception as e:
        logger.error(f"Error in junit_details: {str(e)}")
        return _error(e)


@mcp.tool(
    name="junit_all",
    description="""Show every failing test class in detail.
        Args:
            report_file: Report path or http(s) URL (uses the configured build directory if not specified)
    """
)
async def junit_all(report_file: str = None) -> str:
    try:
        return await _render(report_file, show_all=True)
    except Exception as e:
        logger.error(f"Error in junit_all: {str(e)}")
        return _error(e)


@mcp.tool(
    name="junit_report_json",
    description="""Return the grouped failures of a JUnit XML report as JSON.
        Args:
            report_file: Report path or http(s) URL (uses the configured build directory if not specified)

        Includes failure messages, types, times and full stack traces.
    """
)
async def junit_report_json(report_file: str = None) -> str:
    try:
        result = await asyncio.to_thread(core.run_report, report_file=report_file, output_format="json")
        return result.output
    except Exception as e:
        logger.error(f"Error in junit_report_json: {str(e)}")
        return _error(e)


async def main():
    port = get_mcp_port()
    logger.info(f"Starting JUnit reporter MCP server on port {port}")
    await mcp.run_async(transport="sse", host="0.0.0.0", port=port)


if __name__ == "__main__":
    asyncio.run(main())
