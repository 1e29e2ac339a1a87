"""Configuration for the JUnit reporter, read from .env files and the environment."""

import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Mapping, Optional

logger = logging.getLogger(__name__)

DEFAULT_BUILD_DIR = "build"
DEFAULT_REPORT_NAME = "TEST-junit-jupiter.xml"
DEFAULT_CACHE_DIR = "~/.junit-reporter/cache"
DEFAULT_MCP_PORT = 8979

CONFIG_KEYS = ['JUNIT_BUILD_DIR', 'JUNIT_REPORT_NAME', 'JUNIT_REPORT_FILE',
               'JUNIT_FAIL_ON_SUMMARY', 'JUNIT_CACHE_DIR', 'FASTMCP_PORT']

_TRUE_VALUES = {'1', 'true', 'yes', 'on'}


@dataclass(frozen=True)
class ReporterConfig:
    """Settings shared by the CLI, the MCP server and the report fetcher."""
    build_dir: Path = Path(DEFAULT_BUILD_DIR)
    report_name: str = DEFAULT_REPORT_NAME
    report_file: Optional[Path] = None
    fail_on_summary: bool = False
    cache_dir: Path = field(default_factory=lambda: Path(DEFAULT_CACHE_DIR).expanduser())
    mcp_port: int = DEFAULT_MCP_PORT

    @classmethod
    def from_values(cls, values: Mapping[str, str]) -> "ReporterConfig":
        """Build settings from raw ``KEY=value`` strings; blank values keep the default."""
        values = {key: value.strip() for key, value in values.items() if value and value.strip()}

        port = values.get('FASTMCP_PORT', str(DEFAULT_MCP_PORT))
        try:
            mcp_port = int(port)
        except ValueError:
            raise ValueError(f"FASTMCP_PORT must be an integer, got {port!r}") from None

        report_file = values.get('JUNIT_REPORT_FILE')
        return cls(
            build_dir=Path(values.get('JUNIT_BUILD_DIR', DEFAULT_BUILD_DIR)),
            report_name=values.get('JUNIT_REPORT_NAME', DEFAULT_REPORT_NAME),
            report_file=Path(report_file) if report_file else None,
            fail_on_summary=values.get('JUNIT_FAIL_ON_SUMMARY', '').lower() in _TRUE_VALUES,
            cache_dir=Path(values.get('JUNIT_CACHE_DIR', DEFAULT_CACHE_DIR)).expanduser(),
            mcp_port=mcp_port,
        )

    def default_report_file(self, build_dir: Optional[Path] = None) -> Path:
        """Report location for a build directory.

        ``report_file`` wins when set and no build directory is given;
        otherwise the report is expected at
        ``<build-dir>/test-results/test/<report_name>``.
        """
        if build_dir is None and self.report_file is not None:
            return self.report_file
        build_dir = Path(build_dir) if build_dir is not None else self.build_dir
        return build_dir / "test-results" / "test" / self.report_name


def config_file_candidates() -> list[Path]:
    """Places searched for a .env file, in order."""
    candidates = []
    explicit = os.environ.get('JUNIT_REPORTER_CONFIG')
    if explicit:
        candidates.append(Path(explicit))
    candidates.append(Path.cwd() / '.env')
    candidates.append(Path(__file__).parent.parent / '.env')
    return candidates


def read_env_file(path: Path) -> dict:
    """Parse ``KEY=value`` lines, skipping blanks, comments and other lines."""
    values = {}
    for line in path.read_text().splitlines():
        line = line.strip()
        if line and not line.startswith('#') and '=' in line:
            key, value = line.split('=', 1)
            values[key.strip()] = value.strip()
    return values


def load_config() -> ReporterConfig:
    """Load settings from the first readable .env file and the environment.

    Environment variables take precedence over .env file values, so CI jobs
    can override a checked-in .env without editing it.
    """
    values = {}
    for path in config_file_candidates():
        if not path.is_file():
            continue
        try:
            values.update(read_env_file(path))
            logger.debug(f"Loaded config from {path}")
            break
        except OSError as e:
            logger.warning(f"Failed to read config file {path}: {e}")

    for key in CONFIG_KEYS:
        env_value = os.environ.get(key)
        if env_value is not None:
            values[key] = env_value

    return ReporterConfig.from_values(values)


def get_default_report_file(build_dir: Optional[Path] = None) -> Path:
    return load_config().default_report_file(build_dir)


def get_fail_on_summary() -> bool:
    return load_config().fail_on_summary


def get_cache_dir() -> Path:
    return load_config().cache_dir


def get_mcp_port() -> int:
    return load_config().mcp_port
