"""
Downloads JUnit reports published over HTTP(S), e.g. CI artifact URLs.

Downloads are cached on disk so repeated runs against the same URL parse the
local copy.
"""

import logging
import os
import tempfile
from pathlib import Path
from typing import Optional
from urllib.parse import urlparse

import requests

from .config import get_cache_dir
from .exceptions import ReportDownloadError

logger = logging.getLogger(__name__)

REMOTE_SCHEMES = ("http", "https")


def is_remote(report_file) -> bool:
    return urlparse(str(report_file)).scheme in REMOTE_SCHEMES


class ReportFetcher:
    """Fetches remote reports into a local cache directory."""

    def __init__(self, cache_dir: Optional[Path] = None, session: Optional[requests.Session] = None):
        self.cache_dir = Path(cache_dir) if cache_dir else get_cache_dir()
        self.session = session or requests.Session()
        self.session.headers.update({
            "User-Agent": "junit-reporter/0.1.0"
        })

    def cache_path(self, url: str) -> Path:
        parsed = urlparse(url)
        relative = parsed.path.lstrip("/") or "report.xml"
        return self.cache_dir / parsed.netloc / relative

    def fetch(self, url: str, force: bool = False) -> Path:
        """
        Download a report, with caching.

        Args:
            url: http(s) URL of the JUnit XML report
            force: If True, re-download even if cached

        Returns:
            Path to the downloaded file

        Raises:
            ReportDownloadError: if the download fails
        """
        cache_path = self.cache_path(url)

        if cache_path.exists() and not force:
            logger.debug(f"Using cached report: {cache_path}")
            return cache_path

        logger.info(f"Downloading {url}")

        try:
            response = self.session.get(url, timeout=60, stream=True)
            response.raise_for_status()
        except requests.RequestException as e:
            raise ReportDownloadError(f"Failed to download {url}: {e}", path=url, cause=e) from e

        cache_path.parent.mkdir(parents=True, exist_ok=True)

        # Download to a temp file and rename, so an interrupted download never
        # leaves a truncated report in the cache
        temp_fd, temp_path = tempfile.mkstemp(dir=cache_path.parent, suffix='.tmp')
        try:
            with os.fdopen(temp_fd, 'wb') as f:
                for chunk in response.iter_content(chunk_size=8192):
                    f.write(chunk)
            os.replace(temp_path, cache_path)
        except requests.RequestException as e:
            os.unlink(temp_path)
            raise ReportDownloadError(f"Failed to download {url}: {e}", path=url, cause=e) from e
        except Exception:
            if os.path.exists(temp_path):
                os.unlink(temp_path)
            raise

        logger.debug(f"Saved to {cache_path}")
        return cache_path
