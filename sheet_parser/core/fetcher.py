"""
Retrieval of spreadsheet exports from Google Sheets

This module provides functionality for fetching the raw export text of one
sheet tab (GViz JSON or CSV) using a cloudscraper session, with
Tenacity-based retry logic for transient failures (connection errors,
timeouts, 429 and 5xx responses).

It also provides a "last request wins" guard for callers that may issue
overlapping fetches for the same logical table.
"""

import logging
import os
import threading
from typing import Dict, Optional

import cloudscraper
import requests
from tenacity import (
    Retrying,
    before_sleep_log,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential
)

from .ingestion import Grid, ingest
from ..constants import (
    CSV_URL_TEMPLATE,
    DEFAULT_HEADERS,
    GVIZ_URL_TEMPLATE,
    MAX_FETCH_ATTEMPTS,
    REQUEST_TIMEOUT,
    RETRYABLE_STATUS_CODES,
    SHEET_ID_ENV_VAR
)
from ..exceptions import FetchError

# Configure logging
logger = logging.getLogger(__name__)


class RetryableStatusError(FetchError):
    """Response status worth retrying (429, 5xx)"""


def gviz_url(sheet_id: str, gid) -> str:
    """GViz JSON export URL of one sheet tab"""
    return GVIZ_URL_TEMPLATE.format(sheet_id=sheet_id, gid=gid)


def csv_url(sheet_id: str, gid) -> str:
    """CSV export URL of one sheet tab"""
    return CSV_URL_TEMPLATE.format(sheet_id=sheet_id, gid=gid)


def default_sheet_id() -> Optional[str]:
    """Sheet id configured in the environment, or None"""
    value = os.environ.get(SHEET_ID_ENV_VAR, '').strip()
    return value or None


class SheetFetcher:
    """
    Fetcher for Google Sheets exports

    Uses a cloudscraper session with default headers and retries transient
    failures with exponential backoff (up to 5 attempts). Non-retryable
    HTTP errors raise FetchError immediately.
    """

    def __init__(self, session: Optional[requests.Session] = None, timeout: int = REQUEST_TIMEOUT,
                 headers: Optional[Dict[str, str]] = None, max_attempts: int = MAX_FETCH_ATTEMPTS,
                 retry_wait=None):
        """
        Initialize the fetcher

        Args:
            session: Optional requests-compatible session (a cloudscraper session is created if not provided)
            timeout: Request timeout in seconds
            headers: Optional custom HTTP headers. Uses DEFAULT_HEADERS if not provided.
            max_attempts: Maximum attempts per URL
            retry_wait: Tenacity wait strategy (default: exponential backoff 1-30s)
        """
        self.session = session or cloudscraper.create_scraper(
            browser={
                'browser': 'chrome',
                'platform': 'windows',
                'desktop': True
            }
        )
        self.session.headers.update(headers or DEFAULT_HEADERS.copy())
        self.timeout = timeout
        self.max_attempts = max_attempts
        self.retry_wait = retry_wait or wait_exponential(multiplier=1, min=1, max=30)
        self.request_count = 0

    def _get(self, url: str) -> str:
        logger.info(f"Fetching: {url[:100]}")
        response = self.session.get(url, timeout=self.timeout)
        self.request_count += 1

        if response.status_code in RETRYABLE_STATUS_CODES:
            raise RetryableStatusError(url, response.status_code, "transient error")
        if not 200 <= response.status_code < 300:
            raise FetchError(url, response.status_code, getattr(response, 'reason', '') or '')

        return response.text

    def fetch_text(self, url: str) -> str:
        """
        Fetch the raw text of an export URL with retry logic

        Args:
            url: The URL to fetch

        Returns:
            Response body as text

        Raises:
            FetchError: If the response is a non-retryable error or all attempts fail
        """
        retrying = Retrying(
            wait=self.retry_wait,
            stop=stop_after_attempt(self.max_attempts),
            retry=retry_if_exception_type((
                requests.ConnectionError,
                requests.Timeout,
                RetryableStatusError,
            )),
            before_sleep=before_sleep_log(logger, logging.WARNING),
            reraise=True
        )

        try:
            text = retrying(self._get, url)
        except requests.RequestException as e:
            raise FetchError(url, reason=str(e)) from e

        logger.info(f"Successfully fetched: {url[:100]} ({len(text)} chars)")
        return text

    def fetch_grid(self, sheet_id: str, gid, source_format: str = 'gviz') -> Grid:
        """
        Fetch one sheet tab and ingest it into a grid

        Args:
            sheet_id: Spreadsheet id
            gid: Tab id
            source_format: 'gviz' (default) or 'csv'; 'auto' fetches GViz

        Returns:
            Grid of the tab
        """
        url = csv_url(sheet_id, gid) if source_format == 'csv' else gviz_url(sheet_id, gid)
        return ingest(self.fetch_text(url), source_format)


class LatestRequestGuard:
    """
    "Last request wins" bookkeeping for overlapping fetches

    Each begin() for a target supersedes every earlier request for the same
    target; a result may be applied only while its token is still current.
    """

    def __init__(self):
        self._lock = threading.Lock()
        self._tokens = {}

    def begin(self, target) -> int:
        """Register a new request for a target and return its token"""
        with self._lock:
            token = self._tokens.get(target, 0) + 1
            self._tokens[target] = token
            return token

    def is_current(self, target, token: int) -> bool:
        """Check whether a token belongs to the latest request for a target"""
        with self._lock:
            return self._tokens.get(target) == token

    def resolve(self, target, token: int, result):
        """
        Result of a finished request, or None when a newer request superseded it

        Args:
            target: Logical table the request was for
            token: Token returned by begin()
            result: Result of the finished request

        Returns:
            The result, or None when stale
        """
        if self.is_current(target, token):
            return result
        logger.debug(f"Discarding stale result for {target!r} (token {token})")
        return None
