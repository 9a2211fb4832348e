"""
URL Probing

HTTP helpers shared by the checks: URL accessibility probes and
fetching of reference files, with a small time-based cache.
"""

import asyncio
import time
import urllib.error
import urllib.request
from dataclasses import dataclass
from typing import Any, Dict, Optional, Tuple
from urllib.parse import urlparse

HTTP_TIMEOUT = 10
MAX_REDIRECTS = 5
CACHE_DURATION = 60 * 60
USER_AGENT = "spec-up-t-healthcheck"


def is_http_url(value: Any) -> bool:
    """True for strings that parse as http(s) URLs with a host."""
    if not isinstance(value, str):
        return False
    try:
        parsed = urlparse(value)
    except ValueError:
        return False
    return parsed.scheme in ("http", "https") and bool(parsed.netloc)


@dataclass
class UrlAccessibility:
    """Outcome of probing one URL."""
    is_accessible: bool
    status_code: Optional[int] = None
    message: str = ""


class _LimitedRedirectHandler(urllib.request.HTTPRedirectHandler):
    max_redirections = MAX_REDIRECTS


class UrlProber:
    """
    Probes URLs with HEAD, falling back to GET.

    Blocking urllib calls run in a worker thread. Only HTTP 200 counts
    as accessible; 4xx answers are reported with their status code.
    """

    def __init__(self, timeout: float = HTTP_TIMEOUT):
        self.timeout = timeout
        self._opener = urllib.request.build_opener(_LimitedRedirectHandler)

    async def probe(self, url: str, field_name: str) -> UrlAccessibility:
        """
        Check whether a URL answers with HTTP 200.

        Args:
            url: URL to probe
            field_name: Name used in messages (e.g. "logo")
        """
        if not is_http_url(url):
            return UrlAccessibility(False, message=f"Invalid URL format: {url}")

        try:
            status = await asyncio.to_thread(self._status, url, "HEAD")
        except Exception:
            status = None

        if status is None:
            try:
                status = await asyncio.to_thread(self._status, url, "GET")
            except Exception as e:
                return UrlAccessibility(False, message=f"{field_name} is not accessible: {e}")

        if status == 200:
            return UrlAccessibility(True, status_code=200)
        return UrlAccessibility(False, status_code=status, message=f"{field_name} returned HTTP {status}")

    async def fetch_text(self, url: str) -> str:
        """GET a URL and return its body as text."""
        return await asyncio.to_thread(self._fetch, url)

    def _status(self, url: str, method: str) -> int:
        req = urllib.request.Request(url, method=method, headers={"User-Agent": USER_AGENT})
        try:
            with self._opener.open(req, timeout=self.timeout) as response:
                return response.status
        except urllib.error.HTTPError as e:
            if e.code < 500:
                return e.code
            raise

    def _fetch(self, url: str) -> str:
        req = urllib.request.Request(url, headers={"User-Agent": USER_AGENT})
        with self._opener.open(req, timeout=self.timeout) as response:
            charset = response.headers.get_content_charset() or "utf-8"
            return response.read().decode(charset)


class ReferenceCache:
    """Keeps fetched reference data for a fixed duration."""

    def __init__(self, duration: float = CACHE_DURATION):
        self.duration = duration
        self._entries: Dict[str, Tuple[float, Any]] = {}

    def get(self, key: str, allow_stale: bool = False) -> Optional[Any]:
        entry = self._entries.get(key)
        if entry is None:
            return None
        fetched_at, value = entry
        if allow_stale or time.monotonic() - fetched_at < self.duration:
            return value
        return None

    def set(self, key: str, value: Any) -> None:
        self._entries[key] = (time.monotonic(), value)

    def clear(self) -> None:
        self._entries.clear()


# Replaced in tests; checks look it up at call time.
default_prober = UrlProber()


def get_prober() -> UrlProber:
    return default_prober
