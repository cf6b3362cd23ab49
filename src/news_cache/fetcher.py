"""Time-bounded retrieval of one NewsAPI article list."""

from __future__ import annotations

import json
import logging
import threading
from typing import Any, List, Optional
from urllib.parse import urlsplit, urlunsplit

import requests

from .errors import FetchUnavailable
from .models import Article

log = logging.getLogger("news_cache.fetcher")

DEFAULT_TIMEOUT_SECONDS = 5.0
HEADERS = {
    "User-Agent": "news-cache/0.1 (+https://newsapi.org)",
    "Accept": "application/json",
}
_CHUNK_SIZE = 16 * 1024


def redact_url(url: str) -> str:
    """Drop the query string so the API key never reaches the logs."""
    parts = urlsplit(url)
    return urlunsplit((parts.scheme, parts.netloc, parts.path, "", ""))


class _Exchange:
    """One streamed GET, run on a worker thread so the caller can walk away at the deadline."""

    def __init__(self, http: Any, url: str, timeout: float):
        self.http = http
        self.url = url
        self.timeout = timeout
        self.status_code: Optional[int] = None
        self.body: Optional[bytes] = None
        self.error: Optional[BaseException] = None
        self._response: Any = None
        self._abandoned = threading.Event()
        self._lock = threading.Lock()

    def run(self) -> None:
        try:
            with self.http.get(
                self.url, headers=HEADERS, timeout=(self.timeout, self.timeout), stream=True
            ) as response:
                with self._lock:
                    self._response = response
                if self._abandoned.is_set():
                    return
                self.status_code = response.status_code
                if not 200 <= response.status_code < 300:
                    return
                chunks: List[bytes] = []
                for chunk in response.iter_content(chunk_size=_CHUNK_SIZE):
                    if self._abandoned.is_set():
                        return
                    if chunk:
                        chunks.append(chunk)
                self.body = b"".join(chunks)
        except Exception as exc:
            self.error = exc

    def abandon(self) -> None:
        self._abandoned.set()
        with self._lock:
            response = self._response
        if response is not None:
            try:
                response.close()
            except Exception as exc:  # pragma: no cover - depends on transport state
                log.debug("Closing abandoned response failed: %s", exc)


def fetch_articles(
    url: str,
    timeout: float = DEFAULT_TIMEOUT_SECONDS,
    *,
    session: Optional[Any] = None,
) -> List[Article]:
    """
    GET `url` and return the articles listed under its `articles` field.

    `timeout` bounds the whole exchange, headers and body included. The
    request runs on a daemon thread; once the deadline passes the caller
    stops waiting, the response is closed and the result is discarded.

    Raises FetchUnavailable on transport errors, timeouts, non-2xx statuses,
    non-JSON bodies and bodies without an `articles` list.
    """
    target = redact_url(url)
    exchange = _Exchange(session or requests, url, timeout)
    worker = threading.Thread(target=exchange.run, name=f"fetch {target}", daemon=True)
    worker.start()
    worker.join(timeout)

    if worker.is_alive():
        exchange.abandon()
        log.warning("Fetch error for %s: no complete response within %.1fs", target, timeout)
        raise FetchUnavailable(f"Request to {target} timed out after {timeout}s")
    if isinstance(exchange.error, requests.RequestException):
        log.warning("Fetch error for %s: %s", target, exchange.error)
        raise FetchUnavailable(f"Request to {target} failed: {exchange.error}") from exchange.error
    if exchange.error is not None:
        raise exchange.error
    if exchange.body is None:
        log.warning("Fetch error for %s: HTTP %s", target, exchange.status_code)
        raise FetchUnavailable(f"Invalid response from {target}: HTTP {exchange.status_code}")

    try:
        payload = json.loads(exchange.body)
    except ValueError as exc:
        log.warning("Fetch error for %s: body is not JSON (%s)", target, exc)
        raise FetchUnavailable(f"Malformed response from {target} (not JSON)") from exc

    articles = payload.get("articles") if isinstance(payload, dict) else None
    if not isinstance(articles, list):
        log.warning("Fetch error for %s: missing articles field", target)
        raise FetchUnavailable(f"Malformed response from {target} (missing articles field)")

    return [Article.model_validate(item) for item in articles]
