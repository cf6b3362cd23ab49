"""Refresh the cached snapshot from NewsAPI, falling back to the cache."""

from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor
from typing import Callable, List, Optional
from urllib.parse import urlencode

from .errors import FetchUnavailable
from .fetcher import DEFAULT_TIMEOUT_SECONDS, fetch_articles
from .models import Article, Snapshot
from .store import SnapshotStore

log = logging.getLogger("news_cache.aggregator")

FetchFn = Callable[[str, float], List[Article]]


class NewsAggregator:
    """
    Fetch top headlines and the topic-filtered 'everything' list together.

    Both lists must arrive for the result to count as fresh; otherwise the
    previous snapshot is read back from the store and nothing is written.
    """

    def __init__(
        self,
        api_key: Optional[str],
        store: SnapshotStore,
        *,
        base_url: str = "https://newsapi.org/v2",
        country: str = "us",
        topic: str = "technology",
        timeout: float = DEFAULT_TIMEOUT_SECONDS,
        fetch: Optional[FetchFn] = None,
    ) -> None:
        self.api_key = api_key or ""
        self.store = store
        self.base_url = base_url.rstrip("/")
        self.country = country
        self.topic = topic
        self.timeout = timeout
        self._fetch = fetch or fetch_articles

    def headlines_url(self) -> str:
        query = urlencode({"country": self.country, "apiKey": self.api_key})
        return f"{self.base_url}/top-headlines?{query}"

    def everything_url(self) -> str:
        query = urlencode({"q": self.topic, "apiKey": self.api_key})
        return f"{self.base_url}/everything?{query}"

    def _try_fetch(self, url: str) -> Optional[List[Article]]:
        try:
            return self._fetch(url, self.timeout)
        except FetchUnavailable:
            return None

    def refresh(self) -> Snapshot:
        log.info("Fetching data from NewsAPI...")
        with ThreadPoolExecutor(max_workers=2) as executor:
            headlines_future = executor.submit(self._try_fetch, self.headlines_url())
            everything_future = executor.submit(self._try_fetch, self.everything_url())
            headlines = headlines_future.result()
            everything = everything_future.result()

        if headlines is None or everything is None:
            log.warning("Using cached data (API failed).")
            return self.store.load()

        snapshot = Snapshot(headlines=headlines, everything=everything)
        self.store.save(snapshot)
        return snapshot
