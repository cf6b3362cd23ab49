class NewsCacheError(Exception):
    """Base class for errors raised by news_cache."""


class FetchUnavailable(NewsCacheError):
    """Raised when a remote article list cannot be obtained, whatever the cause."""


class CorruptCacheError(NewsCacheError):
    """Raised when the cache file exists but does not hold a readable snapshot."""


class CacheWriteError(NewsCacheError):
    """Raised when a snapshot cannot be written to the cache file."""


class InvalidPosition(NewsCacheError):
    """Raised when an article id is not an integer within the collection."""
