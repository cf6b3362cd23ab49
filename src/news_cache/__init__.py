"""Command-line NewsAPI client that keeps the last good result in a local cache."""

__all__ = ["aggregator", "config", "models", "presentation", "store"]
