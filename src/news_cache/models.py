"""Data models for cached NewsAPI results."""

from typing import Any, List, Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator

_TEXT_FIELDS = ("title", "author", "description", "url")


def _textual(value: Any) -> Any:
    if value is None or isinstance(value, str):
        return value
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return value
    return None


class ArticleSource(BaseModel):
    """Publisher reference attached to an article."""

    model_config = ConfigDict(extra="allow", coerce_numbers_to_str=True)

    id: Optional[str] = None
    name: Optional[str] = None


class Article(BaseModel):
    """One news item as returned by the remote service.

    Every field is optional: the remote payload is stored as-is and gaps only
    show up when an article is displayed. Fields the client does not use
    (publishedAt, urlToImage, content, ...) are kept as extras.
    """

    model_config = ConfigDict(extra="allow", coerce_numbers_to_str=True)

    title: Optional[str] = None
    author: Optional[str] = None
    source: Optional[ArticleSource] = None
    description: Optional[str] = None
    url: Optional[str] = None

    @model_validator(mode="before")
    @classmethod
    def _tolerate_malformed(cls, data: Any) -> Any:
        if isinstance(data, cls):
            return data
        if not isinstance(data, dict):
            return {}
        cleaned = dict(data)
        for key in _TEXT_FIELDS:
            if key in cleaned:
                cleaned[key] = _textual(cleaned[key])
        source = cleaned.get("source")
        if isinstance(source, dict):
            cleaned["source"] = {
                k: _textual(v) if k in ("id", "name") else v
                for k, v in source.items()
            }
        elif not isinstance(source, ArticleSource):
            cleaned["source"] = None
        return cleaned

    @property
    def source_name(self) -> Optional[str]:
        return self.source.name if self.source else None


class Snapshot(BaseModel):
    """The paired article collections cached as one unit."""

    headlines: List[Article] = Field(..., description="Top headlines.")
    everything: List[Article] = Field(
        ..., description="Results of the topic-filtered 'everything' query."
    )

    @classmethod
    def empty(cls) -> "Snapshot":
        return cls(headlines=[], everything=[])
