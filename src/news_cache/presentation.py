"""Console rendering for article lists and single-article details."""

from __future__ import annotations

from typing import List, Optional, Sequence, Tuple, Union

from rich.console import Console
from rich.markup import escape

from .errors import InvalidPosition
from .models import Article

MISSING = "N/A"
INVALID_ID_NOTICE = "Invalid ID"

_console = Console(soft_wrap=True, highlight=False, emoji=False)


def _text(value: Optional[str]) -> str:
    return escape(value) if value else MISSING


def filter_articles(
    articles: Sequence[Article], filter_text: Optional[str] = None
) -> List[Tuple[int, Article]]:
    """Return (position, article) pairs whose title contains `filter_text`, ignoring case.

    Positions are 1-based and refer to the unfiltered collection.
    """
    needle = (filter_text or "").lower()
    return [
        (position, article)
        for position, article in enumerate(articles, start=1)
        if not needle or needle in (article.title or "").lower()
    ]


def list_articles(
    articles: Sequence[Article],
    filter_text: Optional[str] = None,
    console: Optional[Console] = None,
) -> None:
    out = console or _console
    out.print("\n=== Articles List ===")
    for position, article in filter_articles(articles, filter_text):
        out.print(f"{position}. {_text(article.title)} ({_text(article.source_name)})")


def resolve_position(articles: Sequence[Article], position: Union[int, str, None]) -> Article:
    """Map a 1-based id (int or command-line text) to its article."""
    if isinstance(position, bool):
        raise InvalidPosition(f"not an article id: {position!r}")
    if isinstance(position, str):
        try:
            position = int(position.strip())
        except ValueError:
            raise InvalidPosition(f"not an article id: {position!r}") from None
    if not isinstance(position, int):
        raise InvalidPosition(f"not an article id: {position!r}")
    if not 1 <= position <= len(articles):
        raise InvalidPosition(f"id {position} outside 1..{len(articles)}")
    return articles[position - 1]


def view_article(
    articles: Sequence[Article],
    position: Union[int, str, None],
    console: Optional[Console] = None,
) -> None:
    out = console or _console
    try:
        article = resolve_position(articles, position)
    except InvalidPosition:
        out.print(INVALID_ID_NOTICE)
        return

    out.print("\n=== Article Details ===")
    out.print(f"Title: {_text(article.title)}")
    out.print(f"Author: {_text(article.author)}")
    out.print(f"Source: {_text(article.source_name)}")
    out.print(f"Description: {_text(article.description)}")
    out.print(f"URL: {_text(article.url)}")
    out.print("======================\n")
