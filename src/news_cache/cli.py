"""Command-line entry points for the news cache client."""

import logging
from pathlib import Path
from typing import Optional

import typer
from pydantic import ValidationError
from rich import print as rprint
from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape
from typer.core import TyperGroup

from .aggregator import NewsAggregator
from .config import Settings, get_settings
from .errors import CacheWriteError, CorruptCacheError
from .models import Snapshot
from .presentation import list_articles, view_article
from .store import SnapshotStore

USAGE = """
Commands:
  list-headlines [filter]   - List top headlines
  list-tech [filter]        - List technology news
  view-headline <id>        - Show detailed headline
  view-tech <id>            - Show detailed tech news
"""

# Lets "-1" or "-foo" through as a plain argument, and ignores extra arguments.
_PASSTHROUGH = {"ignore_unknown_options": True, "allow_extra_args": True}


class UsageOnUnknownGroup(TyperGroup):
    """Print the usage summary instead of failing on an unknown command."""

    def resolve_command(self, ctx, args):
        if args and self.get_command(ctx, args[0]) is None:
            typer.echo(USAGE)
            ctx.exit(0)
        return super().resolve_command(ctx, args)


app = typer.Typer(
    cls=UsageOnUnknownGroup,
    add_completion=False,
    help="List and inspect NewsAPI articles, falling back to the last cached result.",
)


def _configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.INFO if verbose else logging.WARNING,
        format="%(message)s",
        handlers=[RichHandler(console=Console(stderr=True), show_path=False)],
        force=True,
    )


def build_aggregator(settings: Settings) -> NewsAggregator:
    return NewsAggregator(
        settings.api_key,
        SnapshotStore(settings.cache_file),
        base_url=settings.api_base_url,
        country=settings.headlines_country,
        topic=settings.tech_topic,
        timeout=settings.fetch_timeout,
    )


def _refresh(ctx: typer.Context) -> Snapshot:
    settings: Settings = ctx.obj or get_settings()
    try:
        return build_aggregator(settings).refresh()
    except (CorruptCacheError, CacheWriteError) as exc:
        rprint(f"[red]{escape(str(exc))}[/red]")
        raise typer.Exit(code=1)


@app.callback(invoke_without_command=True)
def run(
    ctx: typer.Context,
    cache_file: Optional[Path] = typer.Option(
        None,
        "--cache-file",
        help="Snapshot cache location (defaults to NEWS_CACHE_FILE or cache.json).",
    ),
    timeout: Optional[float] = typer.Option(
        None,
        "--timeout",
        min=0.1,
        help="Seconds allowed per remote request (defaults to NEWS_FETCH_TIMEOUT or 5).",
    ),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Log fetch progress."),
):
    """
    Refresh from NewsAPI, then run one command against the live or cached snapshot.

    Without a command, print the usage summary and touch nothing.
    """
    _configure_logging(verbose)
    if ctx.invoked_subcommand is None:
        typer.echo(USAGE)
        return

    overrides = {}
    if cache_file is not None:
        overrides["cache_file"] = cache_file
    if timeout is not None:
        overrides["fetch_timeout"] = timeout
    try:
        settings = get_settings()
    except ValidationError as exc:
        rprint(f"[red]Invalid configuration: {escape(str(exc))}[/red]")
        raise typer.Exit(code=1)
    ctx.obj = settings.model_copy(update=overrides)


@app.command("list-headlines", context_settings=_PASSTHROUGH)
def list_headlines(
    ctx: typer.Context,
    filter_text: Optional[str] = typer.Argument(
        None, metavar="[FILTER]", help="Only titles containing this text (any case)."
    ),
):
    """List top headlines."""
    list_articles(_refresh(ctx).headlines, filter_text)


@app.command("list-tech", context_settings=_PASSTHROUGH)
def list_tech(
    ctx: typer.Context,
    filter_text: Optional[str] = typer.Argument(
        None, metavar="[FILTER]", help="Only titles containing this text (any case)."
    ),
):
    """List technology news."""
    list_articles(_refresh(ctx).everything, filter_text)


@app.command("view-headline", context_settings=_PASSTHROUGH)
def view_headline(
    ctx: typer.Context,
    article_id: Optional[str] = typer.Argument(
        None, metavar="<id>", help="Position shown by list-headlines."
    ),
):
    """Show detailed headline."""
    view_article(_refresh(ctx).headlines, article_id)


@app.command("view-tech", context_settings=_PASSTHROUGH)
def view_tech(
    ctx: typer.Context,
    article_id: Optional[str] = typer.Argument(
        None, metavar="<id>", help="Position shown by list-tech."
    ),
):
    """Show detailed tech news."""
    view_article(_refresh(ctx).everything, article_id)


def main():
    app()


if __name__ == "__main__":
    main()
