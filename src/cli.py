"""CLI interface for randpick."""

import logging
import random
from pathlib import Path
from typing import Annotated, Optional

import typer
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from randpick.config import RandpickConfig, load_config, merge_cli_overrides
from randpick.content.models import (
    ALL_CATEGORIES,
    Category,
    ContentItem,
    QuerySpec,
    SortDirection,
    SortKey,
)
from randpick.content.query import QueryEngine
from randpick.content.sampler import clamp_count, sample
from randpick.content.store import ContentStore
from randpick.errors import RandpickError

app = typer.Typer(
    name="randpick",
    help="Upload categorised snippets, browse them, and draw random picks.",
)

console = Console()

_CATEGORY_STYLES: dict[Category, str] = {
    Category.HOUSE: "blue",
    Category.APARTMENT: "green",
    Category.LAND: "yellow",
}

CategoryOption = Annotated[
    str,
    typer.Option(
        "--category",
        "-c",
        help="Only include this category (house, apartment, land) or 'all'.",
    ),
]
SearchOption = Annotated[
    str,
    typer.Option("--search", "-s", help="Case-insensitive text to search for."),
]
SortOption = Annotated[
    Optional[SortKey],
    typer.Option("--sort", help="Order by creation time or alphabetically."),
]
OrderOption = Annotated[
    Optional[SortDirection],
    typer.Option("--order", help="Ascending or descending order."),
]


def version_callback(value: bool) -> None:
    """Print version and exit."""
    if value:
        from randpick import __version__

        console.print(f"randpick {__version__}")
        raise typer.Exit()


@app.callback()
def main(
    ctx: typer.Context,
    version: Annotated[
        bool,
        typer.Option(
            "--version",
            "-V",
            help="Show version and exit.",
            callback=version_callback,
            is_eager=True,
        ),
    ] = False,
    config_path: Annotated[
        Optional[Path],
        typer.Option("--config", help="Path to a .randpick.toml file."),
    ] = None,
    storage: Annotated[
        Optional[Path],
        typer.Option("--storage", help="Storage file holding the content library."),
    ] = None,
    seed: Annotated[
        Optional[int],
        typer.Option("--seed", help="Seed the random picker for reproducible results."),
    ] = None,
    strict: Annotated[
        Optional[bool],
        typer.Option(
            "--strict/--no-strict",
            help="Fail when the library cannot be saved instead of warning.",
        ),
    ] = None,
    verbose: Annotated[
        bool,
        typer.Option("--verbose", "-v", help="Enable debug logging."),
    ] = False,
) -> None:
    """randpick - a categorised content library with random picks."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )
    config = load_config(config_path)
    config = merge_cli_overrides(
        config,
        storage_path=str(storage) if storage is not None else None,
        seed=seed,
        strict=strict,
    )
    ctx.obj = config


def _open_store(ctx: typer.Context) -> ContentStore:
    config: RandpickConfig = ctx.obj
    return config.build_store()


def _build_spec(
    ctx: typer.Context,
    category: str,
    search: str,
    sort: SortKey | None,
    order: SortDirection | None,
) -> QuerySpec:
    config: RandpickConfig = ctx.obj
    valid = [ALL_CATEGORIES, *(c.value for c in Category)]
    if category not in valid:
        console.print(f"[red]Error:[/red] Unknown category: {escape(category)}")
        console.print(f"Choose one of: {', '.join(valid)}")
        raise typer.Exit(1)
    return QuerySpec(
        category=category,
        search=search,
        sort_key=sort or config.query.sort_key,
        direction=order or config.query.direction,
    )


def _warn_if_unsaved(store: ContentStore) -> None:
    if not store.persisted:
        console.print("[yellow]Warning:[/yellow] storage write failed, change kept in memory only.")


def _render_items(title: str, items: list[ContentItem]) -> Table:
    table = Table(title=title, show_lines=False)
    table.add_column("ID", style="dim", no_wrap=True)
    table.add_column("Category", no_wrap=True)
    table.add_column("Created", no_wrap=True)
    table.add_column("Text")
    for item in items:
        style = _CATEGORY_STYLES.get(item.category, "white")
        table.add_row(
            str(item.id),
            f"[{style}]{item.category.label}[/{style}]",
            item.display_label,
            escape(item.text),
        )
    return table


@app.command()
def add(
    ctx: typer.Context,
    text: Annotated[str, typer.Argument(help="Snippet text to upload.")],
    category: Annotated[
        str,
        typer.Option("--category", "-c", help="house, apartment or land."),
    ] = Category.HOUSE.value,
) -> None:
    """Upload a new snippet to the library."""
    store = _open_store(ctx)
    try:
        item = store.add(text, category)
    except RandpickError as exc:
        console.print(f"[red]Error:[/red] {escape(str(exc))}")
        raise typer.Exit(1)

    console.print(f"[green]Added[/green] {item.id} ({item.category.label}): {escape(item.text)}")
    _warn_if_unsaved(store)


@app.command()
def remove(
    ctx: typer.Context,
    item_id: Annotated[int, typer.Argument(help="ID of the snippet to delete.")],
) -> None:
    """Delete a snippet by ID."""
    store = _open_store(ctx)
    try:
        removed = store.remove(item_id)
    except RandpickError as exc:
        console.print(f"[red]Error:[/red] {escape(str(exc))}")
        raise typer.Exit(1)

    if removed:
        console.print(f"[green]Removed[/green] {item_id}")
    else:
        console.print(f"[yellow]No content with ID {item_id}.[/yellow]")
    _warn_if_unsaved(store)


@app.command("list")
def list_cmd(
    ctx: typer.Context,
    category: CategoryOption = ALL_CATEGORIES,
    search: SearchOption = "",
    sort: SortOption = None,
    order: OrderOption = None,
) -> None:
    """Show the library, filtered, searched and sorted."""
    spec = _build_spec(ctx, category, search, sort, order)
    items = QueryEngine(_open_store(ctx)).run(spec)

    if not items:
        console.print("No content found. Upload some content to get started!")
        return
    console.print(_render_items(f"Content Library ({len(items)})", items))


@app.command()
def pick(
    ctx: typer.Context,
    count: Annotated[
        Optional[int],
        typer.Option("--count", "-n", help="How many items to draw."),
    ] = None,
    category: CategoryOption = ALL_CATEGORIES,
    search: SearchOption = "",
    sort: SortOption = None,
    order: OrderOption = None,
) -> None:
    """Draw random items from the filtered library."""
    config: RandpickConfig = ctx.obj
    spec = _build_spec(ctx, category, search, sort, order)
    items = QueryEngine(_open_store(ctx)).run(spec)

    console.print(f"Available: {len(items)} items")
    if not items:
        console.print("[yellow]Nothing to pick from.[/yellow]")
        return

    requested = count if count is not None else config.sampler.default_count
    if clamp_count(requested, len(items)) != requested:
        console.print(f"[dim]Requested {requested}, drawing {clamp_count(requested, len(items))}.[/dim]")

    rng = random.Random(config.sampler.seed) if config.sampler.seed is not None else None
    results = sample(items, requested, rng=rng)
    console.print(_render_items(f"Random Results ({len(results)})", results))


@app.command()
def categories(ctx: typer.Context) -> None:
    """List categories with the number of snippets in each."""
    engine = QueryEngine(_open_store(ctx))
    table = Table(title="Categories")
    table.add_column("Value", no_wrap=True)
    table.add_column("Label")
    table.add_column("Items", justify="right")
    for cat in Category:
        table.add_row(cat.value, cat.label, str(engine.count(QuerySpec(category=cat))))
    console.print(table)

