"""Command-line interface for Recipe Explorer using Click."""

from __future__ import annotations

import asyncio
import logging
from pathlib import Path
from typing import Any, Type

import click

from . import utils
from .commands import (
    BaseCommand,
    ClearCacheCommand,
    DetailsCommand,
    FavoritesCommand,
    IngredientCommand,
    LettersCommand,
    RandomCommand,
    SearchCommand,
)
from .config import Config
from .exceptions import RecipeExplorerError, StorageError, ValidationError
from .menu import InteractiveMenu

logger = logging.getLogger(__name__)

# Distinct from click's 1 (error) and 2 (usage)
EXIT_STARTUP_FAILURE = 3

LOG_LEVELS = ["CRITICAL", "ERROR", "WARNING", "INFO", "DEBUG", "NOTSET"]


@click.group(invoke_without_command=True)
@click.option(
    "--format",
    "output_format",
    type=click.Choice(["table", "json"], case_sensitive=False),
    default="table",
    help="Output format for non-interactive commands",
)
@click.option(
    "--refresh",
    "force_refresh",
    is_flag=True,
    help="Ignore cached responses and fetch fresh data",
)
@click.option(
    "--config",
    "config_file",
    type=click.Path(dir_okay=False, path_type=Path),
    envvar="RECIPE_EXPLORER_CONFIG",
    help="Path to a JSON or TOML configuration file",
)
@click.option(
    "--log-level",
    "log_level",
    type=click.Choice(LOG_LEVELS, case_sensitive=False),
    help="Set logging level",
    envvar="RECIPE_EXPLORER_LOG_LEVEL",
)
@click.pass_context
def cli(
    ctx: click.Context,
    output_format: str,
    force_refresh: bool,
    config_file: Path | None,
    log_level: str | None,
) -> None:
    """Recipe Explorer - browse TheMealDB recipes from the terminal.

    Responses are cached on disk for 24 hours; favorites are kept locally.

    Run without a subcommand to start the interactive menu.
    """
    utils.configure_logging(log_level, default_to_warning=True)

    try:
        config = Config.from_sources(config_file)
    except ValueError as e:
        raise click.ClickException(f"Invalid configuration: {e}") from e

    ctx.obj = {
        "config": config,
        "output_format": output_format,
        "force_refresh": force_refresh,
    }

    if ctx.invoked_subcommand is None:
        ctx.invoke(menu)


def _run_command(ctx: click.Context, command_cls: Type[BaseCommand], **kwargs: Any) -> None:
    """Initialize storage, run one command against a live client and print its output."""
    config: Config = ctx.obj["config"]
    kwargs.setdefault("output_format", ctx.obj["output_format"])
    kwargs.setdefault("force_refresh", ctx.obj["force_refresh"])

    async def _run() -> str:
        client, fetcher, favorites, table_formatter, json_formatter = (
            utils.create_command_dependencies(config)
        )
        async with client as c:
            if not await utils.initialize(fetcher.store, favorites):
                raise StorageError(f"Could not initialize data directory {config.data_dir}")
            command = command_cls(c, fetcher, favorites, table_formatter, json_formatter)
            return await command.execute(**kwargs)

    try:
        output = asyncio.run(_run())
    except StorageError as e:
        click.echo(f"Error: {e}", err=True)
        ctx.exit(EXIT_STARTUP_FAILURE)
    except ValidationError as e:
        raise click.UsageError(str(e)) from e
    except RecipeExplorerError as e:
        raise click.ClickException(str(e)) from e
    except Exception as e:
        raise click.ClickException(f"Unexpected error: {e}") from e
    click.echo(output)


@cli.command("search")
@click.argument("query", nargs=-1, required=True)
@click.pass_context
def search_command(ctx: click.Context, query: tuple[str, ...]) -> None:
    """Search recipes by name."""
    _run_command(ctx, SearchCommand, query=" ".join(query))


@cli.command("show")
@click.argument("recipe_id", required=True)
@click.pass_context
def show_command(ctx: click.Context, recipe_id: str) -> None:
    """Show a recipe by ID, with related recipes from its category."""
    _run_command(ctx, DetailsCommand, recipe_id=recipe_id)


@cli.command("letters")
@click.argument("letters", required=True)
@click.pass_context
def letters_command(ctx: click.Context, letters: str) -> None:
    """List recipes starting with up to 3 letters (e.g. abc)."""
    _run_command(ctx, LettersCommand, letters=letters)


@cli.command("ingredient")
@click.argument("ingredient", nargs=-1, required=True)
@click.option(
    "--timeout",
    "timeout_seconds",
    type=float,
    default=None,
    help="Seconds to wait before giving up (default from config: 5)",
)
@click.pass_context
def ingredient_command(
    ctx: click.Context, ingredient: tuple[str, ...], timeout_seconds: float | None
) -> None:
    """Search recipes by main ingredient."""
    if timeout_seconds is not None and timeout_seconds <= 0:
        raise click.BadParameter("must be positive", param_hint="--timeout")
    _run_command(ctx, IngredientCommand, ingredient=" ".join(ingredient), timeout=timeout_seconds)


@cli.command("random")
@click.pass_context
def random_command(ctx: click.Context) -> None:
    """Show a random recipe (first of three parallel requests)."""
    _run_command(ctx, RandomCommand)


@cli.group("favorites", invoke_without_command=True)
@click.pass_context
def favorites_group(ctx: click.Context) -> None:
    """List or manage favorite recipes."""
    if ctx.invoked_subcommand is None:
        _run_command(ctx, FavoritesCommand, action="list")


@favorites_group.command("list")
@click.pass_context
def favorites_list(ctx: click.Context) -> None:
    """List favorite recipes."""
    _run_command(ctx, FavoritesCommand, action="list")


@favorites_group.command("add")
@click.argument("recipe_id", required=True)
@click.pass_context
def favorites_add(ctx: click.Context, recipe_id: str) -> None:
    """Add a recipe to favorites by ID."""
    _run_command(ctx, FavoritesCommand, action="add", recipe_id=recipe_id)


@favorites_group.command("remove")
@click.argument("recipe_id", required=True)
@click.pass_context
def favorites_remove(ctx: click.Context, recipe_id: str) -> None:
    """Remove a recipe from favorites by ID."""
    _run_command(ctx, FavoritesCommand, action="remove", recipe_id=recipe_id)


@cli.group("cache")
def cache_group() -> None:
    """Maintain the local response cache."""


@cache_group.command("clear")
@click.pass_context
def cache_clear(ctx: click.Context) -> None:
    """Remove expired cache entries."""
    _run_command(ctx, ClearCacheCommand)


@cli.command("menu")
@click.pass_context
def menu(ctx: click.Context) -> None:
    """Start the interactive menu."""
    config: Config = ctx.obj["config"]

    async def _run() -> None:
        client, fetcher, favorites, table_formatter, json_formatter = (
            utils.create_command_dependencies(config)
        )
        async with client as c:
            click.echo("Initializing Recipe Explorer...")
            if not await utils.initialize(fetcher.store, favorites):
                raise StorageError(f"Could not initialize data directory {config.data_dir}")
            click.echo("Welcome to Recipe Explorer!")
            await InteractiveMenu(
                c,
                fetcher,
                favorites,
                table_formatter,
                json_formatter,
                force_refresh=ctx.obj["force_refresh"],
            ).run()

    try:
        asyncio.run(_run())
    except StorageError as e:
        click.echo(f"Error: {e}", err=True)
        ctx.exit(EXIT_STARTUP_FAILURE)
    except (click.Abort, click.exceptions.Exit):
        raise
    except RecipeExplorerError as e:
        raise click.ClickException(str(e)) from e
    except Exception as e:
        raise click.ClickException(f"Unexpected error: {e}") from e
