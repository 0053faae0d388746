"""Interactive console menu.

Prompts are read with ``click.prompt``/``click.confirm``, which block the event
loop while waiting for input. That is fine for a single interactive user.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional, Type, TypeVar

import click

from .cache import CachedFetcher
from .client import MealDBClient
from .commands import (
    BaseCommand,
    DetailsCommand,
    FavoritesCommand,
    IngredientCommand,
    LettersCommand,
    NO_FAVORITES,
    RandomCommand,
    SearchCommand,
)
from .exceptions import OperationTimeoutError, RecipeExplorerError
from .favorites import FavoritesStore
from .formatters import JsonFormatter, TableFormatter

logger = logging.getLogger(__name__)

C = TypeVar("C", bound=BaseCommand)

MENU_TEXT = """
===== RECIPE EXPLORER =====
1. Search recipes
2. View recipe details by ID
3. Explore recipes by first letter
4. Search by ingredient
5. View favorites
6. Discover random recipe
7. Exit"""

EXIT_CHOICE = 7


class InteractiveMenu:
    """The looping seven-option menu."""

    def __init__(
        self,
        client: MealDBClient,
        fetcher: CachedFetcher,
        favorites: FavoritesStore,
        table_formatter: TableFormatter,
        json_formatter: JsonFormatter,
        force_refresh: bool = False,
    ) -> None:
        self._deps = (client, fetcher, favorites, table_formatter, json_formatter)
        self.favorites = favorites
        self.table_formatter = table_formatter
        self.force_refresh = force_refresh

    def _command(self, command_cls: Type[C]) -> C:
        return command_cls(*self._deps)

    async def run(self) -> None:
        handlers = {
            1: self.search_recipes,
            2: self.view_recipe_details,
            3: self.explore_by_first_letter,
            4: self.search_by_ingredient,
            5: self.view_favorites,
            6: self.discover_random,
        }
        while True:
            click.echo(MENU_TEXT)
            choice = click.prompt(
                f"Enter your choice (1-{EXIT_CHOICE})", type=click.IntRange(1, EXIT_CHOICE)
            )
            if choice == EXIT_CHOICE:
                click.echo("Thank you for using Recipe Explorer!")
                return
            try:
                await handlers[choice]()
            except RecipeExplorerError as e:
                click.echo(str(e))

    async def search_recipes(self) -> None:
        query = click.prompt("Enter search term", default="", show_default=False)
        if query.strip():
            click.echo(f'Searching for "{query.strip()}"...')
        recipes = await self._command(SearchCommand).search(query, self.force_refresh)
        await self._show_list_and_offer_details(recipes)

    async def view_recipe_details(self, recipe_id: Optional[str] = None) -> None:
        if recipe_id is None:
            recipe_id = click.prompt("Enter recipe ID", default="", show_default=False)
        if recipe_id.strip():
            click.echo(f"Fetching details for recipe {recipe_id.strip()}...")

        recipe, related, is_favorite = await self._command(DetailsCommand).load(
            recipe_id, self.force_refresh
        )
        if recipe is None:
            click.echo(self.table_formatter.format_recipe(None))
            return
        click.echo(self.table_formatter.format_recipe(recipe, related=related, is_favorite=is_favorite))
        await self._offer_favorite_toggle(recipe, is_favorite)

    async def explore_by_first_letter(self) -> None:
        letters = click.prompt(
            "Enter up to 3 letters to search (e.g. abc)", default="", show_default=False
        )
        recipes = await self._command(LettersCommand).search(letters, self.force_refresh)
        await self._show_list_and_offer_details(recipes)

    async def search_by_ingredient(self) -> None:
        ingredient = click.prompt("Enter an ingredient", default="", show_default=False)
        if ingredient.strip():
            click.echo(f"Searching for recipes with {ingredient.strip()}...")
        try:
            recipes = await self._command(IngredientCommand).search(
                ingredient, force_refresh=self.force_refresh
            )
        except OperationTimeoutError as e:
            click.echo(str(e))
            return
        await self._show_list_and_offer_details(recipes)

    async def view_favorites(self) -> None:
        recipes = await self.favorites.list()
        if not recipes:
            click.echo(NO_FAVORITES)
            return
        await self._show_list_and_offer_details(recipes, title="Favorite Recipes")

    async def discover_random(self) -> None:
        click.echo("Fetching random recipes...")
        recipe = await self._command(RandomCommand).pick()
        if recipe is None:
            click.echo(self.table_formatter.format_recipe(None))
            return
        is_favorite = await self.favorites.contains(recipe.get("idMeal", ""))
        click.echo(self.table_formatter.format_recipe(recipe, is_favorite=is_favorite))
        await self._offer_favorite_toggle(recipe, is_favorite)

    async def _show_list_and_offer_details(
        self, recipes: List[Dict[str, Any]], **kwargs: Any
    ) -> None:
        click.echo(self.table_formatter.format_recipe_list(recipes, **kwargs))
        if not recipes:
            return
        if not click.confirm("Would you like to view details for a recipe?", default=False):
            return
        index = click.prompt(
            f"Enter recipe number (1-{len(recipes)})",
            type=click.IntRange(1, len(recipes)),
        )
        await self.view_recipe_details(str(recipes[index - 1].get("idMeal", "")))

    async def _offer_favorite_toggle(self, recipe: Dict[str, Any], is_favorite: bool) -> None:
        command = self._command(FavoritesCommand)
        recipe_id = str(recipe.get("idMeal", ""))
        if is_favorite:
            if click.confirm("Remove this recipe from favorites?", default=False):
                click.echo(await command.remove(recipe_id))
        elif click.confirm("Add this recipe to favorites?", default=False):
            if await self.favorites.add(recipe):
                click.echo(f"Added {recipe.get('strMeal', recipe_id)} to favorites")
            else:
                click.echo("Could not add recipe to favorites")
