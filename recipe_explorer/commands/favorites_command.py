"""Favorites command implementation."""

from __future__ import annotations

from typing import Any, Optional

from ..exceptions import ValidationError
from .base_command import BaseCommand

NO_FAVORITES = "You have no favorite recipes"


class FavoritesCommand(BaseCommand):
    """List, add and remove favorite recipes."""

    async def add(self, recipe_id: str, force_refresh: bool = False) -> str:
        recipe = await self._get_recipe(recipe_id, force_refresh)
        if recipe is None:
            return f"Recipe {recipe_id.strip()} not found"
        name = recipe.get("strMeal") or recipe_id
        if await self.favorites.add(recipe):
            return f"Added {name} to favorites"
        return f"{name} is already in favorites"

    async def remove(self, recipe_id: str) -> str:
        recipe_id = (recipe_id or "").strip()
        if not recipe_id:
            raise ValidationError("Recipe ID cannot be empty")
        if await self.favorites.remove(recipe_id):
            return f"Removed recipe {recipe_id} from favorites"
        return f"Recipe {recipe_id} is not in favorites"

    async def execute(
        self,
        *,
        action: str = "list",
        recipe_id: Optional[str] = None,
        output_format: str = "table",
        force_refresh: bool = False,
        **_: Any,
    ) -> str:
        """Execute a favorites action.

        Args:
            action: 'list', 'add' or 'remove'.
            recipe_id: Recipe ID for 'add' and 'remove'.
            output_format: Output format for 'list'.
            force_refresh: Bypass the cache when resolving a recipe to add.

        Returns:
            Formatted favorites list or a status message.
        """
        if action == "add":
            return await self.add(recipe_id or "", force_refresh)
        if action == "remove":
            return await self.remove(recipe_id or "")

        recipes = await self.favorites.list()
        if not recipes and output_format.lower() != "json":
            return NO_FAVORITES
        return await self._format_list(recipes, output_format, title="Favorite Recipes")
