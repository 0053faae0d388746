"""Recipe details command implementation."""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional, Tuple

from .base_command import BaseCommand

logger = logging.getLogger(__name__)

RELATED_LIMIT = 3


class DetailsCommand(BaseCommand):
    """Show one recipe, then look up related recipes from its category."""

    async def load(
        self, recipe_id: str, force_refresh: bool = False
    ) -> Tuple[Optional[Dict[str, Any]], List[Dict[str, Any]], bool]:
        """Return ``(recipe, related, is_favorite)``; recipe is None if not found."""
        recipe = await self._get_recipe(recipe_id, force_refresh)
        if recipe is None:
            return None, [], False

        is_favorite = await self.favorites.contains(recipe.get("idMeal", recipe_id.strip()))
        related = await self._related(recipe)
        return recipe, related, is_favorite

    async def _related(self, recipe: Dict[str, Any]) -> List[Dict[str, Any]]:
        # Follow-up request chained on the recipe's category
        try:
            return await self.client.get_related(recipe, RELATED_LIMIT)
        except Exception as e:
            logger.error(f"Error fetching related recipes: {e}")
            return []

    async def execute(
        self,
        *,
        recipe_id: str,
        output_format: str = "table",
        force_refresh: bool = False,
        **_: Any,
    ) -> str:
        """Execute the details command.

        Args:
            recipe_id: Recipe ID to show.
            output_format: Output format ('table' or 'json').
            force_refresh: Bypass the cache for the recipe lookup.

        Returns:
            Formatted recipe with related recipes, or "Recipe not found".
        """
        recipe, related, is_favorite = await self.load(recipe_id, force_refresh)
        if recipe is None:
            return await self._format_recipe(None, output_format)
        return await self._format_recipe(
            recipe, output_format, related=related, is_favorite=is_favorite
        )
