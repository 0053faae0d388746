"""Search-by-ingredient command implementation."""

from __future__ import annotations

from typing import Any, Dict, List, Optional

from ..exceptions import OperationTimeoutError, ValidationError
from .base_command import BaseCommand, cache_key


class IngredientCommand(BaseCommand):
    """Command for filtering recipes by ingredient under a time limit.

    A timed-out request is never cached; an older cached answer is used
    instead when one exists.
    """

    async def search(
        self,
        ingredient: str,
        timeout: Optional[float] = None,
        force_refresh: bool = False,
    ) -> List[Dict[str, Any]]:
        """Return matching recipes.

        Raises:
            ValidationError: If the ingredient is blank.
            OperationTimeoutError: If the request timed out and nothing is
                cached; the message is meant for the user.
        """
        ingredient = (ingredient or "").strip()
        if not ingredient:
            raise ValidationError("Ingredient cannot be empty")

        return await self._cached_list(
            cache_key("ingredient", ingredient.lower()),
            lambda: self.client.fetch_by_ingredient(ingredient, timeout),
            force_refresh,
        )

    async def execute(
        self,
        *,
        ingredient: str,
        timeout: Optional[float] = None,
        output_format: str = "table",
        force_refresh: bool = False,
        **_: Any,
    ) -> str:
        try:
            recipes = await self.search(ingredient, timeout, force_refresh)
        except OperationTimeoutError as e:
            return str(e)
        return await self._format_list(recipes, output_format)
