"""Random recipe command implementation."""

from __future__ import annotations

import logging
from typing import Any, Dict, Optional

from ..exceptions import AllStrategiesFailedError, APIError
from ..resilience import first_completed
from .base_command import BaseCommand

logger = logging.getLogger(__name__)

RACE_SIZE = 3


class RandomCommand(BaseCommand):
    """Fire several random-recipe requests and keep whichever answers first."""

    async def pick(self, race_size: int = RACE_SIZE) -> Optional[Dict[str, Any]]:
        async def one() -> Dict[str, Any]:
            meal = await self.client.get_random()
            if not meal:
                raise APIError("No random recipe returned")
            return meal

        try:
            return await first_completed([one for _ in range(race_size)])
        except AllStrategiesFailedError as e:
            logger.error(f"Error discovering random recipes: {e}")
            return None

    async def execute(self, *, output_format: str = "table", **_: Any) -> str:
        recipe = await self.pick()
        if recipe is None:
            return await self._format_recipe(None, output_format)
        is_favorite = await self.favorites.contains(recipe.get("idMeal", ""))
        return await self._format_recipe(recipe, output_format, is_favorite=is_favorite)
