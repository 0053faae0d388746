"""Base class shared by all commands."""

from __future__ import annotations

import inspect
import logging
from abc import ABC, abstractmethod
from typing import Any, Awaitable, Callable, Dict, List, Optional

from ..cache import CachedFetcher
from ..client import MealDBClient
from ..exceptions import AllStrategiesFailedError, APIError, NotFoundError, ValidationError
from ..favorites import FavoritesStore
from ..formatters import JsonFormatter, TableFormatter
from ..resilience import try_strategies

logger = logging.getLogger(__name__)


def cache_key(kind: str, value: str) -> str:
    """Build a cache key such as ``search_chicken`` or ``recipe_52772``."""
    return f"{kind}_{value}"


class BaseCommand(ABC):
    """Holds the collaborators every command needs and the shared helpers."""

    def __init__(
        self,
        client: MealDBClient,
        fetcher: CachedFetcher,
        favorites: FavoritesStore,
        table_formatter: TableFormatter,
        json_formatter: JsonFormatter,
    ) -> None:
        self.client = client
        self.fetcher = fetcher
        self.favorites = favorites
        self.table_formatter = table_formatter
        self.json_formatter = json_formatter

    @abstractmethod
    async def execute(self, **kwargs: Any) -> str:
        """Run the command and return the text to print."""
        pass

    def _formatter(self, output_format: str) -> TableFormatter | JsonFormatter:
        if output_format.lower() == "json":
            return self.json_formatter
        return self.table_formatter

    async def _format_list(self, recipes: List[Dict[str, Any]], output_format: str, **kwargs: Any) -> str:
        formatted = self._formatter(output_format).format_recipe_list(recipes, **kwargs)
        return await self._maybe_await(formatted)

    async def _format_recipe(
        self, recipe: Optional[Dict[str, Any]], output_format: str, **kwargs: Any
    ) -> str:
        formatted = self._formatter(output_format).format_recipe(recipe, **kwargs)
        return await self._maybe_await(formatted)

    async def _maybe_await(self, value: Any) -> Any:
        # Formatters are plain callables, but tests may substitute AsyncMocks
        if inspect.isawaitable(value):
            return await value
        return value

    async def _cached_list(
        self,
        key: str,
        operation: Callable[[], Awaitable[List[Dict[str, Any]]]],
        force_refresh: bool = False,
    ) -> List[Dict[str, Any]]:
        """Recipes for ``key`` from the cache or ``operation``.

        A failed fetch with nothing cached yields ``[]``, which is not stored.
        """
        try:
            recipes = await self.fetcher.get_or_fetch(key, operation, force_refresh)
        except APIError as e:
            logger.error(f"Could not load {key}: {e}")
            return []
        return recipes or []

    async def _get_recipe(self, recipe_id: str, force_refresh: bool = False) -> Optional[Dict[str, Any]]:
        """Resolve a recipe from the cache/API, falling back to the saved favorite copy."""
        recipe_id = (recipe_id or "").strip()
        if not recipe_id:
            raise ValidationError("Recipe ID cannot be empty")

        async def lookup() -> Dict[str, Any]:
            recipe = await self.client.fetch_by_id(recipe_id)
            if not recipe:
                raise NotFoundError(f"Recipe {recipe_id} not found in API", status_code=404)
            return recipe

        async def from_api() -> Dict[str, Any]:
            return await self.fetcher.get_or_fetch(
                cache_key("recipe", recipe_id), lookup, force_refresh
            )

        async def from_favorites() -> Dict[str, Any]:
            recipe = await self.favorites.find_by_id(recipe_id)
            if not recipe:
                raise NotFoundError(f"Recipe {recipe_id} not found in favorites")
            return recipe

        try:
            return await try_strategies([from_api, from_favorites])
        except AllStrategiesFailedError as e:
            logger.info(str(e))
            return None
