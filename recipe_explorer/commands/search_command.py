"""Search-by-name command implementation."""

from __future__ import annotations

from typing import Any, Dict, List

from ..exceptions import ValidationError
from .base_command import BaseCommand, cache_key


class SearchCommand(BaseCommand):
    """Command for searching recipes by name, served from the cache when possible."""

    async def search(self, query: str, force_refresh: bool = False) -> List[Dict[str, Any]]:
        query = (query or "").strip()
        if not query:
            raise ValidationError("Search term cannot be empty")

        return await self._cached_list(
            cache_key("search", query.lower()),
            lambda: self.client.fetch_by_name(query),
            force_refresh,
        )

    async def execute(
        self,
        *,
        query: str,
        output_format: str = "table",
        force_refresh: bool = False,
        **_: Any,
    ) -> str:
        """Execute the search command.

        Args:
            query: Search term.
            output_format: Output format ('table' or 'json').
            force_refresh: Bypass the cache.

        Returns:
            Formatted recipe list.
        """
        recipes = await self.search(query, force_refresh)
        return await self._format_list(recipes, output_format)
