"""Explore-by-first-letter command implementation."""

from __future__ import annotations

from typing import Any, Dict, List

from ..exceptions import ValidationError
from .base_command import BaseCommand, cache_key

MAX_LETTERS = 3


def unique_letters(letters: str, limit: int = MAX_LETTERS) -> List[str]:
    """Lower-cased unique letters in input order, at most ``limit``."""
    seen: List[str] = []
    for char in (letters or "").lower():
        if char.isalnum() and char not in seen:
            seen.append(char)
    return seen[:limit]


class LettersCommand(BaseCommand):
    """Command for listing recipes whose names start with any of a few letters."""

    async def search(self, letters: str, force_refresh: bool = False) -> List[Dict[str, Any]]:
        chosen = unique_letters(letters)
        if not chosen:
            raise ValidationError("Please enter at least one letter")

        return await self._cached_list(
            cache_key("letters", "".join(sorted(chosen))),
            lambda: self.client.fetch_by_first_letters(chosen),
            force_refresh,
        )

    async def execute(
        self,
        *,
        letters: str,
        output_format: str = "table",
        force_refresh: bool = False,
        **_: Any,
    ) -> str:
        recipes = await self.search(letters, force_refresh)
        return await self._format_list(recipes, output_format)
