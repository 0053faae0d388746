"""Favorite recipes persisted as a JSON array."""

from __future__ import annotations

import asyncio
import json
import logging
from pathlib import Path
from typing import Any, Dict, List, Optional

logger = logging.getLogger(__name__)

RECIPE_ID_FIELD = "idMeal"


class FavoritesStore:
    """Ordered list of favorite recipes, unique by id.

    The file is re-read on every call; nothing is kept in memory.
    """

    def __init__(self, path: Path, id_field: str = RECIPE_ID_FIELD):
        self.path = Path(path)
        self.id_field = id_field
        self._lock = asyncio.Lock()

    async def ensure_initialized(self) -> None:
        """Create an empty favorites file if missing. Never raises."""
        await asyncio.to_thread(self._initialize)

    async def list(self) -> List[Dict[str, Any]]:
        """Return all favorites in insertion order, ``[]`` if unreadable."""
        await self.ensure_initialized()
        try:
            return await asyncio.to_thread(self._load)
        except (OSError, ValueError) as e:
            logger.error(f"Error reading favorites file {self.path}: {e}")
            return []

    async def add(self, recipe: Dict[str, Any]) -> bool:
        """Append ``recipe`` unless a favorite with the same id exists.

        Returns:
            True if added, False if already present or on failure.
        """
        recipe_id = recipe.get(self.id_field)
        if recipe_id is None:
            logger.error(f"Cannot add favorite without '{self.id_field}'")
            return False

        async with self._lock:
            favorites = await self.list()
            if any(fav.get(self.id_field) == recipe_id for fav in favorites):
                logger.info(f"Recipe {recipe.get('strMeal', recipe_id)} is already in favorites")
                return False
            favorites.append(recipe)
            if not await self._save(favorites):
                return False

        logger.info(f"Added {recipe.get('strMeal', recipe_id)} to favorites")
        return True

    async def remove(self, recipe_id: str) -> bool:
        """Remove the favorite with ``recipe_id``.

        Returns:
            True if removed, False if not found or on failure.
        """
        async with self._lock:
            favorites = await self.list()
            remaining = [fav for fav in favorites if fav.get(self.id_field) != recipe_id]
            if len(remaining) == len(favorites):
                return False
            return await self._save(remaining)

    async def contains(self, recipe_id: str) -> bool:
        return await self.find_by_id(recipe_id) is not None

    async def find_by_id(self, recipe_id: str) -> Optional[Dict[str, Any]]:
        favorites = await self.list()
        return next((fav for fav in favorites if fav.get(self.id_field) == recipe_id), None)

    async def _save(self, favorites: List[Dict[str, Any]]) -> bool:
        try:
            await asyncio.to_thread(self._dump, favorites)
        except (OSError, TypeError, ValueError) as e:
            logger.error(f"Error writing favorites file {self.path}: {e}")
            return False
        return True

    def _initialize(self) -> None:
        if self.path.exists():
            return
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            self.path.write_text("[]", encoding="utf-8")
            logger.info(f"Created favorites file {self.path}")
        except OSError as e:
            logger.error(f"Error creating favorites file {self.path}: {e}")

    def _load(self) -> List[Dict[str, Any]]:
        text = self.path.read_text(encoding="utf-8")
        if not text.strip():
            return []
        data = json.loads(text)
        if not isinstance(data, list):
            raise ValueError("favorites document is not a JSON array")
        return [item for item in data if isinstance(item, dict)]

    def _dump(self, favorites: List[Dict[str, Any]]) -> None:
        text = json.dumps(favorites, indent=2)
        self.path.write_text(text, encoding="utf-8")
