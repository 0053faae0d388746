"""Cache maintenance command implementation."""

from __future__ import annotations

from typing import Any

from .base_command import BaseCommand


class ClearCacheCommand(BaseCommand):
    """Drop expired entries from the response cache."""

    async def execute(self, **_: Any) -> str:
        removed = await self.fetcher.store.evict_expired()
        noun = "entry" if removed == 1 else "entries"
        return f"Removed {removed} expired cache {noun}"
