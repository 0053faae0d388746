"""Shared helpers for the CLI: logging setup, dependency wiring and startup."""

from __future__ import annotations

import asyncio
import logging
from typing import Optional, Tuple

from .cache import CachedFetcher, CacheStore
from .client import MealDBClient
from .config import Config
from .favorites import FavoritesStore
from .formatters import JsonFormatter, TableFormatter

logger = logging.getLogger(__name__)

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def configure_logging(level_name: Optional[str], default_to_warning: bool = False) -> None:
    """Configure root logging once.

    Args:
        level_name: Level name such as "INFO"; None keeps the default.
        default_to_warning: Use WARNING when no level is given, so library
            chatter stays out of the console.
    """
    if level_name:
        level = getattr(logging, level_name.upper(), logging.WARNING)
    elif default_to_warning:
        level = logging.WARNING
    else:
        return

    root = logging.getLogger()
    if not root.handlers:
        logging.basicConfig(level=level, format=LOG_FORMAT)
    root.setLevel(level)
    # httpx logs every request at INFO
    logging.getLogger("httpx").setLevel(max(level, logging.WARNING))


def create_command_dependencies(
    config: Config,
) -> Tuple[MealDBClient, CachedFetcher, FavoritesStore, TableFormatter, JsonFormatter]:
    """Build the collaborators every command needs.

    Returns:
        (client, fetcher, favorites, table_formatter, json_formatter)
    """
    client = MealDBClient(config)
    store = CacheStore(config.cache_file, ttl=config.cache_ttl)
    fetcher = CachedFetcher(store)
    favorites = FavoritesStore(config.favorites_file)
    return client, fetcher, favorites, TableFormatter(), JsonFormatter()


async def initialize(store: CacheStore, favorites: FavoritesStore) -> bool:
    """Prepare both data files and drop expired cache entries.

    Returns:
        True when both files exist afterwards, False otherwise.
    """
    await asyncio.gather(store.ensure_initialized(), favorites.ensure_initialized())

    missing = [p for p in (store.path, favorites.path) if not p.exists()]
    if missing:
        logger.error(f"Could not initialize data files: {', '.join(map(str, missing))}")
        return False

    removed = await store.evict_expired()
    if removed:
        logger.info(f"Cleared {removed} expired cache entries at startup")
    return True
