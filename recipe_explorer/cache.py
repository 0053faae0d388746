"""File-backed TTL cache for API responses.

The whole cache lives in one JSON document shaped like
``{key: {"timestamp": <unix seconds>, "payload": <value>}}``. Every call reads
the document from disk and every write rewrites it in full. Expired entries are
kept until ``evict_expired`` runs so ``CachedFetcher`` can still fall back to
them when a fetch fails.
"""

from __future__ import annotations

import asyncio
import json
import logging
import time
from pathlib import Path
from typing import Any, Awaitable, Callable, Dict, Optional

from pydantic import ValidationError as PydanticValidationError

from .config import CACHE_TTL_SECONDS
from .models import CacheEntry

logger = logging.getLogger(__name__)


class CacheStore:
    """Key/value store with a time-to-live, persisted as a single JSON file.

    Not safe across processes; within one event loop read-modify-write
    sequences are serialized.
    """

    def __init__(
        self,
        path: Path,
        ttl: float = CACHE_TTL_SECONDS,
        clock: Callable[[], float] = time.time,
    ):
        self.path = Path(path)
        self.ttl = ttl
        self._clock = clock
        self._lock = asyncio.Lock()

    async def ensure_initialized(self) -> None:
        """Create the cache file (and its directory) if missing. Never raises."""
        await asyncio.to_thread(self._initialize)

    async def get(self, key: str) -> Optional[Any]:
        """Get the cached payload for ``key`` if it has not expired."""
        try:
            document = await asyncio.to_thread(self._load)
        except (OSError, ValueError) as e:
            logger.warning(f"Get from cache error for key {key}: {e}")
            return None

        entry = _parse_entry(document.get(key))
        if entry is None:
            return None
        if not entry.is_fresh(self._clock(), self.ttl):
            logger.info(f"Cache expired for key: {key}")
            return None
        logger.debug(f"Key found in cache: {key}")
        return entry.payload

    async def get_stale(self, key: str) -> Optional[Any]:
        """Get the payload for ``key`` whether or not it has expired."""
        try:
            document = await asyncio.to_thread(self._load)
        except (OSError, ValueError) as e:
            logger.error(f"Error accessing expired cache for key {key}: {e}")
            return None
        entry = _parse_entry(document.get(key))
        return entry.payload if entry is not None else None

    async def put(self, key: str, payload: Any) -> bool:
        """Store ``payload`` under ``key`` with the current timestamp.

        Returns:
            True if the document was written, False on any I/O or
            serialization failure.
        """
        await self.ensure_initialized()
        async with self._lock:
            try:
                document = await asyncio.to_thread(self._load)
            except ValueError as e:
                logger.warning(f"Cache file {self.path} is corrupt, starting fresh: {e}")
                document = {}
            except OSError as e:
                logger.error(f"Could not read cache file {self.path}: {e}")
                return False

            entry = CacheEntry(timestamp=self._clock(), payload=payload)
            document[key] = entry.model_dump()
            try:
                await asyncio.to_thread(self._dump, document)
            except (OSError, TypeError, ValueError) as e:
                logger.error(f"Could not save key {key} to cache: {e}")
                return False
        return True

    async def evict_expired(self) -> int:
        """Remove entries whose age is at least the TTL.

        Malformed entries are dropped as well but not counted. The file is
        only rewritten if something was removed.

        Returns:
            Number of expired entries removed, 0 on failure.
        """
        async with self._lock:
            try:
                document = await asyncio.to_thread(self._load)
            except (OSError, ValueError) as e:
                logger.error(f"Error reading cache file {self.path}: {e}")
                return 0

            now = self._clock()
            expired = []
            malformed = []
            for key, raw in document.items():
                entry = _parse_entry(raw)
                if entry is None:
                    malformed.append(key)
                elif not entry.is_fresh(now, self.ttl):
                    expired.append(key)
            if not expired and not malformed:
                return 0

            for key in expired + malformed:
                del document[key]
            try:
                await asyncio.to_thread(self._dump, document)
            except (OSError, TypeError, ValueError) as e:
                logger.error(f"Error rewriting cache file {self.path}: {e}")
                return 0

        logger.info(f"Removed {len(expired)} expired cache entries")
        return len(expired)

    def _initialize(self) -> None:
        if self.path.exists():
            return
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            self.path.write_text(json.dumps({}, indent=2), encoding="utf-8")
            logger.info(f"Created cache file {self.path}")
        except OSError as e:
            logger.error(f"Error creating cache file {self.path}: {e}")

    def _load(self) -> Dict[str, Any]:
        text = self.path.read_text(encoding="utf-8")
        document = json.loads(text) if text.strip() else {}
        if not isinstance(document, dict):
            raise ValueError("cache document is not a JSON object")
        return document

    def _dump(self, document: Dict[str, Any]) -> None:
        # Serialize before opening so a bad payload cannot truncate the file
        text = json.dumps(document, indent=2)
        self.path.write_text(text, encoding="utf-8")


def _parse_entry(raw: Any) -> Optional[CacheEntry]:
    if raw is None:
        return None
    try:
        return CacheEntry.model_validate(raw)
    except PydanticValidationError:
        return None


class CachedFetcher:
    """Serve data from a ``CacheStore`` and fetch it on a miss.

    When a fetch fails the fetcher falls back to an expired entry for the same
    key before giving up.
    """

    def __init__(self, store: CacheStore):
        self.store = store

    async def get_or_fetch(
        self,
        key: str,
        operation: Callable[[], Awaitable[Any]],
        force_refresh: bool = False,
    ) -> Any:
        """Return cached data for ``key`` or the result of ``operation()``.

        Args:
            key: Cache key.
            operation: Zero-argument coroutine function producing fresh data.
            force_refresh: Skip the cache read and the stale fallback.

        Returns:
            The fresh cached payload, the operation's result, or a stale
            payload if the operation failed.

        Raises:
            Exception: Whatever ``operation`` raised, when no cached copy exists
                (or ``force_refresh`` was set).
        """
        if not force_refresh:
            cached = await self.store.get(key)
            if cached is not None:
                logger.info(f"Serving {key} from cache")
                return cached

        logger.info(f"Fetching fresh data for key: {key}")
        try:
            fresh = await operation()
        except Exception as e:
            logger.error(f"Error fetching {key}: {e}")
            if not force_refresh:
                stale = await self.store.get_stale(key)
                if stale is not None:
                    logger.warning(f"Using expired cache as fallback for key: {key}")
                    return stale
            raise

        if not await self.store.put(key, fresh):
            logger.warning(f"Fresh data for {key} could not be cached")
        return fresh
