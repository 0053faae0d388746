"""Async client for TheMealDB JSON API."""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional, Sequence

import httpx

from .config import Config
from .exceptions import APIError, NotFoundError, OperationTimeoutError
from .resilience import retry, run_with_concurrency, with_timeout

logger = logging.getLogger(__name__)

Meal = Dict[str, Any]

_TIMED_OUT = object()


def ingredient_timeout_message(ingredient: str) -> str:
    return (
        f'The request for meals with "{ingredient}" took too long. '
        "Please try again later."
    )


class MealDBClient:
    """Thin wrappers around each TheMealDB endpoint.

    Each lookup comes in two flavours. The ``fetch_*`` methods raise
    ``APIError`` on network or HTTP failures, so callers that cache results
    can tell a failure from an empty answer. The ``search_*``/``get_*``
    methods never raise; they log the error and return an empty list or
    ``None`` instead.
    """

    def __init__(self, config: Config, session: Optional[httpx.AsyncClient] = None):
        self.config = config
        self.base_url = config.base_url.rstrip("/")
        self.session = session or httpx.AsyncClient(
            timeout=httpx.Timeout(config.timeout),
            headers={
                "User-Agent": "recipe-explorer/0.1.0",
                "Accept": "application/json",
            },
            follow_redirects=True,
        )

    async def fetch_by_name(self, query: str) -> List[Meal]:
        """Meals whose name contains ``query``.

        Raises:
            APIError: If the request failed.
        """
        return _meals(await self._get_json("search.php", {"s": query}))

    async def search_by_name(self, query: str) -> List[Meal]:
        """Search for meals whose name contains ``query``."""
        try:
            return await self.fetch_by_name(query)
        except APIError as e:
            logger.error(f"Error searching meals by name '{query}': {e}")
            return []

    async def fetch_by_id(self, meal_id: str, attempts: Optional[int] = None) -> Optional[Meal]:
        """Look up a single meal, retrying transient failures.

        Args:
            meal_id: Meal identifier.
            attempts: Total number of tries (defaults to ``config.retry_attempts``).

        Returns:
            The meal, or None when it does not exist.

        Raises:
            APIError: If every attempt failed.
        """
        attempts = attempts if attempts is not None else self.config.retry_attempts

        async def lookup() -> Optional[Meal]:
            try:
                data = await self._get_json("lookup.php", {"i": meal_id})
            except NotFoundError:
                return None
            meals = _meals(data)
            return meals[0] if meals else None

        try:
            return await retry(
                lookup,
                attempts=attempts,
                delay=self.config.retry_delay,
                retry_on=(APIError,),
            )
        except APIError as e:
            logger.warning(f"Get meal by id {meal_id} failed after {attempts} attempts: {e}")
            raise

    async def get_by_id(self, meal_id: str, attempts: Optional[int] = None) -> Optional[Meal]:
        """Like ``fetch_by_id`` but returns None when every attempt failed."""
        try:
            return await self.fetch_by_id(meal_id, attempts)
        except APIError as e:
            logger.error(f"Error fetching meal {meal_id}: {e}")
            return None

    async def fetch_by_first_letters(self, letters: Sequence[str]) -> List[Meal]:
        """Fetch meals for each first letter in parallel and merge them.

        Duplicates (same ``idMeal``) are dropped; the first occurrence wins.
        A letter whose request fails is skipped.

        Raises:
            APIError: If the request for every letter failed.
        """

        def by_letter(letter: str):
            async def fetch() -> List[Meal]:
                return _meals(await self._get_json("search.php", {"f": letter[:1]}))

            return fetch

        operations = [by_letter(letter) for letter in letters if letter]
        results = await run_with_concurrency(operations, self.config.concurrency)
        if operations and all(meals is None for meals in results):
            raise APIError(f"Every request for letters {list(letters)} failed")

        seen: set[str] = set()
        unique: List[Meal] = []
        for meals in results:
            for meal in meals or []:
                meal_id = meal.get("idMeal")
                if meal_id in seen:
                    continue
                seen.add(meal_id)
                unique.append(meal)
        logger.debug(f"Letters {list(letters)} returned {len(unique)} unique meals")
        return unique

    async def search_by_first_letters(self, letters: Sequence[str]) -> List[Meal]:
        try:
            return await self.fetch_by_first_letters(letters)
        except APIError as e:
            logger.error(f"Error searching meals by first letters: {e}")
            return []

    async def fetch_by_ingredient(
        self, ingredient: str, timeout: Optional[float] = None
    ) -> List[Meal]:
        """Filter meals by main ingredient, giving up after ``timeout`` seconds.

        Raises:
            OperationTimeoutError: If the request took too long; the message
                is the advisory shown to the user.
            APIError: If the request failed before the deadline.
        """
        timeout = timeout if timeout is not None else self.config.ingredient_timeout
        errors: List[APIError] = []

        async def fetch() -> List[Meal]:
            try:
                return _meals(await self._get_json("filter.php", {"i": ingredient}))
            except APIError as e:
                errors.append(e)
                raise

        result = await with_timeout(fetch, timeout, fallback=_TIMED_OUT)
        if errors:
            raise errors[0]
        if result is _TIMED_OUT:
            raise OperationTimeoutError(ingredient_timeout_message(ingredient))
        return result

    async def search_by_ingredient(
        self, ingredient: str, timeout: Optional[float] = None
    ) -> List[Meal] | str:
        """Filter meals by main ingredient.

        Returns:
            The matching meals, or an advisory message string if the request
            took too long.
        """
        try:
            return await self.fetch_by_ingredient(ingredient, timeout)
        except OperationTimeoutError as e:
            return str(e)
        except APIError as e:
            logger.error(f"Error fetching meals by ingredient '{ingredient}': {e}")
            return []

    async def get_related(self, recipe: Optional[Meal], limit: int = 3) -> List[Meal]:
        """Other meals from the same category as ``recipe``, at most ``limit``."""
        category = (recipe or {}).get("strCategory")
        if not category:
            return []
        try:
            data = await self._get_json("filter.php", {"c": category})
        except APIError as e:
            logger.error(f"Error fetching related recipes for category '{category}': {e}")
            return []
        related = [m for m in _meals(data) if m.get("idMeal") != recipe.get("idMeal")]
        return related[:limit]

    async def get_random(self) -> Optional[Meal]:
        try:
            meals = _meals(await self._get_json("random.php"))
        except APIError as e:
            logger.error(f"Error fetching random meal: {e}")
            return None
        return meals[0] if meals else None

    async def _get_json(self, endpoint: str, params: Optional[Dict[str, str]] = None) -> Dict[str, Any]:
        """GET ``endpoint`` and decode the JSON body.

        Raises:
            NotFoundError: On HTTP 404.
            APIError: On any other non-2xx status, network failures, timeouts
                and bodies that are not a JSON object.
        """
        url = f"{self.base_url}/{endpoint}"
        try:
            response = await self.session.get(url, params=params)
        except httpx.TimeoutException as e:
            raise APIError(f"Request timed out: {url}") from e
        except httpx.HTTPError as e:
            raise APIError(f"Network error fetching {url}: {e}") from e

        if response.status_code == 404:
            raise NotFoundError(f"Not found: {url}", status_code=404)
        if response.status_code >= 400:
            raise APIError(f"Response status: {response.status_code}", status_code=response.status_code)
        try:
            data = response.json()
        except ValueError as e:
            raise APIError(f"Invalid JSON from {url}: {e}") from e
        if not isinstance(data, dict):
            raise APIError(f"Unexpected response body from {url}")
        return data

    async def close(self) -> None:
        """Close the HTTP session."""
        await self.session.aclose()
        logger.debug("MealDB HTTP session closed")

    async def __aenter__(self) -> "MealDBClient":
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.close()


def _meals(data: Dict[str, Any]) -> List[Meal]:
    # The API answers {"meals": null} when nothing matches
    meals = data.get("meals")
    return list(meals) if isinstance(meals, list) else []
