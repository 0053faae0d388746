"""Data models for Recipe Explorer using Pydantic."""

from typing import Any, List, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field

MAX_INGREDIENTS = 20


class CacheEntry(BaseModel):
    """A cached payload and the moment it was written."""

    timestamp: float = Field(..., description="Unix time (seconds) the entry was written")
    payload: Any = Field(None, description="Cached JSON value")

    def age(self, now: float) -> float:
        return now - self.timestamp

    def is_fresh(self, now: float, ttl: float) -> bool:
        """Fresh iff the entry is younger than ``ttl`` seconds."""
        return self.age(now) < ttl


class Recipe(BaseModel):
    """A TheMealDB meal record.

    Only the fields the console needs are declared; everything else the API
    returns is kept as extra data so the record round-trips unchanged.
    """

    model_config = ConfigDict(extra="allow", populate_by_name=True)

    id: str = Field("", alias="idMeal", description="Unique meal identifier")
    name: str = Field("", alias="strMeal", description="Meal name")
    category: Optional[str] = Field(None, alias="strCategory")
    area: Optional[str] = Field(None, alias="strArea")
    instructions: Optional[str] = Field(None, alias="strInstructions")
    youtube: Optional[str] = Field(None, alias="strYoutube")
    thumbnail: Optional[str] = Field(None, alias="strMealThumb")

    def ingredients(self) -> List[Tuple[str, str]]:
        """Return ``(measure, ingredient)`` pairs, skipping blank slots."""
        extra = self.model_extra or {}
        pairs: List[Tuple[str, str]] = []
        for i in range(1, MAX_INGREDIENTS + 1):
            ingredient = extra.get(f"strIngredient{i}")
            if not ingredient or not str(ingredient).strip():
                continue
            measure = extra.get(f"strMeasure{i}") or ""
            pairs.append((str(measure).strip(), str(ingredient).strip()))
        return pairs
