"""JSON output formatter."""

import json
from typing import Any, Dict, List, Optional

from ..models import Recipe
from .base import BaseFormatter


class JsonFormatter(BaseFormatter):
    """Formats output as JSON."""

    def format_recipe_list(self, recipes: List[Dict[str, Any]], **kwargs: Any) -> str:
        """Format recipes as a JSON array of ``{id, name}`` objects.

        Args:
            recipes: Raw recipe records
            **kwargs: Additional formatting options (unused for JSON)

        Returns:
            JSON formatted string
        """
        items = [
            {"id": r.get("idMeal"), "name": r.get("strMeal")} for r in recipes or []
        ]
        return json.dumps(items, indent=2, default=str)

    def format_recipe(self, recipe: Optional[Dict[str, Any]], **kwargs: Any) -> str:
        """Format a recipe as JSON, with ingredients flattened into a list.

        Args:
            recipe: Raw recipe record or None
            **kwargs: ``related`` (list of raw records) and ``is_favorite`` (bool)

        Returns:
            JSON formatted string (``null`` when the recipe is missing)
        """
        if not recipe:
            return json.dumps(None)
        model = Recipe.model_validate(recipe)
        data: Dict[str, Any] = {
            "id": model.id,
            "name": model.name,
            "category": model.category,
            "area": model.area,
            "ingredients": [
                {"measure": measure, "ingredient": ingredient}
                for measure, ingredient in model.ingredients()
            ],
            "instructions": model.instructions,
            "youtube": model.youtube,
        }
        if "is_favorite" in kwargs:
            data["is_favorite"] = bool(kwargs["is_favorite"])
        if kwargs.get("related") is not None:
            data["related"] = [
                {"id": r.get("idMeal"), "name": r.get("strMeal")} for r in kwargs["related"]
            ]
        return json.dumps(data, indent=2, default=str)
