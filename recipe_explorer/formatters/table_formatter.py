"""Table output formatter using Rich."""

from typing import Any, Dict, List, Optional

from rich import box
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from ..models import Recipe
from .base import BaseFormatter

NO_RECIPES = "No recipes found"
RECIPE_NOT_FOUND = "Recipe not found"


class TableFormatter(BaseFormatter):
    """Formats output as Rich tables."""

    def __init__(self, console: Optional[Console] = None):
        """Initialize the table formatter.

        Args:
            console: Rich console instance. If None, creates a new one.
        """
        self.console = console or Console(width=120)

    def format_recipe_list(self, recipes: List[Dict[str, Any]], **kwargs: Any) -> str:
        """Format recipes as a numbered Rich table.

        Args:
            recipes: Raw recipe records
            **kwargs: Additional options:
                - title: str - Table title (default "Recipe List")

        Returns:
            Formatted table string, or "No recipes found"
        """
        if not recipes:
            return NO_RECIPES

        table = Table(title=kwargs.get("title", "Recipe List"), box=box.SIMPLE_HEAVY)
        table.add_column("#", justify="right", style="dim")
        table.add_column("Name", style="white", no_wrap=False, overflow="ellipsis", max_width=60)
        table.add_column("ID", style="cyan", no_wrap=True)

        for index, recipe in enumerate(recipes, start=1):
            table.add_row(
                str(index),
                escape(str(recipe.get("strMeal") or "")),
                str(recipe.get("idMeal") or ""),
            )
        return self._render(table)

    def format_recipe(self, recipe: Optional[Dict[str, Any]], **kwargs: Any) -> str:
        """Format a single recipe.

        Args:
            recipe: Raw recipe record or None
            **kwargs: Additional options:
                - is_favorite: bool - Show a favorites marker
                - related: List[dict] - Related recipes shown below the recipe

        Returns:
            Formatted recipe string, or "Recipe not found"
        """
        if not recipe:
            return RECIPE_NOT_FOUND

        model = Recipe.model_validate(recipe)
        marker = " [yellow]★[/yellow]" if kwargs.get("is_favorite") else ""

        ingredients = Table(box=box.SIMPLE, show_header=True, title="Ingredients")
        ingredients.add_column("Measure", justify="right")
        ingredients.add_column("Ingredient", style="green")
        for measure, ingredient in model.ingredients():
            ingredients.add_row(escape(measure), escape(ingredient))

        renderables: List[Any] = [
            f"[bold]=== {escape(model.name)} ===[/bold]{marker}",
            f"ID: {model.id}",
            f"Category: {escape(model.category or 'N/A')}",
            f"Area: {escape(model.area or 'N/A')}",
            ingredients,
            "[bold]Instructions:[/bold]",
            escape(model.instructions or ""),
        ]
        if model.youtube:
            renderables.append(f"\nVideo Tutorial: {escape(model.youtube)}")

        related = kwargs.get("related")
        if related is not None:
            renderables.append("")
            if related:
                renderables.append(self._related_table(related))
            else:
                renderables.append("No related recipes found")

        return self._render(*renderables)

    def _related_table(self, related: List[Dict[str, Any]]) -> Table:
        table = Table(title="Related Recipes", box=box.SIMPLE_HEAVY)
        table.add_column("Name", style="white")
        table.add_column("ID", style="cyan", no_wrap=True)
        for recipe in related:
            table.add_row(escape(str(recipe.get("strMeal") or "")), str(recipe.get("idMeal") or ""))
        return table

    def _render(self, *renderables: Any) -> str:
        with self.console.capture() as capture:
            for renderable in renderables:
                self.console.print(renderable)
        return capture.get()
