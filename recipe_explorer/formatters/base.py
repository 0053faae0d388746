"""Base formatter abstract class."""

from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional


class BaseFormatter(ABC):
    """Abstract base class for output formatters."""

    @abstractmethod
    def format_recipe_list(self, recipes: List[Dict[str, Any]], **kwargs: Any) -> str:
        """Format a list of recipes for output.

        Args:
            recipes: Raw recipe records as returned by the API
            **kwargs: Additional formatting options

        Returns:
            Formatted string ready for output
        """
        pass

    @abstractmethod
    def format_recipe(self, recipe: Optional[Dict[str, Any]], **kwargs: Any) -> str:
        """Format a single recipe with ingredients and instructions.

        Args:
            recipe: Raw recipe record, or None when nothing was found
            **kwargs: Additional formatting options

        Returns:
            Formatted string ready for output
        """
        pass
