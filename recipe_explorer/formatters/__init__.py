"""Output formatters for recipe data."""

from .base import BaseFormatter
from .json_formatter import JsonFormatter
from .table_formatter import NO_RECIPES, RECIPE_NOT_FOUND, TableFormatter

__all__ = ["BaseFormatter", "JsonFormatter", "TableFormatter", "NO_RECIPES", "RECIPE_NOT_FOUND"]
