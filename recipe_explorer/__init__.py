"""Recipe Explorer - a command-line tool for browsing TheMealDB recipes."""

__version__ = "0.1.0"
__author__ = "Recipe Explorer Team"
__email__ = "support@example.com"

# Re-export the click group as package-level entry point
from .cli import cli

__all__ = ["cli", "__version__"]
