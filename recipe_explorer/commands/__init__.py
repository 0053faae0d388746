"""Command implementations behind the CLI and the interactive menu."""

from .base_command import BaseCommand, cache_key
from .cache_command import ClearCacheCommand
from .details_command import DetailsCommand
from .favorites_command import NO_FAVORITES, FavoritesCommand
from .ingredient_command import IngredientCommand
from .letters_command import LettersCommand, unique_letters
from .random_command import RandomCommand
from .search_command import SearchCommand

__all__ = [
    "BaseCommand",
    "ClearCacheCommand",
    "DetailsCommand",
    "FavoritesCommand",
    "IngredientCommand",
    "LettersCommand",
    "NO_FAVORITES",
    "RandomCommand",
    "SearchCommand",
    "cache_key",
    "unique_letters",
]
