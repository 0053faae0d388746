"""Custom exception hierarchy for Recipe Explorer."""

from __future__ import annotations

from typing import Optional, Sequence


class RecipeExplorerError(Exception):
    """Base exception for Recipe Explorer."""


class APIError(RecipeExplorerError):
    """Recipe API errors."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        self.status_code = status_code
        super().__init__(message)


class NotFoundError(APIError):
    """Requested resource does not exist (404)."""


class StorageError(RecipeExplorerError):
    """Local cache or favorites file could not be read or written."""


class ValidationError(RecipeExplorerError):
    """Invalid user input (empty search term, bad id, ...)."""


class OperationTimeoutError(RecipeExplorerError):
    """An operation did not finish within its time budget."""


class AllStrategiesFailedError(RecipeExplorerError):
    """Every alternative operation failed.

    ``errors`` keeps the individual failures in the order they were tried.
    """

    def __init__(self, errors: Sequence[BaseException]):
        self.errors = list(errors)
        messages = ", ".join(str(e) for e in self.errors)
        super().__init__(f"All strategies failed: {messages}")
