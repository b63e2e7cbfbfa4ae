"""Custom exception hierarchy for classifier errors."""
from typing import Any, Dict, Optional


class ClassifierError(Exception):
    """Base exception for all classifier errors."""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        """Initialize error with message and optional context."""
        self.message = message
        self.details = details or {}
        super().__init__(message)


class ClassificationError(ClassifierError):
    """Raised when a product cannot be classified (e.g., invalid input)."""
    pass


class StoreError(ClassifierError):
    """Raised when the backing catalog store fails."""
    pass


class DuplicateCategoryError(StoreError):
    """Raised when a category insert collides with an existing row.

    This is the benign conflict case: the materializer recovers from it
    by re-reading the store.
    """
    pass


class ConfigurationError(ClassifierError):
    """Raised when configuration is invalid."""
    pass
