"""Error handling module."""
from catalog_classifier.errors.exceptions import (
    ClassifierError,
    ClassificationError,
    StoreError,
    DuplicateCategoryError,
    ConfigurationError,
)

__all__ = [
    "ClassifierError",
    "ClassificationError",
    "StoreError",
    "DuplicateCategoryError",
    "ConfigurationError",
]
