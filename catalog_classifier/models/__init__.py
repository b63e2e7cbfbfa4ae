"""Data models for the classification pipeline."""
from catalog_classifier.models.classification import (
    ClassificationStrategy,
    ProductInput,
    CategoryRecord,
    ExistingProductSample,
    ClassificationCandidate,
    ClassificationResult,
)

__all__ = [
    "ClassificationStrategy",
    "ProductInput",
    "CategoryRecord",
    "ExistingProductSample",
    "ClassificationCandidate",
    "ClassificationResult",
]
