"""Product category classification service.

This module assigns products to catalog categories using:
- Exact category hints
- Keyword and regex rules from a hardware-store knowledge base
- Cross-lingual synonyms
- Similarity to existing products
- A fallback cascade with a near-duplicate category guard

Key Components:
    - IntelligentClassifier: Classifier facade owning the caches
    - CategoryMaterializer: Idempotent category creation
    - CatalogStore / InMemoryCatalogStore: Store contract and test double
"""
from catalog_classifier.services.classification.classifier import (
    IntelligentClassifier,
    ClassifierStats,
    create_classifier,
    parse_product,
)
from catalog_classifier.services.classification.materializer import CategoryMaterializer
from catalog_classifier.services.classification.store import CatalogStore, InMemoryCatalogStore

__all__ = [
    "IntelligentClassifier",
    "ClassifierStats",
    "create_classifier",
    "parse_product",
    "CategoryMaterializer",
    "CatalogStore",
    "InMemoryCatalogStore",
]
