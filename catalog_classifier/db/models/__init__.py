"""ORM models for the catalog tables the classifier reads and writes."""
from catalog_classifier.db.models.category import Category
from catalog_classifier.db.models.product import Product

__all__ = [
    "Category",
    "Product",
]
