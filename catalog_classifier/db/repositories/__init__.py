"""Repositories implementing store contracts over SQLAlchemy sessions."""
from catalog_classifier.db.repositories.catalog_repo import SqlCatalogStore

__all__ = ["SqlCatalogStore"]
