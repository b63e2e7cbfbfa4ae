"""Catalog store contract consumed by the classifier.

The classifier reads categories and a product sample and issues one write
command (insert a category if absent). Any object with these coroutine
methods can back it: SqlCatalogStore for PostgreSQL, InMemoryCatalogStore
for tests and offline use.
"""
from typing import Dict, List, Optional, Protocol, Sequence

from catalog_classifier.errors import DuplicateCategoryError
from catalog_classifier.models import CategoryRecord, ExistingProductSample


class CatalogStore(Protocol):
    """Read/insert operations the classifier needs from the catalog."""

    async def load_active_categories(self) -> List[CategoryRecord]:
        """Return all active categories."""
        ...

    async def load_active_product_sample(self, limit: int) -> List[ExistingProductSample]:
        """Return at most `limit` active products with their category names."""
        ...

    async def find_category(self, category_id: str, name: str) -> Optional[CategoryRecord]:
        """Find a category by id or case-insensitive name."""
        ...

    async def insert_category_if_absent(
        self,
        category_id: str,
        name: str,
        description: str,
    ) -> CategoryRecord:
        """Insert a category unless the id exists; return the stored row."""
        ...


class InMemoryCatalogStore:
    """Dict-backed CatalogStore.

    Behaves like the SQL store: ids are unique, names are unique
    case-insensitively, and inserting an existing id returns the
    existing row untouched.
    """

    def __init__(
        self,
        categories: Sequence[CategoryRecord] = (),
        products: Sequence[ExistingProductSample] = (),
    ):
        self._categories: Dict[str, CategoryRecord] = {c.id: c for c in categories}
        self._descriptions: Dict[str, str] = {}
        self._products: List[ExistingProductSample] = list(products)

    @property
    def categories(self) -> Dict[str, CategoryRecord]:
        """Current rows keyed by id (copy)."""
        return dict(self._categories)

    def description_of(self, category_id: str) -> Optional[str]:
        """Description stored on insert, if any."""
        return self._descriptions.get(category_id)

    async def load_active_categories(self) -> List[CategoryRecord]:
        return sorted(self._categories.values(), key=lambda c: (c.name.lower(), c.id))

    async def load_active_product_sample(self, limit: int) -> List[ExistingProductSample]:
        return self._products[:limit]

    async def find_category(self, category_id: str, name: str) -> Optional[CategoryRecord]:
        if category_id in self._categories:
            return self._categories[category_id]
        name_lower = name.lower()
        for record in self._categories.values():
            if record.name.lower() == name_lower:
                return record
        return None

    async def insert_category_if_absent(
        self,
        category_id: str,
        name: str,
        description: str,
    ) -> CategoryRecord:
        existing = self._categories.get(category_id)
        if existing is not None:
            return existing
        name_lower = name.lower()
        if any(record.name.lower() == name_lower for record in self._categories.values()):
            raise DuplicateCategoryError(
                f"Category name already exists: {name}",
                details={"category_id": category_id, "name": name},
            )
        record = CategoryRecord(id=category_id, name=name)
        self._categories[category_id] = record
        self._descriptions[category_id] = description
        return record
