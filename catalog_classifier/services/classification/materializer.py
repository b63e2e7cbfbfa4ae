"""Idempotent creation of categories decided by the classifier.

ensure_category() resolves in this order:
1. In-memory cache hit -> nothing to do
2. Store lookup by id or case-insensitive name -> adopt the stored row
3. Insert-if-absent -> adopt the returned row

A DuplicateCategoryError raised by the store means another writer won a
race; it is resolved by re-reading. Every other error propagates.
"""
import asyncio
from typing import Callable, Optional

from catalog_classifier.errors import DuplicateCategoryError, StoreError
from catalog_classifier.models import CategoryRecord
from catalog_classifier.services.classification.cache import CategoryCache
from catalog_classifier.services.classification.store import CatalogStore
from catalog_classifier.utils.logger import get_logger

logger = get_logger(__name__)

DEFAULT_CATEGORY_DESCRIPTION = "Category created automatically by the product classifier"


class CategoryMaterializer:
    """Ensures decided categories exist in the catalog store.

    Calls are serialized with an asyncio.Lock so that two classifications
    racing on the same new id perform a single insert. The store's
    conflict-safe insert remains the source of truth across processes.

    on_insert, when given, is called with each row returned by the store
    insert; cache hits, store lookups and re-reads after a conflict do not
    call it.
    """

    def __init__(
        self,
        store: CatalogStore,
        cache: CategoryCache,
        on_insert: Optional[Callable[[CategoryRecord], None]] = None,
    ):
        self._store = store
        self._cache = cache
        self._on_insert = on_insert
        self._lock = asyncio.Lock()

    async def ensure_category(
        self,
        category_id: str,
        category_name: str,
        description: Optional[str] = None,
    ) -> CategoryRecord:
        """Make sure the category exists and is cached.

        Args:
            category_id: Category id decided by the classifier
            category_name: Display name for a new row
            description: Stored on insert only

        Returns:
            The cached or stored category (which may carry a different id
            when an existing row matched by name)

        Raises:
            StoreError: If the store fails for a reason other than a
                duplicate key
        """
        async with self._lock:
            cached_name = self._cache.get(category_id)
            if cached_name is not None:
                logger.debug("materializer.cache_hit", category_id=category_id)
                return CategoryRecord(id=category_id, name=cached_name)

            existing = await self._store.find_category(category_id, category_name)
            if existing is not None:
                self._cache.put(existing)
                logger.debug(
                    "materializer.found_in_store",
                    category_id=existing.id,
                    category_name=existing.name,
                )
                return existing

            try:
                record = await self._store.insert_category_if_absent(
                    category_id,
                    category_name,
                    description or DEFAULT_CATEGORY_DESCRIPTION,
                )
            except DuplicateCategoryError as e:
                logger.warning(
                    "materializer.duplicate_resolved_by_reread",
                    category_id=category_id,
                    category_name=category_name,
                    error=e.message,
                )
                record = await self._store.find_category(category_id, category_name)
                if record is None:
                    raise StoreError(
                        f"Category {category_id} conflicted on insert but could not be re-read",
                        details={"category_id": category_id, "name": category_name},
                    ) from e
                self._cache.put(record)
                logger.info(
                    "materializer.category_adopted",
                    category_id=record.id,
                    category_name=record.name,
                )
                return record

            self._cache.put(record)
            logger.info(
                "materializer.category_inserted",
                category_id=record.id,
                category_name=record.name,
            )
            if self._on_insert is not None:
                self._on_insert(record)
            return record
