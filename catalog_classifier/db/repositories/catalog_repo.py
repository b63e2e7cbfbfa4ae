"""
Catalog Repository
==================

SQL implementation of the CatalogStore contract used by the classifier.

Reads active categories and a bounded product sample, looks categories up
by id or case-insensitive name, and inserts categories with
INSERT ... ON CONFLICT (id) DO NOTHING.

The repository never commits: the caller owns the session and its
transaction boundaries.
"""

from typing import List, Optional

from sqlalchemy import func, or_, select
from sqlalchemy.dialects.postgresql import insert
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from catalog_classifier.db.models import Category, Product
from catalog_classifier.errors import DuplicateCategoryError, StoreError
from catalog_classifier.models import CategoryRecord, ExistingProductSample
from catalog_classifier.utils.logger import get_logger

logger = get_logger(__name__)


class SqlCatalogStore:
    """
    Repository over the categories and products tables.

    Table Schema (owned by the catalog application):
        categories: id (str PK), name, description, active, timestamps
        products: id (UUID PK), name, description, cost, category_id, active
    """

    def __init__(self, session: AsyncSession) -> None:
        """
        Initialize repository with async session.

        Args:
            session: SQLAlchemy async session
        """
        self._session = session

    async def load_active_categories(self) -> List[CategoryRecord]:
        """Return all active categories ordered by name."""
        query = (
            select(Category.id, Category.name)
            .where(Category.is_active.is_(True))
            .order_by(Category.name, Category.id)
        )
        try:
            result = await self._session.execute(query)
            rows = result.all()
        except SQLAlchemyError as e:
            raise StoreError(
                "Failed to load categories",
                details={"error": str(e)},
            ) from e

        logger.debug("catalog_repo.categories_loaded", count=len(rows))
        return [CategoryRecord(id=row.id, name=row.name) for row in rows]

    async def load_active_product_sample(self, limit: int) -> List[ExistingProductSample]:
        """
        Return up to `limit` active products joined with their category.

        Args:
            limit: Maximum number of products

        Returns:
            Product snapshots for similarity comparison
        """
        query = (
            select(
                Product.id,
                Product.name,
                Product.description,
                Product.category_id,
                Category.name.label("category_name"),
            )
            .join(Category, Product.category_id == Category.id)
            .where(Product.is_active.is_(True))
            .order_by(Product.created_at.desc())
            .limit(limit)
        )
        try:
            result = await self._session.execute(query)
            rows = result.all()
        except SQLAlchemyError as e:
            raise StoreError(
                "Failed to load product sample",
                details={"error": str(e), "limit": limit},
            ) from e

        logger.debug("catalog_repo.products_loaded", count=len(rows), limit=limit)
        return [
            ExistingProductSample(
                id=str(row.id),
                name=row.name,
                description=row.description,
                category_id=row.category_id,
                category_name=row.category_name,
            )
            for row in rows
        ]

    async def find_category(self, category_id: str, name: str) -> Optional[CategoryRecord]:
        """
        Find a category by id or case-insensitive name.

        An id match is preferred over a name match.
        """
        query = (
            select(Category.id, Category.name)
            .where(
                or_(
                    Category.id == category_id,
                    func.lower(Category.name) == name.lower(),
                )
            )
            .order_by((Category.id == category_id).desc())
            .limit(1)
        )
        try:
            result = await self._session.execute(query)
            row = result.first()
        except SQLAlchemyError as e:
            raise StoreError(
                f"Failed to look up category {category_id}",
                details={"error": str(e), "category_id": category_id, "name": name},
            ) from e

        if row is None:
            return None
        return CategoryRecord(id=row.id, name=row.name)

    async def insert_category_if_absent(
        self,
        category_id: str,
        name: str,
        description: str,
    ) -> CategoryRecord:
        """
        Insert a category unless its id already exists.

        Runs inside a SAVEPOINT so a constraint violation does not poison
        the caller's transaction.

        Returns:
            The inserted row, or the existing row when the id was taken

        Raises:
            DuplicateCategoryError: Another unique constraint (e.g. name) fired
            StoreError: Any other database failure
        """
        stmt = (
            insert(Category)
            .values(
                id=category_id,
                name=name,
                description=description,
            )
            .on_conflict_do_nothing(index_elements=[Category.id])
            .returning(Category.id, Category.name)
        )

        try:
            async with self._session.begin_nested():
                result = await self._session.execute(stmt)
                row = result.first()
        except IntegrityError as e:
            raise DuplicateCategoryError(
                f"Category conflicts with an existing row: {category_id}",
                details={"error": str(e), "category_id": category_id, "name": name},
            ) from e
        except SQLAlchemyError as e:
            logger.error(
                "catalog_repo.insert_failed",
                category_id=category_id,
                error=str(e),
                error_type=type(e).__name__,
            )
            raise StoreError(
                f"Failed to insert category {category_id}",
                details={"error": str(e), "category_id": category_id},
            ) from e

        if row is not None:
            logger.info("catalog_repo.category_inserted", category_id=row.id, name=row.name)
            return CategoryRecord(id=row.id, name=row.name)

        # Conflict on id: the row exists, adopt it
        logger.info("catalog_repo.category_conflict", category_id=category_id)
        existing = await self.find_category(category_id, name)
        if existing is None:
            raise StoreError(
                f"Category {category_id} conflicted on insert but is not readable",
                details={"category_id": category_id},
            )
        return existing
