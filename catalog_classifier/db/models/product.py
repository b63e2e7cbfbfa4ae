"""Product ORM model (read-only from the classifier's point of view)."""
from decimal import Decimal
from typing import Optional, TYPE_CHECKING

from sqlalchemy import Boolean, ForeignKey, Numeric, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from catalog_classifier.db.base import Base, TimestampMixin, UUIDMixin

if TYPE_CHECKING:
    from catalog_classifier.db.models.category import Category


class Product(Base, UUIDMixin, TimestampMixin):
    """Catalog product.

    Attributes:
        name: Product display name
        description: Optional free-text description
        cost: Unit cost
        category_id: Reference to category
        is_active: Soft delete flag
    """

    __tablename__ = "products"

    name: Mapped[str] = mapped_column(String(500), nullable=False)
    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    cost: Mapped[Decimal] = mapped_column(
        Numeric(12, 2),
        nullable=False,
        server_default="0",
    )
    category_id: Mapped[Optional[str]] = mapped_column(
        ForeignKey("categories.id", ondelete="SET NULL"),
        nullable=True,
        index=True,
    )
    is_active: Mapped[bool] = mapped_column(
        "active",
        Boolean,
        nullable=False,
        server_default="true",
        index=True,
    )

    # Relationships
    category: Mapped[Optional["Category"]] = relationship(
        back_populates="products"
    )

    def __repr__(self) -> str:
        return f"<Product(id={self.id}, name='{self.name}', category_id={self.category_id})>"
