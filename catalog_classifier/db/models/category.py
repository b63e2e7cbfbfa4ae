"""Category ORM model."""
from typing import List, Optional, TYPE_CHECKING

from sqlalchemy import Boolean, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from catalog_classifier.db.base import Base, TimestampMixin

if TYPE_CHECKING:
    from catalog_classifier.db.models.product import Product


class Category(Base, TimestampMixin):
    """Product category.

    Ids are slug-like strings ("tornilleria", "material-electrico") so the
    classifier can propose an id before the row exists.
    """

    __tablename__ = "categories"

    id: Mapped[str] = mapped_column(String(100), primary_key=True)
    name: Mapped[str] = mapped_column(String(255), nullable=False, index=True)
    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    is_active: Mapped[bool] = mapped_column(
        "active",
        Boolean,
        nullable=False,
        server_default="true",
        index=True,
        doc="Soft delete flag",
    )

    # Relationships
    products: Mapped[List["Product"]] = relationship(
        back_populates="category"
    )

    def __repr__(self) -> str:
        return f"<Category(id={self.id}, name='{self.name}', is_active={self.is_active})>"
