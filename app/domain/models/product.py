from __future__ import annotations
import enum
import uuid
from datetime import datetime, timezone
from typing import Set

from sqlalchemy import DateTime, Enum, ForeignKey, Integer, String, Text, UniqueConstraint, Uuid
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column, relationship


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


QR_CODE_UNIQUE_CONSTRAINT = "uq_products_qr_code_id"


class Base(DeclarativeBase):
    pass


class ProductType(str, enum.Enum):
    ELECTRONICS = "ELECTRONICS"
    CLOTHING = "CLOTHING"
    FOOD = "FOOD"
    FURNITURE = "FURNITURE"
    TOOLS = "TOOLS"
    OTHER = "OTHER"


class Product(Base):
    """
    A scanned item, keyed by its QR code.
    Owns its attributes: they are inserted with the product and removed with it
    (ORM cascade on save, ON DELETE CASCADE in storage).
    """
    __tablename__ = "products"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    qr_code_id: Mapped[str] = mapped_column(String(255), nullable=False)
    product_type: Mapped[ProductType] = mapped_column(
        Enum(ProductType, native_enum=False, length=32, validate_strings=True), nullable=False
    )
    name: Mapped[str | None] = mapped_column(Text)
    description: Mapped[str | None] = mapped_column(Text)

    attributes: Mapped[Set["ProductAttribute"]] = relationship(
        back_populates="product",
        collection_class=set,
        cascade="all, delete-orphan",
        passive_deletes=True,
        lazy="selectin",
    )

    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, default=_utcnow)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=_utcnow, onupdate=_utcnow
    )

    __table_args__ = (
        UniqueConstraint("qr_code_id", name=QR_CODE_UNIQUE_CONSTRAINT),
    )

    def __init__(self, **kwargs):
        # Start with a loaded, empty collection so reading it after flush never hits a lazy load
        kwargs.setdefault("attributes", set())
        super().__init__(**kwargs)

    def add_attribute(self, name: str, value: str) -> "ProductAttribute":
        attribute = ProductAttribute(attribute_name=name, attribute_value=value)
        self.attributes.add(attribute)
        attribute.product = self
        return attribute

    def attribute_map(self) -> dict[str, str]:
        # Set iteration order is unspecified: with repeated names any one value may win.
        return {a.attribute_name: a.attribute_value for a in self.attributes}

    def __repr__(self):
        return f"<Product(id={self.id}, qr_code_id={self.qr_code_id}, type={self.product_type})>"


class ProductAttribute(Base):
    __tablename__ = "product_attributes"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    attribute_name: Mapped[str] = mapped_column(String(255), nullable=False)
    attribute_value: Mapped[str] = mapped_column(Text, nullable=False)
    product_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("products.id", ondelete="CASCADE"), nullable=False, index=True
    )

    product: Mapped[Product] = relationship(back_populates="attributes")
