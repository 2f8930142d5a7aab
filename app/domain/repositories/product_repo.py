# app/domain/repositories/product_repo.py

from __future__ import annotations
from typing import Optional
import logging

from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.errors import AppError, DuplicateResourceError, StorageError
from app.domain.models.product import Product, QR_CODE_UNIQUE_CONSTRAINT

logger = logging.getLogger(__name__)

# Substrings that identify a unique-key violation across drivers:
#   sqlite   -> "UNIQUE constraint failed: products.qr_code_id"
#   postgres -> 'duplicate key value violates unique constraint "uq_products_qr_code_id"'
#   mysql    -> "Duplicate entry '...' for key 'uq_products_qr_code_id'"
_UNIQUE_MARKERS = ("unique", "duplicate")


def is_qr_code_conflict(err: IntegrityError) -> bool:
    msg = str(err.orig if err.orig is not None else err).lower()
    if QR_CODE_UNIQUE_CONSTRAINT in msg:
        return True
    return any(m in msg for m in _UNIQUE_MARKERS) and "qr_code_id" in msg


def translate_db_error(err: SQLAlchemyError, qr_code_id: str) -> AppError:
    """Map a driver/ORM failure onto the service's error taxonomy."""
    if isinstance(err, IntegrityError) and is_qr_code_conflict(err):
        logger.info(f"Unique constraint rejected qr_code_id={qr_code_id}")
        return DuplicateResourceError(qr_code_id)
    detail = getattr(err, "orig", None) or err
    logger.error(f"Storage failure for qr_code_id={qr_code_id}: {detail}")
    return StorageError(f"Could not save product {qr_code_id}: {detail}")


class ProductRepo:
    """
    Product repository backed by the 'products' and 'product_attributes' tables.
    Runs inside the caller's session/transaction: it flushes but never commits.
    Every SQLAlchemy failure leaves as DuplicateResourceError or StorageError.
    """

    def __init__(self, session: AsyncSession):
        self.session = session

    async def get_by_qr_code(self, qr_code_id: str) -> Optional[Product]:
        stmt = select(Product).where(Product.qr_code_id == qr_code_id)
        try:
            return (await self.session.execute(stmt)).scalar_one_or_none()
        except SQLAlchemyError as e:
            raise translate_db_error(e, qr_code_id) from e

    async def exists_by_qr_code(self, qr_code_id: str) -> bool:
        # id only: the duplicate pre-check has no use for the attributes
        stmt = select(Product.id).where(Product.qr_code_id == qr_code_id).limit(1)
        try:
            return (await self.session.execute(stmt)).first() is not None
        except SQLAlchemyError as e:
            raise translate_db_error(e, qr_code_id) from e

    async def save(self, product: Product) -> Product:
        """
        Insert the product and, through the ORM cascade, its attributes.
        Generated ids are populated on return.
        A unique violation on qr_code_id becomes DuplicateResourceError so that
        callers see the same failure whether the pre-check or the storage constraint caught it.
        """
        self.session.add(product)
        try:
            await self.session.flush()
        except SQLAlchemyError as e:
            raise translate_db_error(e, product.qr_code_id) from e
        return product

    async def count(self) -> int:
        stmt = select(func.count()).select_from(Product)
        return (await self.session.execute(stmt)).scalar_one()
