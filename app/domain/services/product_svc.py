import asyncio
import logging
import time
from typing import Tuple

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.v1.schemas.product import CreateProductRequest, ProductOut
from app.core.errors import DuplicateResourceError
from app.domain.models.product import Product, ProductType
from app.domain.repositories.product_repo import ProductRepo, translate_db_error
from app.domain.services.naming_svc import (
    PLACEHOLDER_DESCRIPTION,
    ProductNamer,
    placeholder_name,
)

logger = logging.getLogger(__name__)


async def _generate_name(
    namer: ProductNamer,
    qr_code_id: str,
    product_type: ProductType,
    timeout_s: float,
) -> Tuple[str, str]:
    """Bounded call to the namer. Fail-open: any error or timeout yields the placeholder text."""
    try:
        return await asyncio.wait_for(namer.generate(qr_code_id, product_type), timeout=timeout_s)
    except asyncio.TimeoutError:
        logger.error(f"Product naming timed out after {timeout_s}s for qr_code_id={qr_code_id}")
    except Exception as e:
        logger.error(f"Product naming failed for qr_code_id={qr_code_id}: {e}")
    return placeholder_name(qr_code_id), PLACEHOLDER_DESCRIPTION


def to_product_out(product: Product) -> ProductOut:
    return ProductOut(
        id=product.id,
        qr_code_id=product.qr_code_id,
        product_type=product.product_type,
        name=product.name,
        attributes=product.attribute_map(),
    )


async def create_product_svc(
    session: AsyncSession,
    namer: ProductNamer,
    payload: CreateProductRequest,
    *,
    naming_timeout_s: float = 10.0,
) -> ProductOut:
    """
    Create a product and its attributes in one transaction.

    Steps:
      1) reject an existing qr_code_id (pre-check, no write)
      2) build the entity and ask the namer for name/description
      3) attach attributes, save (cascade) and commit
    The storage unique constraint backs the pre-check: a concurrent insert that
    slips past step 1 surfaces from the repository as DuplicateResourceError too.
    Any failure rolls the whole unit back.
    """
    t0 = time.perf_counter()
    qr = payload.qr_code_id
    repo = ProductRepo(session)
    logger.info(
        f"create_product start qr_code_id={qr} type={payload.product_type.value} "
        f"attrs={len(payload.attributes or {})}"
    )

    try:
        if await repo.exists_by_qr_code(qr):
            raise DuplicateResourceError(qr)

        product = Product(qr_code_id=qr, product_type=payload.product_type)
        product.name, product.description = await _generate_name(
            namer, qr, payload.product_type, naming_timeout_s
        )

        for attr_name, attr_value in (payload.attributes or {}).items():
            product.add_attribute(attr_name, attr_value)

        saved = await repo.save(product)
        try:
            await session.commit()
        except SQLAlchemyError as e:
            raise translate_db_error(e, qr) from e
    except Exception:
        await session.rollback()
        raise

    logger.info(f"create_product done id={saved.id} qr_code_id={qr} total_time={time.perf_counter() - t0:.3f}s")
    return to_product_out(saved)
