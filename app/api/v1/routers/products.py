# app/api/v1/routers/products.py

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.deps import db_session, namer_dep
from app.api.v1.schemas.product import ApiError, CreateProductRequest, ProductOut
from app.core.config import Settings, get_settings
from app.domain.services.naming_svc import ProductNamer
from app.domain.services.product_svc import create_product_svc

import logging
logger = logging.getLogger(__name__)

router = APIRouter(tags=["products"])


@router.post(
    "/products",
    response_model=ProductOut,
    status_code=status.HTTP_201_CREATED,
    summary="Create a product identified by its QR code",
    responses={
        status.HTTP_400_BAD_REQUEST: {"model": ApiError, "description": "Invalid request body"},
        status.HTTP_409_CONFLICT: {"model": ApiError, "description": "QR code already registered"},
    },
)
async def create_product(
    payload: CreateProductRequest,
    session: AsyncSession = Depends(db_session),
    namer: ProductNamer = Depends(namer_dep),
    settings: Settings = Depends(get_settings),
):
    """
    Register a new product with optional key/value attributes.
    Name and description are generated at creation time.
    """
    logger.info(f"Request: create_product qr_code_id={payload.qr_code_id}")
    res = await create_product_svc(
        session, namer, payload, naming_timeout_s=settings.naming_timeout_s
    )
    logger.info(f"Response: create_product id={res.id} attributes={len(res.attributes)}")
    return res
