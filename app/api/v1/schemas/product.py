# api/v1/schemas/product.py
from datetime import datetime
from typing import Dict, Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from app.domain.models.product import ProductType


class _CamelModel(BaseModel):
    # snake_case in Python, camelCase on the wire
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class CreateProductRequest(_CamelModel):
    qr_code_id: str = Field(..., min_length=1, description="QR Code ID cannot be empty")
    product_type: ProductType = Field(..., description="Product type must be specified")
    attributes: Optional[Dict[str, str]] = None


class ProductOut(_CamelModel):
    id: UUID
    qr_code_id: str
    product_type: ProductType
    name: Optional[str] = None
    attributes: Dict[str, str] = Field(default_factory=dict)


class ApiError(BaseModel):
    path: str
    message: str
    status: int
    timestamp: datetime
