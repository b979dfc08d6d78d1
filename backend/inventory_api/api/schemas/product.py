"""Pydantic models describing Product payloads."""

import re
from datetime import datetime

from pydantic import BaseModel, Field, field_validator

from inventory_api.api.schemas.common import READ_CONFIG, REQUEST_CONFIG
from inventory_api.db.models.product import DEFAULT_MIN_STOCK_LEVEL, StockStatus

_IMAGE_URL_RE = re.compile(r"^https?://.+")


def _strip(v):
    if isinstance(v, str):
        return v.strip()
    return v


def _validate_images(images: list[str] | None) -> list[str] | None:
    if images is None:
        return None
    for url in images:
        if not _IMAGE_URL_RE.match(url):
            raise ValueError("Image must be a valid URL")
    return images


class ProductCreate(BaseModel):
    model_config = REQUEST_CONFIG

    name: str = Field(..., min_length=1, max_length=100)
    description: str | None = Field(None, max_length=500)
    sku: str = Field(..., min_length=1, max_length=50, description="Case-insensitive unique SKU")
    category: str = Field(..., min_length=1, max_length=50)
    price: float = Field(..., ge=0)
    quantity: int = Field(0, ge=0)
    min_stock_level: int = Field(DEFAULT_MIN_STOCK_LEVEL, ge=0)
    images: list[str] = Field(default_factory=list)

    @field_validator("name", "sku", "category", mode="before")
    @classmethod
    def strip_required(cls, v):
        return _strip(v)

    @field_validator("images")
    @classmethod
    def check_images(cls, v: list[str]) -> list[str]:
        return _validate_images(v)


class ProductUpdate(BaseModel):
    """Partial update; omitted fields stay unchanged."""

    model_config = REQUEST_CONFIG

    name: str | None = Field(None, min_length=1, max_length=100)
    description: str | None = Field(None, max_length=500)
    sku: str | None = Field(None, min_length=1, max_length=50)
    category: str | None = Field(None, min_length=1, max_length=50)
    price: float | None = Field(None, ge=0)
    quantity: int | None = Field(None, ge=0)
    min_stock_level: int | None = Field(None, ge=0)
    images: list[str] | None = None

    @field_validator("name", "sku", "category", mode="before")
    @classmethod
    def strip_optional(cls, v):
        return _strip(v)

    @field_validator("images")
    @classmethod
    def check_images(cls, v: list[str] | None) -> list[str] | None:
        return _validate_images(v)


class StockUpdateRequest(BaseModel):
    quantity: int


class StockAdjustRequest(BaseModel):
    adjustment: int


class BulkStockItem(BaseModel):
    model_config = REQUEST_CONFIG

    product_id: str
    quantity: int


class BulkStockRequest(BaseModel):
    updates: list[BulkStockItem] = Field(..., min_length=1)


class ProductRead(BaseModel):
    model_config = READ_CONFIG

    id: str
    name: str
    description: str | None = None
    sku: str
    category: str
    price: float
    quantity: int
    min_stock_level: int
    images: list[str] = Field(default_factory=list)
    is_active: bool
    user_id: str
    is_low_stock: bool = Field(..., alias="lowStock")
    stock_status: StockStatus
    created_at: datetime | None = None
    updated_at: datetime | None = None


class InventoryStatsRead(BaseModel):
    model_config = READ_CONFIG

    total_products: int
    total_value: float
    low_stock_count: int
    out_of_stock_count: int
