"""SQLAlchemy model for product records."""

import enum
import uuid

from sqlalchemy import (
    JSON,
    Boolean,
    CheckConstraint,
    Column,
    Float,
    ForeignKey,
    Integer,
    String,
)
from sqlalchemy.types import DateTime

from inventory_api.db.base import Base
from inventory_api.db.models.user import utcnow

DEFAULT_MIN_STOCK_LEVEL = 5


class StockStatus(str, enum.Enum):
    OUT_OF_STOCK = "OUT_OF_STOCK"
    LOW_STOCK = "LOW_STOCK"
    IN_STOCK = "IN_STOCK"


def classify_stock(quantity: int, min_stock_level: int) -> StockStatus:
    """Derive the stock status for a quantity and its minimum level."""
    if quantity == 0:
        return StockStatus.OUT_OF_STOCK
    if quantity <= min_stock_level:
        return StockStatus.LOW_STOCK
    return StockStatus.IN_STOCK


class Product(Base):
    __tablename__ = "products"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    name = Column(String(100), nullable=False)
    description = Column(String(500))
    # Stored upper-cased; the unique index covers active and inactive rows.
    sku = Column(String(50), nullable=False, unique=True, index=True)
    category = Column(String(50), nullable=False, index=True)
    price = Column(Float, nullable=False)
    quantity = Column(Integer, nullable=False, default=0, index=True)
    min_stock_level = Column(Integer, nullable=False, default=DEFAULT_MIN_STOCK_LEVEL)
    images = Column(JSON, nullable=False, default=list)
    is_active = Column(Boolean, nullable=False, default=True, index=True)
    user_id = Column(String(36), ForeignKey("users.id"), nullable=False, index=True)
    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)
    updated_at = Column(DateTime(timezone=True), nullable=False, default=utcnow, onupdate=utcnow)

    __table_args__ = (
        CheckConstraint("price >= 0", name="ck_products_price_non_negative"),
        CheckConstraint("quantity >= 0", name="ck_products_quantity_non_negative"),
        CheckConstraint("min_stock_level >= 0", name="ck_products_min_stock_non_negative"),
    )

    @property
    def is_low_stock(self) -> bool:
        return self.quantity <= self.min_stock_level

    @property
    def stock_status(self) -> StockStatus:
        return classify_stock(self.quantity, self.min_stock_level)
