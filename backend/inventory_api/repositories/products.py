"""Product store: persistence and queries for product records."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Sequence

from sqlalchemy import func, or_, select
from sqlalchemy.sql import ColumnElement

from inventory_api.db.models.product import Product
from inventory_api.repositories.base import BaseRepository
from inventory_api.utils.pagination import (
    DEFAULT_LIMIT,
    DEFAULT_PAGE,
    Page,
    clamp_limit,
    clamp_page,
)

DEFAULT_SORT_FIELD = "createdAt"

SORTABLE_COLUMNS = {
    "createdAt": Product.created_at,
    "updatedAt": Product.updated_at,
    "name": Product.name,
    "sku": Product.sku,
    "category": Product.category,
    "price": Product.price,
    "quantity": Product.quantity,
    "minStockLevel": Product.min_stock_level,
}


@dataclass
class ProductFilter:
    """Search, filter, sort and page options for product listings."""

    search: str | None = None
    category: str | None = None
    min_price: float | None = None
    max_price: float | None = None
    in_stock: bool | None = None
    page: int = DEFAULT_PAGE
    limit: int = DEFAULT_LIMIT
    sort_by: str = DEFAULT_SORT_FIELD
    sort_order: str = "desc"

    def __post_init__(self) -> None:
        self.page = clamp_page(self.page)
        self.limit = clamp_limit(self.limit)
        if self.sort_by not in SORTABLE_COLUMNS:
            self.sort_by = DEFAULT_SORT_FIELD
        self.sort_order = "asc" if str(self.sort_order).lower() == "asc" else "desc"


def _active(owner_id: str | None = None) -> list[ColumnElement[bool]]:
    criteria: list[ColumnElement[bool]] = [Product.is_active.is_(True)]
    if owner_id:
        criteria.append(Product.user_id == owner_id)
    return criteria


class ProductRepository(BaseRepository[Product]):
    model = Product

    def find_by_sku(self, sku: str) -> Product | None:
        """Look up by SKU among active and inactive products."""
        return self.find_one(Product.sku == sku.strip().upper())

    def find_by_user_id(self, user_id: str) -> Sequence[Product]:
        return self.find(*_active(user_id), order_by=Product.created_at.desc())

    def find_by_category(self, category: str) -> Sequence[Product]:
        return self.find(
            *_active(), Product.category == category, order_by=Product.created_at.desc()
        )

    def find_low_stock(self, user_id: str | None = None) -> Sequence[Product]:
        return self.find(
            *_active(user_id),
            Product.quantity <= Product.min_stock_level,
            order_by=Product.quantity.asc(),
        )

    def count_active(self, user_id: str | None = None) -> int:
        return self.count(*_active(user_id))

    def count_low_stock(self, user_id: str | None = None) -> int:
        return self.count(*_active(user_id), Product.quantity <= Product.min_stock_level)

    def count_out_of_stock(self, user_id: str | None = None) -> int:
        return self.count(*_active(user_id), Product.quantity == 0)

    def search_products(self, query: ProductFilter) -> Page[Product]:
        criteria = _active()

        if query.search:
            term = query.search.lower()
            criteria.append(
                or_(
                    func.lower(Product.name).contains(term, autoescape=True),
                    func.lower(func.coalesce(Product.description, "")).contains(
                        term, autoescape=True
                    ),
                    func.lower(Product.sku).contains(term, autoescape=True),
                )
            )
        if query.category:
            criteria.append(Product.category == query.category)
        if query.min_price is not None:
            criteria.append(Product.price >= query.min_price)
        if query.max_price is not None:
            criteria.append(Product.price <= query.max_price)
        if query.in_stock is not None:
            criteria.append(Product.quantity > 0 if query.in_stock else Product.quantity == 0)

        column = SORTABLE_COLUMNS[query.sort_by]
        order_by = column.asc() if query.sort_order == "asc" else column.desc()

        return self.find_with_pagination(
            criteria, page=query.page, limit=query.limit, order_by=order_by
        )

    def update_stock(self, product_id: str, quantity: int) -> Product | None:
        return self.update(product_id, quantity=quantity)

    def get_categories(self) -> list[str]:
        query = select(Product.category).where(*_active()).distinct()
        return sorted(self.db.scalars(query).all())

    def get_total_value(self, user_id: str | None = None) -> float:
        query = select(func.coalesce(func.sum(Product.price * Product.quantity), 0)).where(
            *_active(user_id)
        )
        return float(self.db.scalar(query) or 0)
