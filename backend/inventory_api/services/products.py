"""Product rule layer: SKU uniqueness, ownership scoping and stock invariants."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Iterable, Mapping

from sqlalchemy.exc import IntegrityError

from inventory_api.core.errors import (
    DuplicateSKU,
    InsufficientStock,
    InvariantViolation,
    NegativeQuantity,
    NotFoundOrForbidden,
    ValidationFailure,
)
from inventory_api.db.models.product import DEFAULT_MIN_STOCK_LEVEL, Product
from inventory_api.repositories.products import ProductFilter, ProductRepository
from inventory_api.utils.pagination import Page

logger = logging.getLogger(__name__)

UPDATABLE_FIELDS = (
    "name",
    "description",
    "sku",
    "category",
    "price",
    "quantity",
    "min_stock_level",
    "images",
)


@dataclass
class InventoryStats:
    total_products: int
    total_value: float
    low_stock_count: int
    out_of_stock_count: int

    def as_dict(self) -> dict[str, Any]:
        return {
            "totalProducts": self.total_products,
            "totalValue": self.total_value,
            "lowStockCount": self.low_stock_count,
            "outOfStockCount": self.out_of_stock_count,
        }


@dataclass
class StockUpdate:
    product_id: str
    quantity: int


def normalize_sku(sku: str) -> str:
    return sku.strip().upper()


REQUIRED_TEXT_FIELDS = ("name", "sku", "category")


def _strip_required_text(values: dict[str, Any]) -> None:
    """Strip name, SKU and category in place; none of them may end up blank."""
    errors = []
    for key in REQUIRED_TEXT_FIELDS:
        if key not in values:
            continue
        value = str(values[key]).strip()
        if not value:
            errors.append({"field": key, "message": f"{key} must not be blank"})
        values[key] = value
    if errors:
        raise ValidationFailure(errors=errors)


def _check_invariants(values: Mapping[str, Any]) -> None:
    if values.get("quantity") is not None and values["quantity"] < 0:
        raise NegativeQuantity()
    if values.get("price") is not None and values["price"] < 0:
        raise InvariantViolation("Price cannot be negative")
    if values.get("min_stock_level") is not None and values["min_stock_level"] < 0:
        raise InvariantViolation("Minimum stock level cannot be negative")


class ProductService:
    def __init__(self, products: ProductRepository) -> None:
        self.products = products

    def create_product(self, owner_id: str, data: Mapping[str, Any]) -> Product:
        """Persist a new product owned by ``owner_id``.

        Raises:
            ValidationFailure: name, SKU or category is blank.
            DuplicateSKU: the SKU is taken by any product, active or not.
        """
        _check_invariants(data)
        values = {key: data[key] for key in UPDATABLE_FIELDS if data.get(key) is not None}
        for key in REQUIRED_TEXT_FIELDS:
            values.setdefault(key, "")
        _strip_required_text(values)

        sku = values["sku"] = normalize_sku(values["sku"])
        if self.products.find_by_sku(sku):
            raise DuplicateSKU()

        values.setdefault("quantity", 0)
        values.setdefault("min_stock_level", DEFAULT_MIN_STOCK_LEVEL)
        values["images"] = list(data.get("images") or [])

        try:
            product = self.products.create(user_id=owner_id, **values)
        except IntegrityError as e:
            if self.products.find_by_sku(sku):
                raise DuplicateSKU() from e
            raise

        logger.info(f"Created product {product.id} with SKU {product.sku} for user {owner_id}")
        return product

    def get_product_by_id(self, product_id: str, scope_owner_id: str | None = None) -> Product | None:
        """Return the active product, or ``None`` when absent or owned by someone else."""
        product = self.products.find_by_id(product_id)
        if product is None or not product.is_active:
            return None
        if scope_owner_id and product.user_id != scope_owner_id:
            return None
        return product

    def _get_scoped_or_raise(self, product_id: str, scope_owner_id: str | None) -> Product:
        product = self.get_product_by_id(product_id, scope_owner_id)
        if product is None:
            raise NotFoundOrForbidden()
        return product

    def get_user_products(self, owner_id: str) -> list[Product]:
        return list(self.products.find_by_user_id(owner_id))

    def get_product_by_sku(self, sku: str) -> Product | None:
        return self.products.find_by_sku(sku)

    def get_products_by_category(self, category: str) -> list[Product]:
        return list(self.products.find_by_category(category))

    def update_product(
        self,
        product_id: str,
        scope_owner_id: str | None,
        patch: Mapping[str, Any],
    ) -> Product:
        existing = self._get_scoped_or_raise(product_id, scope_owner_id)

        changes = {key: patch[key] for key in UPDATABLE_FIELDS if key in patch and patch[key] is not None}
        if "description" in patch and patch["description"] is None:
            changes["description"] = None
        _check_invariants(changes)
        _strip_required_text(changes)

        if "sku" in changes:
            changes["sku"] = normalize_sku(changes["sku"])
            if changes["sku"] != existing.sku and self.products.find_by_sku(changes["sku"]):
                raise DuplicateSKU()
        if "images" in changes:
            changes["images"] = list(changes["images"])

        try:
            product = self.products.update(product_id, **changes)
        except IntegrityError as e:
            raise DuplicateSKU() from e
        if product is None:
            raise NotFoundOrForbidden()

        logger.info(f"Updated product {product_id}: {sorted(changes)}")
        return product

    def delete_product(self, product_id: str, scope_owner_id: str | None) -> bool:
        """Soft delete; the SKU stays reserved."""
        self._get_scoped_or_raise(product_id, scope_owner_id)
        result = self.products.update(product_id, is_active=False)
        logger.info(f"Soft deleted product {product_id}")
        return result is not None

    def update_stock(
        self,
        product_id: str,
        quantity: int,
        scope_owner_id: str | None = None,
    ) -> Product:
        if quantity < 0:
            raise NegativeQuantity()
        self._get_scoped_or_raise(product_id, scope_owner_id)

        product = self.products.update_stock(product_id, quantity)
        if product is None:
            raise NotFoundOrForbidden()
        logger.info(f"Stock for product {product_id} set to {quantity}")
        return product

    def adjust_stock(
        self,
        product_id: str,
        delta: int,
        scope_owner_id: str | None = None,
    ) -> Product:
        """Add ``delta`` (negative to consume) to the current quantity."""
        product = self._get_scoped_or_raise(product_id, scope_owner_id)

        new_quantity = product.quantity + delta
        if new_quantity < 0:
            logger.warning(
                f"Rejected stock adjustment of {delta} for product {product_id} "
                f"(current quantity {product.quantity})"
            )
            raise InsufficientStock()

        return self.update_stock(product_id, new_quantity, scope_owner_id)

    def bulk_adjust_stock(
        self,
        updates: Iterable[StockUpdate],
        scope_owner_id: str | None = None,
    ) -> list[Product]:
        """Apply absolute quantities one by one.

        Not atomic: when an entry fails, the entries before it stay applied
        and the error propagates.
        """
        return [
            self.update_stock(update.product_id, update.quantity, scope_owner_id)
            for update in updates
        ]

    def search_products(self, query: ProductFilter) -> Page[Product]:
        return self.products.search_products(query)

    get_all_products = search_products

    def get_low_stock_products(self, scope_owner_id: str | None = None) -> list[Product]:
        return list(self.products.find_low_stock(scope_owner_id))

    def get_categories(self) -> list[str]:
        return self.products.get_categories()

    def get_inventory_stats(self, scope_owner_id: str | None = None) -> InventoryStats:
        return InventoryStats(
            total_products=self.products.count_active(scope_owner_id),
            total_value=self.products.get_total_value(scope_owner_id),
            low_stock_count=self.products.count_low_stock(scope_owner_id),
            out_of_stock_count=self.products.count_out_of_stock(scope_owner_id),
        )
