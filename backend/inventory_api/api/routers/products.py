"""CRUD, stock management and filtering endpoints for product inventory."""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, Query, status

from inventory_api.api.dependencies.auth import (
    admin_only,
    get_current_identity,
    manager_or_admin,
)
from inventory_api.api.dependencies.services import get_product_service
from inventory_api.api.schemas.common import ApiResponse, PaginatedData, PaginationRead
from inventory_api.api.schemas.product import (
    BulkStockRequest,
    InventoryStatsRead,
    ProductCreate,
    ProductRead,
    ProductUpdate,
    StockAdjustRequest,
    StockUpdateRequest,
)
from inventory_api.core.errors import NotFoundOrForbidden
from inventory_api.repositories.products import DEFAULT_SORT_FIELD, ProductFilter
from inventory_api.services.access import Identity, owner_scope
from inventory_api.services.products import ProductService, StockUpdate
from inventory_api.utils.pagination import DEFAULT_LIMIT, MAX_LIMIT, Page

logger = logging.getLogger(__name__)

router = APIRouter()


def product_filter(
    search: str | None = Query(None, description="Matches name, description or SKU"),
    category: str | None = Query(None, description="Exact category"),
    min_price: float | None = Query(None, alias="minPrice", ge=0),
    max_price: float | None = Query(None, alias="maxPrice", ge=0),
    in_stock: bool | None = Query(None, alias="inStock"),
    page: int = Query(1, ge=1, description="Page number (1-indexed)"),
    limit: int = Query(DEFAULT_LIMIT, ge=1, le=MAX_LIMIT, description="Items per page"),
    sort_by: str = Query(DEFAULT_SORT_FIELD, alias="sortBy"),
    sort_order: str = Query("desc", alias="sortOrder", pattern="^(asc|desc)$"),
) -> ProductFilter:
    return ProductFilter(
        search=search or None,
        category=category or None,
        min_price=min_price,
        max_price=max_price,
        in_stock=in_stock,
        page=page,
        limit=limit,
        sort_by=sort_by,
        sort_order=sort_order,
    )


def _read(products) -> list[ProductRead]:
    return [ProductRead.model_validate(p) for p in products]


def _paginated(page: Page) -> PaginatedData[ProductRead]:
    return PaginatedData[ProductRead](
        data=_read(page.data),
        pagination=PaginationRead.model_validate(page.pagination),
    )


@router.post(
    "",
    summary="Create a product",
    status_code=status.HTTP_201_CREATED,
    response_model=ApiResponse[ProductRead],
    response_model_exclude_none=True,
)
async def create_product(
    payload: ProductCreate,
    identity: Identity = Depends(get_current_identity),
    products: ProductService = Depends(get_product_service),
) -> ApiResponse[ProductRead]:
    """Persist a product owned by the caller.

    SKU must be unique (case-insensitive) across active and deleted products.
    """
    product = products.create_product(identity.user_id, payload.model_dump())
    return ApiResponse(message="Product created successfully", data=ProductRead.model_validate(product))


@router.get(
    "",
    summary="List products with filters and pagination",
    response_model=ApiResponse[PaginatedData[ProductRead]],
    response_model_exclude_none=True,
)
async def list_products(
    query: ProductFilter = Depends(product_filter),
    identity: Identity = Depends(get_current_identity),
    products: ProductService = Depends(get_product_service),
) -> ApiResponse[PaginatedData[ProductRead]]:
    """Return paginated active products. Filters are combined with AND logic."""
    page = products.get_all_products(query)
    return ApiResponse(message="Products retrieved successfully", data=_paginated(page))


@router.get(
    "/my-products",
    summary="Products owned by the caller",
    response_model=ApiResponse[list[ProductRead]],
    response_model_exclude_none=True,
)
async def my_products(
    identity: Identity = Depends(get_current_identity),
    products: ProductService = Depends(get_product_service),
) -> ApiResponse[list[ProductRead]]:
    return ApiResponse(
        message="User products retrieved successfully",
        data=_read(products.get_user_products(identity.user_id)),
    )


@router.get(
    "/search",
    summary="Search products",
    response_model=ApiResponse[PaginatedData[ProductRead]],
    response_model_exclude_none=True,
)
async def search_products(
    query: ProductFilter = Depends(product_filter),
    identity: Identity = Depends(get_current_identity),
    products: ProductService = Depends(get_product_service),
) -> ApiResponse[PaginatedData[ProductRead]]:
    page = products.search_products(query)
    return ApiResponse(message="Search completed successfully", data=_paginated(page))


@router.get(
    "/categories",
    summary="Distinct categories",
    response_model=ApiResponse[list[str]],
    response_model_exclude_none=True,
)
async def categories(
    identity: Identity = Depends(get_current_identity),
    products: ProductService = Depends(get_product_service),
) -> ApiResponse[list[str]]:
    return ApiResponse(message="Categories retrieved successfully", data=products.get_categories())


@router.get(
    "/low-stock",
    summary="Products at or below their minimum stock level",
    response_model=ApiResponse[list[ProductRead]],
    response_model_exclude_none=True,
)
async def low_stock(
    identity: Identity = Depends(get_current_identity),
    products: ProductService = Depends(get_product_service),
) -> ApiResponse[list[ProductRead]]:
    return ApiResponse(
        message="Low stock products retrieved successfully",
        data=_read(products.get_low_stock_products(owner_scope(identity))),
    )


@router.get(
    "/stats",
    summary="Inventory statistics",
    response_model=ApiResponse[InventoryStatsRead],
    response_model_exclude_none=True,
)
async def stats(
    identity: Identity = Depends(get_current_identity),
    products: ProductService = Depends(get_product_service),
) -> ApiResponse[InventoryStatsRead]:
    result = products.get_inventory_stats(owner_scope(identity))
    return ApiResponse(
        message="Inventory statistics retrieved successfully",
        data=InventoryStatsRead.model_validate(result),
    )


@router.get(
    "/category/{category}",
    summary="Active products in a category",
    response_model=ApiResponse[list[ProductRead]],
    response_model_exclude_none=True,
)
async def by_category(
    category: str,
    identity: Identity = Depends(get_current_identity),
    products: ProductService = Depends(get_product_service),
) -> ApiResponse[list[ProductRead]]:
    return ApiResponse(
        message="Products retrieved successfully",
        data=_read(products.get_products_by_category(category)),
    )


@router.get(
    "/sku/{sku}",
    summary="Look up a product by SKU",
    response_model=ApiResponse[ProductRead],
    response_model_exclude_none=True,
)
async def by_sku(
    sku: str,
    identity: Identity = Depends(admin_only),
    products: ProductService = Depends(get_product_service),
) -> ApiResponse[ProductRead]:
    """Admin lookup; includes soft-deleted products."""
    product = products.get_product_by_sku(sku)
    if product is None:
        raise NotFoundOrForbidden("Product not found")
    return ApiResponse(message="Product retrieved successfully", data=ProductRead.model_validate(product))


@router.post(
    "/bulk-stock",
    summary="Set stock for several products",
    response_model=ApiResponse[list[ProductRead]],
    response_model_exclude_none=True,
)
async def bulk_stock(
    payload: BulkStockRequest,
    identity: Identity = Depends(manager_or_admin),
    products: ProductService = Depends(get_product_service),
) -> ApiResponse[list[ProductRead]]:
    """Entries are applied in order; a failing entry stops the batch but keeps earlier ones."""
    updates = [StockUpdate(product_id=item.product_id, quantity=item.quantity) for item in payload.updates]
    updated = products.bulk_adjust_stock(updates, owner_scope(identity))
    return ApiResponse(message="Stock updated successfully", data=_read(updated))


@router.get(
    "/{product_id}",
    summary="Get a product",
    response_model=ApiResponse[ProductRead],
    response_model_exclude_none=True,
)
async def get_product(
    product_id: str,
    identity: Identity = Depends(get_current_identity),
    products: ProductService = Depends(get_product_service),
) -> ApiResponse[ProductRead]:
    product = products.get_product_by_id(product_id, owner_scope(identity))
    if product is None:
        raise NotFoundOrForbidden("Product not found")
    return ApiResponse(message="Product retrieved successfully", data=ProductRead.model_validate(product))


@router.put(
    "/{product_id}",
    summary="Update a product",
    response_model=ApiResponse[ProductRead],
    response_model_exclude_none=True,
)
async def update_product(
    product_id: str,
    payload: ProductUpdate,
    identity: Identity = Depends(get_current_identity),
    products: ProductService = Depends(get_product_service),
) -> ApiResponse[ProductRead]:
    """Only provided fields are updated (partial update)."""
    product = products.update_product(
        product_id, owner_scope(identity), payload.model_dump(exclude_unset=True)
    )
    return ApiResponse(message="Product updated successfully", data=ProductRead.model_validate(product))


@router.delete(
    "/{product_id}",
    summary="Delete a product (soft delete)",
    response_model=ApiResponse,
    response_model_exclude_none=True,
)
async def delete_product(
    product_id: str,
    identity: Identity = Depends(get_current_identity),
    products: ProductService = Depends(get_product_service),
) -> ApiResponse:
    """Mark the product inactive; it disappears from listings but keeps its SKU."""
    deleted = products.delete_product(product_id, owner_scope(identity))
    return ApiResponse(
        success=deleted,
        message="Product deleted successfully" if deleted else "Failed to delete product",
    )


@router.put(
    "/{product_id}/stock",
    summary="Set stock quantity",
    response_model=ApiResponse[ProductRead],
    response_model_exclude_none=True,
)
async def update_stock(
    product_id: str,
    payload: StockUpdateRequest,
    identity: Identity = Depends(get_current_identity),
    products: ProductService = Depends(get_product_service),
) -> ApiResponse[ProductRead]:
    product = products.update_stock(product_id, payload.quantity, owner_scope(identity))
    return ApiResponse(message="Stock updated successfully", data=ProductRead.model_validate(product))


@router.post(
    "/{product_id}/adjust-stock",
    summary="Adjust stock by a delta",
    response_model=ApiResponse[ProductRead],
    response_model_exclude_none=True,
)
async def adjust_stock(
    product_id: str,
    payload: StockAdjustRequest,
    identity: Identity = Depends(get_current_identity),
    products: ProductService = Depends(get_product_service),
) -> ApiResponse[ProductRead]:
    """Positive adjustments restock, negative ones consume stock."""
    product = products.adjust_stock(product_id, payload.adjustment, owner_scope(identity))
    return ApiResponse(message="Stock adjusted successfully", data=ProductRead.model_validate(product))
