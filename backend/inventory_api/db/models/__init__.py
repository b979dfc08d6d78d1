"""Database models package."""
from inventory_api.db.models.product import Product, StockStatus
from inventory_api.db.models.user import User, UserRole

__all__ = ["Product", "StockStatus", "User", "UserRole"]
