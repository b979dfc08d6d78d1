"""Wire repositories and rule-layer services per request."""

from fastapi import Depends, Request
from sqlalchemy.orm import Session

from inventory_api.api.dependencies.db import get_session
from inventory_api.core.security import TokenService
from inventory_api.repositories.products import ProductRepository
from inventory_api.repositories.users import UserRepository
from inventory_api.services.auth import AuthService
from inventory_api.services.products import ProductService


def get_token_service(request: Request) -> TokenService:
    return request.app.state.token_service


def get_auth_service(
    db: Session = Depends(get_session),
    tokens: TokenService = Depends(get_token_service),
) -> AuthService:
    return AuthService(UserRepository(db), tokens)


def get_product_service(db: Session = Depends(get_session)) -> ProductService:
    return ProductService(ProductRepository(db))
