"""Resolve the caller's identity from the bearer token and gate routes by role."""

from __future__ import annotations

import logging

from fastapi import Depends, Request

from inventory_api.api.dependencies.services import get_auth_service
from inventory_api.core.errors import AuthFailure, InvalidToken, PermissionDenied, UserInactive
from inventory_api.db.models.user import UserRole
from inventory_api.services.access import Identity
from inventory_api.services.auth import AuthService

logger = logging.getLogger(__name__)


def extract_bearer_token(request: Request) -> str | None:
    header = request.headers.get("Authorization")
    if not header:
        return None
    parts = header.split(" ")
    if len(parts) != 2 or parts[0] != "Bearer" or not parts[1]:
        return None
    return parts[1]


def get_current_identity(
    request: Request,
    auth: AuthService = Depends(get_auth_service),
) -> Identity:
    token = extract_bearer_token(request)
    if token is None:
        raise AuthFailure("Access token is required")

    try:
        decoded = auth.verify_token(token)
    except InvalidToken as e:
        raise InvalidToken("Invalid or expired token") from e

    if auth.get_current_user(decoded["userId"]) is None:
        raise UserInactive()

    identity = Identity(user_id=decoded["userId"], email=decoded["email"], role=decoded["role"])
    request.state.identity = identity
    return identity


def require_roles(*roles: UserRole):
    """Build a dependency that admits only callers holding one of ``roles``."""
    allowed = {role.value for role in roles}

    def dependency(identity: Identity = Depends(get_current_identity)) -> Identity:
        if identity.role not in allowed:
            logger.info(f"User {identity.user_id} with role {identity.role} denied access")
            raise PermissionDenied()
        return identity

    return dependency


admin_only = require_roles(UserRole.ADMIN)
manager_or_admin = require_roles(UserRole.MANAGER, UserRole.ADMIN)
