"""Registration, login and account management endpoints."""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, status

from inventory_api.api.dependencies.auth import admin_only, get_current_identity
from inventory_api.api.dependencies.services import get_auth_service
from inventory_api.api.schemas.auth import (
    AuthPayload,
    ChangePasswordRequest,
    LoginRequest,
    ProfileUpdate,
    RegisterRequest,
    TokenPayload,
    UserRead,
)
from inventory_api.api.schemas.common import ApiResponse
from inventory_api.core.errors import NotFoundOrForbidden
from inventory_api.services.access import Identity
from inventory_api.services.auth import AuthResult, AuthService

logger = logging.getLogger(__name__)

router = APIRouter()


def _auth_payload(result: AuthResult) -> AuthPayload:
    return AuthPayload(user=UserRead.model_validate(result.user), token=result.token)


@router.post(
    "/register",
    summary="Register a new user",
    status_code=status.HTTP_201_CREATED,
    response_model=ApiResponse[AuthPayload],
    response_model_exclude_none=True,
)
async def register(
    payload: RegisterRequest,
    auth: AuthService = Depends(get_auth_service),
) -> ApiResponse[AuthPayload]:
    """Create an account; the email must not be registered yet (case-insensitive)."""
    result = auth.register(
        email=payload.email,
        password=payload.password,
        first_name=payload.first_name.strip(),
        last_name=payload.last_name.strip(),
        role=payload.role,
    )
    return ApiResponse(message="User registered successfully", data=_auth_payload(result))


@router.post(
    "/login",
    summary="Log in",
    response_model=ApiResponse[AuthPayload],
    response_model_exclude_none=True,
)
async def login(
    payload: LoginRequest,
    auth: AuthService = Depends(get_auth_service),
) -> ApiResponse[AuthPayload]:
    result = auth.login(payload.email, payload.password)
    return ApiResponse(message="Login successful", data=_auth_payload(result))


@router.get(
    "/me",
    summary="Current user profile",
    response_model=ApiResponse[UserRead],
    response_model_exclude_none=True,
)
async def me(
    identity: Identity = Depends(get_current_identity),
    auth: AuthService = Depends(get_auth_service),
) -> ApiResponse[UserRead]:
    user = auth.get_current_user(identity.user_id)
    if user is None:
        raise NotFoundOrForbidden("User not found")
    return ApiResponse(
        message="User profile retrieved successfully",
        data=UserRead.model_validate(user),
    )


@router.post(
    "/refresh",
    summary="Refresh the identity token",
    response_model=ApiResponse[TokenPayload],
    response_model_exclude_none=True,
)
async def refresh(
    identity: Identity = Depends(get_current_identity),
    auth: AuthService = Depends(get_auth_service),
) -> ApiResponse[TokenPayload]:
    token = auth.refresh_token(identity.user_id)
    return ApiResponse(message="Token refreshed successfully", data=TokenPayload(token=token))


@router.put(
    "/change-password",
    summary="Change password",
    response_model=ApiResponse,
    response_model_exclude_none=True,
)
async def change_password(
    payload: ChangePasswordRequest,
    identity: Identity = Depends(get_current_identity),
    auth: AuthService = Depends(get_auth_service),
) -> ApiResponse:
    auth.change_password(identity.user_id, payload.current_password, payload.new_password)
    return ApiResponse(message="Password changed successfully")


@router.put(
    "/profile",
    summary="Update profile",
    response_model=ApiResponse[UserRead],
    response_model_exclude_none=True,
)
async def update_profile(
    payload: ProfileUpdate,
    identity: Identity = Depends(get_current_identity),
    auth: AuthService = Depends(get_auth_service),
) -> ApiResponse[UserRead]:
    """Only first name, last name and profile image can be changed here."""
    user = auth.update_profile(identity.user_id, payload.model_dump(exclude_unset=True))
    if user is None:
        raise NotFoundOrForbidden("User not found")
    return ApiResponse(message="Profile updated successfully", data=UserRead.model_validate(user))


@router.post(
    "/logout",
    summary="Log out",
    response_model=ApiResponse,
    response_model_exclude_none=True,
)
async def logout(identity: Identity = Depends(get_current_identity)) -> ApiResponse:
    """Tokens are stateless; the client discards its copy."""
    logger.info(f"User {identity.user_id} logged out")
    return ApiResponse(message="Logout successful")


@router.get(
    "/users",
    summary="List all users",
    response_model=ApiResponse[list[UserRead]],
    response_model_exclude_none=True,
)
async def list_users(
    identity: Identity = Depends(admin_only),
    auth: AuthService = Depends(get_auth_service),
) -> ApiResponse[list[UserRead]]:
    users = [UserRead.model_validate(u) for u in auth.list_users()]
    return ApiResponse(message="Users retrieved successfully", data=users)


@router.patch(
    "/users/{user_id}/activate",
    summary="Reactivate a user account",
    response_model=ApiResponse[UserRead],
    response_model_exclude_none=True,
)
async def activate_user(
    user_id: str,
    identity: Identity = Depends(admin_only),
    auth: AuthService = Depends(get_auth_service),
) -> ApiResponse[UserRead]:
    user = auth.set_active(user_id, True)
    if user is None:
        raise NotFoundOrForbidden("User not found")
    return ApiResponse(message="User activated successfully", data=UserRead.model_validate(user))


@router.patch(
    "/users/{user_id}/deactivate",
    summary="Deactivate a user account",
    response_model=ApiResponse[UserRead],
    response_model_exclude_none=True,
)
async def deactivate_user(
    user_id: str,
    identity: Identity = Depends(admin_only),
    auth: AuthService = Depends(get_auth_service),
) -> ApiResponse[UserRead]:
    user = auth.set_active(user_id, False)
    if user is None:
        raise NotFoundOrForbidden("User not found")
    return ApiResponse(message="User deactivated successfully", data=UserRead.model_validate(user))
