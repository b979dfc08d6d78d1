"""Auth rule layer: registration, login, token refresh and profile changes."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Mapping

from sqlalchemy.exc import IntegrityError

from inventory_api.core.errors import (
    AccountDeactivated,
    EmailAlreadyRegistered,
    InvalidCredentials,
    UserInactive,
)
from inventory_api.core.security import TokenService
from inventory_api.db.models.user import User, UserRole
from inventory_api.repositories.users import UserRepository

logger = logging.getLogger(__name__)

PROFILE_FIELDS = ("first_name", "last_name", "profile_image")


@dataclass
class AuthResult:
    user: User
    token: str


class AuthService:
    def __init__(self, users: UserRepository, tokens: TokenService) -> None:
        self.users = users
        self.tokens = tokens

    def _issue_token(self, user: User) -> str:
        return self.tokens.issue(user.id, user.email, user.role)

    def register(
        self,
        email: str,
        password: str,
        first_name: str,
        last_name: str,
        role: str | UserRole | None = None,
    ) -> AuthResult:
        """Create an account and return it with a fresh token.

        Raises:
            EmailAlreadyRegistered: an account with the lower-cased email exists.
        """
        if self.users.find_by_email(email):
            raise EmailAlreadyRegistered()

        role_value = UserRole(role).value if role else UserRole.USER.value
        try:
            user = self.users.create_user(
                email=email,
                password=password,
                first_name=first_name,
                last_name=last_name,
                role=role_value,
            )
        except IntegrityError as e:
            # Lost a race against a concurrent registration with the same email.
            raise EmailAlreadyRegistered() from e

        logger.info(f"Registered user {user.id} with role {user.role}")
        return AuthResult(user=user, token=self._issue_token(user))

    def login(self, email: str, password: str) -> AuthResult:
        """Verify credentials and stamp the last-login time.

        Unknown email and wrong password raise the same error.
        """
        user = self.users.find_by_email(email)
        if user is None or not user.check_password(password):
            logger.info("Rejected login attempt with invalid credentials")
            raise InvalidCredentials()

        if not user.is_active:
            raise AccountDeactivated()

        user = self.users.update_last_login(user.id) or user
        logger.info(f"User {user.id} logged in")
        return AuthResult(user=user, token=self._issue_token(user))

    def get_current_user(self, user_id: str) -> User | None:
        user = self.users.find_by_id(user_id)
        if user is None or not user.is_active:
            return None
        return user

    def refresh_token(self, user_id: str) -> str:
        user = self.get_current_user(user_id)
        if user is None:
            raise UserInactive()
        return self._issue_token(user)

    def verify_token(self, token: str) -> dict[str, Any]:
        return self.tokens.verify(token)

    def change_password(self, user_id: str, current_password: str, new_password: str) -> None:
        user = self.users.find_by_id(user_id)
        if user is None:
            raise UserInactive()
        if not user.check_password(current_password):
            raise InvalidCredentials("Current password is incorrect")

        self.users.set_password(user_id, new_password)
        logger.info(f"Password changed for user {user_id}")

    def update_profile(self, user_id: str, profile_data: Mapping[str, Any]) -> User | None:
        """Update name and profile image; every other key is ignored."""
        changes = {
            field: profile_data[field]
            for field in PROFILE_FIELDS
            if profile_data.get(field) is not None
        }
        if not changes:
            return self.users.find_by_id(user_id)
        return self.users.update(user_id, **changes)

    def list_users(self) -> list[User]:
        return list(self.users.find_all())

    def set_active(self, user_id: str, active: bool) -> User | None:
        if active:
            user = self.users.activate_user(user_id)
        else:
            user = self.users.deactivate_user(user_id)
        if user is not None:
            logger.info(f"User {user_id} {'activated' if active else 'deactivated'}")
        return user
