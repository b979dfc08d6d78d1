"""Credential store: persistence for user accounts."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Sequence

from inventory_api.db.models.user import User
from inventory_api.repositories.base import BaseRepository


class UserRepository(BaseRepository[User]):
    model = User

    def create_user(
        self,
        *,
        email: str,
        password: str,
        first_name: str,
        last_name: str,
        role: str,
    ) -> User:
        user = User(
            email=email.strip().lower(),
            first_name=first_name,
            last_name=last_name,
            role=role,
        )
        user.set_password(password)
        return self.save(user)

    def find_by_email(self, email: str) -> User | None:
        return self.find_one(User.email == email.strip().lower())

    def find_active_users(self) -> Sequence[User]:
        return self.find(User.is_active.is_(True), order_by=User.created_at)

    def find_all(self) -> Sequence[User]:
        return self.find(order_by=User.created_at)

    def set_password(self, user_id: str, password: str) -> User | None:
        user = self.find_by_id(user_id)
        if user is None:
            return None
        user.set_password(password)
        return self.save(user)

    def update_last_login(self, user_id: str) -> User | None:
        return self.update(user_id, last_login_at=datetime.now(timezone.utc))

    def deactivate_user(self, user_id: str) -> User | None:
        return self.update(user_id, is_active=False)

    def activate_user(self, user_id: str) -> User | None:
        return self.update(user_id, is_active=True)
