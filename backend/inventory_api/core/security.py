"""Identity token issuance/verification and password hashing helpers."""

from __future__ import annotations

import logging
from datetime import datetime, timedelta, timezone
from typing import Any

import jwt
from werkzeug.security import check_password_hash, generate_password_hash

from inventory_api.core.errors import InvalidToken, TokenExpired
from inventory_api.utils.durations import parse_duration

logger = logging.getLogger(__name__)

JWT_ALGORITHM = "HS256"


def hash_password(password: str) -> str:
    return generate_password_hash(password)


def verify_password(password: str, password_hash: str | None) -> bool:
    if not password_hash:
        return False
    return check_password_hash(password_hash, password)


class TokenService:
    """Issue and verify signed, time-limited identity tokens.

    Tokens carry ``userId``, ``email`` and ``role`` claims alongside the
    standard ``iat``/``exp`` timestamps.
    """

    def __init__(self, secret: str, expires_in: str | int | timedelta = "7d") -> None:
        if not secret:
            raise ValueError("Token secret must not be empty")
        self._secret = secret
        if isinstance(expires_in, timedelta):
            self.lifetime = expires_in
        else:
            self.lifetime = parse_duration(expires_in)

    def issue(self, user_id: str, email: str, role: str, *, now: datetime | None = None) -> str:
        issued_at = now or datetime.now(timezone.utc)
        payload = {
            "userId": str(user_id),
            "email": email,
            "role": role,
            "iat": issued_at,
            "exp": issued_at + self.lifetime,
        }
        return jwt.encode(payload, self._secret, algorithm=JWT_ALGORITHM)

    def verify(self, token: str) -> dict[str, Any]:
        """Decode ``token`` and return ``{userId, email, role}``.

        Raises:
            TokenExpired: the signature is valid but ``exp`` has passed.
            InvalidToken: any other decoding or signature failure.
        """
        try:
            decoded = jwt.decode(
                token,
                self._secret,
                algorithms=[JWT_ALGORITHM],
                options={"require": ["exp", "iat"]},
            )
        except jwt.ExpiredSignatureError as e:
            raise TokenExpired() from e
        except jwt.PyJWTError as e:
            logger.debug(f"Rejected identity token: {e}")
            raise InvalidToken() from e

        if not all(decoded.get(claim) for claim in ("userId", "email", "role")):
            raise InvalidToken()

        return {
            "userId": decoded["userId"],
            "email": decoded["email"],
            "role": decoded["role"],
        }
