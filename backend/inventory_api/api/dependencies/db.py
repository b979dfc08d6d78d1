"""Database session dependency."""

from collections.abc import Generator

from fastapi import Request
from sqlalchemy.orm import Session

from inventory_api.db.session import get_db


def get_session(request: Request) -> Generator[Session, None, None]:
    """FastAPI dependency that yields a managed SQLAlchemy session.

    The session factory is attached to ``app.state`` by ``create_app`` so
    each application instance owns its own engine.
    """
    yield from get_db(request.app.state.session_factory)
