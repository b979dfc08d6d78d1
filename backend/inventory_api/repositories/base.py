"""Generic SQLAlchemy repository used by the user and product stores."""

from __future__ import annotations

import logging
from typing import Any, Generic, Sequence, TypeVar

from sqlalchemy import func, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session
from sqlalchemy.sql import ColumnElement

from inventory_api.db.base import Base
from inventory_api.utils.pagination import Page, build_pagination, offset_for

logger = logging.getLogger(__name__)

ModelT = TypeVar("ModelT", bound=Base)


class BaseRepository(Generic[ModelT]):
    """CRUD, counting and paginated lookup for a single model.

    Every write commits immediately so that a failure in a later call never
    rolls back work an earlier call already reported as done.
    """

    model: type[ModelT]

    def __init__(self, db: Session) -> None:
        self.db = db

    def _commit(self) -> None:
        try:
            self.db.commit()
        except SQLAlchemyError:
            self.db.rollback()
            raise

    def create(self, **values: Any) -> ModelT:
        instance = self.model(**values)
        self.db.add(instance)
        self._commit()
        self.db.refresh(instance)
        return instance

    def save(self, instance: ModelT) -> ModelT:
        self.db.add(instance)
        self._commit()
        self.db.refresh(instance)
        return instance

    def find_by_id(self, id_: str) -> ModelT | None:
        return self.db.get(self.model, id_)

    def find_one(self, *criteria: ColumnElement[bool]) -> ModelT | None:
        return self.db.scalar(select(self.model).where(*criteria).limit(1))

    def find(self, *criteria: ColumnElement[bool], order_by: Any = None) -> Sequence[ModelT]:
        query = select(self.model).where(*criteria)
        if order_by is not None:
            query = query.order_by(order_by)
        return self.db.scalars(query).all()

    def find_with_pagination(
        self,
        criteria: Sequence[ColumnElement[bool]],
        *,
        page: int,
        limit: int,
        order_by: Any,
    ) -> Page[ModelT]:
        total = self.count(*criteria)
        query = (
            select(self.model)
            .where(*criteria)
            .order_by(order_by)
            .offset(offset_for(page, limit))
            .limit(limit)
        )
        items = list(self.db.scalars(query).all())
        return Page(data=items, pagination=build_pagination(page, limit, total))

    def update(self, id_: str, **values: Any) -> ModelT | None:
        """Apply a partial update; returns ``None`` when ``id_`` does not exist."""
        instance = self.find_by_id(id_)
        if instance is None:
            return None
        for key, value in values.items():
            setattr(instance, key, value)
        self._commit()
        self.db.refresh(instance)
        return instance

    def count(self, *criteria: ColumnElement[bool]) -> int:
        query = select(func.count()).select_from(self.model).where(*criteria)
        return self.db.scalar(query) or 0

    def exists(self, *criteria: ColumnElement[bool]) -> bool:
        return self.find_one(*criteria) is not None
