"""Response envelope and pagination payloads shared by every endpoint."""

from typing import Generic, TypeVar

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

T = TypeVar("T")

# Read models load from ORM attributes by field name and serialize with camelCase keys.
READ_CONFIG = ConfigDict(
    from_attributes=True,
    alias_generator=to_camel,
    populate_by_name=True,
)

# Request bodies accept both camelCase and snake_case keys.
REQUEST_CONFIG = ConfigDict(
    alias_generator=to_camel,
    populate_by_name=True,
)


class FieldError(BaseModel):
    field: str
    message: str


class ApiResponse(BaseModel, Generic[T]):
    """Uniform envelope: ``{success, message, data?, error?, errors?}``."""

    success: bool = True
    message: str
    data: T | None = None
    error: str | None = None
    errors: list[FieldError] | None = None


class PaginationRead(BaseModel):
    model_config = READ_CONFIG

    page: int
    limit: int
    total: int
    pages: int
    has_next: bool
    has_prev: bool


class PaginatedData(BaseModel, Generic[T]):
    model_config = READ_CONFIG

    data: list[T]
    pagination: PaginationRead
