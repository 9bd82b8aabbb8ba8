"""Generic paginated response envelope."""

from typing import Generic, TypeVar

from pydantic import BaseModel

from app.config import settings

T = TypeVar("T")

# Largest page index whose row offset (page * size) still fits a signed
# 64-bit integer, the widest OFFSET a database accepts.
MAX_PAGE_INDEX = (2**63 - 1) // settings.MAX_PAGE_SIZE - 1


class PageResponse(BaseModel, Generic[T]):
    """
    One page of a larger ordered collection.

    `page` is zero-based. `total` counts every item in the collection,
    not just this page.
    """
    items: list[T]
    total: int
    page: int
    size: int
    total_pages: int

    model_config = {"from_attributes": True}
