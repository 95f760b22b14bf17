from typing import Generic, TypeVar

from pydantic import BaseModel, Field, computed_field

T = TypeVar("T")


class Pagination(BaseModel):
    """Page-based pagination metadata for list endpoints."""

    page: int = Field(..., description="Current page number (1-based)", ge=1)
    limit: int = Field(..., description="Maximum items per page", ge=1)
    total: int = Field(..., description="Total number of items across all pages", ge=0)

    @computed_field(alias="totalPages")  # type: ignore[prop-decorator]
    @property
    def total_pages(self) -> int:
        """Number of pages needed to show all items."""
        return -(-self.total // self.limit)

    @property
    def skip(self) -> int:
        """Number of items before the current page."""
        return (self.page - 1) * self.limit


class PaginationResult(BaseModel, Generic[T]):
    """Pagination result wrapper for list endpoints."""

    items: list[T] = Field(..., description="List of items in current page")
    pagination: Pagination

    @property
    def has_more(self) -> bool:
        """Whether there are more pages beyond the current one."""
        return self.pagination.page < self.pagination.total_pages
