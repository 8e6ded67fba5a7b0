"""Common schemas for API responses."""

from typing import Generic, List, TypeVar

from pydantic import BaseModel

DataT = TypeVar("DataT")


class PaginatedResponse(BaseModel, Generic[DataT]):
    """Paginated response schema."""

    success: bool = True
    data: List[DataT]
    total: int
    page: int
    page_size: int
    total_pages: int

    @classmethod
    def build(cls, data: List[DataT], total: int, page: int, page_size: int):
        return cls(
            data=data,
            total=total,
            page=page,
            page_size=page_size,
            total_pages=(total + page_size - 1) // page_size,
        )


class MessageResponse(BaseModel):
    """Response with message only."""

    success: bool = True
    message: str
