# src/combatstats/schemas/pagination.py

"""Sorting and pagination value objects shared by every list resource."""

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field


class SortOrder(str, Enum):
    """Sort direction for list endpoints."""

    ASC = "asc"
    DESC = "desc"

    @classmethod
    def parse(cls, raw: str) -> "SortOrder":
        """Anything other than a case-insensitive 'asc' sorts descending."""
        return cls.ASC if raw.strip().lower() == cls.ASC.value else cls.DESC


class SortSpec(BaseModel):
    """A requested ordering.

    Attributes:
        key: Public sort key, already matched against the template allow-list.
            None means "use the template default".
        direction: Requested direction for the primary key
    """

    model_config = ConfigDict(frozen=True)

    key: str | None = None
    direction: SortOrder = SortOrder.DESC


class PageSpec(BaseModel):
    """One page of an ordered result set.

    Attributes:
        page: 1-indexed page number
        size: Number of rows per page
    """

    model_config = ConfigDict(frozen=True)

    page: int = Field(1, ge=1, description="1-indexed page number")
    size: int = Field(20, ge=1, description="Rows per page")

    @property
    def offset(self) -> int:
        return (self.page - 1) * self.size

    @property
    def limit(self) -> int:
        return self.size
