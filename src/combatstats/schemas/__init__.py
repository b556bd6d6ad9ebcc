"""Pydantic schemas for API validation and serialization."""

from .common import ErrorResponse, HealthStatus
from .pagination import PageSpec, SortOrder, SortSpec

__all__ = [
    # Common
    "ErrorResponse",
    "HealthStatus",
    # Pagination
    "PageSpec",
    "SortOrder",
    "SortSpec",
]
