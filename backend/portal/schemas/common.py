"""Common schemas used across the portal API."""

from typing import Any

from pydantic import BaseModel


class MessageResponse(BaseModel):
    """Envelope for mutations.

    Returns:
        {
            "success": true,
            "message": "Data warga berhasil ditambahkan",
            "data": {...}        # optional
        }
    """
    success: bool = True
    message: str
    data: Any = None


class Pagination(BaseModel):
    page: int
    limit: int
    total: int
    totalPages: int
    hasNext: bool
    hasPrev: bool


class ListResponse(BaseModel):
    success: bool = True
    data: list[Any]
    pagination: Pagination | None = None
