from __future__ import annotations

from typing import Generic, TypeVar

from pydantic import BaseModel

T = TypeVar("T")


class ApiResponse(BaseModel, Generic[T]):
    """`{message, data}` envelope used by every JSON endpoint."""

    message: str
    data: T
