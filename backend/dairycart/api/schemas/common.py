"""Envelope payloads shared by every resource."""

from typing import Generic, TypeVar

from pydantic import BaseModel

T = TypeVar("T")


class ListResponse(BaseModel, Generic[T]):
    count: int
    limit: int
    page: int
    data: list[T]


class ErrorResponse(BaseModel):
    status: int
    message: str
