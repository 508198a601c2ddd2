"""Shared / generic schemas."""

from pydantic import BaseModel


class MessageResponse(BaseModel):
    """Plain acknowledgement for endpoints with nothing else to return."""

    success: bool = True
    message: str = "ok"


class Pagination(BaseModel):
    """Page bookkeeping attached to list responses."""

    current_page: int
    total_pages: int
    total_items: int
    has_next: bool
    has_prev: bool
