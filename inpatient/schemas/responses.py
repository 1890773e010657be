"""
Common response schemas.
"""
from pydantic import BaseModel
from typing import Optional, Dict, Any


class MessageResponse(BaseModel):
    """Generic response with a message."""
    success: bool
    message: str
    data: Optional[dict] = None


class ErrorResponse(BaseModel):
    """Error body returned for every application exception."""
    error: str
    message: str
    details: Dict[str, Any] = {}


class PaginationInfo(BaseModel):
    """Pagination block of list responses."""
    current_page: int
    total_pages: int
    total_items: int
    items_per_page: int
    has_next_page: bool
    has_prev_page: bool
