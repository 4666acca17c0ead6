"""
Pydantic schemas for API request/response validation.
"""
from typing import Optional

from pydantic import BaseModel

from .editor import LoadCardRequest, Operation, SelectRequest, SessionCreate, operation_adapter
from .page import CamelModel, PageOut, PagePut, PageSaved, VersionCardsOut
from .version import PublicUpdateOut, VersionCreate, VersionOut


# ============ Health Check ============


class HealthCheck(BaseModel):
    """Health check response."""
    status: str = "healthy"
    backend: Optional[str] = None
    version: Optional[str] = None


# Re-export all
__all__ = [
    "CamelModel",
    "PageOut",
    "PagePut",
    "PageSaved",
    "VersionCardsOut",
    "VersionCreate",
    "VersionOut",
    "PublicUpdateOut",
    "SessionCreate",
    "SelectRequest",
    "LoadCardRequest",
    "Operation",
    "operation_adapter",
    "HealthCheck",
]
