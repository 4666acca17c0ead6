"""
Pydantic schemas for project versions.
"""
from typing import Optional

from pydantic import Field

from .page import CamelModel


class VersionCreate(CamelModel):
    """Schema for registering a new version of a project."""
    version: str = Field(..., min_length=1, max_length=50, description="Version label, e.g. 1.2.0")
    title: str = Field(..., min_length=1, max_length=200, description="Headline of the update")
    description: Optional[str] = Field(None, max_length=500, description="Short description")
    created_by: Optional[str] = Field(None, description="Creator email/ID")


class VersionOut(CamelModel):
    """Schema for version output."""
    version_id: str
    project_id: str
    version: str
    title: str
    description: Optional[str] = None
    is_published: bool = False
    published_at: Optional[str] = None
    created_at: Optional[str] = None


class PublicUpdateOut(CamelModel):
    """A published update as shown to players."""
    version: VersionOut
    content: dict
    updated_at: Optional[str] = None
