# services/api/schemas/page.py
from __future__ import annotations

from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """API schema that reads and writes camelCase keys."""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class PagePut(CamelModel):
    """Body of PUT .../page. Content is checked against the page model by the router."""
    content: Dict[str, Any] = Field(..., description="Page document (rows, settings)")


class PageOut(CamelModel):
    """
    Stored page of a version. `content` is null when nothing has been saved
    yet; clients start from an empty page in that case.
    """
    content: Optional[Dict[str, Any]] = None
    updated_at: Optional[str] = None


class PageSaved(CamelModel):
    ok: bool = True
    updated_at: Optional[str] = None


class ChangeOut(BaseModel):
    type: str
    text: str = ""


class CardOut(BaseModel):
    """A change-card as listed in the card pickers."""
    id: str
    title: str
    subtitle: str = ""
    icon: str = ""
    changes: List[ChangeOut] = Field(default_factory=list)


class VersionWithCards(BaseModel):
    id: str
    version: str
    title: str
    cards: List[CardOut] = Field(default_factory=list)


class VersionCardsOut(BaseModel):
    versions: List[VersionWithCards] = Field(default_factory=list)
