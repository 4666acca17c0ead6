from __future__ import annotations

from .page import (
    ELEMENT_MODELS,
    ELEMENT_TYPES,
    CardFace,
    Change,
    Column,
    Element,
    ElementStyle,
    PageContent,
    PageSettings,
    Row,
    RowSettings,
    generate_id,
)
from .history import HistoryManager
from .session import EditorSession, EditorState

__all__ = [
    "ELEMENT_MODELS",
    "ELEMENT_TYPES",
    "CardFace",
    "Change",
    "Column",
    "Element",
    "ElementStyle",
    "PageContent",
    "PageSettings",
    "Row",
    "RowSettings",
    "generate_id",
    "HistoryManager",
    "EditorSession",
    "EditorState",
]
