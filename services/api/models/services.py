# services/api/models/services.py

from __future__ import annotations

import logging
from typing import Any, Dict, List

from pydantic import ValidationError

from .extraction import collect_change_cards
from .page import PageContent

logger = logging.getLogger(__name__)


class PageService:
    """
    Business rules that apply to a whole stored page.
    """

    @staticmethod
    def from_storage(row: Dict[str, Any] | None) -> PageContent | None:
        """
        Parse a stored page row. Returns None when nothing is stored or the
        stored JSON no longer matches the model.
        """
        if not row or row.get("content") is None:
            return None
        try:
            return PageContent.from_api(row["content"])
        except ValidationError as e:
            logger.warning(f"Stored page for version {row.get('version_id')} is malformed: {e.error_count()} error(s)")
            return None


class VersionCardsService:
    """
    Read-only lookup of every version of a project with the change-cards its
    page contains (feeds the "load card from another version" pickers).
    """

    @staticmethod
    def versions_with_cards(storage, project_id: str) -> List[Dict[str, Any]]:
        out: List[Dict[str, Any]] = []
        for version in storage.list_versions(project_id):
            content = PageService.from_storage(
                storage.get_page(project_id, version["version_id"])
            )
            out.append({
                "id": version["version_id"],
                "version": version.get("version") or "",
                "title": version.get("title") or "",
                "cards": collect_change_cards(content) if content else [],
            })
        return out
