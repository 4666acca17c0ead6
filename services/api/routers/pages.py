# services/api/routers/pages.py
from __future__ import annotations

import logging

from fastapi import APIRouter, HTTPException

from core.deps import Storage
from core.validation import parse_page_payload
from routers.versions import invalidate_cards
from schemas import PageOut, PagePut, PageSaved

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/projects/{project_id}/versions/{version_id}/page", tags=["pages"])


@router.get("", response_model=PageOut)
async def get_page(project_id: str, version_id: str, storage: Storage):
    """Stored page of a version; content is null when nothing was saved yet."""
    if not storage.get_version(project_id, version_id):
        raise HTTPException(status_code=404, detail=f"Version {version_id} not found")

    page = storage.get_page(project_id, version_id)
    if not page:
        return PageOut()
    return PageOut(content=page.get("content"), updated_at=page.get("updated_at"))


@router.put("", response_model=PageSaved)
async def put_page(project_id: str, version_id: str, body: PagePut, storage: Storage):
    """Replace the page of a version (last write wins). The posted JSON is stored as sent."""
    content = parse_page_payload(body.content)

    page = storage.save_page(project_id, version_id, body.content)
    invalidate_cards(project_id)
    logger.info(f"Saved page {project_id}/{version_id}: {len(content.rows)} row(s)")
    return PageSaved(ok=True, updated_at=page.get("updated_at"))
