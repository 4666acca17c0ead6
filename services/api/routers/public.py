# services/api/routers/public.py
from __future__ import annotations

from html import escape

from fastapi import APIRouter, HTTPException
from fastapi.responses import HTMLResponse

from core.deps import Storage
from core.render import render_page
from models.services import PageService
from models.page import PageContent
from schemas import PublicUpdateOut

router = APIRouter(prefix="/public/updates", tags=["public"])


def _published(storage, project_id: str, version_id: str):
    version = storage.get_version(project_id, version_id)
    if not version or not version.get("is_published"):
        raise HTTPException(status_code=404, detail="UPDATE_NOT_FOUND")
    page = storage.get_page(project_id, version_id)
    content = PageService.from_storage(page) or PageContent.empty()
    return version, content, (page or {}).get("updated_at")


@router.get("/{project_id}/{version_id}", response_model=PublicUpdateOut)
async def get_public_update(project_id: str, version_id: str, storage: Storage):
    """Published update: version header plus page content."""
    version, content, updated_at = _published(storage, project_id, version_id)
    return PublicUpdateOut(version=version, content=content.to_api(), updated_at=updated_at)


@router.get("/{project_id}/{version_id}/html", response_class=HTMLResponse)
async def get_public_update_html(project_id: str, version_id: str, storage: Storage):
    version, content, _ = _published(storage, project_id, version_id)
    title = escape(f"{version.get('title') or ''} ({version.get('version') or ''})")
    return HTMLResponse(
        "<!DOCTYPE html>"
        f'<html><head><meta charset="utf-8"><title>{title}</title></head>'
        f"<body><header><h1>{title}</h1></header>{render_page(content)}</body></html>"
    )
