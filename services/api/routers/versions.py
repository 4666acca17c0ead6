# services/api/routers/versions.py
from __future__ import annotations

import logging
from typing import Any, Dict, List

from cachetools import TTLCache
from fastapi import APIRouter, HTTPException, status

from core.deps import Storage
from models.services import VersionCardsService
from schemas import VersionCardsOut, VersionCreate, VersionOut
from settings import get_settings

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/projects/{project_id}/versions", tags=["versions"])

# project_id -> versions-with-cards listing
cards_cache: TTLCache = TTLCache(maxsize=128, ttl=max(get_settings().cards_cache_ttl_seconds, 1))


def invalidate_cards(project_id: str) -> None:
    """Drop the cached card listing of a project (called after every page save)."""
    cards_cache.pop(project_id, None)


@router.post("", status_code=status.HTTP_201_CREATED, response_model=VersionOut)
async def create_version(project_id: str, body: VersionCreate, storage: Storage):
    version_id = storage.create_version(
        project_id,
        version=body.version,
        title=body.title,
        description=body.description,
        created_by=body.created_by,
    )
    logger.info(f"Created version {body.version} ({version_id}) for project {project_id}")
    invalidate_cards(project_id)
    return storage.get_version(project_id, version_id)


@router.get("", response_model=List[VersionOut])
async def list_versions(project_id: str, storage: Storage):
    return storage.list_versions(project_id)


# NOTE: must stay above /{version_id}
@router.get("/cards", response_model=VersionCardsOut)
async def list_version_cards(project_id: str, storage: Storage):
    """Every version of the project with the change-cards on its page, newest first."""
    if get_settings().cards_cache_ttl_seconds > 0 and project_id in cards_cache:
        return {"versions": cards_cache[project_id]}

    versions: List[Dict[str, Any]] = VersionCardsService.versions_with_cards(storage, project_id)
    if get_settings().cards_cache_ttl_seconds > 0:
        cards_cache[project_id] = versions
    return {"versions": versions}


@router.get("/{version_id}", response_model=VersionOut)
async def get_version(project_id: str, version_id: str, storage: Storage):
    version = storage.get_version(project_id, version_id)
    if not version:
        raise HTTPException(status_code=404, detail=f"Version {version_id} not found")
    return version


@router.post("/{version_id}/publish", response_model=VersionOut)
async def publish_version(project_id: str, version_id: str, storage: Storage):
    version = storage.publish_version(project_id, version_id)
    logger.info(f"Published version {version_id} of project {project_id}")
    return version
