# services/api/routers/editor.py
"""
Server-held editor sessions.

A session wraps one EditorSession (document, selection, undo history) for one
version's page. Sessions live in memory and expire when idle. Handlers that
touch an open session are async so they run on the event loop one at a time.
"""
from __future__ import annotations

import logging
from typing import Any, Dict

from cachetools import TTLCache
from fastapi import APIRouter, Body, HTTPException, Query, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import HTMLResponse
from pydantic import ValidationError

from core.deps import Gateway
from core.render import render_page
from models.element_registry import catalog
from models.session import EditorSession
from routers.versions import invalidate_cards
from schemas import LoadCardRequest, SelectRequest, SessionCreate, operation_adapter
from settings import get_settings

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/editor", tags=["editor"])

_settings = get_settings()
sessions: TTLCache = TTLCache(maxsize=_settings.max_sessions, ttl=_settings.session_ttl_seconds)


def _get_session(session_id: str) -> EditorSession:
    session = sessions.get(session_id)
    if session is None:
        raise HTTPException(status_code=404, detail="SESSION_NOT_FOUND")
    # touch: reading re-inserts so the TTL counts from the last use
    sessions[session_id] = session
    return session


@router.get("/element-types")
async def element_types():
    """Element picker catalog: categories, defaults and property fields per type."""
    return {"categories": catalog()}


@router.post("/sessions", status_code=status.HTTP_201_CREATED)
def create_session(body: SessionCreate, gateway: Gateway):
    session = EditorSession(
        body.project_id,
        body.version_id,
        history_limit=get_settings().history_limit,
    )
    session.load(gateway)
    sessions[session.session_id] = session
    logger.info(f"Opened editor session {session.session_id} for {body.project_id}/{body.version_id}")
    return session.to_api()


@router.get("/sessions/{session_id}")
async def get_session(session_id: str):
    return _get_session(session_id).to_api()


@router.delete("/sessions/{session_id}")
async def close_session(session_id: str):
    _get_session(session_id)
    del sessions[session_id]
    logger.info(f"Closed editor session {session_id}")
    return {"ok": True}


@router.post("/sessions/{session_id}/operations")
async def apply_operation(session_id: str, payload: Dict[str, Any] = Body(...)):
    """Apply one edit operation (tagged union on `op`)."""
    session = _get_session(session_id)
    try:
        operation = operation_adapter.validate_python(payload)
    except ValidationError as e:
        raise RequestValidationError(e.errors())

    changed = session.apply(operation.op, **operation.params())
    return {**session.to_api(), "changed": changed}


@router.post("/sessions/{session_id}/undo")
async def undo(session_id: str):
    session = _get_session(session_id)
    changed = session.undo()
    return {**session.to_api(), "changed": changed}


@router.post("/sessions/{session_id}/redo")
async def redo(session_id: str):
    session = _get_session(session_id)
    changed = session.redo()
    return {**session.to_api(), "changed": changed}


@router.post("/sessions/{session_id}/select")
async def select(session_id: str, body: SelectRequest):
    session = _get_session(session_id)
    if not session.select(body.element_id):
        raise HTTPException(status_code=404, detail="ELEMENT_NOT_FOUND")
    return session.to_api()


@router.post("/sessions/{session_id}/save")
async def save(session_id: str, gateway: Gateway):
    """Extract cards and persist. On failure the document is kept and saved=false."""
    session = _get_session(session_id)
    saved = session.save(gateway)
    if saved:
        invalidate_cards(session.project_id)
    return {**session.to_api(), "saved": saved}


@router.post("/sessions/{session_id}/load-card")
async def load_card(session_id: str, body: LoadCardRequest, gateway: Gateway):
    """Copy a change-card from another version into a comparison or card-reference."""
    session = _get_session(session_id)
    versions = gateway.list_version_cards(session.project_id)
    changed = session.load_card(
        body.element_id,
        body.version_id,
        body.card_id,
        versions,
        slot=body.slot,
    )
    return {**session.to_api(), "changed": changed}


@router.get("/sessions/{session_id}/preview", response_class=HTMLResponse)
async def preview(session_id: str, editing: bool = Query(False)):
    session = _get_session(session_id)
    state = session.state
    return HTMLResponse(
        render_page(
            state.content,
            is_editing=editing,
            selected_element_id=state.selected_element_id if editing else None,
        )
    )
