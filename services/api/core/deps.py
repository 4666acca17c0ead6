# services/api/core/deps.py
"""FastAPI dependencies shared by routers."""
from __future__ import annotations

from typing import Annotated

from fastapi import Depends, HTTPException, Request

from adapters.base import StorageAdapter
from core.gateway import PageGateway, StoragePageGateway


def get_storage_adapter(request: Request) -> StorageAdapter:
    storage = getattr(request.app.state, "storage_adapter", None)
    if storage is None:
        raise HTTPException(status_code=503, detail="Storage backend not initialized")
    return storage


def get_page_gateway(request: Request) -> PageGateway:
    """Gateway editor sessions load/save through (remote when configured)."""
    gateway = getattr(request.app.state, "page_gateway", None)
    if gateway is not None:
        return gateway
    return StoragePageGateway(get_storage_adapter(request))


# ---- DI aliases (no default value allowed) ----
Storage = Annotated[StorageAdapter, Depends(get_storage_adapter)]
Gateway = Annotated[PageGateway, Depends(get_page_gateway)]
