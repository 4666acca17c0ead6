# services/api/core/gateway.py
"""
Persistence gateway used by editor sessions.

Two flavours with the same surface:
  - StoragePageGateway: in-process, talks to the configured storage adapter.
  - HttpPageGateway:    remote, talks to another instance of this API over HTTP.

Reads are retried on transient transport errors; saves are never retried
(the author presses Save again).
"""
from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional, Protocol

import httpx
from tenacity import retry, retry_if_exception_type, stop_after_attempt, wait_exponential

from adapters.base import StorageAdapter
from models.services import VersionCardsService

logger = logging.getLogger(__name__)


class PageGateway(Protocol):
    def load_page(self, project_id: str, version_id: str) -> Optional[Dict[str, Any]]:
        """Stored page content (wire JSON) or None when nothing was saved yet."""
        ...

    def save_page(self, project_id: str, version_id: str, content: Dict[str, Any]) -> None:
        """Persist page content. Raises on failure."""
        ...

    def list_version_cards(self, project_id: str) -> List[Dict[str, Any]]:
        """Versions of the project with their change-cards (read-only lookup)."""
        ...

    def close(self) -> None:
        """Release connections held by the gateway."""
        ...


class StoragePageGateway:
    def __init__(self, storage: StorageAdapter):
        self.storage = storage

    def load_page(self, project_id: str, version_id: str) -> Optional[Dict[str, Any]]:
        page = self.storage.get_page(project_id, version_id)
        if not page:
            return None
        return page.get("content")

    def save_page(self, project_id: str, version_id: str, content: Dict[str, Any]) -> None:
        self.storage.save_page(project_id, version_id, content)

    def list_version_cards(self, project_id: str) -> List[Dict[str, Any]]:
        return VersionCardsService.versions_with_cards(self.storage, project_id)

    def close(self) -> None:
        pass


# ========== Retry decorator for remote reads ==========
def retry_gateway_read(func):
    """Retry idempotent GETs with exponential backoff on connection/timeouts."""
    @retry(
        stop=stop_after_attempt(3),
        wait=wait_exponential(multiplier=0.5, min=0.5, max=4),
        retry=retry_if_exception_type((httpx.TransportError,)),
        reraise=True,
    )
    def wrapper(*args, **kwargs):
        return func(*args, **kwargs)

    return wrapper


class HttpPageGateway:
    """
    Remote gateway speaking the page API:
      GET  /projects/{project_id}/versions/{version_id}/page  -> {"content": ...}
      PUT  /projects/{project_id}/versions/{version_id}/page  <- {"content": ...}
      GET  /projects/{project_id}/versions/cards              -> {"versions": [...]}
    """

    def __init__(
        self,
        base_url: str,
        timeout: float = 30.0,
        client: Optional[httpx.Client] = None,
    ):
        if not base_url and client is None:
            raise ValueError("HttpPageGateway requires a base_url")
        self.client = client or httpx.Client(base_url=base_url, timeout=timeout)

    def close(self) -> None:
        self.client.close()

    @staticmethod
    def _page_path(project_id: str, version_id: str) -> str:
        return f"/projects/{project_id}/versions/{version_id}/page"

    @retry_gateway_read
    def _get_json(self, path: str) -> Dict[str, Any]:
        response = self.client.get(path)
        response.raise_for_status()
        return response.json()

    def load_page(self, project_id: str, version_id: str) -> Optional[Dict[str, Any]]:
        body = self._get_json(self._page_path(project_id, version_id))
        if not isinstance(body, dict):
            raise ValueError("Malformed page payload")
        return body.get("content")

    def save_page(self, project_id: str, version_id: str, content: Dict[str, Any]) -> None:
        response = self.client.put(
            self._page_path(project_id, version_id),
            json={"content": content},
        )
        response.raise_for_status()
        logger.info(f"Saved page {project_id}/{version_id} via {self.client.base_url}")

    def list_version_cards(self, project_id: str) -> List[Dict[str, Any]]:
        body = self._get_json(f"/projects/{project_id}/versions/cards")
        return list((body or {}).get("versions") or [])
