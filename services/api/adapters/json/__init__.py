"""
JSON file storage adapter for the devlog page builder.
Simple file-based storage for quick demos and testing.
Not production-ready (no proper locking, not suitable for concurrent access).
"""
import json
import uuid
from datetime import datetime, timezone
from typing import List, Dict, Any, Optional
from pathlib import Path
from fastapi import HTTPException


def _utc_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


class JsonAdapter:
    """
    JSON file-based storage adapter.
    Stores data in separate JSON files under the data directory.
    Uses atomic file operations for basic consistency.
    """

    def __init__(self, data_dir: str = "data"):
        """
        Initialize the JSON adapter.

        Args:
            data_dir: Directory to store JSON files (created on first write)
        """
        self.data_dir = Path(data_dir)

        # File paths
        self.versions_file = self.data_dir / "versions.json"
        self.pages_file = self.data_dir / "pages.json"

    def _read_file(self, filepath: Path) -> List[Dict[str, Any]]:
        """Read and parse a JSON file."""
        try:
            with open(filepath, "r", encoding="utf-8") as f:
                return json.load(f)
        except (FileNotFoundError, json.JSONDecodeError):
            return []

    def _write_file(self, filepath: Path, data: List[Dict[str, Any]]) -> None:
        """Write data to a JSON file atomically."""
        filepath.parent.mkdir(parents=True, exist_ok=True)

        # Write to temporary file first
        tmp_file = filepath.with_suffix(".tmp")
        with open(tmp_file, "w", encoding="utf-8") as f:
            json.dump(data, f, indent=2, ensure_ascii=False, default=str)

        # Atomic rename
        tmp_file.replace(filepath)

    # ========== Versions ==========

    def create_version(
        self,
        project_id: str,
        version: str,
        title: str,
        description: Optional[str] = None,
        created_by: Optional[str] = None,
    ) -> str:
        """Create a new version for a project."""
        versions = self._read_file(self.versions_file)
        if any(v["project_id"] == project_id and v["version"] == version for v in versions):
            raise HTTPException(
                status_code=409,
                detail=f"Version {version} already exists for project {project_id}"
            )

        version_id = str(uuid.uuid4())
        versions.append({
            "version_id": version_id,
            "project_id": project_id,
            "version": version,
            "title": title,
            "description": description,
            "is_published": False,
            "published_at": None,
            "created_by": created_by,
            "created_at": _utc_iso(),
        })
        self._write_file(self.versions_file, versions)

        return version_id

    def list_versions(self, project_id: str) -> List[Dict[str, Any]]:
        """List versions of a project, newest first (file order is creation order)."""
        versions = self._read_file(self.versions_file)
        return [v for v in reversed(versions) if v["project_id"] == project_id]

    def get_version(self, project_id: str, version_id: str) -> Optional[Dict[str, Any]]:
        versions = self._read_file(self.versions_file)
        return next(
            (v for v in versions if v["project_id"] == project_id and v["version_id"] == version_id),
            None
        )

    def publish_version(self, project_id: str, version_id: str) -> Dict[str, Any]:
        """Mark a version as published."""
        versions = self._read_file(self.versions_file)
        version = next(
            (v for v in versions if v["project_id"] == project_id and v["version_id"] == version_id),
            None
        )
        if not version:
            raise HTTPException(status_code=404, detail=f"Version {version_id} not found")

        version["is_published"] = True
        version["published_at"] = _utc_iso()
        self._write_file(self.versions_file, versions)
        return version

    # ========== Pages ==========

    def get_page(self, project_id: str, version_id: str) -> Optional[Dict[str, Any]]:
        pages = self._read_file(self.pages_file)
        return next(
            (p for p in pages if p["project_id"] == project_id and p["version_id"] == version_id),
            None
        )

    def save_page(self, project_id: str, version_id: str, content: Dict[str, Any]) -> Dict[str, Any]:
        """Upsert the page of a version."""
        if not self.get_version(project_id, version_id):
            raise HTTPException(status_code=404, detail=f"Version {version_id} not found")

        pages = self._read_file(self.pages_file)
        page = next(
            (p for p in pages if p["project_id"] == project_id and p["version_id"] == version_id),
            None
        )
        if page is None:
            page = {"project_id": project_id, "version_id": version_id}
            pages.append(page)

        page["content"] = content
        page["updated_at"] = _utc_iso()

        self._write_file(self.pages_file, pages)
        return page

    # ========== Health ==========

    def ping(self) -> None:
        if self.data_dir.exists() and not self.data_dir.is_dir():
            raise RuntimeError(f"{self.data_dir} is not a directory")
