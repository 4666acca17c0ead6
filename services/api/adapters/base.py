"""
Storage adapter interface for the devlog page builder.
Defines the contract that all storage backends must implement.
"""

from typing import Protocol, List, Dict, Any, Optional


class StorageAdapter(Protocol):
    """
    Protocol defining the interface for all storage adapters.

    This allows swapping between JSON files, SQLite, etc.
    without changing the router or business logic code.

    Page content is stored as opaque JSON (the editor's wire format); the
    adapters never interpret it.
    """

    # ========== Versions ==========

    def create_version(
        self,
        project_id: str,
        version: str,
        title: str,
        description: Optional[str] = None,
        created_by: Optional[str] = None,
    ) -> str:
        """
        Register a new version of a project.

        Args:
            project_id: Owning project (opaque id)
            version: Version label shown to players, e.g. "1.2.0"
            title: Headline of the update
            description: Optional short description
            created_by: Optional user id / email

        Returns:
            Generated version_id

        Raises:
            HTTPException 409 if the project already has this version label.
        """
        ...

    def list_versions(self, project_id: str) -> List[Dict[str, Any]]:
        """
        List all versions of a project, newest first.

        Returns:
            List of dicts with at least:
                - version_id
                - project_id
                - version
                - title
                - description
                - is_published
                - published_at
                - created_at
        """
        ...

    def get_version(self, project_id: str, version_id: str) -> Optional[Dict[str, Any]]:
        """
        Fetch one version of a project.

        Returns:
            Dict with version fields, or None if not found.
        """
        ...

    def publish_version(self, project_id: str, version_id: str) -> Dict[str, Any]:
        """
        Mark a version as published (sets is_published and published_at).

        Raises:
            HTTPException 404 if the version is not found.
        """
        ...

    # ========== Pages ==========

    def get_page(self, project_id: str, version_id: str) -> Optional[Dict[str, Any]]:
        """
        Fetch the stored page of a version.

        Returns:
            Dict with `version_id`, `project_id`, `content` (JSON) and
            `updated_at`, or None if no page has been saved yet.
        """
        ...

    def save_page(self, project_id: str, version_id: str, content: Dict[str, Any]) -> Dict[str, Any]:
        """
        Create or replace the page of a version (last write wins).

        Returns:
            The stored page dict (same shape as get_page).

        Raises:
            HTTPException 404 if the version is not found.
        """
        ...

    # ========== Health ==========

    def ping(self) -> None:
        """Raise if the backend is not reachable."""
        ...
