# services/api/models/session.py
"""
Editor session: one author editing one version's page.

All document changes go through `EditorSession.apply`, which runs the pure
edit engine and records the previous document in the history when something
actually changed. The session is the only writer of its state.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Callable, Dict, List, Optional
from uuid import uuid4

from pydantic import ValidationError

from . import edit_engine
from .element_registry import card_patch, find_card
from .extraction import extract_change_cards
from .history import DEFAULT_CAPACITY, HistoryManager
from .page import PageContent

logger = logging.getLogger(__name__)


@dataclass
class EditorState:
    content: PageContent = field(default_factory=PageContent.empty)
    selected_element_id: Optional[str] = None
    saving: bool = False
    last_saved_at: Optional[datetime] = None
    loaded: bool = False


# op name -> pure transform. add_element is handled separately (it also
# returns the new element id).
OPERATIONS: Dict[str, Callable[..., PageContent]] = {
    "add_row": edit_engine.add_row,
    "delete_row": edit_engine.delete_row,
    "duplicate_row": edit_engine.duplicate_row,
    "move_row": edit_engine.move_row,
    "update_row_settings": edit_engine.update_row_settings,
    "update_page_settings": edit_engine.update_page_settings,
    "duplicate_column": edit_engine.duplicate_column,
    "delete_column": edit_engine.delete_column,
    "move_column_to_row": edit_engine.move_column_to_row,
    "delete_element": edit_engine.delete_element,
    "move_element": edit_engine.move_element,
    "update_element_data": edit_engine.update_element_data,
    "update_element_style": edit_engine.update_element_style,
}

OPERATION_NAMES = ("add_element",) + tuple(OPERATIONS)


class EditorSession:
    def __init__(
        self,
        project_id: str,
        version_id: str,
        history_limit: int = DEFAULT_CAPACITY,
        session_id: Optional[str] = None,
    ):
        self.session_id = session_id or uuid4().hex
        self.project_id = project_id
        self.version_id = version_id
        self.history: HistoryManager[PageContent] = HistoryManager(history_limit)
        self._state = EditorState()

    @property
    def state(self) -> EditorState:
        """Read-only view. Do not mutate."""
        return self._state

    @property
    def content(self) -> PageContent:
        return self._state.content

    # ---------- edits ----------

    def _commit(self, new_content: PageContent) -> bool:
        if new_content is self._state.content:
            return False
        self.history.record(self._state.content)
        self._state.content = new_content
        self._drop_stale_selection()
        return True

    def _drop_stale_selection(self) -> None:
        selected = self._state.selected_element_id
        if selected and edit_engine.find_element(self._state.content, selected) is None:
            self._state.selected_element_id = None

    def apply(self, op: str, **params: Any) -> bool:
        """
        Run one edit operation. Returns True when the document changed.

        Raises ValueError for an unknown operation name.
        """
        if op == "add_element":
            new_content, element_id = edit_engine.add_element(self._state.content, **params)
            changed = self._commit(new_content)
            if changed:
                self._state.selected_element_id = element_id
            return changed

        func = OPERATIONS.get(op)
        if func is None:
            raise ValueError(f"Unknown operation: {op}")
        return self._commit(func(self._state.content, **params))

    def undo(self) -> bool:
        previous = self.history.undo(self._state.content)
        if previous is None:
            return False
        self._state.content = previous
        self._drop_stale_selection()
        return True

    def redo(self) -> bool:
        following = self.history.redo()
        if following is None:
            return False
        self._state.content = following
        self._drop_stale_selection()
        return True

    def select(self, element_id: Optional[str]) -> bool:
        if element_id is not None and edit_engine.find_element(self._state.content, element_id) is None:
            return False
        self._state.selected_element_id = element_id
        return True

    def load_card(
        self,
        element_id: str,
        version_id: str,
        card_id: str,
        versions: List[Dict[str, Any]],
        slot: Optional[str] = None,
    ) -> bool:
        """Copy a change-card of another version into a comparison slot or card-reference."""
        element = edit_engine.find_element(self._state.content, element_id)
        if element is None:
            return False
        card = find_card(versions, version_id, card_id)
        if card is None:
            logger.info(f"load_card: card {card_id} not found in version {version_id}")
            return False
        patch = card_patch(element.type, card, version_id, slot)
        if patch is None:
            return False
        return self.apply("update_element_data", element_id=element_id, patch=patch)

    # ---------- persistence ----------

    def load(self, gateway) -> None:
        """Fetch the stored page; any failure starts from the empty document."""
        content = PageContent.empty()
        try:
            raw = gateway.load_page(self.project_id, self.version_id)
            content = PageContent.from_api(raw)
            errors = content.structure_errors()
            if errors:
                logger.warning(
                    f"Malformed page for {self.project_id}/{self.version_id}: {'; '.join(errors)}"
                )
                content = PageContent.empty()
        except ValidationError as e:
            logger.warning(f"Malformed page for {self.project_id}/{self.version_id}: {e.error_count()} error(s)")
        except Exception as e:
            logger.warning(f"Failed to load page for {self.project_id}/{self.version_id}: {e}")

        self._state.content = content
        self._state.selected_element_id = None
        self._state.loaded = True
        self.history.clear()

    def save(self, gateway) -> bool:
        """
        Extract change-cards, persist, and on success adopt the extracted
        document (without a history entry). Returns False on failure, leaving
        the document and last_saved_at untouched.
        """
        self._state.saving = True
        try:
            extracted, synthesized = extract_change_cards(self._state.content)
            gateway.save_page(self.project_id, self.version_id, extracted.to_api())
        except Exception as e:
            logger.error(f"Failed to save page {self.project_id}/{self.version_id}: {e}")
            return False
        finally:
            self._state.saving = False

        self._state.content = extracted
        self._state.last_saved_at = datetime.now(timezone.utc)
        logger.info(
            f"Saved page {self.project_id}/{self.version_id} "
            f"({len(synthesized)} card(s) extracted)"
        )
        return True

    def to_api(self) -> Dict[str, Any]:
        state = self._state
        return {
            "sessionId": self.session_id,
            "projectId": self.project_id,
            "versionId": self.version_id,
            "content": state.content.to_api(),
            "selectedElementId": state.selected_element_id,
            "saving": state.saving,
            "lastSavedAt": state.last_saved_at.isoformat() if state.last_saved_at else None,
            "loaded": state.loaded,
            "history": self.history.to_api(),
        }
