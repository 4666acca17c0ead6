"""
Tests for EditorSession (state, history wiring, load/save).

Run with: pytest tests/test_session.py -v
"""
import pytest

import sys
import os
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from models.page import PageContent
from models.session import EditorSession


class FakeGateway:
    """In-memory page gateway; set fail_save / fail_load to simulate errors."""

    def __init__(self, pages=None, fail_save=False, fail_load=False):
        self.pages = dict(pages or {})
        self.fail_save = fail_save
        self.fail_load = fail_load
        self.saved = []

    def load_page(self, project_id, version_id):
        if self.fail_load:
            raise ConnectionError("storage unreachable")
        return self.pages.get((project_id, version_id))

    def save_page(self, project_id, version_id, content):
        if self.fail_save:
            raise ConnectionError("storage unreachable")
        self.pages[(project_id, version_id)] = content
        self.saved.append(content)

    def list_version_cards(self, project_id):
        return []


@pytest.fixture
def session():
    s = EditorSession("p1", "v1")
    s.load(FakeGateway())
    return s


class TestEditing:
    """Tests for apply/undo/redo/select."""

    def test_example_scenario(self, session):
        """addRow(2), addElement, deleteColumn, then three undos gets back to an empty page."""
        assert session.apply("add_row", column_count=2)
        assert [c.width for c in session.content.rows[0].columns] == ["50%", "50%"]

        assert session.apply("add_element", element_type="heading", row_index=0, col_index=0)
        heading = session.content.rows[0].columns[0].elements[0]
        assert heading.data.text == "Heading"

        assert session.apply("delete_column", row_index=0, col_index=1)
        assert [c.width for c in session.content.rows[0].columns] == ["100%"]

        assert session.undo()
        assert session.undo()
        assert session.undo()
        assert session.content.rows == []
        assert not session.undo()

    def test_redo_returns_to_last_state(self, session):
        session.apply("add_row", column_count=1)
        session.apply("add_element", element_type="paragraph", row_index=0, col_index=0)
        session.apply("add_row", column_count=3)
        final = session.content.to_api()

        for _ in range(3):
            session.undo()
        for _ in range(3):
            assert session.redo()

        assert session.content.to_api() == final
        assert not session.redo()

    def test_noop_is_not_recorded(self, session):
        assert not session.apply("delete_row", row_index=0)
        assert not session.history.can_undo

    def test_unknown_operation(self, session):
        with pytest.raises(ValueError):
            session.apply("explode")

    def test_add_element_selects_it(self, session):
        session.apply("add_row")
        session.apply("add_element", element_type="image", row_index=0, col_index=0)
        element = session.content.rows[0].columns[0].elements[0]
        assert session.state.selected_element_id == element.id

    def test_delete_selected_element_clears_selection(self, session):
        session.apply("add_row")
        session.apply("add_element", element_type="image", row_index=0, col_index=0)
        element_id = session.state.selected_element_id
        session.apply("delete_element", element_id=element_id)
        assert session.state.selected_element_id is None

    def test_undo_clears_stale_selection(self, session):
        session.apply("add_row")
        session.apply("add_element", element_type="spacer", row_index=0, col_index=0)
        session.undo()
        assert session.state.selected_element_id is None

    def test_select(self, session):
        session.apply("add_row")
        session.apply("add_element", element_type="divider", row_index=0, col_index=0)
        element_id = session.state.selected_element_id
        assert session.select(None)
        assert session.state.selected_element_id is None
        assert session.select(element_id)
        assert not session.select("e-missing")
        assert session.state.selected_element_id == element_id

    def test_drag_moves_are_undoable(self, session):
        session.apply("add_row")
        session.apply("add_row", column_count=2)
        ids = [r.id for r in session.content.rows]
        session.apply("move_row", from_index=0, to_index=1)
        assert [r.id for r in session.content.rows] == ids[::-1]
        session.undo()
        assert [r.id for r in session.content.rows] == ids


class TestLoad:
    """Tests for EditorSession.load."""

    def test_load_stored_page(self):
        stored = {"rows": [{"id": "r-1", "type": "row", "settings": {}, "columns": [
            {"id": "c-1", "width": "100%", "elements": [
                {"id": "e-1", "type": "heading", "data": {"text": "Hi", "level": "h1"}, "style": {}},
            ]},
        ]}], "settings": {"backgroundColor": "#000"}}
        s = EditorSession("p1", "v1")
        s.load(FakeGateway({("p1", "v1"): stored}))

        assert s.state.loaded
        assert s.content.rows[0].columns[0].elements[0].data.level == "h1"
        assert s.content.settings.background_color == "#000"

    def test_load_failure_starts_empty(self):
        s = EditorSession("p1", "v1")
        s.load(FakeGateway(fail_load=True))
        assert s.state.loaded
        assert s.content.to_api() == PageContent.empty().to_api()

    def test_malformed_page_starts_empty(self):
        s = EditorSession("p1", "v1")
        s.load(FakeGateway({("p1", "v1"): {"rows": "not-a-list"}}))
        assert s.content.rows == []

    def test_page_breaking_structure_starts_empty(self):
        """A row without columns, or widths that miss 100%, is not adopted."""
        stored = {"rows": [
            {"id": "r-1", "columns": []},
            {"id": "r-2", "columns": [{"id": "c-1", "width": "10%", "elements": [
                {"id": "e-1", "type": "comparison", "data": {"after": {"title": "Dragon"}}},
            ]}]},
        ]}
        s = EditorSession("p1", "v1")
        s.load(FakeGateway({("p1", "v1"): stored}))
        assert s.state.loaded
        assert s.content.rows == []

    def test_page_with_duplicate_ids_starts_empty(self):
        stored = {"rows": [{"id": "r-1", "columns": [
            {"id": "r-1", "width": "100%", "elements": []},
        ]}]}
        s = EditorSession("p1", "v1")
        s.load(FakeGateway({("p1", "v1"): stored}))
        assert s.content.rows == []


class TestSave:
    """Tests for EditorSession.save."""

    def _with_comparison(self, session):
        session.apply("add_row")
        session.apply("add_element", element_type="comparison", row_index=0, col_index=0)
        element_id = session.state.selected_element_id
        session.apply(
            "update_element_data",
            element_id=element_id,
            patch={"after": {"title": "Dragon", "subtitle": "Boss", "changes": [{"type": "nerf", "text": "HP -10%"}]}},
        )

    def test_save_persists_extracted_document(self, session):
        gateway = FakeGateway()
        self._with_comparison(session)
        undo_depth = session.history.history_index

        assert session.save(gateway)

        types = [e.type for _, _, _, e in session.content.iter_elements()]
        assert types == ["comparison", "change-card"]
        assert gateway.saved[-1] == session.content.to_api()
        assert session.state.last_saved_at is not None
        assert not session.state.saving
        # extraction result is not an undo step
        assert session.history.history_index == undo_depth

    def test_save_failure_keeps_document(self, session):
        self._with_comparison(session)
        before = session.content

        assert not session.save(FakeGateway(fail_save=True))

        assert session.content is before
        assert session.state.last_saved_at is None
        assert not session.state.saving


class TestLoadCard:
    """Tests for loading a card from another version."""

    VERSIONS = [{
        "id": "v0",
        "version": "1.0",
        "title": "Launch",
        "cards": [{
            "id": "e-dragon",
            "title": "Dragon",
            "subtitle": "Boss",
            "icon": "dragon.png",
            "changes": [{"type": "buff", "text": "HP +5%"}],
        }],
    }]

    def test_fills_comparison_slot(self, session):
        session.apply("add_row")
        session.apply("add_element", element_type="comparison", row_index=0, col_index=0)
        element_id = session.state.selected_element_id

        assert session.load_card(element_id, "v0", "e-dragon", self.VERSIONS, slot="before")

        data = session.content.rows[0].columns[0].elements[0].data
        assert data.before.title == "Dragon"
        assert data.before.icon == "dragon.png"
        assert data.after.title == ""

    def test_fills_card_reference(self, session):
        session.apply("add_row")
        session.apply("add_element", element_type="card-reference", row_index=0, col_index=0)
        element_id = session.state.selected_element_id

        assert session.load_card(element_id, "v0", "e-dragon", self.VERSIONS)

        data = session.content.rows[0].columns[0].elements[0].data
        assert data.source_version_id == "v0"
        assert data.source_card_id == "e-dragon"
        assert data.changes[0].text == "HP +5%"

    def test_unknown_card_is_noop(self, session):
        session.apply("add_row")
        session.apply("add_element", element_type="card-reference", row_index=0, col_index=0)
        element_id = session.state.selected_element_id
        assert not session.load_card(element_id, "v0", "e-missing", self.VERSIONS)
        assert not session.load_card(element_id, "v9", "e-dragon", self.VERSIONS)

    def test_comparison_needs_slot(self, session):
        session.apply("add_row")
        session.apply("add_element", element_type="comparison", row_index=0, col_index=0)
        element_id = session.state.selected_element_id
        assert not session.load_card(element_id, "v0", "e-dragon", self.VERSIONS)
