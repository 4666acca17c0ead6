"""
Tests for save-time change-card extraction.

Run with: pytest tests/test_extraction.py -v
"""
import sys
import os
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from models import edit_engine as ee
from models.extraction import card_key, collect_change_cards, extract_change_cards
from models.page import PageContent


def _comparison(content, title, subtitle="", changes=None, row=0, col=0):
    content, element_id = ee.add_element(content, "comparison", row, col)
    after = {"title": title, "subtitle": subtitle, "icon": "", "changes": changes or []}
    return ee.update_element_data(content, element_id, {"after": after})


def _reference(content, title, subtitle="", row=0, col=0):
    content, element_id = ee.add_element(content, "card-reference", row, col)
    return ee.update_element_data(
        content, element_id,
        {"sourceVersionId": "v-old", "sourceCardId": "e-old", "title": title, "subtitle": subtitle},
    )


def _change_cards(content):
    return [el for _, _, _, el in content.iter_elements() if el.type == "change-card"]


class TestExtractChangeCards:
    """Tests for extract_change_cards."""

    def test_card_key(self):
        assert card_key("Dragon", "Boss") == "Dragon-Boss"
        assert card_key("Dragon", None) == "Dragon-"

    def test_comparison_after_becomes_change_card(self):
        """The Dragon/Boss example: one card appended to row 0 / column 0."""
        content = ee.add_row(PageContent.empty(), 2)
        content = _comparison(
            content, "Dragon", "Boss", [{"type": "nerf", "text": "HP -10%"}], col=1,
        )

        result, synthesized = extract_change_cards(content)

        assert len(synthesized) == 1
        cards = _change_cards(result)
        assert len(cards) == 1
        card = cards[0]
        assert card.data.title == "Dragon"
        assert card.data.subtitle == "Boss"
        assert [c.to_api() for c in card.data.changes] == [{"type": "nerf", "text": "HP -10%"}]
        assert result.rows[0].columns[0].elements[-1].id == card.id

    def test_input_not_mutated(self):
        content = _comparison(ee.add_row(PageContent.empty()), "Dragon")
        before = content.to_api()
        extract_change_cards(content)
        assert content.to_api() == before

    def test_idempotent(self):
        """A second pass synthesizes nothing."""
        content = _comparison(ee.add_row(PageContent.empty()), "Dragon", "Boss")
        once, first = extract_change_cards(content)
        twice, second = extract_change_cards(once)
        assert len(first) == 1
        assert second == []
        assert len(_change_cards(twice)) == 1

    def test_deterministic_document_order(self):
        content = ee.add_row(PageContent.empty(), 2)
        content = ee.add_row(content, 1)
        content = _comparison(content, "Sword", col=1)
        content = _reference(content, "Shield", "Iron", row=1)
        content = _comparison(content, "Bow", col=0)

        _, synthesized = extract_change_cards(content)

        # row 0 col 0 (Bow) comes before row 0 col 1 (Sword), then row 1 (Shield)
        assert [c.data.title for c in synthesized] == ["Bow", "Sword", "Shield"]

    def test_existing_change_card_is_not_duplicated(self):
        content = ee.add_row(PageContent.empty())
        content, card_id = ee.add_element(content, "change-card", 0, 0)
        content = ee.update_element_data(content, card_id, {"title": "Dragon", "subtitle": "Boss"})
        content = _comparison(content, "Dragon", "Boss")

        _, synthesized = extract_change_cards(content)
        assert synthesized == []

    def test_empty_titles_are_skipped(self):
        content = ee.add_row(PageContent.empty())
        content, _ = ee.add_element(content, "comparison", 0, 0)
        content, _ = ee.add_element(content, "card-reference", 0, 0)
        result, synthesized = extract_change_cards(content)
        assert synthesized == []
        assert result.to_api() == content.to_api()

    def test_same_key_within_one_pass_synthesized_once(self):
        content = ee.add_row(PageContent.empty())
        content = _comparison(content, "Dragon", "Boss")
        content = _reference(content, "Dragon", "Boss")
        _, synthesized = extract_change_cards(content)
        assert len(synthesized) == 1


class TestCollectChangeCards:
    """Tests for collect_change_cards."""

    def test_lists_cards_with_untitled_default(self):
        content = ee.add_row(PageContent.empty())
        content, first = ee.add_element(content, "change-card", 0, 0)
        content, second = ee.add_element(content, "change-card", 0, 0)
        content = ee.update_element_data(content, second, {"title": ""})

        cards = collect_change_cards(content)

        assert [c["id"] for c in cards] == [first, second]
        assert cards[0]["title"] == "Item Name"
        assert cards[1]["title"] == "Untitled"
        assert cards[0]["changes"] == [{"type": "buff", "text": "Change description"}]

    def test_empty_document(self):
        assert collect_change_cards(PageContent.empty()) == []
