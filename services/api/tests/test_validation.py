"""
Tests for validation functions.

Run with: pytest tests/test_validation.py -v
"""
import pytest
from fastapi import HTTPException

import sys
import os
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from core.validation import (
    parse_width,
    validate_page_content,
    parse_page_payload,
)
from models import edit_engine as ee
from models.page import PageContent


def _row(row_id, widths, element_ids=()):
    columns = []
    for i, width in enumerate(widths):
        elements = [{"id": eid, "type": "spacer", "data": {}} for eid in element_ids] if i == 0 else []
        columns.append({"id": f"{row_id}-c{i}", "width": width, "elements": elements})
    return {"id": row_id, "type": "row", "settings": {}, "columns": columns}


class TestParseWidth:
    """Tests for column width parsing."""

    def test_valid_widths(self):
        assert parse_width("100%") == 100
        assert parse_width("50%") == 50
        assert parse_width(f"{100 / 3}%") == pytest.approx(33.3333, rel=1e-4)

    def test_invalid_widths(self):
        for bad in ("50", "abc%", "", None, "0%", "-10%"):
            with pytest.raises(HTTPException) as exc:
                parse_width(bad)
            assert exc.value.status_code == 400


class TestValidatePageContent:
    """Tests for structural page validation."""

    def test_engine_output_is_valid(self):
        content = ee.add_row(PageContent.empty(), 3)
        content = ee.add_row(content, 1)
        content, _ = ee.add_element(content, "heading", 0, 2)
        validate_page_content(content)

    def test_empty_page_is_valid(self):
        validate_page_content(PageContent.empty())

    def test_row_without_columns(self):
        content = PageContent.from_api({"rows": [{"id": "r-1", "columns": []}]})
        with pytest.raises(HTTPException) as exc:
            validate_page_content(content)
        assert exc.value.status_code == 400
        assert "no columns" in exc.value.detail

    def test_widths_must_sum_to_100(self):
        content = PageContent.from_api({"rows": [_row("r-1", ["50%", "40%"])]})
        with pytest.raises(HTTPException) as exc:
            validate_page_content(content)
        assert exc.value.status_code == 400

    def test_thirds_are_within_tolerance(self):
        third = f"{100 / 3}%"
        validate_page_content(PageContent.from_api({"rows": [_row("r-1", [third, third, third])]}))

    def test_duplicate_ids(self):
        content = PageContent.from_api({"rows": [_row("r-1", ["100%"], ["e-1", "e-1"])]})
        with pytest.raises(HTTPException) as exc:
            validate_page_content(content)
        assert exc.value.status_code == 400
        assert "e-1" in exc.value.detail


class TestStructureErrors:
    """Tests for PageContent.structure_errors."""

    def test_well_formed_page(self):
        content = ee.add_row(PageContent.empty(), 3)
        assert content.structure_errors() == []

    def test_reports_every_broken_row(self):
        content = PageContent.from_api({"rows": [
            {"id": "r-1", "columns": []},
            _row("r-2", ["10%"]),
            _row("r-3", ["fifty"]),
        ]})
        errors = content.structure_errors()
        assert len(errors) == 3
        assert "no columns" in errors[0]
        assert "10%" in errors[1]
        assert "'fifty'" in errors[2]


class TestParsePagePayload:
    """Tests for parse_page_payload."""

    def test_valid_payload(self):
        content = parse_page_payload({"rows": [_row("r-1", ["50%", "50%"], ["e-1"])]})
        assert content.rows[0].columns[0].elements[0].type == "spacer"

    def test_unknown_element_type(self):
        payload = {"rows": [{"id": "r-1", "columns": [
            {"id": "c-1", "width": "100%", "elements": [{"id": "e-1", "type": "carousel", "data": {}}]},
        ]}]}
        with pytest.raises(HTTPException) as exc:
            parse_page_payload(payload)
        assert exc.value.status_code == 400

    def test_missing_payload(self):
        with pytest.raises(HTTPException) as exc:
            parse_page_payload(None)
        assert exc.value.status_code == 400
