# services/api/models/edit_engine.py
"""
Edit engine: pure transforms over a PageContent.

Every operation takes the current document and returns a NEW document; the
input is never mutated, so snapshots held by the history stay frozen.
When an index or id does not resolve, the input document itself is returned
(callers use `result is content` to detect a no-op).

Column widths are derived: any change to the number of columns in a row
recomputes every width in that row as 100 / count percent.
"""
from __future__ import annotations

import logging
from typing import Any, Dict, Optional, Tuple

from pydantic import ValidationError

from .element_registry import create_element, is_known_type
from .page import Column, PageContent, Row, RowSettings, generate_id

logger = logging.getLogger(__name__)

ElementLocation = Tuple[int, int, int]


# ---------- helpers ----------

def column_width(count: int) -> str:
    """'100%', '50%', '33.333333333333336%' ..."""
    value = 100 / count
    if value.is_integer():
        return f"{int(value)}%"
    return f"{value}%"


def _recompute_widths(row: Row) -> None:
    if not row.columns:
        return
    width = column_width(len(row.columns))
    for col in row.columns:
        col.width = width


def _in_range(seq, idx: int) -> bool:
    return isinstance(idx, int) and 0 <= idx < len(seq)


def _clone_element(element):
    copy = element.model_copy(deep=True)
    copy.id = generate_id("e")
    return copy


def _clone_column(column: Column) -> Column:
    copy = column.model_copy(deep=True)
    copy.id = generate_id("c")
    copy.elements = [_clone_element(el) for el in column.elements]
    return copy


def _clone_row(row: Row) -> Row:
    copy = row.model_copy(deep=True)
    copy.id = generate_id("r")
    copy.columns = [_clone_column(col) for col in row.columns]
    return copy


def locate_element(content: PageContent, element_id: str) -> Optional[ElementLocation]:
    for r_idx, c_idx, e_idx, element in content.iter_elements():
        if element.id == element_id:
            return r_idx, c_idx, e_idx
    return None


def find_element(content: PageContent, element_id: Optional[str]):
    if not element_id:
        return None
    loc = locate_element(content, element_id)
    if loc is None:
        return None
    r_idx, c_idx, e_idx = loc
    return content.rows[r_idx].columns[c_idx].elements[e_idx]


def _column(content: PageContent, row_index: int, col_index: int) -> Optional[Column]:
    if not _in_range(content.rows, row_index):
        return None
    row = content.rows[row_index]
    if not _in_range(row.columns, col_index):
        return None
    return row.columns[col_index]


# ---------- rows ----------

def add_row(content: PageContent, column_count: int = 1) -> PageContent:
    if not isinstance(column_count, int) or column_count < 1:
        logger.debug(f"add_row ignored: column_count={column_count}")
        return content

    new = content.model_copy(deep=True)
    width = column_width(column_count)
    new.rows.append(
        Row(
            type="row",
            settings=RowSettings(background_color="transparent", padding="md", max_width="6xl"),
            columns=[Column(width=width) for _ in range(column_count)],
        )
    )
    return new


def delete_row(content: PageContent, row_index: int) -> PageContent:
    if not _in_range(content.rows, row_index):
        return content
    new = content.model_copy(deep=True)
    del new.rows[row_index]
    return new


def duplicate_row(content: PageContent, row_index: int) -> PageContent:
    if not _in_range(content.rows, row_index):
        return content
    new = content.model_copy(deep=True)
    new.rows.insert(row_index + 1, _clone_row(content.rows[row_index]))
    return new


def move_row(content: PageContent, from_index: int, to_index: int) -> PageContent:
    """Drag-reorder: take the row out and insert it at `to_index`."""
    if not _in_range(content.rows, from_index) or not _in_range(content.rows, to_index):
        return content
    if from_index == to_index:
        return content
    new = content.model_copy(deep=True)
    row = new.rows.pop(from_index)
    new.rows.insert(to_index, row)
    return new


def update_row_settings(content: PageContent, row_index: int, patch: Dict[str, Any]) -> PageContent:
    if not patch or not _in_range(content.rows, row_index):
        return content
    try:
        merged = content.rows[row_index].settings.merged(patch)
    except ValidationError as e:
        logger.warning(f"update_row_settings rejected for row {row_index}: {e.errors()}")
        return content
    new = content.model_copy(deep=True)
    new.rows[row_index].settings = merged
    return new


def update_page_settings(content: PageContent, patch: Dict[str, Any]) -> PageContent:
    if not patch:
        return content
    try:
        merged = content.settings.merged(patch)
    except ValidationError as e:
        logger.warning(f"update_page_settings rejected: {e.errors()}")
        return content
    new = content.model_copy(deep=True)
    new.settings = merged
    return new


# ---------- columns ----------

def duplicate_column(content: PageContent, row_index: int, col_index: int) -> PageContent:
    column = _column(content, row_index, col_index)
    if column is None:
        return content
    new = content.model_copy(deep=True)
    row = new.rows[row_index]
    row.columns.insert(col_index + 1, _clone_column(column))
    _recompute_widths(row)
    return new


def delete_column(content: PageContent, row_index: int, col_index: int) -> PageContent:
    """Removing the last column removes the whole row (rows never have 0 columns)."""
    if _column(content, row_index, col_index) is None:
        return content
    if len(content.rows[row_index].columns) == 1:
        return delete_row(content, row_index)

    new = content.model_copy(deep=True)
    row = new.rows[row_index]
    del row.columns[col_index]
    _recompute_widths(row)
    return new


def move_column_to_row(
    content: PageContent,
    from_row: int,
    from_col: int,
    to_row: int,
) -> PageContent:
    """
    Detach a column and append it to another row.

    If the source row is left empty it is deleted, and the target index
    shifts down by one when the deleted row came before it.
    """
    if from_row == to_row:
        return content
    if _column(content, from_row, from_col) is None or not _in_range(content.rows, to_row):
        return content

    new = content.model_copy(deep=True)
    column = new.rows[from_row].columns.pop(from_col)

    target = to_row
    if not new.rows[from_row].columns:
        del new.rows[from_row]
        if from_row < target:
            target -= 1
    else:
        _recompute_widths(new.rows[from_row])

    new.rows[target].columns.append(column)
    _recompute_widths(new.rows[target])
    return new


# ---------- elements ----------

def add_element(
    content: PageContent,
    element_type: str,
    row_index: int,
    col_index: int,
) -> Tuple[PageContent, Optional[str]]:
    """Append a default element of `element_type`; returns (document, new element id)."""
    if not is_known_type(element_type):
        logger.warning(f"add_element ignored: unknown type {element_type!r}")
        return content, None
    if _column(content, row_index, col_index) is None:
        return content, None

    element = create_element(element_type)
    new = content.model_copy(deep=True)
    new.rows[row_index].columns[col_index].elements.append(element)
    return new, element.id


def delete_element(content: PageContent, element_id: str) -> PageContent:
    loc = locate_element(content, element_id)
    if loc is None:
        return content
    r_idx, c_idx, e_idx = loc
    new = content.model_copy(deep=True)
    del new.rows[r_idx].columns[c_idx].elements[e_idx]
    return new


def move_element(
    content: PageContent,
    from_row: int,
    from_col: int,
    from_index: int,
    to_row: int,
    to_col: int,
    to_index: int,
) -> PageContent:
    """
    Drag-reorder an element: remove it from the source column, then insert it
    into the target column at `to_index` (an index past the end appends).
    Ids are unchanged.
    """
    source = _column(content, from_row, from_col)
    if source is None or not _in_range(source.elements, from_index):
        return content
    if _column(content, to_row, to_col) is None:
        return content
    if not isinstance(to_index, int) or to_index < 0:
        return content
    if (from_row, from_col, from_index) == (to_row, to_col, to_index):
        return content

    new = content.model_copy(deep=True)
    element = new.rows[from_row].columns[from_col].elements.pop(from_index)
    new.rows[to_row].columns[to_col].elements.insert(to_index, element)
    return new


def update_element_data(content: PageContent, element_id: str, patch: Dict[str, Any]) -> PageContent:
    """Shallow-merge `patch` into the element's data."""
    if not patch:
        return content
    loc = locate_element(content, element_id)
    if loc is None:
        return content
    r_idx, c_idx, e_idx = loc
    current = content.rows[r_idx].columns[c_idx].elements[e_idx]
    try:
        merged = current.data.merged(patch)
    except ValidationError as e:
        logger.warning(f"update_element_data rejected for {element_id}: {e.errors()}")
        return content

    new = content.model_copy(deep=True)
    new.rows[r_idx].columns[c_idx].elements[e_idx].data = merged
    return new


def update_element_style(content: PageContent, element_id: str, patch: Dict[str, Any]) -> PageContent:
    """Shallow-merge margin/padding overrides into the element's style."""
    if not patch:
        return content
    loc = locate_element(content, element_id)
    if loc is None:
        return content
    r_idx, c_idx, e_idx = loc
    current = content.rows[r_idx].columns[c_idx].elements[e_idx]
    try:
        merged = current.style.merged(patch)
    except ValidationError as e:
        logger.warning(f"update_element_style rejected for {element_id}: {e.errors()}")
        return content

    new = content.model_copy(deep=True)
    new.rows[r_idx].columns[c_idx].elements[e_idx].style = merged
    return new
