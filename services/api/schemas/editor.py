# services/api/schemas/editor.py
"""
Request bodies of the editor session API.

Operations are a tagged union on `op`; field names (snake_case) match the
keyword arguments of EditorSession.apply, the wire accepts camelCase too.
"""
from __future__ import annotations

from typing import Annotated, Any, Dict, Literal, Optional, Union

from pydantic import Field, TypeAdapter

from .page import CamelModel


class SessionCreate(CamelModel):
    project_id: str = Field(..., min_length=1)
    version_id: str = Field(..., min_length=1)


class SelectRequest(CamelModel):
    element_id: Optional[str] = Field(None, description="Element to select; null clears the selection")


class LoadCardRequest(CamelModel):
    element_id: str = Field(..., min_length=1)
    version_id: str = Field(..., min_length=1, description="Version the card comes from")
    card_id: str = Field(..., min_length=1)
    slot: Optional[Literal["before", "after"]] = Field(
        None, description="Comparison face to fill (comparison elements only)"
    )


# ============ Operations ============


class _Op(CamelModel):
    def params(self) -> Dict[str, Any]:
        return self.model_dump(exclude={"op"})


class AddRowOp(_Op):
    op: Literal["add_row"]
    column_count: int = Field(1, ge=1)


class DeleteRowOp(_Op):
    op: Literal["delete_row"]
    row_index: int


class DuplicateRowOp(_Op):
    op: Literal["duplicate_row"]
    row_index: int


class MoveRowOp(_Op):
    op: Literal["move_row"]
    from_index: int
    to_index: int


class UpdateRowSettingsOp(_Op):
    op: Literal["update_row_settings"]
    row_index: int
    patch: Dict[str, Any]


class UpdatePageSettingsOp(_Op):
    op: Literal["update_page_settings"]
    patch: Dict[str, Any]


class DuplicateColumnOp(_Op):
    op: Literal["duplicate_column"]
    row_index: int
    col_index: int


class DeleteColumnOp(_Op):
    op: Literal["delete_column"]
    row_index: int
    col_index: int


class MoveColumnToRowOp(_Op):
    op: Literal["move_column_to_row"]
    from_row: int
    from_col: int
    to_row: int


class AddElementOp(_Op):
    op: Literal["add_element"]
    element_type: str
    row_index: int
    col_index: int


class DeleteElementOp(_Op):
    op: Literal["delete_element"]
    element_id: str


class MoveElementOp(_Op):
    op: Literal["move_element"]
    from_row: int
    from_col: int
    from_index: int
    to_row: int
    to_col: int
    to_index: int


class UpdateElementDataOp(_Op):
    op: Literal["update_element_data"]
    element_id: str
    patch: Dict[str, Any]


class UpdateElementStyleOp(_Op):
    op: Literal["update_element_style"]
    element_id: str
    patch: Dict[str, Any]


Operation = Annotated[
    Union[
        AddRowOp,
        DeleteRowOp,
        DuplicateRowOp,
        MoveRowOp,
        UpdateRowSettingsOp,
        UpdatePageSettingsOp,
        DuplicateColumnOp,
        DeleteColumnOp,
        MoveColumnToRowOp,
        AddElementOp,
        DeleteElementOp,
        MoveElementOp,
        UpdateElementDataOp,
        UpdateElementStyleOp,
    ],
    Field(discriminator="op"),
]

operation_adapter: TypeAdapter = TypeAdapter(Operation)
