# services/api/models/page.py
"""
Document model for the devlog page builder.

A page is a tree: rows -> columns -> elements, plus page-level settings.
Everything serializes to the camelCase JSON the editor and storage exchange;
unknown keys are kept so a stored page round-trips unchanged.
"""
from __future__ import annotations

from typing import Annotated, Any, Dict, Iterator, List, Literal, Optional, Tuple, Union
from uuid import uuid4

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


def generate_id(prefix: str = "e") -> str:
    return f"{prefix}-{uuid4().hex[:12]}"


# Widths are stored as decimal strings ("33.333333333333336%"), so sums drift.
WIDTH_TOLERANCE = 0.01


def width_percent(width: Optional[str]) -> Optional[float]:
    """"50%" -> 50.0; None when the width is not a positive percentage."""
    text = (width or "").strip()
    if not text.endswith("%"):
        return None
    try:
        value = float(text[:-1])
    except ValueError:
        return None
    return value if value > 0 else None


class PageModel(BaseModel):
    """Base for every node of the page tree (camelCase on the wire)."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        coerce_numbers_to_str=True,
        extra="allow",
    )

    def to_api(self) -> Dict[str, Any]:
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)

    def merged(self, patch: Dict[str, Any]):
        """
        Shallow-merge `patch` into this node and re-validate.

        Keys may be camelCase (wire) or snake_case (attribute) names; nested
        values replace the old value wholesale. Returns a new instance and
        raises pydantic.ValidationError if the merged data is invalid.
        """
        data = self.to_api()
        fields = type(self).model_fields
        for key, value in patch.items():
            field = fields.get(key)
            data[field.alias if field is not None and field.alias else key] = value
        return type(self).model_validate(data)


BoxValue = Union[int, Literal["auto"]]
ChangeType = Literal["buff", "nerf", "neutral"]
Align = Literal["left", "center", "right", "justify"]


# ---------- small value types ----------

class Change(PageModel):
    type: ChangeType = "neutral"
    text: str = ""


class CardFace(PageModel):
    """One side (before/after) of a comparison."""
    title: str = ""
    subtitle: str = ""
    icon: str = ""
    changes: List[Change] = Field(default_factory=list)


class ElementStyle(PageModel):
    margin_top: Optional[BoxValue] = None
    margin_right: Optional[BoxValue] = None
    margin_bottom: Optional[BoxValue] = None
    margin_left: Optional[BoxValue] = None
    padding_top: Optional[BoxValue] = None
    padding_right: Optional[BoxValue] = None
    padding_bottom: Optional[BoxValue] = None
    padding_left: Optional[BoxValue] = None


# ---------- per-type element data ----------

class HeadingData(PageModel):
    text: str = "Heading"
    level: Literal["h1", "h2", "h3"] = "h2"
    align: Align = "left"
    font_size: str = "24"
    font_family: str = "inherit"


class ParagraphData(PageModel):
    text: str = "Enter your text here..."
    align: Align = "left"
    font_size: str = "14"
    font_family: str = "inherit"


class ListData(PageModel):
    items: List[str] = Field(default_factory=lambda: ["Item 1", "Item 2", "Item 3"])
    bullet_style: Literal["disc", "circle", "square", "decimal", "none"] = "disc"
    align: Align = "left"
    indent: int = Field(0, ge=0)
    font_size: str = "14"


class ImageData(PageModel):
    src: str = ""
    alt: str = ""
    caption: str = ""


class VideoData(PageModel):
    src: str = ""
    type: Literal["youtube", "vimeo", "upload"] = "youtube"


class SectionHeaderData(PageModel):
    text: str = "SECTION TITLE"
    color: str = "#c23a2b"


class ChangeCardData(PageModel):
    icon: str = ""
    title: str = "Item Name"
    subtitle: str = ""
    changes: List[Change] = Field(
        default_factory=lambda: [Change(type="buff", text="Change description")]
    )


class ComparisonData(PageModel):
    layout: Literal["side-by-side", "stacked"] = "side-by-side"
    title: str = "Comparison"
    overlay: Literal["darken", "red"] = "darken"
    before: CardFace = Field(default_factory=CardFace)
    after: CardFace = Field(default_factory=CardFace)


class CardReferenceData(PageModel):
    source_version_id: str = ""
    source_card_id: str = ""
    title: str = ""
    subtitle: str = ""
    icon: str = ""
    changes: List[Change] = Field(default_factory=list)
    overlay: Literal["none", "darken", "red"] = "none"


class DividerData(PageModel):
    style: Literal["solid", "dashed", "dotted"] = "solid"
    color: str = "#333"
    spacing: int = Field(5, ge=0)


class SpacerData(PageModel):
    height: int = Field(20, ge=0)


# ---------- elements (tagged union on `type`) ----------

class _ElementBase(PageModel):
    id: str = Field(default_factory=generate_id)
    style: ElementStyle = Field(default_factory=ElementStyle)


class HeadingElement(_ElementBase):
    type: Literal["heading"] = "heading"
    data: HeadingData = Field(default_factory=HeadingData)


class ParagraphElement(_ElementBase):
    type: Literal["paragraph"] = "paragraph"
    data: ParagraphData = Field(default_factory=ParagraphData)


class ListElement(_ElementBase):
    type: Literal["list"] = "list"
    data: ListData = Field(default_factory=ListData)


class ImageElement(_ElementBase):
    type: Literal["image"] = "image"
    data: ImageData = Field(default_factory=ImageData)


class VideoElement(_ElementBase):
    type: Literal["video"] = "video"
    data: VideoData = Field(default_factory=VideoData)


class SectionHeaderElement(_ElementBase):
    type: Literal["section-header"] = "section-header"
    data: SectionHeaderData = Field(default_factory=SectionHeaderData)


class ChangeCardElement(_ElementBase):
    type: Literal["change-card"] = "change-card"
    data: ChangeCardData = Field(default_factory=ChangeCardData)


class ComparisonElement(_ElementBase):
    type: Literal["comparison"] = "comparison"
    data: ComparisonData = Field(default_factory=ComparisonData)


class CardReferenceElement(_ElementBase):
    type: Literal["card-reference"] = "card-reference"
    data: CardReferenceData = Field(default_factory=CardReferenceData)


class DividerElement(_ElementBase):
    type: Literal["divider"] = "divider"
    data: DividerData = Field(default_factory=DividerData)


class SpacerElement(_ElementBase):
    type: Literal["spacer"] = "spacer"
    data: SpacerData = Field(default_factory=SpacerData)


Element = Annotated[
    Union[
        HeadingElement,
        ParagraphElement,
        ListElement,
        ImageElement,
        VideoElement,
        SectionHeaderElement,
        ChangeCardElement,
        ComparisonElement,
        CardReferenceElement,
        DividerElement,
        SpacerElement,
    ],
    Field(discriminator="type"),
]

ELEMENT_MODELS = {
    "heading": HeadingElement,
    "paragraph": ParagraphElement,
    "list": ListElement,
    "image": ImageElement,
    "video": VideoElement,
    "section-header": SectionHeaderElement,
    "change-card": ChangeCardElement,
    "comparison": ComparisonElement,
    "card-reference": CardReferenceElement,
    "divider": DividerElement,
    "spacer": SpacerElement,
}

ELEMENT_TYPES: Tuple[str, ...] = tuple(ELEMENT_MODELS)


# ---------- layout ----------

class RowSettings(PageModel):
    background_color: Optional[str] = None
    background_opacity: Optional[int] = Field(None, ge=0, le=100)
    background_image: Optional[str] = None
    padding: Optional[Literal["none", "sm", "md", "lg", "xl"]] = None
    max_width: Optional[Literal["full", "xl", "2xl", "4xl", "6xl"]] = None


class PageSettings(PageModel):
    """Outer page layer plus the inner "content" layer."""
    background_color: Optional[str] = None
    background_opacity: Optional[int] = Field(None, ge=0, le=100)
    background_image: Optional[str] = None
    content_background_color: Optional[str] = None
    content_background_opacity: Optional[int] = Field(None, ge=0, le=100)
    content_background_image: Optional[str] = None


class Column(PageModel):
    id: str = Field(default_factory=lambda: generate_id("c"))
    width: str = "100%"
    elements: List[Element] = Field(default_factory=list)


class Row(PageModel):
    id: str = Field(default_factory=lambda: generate_id("r"))
    type: str = "row"
    settings: RowSettings = Field(default_factory=RowSettings)
    columns: List[Column] = Field(default_factory=list)


class PageContent(PageModel):
    """The whole page document. Row order is rendering order."""
    rows: List[Row] = Field(default_factory=list)
    settings: PageSettings = Field(default_factory=PageSettings)

    @classmethod
    def empty(cls) -> "PageContent":
        return cls(rows=[])

    @classmethod
    def from_api(cls, raw: Optional[Dict[str, Any]]) -> "PageContent":
        """
        Build from stored/posted JSON. `None` (no page saved yet) gives the
        empty document. Raises pydantic.ValidationError on malformed input.
        """
        if raw is None:
            return cls.empty()
        return cls.model_validate(raw)

    def iter_elements(self) -> Iterator[Tuple[int, int, int, Any]]:
        """Yield (row_index, col_index, element_index, element) in document order."""
        for r_idx, row in enumerate(self.rows):
            for c_idx, col in enumerate(row.columns):
                for e_idx, element in enumerate(col.elements):
                    yield r_idx, c_idx, e_idx, element

    def all_ids(self) -> List[str]:
        ids: List[str] = []
        for row in self.rows:
            ids.append(row.id)
            for col in row.columns:
                ids.append(col.id)
                ids.extend(el.id for el in col.elements)
        return ids

    def structure_errors(self) -> List[str]:
        """
        Structural rules the page breaks, empty when it is well formed:
        every row has a column, the column widths of a row add up to 100%,
        row/column/element ids are unique.
        """
        errors: List[str] = []
        for r_idx, row in enumerate(self.rows):
            if not row.columns:
                errors.append(f"Row {r_idx} ({row.id}) has no columns")
                continue
            widths = [width_percent(col.width) for col in row.columns]
            if None in widths:
                bad = row.columns[widths.index(None)].width
                errors.append(f"Row {r_idx} ({row.id}): column width must be a positive percentage, got {bad!r}")
                continue
            total = sum(widths)
            if abs(total - 100) > WIDTH_TOLERANCE:
                errors.append(f"Row {r_idx} ({row.id}): column widths add up to {total:g}%, expected 100%")

        seen = set()
        duplicates = set()
        for node_id in self.all_ids():
            if node_id in seen:
                duplicates.add(node_id)
            seen.add(node_id)
        if duplicates:
            errors.append(f"Duplicate ids found: {sorted(duplicates)}")
        return errors
