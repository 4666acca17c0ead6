# services/api/models/element_registry.py
"""
Element registry: the closed set of element types the page builder knows.

For every type this module supplies
  - the default data a freshly inserted element starts from,
  - the property-panel fields the editor shows for it,
  - catalog metadata (label, category, description).

Renderers live in core/render.py and are keyed by the same type names.
"""
from __future__ import annotations

from dataclasses import asdict, dataclass, field
from typing import Any, Dict, List, Optional, Tuple

from .page import ELEMENT_MODELS, ELEMENT_TYPES, CardFace, Change, generate_id


@dataclass(frozen=True)
class PropertyField:
    """One input in the properties panel."""
    name: str            # wire (camelCase) key inside element.data
    label: str
    kind: str            # text | textarea | select | number | color | items | changes | card | version-card
    options: Tuple[str, ...] = ()

    def to_api(self) -> Dict[str, Any]:
        out = asdict(self)
        out["options"] = list(self.options)
        return out


@dataclass(frozen=True)
class ElementSpec:
    type: str
    label: str
    category: str
    description: str
    fields: Tuple[PropertyField, ...] = field(default_factory=tuple)


ALIGN_OPTIONS = ("left", "center", "right", "justify")
CHANGE_TYPES = ("buff", "nerf", "neutral")

CATEGORIES = (
    ("text", "Text"),
    ("media", "Media"),
    ("game", "Game Update"),
    ("other", "Other"),
)

_CARD_FIELDS = (
    PropertyField("icon", "Icon URL", "text"),
    PropertyField("title", "Title", "text"),
    PropertyField("subtitle", "Subtitle", "text"),
    PropertyField("changes", "Changes", "changes", CHANGE_TYPES),
)

ELEMENT_SPECS: Dict[str, ElementSpec] = {
    "heading": ElementSpec(
        "heading", "Heading", "text", "H1, H2, H3 headings",
        (
            PropertyField("text", "Text", "text"),
            PropertyField("level", "Level", "select", ("h1", "h2", "h3")),
            PropertyField("align", "Alignment", "select", ALIGN_OPTIONS),
            PropertyField("fontSize", "Font size", "number"),
            PropertyField("fontFamily", "Font family", "text"),
        ),
    ),
    "paragraph": ElementSpec(
        "paragraph", "Paragraph", "text", "Body text",
        (
            PropertyField("text", "Text", "textarea"),
            PropertyField("align", "Alignment", "select", ALIGN_OPTIONS),
            PropertyField("fontSize", "Font size", "number"),
            PropertyField("fontFamily", "Font family", "text"),
        ),
    ),
    "list": ElementSpec(
        "list", "Bullet List", "text", "Bulleted list",
        (
            PropertyField("items", "Items", "items"),
            PropertyField("bulletStyle", "Bullet style", "select",
                          ("disc", "circle", "square", "decimal", "none")),
            PropertyField("align", "Alignment", "select", ALIGN_OPTIONS),
            PropertyField("indent", "Indent", "number"),
            PropertyField("fontSize", "Font size", "number"),
        ),
    ),
    "image": ElementSpec(
        "image", "Image", "media", "Single image",
        (
            PropertyField("src", "Image URL", "text"),
            PropertyField("alt", "Alt text", "text"),
            PropertyField("caption", "Caption", "text"),
        ),
    ),
    "video": ElementSpec(
        "video", "Video", "media", "YouTube, Vimeo, or upload",
        (
            PropertyField("src", "Video URL", "text"),
            PropertyField("type", "Source", "select", ("youtube", "vimeo", "upload")),
        ),
    ),
    "section-header": ElementSpec(
        "section-header", "Section Header", "game", "Colored bar with title",
        (
            PropertyField("text", "Text", "text"),
            PropertyField("color", "Color", "color"),
        ),
    ),
    "change-card": ElementSpec(
        "change-card", "Change Card", "game", "Hero/Item with changes",
        _CARD_FIELDS,
    ),
    "card-reference": ElementSpec(
        "card-reference", "Card Reference", "game", "Load card from previous version",
        (
            PropertyField("sourceVersionId", "Load from version", "version-card"),
            PropertyField("sourceCardId", "Card", "version-card"),
            PropertyField("overlay", "Overlay", "select", ("none", "darken", "red")),
        ) + _CARD_FIELDS,
    ),
    "comparison": ElementSpec(
        "comparison", "Comparison", "game", "Before/After view",
        (
            PropertyField("title", "Title", "text"),
            PropertyField("layout", "Layout", "select", ("side-by-side", "stacked")),
            PropertyField("overlay", "\"Before\" overlay", "select", ("darken", "red")),
            PropertyField("before", "Before card", "card"),
            PropertyField("after", "After card", "card"),
        ),
    ),
    "divider": ElementSpec(
        "divider", "Divider", "other", "Visual separator",
        (
            PropertyField("style", "Line style", "select", ("solid", "dashed", "dotted")),
            PropertyField("color", "Color", "color"),
            PropertyField("spacing", "Spacing", "number"),
        ),
    ),
    "spacer": ElementSpec(
        "spacer", "Spacer", "other", "Empty space",
        (PropertyField("height", "Height (px)", "number"),),
    ),
}

if set(ELEMENT_SPECS) != set(ELEMENT_TYPES):
    raise RuntimeError(
        f"Element registry out of sync with the page model: "
        f"{sorted(set(ELEMENT_SPECS) ^ set(ELEMENT_TYPES))}"
    )


def is_known_type(element_type: str) -> bool:
    return element_type in ELEMENT_MODELS


def default_data(element_type: str) -> Dict[str, Any]:
    """Initial data (wire format) for a new element of `element_type`."""
    if not is_known_type(element_type):
        raise ValueError(f"Unknown element type: {element_type}")
    return ELEMENT_MODELS[element_type]().data.to_api()


def create_element(element_type: str):
    """Build a new element with a fresh id, default data and empty style."""
    if not is_known_type(element_type):
        raise ValueError(f"Unknown element type: {element_type}")
    return ELEMENT_MODELS[element_type](id=generate_id("e"))


def property_fields(element_type: str) -> List[PropertyField]:
    spec = ELEMENT_SPECS.get(element_type)
    return list(spec.fields) if spec else []


def catalog() -> List[Dict[str, Any]]:
    """Element picker contents grouped by category."""
    out = []
    for cat_id, cat_label in CATEGORIES:
        out.append({
            "id": cat_id,
            "label": cat_label,
            "elements": [
                {
                    "type": spec.type,
                    "label": spec.label,
                    "description": spec.description,
                    "defaults": default_data(spec.type),
                    "fields": [f.to_api() for f in spec.fields],
                }
                for spec in ELEMENT_SPECS.values()
                if spec.category == cat_id
            ],
        })
    return out


# ---------- "load card from another version" ----------

def find_card(
    versions: List[Dict[str, Any]],
    version_id: str,
    card_id: str,
) -> Optional[Dict[str, Any]]:
    """Look up a change-card in a versions-with-cards listing."""
    version = next((v for v in versions if v.get("id") == version_id), None)
    if not version:
        return None
    return next((c for c in version.get("cards") or [] if c.get("id") == card_id), None)


def card_patch(
    element_type: str,
    card: Dict[str, Any],
    version_id: str,
    slot: Optional[str] = None,
) -> Optional[Dict[str, Any]]:
    """
    Build the data patch that copies `card` into an element.

    comparison      -> replaces the `before` or `after` face (slot required)
    card-reference  -> records the source ids and copies the face fields
    Returns None when the element type cannot hold a card.
    """
    changes = [Change.model_validate(c).to_api() for c in card.get("changes") or []]
    face = CardFace(
        title=card.get("title") or "",
        subtitle=card.get("subtitle") or "",
        icon=card.get("icon") or "",
    ).to_api()
    face["changes"] = changes

    if element_type == "comparison":
        if slot not in ("before", "after"):
            return None
        return {slot: face}

    if element_type == "card-reference":
        return {
            "sourceVersionId": version_id,
            "sourceCardId": card.get("id") or "",
            **face,
        }

    return None
