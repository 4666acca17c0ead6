# services/api/core/render.py
"""
HTML rendering of devlog pages.

One renderer per element type, all sharing the signature
`(element, is_editing) -> str`. In editing mode the plain-text fields of an
element carry `contenteditable` and `data-field="<wire key>"`, so the editor
can post the edited value back as an `update_element_data` patch.

All user text goes through html.escape.
"""
from __future__ import annotations

import logging
import re
from html import escape as _esc
from typing import Callable, Dict, List, Optional
from urllib.parse import parse_qs, quote, urlparse

from models.page import ELEMENT_TYPES, CardFace, ElementStyle, PageContent, Row

logger = logging.getLogger(__name__)

CHANGE_MARKERS = {"buff": "↑", "nerf": "↓", "neutral": "○"}

_YOUTUBE_ID = re.compile(r"^[A-Za-z0-9_-]{6,}$")
_CONTROL_CHARS = re.compile(r"[\x00-\x20\x7f]")
_SAFE_SCHEMES = ("http", "https")


# ---------- small helpers ----------

def _editable(field: str, is_editing: bool) -> str:
    if not is_editing:
        return ""
    return f' contenteditable="true" data-field="{_esc(field)}"'


def safe_url(url: Optional[str], allow_relative: bool = True) -> str:
    """
    Return `url` when it is http(s) (or a relative path, if allowed); any
    other scheme gives "".
    """
    if not url:
        return ""
    cleaned = _CONTROL_CHARS.sub("", url)
    scheme = urlparse(cleaned).scheme.lower()
    if scheme in _SAFE_SCHEMES:
        return cleaned
    if not scheme and allow_relative and ":" not in cleaned.split("/", 1)[0]:
        return cleaned
    return ""


def _css_url(url: str) -> str:
    return quote(url, safe=":/?#[]@!$&*+,;=%~.-_")


def _box(value) -> str:
    return "auto" if value == "auto" else f"{int(value)}px"


def style_to_css(style: ElementStyle) -> str:
    parts = []
    for attr in (
        "margin_top", "margin_right", "margin_bottom", "margin_left",
        "padding_top", "padding_right", "padding_bottom", "padding_left",
    ):
        value = getattr(style, attr)
        if value is not None:
            parts.append(f"{attr.replace('_', '-')}:{_box(value)}")
    return ";".join(parts)


def _background_css(color: Optional[str], opacity: Optional[int], image: Optional[str]) -> str:
    parts = []
    if color:
        parts.append(f"background-color:{_esc(color)}")
    if opacity is not None:
        parts.append(f"--devlog-bg-opacity:{opacity / 100:g}")
    image = safe_url(image)
    if image:
        parts.append(f"background-image:url('{_esc(_css_url(image))}');background-size:cover")
    return ";".join(parts)


def video_embed_url(src: str, video_type: str = "youtube") -> str:
    """
    Turn a YouTube/Vimeo page URL into its player URL. Uploaded files and
    URLs that are already embeds are returned unchanged. The host wins over
    the declared `video_type`. Anything that is not http(s) gives "" (relative
    paths are allowed for uploads only).
    """
    if not src:
        return ""
    parsed = urlparse(src)
    host = (parsed.netloc or "").lower()
    if "vimeo" in host:
        kind = "vimeo"
    elif "youtu" in host:
        kind = "youtube"
    else:
        kind = video_type

    if kind == "youtube":
        video_id = None
        if "youtu.be" in host:
            video_id = parsed.path.lstrip("/").split("/")[0]
        elif parsed.path.startswith("/embed/"):
            return safe_url(src, allow_relative=False)
        elif parsed.path.startswith("/shorts/"):
            video_id = parsed.path.split("/")[2]
        elif "youtube" in host:
            video_id = (parse_qs(parsed.query).get("v") or [None])[0]
        elif not host and _YOUTUBE_ID.match(src):
            video_id = src
        if video_id:
            return f"https://www.youtube.com/embed/{quote(video_id, safe='')}"
        return safe_url(src, allow_relative=False)

    if kind == "vimeo":
        if host.startswith("player."):
            return safe_url(src, allow_relative=False)
        digits = [p for p in parsed.path.split("/") if p.isdigit()]
        if digits:
            return f"https://player.vimeo.com/video/{digits[0]}"
        return safe_url(src, allow_relative=False)

    return safe_url(src, allow_relative=(kind == "upload"))


# ---------- per-type renderers ----------

def _render_heading(element, is_editing: bool) -> str:
    d = element.data
    style = f"text-align:{d.align};font-size:{_esc(d.font_size)}px;font-family:{_esc(d.font_family)}"
    return (
        f'<{d.level} class="devlog-heading" style="{style}"{_editable("text", is_editing)}>'
        f"{_esc(d.text)}</{d.level}>"
    )


def _render_paragraph(element, is_editing: bool) -> str:
    d = element.data
    style = f"text-align:{d.align};font-size:{_esc(d.font_size)}px;font-family:{_esc(d.font_family)}"
    return f'<p class="devlog-paragraph" style="{style}"{_editable("text", is_editing)}>{_esc(d.text)}</p>'


def _render_list(element, is_editing: bool) -> str:
    d = element.data
    tag = "ol" if d.bullet_style == "decimal" else "ul"
    style = (
        f"list-style-type:{d.bullet_style};text-align:{d.align};"
        f"padding-left:{d.indent * 20 + 20}px;font-size:{_esc(d.font_size)}px"
    )
    items = []
    for i, item in enumerate(d.items):
        attrs = f' contenteditable="true" data-field="items" data-index="{i}"' if is_editing else ""
        items.append(f"<li{attrs}>{_esc(item)}</li>")
    return f'<{tag} class="devlog-list" style="{style}">{"".join(items)}</{tag}>'


def _render_image(element, is_editing: bool) -> str:
    d = element.data
    src = safe_url(d.src)
    if not src:
        return '<div class="devlog-image devlog-placeholder">Image</div>'
    caption = ""
    if d.caption or is_editing:
        caption = f'<figcaption{_editable("caption", is_editing)}>{_esc(d.caption)}</figcaption>'
    return (
        f'<figure class="devlog-image"><img src="{_esc(src)}" alt="{_esc(d.alt)}" loading="lazy">'
        f"{caption}</figure>"
    )


def _render_video(element, is_editing: bool) -> str:
    d = element.data
    url = video_embed_url(d.src, d.type)
    if not url:
        return '<div class="devlog-video devlog-placeholder">Video</div>'
    if d.type == "upload":
        return f'<div class="devlog-video"><video src="{_esc(url)}" controls></video></div>'
    return (
        f'<div class="devlog-video"><iframe src="{_esc(url)}" '
        f'allow="autoplay; encrypted-media; picture-in-picture" allowfullscreen></iframe></div>'
    )


def _render_section_header(element, is_editing: bool) -> str:
    d = element.data
    return (
        f'<div class="devlog-section-header" style="background-color:{_esc(d.color)}"'
        f'{_editable("text", is_editing)}>{_esc(d.text)}</div>'
    )


def _render_changes(changes) -> str:
    rows = []
    for change in changes:
        marker = CHANGE_MARKERS.get(change.type, CHANGE_MARKERS["neutral"])
        rows.append(
            f'<li class="devlog-change devlog-change--{change.type}">'
            f'<span class="devlog-change__marker">{marker}</span>'
            f'<span class="devlog-change__text">{_esc(change.text)}</span></li>'
        )
    return f'<ul class="devlog-changes">{"".join(rows)}</ul>'


def _render_face(face: CardFace, is_editing: bool, field_prefix: str = "", extra_class: str = "") -> str:
    """Icon, title, subtitle and change list of a card."""
    icon_src = safe_url(face.icon)
    icon = f'<img class="devlog-card__icon" src="{_esc(icon_src)}" alt="">' if icon_src else (
        '<div class="devlog-card__icon devlog-placeholder"></div>'
    )
    # nested faces (comparison before/after) are edited through the panel only
    title_attrs = _editable(f"{field_prefix}title", is_editing and not field_prefix)
    subtitle_attrs = _editable(f"{field_prefix}subtitle", is_editing and not field_prefix)
    subtitle = ""
    if face.subtitle or (is_editing and not field_prefix):
        subtitle = f'<div class="devlog-card__subtitle"{subtitle_attrs}>{_esc(face.subtitle)}</div>'
    classes = "devlog-card" + (f" {extra_class}" if extra_class else "")
    return (
        f'<div class="{classes}"><div class="devlog-card__header">{icon}<div>'
        f'<div class="devlog-card__title"{title_attrs}>{_esc(face.title)}</div>{subtitle}'
        f"</div></div>{_render_changes(face.changes)}</div>"
    )


def _render_change_card(element, is_editing: bool) -> str:
    d = element.data
    face = CardFace(title=d.title, subtitle=d.subtitle, icon=d.icon, changes=d.changes)
    return _render_face(face, is_editing, extra_class="devlog-change-card")


def _render_comparison(element, is_editing: bool) -> str:
    d = element.data
    before = _render_face(d.before, is_editing, "before.", f"devlog-comparison__before devlog-overlay--{d.overlay}")
    after = _render_face(d.after, is_editing, "after.", "devlog-comparison__after")
    return (
        f'<div class="devlog-comparison devlog-comparison--{d.layout}">'
        f'<div class="devlog-comparison__title"{_editable("title", is_editing)}>{_esc(d.title)}</div>'
        f'<div class="devlog-comparison__faces">'
        f'<div class="devlog-comparison__slot"><div class="devlog-comparison__label">Before</div>{before}</div>'
        f'<div class="devlog-comparison__slot"><div class="devlog-comparison__label">After</div>{after}</div>'
        f"</div></div>"
    )


def _render_card_reference(element, is_editing: bool) -> str:
    d = element.data
    if not d.source_card_id and not d.title:
        return '<div class="devlog-card-reference devlog-placeholder">Pick a card from a previous version</div>'
    face = CardFace(title=d.title, subtitle=d.subtitle, icon=d.icon, changes=d.changes)
    return (
        f'<div class="devlog-card-reference" data-source-version="{_esc(d.source_version_id)}" '
        f'data-source-card="{_esc(d.source_card_id)}">'
        f'{_render_face(face, is_editing, "ref.", f"devlog-overlay--{d.overlay}")}</div>'
    )


def _render_divider(element, is_editing: bool) -> str:
    d = element.data
    return (
        f'<hr class="devlog-divider" style="border:0;border-top:1px {d.style} {_esc(d.color)};'
        f'margin:{d.spacing}px 0">'
    )


def _render_spacer(element, is_editing: bool) -> str:
    return f'<div class="devlog-spacer" style="height:{element.data.height}px"></div>'


RENDERERS: Dict[str, Callable[..., str]] = {
    "heading": _render_heading,
    "paragraph": _render_paragraph,
    "list": _render_list,
    "image": _render_image,
    "video": _render_video,
    "section-header": _render_section_header,
    "change-card": _render_change_card,
    "comparison": _render_comparison,
    "card-reference": _render_card_reference,
    "divider": _render_divider,
    "spacer": _render_spacer,
}

if set(RENDERERS) != set(ELEMENT_TYPES):
    raise RuntimeError(
        f"Renderers out of sync with the page model: {sorted(set(RENDERERS) ^ set(ELEMENT_TYPES))}"
    )


# ---------- public API ----------

def render_element(element, is_editing: bool = False, selected: bool = False) -> str:
    """Render one element wrapped in its box-model container."""
    body = RENDERERS[element.type](element, is_editing)
    css = style_to_css(element.style)
    style_attr = f' style="{css}"' if css else ""
    selected_attr = ' data-selected="true"' if selected else ""
    return (
        f'<div class="devlog-element devlog-element--{element.type}" '
        f'data-element-id="{_esc(element.id)}"{selected_attr}{style_attr}>{body}</div>'
    )


def _render_row(row: Row, is_editing: bool, selected_id: Optional[str]) -> str:
    s = row.settings
    classes = ["devlog-row"]
    if s.padding:
        classes.append(f"devlog-row--pad-{s.padding}")
    if s.max_width:
        classes.append(f"devlog-row--max-{s.max_width}")
    bg = _background_css(s.background_color, s.background_opacity, s.background_image)
    style_attr = f' style="{bg}"' if bg else ""

    columns: List[str] = []
    for col in row.columns:
        elements = "".join(
            render_element(el, is_editing, selected=(el.id == selected_id)) for el in col.elements
        )
        columns.append(
            f'<div class="devlog-column" data-column-id="{_esc(col.id)}" '
            f'style="width:{_esc(col.width)}">{elements}</div>'
        )
    return (
        f'<section class="{" ".join(classes)}" data-row-id="{_esc(row.id)}"{style_attr}>'
        f'<div class="devlog-row__inner">{"".join(columns)}</div></section>'
    )


def render_page(
    content: PageContent,
    is_editing: bool = False,
    selected_element_id: Optional[str] = None,
) -> str:
    """Render the page layer, the content layer and every row."""
    s = content.settings
    page_bg = _background_css(s.background_color, s.background_opacity, s.background_image)
    content_bg = _background_css(
        s.content_background_color, s.content_background_opacity, s.content_background_image
    )

    if content.rows:
        body = "".join(_render_row(row, is_editing, selected_element_id) for row in content.rows)
    else:
        body = (
            '<div class="devlog-empty"><h3>No Content Yet</h3>'
            "<p>This update page is still being built.</p></div>"
        )

    mode = " devlog-page--editing" if is_editing else ""
    return (
        f'<div class="devlog-page{mode}" style="{page_bg}">'
        f'<div class="devlog-content" style="{content_bg}">{body}</div></div>'
    )
