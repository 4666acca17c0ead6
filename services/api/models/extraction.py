# services/api/models/extraction.py
"""
Save-time change-card extraction.

Authors build before/after comparisons and references to cards of earlier
versions inline in a devlog. Before every save this pass makes sure each of
those "current state" cards also exists as a plain change-card element, so
the version carries a flat gallery of its cards.

Dedup key: title + "-" + subtitle. Only cards physically present in the
document count as seen, so a deleted or renamed synthesized card comes back
on the next save.
"""
from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional, Tuple

from .page import (
    CardFace,
    ChangeCardData,
    ChangeCardElement,
    Column,
    PageContent,
    Row,
    generate_id,
)

logger = logging.getLogger(__name__)


def card_key(title: str, subtitle: Optional[str]) -> str:
    return f"{title}-{subtitle or ''}"


def _new_card(face: CardFace) -> ChangeCardElement:
    return ChangeCardElement(
        id=generate_id("e"),
        data=ChangeCardData(
            icon=face.icon,
            title=face.title,
            subtitle=face.subtitle,
            changes=[c.model_copy(deep=True) for c in face.changes],
        ),
    )


def extract_change_cards(content: PageContent) -> Tuple[PageContent, List[ChangeCardElement]]:
    """
    Return (augmented copy of `content`, synthesized change-cards in discovery order).

    The input document is not modified.
    """
    new = content.model_copy(deep=True)

    seen = set()
    for _, _, _, element in new.iter_elements():
        if element.type == "change-card":
            seen.add(card_key(element.data.title, element.data.subtitle))

    synthesized: List[ChangeCardElement] = []
    for _, _, _, element in new.iter_elements():
        face: Optional[CardFace] = None
        if element.type == "comparison":
            face = element.data.after
        elif element.type == "card-reference":
            data = element.data
            face = CardFace(
                title=data.title,
                subtitle=data.subtitle,
                icon=data.icon,
                changes=data.changes,
            )
        if face is None or not face.title:
            continue

        key = card_key(face.title, face.subtitle)
        if key in seen:
            continue
        seen.add(key)
        synthesized.append(_new_card(face))

    if not synthesized:
        return new, []

    if new.rows and new.rows[0].columns:
        new.rows[0].columns[0].elements.extend(synthesized)
    else:
        new.rows.append(Row(type="row", columns=[Column(width="100%", elements=list(synthesized))]))

    logger.info(f"Extracted {len(synthesized)} change-card(s) from comparisons/references")
    return new, synthesized


def collect_change_cards(content: PageContent) -> List[Dict[str, Any]]:
    """Every change-card in document order, in the shape the card pickers use."""
    cards: List[Dict[str, Any]] = []
    for _, _, _, element in content.iter_elements():
        if element.type != "change-card":
            continue
        data = element.data
        cards.append({
            "id": element.id,
            "title": data.title or "Untitled",
            "subtitle": data.subtitle or "",
            "icon": data.icon or "",
            "changes": [c.to_api() for c in data.changes],
        })
    return cards
