"""Wikilink syntax and card reference resolution.

``[[Target]]`` inside a card entry is an explicit link. With implicit links
enabled, any card whose key appears in the entry counts as linked too.
"""

from __future__ import annotations

import re
from typing import List, Optional, Sequence

from lorelink.schemas.cards import StoryCard

WIKILINK_PATTERN = re.compile(r"\[\[([^\]]+)\]\]")


def extract_wikilinks(text: str) -> List[str]:
    """Trimmed, non-empty link targets in document order."""
    links = []
    for m in WIKILINK_PATTERN.finditer(text or ""):
        target = m.group(1).strip()
        if target:
            links.append(target)
    return links


def strip_wikilinks(text: str) -> str:
    """Replace ``[[Name]]`` markup with ``Name``."""
    return WIKILINK_PATTERN.sub(lambda m: m.group(1).strip(), text)


def find_card_by_reference(reference: str, cards: Sequence[StoryCard]) -> Optional[StoryCard]:
    """Resolve a link target to a card.

    Exact case-insensitive title match wins; otherwise the first card with
    a key containing the target (case-insensitive).
    """
    ref = reference.strip().lower()
    if not ref:
        return None

    for card in cards:
        if card.title and card.title.lower() == ref:
            return card

    for card in cards:
        for key in card.keys or ():
            if key and ref in key.lower():
                return card

    return None


def extract_implicit_links(
    entry: str,
    cards: Sequence[StoryCard],
    exclude_id: Optional[str] = None,
) -> List[StoryCard]:
    """Cards with any key appearing (case-insensitively) inside ``entry``."""
    lowered = entry.lower()
    linked = []
    for card in cards:
        if card.id == exclude_id:
            continue
        if any(key and key.lower() in lowered for key in card.keys or ()):
            linked.append(card)
    return linked


def resolve_links(
    card: StoryCard,
    cards: Sequence[StoryCard],
    implicit_links: bool = False,
) -> List[StoryCard]:
    """Every card ``card`` links to: explicit targets first, then implicit ones.

    Unresolvable targets are dropped; self-links and duplicates are removed.
    """
    if not card.entry:
        return []

    resolved: List[StoryCard] = []
    seen = {card.id}

    for target in extract_wikilinks(card.entry):
        linked = find_card_by_reference(target, cards)
        if linked is not None and linked.id not in seen:
            seen.add(linked.id)
            resolved.append(linked)

    if implicit_links:
        for linked in extract_implicit_links(card.entry, cards, exclude_id=card.id):
            if linked.id not in seen:
                seen.add(linked.id)
                resolved.append(linked)

    return resolved
