"""Sentence-safe truncation of section bodies.

A sentence ends at ``.``, ``!`` or ``?`` followed by whitespace and an
uppercase letter, a newline, or the end of the text. CJK terminal
punctuation (``。！？``) ends a sentence on its own. Truncation only ever
removes whole sentences and never goes below a minimum sentence count.
"""

from __future__ import annotations

import re
from typing import List, Optional

from lorelink.context.model import SectionKey, get_section, set_section
from lorelink.schemas.context import VirtualContext

SENTENCE_END_PATTERN = re.compile(r"[.!?](?:\s+(?=[A-Z])|[ \t]*\n|\s*\Z)|[。！？]")


def find_sentence_boundaries(text: str) -> List[int]:
    """Offsets just past each sentence end (trailing whitespace included)."""
    return [m.end() for m in SENTENCE_END_PATTERN.finditer(text)]


def count_sentences(text: str) -> int:
    if not text.strip():
        return 0
    return len(find_sentence_boundaries(text))


def truncate_text_from_start(text: str, chars_to_remove: int, min_sentences: int) -> Optional[str]:
    """Drop whole leading sentences until at least ``chars_to_remove`` are gone.

    Returns the shortened text, or None when the request cannot be met
    without leaving fewer than ``min_sentences`` sentences.
    """
    if chars_to_remove <= 0:
        return text
    boundaries = find_sentence_boundaries(text)
    removable = len(boundaries) - min_sentences
    for boundary in boundaries[:max(removable, 0)]:
        if boundary >= chars_to_remove:
            return text[boundary:].strip()
    return None


def truncate_text_from_end(text: str, target_chars: int, min_sentences: int) -> str:
    """Keep leading sentences that fit in ``target_chars``, never fewer than ``min_sentences``."""
    if len(text) <= target_chars:
        return text
    boundaries = find_sentence_boundaries(text)
    if len(boundaries) <= min_sentences:
        return text
    cut = boundaries[min_sentences - 1] if min_sentences > 0 else 0
    for boundary in boundaries[min_sentences:]:
        if boundary > target_chars:
            break
        cut = boundary
    if cut <= 0:
        return text
    return text[:cut].strip()


def truncate_section(
    ctx: VirtualContext,
    name: SectionKey,
    target_chars: int,
    min_sentences: int = 5,
    from_start: bool = True,
) -> VirtualContext:
    """Shorten a section body towards ``target_chars`` on sentence boundaries.

    From the start, the oldest sentences go first; if the floor would be
    violated the context is returned unchanged. From the end, the latest
    sentences go first and the floor is kept.
    """
    section = get_section(ctx, name)
    if section is None or len(section.body) <= target_chars:
        return ctx

    if from_start:
        new_body = truncate_text_from_start(
            section.body, len(section.body) - target_chars, min_sentences
        )
        if new_body is None:
            return ctx
    else:
        new_body = truncate_text_from_end(section.body, target_chars, min_sentences)

    if new_body == section.body:
        return ctx
    return set_section(ctx, name, new_body)
