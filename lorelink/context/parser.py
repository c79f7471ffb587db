"""Section Parser — raw context text → ``VirtualContext``.

Splits the text into a preamble, the canonical sections and a postamble.
Headers are matched case-insensitively at line start, optionally behind
1-4 ``#``. Parsing never raises: anything malformed degrades to "not
present".
"""

from __future__ import annotations

import dataclasses
import re
from typing import Dict, List, Optional, Sequence

from lorelink.schemas.cards import StoryCard
from lorelink.schemas.context import SECTION_ORDER, Section, SectionName, VirtualContext
from lorelink.utils.logging_config import get_logger

_logger = get_logger("lorelink.context.parser")

_MD_PREFIX = r"(?:#{1,4}[ \t]*)?"

_PLAIN_HEADER_PATTERNS = [
    (name, re.compile(rf"^{_MD_PREFIX}{re.escape(name.value)}(?::|[ \t]*$)", re.IGNORECASE | re.MULTILINE))
    for name in (
        SectionName.WORLD_LORE,
        SectionName.STORY_SUMMARY,
        SectionName.MEMORIES,
        SectionName.NARRATIVE_CHECKLIST,
        SectionName.RECENT_STORY,
    )
]

# "[Author's note:", "[Authors Note:", "[author note:" ...
_BRACKET_NOTE_PATTERN = re.compile(
    rf"^{_MD_PREFIX}\[Author['’]?s?[ \t]+note:", re.IGNORECASE | re.MULTILINE
)
_MARKDOWN_NOTE_PATTERN = re.compile(
    r"^#{1,4}[ \t]*Author['’]?s?[ \t]+note(?::|[ \t]*$)", re.IGNORECASE | re.MULTILINE
)


@dataclasses.dataclass
class _HeaderMatch:
    name: SectionName
    header: str
    start: int
    end: int  # first character after the header text
    bracket: bool = False


def find_matching_bracket(text: str, start: int) -> int:
    """Index of the ``]`` closing the ``[`` at or after ``start``, or -1.

    Nested ``[...]`` pairs are skipped by tracking depth.
    """
    depth = 0
    for i in range(start, len(text)):
        ch = text[i]
        if ch == "[":
            depth += 1
        elif ch == "]":
            if depth == 0:
                continue
            depth -= 1
            if depth == 0:
                return i
    return -1


def _find_headers(text: str) -> List[_HeaderMatch]:
    found: List[_HeaderMatch] = []
    for name, pattern in _PLAIN_HEADER_PATTERNS:
        for m in pattern.finditer(text):
            found.append(_HeaderMatch(name, m.group(0).strip(), m.start(), m.end()))
    for m in _BRACKET_NOTE_PATTERN.finditer(text):
        found.append(
            _HeaderMatch(SectionName.AUTHORS_NOTE, m.group(0).strip(), m.start(), m.end(), bracket=True)
        )
    for m in _MARKDOWN_NOTE_PATTERN.finditer(text):
        found.append(_HeaderMatch(SectionName.AUTHORS_NOTE, m.group(0).strip(), m.start(), m.end()))
    found.sort(key=lambda h: h.start)
    return found


def _strip_postamble_label(postamble: str, label: str) -> str:
    label = label.strip()
    if not label:
        return postamble
    pattern = re.compile(rf"^{_MD_PREFIX}{re.escape(label)}[ \t]*\n?", re.IGNORECASE)
    return pattern.sub("", postamble, count=1).strip()


def match_cards_to_world_lore(body: str, story_cards: Sequence[StoryCard]) -> List[StoryCard]:
    """Cards whose non-empty entry appears verbatim in ``body``, in pool order."""
    return [card for card in story_cards if card.entry and card.entry in body]


def parse_context(
    text: str,
    story_cards: Sequence[StoryCard] = (),
    max_chars: Optional[int] = None,
    postamble_header: str = "Continue From:",
) -> VirtualContext:
    """Parse raw context text into a ``VirtualContext``.

    Args:
        text: The raw context text.
        story_cards: The host's card pool, used to derive ``world_lore_cards``.
        max_chars: Hard character ceiling for this pass, if the host gave one.
        postamble_header: Label line removed from the start of the postamble.
    """
    text = text or ""
    headers: List[_HeaderMatch] = []
    bodies: List[str] = []
    postamble_start: Optional[int] = None

    for header in _find_headers(text):
        if header.bracket:
            open_idx = text.index("[", header.start)
            close_idx = find_matching_bracket(text, open_idx)
            if close_idx == -1:
                # Unterminated note: not a header, its text stays where it is
                continue
            headers.append(header)
            bodies.append(text[header.end:close_idx].strip())
            postamble_start = close_idx + 1
            # The rest of the text is postamble, headers in it included
            break
        headers.append(header)
        bodies.append("")

    for i, header in enumerate(headers):
        if header.bracket:
            continue
        end = headers[i + 1].start if i + 1 < len(headers) else len(text)
        bodies[i] = text[header.end:end].strip()

    preamble = text[: headers[0].start].strip() if headers else text.strip()

    postamble = ""
    if postamble_start is not None and postamble_start < len(text):
        postamble = _strip_postamble_label(text[postamble_start:].strip(), postamble_header)

    sections: Dict[SectionName, Section] = {}
    for header, body in zip(headers, bodies):
        existing = sections.get(header.name)
        if existing is None:
            sections[header.name] = Section(name=header.name, header=header.header, body=body)
        elif body:
            joined = f"{existing.body}\n\n{body}" if existing.body else body
            sections[header.name] = existing.model_copy(update={"body": joined})

    sections = {name: sections[name] for name in SECTION_ORDER if name in sections}

    world_lore = sections.get(SectionName.WORLD_LORE)
    world_lore_cards = (
        tuple(match_cards_to_world_lore(world_lore.body, story_cards)) if world_lore else ()
    )

    _logger.debug(
        "context parsed",
        extra={"metadata": {
            "sections": [name.value for name in sections],
            "world_lore_cards": [card.id for card in world_lore_cards],
            "postamble": bool(postamble),
        }},
    )

    return VirtualContext(
        preamble=preamble,
        sections=sections,
        postamble=postamble,
        world_lore_cards=world_lore_cards,
        raw=text,
        max_chars=max_chars,
    )
