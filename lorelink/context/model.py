"""Copy-on-write accessors and mutators for ``VirtualContext``.

Every mutator returns a new context. Section-changing mutators build a
fresh ``sections`` dict; the untouched ``Section`` values are shared, which
is safe because they are frozen.
"""

from __future__ import annotations

from typing import Dict, Optional, Union

from lorelink.schemas.cards import StoryCard
from lorelink.schemas.context import (
    DEFAULT_HEADERS,
    SECTION_ORDER,
    Section,
    SectionName,
    VirtualContext,
)

SectionKey = Union[SectionName, str]


def get_section(ctx: VirtualContext, name: SectionKey) -> Optional[Section]:
    return ctx.sections.get(SectionName(name))


def _with_sections(ctx: VirtualContext, sections: Dict[SectionName, Section]) -> VirtualContext:
    ordered = {name: sections[name] for name in SECTION_ORDER if name in sections}
    return ctx.model_copy(update={"sections": ordered})


def set_section(ctx: VirtualContext, name: SectionKey, body: str) -> VirtualContext:
    """Replace a section's body, creating the section with its default header if absent."""
    name = SectionName(name)
    sections = dict(ctx.sections)
    existing = sections.get(name)
    if existing is not None:
        sections[name] = existing.model_copy(update={"body": body})
    else:
        sections[name] = Section(name=name, header=DEFAULT_HEADERS[name], body=body)
    return _with_sections(ctx, sections)


def append_to_section(ctx: VirtualContext, name: SectionKey, content: str) -> VirtualContext:
    existing = get_section(ctx, name)
    if existing is not None and existing.body:
        return set_section(ctx, name, f"{existing.body}\n\n{content}")
    return set_section(ctx, name, content)


def prepend_to_section(ctx: VirtualContext, name: SectionKey, content: str) -> VirtualContext:
    existing = get_section(ctx, name)
    if existing is not None and existing.body:
        return set_section(ctx, name, f"{content}\n\n{existing.body}")
    return set_section(ctx, name, content)


def remove_section(ctx: VirtualContext, name: SectionKey) -> VirtualContext:
    name = SectionName(name)
    if name not in ctx.sections:
        return ctx
    sections = {k: v for k, v in ctx.sections.items() if k != name}
    return _with_sections(ctx, sections)


# ---------------------------------------------------------------------------
# World Lore cards
# ---------------------------------------------------------------------------

def has_world_lore_card(ctx: VirtualContext, card_id: str) -> bool:
    return any(card.id == card_id for card in ctx.world_lore_cards)


def add_world_lore_card(
    ctx: VirtualContext,
    card: StoryCard,
    text: Optional[str] = None,
) -> VirtualContext:
    """Register ``card`` in World Lore and append its text to the section body.

    ``text`` overrides what is written into the body (e.g. the entry with
    wikilink markup stripped); it defaults to the raw entry. No-op when the
    card has no entry or is already registered.
    """
    if not (card.entry or "").strip():
        return ctx
    if has_world_lore_card(ctx, card.id):
        return ctx

    body_text = card.entry if text is None else text
    with_card = ctx.model_copy(update={"world_lore_cards": ctx.world_lore_cards + (card,)})
    return append_to_section(with_card, SectionName.WORLD_LORE, body_text)


# ---------------------------------------------------------------------------
# Preamble / postamble
# ---------------------------------------------------------------------------

def set_preamble(ctx: VirtualContext, preamble: str) -> VirtualContext:
    return ctx.model_copy(update={"preamble": preamble})


def append_to_preamble(ctx: VirtualContext, content: str) -> VirtualContext:
    if ctx.preamble:
        return set_preamble(ctx, f"{ctx.preamble}\n\n{content}")
    return set_preamble(ctx, content)


def set_postamble(ctx: VirtualContext, postamble: str) -> VirtualContext:
    return ctx.model_copy(update={"postamble": postamble})


def append_to_postamble(ctx: VirtualContext, content: str) -> VirtualContext:
    if ctx.postamble:
        return set_postamble(ctx, f"{ctx.postamble}\n{content}")
    return set_postamble(ctx, content)


def prepend_to_postamble(ctx: VirtualContext, content: str) -> VirtualContext:
    if ctx.postamble:
        return set_postamble(ctx, f"{content}\n{ctx.postamble}")
    return set_postamble(ctx, content)
