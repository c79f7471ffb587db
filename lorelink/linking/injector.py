"""Budget Injector — fit ordered linked cards into World Lore.

Two limits apply. The link budget (``link_percentage`` of ``max_chars``)
caps the space linked cards may take; the first card that does not fit it
stops injection, so a later card is never pulled in ahead of an earlier
dependency. The hard ceiling ``max_chars`` caps the whole serialized
document; when a card would breach it, the oldest sentences of Recent
Story are dropped to make room, down to ``min_sentences``.
"""

from __future__ import annotations

import logging
from typing import Optional, Sequence, Union

from lorelink.context.model import (
    add_world_lore_card,
    get_section,
    has_world_lore_card,
    set_section,
)
from lorelink.context.serializer import get_context_length
from lorelink.context.truncation import truncate_text_from_start
from lorelink.linking.wikilinks import strip_wikilinks
from lorelink.schemas.cards import StoryCard
from lorelink.schemas.context import SectionName, SerializeOptions, VirtualContext
from lorelink.utils.logging_config import get_logger

_logger = get_logger("lorelink.linking.injector")


def rendered_entry(card: StoryCard) -> str:
    """Card text as it is written into World Lore: markup stripped, trimmed."""
    return strip_wikilinks(card.entry or "").strip()


def inject_linked_cards(
    ctx: VirtualContext,
    ordered_cards: Sequence[StoryCard],
    link_percentage: int,
    min_sentences: int,
    options: Optional[SerializeOptions] = None,
    logger: Union[logging.Logger, logging.LoggerAdapter, None] = None,
) -> VirtualContext:
    """Append as many of ``ordered_cards`` to World Lore as the budgets allow.

    Returns ``ctx`` unchanged when it has no ``max_chars`` or no World Lore
    section.
    """
    log = logger or _logger
    max_chars = ctx.max_chars
    if not max_chars or get_section(ctx, SectionName.WORLD_LORE) is None:
        return ctx

    link_budget = (max_chars * link_percentage) // 100
    current = ctx
    injected = 0

    for card in ordered_cards:
        if has_world_lore_card(current, card.id):
            continue
        text = rendered_entry(card)
        if not text:
            continue

        cost = len(text) + 2
        if cost > link_budget:
            log.debug(
                "link budget exhausted",
                extra={"card_id": card.id, "metadata": {"cost": cost, "remaining": link_budget}},
            )
            break

        candidate = current
        overflow = get_context_length(current, options) + cost - max_chars
        if overflow > 0:
            recent = get_section(current, SectionName.RECENT_STORY)
            new_body = (
                truncate_text_from_start(recent.body, overflow, min_sentences)
                if recent is not None
                else None
            )
            if new_body is None:
                log.debug(
                    "no room left in Recent Story",
                    extra={"card_id": card.id, "metadata": {"overflow": overflow}},
                )
                break
            candidate = set_section(current, SectionName.RECENT_STORY, new_body)

        candidate = add_world_lore_card(candidate, card, text=text)
        if get_context_length(candidate, options) > max_chars:
            log.debug("card does not fit under max_chars", extra={"card_id": card.id})
            break

        current = candidate
        link_budget -= cost
        injected += 1
        log.debug("linked card injected", extra={"card_id": card.id, "metadata": {"cost": cost}})

    if injected:
        log.info(
            "linked cards injected",
            extra={"metadata": {"count": injected, "remaining_budget": link_budget}},
        )
    return current
