"""Tree Cards — surface cards linked from the cards already in World Lore.

Discovery walks ``[[wikilinks]]`` (and, optionally, key mentions) out from
the trigger cards, orders what it finds so dependencies come first, and
injects as much as the link budget and ``max_chars`` allow. Wikilink markup
is then stripped from the World Lore body.
"""

from __future__ import annotations

from lorelink.context.model import get_section, set_section
from lorelink.linking.graph import discover_linked_cards
from lorelink.linking.injector import inject_linked_cards
from lorelink.linking.ordering import order_by_dependencies
from lorelink.linking.wikilinks import strip_wikilinks
from lorelink.modules import HookContext, Module
from lorelink.schemas.context import SectionName, VirtualContext
from lorelink.schemas.module_configs import TreeCardsConfig
from lorelink.utils.logging_config import get_logger

_logger = get_logger("lorelink.modules.tree_cards")


def on_context(ctx: VirtualContext, config: TreeCardsConfig, hook: HookContext) -> VirtualContext:
    if not config.enable:
        return ctx
    if not ctx.max_chars:
        return ctx
    if get_section(ctx, SectionName.WORLD_LORE) is None:
        return ctx
    if not ctx.world_lore_cards:
        return ctx

    log = hook.logger or _logger

    discovery = discover_linked_cards(
        ctx.world_lore_cards,
        hook.story_cards,
        max_depth=config.max_depth,
        implicit_links=config.implicit_links,
    )
    ordered = order_by_dependencies(discovery.cards, discovery.graph)
    log.debug(
        "linked cards ordered",
        extra={"stage": "treeCards", "metadata": {"order": [card.id for card in ordered]}},
    )

    result = inject_linked_cards(
        ctx,
        ordered,
        link_percentage=config.link_percentage,
        min_sentences=config.min_sentences,
        options=hook.serialize_options,
        logger=log,
    )

    world_lore = get_section(result, SectionName.WORLD_LORE)
    stripped = strip_wikilinks(world_lore.body)
    if stripped != world_lore.body:
        result = set_section(result, SectionName.WORLD_LORE, stripped)
    return result


TREE_CARDS = Module(
    name="treeCards",
    title="Tree Cards",
    config_model=TreeCardsConfig,
    config_section="""--- Tree Cards ---
Enable: false  # Enable hierarchical story card linking
LinkPercentage: 20  # Max % of context for linked cards
ImplicitLinks: false  # Also match card keys as substrings
MaxDepth: 3  # Maximum link depth to traverse
MinSentences: 10  # Minimum sentences to preserve in Recent Story""",
    on_context=on_context,
)
