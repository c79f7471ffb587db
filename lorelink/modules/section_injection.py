"""Section Injection — move marked World Lore cards to another part of the context.

A card entry containing ``<inject section="Memories" />`` is taken out of
World Lore and written to the named target instead: ``preamble``
(appended), ``postamble`` (prepended) or a section (appended).
"""

from __future__ import annotations

import dataclasses
import re
from typing import Dict, Optional, Union

from lorelink.context.model import (
    append_to_preamble,
    append_to_section,
    get_section,
    prepend_to_postamble,
    set_section,
)
from lorelink.linking.wikilinks import strip_wikilinks
from lorelink.modules import HookContext, Module
from lorelink.schemas.cards import StoryCard
from lorelink.schemas.context import SECTION_ORDER, SectionName, VirtualContext
from lorelink.schemas.module_configs import SectionInjectionConfig
from lorelink.utils.logging_config import get_logger

_logger = get_logger("lorelink.modules.section_injection")

INJECT_PATTERN = re.compile(r'<inject\s+section="([^"]+)"\s*/?>', re.IGNORECASE)

InjectionTarget = Union[SectionName, str]

_TARGETS: Dict[str, InjectionTarget] = {name.value.lower(): name for name in SECTION_ORDER}
_TARGETS["preamble"] = "preamble"
_TARGETS["postamble"] = "postamble"


@dataclasses.dataclass
class InjectionInfo:
    target: InjectionTarget
    cleaned_entry: str


def parse_injection_marker(entry: str) -> Optional[InjectionInfo]:
    """Find the injection marker in ``entry``; None if absent or its target is unknown."""
    m = INJECT_PATTERN.search(entry or "")
    if not m:
        return None
    target = _TARGETS.get(m.group(1).strip().lower())
    if target is None:
        return None
    cleaned = INJECT_PATTERN.sub("", entry, count=1).strip()
    return InjectionInfo(target=target, cleaned_entry=cleaned)


def _remove_card_text(body: str, card: StoryCard) -> str:
    entry = card.entry or ""
    stripped = strip_wikilinks(entry)
    # Tree Cards may already have rendered the entry without its markup
    for candidate in (entry, stripped, stripped.strip()):
        if candidate and candidate in body:
            body = body.replace(candidate, "", 1).strip()
            return re.sub(r"\n{3,}", "\n\n", body)
    return body


def _inject_to_target(ctx: VirtualContext, target: InjectionTarget, content: str) -> VirtualContext:
    if target == "preamble":
        return append_to_preamble(ctx, content)
    if target == "postamble":
        return prepend_to_postamble(ctx, content)
    return append_to_section(ctx, target, content)


def on_context(
    ctx: VirtualContext,
    config: SectionInjectionConfig,
    hook: HookContext,
) -> VirtualContext:
    if not config.enable:
        return ctx
    world_lore = get_section(ctx, SectionName.WORLD_LORE)
    if world_lore is None:
        return ctx

    log = hook.logger or _logger
    current = ctx
    body = world_lore.body

    for card in ctx.world_lore_cards:
        info = parse_injection_marker(card.entry or "")
        if info is None or info.target is SectionName.WORLD_LORE:
            continue
        content = strip_wikilinks(info.cleaned_entry).strip()
        if not content:
            continue

        body = _remove_card_text(body, card)
        current = set_section(current, SectionName.WORLD_LORE, body)
        current = _inject_to_target(current, info.target, content)
        current = current.model_copy(update={
            "world_lore_cards": tuple(c for c in current.world_lore_cards if c.id != card.id),
        })
        body = get_section(current, SectionName.WORLD_LORE).body

        target_name = info.target.value if isinstance(info.target, SectionName) else info.target
        log.debug(
            "card moved out of World Lore",
            extra={"stage": "sectionInjection", "card_id": card.id, "metadata": {"target": target_name}},
        )

    return current


SECTION_INJECTION = Module(
    name="sectionInjection",
    title="Section Injection",
    config_model=SectionInjectionConfig,
    config_section="""--- Section Injection ---
Enable: true  # Process injection markers in World Lore cards""",
    on_context=on_context,
)
