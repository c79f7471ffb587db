"""Link Graph Builder — bounded, cycle-safe breadth-first card discovery."""

from __future__ import annotations

import dataclasses
from collections import deque
from typing import Deque, Dict, List, Sequence, Set, Tuple

from lorelink.linking.wikilinks import resolve_links
from lorelink.schemas.cards import StoryCard
from lorelink.utils.logging_config import get_logger

_logger = get_logger("lorelink.linking.graph")


@dataclasses.dataclass
class DiscoveryResult:
    """Cards reached from the triggers, plus the link graph that reached them.

    ``cards`` is in BFS order (shallow before deep). ``graph`` maps each
    expanded card id to the ids it links to.
    """
    cards: List[StoryCard] = dataclasses.field(default_factory=list)
    graph: Dict[str, Set[str]] = dataclasses.field(default_factory=dict)


def discover_linked_cards(
    trigger_cards: Sequence[StoryCard],
    all_cards: Sequence[StoryCard],
    max_depth: int = 3,
    implicit_links: bool = False,
) -> DiscoveryResult:
    """Walk links outward from ``trigger_cards`` up to ``max_depth`` hops.

    Triggers are marked visited up front, so they are never reported as
    discovered. A node at ``max_depth`` is kept but not expanded.
    """
    result = DiscoveryResult()
    visited: Set[str] = {card.id for card in trigger_cards}
    queue: Deque[Tuple[StoryCard, int]] = deque((card, 0) for card in trigger_cards)

    while queue:
        card, depth = queue.popleft()
        if depth >= max_depth:
            continue

        linked = resolve_links(card, all_cards, implicit_links=implicit_links)
        if not linked:
            continue
        result.graph[card.id] = {target.id for target in linked}

        for target in linked:
            if target.id in visited:
                continue
            visited.add(target.id)
            result.cards.append(target)
            queue.append((target, depth + 1))

    _logger.debug(
        "link discovery finished",
        extra={"metadata": {
            "triggers": [card.id for card in trigger_cards],
            "discovered": [card.id for card in result.cards],
            "max_depth": max_depth,
        }},
    )
    return result
