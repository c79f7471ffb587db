"""Topological Orderer — dependencies before dependents.

Kahn's algorithm over out-degree: a card is ready once every discovered
card it links to has been emitted. Cards stuck in a cycle are appended in
discovery order instead of raising.
"""

from __future__ import annotations

from collections import deque
from typing import Dict, List, Mapping, Sequence, Set

from lorelink.schemas.cards import StoryCard


def order_by_dependencies(
    cards: Sequence[StoryCard],
    graph: Mapping[str, Set[str]],
) -> List[StoryCard]:
    ids = {card.id for card in cards}
    by_id = {card.id: card for card in cards}

    # Only links that stay inside the discovered set count
    links: Dict[str, Set[str]] = {
        card.id: {t for t in graph.get(card.id, ()) if t in ids and t != card.id}
        for card in cards
    }
    out_degree = {card_id: len(targets) for card_id, targets in links.items()}

    queue = deque(card.id for card in cards if out_degree[card.id] == 0)
    emitted: Set[str] = set()
    ordered: List[StoryCard] = []

    while queue:
        card_id = queue.popleft()
        if card_id in emitted:
            continue
        emitted.add(card_id)
        ordered.append(by_id[card_id])

        for other in cards:
            if other.id in emitted or card_id not in links[other.id]:
                continue
            out_degree[other.id] -= 1
            if out_degree[other.id] == 0:
                queue.append(other.id)

    # Cycle members never reach zero
    ordered.extend(card for card in cards if card.id not in emitted)
    return ordered
