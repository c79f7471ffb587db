"""Context module contract and the default module table."""

from __future__ import annotations

import dataclasses
import logging
from typing import Callable, List, Optional, Sequence, Type, Union

from lorelink.schemas.cards import StoryCard
from lorelink.schemas.context import PLAIN_OPTIONS, SerializeOptions, VirtualContext
from lorelink.schemas.module_configs import ModuleConfig


@dataclasses.dataclass
class HookContext:
    """Per-pass inputs every stage may read.

    Built once per pipeline run in ``pipeline.py`` and handed to every
    module's ``on_context`` stage.
    """
    story_cards: Sequence[StoryCard]
    max_chars: Optional[int] = None
    serialize_options: SerializeOptions = PLAIN_OPTIONS
    pass_id: str = ""
    logger: Union[logging.Logger, logging.LoggerAdapter, None] = None


# Type alias for context stage signatures
ContextStage = Callable[[VirtualContext, ModuleConfig, HookContext], VirtualContext]


@dataclasses.dataclass
class Module:
    """A registered context module.

    ``title`` names the module's section in the config card
    (``--- Tree Cards ---``); ``config_section`` is its default text there.
    A stage whose config is disabled must hand back ``ctx`` unchanged.
    """
    name: str
    title: str
    config_model: Type[ModuleConfig]
    config_section: str
    on_context: Optional[ContextStage] = None


def get_default_modules() -> List[Module]:
    """Build and return the modules in registration order.

    Imports are deferred to avoid circular-import issues and to keep this
    module lightweight at import time.
    """
    from lorelink.modules.tree_cards import TREE_CARDS
    from lorelink.modules.section_injection import SECTION_INJECTION
    from lorelink.modules.context_format import CONTEXT

    return [TREE_CARDS, SECTION_INJECTION, CONTEXT]
