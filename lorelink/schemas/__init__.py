# Story card and virtual context schema definitions
from .cards import StoryCard
from .context import (
    DEFAULT_HEADERS,
    PLAIN_OPTIONS,
    SECTION_ORDER,
    Section,
    SectionName,
    SerializeOptions,
    VirtualContext,
)

# Module configuration schemas
from .module_configs import (
    ContextConfig,
    ModuleConfig,
    SectionInjectionConfig,
    TreeCardsConfig,
)

__all__ = [
    "StoryCard",
    "DEFAULT_HEADERS",
    "PLAIN_OPTIONS",
    "SECTION_ORDER",
    "Section",
    "SectionName",
    "SerializeOptions",
    "VirtualContext",
    "ContextConfig",
    "ModuleConfig",
    "SectionInjectionConfig",
    "TreeCardsConfig",
]
