"""
Virtual context schemas.

The virtual context is the structured, round-trippable form of the context
document handed to the story model: a preamble, up to six canonical
sections, and a postamble. Values are frozen; every operation in
``lorelink.context.model`` returns a new instance.
"""
from __future__ import annotations

from enum import Enum
from typing import Dict, Literal, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field

from lorelink.schemas.cards import StoryCard


class SectionName(str, Enum):
    WORLD_LORE = "World Lore"
    STORY_SUMMARY = "Story Summary"
    MEMORIES = "Memories"
    NARRATIVE_CHECKLIST = "Narrative Checklist"
    RECENT_STORY = "Recent Story"
    AUTHORS_NOTE = "Author's Note"


# Canonical serialization order
SECTION_ORDER: Tuple[SectionName, ...] = (
    SectionName.WORLD_LORE,
    SectionName.STORY_SUMMARY,
    SectionName.MEMORIES,
    SectionName.NARRATIVE_CHECKLIST,
    SectionName.RECENT_STORY,
    SectionName.AUTHORS_NOTE,
)

DEFAULT_HEADERS: Dict[SectionName, str] = {
    SectionName.WORLD_LORE: "World Lore:",
    SectionName.STORY_SUMMARY: "Story Summary:",
    SectionName.MEMORIES: "Memories:",
    SectionName.NARRATIVE_CHECKLIST: "Narrative Checklist:",
    SectionName.RECENT_STORY: "Recent Story:",
    SectionName.AUTHORS_NOTE: "[Author's note:",
}


class Section(BaseModel):
    """One named region of the context document.

    ``header`` is the display string seen when the section was last parsed
    (or the default header when created); ``body`` never includes it.
    """
    model_config = ConfigDict(frozen=True)

    name: SectionName
    header: str
    body: str = ""


class VirtualContext(BaseModel):
    """Parsed context document.

    ``world_lore_cards`` is derived: the cards whose entry is rendered in
    the World Lore body. It is a back-reference list, not ownership.
    """
    model_config = ConfigDict(frozen=True)

    preamble: str = ""
    sections: Dict[SectionName, Section] = Field(default_factory=dict)
    postamble: str = ""
    world_lore_cards: Tuple[StoryCard, ...] = ()
    raw: str = ""
    max_chars: Optional[int] = None


class SerializeOptions(BaseModel):
    """Header style used when turning a virtual context back into text."""
    model_config = ConfigDict(frozen=True)

    header_format: Literal["plain", "markdown"] = "plain"
    markdown_level: str = "##"
    authors_note_format: Literal["bracket", "markdown"] = "bracket"
    postamble_header: str = "Continue From:"


PLAIN_OPTIONS = SerializeOptions()
