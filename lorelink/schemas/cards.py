"""
Story card schema.

Cards are supplied by the host on every pass. The engine reads them and
decides which to surface; it never creates or destroys one.

Usage:
    from lorelink.schemas import StoryCard

    card = StoryCard(id="2", title="Foxes", keys="fox, foxkin", entry="...")
    card.keys  # ["fox", "foxkin"]
"""
from __future__ import annotations

from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


class StoryCard(BaseModel):
    """A knowledge snippet the host renders into World Lore when triggered.

    ``id`` is the identity. ``entry`` is the literal text the card
    contributes to World Lore. ``keys`` are alternate reference names.
    """
    model_config = ConfigDict(extra="ignore")

    id: str = Field(..., description="Stable, unique card id")
    title: Optional[str] = Field(default=None, description="Display title")
    keys: Optional[List[str]] = Field(
        default=None,
        description="Trigger/reference names; a comma-separated string is accepted",
    )
    entry: Optional[str] = Field(default=None, description="Text contributed to World Lore")
    type: Optional[str] = None
    description: Optional[str] = None

    @field_validator("id", mode="before")
    @classmethod
    def coerce_id(cls, v):
        # Hosts hand out numeric ids as often as string ones
        if isinstance(v, int):
            return str(v)
        return v

    @field_validator("keys", mode="before")
    @classmethod
    def split_keys(cls, v):
        if isinstance(v, str):
            return [k.strip() for k in v.split(",") if k.strip()]
        return v
