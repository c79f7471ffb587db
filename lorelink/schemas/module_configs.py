"""
Per-module configuration schemas.

Raw values come from the config card as lower-cased keys with string
values (``{"enable": "true", "linkpercentage": "20"}``); each model accepts
both that form and the snake_case field names.
"""
from __future__ import annotations

from typing import Literal

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator

from lorelink.schemas.context import SerializeOptions


class ModuleConfig(BaseModel):
    """Base for module configs: unknown keys ignored, field names or card keys accepted."""
    model_config = ConfigDict(extra="ignore", populate_by_name=True, frozen=True)

    enable: bool = False


class TreeCardsConfig(ModuleConfig):
    link_percentage: int = Field(
        default=20,
        ge=0,
        le=100,
        validation_alias=AliasChoices("link_percentage", "linkpercentage"),
        description="Max % of context for linked cards",
    )
    implicit_links: bool = Field(
        default=False,
        validation_alias=AliasChoices("implicit_links", "implicitlinks"),
        description="Also match card keys as substrings",
    )
    max_depth: int = Field(
        default=3,
        ge=1,
        le=10,
        validation_alias=AliasChoices("max_depth", "maxdepth"),
        description="Maximum link depth to traverse",
    )
    min_sentences: int = Field(
        default=10,
        ge=1,
        validation_alias=AliasChoices("min_sentences", "minsentences"),
        description="Minimum sentences to preserve in Recent Story",
    )


class SectionInjectionConfig(ModuleConfig):
    enable: bool = True


class ContextConfig(ModuleConfig):
    header_format: Literal["plain", "markdown"] = Field(
        default="plain",
        validation_alias=AliasChoices("header_format", "headerformat"),
    )
    markdown_level: str = Field(
        default="##",
        validation_alias=AliasChoices("markdown_level", "markdownlevel"),
    )
    authors_note_format: Literal["bracket", "markdown"] = Field(
        default="bracket",
        validation_alias=AliasChoices("authors_note_format", "authorsnoteformat"),
    )

    @field_validator("header_format", mode="before")
    @classmethod
    def normalize_header_format(cls, v):
        return "markdown" if str(v).strip().lower() == "markdown" else "plain"

    @field_validator("authors_note_format", mode="before")
    @classmethod
    def normalize_authors_note_format(cls, v):
        return "markdown" if str(v).strip().lower() == "markdown" else "bracket"

    @field_validator("markdown_level", mode="before")
    @classmethod
    def normalize_markdown_level(cls, v):
        level = str(v).strip()
        if not level or set(level) != {"#"} or len(level) > 4:
            return "##"
        return level

    def to_serialize_options(self, postamble_header: str = "Continue From:") -> SerializeOptions:
        return SerializeOptions(
            header_format=self.header_format,
            markdown_level=self.markdown_level,
            authors_note_format=self.authors_note_format,
            postamble_header=postamble_header,
        )
