"""Context build/parse and config-card REST endpoints."""

from __future__ import annotations

from fastapi import APIRouter
from pydantic import BaseModel, Field
from typing import List, Optional

from lorelink.config import get_settings
from lorelink.config_card import default_config_text
from lorelink.context.parser import parse_context
from lorelink.pipeline import build_default_pipeline
from lorelink.schemas.cards import StoryCard
from lorelink.schemas.context import SECTION_ORDER

router = APIRouter()


class BuildContextRequest(BaseModel):
    text: str = Field(default="", max_length=1_000_000)
    story_cards: List[StoryCard] = Field(default_factory=list)
    max_chars: Optional[int] = Field(default=None, gt=0)
    config_text: Optional[str] = Field(default=None, max_length=100_000)


class BuildContextResponse(BaseModel):
    text: str
    length: int
    world_lore_card_ids: List[str]


class ParseContextRequest(BaseModel):
    text: str = Field(default="", max_length=1_000_000)
    story_cards: List[StoryCard] = Field(default_factory=list)
    max_chars: Optional[int] = Field(default=None, gt=0)


class SectionResponse(BaseModel):
    name: str
    header: str
    body: str


class ParseContextResponse(BaseModel):
    preamble: str
    sections: List[SectionResponse]
    postamble: str
    world_lore_card_ids: List[str]


class ConfigTextResponse(BaseModel):
    config_text: str


@router.post("/context/build", response_model=BuildContextResponse)
def build_context(request: BuildContextRequest):
    settings = get_settings()
    max_chars = request.max_chars or settings.default_max_chars
    pipeline = build_default_pipeline()
    result = pipeline.run(
        request.text,
        request.story_cards,
        max_chars=max_chars,
        config_text=request.config_text,
    )
    card_ids = [card.id for card in result.context.world_lore_cards] if result.context else []
    return {
        "text": result.text,
        "length": len(result.text),
        "world_lore_card_ids": card_ids,
    }


@router.post("/context/parse", response_model=ParseContextResponse)
def parse_context_endpoint(request: ParseContextRequest):
    settings = get_settings()
    ctx = parse_context(
        request.text,
        request.story_cards,
        request.max_chars,
        postamble_header=settings.postamble_header,
    )
    return {
        "preamble": ctx.preamble,
        "sections": [
            {"name": name.value, "header": ctx.sections[name].header, "body": ctx.sections[name].body}
            for name in SECTION_ORDER
            if name in ctx.sections
        ],
        "postamble": ctx.postamble,
        "world_lore_card_ids": [card.id for card in ctx.world_lore_cards],
    }


@router.get("/config/default", response_model=ConfigTextResponse)
def get_default_config():
    pipeline = build_default_pipeline()
    return {"config_text": default_config_text(pipeline.modules)}
