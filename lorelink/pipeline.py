"""Context pipeline — parse, run registered modules in order, serialize.

Contains:
- ``ContextPipeline`` — module registry and per-pass runner
- ``PipelineResult`` — the rewritten text plus the final virtual context
- ``build_default_pipeline`` — a pipeline with the default module table
"""

from __future__ import annotations

import dataclasses
import time
import uuid
from typing import Dict, List, Optional, Sequence

from lorelink.config import get_settings
from lorelink.config_card import default_config_text, parse_config_text
from lorelink.context.parser import parse_context
from lorelink.context.serializer import serialize_context
from lorelink.modules import HookContext, Module, get_default_modules
from lorelink.modules.context_format import serialize_options_for
from lorelink.schemas.cards import StoryCard
from lorelink.schemas.context import VirtualContext
from lorelink.schemas.module_configs import ContextConfig, ModuleConfig
from lorelink.utils.logging_config import PassAdapter, get_logger

_logger = get_logger("lorelink.pipeline")


@dataclasses.dataclass
class PipelineResult:
    text: str
    context: Optional[VirtualContext] = None
    pass_id: str = ""


class ContextPipeline:
    """Runs context modules over the host's context text, in registration order."""

    def __init__(self, modules: Optional[Sequence[Module]] = None, postamble_header: Optional[str] = None):
        self.modules: List[Module] = []
        self.postamble_header = postamble_header or get_settings().postamble_header
        for module in modules or ():
            self.register_module(module)

    def register_module(self, module: Module) -> None:
        if any(m.name == module.name for m in self.modules):
            raise ValueError(f"Module {module.name!r} is already registered")
        self.modules.append(module)

    def load_config(self, config_text: Optional[str] = None) -> Dict[str, ModuleConfig]:
        """Validated config per module; defaults (all disabled) when no card text is given."""
        if config_text is None:
            config_text = default_config_text(self.modules)
        return parse_config_text(config_text, self.modules)

    def run(
        self,
        text: str,
        story_cards: Sequence[StoryCard] = (),
        max_chars: Optional[int] = None,
        config_text: Optional[str] = None,
        configs: Optional[Dict[str, ModuleConfig]] = None,
    ) -> PipelineResult:
        """Rewrite one context pass.

        ``configs`` takes precedence over ``config_text`` when both are
        given. Empty text is returned untouched.
        """
        pass_id = uuid.uuid4().hex
        if not text:
            return PipelineResult(text=text, pass_id=pass_id)

        log = PassAdapter(_logger, pass_id=pass_id)
        configs = configs if configs is not None else self.load_config(config_text)

        context_config = configs.get("context")
        options = serialize_options_for(
            context_config if isinstance(context_config, ContextConfig) else None,
            self.postamble_header,
        )

        started = time.perf_counter()
        ctx = parse_context(text, story_cards, max_chars, postamble_header=self.postamble_header)
        hook = HookContext(
            story_cards=story_cards,
            max_chars=max_chars,
            serialize_options=options,
            pass_id=pass_id,
            logger=log,
        )

        for module in self.modules:
            if module.on_context is None:
                continue
            config = configs.get(module.name)
            if config is None:
                continue
            stage_started = time.perf_counter()
            ctx = module.on_context(ctx, config, hook)
            log.debug(
                "stage finished",
                extra={
                    "stage": module.name,
                    "duration_ms": round((time.perf_counter() - stage_started) * 1000, 3),
                },
            )

        output = serialize_context(ctx, options)
        log.info(
            "context pass complete",
            extra={
                "duration_ms": round((time.perf_counter() - started) * 1000, 3),
                "metadata": {
                    "input_chars": len(text),
                    "output_chars": len(output),
                    "max_chars": max_chars,
                    "world_lore_cards": [card.id for card in ctx.world_lore_cards],
                },
            },
        )
        return PipelineResult(text=output, context=ctx, pass_id=pass_id)


def build_default_pipeline(postamble_header: Optional[str] = None) -> ContextPipeline:
    return ContextPipeline(get_default_modules(), postamble_header=postamble_header)
