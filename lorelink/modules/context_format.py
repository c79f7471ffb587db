"""Context — header style used when the context is written back out.

This module has no stage of its own: the pipeline reads its config to pick
the serializer options, which also drive every length measurement made
while budgeting.
"""

from __future__ import annotations

from lorelink.modules import Module
from lorelink.schemas.context import SerializeOptions
from lorelink.schemas.module_configs import ContextConfig


def serialize_options_for(config: ContextConfig | None, postamble_header: str) -> SerializeOptions:
    """Serializer options for a pass: the configured style when enabled, plain otherwise."""
    if config is None or not config.enable:
        return SerializeOptions(postamble_header=postamble_header)
    return config.to_serialize_options(postamble_header)


CONTEXT = Module(
    name="context",
    title="Context",
    config_model=ContextConfig,
    config_section="""--- Context ---
Enable: false  # Enable custom context formatting
HeaderFormat: plain  # plain or markdown
MarkdownLevel: ##  # Header level for markdown mode
AuthorsNoteFormat: bracket  # bracket or markdown""",
)
