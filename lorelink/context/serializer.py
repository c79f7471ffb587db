"""Serializer — ``VirtualContext`` → raw context text.

Blocks (preamble, each present section in canonical order, postamble) are
joined by a blank line. All budget arithmetic measures the text this module
produces, via :func:`get_context_length`.
"""

from __future__ import annotations

from typing import Optional

from lorelink.schemas.context import (
    PLAIN_OPTIONS,
    SECTION_ORDER,
    Section,
    SectionName,
    SerializeOptions,
    VirtualContext,
)

BRACKET_NOTE_HEADER = "[Author's note:"


def _uses_bracket_note(options: SerializeOptions) -> bool:
    return options.header_format == "plain" or options.authors_note_format == "bracket"


def format_header(name: SectionName, options: SerializeOptions) -> str:
    if name is SectionName.AUTHORS_NOTE:
        if _uses_bracket_note(options):
            return BRACKET_NOTE_HEADER
        # One level below the sections, but headings stop at four #
        level = "#" * min(len(options.markdown_level) + 1, 4)
        return f"{level} Author's Note:"
    if options.header_format == "plain":
        return f"{name.value}:"
    return f"{options.markdown_level} {name.value}"


def format_section(section: Section, options: SerializeOptions) -> str:
    header = format_header(section.name, options)
    if section.name is SectionName.AUTHORS_NOTE and _uses_bracket_note(options):
        return f"{header} {section.body}]"
    if not section.body:
        return header
    return f"{header}\n{section.body}"


def serialize_context(ctx: VirtualContext, options: Optional[SerializeOptions] = None) -> str:
    options = options or PLAIN_OPTIONS
    parts = []

    if ctx.preamble:
        parts.append(ctx.preamble)

    for name in SECTION_ORDER:
        section = ctx.sections.get(name)
        if section is not None:
            parts.append(format_section(section, options))

    if ctx.postamble:
        label = options.postamble_header
        if not label:
            parts.append(ctx.postamble)
        elif options.header_format == "markdown":
            parts.append(f"{options.markdown_level} {label}\n{ctx.postamble}")
        else:
            parts.append(f"{label}\n{ctx.postamble}")

    return "\n\n".join(parts)


def get_context_length(ctx: VirtualContext, options: Optional[SerializeOptions] = None) -> int:
    """Length of the serialized context under the active options."""
    return len(serialize_context(ctx, options))
