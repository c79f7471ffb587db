"""Config card text — per-module settings the player edits in-game.

The card is plain text made of module sections::

    --- Tree Cards ---
    Enable: true  # Enable hierarchical story card linking
    MaxDepth: 2

Contains:
- ``parse_config_line`` / ``rebuild_config_line`` — one ``Key: value  # comment`` line
- ``parse_config_text`` — card text → validated config per module
- ``default_config_text`` — the text of a fresh card, every module disabled
- ``repair_config_text`` — append sections missing from an existing card
- ``update_config_value`` — rewrite one key in one section
"""

from __future__ import annotations

import dataclasses
import re
from typing import Any, Dict, List, Optional, Sequence

from pydantic import ValidationError

from lorelink.modules import Module
from lorelink.schemas.module_configs import ModuleConfig
from lorelink.utils.logging_config import get_logger

_logger = get_logger("lorelink.config_card")

_COMMENT_RE = re.compile(r"(?:^|\s)#(?=\s|$)")
_SECTION_RE = re.compile(r"^\s*---\s*(.+?)\s*---\s*$")
_ENABLE_RE = re.compile(r"^(\s*Enable:\s*)\S+(.*)$", re.IGNORECASE | re.MULTILINE)


@dataclasses.dataclass
class ParsedConfigLine:
    key: str = ""
    value: str = ""
    comment: str = ""
    is_valid: bool = False

    @property
    def has_comment(self) -> bool:
        return bool(self.comment)


def _normalize(title: str) -> str:
    return re.sub(r"\s+", "", title).lower()


def parse_config_line(line: str) -> ParsedConfigLine:
    m = _COMMENT_RE.search(line)
    if m:
        comment = line[m.start():].strip()
        effective = line[:m.start()]
    else:
        comment = ""
        effective = line
    effective = effective.strip()

    if ":" not in effective:
        return ParsedConfigLine(comment=comment)
    key, _, value = effective.partition(":")
    return ParsedConfigLine(key=key.strip(), value=value.strip(), comment=comment, is_valid=True)


def rebuild_config_line(key: str, value: str, comment: str = "") -> str:
    base = f"{key}: {value}"
    if comment:
        return f"{base}  {comment}"
    return base


def section_title(line: str) -> Optional[str]:
    m = _SECTION_RE.match(line)
    return m.group(1) if m else None


def _find_module(title: str, modules: Sequence[Module]) -> Optional[Module]:
    wanted = _normalize(title)
    for module in modules:
        if _normalize(module.title) == wanted or module.name.lower() == wanted:
            return module
    return None


def parse_config_text(text: str, modules: Sequence[Module]) -> Dict[str, ModuleConfig]:
    """Validate every module's section of the card.

    Modules without a section, or whose section fails validation, get their
    defaults.
    """
    raw: Dict[str, Dict[str, Any]] = {module.name: {} for module in modules}
    current: Optional[Module] = None

    for line in (text or "").splitlines():
        title = section_title(line)
        if title is not None:
            current = _find_module(title, modules)
            continue
        if current is None:
            continue
        parsed = parse_config_line(line)
        if parsed.is_valid and parsed.key:
            raw[current.name][parsed.key.lower().replace(" ", "")] = parsed.value

    configs: Dict[str, ModuleConfig] = {}
    for module in modules:
        try:
            configs[module.name] = module.config_model.model_validate(raw[module.name])
        except ValidationError as exc:
            _logger.warning(
                f"Invalid config for module {module.name}, using defaults",
                extra={"stage": module.name, "metadata": {"errors": exc.errors(include_url=False)}},
            )
            configs[module.name] = module.config_model()
    return configs


def disable_config_section(section: str) -> str:
    return _ENABLE_RE.sub(r"\g<1>false\g<2>", section, count=1)


def default_config_text(modules: Sequence[Module]) -> str:
    return "\n\n".join(disable_config_section(module.config_section) for module in modules)


def repair_config_text(text: str, modules: Sequence[Module]) -> str:
    """Append a disabled default section for every module the card lacks."""
    present = {
        _normalize(title)
        for title in (section_title(line) for line in (text or "").splitlines())
        if title is not None
    }
    missing: List[Module] = [
        module for module in modules
        if _normalize(module.title) not in present and module.name.lower() not in present
    ]
    if not missing:
        return text

    repaired = (text or "").strip()
    for module in missing:
        _logger.info("adding missing config section", extra={"stage": module.name})
        if repaired:
            repaired += "\n\n"
        repaired += disable_config_section(module.config_section)
    return repaired


def update_config_value(text: str, title: str, key: str, value: Any) -> str:
    """Rewrite ``key`` inside section ``title``; the trailing comment is kept.

    Returns ``text`` unchanged when the section or key is missing.
    """
    lines = (text or "").split("\n")
    wanted_section = _normalize(title)
    wanted_key = key.lower()
    in_section = False

    for i, line in enumerate(lines):
        found_title = section_title(line)
        if found_title is not None:
            in_section = _normalize(found_title) == wanted_section
            continue
        if not in_section:
            continue
        parsed = parse_config_line(line)
        if parsed.is_valid and parsed.key.lower() == wanted_key:
            if isinstance(value, bool):
                value = str(value).lower()
            lines[i] = rebuild_config_line(parsed.key, str(value), parsed.comment)
            return "\n".join(lines)

    _logger.warning(
        f'Key "{key}" not found in section "{title}"',
        extra={"metadata": {"section": title, "key": key}},
    )
    return text
