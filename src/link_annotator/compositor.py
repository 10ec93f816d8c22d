"""Attribute compositor — layers link styling over the base text attributes.

Layers, later ones overriding matching keys:
    base text attributes
    link type defaults
    classifier overrides
    selection highlight (only the link under an active touch)

Type defaults and classifier overrides are merged into
``ResolvedLink.attributes`` by the resolver; the base layer belongs to the
label.
"""

from __future__ import annotations
from dataclasses import dataclass
from typing import Any, Iterable, Mapping

from .text import TextBuffer
from .types import Attributes, LinkType, ResolvedLink, TextRange

# Attribute keys understood by hosts; the compositor never interprets values
FOREGROUND_COLOR = "foreground_color"
BACKGROUND_COLOR = "background_color"
UNDERLINE_STYLE = "underline_style"
FONT = "font"

UNDERLINE_NONE = 0
UNDERLINE_SINGLE = 1

DEFAULT_TINT_COLOR = "#007AFF"
DEFAULT_LINK_COLOR = "#0000EE"
DEFAULT_SELECTED_BACKGROUND = "#C7C7CC"


@dataclass(frozen=True, slots=True)
class AttributeRun:
    range: TextRange
    attributes: Attributes


@dataclass(frozen=True, slots=True)
class AttributedText:
    """Full text plus contiguous attribute runs covering every code unit."""
    text: str
    runs: tuple[AttributeRun, ...]

    def attributes_at(self, offset: int) -> Attributes:
        for run in self.runs:
            if run.range.contains(offset):
                return run.attributes
        raise IndexError(f"offset {offset} outside text")

    def to_list(self) -> list[dict[str, Any]]:
        return [
            {"range": [r.range.location, r.range.length], "attributes": r.attributes}
            for r in self.runs
        ]


def default_type_attributes(
    tint_color: Any = DEFAULT_TINT_COLOR,
    *,
    system_url_style: bool = False,
    link_color: Any = DEFAULT_LINK_COLOR,
) -> dict[LinkType, Attributes]:
    """Tinted, non-underlined text for every type, unless URLs use system style."""
    plain = {FOREGROUND_COLOR: tint_color, UNDERLINE_STYLE: UNDERLINE_NONE}
    defaults = {t: dict(plain) for t in LinkType}
    if system_url_style:
        defaults[LinkType.URL] = {
            FOREGROUND_COLOR: link_color,
            UNDERLINE_STYLE: UNDERLINE_SINGLE,
        }
    return defaults


def merge_type_attributes(
    defaults: Mapping[LinkType, Attributes],
    overrides: Mapping[LinkType, Attributes],
) -> dict[LinkType, Attributes]:
    merged = {t: dict(a) for t, a in defaults.items()}
    for t, attrs in overrides.items():
        merged.setdefault(t, {}).update(attrs)
    return merged


def compose(
    buffer: TextBuffer,
    links: Iterable[ResolvedLink],
    *,
    base_attributes: Mapping[str, Any] | None = None,
    selected: ResolvedLink | None = None,
    selected_attributes: Mapping[str, Any] | None = None,
) -> AttributedText:
    """Build the attributed representation of the whole buffer.

    ``links`` must be sorted and non-overlapping, as the resolver returns them.
    """
    base = dict(base_attributes or {})
    runs: list[AttributeRun] = []
    cursor = 0
    for link in links:
        if link.range.location > cursor:
            runs.append(AttributeRun(TextRange(cursor, link.range.location - cursor), dict(base)))
        attrs = {**base, **link.attributes}
        if selected is not None and link.range == selected.range and selected_attributes:
            attrs.update(selected_attributes)
        runs.append(AttributeRun(link.range, attrs))
        cursor = link.range.end
    if cursor < len(buffer):
        runs.append(AttributeRun(TextRange(cursor, len(buffer) - cursor), dict(base)))
    return AttributedText(text=buffer.text, runs=tuple(runs))
