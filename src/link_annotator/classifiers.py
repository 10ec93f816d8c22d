"""Classifiers and the ordered classifier registry.

A classifier is anything that turns the plain text into candidate spans.
Built-in classifiers wrap one of the patterns in ``patterns.py``; custom
classifiers wrap a user function or regex.

Usage:
    registry = ClassifierRegistry()
    registry.add(regex_classifier("ticket", r"JIRA-\\d+"))
    for entry in registry.active(DetectionTypes.ALL):
        raw = entry.detect(buffer)
"""

from __future__ import annotations
import re
from dataclasses import dataclass
from typing import Any, Callable, Iterable, Union

from .patterns import BUILTIN_PATTERNS
from .text import TextBuffer
from .types import Attributes, DetectionTypes, LinkType, RawMatch, TapHandler

# A detect function yields (start, end) code point spans or re.Match objects
Span = Union[tuple[int, int], "re.Match[str]"]
DetectFn = Callable[[str], Iterable[Span]]

# Name of the optional capture group holding the semantic link text
LINK_GROUP = "link"


@dataclass(eq=False)
class ClassifierEntry:
    """A registered classifier. Compared by identity, looked up by id."""
    id: Any
    function: DetectFn | None = None
    link_type: LinkType = LinkType.CUSTOM
    attributes: Attributes | None = None
    tap_handler: TapHandler | None = None

    def detect(self, buffer: TextBuffer) -> list[RawMatch]:
        """Run the function and convert its spans to UTF-16 RawMatches.

        Empty, inverted and out-of-range spans are dropped.  Exceptions
        from the function propagate; the resolver isolates them.
        """
        if self.function is None:
            return []
        text = buffer.text
        matches: list[RawMatch] = []
        for span in self.function(text):
            if isinstance(span, re.Match):
                start, end = span.span()
                link_text = _link_text(span)
            else:
                start, end = span
                link_text = None
            rng = buffer.span_to_range(start, end)
            if rng is None:
                continue
            matches.append(RawMatch(
                classifier_id=self.id,
                link_type=self.link_type,
                range=rng,
                text=link_text if link_text is not None else text[start:end],
                attributes=self.attributes,
                tap_handler=self.tap_handler,
            ))
        return matches


def _link_text(m: re.Match) -> str | None:
    if LINK_GROUP in m.re.groupindex:
        return m.group(LINK_GROUP)
    return None


def regex_classifier(
    id: Any,
    pattern: str | re.Pattern,
    *,
    link_type: LinkType = LinkType.CUSTOM,
    attributes: Attributes | None = None,
    tap_handler: TapHandler | None = None,
    flags: int = 0,
) -> ClassifierEntry:
    """Classifier over a regex. A ``(?P<link>...)`` group sets the link text."""
    compiled = re.compile(pattern, flags) if isinstance(pattern, str) else pattern
    return ClassifierEntry(
        id=id,
        function=compiled.finditer,
        link_type=link_type,
        attributes=attributes,
        tap_handler=tap_handler,
    )


def _builtin_entries() -> list[tuple[DetectionTypes, ClassifierEntry]]:
    return [
        (flag, ClassifierEntry(id=link_type, function=pattern.finditer, link_type=link_type))
        for link_type, flag, pattern in BUILTIN_PATTERNS
    ]


class ClassifierRegistry:
    """Built-in classifiers (always present, toggled by flag) then custom ones in order."""

    __slots__ = ("_builtins", "_custom")

    def __init__(self) -> None:
        self._builtins = _builtin_entries()
        self._custom: list[ClassifierEntry] = []

    def add(self, entry: ClassifierEntry) -> None:
        """Append a custom classifier. Re-adding the same entry is a no-op."""
        if any(e is entry for e in self._custom):
            return
        self._custom.append(entry)

    def remove(self, entry: ClassifierEntry) -> bool:
        """Remove the first custom classifier with the entry's id."""
        for i, e in enumerate(self._custom):
            if e.id == entry.id:
                del self._custom[i]
                return True
        return False

    def find_first(self, id: Any) -> ClassifierEntry | None:
        for e in self._custom:
            if e.id == id:
                return e
        return None

    def active(self, detection_types: DetectionTypes) -> list[ClassifierEntry]:
        """Enabled classifiers in evaluation order: built-ins first."""
        enabled = [e for flag, e in self._builtins if detection_types & flag]
        return enabled + list(self._custom)

    @property
    def custom(self) -> tuple[ClassifierEntry, ...]:
        return tuple(self._custom)

    def __len__(self) -> int:
        return len(self._custom)
