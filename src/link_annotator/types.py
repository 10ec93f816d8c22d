"""Core types."""

from __future__ import annotations
from dataclasses import dataclass, field
from enum import Enum, IntFlag
from types import MappingProxyType
from typing import Any, Callable, Mapping, NamedTuple


class LinkType(Enum):
    """Kind of link a classifier produces."""
    USER_HANDLE = "user_handle"
    HASHTAG = "hashtag"
    URL = "url"
    CUSTOM = "custom"      # identified by the producing classifier id


class DetectionTypes(IntFlag):
    """Bitmask of built-in link types to detect."""
    NONE = 0
    USER_HANDLE = 1 << 0
    HASHTAG = 1 << 1
    URL = 1 << 2
    ALL = USER_HANDLE | HASHTAG | URL


class TextRange(NamedTuple):
    """Half-open range of UTF-16 code units: [location, location + length)."""
    location: int
    length: int

    @property
    def end(self) -> int:
        return self.location + self.length

    def contains(self, index: int) -> bool:
        return self.location <= index < self.end


class Point(NamedTuple):
    x: float
    y: float


class Rect(NamedTuple):
    x: float
    y: float
    width: float
    height: float

    def contains(self, point: Point) -> bool:
        return (self.x <= point.x < self.x + self.width
                and self.y <= point.y < self.y + self.height)


TapHandler = Callable[[LinkType, str, TextRange], None]
Attributes = dict[str, Any]


@dataclass(frozen=True, slots=True)
class RawMatch:
    """An unresolved candidate produced by one classifier."""
    classifier_id: Any
    link_type: LinkType
    range: TextRange
    text: str
    attributes: Attributes | None = None
    tap_handler: TapHandler | None = None


@dataclass(frozen=True, slots=True)
class ResolvedLink:
    """A final, non-overlapping link with its effective styling and handler."""
    link_type: LinkType
    range: TextRange
    text: str
    # Read-only view, not part of the hash
    attributes: Mapping[str, Any] = field(default_factory=lambda: MappingProxyType({}), hash=False)
    tap_handler: TapHandler | None = None
    classifier_id: Any = None

    def as_dict(self) -> dict[str, Any]:
        """Query-surface view: {type, range, text}."""
        return {
            "type": self.link_type.value,
            "range": [self.range.location, self.range.length],
            "text": self.text,
        }
