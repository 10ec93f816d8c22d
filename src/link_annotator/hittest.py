"""Hit testing and touch tracking over resolved links.

The host layout engine supplies geometry; this module only decides which
link, if any, is under a point and how touches move between states.
"""

from __future__ import annotations
from bisect import bisect_right
from dataclasses import dataclass
from typing import Protocol, Sequence

from .types import Point, Rect, ResolvedLink, TextRange


class LayoutEngine(Protocol):
    """Geometry provider implemented by the host text system."""

    def bounding_rects(self, rng: TextRange) -> Sequence[Rect]: ...

    def character_index(self, point: Point) -> int | None: ...


class HitTestIndex:
    """Point → link lookup over one immutable snapshot of links."""

    __slots__ = ("_links", "_starts", "_layout")

    def __init__(self, links: Sequence[ResolvedLink], layout: LayoutEngine) -> None:
        self._links = tuple(links)
        self._starts = [l.range.location for l in self._links]
        self._layout = layout

    def link_for_index(self, index: int) -> ResolvedLink | None:
        """The link whose range contains a UTF-16 offset."""
        i = bisect_right(self._starts, index) - 1
        if i < 0:
            return None
        link = self._links[i]
        return link if link.range.contains(index) else None

    def link_at(self, point: Point) -> ResolvedLink | None:
        """The link under a point, or None.

        The nearest character must also be drawn under the point: a point
        below the last line or past the end of a line maps to a nearby
        index but is not a hit.
        """
        index = self._layout.character_index(point)
        if index is None:
            return None
        link = self.link_for_index(index)
        if link is None:
            return None
        rects = self._layout.bounding_rects(TextRange(index, 1))
        if not any(r.contains(point) for r in rects):
            return None
        return link

    def contains(self, link: ResolvedLink, point: Point) -> bool:
        """True if the point lies in any rectangle of the link's range."""
        return any(r.contains(point) for r in self._layout.bounding_rects(link.range))


@dataclass(frozen=True, slots=True)
class TouchResult:
    """Outcome of a touch event."""
    highlight_changed: bool = False
    tapped: ResolvedLink | None = None


class TouchTracker:
    """Idle / Tracking(link) state machine for touch interaction."""

    __slots__ = ("_tracking",)

    def __init__(self) -> None:
        self._tracking: ResolvedLink | None = None

    @property
    def tracking(self) -> ResolvedLink | None:
        return self._tracking

    def touch_down(self, index: HitTestIndex, point: Point) -> TouchResult:
        link = index.link_at(point)
        changed = link != self._tracking
        self._tracking = link
        return TouchResult(highlight_changed=changed)

    def touch_moved(self, index: HitTestIndex, point: Point) -> TouchResult:
        if self._tracking is None:
            return TouchResult()
        if index.contains(self._tracking, point):
            return TouchResult()
        self._tracking = None
        return TouchResult(highlight_changed=True)

    def touch_up(self, index: HitTestIndex, point: Point) -> TouchResult:
        link = self._tracking
        if link is None:
            return TouchResult()
        self._tracking = None
        tapped = link if index.contains(link, point) else None
        return TouchResult(highlight_changed=True, tapped=tapped)

    def reset(self) -> TouchResult:
        """Drop any in-flight touch (text or configuration changed)."""
        changed = self._tracking is not None
        self._tracking = None
        return TouchResult(highlight_changed=changed)
