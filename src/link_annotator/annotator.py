"""LinkAnnotator — the main API.

Usage:
    from link_annotator import LinkAnnotator, AnnotatorConfig, MonospaceLayout

    annotator = LinkAnnotator(AnnotatorConfig(ignored_keywords={"news"}))
    annotator.text = "Hi @alice, check #news at http://example.com"
    [l.text for l in annotator.links]   # ["@alice", "http://example.com"]

    annotator.layout = MonospaceLayout(annotator.buffer)
    annotator.link_at(Point(45, 5))     # {"type": "user_handle", ...}

Every mutation recomputes synchronously and swaps in a fresh snapshot;
nothing is patched incrementally.
"""

from __future__ import annotations
import logging
from dataclasses import dataclass, field
from typing import Any, Callable, Iterable

from .classifiers import ClassifierEntry, ClassifierRegistry
from .compositor import (
    BACKGROUND_COLOR,
    DEFAULT_LINK_COLOR,
    DEFAULT_SELECTED_BACKGROUND,
    DEFAULT_TINT_COLOR,
    AttributedText,
    compose,
    default_type_attributes,
    merge_type_attributes,
)
from .hittest import HitTestIndex, LayoutEngine, TouchResult, TouchTracker
from .resolver import ErrorCallback, normalize_ignored, resolve_links
from .text import TextBuffer
from .types import Attributes, DetectionTypes, LinkType, Point, ResolvedLink, TapHandler

logger = logging.getLogger(__name__)


@dataclass
class AnnotatorConfig:
    """Configuration for the LinkAnnotator."""
    automatic_detection: bool = True      # off = no links at all
    detection_types: DetectionTypes = DetectionTypes.ALL
    ignored_keywords: set[str] = field(default_factory=set)
    system_url_style: bool = False        # underline + link_color for URLs
    tint_color: Any = DEFAULT_TINT_COLOR
    link_color: Any = DEFAULT_LINK_COLOR
    selected_link_background_color: Any = DEFAULT_SELECTED_BACKGROUND
    base_attributes: Attributes = field(default_factory=dict)
    # Per-type overrides layered on the defaults
    type_attributes: dict[LinkType, Attributes] = field(default_factory=dict)
    type_handlers: dict[LinkType, TapHandler] = field(default_factory=dict)
    # Host-level fallback when neither classifier nor type has a handler
    link_tap_handler: TapHandler | None = None
    on_error: ErrorCallback | None = None


class LinkAnnotator:
    """Holds text + configuration, publishes links, styled text and hit tests."""

    def __init__(
        self,
        config: AnnotatorConfig | None = None,
        *,
        text: str = "",
        layout: LayoutEngine | None = None,
        on_needs_display: Callable[[], None] | None = None,
    ) -> None:
        self.config = config or AnnotatorConfig()
        self.registry = ClassifierRegistry()
        self.on_needs_display = on_needs_display
        self._buffer = TextBuffer(text)
        self._layout = layout
        self._tracker = TouchTracker()
        self._links: tuple[ResolvedLink, ...] = ()
        self._recompute()

    # ------------------------------------------------------------------
    # Text & layout
    # ------------------------------------------------------------------

    @property
    def text(self) -> str:
        return self._buffer.text

    @text.setter
    def text(self, value: str) -> None:
        self._buffer = TextBuffer(value)
        self._recompute()

    @property
    def buffer(self) -> TextBuffer:
        return self._buffer

    @property
    def layout(self) -> LayoutEngine | None:
        return self._layout

    @layout.setter
    def layout(self, value: LayoutEngine | None) -> None:
        self._layout = value
        self._tracker.reset()
        self._restyle()

    # ------------------------------------------------------------------
    # Configuration surface
    # ------------------------------------------------------------------

    def configure(self, **changes: Any) -> None:
        """Update several AnnotatorConfig fields with one recomputation."""
        for name, value in changes.items():
            if not hasattr(self.config, name):
                raise AttributeError(f"unknown setting {name!r}")
            setattr(self.config, name, value)
        self._recompute()

    @property
    def automatic_detection(self) -> bool:
        return self.config.automatic_detection

    @automatic_detection.setter
    def automatic_detection(self, value: bool) -> None:
        self.configure(automatic_detection=value)

    @property
    def detection_types(self) -> DetectionTypes:
        return self.config.detection_types

    @detection_types.setter
    def detection_types(self, value: DetectionTypes) -> None:
        self.configure(detection_types=DetectionTypes(value))

    @property
    def ignored_keywords(self) -> frozenset[str]:
        return frozenset(self.config.ignored_keywords)

    @ignored_keywords.setter
    def ignored_keywords(self, words: Iterable[str]) -> None:
        self.configure(ignored_keywords=set(words))

    @property
    def system_url_style(self) -> bool:
        return self.config.system_url_style

    @system_url_style.setter
    def system_url_style(self, value: bool) -> None:
        self.configure(system_url_style=value)

    @property
    def selected_link_background_color(self) -> Any:
        return self.config.selected_link_background_color

    @selected_link_background_color.setter
    def selected_link_background_color(self, value: Any) -> None:
        self.config.selected_link_background_color = value
        self._tracker.reset()
        self._restyle()

    def set_type_attributes(self, link_type: LinkType, attributes: Attributes | None) -> None:
        """Override attributes for one link type; None restores the defaults."""
        if attributes is None:
            self.config.type_attributes.pop(link_type, None)
        else:
            self.config.type_attributes[link_type] = dict(attributes)
        self._recompute()

    def type_attributes(self, link_type: LinkType) -> Attributes:
        """Effective attributes for a type (defaults + overrides)."""
        return dict(self._effective_type_attributes().get(link_type, {}))

    def set_tap_handler(self, link_type: LinkType, handler: TapHandler | None) -> None:
        if handler is None:
            self.config.type_handlers.pop(link_type, None)
        else:
            self.config.type_handlers[link_type] = handler
        self._recompute()

    def add_classifier(self, entry: ClassifierEntry) -> None:
        self.registry.add(entry)
        self._recompute()

    def remove_classifier(self, entry: ClassifierEntry) -> None:
        self.registry.remove(entry)
        self._recompute()

    def find_classifier(self, id: Any) -> ClassifierEntry | None:
        return self.registry.find_first(id)

    # ------------------------------------------------------------------
    # Outputs
    # ------------------------------------------------------------------

    @property
    def links(self) -> tuple[ResolvedLink, ...]:
        return self._links

    @property
    def attributed_text(self) -> AttributedText:
        return self._attributed

    @property
    def selected_link(self) -> ResolvedLink | None:
        return self._tracker.tracking

    def link_at(self, point: Point) -> dict[str, Any] | None:
        """{type, range, text} of the link under a point, or None."""
        link = self._index().link_at(point)
        return link.as_dict() if link is not None else None

    # ------------------------------------------------------------------
    # Touch handling
    # ------------------------------------------------------------------

    def touch_down(self, point: Point) -> bool:
        """Returns True if the touch landed on a link."""
        self._apply_touch(self._tracker.touch_down(self._index(), point))
        return self._tracker.tracking is not None

    def touch_moved(self, point: Point) -> None:
        self._apply_touch(self._tracker.touch_moved(self._index(), point))

    def touch_up(self, point: Point) -> ResolvedLink | None:
        """Ends the touch; returns the link whose handler was invoked, if any."""
        result = self._tracker.touch_up(self._index(), point)
        self._apply_touch(result)
        if result.tapped is not None:
            self._dispatch(result.tapped)
        return result.tapped

    def touch_cancelled(self) -> None:
        self._apply_touch(self._tracker.reset())

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _index(self) -> HitTestIndex:
        if self._layout is None:
            raise RuntimeError("no layout engine attached")
        return HitTestIndex(self._links, self._layout)

    def _effective_type_attributes(self) -> dict[LinkType, Attributes]:
        cfg = self.config
        defaults = default_type_attributes(
            cfg.tint_color,
            system_url_style=cfg.system_url_style,
            link_color=cfg.link_color,
        )
        return merge_type_attributes(defaults, cfg.type_attributes)

    def _recompute(self) -> None:
        cfg = self.config
        if cfg.automatic_detection:
            links = resolve_links(
                self._buffer,
                self.registry.active(cfg.detection_types),
                ignored=normalize_ignored(cfg.ignored_keywords),
                type_attributes=self._effective_type_attributes(),
                type_handlers=cfg.type_handlers,
                on_error=cfg.on_error,
            )
        else:
            links = ()
        logger.debug("recomputed %d links for %d code units", len(links), len(self._buffer))
        self._links = links
        self._tracker.reset()
        self._restyle()

    def _restyle(self) -> None:
        self._attributed = compose(
            self._buffer,
            self._links,
            base_attributes=self.config.base_attributes,
            selected=self._tracker.tracking,
            selected_attributes={BACKGROUND_COLOR: self.config.selected_link_background_color},
        )
        if self.on_needs_display is not None:
            self.on_needs_display()

    def _apply_touch(self, result: TouchResult) -> None:
        if result.highlight_changed:
            self._restyle()

    def _dispatch(self, link: ResolvedLink) -> None:
        handler = link.tap_handler or self.config.link_tap_handler
        if handler is None:
            logger.debug("no tap handler for %s link %r", link.link_type.value, link.text)
            return
        handler(link.link_type, link.text, link.range)
