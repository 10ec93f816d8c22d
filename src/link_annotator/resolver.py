"""Resolver — turns classifier output into the final link list.

Usage:
    from link_annotator import ClassifierRegistry, TextBuffer, resolve_links

    registry = ClassifierRegistry()
    buffer = TextBuffer("Hi @alice, check #news")
    links = resolve_links(buffer, registry.active(DetectionTypes.ALL))
    [l.text for l in links]      # ["@alice", "#news"]

Earlier classifiers win overlaps; within a classifier, earlier matches win.
"""

from __future__ import annotations
import logging
from types import MappingProxyType
from typing import Any, Callable, Iterable, Mapping

from .classifiers import ClassifierEntry
from .text import TextBuffer
from .types import Attributes, LinkType, RawMatch, ResolvedLink, TapHandler

logger = logging.getLogger(__name__)

ErrorCallback = Callable[[Any, Exception], None]

# Leading tokens stripped for the second ignore-set comparison
_SIGILS = "@#"


def normalize_ignored(words: Iterable[str]) -> frozenset[str]:
    """Casefold an ignore list for comparisons."""
    return frozenset(w.casefold() for w in words)


def is_ignored(text: str, ignored: frozenset[str]) -> bool:
    """True if the matched text, with or without its leading @/#, is ignored."""
    if not ignored:
        return False
    folded = text.casefold()
    if folded in ignored:
        return True
    return folded[:1] in _SIGILS and folded[1:] in ignored


def collect_matches(
    buffer: TextBuffer,
    entries: Iterable[ClassifierEntry],
    *,
    on_error: ErrorCallback | None = None,
) -> list[tuple[tuple[int, int], RawMatch]]:
    """Run every classifier, returning (stable key, match) pairs.

    A classifier that raises contributes nothing for this pass.
    """
    keyed: list[tuple[tuple[int, int], RawMatch]] = []
    for order, entry in enumerate(entries):
        try:
            raw = entry.detect(buffer)
        except Exception as exc:
            logger.warning("classifier %r failed, skipping it", entry.id, exc_info=True)
            if on_error is not None:
                on_error(entry.id, exc)
            continue
        keyed.extend(((order, n), m) for n, m in enumerate(raw))
    return keyed


def resolve_links(
    buffer: TextBuffer,
    entries: Iterable[ClassifierEntry],
    *,
    ignored: frozenset[str] = frozenset(),
    type_attributes: Mapping[LinkType, Attributes] | None = None,
    type_handlers: Mapping[LinkType, TapHandler] | None = None,
    on_error: ErrorCallback | None = None,
) -> tuple[ResolvedLink, ...]:
    """Resolve all classifier matches into sorted, non-overlapping links."""
    keyed = collect_matches(buffer, entries, on_error=on_error)

    # --- Filter before resolution so ignored text never blocks others ---
    keyed = [(k, m) for k, m in keyed if not is_ignored(m.text, ignored)]

    # --- Order by start, then classifier order, then production order ---
    keyed.sort(key=lambda km: (km[1].range.location, km[0]))

    # --- Greedy sweep ---
    accepted: list[RawMatch] = []
    last_end = -1
    for _, m in keyed:
        if m.range.location >= last_end:
            accepted.append(m)
            last_end = m.range.end

    links = tuple(
        _to_link(m, type_attributes or {}, type_handlers or {}) for m in accepted
    )
    logger.debug("resolved %d links from %d candidates", len(links), len(keyed))
    return links


def _to_link(
    m: RawMatch,
    type_attributes: Mapping[LinkType, Attributes],
    type_handlers: Mapping[LinkType, TapHandler],
) -> ResolvedLink:
    attributes = dict(type_attributes.get(m.link_type, {}))
    if m.attributes:
        attributes.update(m.attributes)
    return ResolvedLink(
        link_type=m.link_type,
        range=m.range,
        text=m.text,
        attributes=MappingProxyType(attributes),
        tap_handler=m.tap_handler or type_handlers.get(m.link_type),
        classifier_id=m.classifier_id,
    )
