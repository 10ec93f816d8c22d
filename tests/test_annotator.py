"""Tests for the annotator surface — styling, hit testing and touches."""

import sys, os
sys.path.insert(0, os.path.join(os.path.dirname(__file__), "..", "src"))

import pytest

from link_annotator import (
    AnnotatorConfig, DetectionTypes, LinkAnnotator, LinkType, MonospaceLayout,
    Point, Rect, TextBuffer, TextRange, compose, regex_classifier,
)
from link_annotator.compositor import (
    BACKGROUND_COLOR, FOREGROUND_COLOR, UNDERLINE_SINGLE, UNDERLINE_STYLE,
    default_type_attributes,
)
from link_annotator.hittest import HitTestIndex

SAMPLE = "Hi @alice, check #news at http://example.com"


def _annotator(text=SAMPLE, **config):
    a = LinkAnnotator(AnnotatorConfig(**config), text=text)
    a.layout = MonospaceLayout(a.buffer, char_width=10, line_height=20)
    return a


class FakeLayout:
    """Layout whose nearest index is fixed, with no glyph rectangles anywhere."""

    def __init__(self, index):
        self.index = index

    def character_index(self, point):
        return self.index

    def bounding_rects(self, rng):
        return []


# ── Compositor ───────────────────────────────────────────────────────

def test_compose_covers_whole_text_and_keeps_base():
    a = LinkAnnotator(AnnotatorConfig(base_attributes={"font": "body"}), text=SAMPLE)
    runs = a.attributed_text.runs
    assert runs[0].range == TextRange(0, 3)
    assert runs[0].attributes == {"font": "body"}
    assert sum(r.range.length for r in runs) == len(SAMPLE)
    handle = a.attributed_text.attributes_at(4)
    assert handle["font"] == "body"
    assert handle[FOREGROUND_COLOR] == a.config.tint_color


def test_compose_without_links_is_one_base_run():
    text = compose(TextBuffer("plain"), (), base_attributes={"font": "f"})
    assert len(text.runs) == 1
    assert text.runs[0].attributes == {"font": "f"}


def test_system_url_style():
    defaults = default_type_attributes("tint", system_url_style=True, link_color="blue")
    assert defaults[LinkType.URL] == {FOREGROUND_COLOR: "blue", UNDERLINE_STYLE: UNDERLINE_SINGLE}
    assert defaults[LinkType.HASHTAG][FOREGROUND_COLOR] == "tint"

    a = _annotator()
    a.system_url_style = True
    assert a.links[2].attributes[UNDERLINE_STYLE] == UNDERLINE_SINGLE


def test_type_attributes_reflect_system_url_style():
    a = _annotator()
    assert a.type_attributes(LinkType.URL)[UNDERLINE_STYLE] != UNDERLINE_SINGLE
    a.system_url_style = True
    assert a.type_attributes(LinkType.URL) == {
        FOREGROUND_COLOR: a.config.link_color, UNDERLINE_STYLE: UNDERLINE_SINGLE,
    }


def test_type_attribute_override_and_reset():
    a = _annotator()
    a.set_type_attributes(LinkType.HASHTAG, {FOREGROUND_COLOR: "orange"})
    assert a.links[1].attributes[FOREGROUND_COLOR] == "orange"
    a.set_type_attributes(LinkType.HASHTAG, None)
    assert a.links[1].attributes[FOREGROUND_COLOR] == a.config.tint_color


# ── Layout & hit testing ─────────────────────────────────────────────

def test_monospace_rects_span_lines():
    layout = MonospaceLayout(TextBuffer("ab\ncd"), char_width=10, line_height=20)
    assert layout.bounding_rects(TextRange(1, 3)) == [
        Rect(10, 0, 10, 20), Rect(0, 20, 10, 20),
    ]


def test_link_at_inside_link():
    a = _annotator()
    assert a.link_at(Point(45, 5)) == {"type": "user_handle", "range": [3, 6], "text": "@alice"}


def test_link_at_between_links():
    assert _annotator().link_at(Point(125, 5)) is None


def test_link_at_below_last_line_is_a_miss():
    a = _annotator()
    # Nearest index is inside @alice, but nothing is drawn there
    assert a.layout.character_index(Point(45, 50)) == 4
    assert a.link_at(Point(45, 50)) is None


def test_link_at_past_line_end_is_a_miss():
    assert _annotator().link_at(Point(1000, 5)) is None


def test_empty_line_is_a_miss():
    a = _annotator("#tag\n\nmore")
    assert a.link_at(Point(5, 25)) is None
    assert a.link_at(Point(5, 5))["text"] == "#tag"


def test_geometric_guard_with_fake_layout():
    a = LinkAnnotator(text=SAMPLE, layout=FakeLayout(4))
    index = HitTestIndex(a.links, a.layout)
    assert index.link_for_index(4).text == "@alice"
    assert a.link_at(Point(0, 0)) is None


def test_link_at_without_layout_raises():
    with pytest.raises(RuntimeError):
        LinkAnnotator(text=SAMPLE).link_at(Point(0, 0))


def test_link_for_index_edges():
    a = _annotator()
    index = HitTestIndex(a.links, a.layout)
    assert index.link_for_index(2) is None
    assert index.link_for_index(3).text == "@alice"
    assert index.link_for_index(8).text == "@alice"
    assert index.link_for_index(9) is None
    assert index.link_for_index(43).link_type is LinkType.URL


# ── Touch handling ───────────────────────────────────────────────────

def test_tap_invokes_type_handler():
    taps = []
    a = _annotator()
    a.set_tap_handler(LinkType.USER_HANDLE, lambda *args: taps.append(args))
    assert a.touch_down(Point(45, 5)) is True
    assert a.selected_link.text == "@alice"
    assert a.attributed_text.attributes_at(4)[BACKGROUND_COLOR] == a.selected_link_background_color
    assert BACKGROUND_COLOR not in a.attributed_text.attributes_at(18)

    tapped = a.touch_up(Point(55, 5))
    assert tapped.text == "@alice"
    assert taps == [(LinkType.USER_HANDLE, "@alice", TextRange(3, 6))]
    assert a.selected_link is None
    assert BACKGROUND_COLOR not in a.attributed_text.attributes_at(4)


def test_classifier_handler_beats_type_handler():
    calls = []
    a = _annotator(link_tap_handler=lambda *args: calls.append("host"))
    a.set_tap_handler(LinkType.CUSTOM, lambda *args: calls.append("type"))
    a.add_classifier(regex_classifier("check", r"check", tap_handler=lambda *args: calls.append("classifier")))
    a.touch_down(Point(125, 5))
    a.touch_up(Point(125, 5))
    a.touch_down(Point(185, 5))   # #news, no type handler
    a.touch_up(Point(185, 5))
    assert calls == ["classifier", "host"]


def test_move_outside_cancels_tap():
    taps = []
    a = _annotator(link_tap_handler=lambda *args: taps.append(args))
    a.touch_down(Point(45, 5))
    a.touch_moved(Point(55, 5))
    assert a.selected_link is not None
    a.touch_moved(Point(45, 50))
    assert a.selected_link is None
    assert a.touch_up(Point(45, 5)) is None
    assert taps == []


def test_touch_down_outside_links_stays_idle():
    a = _annotator()
    assert a.touch_down(Point(125, 5)) is False
    assert a.selected_link is None


def test_text_change_resets_tracking():
    taps = []
    a = _annotator(link_tap_handler=lambda *args: taps.append(args))
    a.touch_down(Point(45, 5))
    a.text = "Hi @alice again"
    assert a.selected_link is None
    a.touch_up(Point(45, 5))
    assert taps == []


def test_highlight_colour_change_resets_tracking():
    taps = []
    a = _annotator(link_tap_handler=lambda *args: taps.append(args))
    a.touch_down(Point(45, 5))
    a.selected_link_background_color = "yellow"
    assert a.selected_link is None
    assert BACKGROUND_COLOR not in a.attributed_text.attributes_at(4)
    assert a.touch_up(Point(45, 5)) is None
    assert taps == []


def test_touch_without_handler_is_noop():
    a = _annotator()
    a.touch_down(Point(45, 5))
    assert a.touch_up(Point(45, 5)).text == "@alice"


# ── Configuration surface ────────────────────────────────────────────

def test_add_then_remove_restores_links():
    a = _annotator()
    before = a.links
    entry = regex_classifier("check", r"check")
    a.add_classifier(entry)
    assert [l.text for l in a.links] == ["@alice", "check", "#news", "http://example.com"]
    assert a.find_classifier("check") is entry
    a.remove_classifier(entry)
    assert a.links == before


def test_detection_types_toggle():
    a = _annotator()
    a.add_classifier(regex_classifier("check", r"check"))
    a.detection_types = DetectionTypes.HASHTAG
    assert [l.text for l in a.links] == ["check", "#news"]


def test_automatic_detection_off_clears_links():
    a = _annotator()
    a.automatic_detection = False
    assert a.links == ()
    assert len(a.attributed_text.runs) == 1


def test_ignored_keywords_setter():
    a = _annotator()
    a.ignored_keywords = ["ALICE"]
    assert [l.text for l in a.links] == ["#news", "http://example.com"]


def test_needs_display_called_on_change():
    calls = []
    a = LinkAnnotator(text=SAMPLE, on_needs_display=lambda: calls.append(1))
    calls.clear()
    a.text = "new #text"
    a.selected_link_background_color = "yellow"
    assert len(calls) == 2


def test_configure_rejects_unknown_setting():
    with pytest.raises(AttributeError):
        _annotator().configure(colour="red")


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
