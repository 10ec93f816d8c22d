"""Link annotator — typed, non-overlapping links in label text."""

from .annotator import LinkAnnotator, AnnotatorConfig
from .classifiers import ClassifierEntry, ClassifierRegistry, regex_classifier
from .resolver import resolve_links
from .compositor import AttributedText, AttributeRun, compose
from .hittest import HitTestIndex, LayoutEngine, TouchTracker
from .layout import MonospaceLayout
from .text import TextBuffer
from .config import create_annotator, load_config, load_from_yaml
from .types import (
    DetectionTypes, LinkType, Point, RawMatch, Rect, ResolvedLink, TextRange,
)

__all__ = [
    "LinkAnnotator", "AnnotatorConfig",
    "ClassifierEntry", "ClassifierRegistry", "regex_classifier",
    "resolve_links",
    "AttributedText", "AttributeRun", "compose",
    "HitTestIndex", "LayoutEngine", "TouchTracker",
    "MonospaceLayout",
    "TextBuffer",
    "create_annotator", "load_config", "load_from_yaml",
    "DetectionTypes", "LinkType", "Point", "RawMatch", "Rect", "ResolvedLink", "TextRange",
]
__version__ = "0.1.0"
