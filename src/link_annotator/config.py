"""YAML/dict config loader for link-annotator.

Supports loading from a YAML file or a plain dict (for embedding in a
larger app config).

Example YAML:

    link_annotator:
      enabled: true
      detection_types: [user_handle, hashtag, url]   # or "all" / "none"
      ignored_keywords:
        - news
      system_url_style: false
      tint_color: "#007AFF"
      selected_link_background_color: "#C7C7CC"
      base_attributes:
        font: "Helvetica 14"
      type_attributes:
        hashtag:
          foreground_color: "#FF9500"
      classifiers:
        - id: ticket
          pattern: "JIRA-\\d+"
          ignore_case: true
          attributes:
            underline_style: 1
      ner:                       # needs the [ner] extra
        entities: [PERSON]
        language: en
"""

from __future__ import annotations
import re
from pathlib import Path
from typing import Any, Callable

from .annotator import AnnotatorConfig, LinkAnnotator
from .classifiers import ClassifierEntry, regex_classifier
from .compositor import DEFAULT_LINK_COLOR, DEFAULT_SELECTED_BACKGROUND, DEFAULT_TINT_COLOR
from .hittest import LayoutEngine
from .types import DetectionTypes, LinkType


def parse_detection_types(value: Any) -> DetectionTypes:
    """Parse "all", "none", a comma-separated string or a list of type names."""
    if value is None:
        return DetectionTypes.ALL
    if isinstance(value, int):
        return DetectionTypes(value)
    if isinstance(value, str):
        lowered = value.strip().lower()
        if lowered == "all":
            return DetectionTypes.ALL
        if lowered in ("none", ""):
            return DetectionTypes.NONE
        value = [v for v in lowered.split(",") if v.strip()]
    flags = DetectionTypes.NONE
    for name in value:
        key = name.strip().upper()
        if key not in DetectionTypes.__members__ or key in ("NONE", "ALL"):
            raise ValueError(f"unknown detection type: {name!r}")
        flags |= DetectionTypes[key]
    return flags


def parse_link_type(name: str) -> LinkType:
    try:
        return LinkType(name.strip().lower())
    except ValueError:
        raise ValueError(f"unknown link type: {name!r}") from None


def load_config(data: dict[str, Any]) -> dict[str, Any]:
    """Normalize a config dict (from YAML or inline)."""
    # Support nested under "link_annotator" key or flat
    if "link_annotator" in data:
        data = data["link_annotator"] or {}

    classifiers = []
    for i, c in enumerate(data.get("classifiers") or []):
        if "pattern" not in c:
            raise ValueError(f"classifier #{i} has no pattern")
        classifiers.append({
            "id": c.get("id", f"classifier_{i}"),
            "pattern": c["pattern"],
            "ignore_case": bool(c.get("ignore_case", False)),
            "attributes": c.get("attributes"),
        })

    return {
        "enabled": data.get("enabled", True),
        "detection_types": parse_detection_types(data.get("detection_types")),
        "ignored_keywords": _parse_ignored(data.get("ignored_keywords")),
        "system_url_style": bool(data.get("system_url_style", False)),
        "tint_color": data.get("tint_color", DEFAULT_TINT_COLOR),
        "link_color": data.get("link_color", DEFAULT_LINK_COLOR),
        "selected_link_background_color": data.get(
            "selected_link_background_color", DEFAULT_SELECTED_BACKGROUND
        ),
        "base_attributes": dict(data.get("base_attributes") or {}),
        "type_attributes": {
            parse_link_type(k): dict(v or {})
            for k, v in (data.get("type_attributes") or {}).items()
        },
        "classifiers": classifiers,
        "ner": data.get("ner"),
    }


def load_from_yaml(path: str | Path) -> dict[str, Any]:
    """Load config from a YAML file."""
    import yaml
    with open(path) as f:
        return load_config(yaml.safe_load(f) or {})


def build_classifiers(cfg: dict[str, Any]) -> list[ClassifierEntry]:
    """Custom classifiers described by a normalized config, in order."""
    entries = [
        regex_classifier(
            c["id"],
            c["pattern"],
            attributes=c["attributes"],
            flags=re.IGNORECASE if c["ignore_case"] else 0,
        )
        for c in cfg["classifiers"]
    ]
    if cfg.get("ner"):
        from .ner_layer import ner_classifier
        ner = cfg["ner"]
        entries.append(ner_classifier(
            ner.get("id", "ner"),
            entities=ner.get("entities"),
            language=ner.get("language", "en"),
            score_threshold=ner.get("score_threshold", 0.5),
            attributes=ner.get("attributes"),
        ))
    return entries


def create_annotator(
    config: dict[str, Any],
    *,
    text: str = "",
    layout: LayoutEngine | None = None,
    on_needs_display: Callable[[], None] | None = None,
) -> LinkAnnotator:
    """Create a fully configured annotator from a config dict."""
    cfg = config if _is_normalized(config) else load_config(config)

    annotator = LinkAnnotator(
        AnnotatorConfig(
            automatic_detection=cfg["enabled"],
            detection_types=cfg["detection_types"],
            ignored_keywords=set(cfg["ignored_keywords"]),
            system_url_style=cfg["system_url_style"],
            tint_color=cfg["tint_color"],
            link_color=cfg["link_color"],
            selected_link_background_color=cfg["selected_link_background_color"],
            base_attributes=dict(cfg["base_attributes"]),
            type_attributes={t: dict(a) for t, a in cfg["type_attributes"].items()},
        ),
        layout=layout,
        on_needs_display=on_needs_display,
    )
    for entry in build_classifiers(cfg):
        annotator.registry.add(entry)
    annotator.text = text
    return annotator


def _is_normalized(config: dict[str, Any]) -> bool:
    return isinstance(config.get("detection_types"), DetectionTypes) and "classifiers" in config


def _parse_ignored(words: Any) -> set[str]:
    if words is None:
        return set()
    if isinstance(words, str):
        words = [words]
    for w in words:
        if not isinstance(w, str):
            raise ValueError(f"ignored keyword must be a string: {w!r}")
    return set(words)
