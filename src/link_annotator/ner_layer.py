"""Optional NER classifier backed by Presidio.

Turns named entities (people, places, organisations, ...) into custom
links.  Uses spaCy under the hood, so it is an optional extra:

    pip install link-annotator[ner]
"""

from __future__ import annotations
from functools import lru_cache
from typing import TYPE_CHECKING, Any, Iterator

from .classifiers import ClassifierEntry
from .types import Attributes, LinkType, TapHandler

if TYPE_CHECKING:
    from presidio_analyzer import AnalyzerEngine


@lru_cache(maxsize=4)
def _get_engine(language: str = "en") -> AnalyzerEngine:
    """One spaCy-backed analyzer per language, built on first use."""
    from presidio_analyzer import AnalyzerEngine
    from presidio_analyzer.nlp_engine import NlpEngineProvider

    model = {"lang_code": language, "model_name": f"{language}_core_web_sm"}
    nlp_engine = NlpEngineProvider(
        nlp_configuration={"nlp_engine_name": "spacy", "models": [model]},
    ).create_engine()
    return AnalyzerEngine(nlp_engine=nlp_engine, supported_languages=[language])


DEFAULT_ENTITIES = [
    "PERSON",
    "LOCATION",
    "ORGANIZATION",
]


def scan_entities(
    text: str,
    *,
    language: str = "en",
    entities: list[str] | None = None,
    score_threshold: float = 0.5,
) -> Iterator[tuple[int, int]]:
    """Yield (start, end) spans of recognised entities, in text order."""
    if not text:
        return
    engine = _get_engine(language)
    results = engine.analyze(
        text=text,
        language=language,
        entities=entities or DEFAULT_ENTITIES,
        score_threshold=score_threshold,
    )
    for r in sorted(results, key=lambda r: (r.start, -r.score)):
        yield r.start, r.end


def ner_classifier(
    id: Any = "ner",
    *,
    entities: list[str] | None = None,
    language: str = "en",
    score_threshold: float = 0.5,
    attributes: Attributes | None = None,
    tap_handler: TapHandler | None = None,
) -> ClassifierEntry:
    """Custom classifier that links named entities."""
    def detect(text: str) -> Iterator[tuple[int, int]]:
        return scan_entities(
            text,
            language=language,
            entities=entities,
            score_threshold=score_threshold,
        )

    return ClassifierEntry(
        id=id,
        function=detect,
        link_type=LinkType.CUSTOM,
        attributes=attributes,
        tap_handler=tap_handler,
    )
