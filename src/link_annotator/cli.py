"""CLI interface for link-annotator.

Usage:
    # List links (stdin: plain text, stdout: JSON array)
    echo 'Hi @alice, check #news at http://example.com' | \
        python -m link_annotator.cli annotate

    # Attributed runs for the whole text
    echo 'Hi @alice' | python -m link_annotator.cli render

    # Hit-test a point against a fixed-cell layout
    echo 'Hi @alice' | python -m link_annotator.cli link-at --x 45 --y 5

Settings come from ``--config`` (YAML) and are overridden by flags.
"""

from __future__ import annotations
import argparse
import json
import logging
import sys

from .annotator import LinkAnnotator
from .config import create_annotator, load_config, load_from_yaml, parse_detection_types
from .layout import MonospaceLayout
from .types import LinkType, Point


def _build_annotator(args: argparse.Namespace, text: str) -> LinkAnnotator:
    cfg = load_from_yaml(args.config) if args.config else load_config({})
    if args.types:
        cfg["detection_types"] = parse_detection_types(args.types)
    if args.ignore:
        cfg["ignored_keywords"] |= set(args.ignore.split(","))
    if args.system_url_style:
        cfg["system_url_style"] = True
    return create_annotator(cfg, text=text)


def _classifier_name(classifier_id: object) -> str:
    # Built-in classifiers are keyed by their LinkType
    if isinstance(classifier_id, LinkType):
        return classifier_id.value
    return str(classifier_id)


def _read_text() -> str:
    # Drop the newline that echo/heredocs append
    return sys.stdin.read().rstrip("\n")


def cmd_annotate(args: argparse.Namespace) -> None:
    """Print resolved links for the text on stdin."""
    annotator = _build_annotator(args, _read_text())
    output = [
        {**link.as_dict(), "classifier": _classifier_name(link.classifier_id)}
        for link in annotator.links
    ]
    json.dump(output, sys.stdout, ensure_ascii=False)
    sys.stdout.write("\n")


def cmd_render(args: argparse.Namespace) -> None:
    """Print attribute runs for the text on stdin."""
    annotator = _build_annotator(args, _read_text())
    json.dump(annotator.attributed_text.to_list(), sys.stdout, ensure_ascii=False, default=str)
    sys.stdout.write("\n")


def cmd_link_at(args: argparse.Namespace) -> None:
    """Print the link under (x, y), or null."""
    annotator = _build_annotator(args, _read_text())
    annotator.layout = MonospaceLayout(
        annotator.buffer,
        char_width=args.char_width,
        line_height=args.line_height,
    )
    json.dump(annotator.link_at(Point(args.x, args.y)), sys.stdout, ensure_ascii=False)
    sys.stdout.write("\n")


def main(argv: list[str] | None = None) -> None:
    parser = argparse.ArgumentParser(
        prog="link_annotator",
        description="Detect handles, hashtags and URLs in text",
    )
    parser.add_argument("--config", default="", help="YAML config file")
    parser.add_argument("--types", default="", help="Comma-separated detection types, or all/none")
    parser.add_argument("--ignore", default="", help="Comma-separated words to never link")
    parser.add_argument("--system-url-style", action="store_true", help="Underline URLs")
    parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging")

    sub = parser.add_subparsers(dest="command", required=True)
    sub.add_parser("annotate", help="List links (text stdin)")
    sub.add_parser("render", help="Attribute runs (text stdin)")
    p = sub.add_parser("link-at", help="Link under a point (text stdin)")
    p.add_argument("--x", type=float, required=True)
    p.add_argument("--y", type=float, required=True)
    p.add_argument("--char-width", type=float, default=10.0)
    p.add_argument("--line-height", type=float, default=20.0)

    args = parser.parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
    )

    cmds = {
        "annotate": cmd_annotate,
        "render": cmd_render,
        "link-at": cmd_link_at,
    }
    cmds[args.command](args)


if __name__ == "__main__":
    main()
