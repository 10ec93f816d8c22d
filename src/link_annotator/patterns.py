"""Built-in patterns for user handles, hashtags and URLs.

These are compiled at import time; a bad pattern here is a bug in the
package and fails loudly on import rather than at detection time.
"""

from __future__ import annotations
import re

from .types import DetectionTypes, LinkType

# Trailing characters that end a sentence rather than a URL
_URL_TRAILING = r".,;:!?'\")\]}"

# Each pattern: (link_type, detection flag, compiled_regex)
BUILTIN_PATTERNS: list[tuple[LinkType, DetectionTypes, re.Pattern]] = [
    # @handle — not part of a longer word or an email address
    (LinkType.USER_HANDLE, DetectionTypes.USER_HANDLE, re.compile(
        r"(?<![\w@])@\w+"
    )),

    # #hashtag
    (LinkType.HASHTAG, DetectionTypes.HASHTAG, re.compile(
        r"(?<![\w#&])#\w+"
    )),

    # URL — scheme://authority/path?query#fragment, or a bare www. host
    (LinkType.URL, DetectionTypes.URL, re.compile(
        r"(?<![\w@.])"
        r"(?:(?:https?|ftp)://|www\.)"
        r"[A-Za-z0-9\-._~:/?#\[\]@!$&'()*+,;=%]+"
        r"(?<![" + _URL_TRAILING + r"])",
        re.IGNORECASE,
    )),
]


def scan_builtin(
    text: str,
    types: DetectionTypes = DetectionTypes.ALL,
) -> list[tuple[LinkType, int, int, str]]:
    """Run the enabled built-in patterns. Returns (type, start, end, text) in code points.

    No overlap resolution happens here; see ``resolver.resolve_links``.
    """
    found: list[tuple[LinkType, int, int, str]] = []
    for link_type, flag, pattern in BUILTIN_PATTERNS:
        if not types & flag:
            continue
        for m in pattern.finditer(text):
            found.append((link_type, m.start(), m.end(), m.group()))
    return sorted(found, key=lambda f: f[1])
