"""Parsing of RFC 8288 ``Link`` headers as GitHub sends them.

    <https://api.github.com/orgs/x/repos?page=2>; rel="next",
    <https://api.github.com/orgs/x/repos?page=5>; rel="last"
"""

from __future__ import annotations

import re
from collections.abc import Mapping

_LINK_SEGMENT = re.compile(r"<(?P<url>[^>]*)>\s*(?P<params>(?:;[^,<]*)*)")
_REL_PARAM = re.compile(r"""\brel\s*=\s*(?:"(?P<quoted>[^"]*)"|(?P<bare>[^;\s,]+))""", re.I)

NEXT = "next"


def parse_link_header(value: str | None) -> dict[str, str]:
    """Map each link relation to its URL.

    Segments without a ``rel`` parameter are ignored. A segment naming
    several relations (``rel="next last"``) registers all of them. When a
    relation repeats, the first occurrence wins.
    """
    links: dict[str, str] = {}
    if not value:
        return links

    for match in _LINK_SEGMENT.finditer(value):
        rel = _REL_PARAM.search(match.group("params"))
        if rel is None:
            continue
        relations = rel.group("quoted") if rel.group("quoted") is not None else rel.group("bare")
        for relation in relations.split():
            links.setdefault(relation.lower(), match.group("url").strip())
    return links


def next_page_url(headers: Mapping[str, str]) -> str | None:
    """URL of the next page, or None when this is the last one."""
    return parse_link_header(headers.get("link")).get(NEXT)
