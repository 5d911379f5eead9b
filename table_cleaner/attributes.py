from __future__ import annotations

import re

ATTRIBUTE_PATTERN = re.compile(
    r"""(?P<key>[^\s"'>/=]+)(?:\s*=\s*(?:"(?P<dq>[^"]*)"|'(?P<sq>[^']*)'|(?P<bare>[^\s"'>]+)))?"""
)
SPAN_VALUE_PATTERN = re.compile(r"\s*\+?(\d+)")
CLEAN_TYPE_PATTERN = re.compile(
    r"""\bdata-cleantype\s*=\s*(['"]?)(?P<cleantype>\w+)\1""",
    re.IGNORECASE,
)
# <img> tags and wiki-style file links: [[File:x.png|thumb]] / [[Image:x.png]]
IMAGE_PATTERN = re.compile(
    r"<img\b[^>]*/?>|\[\[\s*(?:File|Image)\s*:[^\[\]]*(?:\[\[[^\[\]]*\]\][^\[\]]*)*\]\]",
    re.IGNORECASE,
)


def parse_cell_attributes(attribs: str) -> dict[str, str]:
    """Split the attribute text of an opening tag into a lowercase-keyed dict.

    Valueless attributes map to an empty string. Later duplicates are ignored,
    which is what browsers do.
    """
    attributes: dict[str, str] = {}
    for match in ATTRIBUTE_PATTERN.finditer(attribs or ""):
        key = match.group("key").lower()
        if key in attributes:
            continue
        value = match.group("dq")
        if value is None:
            value = match.group("sq")
        if value is None:
            value = match.group("bare") or ""
        attributes[key] = value
    return attributes


def parse_span(value: str | None) -> int:
    """Browser-style span parsing: leading digits win, anything else is 1."""
    if not value:
        return 1
    match = SPAN_VALUE_PATTERN.match(value)
    if not match:
        return 1
    span = int(match.group(1))
    return span if span > 0 else 1


def replace_rowspan(attribs: str, rowspan: int) -> str:
    """Rewrite the rowspan attribute in place, dropping it once it reaches 1.

    Only a real attribute is touched, never text inside another attribute's
    quoted value. The first rowspan wins, as in parse_cell_attributes.
    """
    for match in ATTRIBUTE_PATTERN.finditer(attribs):
        if match.group("key").lower() != "rowspan":
            continue
        if rowspan > 1:
            return f'{attribs[:match.start()]}rowspan="{rowspan}"{attribs[match.end():]}'
        return attribs[:match.start()].rstrip() + attribs[match.end():]
    return f'{attribs} rowspan="{rowspan}"' if rowspan > 1 else attribs


def strip_images(text: str) -> str:
    return IMAGE_PATTERN.sub("", text)
