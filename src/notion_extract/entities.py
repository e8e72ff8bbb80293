"""Entity enumeration for Notion search and query responses.

Finds each database or page object in a raw response by its
``{"object":"<kind>"`` marker and yields the brace-delimited span.
"""

import logging
import re
from typing import Iterator, TypedDict

from notion_extract.scan import find_matching_brace

logger = logging.getLogger(__name__)

# Markers tolerate whitespace so pretty-printed responses work too.
DATABASE_MARKER = re.compile(r'\{\s*"object"\s*:\s*"database"')
PAGE_MARKER = re.compile(r'\{\s*"object"\s*:\s*"page"')

ENTITY_MARKERS: dict[str, re.Pattern] = {
    "database": DATABASE_MARKER,
    "page": PAGE_MARKER,
}


class EntitySpan(TypedDict):
    """One entity located in a response.

    ``start`` is the offset of the opening brace, ``end`` the offset of the
    matching closing brace (inclusive), ``text`` the JSON of the entity.
    """

    kind: str
    start: int
    end: int
    text: str


def _find_marker(text: str, marker: str | re.Pattern, pos: int) -> int | None:
    if isinstance(marker, str):
        found = text.find(marker, pos)
        return found if found >= 0 else None
    match = marker.search(text, pos)
    return match.start() if match else None


def iter_marked_spans(text: str, marker: str | re.Pattern) -> Iterator[tuple[int, int]]:
    """Yield (start, end) offsets of every object opened by marker.

    After each match the search resumes at the matched closing brace, so
    markers nested inside a yielded object are not reported separately.
    Stops quietly at the first object that never closes (truncated text).

    Args:
        text: Raw response JSON.
        marker: Literal or compiled regex that matches starting at the
            object's opening brace.
    """
    if not text:
        return
    pos = 0
    while True:
        start = _find_marker(text, marker, pos)
        if start is None:
            return
        end = find_matching_brace(text, start)
        if end is None:
            logger.warning(f"Unterminated entity at offset {start}, stopping enumeration")
            return
        yield start, end
        pos = end


def iter_entities(text: str, kind: str) -> Iterator[EntitySpan]:
    """Yield every complete entity of the given kind ("database" or "page").

    Raises:
        ValueError: If kind is not a known entity kind.
    """
    marker = ENTITY_MARKERS.get(kind)
    if marker is None:
        raise ValueError(f"Unknown entity kind {kind!r}, expected one of {sorted(ENTITY_MARKERS)}")
    for start, end in iter_marked_spans(text, marker):
        yield EntitySpan(kind=kind, start=start, end=end, text=text[start:end + 1])


def iter_pages(text: str) -> Iterator[str]:
    """Yield the JSON text of each page object in a query response."""
    for span in iter_entities(text, "page"):
        yield span["text"]
