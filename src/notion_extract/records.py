"""Record assembly for Notion search and query responses.

Turns entity spans found by ``notion_extract.entities`` into typed summary
records with normalized IDs and a guaranteed non-empty title.
"""

import logging
import re
from typing import TypedDict

from notion_extract.entities import iter_entities
from notion_extract.scan import (
    extract_string_value,
    find_key_value,
    find_matching_brace,
    locate_key,
    value_start,
)

logger = logging.getLogger(__name__)

DEFAULT_DATABASE_TITLE = "Untitled Database"
DEFAULT_PAGE_TITLE = "Untitled Page"

_DATABASE_PARENT = re.compile(r'"parent"\s*:\s*\{\s*"type"\s*:\s*"database_id"')


class DatabaseInfo(TypedDict):
    """Basic info about a Notion database."""

    id: str
    title: str


class PageInfo(TypedDict):
    """Basic info about a Notion page."""

    id: str
    title: str
    parent_is_database: bool


def normalize_id(value: str) -> str:
    """Strip dashes from a Notion ID.

    Example:
        >>> normalize_id("2d240e6d-8f97-8077-8b8d-fd8dae6ed382")
        '2d240e6d8f9780778b8dfd8dae6ed382'
    """
    return value.replace("-", "")


def format_record(record: DatabaseInfo | PageInfo) -> str:
    """Format a record for display as ``"Title (id)"``."""
    return f"{record['title']} ({record['id']})"


def _first_plain_text(text: str, open_pos: int) -> str:
    """Read the first plain_text inside the object or array opened at open_pos."""
    close_pos = find_matching_brace(text, open_pos, skip_strings=True)
    if close_pos is None:
        return ""
    plain_pos = locate_key(text, "plain_text", open_pos)
    if plain_pos is None or plain_pos > close_pos:
        return ""
    return extract_string_value(text, "plain_text", plain_pos) or ""


def build_database_record(db_text: str) -> DatabaseInfo | None:
    """Build a DatabaseInfo from the JSON of one database object.

    Returns:
        The record, or None when the object has no id.
    """
    raw_id = extract_string_value(db_text, "id") or ""
    db_id = normalize_id(raw_id)
    if not db_id:
        return None

    title = ""
    title_pos = locate_key(db_text, "title")
    if title_pos is not None:
        array_pos = value_start(db_text, title_pos, "title")
        if array_pos is not None and db_text[array_pos] == "[":
            title = _first_plain_text(db_text, array_pos)

    return DatabaseInfo(id=db_id, title=title or DEFAULT_DATABASE_TITLE)


def is_database_child(page_text: str) -> bool:
    """Check whether a page's parent is a database."""
    return _DATABASE_PARENT.search(page_text) is not None


def build_page_record(page_text: str) -> PageInfo | None:
    """Build a PageInfo from the JSON of one page object.

    The title is read from whichever property has ``"type": "title"``, so
    it does not depend on the property being called "Name". Only
    plain_text inside that property object is considered.

    Returns:
        The record, or None when the object has no id.
    """
    raw_id = extract_string_value(page_text, "id") or ""
    page_id = normalize_id(raw_id)
    if not page_id:
        return None

    title = ""
    type_pos = find_key_value(page_text, "type", "title")
    if type_pos is not None:
        # The property object holding the "type": "title" pair
        prop_pos = page_text.rfind("{", 0, type_pos)
        if prop_pos >= 0:
            title = _first_plain_text(page_text, prop_pos)

    return PageInfo(
        id=page_id,
        title=title or DEFAULT_PAGE_TITLE,
        parent_is_database=is_database_child(page_text),
    )


def parse_databases(text: str) -> list[DatabaseInfo]:
    """Parse the database list from a Notion search response.

    Args:
        text: Raw response JSON.

    Returns:
        One DatabaseInfo per complete database object that has an id,
        in response order. Empty for empty or unrelated input.
    """
    databases: list[DatabaseInfo] = []
    if not text:
        return databases

    for span in iter_entities(text, "database"):
        record = build_database_record(span["text"])
        if record is None:
            logger.warning(f"Skipping database without id at offset {span['start']}")
            continue
        databases.append(record)

    logger.debug(f"Parsed {len(databases)} databases")
    return databases


def parse_pages(text: str) -> list[PageInfo]:
    """Parse the page list from a Notion search or query response.

    Args:
        text: Raw response JSON.

    Returns:
        One PageInfo per complete page object that has an id, in
        response order.
    """
    pages: list[PageInfo] = []
    if not text:
        return pages

    for span in iter_entities(text, "page"):
        record = build_page_record(span["text"])
        if record is None:
            logger.warning(f"Skipping page without id at offset {span['start']}")
            continue
        pages.append(record)

    logger.debug(f"Parsed {len(pages)} pages")
    return pages
