"""Load page titles from a Notion database."""

import logging
from typing import TYPE_CHECKING

from notion_extract.entities import iter_pages
from notion_extract.properties import extract_page_id, extract_title_property
from notion_extract.records import normalize_id

if TYPE_CHECKING:
    from notion_extract.client import RateLimitedNotionClient

logger = logging.getLogger(__name__)


def load_page_titles(
    client: "RateLimitedNotionClient",
    database_id: str,
    title_properties: tuple[str, ...] = ("Name", "Title"),
) -> list[tuple[str, str]]:
    """Query a database and collect the title of every page.

    Each page's title is read from the first of ``title_properties`` that
    yields a non-empty value. Pages without a title are left out.

    Args:
        client: RateLimitedNotionClient instance.
        database_id: Notion database ID.
        title_properties: Candidate title property names, in order.

    Returns:
        List of (page_id, title) pairs with dashes stripped from the IDs.
    """
    logger.info(f"Querying database: {database_id}")
    text = client.query_database(database_id)

    loaded = []
    for page_text in iter_pages(text):
        page_id = normalize_id(extract_page_id(page_text))
        title = ""
        for prop in title_properties:
            title = extract_title_property(page_text, prop)
            if title:
                break
        if not title:
            logger.debug(f"No title found for page {page_id}")
            continue
        loaded.append((page_id, title))
        logger.debug(f"Loaded page: {title} (ID: {page_id})")

    logger.info(f"Loaded {len(loaded)} pages from Notion")
    return loaded
