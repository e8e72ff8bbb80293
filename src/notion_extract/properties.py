"""Property value extraction from Notion page JSON.

Each extractor takes the raw JSON of a page (or a whole query response) and
a property name, and returns a typed value. A lookup first anchors on the
quoted property name, then searches forward for the property's type key
within a fixed window. Hits beyond the window are ignored so that one
property never picks up a same-named sub-key of a later property.

Extractors never raise on bad data: missing keys, out-of-window hits and
malformed values all produce the documented default.
"""

import logging

from notion_extract.scan import (
    extract_string_value,
    find_matching_brace,
    iter_string_values,
    locate_key,
    locate_key_within,
    value_start,
)

logger = logging.getLogger(__name__)

# Maximum forward distance (in characters) from the property name anchor
TITLE_WINDOW = 500
NUMBER_WINDOW = 300
SELECT_WINDOW = 200
SELECT_NAME_WINDOW = 100
MULTI_SELECT_WINDOW = 200
RELATION_WINDOW = 200
URL_WINDOW = 500

_NUMBER_CHARS = frozenset("0123456789-+.eE")


def _plain_text_after(text: str, property_name: str, window: int) -> str | None:
    """Read the first plain_text within window of the property name."""
    prop_pos = locate_key(text, property_name)
    if prop_pos is None:
        return None
    plain_pos = locate_key_within(text, "plain_text", prop_pos, window)
    if plain_pos is None:
        return None
    return extract_string_value(text, "plain_text", plain_pos)


def extract_title_property(text: str, property_name: str, window: int = TITLE_WINDOW) -> str:
    """Extract the text of a title property.

    Returns:
        The first plain_text segment, or "" if not found.
    """
    return _plain_text_after(text, property_name, window) or ""


def extract_rich_text_property(
    text: str, property_name: str, window: int = TITLE_WINDOW
) -> str | None:
    """Extract the text of a rich_text property.

    Unlike titles, a missing rich text value is reported as None so callers
    can tell "empty" from "not there".
    """
    return _plain_text_after(text, property_name, window)


def extract_number_property(
    text: str, property_name: str, default: int = 0, window: int = NUMBER_WINDOW
) -> int:
    """Extract a number property, truncated to int.

    Args:
        text: Raw page JSON.
        property_name: Property name (e.g. "Count").
        default: Value returned for null, missing or unparseable numbers.
        window: Maximum distance from the property name to "number".

    Returns:
        The integer value, or default.
    """
    prop_pos = locate_key(text, property_name)
    if prop_pos is None:
        return default
    number_pos = locate_key_within(text, "number", prop_pos, window)
    if number_pos is None:
        return default

    start = value_start(text, number_pos, "number")
    if start is None:
        return default
    end = start
    while end < len(text) and text[end] in _NUMBER_CHARS:
        end += 1
    token = text[start:end]
    if not token:
        # null, a string, or anything else that is not a number
        return default
    try:
        return int(token)
    except ValueError:
        pass
    try:
        return int(float(token))
    except (ValueError, OverflowError):
        logger.debug(f"Unparseable number for {property_name!r}: {token!r}")
        return default


def extract_select_property(
    text: str,
    property_name: str,
    window: int = SELECT_WINDOW,
    name_window: int = SELECT_NAME_WINDOW,
) -> str:
    """Extract the option name of a select property, or "" if unset."""
    prop_pos = locate_key(text, property_name)
    if prop_pos is None:
        return ""
    select_pos = locate_key_within(text, "select", prop_pos, window)
    if select_pos is None:
        return ""
    name_pos = locate_key_within(text, "name", select_pos, name_window)
    if name_pos is None:
        return ""
    return extract_string_value(text, "name", name_pos) or ""


def _array_values(text: str, type_pos: int, type_key: str, value_key: str) -> list[str]:
    """Collect value_key strings from the array following type_key."""
    start = value_start(text, type_pos, type_key)
    if start is None:
        return []
    array_start = text.find("[", start)
    if array_start < 0:
        return []
    array_end = find_matching_brace(text, array_start, skip_strings=True)
    if array_end is None:
        logger.debug(f"Unterminated {type_key} array at offset {array_start}")
        return []
    return [
        value
        for value in iter_string_values(text, value_key, array_start, array_end + 1)
        if value
    ]


def extract_multi_select_property(
    text: str, property_name: str, window: int = MULTI_SELECT_WINDOW
) -> list[str]:
    """Extract the option names of a multi_select property, in order."""
    prop_pos = locate_key(text, property_name)
    if prop_pos is None:
        return []
    ms_pos = locate_key_within(text, "multi_select", prop_pos, window)
    if ms_pos is None:
        return []
    return _array_values(text, ms_pos, "multi_select", "name")


def extract_relation_property(
    text: str, property_name: str, window: int = RELATION_WINDOW
) -> list[str]:
    """Extract the related page IDs of a relation property, in order.

    Falls back to the lower-cased property name when the exact name is
    not present.
    """
    prop_pos = locate_key(text, property_name)
    if prop_pos is None:
        prop_pos = locate_key(text, property_name.lower())
        if prop_pos is None:
            return []
    relation_pos = locate_key_within(text, "relation", prop_pos, window)
    if relation_pos is None:
        return []
    return _array_values(text, relation_pos, "relation", "id")


def extract_image_url(text: str, property_name: str, window: int = URL_WINDOW) -> str | None:
    """Extract the first file or external URL of a files property."""
    prop_pos = locate_key(text, property_name)
    if prop_pos is None:
        return None
    url_pos = locate_key_within(text, "url", prop_pos, window)
    if url_pos is None:
        return None
    return extract_string_value(text, "url", url_pos)


def extract_page_id(page_text: str) -> str:
    """Extract the page ID (first "id" value) from a page JSON object."""
    return extract_string_value(page_text, "id") or ""

