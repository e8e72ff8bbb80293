"""Notion Extract Library - Field extraction from raw Notion API JSON text.

Module structure:
- scan: Brace matching, quoted-key lookup and string values
- properties: Typed property extractors (title, number, select, relation, ...)
- entities: Database/page object enumeration
- records: Database and page summary records (with TypedDict types)
- config: Connection settings
- client: Rate-limited, caching API wrapper returning raw JSON text
- loader: Page title loading from a database
- utils: Token and ID utilities
"""

# Scanning primitives
from notion_extract.scan import (
    find_matching_brace,
    locate_key,
    locate_key_within,
    extract_string_value,
    unescape_json_string,
)

# Property extractors
from notion_extract.properties import (
    extract_title_property,
    extract_rich_text_property,
    extract_number_property,
    extract_select_property,
    extract_multi_select_property,
    extract_relation_property,
    extract_image_url,
    extract_page_id,
)

# Entity enumeration
from notion_extract.entities import (
    iter_marked_spans,
    iter_entities,
    iter_pages,
    EntitySpan,
    DATABASE_MARKER,
    PAGE_MARKER,
)

# Records
from notion_extract.records import (
    normalize_id,
    parse_databases,
    parse_pages,
    format_record,
    DatabaseInfo,
    PageInfo,
)

# Config and client
from notion_extract.config import NotionConfig
from notion_extract.client import get_notion_client, RateLimitedNotionClient

# Loader
from notion_extract.loader import load_page_titles

# Utils
from notion_extract.utils import get_notion_token, extract_id_from_url, format_uuid

__all__ = [
    # Scan
    "find_matching_brace",
    "locate_key",
    "locate_key_within",
    "extract_string_value",
    "unescape_json_string",
    # Properties
    "extract_title_property",
    "extract_rich_text_property",
    "extract_number_property",
    "extract_select_property",
    "extract_multi_select_property",
    "extract_relation_property",
    "extract_image_url",
    "extract_page_id",
    # Entities
    "iter_marked_spans",
    "iter_entities",
    "iter_pages",
    "EntitySpan",
    "DATABASE_MARKER",
    "PAGE_MARKER",
    # Records
    "normalize_id",
    "parse_databases",
    "parse_pages",
    "format_record",
    "DatabaseInfo",
    "PageInfo",
    # Config and client
    "NotionConfig",
    "get_notion_client",
    "RateLimitedNotionClient",
    # Loader
    "load_page_titles",
    # Utils
    "get_notion_token",
    "extract_id_from_url",
    "format_uuid",
]
