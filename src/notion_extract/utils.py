"""Notion Extract Utilities - Token and ID helpers."""

import os
import re
import logging
from pathlib import Path

from dotenv import load_dotenv

logger = logging.getLogger(__name__)

# Auto-load .env from project root
_env_loaded = False


def _ensure_env_loaded() -> None:
    """Load .env file if not already loaded."""
    global _env_loaded
    if _env_loaded:
        return

    # Find project root (look for .env going up from this file)
    current = Path(__file__).resolve()
    for parent in [current] + list(current.parents):
        env_file = parent / ".env"
        if env_file.exists():
            load_dotenv(env_file)
            logger.debug(f"Loaded environment from {env_file}")
            break

    _env_loaded = True


def get_env(name: str, default: str | None = None) -> str | None:
    """Read an environment variable after loading .env."""
    _ensure_env_loaded()
    return os.environ.get(name, default)


def get_notion_token() -> str:
    """Get Notion API token from environment.

    Automatically loads .env file from project root if present.

    Returns:
        The NOTION_API_TOKEN environment variable value.

    Raises:
        ValueError: If NOTION_API_TOKEN is not set.
    """
    token = get_env("NOTION_API_TOKEN")
    if not token:
        raise ValueError(
            "NOTION_API_TOKEN environment variable not set.\n"
            "Get your token at: https://www.notion.so/my-integrations"
        )
    return token


def format_uuid(raw_id: str) -> str:
    """Format a 32-character Notion ID as a dashed UUID.

    Example:
        >>> format_uuid("2d240e6d8f9780778b8dfd8dae6ed382")
        '2d240e6d-8f97-8077-8b8d-fd8dae6ed382'

    Raises:
        ValueError: If the ID is not 32 hex characters (dashes ignored).
    """
    compact = raw_id.replace("-", "").lower()
    if not re.fullmatch(r"[a-f0-9]{32}", compact):
        raise ValueError(f"Not a Notion ID: {raw_id}")
    return f"{compact[:8]}-{compact[8:12]}-{compact[12:16]}-{compact[16:20]}-{compact[20:]}"


def extract_id_from_url(url: str) -> str:
    """Extract the 32-character page or database ID from a Notion URL.

    Supports formats:
    - https://notion.so/workspace/Page-Title-abc123def456
    - https://notion.so/abc123def456
    - https://www.notion.so/workspace/abc123def456?v=...

    Args:
        url: A Notion page or database URL.

    Returns:
        The ID without dashes, matching the form of parsed records.

    Raises:
        ValueError: If no ID can be extracted from the URL.
    """
    # Remove query params
    url = url.split("?")[0]

    last_segment = url.rstrip("/").split("/")[-1]

    # 32 hex chars at the END of the segment (titles can contain hex chars like "face")
    match = re.search(r"([a-f0-9]{32})$", last_segment.replace("-", ""))
    if match:
        return match.group(1)

    raise ValueError(f"Could not extract ID from URL: {url}")
