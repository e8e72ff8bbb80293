"""Connection settings for the Notion API."""

import logging
from dataclasses import dataclass, field

from notion_extract.utils import get_env, get_notion_token

logger = logging.getLogger(__name__)

DEFAULT_CACHE_DURATION = 300.0
KEY_PREFIXES = ("ntn_", "secret_")


@dataclass
class NotionConfig:
    """API key, response cache duration and named database IDs.

    Attributes:
        api_key: Notion integration token (starts with "ntn_" or "secret_").
        cache_duration: Seconds to cache database query responses (0 = no cache).
        databases: Friendly name to database ID mapping.
    """

    api_key: str = ""
    cache_duration: float = DEFAULT_CACHE_DURATION
    databases: dict[str, str] = field(default_factory=dict)

    def __post_init__(self) -> None:
        if self.cache_duration < 0:
            self.cache_duration = 0.0

    def is_valid(self) -> bool:
        """Check if the configuration is valid."""
        return bool(self.api_key)

    def key_warning(self) -> str | None:
        """Return a warning if the API key looks wrong, else None."""
        if not self.api_key:
            return "API key is required. Get one from: https://www.notion.so/my-integrations"
        if not self.api_key.startswith(KEY_PREFIXES):
            return "API key should start with 'ntn_' or 'secret_'"
        return None

    def database_id(self, name: str) -> str:
        """Look up a database ID by its configured name.

        Raises:
            KeyError: If no database is configured under that name.
        """
        try:
            return self.databases[name]
        except KeyError:
            raise KeyError(f"No database configured as {name!r}") from None

    @classmethod
    def from_env(cls) -> "NotionConfig":
        """Build a config from NOTION_API_TOKEN and NOTION_CACHE_DURATION.

        Raises:
            ValueError: If NOTION_API_TOKEN is not set.
        """
        api_key = get_notion_token()
        raw_duration = get_env("NOTION_CACHE_DURATION")
        cache_duration = DEFAULT_CACHE_DURATION
        if raw_duration:
            try:
                cache_duration = float(raw_duration)
            except ValueError:
                logger.warning(
                    f"Invalid NOTION_CACHE_DURATION {raw_duration!r}, using {DEFAULT_CACHE_DURATION}s"
                )
        config = cls(api_key=api_key, cache_duration=cache_duration)
        warning = config.key_warning()
        if warning:
            logger.warning(warning)
        return config
