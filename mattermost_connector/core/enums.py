"""
Enums and constants for the Mattermost connector.
"""

from enum import Enum
from typing import Optional, Set


class ChannelType(str, Enum):
    """Mattermost channel type codes."""

    OPEN = "O"
    PRIVATE = "P"
    DIRECT = "D"
    GROUP = "G"


class ChannelSource(str, Enum):
    """Where a channel listing is read from."""

    PUBLIC = "public"
    ALL_VISIBLE = "all_visible"

    @classmethod
    def from_include_private(cls, include_private: bool) -> "ChannelSource":
        """Map the tool's include_private flag onto a source."""
        return cls.ALL_VISIBLE if include_private else cls.PUBLIC

    @property
    def allowed_types(self) -> Optional[Set[str]]:
        """Channel types this source may return; None means no restriction."""
        if self is ChannelSource.PUBLIC:
            return {ChannelType.OPEN.value}
        return None


class ToolName(str, Enum):
    """Tools served by the connector."""

    LIST_CHANNELS = "mattermost_list_channels"
    GET_CHANNEL_HISTORY = "mattermost_get_channel_history"


class Limits:
    """Pagination limits imposed by the Mattermost API."""

    CHANNELS_DEFAULT_PER_PAGE = 100
    CHANNELS_MAX_PER_PAGE = 200
    POSTS_MAX_PER_PAGE = 200
    HISTORY_MAX_PAGES_DEFAULT = 500
