"""Service modules."""

from mattermost_connector.services.channel_service import list_channels
from mattermost_connector.services.history_service import get_channel_history
from mattermost_connector.services.mattermost_client import MattermostClient

__all__ = ["MattermostClient", "get_channel_history", "list_channels"]
