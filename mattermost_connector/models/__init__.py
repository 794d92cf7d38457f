"""Tool argument models."""

from mattermost_connector.models.tools import GetChannelHistoryArgs, ListChannelsArgs

__all__ = ["GetChannelHistoryArgs", "ListChannelsArgs"]
