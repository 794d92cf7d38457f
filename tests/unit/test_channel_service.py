"""
Unit tests for channel listing.
"""

import pytest

from mattermost_connector.core.enums import ChannelSource
from mattermost_connector.core.exceptions import MalformedUpstreamResponseError
from mattermost_connector.models import ListChannelsArgs
from mattermost_connector.services.channel_service import list_channels

MIXED_CHANNELS = [
    {"id": "o1", "name": "town-square", "display_name": "Town Square", "type": "O",
     "purpose": "", "header": "", "total_msg_count": 42, "team_id": "team-1"},
    {"id": "p1", "name": "secret", "display_name": "Secret", "type": "P",
     "purpose": "shh", "header": "", "total_msg_count": 3},
    {"id": "d1", "name": "u1__u2", "display_name": "", "type": "D",
     "purpose": "", "header": "", "total_msg_count": 9},
    {"id": "g1", "name": "group", "display_name": "a, b, c", "type": "G",
     "purpose": "", "header": "", "total_msg_count": 1},
]


class TestChannelSource:
    """Tests for ChannelSource selection."""

    def test_from_include_private(self):
        assert ChannelSource.from_include_private(False) is ChannelSource.PUBLIC
        assert ChannelSource.from_include_private(True) is ChannelSource.ALL_VISIBLE

    def test_public_allows_only_open(self):
        assert ChannelSource.PUBLIC.allowed_types == {"O"}
        assert ChannelSource.ALL_VISIBLE.allowed_types is None


class TestListChannels:
    """Tests for list_channels."""

    @pytest.mark.asyncio
    async def test_public_source(self, mock_client):
        mock_client.get_channels.return_value = {"channels": MIXED_CHANNELS, "total_count": 4}

        result = await list_channels(mock_client, ListChannelsArgs())

        mock_client.get_channels.assert_awaited_once_with(100, 0)
        mock_client.get_my_channels.assert_not_awaited()
        assert [c["id"] for c in result["channels"]] == ["o1"]
        assert result["page"] == 0
        assert result["per_page"] == 100

    @pytest.mark.asyncio
    async def test_public_source_never_leaks_private_or_direct(self, mock_client):
        mock_client.get_channels.return_value = {"channels": MIXED_CHANNELS[1:], "total_count": 3}

        result = await list_channels(mock_client, ListChannelsArgs(include_private=False))

        assert result["channels"] == []

    @pytest.mark.asyncio
    async def test_all_visible_source(self, mock_client):
        mock_client.get_my_channels.return_value = {"channels": MIXED_CHANNELS, "total_count": 4}

        result = await list_channels(
            mock_client, ListChannelsArgs(include_private=True, limit=10, page=2)
        )

        mock_client.get_my_channels.assert_awaited_once_with(10, 2)
        assert [c["id"] for c in result["channels"]] == ["o1", "p1", "d1", "g1"]
        assert result["total_count"] == 4

    @pytest.mark.asyncio
    async def test_all_visible_keeps_unknown_channel_types(self, mock_client):
        unknown = {"id": "x1", "name": "future", "display_name": "Future", "type": "X",
                   "purpose": "", "header": "", "total_msg_count": 0}
        mock_client.get_my_channels.return_value = {
            "channels": MIXED_CHANNELS + [unknown], "total_count": 5
        }

        result = await list_channels(mock_client, ListChannelsArgs(include_private=True))

        assert [c["id"] for c in result["channels"]] == ["o1", "p1", "d1", "g1", "x1"]
        assert result["total_count"] == 5

    @pytest.mark.asyncio
    async def test_public_total_count_is_upstream_count(self, mock_client):
        """total_count is what Mattermost reports, before non-open channels are dropped."""
        mock_client.get_channels.return_value = {"channels": MIXED_CHANNELS, "total_count": 4}

        result = await list_channels(mock_client, ListChannelsArgs())

        assert len(result["channels"]) == 1
        assert result["total_count"] == 4

    @pytest.mark.asyncio
    async def test_channel_projection(self, mock_client):
        mock_client.get_channels.return_value = {"channels": MIXED_CHANNELS[:1], "total_count": 1}

        result = await list_channels(mock_client, ListChannelsArgs())

        assert result["channels"][0] == {
            "id": "o1",
            "name": "town-square",
            "display_name": "Town Square",
            "type": "O",
            "purpose": "",
            "header": "",
            "total_msg_count": 42,
        }

    @pytest.mark.asyncio
    async def test_missing_total_count_defaults_to_zero(self, mock_client):
        mock_client.get_channels.return_value = {"channels": []}

        result = await list_channels(mock_client, ListChannelsArgs())

        assert result["total_count"] == 0

    @pytest.mark.asyncio
    @pytest.mark.parametrize("response", [{"status": "OK"}, None, {"channels": None}, ["o1"]])
    async def test_missing_channels_raises_with_raw_response(self, mock_client, response):
        mock_client.get_channels.return_value = response

        with pytest.raises(MalformedUpstreamResponseError) as exc_info:
            await list_channels(mock_client, ListChannelsArgs())

        assert exc_info.value.details["raw_response"] == response
