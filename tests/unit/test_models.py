"""
Unit tests for tool argument models.
"""

import pytest
from pydantic import ValidationError

from mattermost_connector.models import GetChannelHistoryArgs, ListChannelsArgs


class TestListChannelsArgs:
    """Tests for ListChannelsArgs."""

    def test_defaults(self):
        args = ListChannelsArgs()
        assert args.limit == 100
        assert args.page == 0
        assert args.include_private is False

    def test_null_values_use_defaults(self):
        args = ListChannelsArgs(limit=None, page=None, include_private=None)
        assert (args.limit, args.page, args.include_private) == (100, 0, False)

    @pytest.mark.parametrize("limit,expected", [(1, 1), (200, 200), (201, 200), (-5, 1), (0, 100)])
    def test_limit_clamped(self, limit, expected):
        assert ListChannelsArgs(limit=limit).limit == expected

    def test_float_limit_from_json_number(self):
        assert ListChannelsArgs(limit=50.0).limit == 50

    def test_fractional_limit_rejected(self):
        with pytest.raises(ValidationError):
            ListChannelsArgs(limit=2.5)


class TestGetChannelHistoryArgs:
    """Tests for GetChannelHistoryArgs."""

    def test_channel_id_required(self):
        with pytest.raises(ValidationError):
            GetChannelHistoryArgs()

    @pytest.mark.parametrize("limit", [None, 0, -1])
    def test_unbounded_limits(self, limit):
        args = GetChannelHistoryArgs(channel_id="C1", limit=limit)
        assert args.limit is None
        assert args.fetch_all is True

    def test_bounded_limit(self):
        args = GetChannelHistoryArgs(channel_id="C1", limit=25, page=2)
        assert args.fetch_all is False
        assert (args.limit, args.page) == (25, 2)

    def test_negative_page_clamped(self):
        assert GetChannelHistoryArgs(channel_id="C1", page=-1).page == 0

    def test_unknown_arguments_ignored(self):
        args = GetChannelHistoryArgs(channel_id="C1", cursor="whatever")
        assert not hasattr(args, "cursor")
