"""Channel listing."""

from typing import Any, Dict

from mattermost_connector.core.enums import ChannelSource
from mattermost_connector.core.exceptions import MalformedUpstreamResponseError
from mattermost_connector.core.logging import get_logger
from mattermost_connector.models import ListChannelsArgs
from mattermost_connector.services.mattermost_client import MattermostClient

logger = get_logger(__name__)

CHANNEL_FIELDS = (
    "id",
    "name",
    "display_name",
    "type",
    "purpose",
    "header",
    "total_msg_count",
)


async def fetch_channels(
    client: MattermostClient, source: ChannelSource, limit: int, page: int
) -> Any:
    """Read one page of channels from the given source."""
    if source is ChannelSource.ALL_VISIBLE:
        return await client.get_my_channels(limit, page)
    return await client.get_channels(limit, page)


async def list_channels(client: MattermostClient, args: ListChannelsArgs) -> Dict[str, Any]:
    """
    List one page of channels.

    The public source only ever yields open channels. total_count is the
    count reported by Mattermost for the source, before that filtering.

    Raises:
        MalformedUpstreamResponseError: If the response has no channel collection
    """
    source = ChannelSource.from_include_private(args.include_private)
    response = await fetch_channels(client, source, args.limit, args.page)

    if not isinstance(response, dict) or not isinstance(response.get("channels"), list):
        logger.error("API response missing channels array", extra={"source": source.value})
        raise MalformedUpstreamResponseError("channels", response)

    allowed_types = source.allowed_types
    channels = [
        {key: channel.get(key) for key in CHANNEL_FIELDS}
        for channel in response["channels"]
        if allowed_types is None or channel.get("type") in allowed_types
    ]

    return {
        "channels": channels,
        "total_count": response.get("total_count") or 0,
        "page": args.page,
        "per_page": args.limit,
    }
