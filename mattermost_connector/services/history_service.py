"""Channel history retrieval."""

from typing import Any, Dict

from mattermost_connector.core.logging import get_logger
from mattermost_connector.models import GetChannelHistoryArgs
from mattermost_connector.services.filters import resolve_filters
from mattermost_connector.services.mattermost_client import MattermostClient
from mattermost_connector.services.normalizer import normalize_posts
from mattermost_connector.services.pagination import fetch_page

logger = get_logger(__name__)


async def get_channel_history(
    client: MattermostClient, args: GetChannelHistoryArgs
) -> Dict[str, Any]:
    """
    Fetch a channel's posts, either one page or all of them.

    Filters are resolved before any request is made, so an invalid date
    never reaches the API. A failure anywhere fails the whole call; no
    partial result is returned.
    """
    filters = resolve_filters(
        since_date=args.since_date,
        before_date=args.before_date,
        before_post_id=args.before_post_id,
        after_post_id=args.after_post_id,
    )

    if args.fetch_all:
        envelope = await client.get_all_posts_for_channel(
            args.channel_id, **filters.upstream_params()
        )
    else:
        envelope = await fetch_page(client, args.channel_id, args.limit, args.page, filters)

    posts = normalize_posts(envelope, filters)
    logger.info(
        "Channel history ready",
        extra={
            "channel_id": args.channel_id,
            "posts": len(posts),
            "fetch_all": args.fetch_all,
        },
    )

    return {
        "posts": posts,
        "total_posts": len(posts),
        "has_next": not args.fetch_all and bool(envelope.get("next_post_id")),
        "has_prev": not args.fetch_all and bool(envelope.get("prev_post_id")),
        "page": None if args.fetch_all else args.page,
        "per_page": None if args.fetch_all else args.limit,
        "filters": {
            "since_date": args.since_date or None,
            "before_date": args.before_date or None,
            "before_post_id": args.before_post_id or None,
            "after_post_id": args.after_post_id or None,
        },
    }
