"""
Page fetching for channel history.

fetch_page issues exactly one upstream call. fetch_all follows the
forward cursor page by page, strictly sequentially since each cursor
comes from the previous response, and merges the pages into one
duplicate-free ordering.
"""

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, Dict, List, Optional, Set

from mattermost_connector.core.exceptions import (
    MalformedUpstreamResponseError,
    PaginationLimitExceededError,
)
from mattermost_connector.core.logging import get_logger
from mattermost_connector.services.filters import FilterSet

if TYPE_CHECKING:
    from mattermost_connector.services.mattermost_client import MattermostClient

logger = get_logger(__name__)


@dataclass
class AccumulatedResult:
    """Posts merged across every page of one unbounded request."""

    order: List[str] = field(default_factory=list)
    posts: Dict[str, Dict[str, Any]] = field(default_factory=dict)
    pages_fetched: int = 0
    _ordered_ids: Set[str] = field(default_factory=set, init=False, repr=False)

    def add_page(self, envelope: Dict[str, Any]) -> int:
        """Merge one page envelope; returns how many new ids were appended."""
        appended = 0
        for post_id in envelope.get("order") or []:
            if post_id not in self._ordered_ids:
                self._ordered_ids.add(post_id)
                self.order.append(post_id)
                appended += 1
        # Later pages overwrite earlier copies of the same post.
        self.posts.update(envelope.get("posts") or {})
        self.pages_fetched += 1
        return appended

    def to_envelope(self) -> Dict[str, Any]:
        """Express the merged result as an exhausted page envelope."""
        return {
            "order": list(self.order),
            "posts": dict(self.posts),
            "next_post_id": "",
            "prev_post_id": "",
        }


def check_envelope(envelope: Any) -> Dict[str, Any]:
    """
    Ensure a posts response has a list 'order' and a dict 'posts'.

    Raises:
        MalformedUpstreamResponseError: If the response has another shape
    """
    if not isinstance(envelope, dict):
        raise MalformedUpstreamResponseError("order", envelope)
    if not isinstance(envelope.get("order"), list):
        raise MalformedUpstreamResponseError("order", envelope)
    if not isinstance(envelope.get("posts"), dict):
        raise MalformedUpstreamResponseError("posts", envelope, expected="map")
    return envelope


async def fetch_page(
    client: "MattermostClient",
    channel_id: str,
    limit: int,
    page: int,
    filters: FilterSet,
) -> Dict[str, Any]:
    """Fetch a single bounded page. Upstream errors propagate unchanged."""
    envelope = await client.get_posts_for_channel(
        channel_id, limit, page, **filters.upstream_params()
    )
    return check_envelope(envelope)


async def fetch_all(
    client: "MattermostClient",
    channel_id: str,
    since: Optional[int] = None,
    before: Optional[str] = None,
    after: Optional[str] = None,
    page_size: int = 200,
    max_pages: int = 500,
) -> AccumulatedResult:
    """
    Fetch every page of a channel's posts by following next_post_id.

    Stops when a page has no next cursor or comes back empty.

    Raises:
        PaginationLimitExceededError: If max_pages pages were fetched without
            exhausting the cursor, or the cursor repeats itself
    """
    result = AccumulatedResult()
    cursor = after
    seen_cursors: Set[str] = set()

    while True:
        if result.pages_fetched >= max_pages:
            raise PaginationLimitExceededError(
                channel_id, result.pages_fetched, f"page limit of {max_pages} reached"
            )

        logger.debug(
            "Fetching history page",
            extra={"channel_id": channel_id, "cursor": cursor, "per_page": page_size},
        )
        envelope = await client.get_posts_for_channel(
            channel_id, page_size, 0, since=since, before=before, after=cursor
        )
        check_envelope(envelope)
        result.add_page(envelope)

        if not envelope.get("order"):
            break

        next_cursor = envelope.get("next_post_id")
        if not next_cursor:
            break

        if next_cursor in seen_cursors or next_cursor == after:
            raise PaginationLimitExceededError(
                channel_id, result.pages_fetched, f"cursor {next_cursor} repeated"
            )
        seen_cursors.add(next_cursor)
        cursor = next_cursor

    logger.info(
        "Fetched channel history",
        extra={
            "channel_id": channel_id,
            "pages": result.pages_fetched,
            "posts": len(result.order),
        },
    )
    return result
