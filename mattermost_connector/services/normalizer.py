"""
Turns page envelopes into ordered display records.
"""

from typing import Any, Dict, List, Optional

from mattermost_connector.core.exceptions import InconsistentPageDataError
from mattermost_connector.services.filters import FilterSet, from_epoch_ms


def format_timestamp(epoch_ms: int) -> str:
    """Render epoch milliseconds as an ISO 8601 UTC string, e.g. 2025-12-18T10:00:00.000Z."""
    return from_epoch_ms(epoch_ms).isoformat(timespec="milliseconds").replace("+00:00", "Z")


def _display_record(post_id: str, post: Dict[str, Any]) -> Dict[str, Any]:
    create_at = post.get("create_at")
    if not isinstance(create_at, int) or isinstance(create_at, bool):
        raise InconsistentPageDataError(post_id, reason="has no usable create_at timestamp")
    return {
        "id": post.get("id"),
        "user_id": post.get("user_id"),
        "message": post.get("message", ""),
        "create_at": format_timestamp(create_at),
        "create_at_ts": create_at,
        "reply_count": post.get("reply_count", 0),
        "root_id": post.get("root_id") or None,
    }


def normalize_posts(
    envelope: Dict[str, Any], filters: Optional[FilterSet] = None
) -> List[Dict[str, Any]]:
    """
    Resolve an envelope's order into display records.

    Only records inside [filters.since_ts, filters.before_ts) are kept, in
    their original relative order. The upstream 'since' filter also matches
    posts edited after that instant, so the lower bound is re-checked here.
    The internal epoch field is removed from the output.

    Raises:
        InconsistentPageDataError: If an ordered id has no entry in the post map,
            or its post has no creation timestamp
    """
    posts = envelope.get("posts") or {}
    records = []
    for post_id in envelope.get("order") or []:
        post = posts.get(post_id)
        if post is None:
            raise InconsistentPageDataError(post_id)
        records.append(_display_record(post_id, post))

    if filters is not None and filters.since_ts is not None:
        records = [record for record in records if record["create_at_ts"] >= filters.since_ts]
    if filters is not None and filters.before_ts is not None:
        records = [record for record in records if record["create_at_ts"] < filters.before_ts]

    for record in records:
        del record["create_at_ts"]
    return records
