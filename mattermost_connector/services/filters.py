"""
Date and cursor filter resolution for channel history requests.

The posts endpoint filters natively on a lower time bound (``since``) and
on post-id cursors. It has no upper time bound, so ``before_date`` is kept
as a timestamp and applied to the results afterwards.
"""

import re
from dataclasses import dataclass
from datetime import date, datetime, timedelta, timezone
from typing import Any, Dict, Optional

from mattermost_connector.core.exceptions import InvalidDateFormatError

EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)

_DATE_ONLY = re.compile(r"^\d{4}-\d{2}-\d{2}$")


@dataclass(frozen=True)
class FilterSet:
    """
    Resolved filters for one history request.

    since_ts and before_ts are epoch milliseconds bounding the half-open
    interval [since_ts, before_ts). Only since_ts is sent upstream.
    """

    since_ts: Optional[int] = None
    before_ts: Optional[int] = None
    before_post_id: Optional[str] = None
    after_post_id: Optional[str] = None

    def upstream_params(self) -> Dict[str, Any]:
        """Filters understood by the posts endpoint."""
        return {
            "since": self.since_ts,
            "before": self.before_post_id,
            "after": self.after_post_id,
        }


def to_epoch_ms(instant: datetime) -> int:
    """Convert an aware datetime to integer epoch milliseconds."""
    return (instant - EPOCH) // timedelta(milliseconds=1)


def from_epoch_ms(value: int) -> datetime:
    """Convert epoch milliseconds to an aware UTC datetime."""
    return EPOCH + timedelta(milliseconds=value)


def parse_date(field: str, value: str) -> int:
    """
    Parse a calendar date or ISO 8601 timestamp into epoch milliseconds.

    Calendar dates mean midnight UTC. Timestamps without an offset are
    read as UTC.

    Raises:
        InvalidDateFormatError: If the value is not a valid date or timestamp
    """
    text = value.strip()
    try:
        if _DATE_ONLY.match(text):
            day = date.fromisoformat(text)
            instant = datetime(day.year, day.month, day.day, tzinfo=timezone.utc)
        else:
            if text[-1:] in ("Z", "z"):
                text = text[:-1] + "+00:00"
            instant = datetime.fromisoformat(text)
            if instant.tzinfo is None:
                instant = instant.replace(tzinfo=timezone.utc)
    except ValueError as e:
        raise InvalidDateFormatError(field, value) from e
    return to_epoch_ms(instant)


def resolve_filters(
    since_date: Optional[str] = None,
    before_date: Optional[str] = None,
    before_post_id: Optional[str] = None,
    after_post_id: Optional[str] = None,
) -> FilterSet:
    """Turn the tool's filter arguments into a FilterSet. Empty strings count as absent."""
    return FilterSet(
        since_ts=parse_date("since_date", since_date) if since_date else None,
        before_ts=parse_date("before_date", before_date) if before_date else None,
        before_post_id=before_post_id or None,
        after_post_id=after_post_id or None,
    )
