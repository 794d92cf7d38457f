"""
Mattermost REST API client.

Thin async wrapper over the v4 endpoints the connector needs. Every
transport or HTTP failure surfaces as UpstreamTransportError; there is no
retry or backoff here.
"""

from typing import Any, Dict, Optional

import httpx

from mattermost_connector.core.config import Settings
from mattermost_connector.core.enums import Limits
from mattermost_connector.core.exceptions import UpstreamTransportError
from mattermost_connector.core.logging import get_logger
from mattermost_connector.services.pagination import fetch_all

logger = get_logger(__name__)


class MattermostClient:
    """Async client for the Mattermost v4 API."""

    def __init__(self, settings: Settings, transport: Optional[httpx.AsyncBaseTransport] = None):
        self.team_id = settings.team_id
        self.history_max_pages = settings.history_max_pages
        self._http = httpx.AsyncClient(
            base_url=settings.url,
            headers={
                "Authorization": f"Bearer {settings.token}",
                "Accept": "application/json",
            },
            timeout=settings.request_timeout_seconds,
            transport=transport,
        )

    async def __aenter__(self) -> "MattermostClient":
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._http.aclose()

    async def _get(self, path: str, params: Optional[Dict[str, Any]] = None) -> Any:
        """GET a path and return the decoded JSON body."""
        query = {key: value for key, value in (params or {}).items() if value is not None}
        logger.debug("Mattermost request", extra={"path": path, "params": query})
        try:
            response = await self._http.get(path, params=query)
        except httpx.HTTPError as e:
            raise UpstreamTransportError(
                f"Request to Mattermost failed: {e}", path=path
            ) from e

        if response.is_error:
            raise UpstreamTransportError(
                _error_message(response), status_code=response.status_code, path=path
            )

        try:
            return response.json()
        except ValueError as e:
            raise UpstreamTransportError(
                "Mattermost returned a non-JSON response",
                status_code=response.status_code,
                path=path,
            ) from e

    # ==================== Channels ====================

    async def get_channels(self, limit: int, page: int) -> Any:
        """Public channels of the configured team."""
        body = await self._get(
            f"/teams/{self.team_id}/channels",
            {"page": page, "per_page": limit},
        )
        return _wrap_channel_list(body)

    async def get_my_channels(self, limit: int, page: int) -> Any:
        """Channels visible to the token's user across all teams, private and direct included."""
        body = await self._get("/users/me/channels", {"page": page, "per_page": limit})
        return _wrap_channel_list(body)

    # ==================== Posts ====================

    async def get_posts_for_channel(
        self,
        channel_id: str,
        limit: int,
        page: int = 0,
        since: Optional[int] = None,
        before: Optional[str] = None,
        after: Optional[str] = None,
    ) -> Dict[str, Any]:
        """Fetch one page of a channel's posts as a raw page envelope."""
        return await self._get(
            f"/channels/{channel_id}/posts",
            {
                "page": page,
                "per_page": limit,
                "since": since,
                "before": before,
                "after": after,
            },
        )

    async def get_all_posts_for_channel(
        self,
        channel_id: str,
        since: Optional[int] = None,
        before: Optional[str] = None,
        after: Optional[str] = None,
    ) -> Dict[str, Any]:
        """Follow the post cursor to exhaustion and return one merged envelope."""
        accumulated = await fetch_all(
            self,
            channel_id,
            since=since,
            before=before,
            after=after,
            page_size=Limits.POSTS_MAX_PER_PAGE,
            max_pages=self.history_max_pages,
        )
        return accumulated.to_envelope()


def _wrap_channel_list(body: Any) -> Any:
    """The channel endpoints return bare arrays; give them a counted envelope."""
    if isinstance(body, list):
        return {"channels": body, "total_count": len(body)}
    return body


def _error_message(response: httpx.Response) -> str:
    try:
        payload = response.json()
    except ValueError:
        payload = None
    if isinstance(payload, dict) and payload.get("message"):
        return f"Mattermost API error ({response.status_code}): {payload['message']}"
    return f"Mattermost API error ({response.status_code}): {response.reason_phrase}"
