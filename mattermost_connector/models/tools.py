"""
Validated tool arguments.

Out-of-range pagination values are clamped rather than rejected; values of
the wrong type fail validation.
"""

from typing import Optional

from pydantic import BaseModel, ConfigDict, field_validator

from mattermost_connector.core.enums import Limits


class ListChannelsArgs(BaseModel):
    """Arguments of mattermost_list_channels."""

    model_config = ConfigDict(extra="ignore")

    limit: int = Limits.CHANNELS_DEFAULT_PER_PAGE
    page: int = 0
    include_private: bool = False

    @field_validator("limit", mode="before")
    @classmethod
    def default_limit(cls, v):
        # 0 or null means "use the default", as the tool schema advertises
        return v or Limits.CHANNELS_DEFAULT_PER_PAGE

    @field_validator("limit")
    @classmethod
    def clamp_limit(cls, v: int) -> int:
        return max(1, min(v, Limits.CHANNELS_MAX_PER_PAGE))

    @field_validator("page", mode="before")
    @classmethod
    def default_page(cls, v):
        return v or 0

    @field_validator("page")
    @classmethod
    def clamp_page(cls, v: int) -> int:
        return max(0, v)

    @field_validator("include_private", mode="before")
    @classmethod
    def default_include_private(cls, v):
        return False if v is None else v


class GetChannelHistoryArgs(BaseModel):
    """Arguments of mattermost_get_channel_history."""

    model_config = ConfigDict(extra="ignore")

    channel_id: str
    limit: Optional[int] = None
    page: int = 0
    since_date: Optional[str] = None
    before_date: Optional[str] = None
    before_post_id: Optional[str] = None
    after_post_id: Optional[str] = None

    @field_validator("limit")
    @classmethod
    def unbounded_when_not_positive(cls, v: Optional[int]) -> Optional[int]:
        if v is None or v <= 0:
            return None
        return v

    @field_validator("page", mode="before")
    @classmethod
    def default_page(cls, v):
        return v or 0

    @field_validator("page")
    @classmethod
    def clamp_page(cls, v: int) -> int:
        return max(0, v)

    @property
    def fetch_all(self) -> bool:
        """True when every message is requested rather than one page."""
        return self.limit is None
