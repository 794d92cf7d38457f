"""Connector configuration.

Values are layered with the precedence
CLI arguments > environment (and .env) > config.local.json > config.json > defaults.
The resolved Settings object is built once at start-up and handed to the
components that need it.
"""

import argparse
import json
import os
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence, Tuple, Type

from pydantic import (
    AliasChoices,
    BaseModel,
    ConfigDict,
    Field,
    ValidationError,
    field_validator,
    model_validator,
)
from pydantic_settings import (
    BaseSettings,
    JsonConfigSettingsSource,
    PydanticBaseSettingsSource,
    SettingsConfigDict,
)

from mattermost_connector.core.enums import Limits
from mattermost_connector.core.exceptions import ConfigurationError
from mattermost_connector.core.logging import get_logger

logger = get_logger(__name__)

CONFIG_FILE = "config.json"
LOCAL_CONFIG_FILE = "config.local.json"

# field name -> (CLI flag, environment variable)
REQUIRED_FIELDS = {
    "url": ("--url", "MATTERMOST_URL"),
    "token": ("--token", "MATTERMOST_TOKEN"),
    "team_id": ("--team-id", "MATTERMOST_TEAM_ID"),
}

# camelCase keys written by earlier releases of the connector
LEGACY_FILE_KEYS = {
    "mattermostUrl": "url",
    "teamId": "team_id",
}


class MonitoringSettings(BaseModel):
    """Topic monitoring schedule, consumed by an external scheduler."""

    model_config = ConfigDict(populate_by_name=True)

    enabled: bool = False
    schedule: str = ""  # Cron format
    channels: List[str] = Field(default_factory=list)
    topics: List[str] = Field(default_factory=list)
    message_limit: int = Field(
        default=50, validation_alias=AliasChoices("message_limit", "messageLimit")
    )
    notification_channel_id: Optional[str] = Field(
        default=None,
        validation_alias=AliasChoices("notification_channel_id", "notificationChannelId"),
    )
    user_id: Optional[str] = Field(
        default=None, validation_alias=AliasChoices("user_id", "userId")
    )

    @model_validator(mode="after")
    def check_enabled_monitoring(self) -> "MonitoringSettings":
        if not self.enabled:
            return self
        if not self.schedule:
            raise ValueError("Missing schedule in monitoring configuration")
        if not self.channels:
            raise ValueError("No channels specified in monitoring configuration")
        if not self.topics:
            raise ValueError("No topics specified in monitoring configuration")
        return self


class JsonConfigFileSource(JsonConfigSettingsSource):
    """JSON config source that also accepts the legacy camelCase top-level keys."""

    def _read_file(self, file_path: Path) -> Dict[str, Any]:
        data = super()._read_file(file_path)
        for legacy_key, field_name in LEGACY_FILE_KEYS.items():
            if legacy_key in data:
                value = data.pop(legacy_key)
                data.setdefault(field_name, value)
        return data


class Settings(BaseSettings):
    """Connector settings."""

    model_config = SettingsConfigDict(
        env_prefix="MATTERMOST_",
        env_file=".env",
        env_nested_delimiter="__",
        json_file=(CONFIG_FILE, LOCAL_CONFIG_FILE),
        case_sensitive=False,
        extra="ignore",
    )

    # Mattermost API
    url: str = ""  # e.g. https://mattermost.example.com/api/v4
    token: str = ""
    team_id: str = ""
    request_timeout_seconds: float = 30.0

    # History retrieval
    history_max_pages: int = Field(default=Limits.HISTORY_MAX_PAGES_DEFAULT, ge=1)

    # Logging
    log_level: str = "INFO"
    log_format: str = "development"  # "development" for readable, "json" for structured

    monitoring: Optional[MonitoringSettings] = None

    @field_validator("url")
    @classmethod
    def strip_trailing_slash(cls, v: str) -> str:
        return v.strip().rstrip("/")

    @property
    def missing_required(self) -> List[str]:
        """Describe each required field that has no value."""
        missing = []
        for field_name, (flag, env_var) in REQUIRED_FIELDS.items():
            if not getattr(self, field_name):
                missing.append(f"{field_name} ({flag} or {env_var})")
        return missing

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: Type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> Tuple[PydanticBaseSettingsSource, ...]:
        # Later JSON files win, so config.local.json overrides config.json
        return (
            init_settings,
            env_settings,
            dotenv_settings,
            JsonConfigFileSource(settings_cls),
        )


def settings_for_directory(config_dir: Path) -> Type[Settings]:
    """Return a Settings class that reads its JSON files from ``config_dir``."""

    class DirectorySettings(Settings):
        model_config = SettingsConfigDict(
            json_file=(config_dir / CONFIG_FILE, config_dir / LOCAL_CONFIG_FILE),
        )

    return DirectorySettings


def build_arg_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="mattermost-connector",
        description="Mattermost MCP server exposing channel listing and channel history tools.",
        epilog=(
            "Priority (highest to lowest): CLI arguments > environment variables "
            "> config.local.json > config.json"
        ),
    )
    parser.add_argument("--url", help="Mattermost API URL (e.g., https://mattermost.example.com/api/v4)")
    parser.add_argument("--token", help="Mattermost personal access token")
    parser.add_argument("--team-id", dest="team_id", help="Mattermost team ID")
    parser.add_argument(
        "--history-max-pages",
        dest="history_max_pages",
        type=int,
        help="Maximum pages fetched when a history request asks for all messages",
    )
    parser.add_argument("--log-level", dest="log_level", help="Logging level (default: INFO)")
    parser.add_argument(
        "--log-format",
        dest="log_format",
        choices=["development", "json"],
        help="Log output format (default: development)",
    )
    parser.add_argument(
        "--config-dir",
        dest="config_dir",
        type=Path,
        help="Directory holding config.json / config.local.json (default: working directory)",
    )
    return parser


def load_settings(argv: Optional[Sequence[str]] = None) -> Settings:
    """
    Resolve settings from CLI arguments, environment and config files.

    Raises:
        ConfigurationError: If required values are missing or a section is invalid
    """
    args = vars(build_arg_parser().parse_args(argv))
    config_dir = args.pop("config_dir", None)
    cli_values = {key: value for key, value in args.items() if value is not None}

    settings_cls = settings_for_directory(config_dir) if config_dir else Settings

    try:
        settings = settings_cls(**cli_values)
    except ValidationError as e:
        raise ConfigurationError(f"Invalid configuration: {e}") from e

    missing = settings.missing_required
    if missing:
        raise ConfigurationError(
            "Missing required configuration: " + ", ".join(missing),
            missing=missing,
        )

    sources = _describe_sources(cli_values, config_dir or Path("."))
    if sources:
        logger.info(f"Configuration loaded from: {', '.join(sources)}")

    return settings


def _describe_sources(cli_values: dict, config_dir: Path) -> List[str]:
    sources = []
    if any(field_name in cli_values for field_name in REQUIRED_FIELDS):
        sources.append("CLI arguments")
    if any(os.getenv(env_var) for _, env_var in REQUIRED_FIELDS.values()):
        sources.append("environment variables")
    for file_name in (LOCAL_CONFIG_FILE, CONFIG_FILE):
        if _supplies_connection(config_dir / file_name):
            sources.append(file_name)
    return sources


def _supplies_connection(path: Path) -> bool:
    """Whether a config file sets any of url, token or team_id."""
    if not path.is_file():
        return False
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, ValueError):
        return False
    if not isinstance(data, dict):
        return False
    keys = set(REQUIRED_FIELDS) | set(LEGACY_FILE_KEYS)
    return any(data.get(key) for key in keys)
