#!/usr/bin/env python3
"""
Mattermost MCP Server

Provides MCP tools for reading Mattermost channels and channel history.
"""

import asyncio
import json
import sys
from typing import Any, Awaitable, Callable, Dict, Optional, Sequence, Type

from mcp.server import Server
from mcp.types import CallToolResult, TextContent, Tool
from pydantic import BaseModel, ValidationError

from mattermost_connector.core.config import Settings, load_settings
from mattermost_connector.core.enums import ToolName
from mattermost_connector.core.exceptions import (
    AppError,
    ConfigurationError,
    ErrorCode,
    InvalidToolArgumentsError,
    UnknownToolError,
)
from mattermost_connector.core.logging import (
    clear_tool_context,
    configure_logging,
    get_logger,
    log_execution_time,
    set_tool_context,
)
from mattermost_connector.models import GetChannelHistoryArgs, ListChannelsArgs
from mattermost_connector.services.channel_service import list_channels
from mattermost_connector.services.history_service import get_channel_history
from mattermost_connector.services.mattermost_client import MattermostClient

logger = get_logger("mattermost-mcp-server")

TOOLS = [
    Tool(
        name=ToolName.LIST_CHANNELS.value,
        description=(
            "List channels in the Mattermost workspace. By default lists public team channels. "
            "Set include_private=true to get all channels including private channels and "
            "direct messages (DMs)."
        ),
        inputSchema={
            "type": "object",
            "properties": {
                "limit": {
                    "type": "number",
                    "description": "Maximum number of channels to return (default 100, max 200)",
                    "default": 100,
                },
                "page": {
                    "type": "number",
                    "description": "Page number for pagination (starting from 0)",
                    "default": 0,
                },
                "include_private": {
                    "type": "boolean",
                    "description": (
                        "If true, returns all channels for the current user including private "
                        "channels and direct messages. If false (default), returns only public "
                        "team channels."
                    ),
                    "default": False,
                },
            },
        },
    ),
    Tool(
        name=ToolName.GET_CHANNEL_HISTORY.value,
        description=(
            "Get messages from a Mattermost channel. By default returns ALL messages. "
            "Use limit parameter to restrict the number of messages."
        ),
        inputSchema={
            "type": "object",
            "properties": {
                "channel_id": {
                    "type": "string",
                    "description": "The ID of the channel",
                },
                "limit": {
                    "type": "number",
                    "description": (
                        "Number of messages to retrieve. If not specified or 0, returns ALL "
                        "messages from the channel."
                    ),
                },
                "page": {
                    "type": "number",
                    "description": "Page number for pagination (starting from 0). Only used when limit > 0.",
                    "default": 0,
                },
                "since_date": {
                    "type": "string",
                    "description": (
                        "Get messages after this date (ISO 8601 format, e.g., '2025-12-18' or "
                        "'2025-12-18T10:00:00Z')"
                    ),
                },
                "before_date": {
                    "type": "string",
                    "description": (
                        "Get messages before this date (ISO 8601 format). Use with since_date to get "
                        "messages for a specific date range (e.g., since_date='2025-12-18', "
                        "before_date='2025-12-19' for all messages on Dec 18)."
                    ),
                },
                "before_post_id": {
                    "type": "string",
                    "description": "Get messages before this post ID",
                },
                "after_post_id": {
                    "type": "string",
                    "description": "Get messages after this post ID",
                },
            },
            "required": ["channel_id"],
        },
    ),
]


def _parse_arguments(model: Type[BaseModel], tool_name: str, arguments: Optional[dict]) -> Any:
    try:
        return model.model_validate(arguments or {})
    except ValidationError as e:
        raise InvalidToolArgumentsError(
            tool_name,
            [{"field": ".".join(str(p) for p in err["loc"]), "error": err["msg"]} for err in e.errors()],
        ) from e


# ==================== Tool Handlers ====================


@log_execution_time(operation="list_channels")
async def handle_list_channels(client: MattermostClient, arguments: Optional[dict]) -> Dict[str, Any]:
    args = _parse_arguments(ListChannelsArgs, ToolName.LIST_CHANNELS.value, arguments)
    return await list_channels(client, args)


@log_execution_time(operation="get_channel_history")
async def handle_get_channel_history(
    client: MattermostClient, arguments: Optional[dict]
) -> Dict[str, Any]:
    args = _parse_arguments(GetChannelHistoryArgs, ToolName.GET_CHANNEL_HISTORY.value, arguments)
    return await get_channel_history(client, args)


HANDLERS: Dict[str, Callable[[MattermostClient, Optional[dict]], Awaitable[Dict[str, Any]]]] = {
    ToolName.LIST_CHANNELS.value: handle_list_channels,
    ToolName.GET_CHANNEL_HISTORY.value: handle_get_channel_history,
}


def _text_result(payload: Dict[str, Any], is_error: bool = False) -> CallToolResult:
    return CallToolResult(
        content=[TextContent(type="text", text=json.dumps(payload, indent=2, default=str))],
        isError=is_error,
    )


async def dispatch_tool(
    client: MattermostClient, name: str, arguments: Optional[dict]
) -> CallToolResult:
    """Run a tool and wrap the outcome. No exception escapes this function."""
    set_tool_context(name)
    try:
        handler = HANDLERS.get(name)
        if handler is None:
            raise UnknownToolError(name)
        payload = await handler(client, arguments)
    except AppError as e:
        logger.error(f"Error in {name}: {e.message}", extra={"error_code": e.code.value})
        return _text_result(e.to_dict(include_details=True), is_error=True)
    except Exception as e:
        logger.error(f"Unexpected error in {name}: {str(e)}", exc_info=True)
        error = AppError(code=ErrorCode.INTERNAL_ERROR, message=f"Unexpected error: {str(e)}")
        return _text_result(error.to_dict(), is_error=True)
    finally:
        clear_tool_context()

    return _text_result(payload)


def create_server(client: MattermostClient) -> Server:
    """Build the MCP server bound to one Mattermost client."""
    app = Server("mattermost-connector")

    @app.list_tools()
    async def list_tools() -> list[Tool]:
        """List all available Mattermost tools."""
        return TOOLS

    @app.call_tool()
    async def call_tool(name: str, arguments: Any) -> CallToolResult:
        """Handle tool calls."""
        return await dispatch_tool(client, name, arguments)

    return app


async def serve(settings: Settings) -> None:
    """Serve MCP over stdio until the client disconnects."""
    from mcp.server.stdio import stdio_server

    async with MattermostClient(settings) as client:
        app = create_server(client)
        logger.info("Mattermost MCP server starting", extra={"url": settings.url})
        async with stdio_server() as (read_stream, write_stream):
            await app.run(
                read_stream,
                write_stream,
                app.create_initialization_options(),
            )


def main(argv: Optional[Sequence[str]] = None) -> None:
    """Run the Mattermost MCP server."""
    configure_logging()
    try:
        settings = load_settings(argv)
    except ConfigurationError as e:
        print(f"\n{e.message}\n\nRun with --help for usage information.\n", file=sys.stderr)
        sys.exit(1)

    configure_logging(settings.log_level, json_format=settings.log_format == "json")
    if settings.monitoring and settings.monitoring.enabled:
        logger.info(
            "Monitoring configuration loaded",
            extra={
                "schedule": settings.monitoring.schedule,
                "channels": ",".join(settings.monitoring.channels),
            },
        )

    asyncio.run(serve(settings))


if __name__ == "__main__":
    main()
