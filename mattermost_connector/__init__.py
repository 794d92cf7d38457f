"""Mattermost MCP connector: channel listing and channel history tools."""

__version__ = "1.0.0"
