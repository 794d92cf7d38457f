"""
Custom exception hierarchy for the Mattermost connector.

Every failure a tool call can hit is raised as an AppError subclass and
converted into a structured error payload at the tool boundary.
"""

from enum import Enum
from typing import Any, Dict, Optional


class ErrorCode(str, Enum):
    """Error codes for categorizing exceptions."""

    # Validation errors
    INVALID_DATE_FORMAT = "INVALID_DATE_FORMAT"
    INVALID_ARGUMENTS = "INVALID_ARGUMENTS"
    UNKNOWN_TOOL = "UNKNOWN_TOOL"

    # Upstream errors
    MALFORMED_UPSTREAM_RESPONSE = "MALFORMED_UPSTREAM_RESPONSE"
    INCONSISTENT_PAGE_DATA = "INCONSISTENT_PAGE_DATA"
    UPSTREAM_TRANSPORT_ERROR = "UPSTREAM_TRANSPORT_ERROR"
    PAGINATION_LIMIT_EXCEEDED = "PAGINATION_LIMIT_EXCEEDED"

    # Server errors
    CONFIGURATION_ERROR = "CONFIGURATION_ERROR"
    INTERNAL_ERROR = "INTERNAL_ERROR"


class AppError(Exception):
    """
    Base application error with structured error information.

    Attributes:
        code: Error code from ErrorCode enum
        message: Human-readable error message
        details: Additional context for diagnosis
    """

    def __init__(
        self,
        code: ErrorCode,
        message: str,
        details: Optional[Dict[str, Any]] = None,
    ):
        self.code = code
        self.message = message
        self.details = details or {}
        super().__init__(message)

    def to_dict(self, include_details: bool = False) -> Dict[str, Any]:
        """Convert exception to dictionary for a tool response."""
        result = {
            "error": {
                "code": self.code.value,
                "message": self.message,
            }
        }
        if include_details and self.details:
            result["error"]["details"] = self.details
        return result


# ============ Validation Errors ============


class InvalidDateFormatError(AppError):
    """Raised when a date filter cannot be parsed into an instant."""

    def __init__(self, field: str, value: str):
        self.field = field
        self.value = value
        super().__init__(
            code=ErrorCode.INVALID_DATE_FORMAT,
            message=(
                f"Invalid date format for {field}: {value}. Use ISO 8601 format "
                "(e.g., '2025-12-18' or '2025-12-18T10:00:00Z')"
            ),
            details={"field": field, "value": value},
        )


class InvalidToolArgumentsError(AppError):
    """Raised when tool arguments fail validation."""

    def __init__(self, tool_name: str, errors: list):
        super().__init__(
            code=ErrorCode.INVALID_ARGUMENTS,
            message=f"Invalid arguments for {tool_name}",
            details={"tool_name": tool_name, "errors": errors},
        )


class UnknownToolError(AppError):
    """Raised when a tool name is not served by this connector."""

    def __init__(self, tool_name: str):
        super().__init__(
            code=ErrorCode.UNKNOWN_TOOL,
            message=f"Unknown tool: {tool_name}",
            details={"tool_name": tool_name},
        )


# ============ Upstream Errors ============


class UpstreamError(AppError):
    """Base class for failures caused by the Mattermost server."""


class MalformedUpstreamResponseError(UpstreamError):
    """Raised when an upstream response is missing an expected field."""

    def __init__(self, missing_field: str, raw_response: Any, expected: str = "array"):
        super().__init__(
            code=ErrorCode.MALFORMED_UPSTREAM_RESPONSE,
            message=f"API response missing {missing_field} {expected}",
            details={"missing_field": missing_field, "raw_response": raw_response},
        )


class InconsistentPageDataError(UpstreamError):
    """Raised when an ordered post is absent from the post map or unusable."""

    def __init__(
        self,
        post_id: str,
        reason: str = "is listed in the page order but missing from the page posts",
    ):
        super().__init__(
            code=ErrorCode.INCONSISTENT_PAGE_DATA,
            message=f"Post {post_id} {reason}",
            details={"post_id": post_id, "reason": reason},
        )


class UpstreamTransportError(UpstreamError):
    """Raised for any failure talking to the Mattermost API."""

    def __init__(
        self,
        message: str,
        status_code: Optional[int] = None,
        path: Optional[str] = None,
    ):
        self.status_code = status_code
        details: Dict[str, Any] = {}
        if status_code is not None:
            details["status_code"] = status_code
        if path:
            details["path"] = path
        super().__init__(
            code=ErrorCode.UPSTREAM_TRANSPORT_ERROR,
            message=message,
            details=details,
        )


class PaginationLimitExceededError(UpstreamError):
    """Raised when a history cursor chain does not terminate within bounds."""

    def __init__(self, channel_id: str, pages_fetched: int, reason: str):
        super().__init__(
            code=ErrorCode.PAGINATION_LIMIT_EXCEEDED,
            message=f"Stopped paging channel {channel_id} after {pages_fetched} pages: {reason}",
            details={
                "channel_id": channel_id,
                "pages_fetched": pages_fetched,
                "reason": reason,
            },
        )


# ============ Internal Errors ============


class ConfigurationError(AppError):
    """Raised when required configuration is missing or invalid."""

    def __init__(self, message: str, missing: Optional[list] = None):
        self.missing = missing or []
        super().__init__(
            code=ErrorCode.CONFIGURATION_ERROR,
            message=message,
            details={"missing": self.missing} if self.missing else None,
        )
