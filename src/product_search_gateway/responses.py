# Copyright 2026 Seth Bang
# SPDX-License-Identifier: Apache-2.0
"""
Tool response envelopes.

Every response, success or error, carries rate-limit metadata::

    {"data": ..., "rateLimit": {"limit", "remaining", "resetEpochMs"}}
    {"error": {"type", "message", "details"?}, "rateLimit": {...}}

Rate-limited responses additionally carry ``retryAfterSeconds``.
"""

import json
import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any

from .types.rate_limit import RateLimitCheck, RateLimitInfo

logger = logging.getLogger(__name__)

GENERIC_INTERNAL_MESSAGE = "Service temporarily unavailable"


class ErrorType(str, Enum):
    RATE_LIMITED = "RATE_LIMITED"
    VALIDATION = "VALIDATION"
    NOT_FOUND = "NOT_FOUND"
    UPSTREAM_UNAVAILABLE = "UPSTREAM_UNAVAILABLE"
    INTERNAL = "INTERNAL"


@dataclass(frozen=True)
class ToolResponse:
    """A JSON-serializable tool result."""

    payload: dict[str, Any]
    is_error: bool = False

    @property
    def text(self) -> str:
        return json.dumps(self.payload)

    @property
    def error_type(self) -> ErrorType | None:
        if not self.is_error:
            return None
        return ErrorType(self.payload["error"]["type"])

    @property
    def rate_limit(self) -> dict[str, Any]:
        return self.payload["rateLimit"]


class ResponseBuilder:
    """Constructs the standard success and error envelopes."""

    @staticmethod
    def success(data: Any, rate_limit: RateLimitInfo) -> ToolResponse:
        return ToolResponse({"data": data, "rateLimit": rate_limit.to_dict()})

    @staticmethod
    def error(
        error_type: ErrorType,
        message: str,
        rate_limit: RateLimitInfo,
        details: dict[str, Any] | None = None,
    ) -> ToolResponse:
        error: dict[str, Any] = {"type": error_type.value, "message": message}
        if details:
            error["details"] = details
        return ToolResponse(
            {"error": error, "rateLimit": rate_limit.to_dict()}, is_error=True
        )

    @staticmethod
    def rate_limited(check: RateLimitCheck, retry_after_seconds: int) -> ToolResponse:
        info = RateLimitInfo(
            limit=check.limit, remaining=0, reset_epoch_ms=check.reset_epoch_ms
        )
        response = ResponseBuilder.error(
            ErrorType.RATE_LIMITED, "Rate limit exceeded", info
        )
        response.payload["retryAfterSeconds"] = retry_after_seconds
        return response

    @staticmethod
    def validation(
        message: str,
        rate_limit: RateLimitInfo,
        details: dict[str, Any] | None = None,
    ) -> ToolResponse:
        return ResponseBuilder.error(ErrorType.VALIDATION, message, rate_limit, details)

    @staticmethod
    def not_found(
        resource: str, resource_id: str, rate_limit: RateLimitInfo
    ) -> ToolResponse:
        return ResponseBuilder.error(
            ErrorType.NOT_FOUND, f"{resource} not found: {resource_id}", rate_limit
        )

    @staticmethod
    def upstream_unavailable(rate_limit: RateLimitInfo) -> ToolResponse:
        return ResponseBuilder.error(
            ErrorType.UPSTREAM_UNAVAILABLE,
            "Product catalog is temporarily unavailable. Please try again later.",
            rate_limit,
        )

    @staticmethod
    def internal(
        message: str,
        rate_limit: RateLimitInfo,
        log_context: dict[str, Any] | None = None,
    ) -> ToolResponse:
        """
        Log ``message`` and ``log_context`` and return a generic error.

        Internal detail never reaches the caller.
        """
        logger.error(f"Internal error: {message} {log_context or {}}")
        return ResponseBuilder.error(
            ErrorType.INTERNAL, GENERIC_INTERNAL_MESSAGE, rate_limit
        )


__all__ = [
    "GENERIC_INTERNAL_MESSAGE",
    "ErrorType",
    "ResponseBuilder",
    "ToolResponse",
]
