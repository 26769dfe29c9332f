# Copyright 2026 Seth Bang
# SPDX-License-Identifier: Apache-2.0
"""Exception classes for the product search gateway.

This module defines the exception hierarchy used throughout the library.
All exceptions inherit from GatewayError, making it easy to catch
all gateway-related exceptions with a single except clause.

The service layer maps each family onto a response envelope type:

    RateLimitedError         -> RATE_LIMITED
    ValidationError          -> VALIDATION
    CatalogNotFoundError     -> NOT_FOUND
    CatalogUnavailableError  -> UPSTREAM_UNAVAILABLE
    anything else            -> INTERNAL
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from .types.rate_limit import RateLimitCheck


class GatewayError(Exception):
    """Base exception for all gateway errors.

    Example:
        try:
            await service.search_products(params)
        except GatewayError as e:
            logger.error(f"Gateway error: {e}")
    """

    retryable: bool = False


class RateLimitedError(GatewayError):
    """Raised when an identity's token bucket denies admission.

    Admission is checked before any catalog fetch, so a denial never costs
    a network round trip.

    Attributes:
        identity: The caller identity whose bucket is exhausted.
        check: The denied RateLimitCheck (remaining is always 0).
        retry_after_seconds: Whole seconds until the advisory reset instant.
    """

    retryable = True

    def __init__(
        self,
        identity: str,
        check: RateLimitCheck,
        retry_after_seconds: int,
        message: str = "Rate limit exceeded",
    ):
        super().__init__(message)
        self.identity = identity
        self.check = check
        self.retry_after_seconds = retry_after_seconds


class ValidationError(GatewayError):
    """Raised when request parameters are invalid.

    Attributes:
        field: Name of the offending parameter, if known.
        details: Extra structured context echoed back to the caller.
    """

    def __init__(
        self,
        message: str,
        field: str | None = None,
        details: dict[str, Any] | None = None,
    ):
        super().__init__(message)
        self.field = field
        self.details = details


class CapabilityMismatchError(ValidationError):
    """Raised when the caller asks for a capability the catalog cannot serve.

    Currently this means ingredient include/exclude filtering against a
    catalog environment whose list results carry no ingredient data.
    Not retryable: the same request will fail the same way.
    """


class CatalogError(GatewayError):
    """Base class for failures reported by the catalog collaborator.

    Attributes:
        code: Stable machine-readable error code.
        status_code: Upstream HTTP status, when the transport had one.
    """

    code = "CATALOG_ERROR"

    def __init__(
        self,
        message: str,
        status_code: int | None = None,
        retryable: bool | None = None,
    ):
        super().__init__(message)
        self.status_code = status_code
        if retryable is not None:
            self.retryable = retryable


class CatalogNotFoundError(CatalogError):
    """Raised when the catalog has no such resource (404). Not retryable."""

    code = "NOT_FOUND"

    def __init__(self, resource: str, resource_id: str | None = None):
        message = (
            f"{resource} not found: {resource_id}"
            if resource_id
            else f"{resource} not found"
        )
        super().__init__(message, status_code=404, retryable=False)
        self.resource = resource
        self.resource_id = resource_id


class CatalogUnavailableError(CatalogError):
    """Raised for transient upstream failures (5xx, network, throttling).

    The gateway never retries on its own; retry policy belongs to the
    transport layer that raised this.
    """

    code = "UPSTREAM_UNAVAILABLE"
    retryable = True


class CatalogTimeoutError(CatalogUnavailableError):
    """Raised when the catalog call exceeded its deadline."""

    code = "TIMEOUT"

    def __init__(self, timeout_seconds: float):
        super().__init__(f"Catalog request timed out after {timeout_seconds}s")
        self.timeout_seconds = timeout_seconds


__all__ = [
    "CapabilityMismatchError",
    "CatalogError",
    "CatalogNotFoundError",
    "CatalogTimeoutError",
    "CatalogUnavailableError",
    "GatewayError",
    "RateLimitedError",
    "ValidationError",
]
