"""Error taxonomy shared by the client, validators and tool adapter."""

from __future__ import annotations


class NFTAnalyticsError(Exception):
    """Base class. ``error_type`` is echoed in tool error payloads."""

    error_type = "internal"


class ValidationError(NFTAnalyticsError):
    """Malformed tool input. Raised before any upstream call."""

    error_type = "validation"


class NotFoundError(NFTAnalyticsError):
    """Upstream has no data for the requested entity."""

    error_type = "not_found"


class UpstreamError(NFTAnalyticsError):
    """Transport failure, timeout or non-2xx response from the analytics API."""

    error_type = "upstream"


class ConfigurationError(NFTAnalyticsError):
    error_type = "configuration"
