from __future__ import annotations


class FleetError(Exception):
    """Base exception for fleet feed failures."""


class ConfigMissing(FleetError):
    """Raised when a required setting (e.g. the upstream API key) is absent."""


class UpstreamError(FleetError):
    """Base exception for a single upstream source failing."""


class UpstreamUnavailable(UpstreamError):
    """Network error, timeout or non-success status from an upstream source."""

    def __init__(self, message: str, *, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class UpstreamMalformed(UpstreamError):
    """Raised when an upstream payload does not have the expected shape."""


class AgencyNotFound(FleetError):
    """Raised when the directory has no entry for the requested agency."""


class AggregateFailure(FleetError):
    """Raised when the agency directory could not be resolved for aggregation."""

    def __init__(self, message: str, *, cause_kind: str | None = None) -> None:
        super().__init__(message)
        self.cause_kind = cause_kind
