from .fleet import (
    AgencyNotFound,
    AggregateFailure,
    ConfigMissing,
    FleetError,
    UpstreamError,
    UpstreamMalformed,
    UpstreamUnavailable,
)

__all__ = [
    "AgencyNotFound",
    "AggregateFailure",
    "ConfigMissing",
    "FleetError",
    "UpstreamError",
    "UpstreamMalformed",
    "UpstreamUnavailable",
]
