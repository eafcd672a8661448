"""Flight-status providers."""

from jetlagged.providers.aviation_edge import AviationEdgeClient
from jetlagged.providers.base import (
    FlightStatusProvider,
    ProviderConfigurationError,
    ProviderError,
    ProviderResponseError,
    ProviderUnavailableError,
)

__all__ = [
    "AviationEdgeClient",
    "FlightStatusProvider",
    "ProviderConfigurationError",
    "ProviderError",
    "ProviderResponseError",
    "ProviderUnavailableError",
]
