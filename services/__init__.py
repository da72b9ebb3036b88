# ============================================================================
# CLAUDE CONTEXT - SERVICES MODULE
# ============================================================================
# STATUS: Service Layer - Outbound HTTP clients
# PURPOSE: Geo provider interface and the Radar client implementing it
# LAST_REVIEWED: 18 OCT 2026
# EXPORTS: GeoProvider, RadarClient, provider error types
# DEPENDENCIES: httpx
# ============================================================================

from .geo_provider import (
    GeoProvider,
    GeoProviderConfigurationError,
    ProviderError,
    ProviderTimeoutError,
    ProviderTransientError,
)
from .radar_client import GeoAction, RadarClient

__all__ = [
    "GeoProvider",
    "GeoProviderConfigurationError",
    "ProviderError",
    "ProviderTimeoutError",
    "ProviderTransientError",
    "GeoAction",
    "RadarClient",
]
