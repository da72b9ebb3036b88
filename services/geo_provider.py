# ============================================================================
# CLAUDE CONTEXT - GEO PROVIDER INTERFACE
# ============================================================================
# STATUS: Service Layer - Contract consumed by the create pipeline
# PURPOSE: Minimal location-intelligence interface plus provider error types
# LAST_REVIEWED: 18 OCT 2026
# EXPORTS: GeoProvider, ProviderError, ProviderTransientError,
#          ProviderTimeoutError, GeoProviderConfigurationError
# DEPENDENCIES: abc
# ============================================================================
"""
Geo Provider Interface.

The create pipeline only needs three calls (tracking ping, context lookup,
nearby geofence search). Keeping them behind an ABC lets the registry
receive any configured client by injection and lets tests substitute a
fake without touching HTTP.

Error model:
    ProviderTransientError   HTTP error status, connection failure, bad body
    ProviderTimeoutError     call exceeded its timeout (a transient error)
    GeoProviderConfigurationError  missing credential (startup / first use)
"""

from abc import ABC, abstractmethod
from typing import Any, Dict, Optional


class ProviderError(Exception):
    """Base class for failures talking to the geo provider."""

    def __init__(self, message: str, action: Optional[str] = None, status_code: Optional[int] = None):
        super().__init__(message)
        self.action = action
        self.status_code = status_code


class ProviderTransientError(ProviderError):
    """Provider call failed; callers may continue without the result."""


class ProviderTimeoutError(ProviderTransientError):
    """Provider call did not complete within the configured timeout."""


class GeoProviderConfigurationError(ValueError):
    """Provider client is missing a credential required for an action."""


class GeoProvider(ABC):
    """Operations the geofence-gated create pipeline depends on."""

    @abstractmethod
    def track(
        self,
        device_id: str,
        latitude: float,
        longitude: float,
        accuracy: float,
        user_id: Optional[str] = None,
        **extra: Any
    ) -> Dict[str, Any]:
        """Ingest a location ping."""

    @abstractmethod
    def get_context(self, latitude: float, longitude: float, user_id: Optional[str] = None) -> Dict[str, Any]:
        """Places, geofences and region data for a coordinate."""

    @abstractmethod
    def search_geofences(
        self,
        latitude: float,
        longitude: float,
        radius: Optional[int] = None,
        tags: Optional[str] = None,
        limit: Optional[int] = None
    ) -> Dict[str, Any]:
        """Geofences near a coordinate."""
