# ============================================================================
# CLAUDE CONTEXT - RESOURCE API MODULE
# ============================================================================
# STATUS: Core Module - Declarative CRUD endpoints with geofence gating
# PURPOSE: Turn resource descriptors into Azure Functions HTTP endpoints
# LAST_REVIEWED: 18 OCT 2026
# EXPORTS: ResourceDescriptor, GeoPolicy, AutoField, errors, ResourceAPIConfig
# DEPENDENCIES: azure-functions, pydantic, psycopg (via infrastructure), httpx (via services)
# PATTERNS: Factory Pattern, Service Layer, Repository Pattern
# ENTRY_POINTS: from resource_api.registry import ResourceRegistry
# ============================================================================

"""
Resource API Module

Architecture:
    resource_api/
    ├── config.py      # Environment-based configuration
    ├── descriptor.py  # ResourceDescriptor, GeoPolicy, AutoField
    ├── errors.py      # Error taxonomy (400/404/500)
    ├── validator.py   # Full and partial pydantic validation
    ├── candidate.py   # Mutable candidate record with mutation log
    ├── pipeline.py    # Geofence-gated create pipeline
    ├── service.py     # Business logic per resource
    ├── models.py      # Response envelope
    ├── triggers.py    # Azure Functions HTTP handlers
    ├── registry.py    # Endpoint factory (registerResource)
    ├── attendance.py  # Punch-out route
    └── dashboard.py   # Parallel per-owner counters

Integration:
    # In function_app.py
    from resource_api.registry import ResourceRegistry

    registry = ResourceRegistry(app, store_factory, geo_provider=radar_client)
    for descriptor in RESOURCE_DESCRIPTORS:
        registry.register(descriptor)

Only leaf modules are imported here; the record store imports the error
taxonomy from this package.
"""

from .config import ResourceAPIConfig, get_resource_config
from .descriptor import (
    AutoField,
    AutoFieldKind,
    GeoPolicy,
    MatchStrategy,
    NearbySearch,
    RequiredGeofence,
    ResourceDescriptor,
    TrackingFields,
)
from .errors import (
    FieldError,
    GeofenceRejection,
    NotFoundError,
    RecordValidationError,
    ResourceAPIError,
    ResourceConfigurationError,
    StorageError,
)

__version__ = "1.0.0"
__all__ = [
    "ResourceAPIConfig",
    "get_resource_config",
    "AutoField",
    "AutoFieldKind",
    "GeoPolicy",
    "MatchStrategy",
    "NearbySearch",
    "RequiredGeofence",
    "ResourceDescriptor",
    "TrackingFields",
    "FieldError",
    "GeofenceRejection",
    "NotFoundError",
    "RecordValidationError",
    "ResourceAPIError",
    "ResourceConfigurationError",
    "StorageError",
]
