# ============================================================================
# CLAUDE CONTEXT - AZURE FUNCTIONS ENTRY POINT
# ============================================================================
# STATUS: Core Infrastructure - Function App Entry Point
# PURPOSE: Main entry point for Azure Functions runtime with the field operations API
# LAST_REVIEWED: 18 OCT 2026
# EXPORTS: app (FunctionApp instance), registry
# DEPENDENCIES: azure-functions, resource_api, field_resources, services
# ============================================================================

"""
Azure Functions Entry Point for the field operations API

Registers:
    - Generated CRUD endpoints: 5 per resource in field_resources.RESOURCE_DESCRIPTORS
        POST   /api/{path}
        GET    /api/{path}/owner/{owner_id}
        GET    /api/{path}/{record_id}
        PUT    /api/{path}/{record_id}
        DELETE /api/{path}/{record_id}
    - Attendance punch-out: POST /api/attendance/punch-out
    - Dashboard: GET /api/dashboard/stats/{owner_id}
    - Health checks:
        - /api/health - Public (minimal response for external callers)
        - /api/health/detailed - Internal (full metrics for APIM probes)

The Radar client is built once at startup. Without Radar credentials the
geo provider is None: ungated resources skip the geo stage, gated ones
(attendance punch-in) reject every create.

Deployment:
    - Local: func start
"""

import json
import logging

import azure.functions as func
from pydantic import ValidationError

from config import get_app_config
from field_resources import ATTENDANCE, RESOURCE_DESCRIPTORS
from health import get_app_identity, get_detailed_health, get_public_health, HealthStatus
from infrastructure.record_store import PostgresRecordStore
from resource_api.attendance import PunchOutTrigger
from resource_api.config import get_resource_config
from resource_api.dashboard import DashboardAggregator, DashboardTrigger
from resource_api.registry import ResourceRegistry, bind_route
from services.geo_provider import GeoProviderConfigurationError
from services.radar_client import RadarClient

# Configure logging
logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)

# Initialize Azure Function App
app = func.FunctionApp()

resource_config = get_resource_config()

# ============================================================================
# Geo Provider
# ============================================================================

def _build_geo_provider():
    """RadarClient from application config, or None when not configured."""
    try:
        config = get_app_config()
        return RadarClient(
            secret_key=config.radar_secret_key,
            publishable_key=config.radar_publishable_key,
            base_url=config.radar_base_url,
            timeout=config.radar_timeout_seconds
        )
    except (ValidationError, GeoProviderConfigurationError) as e:
        logger.warning(f"⚠️ Radar geo provider not configured: {e}")
        logger.warning("Geofence-gated resources will reject creates")
        return None


geo_provider = _build_geo_provider()

# ============================================================================
# Generated Resource Endpoints
# ============================================================================

def _store_factory(descriptor):
    return PostgresRecordStore(
        descriptor.table,
        descriptor.display_name,
        schema_name=resource_config.schema_name,
        query_timeout_seconds=resource_config.query_timeout_seconds
    )


registry = ResourceRegistry(
    app,
    store_factory=_store_factory,
    geo_provider=geo_provider,
    config=resource_config
)

logger.info("Registering resource endpoints...")
for descriptor in RESOURCE_DESCRIPTORS:
    registry.register(descriptor)
logger.info(f"✅ {len(registry.registered_paths)} resources registered "
            f"({len(registry.registered_paths) * 5} endpoints)")

# ============================================================================
# Attendance Punch-Out + Dashboard
# ============================================================================

bind_route(
    app,
    name="attendance_punch_out",
    route=f"{ATTENDANCE.endpoint_path}/punch-out",
    methods=["POST"],
    handler=PunchOutTrigger(ATTENDANCE, registry.service(ATTENDANCE.endpoint_path)).handle
)

bind_route(
    app,
    name="dashboard_stats",
    route="dashboard/stats/{owner_id}",
    methods=["GET"],
    handler=DashboardTrigger(DashboardAggregator(registry)).handle
)

# ============================================================================
# Health Check Endpoints - 2 Endpoints (Public + Detailed)
# ============================================================================

@app.function_name(name="health_check")
@app.route(route="health", methods=["GET"], auth_level=func.AuthLevel.ANONYMOUS)
def health_check(req: func.HttpRequest) -> func.HttpResponse:
    """
    Public health check endpoint - minimal response for external callers.

    Always returns 200 - status in body indicates health.
    """
    result = get_public_health()

    return func.HttpResponse(
        json.dumps(result, default=str),
        mimetype="application/json",
        status_code=200,
        headers={"Cache-Control": "no-cache, no-store, must-revalidate"}
    )


@app.function_name(name="health_detailed")
@app.route(route="health/detailed", methods=["GET"], auth_level=func.AuthLevel.ANONYMOUS)
def health_detailed(req: func.HttpRequest) -> func.HttpResponse:
    """
    Detailed health check endpoint - for APIM probes and operations.

    Returns 503 if unhealthy, 200 otherwise (healthy or degraded).

    SECURITY: Block this endpoint from external access via APIM policy.
    """
    result = get_detailed_health(registry, schema_name=resource_config.schema_name)
    status_code = 503 if result["status"] == HealthStatus.UNHEALTHY.value else 200

    return func.HttpResponse(
        json.dumps(result, default=str, indent=2),
        mimetype="application/json",
        status_code=status_code,
        headers={"Cache-Control": "no-cache, no-store, must-revalidate"}
    )

# ============================================================================
# Application Startup
# ============================================================================

_app_identity = get_app_identity()

logger.info("=" * 60)
logger.info(f"{_app_identity['name']} - {_app_identity['description']}")
logger.info("=" * 60)
logger.info("Function App initialized successfully")
logger.info(f"Geo provider: {'Radar' if geo_provider else 'not configured'}")
logger.info("Available endpoints:")
logger.info("  - GET /api/health - Public health check (minimal)")
logger.info("  - GET /api/health/detailed - Detailed health (APIM only)")
for path in registry.registered_paths:
    logger.info(f"  - POST/GET/PUT/DELETE /api/{path} ...")
logger.info(f"  - POST /api/{ATTENDANCE.endpoint_path}/punch-out - Close today's attendance")
logger.info("  - GET /api/dashboard/stats/{owner_id} - Dashboard counters")
logger.info("=" * 60)
