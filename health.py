# ============================================================================
# CLAUDE CONTEXT - HEALTH CHECK MODULE
# ============================================================================
# STATUS: Core Infrastructure - Health Monitoring
# PURPOSE: Health checks for APIM integration and monitoring
# LAST_REVIEWED: 18 OCT 2026
# EXPORTS: get_public_health, get_detailed_health, HealthStatus, CheckResult
# DEPENDENCIES: psycopg, config, infrastructure, util_logger
# PATTERNS: Two-tier health checks (public/detailed) for APIM
# ============================================================================

"""
Health Check Module for the field operations API

1. Public Health (/api/health):
   - Status and timestamp only
   - Always returns 200 (status in body indicates health)

2. Detailed Health (/api/health/detailed):
   - Database connectivity with latency
   - Field-ops schema presence and table count
   - Radar credential configuration
   - Registered resource count
   - Returns 503 if unhealthy

Critical checks (database, schema) make the service UNHEALTHY; the
non-critical ones (Radar, resources) make it DEGRADED.

Usage:
    from health import get_public_health, get_detailed_health

    result = get_public_health()
    # {"status": "healthy", "timestamp": "2026-10-18T12:00:00+00:00"}

    result = get_detailed_health(registry)
"""

import time
import uuid
import psycopg
from enum import Enum
from datetime import datetime, timezone
from dataclasses import dataclass
from typing import Optional, Dict, Any

from config import get_postgres_connection_string, get_app_config
from infrastructure.postgresql import PostgreSQLRepository
from util_logger import LoggerFactory, ComponentType

APP_NAME = "fieldops-api"
APP_DESCRIPTION = "Field Operations Resource API"

logger = LoggerFactory.create_logger(ComponentType.SERVICE, "HealthService")


# ============================================================================
# Health Status Enum
# ============================================================================

class HealthStatus(str, Enum):
    """Health status values."""
    HEALTHY = "healthy"
    DEGRADED = "degraded"      # Non-critical components failing
    UNHEALTHY = "unhealthy"    # Critical components failing


# ============================================================================
# Data Classes
# ============================================================================

@dataclass
class CheckResult:
    """Result of a single health check."""
    status: str              # "pass" or "fail"
    latency_ms: float
    message: str
    details: Optional[Dict[str, Any]] = None

    def to_dict(self) -> Dict[str, Any]:
        result = {
            "status": self.status,
            "latency_ms": round(self.latency_ms, 2),
            "message": self.message
        }
        if self.details:
            result["details"] = self.details
        return result


def _elapsed_ms(start_time: float) -> float:
    return (time.perf_counter() - start_time) * 1000


# ============================================================================
# Health Check Functions
# ============================================================================

def check_database_connectivity(timeout_seconds: float = 5.0) -> CheckResult:
    """
    Check PostgreSQL database connectivity (SELECT 1).

    Critical - failure means UNHEALTHY status.
    """
    start_time = time.perf_counter()

    try:
        conn_string = get_postgres_connection_string()
        config = get_app_config()

        with psycopg.connect(conn_string, connect_timeout=int(timeout_seconds)) as conn:
            with conn.cursor() as cur:
                cur.execute("SELECT 1")
                cur.fetchone()

        return CheckResult(
            status="pass",
            latency_ms=_elapsed_ms(start_time),
            message="PostgreSQL connection successful",
            details={
                "host": config.postgis_host,
                "database": config.postgis_database,
                "auth_mode": "managed_identity" if config.use_managed_identity else "password"
            }
        )

    except Exception as e:
        logger.error(f"Database connectivity check failed: {e}")
        return CheckResult(
            status="fail",
            latency_ms=_elapsed_ms(start_time),
            message=f"Database connection failed: {type(e).__name__}",
            details={"error": str(e)}
        )


def check_fieldops_schema(schema_name: str) -> CheckResult:
    """
    Check the entity schema exists and count its tables.

    Critical - failure means UNHEALTHY status.
    """
    start_time = time.perf_counter()

    try:
        repo = PostgreSQLRepository(schema_name=schema_name)
        if not repo.schema_exists():
            return CheckResult(
                status="fail",
                latency_ms=_elapsed_ms(start_time),
                message=f"Schema '{schema_name}' does not exist",
                details={"schema": schema_name, "exists": False}
            )

        tables = repo.list_tables()
        return CheckResult(
            status="pass",
            latency_ms=_elapsed_ms(start_time),
            message=f"{len(tables)} tables in '{schema_name}'",
            details={"schema": schema_name, "table_count": len(tables)}
        )

    except Exception as e:
        logger.error(f"Schema check failed: {e}")
        return CheckResult(
            status="fail",
            latency_ms=_elapsed_ms(start_time),
            message=f"Schema check failed: {type(e).__name__}",
            details={"error": str(e)}
        )


def check_geo_provider() -> CheckResult:
    """
    Check Radar credentials are configured.

    Non-critical - without them creates still work, but gated resources
    reject every request.
    """
    start_time = time.perf_counter()

    try:
        config = get_app_config()
    except Exception as e:
        return CheckResult(
            status="fail",
            latency_ms=_elapsed_ms(start_time),
            message=f"Configuration unavailable: {type(e).__name__}",
            details={"error": str(e)}
        )

    details = {
        "secret_key": bool(config.radar_secret_key),
        "publishable_key": bool(config.radar_publishable_key),
        "base_url": config.radar_base_url
    }
    if not config.radar_configured:
        return CheckResult(
            status="fail",
            latency_ms=_elapsed_ms(start_time),
            message="Radar credentials not configured",
            details=details
        )
    return CheckResult(
        status="pass",
        latency_ms=_elapsed_ms(start_time),
        message="Radar credentials configured",
        details=details
    )


def check_resources(registry=None) -> CheckResult:
    """
    Count registered resources.

    Non-critical - an empty route table means DEGRADED status.
    """
    start_time = time.perf_counter()
    paths = list(registry.registered_paths) if registry is not None else []

    return CheckResult(
        status="pass" if paths else "fail",
        latency_ms=_elapsed_ms(start_time),
        message=f"{len(paths)} resources registered" if paths else "No resources registered",
        details={"resource_count": len(paths), "resources": paths}
    )


# ============================================================================
# Main Entry Points
# ============================================================================

def get_app_identity() -> Dict[str, str]:
    return {"name": APP_NAME, "description": APP_DESCRIPTION}


def get_public_health() -> Dict[str, Any]:
    """
    Minimal health status for the public endpoint.

    Returns:
        Dict with status and timestamp only
    """
    start_time = time.perf_counter()

    db_result = check_database_connectivity(timeout_seconds=3.0)
    status = HealthStatus.HEALTHY if db_result.status == "pass" else HealthStatus.UNHEALTHY

    logger.info("Public health check completed", extra={
        'custom_dimensions': {
            'status': status.value,
            'duration_ms': round(_elapsed_ms(start_time), 2),
            'check_type': 'public'
        }
    })

    return {
        "status": status.value,
        "timestamp": datetime.now(timezone.utc).isoformat()
    }


def get_detailed_health(registry=None, schema_name: str = "field_ops") -> Dict[str, Any]:
    """
    Detailed health status for APIM probes and operations.

    SECURITY NOTE: Block this endpoint from external access via APIM policy.

    Args:
        registry: ResourceRegistry whose routes are reported
        schema_name: Entity schema to inspect

    Returns:
        Dict with full health metrics
    """
    start_time = time.perf_counter()
    request_id = str(uuid.uuid4())[:8]

    checks = {}
    critical_failures = []
    non_critical_failures = []

    for name, result, critical in (
        ("database", check_database_connectivity(), True),
        ("fieldops_schema", check_fieldops_schema(schema_name), True),
        ("geo_provider", check_geo_provider(), False),
        ("resources", check_resources(registry), False),
    ):
        checks[name] = result.to_dict()
        if result.status == "fail":
            (critical_failures if critical else non_critical_failures).append(name)

    if critical_failures:
        status = HealthStatus.UNHEALTHY
    elif non_critical_failures:
        status = HealthStatus.DEGRADED
    else:
        status = HealthStatus.HEALTHY

    total_duration = _elapsed_ms(start_time)

    logger.info("Detailed health check completed", extra={
        'custom_dimensions': {
            'status': status.value,
            'duration_ms': round(total_duration, 2),
            'check_type': 'detailed',
            'request_id': request_id,
            'critical_failures': critical_failures,
            'non_critical_failures': non_critical_failures,
            'database_latency_ms': checks["database"]["latency_ms"]
        }
    })

    return {
        "status": status.value,
        "app": APP_NAME,
        "description": APP_DESCRIPTION,
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "request_id": request_id,
        "checks": checks,
        "total_duration_ms": round(total_duration, 2)
    }
