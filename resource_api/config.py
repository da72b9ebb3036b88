# ============================================================================
# CLAUDE CONTEXT - RESOURCE API CONFIGURATION
# ============================================================================
# STATUS: Standalone Configuration - Field operations resource endpoints
# PURPOSE: Limits, schema and defaults shared by every generated endpoint
# LAST_REVIEWED: 18 OCT 2026
# EXPORTS: ResourceAPIConfig, get_resource_config
# INTERFACES: Pydantic BaseModel
# DEPENDENCIES: pydantic, os
# SOURCE: Environment variables
# PATTERNS: Settings Pattern, Singleton via cached function
# ENTRY_POINTS: from resource_api.config import get_resource_config
# ============================================================================

"""
Resource API Configuration

Environment Variables (all optional):
    - FIELDOPS_SCHEMA: PostgreSQL schema holding the entity tables (default: "field_ops")
    - FIELDOPS_DEFAULT_LIMIT: Default page size for list-by-owner (default: 50)
    - FIELDOPS_MAX_LIMIT: Upper bound for the `limit` query parameter (default: 500)
    - FIELDOPS_QUERY_TIMEOUT: Statement timeout in seconds (default: 30)
    - FIELDOPS_DEFAULT_ACCURACY: Accuracy in metres sent with a location ping
      when the request carries none (default: 10)

Database credentials come from the main config.py (password or managed identity).
"""

import os
from typing import Optional
from pydantic import BaseModel, Field, field_validator


class ResourceAPIConfig(BaseModel):
    """Configuration for the generated resource endpoints."""

    schema_name: str = Field(
        default_factory=lambda: os.getenv("FIELDOPS_SCHEMA", "field_ops"),
        description="PostgreSQL schema containing the entity tables"
    )
    default_limit: int = Field(
        default_factory=lambda: int(os.getenv("FIELDOPS_DEFAULT_LIMIT", "50")),
        ge=1,
        le=10000,
        description="Default number of records returned by list-by-owner"
    )
    max_limit: int = Field(
        default_factory=lambda: int(os.getenv("FIELDOPS_MAX_LIMIT", "500")),
        ge=1,
        description="Maximum number of records per list request"
    )
    query_timeout_seconds: int = Field(
        default_factory=lambda: int(os.getenv("FIELDOPS_QUERY_TIMEOUT", "30")),
        ge=1,
        le=300,
        description="Maximum query execution time in seconds"
    )
    default_accuracy_meters: float = Field(
        default_factory=lambda: float(os.getenv("FIELDOPS_DEFAULT_ACCURACY", "10")),
        gt=0,
        description="Accuracy reported with a location ping when none is supplied"
    )

    @field_validator("max_limit")
    @classmethod
    def validate_max_limit(cls, v: int, info) -> int:
        """Max limit can never be smaller than the default page size."""
        default_limit = info.data.get("default_limit")
        if default_limit is not None and v < default_limit:
            raise ValueError(
                f"FIELDOPS_MAX_LIMIT ({v}) must be >= FIELDOPS_DEFAULT_LIMIT ({default_limit})"
            )
        return v


# Singleton instance cache
_config_cache: Optional[ResourceAPIConfig] = None


def get_resource_config() -> ResourceAPIConfig:
    """
    Get singleton resource API configuration instance.

    Returns:
        Cached configuration instance
    """
    global _config_cache

    if _config_cache is None:
        _config_cache = ResourceAPIConfig()

    return _config_cache
