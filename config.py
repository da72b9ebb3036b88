# ============================================================================
# CLAUDE CONTEXT - APPLICATION CONFIGURATION
# ============================================================================
# STATUS: Core Infrastructure - Configuration Management
# PURPOSE: Centralized configuration for PostgreSQL and the Radar geo provider
# LAST_REVIEWED: 18 OCT 2026
# EXPORTS: AppConfig, get_app_config, get_postgres_connection_string
# DEPENDENCIES: pydantic-settings, azure-identity
# SOURCE: Environment variables, Azure managed identity
# PATTERNS: Singleton pattern for config, lazy initialization for credentials
# ============================================================================

"""
Application Configuration Module

Provides centralized configuration management for the field operations API:
- PostgreSQL connection string generation
- Support for both password and managed identity authentication
- Radar credentials (privileged secret key and restricted publishable key)

Authentication Modes (PostgreSQL):
    1. Password-based (local development):
       - Requires: POSTGIS_HOST, POSTGIS_USER, POSTGIS_PASSWORD
       - Use when: USE_MANAGED_IDENTITY=false or not set

    2. Managed Identity (Azure production):
       - Requires: System-assigned managed identity enabled
       - Use when: USE_MANAGED_IDENTITY=true

Radar Credentials:
    - RADAR_SECRET_KEY: used for write actions (track, geofences, trips)
    - RADAR_PUBLISHABLE_KEY: used for read actions (context, geocode, search, route)

Usage:
    from config import get_app_config, get_postgres_connection_string

    conn_string = get_postgres_connection_string()
    radar_key = get_app_config().radar_secret_key
"""

import logging
from typing import Optional
from functools import lru_cache

from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import Field, field_validator, ValidationInfo

logger = logging.getLogger(__name__)

# ============================================================================
# Application Configuration
# ============================================================================

class AppConfig(BaseSettings):
    """
    Application-wide configuration loaded from environment variables.

    Attributes:
        postgis_host: PostgreSQL server hostname
        postgis_port: PostgreSQL server port
        postgis_database: Database name
        postgis_user: Database username
        postgis_password: Database password (optional with managed identity)
        use_managed_identity: Enable Azure managed identity authentication
        radar_secret_key: Privileged Radar key (write actions)
        radar_publishable_key: Restricted Radar key (read actions)
        radar_base_url: Radar REST API base URL
        radar_timeout_seconds: Timeout applied to every Radar call
    """

    model_config = SettingsConfigDict(env_file=".env", case_sensitive=False, extra="ignore")

    # PostgreSQL Connection
    postgis_host: str = Field(..., description="PostgreSQL hostname")
    postgis_port: int = Field(default=5432, description="PostgreSQL port")
    postgis_database: str = Field(..., description="Database name")
    postgis_user: str = Field(..., description="Database username")

    # Authentication Mode (declared before the password so the validator can see it)
    use_managed_identity: bool = Field(
        default=False,
        description="Use Azure managed identity for authentication"
    )
    postgis_password: Optional[str] = Field(default=None, description="Database password")

    # Radar geo provider
    radar_secret_key: Optional[str] = Field(default=None, description="Radar secret key")
    radar_publishable_key: Optional[str] = Field(default=None, description="Radar publishable key")
    radar_base_url: str = Field(
        default="https://api.radar.io/v1",
        description="Radar REST API base URL"
    )
    radar_timeout_seconds: float = Field(
        default=8.0,
        ge=1.0,
        le=30.0,
        description="Timeout for each outbound Radar call"
    )

    @field_validator('postgis_password')
    @classmethod
    def validate_password(cls, v: Optional[str], info: ValidationInfo) -> Optional[str]:
        """Ensure password is provided when not using managed identity."""
        use_managed_identity = info.data.get('use_managed_identity', False)
        if not use_managed_identity and not v:
            raise ValueError(
                "POSTGIS_PASSWORD is required when USE_MANAGED_IDENTITY=false"
            )
        return v

    @property
    def radar_configured(self) -> bool:
        """True when at least one Radar credential is available."""
        return bool(self.radar_secret_key or self.radar_publishable_key)


@lru_cache(maxsize=1)
def get_app_config() -> AppConfig:
    """
    Get singleton application configuration instance.

    Returns:
        AppConfig: Validated configuration object

    Raises:
        ValidationError: If required environment variables are missing
    """
    return AppConfig()


# ============================================================================
# PostgreSQL Connection String Generation
# ============================================================================

def get_postgres_connection_string() -> str:
    """
    Generate PostgreSQL connection string based on authentication mode.

    Returns:
        str: PostgreSQL connection string (psycopg format)

    Raises:
        ValueError: If required configuration is missing
    """
    config = get_app_config()

    if config.use_managed_identity:
        return _build_managed_identity_connection_string(config)
    else:
        return _build_password_connection_string(config)


def _build_password_connection_string(config: AppConfig) -> str:
    """
    Build password-based connection string.

    Note:
        SSL is enforced (sslmode=require) for Azure PostgreSQL.
        Password is URL-encoded to handle special characters like @ symbols.
    """
    from urllib.parse import quote_plus

    logger.info(f"Building password-based connection string for {config.postgis_host}")

    encoded_password = quote_plus(config.postgis_password)

    return (
        f"postgresql://{config.postgis_user}:{encoded_password}"
        f"@{config.postgis_host}:{config.postgis_port}"
        f"/{config.postgis_database}"
        f"?sslmode=require"
    )


def _build_managed_identity_connection_string(config: AppConfig) -> str:
    """
    Build managed identity connection string with Azure AD token.

    Note:
        Token is acquired synchronously and has limited lifetime (~1 hour).
    """
    logger.info(f"Building managed identity connection string for {config.postgis_host}")

    try:
        from azure.identity import DefaultAzureCredential

        # Scope for Azure Database for PostgreSQL
        credential = DefaultAzureCredential()
        token = credential.get_token("https://ossrdbms-aad.database.windows.net/.default")

        logger.info("✅ Successfully acquired managed identity token")

        return (
            f"postgresql://{config.postgis_user}:{token.token}"
            f"@{config.postgis_host}:{config.postgis_port}"
            f"/{config.postgis_database}"
            f"?sslmode=require"
        )

    except ImportError as e:
        logger.error("azure-identity package not installed")
        raise ValueError(
            "Managed identity requires azure-identity package. "
            "Install with: pip install azure-identity"
        ) from e
    except Exception as e:
        logger.error(f"Failed to acquire managed identity token: {e}")
        raise RuntimeError(
            f"Managed identity authentication failed: {e}. "
            "Ensure system-assigned managed identity is enabled and has database permissions."
        ) from e
