# ============================================================================
# CLAUDE CONTEXT - FIELD RESOURCES MODULE
# ============================================================================
# STATUS: Configuration - Business entities
# PURPOSE: Schemas and descriptors for the field-operations tables
# LAST_REVIEWED: 18 OCT 2026
# EXPORTS: RESOURCE_DESCRIPTORS, ATTENDANCE
# DEPENDENCIES: pydantic, resource_api
# ============================================================================

from .descriptors import ATTENDANCE, RESOURCE_DESCRIPTORS

__all__ = ["ATTENDANCE", "RESOURCE_DESCRIPTORS"]
