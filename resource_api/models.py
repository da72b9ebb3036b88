# ============================================================================
# CLAUDE CONTEXT - RESOURCE API RESPONSE MODELS
# ============================================================================
# STATUS: Standalone Models - Response envelope
# PURPOSE: The {success, data, error, details} body returned by every endpoint
# LAST_REVIEWED: 18 OCT 2026
# EXPORTS: ResourceEnvelope, DashboardStats, DashboardCounts, AttendanceSummary
# INTERFACES: Pydantic BaseModel
# DEPENDENCIES: pydantic, typing
# PATTERNS: Data Transfer Objects (DTOs)
# ============================================================================

"""
Resource API Pydantic Models

All generated endpoints answer with the same envelope:

    {"success": true,  "data": {...}, "message": "Daily Visit Report created successfully"}
    {"success": false, "error": "Validation failed for DailyVisitReport", "details": [...]}

Only fields that were explicitly set are serialized (exclude_unset), so a
nullable column inside `data` is still returned as null.
"""

from datetime import datetime
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field


class ResourceEnvelope(BaseModel):
    """Standard response body."""
    success: bool = Field(description="True when the operation completed")
    data: Optional[Any] = Field(default=None, description="Row, list of rows, or aggregate")
    error: Optional[str] = Field(default=None, description="Human-readable error")
    details: Optional[Any] = Field(default=None, description="Field errors or extra context")
    message: Optional[str] = Field(default=None, description="Success message")
    nearby_geofences: Optional[List[Dict[str, Any]]] = Field(
        default=None,
        description="Informational geofence search attached to a create"
    )

    def to_json_dict(self) -> Dict[str, Any]:
        return self.model_dump(mode='json', exclude_unset=True)


class AttendanceSummary(BaseModel):
    is_present: bool = Field(serialization_alias="isPresent")
    punch_in_time: Optional[datetime] = Field(default=None, serialization_alias="punchInTime")
    punch_out_time: Optional[datetime] = Field(default=None, serialization_alias="punchOutTime")


class DashboardCounts(BaseModel):
    monthly_reports: int = Field(default=0, serialization_alias="monthlyReports")
    pending_tasks: int = Field(default=0, serialization_alias="pendingTasks")
    total_dealers: int = Field(default=0, serialization_alias="totalDealers")
    pending_leaves: int = Field(default=0, serialization_alias="pendingLeaves")


class DashboardStats(BaseModel):
    """Per-owner counters for the mobile home screen (serialize with by_alias=True)."""
    attendance: AttendanceSummary
    stats: DashboardCounts
