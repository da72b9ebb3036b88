# ============================================================================
# CLAUDE CONTEXT - FIELD OPERATIONS SCHEMAS
# ============================================================================
# STATUS: Models - Validation schemas for the business entities
# PURPOSE: Pydantic models validating create/update payloads per table
# LAST_REVIEWED: 18 OCT 2026
# EXPORTS: DailyVisitReport, TechnicalVisitReport, PermanentJourneyPlan, Dealer,
#          DailyTask, LeaveApplication, ClientReport, CompetitionReport,
#          DealerReportScore, SalesmanAttendance
# INTERFACES: Pydantic BaseModel
# DEPENDENCIES: pydantic
# PATTERNS: Data Transfer Objects (DTOs)
# ============================================================================

"""
Field Operations Schemas

One model per table, covering the columns a client may write. Server
managed columns (id, created_at, updated_at) are not part of any schema.
Unknown keys are ignored.

Decimal columns accept numbers or numeric strings (mobile clients send
coordinates as strings).
"""

from datetime import date, datetime
from decimal import Decimal
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

Latitude = Field(ge=-90, le=90)
Longitude = Field(ge=-180, le=180)


class FieldOpsModel(BaseModel):
    """Base for all entity schemas."""
    model_config = ConfigDict(extra="ignore", str_strip_whitespace=True)

    user_id: int = Field(gt=0, description="Owning field agent")


class DailyVisitReport(FieldOpsModel):
    report_date: date
    dealer_type: str = Field(min_length=1, max_length=50)
    dealer_name: Optional[str] = Field(default=None, max_length=255)
    sub_dealer_name: Optional[str] = Field(default=None, max_length=255)
    location: str = Field(min_length=1, max_length=500)
    latitude: Decimal = Latitude
    longitude: Decimal = Longitude
    visit_type: str = Field(min_length=1, max_length=50)
    dealer_total_potential: Decimal = Field(ge=0)
    dealer_best_potential: Decimal = Field(ge=0)
    brand_selling: List[str] = Field(min_length=1)
    contact_person: Optional[str] = Field(default=None, max_length=255)
    contact_person_phone_no: Optional[str] = Field(default=None, max_length=20)
    today_order_mt: Decimal = Field(ge=0)
    today_collection_rupees: Decimal = Field(ge=0)
    feedbacks: str = Field(max_length=500)
    solution_by_salesperson: Optional[str] = Field(default=None, max_length=500)
    any_remarks: Optional[str] = Field(default=None, max_length=500)
    check_in_time: datetime
    check_out_time: Optional[datetime] = None
    in_time_image_url: Optional[str] = Field(default=None, max_length=500)
    out_time_image_url: Optional[str] = Field(default=None, max_length=500)


class TechnicalVisitReport(FieldOpsModel):
    report_date: date
    visit_type: str = Field(min_length=1, max_length=50)
    site_name_concerned_person: str = Field(min_length=1, max_length=255)
    phone_no: str = Field(min_length=1, max_length=20)
    email_id: Optional[str] = Field(default=None, max_length=255)
    clients_remarks: str = Field(max_length=500)
    salesperson_remarks: str = Field(max_length=500)
    check_in_time: datetime
    check_out_time: Optional[datetime] = None
    in_time_image_url: Optional[str] = Field(default=None, max_length=500)
    out_time_image_url: Optional[str] = Field(default=None, max_length=500)


class PermanentJourneyPlan(FieldOpsModel):
    plan_date: date
    area_to_be_visited: str = Field(min_length=1, max_length=500)
    description: Optional[str] = Field(default=None, max_length=500)
    status: str = Field(min_length=1, max_length=50)


class Dealer(FieldOpsModel):
    type: str = Field(min_length=1, max_length=50)
    parent_dealer_id: Optional[str] = Field(default=None, max_length=255)
    name: str = Field(min_length=1, max_length=255)
    region: str = Field(min_length=1, max_length=100)
    area: str = Field(min_length=1, max_length=255)
    phone_no: str = Field(min_length=1, max_length=20)
    address: str = Field(min_length=1, max_length=500)
    total_potential: Decimal = Field(ge=0)
    best_potential: Decimal = Field(ge=0)
    brand_selling: List[str] = Field(min_length=1)
    feedbacks: str = Field(max_length=500)
    remarks: Optional[str] = Field(default=None, max_length=500)


class DailyTask(FieldOpsModel):
    assigned_by_user_id: int = Field(gt=0)
    task_date: date
    visit_type: str = Field(min_length=1, max_length=50)
    related_dealer_id: Optional[str] = Field(default=None, max_length=255)
    site_name: Optional[str] = Field(default=None, max_length=255)
    description: Optional[str] = Field(default=None, max_length=500)
    status: str = Field(min_length=1, max_length=50)
    pjp_id: Optional[str] = Field(default=None, max_length=255)


class LeaveApplication(FieldOpsModel):
    leave_type: str = Field(min_length=1, max_length=100)
    start_date: date
    end_date: date
    reason: str = Field(min_length=1, max_length=500)
    status: str = Field(min_length=1, max_length=50)
    admin_remarks: Optional[str] = Field(default=None, max_length=500)

    @field_validator("end_date")
    @classmethod
    def validate_end_date(cls, v: date, info) -> date:
        """Leave cannot end before it starts."""
        start = info.data.get("start_date")
        if start is not None and v is not None and v < start:
            raise ValueError("end_date must be on or after start_date")
        return v


class ClientReport(FieldOpsModel):
    dealer_type: str = Field(min_length=1)
    dealer_sub_dealer_name: str = Field(min_length=1)
    location: str = Field(min_length=1)
    type_best_non_best: str = Field(min_length=1)
    dealer_total_potential: Decimal = Field(ge=0)
    dealer_best_potential: Decimal = Field(ge=0)
    brand_selling: List[str] = Field(min_length=1)
    contact_person: str = Field(min_length=1)
    contact_person_phone_no: str = Field(min_length=1)
    today_order_mt: Decimal = Field(ge=0)
    today_collection_rupees: Decimal = Field(ge=0)
    feedbacks: str
    solutions_as_per_salesperson: str
    any_remarks: str
    check_out_time: datetime


class CompetitionReport(FieldOpsModel):
    report_date: date
    brand_name: str = Field(min_length=1, max_length=255)
    billing: str = Field(max_length=100)
    nod: str = Field(max_length=100)
    retail: str = Field(max_length=100)
    schemes_yes_no: str = Field(pattern=r"^(Yes|No)$")
    avg_scheme_cost: Decimal = Field(ge=0)
    remarks: Optional[str] = Field(default=None, max_length=500)


class DealerReportScore(FieldOpsModel):
    dealer_id: str = Field(min_length=1, max_length=255)
    dealer_score: Decimal = Field(ge=0)
    trust_worthiness_score: Decimal = Field(ge=0)
    credit_worthiness_score: Decimal = Field(ge=0)
    order_history_score: Decimal = Field(ge=0)
    visit_frequency_score: Decimal = Field(ge=0)
    last_updated_date: datetime


class SalesmanAttendance(FieldOpsModel):
    attendance_date: date
    location_name: str = Field(min_length=1, max_length=500)
    in_time_timestamp: datetime
    out_time_timestamp: Optional[datetime] = None
    in_time_image_captured: bool = False
    out_time_image_captured: bool = False
    in_time_image_url: Optional[str] = Field(default=None, max_length=500)
    out_time_image_url: Optional[str] = Field(default=None, max_length=500)
    in_time_latitude: Decimal = Latitude
    in_time_longitude: Decimal = Longitude
    in_time_accuracy: Optional[Decimal] = Field(default=None, ge=0)
    in_time_speed: Optional[Decimal] = None
    in_time_heading: Optional[Decimal] = None
    in_time_altitude: Optional[Decimal] = None
    out_time_latitude: Optional[Decimal] = Field(default=None, ge=-90, le=90)
    out_time_longitude: Optional[Decimal] = Field(default=None, ge=-180, le=180)
    out_time_accuracy: Optional[Decimal] = Field(default=None, ge=0)
    out_time_speed: Optional[Decimal] = None
    out_time_heading: Optional[Decimal] = None
    out_time_altitude: Optional[Decimal] = None
