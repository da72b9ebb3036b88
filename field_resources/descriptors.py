# ============================================================================
# CLAUDE CONTEXT - RESOURCE CATALOGUE
# ============================================================================
# STATUS: Configuration - Resources registered at startup
# PURPOSE: One ResourceDescriptor per field-operations table
# LAST_REVIEWED: 18 OCT 2026
# EXPORTS: RESOURCE_DESCRIPTORS, ATTENDANCE, plus one constant per resource
# DEPENDENCIES: resource_api.descriptor, field_resources.schemas
# ============================================================================

"""
Resource Catalogue

    path                   table                          date field
    ---------------------  -----------------------------  ------------------
    dvr                    daily_visit_reports            report_date
    tvr                    technical_visit_reports        report_date
    pjp                    permanent_journey_plans        plan_date
    dealers                dealers                        -
    daily-tasks            daily_tasks                    task_date
    leave-applications     salesman_leave_applications    start_date
    client-reports         client_reports                 -
    competition-reports    competition_reports            report_date
    dealer-reports-scores  dealer_reports_and_scores      last_updated_date
    attendance             salesman_attendance            attendance_date

Geo policies:
    dvr         tracks the visit, fills `location` from the nearest place and
                returns nearby dealer geofences
    attendance  punch-in must happen inside an `office` geofence whose
                description equals the submitted `location_name`
"""

from resource_api.descriptor import (
    AutoField,
    GeoPolicy,
    MatchStrategy,
    NearbySearch,
    RequiredGeofence,
    ResourceDescriptor,
    TrackingFields,
)
from .schemas import (
    ClientReport,
    CompetitionReport,
    DailyTask,
    DailyVisitReport,
    Dealer,
    DealerReportScore,
    LeaveApplication,
    PermanentJourneyPlan,
    SalesmanAttendance,
    TechnicalVisitReport,
)

DAILY_VISIT_REPORTS = ResourceDescriptor(
    endpoint_path="dvr",
    table="daily_visit_reports",
    schema=DailyVisitReport,
    display_name="Daily Visit Report",
    date_field="report_date",
    auto_fields={
        "report_date": AutoField.current_date(),
        "check_in_time": AutoField.current_timestamp(),
    },
    geo_policy=GeoPolicy(
        tracking_fields=TrackingFields(lat_field="latitude", lng_field="longitude"),
        enrich_mappings={"location": "place.name"},
        nearby_search=NearbySearch(tag_filter="dealer", limit=5, radius_meters=500),
    ),
)

TECHNICAL_VISIT_REPORTS = ResourceDescriptor(
    endpoint_path="tvr",
    table="technical_visit_reports",
    schema=TechnicalVisitReport,
    display_name="Technical Visit Report",
    date_field="report_date",
    auto_fields={
        "report_date": AutoField.current_date(),
        "check_in_time": AutoField.current_timestamp(),
    },
)

PERMANENT_JOURNEY_PLANS = ResourceDescriptor(
    endpoint_path="pjp",
    table="permanent_journey_plans",
    schema=PermanentJourneyPlan,
    display_name="Permanent Journey Plan",
    date_field="plan_date",
    auto_fields={
        "plan_date": AutoField.current_date(),
        "status": AutoField.constant("planned"),
    },
)

DEALERS = ResourceDescriptor(
    endpoint_path="dealers",
    table="dealers",
    schema=Dealer,
    display_name="Dealer",
)

DAILY_TASKS = ResourceDescriptor(
    endpoint_path="daily-tasks",
    table="daily_tasks",
    schema=DailyTask,
    display_name="Daily Task",
    date_field="task_date",
    auto_fields={
        "task_date": AutoField.current_date(),
        "status": AutoField.constant("Assigned"),
    },
)

LEAVE_APPLICATIONS = ResourceDescriptor(
    endpoint_path="leave-applications",
    table="salesman_leave_applications",
    schema=LeaveApplication,
    display_name="Leave Application",
    date_field="start_date",
    auto_fields={"status": AutoField.constant("Pending")},
)

CLIENT_REPORTS = ResourceDescriptor(
    endpoint_path="client-reports",
    table="client_reports",
    schema=ClientReport,
    display_name="Client Report",
    auto_fields={"check_out_time": AutoField.current_timestamp()},
)

COMPETITION_REPORTS = ResourceDescriptor(
    endpoint_path="competition-reports",
    table="competition_reports",
    schema=CompetitionReport,
    display_name="Competition Report",
    date_field="report_date",
    auto_fields={"report_date": AutoField.current_date()},
)

DEALER_REPORTS_SCORES = ResourceDescriptor(
    endpoint_path="dealer-reports-scores",
    table="dealer_reports_and_scores",
    schema=DealerReportScore,
    display_name="Dealer Report and Score",
    auto_fields={"last_updated_date": AutoField.current_timestamp()},
)

ATTENDANCE = ResourceDescriptor(
    endpoint_path="attendance",
    table="salesman_attendance",
    schema=SalesmanAttendance,
    display_name="Attendance",
    date_field="attendance_date",
    auto_fields={
        "attendance_date": AutoField.current_date(),
        "in_time_timestamp": AutoField.current_timestamp(),
    },
    geo_policy=GeoPolicy(
        tracking_fields=TrackingFields(
            lat_field="in_time_latitude",
            lng_field="in_time_longitude",
            accuracy_field="in_time_accuracy",
        ),
        required_geofence=RequiredGeofence(
            tag="office",
            match_field="location_name",
            match_strategy=MatchStrategy.DESCRIPTION,
            error_message="You are not within office premises",
        ),
    ),
)

RESOURCE_DESCRIPTORS = (
    DAILY_VISIT_REPORTS,
    TECHNICAL_VISIT_REPORTS,
    PERMANENT_JOURNEY_PLANS,
    DEALERS,
    DAILY_TASKS,
    LEAVE_APPLICATIONS,
    CLIENT_REPORTS,
    COMPETITION_REPORTS,
    DEALER_REPORTS_SCORES,
    ATTENDANCE,
)
