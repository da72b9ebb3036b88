# ============================================================================
# CLAUDE CONTEXT - DASHBOARD AGGREGATOR
# ============================================================================
# STATUS: Service + HTTP Trigger - Per-owner counters
# PURPOSE: GET /api/dashboard/stats/{owner_id}
# LAST_REVIEWED: 18 OCT 2026
# EXPORTS: DashboardAggregator, DashboardTrigger
# DEPENDENCIES: concurrent.futures, calendar
# PATTERNS: Parallel independent reads on a thread pool
# ============================================================================

"""
Dashboard Aggregator

Five independent reads against the registered resource stores, issued in
parallel:

    attendance   today's attendance row (present / punch-in / punch-out)
    dvr          visit reports dated this month
    daily-tasks  tasks still 'Assigned'
    dealers      dealers owned
    leave-applications  applications still 'Pending'

A failure in any read fails the whole request (StorageError -> 500).
"""

import calendar
from concurrent.futures import ThreadPoolExecutor
from datetime import date
from typing import Any, Dict, Optional

import azure.functions as func

from util_logger import LoggerFactory, ComponentType, log_exceptions
from infrastructure.record_store import DateRange, RecordQuery
from .errors import FieldError, RecordValidationError
from .models import AttendanceSummary, DashboardCounts, DashboardStats
from .registry import ResourceRegistry
from .triggers import BaseResourceTrigger

logger = LoggerFactory.create_logger(ComponentType.SERVICE, "DashboardAggregator")


@log_exceptions(logger=logger)
def _read(operation, query: RecordQuery):
    """One store read on a worker thread; failures are logged before they propagate."""
    return operation(query)


def _month_bounds(today: date):
    last_day = calendar.monthrange(today.year, today.month)[1]
    return today.replace(day=1), today.replace(day=last_day)


class DashboardAggregator:
    """Reads the stores of already-registered resources."""

    def __init__(self, registry: ResourceRegistry, max_workers: int = 5):
        self.registry = registry
        self.max_workers = max_workers

    def stats(self, owner_id: Any) -> DashboardStats:
        """
        Counters for one owner.

        Raises:
            RecordValidationError: Owner id is not an integer
        """
        owner = self._owner(owner_id)
        today = self.registry.clock().date()
        month_start, month_end = _month_bounds(today)

        attendance = self.registry.service("attendance").store
        dvr = self.registry.service("dvr").store
        tasks = self.registry.service("daily-tasks").store
        dealers = self.registry.service("dealers").store
        leaves = self.registry.service("leave-applications").store

        with ThreadPoolExecutor(max_workers=self.max_workers) as executor:
            today_attendance = executor.submit(_read, attendance.find, RecordQuery(
                equals={"user_id": owner, "attendance_date": today},
                order_by="in_time_timestamp",
                limit=1
            ))
            monthly_reports = executor.submit(_read, dvr.count, RecordQuery(
                equals={"user_id": owner},
                date_range=DateRange("report_date", month_start, month_end)
            ))
            pending_tasks = executor.submit(_read, tasks.count, RecordQuery(
                equals={"user_id": owner, "status": "Assigned"}
            ))
            total_dealers = executor.submit(_read, dealers.count, RecordQuery(
                equals={"user_id": owner}
            ))
            pending_leaves = executor.submit(_read, leaves.count, RecordQuery(
                equals={"user_id": owner, "status": "Pending"}
            ))

            rows = today_attendance.result()
            counts = DashboardCounts(
                monthly_reports=monthly_reports.result(),
                pending_tasks=pending_tasks.result(),
                total_dealers=total_dealers.result(),
                pending_leaves=pending_leaves.result()
            )

        row: Optional[Dict[str, Any]] = rows[0] if rows else None
        result = DashboardStats(
            attendance=AttendanceSummary(
                is_present=row is not None,
                punch_in_time=row.get("in_time_timestamp") if row else None,
                punch_out_time=row.get("out_time_timestamp") if row else None
            ),
            stats=counts
        )
        logger.info(
            "Dashboard stats computed",
            extra={'custom_dimensions': {'owner_id': owner, **counts.model_dump()}}
        )
        return result

    @staticmethod
    def _owner(owner_id: Any) -> int:
        try:
            return int(owner_id)
        except (TypeError, ValueError):
            raise RecordValidationError(
                "Invalid owner id - must be a number",
                [FieldError(path=("owner_id",), message="Expected an integer")]
            ) from None


class DashboardTrigger(BaseResourceTrigger):
    """Endpoint: GET /api/dashboard/stats/{owner_id}"""

    operation = "dashboard"

    def __init__(self, aggregator: DashboardAggregator):
        super().__init__()
        self.aggregator = aggregator
        self.display_name = "Dashboard stats"

    def process(self, req: func.HttpRequest) -> func.HttpResponse:
        stats = self.aggregator.stats(req.route_params.get('owner_id'))
        return self._success(stats.model_dump(mode='json', by_alias=True))
