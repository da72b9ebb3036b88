"""Tests for the dashboard aggregator and its trigger."""

import logging
from datetime import date, timedelta

import pytest

from conftest import FIXED_NOW, InMemoryRecordStore, RecordingApp, fixed_clock, make_request, response_json
from field_resources import RESOURCE_DESCRIPTORS
from resource_api.dashboard import DashboardAggregator, DashboardTrigger
from resource_api.errors import RecordValidationError, StorageError
from resource_api.registry import ResourceRegistry


@pytest.fixture
def stores():
    return {}


@pytest.fixture
def registry(stores, resource_config):
    def store_factory(descriptor):
        stores[descriptor.endpoint_path] = InMemoryRecordStore()
        return stores[descriptor.endpoint_path]

    registry = ResourceRegistry(RecordingApp(), store_factory, config=resource_config, clock=fixed_clock)
    for descriptor in RESOURCE_DESCRIPTORS:
        registry.register(descriptor)
    return registry


def _seed(stores):
    today = FIXED_NOW.date()
    stores["attendance"].insert({
        "user_id": 7, "attendance_date": today, "in_time_timestamp": FIXED_NOW, "out_time_timestamp": None,
    })
    for day in (date(2026, 10, 1), date(2026, 10, 17), date(2026, 9, 30)):
        stores["dvr"].insert({"user_id": 7, "report_date": day})
    stores["dvr"].insert({"user_id": 8, "report_date": today})
    for status in ("Assigned", "Assigned", "Completed"):
        stores["daily-tasks"].insert({"user_id": 7, "status": status})
    for _ in range(4):
        stores["dealers"].insert({"user_id": 7})
    for status in ("Pending", "Approved"):
        stores["leave-applications"].insert({"user_id": 7, "status": status})


def test_stats_counts_owner_records(registry, stores):
    _seed(stores)

    stats = DashboardAggregator(registry).stats("7")

    assert stats.attendance.is_present is True
    assert stats.attendance.punch_in_time == FIXED_NOW
    assert stats.attendance.punch_out_time is None
    assert stats.stats.monthly_reports == 2
    assert stats.stats.pending_tasks == 2
    assert stats.stats.total_dealers == 4
    assert stats.stats.pending_leaves == 1


def test_stats_for_owner_without_records(registry, stores):
    stores["attendance"].insert({
        "user_id": 7, "attendance_date": FIXED_NOW.date() - timedelta(days=1), "in_time_timestamp": FIXED_NOW,
    })

    stats = DashboardAggregator(registry).stats(7)

    assert stats.attendance.is_present is False
    assert stats.stats.model_dump() == {
        "monthly_reports": 0, "pending_tasks": 0, "total_dealers": 0, "pending_leaves": 0,
    }


def test_stats_rejects_non_integer_owner(registry):
    with pytest.raises(RecordValidationError) as exc:
        DashboardAggregator(registry).stats("seven")

    assert exc.value.message == "Invalid owner id - must be a number"


def test_dashboard_trigger_serializes_camel_case(registry, stores):
    _seed(stores)
    trigger = DashboardTrigger(DashboardAggregator(registry))

    response = trigger.handle(make_request(
        "GET", "http://localhost/api/dashboard/stats/7", route_params={"owner_id": "7"}
    ))
    payload = response_json(response)

    assert response.status_code == 200
    assert payload["success"] is True
    assert payload["data"]["attendance"]["isPresent"] is True
    assert payload["data"]["stats"] == {
        "monthlyReports": 2, "pendingTasks": 2, "totalDealers": 4, "pendingLeaves": 1,
    }


def test_dashboard_trigger_bad_owner_is_400(registry):
    response = DashboardTrigger(DashboardAggregator(registry)).handle(make_request(
        "GET", "http://localhost/api/dashboard/stats/x", route_params={"owner_id": "x"}
    ))

    assert response.status_code == 400


def test_failed_read_is_logged_and_raised(registry, stores, monkeypatch, caplog):
    def broken_count(query):
        raise StorageError("Failed to count Dealer", operation="count", resource="dealers")

    monkeypatch.setattr(stores["dealers"], "count", broken_count)

    with pytest.raises(StorageError):
        DashboardAggregator(registry).stats(7)

    errors = [r for r in caplog.records if r.levelno == logging.ERROR]
    assert errors[0].custom_dimensions["function_name"] == "_read"
    assert errors[0].custom_dimensions["exception_type"] == "StorageError"
