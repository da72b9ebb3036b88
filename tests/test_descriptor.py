"""Tests for resource descriptors, auto fields and the resource catalogue."""

from dataclasses import FrozenInstanceError
from datetime import date

import pytest
from pydantic import BaseModel

from conftest import FIXED_NOW, SiteVisit, site_visit_descriptor
from field_resources import ATTENDANCE, RESOURCE_DESCRIPTORS
from resource_api.descriptor import AutoField, AutoFieldKind, ResourceDescriptor
from resource_api.errors import ResourceConfigurationError


def test_auto_field_generators():
    assert AutoField.current_date().generate(FIXED_NOW) == date(2026, 10, 18)
    assert AutoField.current_timestamp().generate(FIXED_NOW) == FIXED_NOW
    assert AutoField.constant("Pending").generate(FIXED_NOW) == "Pending"
    assert AutoField.constant("Pending").kind is AutoFieldKind.CONSTANT


def test_descriptor_derived_names():
    descriptor = site_visit_descriptor()

    assert descriptor.function_prefix == "site_visits"
    assert descriptor.order_field == "visit_date"


def test_descriptor_without_date_field_orders_by_creation():
    descriptor = ResourceDescriptor("site-visits", "site_visits", SiteVisit, "Site Visit")

    assert descriptor.order_field == "created_at"


def test_descriptor_is_immutable():
    descriptor = site_visit_descriptor()

    with pytest.raises(FrozenInstanceError):
        descriptor.table = "other"
    with pytest.raises(TypeError):
        descriptor.auto_fields["status"] = AutoField.constant("x")


@pytest.mark.parametrize("kwargs, message", [
    ({"endpoint_path": "Site_Visits"}, "kebab-case"),
    ({"table": "site visits; drop"}, "table name"),
    ({"date_field": "when"}, "date field"),
    ({"auto_fields": {"ghost": AutoField.current_date()}}, "auto field"),
    ({"owner_field": "agent_id"}, "owner field"),
])
def test_descriptor_rejects_bad_configuration(kwargs, message):
    params = dict(endpoint_path="site-visits", table="site_visits", schema=SiteVisit, display_name="Site Visit")
    params.update(kwargs)

    with pytest.raises(ResourceConfigurationError, match=message):
        ResourceDescriptor(**params)


def test_descriptor_requires_pydantic_schema():
    with pytest.raises(ResourceConfigurationError):
        ResourceDescriptor("site-visits", "site_visits", dict, "Site Visit")


def test_catalogue_paths_are_unique_and_complete():
    paths = [d.endpoint_path for d in RESOURCE_DESCRIPTORS]

    assert len(paths) == len(set(paths))
    assert set(paths) == {
        "dvr", "tvr", "pjp", "dealers", "daily-tasks", "leave-applications",
        "client-reports", "competition-reports", "dealer-reports-scores", "attendance",
    }
    assert all(issubclass(d.schema, BaseModel) for d in RESOURCE_DESCRIPTORS)


def test_attendance_is_gated_on_office_geofence():
    gate = ATTENDANCE.geo_policy.required_geofence

    assert gate.tag == "office"
    assert gate.match_field == "location_name"
    assert gate.message == "You are not within office premises"
