"""Tests for the generated HTTP triggers and the response envelope."""

import pytest

from conftest import (
    GATED_POLICY,
    FakeGeoProvider,
    context_with,
    fixed_clock,
    make_request,
    response_json,
    site_visit_descriptor,
)
from resource_api.errors import StorageError
from resource_api.service import ResourceService
from resource_api.triggers import get_resource_triggers

URL = "http://localhost/api/site-visits"


def _handlers(store, resource_config, geo_policy=None, geo_provider=None):
    descriptor = site_visit_descriptor(geo_policy=geo_policy)
    service = ResourceService(descriptor, store, geo_provider=geo_provider, config=resource_config, clock=fixed_clock)
    return {t['name']: t['handler'] for t in get_resource_triggers(descriptor, service)}


def _create_body(**overrides):
    body = {"user_id": 7, "site_name": "Depot", "location": "Guwahati", "latitude": "26.1", "longitude": "91.7"}
    body.update(overrides)
    return body


def test_trigger_table_names_routes_and_methods(store, resource_config):
    descriptor = site_visit_descriptor()
    service = ResourceService(descriptor, store, config=resource_config)

    triggers = get_resource_triggers(descriptor, service)

    assert [(t['name'], t['route'], t['methods']) for t in triggers] == [
        ("site_visits_create", "site-visits", ["POST"]),
        ("site_visits_list_by_owner", "site-visits/owner/{owner_id}", ["GET"]),
        ("site_visits_get", "site-visits/{record_id}", ["GET"]),
        ("site_visits_update", "site-visits/{record_id}", ["PUT"]),
        ("site_visits_delete", "site-visits/{record_id}", ["DELETE"]),
    ]


def test_create_returns_envelope_with_message(store, resource_config):
    handlers = _handlers(store, resource_config)

    response = handlers["site_visits_create"](make_request("POST", URL, body=_create_body()))
    payload = response_json(response)

    assert response.status_code == 200
    assert payload["success"] is True
    assert payload["message"] == "Site Visit created successfully"
    assert payload["data"]["visit_date"] == "2026-10-18"
    assert payload["data"]["latitude"] == "26.1"
    assert "nearby_geofences" not in payload
    assert "error" not in payload


def test_create_attaches_nearby_geofences(store, resource_config):
    fence = {"_id": "g1", "tag": "site", "description": "Depot"}
    geo = FakeGeoProvider(context=context_with(fence), nearby={"geofences": [fence]})
    handlers = _handlers(store, resource_config, GATED_POLICY, geo)

    payload = response_json(handlers["site_visits_create"](make_request("POST", URL, body=_create_body())))

    assert payload["nearby_geofences"] == [fence]


def test_create_geofence_rejection_is_400(store, resource_config):
    handlers = _handlers(store, resource_config, GATED_POLICY, FakeGeoProvider())

    response = handlers["site_visits_create"](make_request("POST", URL, body=_create_body()))

    assert response.status_code == 400
    assert response_json(response) == {"success": False, "error": "Not at the site"}
    assert store.inserts == 0


def test_create_validation_error_carries_field_details(store, resource_config):
    handlers = _handlers(store, resource_config)

    response = handlers["site_visits_create"](make_request("POST", URL, body=_create_body(user_id=-1)))
    payload = response_json(response)

    assert response.status_code == 400
    assert payload["success"] is False
    assert payload["error"] == "Validation failed for SiteVisit"
    assert payload["details"][0]["field"] == "user_id"
    assert payload["details"][0]["path"] == ["user_id"]


@pytest.mark.parametrize("raw_body", [b"{not json", b"[1, 2]", b""])
def test_create_rejects_non_object_bodies(store, resource_config, raw_body):
    handlers = _handlers(store, resource_config)

    response = handlers["site_visits_create"](make_request("POST", URL, raw_body=raw_body))

    assert response.status_code == 400
    assert response_json(response)["success"] is False


def test_storage_error_is_500(store, resource_config, monkeypatch):
    handlers = _handlers(store, resource_config)

    def _fail(record):
        raise StorageError("Failed to insert Site Visit", operation="insert", resource="Site Visit")

    monkeypatch.setattr(store, "insert", _fail)
    response = handlers["site_visits_create"](make_request("POST", URL, body=_create_body()))

    assert response.status_code == 500
    assert response_json(response)["error"] == "Failed to insert Site Visit"


def test_unexpected_error_is_500_with_details(store, resource_config, monkeypatch):
    handlers = _handlers(store, resource_config)

    def _explode(record_id):
        raise RuntimeError("disk on fire")

    monkeypatch.setattr(store, "get", _explode)
    response = handlers["site_visits_get"](
        make_request("GET", f"{URL}/abc", route_params={"record_id": "abc"})
    )

    assert response.status_code == 500
    assert response_json(response) == {
        "success": False,
        "error": "Failed to get Site Visit",
        "details": "disk on fire",
    }


def test_list_get_update_delete_round(store, resource_config):
    handlers = _handlers(store, resource_config)
    created = response_json(handlers["site_visits_create"](make_request("POST", URL, body=_create_body())))
    record_id = created["data"]["id"]

    listed = response_json(handlers["site_visits_list_by_owner"](make_request(
        "GET", f"{URL}/owner/7", params={"limit": "10"}, route_params={"owner_id": "7"}
    )))
    assert [row["id"] for row in listed["data"]] == [record_id]

    fetched = response_json(handlers["site_visits_get"](make_request(
        "GET", f"{URL}/{record_id}", route_params={"record_id": record_id}
    )))
    assert fetched["data"]["site_name"] == "Depot"

    updated = response_json(handlers["site_visits_update"](make_request(
        "PUT", f"{URL}/{record_id}", body={"notes": "follow up"}, route_params={"record_id": record_id}
    )))
    assert updated["message"] == "Site Visit updated successfully"
    assert updated["data"]["notes"] == "follow up"

    deleted = response_json(handlers["site_visits_delete"](make_request(
        "DELETE", f"{URL}/{record_id}", route_params={"record_id": record_id}
    )))
    assert deleted["message"] == "Site Visit deleted successfully"
    assert deleted["data"]["id"] == record_id


def test_missing_record_is_404(store, resource_config):
    handlers = _handlers(store, resource_config)

    response = handlers["site_visits_delete"](make_request(
        "DELETE", f"{URL}/nope", route_params={"record_id": "nope"}
    ))

    assert response.status_code == 404
    assert response_json(response) == {"success": False, "error": "Site Visit not found"}


def test_list_with_bad_owner_is_400(store, resource_config):
    handlers = _handlers(store, resource_config)

    response = handlers["site_visits_list_by_owner"](make_request(
        "GET", f"{URL}/owner/abc", route_params={"owner_id": "abc"}
    ))

    assert response.status_code == 400
    assert response_json(response)["details"][0]["path"] == ["query", "ownerId"]
