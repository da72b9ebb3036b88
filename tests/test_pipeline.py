"""Tests for the geofence-gated create pipeline."""

import math
from decimal import Decimal

import pytest

from conftest import (
    FIXED_NOW,
    GATED_POLICY,
    INFO_POLICY,
    FakeGeoProvider,
    context_with,
    fixed_clock,
    site_visit_descriptor,
)
from resource_api.candidate import MutationSource
from resource_api.descriptor import GeoPolicy, MatchStrategy, RequiredGeofence, TrackingFields
from resource_api.errors import GeofenceRejection, RecordValidationError
from resource_api.pipeline import (
    GeofenceGatedCreatePipeline,
    find_matching_geofence,
    parse_coordinate,
    resolve_path,
)
from services.geo_provider import (
    GeoProviderConfigurationError,
    ProviderTimeoutError,
    ProviderTransientError,
)

SITE_FENCE = {"_id": "gf1", "tag": "site", "externalId": "S-1", "description": "Beltola Depot"}


def _pipeline(store, resource_config, geo_policy=None, geo_provider=None, **kwargs):
    return GeofenceGatedCreatePipeline(
        site_visit_descriptor(geo_policy=geo_policy, **kwargs),
        store,
        geo_provider=geo_provider,
        config=resource_config,
        clock=fixed_clock,
    )


def _body(**overrides):
    body = {
        "user_id": 7,
        "site_name": "Beltola Depot",
        "location": "Guwahati",
        "latitude": 26.12,
        "longitude": 91.79,
    }
    body.update(overrides)
    return body


# ============================================================================
# No geo policy
# ============================================================================

def test_create_without_geo_policy_never_calls_provider(store, resource_config, geo):
    """Coordinates on an ungated resource are plain fields."""
    pipeline = _pipeline(store, resource_config, geo_provider=geo)

    with_coords = pipeline.run(_body())
    without_coords = pipeline.run(_body(latitude=None, longitude=None))

    assert geo.calls == []
    assert with_coords.nearby_geofences is None and without_coords.nearby_geofences is None
    assert with_coords.record["latitude"] == Decimal("26.12")
    assert without_coords.record["latitude"] is None


def test_auto_fill_supplies_missing_and_null_fields(store, resource_config):
    pipeline = _pipeline(store, resource_config)

    absent = pipeline.run(_body())
    null = pipeline.run(_body(visit_date=None, status=None))

    for result in (absent, null):
        assert result.record["visit_date"] == FIXED_NOW.date()
        assert result.record["status"] == "open"
        assert {"visit_date", "status"} <= {
            m.field for m in result.mutations if m.source is MutationSource.AUTO_FILL
        }


def test_auto_fill_keeps_caller_value(store, resource_config):
    result = _pipeline(store, resource_config).run(_body(visit_date="2026-10-01", status="closed"))

    assert str(result.record["visit_date"]) == "2026-10-01"
    assert result.record["status"] == "closed"


def test_persisted_record_is_validator_output(store, resource_config):
    """Unknown keys are dropped and strings coerced before the insert."""
    result = _pipeline(store, resource_config).run(_body(latitude="26.5", unknown_column="x"))

    stored = store.rows[0]
    assert "unknown_column" not in stored
    assert stored["latitude"] == Decimal("26.5")
    assert result.record["id"] == stored["id"]
    assert stored["created_at"] == FIXED_NOW and stored["updated_at"] == FIXED_NOW


def test_validation_failure_writes_nothing(store, resource_config):
    with pytest.raises(RecordValidationError) as exc:
        _pipeline(store, resource_config).run(_body(user_id=0, site_name=""))

    fields = {error.field for error in exc.value.errors}
    assert {"user_id", "site_name"} <= fields
    assert store.inserts == 0


# ============================================================================
# Hard gate
# ============================================================================

def test_gate_match_creates_record(store, resource_config):
    geo = FakeGeoProvider(context=context_with(SITE_FENCE), nearby={"geofences": [SITE_FENCE]})

    result = _pipeline(store, resource_config, GATED_POLICY, geo).run(_body())

    assert geo.actions() == ["track", "context", "search.geofences"]
    assert result.geofence_match == SITE_FENCE
    assert result.nearby_geofences == [SITE_FENCE]
    assert store.inserts == 1


def test_gate_mismatch_rejects_with_configured_message(store, resource_config):
    other = dict(SITE_FENCE, description="Somewhere Else")
    geo = FakeGeoProvider(context=context_with(other))

    with pytest.raises(GeofenceRejection) as exc:
        _pipeline(store, resource_config, GATED_POLICY, geo).run(_body())

    assert exc.value.message == "Not at the site"
    assert exc.value.status_code == 400
    assert store.inserts == 0
    assert "search.geofences" not in geo.actions()


def test_gate_requires_tag_and_identifier(store, resource_config):
    wrong_tag = dict(SITE_FENCE, tag="dealer")
    geo = FakeGeoProvider(context=context_with(wrong_tag))

    with pytest.raises(GeofenceRejection):
        _pipeline(store, resource_config, GATED_POLICY, geo).run(_body())
    assert store.inserts == 0


def test_gate_match_does_not_bypass_validation(store, resource_config):
    geo = FakeGeoProvider(context=context_with(SITE_FENCE))

    with pytest.raises(RecordValidationError):
        _pipeline(store, resource_config, GATED_POLICY, geo).run(_body(user_id="not-a-number"))
    assert store.inserts == 0


@pytest.mark.parametrize("error", [
    ProviderTimeoutError("timed out", action="context"),
    ProviderTransientError("502", action="context", status_code=502),
    GeoProviderConfigurationError("no key"),
])
def test_gate_fails_closed_when_context_unavailable(store, resource_config, error):
    geo = FakeGeoProvider(errors={"context": error})

    with pytest.raises(GeofenceRejection) as exc:
        _pipeline(store, resource_config, GATED_POLICY, geo).run(_body())

    assert exc.value.message == "Not at the site"
    assert store.inserts == 0


def test_gate_rejects_without_provider(store, resource_config):
    with pytest.raises(GeofenceRejection):
        _pipeline(store, resource_config, GATED_POLICY, geo_provider=None).run(_body())
    assert store.inserts == 0


@pytest.mark.parametrize("latitude", [None, "", "north", True, float("nan"), 91])
def test_gate_rejects_unusable_coordinates(store, resource_config, geo, latitude):
    with pytest.raises(GeofenceRejection):
        _pipeline(store, resource_config, GATED_POLICY, geo).run(_body(latitude=latitude))
    assert geo.calls == []


def test_gate_default_message_names_tag(store, resource_config):
    policy = GeoPolicy(
        tracking_fields=TrackingFields(lat_field="latitude", lng_field="longitude"),
        required_geofence=RequiredGeofence(tag="warehouse", match_field="site_name"),
    )
    with pytest.raises(GeofenceRejection) as exc:
        _pipeline(store, resource_config, policy, FakeGeoProvider()).run(_body())

    assert "warehouse" in exc.value.message


def test_gate_matches_enriched_value(store, resource_config):
    """The match field is read after enrichment."""
    policy = GeoPolicy(
        tracking_fields=TrackingFields(lat_field="latitude", lng_field="longitude"),
        enrich_mappings={"site_name": "geofences.0.externalId"},
        required_geofence=RequiredGeofence(tag="site", match_field="site_name"),
    )
    geo = FakeGeoProvider(context=context_with(SITE_FENCE))

    result = _pipeline(store, resource_config, policy, geo).run(_body(site_name=None))

    assert result.record["site_name"] == "S-1"


# ============================================================================
# Best-effort provider calls
# ============================================================================

def test_track_failure_is_absorbed(store, resource_config):
    geo = FakeGeoProvider(
        context=context_with(SITE_FENCE),
        errors={"track": ProviderTransientError("boom", action="track")},
    )

    result = _pipeline(store, resource_config, GATED_POLICY, geo).run(_body())

    assert result.record["id"]
    assert geo.actions()[:2] == ["track", "context"]


def test_context_failure_without_gate_skips_enrichment(store, resource_config):
    geo = FakeGeoProvider(errors={"context": ProviderTimeoutError("slow", action="context")})

    result = _pipeline(store, resource_config, INFO_POLICY, geo).run(_body())

    assert result.record["location"] == "Guwahati"
    assert result.nearby_geofences == []


def test_nearby_failure_returns_none(store, resource_config):
    geo = FakeGeoProvider(
        context=context_with(),
        errors={"search.geofences": ProviderTransientError("down", action="search.geofences")},
    )

    result = _pipeline(store, resource_config, INFO_POLICY, geo).run(_body())

    assert result.nearby_geofences is None
    assert store.inserts == 1


def test_unexpected_provider_errors_are_absorbed(store, resource_config):
    """A provider raising something outside the ProviderError family still does not fail the create."""
    geo = FakeGeoProvider(errors={
        "track": RuntimeError("socket closed"),
        "context": KeyError("context"),
        "search.geofences": ValueError("bad json"),
    })

    result = _pipeline(store, resource_config, INFO_POLICY, geo).run(_body())

    assert result.record["location"] == "Guwahati"
    assert result.nearby_geofences is None
    assert store.inserts == 1


def test_unexpected_context_error_rejects_gated_create(store, resource_config):
    geo = FakeGeoProvider(errors={"context": KeyError("context")})

    with pytest.raises(GeofenceRejection) as exc:
        _pipeline(store, resource_config, GATED_POLICY, geo).run(_body())

    assert exc.value.message == "Not at the site"
    assert store.inserts == 0


def test_track_skipped_without_owner(store, resource_config):
    geo = FakeGeoProvider(context=context_with())
    body = _body()
    del body["user_id"]

    with pytest.raises(RecordValidationError):
        _pipeline(store, resource_config, INFO_POLICY, geo).run(body)

    assert geo.actions() == ["context", "search.geofences"]
    assert store.inserts == 0


def test_enrichment_overwrites_caller_value(store, resource_config):
    geo = FakeGeoProvider(context=context_with(place_name="Fancy Bazar"))

    result = _pipeline(store, resource_config, INFO_POLICY, geo).run(_body(location="typed by hand"))

    assert result.record["location"] == "Fancy Bazar"
    assert [m.field for m in result.mutations if m.source is MutationSource.ENRICHMENT] == ["location"]


def test_enrichment_supplies_required_field(store, resource_config):
    geo = FakeGeoProvider(context=context_with(place_name="Ulubari"))

    result = _pipeline(store, resource_config, INFO_POLICY, geo).run(_body(location=None))

    assert result.record["location"] == "Ulubari"


def test_enrichment_skips_missing_paths(store, resource_config):
    geo = FakeGeoProvider(context={"context": {"geofences": []}})

    result = _pipeline(store, resource_config, INFO_POLICY, geo).run(_body())

    assert result.record["location"] == "Guwahati"


def test_track_sends_device_and_default_accuracy(store, resource_config):
    geo = FakeGeoProvider(context=context_with())

    _pipeline(store, resource_config, INFO_POLICY, geo).run(_body(latitude="26.12"))

    track = geo.calls[0][1]
    assert track["device_id"] == "device_7"
    assert track["user_id"] == "7"
    assert track["latitude"] == pytest.approx(26.12)
    assert track["accuracy"] == 10
    assert track["description"] == "Site Visit"


def test_nearby_search_uses_policy(store, resource_config):
    geo = FakeGeoProvider(context=context_with())

    _pipeline(store, resource_config, INFO_POLICY, geo).run(_body())

    search = geo.calls[-1][1]
    assert (search["tags"], search["limit"], search["radius"]) == ("dealer", 5, 500)


# ============================================================================
# Helpers
# ============================================================================

@pytest.mark.parametrize("value, expected", [
    (26.5, 26.5),
    ("91.79", 91.79),
    (Decimal("-45"), -45.0),
    (0, 0.0),
    (" 12.5 ", 12.5),
])
def test_parse_coordinate_accepts_numbers(value, expected):
    assert parse_coordinate(value, 180.0) == pytest.approx(expected)


@pytest.mark.parametrize("value", [None, "", "abc", True, False, math.nan, math.inf, 181, [1]])
def test_parse_coordinate_rejects_non_coordinates(value):
    assert parse_coordinate(value, 180.0) is None


def test_resolve_path_walks_dicts_and_lists():
    document = {"place": {"name": "Depot"}, "geofences": [{"externalId": "A"}, {"externalId": "B"}]}

    assert resolve_path(document, "place.name") == "Depot"
    assert resolve_path(document, "geofences.1.externalId") == "B"
    assert resolve_path(document, "geofences.5.externalId") is None
    assert resolve_path(document, "place.missing") is None
    assert resolve_path(document, "place.name.deeper") is None


def test_find_matching_geofence_compares_trimmed_strings():
    gate = RequiredGeofence(tag="site", match_field="code", match_strategy=MatchStrategy.EXTERNAL_ID)
    context = {"geofences": [{"tag": "site", "externalId": 42}]}

    assert find_matching_geofence(context, gate, " 42 ") == {"tag": "site", "externalId": 42}
    assert find_matching_geofence(context, gate, "") is None
    assert find_matching_geofence(context, gate, None) is None
