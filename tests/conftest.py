"""Shared fixtures: in-memory record store, scripted geo provider, fixed clock."""

import json
import uuid
from datetime import date, datetime, timezone
from decimal import Decimal
from typing import Any, Dict, List, Optional

import azure.functions as func
import pytest
from pydantic import BaseModel, Field

from infrastructure.record_store import RecordQuery, RecordStore
from resource_api.config import ResourceAPIConfig
from resource_api.descriptor import (
    AutoField,
    GeoPolicy,
    MatchStrategy,
    NearbySearch,
    RequiredGeofence,
    ResourceDescriptor,
    TrackingFields,
)
from services.geo_provider import GeoProvider

FIXED_NOW = datetime(2026, 10, 18, 9, 30, tzinfo=timezone.utc)


def fixed_clock() -> datetime:
    return FIXED_NOW


class InMemoryRecordStore(RecordStore):
    """RecordStore over a list of dicts. Counts writes so tests can assert none happened."""

    def __init__(self, clock=fixed_clock):
        super().__init__(clock=clock)
        self.rows: List[Dict[str, Any]] = []
        self.inserts = 0

    def insert(self, record):
        row = self._stamp_new(record)
        self.rows.append(row)
        self.inserts += 1
        return dict(row)

    def get(self, record_id):
        for row in self.rows:
            if row[self.id_field] == record_id:
                return dict(row)
        return None

    def find(self, query: RecordQuery):
        matched = [row for row in self.rows if self._matches(row, query)]
        if query.order_by:
            matched.sort(key=lambda row: row.get(query.order_by), reverse=query.descending)
        if query.limit is not None:
            matched = matched[:query.limit]
        return [dict(row) for row in matched]

    def count(self, query: RecordQuery):
        return sum(1 for row in self.rows if self._matches(row, query))

    def update(self, record_id, values):
        for row in self.rows:
            if row[self.id_field] == record_id:
                row.update(values)
                return dict(row)
        return None

    def delete(self, record_id):
        for index, row in enumerate(self.rows):
            if row[self.id_field] == record_id:
                return self.rows.pop(index)
        return None

    @staticmethod
    def _matches(row, query: RecordQuery) -> bool:
        if any(row.get(column) != value for column, value in query.equals.items()):
            return False
        if query.date_range:
            value = row.get(query.date_range.field)
            if value is None or not (query.date_range.start <= value <= query.date_range.end):
                return False
        return all(row.get(column) is None for column in query.is_null)


class FakeGeoProvider(GeoProvider):
    """Scripted provider: each action returns its canned response or raises its canned error."""

    def __init__(self, context=None, nearby=None, errors=None):
        self.context = context if context is not None else {"context": {"geofences": []}}
        self.nearby = nearby if nearby is not None else {"geofences": []}
        self.errors: Dict[str, Exception] = dict(errors or {})
        self.calls: List[tuple] = []

    def _answer(self, action, response, **kwargs):
        self.calls.append((action, kwargs))
        if action in self.errors:
            raise self.errors[action]
        return response

    def track(self, device_id, latitude, longitude, accuracy, user_id=None, **extra):
        return self._answer(
            "track",
            {"meta": {"code": 200}},
            device_id=device_id,
            latitude=latitude,
            longitude=longitude,
            accuracy=accuracy,
            user_id=user_id,
            **extra
        )

    def get_context(self, latitude, longitude, user_id=None):
        return self._answer("context", self.context, latitude=latitude, longitude=longitude, user_id=user_id)

    def search_geofences(self, latitude, longitude, radius=None, tags=None, limit=None):
        return self._answer(
            "search.geofences", self.nearby,
            latitude=latitude, longitude=longitude, radius=radius, tags=tags, limit=limit
        )

    def actions(self) -> List[str]:
        return [action for action, _ in self.calls]


class SiteVisit(BaseModel):
    """Small schema used across the pipeline and service tests."""
    user_id: int = Field(gt=0)
    visit_date: date
    site_name: str = Field(min_length=1)
    location: str = Field(min_length=1)
    latitude: Optional[Decimal] = Field(default=None, ge=-90, le=90)
    longitude: Optional[Decimal] = Field(default=None, ge=-180, le=180)
    status: str = "open"
    notes: Optional[str] = None


def site_visit_descriptor(geo_policy=None, auto_fields=None) -> ResourceDescriptor:
    return ResourceDescriptor(
        endpoint_path="site-visits",
        table="site_visits",
        schema=SiteVisit,
        display_name="Site Visit",
        date_field="visit_date",
        auto_fields=auto_fields if auto_fields is not None else {
            "visit_date": AutoField.current_date(),
            "status": AutoField.constant("open"),
        },
        geo_policy=geo_policy,
    )


GATED_POLICY = GeoPolicy(
    tracking_fields=TrackingFields(lat_field="latitude", lng_field="longitude"),
    enrich_mappings={"location": "place.name"},
    required_geofence=RequiredGeofence(
        tag="site",
        match_field="site_name",
        match_strategy=MatchStrategy.DESCRIPTION,
        error_message="Not at the site",
    ),
    nearby_search=NearbySearch(tag_filter="site", limit=3, radius_meters=250),
)

INFO_POLICY = GeoPolicy(
    tracking_fields=TrackingFields(lat_field="latitude", lng_field="longitude"),
    enrich_mappings={"location": "place.name"},
    nearby_search=NearbySearch(tag_filter="dealer", limit=5, radius_meters=500),
)


def context_with(*geofences, place_name="Pan Bazaar"):
    return {"meta": {"code": 200}, "context": {"place": {"name": place_name}, "geofences": list(geofences)}}


def make_request(
    method: str,
    url: str,
    body: Any = None,
    params: Optional[Dict[str, str]] = None,
    route_params: Optional[Dict[str, str]] = None,
    raw_body: Optional[bytes] = None,
) -> func.HttpRequest:
    if raw_body is None:
        raw_body = json.dumps(body).encode() if body is not None else b""
    return func.HttpRequest(
        method=method,
        url=url,
        headers={"content-type": "application/json", "x-request-id": str(uuid.uuid4())},
        params=params or {},
        route_params=route_params or {},
        body=raw_body,
    )


def response_json(response: func.HttpResponse) -> Dict[str, Any]:
    return json.loads(response.get_body())


@pytest.fixture
def resource_config():
    return ResourceAPIConfig(
        schema_name="field_ops",
        default_limit=50,
        max_limit=500,
        query_timeout_seconds=30,
        default_accuracy_meters=10,
    )


@pytest.fixture
def store():
    return InMemoryRecordStore()


@pytest.fixture
def geo():
    return FakeGeoProvider()


class RecordingApp:
    """Captures function_name/route decorator calls the way FunctionApp receives them."""

    def __init__(self):
        self.functions = {}
        self._pending = {}

    def route(self, route, methods, auth_level):
        def decorator(fn):
            self._pending[fn.__name__] = (route, tuple(methods), fn)
            return fn
        return decorator

    def function_name(self, name):
        def decorator(fn):
            self.functions[name] = self._pending.pop(fn.__name__)
            return fn
        return decorator
