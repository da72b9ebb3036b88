# ============================================================================
# CLAUDE CONTEXT - RESOURCE DESCRIPTORS
# ============================================================================
# STATUS: Foundation - Declarative resource configuration
# PURPOSE: Static per-entity declaration consumed by the endpoint factory
# LAST_REVIEWED: 18 OCT 2026
# EXPORTS: ResourceDescriptor, GeoPolicy, TrackingFields, RequiredGeofence,
#          NearbySearch, MatchStrategy, AutoField, AutoFieldKind
# DEPENDENCIES: dataclasses, enum, pydantic
# PATTERNS: Immutable configuration objects, closed set of generator kinds
# ============================================================================

"""
Resource Descriptors

A ResourceDescriptor binds one storage table and one validation schema
(a pydantic model) to the five generated endpoints. Descriptors are frozen
and validated on construction, so a bad catalogue fails at startup rather
than on the first request.

Auto fields are restricted to three generator kinds (current date, current
timestamp, constant). Each is a pure function of "now", which keeps the
catalogue serializable and the create pipeline deterministic under a fixed
clock.

Example:
    ResourceDescriptor(
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
            required_geofence=RequiredGeofence(
                tag="dealer",
                match_field="dealer_name",
                match_strategy=MatchStrategy.DESCRIPTION,
            ),
        ),
    )
"""

import re
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from types import MappingProxyType
from typing import Any, Mapping, Optional, Type

from pydantic import BaseModel

from .errors import ResourceConfigurationError

_ENDPOINT_PATH = re.compile(r"^[a-z0-9]+(?:-[a-z0-9]+)*$")
_IDENTIFIER = re.compile(r"^[a-z_][a-z0-9_]*$")


# ============================================================================
# AUTO FIELDS
# ============================================================================

class AutoFieldKind(str, Enum):
    """Closed set of server-side generators."""
    CURRENT_DATE = "current_date"
    CURRENT_TIMESTAMP = "current_timestamp"
    CONSTANT = "constant"


@dataclass(frozen=True)
class AutoField:
    """Server-managed default applied when the caller omits a field."""
    kind: AutoFieldKind
    value: Any = None

    @classmethod
    def current_date(cls) -> "AutoField":
        return cls(AutoFieldKind.CURRENT_DATE)

    @classmethod
    def current_timestamp(cls) -> "AutoField":
        return cls(AutoFieldKind.CURRENT_TIMESTAMP)

    @classmethod
    def constant(cls, value: Any) -> "AutoField":
        return cls(AutoFieldKind.CONSTANT, value)

    def generate(self, now: datetime) -> Any:
        """Produce the value for this field at time `now` (UTC)."""
        if self.kind is AutoFieldKind.CURRENT_DATE:
            return now.date()
        if self.kind is AutoFieldKind.CURRENT_TIMESTAMP:
            return now
        return self.value


# ============================================================================
# GEO POLICY
# ============================================================================

class MatchStrategy(str, Enum):
    """Which geofence attribute is compared with the candidate's match field."""
    EXTERNAL_ID = "externalId"
    DESCRIPTION = "description"
    ID = "_id"


@dataclass(frozen=True)
class TrackingFields:
    """Candidate fields holding the coordinate of the submission."""
    lat_field: str
    lng_field: str
    accuracy_field: Optional[str] = None
    owner_field: Optional[str] = None


@dataclass(frozen=True)
class RequiredGeofence:
    """Hard gate: the coordinate must fall inside a matching geofence."""
    tag: str
    match_field: str
    match_strategy: MatchStrategy = MatchStrategy.EXTERNAL_ID
    error_message: Optional[str] = None

    @property
    def message(self) -> str:
        return self.error_message or f"Location is not within a registered '{self.tag}' geofence"


@dataclass(frozen=True)
class NearbySearch:
    """Informational geofence search attached to a successful create."""
    tag_filter: str
    limit: int = 10
    radius_meters: int = 1000


@dataclass(frozen=True)
class GeoPolicy:
    """
    Whether and how a create request is checked against the geo provider.

    Attributes:
        tracking_fields: Coordinate fields; enrichment/gating only run when both are numeric
        enrich_mappings: destination field -> dotted path into the context response
        required_geofence: Optional hard gate
        nearby_search: Optional informational search
    """
    tracking_fields: TrackingFields
    enrich_mappings: Mapping[str, str] = field(default_factory=dict)
    required_geofence: Optional[RequiredGeofence] = None
    nearby_search: Optional[NearbySearch] = None

    def __post_init__(self):
        object.__setattr__(self, "enrich_mappings", MappingProxyType(dict(self.enrich_mappings)))


# ============================================================================
# RESOURCE DESCRIPTOR
# ============================================================================

@dataclass(frozen=True)
class ResourceDescriptor:
    """
    Static declaration of one business entity.

    Attributes:
        endpoint_path: URL segment (kebab-case), e.g. "daily-tasks"
        table: Storage table name
        schema: Pydantic model validating create/update payloads
        display_name: Human name used in messages and logs
        date_field: Optional date/timestamp column for range queries and ordering
        auto_fields: Server-filled fields applied before validation
        geo_policy: Optional geofence gating/enrichment policy
        owner_field: Column identifying the owning field agent
        id_field / created_field / updated_field: Server-managed columns
    """
    endpoint_path: str
    table: str
    schema: Type[BaseModel]
    display_name: str
    date_field: Optional[str] = None
    auto_fields: Mapping[str, AutoField] = field(default_factory=dict)
    geo_policy: Optional[GeoPolicy] = None
    owner_field: str = "user_id"
    id_field: str = "id"
    created_field: str = "created_at"
    updated_field: str = "updated_at"

    def __post_init__(self):
        object.__setattr__(self, "auto_fields", MappingProxyType(dict(self.auto_fields)))
        self._check()

    @property
    def function_prefix(self) -> str:
        """Prefix for Azure Function names ("daily-tasks" -> "daily_tasks")."""
        return self.endpoint_path.replace("-", "_")

    @property
    def order_field(self) -> str:
        """List ordering column: the date field if declared, else creation time."""
        return self.date_field or self.created_field

    @property
    def schema_fields(self):
        return self.schema.model_fields

    def _check(self) -> None:
        if not _ENDPOINT_PATH.match(self.endpoint_path):
            raise ResourceConfigurationError(
                f"Invalid endpoint path '{self.endpoint_path}' (expected kebab-case)"
            )
        if not _IDENTIFIER.match(self.table):
            raise ResourceConfigurationError(f"Invalid table name '{self.table}'")
        if not (isinstance(self.schema, type) and issubclass(self.schema, BaseModel)):
            raise ResourceConfigurationError(
                f"{self.display_name}: schema must be a pydantic model class"
            )

        fields = self.schema.model_fields
        if self.owner_field not in fields:
            raise ResourceConfigurationError(
                f"{self.display_name}: owner field '{self.owner_field}' is not in the schema"
            )
        if self.date_field and self.date_field not in fields:
            raise ResourceConfigurationError(
                f"{self.display_name}: date field '{self.date_field}' is not in the schema"
            )
        for name in self.auto_fields:
            if name not in fields:
                raise ResourceConfigurationError(
                    f"{self.display_name}: auto field '{name}' is not in the schema"
                )

        if self.geo_policy:
            tracking = self.geo_policy.tracking_fields
            gate = self.geo_policy.required_geofence
            if gate and not gate.match_field:
                raise ResourceConfigurationError(
                    f"{self.display_name}: required geofence needs a match field"
                )
            if not (tracking.lat_field and tracking.lng_field):
                raise ResourceConfigurationError(
                    f"{self.display_name}: tracking fields need latitude and longitude"
                )
