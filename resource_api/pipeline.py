# ============================================================================
# CLAUDE CONTEXT - GEOFENCE-GATED CREATE PIPELINE
# ============================================================================
# STATUS: Core - Write path for every generated create endpoint
# PURPOSE: Auto-fill, geo tracking/enrichment/gating, validation, persistence
# LAST_REVIEWED: 18 OCT 2026
# EXPORTS: GeofenceGatedCreatePipeline, CreateResult, parse_coordinate, resolve_path
# DEPENDENCIES: resource_api, services.geo_provider, infrastructure.record_store
# PATTERNS: Fixed stage sequence, best-effort collaborators with one hard gate
# ============================================================================

"""
Geofence-Gated Create Pipeline

Stages run in this order and are never reordered:

    1. Auto-fill        server fields the caller left out (absent or null)
    2. Geo              only with a geo policy and usable coordinates
       a. track         location ping, failure ignored
       b. context       places/geofences for the coordinate
       c. enrichment    copy context values into the candidate (last writer wins)
       d. hard gate     required geofence must match on tag and match field
       e. nearby        informational geofence search for the response
    3. Validation       full schema validation of the candidate as it now stands
    4. Persist          insert the validator output (never the raw candidate)

Any exception raised by the provider in 2a, 2b or 2e is logged and absorbed.
The track ping is skipped when the candidate has no owner. The hard
gate fails closed: when a required geofence cannot be confirmed (no
coordinates, no provider configured, context call failed or timed out,
no matching geofence) the request is rejected before anything is written.

Example:
    pipeline = GeofenceGatedCreatePipeline(descriptor, store, geo_provider=radar)
    result = pipeline.run({"user_id": 7, "latitude": 26.12, "longitude": 91.79, ...})
    result.record            # stored row
    result.nearby_geofences  # list or None
"""

import math
from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal, InvalidOperation
from typing import Any, Callable, Dict, List, Optional, Tuple

from util_logger import LoggerFactory, ComponentType, LogContext
from infrastructure.record_store import RecordStore, utc_now
from services.geo_provider import GeoProvider
from .candidate import CandidateRecord, MutationSource
from .config import ResourceAPIConfig, get_resource_config
from .descriptor import ResourceDescriptor, GeoPolicy, RequiredGeofence
from .errors import GeofenceRejection
from .validator import validate


@dataclass
class CreateResult:
    """Outcome of a successful create."""
    record: Dict[str, Any]
    nearby_geofences: Optional[List[Dict[str, Any]]] = None
    geofence_match: Optional[Dict[str, Any]] = None
    mutations: List[Any] = field(default_factory=list)


# ============================================================================
# HELPERS
# ============================================================================

def parse_coordinate(value: Any, bound: float) -> Optional[float]:
    """
    Numeric coordinate within [-bound, bound], or None.

    Accepts int, float, Decimal and numeric strings. Booleans, NaN,
    infinities and out-of-range values are not coordinates.
    """
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, str):
        value = value.strip()
        if not value:
            return None
    try:
        number = float(Decimal(str(value)))
    except (InvalidOperation, ValueError, TypeError):
        return None
    if not math.isfinite(number) or abs(number) > bound:
        return None
    return number


def resolve_path(document: Any, path: str) -> Any:
    """
    Read a dotted path ("place.name", "geofences.0.externalId") from nested data.

    Integer segments index lists. Returns None when any segment is missing.
    """
    current = document
    for segment in path.split("."):
        if isinstance(current, dict):
            current = current.get(segment)
        elif isinstance(current, list) and segment.lstrip("-").isdigit():
            index = int(segment)
            current = current[index] if -len(current) <= index < len(current) else None
        else:
            return None
        if current is None:
            return None
    return current


def context_body(response: Optional[Dict[str, Any]]) -> Dict[str, Any]:
    """The provider nests context data under 'context'; fall back to the body."""
    if not isinstance(response, dict):
        return {}
    inner = response.get("context")
    return inner if isinstance(inner, dict) else response


def find_matching_geofence(
    context: Dict[str, Any],
    gate: RequiredGeofence,
    match_value: Any
) -> Optional[Dict[str, Any]]:
    """First geofence whose tag and match attribute both equal the policy's."""
    if match_value is None:
        return None
    wanted = str(match_value).strip()
    if not wanted:
        return None

    geofences = context.get("geofences") or []
    for geofence in geofences:
        if not isinstance(geofence, dict):
            continue
        if geofence.get("tag") != gate.tag:
            continue
        candidate = geofence.get(gate.match_strategy.value)
        if candidate is not None and str(candidate).strip() == wanted:
            return geofence
    return None


# ============================================================================
# PIPELINE
# ============================================================================

class GeofenceGatedCreatePipeline:
    """
    Create path for one resource.

    Args:
        descriptor: Resource being created
        store: Storage handle for the resource table
        geo_provider: Configured provider client, or None when not configured
        config: Resource API configuration (default accuracy)
        clock: Source of "now" (UTC) for auto fields
    """

    def __init__(
        self,
        descriptor: ResourceDescriptor,
        store: RecordStore,
        geo_provider: Optional[GeoProvider] = None,
        config: Optional[ResourceAPIConfig] = None,
        clock: Callable[[], datetime] = utc_now
    ):
        self.descriptor = descriptor
        self.store = store
        self.geo_provider = geo_provider
        self.config = config or get_resource_config()
        self.clock = clock
        self.logger = LoggerFactory.create_logger(
            ComponentType.SERVICE,
            "CreatePipeline",
            context=LogContext(resource=descriptor.endpoint_path, operation="create")
        )

    def run(self, body: Dict[str, Any]) -> CreateResult:
        """
        Execute all stages for one request body.

        Raises:
            GeofenceRejection: Required geofence not confirmed
            RecordValidationError: Candidate fails schema validation
            StorageError: Insert failed
        """
        candidate = CandidateRecord(body)

        self._auto_fill(candidate)

        nearby, match = None, None
        if self.descriptor.geo_policy:
            nearby, match = self._geo_stage(candidate, self.descriptor.geo_policy)

        record = validate(self.descriptor.schema, candidate.as_dict())
        self.logger.debug(f"{self.descriptor.display_name} candidate validated")

        stored = self.store.insert(record)
        self.logger.info(
            f"✅ {self.descriptor.display_name} created",
            extra={'custom_dimensions': {
                'record_id': stored.get(self.descriptor.id_field),
                'auto_filled': candidate.fields_from(MutationSource.AUTO_FILL),
                'enriched': candidate.fields_from(MutationSource.ENRICHMENT)
            }}
        )
        return CreateResult(
            record=stored,
            nearby_geofences=nearby,
            geofence_match=match,
            mutations=list(candidate.mutations)
        )

    # ------------------------------------------------------------------------
    # Stage 1
    # ------------------------------------------------------------------------

    def _auto_fill(self, candidate: CandidateRecord) -> None:
        if not self.descriptor.auto_fields:
            return
        now = self.clock()
        for name, auto_field in self.descriptor.auto_fields.items():
            if not candidate.has_value(name):
                candidate.set(name, auto_field.generate(now), MutationSource.AUTO_FILL)

    # ------------------------------------------------------------------------
    # Stage 2
    # ------------------------------------------------------------------------

    def _geo_stage(
        self,
        candidate: CandidateRecord,
        policy: GeoPolicy
    ) -> Tuple[Optional[List[Dict[str, Any]]], Optional[Dict[str, Any]]]:
        tracking = policy.tracking_fields
        gate = policy.required_geofence

        latitude = parse_coordinate(candidate.get(tracking.lat_field), 90.0)
        longitude = parse_coordinate(candidate.get(tracking.lng_field), 180.0)

        if latitude is None or longitude is None:
            if gate:
                self._reject(gate, candidate, "no usable coordinates")
            self.logger.debug("Geo stage skipped: no usable coordinates")
            return None, None

        if self.geo_provider is None:
            if gate:
                self._reject(gate, candidate, "geo provider not configured")
            self.logger.debug("Geo stage skipped: geo provider not configured")
            return None, None

        owner = candidate.get(tracking.owner_field or self.descriptor.owner_field)
        user_id = str(owner) if owner is not None else None

        self._track(candidate, tracking, latitude, longitude, user_id)

        context = self._context(latitude, longitude, user_id)
        if context is None and gate:
            self._reject(gate, candidate, "context unavailable")

        if context is not None and policy.enrich_mappings:
            self._enrich(candidate, policy, context)

        match = None
        if gate:
            match = find_matching_geofence(context, gate, candidate.get(gate.match_field))
            if match is None:
                self._reject(gate, candidate, "no matching geofence")
            self.logger.info(
                f"Geofence confirmed: {gate.tag}",
                extra={'custom_dimensions': {'tag': gate.tag, 'geofence_id': match.get("_id")}}
            )

        nearby = None
        if policy.nearby_search:
            nearby = self._nearby(policy, latitude, longitude)

        return nearby, match

    def _track(self, candidate, tracking, latitude, longitude, user_id) -> None:
        if user_id is None:
            self.logger.debug("Location ping skipped: no owner on the candidate")
            return

        accuracy = None
        if tracking.accuracy_field:
            accuracy = parse_coordinate(candidate.get(tracking.accuracy_field), math.inf)
        if accuracy is None or accuracy <= 0:
            accuracy = self.config.default_accuracy_meters

        try:
            self.geo_provider.track(
                device_id=f"device_{user_id}",
                latitude=latitude,
                longitude=longitude,
                accuracy=accuracy,
                user_id=user_id,
                description=self.descriptor.display_name
            )
            self.logger.debug("Location ping sent")
        except Exception as e:
            self._absorbed("track", e)

    def _context(self, latitude, longitude, user_id) -> Optional[Dict[str, Any]]:
        try:
            response = self.geo_provider.get_context(latitude, longitude, user_id=user_id)
        except Exception as e:
            self._absorbed("context", e)
            return None
        return context_body(response)

    def _enrich(self, candidate: CandidateRecord, policy: GeoPolicy, context: Dict[str, Any]) -> None:
        for destination, path in policy.enrich_mappings.items():
            value = resolve_path(context, path)
            if value is not None:
                candidate.set(destination, value, MutationSource.ENRICHMENT)
        self.logger.debug(
            "Enrichment applied",
            extra={'custom_dimensions': {'fields': candidate.fields_from(MutationSource.ENRICHMENT)}}
        )

    def _nearby(self, policy: GeoPolicy, latitude, longitude) -> Optional[List[Dict[str, Any]]]:
        search = policy.nearby_search
        try:
            response = self.geo_provider.search_geofences(
                latitude,
                longitude,
                radius=search.radius_meters,
                tags=search.tag_filter,
                limit=search.limit
            )
        except Exception as e:
            self._absorbed("search.geofences", e)
            return None
        geofences = response.get("geofences") if isinstance(response, dict) else None
        return geofences if isinstance(geofences, list) else []

    def _absorbed(self, action: str, error: Exception) -> None:
        self.logger.warning(
            f"⚠️ Geo provider {action} failed, continuing: {error}",
            extra={'custom_dimensions': {
                'action': action,
                'error_type': type(error).__name__,
                'error': str(error)
            }}
        )

    def _reject(self, gate: RequiredGeofence, candidate: CandidateRecord, reason: str) -> None:
        match_value = candidate.get(gate.match_field)
        self.logger.warning(
            f"⚠️ Geofence rejection ({reason})",
            extra={'custom_dimensions': {
                'tag': gate.tag,
                'match_field': gate.match_field,
                'match_value': match_value,
                'reason': reason
            }}
        )
        raise GeofenceRejection(
            gate.message,
            tag=gate.tag,
            match_value=None if match_value is None else str(match_value)
        )
