# ============================================================================
# CLAUDE CONTEXT - RADAR HTTP CLIENT
# ============================================================================
# STATUS: Service Layer - Radar location platform client
# PURPOSE: One typed method per Radar action, each a single REST call
# LAST_REVIEWED: 18 OCT 2026
# EXPORTS: RadarClient, GeoAction
# DEPENDENCIES: httpx (sync)
# PORTABLE: Yes - no config imports, credentials passed by the caller
# ============================================================================
"""
Radar HTTP Client (SYNC VERSION).

Action families:
- Tracking:  track
- Context:   get_context
- Geocoding: geocode_forward, geocode_reverse, autocomplete
- Search:    search_geofences, search_places
- Routing:   route_distance, route_matrix
- Geofences: upsert_geofence, get_geofence, list_geofences, delete_geofence
- Trips:     create_trip, get_trip, list_trips, update_trip, delete_trip

Every action is described once in `_ACTIONS` (HTTP method, path template,
privilege level). Write actions (tracking, geofence and trip management)
authenticate with the secret key. Read actions use the publishable key
and fall back to the secret key when no publishable key is configured.

Responses are returned as the provider's JSON body, unchanged. Failures
raise ProviderTransientError / ProviderTimeoutError; nothing is retried.

Usage:
    client = RadarClient(secret_key="prj_live_sk_...", publishable_key="prj_live_pk_...")
    context = client.get_context(26.12, 91.79)
    client.close()
"""

import httpx
from dataclasses import dataclass
from enum import Enum
from typing import Dict, Any, Optional, List, Tuple

from util_logger import LoggerFactory, ComponentType
from .geo_provider import (
    GeoProvider,
    GeoProviderConfigurationError,
    ProviderTimeoutError,
    ProviderTransientError,
)

logger = LoggerFactory.create_logger(ComponentType.ADAPTER, "RadarClient")

DEFAULT_BASE_URL = "https://api.radar.io/v1"


class GeoAction(str, Enum):
    TRACK = "track"
    CONTEXT = "context"
    GEOCODE_FORWARD = "geocode.forward"
    GEOCODE_REVERSE = "geocode.reverse"
    AUTOCOMPLETE = "search.autocomplete"
    SEARCH_GEOFENCES = "search.geofences"
    SEARCH_PLACES = "search.places"
    ROUTE_DISTANCE = "route.distance"
    ROUTE_MATRIX = "route.matrix"
    GEOFENCE_UPSERT = "geofences.upsert"
    GEOFENCE_GET = "geofences.get"
    GEOFENCE_LIST = "geofences.list"
    GEOFENCE_DELETE = "geofences.delete"
    TRIP_CREATE = "trips.create"
    TRIP_GET = "trips.get"
    TRIP_LIST = "trips.list"
    TRIP_UPDATE = "trips.update"
    TRIP_DELETE = "trips.delete"


@dataclass(frozen=True)
class _ActionRoute:
    method: str
    path: str
    privileged: bool


_ACTIONS: Dict[GeoAction, _ActionRoute] = {
    GeoAction.TRACK: _ActionRoute("POST", "/track", True),
    GeoAction.CONTEXT: _ActionRoute("GET", "/context", False),
    GeoAction.GEOCODE_FORWARD: _ActionRoute("GET", "/geocode/forward", False),
    GeoAction.GEOCODE_REVERSE: _ActionRoute("GET", "/geocode/reverse", False),
    GeoAction.AUTOCOMPLETE: _ActionRoute("GET", "/search/autocomplete", False),
    GeoAction.SEARCH_GEOFENCES: _ActionRoute("GET", "/search/geofences", False),
    GeoAction.SEARCH_PLACES: _ActionRoute("GET", "/search/places", False),
    GeoAction.ROUTE_DISTANCE: _ActionRoute("GET", "/route/distance", False),
    GeoAction.ROUTE_MATRIX: _ActionRoute("GET", "/route/matrix", False),
    GeoAction.GEOFENCE_UPSERT: _ActionRoute("PUT", "/geofences/{tag}/{external_id}", True),
    GeoAction.GEOFENCE_GET: _ActionRoute("GET", "/geofences/{identifier}", True),
    GeoAction.GEOFENCE_LIST: _ActionRoute("GET", "/geofences", True),
    GeoAction.GEOFENCE_DELETE: _ActionRoute("DELETE", "/geofences/{identifier}", True),
    GeoAction.TRIP_CREATE: _ActionRoute("POST", "/trips", True),
    GeoAction.TRIP_GET: _ActionRoute("GET", "/trips/{identifier}", True),
    GeoAction.TRIP_LIST: _ActionRoute("GET", "/trips", True),
    GeoAction.TRIP_UPDATE: _ActionRoute("PATCH", "/trips/{identifier}/update", True),
    GeoAction.TRIP_DELETE: _ActionRoute("DELETE", "/trips/{identifier}", True),
}


def _coordinates(latitude: float, longitude: float) -> str:
    return f"{latitude},{longitude}"


def _compact(values: Dict[str, Any]) -> Dict[str, Any]:
    """Drop unset optional parameters."""
    return {k: v for k, v in values.items() if v is not None}


class RadarClient(GeoProvider):
    """
    Sync HTTP client for the Radar REST API.

    Args:
        secret_key: Privileged key (tracking, geofence and trip management)
        publishable_key: Restricted key (context, geocoding, search, routing)
        base_url: API root, defaults to https://api.radar.io/v1
        timeout: Per-call timeout in seconds
        transport: Optional httpx transport (tests use httpx.MockTransport)

    Raises:
        GeoProviderConfigurationError: If neither key is configured
    """

    def __init__(
        self,
        secret_key: Optional[str] = None,
        publishable_key: Optional[str] = None,
        base_url: str = DEFAULT_BASE_URL,
        timeout: float = 8.0,
        transport: Optional[httpx.BaseTransport] = None
    ):
        if not secret_key and not publishable_key:
            raise GeoProviderConfigurationError(
                "RadarClient requires RADAR_SECRET_KEY or RADAR_PUBLISHABLE_KEY"
            )
        self.secret_key = secret_key
        self.publishable_key = publishable_key
        self.base_url = base_url.rstrip('/')
        self.timeout = timeout
        self._transport = transport
        self._client: Optional[httpx.Client] = None

    def _get_client(self) -> httpx.Client:
        """Get or create sync HTTP client."""
        if self._client is None or self._client.is_closed:
            self._client = httpx.Client(
                base_url=self.base_url,
                timeout=httpx.Timeout(self.timeout),
                transport=self._transport
            )
        return self._client

    def close(self):
        """Close the HTTP client."""
        if self._client and not self._client.is_closed:
            self._client.close()

    def _credential(self, action: GeoAction, privileged: bool) -> str:
        if privileged:
            if not self.secret_key:
                raise GeoProviderConfigurationError(
                    f"Radar action '{action.value}' requires RADAR_SECRET_KEY"
                )
            return self.secret_key
        return self.publishable_key or self.secret_key

    def _call(
        self,
        action: GeoAction,
        params: Optional[Dict[str, Any]] = None,
        json_body: Optional[Dict[str, Any]] = None,
        **path_args: str
    ) -> Dict[str, Any]:
        """
        Perform exactly one outbound call for `action`.

        Returns:
            Parsed JSON body

        Raises:
            GeoProviderConfigurationError: Credential for this privilege level missing
            ProviderTimeoutError: Call timed out
            ProviderTransientError: HTTP status >= 400, transport failure, non-JSON body
        """
        spec = _ACTIONS[action]
        path = spec.path.format(**path_args)
        headers = {"Authorization": self._credential(action, spec.privileged)}

        logger.debug(
            f"Radar {spec.method} {path}",
            extra={'custom_dimensions': {'action': action.value, 'privileged': spec.privileged}}
        )

        try:
            response = self._get_client().request(
                spec.method,
                path,
                params=_compact(params or {}) or None,
                json=json_body,
                headers=headers
            )
        except httpx.TimeoutException as e:
            raise ProviderTimeoutError(
                f"Radar {action.value} timed out after {self.timeout}s", action=action.value
            ) from e
        except httpx.RequestError as e:
            raise ProviderTransientError(
                f"Radar {action.value} request error: {e}", action=action.value
            ) from e

        if response.status_code >= 400:
            error_text = response.text[:500] if response.text else "Unknown error"
            raise ProviderTransientError(
                f"Radar {action.value} failed ({response.status_code}): {error_text}",
                action=action.value,
                status_code=response.status_code
            )

        try:
            return response.json()
        except ValueError as e:
            raise ProviderTransientError(
                f"Radar {action.value} returned a non-JSON body",
                action=action.value,
                status_code=response.status_code
            ) from e

    # =========================================================================
    # Tracking & Context
    # =========================================================================

    def track(
        self,
        device_id: str,
        latitude: float,
        longitude: float,
        accuracy: float,
        user_id: Optional[str] = None,
        **extra: Any
    ) -> Dict[str, Any]:
        """
        Ingest a location ping (POST /track).

        Extra keyword arguments (foreground, stopped, description, metadata,
        deviceType, ...) are passed through in the body.
        """
        body = _compact({
            "deviceId": device_id,
            "userId": user_id,
            "latitude": latitude,
            "longitude": longitude,
            "accuracy": accuracy,
            **extra
        })
        return self._call(GeoAction.TRACK, json_body=body)

    def get_context(self, latitude: float, longitude: float, user_id: Optional[str] = None) -> Dict[str, Any]:
        """Context (geofences, place, country/state) for a coordinate."""
        return self._call(GeoAction.CONTEXT, params={
            "coordinates": _coordinates(latitude, longitude),
            "userId": user_id
        })

    # =========================================================================
    # Geocoding
    # =========================================================================

    def geocode_forward(
        self,
        query: str,
        layers: Optional[str] = None,
        country: Optional[str] = None,
        lang: Optional[str] = None
    ) -> Dict[str, Any]:
        """Address to coordinates."""
        return self._call(GeoAction.GEOCODE_FORWARD, params={
            "query": query, "layers": layers, "country": country, "lang": lang
        })

    def geocode_reverse(
        self,
        latitude: float,
        longitude: float,
        layers: Optional[str] = None,
        lang: Optional[str] = None
    ) -> Dict[str, Any]:
        """Coordinates to address."""
        return self._call(GeoAction.GEOCODE_REVERSE, params={
            "coordinates": _coordinates(latitude, longitude), "layers": layers, "lang": lang
        })

    def autocomplete(
        self,
        query: str,
        near: Optional[Tuple[float, float]] = None,
        layers: Optional[str] = None,
        country: Optional[str] = None,
        limit: Optional[int] = None
    ) -> Dict[str, Any]:
        """Partial address / place name completion."""
        return self._call(GeoAction.AUTOCOMPLETE, params={
            "query": query,
            "near": _coordinates(*near) if near else None,
            "layers": layers,
            "country": country,
            "limit": limit
        })

    # =========================================================================
    # Search
    # =========================================================================

    def search_geofences(
        self,
        latitude: float,
        longitude: float,
        radius: Optional[int] = None,
        tags: Optional[str] = None,
        limit: Optional[int] = None
    ) -> Dict[str, Any]:
        """Geofences near a coordinate, optionally filtered by tag."""
        return self._call(GeoAction.SEARCH_GEOFENCES, params={
            "near": _coordinates(latitude, longitude),
            "radius": radius,
            "tags": tags,
            "limit": limit
        })

    def search_places(
        self,
        latitude: float,
        longitude: float,
        radius: Optional[int] = None,
        categories: Optional[str] = None,
        chains: Optional[str] = None,
        limit: Optional[int] = None
    ) -> Dict[str, Any]:
        """Places near a coordinate (categories or chains)."""
        return self._call(GeoAction.SEARCH_PLACES, params={
            "near": _coordinates(latitude, longitude),
            "radius": radius,
            "categories": categories,
            "chains": chains,
            "limit": limit
        })

    # =========================================================================
    # Routing
    # =========================================================================

    def route_distance(
        self,
        origin: Tuple[float, float],
        destination: Tuple[float, float],
        modes: str = "car",
        units: str = "metric"
    ) -> Dict[str, Any]:
        """Travel distance and duration between two coordinates."""
        return self._call(GeoAction.ROUTE_DISTANCE, params={
            "origin": _coordinates(*origin),
            "destination": _coordinates(*destination),
            "modes": modes,
            "units": units
        })

    def route_matrix(
        self,
        origins: List[Tuple[float, float]],
        destinations: List[Tuple[float, float]],
        mode: str = "car",
        units: str = "metric"
    ) -> Dict[str, Any]:
        """Distance matrix between several origins and destinations."""
        return self._call(GeoAction.ROUTE_MATRIX, params={
            "origins": "|".join(_coordinates(*point) for point in origins),
            "destinations": "|".join(_coordinates(*point) for point in destinations),
            "mode": mode,
            "units": units
        })

    # =========================================================================
    # Geofence management (privileged)
    # =========================================================================

    def upsert_geofence(
        self,
        tag: str,
        external_id: str,
        description: str,
        coordinates: List[float],
        geometry_type: str = "circle",
        radius: Optional[int] = None,
        metadata: Optional[Dict[str, Any]] = None,
        enabled: bool = True
    ) -> Dict[str, Any]:
        """
        Create or replace the geofence identified by tag + external id.

        Args:
            coordinates: [longitude, latitude] for circles, ring for polygons
        """
        return self._call(
            GeoAction.GEOFENCE_UPSERT,
            json_body=_compact({
                "description": description,
                "type": geometry_type,
                "coordinates": coordinates,
                "radius": radius,
                "metadata": metadata,
                "enabled": enabled
            }),
            tag=tag,
            external_id=external_id
        )

    def get_geofence(self, identifier: str, external_id: Optional[str] = None) -> Dict[str, Any]:
        """Geofence by Radar id, or by tag + external id."""
        if external_id:
            identifier = f"{identifier}/{external_id}"
        return self._call(GeoAction.GEOFENCE_GET, identifier=identifier)

    def list_geofences(self, tag: Optional[str] = None, limit: Optional[int] = None) -> Dict[str, Any]:
        return self._call(GeoAction.GEOFENCE_LIST, params={"tag": tag, "limit": limit})

    def delete_geofence(self, identifier: str, external_id: Optional[str] = None) -> Dict[str, Any]:
        if external_id:
            identifier = f"{identifier}/{external_id}"
        return self._call(GeoAction.GEOFENCE_DELETE, identifier=identifier)

    # =========================================================================
    # Trips (privileged)
    # =========================================================================

    def create_trip(
        self,
        external_id: str,
        user_id: Optional[str] = None,
        destination_geofence_tag: Optional[str] = None,
        destination_geofence_external_id: Optional[str] = None,
        mode: str = "car",
        metadata: Optional[Dict[str, Any]] = None
    ) -> Dict[str, Any]:
        return self._call(GeoAction.TRIP_CREATE, json_body=_compact({
            "externalId": external_id,
            "userId": user_id,
            "destinationGeofenceTag": destination_geofence_tag,
            "destinationGeofenceExternalId": destination_geofence_external_id,
            "mode": mode,
            "metadata": metadata
        }))

    def get_trip(self, identifier: str) -> Dict[str, Any]:
        return self._call(GeoAction.TRIP_GET, identifier=identifier)

    def list_trips(
        self,
        status: Optional[str] = None,
        user_id: Optional[str] = None,
        limit: Optional[int] = None
    ) -> Dict[str, Any]:
        return self._call(GeoAction.TRIP_LIST, params={
            "status": status, "userId": user_id, "limit": limit
        })

    def update_trip(self, identifier: str, status: str, **fields: Any) -> Dict[str, Any]:
        """Change trip status (started, approaching, arrived, completed, canceled)."""
        return self._call(
            GeoAction.TRIP_UPDATE,
            json_body=_compact({"status": status, **fields}),
            identifier=identifier
        )

    def delete_trip(self, identifier: str) -> Dict[str, Any]:
        return self._call(GeoAction.TRIP_DELETE, identifier=identifier)

    # =========================================================================
    # Dealer helpers
    # =========================================================================

    def create_dealer_geofence(
        self,
        dealer_id: str,
        name: str,
        latitude: float,
        longitude: float,
        radius: int = 100,
        metadata: Optional[Dict[str, Any]] = None
    ) -> Dict[str, Any]:
        """Circle geofence tagged 'dealer' whose external id is the dealer id."""
        return self.upsert_geofence(
            tag="dealer",
            external_id=dealer_id,
            description=name,
            coordinates=[longitude, latitude],
            geometry_type="circle",
            radius=radius,
            metadata=metadata
        )

    def start_dealer_journey(
        self,
        trip_id: str,
        user_id: str,
        dealer_id: str,
        mode: str = "car"
    ) -> Dict[str, Any]:
        """Trip whose destination is the dealer's geofence."""
        return self.create_trip(
            external_id=trip_id,
            user_id=user_id,
            destination_geofence_tag="dealer",
            destination_geofence_external_id=dealer_id,
            mode=mode,
            metadata={"dealerId": dealer_id}
        )
