# ============================================================================
# CLAUDE CONTEXT - RESOURCE SERVICE
# ============================================================================
# STATUS: Core - Business logic behind the five generated endpoints
# PURPOSE: Create (via pipeline), list-by-owner, get, update, delete
# LAST_REVIEWED: 18 OCT 2026
# EXPORTS: ResourceService
# DEPENDENCIES: pydantic, resource_api, infrastructure.record_store
# PATTERNS: Service Layer, Facade Pattern
# ENTRY_POINTS: service = ResourceService(descriptor, store); service.get(record_id)
# ============================================================================

"""
Resource Service - Business Logic Layer

One instance per registered resource. Sits between the HTTP triggers and
the record store:

- create          delegates to GeofenceGatedCreatePipeline
- list_by_owner   owner equality + optional closed date range + recognised
                  column filters, ordered descending, limit always applied
- get / delete    404 when the id does not exist
- update          partial validation, update timestamp always stamped

Query-string values arrive as strings. They are coerced with the schema's
own field types (pydantic TypeAdapter), so `user_id=7`, `report_date=2025-06-01`
and `status=Assigned` compare against properly typed columns. Parameters
that do not name a column of the resource are ignored.
"""

from datetime import datetime
from typing import Any, Annotated, Callable, Dict, List, Mapping, Optional

from pydantic import TypeAdapter, ValidationError

from util_logger import LoggerFactory, ComponentType, LogContext
from infrastructure.record_store import DateRange, RecordQuery, RecordStore, utc_now
from services.geo_provider import GeoProvider
from .config import ResourceAPIConfig, get_resource_config
from .descriptor import ResourceDescriptor
from .errors import FieldError, NotFoundError, RecordValidationError
from .pipeline import CreateResult, GeofenceGatedCreatePipeline
from .validator import validate_partial

# Query parameters with a meaning of their own (never column filters)
RESERVED_PARAMS = ("startDate", "endDate", "limit")


class ResourceService:
    """
    Service for one resource descriptor.

    Args:
        descriptor: Resource declaration
        store: Storage handle for the resource table
        geo_provider: Injected provider client (None when not configured)
        config: Resource API configuration
        clock: UTC clock for auto fields and update stamps
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
        self.config = config or get_resource_config()
        self.clock = clock
        self.pipeline = GeofenceGatedCreatePipeline(
            descriptor, store, geo_provider=geo_provider, config=self.config, clock=clock
        )
        self.logger = LoggerFactory.create_logger(
            ComponentType.SERVICE,
            "ResourceService",
            context=LogContext(resource=descriptor.endpoint_path)
        )
        self._adapters: Dict[str, TypeAdapter] = {}

    # ========================================================================
    # OPERATIONS
    # ========================================================================

    def create(self, body: Dict[str, Any]) -> CreateResult:
        return self.pipeline.run(body)

    def list_by_owner(self, owner_id: str, params: Optional[Mapping[str, str]] = None) -> List[Dict[str, Any]]:
        """
        Records owned by `owner_id`, newest first.

        Args:
            owner_id: Owner identifier from the route
            params: Query-string parameters (startDate, endDate, limit, column filters)

        Returns:
            At most `limit` rows (default FIELDOPS_DEFAULT_LIMIT)

        Raises:
            RecordValidationError: Un-coercible owner id, range bound, filter or limit
        """
        params = dict(params or {})
        d = self.descriptor

        query = RecordQuery(
            equals={d.owner_field: self.coerce(d.owner_field, owner_id, "ownerId")},
            order_by=d.order_field,
            descending=True,
            limit=self._parse_limit(params.get("limit"))
        )

        start, end = params.get("startDate"), params.get("endDate")
        if d.date_field and start and end:
            query.date_range = DateRange(
                field=d.date_field,
                start=self.coerce(d.date_field, start, "startDate"),
                end=self.coerce(d.date_field, end, "endDate")
            )

        columns = self._columns()
        for name, raw in params.items():
            if name in RESERVED_PARAMS or name == d.owner_field:
                continue
            if name not in columns or raw in (None, ""):
                continue
            query.equals[name] = self.coerce(name, raw, name)

        rows = self.store.find(query)
        self.logger.info(
            f"Listed {len(rows)} {d.display_name} record(s)",
            extra={'custom_dimensions': {
                'operation': 'list',
                'owner_id': str(owner_id),
                'filters': sorted(query.equals.keys()),
                'date_range': bool(query.date_range),
                'limit': query.limit
            }}
        )
        return rows

    def get(self, record_id: str) -> Dict[str, Any]:
        row = self.store.get(record_id)
        if row is None:
            raise NotFoundError(f"{self.descriptor.display_name} not found")
        return row

    def update(self, record_id: str, body: Any) -> Dict[str, Any]:
        """
        Apply a partial update.

        Only supplied schema fields change; the update timestamp is always
        refreshed, even when the body carried no recognised field.
        """
        values = validate_partial(self.descriptor.schema, body)
        values[self.descriptor.updated_field] = self.clock()

        row = self.store.update(record_id, values)
        if row is None:
            raise NotFoundError(f"{self.descriptor.display_name} not found")

        self.logger.info(
            f"✅ {self.descriptor.display_name} updated",
            extra={'custom_dimensions': {
                'operation': 'update',
                'record_id': record_id,
                'fields': sorted(values.keys())
            }}
        )
        return row

    def delete(self, record_id: str) -> Dict[str, Any]:
        """Delete and return the pre-deletion snapshot."""
        row = self.store.delete(record_id)
        if row is None:
            raise NotFoundError(f"{self.descriptor.display_name} not found")

        self.logger.info(
            f"🗑️ {self.descriptor.display_name} deleted",
            extra={'custom_dimensions': {'operation': 'delete', 'record_id': record_id}}
        )
        return row

    # ========================================================================
    # HELPERS
    # ========================================================================

    def _columns(self) -> set:
        d = self.descriptor
        return set(d.schema_fields) | {d.id_field, d.created_field, d.updated_field}

    def _adapter(self, column: str) -> TypeAdapter:
        if column not in self._adapters:
            info = self.descriptor.schema_fields.get(column)
            if info is None:
                annotation = datetime if column in (
                    self.descriptor.created_field, self.descriptor.updated_field
                ) else str
            else:
                annotation = info.annotation
                if info.metadata:
                    annotation = Annotated[tuple([annotation, *info.metadata])]
            self._adapters[column] = TypeAdapter(annotation)
        return self._adapters[column]

    def coerce(self, column: str, raw: Any, param: str) -> Any:
        """Coerce a request value with the column's schema type (400 when it does not fit)."""
        try:
            return self._adapter(column).validate_python(raw)
        except ValidationError as e:
            message = e.errors()[0]["msg"] if e.errors() else "Invalid value"
            raise RecordValidationError(
                f"Invalid query parameter '{param}'",
                [FieldError(path=("query", param), message=message)]
            ) from e

    def _parse_limit(self, raw: Optional[str]) -> int:
        if raw in (None, ""):
            return self.config.default_limit
        try:
            limit = int(raw)
        except (TypeError, ValueError):
            limit = 0
        if limit <= 0:
            raise RecordValidationError(
                "Invalid query parameter 'limit'",
                [FieldError(path=("query", "limit"), message="Limit must be a positive integer")]
            )
        return min(limit, self.config.max_limit)
