# ============================================================================
# CLAUDE CONTEXT - RESOURCE API TRIGGERS
# ============================================================================
# STATUS: HTTP Triggers - Generated CRUD endpoints
# PURPOSE: Azure Functions handlers for create/list/get/update/delete
# LAST_REVIEWED: 18 OCT 2026
# EXPORTS: get_resource_triggers, BaseResourceTrigger, CreateTrigger,
#          ListByOwnerTrigger, GetTrigger, UpdateTrigger, DeleteTrigger
# INTERFACES: Azure Functions HttpRequest/HttpResponse
# DEPENDENCIES: azure.functions, json, uuid
# PATTERNS: Trigger Pattern, Factory Pattern (get_resource_triggers)
# ENTRY_POINTS: ResourceRegistry.register() via get_resource_triggers()
# ============================================================================

"""
Resource API HTTP Triggers - Azure Functions Handlers

For a descriptor with endpoint path `{path}`:
- POST   /api/{path}                    Create (geofence-gated pipeline)
- GET    /api/{path}/owner/{owner_id}   List by owner (?startDate&endDate&limit&<column>=...)
- GET    /api/{path}/{record_id}        Get by id
- PUT    /api/{path}/{record_id}        Partial update
- DELETE /api/{path}/{record_id}        Delete, returns the deleted row

Each trigger:
1. Parses route params, query params and JSON body
2. Calls the ResourceService
3. Wraps the result in the {success, data, error, details} envelope
4. Maps ResourceAPIError subclasses to their HTTP status; anything else is 500
"""

import azure.functions as func
import json
import uuid
from typing import Dict, Any, List, Optional

from util_logger import LoggerFactory, ComponentType, LogContext
from .descriptor import ResourceDescriptor
from .errors import FieldError, RecordValidationError, ResourceAPIError
from .models import ResourceEnvelope
from .service import ResourceService


# ============================================================================
# TRIGGER FACTORY FUNCTION
# ============================================================================

def get_resource_triggers(descriptor: ResourceDescriptor, service: ResourceService) -> List[Dict[str, Any]]:
    """
    Trigger configurations for one resource.

    Returns:
        List of dicts with keys:
        - name: Unique Azure Function name
        - route: URL route pattern
        - methods: List of HTTP methods
        - handler: Callable trigger handler
    """
    path = descriptor.endpoint_path
    prefix = descriptor.function_prefix
    return [
        {
            'name': f"{prefix}_create",
            'route': path,
            'methods': ['POST'],
            'handler': CreateTrigger(descriptor, service).handle
        },
        {
            'name': f"{prefix}_list_by_owner",
            'route': f"{path}/owner/{{owner_id}}",
            'methods': ['GET'],
            'handler': ListByOwnerTrigger(descriptor, service).handle
        },
        {
            'name': f"{prefix}_get",
            'route': f"{path}/{{record_id}}",
            'methods': ['GET'],
            'handler': GetTrigger(descriptor, service).handle
        },
        {
            'name': f"{prefix}_update",
            'route': f"{path}/{{record_id}}",
            'methods': ['PUT'],
            'handler': UpdateTrigger(descriptor, service).handle
        },
        {
            'name': f"{prefix}_delete",
            'route': f"{path}/{{record_id}}",
            'methods': ['DELETE'],
            'handler': DeleteTrigger(descriptor, service).handle
        }
    ]


# ============================================================================
# BASE TRIGGER CLASS
# ============================================================================

class BaseResourceTrigger:
    """
    Base class for resource triggers.

    Provides common functionality:
    - Request id correlation
    - JSON body parsing
    - Envelope formatting
    - Error mapping
    """

    operation = "request"

    def __init__(self, descriptor: Optional[ResourceDescriptor] = None, service=None):
        self.descriptor = descriptor
        self.service = service
        self.resource = descriptor.endpoint_path if descriptor else None
        self.display_name = descriptor.display_name if descriptor else "Request"
        self.logger = LoggerFactory.create_logger(
            ComponentType.TRIGGER,
            type(self).__name__,
            context=LogContext(resource=self.resource, operation=self.operation)
        )

    def handle(self, req: func.HttpRequest) -> func.HttpResponse:
        request_id = req.headers.get('x-request-id') or str(uuid.uuid4())
        try:
            return self.process(req)

        except ResourceAPIError as e:
            log = self.logger.error if e.status_code >= 500 else self.logger.info
            log(
                f"{self.operation} {self.display_name} failed: {e.message}",
                extra={'custom_dimensions': {
                    'request_id': request_id,
                    'error_type': e.error_type,
                    'status_code': e.status_code
                }}
            )
            return self._error_response(e.message, e.status_code, details=e.details)

        except Exception as e:
            self.logger.error(
                f"❌ Unexpected error during {self.operation} {self.display_name}: {e}",
                exc_info=True,
                extra={'custom_dimensions': {'request_id': request_id}}
            )
            return self._error_response(
                f"Failed to {self.operation} {self.display_name}",
                status_code=500,
                details=str(e)
            )

    def process(self, req: func.HttpRequest) -> func.HttpResponse:
        raise NotImplementedError

    def _json_body(self, req: func.HttpRequest) -> Dict[str, Any]:
        """Parsed JSON object body; anything else is a 400 validation error."""
        try:
            body = req.get_json()
        except ValueError as e:
            raise RecordValidationError(
                "Request body must be valid JSON",
                [FieldError(path=(), message="Invalid JSON")]
            ) from e
        if not isinstance(body, dict):
            raise RecordValidationError(
                "Request body must be a JSON object",
                [FieldError(path=(), message="Expected an object")]
            )
        return body

    def _json_response(self, envelope: ResourceEnvelope, status_code: int = 200) -> func.HttpResponse:
        return func.HttpResponse(
            body=json.dumps(envelope.to_json_dict(), indent=2),
            status_code=status_code,
            mimetype="application/json"
        )

    def _success(self, data: Any, message: Optional[str] = None, **extra) -> func.HttpResponse:
        fields = {'success': True, 'data': data}
        if message:
            fields['message'] = message
        fields.update({k: v for k, v in extra.items() if v is not None})
        return self._json_response(ResourceEnvelope(**fields))

    def _error_response(
        self,
        message: str,
        status_code: int = 400,
        details: Any = None
    ) -> func.HttpResponse:
        fields = {'success': False, 'error': message}
        if details is not None:
            fields['details'] = details
        return self._json_response(ResourceEnvelope(**fields), status_code=status_code)


# ============================================================================
# ENDPOINT TRIGGERS
# ============================================================================

class CreateTrigger(BaseResourceTrigger):
    """Endpoint: POST /api/{path}"""

    operation = "create"

    def process(self, req: func.HttpRequest) -> func.HttpResponse:
        result = self.service.create(self._json_body(req))
        return self._success(
            result.record,
            message=f"{self.display_name} created successfully",
            nearby_geofences=result.nearby_geofences
        )


class ListByOwnerTrigger(BaseResourceTrigger):
    """Endpoint: GET /api/{path}/owner/{owner_id}"""

    operation = "list"

    def process(self, req: func.HttpRequest) -> func.HttpResponse:
        owner_id = req.route_params.get('owner_id')
        rows = self.service.list_by_owner(owner_id, dict(req.params))
        return self._success(rows)


class GetTrigger(BaseResourceTrigger):
    """Endpoint: GET /api/{path}/{record_id}"""

    operation = "get"

    def process(self, req: func.HttpRequest) -> func.HttpResponse:
        return self._success(self.service.get(req.route_params.get('record_id')))


class UpdateTrigger(BaseResourceTrigger):
    """Endpoint: PUT /api/{path}/{record_id}"""

    operation = "update"

    def process(self, req: func.HttpRequest) -> func.HttpResponse:
        record_id = req.route_params.get('record_id')
        row = self.service.update(record_id, self._json_body(req))
        return self._success(row, message=f"{self.display_name} updated successfully")


class DeleteTrigger(BaseResourceTrigger):
    """Endpoint: DELETE /api/{path}/{record_id}"""

    operation = "delete"

    def process(self, req: func.HttpRequest) -> func.HttpResponse:
        row = self.service.delete(req.route_params.get('record_id'))
        return self._success(row, message=f"{self.display_name} deleted successfully")
