# ============================================================================
# CLAUDE CONTEXT - RESOURCE API ERRORS
# ============================================================================
# STATUS: Foundation - Error taxonomy for the resource endpoints
# PURPOSE: Exceptions surfaced identically by every generated endpoint
# LAST_REVIEWED: 18 OCT 2026
# EXPORTS: ResourceAPIError, FieldError, RecordValidationError, NotFoundError,
#          GeofenceRejection, StorageError, ResourceConfigurationError
# DEPENDENCIES: dataclasses, typing
# ============================================================================

"""
Resource API Error Taxonomy

Each error knows its HTTP status and the `error_type` code written to logs.
Triggers translate them into the `{success, error, details}` envelope.

    RecordValidationError   400  field-level errors from the validator
    GeofenceRejection       400  required geofence not confirmed
    NotFoundError           404  get/update/delete on a missing id
    StorageError            500  persistence failure after validation passed

Provider failures are NOT part of this module: they are raised by the
geo provider client (services.geo_provider) and absorbed by the create
pipeline unless a hard gate needs them.
"""

from dataclasses import dataclass, field
from typing import List, Tuple, Union, Dict, Any, Optional


@dataclass(frozen=True)
class FieldError:
    """A single field-level validation failure."""
    path: Tuple[Union[str, int], ...]
    message: str

    @property
    def field(self) -> str:
        """Dotted form of the path (e.g. 'brand_selling.0')."""
        return ".".join(str(segment) for segment in self.path)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "field": self.field,
            "path": list(self.path),
            "message": self.message
        }


class ResourceAPIError(Exception):
    """Base class for errors surfaced by the generated endpoints."""

    status_code = 500
    error_type = "InternalServerError"

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message

    @property
    def details(self) -> Optional[Any]:
        return None


class RecordValidationError(ResourceAPIError):
    """Candidate record rejected by the validator (client-caused)."""

    status_code = 400
    error_type = "ValidationError"

    def __init__(self, message: str, errors: List[FieldError]):
        super().__init__(message)
        self.errors = list(errors)

    @property
    def details(self) -> List[Dict[str, Any]]:
        return [error.to_dict() for error in self.errors]


class NotFoundError(ResourceAPIError):
    """No stored record with the requested identifier."""

    status_code = 404
    error_type = "NotFound"


class GeofenceRejection(ResourceAPIError):
    """Hard gate: the caller is not inside the geofence the policy requires."""

    status_code = 400
    error_type = "GeofenceRejection"

    def __init__(self, message: str, tag: str, match_value: Optional[str] = None):
        super().__init__(message)
        self.tag = tag
        self.match_value = match_value


class StorageError(ResourceAPIError):
    """Persistence failure. The request was valid, so this is a server fault."""

    status_code = 500
    error_type = "StorageError"

    def __init__(self, message: str, operation: str, resource: Optional[str] = None):
        super().__init__(message)
        self.operation = operation
        self.resource = resource


class ResourceConfigurationError(ValueError):
    """Invalid resource descriptor or duplicate registration (startup-time only)."""
