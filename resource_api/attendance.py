# ============================================================================
# CLAUDE CONTEXT - ATTENDANCE PUNCH-OUT
# ============================================================================
# STATUS: HTTP Trigger - Closes the owner's open attendance row
# PURPOSE: POST /api/attendance/punch-out
# LAST_REVIEWED: 18 OCT 2026
# EXPORTS: PunchOutTrigger, punch_out
# DEPENDENCIES: azure.functions
# ============================================================================

"""
Attendance Punch-Out

Punch-in is the geofence-gated create of the `attendance` resource.
Punch-out finds the newest attendance row for today that has no out-time
and stamps it:

    POST /api/attendance/punch-out
    {"user_id": 7, "latitude": 26.12, "longitude": 91.79, "image_url": "https://..."}

The out-fields go through partial validation like any update.
404 when there is no open row for today.
"""

from typing import Any, Dict

import azure.functions as func

from infrastructure.record_store import RecordQuery
from .errors import FieldError, NotFoundError, RecordValidationError
from .service import ResourceService
from .triggers import BaseResourceTrigger
from .validator import validate_partial

OUT_TIME_FIELD = "out_time_timestamp"
IN_TIME_FIELD = "in_time_timestamp"
DATE_FIELD = "attendance_date"


def punch_out(service: ResourceService, body: Dict[str, Any]) -> Dict[str, Any]:
    """
    Stamp the out-time on the owner's open attendance row for today.

    Raises:
        RecordValidationError: Missing/invalid owner id or out-fields
        NotFoundError: No open punch-in record for today
    """
    descriptor = service.descriptor
    owner_field = descriptor.owner_field

    if body.get(owner_field) is None:
        raise RecordValidationError(
            f"{owner_field} is required",
            [FieldError(path=(owner_field,), message="Field required")]
        )
    owner_id = service.coerce(owner_field, body[owner_field], owner_field)

    now = service.clock()
    open_rows = service.store.find(RecordQuery(
        equals={owner_field: owner_id, DATE_FIELD: now.date()},
        is_null=(OUT_TIME_FIELD,),
        order_by=IN_TIME_FIELD,
        descending=True,
        limit=1
    ))
    if not open_rows:
        raise NotFoundError("No active punch-in record found")

    image_url = body.get("image_url")
    values = validate_partial(descriptor.schema, {
        OUT_TIME_FIELD: now,
        "out_time_image_captured": bool(image_url),
        "out_time_image_url": image_url,
        "out_time_latitude": body.get("latitude"),
        "out_time_longitude": body.get("longitude"),
        "out_time_accuracy": body.get("accuracy"),
    })
    values[descriptor.updated_field] = now

    record_id = open_rows[0][descriptor.id_field]
    row = service.store.update(record_id, values)
    if row is None:
        raise NotFoundError("No active punch-in record found")

    service.logger.info(
        "✅ Punched out",
        extra={'custom_dimensions': {'operation': 'punch_out', 'record_id': record_id}}
    )
    return row


class PunchOutTrigger(BaseResourceTrigger):
    """Endpoint: POST /api/attendance/punch-out"""

    operation = "punch-out"

    def process(self, req: func.HttpRequest) -> func.HttpResponse:
        row = punch_out(self.service, self._json_body(req))
        return self._success(row, message="Punched out successfully")
