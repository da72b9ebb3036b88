# ============================================================================
# CLAUDE CONTEXT - RECORD VALIDATOR
# ============================================================================
# STATUS: Core - Schema validation for create and update payloads
# PURPOSE: Turn a candidate dict into a normalized record or a list of field errors
# LAST_REVIEWED: 18 OCT 2026
# EXPORTS: validate, validate_partial, partial_model
# DEPENDENCIES: pydantic
# PATTERNS: Pure function, cached derived models
# ============================================================================

"""
Record Validator

Wraps pydantic v2 validation behind two pure, synchronous functions:

    validate(schema, candidate)          full mode (create)
    validate_partial(schema, candidate)  partial mode (update)

Partial mode derives a sibling model in which every field defaults to
None but keeps its declared type and constraints. An omitted field is
therefore accepted, while a field that IS present must satisfy the same
rule as in full mode (an explicit null on a non-nullable field is still
rejected). Only supplied fields are returned.

Unknown keys are ignored by the schema and never reach storage.
"""

from functools import lru_cache
from typing import Annotated, Any, Dict, List, Type

from pydantic import BaseModel, Field, ValidationError, create_model

from util_logger import LoggerFactory, ComponentType
from .errors import FieldError, RecordValidationError

logger = LoggerFactory.create_logger(ComponentType.VALIDATOR, "RecordValidator")


def validate(schema: Type[BaseModel], candidate: Any) -> Dict[str, Any]:
    """
    Validate a complete record.

    Args:
        schema: Pydantic model class for the resource
        candidate: Plain dict built from the request (after auto-fill/enrichment)

    Returns:
        Normalized record (python types: date, datetime, Decimal, ...)

    Raises:
        RecordValidationError: With one FieldError per failing field
    """
    model = _run(schema, candidate)
    return model.model_dump()


def validate_partial(schema: Type[BaseModel], candidate: Any) -> Dict[str, Any]:
    """
    Validate an update body: every field optional, present fields fully checked.

    Returns:
        Normalized values for the supplied schema fields only
    """
    model = _run(partial_model(schema), candidate)
    return model.model_dump(exclude_unset=True)


@lru_cache(maxsize=None)
def partial_model(schema: Type[BaseModel]) -> Type[BaseModel]:
    """Derive (once per schema) the all-optional variant used for updates."""
    fields = {}
    for name, info in schema.model_fields.items():
        annotation = info.annotation
        if info.metadata:
            annotation = Annotated[tuple([annotation, *info.metadata])]
        fields[name] = (annotation, Field(default=None, description=info.description))

    return create_model(f"{schema.__name__}Partial", __base__=schema, **fields)


def _run(schema: Type[BaseModel], candidate: Any) -> BaseModel:
    if not isinstance(candidate, dict):
        raise RecordValidationError(
            "Request body must be a JSON object",
            [FieldError(path=(), message="Expected an object")]
        )

    try:
        return schema.model_validate(candidate)
    except ValidationError as e:
        errors = _field_errors(e)
        logger.info(
            f"Validation failed for {schema.__name__}: {len(errors)} error(s)",
            extra={'custom_dimensions': {
                'schema': schema.__name__,
                'error_count': len(errors),
                'fields': [error.field for error in errors]
            }}
        )
        raise RecordValidationError(f"Validation failed for {schema.__name__}", errors) from e


def _field_errors(error: ValidationError) -> List[FieldError]:
    return [
        FieldError(path=tuple(item["loc"]), message=item["msg"])
        for item in error.errors()
    ]
