# ============================================================================
# CLAUDE CONTEXT - CANDIDATE RECORD
# ============================================================================
# STATUS: Core - Mutable payload flowing through the create pipeline
# PURPOSE: Key/value record with an ordered log of who wrote which field
# LAST_REVIEWED: 18 OCT 2026
# EXPORTS: CandidateRecord, Mutation, MutationSource
# DEPENDENCIES: dataclasses, enum
# ============================================================================

"""
Candidate Record

The request body enters the pipeline as a CandidateRecord. Auto-fill and
enrichment write into it through `set()`, and every write is appended to
`mutations` so a request's log shows exactly which stage supplied each
field. The record is handed to the validator as a plain dict; whatever
the validator returns is what gets stored.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, List, Optional


class MutationSource(str, Enum):
    REQUEST = "request"
    AUTO_FILL = "auto_fill"
    ENRICHMENT = "enrichment"


@dataclass(frozen=True)
class Mutation:
    source: MutationSource
    field: str
    value: Any


class CandidateRecord:
    """Untyped candidate built from a request body."""

    def __init__(self, body: Optional[Dict[str, Any]] = None):
        self._values: Dict[str, Any] = {}
        self.mutations: List[Mutation] = []
        for key, value in (body or {}).items():
            self.set(key, value, MutationSource.REQUEST)

    def set(self, field: str, value: Any, source: MutationSource) -> None:
        self._values[field] = value
        self.mutations.append(Mutation(source, field, value))

    def get(self, field: str, default: Any = None) -> Any:
        return self._values.get(field, default)

    def has_value(self, field: str) -> bool:
        """True when the field is present and not null."""
        return self._values.get(field) is not None

    def fields_from(self, source: MutationSource) -> List[str]:
        return [m.field for m in self.mutations if m.source is source]

    def as_dict(self) -> Dict[str, Any]:
        return dict(self._values)

    def __contains__(self, field: str) -> bool:
        return field in self._values

    def __repr__(self) -> str:
        return f"CandidateRecord({self._values!r}, mutations={len(self.mutations)})"
