# ============================================================================
# CLAUDE CONTEXT - INFRASTRUCTURE MODULE
# ============================================================================
# STATUS: Core Infrastructure - Database access
# PURPOSE: PostgreSQL connection management and the record store contract
# LAST_REVIEWED: 18 OCT 2026
# EXPORTS: PostgreSQLRepository, RecordStore, PostgresRecordStore, RecordQuery, DateRange
# DEPENDENCIES: psycopg, config
# ============================================================================

"""
Infrastructure Module

- PostgreSQL connection management (PostgreSQLRepository)
- Storage contract used by every generated resource (RecordStore)
- PostgreSQL implementation of that contract (PostgresRecordStore)
"""

from .postgresql import PostgreSQLRepository
from .record_store import (
    DateRange,
    PostgresRecordStore,
    RecordQuery,
    RecordStore,
    utc_now,
)

__version__ = "1.0.0"
__all__ = [
    "PostgreSQLRepository",
    "DateRange",
    "PostgresRecordStore",
    "RecordQuery",
    "RecordStore",
    "utc_now",
]
