# ============================================================================
# CLAUDE CONTEXT - RECORD STORE
# ============================================================================
# STATUS: Core Infrastructure - Storage contract for generated resources
# PURPOSE: Equality/range/order/limit queries and returning-style writes
# LAST_REVIEWED: 18 OCT 2026
# EXPORTS: RecordQuery, DateRange, RecordStore, PostgresRecordStore
# DEPENDENCIES: psycopg, resource_api.errors
# PATTERNS: Repository pattern, psycopg.sql composition, RETURNING *
# ============================================================================

"""
Record Store

`RecordStore` is the storage contract every generated endpoint talks to.
Filters are expressed as a `RecordQuery` rather than raw SQL, so the
service layer stays storage-agnostic and tests can use an in-memory store.

Write semantics:
    insert  -> assigns id (UUID4 string), created_at, updated_at; returns the row
    update  -> returns the updated row, or None when the id does not exist
    delete  -> returns the pre-deletion row, or None when the id does not exist

PostgresRecordStore wraps every psycopg.Error in a StorageError that names
the operation and the resource, after logging it.

SQL Safety:
- All queries use psycopg.sql.SQL() composition (NO string concatenation)
- Dynamic identifiers via sql.Identifier()
"""

import uuid
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Callable, Dict, List, Optional, Tuple

import psycopg
from psycopg import sql

from util_logger import LoggerFactory, ComponentType
from resource_api.errors import StorageError
from .postgresql import PostgreSQLRepository

logger = LoggerFactory.create_logger(ComponentType.REPOSITORY, "RecordStore")


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


@dataclass(frozen=True)
class DateRange:
    """Closed range [start, end] on one column."""
    field: str
    start: Any
    end: Any


@dataclass
class RecordQuery:
    """
    Conjunctive filter with ordering and limit.

    Attributes:
        equals: column -> value equality conditions
        date_range: Optional inclusive range condition
        is_null: Columns that must be NULL
        order_by: Column to order by (descending by default)
        limit: Maximum rows (None = unbounded, used by count)
    """
    equals: Dict[str, Any] = field(default_factory=dict)
    date_range: Optional[DateRange] = None
    is_null: Tuple[str, ...] = ()
    order_by: Optional[str] = None
    descending: bool = True
    limit: Optional[int] = None


class RecordStore(ABC):
    """Storage handle for one resource table."""

    id_field = "id"
    created_field = "created_at"
    updated_field = "updated_at"

    def __init__(self, clock: Callable[[], datetime] = utc_now):
        self.clock = clock

    def _stamp_new(self, record: Dict[str, Any]) -> Dict[str, Any]:
        now = self.clock()
        row = dict(record)
        row[self.id_field] = str(uuid.uuid4())
        row.setdefault(self.created_field, now)
        row.setdefault(self.updated_field, now)
        return row

    @abstractmethod
    def insert(self, record: Dict[str, Any]) -> Dict[str, Any]:
        """Persist a validated record and return the stored row."""

    @abstractmethod
    def get(self, record_id: str) -> Optional[Dict[str, Any]]:
        """Row by id, or None."""

    @abstractmethod
    def find(self, query: RecordQuery) -> List[Dict[str, Any]]:
        """Rows matching the query."""

    @abstractmethod
    def count(self, query: RecordQuery) -> int:
        """Number of rows matching the query (ordering and limit ignored)."""

    @abstractmethod
    def update(self, record_id: str, values: Dict[str, Any]) -> Optional[Dict[str, Any]]:
        """Apply values to the row; None when the id does not exist."""

    @abstractmethod
    def delete(self, record_id: str) -> Optional[Dict[str, Any]]:
        """Remove the row and return its last state; None when absent."""


class PostgresRecordStore(PostgreSQLRepository, RecordStore):
    """
    RecordStore backed by one PostgreSQL table.

    Args:
        table: Table name inside `schema_name`
        display_name: Resource name used in logs and StorageError
        schema_name: PostgreSQL schema (default field_ops)
        connection_string: Optional explicit connection string
        query_timeout_seconds: statement_timeout per connection
        clock: Source of created_at / updated_at on insert
    """

    def __init__(
        self,
        table: str,
        display_name: str,
        schema_name: str = "field_ops",
        connection_string: Optional[str] = None,
        query_timeout_seconds: Optional[int] = None,
        clock: Callable[[], datetime] = utc_now
    ):
        PostgreSQLRepository.__init__(
            self,
            connection_string=connection_string,
            schema_name=schema_name,
            query_timeout_seconds=query_timeout_seconds
        )
        RecordStore.__init__(self, clock=clock)
        self.table = table
        self.display_name = display_name

    # ========================================================================
    # WRITES
    # ========================================================================

    def insert(self, record: Dict[str, Any]) -> Dict[str, Any]:
        row = self._stamp_new(record)
        columns = list(row.keys())

        query = sql.SQL("INSERT INTO {table} ({columns}) VALUES ({values}) RETURNING *").format(
            table=self._qualified(self.table),
            columns=sql.SQL(", ").join(sql.Identifier(c) for c in columns),
            values=sql.SQL(", ").join(sql.Placeholder() for _ in columns)
        )
        return self._execute("insert", query, [row[c] for c in columns], fetch="one")

    def update(self, record_id: str, values: Dict[str, Any]) -> Optional[Dict[str, Any]]:
        if not values:
            return self.get(record_id)

        assignments = sql.SQL(", ").join(
            sql.SQL("{col} = %s").format(col=sql.Identifier(c)) for c in values
        )
        query = sql.SQL("UPDATE {table} SET {assignments} WHERE {id_col} = %s RETURNING *").format(
            table=self._qualified(self.table),
            assignments=assignments,
            id_col=sql.Identifier(self.id_field)
        )
        return self._execute("update", query, [*values.values(), record_id], fetch="one")

    def delete(self, record_id: str) -> Optional[Dict[str, Any]]:
        query = sql.SQL("DELETE FROM {table} WHERE {id_col} = %s RETURNING *").format(
            table=self._qualified(self.table),
            id_col=sql.Identifier(self.id_field)
        )
        return self._execute("delete", query, [record_id], fetch="one")

    # ========================================================================
    # READS
    # ========================================================================

    def get(self, record_id: str) -> Optional[Dict[str, Any]]:
        query = sql.SQL("SELECT * FROM {table} WHERE {id_col} = %s LIMIT 1").format(
            table=self._qualified(self.table),
            id_col=sql.Identifier(self.id_field)
        )
        return self._execute("get", query, [record_id], fetch="one")

    def find(self, query: RecordQuery) -> List[Dict[str, Any]]:
        where_clause, params = self._build_where_clause(query)

        parts = [sql.SQL("SELECT * FROM {table}").format(table=self._qualified(self.table))]
        if where_clause is not None:
            parts.append(sql.SQL("WHERE {}").format(where_clause))
        if query.order_by:
            parts.append(sql.SQL("ORDER BY {col} {direction}").format(
                col=sql.Identifier(query.order_by),
                direction=sql.SQL("DESC" if query.descending else "ASC")
            ))
        if query.limit is not None:
            parts.append(sql.SQL("LIMIT %s"))
            params.append(query.limit)

        return self._execute("find", sql.SQL(" ").join(parts), params, fetch="all")

    def count(self, query: RecordQuery) -> int:
        where_clause, params = self._build_where_clause(query)

        statement = sql.SQL("SELECT count(*) AS count FROM {table}").format(
            table=self._qualified(self.table)
        )
        if where_clause is not None:
            statement = sql.SQL("{} WHERE {}").format(statement, where_clause)

        result = self._execute("count", statement, params, fetch="one")
        return int(result["count"]) if result else 0

    # ========================================================================
    # HELPERS
    # ========================================================================

    def _build_where_clause(self, query: RecordQuery) -> Tuple[Optional[sql.Composed], List[Any]]:
        """
        Build WHERE clause from equality, range and null conditions.

        Returns:
            Tuple of (where_clause_sql, params_list)
        """
        conditions = []
        params = []

        for column, value in query.equals.items():
            conditions.append(sql.SQL("{col} = %s").format(col=sql.Identifier(column)))
            params.append(value)

        if query.date_range:
            conditions.append(sql.SQL("{col} >= %s AND {col} <= %s").format(
                col=sql.Identifier(query.date_range.field)
            ))
            params.extend([query.date_range.start, query.date_range.end])

        for column in query.is_null:
            conditions.append(sql.SQL("{col} IS NULL").format(col=sql.Identifier(column)))

        if not conditions:
            return None, []

        return sql.SQL(" AND ").join(conditions), params

    def _execute(self, operation: str, query: sql.Composable, params: List[Any], fetch: str):
        try:
            with self._get_connection() as conn:
                with conn.cursor() as cur:
                    cur.execute(query, params)
                    result = cur.fetchone() if fetch == "one" else cur.fetchall()
                conn.commit()
                return result
        except psycopg.Error as e:
            logger.error(
                f"❌ Storage {operation} failed for {self.display_name}: {e}",
                extra={'custom_dimensions': {
                    'operation': operation,
                    'resource': self.display_name,
                    'table': self.table,
                    'error_type': type(e).__name__
                }}
            )
            raise StorageError(
                f"Failed to {operation} {self.display_name}",
                operation=operation,
                resource=self.display_name
            ) from e
