# ============================================================================
# CLAUDE CONTEXT - POSTGRESQL REPOSITORY
# ============================================================================
# STATUS: Core Infrastructure - PostgreSQL connection management
# PURPOSE: Per-request PostgreSQL connections for the field operations tables
# LAST_REVIEWED: 18 OCT 2026
# EXPORTS: PostgreSQLRepository
# DEPENDENCIES: psycopg, config
# SCOPE: Connection lifecycle, statement timeout, schema/table checks
# PATTERNS: Repository pattern, Per-request connections, Managed identity
# ============================================================================

"""
PostgreSQL Repository - Connection Management

Base class for the record stores and the health checks:
- Password-based authentication (local development)
- Azure Managed Identity authentication (production)
- Per-request connection creation (no pooling)
- Statement timeout applied to every connection
- Schema and table verification

Usage:
    from infrastructure.postgresql import PostgreSQLRepository

    repo = PostgreSQLRepository(schema_name='field_ops')
    with repo._get_cursor() as cursor:
        cursor.execute("SELECT count(*) AS n FROM field_ops.dealers")
        total = cursor.fetchone()['n']
"""

import logging
import psycopg
from psycopg import sql
from psycopg.rows import dict_row
from typing import Optional, List
from contextlib import contextmanager

from config import get_postgres_connection_string

# Logger setup
logger = logging.getLogger(__name__)


class PostgreSQLRepository:
    """
    PostgreSQL repository base class with connection management.

    Connection Strategy:
    -------------------
    Each operation creates a NEW connection and closes it immediately after use.
    No connection pooling is used - suitable for serverless Azure Functions
    where connection reuse across requests is not beneficial.

    The connection string is resolved lazily on first use so that building
    the route table at startup never needs database credentials.
    """

    def __init__(self, connection_string: Optional[str] = None,
                 schema_name: str = 'field_ops',
                 query_timeout_seconds: Optional[int] = None):
        """
        Initialize PostgreSQL repository.

        Parameters:
        ----------
        connection_string : Optional[str]
            Explicit PostgreSQL connection string. If not provided,
            uses get_postgres_connection_string() from config module.

        schema_name : str
            Database schema holding the entity tables.

        query_timeout_seconds : Optional[int]
            statement_timeout applied to each connection (None = server default).
        """
        self.schema_name = schema_name
        self.query_timeout_seconds = query_timeout_seconds
        self._conn_string = connection_string

    @property
    def conn_string(self) -> str:
        if not self._conn_string:
            self._conn_string = get_postgres_connection_string()
        return self._conn_string

    @contextmanager
    def _get_connection(self):
        """
        Context manager for PostgreSQL database connections.

        1. Create connection using connection string
        2. Apply statement timeout
        3. Yield connection to caller
        4. On error: rollback transaction
        5. Always: close connection

        Yields:
        ------
        psycopg.Connection
            Active PostgreSQL connection with dict_row factory.
            Autocommit is OFF by default (explicit commit needed).

        Raises:
        ------
        psycopg.Error
            On connection or statement failures
        """
        conn = None
        try:
            logger.debug(f"🔗 Attempting PostgreSQL connection to schema: {self.schema_name}")

            conn = psycopg.connect(self.conn_string, row_factory=dict_row)

            if self.query_timeout_seconds:
                conn.execute(
                    sql.SQL("SET statement_timeout = {}").format(
                        sql.Literal(f"{self.query_timeout_seconds}s")
                    )
                )

            yield conn

        except psycopg.Error as e:
            logger.error(f"❌ PostgreSQL error ({type(e).__name__}): {e}")

            if conn:
                try:
                    conn.rollback()
                except psycopg.Error as rollback_error:
                    logger.warning(f"⚠️ Rollback failed: {rollback_error}")

            raise

        finally:
            if conn:
                conn.close()
                logger.debug("🔒 Connection closed")

    @contextmanager
    def _get_cursor(self, conn=None):
        """
        Context manager for PostgreSQL cursors with auto-transaction handling.

        - With conn: Caller controls transaction (no auto-commit)
        - Without conn: Auto-commits on success, auto-rollback on error
        """
        if conn:
            with conn.cursor() as cursor:
                yield cursor
        else:
            with self._get_connection() as conn:
                with conn.cursor() as cursor:
                    yield cursor
                    conn.commit()

    def _qualified(self, table_name: str) -> sql.Composed:
        """schema.table as a composed identifier."""
        return sql.SQL("{schema}.{table}").format(
            schema=sql.Identifier(self.schema_name),
            table=sql.Identifier(table_name)
        )

    def schema_exists(self) -> bool:
        """True when the configured schema exists. Connection errors propagate."""
        with self._get_cursor() as cursor:
            cursor.execute(
                "SELECT 1 FROM information_schema.schemata WHERE schema_name = %s",
                (self.schema_name,)
            )
            return cursor.fetchone() is not None

    def list_tables(self) -> List[str]:
        """Base tables in the configured schema."""
        with self._get_cursor() as cursor:
            cursor.execute("""
                SELECT table_name
                FROM information_schema.tables
                WHERE table_schema = %s AND table_type = 'BASE TABLE'
                ORDER BY table_name
            """, (self.schema_name,))
            return [row['table_name'] for row in cursor.fetchall()]
