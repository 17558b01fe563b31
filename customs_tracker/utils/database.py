"""
Database utilities for Customs Process Tracker

Provides connection management, transactions and entity persistence for the
tracker on top of an asyncpg connection pool.
"""

import asyncio
from contextlib import asynccontextmanager
from importlib import resources
from typing import Dict, List, Optional

import asyncpg

from ..models.process import Process, ProcessStep
from ..models.execution import ProcessExecution, ProcessStepExecution
from ..models.alert import Alert
from ..models.session import WorkSession, Profile
from ..models.shipment import Shipment, ShipmentItem, ShipmentStatus
from ..models.exemplary import ExemplaryProcess, AssistantLog
from ..core.exceptions import DatabaseError, SessionAlreadyActiveError

# Failures raised by asyncpg or the socket beneath it
CONNECTION_ERRORS = (asyncpg.PostgresError, asyncpg.InterfaceError, OSError, asyncio.TimeoutError)


def load_schema_sql() -> str:
    """Read the bundled schema definition."""
    return resources.files("customs_tracker").joinpath("sql/schema.sql").read_text(encoding="utf-8")


class DatabaseManager:
    """
    Manages database connections and operations for the tracker.

    Every write method takes an optional ``conn`` so callers can group several
    writes inside one ``transaction()``. Without it a pooled connection is
    acquired for the single statement.
    """

    def __init__(
        self,
        connection_string: str,
        pool_size: int = 10,
        max_overflow: int = 20,
        command_timeout: float = 60
    ):
        """
        Initialize database manager.

        Args:
            connection_string: PostgreSQL connection string
            pool_size: Base connection pool size
            max_overflow: Maximum additional connections
            command_timeout: Per-statement timeout in seconds
        """
        self.connection_string = connection_string
        self.pool_size = pool_size
        self.max_overflow = max_overflow
        self.command_timeout = command_timeout
        self.pool: Optional[asyncpg.Pool] = None

    async def initialize(self) -> None:
        """Initialize database connection pool."""
        try:
            self.pool = await asyncpg.create_pool(
                self.connection_string,
                min_size=min(5, self.pool_size),
                max_size=self.pool_size + self.max_overflow,
                command_timeout=self.command_timeout
            )
        except Exception as e:
            raise DatabaseError("initialization", f"Failed to create connection pool: {str(e)}")

    async def close(self) -> None:
        """Close database connection pool."""
        if self.pool:
            await self.pool.close()
            self.pool = None

    async def is_healthy(self) -> bool:
        """Check database connectivity."""
        if not self.pool:
            return False
        try:
            async with self.pool.acquire() as connection:
                await connection.execute("SELECT 1")
                return True
        except CONNECTION_ERRORS:
            return False

    @asynccontextmanager
    async def get_connection(self):
        """Get a database connection from the pool."""
        if not self.pool:
            raise DatabaseError("connection", "Database pool not initialized")

        try:
            async with self.pool.acquire() as connection:
                yield connection
        except CONNECTION_ERRORS as e:
            raise DatabaseError("connection", str(e) or type(e).__name__)

    @asynccontextmanager
    async def transaction(self):
        """Run the enclosed statements in one transaction on one connection.

        Commit and rollback failures surface as DatabaseError.
        """
        async with self.get_connection() as connection:
            try:
                async with connection.transaction():
                    yield connection
            except CONNECTION_ERRORS as e:
                raise DatabaseError("transaction", str(e) or type(e).__name__)

    @asynccontextmanager
    async def _use(self, conn=None):
        if conn is not None:
            yield conn
        else:
            async with self.get_connection() as connection:
                yield connection

    async def apply_schema(self, sql: Optional[str] = None) -> None:
        """Create the tracker tables if they don't exist."""
        try:
            async with self.transaction() as conn:
                await conn.execute(sql or load_schema_sql())
        except Exception as e:
            raise DatabaseError("apply_schema", str(e))

    # Profile and Session Methods
    async def get_profile(self, user_id: str) -> Optional[Profile]:
        """Get a user's profile."""
        try:
            async with self._use() as conn:
                row = await conn.fetchrow("SELECT * FROM profiles WHERE id = $1", user_id)
                return Profile.from_dict(dict(row)) if row else None
        except Exception as e:
            raise DatabaseError("get_profile", str(e), table="profiles")

    async def get_active_session(self, user_id: str, conn=None) -> Optional[WorkSession]:
        """Get the open work session of a user."""
        try:
            async with self._use(conn) as c:
                row = await c.fetchrow("""
                    SELECT * FROM sessions
                    WHERE user_id = $1 AND active = true
                    ORDER BY started_at DESC
                    LIMIT 1
                """, user_id)
                return WorkSession.from_dict(dict(row)) if row else None
        except Exception as e:
            raise DatabaseError("get_active_session", str(e), table="sessions")

    async def get_session(self, session_id: str) -> Optional[WorkSession]:
        try:
            async with self._use() as conn:
                row = await conn.fetchrow("SELECT * FROM sessions WHERE id = $1", session_id)
                return WorkSession.from_dict(dict(row)) if row else None
        except Exception as e:
            raise DatabaseError("get_session", str(e), table="sessions")

    async def insert_session(self, session: WorkSession, conn=None) -> WorkSession:
        try:
            async with self._use(conn) as c:
                await c.execute("""
                    INSERT INTO sessions (id, user_id, started_at, ended_at, active)
                    VALUES ($1, $2, $3, $4, $5)
                """, session.id, session.user_id, session.started_at, session.ended_at, session.active)
            return session
        except asyncpg.UniqueViolationError:
            # A concurrent start already holds the one open session per user
            raise SessionAlreadyActiveError(session.user_id)
        except Exception as e:
            raise DatabaseError("insert_session", str(e), table="sessions")

    async def update_session(self, session: WorkSession, conn=None) -> WorkSession:
        try:
            async with self._use(conn) as c:
                await c.execute("""
                    UPDATE sessions SET ended_at = $2, active = $3 WHERE id = $1
                """, session.id, session.ended_at, session.active)
            return session
        except Exception as e:
            raise DatabaseError("update_session", str(e), table="sessions")

    # Shipment Methods
    async def get_shipment(self, shipment_id: str, conn=None) -> Optional[Shipment]:
        """Get a shipment by ID (without items)."""
        try:
            async with self._use(conn) as c:
                row = await c.fetchrow("SELECT * FROM shipments WHERE id = $1", shipment_id)
                return Shipment.from_dict(dict(row)) if row else None
        except Exception as e:
            raise DatabaseError("get_shipment", str(e), table="shipments")

    async def get_shipment_by_tracking_code(self, tracking_code: str) -> Optional[Shipment]:
        try:
            async with self._use() as conn:
                row = await conn.fetchrow(
                    "SELECT * FROM shipments WHERE tracking_code = $1", tracking_code
                )
                return Shipment.from_dict(dict(row)) if row else None
        except Exception as e:
            raise DatabaseError("get_shipment_by_tracking_code", str(e), table="shipments")

    async def get_shipment_items(self, shipment_id: str) -> List[ShipmentItem]:
        try:
            async with self._use() as conn:
                rows = await conn.fetch(
                    "SELECT * FROM shipment_items WHERE shipment_id = $1 ORDER BY name", shipment_id
                )
                return [ShipmentItem.from_dict(dict(row)) for row in rows]
        except Exception as e:
            raise DatabaseError("get_shipment_items", str(e), table="shipment_items")

    async def get_all_shipments(self) -> List[Shipment]:
        """Get all shipments, newest first."""
        try:
            async with self._use() as conn:
                rows = await conn.fetch("SELECT * FROM shipments ORDER BY created_at DESC")
                return [Shipment.from_dict(dict(row)) for row in rows]
        except Exception as e:
            raise DatabaseError("get_all_shipments", str(e), table="shipments")

    async def update_shipment_status(self, shipment_id: str, status: ShipmentStatus, conn=None) -> None:
        try:
            async with self._use(conn) as c:
                await c.execute(
                    "UPDATE shipments SET status = $2 WHERE id = $1", shipment_id, status.value
                )
        except Exception as e:
            raise DatabaseError("update_shipment_status", str(e), table="shipments")

    # Process Catalog Methods
    async def get_all_processes(self) -> List[Process]:
        """Get all processes (without steps)."""
        try:
            async with self._use() as conn:
                rows = await conn.fetch("SELECT * FROM processes ORDER BY name")
                return [Process.from_dict(dict(row)) for row in rows]
        except Exception as e:
            raise DatabaseError("get_all_processes", str(e), table="processes")

    async def get_process(self, process_id: str, conn=None) -> Optional[Process]:
        """Get a process together with its ordered steps."""
        try:
            async with self._use(conn) as c:
                row = await c.fetchrow("SELECT * FROM processes WHERE id = $1", process_id)
                if not row:
                    return None
                process = Process.from_dict(dict(row))
                process.steps = await self.get_process_steps(process_id, conn=c)
                return process
        except DatabaseError:
            raise
        except Exception as e:
            raise DatabaseError("get_process", str(e), table="processes")

    async def get_process_steps(self, process_id: str, conn=None) -> List[ProcessStep]:
        try:
            async with self._use(conn) as c:
                rows = await c.fetch(
                    'SELECT * FROM process_steps WHERE process_id = $1 ORDER BY "order" ASC',
                    process_id
                )
                return [ProcessStep.from_dict(dict(row)) for row in rows]
        except Exception as e:
            raise DatabaseError("get_process_steps", str(e), table="process_steps")

    async def get_process_step(self, step_id: str, conn=None) -> Optional[ProcessStep]:
        try:
            async with self._use(conn) as c:
                row = await c.fetchrow("SELECT * FROM process_steps WHERE id = $1", step_id)
                return ProcessStep.from_dict(dict(row)) if row else None
        except Exception as e:
            raise DatabaseError("get_process_step", str(e), table="process_steps")

    async def find_applicable_processes(self, shipment_type: str, conn=None) -> List[Process]:
        """
        Get processes usable for a shipment type, in no particular order.

        Returns processes of exactly that type and processes of type ``both``.
        """
        try:
            async with self._use(conn) as c:
                rows = await c.fetch("""
                    SELECT * FROM processes
                    WHERE type = $1 OR type = 'both'
                """, shipment_type)
                return [Process.from_dict(dict(row)) for row in rows]
        except Exception as e:
            raise DatabaseError("find_applicable_processes", str(e), table="processes")

    # Execution Methods
    async def insert_execution(self, execution: ProcessExecution, conn=None) -> ProcessExecution:
        try:
            async with self._use(conn) as c:
                await c.execute("""
                    INSERT INTO process_executions (
                        id, process_id, shipment_id, user_id, session_id,
                        status, current_step, started_at, completed_at, notes
                    ) VALUES ($1, $2, $3, $4, $5, $6, $7, $8, $9, $10)
                """,
                execution.id, execution.process_id, execution.shipment_id,
                execution.user_id, execution.session_id, execution.status.value,
                execution.current_step, execution.started_at, execution.completed_at,
                execution.notes)
            return execution
        except Exception as e:
            raise DatabaseError("insert_execution", str(e), table="process_executions")

    async def get_execution(
        self,
        execution_id: str,
        conn=None,
        for_update: bool = False
    ) -> Optional[ProcessExecution]:
        """Get an execution; ``for_update`` locks the row for the current transaction."""
        query = "SELECT * FROM process_executions WHERE id = $1"
        if for_update:
            query += " FOR UPDATE"
        try:
            async with self._use(conn) as c:
                row = await c.fetchrow(query, execution_id)
                return ProcessExecution.from_dict(dict(row)) if row else None
        except Exception as e:
            raise DatabaseError("get_execution", str(e), table="process_executions")

    async def update_execution(self, execution: ProcessExecution, conn=None) -> ProcessExecution:
        try:
            async with self._use(conn) as c:
                await c.execute("""
                    UPDATE process_executions
                    SET status = $2, current_step = $3, completed_at = $4, notes = $5
                    WHERE id = $1
                """,
                execution.id, execution.status.value, execution.current_step,
                execution.completed_at, execution.notes)
            return execution
        except Exception as e:
            raise DatabaseError("update_execution", str(e), table="process_executions")

    async def get_execution_statistics(self) -> Dict[str, int]:
        """Count executions by status."""
        try:
            async with self._use() as conn:
                rows = await conn.fetch("""
                    SELECT status, COUNT(*) AS count
                    FROM process_executions
                    GROUP BY status
                """)
                stats = {"total": 0}
                for row in rows:
                    stats[row['status']] = row['count']
                    stats["total"] += row['count']
                return stats
        except Exception as e:
            raise DatabaseError("get_execution_statistics", str(e), table="process_executions")

    # Step Ledger Methods
    async def insert_step_executions(self, step_executions: List[ProcessStepExecution], conn=None) -> None:
        """Bulk-insert ledger rows."""
        try:
            async with self._use(conn) as c:
                await c.executemany("""
                    INSERT INTO process_step_executions (
                        id, process_execution_id, step_id, status,
                        completed_at, error_description, image_url
                    ) VALUES ($1, $2, $3, $4, $5, $6, $7)
                """, [
                    (se.id, se.process_execution_id, se.step_id, se.status.value,
                     se.completed_at, se.error_description, se.image_url)
                    for se in step_executions
                ])
        except Exception as e:
            raise DatabaseError("insert_step_executions", str(e), table="process_step_executions")

    async def get_step_executions(self, execution_id: str, conn=None) -> List[ProcessStepExecution]:
        """Get the ledger of an execution ordered by step order."""
        try:
            async with self._use(conn) as c:
                rows = await c.fetch("""
                    SELECT se.* FROM process_step_executions se
                    JOIN process_steps ps ON ps.id = se.step_id
                    WHERE se.process_execution_id = $1
                    ORDER BY ps."order" ASC
                """, execution_id)
                return [ProcessStepExecution.from_dict(dict(row)) for row in rows]
        except Exception as e:
            raise DatabaseError("get_step_executions", str(e), table="process_step_executions")

    async def get_step_execution(
        self,
        execution_id: str,
        step_id: str,
        conn=None
    ) -> Optional[ProcessStepExecution]:
        try:
            async with self._use(conn) as c:
                row = await c.fetchrow("""
                    SELECT * FROM process_step_executions
                    WHERE process_execution_id = $1 AND step_id = $2
                """, execution_id, step_id)
                return ProcessStepExecution.from_dict(dict(row)) if row else None
        except Exception as e:
            raise DatabaseError("get_step_execution", str(e), table="process_step_executions")

    async def update_step_execution(self, step_execution: ProcessStepExecution, conn=None) -> None:
        try:
            async with self._use(conn) as c:
                await c.execute("""
                    UPDATE process_step_executions
                    SET status = $2, completed_at = $3, error_description = $4, image_url = $5
                    WHERE id = $1
                """,
                step_execution.id, step_execution.status.value, step_execution.completed_at,
                step_execution.error_description, step_execution.image_url)
        except Exception as e:
            raise DatabaseError("update_step_execution", str(e), table="process_step_executions")

    # Alert Methods
    async def insert_alert(self, alert: Alert, conn=None) -> Alert:
        try:
            async with self._use(conn) as c:
                await c.execute("""
                    INSERT INTO alerts (
                        id, process_execution_id, step_execution_id, user_id, type,
                        message, resolved, created_at, resolved_at, resolved_by
                    ) VALUES ($1, $2, $3, $4, $5, $6, $7, $8, $9, $10)
                """,
                alert.id, alert.process_execution_id, alert.step_execution_id,
                alert.user_id, alert.type.value, alert.message, alert.resolved,
                alert.created_at, alert.resolved_at, alert.resolved_by)
            return alert
        except Exception as e:
            raise DatabaseError("insert_alert", str(e), table="alerts")

    async def get_alert(self, alert_id: str, conn=None) -> Optional[Alert]:
        try:
            async with self._use(conn) as c:
                row = await c.fetchrow("SELECT * FROM alerts WHERE id = $1", alert_id)
                return Alert.from_dict(dict(row)) if row else None
        except Exception as e:
            raise DatabaseError("get_alert", str(e), table="alerts")

    async def get_alerts(self, unresolved_only: bool = False) -> List[Alert]:
        """Get alerts, newest first."""
        query = "SELECT * FROM alerts"
        if unresolved_only:
            query += " WHERE resolved = false"
        query += " ORDER BY created_at DESC"
        try:
            async with self._use() as conn:
                rows = await conn.fetch(query)
                return [Alert.from_dict(dict(row)) for row in rows]
        except Exception as e:
            raise DatabaseError("get_alerts", str(e), table="alerts")

    async def update_alert(self, alert: Alert, conn=None) -> Alert:
        try:
            async with self._use(conn) as c:
                await c.execute("""
                    UPDATE alerts SET resolved = $2, resolved_at = $3, resolved_by = $4
                    WHERE id = $1
                """, alert.id, alert.resolved, alert.resolved_at, alert.resolved_by)
            return alert
        except Exception as e:
            raise DatabaseError("update_alert", str(e), table="alerts")

    # Reference Content Methods
    async def get_exemplary_processes(self) -> List[ExemplaryProcess]:
        try:
            async with self._use() as conn:
                rows = await conn.fetch("SELECT * FROM exemplary_processes ORDER BY created_at DESC")
                return [ExemplaryProcess.from_dict(dict(row)) for row in rows]
        except Exception as e:
            raise DatabaseError("get_exemplary_processes", str(e), table="exemplary_processes")

    async def get_exemplary_process(self, exemplary_id: str) -> Optional[ExemplaryProcess]:
        try:
            async with self._use() as conn:
                row = await conn.fetchrow(
                    "SELECT * FROM exemplary_processes WHERE id = $1", exemplary_id
                )
                return ExemplaryProcess.from_dict(dict(row)) if row else None
        except Exception as e:
            raise DatabaseError("get_exemplary_process", str(e), table="exemplary_processes")

    async def insert_exemplary_process(self, exemplary: ExemplaryProcess) -> ExemplaryProcess:
        try:
            async with self._use() as conn:
                await conn.execute("""
                    INSERT INTO exemplary_processes (
                        id, process_id, title, description, image_url,
                        video_url, created_by, created_at
                    ) VALUES ($1, $2, $3, $4, $5, $6, $7, $8)
                """,
                exemplary.id, exemplary.process_id, exemplary.title, exemplary.description,
                exemplary.image_url, exemplary.video_url, exemplary.created_by,
                exemplary.created_at)
            return exemplary
        except Exception as e:
            raise DatabaseError("insert_exemplary_process", str(e), table="exemplary_processes")

    async def insert_assistant_log(self, log: AssistantLog) -> None:
        try:
            async with self._use() as conn:
                await conn.execute("""
                    INSERT INTO assistant_logs (
                        id, user_id, query, detected_intent, confidence, created_at
                    ) VALUES ($1, $2, $3, $4, $5, $6)
                """,
                log.id, log.user_id, log.query, log.detected_intent,
                log.confidence, log.created_at)
        except Exception as e:
            raise DatabaseError("insert_assistant_log", str(e), table="assistant_logs")
