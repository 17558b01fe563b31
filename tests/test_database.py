"""
Tests for DatabaseManager connection handling over stand-in asyncpg pools.
"""

import asyncpg
import pytest

from customs_tracker.core.controller import ProcessExecutionController
from customs_tracker.core.exceptions import DatabaseError, SessionAlreadyActiveError
from customs_tracker.services.session_manager import SessionManager
from customs_tracker.utils.database import DatabaseManager

from tests.conftest import OPERATOR_ID, SHIPMENT_ID
from tests.fakes import FakeConnection, FakePool, RefusingPool, manager_with


@pytest.mark.asyncio
async def test_uninitialized_pool():
    db = DatabaseManager("postgresql://localhost/unused")

    with pytest.raises(DatabaseError) as exc_info:
        async with db.get_connection():
            pass

    assert exc_info.value.details["operation"] == "connection"


@pytest.mark.asyncio
async def test_refused_connection_is_database_error():
    db = manager_with(RefusingPool())

    with pytest.raises(DatabaseError) as exc_info:
        async with db.get_connection():
            pass

    assert exc_info.value.details["operation"] == "connection"
    assert "Connection refused" in exc_info.value.message
    assert await db.is_healthy() is False


@pytest.mark.asyncio
async def test_commit_failure_is_database_error():
    connection = FakeConnection(commit_error=ConnectionResetError("connection lost during commit"))
    db = manager_with(FakePool(connection))

    with pytest.raises(DatabaseError) as exc_info:
        async with db.transaction() as conn:
            await conn.execute("SELECT 1")

    assert exc_info.value.details["operation"] == "transaction"
    assert connection.executed == ["SELECT 1"]


@pytest.mark.asyncio
async def test_domain_errors_pass_through_transaction():
    db = manager_with(FakePool(FakeConnection()))

    with pytest.raises(SessionAlreadyActiveError):
        async with db.transaction():
            raise SessionAlreadyActiveError(OPERATOR_ID)


@pytest.mark.asyncio
async def test_start_over_unreachable_database():
    controller = ProcessExecutionController(manager_with(RefusingPool()))

    with pytest.raises(DatabaseError) as exc_info:
        await controller.start(SHIPMENT_ID, OPERATOR_ID)

    assert exc_info.value.http_status == 500


@pytest.mark.asyncio
async def test_concurrent_session_start_maps_to_already_active():
    connection = FakeConnection(
        execute_error=asyncpg.UniqueViolationError(
            'duplicate key value violates unique constraint "sessions_one_active_per_user"'
        )
    )
    manager = SessionManager(manager_with(FakePool(connection)))

    with pytest.raises(SessionAlreadyActiveError) as exc_info:
        await manager.start_session(OPERATOR_ID)

    assert exc_info.value.http_status == 400
    assert exc_info.value.details["user_id"] == OPERATOR_ID


@pytest.mark.asyncio
async def test_other_insert_failures_stay_database_errors():
    connection = FakeConnection(execute_error=asyncpg.PostgresError("disk full"))
    manager = SessionManager(manager_with(FakePool(connection)))

    with pytest.raises(DatabaseError) as exc_info:
        await manager.start_session(OPERATOR_ID)

    assert exc_info.value.details["operation"] == "insert_session"
