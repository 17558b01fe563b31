"""
Tests for the services around the execution controller.
"""

import pytest

from customs_tracker.core.exceptions import (
    AlertAlreadyResolvedError,
    AlertNotFoundError,
    AuthorizationError,
    ExemplaryProcessNotFoundError,
    ProcessNotFoundError,
    SessionAlreadyActiveError,
    SessionNotFoundError,
    ShipmentNotFoundError
)
from customs_tracker.services import (
    AccessControl,
    AlertService,
    ExemplaryProcessService,
    ProcessCatalog,
    SessionManager,
    ShipmentService
)

from tests.conftest import ADMIN_ID, OPERATOR_ID, SHIPMENT_ID


class TestSessionManager:

    @pytest.mark.asyncio
    async def test_start_and_end_session(self, store):
        sessions = SessionManager(store)

        session = await sessions.start_session(ADMIN_ID)
        assert session.active
        assert (await sessions.get_active_session(ADMIN_ID)).id == session.id

        ended = await sessions.end_session(session.id)
        assert not ended.active
        assert ended.ended_at is not None
        assert await sessions.get_active_session(ADMIN_ID) is None

    @pytest.mark.asyncio
    async def test_second_session_is_rejected_with_existing_one(self, store):
        sessions = SessionManager(store)

        with pytest.raises(SessionAlreadyActiveError) as exc_info:
            await sessions.start_session(OPERATOR_ID)

        assert exc_info.value.http_status == 400
        assert exc_info.value.details["session"]["id"] == f"session-{OPERATOR_ID}"
        assert len(store.rows("sessions")) == 1

    @pytest.mark.asyncio
    async def test_end_unknown_session(self, store):
        with pytest.raises(SessionNotFoundError):
            await SessionManager(store).end_session("missing")


class TestShipmentService:

    @pytest.mark.asyncio
    async def test_lookup_by_tracking_code_includes_items(self, store):
        shipment = await ShipmentService(store).get_by_tracking_code("TRK-0001")

        assert shipment.id == SHIPMENT_ID
        assert [item.name for item in shipment.items] == ["Bearings", "Tyres"]

    @pytest.mark.asyncio
    async def test_unknown_tracking_code(self, store):
        with pytest.raises(ShipmentNotFoundError):
            await ShipmentService(store).get_by_tracking_code("TRK-9999")


class TestProcessCatalog:

    @pytest.mark.asyncio
    async def test_get_process_with_ordered_steps(self, store, process):
        found = await ProcessCatalog(store).get_process(process.id)
        assert [step.order for step in found.steps] == [1, 2, 3]

    @pytest.mark.asyncio
    async def test_unknown_process(self, store):
        with pytest.raises(ProcessNotFoundError):
            await ProcessCatalog(store).get_process("missing")


class TestAccessControl:

    @pytest.mark.asyncio
    async def test_admin_passes(self, store):
        profile = await AccessControl(store).require_admin(ADMIN_ID)
        assert profile.is_admin

    @pytest.mark.asyncio
    @pytest.mark.parametrize("user_id", [OPERATOR_ID, "no-profile"])
    async def test_non_admin_is_rejected(self, store, user_id):
        with pytest.raises(AuthorizationError) as exc_info:
            await AccessControl(store).require_admin(user_id)
        assert exc_info.value.http_status == 403


class TestAlertService:

    @pytest.mark.asyncio
    async def test_resolve_alert(self, store, process, controller):
        execution = await controller.start(SHIPMENT_ID, OPERATOR_ID)
        report = await controller.report_error(execution.id, process.steps[0].id, OPERATOR_ID, "torn label")
        alerts = AlertService(store)

        assert [a.id for a in await alerts.list_alerts(active_only=True)] == [report.alert.id]

        resolved = await alerts.resolve_alert(report.alert.id, ADMIN_ID)
        assert resolved.resolved
        assert resolved.resolved_by == ADMIN_ID
        assert await alerts.list_alerts(active_only=True) == []
        assert len(await alerts.list_alerts()) == 1

        # Resolution does not resume the execution
        assert (await controller.get_execution(execution.id)).status.value == "error"

    @pytest.mark.asyncio
    async def test_resolve_twice(self, store, process, controller):
        execution = await controller.start(SHIPMENT_ID, OPERATOR_ID)
        report = await controller.report_error(execution.id, process.steps[0].id, OPERATOR_ID, "x")
        alerts = AlertService(store)
        await alerts.resolve_alert(report.alert.id, ADMIN_ID)

        with pytest.raises(AlertAlreadyResolvedError):
            await alerts.resolve_alert(report.alert.id, ADMIN_ID)

    @pytest.mark.asyncio
    async def test_resolve_unknown_alert(self, store):
        with pytest.raises(AlertNotFoundError):
            await AlertService(store).resolve_alert("missing", ADMIN_ID)


class TestExemplaryProcessService:

    @pytest.mark.asyncio
    async def test_create_and_fetch_example(self, store, process):
        examples = ExemplaryProcessService(store)

        created = await examples.create_example(
            process_id=process.id,
            title="Clean import",
            created_by=ADMIN_ID,
            image_url="https://example.com/import.jpg"
        )

        assert (await examples.get_example(created.id)).title == "Clean import"
        assert [e.id for e in await examples.list_examples()] == [created.id]

    @pytest.mark.asyncio
    async def test_example_requires_existing_process(self, store):
        with pytest.raises(ProcessNotFoundError):
            await ExemplaryProcessService(store).create_example("missing", "Title", ADMIN_ID)
        assert store.rows("exemplary_processes") == []

    @pytest.mark.asyncio
    async def test_unknown_example(self, store):
        with pytest.raises(ExemplaryProcessNotFoundError):
            await ExemplaryProcessService(store).get_example("missing")
