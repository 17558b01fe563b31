"""
Tests for the execution state machine and model serialization.
"""

from datetime import date

import pytest

from customs_tracker.core.exceptions import InvalidStatusTransitionError
from customs_tracker.models.alert import Alert, format_step_error_message
from customs_tracker.models.exemplary import AssistantAnswer
from customs_tracker.models.execution import (
    ProcessExecution,
    ProcessStepExecution,
    ExecutionStatus,
    StepStatus,
    can_transition_to,
    get_valid_transitions,
    transition
)
from customs_tracker.models.process import Process, ProcessType
from customs_tracker.models.shipment import Shipment, ShipmentStatus, ShipmentType


def make_execution(**kwargs) -> ProcessExecution:
    return ProcessExecution(
        id="exec-1",
        process_id="process-1",
        shipment_id="shipment-1",
        user_id="operator-1",
        session_id="session-1",
        **kwargs
    )


class TestTransitions:

    def test_in_progress_allows_all_moves(self):
        assert can_transition_to(ExecutionStatus.IN_PROGRESS, ExecutionStatus.IN_PROGRESS)
        assert can_transition_to(ExecutionStatus.IN_PROGRESS, ExecutionStatus.COMPLETED)
        assert can_transition_to(ExecutionStatus.IN_PROGRESS, ExecutionStatus.ERROR)

    @pytest.mark.parametrize("terminal", [ExecutionStatus.COMPLETED, ExecutionStatus.ERROR])
    def test_terminal_statuses_have_no_exits(self, terminal):
        assert get_valid_transitions(terminal) == []
        for target in ExecutionStatus:
            assert not can_transition_to(terminal, target)

    def test_step_transitions(self):
        assert can_transition_to(StepStatus.PENDING, StepStatus.COMPLETED)
        assert can_transition_to(StepStatus.PENDING, StepStatus.ERROR)
        assert can_transition_to(StepStatus.COMPLETED, StepStatus.ERROR)
        assert not can_transition_to(StepStatus.COMPLETED, StepStatus.PENDING)
        assert not can_transition_to(StepStatus.ERROR, StepStatus.COMPLETED)

    def test_get_valid_transitions_returns_copy(self):
        transitions = get_valid_transitions(ExecutionStatus.IN_PROGRESS)
        transitions.clear()
        assert get_valid_transitions(ExecutionStatus.IN_PROGRESS)

    def test_transition_raises_with_details(self):
        with pytest.raises(InvalidStatusTransitionError) as exc_info:
            transition("process_execution", "exec-1", ExecutionStatus.ERROR, ExecutionStatus.IN_PROGRESS)

        error = exc_info.value
        assert error.http_status == 409
        assert error.details == {
            "entity": "process_execution",
            "entity_id": "exec-1",
            "current_status": "error",
            "target_status": "in_progress"
        }


class TestProcessExecution:

    def test_advance_moves_pointer_until_last_step(self):
        execution = make_execution()

        assert execution.advance(3) is False
        assert execution.current_step == 2
        assert execution.advance(3) is False
        assert execution.current_step == 3

        assert execution.advance(3) is True
        assert execution.status == ExecutionStatus.COMPLETED
        assert execution.current_step == 3
        assert execution.completed_at is not None
        assert execution.get_duration() >= 0

    def test_single_step_process_completes_immediately(self):
        execution = make_execution()
        assert execution.advance(1) is True
        assert execution.current_step == 1

    def test_advance_on_completed_execution_is_rejected(self):
        execution = make_execution(status=ExecutionStatus.COMPLETED)
        with pytest.raises(InvalidStatusTransitionError):
            execution.advance(3)

    def test_mark_error_keeps_current_step(self):
        execution = make_execution(current_step=2)
        execution.mark_error()
        assert execution.status == ExecutionStatus.ERROR
        assert execution.current_step == 2

    def test_from_dict_round_trips_status(self):
        execution = make_execution(current_step=2)
        restored = ProcessExecution.from_dict(execution.to_dict())
        assert restored == execution


class TestLedgerRow:

    def test_complete_then_fail(self):
        row = ProcessStepExecution(id="se-1", process_execution_id="exec-1", step_id="step-1")
        row.complete()
        assert row.status == StepStatus.COMPLETED
        assert row.completed_at is not None

        row.fail("seal broken")
        assert row.status == StepStatus.ERROR
        assert row.error_description == "seal broken"

    def test_failed_row_cannot_complete(self):
        row = ProcessStepExecution(id="se-1", process_execution_id="exec-1", step_id="step-1")
        row.fail("barcode unreadable")
        with pytest.raises(InvalidStatusTransitionError):
            row.complete()


def test_process_from_dict_sorts_steps():
    process = Process.from_dict({
        "id": "p1",
        "name": "Import",
        "type": "import",
        "steps": [
            {"id": "s2", "process_id": "p1", "order": 2, "title": "Second"},
            {"id": "s1", "process_id": "p1", "order": 1, "title": "First"},
        ]
    })

    assert [step.id for step in process.steps] == ["s1", "s2"]
    assert process.total_steps == 2
    assert process.steps[1].title == "Second"
    assert process.applies_to("import")
    assert not process.applies_to("export")
    assert "steps" not in process.to_dict(include_steps=False)


def test_both_process_applies_to_every_shipment_type():
    process = Process(id="p1", name="Generic", type=ProcessType.BOTH)
    assert process.applies_to("import")
    assert process.applies_to("export")


def test_shipment_from_dict_parses_arrival_date():
    shipment = Shipment.from_dict({
        "id": "s1",
        "tracking_code": "TRK-1",
        "type": "export",
        "status": "in_progress",
        "arrival_date": "2024-05-02T00:00:00Z"
    })
    assert shipment.type == ShipmentType.EXPORT
    assert shipment.status == ShipmentStatus.IN_PROGRESS
    assert shipment.arrival_date == date(2024, 5, 2)
    assert shipment.to_dict()["arrival_date"] == "2024-05-02"


def test_alert_message_and_resolution():
    message = format_step_error_message("Physical inspection", "barcode unreadable")
    assert message == 'Error in step "Physical inspection": barcode unreadable'

    alert = Alert(id="a1", process_execution_id="exec-1", user_id="operator-1", message=message)
    alert.resolve("admin-1")
    data = alert.to_dict()
    assert data["resolved"] is True
    assert data["resolved_by"] == "admin-1"
    assert data["type"] == "error"


def test_assistant_answer_omits_missing_fields():
    answer = AssistantAnswer(intent="scan_help", confidence=0.95, answer="Clean the lens")
    assert answer.to_dict() == {"intent": "scan_help", "confidence": 0.95, "answer": "Clean the lens"}

    parsed = AssistantAnswer.from_dict({"intent": "x", "confidence": 0.5, "processId": "p1"})
    assert parsed.process_id == "p1"
    assert "processId" in parsed.to_dict()
