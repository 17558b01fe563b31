"""
Process execution controller for Customs Process Tracker

Drives one shipment through the ordered steps of a process: starting the
execution and its step ledger, advancing the current step, and stopping the
execution with an alert when an operator reports a failure.
"""

from typing import Iterable, List
from uuid import uuid4

from ..models.alert import Alert, AlertType, format_step_error_message
from ..models.execution import (
    ProcessExecution,
    ProcessStepExecution,
    ExecutionStatus,
    StepCompletionResult,
    ErrorReportResult,
    transition
)
from ..models.process import Process
from ..models.shipment import ShipmentStatus
from ..utils.database import DatabaseManager
from ..utils.logger import get_logger, LoggerContext
from .exceptions import (
    TrackerError,
    NoActiveSessionError,
    ShipmentNotFoundError,
    NoApplicableProcessError,
    ExecutionNotFoundError,
    StepExecutionNotFoundError,
    StepOutOfOrderError
)


def new_id() -> str:
    return str(uuid4())


def rank_processes(candidates: Iterable[Process], shipment_type: str) -> List[Process]:
    """
    Order the processes usable for a shipment type, best match first.

    An exact type match beats ``both``; ties go to the oldest process, then
    the lowest id.
    """
    return sorted(
        (p for p in candidates if p.applies_to(shipment_type)),
        key=lambda p: (p.type.value != shipment_type, p.created_at, p.id)
    )


class ProcessExecutionController:
    """
    Stateless coordinator for process executions.

    Every operation runs inside a single database transaction, so a failure
    part-way through leaves neither an orphaned execution nor a partial
    ledger. The execution row is locked while a step is completed or failed,
    which serializes concurrent calls against the same execution.
    """

    def __init__(self, database_manager: DatabaseManager):
        """
        Initialize the controller.

        Args:
            database_manager: Store used for all reads and writes
        """
        self.db = database_manager
        self.logger = get_logger(__name__)

    async def start(self, shipment_id: str, user_id: str) -> ProcessExecution:
        """
        Start the applicable process for a shipment.

        Preconditions are checked in order: active session, shipment
        existence, applicable process.

        Args:
            shipment_id: Shipment to run the process against
            user_id: Authenticated operator

        Returns:
            The created execution
        """
        with LoggerContext(component="execution_controller", user_id=user_id, shipment_id=shipment_id):
            try:
                async with self.db.transaction() as conn:
                    session = await self.db.get_active_session(user_id, conn=conn)
                    if not session:
                        raise NoActiveSessionError(user_id)

                    shipment = await self.db.get_shipment(shipment_id, conn=conn)
                    if not shipment:
                        raise ShipmentNotFoundError(shipment_id)

                    candidates = rank_processes(
                        await self.db.find_applicable_processes(shipment.type.value, conn=conn),
                        shipment.type.value
                    )
                    if not candidates:
                        raise NoApplicableProcessError(shipment.type.value)

                    process = candidates[0]
                    if len(candidates) > 1:
                        self.logger.warning("Several processes match shipment type", extra={
                            "shipment_type": shipment.type.value,
                            "selected_process_id": process.id,
                            "candidate_process_ids": [p.id for p in candidates]
                        })

                    steps = await self.db.get_process_steps(process.id, conn=conn)
                    if not steps:
                        raise NoApplicableProcessError(shipment.type.value)

                    execution = ProcessExecution(
                        id=new_id(),
                        process_id=process.id,
                        shipment_id=shipment.id,
                        user_id=user_id,
                        session_id=session.id
                    )
                    await self.db.insert_execution(execution, conn=conn)

                    ledger = [
                        ProcessStepExecution(
                            id=new_id(),
                            process_execution_id=execution.id,
                            step_id=step.id
                        )
                        for step in steps
                    ]
                    await self.db.insert_step_executions(ledger, conn=conn)

                    await self.db.update_shipment_status(shipment.id, ShipmentStatus.IN_PROGRESS, conn=conn)

            except TrackerError as e:
                self.logger.error("Failed to start process", extra={
                    "error_code": e.error_code,
                    "error": e.message
                })
                raise

            self.logger.info("Process execution started", extra={
                "execution_id": execution.id,
                "process_id": process.id,
                "total_steps": len(steps)
            })
            return execution

    async def complete_step(self, execution_id: str, step_id: str, user_id: str) -> StepCompletionResult:
        """
        Complete the current step of an execution.

        Only the step whose order equals ``current_step`` is accepted. When it
        is the last step the execution and its shipment are marked completed,
        otherwise the pointer moves to the next step.

        Args:
            execution_id: Execution to advance
            step_id: Process step being completed
            user_id: Authenticated operator

        Returns:
            StepCompletionResult with ``completed`` set when the process finished
        """
        with LoggerContext(component="execution_controller", user_id=user_id,
                           execution_id=execution_id, step_id=step_id):
            try:
                async with self.db.transaction() as conn:
                    execution = await self.db.get_execution(execution_id, conn=conn, for_update=True)
                    if not execution:
                        raise ExecutionNotFoundError(execution_id)

                    # Terminal executions reject any further step activity
                    transition("process_execution", execution.id, execution.status,
                               ExecutionStatus.IN_PROGRESS)

                    process = await self.db.get_process(execution.process_id, conn=conn)
                    step = process.get_step(step_id) if process else None
                    step_execution = await self.db.get_step_execution(execution_id, step_id, conn=conn)
                    if step is None or step_execution is None:
                        raise StepExecutionNotFoundError(execution_id, step_id)

                    if step.order != execution.current_step:
                        raise StepOutOfOrderError(execution_id, step_id, execution.current_step, step.order)

                    step_execution.complete()
                    await self.db.update_step_execution(step_execution, conn=conn)

                    completed = execution.advance(process.total_steps)
                    await self.db.update_execution(execution, conn=conn)

                    if completed:
                        await self.db.update_shipment_status(
                            execution.shipment_id, ShipmentStatus.COMPLETED, conn=conn
                        )

            except TrackerError as e:
                self.logger.error("Failed to complete step", extra={
                    "error_code": e.error_code,
                    "error": e.message
                })
                raise

            self.logger.info("Step completed", extra={
                "step_order": step.order,
                "current_step": execution.current_step,
                "process_completed": completed
            })
            return StepCompletionResult(execution=execution, completed=completed)

    async def report_error(
        self,
        execution_id: str,
        step_id: str,
        user_id: str,
        error_description: str
    ) -> ErrorReportResult:
        """
        Record a step failure and raise an alert for administrators.

        The execution moves to ``error`` without advancing current_step.

        Args:
            execution_id: Execution the failure belongs to
            step_id: Process step that failed
            user_id: Operator reporting the failure
            error_description: Operator's description of the problem

        Returns:
            ErrorReportResult holding the created alert
        """
        with LoggerContext(component="execution_controller", user_id=user_id,
                           execution_id=execution_id, step_id=step_id):
            try:
                async with self.db.transaction() as conn:
                    execution = await self.db.get_execution(execution_id, conn=conn, for_update=True)
                    if not execution:
                        raise ExecutionNotFoundError(execution_id)

                    transition("process_execution", execution.id, execution.status,
                               ExecutionStatus.ERROR)

                    step_execution = await self.db.get_step_execution(execution_id, step_id, conn=conn)
                    step = await self.db.get_process_step(step_id, conn=conn)
                    if step_execution is None or step is None:
                        raise StepExecutionNotFoundError(execution_id, step_id)

                    step_execution.fail(error_description)
                    await self.db.update_step_execution(step_execution, conn=conn)

                    execution.mark_error()
                    await self.db.update_execution(execution, conn=conn)

                    alert = Alert(
                        id=new_id(),
                        process_execution_id=execution.id,
                        step_execution_id=step_execution.id,
                        user_id=user_id,
                        type=AlertType.ERROR,
                        message=format_step_error_message(step.title, error_description)
                    )
                    await self.db.insert_alert(alert, conn=conn)

            except TrackerError as e:
                self.logger.error("Failed to report step error", extra={
                    "error_code": e.error_code,
                    "error": e.message
                })
                raise

            self.logger.warning("Step error reported", extra={
                "alert_id": alert.id,
                "step_title": step.title
            })
            return ErrorReportResult(execution=execution, alert=alert)

    async def get_execution(self, execution_id: str) -> ProcessExecution:
        """Get an execution by ID."""
        execution = await self.db.get_execution(execution_id)
        if not execution:
            raise ExecutionNotFoundError(execution_id)
        return execution

    async def get_step_executions(self, execution_id: str) -> List[ProcessStepExecution]:
        """Get the ledger of an execution ordered by step order."""
        await self.get_execution(execution_id)
        return await self.db.get_step_executions(execution_id)
