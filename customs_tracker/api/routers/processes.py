"""
Process catalog and process execution endpoints.
"""

from fastapi import APIRouter, Depends

from ...core.controller import ProcessExecutionController
from ...services import ProcessCatalog
from ..auth import AuthenticatedUser
from ..deps import get_current_user, get_controller, get_process_catalog
from ..schemas import StartProcessRequest, CompleteStepRequest, ReportErrorRequest

router = APIRouter(prefix="/api/processes", tags=["processes"])


@router.get("")
async def list_processes(
    user: AuthenticatedUser = Depends(get_current_user),
    catalog: ProcessCatalog = Depends(get_process_catalog)
):
    """List all process templates."""
    processes = await catalog.list_processes()
    return [process.to_dict(include_steps=False) for process in processes]


@router.post("/start", status_code=201)
async def start_process(
    body: StartProcessRequest,
    user: AuthenticatedUser = Depends(get_current_user),
    controller: ProcessExecutionController = Depends(get_controller)
):
    """Start the applicable process for a scanned shipment."""
    execution = await controller.start(body.shipment_id, user.id)
    return execution.to_dict()


@router.get("/execution/{execution_id}")
async def get_execution(
    execution_id: str,
    user: AuthenticatedUser = Depends(get_current_user),
    controller: ProcessExecutionController = Depends(get_controller)
):
    execution = await controller.get_execution(execution_id)
    return execution.to_dict()


@router.get("/execution/{execution_id}/steps")
async def get_step_executions(
    execution_id: str,
    user: AuthenticatedUser = Depends(get_current_user),
    controller: ProcessExecutionController = Depends(get_controller)
):
    """Ledger of an execution ordered by step order."""
    ledger = await controller.get_step_executions(execution_id)
    return [step_execution.to_dict() for step_execution in ledger]


@router.post("/execution/{execution_id}/complete-step")
async def complete_step(
    execution_id: str,
    body: CompleteStepRequest,
    user: AuthenticatedUser = Depends(get_current_user),
    controller: ProcessExecutionController = Depends(get_controller)
):
    result = await controller.complete_step(execution_id, body.step_id, user.id)
    return result.to_dict()


@router.post("/execution/{execution_id}/report-error")
async def report_error(
    execution_id: str,
    body: ReportErrorRequest,
    user: AuthenticatedUser = Depends(get_current_user),
    controller: ProcessExecutionController = Depends(get_controller)
):
    result = await controller.report_error(
        execution_id, body.step_id, user.id, body.error_description
    )
    return result.to_dict()


@router.get("/{process_id}")
async def get_process(
    process_id: str,
    user: AuthenticatedUser = Depends(get_current_user),
    catalog: ProcessCatalog = Depends(get_process_catalog)
):
    """Get a process with its ordered steps."""
    process = await catalog.get_process(process_id)
    return process.to_dict()
