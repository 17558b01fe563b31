"""
Operator assistant endpoint.
"""

from fastapi import APIRouter, Depends

from ...services import AssistantService
from ..auth import AuthenticatedUser
from ..deps import get_current_user, get_assistant_service
from ..schemas import AssistantQueryRequest

router = APIRouter(prefix="/api/assistant", tags=["assistant"])


@router.post("/query")
async def query_assistant(
    body: AssistantQueryRequest,
    user: AuthenticatedUser = Depends(get_current_user),
    assistant: AssistantService = Depends(get_assistant_service)
):
    answer = await assistant.answer(user.id, body.query, body.context)
    return answer.to_dict()
