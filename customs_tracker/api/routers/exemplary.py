"""
Exemplary process endpoints.
"""

from fastapi import APIRouter, Depends

from ...models.session import Profile
from ...services import ExemplaryProcessService
from ..auth import AuthenticatedUser
from ..deps import get_current_user, get_exemplary_service, require_admin
from ..schemas import ExemplaryProcessCreateRequest

router = APIRouter(prefix="/api/exemplary-processes", tags=["exemplary-processes"])


@router.get("")
async def list_examples(
    user: AuthenticatedUser = Depends(get_current_user),
    examples: ExemplaryProcessService = Depends(get_exemplary_service)
):
    return [example.to_dict() for example in await examples.list_examples()]


@router.get("/{exemplary_id}")
async def get_example(
    exemplary_id: str,
    user: AuthenticatedUser = Depends(get_current_user),
    examples: ExemplaryProcessService = Depends(get_exemplary_service)
):
    example = await examples.get_example(exemplary_id)
    return example.to_dict()


@router.post("", status_code=201)
async def create_example(
    body: ExemplaryProcessCreateRequest,
    admin: Profile = Depends(require_admin),
    examples: ExemplaryProcessService = Depends(get_exemplary_service)
):
    """Create an exemplary process (admin only)."""
    example = await examples.create_example(
        process_id=body.process_id,
        title=body.title,
        created_by=admin.id,
        description=body.description,
        image_url=body.image_url,
        video_url=body.video_url
    )
    return example.to_dict()
