"""
Shipment lookup endpoints.
"""

from fastapi import APIRouter, Depends

from ...models.session import Profile
from ...services import ShipmentService
from ..auth import AuthenticatedUser
from ..deps import get_current_user, get_shipment_service, require_admin

router = APIRouter(prefix="/api/shipments", tags=["shipments"])


@router.get("")
async def list_shipments(
    admin: Profile = Depends(require_admin),
    shipments: ShipmentService = Depends(get_shipment_service)
):
    """All shipments, newest first (admin only)."""
    return [shipment.to_dict(include_items=False) for shipment in await shipments.list_shipments()]


@router.get("/{tracking_code}")
async def get_shipment(
    tracking_code: str,
    user: AuthenticatedUser = Depends(get_current_user),
    shipments: ShipmentService = Depends(get_shipment_service)
):
    """Shipment and its items for a scanned tracking code."""
    shipment = await shipments.get_by_tracking_code(tracking_code)
    return shipment.to_dict()
