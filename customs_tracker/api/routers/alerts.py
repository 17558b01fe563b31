"""
Administrator alert endpoints.
"""

from fastapi import APIRouter, Depends

from ...models.session import Profile
from ...services import AlertService
from ..deps import get_alert_service, require_admin

router = APIRouter(prefix="/api/alerts", tags=["alerts"])


@router.get("")
async def list_alerts(
    admin: Profile = Depends(require_admin),
    alerts: AlertService = Depends(get_alert_service)
):
    return [alert.to_dict() for alert in await alerts.list_alerts()]


@router.get("/active")
async def list_active_alerts(
    admin: Profile = Depends(require_admin),
    alerts: AlertService = Depends(get_alert_service)
):
    """Unresolved alerts for the admin dashboard."""
    return [alert.to_dict() for alert in await alerts.list_alerts(active_only=True)]


@router.put("/{alert_id}/resolve")
async def resolve_alert(
    alert_id: str,
    admin: Profile = Depends(require_admin),
    alerts: AlertService = Depends(get_alert_service)
):
    alert = await alerts.resolve_alert(alert_id, admin.id)
    return alert.to_dict()
