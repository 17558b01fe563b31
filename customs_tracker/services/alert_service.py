"""
AlertService for Customs Process Tracker

Lets administrators review and resolve the alerts raised by step failures.
Resolving an alert does not resume the execution that raised it.
"""

from typing import List

from ..models.alert import Alert
from ..utils.database import DatabaseManager
from ..utils.logger import get_logger
from ..core.exceptions import AlertNotFoundError, AlertAlreadyResolvedError


class AlertService:
    """Administrative access to alerts."""

    def __init__(self, database_manager: DatabaseManager):
        self.db = database_manager
        self.logger = get_logger(__name__)

    async def list_alerts(self, active_only: bool = False) -> List[Alert]:
        """
        Get alerts, newest first.

        Args:
            active_only: Only return unresolved alerts
        """
        return await self.db.get_alerts(unresolved_only=active_only)

    async def resolve_alert(self, alert_id: str, user_id: str) -> Alert:
        """Mark an alert as resolved by an administrator."""
        async with self.db.transaction() as conn:
            alert = await self.db.get_alert(alert_id, conn=conn)
            if not alert:
                raise AlertNotFoundError(alert_id)
            if alert.resolved:
                raise AlertAlreadyResolvedError(alert_id)

            alert.resolve(user_id)
            await self.db.update_alert(alert, conn=conn)

        self.logger.info("Alert resolved", extra={
            "alert_id": alert.id,
            "execution_id": alert.process_execution_id,
            "resolved_by": user_id
        })
        return alert
