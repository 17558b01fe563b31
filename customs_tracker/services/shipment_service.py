"""
ShipmentService for Customs Process Tracker

Resolves scanned tracking codes to shipments and lists shipments for
administrators.
"""

from typing import List

from ..models.shipment import Shipment
from ..utils.database import DatabaseManager
from ..utils.logger import get_logger
from ..core.exceptions import ShipmentNotFoundError


class ShipmentService:
    """Read access to shipments and their items."""

    def __init__(self, database_manager: DatabaseManager):
        self.db = database_manager
        self.logger = get_logger(__name__)

    async def get_by_tracking_code(self, tracking_code: str) -> Shipment:
        """Get a shipment and its items from a scanned tracking code."""
        shipment = await self.db.get_shipment_by_tracking_code(tracking_code)
        if not shipment:
            self.logger.info("Unknown tracking code scanned", extra={"tracking_code": tracking_code})
            raise ShipmentNotFoundError(tracking_code)

        shipment.items = await self.db.get_shipment_items(shipment.id)
        return shipment

    async def list_shipments(self) -> List[Shipment]:
        """Get all shipments, newest first."""
        return await self.db.get_all_shipments()
