"""
Shipment models for Customs Process Tracker

Shipments are looked up by the tracking code operators scan. Their status
mirrors the progress of the process execution running against them.
"""

from enum import Enum
from datetime import datetime, date
from typing import Optional, Dict, Any, List
from dataclasses import dataclass, field

from .process import utcnow, parse_datetime, format_datetime


class ShipmentStatus(Enum):
    """Shipment status enumeration."""
    PENDING = "pending"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"
    ERROR = "error"


class ShipmentType(Enum):
    IMPORT = "import"
    EXPORT = "export"


@dataclass
class ShipmentItem:
    """Line item carried by a shipment."""

    id: str
    shipment_id: str
    name: str
    quantity: float = 0
    unit: str = ""
    weight: float = 0.0
    description: str = ""

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "shipment_id": self.shipment_id,
            "name": self.name,
            "quantity": self.quantity,
            "unit": self.unit,
            "weight": self.weight,
            "description": self.description
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ShipmentItem":
        return cls(
            id=str(data["id"]),
            shipment_id=str(data["shipment_id"]),
            name=data["name"],
            quantity=float(data.get("quantity") or 0),
            unit=data.get("unit") or "",
            weight=float(data.get("weight") or 0),
            description=data.get("description") or ""
        )


@dataclass
class Shipment:
    """Customs shipment identified by its tracking code."""

    id: str
    tracking_code: str
    type: ShipmentType
    status: ShipmentStatus = ShipmentStatus.PENDING
    client_name: str = ""
    destination: str = ""
    arrival_date: Optional[date] = None
    items: List[ShipmentItem] = field(default_factory=list)
    created_at: datetime = field(default_factory=utcnow)

    def to_dict(self, include_items: bool = True) -> Dict[str, Any]:
        """Convert shipment to dictionary."""
        data = {
            "id": self.id,
            "tracking_code": self.tracking_code,
            "status": self.status.value,
            "type": self.type.value,
            "client_name": self.client_name,
            "destination": self.destination,
            "arrival_date": self.arrival_date.isoformat() if self.arrival_date else None,
            "created_at": format_datetime(self.created_at)
        }
        if include_items:
            data["items"] = [item.to_dict() for item in self.items]
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Shipment":
        """Create shipment from a database row or JSON dictionary."""
        arrival_date = data.get("arrival_date")
        if isinstance(arrival_date, str):
            arrival_date = date.fromisoformat(arrival_date[:10])
        elif isinstance(arrival_date, datetime):
            arrival_date = arrival_date.date()

        items = [
            item if isinstance(item, ShipmentItem) else ShipmentItem.from_dict(item)
            for item in data.get("items") or []
        ]

        return cls(
            id=str(data["id"]),
            tracking_code=data["tracking_code"],
            type=ShipmentType(data["type"]),
            status=ShipmentStatus(data.get("status", "pending")),
            client_name=data.get("client_name") or "",
            destination=data.get("destination") or "",
            arrival_date=arrival_date,
            items=items,
            created_at=parse_datetime(data.get("created_at")) or utcnow()
        )
