"""
Reference content models: exemplary process examples and assistant logs.
"""

from datetime import datetime
from typing import Optional, Dict, Any
from dataclasses import dataclass, field

from .process import utcnow, parse_datetime, format_datetime


@dataclass
class ExemplaryProcess:
    """Curated example showing how a process should be carried out."""

    id: str
    process_id: str
    title: str
    created_by: str
    description: str = ""
    image_url: str = ""
    video_url: Optional[str] = None
    created_at: datetime = field(default_factory=utcnow)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "process_id": self.process_id,
            "title": self.title,
            "description": self.description,
            "image_url": self.image_url,
            "video_url": self.video_url,
            "created_at": format_datetime(self.created_at),
            "created_by": self.created_by
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ExemplaryProcess":
        return cls(
            id=str(data["id"]),
            process_id=str(data["process_id"]),
            title=data["title"],
            created_by=str(data["created_by"]),
            description=data.get("description") or "",
            image_url=data.get("image_url") or "",
            video_url=data.get("video_url"),
            created_at=parse_datetime(data.get("created_at")) or utcnow()
        )


@dataclass
class AssistantAnswer:
    """Answer produced for an operator's question."""

    intent: str
    confidence: float
    answer: Optional[str] = None
    process_id: Optional[str] = None
    step_id: Optional[str] = None
    image_url: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        data = {"intent": self.intent, "confidence": self.confidence}
        # Optional keys are omitted rather than sent as null
        for key, value in (
            ("answer", self.answer),
            ("processId", self.process_id),
            ("stepId", self.step_id),
            ("imageUrl", self.image_url),
        ):
            if value is not None:
                data[key] = value
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "AssistantAnswer":
        return cls(
            intent=data["intent"],
            confidence=float(data.get("confidence", 0.0)),
            answer=data.get("answer"),
            process_id=data.get("processId") or data.get("process_id"),
            step_id=data.get("stepId") or data.get("step_id"),
            image_url=data.get("imageUrl") or data.get("image_url")
        )


@dataclass
class AssistantLog:
    """Record of a query sent to the assistant, kept for analytics."""

    id: str
    user_id: str
    query: str
    detected_intent: str
    confidence: float
    created_at: datetime = field(default_factory=utcnow)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "user_id": self.user_id,
            "query": self.query,
            "detected_intent": self.detected_intent,
            "confidence": self.confidence,
            "created_at": format_datetime(self.created_at)
        }
