"""
Request bodies accepted by the HTTP API.
"""

from typing import Optional

from pydantic import BaseModel, Field


class StartProcessRequest(BaseModel):
    shipment_id: str = Field(min_length=1)


class CompleteStepRequest(BaseModel):
    step_id: str = Field(min_length=1)


class ReportErrorRequest(BaseModel):
    step_id: str = Field(min_length=1)
    error_description: str = Field(min_length=1, max_length=2000)


class ExemplaryProcessCreateRequest(BaseModel):
    process_id: str = Field(min_length=1)
    title: str = Field(min_length=1)
    description: str = ""
    image_url: str = ""
    video_url: Optional[str] = None


class AssistantQueryRequest(BaseModel):
    query: str = Field(min_length=1, max_length=1000)
    context: Optional[str] = None
