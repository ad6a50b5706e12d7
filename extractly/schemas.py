from typing import Any, Dict, List

from pydantic import BaseModel, Field

from extractly.records.models import ExtractionRecordModel


class IngestRequest(BaseModel):
    url: str = Field(..., description="URL of the captured page")
    html: str = Field(..., description="Raw HTML content")
    instruction: str = Field(..., description="Natural language extraction instruction")


class IngestResponse(BaseModel):
    url: str
    instruction: str
    parsed_fields: List[str]
    extracted: Dict[str, Any]
    confidence: Dict[str, float]
    record_id: str


class Pagination(BaseModel):
    page: int
    limit: int
    total: int
    pages: int


class RecordListResponse(BaseModel):
    records: List[ExtractionRecordModel]
    pagination: Pagination


class HealthResponse(BaseModel):
    status: str
    timestamp: str
    service: str
