from datetime import datetime
from enum import Enum
from typing import Any, Dict, List
from uuid import uuid4

from pydantic import BaseModel, ConfigDict, Field


class ProcessingStatus(str, Enum):
    PENDING = "pending"
    PROCESSING = "processing"
    COMPLETED = "completed"
    FAILED = "failed"

    @property
    def is_terminal(self) -> bool:
        return self in (ProcessingStatus.COMPLETED, ProcessingStatus.FAILED)

    def can_transition_to(self, target: "ProcessingStatus") -> bool:
        return target in _TRANSITIONS[self]


_TRANSITIONS = {
    ProcessingStatus.PENDING: {ProcessingStatus.PROCESSING},
    ProcessingStatus.PROCESSING: {ProcessingStatus.COMPLETED, ProcessingStatus.FAILED},
    ProcessingStatus.COMPLETED: set(),
    ProcessingStatus.FAILED: set(),
}


class ExtractionRecordModel(BaseModel):
    model_config = ConfigDict(from_attributes=True, populate_by_name=True)

    id: str = Field(..., description="Unique identifier of the extraction record")
    url: str = Field(..., description="URL of the captured page")
    instruction: str = Field(..., description="Natural language extraction request")
    html_content: str = Field(..., alias="htmlContent", description="Raw captured page source")
    processing_status: ProcessingStatus = Field(
        ..., alias="processingStatus", description="Lifecycle status of the record"
    )
    parsed_fields: List[str] | None = Field(
        None, alias="parsedFields", description="Field names returned by the model"
    )
    extracted_data: Dict[str, Any] | None = Field(
        None, alias="extractedData", description="Field name to extracted value"
    )
    confidence_scores: Dict[str, float] | None = Field(
        None, alias="confidenceScores", description="Field name to confidence in [0, 1]"
    )
    error_message: str | None = Field(
        None, alias="errorMessage", description="Error message if the extraction failed"
    )
    created_at: datetime = Field(
        default_factory=datetime.now, alias="createdAt", description="Creation timestamp"
    )
    updated_at: datetime = Field(
        default_factory=datetime.now, alias="updatedAt", description="Last update timestamp"
    )


class ExtractionRecordCreateModel(BaseModel):
    id: str = Field(
        default_factory=lambda: str(uuid4()),
        description="Unique identifier of the extraction record",
    )
    url: str
    instruction: str
    html_content: str
    processing_status: ProcessingStatus = ProcessingStatus.PENDING


class ExtractionRecordUpdateModel(BaseModel):
    processing_status: ProcessingStatus | None = None
    parsed_fields: List[str] | None = None
    extracted_data: Dict[str, Any] | None = None
    confidence_scores: Dict[str, float] | None = None
    error_message: str | None = None


class RecordFilters(BaseModel):
    search: str | None = None
    status: str | None = None
    sort_by: str = "createdAt"
    sort_order: str = "desc"
