from __future__ import annotations

import math
from typing import Any, Optional

from fastapi import APIRouter, Body, Depends, Query
from sqlalchemy.exc import SQLAlchemyError

from extractly.config import Settings
from extractly.errors import ExtractionError, InvalidStatusTransition, create_error
from extractly.logger import get_logger
from extractly.records.models import ExtractionRecordModel, RecordFilters
from extractly.records.table import ExtractionTable
from extractly.routes.deps import get_extractor, get_settings, get_table
from extractly.schemas import IngestRequest, IngestResponse, Pagination, RecordListResponse
from extractly.service.extractor import ExtractionService
from extractly.validation import lenient_int, validate_ingest_request

logger = get_logger(__name__)

router = APIRouter(prefix="/api")

MAX_PAGE_SIZE = 100


@router.post("/ingest", response_model=IngestResponse)
def ingest(
    payload: Any = Body(None),
    settings: Settings = Depends(get_settings),
    table: ExtractionTable = Depends(get_table),
    extractor: ExtractionService = Depends(get_extractor),
):
    if not isinstance(payload, dict):
        raise create_error("Validation failed: Request body must be a JSON object", 400)

    validation = validate_ingest_request(payload, max_html_size=settings.max_html_size)
    if not validation.is_valid:
        raise create_error(f"Validation failed: {', '.join(validation.errors)}", 400)
    req = IngestRequest(url=payload["url"], html=payload["html"], instruction=payload["instruction"])

    logger.info("Processing extraction request for: %s", req.url)
    logger.info("Instruction: %s", req.instruction)

    record = table.create_record(url=req.url, instruction=req.instruction, html_content=req.html)
    logger.info("Created record with ID: %s", record.id)

    try:
        table.mark_processing(record.id)
        result = extractor.extract_data(req.html, req.instruction)
        table.mark_completed(record.id, result)
    except (ExtractionError, SQLAlchemyError, InvalidStatusTransition) as e:
        logger.error("Processing failed for record %s: %s", record.id, e)
        try:
            table.mark_failed(record.id, str(e) or "Unknown error")
        except (SQLAlchemyError, InvalidStatusTransition) as update_error:
            # No reconciliation: the record stays in its last persisted status.
            logger.error("Could not mark record %s as failed: %s", record.id, update_error)
        raise create_error("Failed to process extraction request", 500) from e

    logger.info("Successfully processed extraction for record: %s", record.id)
    return IngestResponse(
        url=req.url,
        instruction=req.instruction,
        parsed_fields=result["parsed_fields"],
        extracted=result["extracted"],
        confidence=result["confidence"],
        record_id=record.id,
    )


@router.get("/records/{record_id}", response_model=ExtractionRecordModel)
def get_record(record_id: str, table: ExtractionTable = Depends(get_table)):
    record = table.get_record(record_id)
    if not record:
        raise create_error("Record not found", 404)
    return record


@router.get("/records", response_model=RecordListResponse)
def list_records(
    page: Optional[str] = Query(None),
    limit: Optional[str] = Query(None),
    search: Optional[str] = Query(None),
    status: Optional[str] = Query(None),
    sort_by: Optional[str] = Query(None, alias="sortBy"),
    sort_order: Optional[str] = Query(None, alias="sortOrder"),
    table: ExtractionTable = Depends(get_table),
):
    page_num = lenient_int(page, 1)
    page_size = min(lenient_int(limit, 10), MAX_PAGE_SIZE)
    skip = (page_num - 1) * page_size

    filters = RecordFilters(
        search=search or None,
        status=status or None,
        sort_by=sort_by or "createdAt",
        sort_order=sort_order or "desc",
    )
    records, total = table.list_records(skip=skip, limit=page_size, filters=filters)
    return RecordListResponse(
        records=records,
        pagination=Pagination(
            page=page_num,
            limit=page_size,
            total=total,
            pages=math.ceil(total / page_size),
        ),
    )
