from __future__ import annotations

from typing import Any, Dict, List, Tuple

from sqlalchemy import func, or_
from sqlalchemy.exc import SQLAlchemyError

from extractly.db.sql import Database
from extractly.errors import InvalidStatusTransition
from extractly.logger import get_logger
from extractly.records.models import (
    ExtractionRecordCreateModel,
    ExtractionRecordModel,
    ExtractionRecordUpdateModel,
    ProcessingStatus,
    RecordFilters,
)
from extractly.records.schema import ExtractionRecord

logger = get_logger(__name__)

SORTABLE_COLUMNS = {
    "createdAt": ExtractionRecord.created_at,
    "updatedAt": ExtractionRecord.updated_at,
    "url": ExtractionRecord.url,
    "processingStatus": ExtractionRecord.processing_status,
}


class ExtractionTable:
    def __init__(self, database: Database):
        self.database = database

    def create_record(self, url: str, instruction: str, html_content: str) -> ExtractionRecordModel:
        with self.database.session() as db:
            created_record = ExtractionRecordCreateModel(
                url=url,
                instruction=instruction,
                html_content=html_content,
            )
            db_record = ExtractionRecord(**created_record.model_dump(mode="json"))
            db.add(db_record)
            db.commit()
            db.refresh(db_record)
            return ExtractionRecordModel.model_validate(db_record)

    def get_record(self, record_id: str) -> ExtractionRecordModel | None:
        with self.database.session() as db:
            record = db.get(ExtractionRecord, record_id)
            return ExtractionRecordModel.model_validate(record) if record else None

    def update_record(
        self, record_id: str, updated_record: ExtractionRecordUpdateModel
    ) -> ExtractionRecordModel | None:
        with self.database.session() as db:
            record = db.get(ExtractionRecord, record_id)
            if not record:
                return None
            current = ProcessingStatus(record.processing_status)
            target = updated_record.processing_status
            # completed and failed records are final
            if current.is_terminal:
                raise InvalidStatusTransition(current.value, (target or current).value)
            if target is not None and target != current and not current.can_transition_to(target):
                raise InvalidStatusTransition(current.value, target.value)
            for field, value in updated_record.model_dump(exclude_unset=True, mode="json").items():
                setattr(record, field, value)
            db.commit()
            db.refresh(record)
            return ExtractionRecordModel.model_validate(record)

    def mark_processing(self, record_id: str) -> ExtractionRecordModel | None:
        return self.update_record(
            record_id, ExtractionRecordUpdateModel(processing_status=ProcessingStatus.PROCESSING)
        )

    def mark_completed(self, record_id: str, result: Dict[str, Any]) -> ExtractionRecordModel | None:
        return self.update_record(
            record_id,
            ExtractionRecordUpdateModel(
                parsed_fields=result["parsed_fields"],
                extracted_data=result["extracted"],
                confidence_scores=result["confidence"],
                processing_status=ProcessingStatus.COMPLETED,
            ),
        )

    def mark_failed(self, record_id: str, error_message: str) -> ExtractionRecordModel | None:
        return self.update_record(
            record_id,
            ExtractionRecordUpdateModel(
                processing_status=ProcessingStatus.FAILED, error_message=error_message
            ),
        )

    def list_records(
        self, skip: int = 0, limit: int = 10, filters: RecordFilters | None = None
    ) -> Tuple[List[ExtractionRecordModel], int]:
        filters = filters or RecordFilters()
        with self.database.session() as db:
            query = db.query(ExtractionRecord)
            if filters.status:
                query = query.filter(ExtractionRecord.processing_status == filters.status)
            if filters.search:
                pattern = f"%{filters.search.lower()}%"
                query = query.filter(
                    or_(
                        func.lower(ExtractionRecord.url).like(pattern),
                        func.lower(ExtractionRecord.instruction).like(pattern),
                        func.lower(ExtractionRecord.error_message).like(pattern),
                    )
                )
            total = query.count()

            column = SORTABLE_COLUMNS.get(filters.sort_by, ExtractionRecord.created_at)
            ordering = column.asc() if filters.sort_order == "asc" else column.desc()
            records = query.order_by(ordering).offset(skip).limit(limit).all()
            return [ExtractionRecordModel.model_validate(r) for r in records], total

    def count_records(self) -> int:
        with self.database.session() as db:
            return db.query(ExtractionRecord).count()

    def get_records_by_url(self, url: str) -> List[ExtractionRecordModel]:
        with self.database.session() as db:
            records = (
                db.query(ExtractionRecord)
                .filter(ExtractionRecord.url == url)
                .order_by(ExtractionRecord.created_at.desc())
                .all()
            )
            return [ExtractionRecordModel.model_validate(r) for r in records]

    def get_records_by_status(self, status: ProcessingStatus | str) -> List[ExtractionRecordModel]:
        status = ProcessingStatus(status)
        with self.database.session() as db:
            records = (
                db.query(ExtractionRecord)
                .filter(ExtractionRecord.processing_status == status.value)
                .order_by(ExtractionRecord.created_at.desc())
                .all()
            )
            return [ExtractionRecordModel.model_validate(r) for r in records]

    def delete_record(self, record_id: str) -> bool:
        with self.database.session() as db:
            record = db.get(ExtractionRecord, record_id)
            if not record:
                return False
            db.delete(record)
            db.commit()
            return True

    def health_check(self) -> bool:
        try:
            self.database.ping()
            return True
        except SQLAlchemyError as e:
            logger.error("Database health check failed: %s", e)
            return False
