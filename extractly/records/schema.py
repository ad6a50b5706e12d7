from datetime import datetime

from sqlalchemy import JSON, Column, DateTime, String, Text

from extractly.db.sql import Base


class ExtractionRecord(Base):
    __tablename__ = "extraction_records"

    id = Column(String, primary_key=True)
    url = Column(String, nullable=False, index=True)
    instruction = Column(Text, nullable=False)
    html_content = Column(Text, nullable=False)
    processing_status = Column(String, nullable=False, default="pending", index=True)
    parsed_fields = Column(JSON, nullable=True)
    extracted_data = Column(JSON, nullable=True)
    confidence_scores = Column(JSON, nullable=True)
    error_message = Column(Text, nullable=True)
    created_at = Column(DateTime, nullable=False, default=datetime.now, index=True)
    updated_at = Column(
        DateTime, nullable=False, default=datetime.now, onupdate=datetime.now
    )
