from fastapi import Request

from extractly.config import Settings
from extractly.records.table import ExtractionTable
from extractly.service.extractor import ExtractionService


def get_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_table(request: Request) -> ExtractionTable:
    return request.app.state.table


def get_extractor(request: Request) -> ExtractionService:
    return request.app.state.extractor
