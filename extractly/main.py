from __future__ import annotations

import re
from contextlib import asynccontextmanager
from typing import List, Optional, Tuple

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import FileResponse
from fastapi.staticfiles import StaticFiles

from extractly.config import Settings
from extractly.db.sql import Database
from extractly.handlers import register_error_handlers
from extractly.llm.model import GeminiClient
from extractly.logger import get_logger
from extractly.middleware import RateLimiter, register_middleware
from extractly.records.table import ExtractionTable
from extractly.routes import health, ingest
from extractly.service.extractor import ExtractionService, TextGenerator

logger = get_logger(__name__)


def _split_origins(origins: List[str]) -> Tuple[List[str], Optional[str]]:
    """Exact origins go to allow_origins, `*` patterns become one regex."""
    exact = [o for o in origins if "*" not in o]
    patterns = [re.escape(o).replace(r"\*", ".*") for o in origins if "*" in o]
    return exact, ("^(" + "|".join(patterns) + ")$") if patterns else None


def create_app(
    settings: Optional[Settings] = None,
    database: Optional[Database] = None,
    llm: Optional[TextGenerator] = None,
) -> FastAPI:
    settings = settings or Settings.from_env()
    database = database or Database(settings.database_url, echo=settings.sql_echo)
    llm = llm or GeminiClient.from_settings(settings)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        database.create_all()
        logger.info("Extractly backend ready (environment: %s)", settings.node_env)
        yield
        close = getattr(llm, "close", None)
        if close:
            close()
        database.dispose()

    app = FastAPI(title="Extractly Backend", version="0.1.0", lifespan=lifespan)
    app.state.settings = settings
    app.state.database = database
    app.state.table = ExtractionTable(database)
    app.state.extractor = ExtractionService(llm)
    app.state.rate_limiter = RateLimiter(
        window_ms=settings.rate_limit_window_ms,
        max_requests=settings.rate_limit_max_requests,
    )

    register_middleware(app, settings, app.state.rate_limiter)
    exact_origins, origin_regex = _split_origins(settings.cors_origins)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=exact_origins,
        allow_origin_regex=origin_regex,
        allow_credentials=True,
        allow_methods=["GET", "POST", "PUT", "DELETE"],
        allow_headers=["Content-Type", "Authorization"],
    )
    register_error_handlers(app, settings)

    app.include_router(health.router)
    app.include_router(ingest.router)

    web_dir = settings.web_dir
    if web_dir.is_dir():
        app.mount("/web", StaticFiles(directory=web_dir), name="web")

        @app.get("/", include_in_schema=False)
        def index():
            return FileResponse(web_dir / "index.html")

    return app
