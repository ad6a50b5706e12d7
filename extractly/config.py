from __future__ import annotations

import os
import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional

from dotenv import load_dotenv


load_dotenv()

DEFAULT_CORS_ORIGINS = "chrome-extension://*,http://localhost:3000,http://127.0.0.1:3000"
DEFAULT_WEB_DIR = Path(__file__).resolve().parent.parent / "web"

_SIZE_UNITS = {"b": 1, "kb": 1024, "mb": 1024 ** 2, "gb": 1024 ** 3}


def parse_size(value: str | int) -> int:
    """Parse an express-style size ("10mb", "512kb", "2048") into bytes."""
    if isinstance(value, int):
        return value
    m = re.fullmatch(r"\s*(\d+(?:\.\d+)?)\s*([kmg]?b)?\s*", value.lower())
    if not m:
        raise ValueError(f"Invalid size: {value!r}")
    number, unit = m.groups()
    return int(float(number) * _SIZE_UNITS[unit or "b"])


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    return int(raw)


@dataclass
class Settings:
    """Backend configuration, read from the environment (and `.env`)."""

    host: str = "0.0.0.0"
    port: int = 3000
    cors_origins: List[str] = field(default_factory=lambda: DEFAULT_CORS_ORIGINS.split(","))
    rate_limit_window_ms: int = 900_000
    rate_limit_max_requests: int = 100
    max_body_size: int = 10 * 1024 ** 2
    max_html_size: int = 5_242_880
    gemini_api_key: Optional[str] = None
    gemini_model: str = "gemini-2.5-pro"
    gemini_base_url: str = "https://generativelanguage.googleapis.com/v1beta"
    gemini_timeout: int = 120
    node_env: str = "development"
    database_url: str = "sqlite:///./extractly.db"
    sql_echo: bool = False
    log_level: str = "INFO"
    log_path: Optional[str] = None
    web_dir: Path = DEFAULT_WEB_DIR

    @property
    def is_production(self) -> bool:
        return self.node_env == "production"

    @classmethod
    def from_env(cls) -> "Settings":
        origins = os.getenv("CORS_ORIGIN", DEFAULT_CORS_ORIGINS)
        return cls(
            host=os.getenv("HOST", "0.0.0.0"),
            port=_env_int("PORT", 3000),
            cors_origins=[o.strip() for o in origins.split(",") if o.strip()],
            rate_limit_window_ms=_env_int("RATE_LIMIT_WINDOW_MS", 900_000),
            rate_limit_max_requests=_env_int("RATE_LIMIT_MAX_REQUESTS", 100),
            max_body_size=parse_size(os.getenv("MAX_BODY_SIZE", "10mb")),
            max_html_size=_env_int("MAX_HTML_SIZE", 5_242_880),
            gemini_api_key=os.getenv("GEMINI_API_KEY") or None,
            gemini_model=os.getenv("GEMINI_MODEL", "gemini-2.5-pro"),
            gemini_base_url=os.getenv(
                "GEMINI_BASE_URL", "https://generativelanguage.googleapis.com/v1beta"
            ),
            gemini_timeout=_env_int("GEMINI_TIMEOUT", 120),
            node_env=os.getenv("NODE_ENV", "development"),
            database_url=os.getenv("DATABASE_URL", "sqlite:///./extractly.db"),
            sql_echo=os.getenv("SQL_ECHO", "false").lower() in ("1", "true", "yes"),
            log_level=os.getenv("LOG_LEVEL", "INFO"),
            log_path=os.getenv("LOG_PATH") or None,
            web_dir=Path(os.getenv("WEB_DIR", str(DEFAULT_WEB_DIR))),
        )
