from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Any, List, Mapping, Optional
from urllib.parse import urlparse

MAX_INSTRUCTION_LENGTH = 1000
DEFAULT_MAX_HTML_SIZE = 5_242_880

_UUID_RE = re.compile(
    r"^[0-9a-f]{8}-[0-9a-f]{4}-[1-5][0-9a-f]{3}-[89ab][0-9a-f]{3}-[0-9a-f]{12}$", re.IGNORECASE
)


@dataclass
class ValidationResult:
    is_valid: bool
    errors: List[str] = field(default_factory=list)


@dataclass
class PaginationParams:
    page: int = 1
    limit: int = 10
    errors: List[str] = field(default_factory=list)


def is_valid_url(value: str) -> bool:
    try:
        parsed = urlparse(value)
    except ValueError:
        return False
    if not parsed.scheme or not re.fullmatch(r"[a-zA-Z][a-zA-Z0-9+.-]*", parsed.scheme):
        return False
    if parsed.scheme in ("http", "https", "ftp", "ws", "wss"):
        return bool(parsed.netloc)
    # mailto:, data:, chrome-extension:// ...
    return bool(parsed.netloc or parsed.path)


def validate_ingest_request(
    data: Mapping[str, Any], max_html_size: int = DEFAULT_MAX_HTML_SIZE
) -> ValidationResult:
    errors: List[str] = []

    url = data.get("url")
    if not url or not isinstance(url, str):
        errors.append("URL is required and must be a string")
    elif not is_valid_url(url):
        errors.append("URL must be a valid URL format")

    html = data.get("html")
    if not html or not isinstance(html, str):
        errors.append("HTML content is required and must be a string")
    else:
        if len(html) > max_html_size:
            errors.append(f"HTML content exceeds maximum size of {max_html_size} characters")
        if not html.strip():
            errors.append("HTML content cannot be empty")

    instruction = data.get("instruction")
    if not instruction or not isinstance(instruction, str):
        errors.append("Instruction is required and must be a string")
    else:
        if not instruction.strip():
            errors.append("Instruction cannot be empty")
        if len(instruction) > MAX_INSTRUCTION_LENGTH:
            errors.append(f"Instruction must be less than {MAX_INSTRUCTION_LENGTH} characters")

    return ValidationResult(is_valid=not errors, errors=errors)


def _leading_int(value: str) -> Optional[int]:
    m = re.match(r"\s*([+-]?\d+)", value)
    return int(m.group(1)) if m else None


def validate_pagination_params(page: Optional[str] = None, limit: Optional[str] = None) -> PaginationParams:
    params = PaginationParams()

    if page:
        page_num = _leading_int(page)
        if page_num is None or page_num < 1:
            params.errors.append("Page must be a positive integer")
        elif page_num > 1000:
            params.errors.append("Page cannot exceed 1000")
        else:
            params.page = page_num

    if limit:
        limit_num = _leading_int(limit)
        if limit_num is None or limit_num < 1:
            params.errors.append("Limit must be a positive integer")
        elif limit_num > 100:
            params.errors.append("Limit cannot exceed 100")
        else:
            params.limit = limit_num

    return params


def lenient_int(value: Optional[str], default: int) -> int:
    """Leading integer of `value`, or `default` when missing or below 1."""
    if not value:
        return default
    parsed = _leading_int(value)
    return parsed if parsed is not None and parsed > 0 else default


def is_valid_uuid(value: str) -> bool:
    return bool(_UUID_RE.match(value))


def sanitize_html(html: str) -> str:
    html = re.sub(r"<script\b[^>]*>[\s\S]*?</script\s*>", "", html, flags=re.IGNORECASE)
    html = re.sub(r'on\w+="[^"]*"', "", html, flags=re.IGNORECASE)
    html = re.sub(r"on\w+='[^']*'", "", html, flags=re.IGNORECASE)
    return re.sub(r"javascript:", "", html, flags=re.IGNORECASE)
