from __future__ import annotations

import json
import math
import re
from dataclasses import dataclass, field
from typing import Any, Dict, List, Union

import orjson

from extractly.logger import get_logger

logger = get_logger(__name__)

PARSE_FAILURE_MESSAGE = "Failed to parse extraction results"
REQUIRED_KEYS = ("parsed_fields", "extracted", "confidence")

_FENCE_RE = re.compile(r"```(?:json)?\s*")
_OBJECT_RE = re.compile(r"\{[\s\S]*\}")


@dataclass
class Parsed:
    fields: List[str]
    values: Dict[str, Any]
    confidences: Dict[str, float]


@dataclass
class Unparseable:
    raw_text: str
    reason: str = field(default="no JSON object found")


ExtractionResult = Union[Parsed, Unparseable]


def _try_parse_json(text: str):
    """Parse the whole text as JSON, falling back to the first {...} region."""
    stripped = text.strip()
    try:
        return json.loads(stripped)
    except json.JSONDecodeError:
        pass

    cleaned = _FENCE_RE.sub("", stripped)
    m = _OBJECT_RE.search(cleaned)
    if not m:
        return None
    candidate = m.group(0)
    try:
        return json.loads(candidate)
    except json.JSONDecodeError:
        try:
            return orjson.loads(candidate)
        except orjson.JSONDecodeError:
            return None


def clamp_confidence(score: Any) -> Any:
    if isinstance(score, bool) or not isinstance(score, (int, float)):
        return 0.0
    if not math.isfinite(score) or score < 0 or score > 1:
        return 0.0
    return score


def parse_extraction_response(text: str) -> ExtractionResult:
    data = _try_parse_json(text)
    if data is None:
        logger.error("Failed to parse Gemini response, raw response: %s", text[:500])
        return Unparseable(raw_text=text)
    if not isinstance(data, dict):
        return Unparseable(raw_text=text, reason="response is not a JSON object")

    missing = [key for key in REQUIRED_KEYS if data.get(key) is None]
    if missing:
        logger.error("Invalid response structure from Gemini, missing %s", missing)
        return Unparseable(raw_text=text, reason=f"missing keys: {', '.join(missing)}")

    raw_fields = data["parsed_fields"] if isinstance(data["parsed_fields"], list) else []
    fields = [str(name) for name in raw_fields]
    values = data["extracted"] if isinstance(data["extracted"], dict) else {}
    confidence = data["confidence"] if isinstance(data["confidence"], dict) else {}
    confidences = {str(key): clamp_confidence(score) for key, score in confidence.items()}

    logger.info("Extracted %d fields with Gemini", len(fields))
    return Parsed(fields=fields, values=values, confidences=confidences)


def to_payload(result: ExtractionResult) -> Dict[str, Any]:
    if isinstance(result, Parsed):
        return {
            "parsed_fields": result.fields,
            "extracted": result.values,
            "confidence": result.confidences,
        }
    return {
        "parsed_fields": ["error"],
        "extracted": {"error": PARSE_FAILURE_MESSAGE},
        "confidence": {"error": 0.0},
    }
