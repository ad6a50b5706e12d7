from __future__ import annotations

import time
from typing import Any, Dict, Protocol

from extractly.errors import ExtractionError
from extractly.logger import get_logger
from extractly.service.parser import parse_extraction_response, to_payload
from extractly.service.prompt import build_extraction_prompt

logger = get_logger(__name__)


class TextGenerator(Protocol):
    model_id: str

    def generate(self, prompt: str) -> str: ...


class ExtractionService:
    """Runs one extraction: prompt, a single LLM call, parsed payload."""

    def __init__(self, llm: TextGenerator):
        self.llm = llm

    def extract_data(self, html: str, instruction: str) -> Dict[str, Any]:
        start = time.time()
        prompt = build_extraction_prompt(html, instruction)
        logger.info("Processing with Gemini (%s)...", self.llm.model_id)
        try:
            output = self.llm.generate(prompt)
            elapsed_ms = int((time.time() - start) * 1000)
            logger.info("Gemini response received in %d ms", elapsed_ms)
            return to_payload(parse_extraction_response(output))
        except Exception as e:
            logger.error("Gemini processing error: %s", e)
            raise ExtractionError(f"Gemini processing failed: {str(e) or type(e).__name__}") from e

    def health_check(self) -> bool:
        try:
            return "OK" in self.llm.generate('Hello, respond with "OK"')
        except Exception as e:
            logger.error("Gemini health check failed: %s", e)
            return False
