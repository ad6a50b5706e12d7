from __future__ import annotations

from typing import Any, Optional

import httpx

from extractly.config import Settings
from extractly.errors import ConfigurationError, LLMResponseError


class GeminiClient:
    def __init__(
        self,
        api_key: Optional[str],
        model_id: str = "gemini-2.5-pro",
        base_url: str = "https://generativelanguage.googleapis.com/v1beta",
        timeout: int = 120,
        transport: Optional[httpx.BaseTransport] = None,
    ):
        if not api_key:
            raise ConfigurationError("GEMINI_API_KEY environment variable is required")
        self.base_url = base_url.rstrip("/")
        self.model_id = model_id
        self._client = httpx.Client(
            timeout=timeout,
            headers={"x-goog-api-key": api_key},
            transport=transport,
        )

    @classmethod
    def from_settings(cls, settings: Settings) -> "GeminiClient":
        return cls(
            api_key=settings.gemini_api_key,
            model_id=settings.gemini_model,
            base_url=settings.gemini_base_url,
            timeout=settings.gemini_timeout,
        )

    def generate(
        self,
        prompt: str,
        temperature: float = 0.4,
        top_k: int = 60,
        top_p: float = 0.9,
    ) -> str:
        url = f"{self.base_url}/models/{self.model_id}:generateContent"
        payload = {
            "contents": [{"role": "user", "parts": [{"text": prompt}]}],
            "generationConfig": {
                "temperature": temperature,
                "topK": top_k,
                "topP": top_p,
            },
        }
        resp = self._client.post(url, json=payload)
        resp.raise_for_status()
        return _response_text(resp.json())

    def close(self) -> None:
        self._client.close()


def _response_text(data: Any) -> str:
    if not isinstance(data, dict):
        raise LLMResponseError(
            f"Malformed Gemini response: expected an object, got {type(data).__name__}"
        )
    candidates = data.get("candidates") or []
    if not isinstance(candidates, list):
        raise LLMResponseError("Malformed Gemini response: candidates is not a list")
    if not candidates:
        feedback = data.get("promptFeedback")
        reason = feedback.get("blockReason") if isinstance(feedback, dict) else None
        raise LLMResponseError(f"No candidates in Gemini response (blockReason={reason})")
    candidate = candidates[0]
    content = candidate.get("content") if isinstance(candidate, dict) else None
    parts = content.get("parts") if isinstance(content, dict) else None
    if not isinstance(parts, list):
        raise LLMResponseError("Malformed Gemini response: first candidate has no parts")
    text = "".join(
        part["text"] for part in parts if isinstance(part, dict) and isinstance(part.get("text"), str)
    )
    if not text:
        raise LLMResponseError("Gemini response contained no text")
    return text
