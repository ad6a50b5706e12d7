"""HTTP middleware: request logging, body size cap and per-IP rate limiting."""

from __future__ import annotations

import math
import threading
import time
from typing import Dict, Tuple

from fastapi import FastAPI, HTTPException, Request
from fastapi.responses import JSONResponse
from starlette.datastructures import Headers
from starlette.types import ASGIApp, Message, Receive, Scope, Send

from extractly.config import Settings
from extractly.logger import get_logger

logger = get_logger("extractly.http")


class RateLimiter:
    """
    Fixed-window request counter keyed by client address.

    Every client gets `max_requests` hits per `window_ms`; the window
    starts with the client's first request. Expired windows are swept
    once per window so addresses that never come back are dropped.
    """

    def __init__(self, window_ms: int = 900_000, max_requests: int = 100):
        self.window = window_ms / 1000.0
        self.max_requests = max_requests
        self._hits: Dict[str, Tuple[float, int]] = {}
        self._lock = threading.Lock()
        self._next_sweep = time.monotonic() + self.window

    def hit(self, key: str) -> Tuple[bool, int, float]:
        """
        Count one request for `key`.

        Returns:
            (allowed, remaining, seconds until the window resets)
        """
        now = time.monotonic()
        with self._lock:
            if now >= self._next_sweep:
                self._sweep(now)
            started, count = self._hits.get(key, (now, 0))
            if now - started >= self.window:
                started, count = now, 0
            count += 1
            self._hits[key] = (started, count)
        reset_in = max(0.0, started + self.window - now)
        return count <= self.max_requests, max(0, self.max_requests - count), reset_in

    def _sweep(self, now: float) -> None:
        expired = [k for k, (started, _) in self._hits.items() if now - started >= self.window]
        for key in expired:
            del self._hits[key]
        self._next_sweep = now + self.window

    def __len__(self) -> int:
        return len(self._hits)

    def reset(self) -> None:
        with self._lock:
            self._hits.clear()


class BodySizeLimitMiddleware:
    """
    Rejects request bodies larger than `max_body_size` bytes with a 413.

    A declared Content-Length is checked up front; otherwise (chunked
    uploads) the bytes are counted as the app reads them.
    """

    def __init__(self, app: ASGIApp, max_body_size: int):
        self.app = app
        self.max_body_size = max_body_size

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        length = Headers(scope=scope).get("content-length")
        if length and length.isdigit() and int(length) > self.max_body_size:
            response = JSONResponse(status_code=413, content={"error": "Request body too large"})
            await response(scope, receive, send)
            return

        received = 0

        async def limited_receive() -> Message:
            nonlocal received
            message = await receive()
            if message["type"] == "http.request":
                received += len(message.get("body", b""))
                if received > self.max_body_size:
                    # handled by the app's HTTPException handler
                    raise HTTPException(status_code=413, detail="Request body too large")
            return message

        await self.app(scope, limited_receive, send)


def register_middleware(app: FastAPI, settings: Settings, limiter: RateLimiter) -> None:
    retry_after = f"{math.ceil(settings.rate_limit_window_ms / 60000)} minutes"

    # Added last runs first: logging wraps everything else.
    app.add_middleware(BodySizeLimitMiddleware, max_body_size=settings.max_body_size)

    @app.middleware("http")
    async def rate_limit(request: Request, call_next):
        client = request.client.host if request.client else "unknown"
        allowed, remaining, reset_in = limiter.hit(client)
        headers = {
            "RateLimit-Limit": str(limiter.max_requests),
            "RateLimit-Remaining": str(remaining),
            "RateLimit-Reset": str(math.ceil(reset_in)),
        }
        if not allowed:
            logger.warning("Rate limit exceeded for %s", client)
            return JSONResponse(
                status_code=429,
                content={
                    "error": "Too many requests from this IP, please try again later.",
                    "retryAfter": retry_after,
                },
                headers=headers,
            )
        response = await call_next(request)
        response.headers.update(headers)
        return response

    @app.middleware("http")
    async def log_requests(request: Request, call_next):
        start = time.time()
        client = request.client.host if request.client else "-"
        logger.info("%s %s - %s", request.method, request.url.path, client)
        response = await call_next(request)
        duration_ms = int((time.time() - start) * 1000)
        level = "error" if response.status_code >= 400 else "info"
        getattr(logger, level)(
            "%s %s - %d - %dms", request.method, request.url.path, response.status_code, duration_ms
        )
        return response
