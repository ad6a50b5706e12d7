from __future__ import annotations


class AppError(Exception):
    """Error surfaced to HTTP clients as ``{"error": message}``."""

    def __init__(self, message: str, status_code: int = 500, is_operational: bool = True):
        super().__init__(message)
        self.message = message
        self.status_code = status_code
        self.is_operational = is_operational


def create_error(message: str, status_code: int = 500) -> AppError:
    return AppError(message, status_code=status_code, is_operational=True)


class ConfigurationError(RuntimeError):
    pass


class LLMResponseError(RuntimeError):
    """The LLM answered, but without any usable text."""


class ExtractionError(RuntimeError):
    """Any failure while running an extraction through the LLM."""


class InvalidStatusTransition(ValueError):
    def __init__(self, current: str, target: str):
        super().__init__(f"Cannot move record from '{current}' to '{target}'")
        self.current = current
        self.target = target
