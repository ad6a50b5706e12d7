"""
Messages exchanged between the capture front end (popup / CLI), the
background router and the page handler.

Every request is one of the models below, told apart by its `type`; every
answer is a `MessageResponse`.
"""

from __future__ import annotations

from typing import Annotated, Any, Dict, List, Literal, Optional, Union

from pydantic import BaseModel, Field, TypeAdapter


class ExtractPayload(BaseModel):
    url: str
    html: str
    instruction: str


class GetPageHtml(BaseModel):
    model_config = {"populate_by_name": True}

    type: Literal["GET_PAGE_HTML"] = "GET_PAGE_HTML"
    tab_id: Optional[int] = Field(None, alias="tabId")


class ExtractData(BaseModel):
    type: Literal["EXTRACT_DATA"] = "EXTRACT_DATA"
    data: ExtractPayload


class GetSettings(BaseModel):
    type: Literal["GET_SETTINGS"] = "GET_SETTINGS"


class GetPageContent(BaseModel):
    type: Literal["GET_PAGE_CONTENT"] = "GET_PAGE_CONTENT"


class HighlightElements(BaseModel):
    type: Literal["HIGHLIGHT_ELEMENTS"] = "HIGHLIGHT_ELEMENTS"
    selectors: List[str] = Field(default_factory=list)


class CleanHighlights(BaseModel):
    type: Literal["CLEAN_HIGHLIGHTS"] = "CLEAN_HIGHLIGHTS"


Message = Annotated[
    Union[GetPageHtml, ExtractData, GetSettings, GetPageContent, HighlightElements, CleanHighlights],
    Field(discriminator="type"),
]

_message_adapter: TypeAdapter[Message] = TypeAdapter(Message)


def parse_message(raw: Dict[str, Any]) -> Message:
    """Raises pydantic.ValidationError for unknown types or bad payloads."""
    return _message_adapter.validate_python(raw)


class MessageResponse(BaseModel):
    success: bool
    data: Any = None
    error: Optional[str] = None

    @classmethod
    def ok(cls, data: Any = None) -> "MessageResponse":
        return cls(success=True, data=data)

    @classmethod
    def fail(cls, error: str) -> "MessageResponse":
        return cls(success=False, error=error)

    def to_dict(self) -> Dict[str, Any]:
        if self.success:
            return {"success": True, "data": self.data}
        return {"success": False, "error": self.error}
