from __future__ import annotations

from typing import Any, Callable, Dict, Optional

from pydantic import ValidationError

from extractly.capture.client import CaptureError, ExtractlyClient
from extractly.capture.messages import (
    CleanHighlights,
    ExtractData,
    GetPageContent,
    GetPageHtml,
    GetSettings,
    HighlightElements,
    Message,
    MessageResponse,
    parse_message,
)
from extractly.capture.page import PageHandler
from extractly.capture.storage import LocalStorage, get_settings, store_extraction_result
from extractly.logger import get_logger

logger = get_logger(__name__)


class MessageRouter:
    """
    Background side of the capture protocol.

    Holds the open pages by tab id, the local storage and a factory for the
    backend client, and answers every message with a `MessageResponse`.
    """

    def __init__(
        self,
        storage: LocalStorage,
        client_factory: Callable[..., ExtractlyClient] = ExtractlyClient,
    ):
        self.storage = storage
        self.client_factory = client_factory
        self.pages: Dict[int, PageHandler] = {}
        self.active_tab: Optional[int] = None

    def open_page(self, tab_id: int, handler: PageHandler, activate: bool = True) -> None:
        self.pages[tab_id] = handler
        if activate:
            self.active_tab = tab_id

    def _page(self, tab_id: Optional[int] = None) -> PageHandler:
        tab = tab_id if tab_id is not None else self.active_tab
        if tab is None or tab not in self.pages:
            raise LookupError("No tab ID available")
        return self.pages[tab]

    def dispatch(self, raw: Dict[str, Any]) -> MessageResponse:
        try:
            message = parse_message(raw)
        except ValidationError:
            logger.warning("Unknown message type: %s", raw.get("type"))
            return MessageResponse.fail("Unknown message type")
        logger.debug("Background received message: %s", message.type)
        return self.handle(message)

    def handle(self, message: Message) -> MessageResponse:
        try:
            if isinstance(message, GetPageHtml):
                return MessageResponse.ok(self._page(message.tab_id).page_html())
            if isinstance(message, ExtractData):
                return MessageResponse.ok(self._extract(message))
            if isinstance(message, GetSettings):
                return MessageResponse.ok(get_settings(self.storage).model_dump(by_alias=True))
            if isinstance(message, GetPageContent):
                return MessageResponse.ok(self._page().page_content())
            if isinstance(message, HighlightElements):
                return MessageResponse.ok({"highlighted": self._page().highlight(message.selectors)})
            if isinstance(message, CleanHighlights):
                return MessageResponse.ok({"cleaned": self._page().clean_highlights()})
        except (LookupError, CaptureError, OSError, ValueError) as e:
            logger.error("Error handling %s: %s", message.type, e)
            return MessageResponse.fail(str(e) or f"Failed to handle {message.type}")
        return MessageResponse.fail("Unknown message type")

    def _extract(self, message: ExtractData) -> Dict[str, Any]:
        client = self.client_factory(get_settings(self.storage))
        try:
            result = client.ingest(message.data.url, message.data.html, message.data.instruction)
        finally:
            client.close()
        store_extraction_result(self.storage, result)
        return result
