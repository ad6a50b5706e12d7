from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, List, Optional

import httpx
from bs4 import BeautifulSoup
from soupsieve import SelectorSyntaxError

from extractly.logger import get_logger
from extractly.utils.html import (
    get_clean_text,
    get_page_metadata,
    get_page_structure,
    remove_scripts,
)

logger = get_logger(__name__)

HIGHLIGHT_CLASS = "extractly-highlight"
HIGHLIGHT_STYLE = "outline: 2px solid #667eea; background-color: rgba(102, 126, 234, 0.1);"
USER_AGENT = "Mozilla/5.0 (compatible; Extractly/0.1)"


@dataclass
class Page:
    html: str
    url: str
    title: str = ""

    @classmethod
    def from_html(cls, html: str, url: str) -> "Page":
        soup = BeautifulSoup(html, "lxml")
        title = soup.title.get_text(strip=True) if soup.title else ""
        return cls(html=html, url=url, title=title)

    @classmethod
    def from_file(cls, path: Path | str, url: str) -> "Page":
        return cls.from_html(Path(path).read_text(encoding="utf-8"), url)

    @classmethod
    def fetch(cls, url: str, timeout: float = 30.0) -> "Page":
        resp = httpx.get(url, timeout=timeout, follow_redirects=True, headers={"User-Agent": USER_AGENT})
        resp.raise_for_status()
        return cls.from_html(resp.text, str(resp.url))


class PageHandler:
    """Answers page-level messages for one captured page (the content script's job)."""

    def __init__(self, page: Page):
        self.page = page
        self.soup = BeautifulSoup(page.html, "lxml")

    @property
    def html(self) -> str:
        return str(self.soup)

    def page_html(self) -> Dict[str, Any]:
        return {"html": remove_scripts(self.html), "url": self.page.url, "title": self.page.title}

    def page_content(self) -> Dict[str, Any]:
        html = self.html
        return {
            "html": html,
            "url": self.page.url,
            "title": self.page.title,
            "meta": get_page_metadata(self.soup),
            "text": get_clean_text(html),
            "structure": get_page_structure(self.soup),
        }

    def highlight(self, selectors: List[str]) -> int:
        self.clean_highlights()
        for selector in selectors:
            try:
                elements = self.soup.select(selector)
            except (SelectorSyntaxError, NotImplementedError, ValueError):
                logger.warning("Invalid selector: %s", selector)
                continue
            for element in elements:
                classes = element.get("class", [])
                if HIGHLIGHT_CLASS in classes:
                    continue
                element["class"] = [*classes, HIGHLIGHT_CLASS]
                style = element.get("style", "").strip().rstrip(";")
                element["data-extractly-style"] = style
                element["style"] = f"{style}; {HIGHLIGHT_STYLE}" if style else HIGHLIGHT_STYLE
        return len(selectors)

    def clean_highlights(self) -> int:
        highlighted = self.soup.select(f".{HIGHLIGHT_CLASS}")
        for element in highlighted:
            classes = [c for c in element.get("class", []) if c != HIGHLIGHT_CLASS]
            if classes:
                element["class"] = classes
            else:
                del element["class"]
            original_style: Optional[str] = element.attrs.pop("data-extractly-style", None)
            if original_style:
                element["style"] = original_style
            elif "style" in element.attrs:
                del element["style"]
        return len(highlighted)
