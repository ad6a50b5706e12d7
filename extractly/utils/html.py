from __future__ import annotations

import json
import re
from typing import Any, Dict, List

from bs4 import BeautifulSoup

MAX_PROMPT_HTML_CHARS = 125_000
TRUNCATION_MARKER = "...[truncated]"

_SCRIPT_RE = re.compile(r"<script\b[^>]*>[\s\S]*?</script\s*>", re.IGNORECASE)
_STYLE_RE = re.compile(r"<style\b[^>]*>[\s\S]*?</style\s*>", re.IGNORECASE)
_COMMENT_RE = re.compile(r"<!--[\s\S]*?-->")
_NOSCRIPT_RE = re.compile(r"<noscript\b[^>]*>[\s\S]*?</noscript\s*>", re.IGNORECASE)
_WHITESPACE_RE = re.compile(r"\s+")
_BETWEEN_TAGS_RE = re.compile(r">\s+<")


def preprocess_html(html: str) -> str:
    """Drop scripts, styles, comments and noscript blocks, then squeeze whitespace."""
    processed = _SCRIPT_RE.sub("", html)
    processed = _STYLE_RE.sub("", processed)
    processed = _COMMENT_RE.sub("", processed)
    processed = _NOSCRIPT_RE.sub("", processed)
    processed = _WHITESPACE_RE.sub(" ", processed)
    processed = _BETWEEN_TAGS_RE.sub("><", processed)
    return processed.strip()


def truncate_html(html: str, limit: int = MAX_PROMPT_HTML_CHARS) -> str:
    if len(html) <= limit:
        return html
    return f"{html[:limit]} {TRUNCATION_MARKER}"


def remove_scripts(html: str) -> str:
    soup = BeautifulSoup(html, "lxml")
    for tag in soup.find_all("script"):
        tag.decompose()
    return str(soup)


def get_page_metadata(soup: BeautifulSoup) -> Dict[str, Any]:
    meta: Dict[str, Any] = {}
    for m in soup.find_all("meta"):
        name = m.get("name") or m.get("property")
        content = m.get("content")
        if name and content:
            meta[name] = content

    structured: List[Any] = []
    for tag in soup.find_all("script", type="application/ld+json"):
        try:
            structured.append(json.loads(tag.get_text(strip=True)))
        except json.JSONDecodeError:
            continue
    if structured:
        meta["structuredData"] = structured
    return meta


def get_clean_text(html: str) -> str:
    soup = BeautifulSoup(html, "lxml")
    for tag in soup.find_all(["script", "style", "noscript"]):
        tag.decompose()
    root = soup.body or soup
    return _WHITESPACE_RE.sub(" ", root.get_text(" ")).strip()


def get_page_structure(soup: BeautifulSoup) -> Dict[str, List[Dict[str, Any]]]:
    structure: Dict[str, List[Dict[str, Any]]] = {
        "headings": [],
        "links": [],
        "images": [],
        "forms": [],
        "tables": [],
    }

    for heading in soup.find_all(["h1", "h2", "h3", "h4", "h5", "h6"]):
        structure["headings"].append(
            {
                "level": int(heading.name[1]),
                "text": heading.get_text(" ", strip=True),
                "id": heading.get("id") or None,
            }
        )

    for link in soup.find_all("a", href=True):
        structure["links"].append(
            {
                "text": link.get_text(" ", strip=True),
                "href": link["href"],
                "title": link.get("title") or None,
            }
        )

    for img in soup.find_all("img", src=True):
        structure["images"].append(
            {"src": img["src"], "alt": img.get("alt") or None, "title": img.get("title") or None}
        )

    for form in soup.find_all("form"):
        inputs = [
            {
                "type": field.get("type") or field.name,
                "name": field.get("name") or None,
                "placeholder": field.get("placeholder") or None,
            }
            for field in form.find_all(["input", "select", "textarea"])
        ]
        structure["forms"].append(
            {
                "action": form.get("action") or None,
                "method": form.get("method") or "get",
                "inputs": inputs,
            }
        )

    for table in soup.find_all("table"):
        structure["tables"].append(
            {
                "headers": [th.get_text(" ", strip=True) for th in table.find_all("th")],
                "rows": len(table.find_all("tr")),
                "caption": table.caption.get_text(" ", strip=True) if table.caption else None,
            }
        )

    return structure
