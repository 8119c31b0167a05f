"""Load persisted zine documents into typed elements.

The editor stores documents as loosely-typed JSON. Loading is tolerant:
missing or malformed coordinates become 0, missing ids are derived from the
element position in the document, and missing pages/elements are empty.
"""
from __future__ import annotations

from pathlib import Path
from typing import Any, Iterator

from .types import Element, ZineDocument, ZinePage
from .utils import load_json, stable_id, to_float


def _text(value: Any) -> str:
    if value is None:
        return ""
    return value if isinstance(value, str) else str(value)


def parse_element(data: Any, *, page_id: str, index: int) -> Element | None:
    if not isinstance(data, dict):
        return None
    kind = _text(data.get("type") or data.get("kind")).strip().lower()
    element_id = _text(data.get("id")).strip() or f"el_{stable_id(page_id, index, kind, length=10)}"
    return Element(
        id=element_id,
        kind=kind,
        x=to_float(data.get("x")),
        y=to_float(data.get("y")),
        width=max(0.0, to_float(data.get("width", data.get("w")))),
        height=max(0.0, to_float(data.get("height", data.get("h")))),
        content=_text(data.get("content")),
        src=_text(data.get("src")),
        caption=_text(data.get("caption")),
        alt=_text(data.get("alt") or data.get("altText")),
    )


def parse_page(data: Any, *, index: int) -> ZinePage:
    if not isinstance(data, dict):
        data = {}
    page_id = _text(data.get("id")).strip() or f"page_{index + 1:03d}"
    raw_elements = data.get("elements")
    elements: list[Element] = []
    if isinstance(raw_elements, list):
        for i, raw in enumerate(raw_elements):
            el = parse_element(raw, page_id=page_id, index=i)
            if el is not None:
                elements.append(el)
    return ZinePage(id=page_id, title=_text(data.get("title")), elements=tuple(elements))


def parse_document(data: Any) -> ZineDocument:
    if not isinstance(data, dict):
        data = {}
    raw_pages = data.get("pages")
    pages = [parse_page(p, index=i) for i, p in enumerate(raw_pages)] if isinstance(raw_pages, list) else []
    return ZineDocument(
        id=_text(data.get("id")) or "zine",
        title=_text(data.get("title")),
        pages=tuple(pages),
    )


def load_document(path: str | Path) -> ZineDocument:
    return parse_document(load_json(path))


def iter_pages(document: ZineDocument) -> Iterator[tuple[int, ZinePage]]:
    yield from enumerate(document.pages)
