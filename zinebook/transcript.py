"""Flatten a zine document into an ordered textual transcript.

Each page becomes a block of lines in reading order: text elements verbatim,
images replaced by a short synthesized description (caption/alt when present,
otherwise nearby-text excerpts) tagged with a coarse position on the page.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Iterable

from .config import SpatialConfig, TranscriptConfig
from .document import iter_pages
from .layout import PageLayoutAnalyzer, element_to_rectangle
from .types import Element, ImageTextPair, Rectangle, ZineDocument, ZinePage

_ROWS = ("top", "middle", "bottom")
_COLS = ("left", "center", "right")


@dataclass(frozen=True)
class ImagePayload:
    element_id: str
    src: str
    description: str
    position: str

    def to_dict(self) -> dict[str, Any]:
        return {
            "element_id": self.element_id,
            "src": self.src,
            "description": self.description,
            "position": self.position,
        }


@dataclass(frozen=True)
class PageTranscript:
    page_id: str
    page_index: int
    text: str
    images: tuple[ImagePayload, ...] = ()
    text_blocks: int = 0


@dataclass(frozen=True)
class Transcript:
    text: str
    pages: tuple[PageTranscript, ...] = ()
    stats: dict[str, int] = field(default_factory=dict)

    @property
    def images(self) -> list[ImagePayload]:
        return [img for p in self.pages for img in p.images]

    def to_dict(self) -> dict[str, Any]:
        return {
            "text": self.text,
            "pages": [
                {
                    "page_id": p.page_id,
                    "page_index": p.page_index,
                    "text": p.text,
                    "images": [img.to_dict() for img in p.images],
                }
                for p in self.pages
            ],
            "stats": dict(self.stats),
        }


def reading_order(elements: Iterable[Element], tolerance: float = 50.0) -> list[Element]:
    """Order elements top-to-bottom in rows, left-to-right within a row.

    A row starts at the topmost remaining element and takes every element whose
    top edge lies within `tolerance` of it. Ties keep input order.
    """
    indexed = sorted(enumerate(elements), key=lambda p: (p[1].y, p[1].x, p[0]))
    rows: list[list[tuple[int, Element]]] = []
    row_top = 0.0
    for item in indexed:
        if rows and item[1].y - row_top <= tolerance:
            rows[-1].append(item)
        else:
            rows.append([item])
            row_top = item[1].y

    ordered: list[Element] = []
    for row in rows:
        ordered.extend(el for _, el in sorted(row, key=lambda p: (p[1].x, p[0])))
    return ordered


def position_label(rect: Rectangle, canvas_width: float, canvas_height: float) -> str:
    """Which third of the page (vertically, horizontally) holds the center."""
    cx, cy = rect.center

    def third(v: float, extent: float) -> int:
        if extent <= 0:
            return 1
        return int(min(2, max(0, v // (extent / 3))))

    row = _ROWS[third(cy, canvas_height)]
    col = _COLS[third(cx, canvas_width)]
    if row == "middle" and col == "center":
        return "center"
    return f"{row}-{col}"


def excerpt(text: str, max_chars: int) -> str:
    flat = " ".join(text.split())
    if len(flat) <= max_chars:
        return flat
    return flat[: max(0, max_chars - 1)] + "…"


def _plural(n: int, noun: str) -> str:
    return f"{n} {noun}" if n == 1 else f"{n} {noun}s"


@dataclass
class NarrativeAssembler:
    spatial: SpatialConfig = field(default_factory=SpatialConfig)
    config: TranscriptConfig = field(default_factory=TranscriptConfig)

    def __post_init__(self):
        self.analyzer = PageLayoutAnalyzer(self.spatial)
        self.resolver = self.analyzer.resolver
        self.text_filter = self.resolver.text_filter

    def describe_image(
        self,
        element: Element,
        rect: Rectangle,
        pair: ImageTextPair | None,
        images: tuple[Rectangle, ...],
        quoted: set[int],
    ) -> str:
        caption = (element.caption or element.alt).strip()
        if caption:
            return f'"{excerpt(caption, self.config.excerpt_max_chars)}"'

        related = pair.related_text if pair else ()
        nearby_images = self.resolver.count_nearby_images(rect, images)
        if not related:
            if nearby_images:
                return f"no nearby text ({_plural(nearby_images, 'other image')} nearby)"
            return "no nearby text"

        body = f"{_plural(len(related), 'text element')} and {_plural(nearby_images, 'other image')} nearby"
        excerpts: list[str] = []
        for rel in related:
            if len(excerpts) >= self.config.max_excerpts:
                break
            # A text element is quoted by at most one image per page.
            if id(rel.element) in quoted:
                continue
            quoted.add(id(rel.element))
            excerpts.append(f'{rel.direction}: "{excerpt(rel.element.content, self.config.excerpt_max_chars)}"')
        if excerpts:
            body += "; " + "; ".join(excerpts)
        return body

    def assemble_page(self, page: ZinePage, page_index: int, image_number: int = 1) -> PageTranscript | None:
        """Transcript block for one page, or None when the page emits nothing.

        `image_number` is the document-wide number of the first image on this page.
        """
        seen: set[str] = set()
        elements: list[Element] = []
        rects: dict[int, Rectangle] = {}
        for el in page.elements:
            if el.id in seen:
                continue
            rect = element_to_rectangle(el)
            if rect is None:
                continue
            seen.add(el.id)
            elements.append(el)
            rects[id(el)] = rect

        layout = self.analyzer.analyze(rects[id(el)] for el in elements)
        pairs = {id(p.image): p for p in layout.image_text_pairs}

        blocks: list[str] = []
        images: list[ImagePayload] = []
        quoted: set[int] = set()
        text_blocks = 0
        for el in reading_order(elements, self.config.row_tolerance_px):
            rect = rects[id(el)]
            if el.kind == "text":
                if self.text_filter.is_valid(el.content):
                    blocks.append(el.content.strip())
                    text_blocks += 1
                continue

            position = position_label(rect, self.config.canvas_width, self.config.canvas_height)
            description = self.describe_image(el, rect, pairs.get(id(rect)), layout.images, quoted)
            blocks.append(f"[Image {image_number + len(images)} ({position}): {description}]")
            images.append(ImagePayload(element_id=el.id, src=el.src, description=description, position=position))

        if not blocks:
            return None

        header = f"## Page {page_index + 1}"
        if page.title.strip():
            header += f": {page.title.strip()}"
        return PageTranscript(
            page_id=page.id,
            page_index=page_index,
            text="\n".join([header] + blocks),
            images=tuple(images),
            text_blocks=text_blocks,
        )

    def assemble(self, document: ZineDocument) -> Transcript:
        pages: list[PageTranscript] = []
        image_number = 1
        for index, page in iter_pages(document):
            pt = self.assemble_page(page, index, image_number)
            if pt is None:
                continue
            image_number += len(pt.images)
            pages.append(pt)

        images = [img for p in pages for img in p.images]
        stats = {
            "pages_total": len(document.pages),
            "pages_with_content": len(pages),
            "text_blocks": sum(p.text_blocks for p in pages),
            "images_total": len(images),
            "images_with_caption": sum(1 for img in images if img.description.startswith('"')),
            "images_without_text": sum(1 for img in images if img.description.startswith("no nearby text")),
        }
        return Transcript(text="\n\n".join(p.text for p in pages), pages=tuple(pages), stats=stats)


def build_transcript(document: ZineDocument, spatial: SpatialConfig | None = None, config: TranscriptConfig | None = None) -> Transcript:
    return NarrativeAssembler(spatial or SpatialConfig(), config or TranscriptConfig()).assemble(document)
