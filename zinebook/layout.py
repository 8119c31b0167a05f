from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterable

from .config import SpatialConfig
from .resolver import NearbyTextResolver
from .types import Element, ImageTextPair, PageLayout, Rectangle


def element_to_rectangle(element: Element) -> Rectangle | None:
    """Map an editor element to an analysis rectangle; None for non image/text kinds."""
    if element.kind not in ("image", "text"):
        return None
    if element.kind == "image":
        content = element.caption or element.alt
    else:
        content = element.content
    return Rectangle(
        x=element.x,
        y=element.y,
        width=element.width,
        height=element.height,
        content=content or "",
        kind=element.kind,
        id=element.id,
    )


def elements_to_rectangles(elements: Iterable[Element]) -> list[Rectangle]:
    out: list[Rectangle] = []
    for el in elements:
        rect = element_to_rectangle(el)
        if rect is not None:
            out.append(rect)
    return out


@dataclass
class PageLayoutAnalyzer:
    """Partition a page's rectangles and relate every image to nearby text.

    Holds only configuration; each call builds a fresh PageLayout, so one
    analyzer may be shared across pages and threads.
    """
    config: SpatialConfig = field(default_factory=SpatialConfig)

    def __post_init__(self):
        self.resolver = NearbyTextResolver(self.config)

    def analyze(self, rectangles: Iterable[Rectangle]) -> PageLayout:
        rects = list(rectangles)
        images = tuple(r for r in rects if r.kind == "image")
        text_elements = tuple(r for r in rects if r.kind == "text")

        pairs = tuple(
            ImageTextPair(image=image, related_text=tuple(self.resolver.find_all(image, text_elements)))
            for image in images
        )
        return PageLayout(images=images, text_elements=text_elements, image_text_pairs=pairs)

    def analyze_elements(self, elements: Iterable[Element]) -> PageLayout:
        return self.analyze(elements_to_rectangles(elements))


def analyze_page_layout(rectangles: Iterable[Rectangle], config: SpatialConfig | None = None) -> PageLayout:
    return PageLayoutAnalyzer(config or SpatialConfig()).analyze(rectangles)
