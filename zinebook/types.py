from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Literal

Direction = Literal["above", "below", "left", "right", "overlapping"]
ElementKind = Literal["image", "text"]


@dataclass(frozen=True)
class Rectangle:
    """Axis-aligned rectangle in page-local, unscaled canvas coordinates."""
    x: float
    y: float
    width: float
    height: float
    content: str = ""
    kind: ElementKind | None = None
    id: str | None = None

    def __post_init__(self) -> None:
        # Negative sizes are treated as degenerate rather than rejected.
        if self.width < 0:
            object.__setattr__(self, "width", 0.0)
        if self.height < 0:
            object.__setattr__(self, "height", 0.0)

    @property
    def x1(self) -> float:
        return self.x + self.width

    @property
    def y1(self) -> float:
        return self.y + self.height

    @property
    def center(self) -> tuple[float, float]:
        return (self.x + self.width / 2, self.y + self.height / 2)

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "kind": self.kind,
            "x": self.x,
            "y": self.y,
            "width": self.width,
            "height": self.height,
            "content": self.content,
        }


@dataclass(frozen=True)
class SpatialRelationship:
    element: Rectangle
    distance: float
    weighted_distance: float
    direction: Direction
    confidence: float  # 0..1

    def to_dict(self) -> dict[str, Any]:
        return {
            "element_id": self.element.id,
            "content": self.element.content,
            "distance": round(float(self.distance), 3),
            "weighted_distance": round(float(self.weighted_distance), 3),
            "direction": self.direction,
            "confidence": round(float(self.confidence), 4),
        }


@dataclass(frozen=True)
class ImageTextPair:
    image: Rectangle
    related_text: tuple[SpatialRelationship, ...]  # ascending weighted_distance

    @property
    def primary_text(self) -> SpatialRelationship | None:
        return self.related_text[0] if self.related_text else None


@dataclass(frozen=True)
class PageLayout:
    images: tuple[Rectangle, ...]
    text_elements: tuple[Rectangle, ...]
    image_text_pairs: tuple[ImageTextPair, ...]

    def to_dict(self) -> dict[str, Any]:
        return {
            "images": len(self.images),
            "text_elements": len(self.text_elements),
            "pairs": [
                {
                    "image_id": p.image.id,
                    "primary_text_id": p.primary_text.element.id if p.primary_text else None,
                    "related_text": [r.to_dict() for r in p.related_text],
                }
                for p in self.image_text_pairs
            ],
        }


@dataclass(frozen=True)
class Element:
    """A positioned zine element as persisted by the editor."""
    id: str
    kind: str  # text, image, shape, ...
    x: float = 0.0
    y: float = 0.0
    width: float = 0.0
    height: float = 0.0
    content: str = ""
    src: str = ""
    caption: str = ""
    alt: str = ""


@dataclass(frozen=True)
class ZinePage:
    id: str
    title: str = ""
    elements: tuple[Element, ...] = ()


@dataclass(frozen=True)
class ZineDocument:
    id: str
    title: str = ""
    pages: tuple[ZinePage, ...] = ()


@dataclass(frozen=True)
class Viewport:
    width: float = 1400.0
    height: float = 900.0


@dataclass(frozen=True)
class Spread:
    index: int  # 0-based
    left: str
    right: str | None = None

