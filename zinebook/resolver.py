"""Nearby-text resolution for a single anchor image.

Candidates are scored by a direction-weighted distance and only those within a
size-adaptive radius are considered. Unlike one-to-one pairing, every candidate
in range is returned in ranked order so callers can pick the best match or keep
the full list.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterable

from .cleaner import TextValidityFilter
from .config import SpatialConfig
from .geometry import distance, relative_direction
from .types import Rectangle, SpatialRelationship
from .utils import clamp
from .weighting import DirectionalWeighting


@dataclass
class NearbyTextResolver:
    config: SpatialConfig = field(default_factory=SpatialConfig)

    def __post_init__(self):
        self.weighting = DirectionalWeighting(self.config)
        self.text_filter = TextValidityFilter(self.config.boilerplate_patterns)

    def search_radius(self, image: Rectangle) -> float:
        """Larger images may relate to farther captions, within fixed bounds."""
        base = self.config.radius_factor * min(image.width, image.height)
        return clamp(base, self.config.radius_min, self.config.radius_max)

    def relate(self, image: Rectangle, text: Rectangle, radius: float | None = None) -> SpatialRelationship | None:
        """Relationship between `image` and `text`, or None when out of range or ineligible."""
        if not self.text_filter.is_valid(text.content):
            return None

        if radius is None:
            radius = self.search_radius(image)

        raw, weighted = self.weighting.weighted_distance(image, text)
        if raw > radius:
            return None

        direction = relative_direction(image, text)
        confidence = clamp(1.0 - weighted / radius, 0.0, 1.0)
        if direction == "overlapping":
            confidence *= self.config.overlap_boost
        elif direction == "below":
            confidence *= self.config.below_boost

        return SpatialRelationship(
            element=text,
            distance=raw,
            weighted_distance=weighted,
            direction=direction,
            confidence=clamp(confidence, 0.0, 1.0),
        )

    def find_all(self, image: Rectangle, candidates: Iterable[Rectangle]) -> list[SpatialRelationship]:
        """All related text within radius, ascending by weighted distance.

        Sorting is stable, so ties keep input order.
        """
        radius = self.search_radius(image)
        relationships: list[SpatialRelationship] = []
        for text in candidates:
            rel = self.relate(image, text, radius)
            if rel is not None:
                relationships.append(rel)
        return sorted(relationships, key=lambda r: r.weighted_distance)

    def find_best(self, image: Rectangle, candidates: Iterable[Rectangle]) -> SpatialRelationship | None:
        ranked = self.find_all(image, candidates)
        return ranked[0] if ranked else None

    def count_nearby_images(self, image: Rectangle, images: Iterable[Rectangle]) -> int:
        """Other images whose edges lie within this image's search radius."""
        radius = self.search_radius(image)
        return sum(1 for other in images if other is not image and distance(image, other) <= radius)
