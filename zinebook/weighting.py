from __future__ import annotations

from dataclasses import dataclass, field
from typing import Literal

from .config import SpatialConfig
from .geometry import center_offset, distance, overlaps
from .types import Rectangle

WeightClass = Literal["overlap", "below", "side", "above", "diagonal"]


@dataclass
class DirectionalWeighting:
    """Turn a raw distance into a priority-adjusted weighted distance."""
    config: SpatialConfig = field(default_factory=SpatialConfig)

    def classify(self, anchor: Rectangle, candidate: Rectangle) -> WeightClass:
        if overlaps(anchor, candidate):
            return "overlap"

        dx, dy = center_offset(anchor, candidate)

        # Captions below the image: below AND vertically dominant.
        if dy > 0 and abs(dy) > abs(dx):
            return "below"

        if abs(dy) < anchor.height * self.config.side_band_ratio:
            return "side"

        if dy < 0:
            return "above"

        return "diagonal"

    def weight_for(self, weight_class: WeightClass) -> float:
        cfg = self.config
        return {
            "overlap": cfg.weight_overlap,
            "below": cfg.weight_below,
            "side": cfg.weight_side,
            "above": cfg.weight_above,
            "diagonal": cfg.weight_diagonal,
        }[weight_class]

    def weight(self, anchor: Rectangle, candidate: Rectangle) -> float:
        return self.weight_for(self.classify(anchor, candidate))

    def weighted_distance(self, anchor: Rectangle, candidate: Rectangle) -> tuple[float, float]:
        """Return (raw distance, weighted distance)."""
        raw = distance(anchor, candidate)
        return raw, raw * self.weight(anchor, candidate)
