"""Rectangle geometry primitives.

All functions are pure and total: degenerate (zero-size) rectangles are legal
and nothing here raises for odd geometry.
"""
from __future__ import annotations

import numpy as np

from .types import Direction, Rectangle


def area(rect: Rectangle) -> float:
    return rect.width * rect.height


def overlaps(a: Rectangle, b: Rectangle) -> bool:
    """True iff both axis projections intersect. Touching edges do not overlap."""
    return not (
        a.x1 <= b.x
        or b.x1 <= a.x
        or a.y1 <= b.y
        or b.y1 <= a.y
    )


def distance(a: Rectangle, b: Rectangle) -> float:
    """Euclidean distance between the nearest edges; 0 when overlapping."""
    dx = max(0.0, a.x - b.x1, b.x - a.x1)
    dy = max(0.0, a.y - b.y1, b.y - a.y1)
    return float(np.hypot(dx, dy))


def intersection_area(a: Rectangle, b: Rectangle) -> float:
    iw = max(0.0, min(a.x1, b.x1) - max(a.x, b.x))
    ih = max(0.0, min(a.y1, b.y1) - max(a.y, b.y))
    return iw * ih


def iou(a: Rectangle, b: Rectangle) -> float:
    """Intersection over Union; 0 when the union is empty."""
    intersection = intersection_area(a, b)
    union = area(a) + area(b) - intersection
    if union <= 0:
        return 0.0
    return intersection / union


def center_offset(anchor: Rectangle, candidate: Rectangle) -> tuple[float, float]:
    """(dx, dy) from the anchor center to the candidate center."""
    ax, ay = anchor.center
    cx, cy = candidate.center
    return (cx - ax, cy - ay)


def relative_direction(anchor: Rectangle, candidate: Rectangle) -> Direction:
    """Primary direction of `candidate` as seen from `anchor`.

    Overlap wins; otherwise the dominant axis of the center offset decides.
    Equal offsets resolve to the horizontal axis.
    """
    if overlaps(anchor, candidate):
        return "overlapping"
    dx, dy = center_offset(anchor, candidate)
    if abs(dy) > abs(dx):
        return "below" if dy > 0 else "above"
    return "right" if dx > 0 else "left"
