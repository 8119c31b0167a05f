"""Two-page spread view over a paginated narrative."""
from __future__ import annotations

import logging
import math
from collections import OrderedDict
from dataclasses import dataclass, field
from typing import Any

from .paginator import Paginator
from .spans import Pagination
from .types import Spread, Viewport

logger = logging.getLogger(__name__)


def spread_count(n_pages: int) -> int:
    return math.ceil(max(0, n_pages) / 2)


def build_spreads(pages: list[str]) -> list[Spread]:
    """Pair pages (0,1), (2,3), ...; an odd last page has no right side."""
    spreads: list[Spread] = []
    for i in range(spread_count(len(pages))):
        left = pages[2 * i]
        right = pages[2 * i + 1] if 2 * i + 1 < len(pages) else None
        spreads.append(Spread(index=i, left=left, right=right))
    return spreads


@dataclass
class SpreadReader:
    """Keeps the pagination of one narrative current for one viewport.

    Any change of text or viewport triggers a full re-split; identical inputs
    are served from a small LRU cache of `cache_size` entries. Every recompute
    starts a new generation and only the newest generation's result is
    published, so a slow recompute finishing late never overwrites a newer one.
    """
    paginator: Paginator = field(default_factory=Paginator)
    text: str = ""
    viewport: Viewport = field(default_factory=Viewport)
    cache_size: int = 2

    def __post_init__(self):
        self._cache: OrderedDict[tuple[str, Viewport], Pagination] = OrderedDict()
        self._generation = 0
        self._current: Pagination | None = None
        self._current_key: tuple[str, Viewport] | None = None

    @property
    def key(self) -> tuple[str, Viewport]:
        return (self.text, self.viewport)

    @property
    def generation(self) -> int:
        return self._generation

    def begin(self) -> int:
        """Start a new generation and return its token."""
        self._generation += 1
        return self._generation

    def publish(self, generation: int, key: tuple[str, Viewport], result: Pagination) -> bool:
        """Publish a finished result; results from superseded generations are dropped."""
        if generation != self._generation:
            logger.debug("dropping stale pagination (generation %d, current %d)", generation, self._generation)
            return False
        self._remember(key, result)
        self._current = result
        self._current_key = key
        return True

    def _remember(self, key: tuple[str, Viewport], result: Pagination) -> None:
        self._cache[key] = result
        self._cache.move_to_end(key)
        while len(self._cache) > max(1, self.cache_size):
            self._cache.popitem(last=False)

    def recompute(self) -> Pagination:
        key = self.key
        cached = self._cache.get(key)
        if cached is not None:
            self._cache.move_to_end(key)
            self._current = cached
            self._current_key = key
            return cached

        generation = self.begin()
        result = self.paginator.paginate(key[0], key[1])
        self.publish(generation, key, result)
        return result

    def update(self, text: str | None = None, viewport: Viewport | None = None) -> Pagination:
        if text is not None:
            self.text = text
        if viewport is not None:
            self.viewport = viewport
        return self.recompute()

    @property
    def pagination(self) -> Pagination:
        if self._current is None or self._current_key != self.key:
            return self.recompute()
        return self._current

    @property
    def pages(self) -> list[str]:
        return self.pagination.pages

    @property
    def spreads(self) -> list[Spread]:
        return build_spreads(self.pages)

    @property
    def spread_count(self) -> int:
        return spread_count(len(self.pagination))

    def to_dict(self) -> dict[str, Any]:
        return {
            "viewport": {"width": self.viewport.width, "height": self.viewport.height},
            "generation": self._generation,
            "spreads": [{"index": s.index, "left": s.left, "right": s.right} for s in self.spreads],
        }
