"""Split a narrative into page-sized chunks.

Growth is greedy: whole paragraphs while they fit, then whole sentences
inside a paragraph that does not fit alone, then a hard cut inside a sentence
that does not fit alone. "Fits" is decided by a budget: rendered height when a
measurement surface is available, a character count otherwise. A single
balancing pass runs afterwards.
"""
from __future__ import annotations

import bisect
import logging
from dataclasses import dataclass, field
from typing import Protocol

from .balancer import PageBalancer
from .config import PaginationConfig
from .measure import TextMeasurer
from .spans import (
    STRATEGY_FALLBACK,
    STRATEGY_MEASURED,
    Pagination,
    paragraph_bounds,
    sentence_bounds,
    skip_ws,
    strip_span,
)
from .types import Viewport

logger = logging.getLogger(__name__)


# ═══════════════════════════════════════════════════════════════════════════════
# BUDGETS
# ═══════════════════════════════════════════════════════════════════════════════

class PageBudget(Protocol):
    strategy: str

    def fits(self, text: str) -> bool: ...

    def fill(self, text: str) -> float: ...


@dataclass
class CharBudget:
    capacity: int = 600
    strategy: str = STRATEGY_FALLBACK

    def fits(self, text: str) -> bool:
        return len(text) <= self.capacity

    def fill(self, text: str) -> float:
        return len(text) / self.capacity


@dataclass
class HeightBudget:
    measurer: TextMeasurer
    width: float
    height: float
    strategy: str = STRATEGY_MEASURED

    def fits(self, text: str) -> bool:
        return self.measurer.measure(text, self.width) <= self.height

    def fill(self, text: str) -> float:
        return self.measurer.measure(text, self.width) / self.height


@dataclass(frozen=True)
class PageBox:
    """Text box of one page of a two-page spread."""
    width: float
    height: float

    @classmethod
    def from_viewport(cls, viewport: Viewport, config: PaginationConfig) -> "PageBox":
        width = viewport.width / 2 - 2 * config.page_padding_x
        height = viewport.height - 2 * config.page_padding_y
        return cls(width=max(1.0, width), height=max(1.0, height))


# ═══════════════════════════════════════════════════════════════════════════════
# GREEDY SPLIT
# ═══════════════════════════════════════════════════════════════════════════════

def _grow(text: str, start: int, bounds: list[int], budget: PageBudget) -> int | None:
    """Furthest bound reached by adding units one at a time while they fit."""
    best: int | None = None
    for b in bounds:
        if b <= start:
            continue
        if budget.fits(text[start:b].rstrip()):
            best = b
        else:
            break
    return best


def _hard_cut(text: str, start: int, limit: int, budget: PageBudget) -> int:
    """Longest fitting prefix of text[start:limit]; at least one character."""
    lo, hi = 1, max(1, limit - start)
    while lo < hi:
        mid = (lo + hi + 1) // 2
        if budget.fits(text[start:start + mid].rstrip()):
            lo = mid
        else:
            hi = mid - 1
    return start + lo


def split_spans(text: str, budget: PageBudget) -> list[tuple[int, int]]:
    """Greedy page spans over `text` (expected already trimmed)."""
    paras = paragraph_bounds(text)
    sents = sentence_bounds(text)
    spans: list[tuple[int, int]] = []

    start = skip_ws(text, 0)
    while start < len(text):
        next_para = bisect.bisect_right(paras, start)
        end = _grow(text, start, paras[next_para:], budget)

        if end is None:
            # The paragraph at `start` does not fit alone: grow by sentences inside it.
            lo = bisect.bisect_right(sents, start)
            hi = bisect.bisect_right(sents, paras[next_para])
            end = _grow(text, start, sents[lo:hi], budget)

        if end is None:
            end = _hard_cut(text, start, sents[bisect.bisect_right(sents, start)], budget)

        a, b = strip_span(text, start, end)
        if b > a:
            spans.append((a, b))
        start = skip_ws(text, end)
    return spans


# ═══════════════════════════════════════════════════════════════════════════════
# PAGINATOR
# ═══════════════════════════════════════════════════════════════════════════════

@dataclass
class Paginator:
    config: PaginationConfig = field(default_factory=PaginationConfig)
    measurer: TextMeasurer | None = None
    balance: bool = True

    def __post_init__(self):
        self.balancer = PageBalancer(self.config)

    def budget_for(self, viewport: Viewport | None = None) -> PageBudget:
        if self.measurer is None:
            return CharBudget(capacity=self.config.chars_per_page)
        box = PageBox.from_viewport(viewport or Viewport(), self.config)
        return HeightBudget(measurer=self.measurer, width=box.width, height=box.height)

    def _split(self, source: str, budget: PageBudget) -> Pagination:
        pagination = Pagination(source=source, spans=tuple(split_spans(source, budget)), strategy=budget.strategy)
        if self.balance:
            pagination = self.balancer.balance(pagination, budget)
        return pagination

    def paginate(self, text: str | None, viewport: Viewport | None = None) -> Pagination:
        source = text.strip() if isinstance(text, str) else ""
        budget = self.budget_for(viewport)
        if not source:
            return Pagination(source="", spans=(), strategy=budget.strategy)

        if budget.strategy == STRATEGY_MEASURED:
            try:
                return self._split(source, budget)
            except Exception as e:
                # fail-soft: a broken measurement surface degrades to the character budget
                logger.warning("measured pagination failed (%s); using character budget", e)
                budget = CharBudget(capacity=self.config.chars_per_page)

        return self._split(source, budget)


def paginate(
    text: str | None,
    viewport: Viewport | None = None,
    config: PaginationConfig | None = None,
    measurer: TextMeasurer | None = None,
) -> list[str]:
    """Page chunks for `text`; measured when `measurer` is given, else character-budgeted."""
    return Paginator(config or PaginationConfig(), measurer=measurer).paginate(text, viewport).pages
