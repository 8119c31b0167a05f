from __future__ import annotations

import bisect
from dataclasses import dataclass, field, replace
from typing import TYPE_CHECKING

from .config import PaginationConfig
from .spans import Pagination, sentence_bounds, skip_ws

if TYPE_CHECKING:
    from .paginator import PageBudget


@dataclass
class PageBalancer:
    """Single-pass post-processing of greedy page breaks.

    For each adjacent page pair, left to right: when the first page is very
    short and the second comparatively very long, whole sentences move from the
    start of the second page to the end of the first. Only that direction is
    balanced and the pass does not iterate to convergence.
    """
    config: PaginationConfig = field(default_factory=PaginationConfig)

    def needs_rebalance(self, first_fill: float, second_fill: float) -> bool:
        cfg = self.config
        return (
            first_fill < cfg.short_fill_ratio
            and second_fill >= cfg.long_fill_ratio
            and second_fill >= cfg.long_factor * first_fill
        )

    def balance(self, pagination: Pagination, budget: "PageBudget") -> Pagination:
        if len(pagination.spans) < 2 or self.config.max_sentences_moved <= 0:
            return pagination

        text = pagination.source
        sents = sentence_bounds(text)
        spans = list(pagination.spans)

        for i in range(len(spans) - 1):
            a1, b1 = spans[i]
            a2, b2 = spans[i + 1]
            if not self.needs_rebalance(budget.fill(text[a1:b1]), budget.fill(text[a2:b2])):
                continue

            moved = 0
            # Bounds strictly inside the second page; b2 itself would empty it.
            for bound in sents[bisect.bisect_right(sents, a2):bisect.bisect_left(sents, b2)]:
                if moved >= self.config.max_sentences_moved:
                    break
                candidate = text[a1:bound].rstrip()
                if not budget.fits(candidate):
                    break
                next_start = skip_ws(text, bound)
                if next_start >= b2:
                    break
                spans[i] = (a1, a1 + len(candidate))
                spans[i + 1] = (next_start, b2)
                moved += 1

        return replace(pagination, spans=tuple(spans))
