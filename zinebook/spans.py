"""Text boundaries and the span-based pagination result.

Pages are spans into the trimmed narrative, so a page is always a verbatim
slice of the source and the whitespace between two pages (the "break") is
kept alongside. Rejoining pages with their breaks reproduces the trimmed
narrative exactly.
"""
from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Any

import numpy as np

STRATEGY_MEASURED = "measured"
STRATEGY_FALLBACK = "fallback"

# CJK terminators end a sentence anywhere; ASCII ones only before whitespace/end.
SENTENCE_END_RE = re.compile(
    r"[。！？]+[」』）〕】”’\"')\]]*"
    r"|[.!?…]+[\"')\]”’]*(?=\s|$)"
)
PARAGRAPH_BREAK_RE = re.compile(r"\r?\n[ \t　]*\r?\n\s*")


def paragraph_bounds(text: str) -> list[int]:
    """Offsets where a paragraph's text ends, always including len(text)."""
    bounds = [m.start() for m in PARAGRAPH_BREAK_RE.finditer(text)]
    bounds.append(len(text))
    return sorted(set(bounds))


def sentence_bounds(text: str) -> list[int]:
    """Offsets just after each sentence, plus every paragraph end."""
    bounds = {m.end() for m in SENTENCE_END_RE.finditer(text)}
    bounds.update(paragraph_bounds(text))
    return sorted(bounds)


def skip_ws(text: str, i: int) -> int:
    n = len(text)
    while i < n and text[i].isspace():
        i += 1
    return i


def strip_span(text: str, a: int, b: int) -> tuple[int, int]:
    a = skip_ws(text, a)
    while b > a and text[b - 1].isspace():
        b -= 1
    return a, b


@dataclass(frozen=True)
class Pagination:
    source: str  # trimmed narrative
    spans: tuple[tuple[int, int], ...] = ()
    strategy: str = STRATEGY_FALLBACK

    @property
    def pages(self) -> list[str]:
        return [self.source[a:b] for a, b in self.spans]

    @property
    def breaks(self) -> list[str]:
        return [self.source[b:a] for (_, b), (a, _) in zip(self.spans, self.spans[1:])]

    def __len__(self) -> int:
        return len(self.spans)

    def join(self, separator: str | None = None) -> str:
        """Rejoin pages; without a separator the original breaks are used."""
        if separator is not None:
            return separator.join(self.pages)
        out: list[str] = []
        prev_end: int | None = None
        for a, b in self.spans:
            if prev_end is not None:
                out.append(self.source[prev_end:a])
            out.append(self.source[a:b])
            prev_end = b
        return "".join(out)

    def length_stats(self) -> dict[str, float]:
        if not self.spans:
            return {"mean_chars": 0.0, "std_chars": 0.0, "min_chars": 0.0, "max_chars": 0.0}
        lengths = np.array([b - a for a, b in self.spans], dtype=np.float64)
        return {
            "mean_chars": round(float(lengths.mean()), 2),
            "std_chars": round(float(lengths.std()), 2),
            "min_chars": float(lengths.min()),
            "max_chars": float(lengths.max()),
        }

    def to_dict(self) -> dict[str, Any]:
        return {
            "strategy": self.strategy,
            "pages": self.pages,
            "breaks": self.breaks,
            "stats": self.length_stats(),
        }
