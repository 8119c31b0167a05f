"""Off-screen text measurement.

A measurer answers one question: given this text at a fixed font, font size,
line height and box width, how tall is the rendered result in pixels? The
paginator uses it when available and falls back to character budgets when
`load_measurer` returns None.
"""
from __future__ import annotations

import logging
import math
import re
from dataclasses import dataclass
from typing import Protocol, Sequence

from PIL import ImageFont

from .config import PaginationConfig

logger = logging.getLogger(__name__)

_TOKEN_RE = re.compile(r"\S+\s*|\s+")


class TextMeasurer(Protocol):
    def measure(self, text: str, width: float) -> float:
        """Rendered height in pixels of `text` wrapped at `width`."""
        ...


@dataclass
class PillowTextMeasurer:
    font: ImageFont.FreeTypeFont | ImageFont.ImageFont
    font_size: int = 18
    line_height: float = 2.2

    @property
    def line_px(self) -> float:
        return self.font_size * self.line_height

    def text_width(self, text: str) -> float:
        try:
            return float(self.font.getlength(text))
        except Exception:
            bbox = self.font.getbbox(text)
            return float(bbox[2] - bbox[0])

    def _break_long_token(self, token: str, max_width: float) -> list[str]:
        parts: list[str] = []
        cur = ""
        for ch in token:
            trial = cur + ch
            if cur and self.text_width(trial) > max_width:
                parts.append(cur)
                cur = ch
            else:
                cur = trial
        if cur:
            parts.append(cur)
        return parts

    def wrap(self, text: str, max_width: float) -> list[str]:
        """Greedy wrap; explicit newlines always break, over-wide tokens break per character."""
        if max_width <= 0:
            return text.split("\n")

        lines: list[str] = []
        for raw_line in text.split("\n"):
            if not raw_line.strip():
                lines.append("")
                continue
            start = len(lines)
            cur = ""
            for token in _TOKEN_RE.findall(raw_line):
                trial = cur + token
                if self.text_width(trial.rstrip()) <= max_width:
                    cur = trial
                    continue
                if cur.strip():
                    lines.append(cur.rstrip())
                word = token.strip()
                # keep the separator so the next word is measured after it
                sep = token[len(word):] if word else ""
                if not word:
                    cur = ""
                elif self.text_width(word) <= max_width:
                    cur = word + sep
                else:
                    pieces = self._break_long_token(word, max_width)
                    lines.extend(pieces[:-1])
                    cur = pieces[-1] + sep if pieces else ""
            if cur.strip() or len(lines) == start:
                lines.append(cur.rstrip())
        return lines

    def measure(self, text: str, width: float) -> float:
        if not text:
            return 0.0
        return len(self.wrap(text, width)) * self.line_px


@dataclass
class CharGridMeasurer:
    """Deterministic measurer on a fixed character grid.

    Every character is `char_width` pixels wide; useful where no font is
    available but a height-aware layout is still wanted.
    """
    char_width: float = 18.0
    line_px: float = 39.6

    def measure(self, text: str, width: float) -> float:
        if not text:
            return 0.0
        per_line = max(1, int(width // self.char_width)) if width > 0 else 1
        lines = sum(max(1, math.ceil(len(line) / per_line)) for line in text.split("\n"))
        return lines * self.line_px


def load_font(font_paths: Sequence[str], size: int) -> ImageFont.FreeTypeFont | None:
    for path in font_paths:
        try:
            return ImageFont.truetype(path, size=size)
        except OSError:
            continue
    return None


def load_measurer(config: PaginationConfig) -> PillowTextMeasurer | None:
    """Pillow-backed measurer from the configured fonts, or None when none loads."""
    font = load_font(config.font_paths, config.font_size)
    if font is None:
        logger.debug("no measurement font found in %s; pagination will use the character budget", list(config.font_paths))
        return None
    return PillowTextMeasurer(font=font, font_size=config.font_size, line_height=config.line_height)
