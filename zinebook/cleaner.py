from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from .config import DEFAULT_BOILERPLATE_PATTERNS
from .utils import compile_patterns


@dataclass
class TextValidityFilter:
    """Decide whether a text element may take part in spatial relationships.

    Empty text and editor boilerplate (placeholders, lorem ipsum) are
    excluded silently.
    """
    boilerplate_patterns: list[str] | tuple[str, ...] = field(
        default_factory=lambda: list(DEFAULT_BOILERPLATE_PATTERNS)
    )

    def __post_init__(self):
        """Compile patterns once on initialization."""
        self._patterns = compile_patterns(list(self.boilerplate_patterns))

    def is_valid(self, text: Any) -> bool:
        if not isinstance(text, str):
            return False
        trimmed = text.strip()
        if not trimmed:
            return False
        return not any(p.search(trimmed) for p in self._patterns)


def is_valid_text_content(text: Any) -> bool:
    return _DEFAULT_FILTER.is_valid(text)


_DEFAULT_FILTER = TextValidityFilter()
