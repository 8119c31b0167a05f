from __future__ import annotations

import math
from dataclasses import dataclass, field, fields
from pathlib import Path
from typing import Any

from .utils import load_json


DEFAULT_BOILERPLATE_PATTERNS = [
    r"^クリックして編集$",
    r"^テキストを入力$",
    r"^サンプルテキスト$",
    r"^click to edit$",
    r"^enter text$",
    r"^new text$",
    r"^lorem ipsum",
    r"^placeholder",
    r"^\s*$",
    r"^[.\s]*$",
]


@dataclass(frozen=True)
class SpatialConfig:
    """Heuristics for relating text elements to images.

    Directional weights multiply the edge-to-edge distance; lower means a
    stronger relationship. They must stay strictly ordered
    overlap < below < side < above < diagonal.
    """
    weight_overlap: float = 0.1
    weight_below: float = 0.6  # captions under an image
    weight_side: float = 1.0
    weight_above: float = 1.2  # titles, headers
    weight_diagonal: float = 1.5
    # Text is "beside" the image when its center is within this fraction of
    # the image height from the image center.
    side_band_ratio: float = 0.3

    # Search radius = clamp(radius_factor * min(w, h), radius_min, radius_max)
    radius_factor: float = 0.6
    radius_min: float = 120.0
    radius_max: float = 220.0

    overlap_boost: float = 1.5
    below_boost: float = 1.3

    boilerplate_patterns: tuple[str, ...] = tuple(DEFAULT_BOILERPLATE_PATTERNS)

    def validate(self) -> None:
        weights = [
            self.weight_overlap,
            self.weight_below,
            self.weight_side,
            self.weight_above,
            self.weight_diagonal,
        ]
        if any(w < 0 for w in weights):
            raise ValueError("spatial weights must be non-negative")
        if any(a >= b for a, b in zip(weights, weights[1:])):
            raise ValueError(
                "spatial weights must be ordered overlap < below < side < above < diagonal, "
                f"got {weights}"
            )
        if self.radius_min <= 0 or self.radius_max < self.radius_min:
            raise ValueError("spatial radius bounds must satisfy 0 < radius_min <= radius_max")


@dataclass(frozen=True)
class TranscriptConfig:
    row_tolerance_px: float = 50.0
    max_excerpts: int = 3
    excerpt_max_chars: int = 80
    # Logical canvas of one page
    canvas_width: float = 1400.0
    canvas_height: float = 900.0

    def validate(self) -> None:
        if self.canvas_width <= 0 or self.canvas_height <= 0:
            raise ValueError("transcript canvas size must be positive")
        if self.max_excerpts < 0 or self.excerpt_max_chars < 1:
            raise ValueError("transcript excerpt limits must be positive")


@dataclass(frozen=True)
class PaginationConfig:
    separator: str = "\n\n"
    chars_per_page: int = 600  # fallback capacity

    # Measurement surface (Pillow). Tried in order; none loading => fallback.
    font_paths: tuple[str, ...] = (
        "Georgia.ttf",
        "DejaVuSerif.ttf",
        "NotoSerifCJK-Regular.ttc",
        "/usr/share/fonts/truetype/dejavu/DejaVuSerif.ttf",
    )
    font_size: int = 18
    line_height: float = 2.2
    page_padding_x: float = 64.0
    page_padding_y: float = 80.0

    # Balancer
    short_fill_ratio: float = 0.3
    long_fill_ratio: float = 0.8
    long_factor: float = 3.0
    max_sentences_moved: int = 3

    def validate(self) -> None:
        if self.chars_per_page < 1:
            raise ValueError("pagination.chars_per_page must be >= 1")
        if self.font_size < 1 or self.line_height <= 0:
            raise ValueError("pagination font metrics must be positive")
        if self.max_sentences_moved < 0:
            raise ValueError("pagination.max_sentences_moved must be >= 0")


@dataclass(frozen=True)
class GenerationConfig:
    short_target: str = "2000-4000"
    long_target: str = "5000-8000"


@dataclass(frozen=True)
class EngineConfig:
    spatial: SpatialConfig = field(default_factory=SpatialConfig)
    transcript: TranscriptConfig = field(default_factory=TranscriptConfig)
    pagination: PaginationConfig = field(default_factory=PaginationConfig)
    generation: GenerationConfig = field(default_factory=GenerationConfig)


def _coerce(section: str, name: str, default: Any, value: Any) -> Any:
    """Convert a JSON value to the type of the field default; ValueError on mismatch."""
    where = f"{section}.{name}"
    if isinstance(default, bool):
        if not isinstance(value, bool):
            raise ValueError(f"{where} must be a boolean, got {value!r}")
        return value
    if isinstance(default, (int, float)):
        if isinstance(value, bool) or not isinstance(value, (int, float, str)):
            raise ValueError(f"{where} must be a number, got {value!r}")
        try:
            number = float(value)
        except ValueError:
            raise ValueError(f"{where} must be a number, got {value!r}") from None
        if not math.isfinite(number):
            raise ValueError(f"{where} must be finite, got {value!r}")
        if isinstance(default, int):
            if not number.is_integer():
                raise ValueError(f"{where} must be an integer, got {value!r}")
            return int(number)
        return number
    if isinstance(default, str):
        if not isinstance(value, str):
            raise ValueError(f"{where} must be a string, got {value!r}")
        return value
    if isinstance(default, tuple):
        # JSON arrays land in tuple-typed fields
        if not isinstance(value, (list, tuple)) or not all(isinstance(v, str) for v in value):
            raise ValueError(f"{where} must be a list of strings, got {value!r}")
        return tuple(value)
    return value


def _section(cls: type, data: Any) -> Any:
    if not isinstance(data, dict):
        return cls()
    defaults = {f.name: f.default for f in fields(cls)}
    kwargs: dict[str, Any] = {}
    for k, v in data.items():
        if k not in defaults:
            continue
        kwargs[k] = _coerce(cls.__name__, k, defaults[k], v)
    return cls(**kwargs)


def config_from_dict(data: dict[str, Any]) -> EngineConfig:
    cfg = EngineConfig(
        spatial=_section(SpatialConfig, data.get("spatial")),
        transcript=_section(TranscriptConfig, data.get("transcript")),
        pagination=_section(PaginationConfig, data.get("pagination")),
        generation=_section(GenerationConfig, data.get("generation")),
    )
    cfg.spatial.validate()
    cfg.transcript.validate()
    cfg.pagination.validate()
    return cfg


def load_config(config_path: str | Path | None) -> EngineConfig:
    if config_path is None:
        return config_from_dict({})
    data = load_json(config_path)
    return config_from_dict(data if isinstance(data, dict) else {})
