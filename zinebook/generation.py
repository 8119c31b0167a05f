"""Requests to the external prose generator.

The generator itself is out of process (a hosted model); this module only
builds the request from a transcript and story settings and defines the
interface the pipeline calls.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Literal, Protocol

from .config import GenerationConfig
from .transcript import Transcript

Length = Literal["short", "long"]

_GENRE_LABELS = {"sf": "science fiction", "romcom": "romantic comedy"}


class GenerationError(RuntimeError):
    pass


@dataclass(frozen=True)
class NovelSettings:
    genre: str = "sf"
    keywords: str = ""
    character_name: str = ""
    personality: str = ""
    scenario: str = ""
    length: Length = "short"

    def __post_init__(self) -> None:
        if self.length not in ("short", "long"):
            raise ValueError(f"length must be 'short' or 'long', got {self.length!r}")


@dataclass(frozen=True)
class GenerationRequest:
    concept: str
    world: str
    prompt: str
    transcript: str = ""
    images: tuple[dict[str, Any], ...] = ()

    def to_dict(self) -> dict[str, Any]:
        return {
            "concept": self.concept,
            "world": self.world,
            "prompt": self.prompt,
            "transcript": self.transcript,
            "images": list(self.images),
        }


class ProseGenerator(Protocol):
    def generate(self, request: GenerationRequest) -> str: ...


@dataclass
class StaticProseGenerator:
    """Returns pre-generated prose; records the requests it was given."""
    text: str
    requests: list[GenerationRequest] = field(default_factory=list)

    def generate(self, request: GenerationRequest) -> str:
        self.requests.append(request)
        return self.text


def length_target(settings: NovelSettings, config: GenerationConfig) -> str:
    return config.short_target if settings.length == "short" else config.long_target


def build_generation_request(
    transcript: Transcript,
    settings: NovelSettings | None = None,
    config: GenerationConfig | None = None,
) -> GenerationRequest:
    settings = settings or NovelSettings()
    config = config or GenerationConfig()

    kind = "short story" if settings.length == "short" else "novel"
    genre = _GENRE_LABELS.get(settings.genre, settings.genre)
    concept = " ".join(p for p in (kind, genre, settings.keywords.strip()) if p)
    world = (
        f"Character name: {settings.character_name}, "
        f"personality: {settings.personality}, "
        f"scenario: {settings.scenario}"
    )
    prompt = (
        f"Using the settings above and the zine content below, write a complete {kind} "
        f"of {length_target(settings, config)} characters, organised into chapters "
        f"with a clear beginning, development, turn and conclusion.\n\n"
        f"{transcript.text}"
    )
    return GenerationRequest(
        concept=concept,
        world=world,
        prompt=prompt,
        transcript=transcript.text,
        images=tuple(img.to_dict() for img in transcript.images),
    )
