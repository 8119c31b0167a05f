from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any

from .config import EngineConfig
from .document import iter_pages
from .generation import GenerationError, GenerationRequest, NovelSettings, ProseGenerator, build_generation_request
from .job import JobPaths, record_error
from .layout import PageLayoutAnalyzer, elements_to_rectangles
from .measure import TextMeasurer
from .notifier import LoggingNotifier, Notifier
from .paginator import Paginator
from .reader import build_spreads
from .spans import Pagination
from .transcript import NarrativeAssembler, Transcript
from .types import Spread, Viewport, ZineDocument
from .utils import utc_now_iso
from .writer import JobWriter

logger = logging.getLogger(__name__)


@dataclass
class ConversionResult:
    transcript: Transcript
    request: GenerationRequest
    narrative: str
    pagination: Pagination
    spreads: list[Spread] = field(default_factory=list)

    @property
    def pages(self) -> list[str]:
        return self.pagination.pages


class ConversionPipeline:
    """Zine document -> transcript -> generated prose -> paginated spreads."""

    def __init__(
        self,
        cfg: EngineConfig,
        generator: ProseGenerator,
        notifier: Notifier | None = None,
        measurer: TextMeasurer | None = None,
        settings: NovelSettings | None = None,
    ):
        self.cfg = cfg
        self.generator = generator
        self.notifier = notifier or LoggingNotifier()
        self.settings = settings or NovelSettings()

        self.analyzer = PageLayoutAnalyzer(cfg.spatial)
        self.assembler = NarrativeAssembler(spatial=cfg.spatial, config=cfg.transcript)
        self.paginator = Paginator(cfg.pagination, measurer=measurer)

    def analyze(self, document: ZineDocument) -> dict[str, Any]:
        pages = []
        for index, page in iter_pages(document):
            layout = self.analyzer.analyze(elements_to_rectangles(page.elements))
            pages.append({"page_id": page.id, "page_index": index, **layout.to_dict()})
        return {"document_id": document.id, "pages": pages}

    def generate(self, transcript: Transcript) -> tuple[GenerationRequest, str]:
        request = build_generation_request(transcript, self.settings, self.cfg.generation)
        try:
            narrative = self.generator.generate(request)
        except Exception as e:
            self.notifier.notify("error", "Novel generation failed", str(e))
            raise GenerationError(str(e)) from e
        if not isinstance(narrative, str):
            self.notifier.notify("error", "Novel generation failed", "generator returned no text")
            raise GenerationError(f"generator returned {type(narrative).__name__}, expected str")
        return request, narrative

    def paginate(self, narrative: str, viewport: Viewport | None = None) -> Pagination:
        pagination = self.paginator.paginate(narrative, viewport)
        if not pagination.spans:
            self.notifier.notify("warning", "Generated novel is empty", "nothing to paginate")
        return pagination

    def run(self, document: ZineDocument, viewport: Viewport | None = None) -> ConversionResult:
        transcript = self.assembler.assemble(document)
        logger.info(
            "transcript: %d/%d pages with content, %d images",
            transcript.stats.get("pages_with_content", 0),
            transcript.stats.get("pages_total", 0),
            transcript.stats.get("images_total", 0),
        )

        request, narrative = self.generate(transcript)
        pagination = self.paginate(narrative, viewport)
        spreads = build_spreads(pagination.pages)
        if pagination.spans:
            self.notifier.notify("success", "Novel ready", f"{len(pagination)} pages, {len(spreads)} spreads")
        return ConversionResult(
            transcript=transcript,
            request=request,
            narrative=narrative,
            pagination=pagination,
            spreads=spreads,
        )

    def run_job(
        self,
        paths: JobPaths,
        job_id: str,
        document: ZineDocument,
        viewport: Viewport | None = None,
    ) -> ConversionResult | None:
        """Run a conversion into a job directory.

        Fail-soft per stage: failures go to errors.jsonl and the output
        contract is still written.
        """
        viewport = viewport or Viewport()
        created_at = utc_now_iso()
        job_meta = {
            "job_id": job_id,
            "document_id": document.id,
            "title": document.title,
            "viewport": {"width": viewport.width, "height": viewport.height},
            "created_at": created_at,
        }
        metrics: dict[str, Any] = {
            "created_at": created_at,
            "pages_total": len(document.pages),
            "pages_with_content": 0,
            "images_total": 0,
            "images_without_text": 0,
            "narrative_chars": 0,
            "chunks_total": 0,
            "spreads_total": 0,
        }

        layout_pages = []
        for index, page in iter_pages(document):
            try:
                layout = self.analyzer.analyze(elements_to_rectangles(page.elements))
                layout_pages.append({"page_id": page.id, "page_index": index, **layout.to_dict()})
            except Exception as e:
                record_error(paths, page_id=page.id, stage="layout", message=str(e))

        result: ConversionResult | None = None
        transcript: Transcript | None = None
        request: GenerationRequest | None = None
        transcript_text = ""
        narrative = ""
        pagination = Pagination(source="", spans=(), strategy=self.paginator.budget_for(viewport).strategy)

        try:
            transcript = self.assembler.assemble(document)
            transcript_text = transcript.text
            metrics.update(
                {k: transcript.stats.get(k, 0) for k in ("pages_with_content", "images_total", "images_without_text")}
            )
        except Exception as e:
            record_error(paths, page_id="", stage="transcript", message=str(e))

        if transcript is not None:
            try:
                request, narrative = self.generate(transcript)
            except GenerationError as e:
                record_error(paths, page_id="", stage="generate", message=str(e))

        if request is not None:
            try:
                pagination = self.paginate(narrative, viewport)
                result = ConversionResult(
                    transcript=transcript,
                    request=request,
                    narrative=narrative,
                    pagination=pagination,
                    spreads=build_spreads(pagination.pages),
                )
                if pagination.spans:
                    self.notifier.notify("success", "Novel ready", f"{len(pagination)} pages, {len(result.spreads)} spreads")
            except Exception as e:
                record_error(paths, page_id="", stage="paginate", message=str(e))

        spreads = build_spreads(pagination.pages)
        metrics["narrative_chars"] = len(narrative)
        metrics["chunks_total"] = len(pagination)
        metrics["spreads_total"] = len(spreads)
        metrics.update(pagination.length_stats())

        pages_out = pagination.to_dict()
        pages_out["separator"] = self.cfg.pagination.separator
        pages_out["spreads"] = [{"index": s.index, "left": s.left, "right": s.right} for s in spreads]

        JobWriter(paths=paths).write_final(
            job_meta=job_meta,
            transcript=transcript_text,
            layout={"document_id": document.id, "pages": layout_pages},
            narrative=narrative,
            pages=pages_out,
            metrics=metrics,
        )
        return result
