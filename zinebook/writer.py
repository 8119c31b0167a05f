from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from .job import JobPaths
from .utils import utc_now_iso, write_json, write_text


@dataclass
class JobWriter:
    paths: JobPaths

    def write_final(
        self,
        job_meta: dict[str, Any],
        transcript: str,
        layout: dict[str, Any],
        narrative: str,
        pages: dict[str, Any],
        metrics: dict[str, Any],
    ) -> None:
        now = utc_now_iso()

        # Mark completion only when final outputs are successfully written.
        metrics_out = dict(metrics)
        metrics_out["finished"] = True
        metrics_out["completed_at"] = now

        job_out = dict(job_meta)
        job_out["finished"] = True
        job_out["completed_at"] = now

        write_text(self.paths.transcript_txt, transcript)
        write_json(self.paths.layout_json, layout)
        write_text(self.paths.narrative_txt, narrative)
        write_json(self.paths.pages_json, {"job": job_out, **pages})
        write_json(self.paths.metrics_json, metrics_out)
