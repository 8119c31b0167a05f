from __future__ import annotations

import uuid
from dataclasses import dataclass
from datetime import datetime, timezone
from pathlib import Path

from .utils import append_jsonl, ensure_dir, utc_now_iso, write_json, write_text


@dataclass
class JobPaths:
    job_dir: Path
    input_dir: Path
    transcript_txt: Path
    layout_json: Path
    narrative_txt: Path
    pages_json: Path
    metrics_json: Path
    errors_jsonl: Path


def create_job_dirs(workspace: str | Path, job_id: str) -> JobPaths:
    job_dir = Path(workspace) / "jobs" / job_id
    input_dir = job_dir / "input"
    ensure_dir(input_dir)

    return JobPaths(
        job_dir=job_dir,
        input_dir=input_dir,
        transcript_txt=job_dir / "transcript.txt",
        layout_json=job_dir / "layout.json",
        narrative_txt=job_dir / "narrative.txt",
        pages_json=job_dir / "pages.json",
        metrics_json=job_dir / "metrics.json",
        errors_jsonl=job_dir / "errors.jsonl",
    )


def new_job_id() -> str:
    """Timeline job id: YYYY-MM-DD/HH-MM-SS__<shortid>."""
    now = datetime.now(timezone.utc)
    return f"{now.strftime('%Y-%m-%d')}/{now.strftime('%H-%M-%S')}__{uuid.uuid4().hex[:8]}"


def record_error(paths: JobPaths, page_id: str, stage: str, message: str) -> None:
    append_jsonl(paths.errors_jsonl, {"page_id": page_id, "stage": stage, "message": message})


def init_job_outputs(paths: JobPaths) -> None:
    # Always create output files, even if empty.
    write_text(paths.transcript_txt, "")
    write_text(paths.narrative_txt, "")
    write_json(paths.layout_json, {"pages": []})
    write_json(paths.pages_json, {"job": {}, "strategy": None, "pages": [], "breaks": [], "spreads": []})
    write_json(
        paths.metrics_json,
        {
            "created_at": utc_now_iso(),
            "finished": False,
            "completed_at": None,
            "pages_total": 0,
            "pages_with_content": 0,
            "images_total": 0,
            "images_without_text": 0,
            "narrative_chars": 0,
            "chunks_total": 0,
            "spreads_total": 0,
        },
    )
    paths.errors_jsonl.parent.mkdir(parents=True, exist_ok=True)
    paths.errors_jsonl.touch(exist_ok=True)


def snapshot_input(paths: JobPaths, document_path: str | Path, narrative_path: str | Path | None = None) -> None:
    manifest = {"document": str(Path(document_path).resolve())}
    if narrative_path is not None:
        manifest["narrative"] = str(Path(narrative_path).resolve())
    write_json(paths.input_dir / "manifest.json", manifest)
