from __future__ import annotations

from pathlib import Path
from typing import Any

from .spans import STRATEGY_FALLBACK, STRATEGY_MEASURED
from .utils import load_json, read_text

CONTRACT_FILES = (
    "transcript.txt",
    "layout.json",
    "narrative.txt",
    "pages.json",
    "metrics.json",
    "errors.jsonl",
)


def _non_ws(text: str) -> str:
    return "".join(text.split())


def _validate_pages_schema(obj: Any, errors: list[str]) -> int:
    invalid = 0
    if not isinstance(obj, dict):
        errors.append("pages.json: must be an object")
        return 1

    job = obj.get("job")
    if not isinstance(job, dict):
        errors.append("pages.json: missing/invalid job object")
        invalid += 1
    else:
        for k in ("job_id", "created_at"):
            if k not in job:
                errors.append(f"pages.json: job missing field {k}")
                invalid += 1

    if obj.get("strategy") not in (STRATEGY_MEASURED, STRATEGY_FALLBACK):
        errors.append(f"pages.json: invalid strategy={obj.get('strategy')}")
        invalid += 1

    pages = obj.get("pages")
    breaks = obj.get("breaks")
    if not isinstance(pages, list) or not all(isinstance(p, str) and p.strip() for p in pages):
        errors.append("pages.json: pages must be a list of non-empty str")
        return invalid + 1
    if not isinstance(breaks, list) or not all(isinstance(b, str) and not b.strip() for b in breaks):
        errors.append("pages.json: breaks must be a list of whitespace str")
        return invalid + 1
    if len(breaks) != max(0, len(pages) - 1):
        errors.append(f"pages.json: expected {max(0, len(pages) - 1)} breaks, got {len(breaks)}")
        invalid += 1

    spreads = obj.get("spreads")
    expected_spreads = (len(pages) + 1) // 2
    if not isinstance(spreads, list) or len(spreads) != expected_spreads:
        errors.append(f"pages.json: expected {expected_spreads} spreads")
        invalid += 1
    return invalid


def _rejoin(pages: list[str], breaks: list[str]) -> str:
    out: list[str] = []
    for i, page in enumerate(pages):
        if i:
            out.append(breaks[i - 1] if i - 1 < len(breaks) else "")
        out.append(page)
    return "".join(out)


def validate_job(job_dir: str | Path) -> tuple[bool, dict[str, Any]]:
    job_dir = Path(job_dir)
    errors: list[str] = []

    missing_contract_files = 0
    invalid_pages = 0
    round_trip_failures = 0

    for f in CONTRACT_FILES:
        p = job_dir / f
        if not p.exists():
            missing_contract_files += 1
            errors.append(f"missing: {p}")

    try:
        metrics = load_json(job_dir / "metrics.json")
        if not isinstance(metrics, dict):
            errors.append("metrics.json: must be an object")
        else:
            for k in ("created_at", "pages_total", "chunks_total", "spreads_total"):
                if k not in metrics:
                    errors.append(f"metrics.json: missing field {k}")
            if metrics.get("finished") is not True:
                errors.append("metrics.json: job not finished (finished!=true)")
            completed_at = metrics.get("completed_at")
            if not isinstance(completed_at, str) or not completed_at.strip():
                errors.append("metrics.json: missing/invalid completed_at")
    except Exception as e:
        errors.append(f"failed to read metrics.json: {e}")

    try:
        pages_obj = load_json(job_dir / "pages.json")
        page_errors: list[str] = []
        invalid_pages += _validate_pages_schema(pages_obj, page_errors)
        errors.extend(page_errors)

        if not page_errors:
            narrative = read_text(job_dir / "narrative.txt")
            pages = pages_obj["pages"]
            if _rejoin(pages, pages_obj["breaks"]) != narrative.strip():
                errors.append("pages.json: pages do not rejoin to narrative.txt")
                round_trip_failures += 1
            elif _non_ws(pages_obj.get("separator", "\n\n").join(pages)) != _non_ws(narrative):
                errors.append("pages.json: separator join differs from narrative.txt")
                round_trip_failures += 1
    except Exception as e:
        errors.append(f"failed to read pages.json: {e}")
        invalid_pages += 1

    summary: dict[str, Any] = {
        "missing_contract_files": missing_contract_files,
        "invalid_pages": invalid_pages,
        "round_trip_failures": round_trip_failures,
        "errors": errors,
    }
    return not errors, summary
