from __future__ import annotations

import argparse
import json
import logging
from pathlib import Path

from .config import load_config
from .document import load_document
from .generation import NovelSettings, StaticProseGenerator
from .job import create_job_dirs, init_job_outputs, new_job_id, snapshot_input
from .measure import CharGridMeasurer, TextMeasurer, load_measurer
from .notifier import LoggingNotifier
from .paginator import Paginator
from .pipeline import ConversionPipeline
from .reader import build_spreads
from .transcript import NarrativeAssembler
from .types import Viewport
from .utils import read_text
from .validator import validate_job

DEFAULT_CONFIG = str(Path("config") / "default.json")


def _add_common(p: argparse.ArgumentParser) -> None:
    p.add_argument("--config", default=None, help=f"Config path (e.g. {DEFAULT_CONFIG}); defaults when omitted")


def _add_viewport(p: argparse.ArgumentParser) -> None:
    p.add_argument("--width", type=float, default=1400.0, help="Viewport width in px")
    p.add_argument("--height", type=float, default=900.0, help="Viewport height in px")
    p.add_argument(
        "--measure",
        default="font",
        choices=["font", "grid", "off"],
        help="Measurement surface: configured font, fixed character grid, or off (character budget)",
    )
    p.add_argument("--no-measure", dest="measure", action="store_const", const="off", help="Same as --measure off")


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(prog="zinebook")
    p.add_argument("-v", "--verbose", action="store_true", help="Debug logging")
    sub = p.add_subparsers(dest="command", required=True)

    tr = sub.add_parser("transcript", help="Print the reading-order transcript of a zine document")
    tr.add_argument("--document", required=True, help="Zine document JSON")
    _add_common(tr)

    an = sub.add_parser("analyze", help="Print image/text relationships per page as JSON")
    an.add_argument("--document", required=True, help="Zine document JSON")
    _add_common(an)

    pg = sub.add_parser("paginate", help="Split a narrative text file into pages and spreads")
    pg.add_argument("--narrative", required=True, help="Narrative text file (UTF-8)")
    _add_common(pg)
    _add_viewport(pg)

    cv = sub.add_parser("convert", help="Run a full conversion job with pre-generated prose")
    cv.add_argument("--document", required=True, help="Zine document JSON")
    cv.add_argument("--narrative", required=True, help="Pre-generated narrative text file (UTF-8)")
    cv.add_argument("--workspace", default="./workspace", help="Workspace root")
    cv.add_argument("--genre", default="sf", help="Genre (sf, romcom)")
    cv.add_argument("--length", default="short", choices=["short", "long"])
    cv.add_argument("--keywords", default="")
    _add_common(cv)
    _add_viewport(cv)

    validate = sub.add_parser("validate", help="Validate a job's output contract")
    validate.add_argument("--job-dir", required=True, help="Job directory (workspace/jobs/<job_id>)")

    return p


def _measurer(args: argparse.Namespace, cfg) -> TextMeasurer | None:
    if args.measure == "off":
        return None
    if args.measure == "grid":
        p = cfg.pagination
        return CharGridMeasurer(char_width=float(p.font_size), line_px=p.font_size * p.line_height)
    return load_measurer(cfg.pagination)


def cmd_transcript(args: argparse.Namespace) -> int:
    cfg = load_config(args.config)
    document = load_document(args.document)
    transcript = NarrativeAssembler(spatial=cfg.spatial, config=cfg.transcript).assemble(document)
    print(transcript.text)
    return 0


def cmd_analyze(args: argparse.Namespace) -> int:
    cfg = load_config(args.config)
    document = load_document(args.document)
    pipeline = ConversionPipeline(cfg, generator=StaticProseGenerator(""))
    print(json.dumps(pipeline.analyze(document), ensure_ascii=False, indent=2))
    return 0


def cmd_paginate(args: argparse.Namespace) -> int:
    cfg = load_config(args.config)
    paginator = Paginator(cfg.pagination, measurer=_measurer(args, cfg))
    pagination = paginator.paginate(read_text(args.narrative), Viewport(args.width, args.height))
    out = pagination.to_dict()
    out["spreads"] = [{"index": s.index, "left": s.left, "right": s.right} for s in build_spreads(pagination.pages)]
    print(json.dumps(out, ensure_ascii=False, indent=2))
    return 0


def cmd_convert(args: argparse.Namespace) -> int:
    job_id = new_job_id()
    paths = create_job_dirs(args.workspace, job_id)
    init_job_outputs(paths)
    snapshot_input(paths, args.document, args.narrative)

    cfg = load_config(args.config)
    pipeline = ConversionPipeline(
        cfg,
        generator=StaticProseGenerator(read_text(args.narrative)),
        notifier=LoggingNotifier(),
        measurer=_measurer(args, cfg),
        settings=NovelSettings(genre=args.genre, keywords=args.keywords, length=args.length),
    )
    pipeline.run_job(paths, job_id, load_document(args.document), Viewport(args.width, args.height))
    print(str(paths.job_dir))
    return 0


def cmd_validate(args: argparse.Namespace) -> int:
    ok, summary = validate_job(args.job_dir)
    print(f"missing_contract_files={summary['missing_contract_files']}")
    print(f"invalid_pages={summary['invalid_pages']}")
    print(f"round_trip_failures={summary['round_trip_failures']}")
    for m in summary["errors"]:
        print(m)
    return 0 if ok else 1


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    if args.command == "transcript":
        return cmd_transcript(args)

    if args.command == "analyze":
        return cmd_analyze(args)

    if args.command == "paginate":
        return cmd_paginate(args)

    if args.command == "convert":
        return cmd_convert(args)

    if args.command == "validate":
        return cmd_validate(args)

    raise SystemExit(2)


if __name__ == "__main__":
    raise SystemExit(main())
