"""Command-line entry points: ``build-session-summary`` and ``compare-any``.

Usage::

  build-session-summary session.csv --cuts track_cuts/brands_hatch_cuts.json \\
      --output out/summary.json

  compare-any --mode auto --file-a a.csv --file-b b.csv \\
      --lap-a fastest --lap-b theoretical --track "Brands Hatch GP" --output out/

Both return 0 on success and the error's ``exit_code`` otherwise (2 parse,
3 track cuts, 4 lap, 5 theoretical best, 6 mode, 7 segmentation).
"""

from __future__ import annotations

import argparse
import logging
import sys
from collections.abc import Sequence

from dotenv import load_dotenv

from telemetry_kpi.analysis.models import format_lap_time
from telemetry_kpi.analysis.summary import SessionSummaryBuilder
from telemetry_kpi.comparison.engine import compare_sessions
from telemetry_kpi.comparison.modes import ComparisonMode
from telemetry_kpi.errors import TelemetryKpiError
from telemetry_kpi.reporting.artifacts import write_comparison_artifacts, write_session_summary
from telemetry_kpi.telemetry.parser import TelemetryFileParser
from telemetry_kpi.track.store import CutsLoader, cuts_loader

_MODE_CHOICES = ["auto", "fastest_vs_theoretical_same_file"] + [m.value for m in ComparisonMode]


def _setup(verbose: bool) -> None:
    load_dotenv()
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(levelname)s %(name)s: %(message)s",
    )


def _add_track_args(ap: argparse.ArgumentParser) -> None:
    ap.add_argument("--cuts", help="Track cuts JSON file")
    ap.add_argument(
        "--track",
        help="Track name used to look up cuts when --cuts is omitted "
        "(defaults to the track named in the telemetry file)",
    )
    ap.add_argument(
        "--cuts-dir",
        help="Directory of <slug>_cuts.json files (default: $TELEMETRY_KPI_CUTS_DIR or ./track_cuts)",
    )
    ap.add_argument("-v", "--verbose", action="store_true", help="Debug logging")


def _cuts_loader(args: argparse.Namespace) -> CutsLoader:
    return cuts_loader(args.cuts, track=args.track, cuts_dir=args.cuts_dir)


def _fail(exc: TelemetryKpiError) -> int:
    print(f"error [{exc.kind}]: {exc}", file=sys.stderr)
    return exc.exit_code


# ------------------------------------------------------------------
# build-session-summary
# ------------------------------------------------------------------


def summary_main(argv: Sequence[str] | None = None) -> int:
    ap = argparse.ArgumentParser(
        prog="build-session-summary",
        description="Segment a telemetry file into laps and sectors and write a JSON summary",
    )
    ap.add_argument("telemetry", help="Telemetry log file")
    ap.add_argument("--output", required=True, help="Output JSON file path")
    _add_track_args(ap)
    args = ap.parse_args(argv)
    _setup(args.verbose)

    try:
        telemetry = TelemetryFileParser().parse(args.telemetry)
        cuts = _cuts_loader(args)(telemetry)
        summary = SessionSummaryBuilder().build(telemetry, cuts).summary
        write_session_summary(summary, args.output)
    except TelemetryKpiError as exc:
        return _fail(exc)

    print(f"Track     : {summary.track} ({cuts.sector_count} sectors)")
    print(f"Laps      : {len(summary.laps)} ({len(summary.valid_laps)} valid)")
    print(f"Fastest   : {format_lap_time(summary.fastest_lap_time_s)}")
    if summary.theoretical_best is not None:
        tb = summary.theoretical_best
        print(
            f"Theoretical: {tb.theoretical_lap_time_str} "
            f"(potential gain {tb.potential_gain_s:.3f}s)"
        )
    print(f"\n[OK] {args.output}")
    return 0


# ------------------------------------------------------------------
# compare-any
# ------------------------------------------------------------------


def compare_main(argv: Sequence[str] | None = None) -> int:
    ap = argparse.ArgumentParser(
        prog="compare-any",
        description="Compare laps, fastest laps or theoretical bests of one or two sessions",
    )
    ap.add_argument("--mode", default="auto", choices=_MODE_CHOICES, help="Comparison mode")
    ap.add_argument("--file-a", required=True, help="Telemetry file of session A")
    ap.add_argument("--file-b", help="Telemetry file of session B (two-session modes)")
    ap.add_argument("--lap-a", help="Lap number, 'fastest' or 'theoretical' for side A")
    ap.add_argument("--lap-b", help="Lap number, 'fastest' or 'theoretical' for side B")
    ap.add_argument("--output", required=True, help="Output directory")
    _add_track_args(ap)
    args = ap.parse_args(argv)
    _setup(args.verbose)

    try:
        result = compare_sessions(
            args.mode,
            args.file_a,
            _cuts_loader(args),
            file_b=args.file_b,
            lap_a=args.lap_a,
            lap_b=args.lap_b,
        )
        written = write_comparison_artifacts(result, args.output)
    except TelemetryKpiError as exc:
        return _fail(exc)

    print(f"Mode      : {result.mode}")
    print(f"A         : {result.side_a.label}  {format_lap_time(result.side_a.time_s)}")
    print(f"B         : {result.side_b.label}  {format_lap_time(result.side_b.time_s)}")
    print(f"Delta B-A : {result.total_delta_s:+.3f}s")
    for path in written.values():
        print(f"[OK] {path}")
    return 0
