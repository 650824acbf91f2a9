"""Markdown comparison report formatter."""

from __future__ import annotations

from pathlib import Path

from telemetry_kpi.analysis.models import format_lap_time
from telemetry_kpi.comparison.models import ComparableLap, ComparisonResult, SectorDelta


def _format_side(name: str, side: ComparableLap) -> str:
    return f"| {name} | {side.label} | {format_lap_time(side.time_s)} | {side.source or '-'} |"


def _format_position(value: float, unit: str) -> str:
    if unit == "fraction":
        return f"lap fraction {value:.3f}"
    return f"{value:.0f} m"


def _format_sector(sd: SectorDelta) -> str:
    if abs(sd.delta_s) < 0.0005:
        verdict = "even"
    else:
        verdict = "A faster" if sd.delta_s > 0 else "B faster"
    return (
        f"| S{sd.sector} | {sd.time_a_s:.3f}s | {sd.time_b_s:.3f}s "
        f"| {sd.delta_s:+.3f}s | {verdict} |"
    )


class MarkdownFormatter:
    """Format a :class:`~telemetry_kpi.comparison.models.ComparisonResult` as Markdown."""

    def format(self, result: ComparisonResult) -> str:
        """Return the full Markdown report as a string."""
        lines: list[str] = []
        unit = result.series.distance_unit
        length = f" ({result.track_length_m:.0f} m)" if result.track_length_m else ""

        # Header
        lines += [
            "# Lap Comparison",
            "",
            f"**Track**: {result.track or 'unknown'}{length}  ",
            f"**Mode**: {result.mode}  ",
            f"**Total delta (B - A)**: {result.total_delta_s:+.3f}s",
            "",
            "| Side | Lap | Time | Source |",
            "|------|-----|------|--------|",
            _format_side("A", result.side_a),
            _format_side("B", result.side_b),
            "",
        ]

        # Summary
        if abs(result.total_delta_s) < 0.0005:
            verdict = "Both laps are level."
        else:
            faster = "A" if result.total_delta_s > 0 else "B"
            verdict = f"Lap {faster} is faster by {abs(result.total_delta_s):.3f}s."
        lines += [
            "## Summary",
            "",
            verdict,
            "",
            f"- A gains {result.time_gained_s:.3f}s in the sectors where it is faster",
            f"- A loses {result.time_lost_s:.3f}s in the sectors where it is slower",
            f"- Largest gap in A's favour: {result.max_gap_s:+.3f}s at "
            f"{_format_position(result.max_gap_distance_m, unit)}",
            f"- Largest gap in B's favour: {result.min_gap_s:+.3f}s at "
            f"{_format_position(result.min_gap_distance_m, unit)}",
            "",
        ]

        # Per-sector analysis
        lines += [
            "## Sectors",
            "",
            "| Sector | A | B | Delta | |",
            "|--------|---|---|-------|-|",
        ]
        lines.extend(_format_sector(sd) for sd in result.sectors)
        lines.append("")

        return "\n".join(lines)

    def write(self, result: ComparisonResult, path: str | Path) -> None:
        """Write the formatted report to *path* (UTF-8)."""
        Path(path).write_text(self.format(result), encoding="utf-8")
