"""TelemetryFileParser: converts a plain-text session log to TelemetrySample rows.

The log is a delimited text file with one row per sample. Loggers often write a
few ``key: value`` lines (track, driver, date) above the column header; these
are kept as metadata. The header is the first line naming a time, a distance
and a speed column. Rows that cannot be parsed are skipped and counted.
"""

from __future__ import annotations

import logging
import math
import re
from pathlib import Path

from telemetry_kpi.errors import ParseError
from telemetry_kpi.telemetry.models import ParsedTelemetry, TelemetrySample

_logger = logging.getLogger(__name__)

# normalized column name → multiplier to seconds
_TIME_COLUMNS: dict[str, float] = {
    "time": 1.0,
    "time_s": 1.0,
    "timestamp": 1.0,
    "elapsed_time": 1.0,
    "session_time": 1.0,
    "t": 1.0,
    "time_ms": 0.001,
}

# normalized column name → (unit, multiplier)
_DISTANCE_COLUMNS: dict[str, tuple[str, float]] = {
    "lap_distance": ("m", 1.0),
    "lap_dist": ("m", 1.0),
    "distance": ("m", 1.0),
    "distance_m": ("m", 1.0),
    "dist": ("m", 1.0),
    "track_position": ("m", 1.0),
    "position": ("m", 1.0),
    "lap_dist_pct": ("fraction", 1.0),
    "lap_fraction": ("fraction", 1.0),
    "lap_pct": ("fraction", 1.0),
}

# normalized column name → multiplier to km/h
_SPEED_COLUMNS: dict[str, float] = {
    "speed": 1.0,
    "speed_kph": 1.0,
    "speed_kmh": 1.0,
    "velocity": 1.0,
    "gps_speed": 1.0,
    "speed_ms": 3.6,
    "speed_mps": 3.6,
}

# unit written in brackets after a column name → multiplier override
_UNIT_SCALES: dict[str, float] = {
    "s": 1.0,
    "ms": 0.001,
    "km/h": 1.0,
    "kmh": 1.0,
    "kph": 1.0,
    "m/s": 3.6,
    "mph": 1.609344,
    "m": 1.0,
    "km": 1000.0,
    "%": 0.01,
}

_UNIT_RE = re.compile(r"[\[(]([^\])]*)[\])]")
_NAME_RE = re.compile(r"[^a-z0-9]+")
_UNIT_TOKEN_RE = re.compile(r"[\[(][^\])]*[\])]")


def _split_column(raw: str) -> tuple[str, str | None]:
    """Return ``(normalized_name, unit)`` for a raw header cell like ``"Speed (km/h)"``."""
    match = _UNIT_RE.search(raw)
    unit = match.group(1).strip().lower() if match else None
    name = _UNIT_RE.sub(" ", raw).strip().lower()
    name = _NAME_RE.sub("_", name).strip("_")
    return name, unit


def _detect_delimiter(line: str) -> str | None:
    """Pick the header delimiter; ``None`` means split on whitespace."""
    for delim in ("\t", ";", ","):
        if delim in line:
            return delim
    return None


def _split(line: str, delimiter: str | None) -> list[str]:
    if delimiter is None:
        return line.split()
    return [cell.strip() for cell in line.split(delimiter)]


def _split_header(line: str, delimiter: str | None) -> list[str]:
    """Split a header line; on whitespace, ``Time (s)`` stays one cell."""
    cells = _split(line, delimiter)
    if delimiter is not None:
        return cells
    merged: list[str] = []
    for cell in cells:
        if merged and _UNIT_TOKEN_RE.fullmatch(cell):
            merged[-1] = f"{merged[-1]} {cell}"
        else:
            merged.append(cell)
    return merged


class _Layout:
    """Column positions and unit scales resolved from a header line."""

    def __init__(self, delimiter: str | None, names: list[str]) -> None:
        self.delimiter = delimiter
        self.names = names
        self.time_idx = -1
        self.time_scale = 1.0
        self.distance_idx = -1
        self.distance_unit = "m"
        self.distance_scale = 1.0
        self.speed_idx = -1
        self.speed_scale = 1.0

    @property
    def complete(self) -> bool:
        return min(self.time_idx, self.distance_idx, self.speed_idx) >= 0

    @property
    def width(self) -> int:
        return max(self.time_idx, self.distance_idx, self.speed_idx) + 1


def _resolve_header(line: str) -> _Layout | None:
    """Return a :class:`_Layout` if *line* is a usable header, else ``None``."""
    delimiter = _detect_delimiter(line)
    cells = _split_header(line, delimiter)
    layout = _Layout(delimiter, [])

    for idx, cell in enumerate(cells):
        name, unit = _split_column(cell)
        layout.names.append(name)
        scale = _UNIT_SCALES.get(unit) if unit else None

        if layout.time_idx < 0 and name in _TIME_COLUMNS:
            layout.time_idx = idx
            layout.time_scale = scale if scale is not None else _TIME_COLUMNS[name]
        elif layout.distance_idx < 0 and name in _DISTANCE_COLUMNS:
            dist_unit, dist_scale = _DISTANCE_COLUMNS[name]
            if unit == "%":
                dist_unit = "fraction"
            layout.distance_idx = idx
            layout.distance_unit = dist_unit
            layout.distance_scale = scale if scale is not None else dist_scale
        elif layout.speed_idx < 0 and name in _SPEED_COLUMNS:
            layout.speed_idx = idx
            layout.speed_scale = scale if scale is not None else _SPEED_COLUMNS[name]

    return layout if layout.complete else None


def _parse_metadata(line: str) -> tuple[str, str] | None:
    """Parse a preamble line like ``Track: Brands Hatch`` or ``Track,Brands Hatch``."""
    for sep in (":", ",", "\t", "="):
        if sep in line:
            key, _, value = line.partition(sep)
            key = _NAME_RE.sub("_", key.strip().lower()).strip("_")
            value = value.strip().strip(",").strip()
            if key and value:
                return key, value
            return None
    return None


class TelemetryFileParser:
    """Parses a plain-text, delimited session log into :class:`TelemetrySample` rows.

    Malformed rows (too few cells, non-numeric or non-finite values in the
    time/distance/speed columns) are skipped; the count is reported on the
    returned :class:`ParsedTelemetry` and logged as a warning.
    """

    def parse(self, source: str | Path | bytes) -> ParsedTelemetry:
        """Parse a file path or an in-memory byte buffer.

        Raises:
            ParseError: If the input is empty, unreadable, has no header, or
                no valid data rows.
        """
        if isinstance(source, bytes):
            return self.parse_text(source.decode("utf-8", errors="ignore"))

        path = Path(source)
        try:
            text = path.read_text(encoding="utf-8", errors="ignore")
        except OSError as exc:
            raise ParseError(f"Cannot read telemetry file {str(path)!r}: {exc}") from exc
        return self.parse_text(text, source=path.name)

    def parse_text(self, text: str, source: str = "<memory>") -> ParsedTelemetry:
        """Parse the full text of a session log."""
        text = text.lstrip("\ufeff")
        if not text.strip():
            raise ParseError(f"Telemetry input {source!r} is empty")

        lines = text.splitlines()
        metadata: dict[str, str] = {}
        layout: _Layout | None = None
        body_start = 0

        for i, raw_line in enumerate(lines):
            line = raw_line.strip()
            if not line or line.startswith("#"):
                continue
            layout = _resolve_header(line)
            if layout is not None:
                body_start = i + 1
                break
            meta = _parse_metadata(line)
            if meta is not None:
                metadata.setdefault(*meta)

        if layout is None:
            raise ParseError(
                f"Telemetry input {source!r} has no recognizable header "
                "(need time, distance and speed columns)"
            )

        samples: list[TelemetrySample] = []
        skipped = 0
        for raw_line in lines[body_start:]:
            line = raw_line.strip()
            if not line or line.startswith("#"):
                continue
            sample = self._parse_row(line, layout)
            if sample is None:
                skipped += 1
            else:
                samples.append(sample)

        if not samples:
            raise ParseError(
                f"Telemetry input {source!r} has no valid data rows "
                f"after the header ({skipped} malformed)"
            )
        if skipped:
            _logger.warning("Skipped %d malformed row(s) in %s", skipped, source)

        samples.sort(key=lambda s: s.time_s)
        return ParsedTelemetry(
            samples=samples,
            distance_unit=layout.distance_unit,
            skipped_rows=skipped,
            metadata=metadata,
            source=source,
        )

    # ------------------------------------------------------------------
    # Private helpers
    # ------------------------------------------------------------------

    @staticmethod
    def _to_float(cell: str, decimal_comma: bool) -> float:
        if decimal_comma:
            cell = cell.replace(",", ".")
        value = float(cell)
        if not math.isfinite(value):
            raise ValueError(f"non-finite value {cell!r}")
        return value

    def _parse_row(self, line: str, layout: _Layout) -> TelemetrySample | None:
        cells = _split(line, layout.delimiter)
        if len(cells) < layout.width:
            return None
        decimal_comma = layout.delimiter in (";", "\t")
        try:
            time_s = self._to_float(cells[layout.time_idx], decimal_comma) * layout.time_scale
            distance = (
                self._to_float(cells[layout.distance_idx], decimal_comma) * layout.distance_scale
            )
            speed = self._to_float(cells[layout.speed_idx], decimal_comma) * layout.speed_scale
        except ValueError:
            return None

        required = (layout.time_idx, layout.distance_idx, layout.speed_idx)
        channels: dict[str, float] = {}
        for idx, cell in enumerate(cells[: len(layout.names)]):
            if idx in required or not layout.names[idx]:
                continue
            try:
                channels[layout.names[idx]] = self._to_float(cell, decimal_comma)
            except ValueError:
                continue

        return TelemetrySample(time_s=time_s, distance=distance, speed_kph=speed, channels=channels)
