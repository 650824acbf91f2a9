"""Telemetry data models."""

from __future__ import annotations

from dataclasses import dataclass, field


@dataclass(frozen=True)
class TelemetrySample:
    """A single row of a recorded session log.

    Samples are created by the parser and never modified afterwards.
    """

    time_s: float
    """Session time in seconds (monotonic after sorting)."""

    distance: float
    """Position along the lap, in the unit of :attr:`ParsedTelemetry.distance_unit`."""

    speed_kph: float
    """Vehicle speed in km/h."""

    channels: dict[str, float] = field(default_factory=dict, compare=False)
    """Any other numeric columns of the row, keyed by normalized column name."""


@dataclass
class ParsedTelemetry:
    """Result of parsing one telemetry file."""

    samples: list[TelemetrySample]
    """Samples sorted by ``time_s``."""

    distance_unit: str = "m"
    """``"m"`` for metres along the lap, ``"fraction"`` for lap fraction [0, 1]."""

    skipped_rows: int = 0
    """Number of malformed data rows that were ignored."""

    metadata: dict[str, str] = field(default_factory=dict)
    """``key: value`` pairs found in the preamble above the header."""

    source: str = ""
    """File name (or ``"<memory>"``) the samples were read from."""

    @property
    def track_name(self) -> str | None:
        """Track name from the preamble, if the logger wrote one."""
        for key in ("track", "circuit", "venue"):
            if self.metadata.get(key):
                return self.metadata[key]
        return None
