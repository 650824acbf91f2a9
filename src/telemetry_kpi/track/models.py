"""Track cuts configuration models.

A cuts file is a JSON document per track::

    {
      "track": "brands_hatch",
      "track_length_m": 1929.0,
      "cuts": [
        {"distance_m": 640.0, "sector": 1},
        {"distance_m": 1290.0, "sector": 2}
      ]
    }

Cuts may instead give a lap ``fraction`` (``{"fraction": 0.33, "sector": 1}``);
``track_length_m`` is then optional, and without it the telemetry must carry
lap-fraction distances.

Each cut closes the sector with the given 1-based index; the final sector is
closed by the start/finish line, so there is always one more sector than cuts.
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field, model_validator


class TrackCut(BaseModel):
    """A single marker along the lap, in metres or as a lap fraction."""

    model_config = ConfigDict(frozen=True)

    distance_m: float | None = Field(default=None, gt=0.0)
    """Distance from the start/finish line along the track, metres."""

    fraction: float | None = Field(default=None, gt=0.0, lt=1.0)
    """Position as a fraction of the lap."""

    sector: int = Field(ge=1)
    """1-based index of the sector this cut closes."""

    @model_validator(mode="after")
    def _one_position(self) -> TrackCut:
        if (self.distance_m is None) == (self.fraction is None):
            raise ValueError("a cut needs exactly one of distance_m or fraction")
        return self


class TrackCuts(BaseModel):
    """Ordered sector cuts for one track. Immutable once loaded."""

    model_config = ConfigDict(frozen=True)

    track: str = ""
    track_length_m: float | None = Field(default=None, gt=0.0)
    cuts: tuple[TrackCut, ...] = ()

    @model_validator(mode="after")
    def _check_order(self) -> TrackCuts:
        if self.track_length_m is None and any(c.distance_m is not None for c in self.cuts):
            raise ValueError("track_length_m is required when cuts are given in distance_m")

        previous = 0.0
        for expected, cut in enumerate(self.cuts, start=1):
            position = self.position_of(cut)
            if position <= previous:
                raise ValueError(
                    f"cut positions must be strictly increasing (cut #{expected} at lap "
                    f"fraction {position:.4f} after {previous:.4f})"
                )
            if position >= 1.0:
                raise ValueError(
                    f"cut at {cut.distance_m} m is not inside the lap "
                    f"(track_length_m={self.track_length_m})"
                )
            if cut.sector != expected:
                raise ValueError(f"cut #{expected} closes sector {cut.sector}, expected {expected}")
            previous = position
        return self

    def position_of(self, cut: TrackCut) -> float:
        """Lap fraction of *cut*."""
        if cut.fraction is not None:
            return cut.fraction
        return cut.distance_m / self.track_length_m

    @property
    def sector_count(self) -> int:
        """Number of sectors per lap (``len(cuts) + 1``)."""
        return len(self.cuts) + 1

    @property
    def boundaries(self) -> list[float]:
        """Sector end positions as lap fractions; the last one is always ``1.0``."""
        return [self.position_of(c) for c in self.cuts] + [1.0]

    def sector_of(self, fraction: float) -> int:
        """0-based index of the sector containing lap *fraction*.

        A position exactly on a cut belongs to the sector that cut closes.
        """
        for idx, end in enumerate(self.boundaries):
            if fraction <= end:
                return idx
        return self.sector_count - 1
