"""Comparison modes and selector → mode resolution.

Each side of a comparison is picked by a *selector*: a lap number, the literal
``"fastest"`` or the literal ``"theoretical"``. The eight modes fix which kind
of lap each side is and whether the two sides come from one or two sessions.
"""

from __future__ import annotations

import enum
from dataclasses import dataclass

from telemetry_kpi.errors import ModeResolutionError

FASTEST = "fastest"
THEORETICAL = "theoretical"

Selector = int | str | None
"""A lap number, ``"fastest"``, ``"theoretical"`` or ``None`` (absent)."""


class SideKind(enum.Enum):
    """What a comparison side resolves to."""

    LAP = "lap"
    """A real lap picked by number (``"fastest"`` is accepted too)."""

    FASTEST = "fastest"
    """The session's fastest valid lap."""

    THEORETICAL = "theoretical"
    """The session's synthetic best-sector lap."""


class ComparisonMode(enum.Enum):
    LAP_VS_LAP = "lap_vs_lap"
    FASTEST_VS_THEORETICAL = "fastest_vs_theoretical"
    LAP_VS_THEORETICAL = "lap_vs_theoretical"
    LAP_VS_LAP_MULTI = "lap_vs_lap_multi"
    FASTEST_VS_FASTEST = "fastest_vs_fastest"
    FASTEST_VS_THEORETICAL_MULTI = "fastest_vs_theoretical_multi"
    THEORETICAL_VS_THEORETICAL = "theoretical_vs_theoretical"
    LAP_VS_THEORETICAL_MULTI = "lap_vs_theoretical_multi"

    @property
    def spec(self) -> ModeSpec:
        return MODE_SPECS[self]

    @property
    def multi_session(self) -> bool:
        return self.spec.multi_session

    @classmethod
    def from_name(cls, name: str, multi_session: bool = False) -> ComparisonMode:
        """Parse a mode name, including the legacy command-line names.

        ``lap_vs_lap``, ``lap_vs_theoretical`` and ``fastest_vs_theoretical``
        were used for both single- and two-file runs; with a second session
        they map to their ``_multi`` variant.

        Raises:
            ModeResolutionError: For unknown names.
        """
        key = name.strip().lower()
        if key == "fastest_vs_theoretical_same_file":
            return cls.FASTEST_VS_THEORETICAL
        try:
            mode = cls(key)
        except ValueError:
            raise ModeResolutionError(
                f"Invalid comparison mode {name!r}; expected one of "
                f"{', '.join(m.value for m in cls)}"
            ) from None
        if multi_session and not mode.multi_session:
            mode = _MULTI_VARIANT.get(mode, mode)
        return mode


@dataclass(frozen=True)
class ModeSpec:
    """Static description of one comparison mode."""

    multi_session: bool
    side_a: SideKind
    side_b: SideKind
    description: str

    @property
    def required(self) -> tuple[str, ...]:
        """Request fields that must be present for this mode."""
        fields: list[str] = []
        if self.multi_session:
            fields.append("session_b")
        if self.side_a is SideKind.LAP:
            fields.append("lap_a")
        if self.side_b is SideKind.LAP:
            fields.append("lap_b")
        return tuple(fields)


MODE_SPECS: dict[ComparisonMode, ModeSpec] = {
    ComparisonMode.LAP_VS_LAP: ModeSpec(
        False, SideKind.LAP, SideKind.LAP,
        "Compare two specific laps from same session",
    ),
    ComparisonMode.FASTEST_VS_THEORETICAL: ModeSpec(
        False, SideKind.FASTEST, SideKind.THEORETICAL,
        "Compare fastest lap vs theoretical best from same session",
    ),
    ComparisonMode.LAP_VS_THEORETICAL: ModeSpec(
        False, SideKind.LAP, SideKind.THEORETICAL,
        "Compare specific lap vs theoretical best from same session",
    ),
    ComparisonMode.LAP_VS_LAP_MULTI: ModeSpec(
        True, SideKind.LAP, SideKind.LAP,
        "Compare two specific laps from different sessions",
    ),
    ComparisonMode.FASTEST_VS_FASTEST: ModeSpec(
        True, SideKind.FASTEST, SideKind.FASTEST,
        "Compare fastest laps from two sessions",
    ),
    ComparisonMode.FASTEST_VS_THEORETICAL_MULTI: ModeSpec(
        True, SideKind.FASTEST, SideKind.THEORETICAL,
        "Compare fastest lap from session A vs theoretical from session B",
    ),
    ComparisonMode.THEORETICAL_VS_THEORETICAL: ModeSpec(
        True, SideKind.THEORETICAL, SideKind.THEORETICAL,
        "Compare theoretical bests from two sessions",
    ),
    ComparisonMode.LAP_VS_THEORETICAL_MULTI: ModeSpec(
        True, SideKind.LAP, SideKind.THEORETICAL,
        "Compare specific lap from session A vs theoretical from session B",
    ),
}

_MULTI_VARIANT: dict[ComparisonMode, ComparisonMode] = {
    ComparisonMode.LAP_VS_LAP: ComparisonMode.LAP_VS_LAP_MULTI,
    ComparisonMode.LAP_VS_THEORETICAL: ComparisonMode.LAP_VS_THEORETICAL_MULTI,
    ComparisonMode.FASTEST_VS_THEORETICAL: ComparisonMode.FASTEST_VS_THEORETICAL_MULTI,
}


def parse_selector(value: Selector) -> Selector:
    """Normalize a raw selector (CLI string, JSON value) to ``int``, a literal, or ``None``.

    Raises:
        ModeResolutionError: If *value* is neither a lap number nor a known literal.
    """
    if value is None:
        return None
    if isinstance(value, bool):
        raise ModeResolutionError(f"Invalid lap selector {value!r}")
    if isinstance(value, int):
        return value
    text = str(value).strip().lower()
    if not text:
        return None
    if text in (FASTEST, THEORETICAL):
        return text
    try:
        return int(text)
    except ValueError:
        raise ModeResolutionError(
            f"Invalid lap selector {value!r}; expected a lap number, "
            f"{FASTEST!r} or {THEORETICAL!r}"
        ) from None


@dataclass(frozen=True)
class ResolvedComparison:
    """A mode plus the selectors each side will use."""

    mode: ComparisonMode
    lap_a: Selector = None
    lap_b: Selector = None


def _kind(selector: Selector) -> str:
    if selector == THEORETICAL:
        return THEORETICAL
    if selector == FASTEST:
        return FASTEST
    return "lap"


def resolve_mode(lap_a: Selector, lap_b: Selector, two_sessions: bool) -> ResolvedComparison:
    """Pick the comparison mode for a pair of selectors.

    Total over ``{lap number, "fastest", "theoretical"}²`` × ``{1, 2}`` sessions:
    every combination yields exactly one mode or a :class:`ModeResolutionError`.

    * ``"fastest"`` is accepted wherever a lap number is expected.
    * Single session: two theoretical selectors, or theoretical vs fastest,
      collapse to ``fastest_vs_theoretical``; a lap number paired with
      ``"theoretical"`` is always moved to side A.
    * Two sessions: a theoretical selector paired with a real-lap selector
      always compares that lap of session A against session B's theoretical
      best, whichever side the theoretical selector was given on.
    """
    lap_a = parse_selector(lap_a)
    lap_b = parse_selector(lap_b)
    if lap_a is None or lap_b is None:
        missing = "lap_a" if lap_a is None else "lap_b"
        raise ModeResolutionError(f"Lap selector {missing} is required to pick a comparison mode")

    a, b = _kind(lap_a), _kind(lap_b)

    if not two_sessions:
        if THEORETICAL not in (a, b):
            return ResolvedComparison(ComparisonMode.LAP_VS_LAP, lap_a, lap_b)
        if a == "lap":
            return ResolvedComparison(ComparisonMode.LAP_VS_THEORETICAL, lap_a, THEORETICAL)
        if b == "lap":
            return ResolvedComparison(ComparisonMode.LAP_VS_THEORETICAL, lap_b, THEORETICAL)
        return ResolvedComparison(ComparisonMode.FASTEST_VS_THEORETICAL, FASTEST, THEORETICAL)

    if a == THEORETICAL and b == THEORETICAL:
        return ResolvedComparison(ComparisonMode.THEORETICAL_VS_THEORETICAL, THEORETICAL, THEORETICAL)
    if THEORETICAL in (a, b):
        # the real-lap selector moves to session A, against session B's theoretical best
        real = lap_b if a == THEORETICAL else lap_a
        if real == FASTEST:
            return ResolvedComparison(
                ComparisonMode.FASTEST_VS_THEORETICAL_MULTI, FASTEST, THEORETICAL
            )
        return ResolvedComparison(ComparisonMode.LAP_VS_THEORETICAL_MULTI, real, THEORETICAL)
    if a == FASTEST and b == FASTEST:
        return ResolvedComparison(ComparisonMode.FASTEST_VS_FASTEST, FASTEST, FASTEST)
    return ResolvedComparison(ComparisonMode.LAP_VS_LAP_MULTI, lap_a, lap_b)


def validate_request(
    mode: ComparisonMode,
    lap_a: Selector,
    lap_b: Selector,
    has_session_b: bool,
) -> ResolvedComparison:
    """Check that an explicitly chosen *mode* has every selector it needs.

    Extra selectors are tolerated and ignored; implicit sides are filled in.

    Raises:
        ModeResolutionError: If a required selector or the second session is
            missing, or a lap side was given ``"theoretical"``.
    """
    spec = mode.spec
    selectors = {"lap_a": parse_selector(lap_a), "lap_b": parse_selector(lap_b)}

    if spec.multi_session and not has_session_b:
        raise ModeResolutionError(f"Mode {mode.value} needs a second session (file B)")

    resolved: dict[str, Selector] = {}
    for name, kind in (("lap_a", spec.side_a), ("lap_b", spec.side_b)):
        value = selectors[name]
        if kind is SideKind.LAP:
            if value is None:
                raise ModeResolutionError(
                    f"Missing required parameter for {mode.value}: {name} "
                    f"(required: {', '.join(spec.required)})"
                )
            if value == THEORETICAL:
                raise ModeResolutionError(
                    f"{name} must be a lap number or {FASTEST!r} in mode {mode.value}"
                )
            resolved[name] = value
        else:
            resolved[name] = kind.value

    return ResolvedComparison(mode, resolved["lap_a"], resolved["lap_b"])


def resolve_request(
    mode: str | ComparisonMode | None,
    lap_a: Selector,
    lap_b: Selector,
    two_sessions: bool,
) -> ResolvedComparison:
    """Resolve *mode* (``None``/``"auto"`` picks it from the selectors) and validate it."""
    if mode is None or mode == "auto":
        return resolve_mode(lap_a, lap_b, two_sessions)
    if not isinstance(mode, ComparisonMode):
        mode = ComparisonMode.from_name(mode, multi_session=two_sessions)
    return validate_request(mode, lap_a, lap_b, two_sessions)
