"""Tests for comparison modes and selector resolution."""

from __future__ import annotations

import pytest

from telemetry_kpi.comparison.modes import (
    MODE_SPECS,
    ComparisonMode,
    SideKind,
    parse_selector,
    resolve_mode,
    validate_request,
)
from telemetry_kpi.errors import ModeResolutionError

M = ComparisonMode
F, T = "fastest", "theoretical"

# (lap_a, lap_b, two_sessions) → (mode, resolved lap_a, resolved lap_b)
_TABLE = [
    (3, 5, False, (M.LAP_VS_LAP, 3, 5)),
    (3, F, False, (M.LAP_VS_LAP, 3, F)),
    (F, 5, False, (M.LAP_VS_LAP, F, 5)),
    (F, F, False, (M.LAP_VS_LAP, F, F)),
    (3, T, False, (M.LAP_VS_THEORETICAL, 3, T)),
    (T, 5, False, (M.LAP_VS_THEORETICAL, 5, T)),
    (F, T, False, (M.FASTEST_VS_THEORETICAL, F, T)),
    (T, F, False, (M.FASTEST_VS_THEORETICAL, F, T)),
    (T, T, False, (M.FASTEST_VS_THEORETICAL, F, T)),
    (3, 5, True, (M.LAP_VS_LAP_MULTI, 3, 5)),
    (3, F, True, (M.LAP_VS_LAP_MULTI, 3, F)),
    (F, 5, True, (M.LAP_VS_LAP_MULTI, F, 5)),
    (F, F, True, (M.FASTEST_VS_FASTEST, F, F)),
    (3, T, True, (M.LAP_VS_THEORETICAL_MULTI, 3, T)),
    (F, T, True, (M.FASTEST_VS_THEORETICAL_MULTI, F, T)),
    (T, T, True, (M.THEORETICAL_VS_THEORETICAL, T, T)),
    (T, 5, True, (M.LAP_VS_THEORETICAL_MULTI, 5, T)),
    (T, F, True, (M.FASTEST_VS_THEORETICAL_MULTI, F, T)),
]


class TestResolveMode:
    @pytest.mark.parametrize("lap_a, lap_b, two_sessions, expected", _TABLE)
    def test_decision_table(self, lap_a, lap_b, two_sessions, expected):
        resolved = resolve_mode(lap_a, lap_b, two_sessions)
        assert (resolved.mode, resolved.lap_a, resolved.lap_b) == expected

    def test_every_mode_is_reachable(self):
        reached = {expected[0] for *_, expected in _TABLE}
        assert reached == set(ComparisonMode)

    def test_resolved_mode_matches_session_count(self):
        for lap_a, lap_b, two_sessions, _ in _TABLE:
            assert resolve_mode(lap_a, lap_b, two_sessions).mode.multi_session == two_sessions

    @pytest.mark.parametrize("lap_a, lap_b", [(None, 3), (3, None), (None, None), ("", T)])
    @pytest.mark.parametrize("two_sessions", [False, True])
    def test_missing_selector(self, lap_a, lap_b, two_sessions):
        with pytest.raises(ModeResolutionError, match="required"):
            resolve_mode(lap_a, lap_b, two_sessions)

    def test_string_selectors_from_the_command_line(self):
        resolved = resolve_mode("3", " Theoretical ", False)
        assert (resolved.mode, resolved.lap_a, resolved.lap_b) == (M.LAP_VS_THEORETICAL, 3, T)

    def test_theoretical_first_moves_lap_to_session_a(self):
        resolved = resolve_mode("theoretical", "4", True)
        assert (resolved.mode, resolved.lap_a, resolved.lap_b) == (
            M.LAP_VS_THEORETICAL_MULTI,
            4,
            T,
        )


class TestParseSelector:
    @pytest.mark.parametrize(
        "raw, expected",
        [(4, 4), ("4", 4), (" 7 ", 7), ("FASTEST", F), ("theoretical", T), (None, None), ("", None)],
    )
    def test_valid(self, raw, expected):
        assert parse_selector(raw) == expected

    @pytest.mark.parametrize("raw", ["best", "3.5", True])
    def test_invalid(self, raw):
        with pytest.raises(ModeResolutionError):
            parse_selector(raw)


class TestComparisonMode:
    def test_every_mode_is_described(self):
        assert set(MODE_SPECS) == set(ComparisonMode)

    def test_theoretical_vs_theoretical_sides(self):
        spec = M.THEORETICAL_VS_THEORETICAL.spec
        assert spec.multi_session
        assert (spec.side_a, spec.side_b) == (SideKind.THEORETICAL, SideKind.THEORETICAL)
        assert spec.required == ("session_b",)

    def test_lap_vs_lap_multi_requires_everything(self):
        assert M.LAP_VS_LAP_MULTI.spec.required == ("session_b", "lap_a", "lap_b")

    @pytest.mark.parametrize(
        "name, multi, expected",
        [
            ("lap_vs_lap", False, M.LAP_VS_LAP),
            ("lap_vs_lap", True, M.LAP_VS_LAP_MULTI),
            ("lap_vs_theoretical", True, M.LAP_VS_THEORETICAL_MULTI),
            ("fastest_vs_theoretical", True, M.FASTEST_VS_THEORETICAL_MULTI),
            ("fastest_vs_theoretical_same_file", False, M.FASTEST_VS_THEORETICAL),
            ("FASTEST_VS_FASTEST", True, M.FASTEST_VS_FASTEST),
        ],
    )
    def test_from_name(self, name, multi, expected):
        assert ComparisonMode.from_name(name, multi_session=multi) is expected

    def test_from_name_unknown(self):
        with pytest.raises(ModeResolutionError, match="Invalid comparison mode"):
            ComparisonMode.from_name("best_vs_worst")


class TestValidateRequest:
    def test_fills_implicit_sides(self):
        resolved = validate_request(M.FASTEST_VS_THEORETICAL, None, None, False)
        assert (resolved.lap_a, resolved.lap_b) == (F, T)

    def test_lap_side_required(self):
        with pytest.raises(ModeResolutionError, match="lap_b"):
            validate_request(M.LAP_VS_LAP, 3, None, False)

    def test_second_session_required(self):
        with pytest.raises(ModeResolutionError, match="second session"):
            validate_request(M.FASTEST_VS_FASTEST, None, None, False)

    def test_theoretical_rejected_on_lap_side(self):
        with pytest.raises(ModeResolutionError):
            validate_request(M.LAP_VS_THEORETICAL, T, None, False)

    def test_fastest_accepted_on_lap_side(self):
        resolved = validate_request(M.LAP_VS_LAP_MULTI, F, "2", True)
        assert (resolved.lap_a, resolved.lap_b) == (F, 2)

    def test_extra_selectors_ignored(self):
        resolved = validate_request(M.THEORETICAL_VS_THEORETICAL, 3, 4, True)
        assert (resolved.lap_a, resolved.lap_b) == (T, T)
