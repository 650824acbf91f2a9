"""Tests for the session summary pipeline."""

from __future__ import annotations

import pytest

from telemetry_kpi.analysis.models import format_lap_time
from telemetry_kpi.analysis.summary import SessionSummaryBuilder, build_session_summary
from telemetry_kpi.errors import LapNotFoundError, ParseError
from telemetry_kpi.telemetry.models import ParsedTelemetry
from tests.conftest import make_cuts, make_session_samples, write_session

_CUTS_2 = make_cuts((500.0,))


def _telemetry(laps, **kwargs) -> ParsedTelemetry:
    return ParsedTelemetry(samples=make_session_samples(laps, cuts=_CUTS_2, **kwargs), source="s.csv")


class TestSessionSummaryBuilder:
    def test_round_trip_scenario(self):
        analysis = SessionSummaryBuilder().build(
            _telemetry([[30.0, 31.0], [29.5, 31.5]], inlap=None), _CUTS_2
        )
        summary = analysis.summary
        assert [lap.lap_index for lap in summary.laps] == [1, 2, 3]
        assert summary.laps[0].is_outlap
        tb = summary.theoretical_best
        assert tb.theoretical_lap_time_s == pytest.approx(60.5)
        assert tb.fastest_actual_lap_time_s == pytest.approx(61.0)
        assert tb.potential_gain_s == pytest.approx(0.5)

    def test_fastest_lap_is_fastest_valid(self):
        summary = SessionSummaryBuilder().build(
            _telemetry([[30.0, 31.0], [29.0, 31.0], [30.0, 30.5]]), _CUTS_2
        ).summary
        assert summary.fastest_lap_index == 3
        assert summary.fastest_lap_time_s == pytest.approx(60.0)

    def test_no_valid_laps(self):
        summary = SessionSummaryBuilder().build(_telemetry([]), _CUTS_2).summary
        assert summary.valid_laps == []
        assert summary.fastest_lap_index is None
        assert summary.theoretical_best is None

    def test_no_crossing_gives_empty_summary(self):
        telemetry = _telemetry([], outlap=None, inlap=(400.0, 20.0))
        summary = SessionSummaryBuilder().build(telemetry, _CUTS_2).summary
        assert summary.laps == []
        assert summary.to_dict()["session"]["lap_count"] == 0

    def test_to_dict_shape(self):
        summary = SessionSummaryBuilder().build(_telemetry([[30.0, 31.0]]), _CUTS_2).summary
        data = summary.to_dict()
        session = data["session"]
        assert session["track"] == "test_track"
        assert session["source"] == "s.csv"
        assert session["valid_lap_count"] == 1
        assert session["fastest_lap_time_str"] == "1:01.000"
        assert [lap["is_valid"] for lap in session["laps"]] == [False, True, False]
        assert data["theoretical_best"]["best_sector_laps"] == [2, 2]

    def test_trace_unknown_lap(self):
        analysis = SessionSummaryBuilder().build(_telemetry([[30.0, 31.0]]), _CUTS_2)
        with pytest.raises(LapNotFoundError):
            analysis.trace(9)

    def test_trace_is_cached(self):
        analysis = SessionSummaryBuilder().build(_telemetry([[30.0, 31.0]]), _CUTS_2)
        assert analysis.trace(2) is analysis.trace(2)


class TestBuildSessionSummary:
    def test_from_files(self, tmp_path, cuts_file):
        path = write_session(tmp_path, "session.csv", [[20.0, 15.0, 25.0], [19.0, 16.0, 24.0]])
        summary = build_session_summary(path, cuts_file)
        assert len(summary.valid_laps) == 2
        assert summary.theoretical_best.theoretical_lap_time_s == pytest.approx(58.0)
        assert summary.source == "session.csv"

    def test_header_only_file(self, tmp_path, cuts_file):
        path = tmp_path / "empty.csv"
        path.write_text("Time,Distance,Speed\n")
        with pytest.raises(ParseError):
            build_session_summary(path, cuts_file)


@pytest.mark.parametrize(
    "seconds, expected",
    [(61.0, "1:01.000"), (59.9996, "1:00.000"), (0.5, "0:00.500"), (None, "-")],
)
def test_format_lap_time(seconds, expected):
    assert format_lap_time(seconds) == expected
