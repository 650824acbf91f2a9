"""Tests for the build-session-summary and compare-any command lines."""

from __future__ import annotations

import json

import pytest

from telemetry_kpi.cli import compare_main, summary_main
from tests.conftest import make_cuts, write_cuts, write_session

_LAPS = [[20.0, 15.0, 25.0], [19.0, 16.0, 24.0]]


@pytest.fixture(autouse=True)
def _isolated_env(monkeypatch, tmp_path):
    monkeypatch.delenv("TELEMETRY_KPI_CUTS_DIR", raising=False)
    monkeypatch.delenv("TELEMETRY_KPI_DEFAULT_TRACK", raising=False)
    monkeypatch.chdir(tmp_path)


class TestBuildSessionSummary:
    def test_success(self, tmp_path, cuts_file, capsys):
        session = write_session(tmp_path, "s.csv", _LAPS)
        out = tmp_path / "out" / "summary.json"
        code = summary_main([str(session), "--cuts", str(cuts_file), "--output", str(out)])
        assert code == 0
        data = json.loads(out.read_text())
        assert data["session"]["valid_lap_count"] == 2
        assert "[OK]" in capsys.readouterr().out

    def test_track_lookup_from_metadata(self, tmp_path):
        cuts_dir = tmp_path / "cuts"
        write_cuts(cuts_dir, make_cuts(track="donington"))
        session = write_session(tmp_path, "s.csv", _LAPS, track_name="Donington Park GP")
        out = tmp_path / "summary.json"
        code = summary_main([str(session), "--cuts-dir", str(cuts_dir), "--output", str(out)])
        assert code == 0
        assert json.loads(out.read_text())["session"]["track"] == "donington"

    def test_parse_error_exit_code(self, tmp_path, cuts_file, capsys):
        session = tmp_path / "empty.csv"
        session.write_text("Time,Distance,Speed\n")
        code = summary_main([str(session), "--cuts", str(cuts_file), "--output", "x.json"])
        assert code == 2
        assert "parse_error" in capsys.readouterr().err

    def test_track_cuts_not_found_exit_code(self, tmp_path):
        session = write_session(tmp_path, "s.csv", _LAPS)
        code = summary_main(
            [str(session), "--track", "Cadwell", "--cuts-dir", str(tmp_path / "none"), "--output", "x.json"]
        )
        assert code == 3


class TestCompareAny:
    def _files(self, tmp_path):
        return (
            write_session(tmp_path, "a.csv", _LAPS),
            write_session(tmp_path, "b.csv", [[19.5, 15.5, 24.0]]),
        )

    def test_lap_vs_lap(self, tmp_path, cuts_file):
        file_a, _ = self._files(tmp_path)
        out = tmp_path / "cmp"
        code = compare_main(
            ["--mode", "lap_vs_lap", "--file-a", str(file_a), "--cuts", str(cuts_file),
             "--lap-a", "2", "--lap-b", "3", "--output", str(out)]
        )
        assert code == 0
        data = json.loads((out / "ui_artifacts.json").read_text())
        assert data["summary"]["total_delta_s"] == -1.0
        assert (out / "comparison.md").is_file()

    def test_auto_two_sessions(self, tmp_path, cuts_file):
        file_a, file_b = self._files(tmp_path)
        out = tmp_path / "cmp"
        code = compare_main(
            ["--file-a", str(file_a), "--file-b", str(file_b), "--cuts", str(cuts_file),
             "--lap-a", "fastest", "--lap-b", "theoretical", "--output", str(out)]
        )
        assert code == 0
        data = json.loads((out / "ui_artifacts.json").read_text())
        assert data["mode"] == "fastest_vs_theoretical_multi"

    def test_lap_not_found_exit_code(self, tmp_path, cuts_file):
        file_a, _ = self._files(tmp_path)
        code = compare_main(
            ["--mode", "lap_vs_lap", "--file-a", str(file_a), "--cuts", str(cuts_file),
             "--lap-a", "2", "--lap-b", "9", "--output", "cmp"]
        )
        assert code == 4

    def test_theoretical_unavailable_exit_code(self, tmp_path, cuts_file):
        file_a = write_session(tmp_path, "a.csv", [])
        code = compare_main(
            ["--mode", "fastest_vs_theoretical_same_file", "--file-a", str(file_a),
             "--cuts", str(cuts_file), "--output", "cmp"]
        )
        assert code == 5

    def test_auto_two_sessions_theoretical_first(self, tmp_path, cuts_file):
        file_a, file_b = self._files(tmp_path)
        out = tmp_path / "cmp"
        code = compare_main(
            ["--file-a", str(file_a), "--file-b", str(file_b), "--cuts", str(cuts_file),
             "--lap-a", "theoretical", "--lap-b", "2", "--output", str(out)]
        )
        assert code == 0
        data = json.loads((out / "ui_artifacts.json").read_text())
        assert data["mode"] == "lap_vs_theoretical_multi"
        assert data["lap_a"]["lap_index"] == 2
        assert data["lap_b"]["kind"] == "theoretical"
        assert data["summary"]["total_delta_s"] == -1.0

    def test_mode_resolution_exit_code(self, tmp_path, cuts_file):
        file_a, file_b = self._files(tmp_path)
        code = compare_main(
            ["--file-a", str(file_a), "--file-b", str(file_b), "--cuts", str(cuts_file),
             "--lap-a", "best", "--lap-b", "2", "--output", "cmp"]
        )
        assert code == 6

    def test_missing_lap_selector_exit_code(self, tmp_path, cuts_file):
        file_a, _ = self._files(tmp_path)
        code = compare_main(
            ["--mode", "lap_vs_lap", "--file-a", str(file_a), "--cuts", str(cuts_file),
             "--lap-a", "2", "--output", "cmp"]
        )
        assert code == 6

    def test_unknown_mode_rejected_by_argparse(self, tmp_path, cuts_file):
        with pytest.raises(SystemExit):
            compare_main(["--mode", "nope", "--file-a", "a.csv", "--output", "cmp"])
