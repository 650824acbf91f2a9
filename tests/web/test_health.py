"""GET /health and GET /api/tracks."""

from __future__ import annotations

from telemetry_kpi import __version__
from tests.conftest import make_cuts, write_cuts


def test_health(client):
    resp = client.get("/health")
    assert resp.status_code == 200
    assert resp.json() == {"status": "ok", "version": __version__}


class TestTracks:
    def test_lists_cuts_files(self, client, tmp_path):
        write_cuts(tmp_path, make_cuts(track="donington"))
        write_cuts(tmp_path, make_cuts(track="brands_hatch"))
        resp = client.get("/api/tracks", params={"cuts_dir": str(tmp_path)})
        assert resp.status_code == 200
        body = resp.json()
        assert body["tracks"] == ["brands_hatch", "donington"]
        assert body["cuts_dir"] == str(tmp_path)

    def test_default_track_from_environment(self, client, tmp_path, monkeypatch):
        monkeypatch.setenv("TELEMETRY_KPI_DEFAULT_TRACK", "snetterton")
        resp = client.get("/api/tracks", params={"cuts_dir": str(tmp_path)})
        assert resp.json()["default_track"] == "snetterton"
        assert resp.json()["tracks"] == []
