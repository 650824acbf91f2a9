"""Shared fixtures for web tests."""

from __future__ import annotations

import pytest
from fastapi.testclient import TestClient

from telemetry_kpi.web.app import app


@pytest.fixture
def client():
    """FastAPI test client."""
    with TestClient(app) as c:
        yield c


@pytest.fixture(autouse=True)
def _no_data_root(monkeypatch):
    """Web tests run unrestricted unless they set a data root themselves."""
    monkeypatch.delenv("TELEMETRY_KPI_DATA_ROOT", raising=False)
