"""Artifact writers: session summary JSON, ``ui_artifacts.json`` and ``comparison.md``."""

from __future__ import annotations

import json
import logging
from pathlib import Path

from telemetry_kpi.analysis.models import SessionSummary
from telemetry_kpi.comparison.models import ComparisonResult
from telemetry_kpi.reporting.formatter import MarkdownFormatter

_logger = logging.getLogger(__name__)

UI_ARTIFACTS_NAME = "ui_artifacts.json"
REPORT_NAME = "comparison.md"


def write_json(payload: dict, path: str | Path) -> Path:
    """Write *payload* as indented UTF-8 JSON, creating parent directories."""
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(payload, indent=2, ensure_ascii=False) + "\n", encoding="utf-8")
    return path


def write_session_summary(summary: SessionSummary, path: str | Path) -> Path:
    """Write the session summary JSON document to *path*."""
    path = write_json(summary.to_dict(), path)
    _logger.info("Session summary written to %s", path)
    return path


def write_comparison_artifacts(result: ComparisonResult, output_dir: str | Path) -> dict[str, Path]:
    """Write ``ui_artifacts.json`` and ``comparison.md`` into *output_dir*.

    Returns:
        Mapping of artifact name to the path written.
    """
    output_dir = Path(output_dir)
    output_dir.mkdir(parents=True, exist_ok=True)

    ui_path = write_json(result.to_dict(), output_dir / UI_ARTIFACTS_NAME)
    report_path = output_dir / REPORT_NAME
    MarkdownFormatter().write(result, report_path)

    _logger.info("Comparison artifacts written to %s", output_dir)
    return {UI_ARTIFACTS_NAME: ui_path, REPORT_NAME: report_path}
