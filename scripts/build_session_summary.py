"""Build a session summary JSON from a telemetry log.

Usage:
  uv run python scripts/build_session_summary.py session.csv \\
      --cuts track_cuts/brands_hatch_cuts.json \\
      --output out/summary.json
"""

from __future__ import annotations

import sys

from telemetry_kpi.cli import summary_main

if __name__ == "__main__":
    sys.exit(summary_main())
