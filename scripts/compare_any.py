"""Compare laps across one or two telemetry logs.

Usage:
  uv run python scripts/compare_any.py \\
      --mode lap_vs_lap --file-a session.csv \\
      --cuts track_cuts/brands_hatch_cuts.json \\
      --lap-a 3 --lap-b 5 \\
      --output out/
"""

from __future__ import annotations

import sys

from telemetry_kpi.cli import compare_main

if __name__ == "__main__":
    sys.exit(compare_main())
