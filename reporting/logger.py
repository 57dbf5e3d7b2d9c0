"""
CSV logger for planning calls.

Purpose: Append one row per path request so planner behaviour can be compared
         across rooms and step sizes.

Inputs:
    - Room name
    - PathResult from the planner

Outputs:
    - CSV file in data/logs/ (one per session)

Params:
    session: str - Session label used in the file name
    log_dir: str - Directory for CSV files
"""

import csv
import os
from datetime import datetime
from pathlib import Path
from typing import Dict, Optional


class PlanLogger:
    """CSV logger for path requests."""

    csv_schema = [
        "timestamp",
        "room",
        "start_x",
        "start_y",
        "end_x",
        "end_y",
        "outcome",
        "waypoints",
        "path_len",
        "expansions",
        "oracle_queries",
        "oracle_failures",
        "cpu_ms",
    ]

    def __init__(self, session: str = "session", log_dir: str = "data/logs",
                 filename: Optional[str] = None):
        """
        Initialize plan logger.

        Args:
            session: Session label, e.g. the starting room
            log_dir: Directory for CSV output
            filename: Explicit file name (defaults to <session>_<timestamp>.csv)
        """
        self.session = session
        self.log_dir = Path(log_dir)
        os.makedirs(self.log_dir, exist_ok=True)

        if filename is None:
            timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
            filename = f"{session}_{timestamp}.csv"
        self.path = self.log_dir / filename
        self.rows_written = 0

    def _row(self, room: str, result) -> Dict:
        return {
            "timestamp": datetime.now().isoformat(timespec="milliseconds"),
            "room": room,
            "start_x": result.start[0],
            "start_y": result.start[1],
            "end_x": result.end[0],
            "end_y": result.end[1],
            "outcome": result.outcome,
            "waypoints": len(result.waypoints),
            "path_len": round(result.length, 3),
            "expansions": result.expansions,
            "oracle_queries": result.oracle_queries,
            "oracle_failures": result.oracle_failures,
            "cpu_ms": round(result.cpu_ms, 3),
        }

    def log(self, room: str, result):
        """
        Append a planning result.

        Args:
            room: Room the request was made in
            result: PathResult
        """
        file_exists = self.path.exists()
        with open(self.path, "a", newline="") as f:
            writer = csv.DictWriter(f, fieldnames=self.csv_schema)
            if not file_exists:
                writer.writeheader()
            writer.writerow(self._row(room, result))
        self.rows_written += 1
