"""Run summary and rejected-record reporting.

Provides the end-of-run counts for one input file (lines read, valid records,
malformed records, duplicates removed, per-carrier breakdown) and the rejects
report listing every skipped line with its reason.
"""

from __future__ import annotations

import json
import logging
from collections.abc import Mapping, Sequence
from dataclasses import asdict, dataclass, field
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Optional

import pandas as pd

from src.errors import MalformedRecordError
from src.pipeline import PipelineResult

logger = logging.getLogger(__name__)

CARRIER_STATS_COLUMNS = ["carrier", "candidates", "written", "duplicates_removed"]
REJECTS_COLUMNS = ["line_number", "identity_id", "reason", "raw"]


@dataclass
class RunSummary:
    """Counts for one processed input file."""

    source: str
    lines_read: int
    valid_records: int
    malformed: int
    duplicates_removed: int
    records_written: int
    carriers: dict[str, dict[str, int]] = field(default_factory=dict)
    output_files: dict[str, str] = field(default_factory=dict)
    elapsed_sec: float = 0.0
    finished_at: str = ""

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


def build_run_summary(
    source: str,
    result: PipelineResult,
    output_files: Optional[Mapping[str, Path]] = None,
    elapsed_sec: float = 0.0,
) -> RunSummary:
    """Collect the summary counts of a finished pipeline run."""
    carriers = {
        carrier: {
            "candidates": stats.candidates,
            "written": len(result.outputs.get(carrier, [])),
            "duplicates_removed": stats.duplicates_removed,
        }
        for carrier, stats in result.carrier_stats.items()
    }
    return RunSummary(
        source=source,
        lines_read=result.lines_read,
        valid_records=result.valid_records,
        malformed=len(result.errors),
        duplicates_removed=result.duplicates_removed,
        records_written=result.records_written,
        carriers=carriers,
        output_files={c: str(p) for c, p in (output_files or {}).items()},
        elapsed_sec=round(elapsed_sec, 3),
        finished_at=datetime.now(timezone.utc).isoformat(),
    )


def carrier_stats_frame(summary: RunSummary) -> pd.DataFrame:
    """One row per carrier: candidates, written and duplicates removed."""
    rows = [
        {"carrier": carrier, **counts}
        for carrier, counts in sorted(summary.carriers.items())
    ]
    return pd.DataFrame(rows, columns=CARRIER_STATS_COLUMNS)


def log_run_summary(summary: RunSummary) -> None:
    """Log the end-of-run summary for one input."""
    logger.info(f"=== Run summary: {summary.source} ===")
    logger.info(
        f"lines_read={summary.lines_read} | valid={summary.valid_records} "
        f"| malformed={summary.malformed} | duplicates_removed={summary.duplicates_removed} "
        f"| written={summary.records_written} | elapsed={summary.elapsed_sec:.2f}s",
    )
    frame = carrier_stats_frame(summary)
    if not frame.empty:
        logger.info("Per carrier:\n" + frame.to_string(index=False))


def save_run_summary(summary: RunSummary, path: Path) -> Path:
    """Write the run summary as JSON."""
    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, "w", encoding="utf-8") as f:
        json.dump(summary.to_dict(), f, indent=2, ensure_ascii=False)
    logger.info(f"Run summary saved to {path}")
    return path


def rejects_frame(errors: Sequence[MalformedRecordError]) -> pd.DataFrame:
    """Tabulate rejected records in input order."""
    rows = [
        {
            "line_number": e.line_number,
            "identity_id": e.identity_id,
            "reason": e.reason,
            "raw": e.raw,
        }
        for e in errors
    ]
    frame = pd.DataFrame(rows, columns=REJECTS_COLUMNS)
    frame["line_number"] = frame["line_number"].astype("Int64")
    return frame


def save_rejects(errors: Sequence[MalformedRecordError], path: Path) -> Path:
    """Write the rejects report as CSV."""
    path.parent.mkdir(parents=True, exist_ok=True)
    rejects_frame(errors).to_csv(path, index=False)
    logger.info(f"Rejects report saved to {path} ({len(errors)} records)")
    return path
