# File: ampliscan/app/core/export/csv_exporter.py
# Version: v0.1.0
"""
CSV exporter: one row per classified sequence.
"""

from __future__ import annotations

import csv
from pathlib import Path
from typing import Dict, List

from ampliscan.app.core.amplicon.classifier import ClassificationResult, ClassificationSummary

HEADERS = [
    "seq_id",
    "category",
    "amplicon_length",
    "truncated",
    "seq_length",
    "in_universe",
    "forward_begin",
    "forward_end",
    "forward_mismatches",
    "forward_strand",
    "reverse_begin",
    "reverse_end",
    "reverse_mismatches",
    "reverse_strand",
]


def _opt(value) -> str:
    return "" if value is None else str(value)


def _row(res: ClassificationResult) -> Dict[str, str]:
    f = res.forward_hit
    r = res.reverse_hit
    return {
        "seq_id": res.seq_id,
        "category": res.category.label,
        "amplicon_length": _opt(res.amplicon_length),
        "truncated": "1" if res.truncated else "0",
        "seq_length": _opt(res.seq_length),
        "in_universe": "" if res.in_universe is None else ("1" if res.in_universe else "0"),
        "forward_begin": _opt(f.begin if f else None),
        "forward_end": _opt(f.end if f else None),
        "forward_mismatches": "." if f and f.mismatches is None else _opt(f.mismatches if f else None),
        "forward_strand": f.strand if f else "",
        "reverse_begin": _opt(r.begin if r else None),
        "reverse_end": _opt(r.end if r else None),
        "reverse_mismatches": "." if r and r.mismatches is None else _opt(r.mismatches if r else None),
        "reverse_strand": r.strand if r else "",
    }


def export_results_to_csv(summary: ClassificationSummary, csv_path: Path) -> Path:
    """Write the per-sequence classification table (header row always written)."""
    csv_path = Path(csv_path)
    csv_path.parent.mkdir(parents=True, exist_ok=True)
    rows: List[Dict[str, str]] = [_row(res) for res in summary.results]
    with csv_path.open("w", newline="", encoding="utf-8") as fh:
        w = csv.DictWriter(fh, fieldnames=HEADERS)
        w.writeheader()
        w.writerows(rows)
    return csv_path
