# File: ampliscan/app/core/export/json_exporter.py
# Version: v0.1.0

"""
Export a ClassificationSummary to a clean JSON file.
"""

import json
from dataclasses import asdict
from pathlib import Path
from typing import Any, Dict, Optional

from ampliscan.app.core.amplicon.classifier import ClassificationResult, ClassificationSummary
from ampliscan.app.core.fuzznuc.models import PrimerHit


def _hit(hit: Optional[PrimerHit]) -> Optional[Dict[str, Any]]:
    return asdict(hit) if hit is not None else None


def serialize_result(res: ClassificationResult) -> Dict[str, Any]:
    return {
        "seq_id":          res.seq_id,
        "category":        res.category.label,
        "amplicon_length": res.amplicon_length,
        "truncated":       res.truncated,
        "seq_length":      res.seq_length,
        "in_universe":     res.in_universe,
        "forward_hit":     _hit(res.forward_hit),
        "reverse_hit":     _hit(res.reverse_hit),
    }


def summary_to_dict(summary: ClassificationSummary) -> Dict[str, Any]:
    return {
        "options":           summary.options.model_dump(),
        "universe_supplied": summary.universe_supplied,
        "counts":            {cat.label: n for cat, n in summary.counts().items()},
        "not_in_universe":   list(summary.not_in_universe),
        "sequences":         [serialize_result(r) for r in summary.results],
    }


def export_results_to_json(summary: ClassificationSummary, json_path: Path) -> Path:
    """Write per-sequence classification results, counts and options to JSON."""
    json_path = Path(json_path)
    json_path.parent.mkdir(parents=True, exist_ok=True)
    json_path.write_text(json.dumps(summary_to_dict(summary), indent=2), encoding="utf-8")
    return json_path
