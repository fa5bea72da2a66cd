# File: ampliscan/app/core/fuzznuc/models.py
# Version: v0.1.0
"""
Data model for parsed EMBOSS fuzznuc reports.

Coordinates
-----------
- `begin` and `end` are 1-based inclusive, exactly as fuzznuc prints them,
  in the coordinate space of the full (untruncated) database sequence.
- `mismatches` is None when fuzznuc prints `.` (pattern searched without a
  mismatch allowance).
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, List, Optional, Tuple

FORWARD = "forward"
REVERSE = "reverse"
DIRECTIONS = (FORWARD, REVERSE)


@dataclass(frozen=True)
class PrimerHit:
    begin: int
    end: int
    mismatches: Optional[int]
    strand: str
    pattern_name: str
    matched_text: str

    @property
    def mismatch_count(self) -> int:
        """Mismatches for ranking purposes; `.` counts as an exact match."""
        return self.mismatches or 0


HitMap = Dict[str, Tuple[PrimerHit, ...]]


@dataclass
class SequenceRecord:
    """One `# Sequence:` block; owned by the parser until the report is returned."""
    seq_id: str
    length: int
    start: int = 1
    declared_hits: Optional[int] = None
    complement: Optional[bool] = None
    hits: List[PrimerHit] = field(default_factory=list)


@dataclass
class FuzznucReport:
    path: Optional[Path]
    direction: str
    records: Dict[str, SequenceRecord] = field(default_factory=dict)
    complement: Optional[bool] = None

    # Trailer totals (advisory)
    total_sequences: Optional[int] = None
    total_length: Optional[int] = None
    reported_sequences: Optional[int] = None
    reported_hitcount: Optional[int] = None

    def hit_map(self) -> HitMap:
        return {sid: tuple(rec.hits) for sid, rec in self.records.items()}

    def lengths(self) -> Dict[str, int]:
        return {sid: rec.length for sid, rec in self.records.items()}

    @property
    def hit_count(self) -> int:
        return sum(len(rec.hits) for rec in self.records.values())

    def __len__(self) -> int:
        return len(self.records)
