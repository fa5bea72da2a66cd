# File: ampliscan/app/core/amplicon/classifier.py
# Version: v0.3.0
"""
Classify database sequences by which primers fuzznuc found in them, and infer
the expected amplicon length.

Categories
----------
- NoPrimer:    no forward and no reverse hit
- ForwardOnly: >=1 forward hit, no reverse hit
- ReverseOnly: >=1 reverse hit, no forward hit
- Both:        >=1 forward and >=1 reverse hit

Amplicon length (1-based inclusive coordinates)
-----------------------------------------------
- Both: the best forward/reverse pair gives `reverse.end - forward.begin + 1`.
  Only pairs with `forward.begin <= reverse.end` qualify; among those the pair
  with the lowest mismatch sum wins, then the leftmost forward begin, then the
  shortest amplicon, then the leftmost reverse end.
- ForwardOnly with assume_3_truncated: the sequence is assumed to stop before
  the reverse primer site, so the amplicon runs to the 3' end:
  `seq_length - forward.begin + 1`. Best forward hit: fewest mismatches, then
  leftmost begin.
- ReverseOnly with assume_5_truncated: the amplicon runs from position 1:
  `reverse.end`. Best reverse hit: fewest mismatches, then rightmost end.

A `.` in fuzznuc's Mismatch column counts as 0 mismatches.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, Iterable, List, Optional, Sequence, Tuple

from pydantic import BaseModel, Field, conint

from ampliscan.app.core.errors import ConsistencyError
from ampliscan.app.core.fuzznuc.models import FuzznucReport, HitMap, PrimerHit

logger = logging.getLogger(__name__)


class Category(str, Enum):
    NO_PRIMER = "NoPrimer"
    FORWARD_ONLY = "ForwardOnly"
    REVERSE_ONLY = "ReverseOnly"
    BOTH = "Both"

    @property
    def label(self) -> str:
        return self.value


class ClassifierOptions(BaseModel):
    """Knobs for classification; mirrors the amplengths command-line flags."""
    assume_5_truncated: bool = Field(False, description="ReverseOnly: amplicon assumed to start at position 1")
    assume_3_truncated: bool = Field(False, description="ForwardOnly: amplicon assumed to run to the 3' end")
    max_mismatches: Optional[conint(ge=0)] = Field(None, description="Ignore hits with more mismatches")


@dataclass
class ClassificationResult:
    seq_id: str
    category: Category
    amplicon_length: Optional[int] = None
    truncated: bool = False
    seq_length: Optional[int] = None
    forward_hit: Optional[PrimerHit] = None
    reverse_hit: Optional[PrimerHit] = None
    in_universe: Optional[bool] = None


@dataclass
class ClassificationSummary:
    results: List[ClassificationResult] = field(default_factory=list)
    options: ClassifierOptions = field(default_factory=ClassifierOptions)
    universe_supplied: bool = False
    not_in_universe: List[str] = field(default_factory=list)

    def counts(self) -> Dict[Category, int]:
        out = {cat: 0 for cat in Category}
        for res in self.results:
            out[res.category] += 1
        return out

    def ids(self, category: Category) -> List[str]:
        return [r.seq_id for r in self.results if r.category == category]

    def by_id(self) -> Dict[str, ClassificationResult]:
        return {r.seq_id: r for r in self.results}

    def with_length(self) -> List[ClassificationResult]:
        return [r for r in self.results if r.amplicon_length is not None]

    def amplicon_lengths(self, include_truncated: bool = True) -> List[int]:
        return [
            r.amplicon_length
            for r in self.with_length()
            if include_truncated or not r.truncated
        ]


# --- Hit selection ---------------------------------------------------------------------------------

def filter_hits(hits: Iterable[PrimerHit], max_mismatches: Optional[int]) -> Tuple[PrimerHit, ...]:
    if max_mismatches is None:
        return tuple(hits)
    return tuple(h for h in hits if h.mismatch_count <= max_mismatches)


def best_forward_hit(hits: Sequence[PrimerHit]) -> Optional[PrimerHit]:
    if not hits:
        return None
    return min(hits, key=lambda h: (h.mismatch_count, h.begin))


def best_reverse_hit(hits: Sequence[PrimerHit]) -> Optional[PrimerHit]:
    if not hits:
        return None
    return min(hits, key=lambda h: (h.mismatch_count, -h.end))


def select_best_pair(
    forward_hits: Sequence[PrimerHit],
    reverse_hits: Sequence[PrimerHit],
) -> Optional[Tuple[PrimerHit, PrimerHit]]:
    """Best (forward, reverse) pair in amplicon orientation, or None if there is none."""
    best: Optional[Tuple[PrimerHit, PrimerHit]] = None
    best_key: Optional[Tuple[int, int, int, int]] = None
    for f in forward_hits:
        for r in reverse_hits:
            if f.begin > r.end:
                continue
            key = (f.mismatch_count + r.mismatch_count, f.begin, r.end - f.begin + 1, r.end)
            if best_key is None or key < best_key:
                best, best_key = (f, r), key
    return best


# --- Lengths -------------------------------------------------------------------------------------

def check_lengths(forward: FuzznucReport, reverse: FuzznucReport) -> Dict[str, int]:
    """
    Merge declared sequence lengths of both reports.
    Raises ConsistencyError if one ID is declared with two different lengths.
    """
    merged = dict(forward.lengths())
    for seq_id, length in reverse.lengths().items():
        known = merged.get(seq_id)
        if known is not None and known != length:
            raise ConsistencyError(
                f"{seq_id}: sequence length {known} in forward report "
                f"but {length} in reverse report",
                seq_id=seq_id,
            )
        merged[seq_id] = length
    return merged


# --- Classification --------------------------------------------------------------------------------

def _classify_one(
    seq_id: str,
    fwd: Tuple[PrimerHit, ...],
    rev: Tuple[PrimerHit, ...],
    seq_length: Optional[int],
    options: ClassifierOptions,
) -> ClassificationResult:
    res = ClassificationResult(seq_id=seq_id, category=Category.NO_PRIMER, seq_length=seq_length)

    if fwd and rev:
        res.category = Category.BOTH
        pair = select_best_pair(fwd, rev)
        if pair is None:
            logger.warning("%s: no forward hit lies 5' of a reverse hit; amplicon length unknown", seq_id)
            res.forward_hit = best_forward_hit(fwd)
            res.reverse_hit = best_reverse_hit(rev)
        else:
            res.forward_hit, res.reverse_hit = pair
            res.amplicon_length = res.reverse_hit.end - res.forward_hit.begin + 1

    elif fwd:
        res.category = Category.FORWARD_ONLY
        res.forward_hit = best_forward_hit(fwd)
        if options.assume_3_truncated:
            if seq_length is None:
                logger.warning("%s: no declared sequence length; cannot infer 3'-truncated amplicon", seq_id)
            else:
                res.amplicon_length = seq_length - res.forward_hit.begin + 1
                res.truncated = True

    elif rev:
        res.category = Category.REVERSE_ONLY
        res.reverse_hit = best_reverse_hit(rev)
        if options.assume_5_truncated:
            res.amplicon_length = res.reverse_hit.end
            res.truncated = True

    return res


def classify_hits(
    forward_hits: HitMap,
    reverse_hits: HitMap,
    lengths: Optional[Dict[str, int]] = None,
    universe: Optional[Sequence[str]] = None,
    options: Optional[ClassifierOptions] = None,
) -> ClassificationSummary:
    """
    Classify every ID seen in either hit map or in the universe.

    Order of results: universe order first, then forward-report order, then
    IDs only present in the reverse report.
    """
    options = options or ClassifierOptions()
    lengths = lengths or {}

    ordered: Dict[str, None] = {}
    for seq_id in list(universe or []) + list(forward_hits) + list(reverse_hits):
        ordered.setdefault(seq_id, None)

    universe_set = set(universe) if universe is not None else None
    summary = ClassificationSummary(options=options, universe_supplied=universe is not None)

    for seq_id in ordered:
        fwd = filter_hits(forward_hits.get(seq_id, ()), options.max_mismatches)
        rev = filter_hits(reverse_hits.get(seq_id, ()), options.max_mismatches)
        res = _classify_one(seq_id, fwd, rev, lengths.get(seq_id), options)
        if universe_set is not None:
            res.in_universe = seq_id in universe_set
            if not res.in_universe:
                summary.not_in_universe.append(seq_id)
        summary.results.append(res)

    if summary.not_in_universe:
        logger.warning(
            "%d sequence IDs found in the reports are missing from the ID universe (first: %s)",
            len(summary.not_in_universe), summary.not_in_universe[0],
        )
    return summary


def classify(
    forward: FuzznucReport,
    reverse: FuzznucReport,
    universe: Optional[Sequence[str]] = None,
    options: Optional[ClassifierOptions] = None,
) -> ClassificationSummary:
    """Classify the sequences of a forward-primer and a reverse-primer fuzznuc report."""
    lengths = check_lengths(forward, reverse)
    return classify_hits(forward.hit_map(), reverse.hit_map(), lengths, universe, options)
