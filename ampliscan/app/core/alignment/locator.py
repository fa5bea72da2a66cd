# File: ampliscan/app/core/alignment/locator.py
# Version: v0.1.0
"""
Locate primer sequences within the member sequences of a multiple alignment.

For every alignment row the gaps are removed, each primer is searched in the
gapless sequence (first exact occurrence, case-insensitive) and its position is
reported twice:
- residue coordinates: 1-based inclusive positions in the gapless sequence
- alignment columns:   1-based inclusive columns of those residues in the alignment

Gap characters other than '-' (by default '.') are first mapped to '-', the
only gap character assumed by the column arithmetic.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Iterable, List, Optional, Sequence, Tuple

from Bio import AlignIO
from Bio.Align import MultipleSeqAlignment
from Bio.Seq import Seq
from Bio.SeqRecord import SeqRecord

logger = logging.getLogger(__name__)

GAP = "-"


@dataclass
class PrimerLocation:
    primer: str
    seq_begin: Optional[int] = None
    seq_end: Optional[int] = None
    col_begin: Optional[int] = None
    col_end: Optional[int] = None

    @property
    def found(self) -> bool:
        return self.seq_begin is not None


@dataclass
class RowLocations:
    seq_id: str
    locations: List[PrimerLocation] = field(default_factory=list)


def load_alignment(path: Path, fmt: str = "fasta") -> MultipleSeqAlignment:
    """First alignment in `path`, in any format Biopython's AlignIO understands."""
    alignments = AlignIO.parse(str(path), fmt)
    aln = next(alignments, None)
    if aln is None:
        raise ValueError(f"No alignment found in {path} (format {fmt})")
    return aln


def resolve_gap_chars(alignment: MultipleSeqAlignment, gap_chars: str = "-.") -> MultipleSeqAlignment:
    """Return a copy of the alignment with every character of `gap_chars` replaced by '-'."""
    others = "".join(dict.fromkeys(c for c in gap_chars if c != GAP))
    if not others:
        return alignment
    table = str.maketrans(others, GAP * len(others))
    records = [
        SeqRecord(
            Seq(str(rec.seq).translate(table)),
            id=rec.id,
            name=rec.name,
            description=rec.description,
        )
        for rec in alignment
    ]
    return MultipleSeqAlignment(records)


def gapless(seq: str) -> str:
    return seq.replace(GAP, "")


def column_from_residue_number(gapped: str, residue: int) -> int:
    """1-based alignment column holding the 1-based `residue` of a gapped row."""
    if residue < 1:
        raise ValueError(f"residue number must be >= 1, got {residue}")
    seen = 0
    for col, ch in enumerate(gapped, start=1):
        if ch == GAP:
            continue
        seen += 1
        if seen == residue:
            return col
    raise ValueError(f"residue {residue} beyond the {seen} residues of the row")


def find_primer(sequence: str, primer: str) -> Optional[Tuple[int, int]]:
    """1-based inclusive (begin, end) of the first occurrence of `primer`, or None."""
    if not primer:
        return None
    idx = sequence.upper().find(primer.upper())
    if idx < 0:
        return None
    return idx + 1, idx + len(primer)


def locate_in_row(gapped: str, primers: Iterable[str]) -> List[PrimerLocation]:
    plain = gapless(gapped)
    out: List[PrimerLocation] = []
    for primer in primers:
        loc = PrimerLocation(primer=primer)
        hit = find_primer(plain, primer)
        if hit is not None:
            loc.seq_begin, loc.seq_end = hit
            loc.col_begin = column_from_residue_number(gapped, loc.seq_begin)
            loc.col_end = column_from_residue_number(gapped, loc.seq_end)
        out.append(loc)
    return out


def locate_primers(
    alignment: MultipleSeqAlignment,
    primers: Sequence[str],
    *,
    begin: int = 0,
    n_sequences: Optional[int] = None,
) -> List[RowLocations]:
    """
    Primer locations for the alignment rows `begin .. begin + n_sequences - 1`
    (0-based row index; all remaining rows when n_sequences is None).
    """
    if begin < 0:
        raise ValueError("begin must be >= 0")
    stop = None if n_sequences is None else begin + n_sequences
    rows = list(alignment)[begin:stop]
    return [RowLocations(seq_id=rec.id, locations=locate_in_row(str(rec.seq), primers)) for rec in rows]


def _na(value: Optional[int]) -> str:
    return "NA" if value is None else str(value)


def format_locations(rows: Iterable[RowLocations]) -> str:
    lines = []
    for row in rows:
        parts = [row.seq_id]
        for loc in row.locations:
            parts.append(loc.primer)
            parts.append(f"seq coords: {_na(loc.seq_begin)} .. {_na(loc.seq_end)}")
            parts.append(f"alignment cols: {_na(loc.col_begin)} .. {_na(loc.col_end)}")
        lines.append("\t".join(parts))
    return "\n".join(lines)


def describe_alignment(alignment: MultipleSeqAlignment) -> str:
    """Per-row id, gapped length and gapless length followed by the row itself."""
    lines = []
    for rec in alignment:
        seq = str(rec.seq)
        lines.append(f"{rec.id}\tlength {len(seq)}\tgapless length {len(gapless(seq))}")
        lines.append(seq)
    return "\n".join(lines)
