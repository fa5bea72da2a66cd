# File: ampliscan/app/core/amplicon/universe.py
# Version: v0.1.0
"""
The "universe" of database sequence IDs: every sequence that fuzznuc searched.

Sequences with no hit at all are usually absent from fuzznuc output, so they
can only be counted when the complete ID list is supplied, either as a plain
ID file or as the sequence file that was searched.
When both are given the union is used.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import List, Optional

from Bio import SeqIO

logger = logging.getLogger(__name__)


def _dedupe(ids: List[str]) -> List[str]:
    return list(dict.fromkeys(ids))


def read_ids_file(path: Path) -> List[str]:
    """One ID per line (first token); blank and '#' lines are skipped."""
    ids: List[str] = []
    with Path(path).open("r", encoding="utf-8") as fh:
        for line in fh:
            line = line.strip()
            if not line or line.startswith("#"):
                continue
            ids.append(line.split()[0])
    return _dedupe(ids)


def read_seq_ids(path: Path, fmt: str = "fasta") -> List[str]:
    """Record IDs of a sequence file in any format Biopython's SeqIO understands."""
    return _dedupe([rec.id for rec in SeqIO.parse(str(path), fmt)])


def load_universe(
    ids_file: Optional[Path] = None,
    seqs_file: Optional[Path] = None,
    seqs_format: str = "fasta",
) -> Optional[List[str]]:
    """
    Return the ordered union of IDs from `ids_file` and `seqs_file`,
    or None when neither is given.
    """
    if ids_file is None and seqs_file is None:
        return None

    from_ids = read_ids_file(ids_file) if ids_file is not None else []
    from_seqs = read_seq_ids(seqs_file, seqs_format) if seqs_file is not None else []

    if ids_file is not None:
        logger.info("ID universe: %d IDs from %s", len(from_ids), ids_file)
    if seqs_file is not None:
        logger.info("ID universe: %d IDs from %s (%s)", len(from_seqs), seqs_file, seqs_format)

    if ids_file is not None and seqs_file is not None:
        only_ids = set(from_ids) - set(from_seqs)
        only_seqs = set(from_seqs) - set(from_ids)
        if only_ids or only_seqs:
            logger.warning(
                "ID file and sequence file disagree (%d IDs only in %s, %d only in %s); using their union",
                len(only_ids), ids_file, len(only_seqs), seqs_file,
            )

    return _dedupe(from_ids + from_seqs)
