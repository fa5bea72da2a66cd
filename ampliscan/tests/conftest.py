# File: ampliscan/tests/conftest.py
# Version: v0.2.0
"""
Test bootstrap: ensure project root is on sys.path so 'ampliscan.*' imports work.

Also provides small fuzznuc reports (forward + reverse primer searches over the
same six-sequence database) and a report builder for ad-hoc cases.
"""
import sys
from pathlib import Path
from typing import Iterable, Optional, Tuple

import pytest

ROOT = Path(__file__).resolve().parents[2]  # repo root (../.. from this file)
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))


HEADER = """\
########################################
# Program: fuzznuc
# Rundate: Tue 14 Jan 2020 10:00:00
# Commandline: fuzznuc
#    -sequence db.fasta
#    -pattern @{name}.pat
#    -complement
# Report_format: table
# Report_file: {name}.fuzznuc
########################################
"""

TRAILER = """
#---------------------------------------
#---------------------------------------

#---------------------------------------
# Total_sequences: {n}
# Total_length: {total}
# Reported_sequences: {n}
# Reported_hitcount: {hits}
#---------------------------------------
"""

Row = Tuple[int, int, str, str, str, str]


def sequence_block(
    seq_id: str,
    length: int,
    rows: Iterable[Row],
    *,
    start: int = 1,
    hitcount: Optional[int] = None,
) -> str:
    rows = list(rows)
    hc = len(rows) if hitcount is None else hitcount
    out = [
        "#=======================================",
        "#",
        f"# Sequence: {seq_id}     from: {start}   to: {length}",
        f"# HitCount: {hc}",
        "#",
        "# Pattern_name Mismatch Pattern",
        "# primer              2 ACGTACGTAC",
        "#",
        "# Complement: Yes",
        "#",
        "#=======================================",
        "",
    ]
    if rows:
        out.append("  Start     End  Strand Pattern_name Mismatch Sequence")
        for b, e, strand, name, mism, seq in rows:
            out.append(f"{b:>7} {e:>7} {strand:>7} {name:<12} {mism:>8} {seq}")
        out.append("")
    return "\n".join(out) + "\n"


def build_report(name: str, blocks: Iterable[Tuple[str, int, list]]) -> str:
    blocks = list(blocks)
    body = "".join(sequence_block(sid, length, rows) for sid, length, rows in blocks)
    return (
        HEADER.format(name=name)
        + "\n"
        + body
        + TRAILER.format(
            n=len(blocks),
            total=sum(length for _, length, _ in blocks),
            hits=sum(len(rows) for _, _, rows in blocks),
        )
    )


FORWARD_BLOCKS = [
    ("seq1", 100, [(10, 19, "+", "fwd", "0", "ACGTACGTAC")]),
    ("seq2", 200, [(5, 14, "+", "fwd", "1", "ACGTTCGTAC")]),
    ("seq3", 150, [(20, 29, "+", "fwd", "2", "ACCTACGAAC"),
                   (40, 49, "+", "fwd", "0", "ACGTACGTAC")]),
    ("seq4", 120, []),
]

REVERSE_BLOCKS = [
    ("seq1", 100, [(80, 89, "-", "rev", "0", "GGCATTGACC")]),
    ("seq3", 150, [(120, 129, "-", "rev", "1", "GGCATAGACC"),
                   (30, 39, "-", "rev", "0", "GGCATTGACC")]),
    ("seq5", 90, [(60, 69, "-", "rev", ".", "GGCATTGACC")]),
]

UNIVERSE = ["seq1", "seq2", "seq3", "seq4", "seq5", "seq6"]


@pytest.fixture
def make_report(tmp_path: Path):
    """Write report text to tmp_path/<name>.fuzznuc and return the path."""
    def _make(name: str, text: str) -> Path:
        p = tmp_path / f"{name}.fuzznuc"
        p.write_text(text, encoding="utf-8")
        return p
    return _make


@pytest.fixture
def forward_path(make_report) -> Path:
    return make_report("fwd", build_report("fwd", FORWARD_BLOCKS))


@pytest.fixture
def reverse_path(make_report) -> Path:
    return make_report("rev", build_report("rev", REVERSE_BLOCKS))


@pytest.fixture
def ids_path(tmp_path: Path) -> Path:
    p = tmp_path / "ids.txt"
    p.write_text("\n".join(UNIVERSE) + "\n", encoding="utf-8")
    return p


@pytest.fixture
def fasta_path(tmp_path: Path) -> Path:
    p = tmp_path / "db.fasta"
    p.write_text(
        "".join(f">{sid} test sequence\nACGTACGTACGGCATTGACC\n" for sid in UNIVERSE),
        encoding="utf-8",
    )
    return p
