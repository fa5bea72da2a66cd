# File: ampliscan/tests/test_exporters.py
# Version: v0.1.0
"""
Tests for the classification outputs:
- text report at each verbosity
- JSON and CSV per-sequence exports
"""

from __future__ import annotations

import csv
import io
import json

import pytest

from ampliscan.app.core.amplicon.classifier import ClassifierOptions, classify, classify_hits
from ampliscan.app.core.export.csv_exporter import HEADERS, export_results_to_csv
from ampliscan.app.core.export.json_exporter import export_results_to_json
from ampliscan.app.core.export.text_report import NO_UNIVERSE_NOTE, format_length_stats, write_text_report
from ampliscan.app.core.fuzznuc.models import FORWARD, REVERSE, PrimerHit
from ampliscan.app.core.fuzznuc.parser import parse_fuzznuc

from conftest import UNIVERSE


@pytest.fixture
def reports(forward_path, reverse_path):
    return parse_fuzznuc(forward_path, FORWARD), parse_fuzznuc(reverse_path, REVERSE)


@pytest.fixture
def summary(reports):
    opts = ClassifierOptions(assume_3_truncated=True, assume_5_truncated=True)
    return classify(*reports, universe=UNIVERSE, options=opts)


def _render(summary, reports=None, **kw) -> str:
    buf = io.StringIO()
    fwd, rev = reports if reports else (None, None)
    write_text_report(summary, buf, forward=fwd, reverse=rev, **kw)
    return buf.getvalue()


def test_counts_only_at_verbosity_zero(summary):
    text = _render(summary, verbosity=0)
    assert "Sequences by primer content:" in text
    assert "Amplicon lengths" not in text
    assert "seq2" not in text
    lines = {ln.split()[0]: int(ln.split()[1]) for ln in text.splitlines()[1:] if ln.strip()}
    assert lines == {"NoPrimer": 2, "ForwardOnly": 1, "ReverseOnly": 1, "Both": 2}


def test_overview_and_length_stats(summary, reports):
    text = _render(summary, reports, verbosity=1)
    assert "Forward report:" in text and "(4 sequences, 4 hits)" in text
    assert "ID universe: 6 sequences" in text
    assert "trunc5=yes trunc3=yes" in text
    assert "Amplicon lengths: n=4 (2 truncated estimates) min=69 median=85 max=196" in text
    assert "ForwardOnly (1):" not in text


def test_large_median_is_not_scientific():
    def both(end):
        fwd = {"f": (PrimerHit(1, 20, 0, "+", "p", "A"),)}
        rev = {"f": (PrimerHit(end - 19, end, 0, "-", "p", "A"),)}
        return fwd, rev

    fwd, rev = both(1234567)
    text = format_length_stats(classify_hits(fwd, rev, {"f": 2000000}))
    assert text.endswith("min=1234567 median=1234567 max=1234567")

    fwd2, rev2 = both(1000000)
    summary = classify_hits({**fwd, "g": fwd2["f"]}, {**rev, "g": rev2["f"]}, {"f": 2000000, "g": 2000000})
    assert "median=1117283.5 " in format_length_stats(summary)


def test_id_lists_at_verbosity_two(summary):
    text = _render(summary, verbosity=2)
    assert "NoPrimer (2):\n  seq4\n  seq6" in text
    assert "ForwardOnly (1):\n  seq2\t196*" in text
    assert "ReverseOnly (1):\n  seq5\t69*" in text
    assert "Both (2):\n  seq1\t80\n  seq3\t90" in text


def test_no_universe_is_stated_not_silently_omitted(reports):
    summary = classify(*reports)
    text = _render(summary, verbosity=2)
    assert "ID universe: not supplied" in text
    assert NO_UNIVERSE_NOTE in text


def test_json_export(summary, tmp_path):
    out = export_results_to_json(summary, tmp_path / "sub" / "res.json")
    data = json.loads(out.read_text(encoding="utf-8"))
    assert data["counts"] == {"NoPrimer": 2, "ForwardOnly": 1, "ReverseOnly": 1, "Both": 2}
    assert data["options"]["assume_3_truncated"] is True
    seqs = {s["seq_id"]: s for s in data["sequences"]}
    assert seqs["seq2"]["amplicon_length"] == 196
    assert seqs["seq2"]["truncated"] is True
    assert seqs["seq2"]["reverse_hit"] is None
    assert seqs["seq1"]["forward_hit"]["begin"] == 10
    assert seqs["seq5"]["reverse_hit"]["mismatches"] is None
    assert seqs["seq6"]["category"] == "NoPrimer"


def test_csv_export(summary, tmp_path):
    out = export_results_to_csv(summary, tmp_path / "res.csv")
    with out.open(newline="", encoding="utf-8") as fh:
        rows = list(csv.DictReader(fh))
    assert list(rows[0].keys()) == HEADERS
    by_id = {r["seq_id"]: r for r in rows}
    assert len(rows) == len(UNIVERSE)
    assert by_id["seq3"]["amplicon_length"] == "90"
    assert by_id["seq3"]["forward_begin"] == "40"
    assert by_id["seq5"]["reverse_mismatches"] == "."
    assert by_id["seq6"]["amplicon_length"] == ""
    assert by_id["seq6"]["in_universe"] == "1"
