# File: ampliscan/app/core/export/text_report.py
# Version: v0.2.0
"""
Human-readable classification summary written to a text stream (stdout by default).

Verbosity:
- 0: per-category counts only
- 1: + input overview and amplicon length statistics
- 2+: + per-category ID lists; amplicon length after each ID, '*' marks a
  truncation-based estimate
"""

from __future__ import annotations

import sys
from statistics import median
from typing import Optional, TextIO

from ampliscan.app.core.amplicon.classifier import Category, ClassificationSummary
from ampliscan.app.core.fuzznuc.models import FuzznucReport

NO_UNIVERSE_NOTE = "not determinable without --ids_file/--seqs_file"


def _report_line(label: str, report: FuzznucReport) -> str:
    return f"{label} report: {report.path} ({len(report)} sequences, {report.hit_count} hits)"


def format_counts(summary: ClassificationSummary) -> str:
    counts = summary.counts()
    width = max(len(cat.label) for cat in Category)
    lines = []
    for cat in Category:
        line = f"  {cat.label:<{width}} {counts[cat]:>7}"
        if cat is Category.NO_PRIMER and not summary.universe_supplied:
            line += f"  ({NO_UNIVERSE_NOTE}; only sequences reported without hits are counted)"
        lines.append(line)
    return "\n".join(lines)


def _format_median(value: float) -> str:
    if float(value).is_integer():
        return str(int(value))
    return f"{value:.1f}"


def format_length_stats(summary: ClassificationSummary) -> str:
    lengths = summary.amplicon_lengths()
    if not lengths:
        return "Amplicon lengths: none"
    n_trunc = sum(1 for r in summary.with_length() if r.truncated)
    return (
        f"Amplicon lengths: n={len(lengths)} ({n_trunc} truncated estimates) "
        f"min={min(lengths)} median={_format_median(median(lengths))} max={max(lengths)}"
    )


def format_id_lists(summary: ClassificationSummary) -> str:
    blocks = []
    by_id = summary.by_id()
    for cat in Category:
        ids = summary.ids(cat)
        if cat is Category.NO_PRIMER and not summary.universe_supplied and not ids:
            blocks.append(f"{cat.label}: {NO_UNIVERSE_NOTE}")
            continue
        lines = [f"{cat.label} ({len(ids)}):"]
        for seq_id in ids:
            res = by_id[seq_id]
            if res.amplicon_length is None:
                lines.append(f"  {seq_id}")
            else:
                mark = "*" if res.truncated else ""
                lines.append(f"  {seq_id}\t{res.amplicon_length}{mark}")
        blocks.append("\n".join(lines))
    return "\n\n".join(blocks)


def write_text_report(
    summary: ClassificationSummary,
    out: Optional[TextIO] = None,
    *,
    verbosity: int = 1,
    forward: Optional[FuzznucReport] = None,
    reverse: Optional[FuzznucReport] = None,
) -> None:
    out = out or sys.stdout
    parts = []

    if verbosity >= 1:
        overview = []
        if forward is not None:
            overview.append(_report_line("Forward", forward))
        if reverse is not None:
            overview.append(_report_line("Reverse", reverse))
        if summary.universe_supplied:
            n_universe = sum(1 for r in summary.results if r.in_universe)
            overview.append(f"ID universe: {n_universe} sequences")
        else:
            overview.append("ID universe: not supplied")
        opts = summary.options
        overview.append(
            f"Assumptions: trunc5={'yes' if opts.assume_5_truncated else 'no'} "
            f"trunc3={'yes' if opts.assume_3_truncated else 'no'}"
            + (f" max_mismatches={opts.max_mismatches}" if opts.max_mismatches is not None else "")
        )
        parts.append("\n".join(overview))

    parts.append("Sequences by primer content:\n" + format_counts(summary))

    if verbosity >= 1:
        parts.append(format_length_stats(summary))
    if verbosity >= 2:
        parts.append(format_id_lists(summary))

    out.write("\n\n".join(parts) + "\n")
