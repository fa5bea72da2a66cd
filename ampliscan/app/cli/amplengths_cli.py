# File: ampliscan/app/cli/amplengths_cli.py
# Version: v0.3.0
"""
CLI: classify database sequences from two EMBOSS fuzznuc reports and infer amplicon lengths.

- Parses the forward-primer and the reverse-primer fuzznuc reports.
- Classifies each sequence as NoPrimer / ForwardOnly / ReverseOnly / Both.
- Sequences without any hit are only known when --ids_file and/or --seqs_file
  give the complete set of searched IDs (their union is used).
- --trunc3: ForwardOnly sequences are assumed truncated 3' of the amplicon, so
  the amplicon runs to the sequence end. --trunc5: ReverseOnly sequences are
  assumed truncated 5' of it, so the amplicon starts at position 1.
- Prints counts (and ID lists at --verbosity 2) to stdout; warnings to stderr.
  Optional structured output with --json-out / --csv-out.

Exit codes: 0 ok, 1 malformed or inconsistent input, 2 usage error.

Usage:
    python -m ampliscan.app.cli.amplengths_cli \
        --forward fwd.fuzznuc --reverse rev.fuzznuc \
        [--seqs_file db.fasta] [--ids_file ids.txt] \
        [--trunc5] [--trunc3] [--verbosity 2] [--json-out out/amplengths.json]
"""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path
from typing import List, Optional

from ampliscan.app.core.config import settings
from ampliscan.app.core.errors import AmpliscanError, UsageError
from ampliscan.app.core.fuzznuc.models import FORWARD, REVERSE
from ampliscan.app.core.fuzznuc.parser import parse_fuzznuc
from ampliscan.app.core.amplicon.universe import load_universe
from ampliscan.app.core.amplicon.classifier import ClassifierOptions, classify
from ampliscan.app.core.export.text_report import write_text_report
from ampliscan.app.core.export.json_exporter import export_results_to_json
from ampliscan.app.core.export.csv_exporter import export_results_to_csv

LOG_LEVELS = ["DEBUG", "INFO", "WARNING", "ERROR"]


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(
        prog="amplengths",
        description="Classify sequences by fuzznuc primer hits and infer amplicon lengths",
    )
    p.add_argument("--forward", required=True, type=Path, help="fuzznuc report for the forward primer")
    p.add_argument("--reverse", required=True, type=Path, help="fuzznuc report for the reverse primer")
    p.add_argument("--ids_file", "--id_file", dest="ids_file", type=Path,
                   help="All searched sequence IDs, one per line")
    p.add_argument("--seqs_file", "--seq_file", dest="seqs_file", type=Path,
                   help="The searched sequence file; its record IDs form the ID universe")
    p.add_argument("--seqs_format", default=settings.SEQS_FORMAT,
                   help=f"Biopython SeqIO format of --seqs_file (default: {settings.SEQS_FORMAT})")
    p.add_argument("--trunc5", action="store_true",
                   help="ReverseOnly: assume the amplicon extends to the 5' end")
    p.add_argument("--trunc3", action="store_true",
                   help="ForwardOnly: assume the amplicon extends to the 3' end")
    p.add_argument("--max_mismatches", type=int, default=None,
                   help="Ignore hits with more mismatches than this")
    p.add_argument("--strict_hitcount", action=argparse.BooleanOptionalAction,
                   default=settings.STRICT_HITCOUNT,
                   help="Fail when a report's HitCount disagrees with its hit rows")
    p.add_argument("--verbosity", type=int, default=settings.DEFAULT_VERBOSITY,
                   help="0: counts only, 1: + overview, 2: + ID lists")
    p.add_argument("--json-out", dest="json_out", type=Path, help="Write per-sequence results as JSON")
    p.add_argument("--csv-out", dest="csv_out", type=Path, help="Write per-sequence results as CSV")
    p.add_argument("--log-level", dest="log_level", default=settings.log_level_name,
                   choices=LOG_LEVELS, help=f"Logging level (default: {settings.log_level_name})")
    p.add_argument("--version", action="version", version=f"%(prog)s ({settings.APP_NAME}) {settings.APP_VERSION}")
    return p


def check_inputs(args: argparse.Namespace) -> None:
    """Validate paths and numbers before any parsing starts."""
    for label, path in (("--forward", args.forward), ("--reverse", args.reverse),
                        ("--ids_file", args.ids_file), ("--seqs_file", args.seqs_file)):
        if path is not None and not path.is_file():
            raise UsageError(f"{label}: '{path}' does not exist or is not a file")
    if args.max_mismatches is not None and args.max_mismatches < 0:
        raise UsageError("--max_mismatches must be >= 0")


def main(argv: Optional[List[str]] = None) -> None:
    args = build_parser().parse_args(argv)

    logging.basicConfig(level=getattr(logging, args.log_level))
    log = logging.getLogger("amplengths_cli")
    if args.verbosity > 2:
        log.info("Arguments: %s", vars(args))

    try:
        check_inputs(args)

        forward = parse_fuzznuc(args.forward, FORWARD, strict_hitcount=args.strict_hitcount)
        reverse = parse_fuzznuc(args.reverse, REVERSE, strict_hitcount=args.strict_hitcount)
        log.info("Forward: %d sequences, %d hits | Reverse: %d sequences, %d hits",
                 len(forward), forward.hit_count, len(reverse), reverse.hit_count)

        universe = load_universe(args.ids_file, args.seqs_file, args.seqs_format)

        options = ClassifierOptions(
            assume_5_truncated=args.trunc5,
            assume_3_truncated=args.trunc3,
            max_mismatches=args.max_mismatches,
        )
        summary = classify(forward, reverse, universe, options)

        write_text_report(summary, sys.stdout, verbosity=args.verbosity,
                          forward=forward, reverse=reverse)

        if args.json_out:
            log.info("JSON written: %s", export_results_to_json(summary, args.json_out))
        if args.csv_out:
            log.info("CSV written: %s", export_results_to_csv(summary, args.csv_out))

    except UsageError as ex:
        print(f"[ERROR] {ex}", file=sys.stderr)
        sys.exit(2)
    except (AmpliscanError, OSError, ValueError) as ex:
        print(f"[ERROR] {ex}", file=sys.stderr)
        sys.exit(1)


if __name__ == "__main__":
    main()
