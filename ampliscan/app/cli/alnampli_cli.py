# File: ampliscan/app/cli/alnampli_cli.py
# Version: v0.1.0
"""
CLI: locate forward/reverse primer sequences in every member of a multiple alignment.

Prints one tab-separated line per alignment row:
    <id>  <primer>  seq coords: <b> .. <e>  alignment cols: <c> .. <d>  [...]
with NA where a primer does not occur in the (gapless) row.

Usage:
    python -m ampliscan.app.cli.alnampli_cli \
        --sequences aln.fasta [--format clustal] [--gap_chars '-.~'] \
        --forward_primer ACGTACGT --reverse_primer TTGACCA
"""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path
from typing import List, Optional

from ampliscan.app.core.config import settings
from ampliscan.app.core.errors import UsageError
from ampliscan.app.core.alignment.locator import (
    describe_alignment,
    format_locations,
    load_alignment,
    locate_primers,
    resolve_gap_chars,
)

LOG_LEVELS = ["DEBUG", "INFO", "WARNING", "ERROR"]


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(prog="alnampli", description="Primer locations within a multiple alignment")
    p.add_argument("--sequences", "--seqs", required=True, type=Path, help="Alignment file")
    p.add_argument("--format", default=settings.ALIGNMENT_FORMAT,
                   help=f"Biopython AlignIO format (default: {settings.ALIGNMENT_FORMAT})")
    p.add_argument("--gap_chars", default=settings.GAP_CHARS,
                   help=f"Characters treated as gaps (default: '{settings.GAP_CHARS}')")
    p.add_argument("--forward_primer", "--fwd", dest="forward_primer", help="Forward primer sequence")
    p.add_argument("--reverse_primer", "--rev", dest="reverse_primer", help="Reverse primer sequence")
    p.add_argument("--begin", type=int, default=0, help="First alignment row to report (0-based)")
    p.add_argument("--n_sequences", type=int, default=None, help="Number of rows to report")
    p.add_argument("--verbosity", type=int, default=settings.DEFAULT_VERBOSITY,
                   help="0: silent, 1: locations, 3: + arguments, 4: + alignment dump")
    p.add_argument("--log-level", dest="log_level", default=settings.log_level_name,
                   choices=LOG_LEVELS, help=f"Logging level (default: {settings.log_level_name})")
    p.add_argument("--version", action="version", version=f"%(prog)s ({settings.APP_NAME}) {settings.APP_VERSION}")
    return p


def main(argv: Optional[List[str]] = None) -> None:
    args = build_parser().parse_args(argv)

    level = "DEBUG" if args.verbosity > 3 else args.log_level
    logging.basicConfig(level=getattr(logging, level))
    log = logging.getLogger("alnampli_cli")
    if args.verbosity > 2:
        log.info("Arguments: %s", vars(args))

    try:
        if not args.sequences.is_file():
            raise UsageError(f"'{args.sequences}' does not exist or is not a file")
        if args.begin < 0 or (args.n_sequences is not None and args.n_sequences < 1):
            raise UsageError("--begin must be >= 0 and --n_sequences >= 1")

        aln = load_alignment(args.sequences, args.format)
        log.debug("Alignment as read:\n%s", describe_alignment(aln))

        if args.gap_chars != "-":
            aln = resolve_gap_chars(aln, args.gap_chars)
            log.debug("Alignment after gap resolution:\n%s", describe_alignment(aln))

        primers = [s for s in (args.forward_primer, args.reverse_primer) if s]
        if not primers:
            log.warning("No primer sequences given; nothing to locate")
            return

        rows = locate_primers(aln, primers, begin=args.begin, n_sequences=args.n_sequences)
        if args.verbosity:
            print(format_locations(rows))

    except UsageError as ex:
        print(f"[ERROR] {ex}", file=sys.stderr)
        sys.exit(2)
    except (OSError, ValueError) as ex:
        print(f"[ERROR] {ex}", file=sys.stderr)
        sys.exit(1)


if __name__ == "__main__":
    main()
