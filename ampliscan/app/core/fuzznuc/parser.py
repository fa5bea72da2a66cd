# File: ampliscan/app/core/fuzznuc/parser.py
# Version: v0.3.0
"""
Line-oriented parser for EMBOSS fuzznuc reports (`-rformat table`).

What this file does
-------------------
- Reads one report and returns a `FuzznucReport` whose records map each
  database sequence ID to the primer hits listed under its `# Sequence:` block.
- All parse state lives on a `FuzznucParser` instance, so several reports can
  be parsed in one process (forward + reverse) without interference.

Grammar
-------
- Blank lines and `#` lines that are not `# Key: Value` lines (rulers, the
  pattern table, command-line continuations) end the current hit table and are
  otherwise ignored.
- `# Key: Value rest` lines: Sequence, HitCount, Complement, trailer totals and
  a few run-metadata keys are recognized; any other key is a FormatError.
- The column header `Start End Strand Pattern_name Mismatch Sequence` opens a
  hit table; each following six-field row is one hit.
- Anything else is a FormatError. Errors are fatal: no partial report is
  returned.

v0.2.0:
- Duplicate `# Sequence:` IDs within one report are rejected.
- HitCount is checked against the parsed rows when a block closes (warning, or
  ConsistencyError with strict_hitcount=True).

v0.3.0:
- Hit rows ending past the declared `to:` length are rejected.
- Integer fields accept ASCII digits only.
"""

from __future__ import annotations

import logging
import re
from pathlib import Path
from typing import Iterable, NoReturn, Optional, Union

from ampliscan.app.core.errors import ConsistencyError, FormatError
from ampliscan.app.core.fuzznuc.models import (
    DIRECTIONS,
    FuzznucReport,
    PrimerHit,
    SequenceRecord,
)

logger = logging.getLogger(__name__)

_INT_RE = re.compile(r"\d+", re.ASCII)
_KEYWORD_RE = re.compile(r"^#\s+(\w+):\s*(\S+)(?:\s+(.*?))?\s*$")
_SEQ_RANGE_RE = re.compile(r"^from:\s*(\d+)\s+to:\s*(\d+)\s*$", re.ASCII)
_TABLE_HEADER_RE = re.compile(
    r"^\s*Start\s+End\s+Strand\s+Pattern_name\s+Mismatch\s+Sequence\s*$"
)
_TABLE_ROW_RE = re.compile(
    r"^\s*(\d+)\s+(\d+)\s+(\S)\s+(\S+)\s+(\d+|\.)\s+(\w+)\s*$",
    re.ASCII,
)

_IGNORED_KEYS = frozenset(
    {"Program", "Rundate", "Commandline", "Report_format", "Report_file"}
)
_TRAILER_KEYS = {
    "Total_sequences": "total_sequences",
    "Total_length": "total_length",
    "Reported_sequences": "reported_sequences",
    "Reported_hitcount": "reported_hitcount",
}


class FuzznucParser:
    """Stateful parser for a single fuzznuc report."""

    def __init__(
        self,
        direction: str,
        *,
        path: Optional[Union[str, Path]] = None,
        strict_hitcount: bool = False,
    ):
        if direction not in DIRECTIONS:
            raise ValueError(f"direction must be one of {DIRECTIONS}, got {direction!r}")
        self.path = Path(path) if path is not None else None
        self.strict_hitcount = strict_hitcount
        self.report = FuzznucReport(path=self.path, direction=direction)
        self.current: Optional[SequenceRecord] = None
        self.in_table = False
        self.line_no = 0

    # --------------------- Public API ---------------------

    def feed(self, line: str) -> None:
        self.line_no += 1
        line = line.rstrip("\r\n")

        if not line.strip():
            self.in_table = False
            return

        if line.startswith("#"):
            m = _KEYWORD_RE.match(line)
            if m is None:
                self.in_table = False
                return
            self._keyword(line, m.group(1), m.group(2), m.group(3) or "")
            return

        if _TABLE_HEADER_RE.match(line):
            if self.in_table:
                self._fail("unexpected header line: already in table", line)
            self.in_table = True
            return

        m = _TABLE_ROW_RE.match(line)
        if m:
            self._row(line, m)
            return

        self._fail("unexpected line format", line)

    def finish(self) -> FuzznucReport:
        self._close_record()
        logger.debug(
            "Parsed %s report %s: %d sequences, %d hits",
            self.report.direction, self.path or "<input>",
            len(self.report), self.report.hit_count,
        )
        return self.report

    def parse_lines(self, lines: Iterable[str]) -> FuzznucReport:
        for line in lines:
            self.feed(line)
        return self.finish()

    # --------------------- Internals ---------------------

    def _fail(self, reason: str, line: str) -> NoReturn:
        raise FormatError(reason, line, path=self.path, line_no=self.line_no)

    def _int(self, value: str, line: str) -> int:
        if _INT_RE.fullmatch(value) is None:
            self._fail(f"expected a non-negative integer, got {value!r}", line)
        return int(value)

    def _keyword(self, line: str, key: str, value: str, rest: str) -> None:
        if key == "Sequence":
            self._open_record(line, value, rest)
        elif key == "HitCount":
            if self.current is None:
                self._fail("HitCount before any Sequence header", line)
            self.current.declared_hits = self._int(value, line)
        elif key == "Complement":
            if value not in ("Yes", "No"):
                self._fail("unexpected line format", line)
            flag = value == "Yes"
            if self.current is not None:
                self.current.complement = flag
            else:
                self.report.complement = flag
        elif key in _TRAILER_KEYS:
            setattr(self.report, _TRAILER_KEYS[key], self._int(value, line))
        elif key in _IGNORED_KEYS:
            pass
        else:
            self._fail(f"unexpected line format (unknown keyword '{key}')", line)

    def _open_record(self, line: str, seq_id: str, rest: str) -> None:
        m = _SEQ_RANGE_RE.match(rest)
        if m is None:
            self._fail("unexpected line format", line)
        start, end = int(m.group(1)), int(m.group(2))

        self._close_record()
        if seq_id in self.report.records:
            self._fail(f"duplicate sequence ID '{seq_id}'", line)
        if start != 1:
            logger.warning("'from' value is %d in line %d of %s:\n%s",
                           start, self.line_no, self.path or "<input>", line)

        self.current = SequenceRecord(seq_id=seq_id, length=end, start=start)
        self.report.records[seq_id] = self.current

    def _close_record(self) -> None:
        rec = self.current
        self.current = None
        if rec is None or rec.declared_hits is None:
            return
        if rec.declared_hits == len(rec.hits):
            return
        msg = (f"{rec.seq_id}: HitCount {rec.declared_hits} declared but "
               f"{len(rec.hits)} hit rows parsed in {self.path or '<input>'}")
        if self.strict_hitcount:
            raise ConsistencyError(msg, seq_id=rec.seq_id)
        logger.warning(msg)

    def _row(self, line: str, m: "re.Match[str]") -> None:
        if not self.in_table:
            self._fail("unexpected table row (no header encountered yet)", line)
        if self.current is None:
            self._fail("table row before any Sequence header", line)

        begin, end = int(m.group(1)), int(m.group(2))
        if begin < 1 or begin > end:
            self._fail(f"invalid hit coordinates {begin}..{end}", line)
        if end > self.current.length:
            self._fail(
                f"hit {begin}..{end} beyond declared length {self.current.length} of '{self.current.seq_id}'",
                line,
            )
        mism = m.group(5)
        self.current.hits.append(
            PrimerHit(
                begin=begin,
                end=end,
                mismatches=None if mism == "." else int(mism),
                strand=m.group(3),
                pattern_name=m.group(4),
                matched_text=m.group(6),
            )
        )


def parse_fuzznuc(
    path: Union[str, Path],
    direction: str,
    *,
    strict_hitcount: bool = False,
) -> FuzznucReport:
    """Parse one fuzznuc report file. Raises FormatError on the first malformed line."""
    path = Path(path)
    parser = FuzznucParser(direction, path=path, strict_hitcount=strict_hitcount)
    with path.open("r", encoding="utf-8") as fh:
        return parser.parse_lines(fh)
