# File: ampliscan/app/core/errors.py
# Version: v0.1.0
"""
Exception hierarchy shared by the report parser, the classifier and the CLIs.

All errors are fatal for the current run; CLIs catch `AmpliscanError`,
print a one-line message to stderr and exit non-zero.
"""

from __future__ import annotations

from pathlib import Path
from typing import Optional, Union


class AmpliscanError(RuntimeError):
    pass


class UsageError(AmpliscanError):
    """Missing or contradictory command-line input (raised before any parsing)."""


class FormatError(AmpliscanError):
    """A report line that matches none of the recognized grammars."""

    def __init__(
        self,
        reason: str,
        line: str,
        *,
        path: Optional[Union[str, Path]] = None,
        line_no: Optional[int] = None,
    ):
        self.reason = reason
        self.line = line
        self.path = str(path) if path is not None else None
        self.line_no = line_no
        where = self.path or "<input>"
        if line_no is not None:
            where = f"{where}:{line_no}"
        super().__init__(f"{where}: {reason}:\n{line}")


class ConsistencyError(AmpliscanError):
    """Two sources disagree about the same sequence (declared length, hit count)."""

    def __init__(self, message: str, seq_id: Optional[str] = None):
        self.seq_id = seq_id
        super().__init__(message)
