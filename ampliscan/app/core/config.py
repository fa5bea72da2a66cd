# File: ampliscan/app/core/config.py
# Version: v0.4.0
"""
Centralized settings using Pydantic Settings.

Controls:
- Default log level for the CLIs
- Default verbosity of the text reports
- Default sequence / alignment file formats (any Biopython SeqIO/AlignIO name)
- Gap characters normalized to '-' before locating primers in an alignment
- Whether a fuzznuc HitCount that disagrees with the parsed rows is fatal

Every field can be overridden from the environment with the AMPLISCAN_ prefix,
e.g. AMPLISCAN_SEQS_FORMAT=genbank.
"""
from __future__ import annotations

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    # --- App ---
    APP_NAME: str = "ampliscan"
    APP_VERSION: str = "0.4.0"

    # --- Logging / output ---
    LOG_LEVEL: str = "WARNING"
    DEFAULT_VERBOSITY: int = 1

    # --- Input formats ---
    SEQS_FORMAT: str = "fasta"
    ALIGNMENT_FORMAT: str = "fasta"
    GAP_CHARS: str = "-."

    # --- fuzznuc parsing ---
    STRICT_HITCOUNT: bool = False

    # - extra="ignore": unrelated AMPLISCAN_* vars won't crash
    # - env_file=None: do NOT auto-load any .env
    model_config = SettingsConfigDict(
        env_prefix="AMPLISCAN_",
        extra="ignore",
        env_file=None,
        env_file_encoding="utf-8",
    )

    @property
    def log_level_name(self) -> str:
        return self.LOG_LEVEL.strip().upper() or "WARNING"


settings = Settings()
