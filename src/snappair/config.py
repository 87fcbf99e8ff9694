"""Run configuration for SnapPair.

Every component receives a :class:`Config` explicitly; nothing reads paths
or the allow-list from module globals.
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Tuple

from .errors import ConfigError
from .files import DEFAULT_EXTS, SPLIT_MODES


@dataclass(frozen=True)
class Config:
    """All settings for one matching/reporting run."""

    dir_a: Path
    dir_b: Path
    cache_dir: Path
    results_path: Path
    report_path: Path
    allowed_extensions: Tuple[str, ...] = DEFAULT_EXTS
    split_mode: str = "first"
    outer_concurrency: int = 2
    inner_concurrency: int = 1
    fail_fast: bool = False
    max_equality: Optional[float] = None
    thumbnail_size: int = 200

    @property
    def mapping_csv_path(self) -> Path:
        return self.report_path.with_name("mapping.csv")

    @property
    def mapping_xlsx_path(self) -> Path:
        return self.report_path.with_name("mapping.xlsx")

    def validate(self, need_sources: bool = True) -> "Config":
        """Check the configuration, raising :class:`ConfigError` on problems.

        ``need_sources=False`` skips the source folder checks, which is what a
        report-only run (results reloaded from disk) wants.
        """

        if need_sources:
            for label, d in (("--dir-a", self.dir_a), ("--dir-b", self.dir_b)):
                if not d.is_dir():
                    raise ConfigError(f"{label} must be an existing folder: {d}")
        if not self.cache_dir.is_dir():
            raise ConfigError(f"--cache-dir must be an existing folder: {self.cache_dir}")
        if self.outer_concurrency < 1 or self.inner_concurrency < 1:
            raise ConfigError("Concurrency limits must be at least 1.")
        if self.thumbnail_size < 1:
            raise ConfigError("--thumbnail-size must be at least 1.")
        if self.split_mode not in SPLIT_MODES:
            raise ConfigError(f"Unknown split mode: {self.split_mode!r}")
        if not self.allowed_extensions:
            raise ConfigError("The extension allow-list is empty.")
        return self
