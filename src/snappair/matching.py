"""Matching logic for SnapPair.

Given:
- one file name from set A, and
- the listing of set B

we find the B file that looks most like the A file. Candidates whose
thumbnails are in different 8-pixel size buckets are skipped before paying
for a pixel comparison; a B file with exactly the same title wins outright.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional, Sequence

from .config import Config
from .files import FileEntry
from .processor import Processor, run_limited
from .scoring import dimensions_compatible

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class MatchCandidate:
    """One scored B file for a given A file."""

    equality: float
    file_name_from_b: str


@dataclass(frozen=True)
class MatchResult:
    """Best B match for one A file."""

    equality: float
    file_name_from_b: str
    file_name_from_a: str

    def to_json(self) -> dict:
        return {
            "equality": self.equality,
            "fileNameFromB": self.file_name_from_b,
            "fileNameFromA": self.file_name_from_a,
        }

    @classmethod
    def from_json(cls, data: dict) -> "MatchResult":
        return cls(
            equality=data.get("equality"),
            file_name_from_b=data.get("fileNameFromB"),
            file_name_from_a=data.get("fileNameFromA"),
        )


@dataclass(frozen=True)
class MatchFailure:
    """An A file whose matching raised instead of producing a result."""

    file_name_from_a: str
    error: BaseException


def select_best(candidates: Sequence[Optional[MatchCandidate]]) -> Optional[MatchCandidate]:
    """Pick the lowest-equality candidate; ties go to the earliest one."""

    best = None
    for c in candidates:
        if c is None:
            continue
        if best is None or c.equality < best.equality:
            best = c
    return best


class Matcher:
    """Finds the best B match for individual A files."""

    def __init__(self, config: Config, processor: Processor, files_from_b: Sequence[str]):
        self.config = config
        self.processor = processor
        self.entries_b = [FileEntry.parse(n, config.split_mode) for n in files_from_b]

    async def match_one(self, file_name_from_a: str) -> Optional[MatchResult]:
        """Return the best match for *file_name_from_a*, or None.

        Raises
        ------
        ImageProcessingError
            If a thumbnail or comparison fails for any candidate.
        """

        allowed = self.config.allowed_extensions
        entry_a = FileEntry.parse(file_name_from_a, self.config.split_mode)
        if not entry_a.allowed(allowed):
            logger.debug("Skipping %s: extension not allowed", file_name_from_a)
            return None

        # A B file with the same title scores 0 and nothing after it can win
        # the tie, so only the files before it need scoring.
        scan: List[FileEntry] = []
        title_hit: Optional[MatchCandidate] = None
        for entry_b in self.entries_b:
            if not entry_b.allowed(allowed):
                continue
            if entry_b.title == entry_a.title:
                title_hit = MatchCandidate(equality=0, file_name_from_b=entry_b.name)
                break
            scan.append(entry_b)

        async def score(entry_b: FileEntry) -> Optional[MatchCandidate]:
            return await self._score_candidate(entry_a, entry_b)

        candidates = await run_limited(score, scan, self.config.inner_concurrency)
        if title_hit is not None:
            candidates.append(title_hit)

        best = select_best(candidates)
        if best is None:
            logger.info("No candidate for %s", file_name_from_a)
            return None

        logger.info("Matched %s -> %s (equality=%s)", file_name_from_a, best.file_name_from_b, best.equality)
        return MatchResult(
            equality=best.equality,
            file_name_from_b=best.file_name_from_b,
            file_name_from_a=file_name_from_a,
        )

    async def _score_candidate(self, entry_a: FileEntry, entry_b: FileEntry) -> Optional[MatchCandidate]:
        dir_a: Path = self.config.dir_a
        dir_b: Path = self.config.dir_b

        thumb_a = await self.processor.thumbnail(dir_a, entry_a.name)
        thumb_b = await self.processor.thumbnail(dir_b, entry_b.name)
        if thumb_a is None or thumb_b is None:
            return None

        dims_a = await self.processor.dimensions(thumb_a)
        dims_b = await self.processor.dimensions(thumb_b)
        if not dimensions_compatible(dims_a, dims_b):
            logger.debug("Skipping %s vs %s: sizes %s / %s", entry_a.name, entry_b.name, dims_a, dims_b)
            return None

        diff = await self.processor.compare(thumb_a, thumb_b)
        return MatchCandidate(equality=diff.equality, file_name_from_b=entry_b.name)
