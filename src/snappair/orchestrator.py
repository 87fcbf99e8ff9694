"""Runs the matcher over every A file and collects the results."""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field
from typing import List, Sequence, Union

from tqdm import tqdm

from .errors import SnapPairError
from .matching import Matcher, MatchFailure, MatchResult
from .processor import run_limited

logger = logging.getLogger(__name__)


@dataclass
class BatchOutcome:
    """Sorted results plus any A files whose matching failed."""

    results: List[MatchResult] = field(default_factory=list)
    failures: List[MatchFailure] = field(default_factory=list)


def sort_results(results) -> List[MatchResult]:
    """Sort ascending by equality, keeping input order for ties."""
    return sorted(results, key=lambda r: r.equality)


class BatchOrchestrator:
    """Matches all A files with at most ``outer_concurrency`` in flight.

    With ``fail_fast`` the first error cancels the batch and propagates.
    Otherwise each failing A file is logged and recorded as a
    :class:`MatchFailure` and the rest of the batch carries on.
    """

    def __init__(self, matcher: Matcher, concurrency: int = 2, fail_fast: bool = False, progress: bool = True):
        self.matcher = matcher
        self.concurrency = concurrency
        self.fail_fast = fail_fast
        self.progress = progress

    async def run_all(self, files_from_a: Sequence[str]) -> BatchOutcome:
        bar = tqdm(total=len(files_from_a), desc="Matching", unit="img", disable=not self.progress)

        async def one(name: str) -> Union[MatchResult, MatchFailure, None]:
            try:
                return await self.matcher.match_one(name)
            except SnapPairError as e:
                if self.fail_fast:
                    raise
                logger.error("Matching failed for %s: %s", name, e)
                return MatchFailure(file_name_from_a=name, error=e)
            finally:
                bar.update(1)

        try:
            outcomes = await run_limited(one, files_from_a, self.concurrency)
        finally:
            bar.close()

        out = BatchOutcome()
        for o in outcomes:
            if isinstance(o, MatchFailure):
                out.failures.append(o)
            elif o is not None:
                out.results.append(o)
        out.results = sort_results(out.results)

        logger.info(
            "Batch done: %d matched, %d without candidate, %d failed",
            len(out.results),
            len(files_from_a) - len(out.results) - len(out.failures),
            len(out.failures),
        )
        return out


def run_batch(matcher: Matcher, files_from_a: Sequence[str], concurrency: int = 2,
              fail_fast: bool = False, progress: bool = True) -> BatchOutcome:
    """Synchronous wrapper around :meth:`BatchOrchestrator.run_all`."""
    orchestrator = BatchOrchestrator(matcher, concurrency=concurrency, fail_fast=fail_fast, progress=progress)
    return asyncio.run(orchestrator.run_all(files_from_a))
