"""SnapPair CLI.

This is the entry point used by:
- `python -m snappair`
- the console script `snappair` (installed via pyproject.toml)

Example
-------
snappair --dir-a "/photos/without-id" --dir-b "/photos/with-id" \
    --cache-dir "/tmp/snappair" --out "/photos/review"

Outputs
-------
- <out>/diff-output.json   the matched pairs, best first
- <out>/diff-output.htm    HTML page for reviewing the pairs
- <out>/mapping.csv        one row per pair (plus failed files)

Re-running with ``--from-results`` skips matching and rebuilds the reports
from the JSON file.
"""

from __future__ import annotations

import argparse
import asyncio
import logging
from pathlib import Path
from typing import List, Optional, Sequence

from .config import Config
from .errors import ConfigError, SnapPairError
from .files import DEFAULT_EXTS, SPLIT_MODES, list_directory
from .io_utils import (
    load_results,
    save_results,
    write_mapping_csv,
    write_mapping_xlsx,
    write_text_atomic,
)
from .matching import Matcher, MatchResult
from .orchestrator import BatchOrchestrator, BatchOutcome
from .processor import Processor
from .rename import plan_renames
from .report import mapping_rows, needs_review, render_report
from .thumbnails import ThumbnailCache

logger = logging.getLogger(__name__)


def _parse_args(argv: Optional[Sequence[str]] = None) -> argparse.Namespace:
    """Parse command-line arguments."""
    p = argparse.ArgumentParser(
        prog="snappair",
        description=(
            "Pair visually similar images across two folders, suggest a common "
            "name for each pair and write a review report."
        ),
    )
    p.add_argument("--dir-a", required=True, type=Path, help="Folder with the A images.")
    p.add_argument("--dir-b", required=True, type=Path, help="Folder with the B images.")
    p.add_argument(
        "--cache-dir",
        required=True,
        type=Path,
        help="Existing folder for cached thumbnails (reused across runs).",
    )
    p.add_argument(
        "--out",
        type=Path,
        default=Path("."),
        help="Folder for the JSON results and reports (default: current folder).",
    )
    p.add_argument("--results", type=Path, default=None, help="Results JSON path (default: <out>/diff-output.json).")
    p.add_argument("--report", type=Path, default=None, help="HTML report path (default: <out>/diff-output.htm).")
    p.add_argument(
        "--ext",
        dest="extensions",
        action="append",
        default=None,
        help=f"Allowed extension without the dot; repeatable (default: {', '.join(DEFAULT_EXTS)}).",
    )
    p.add_argument(
        "--split-mode",
        choices=SPLIT_MODES,
        default="first",
        help="Split names into title/extension at the first (default) or last dot.",
    )
    p.add_argument("--outer-concurrency", type=int, default=2, help="A files matched at once (default: 2).")
    p.add_argument(
        "--inner-concurrency", type=int, default=1, help="B candidates scored at once per A file (default: 1)."
    )
    p.add_argument("--thumbnail-size", type=int, default=200, help="Thumbnail bounding box in pixels (default: 200).")
    p.add_argument(
        "--max-equality",
        type=float,
        default=None,
        help="Leave pairs scoring above this out of the report and rename plan.",
    )
    p.add_argument(
        "--fail-fast",
        action="store_true",
        help="Abort the whole run on the first image error instead of skipping that file.",
    )
    p.add_argument(
        "--from-results",
        action="store_true",
        help="Skip matching; rebuild the reports from an existing results JSON.",
    )
    p.add_argument("--clear-cache", action="store_true", help="Delete cached thumbnails before running.")
    p.add_argument("--report-xlsx", action="store_true", help="Also write mapping.xlsx (requires openpyxl).")
    p.add_argument("--apply", action="store_true", help="Actually perform the suggested renames.")
    p.add_argument("--no-progress", action="store_true", help="Hide progress bars.")
    p.add_argument("-v", "--verbose", action="count", default=0, help="More logging (-v info, -vv debug).")
    return p.parse_args(argv)


def _build_config(args: argparse.Namespace) -> Config:
    out_dir: Path = args.out.expanduser().resolve()
    return Config(
        dir_a=args.dir_a.expanduser().resolve(),
        dir_b=args.dir_b.expanduser().resolve(),
        cache_dir=args.cache_dir.expanduser().resolve(),
        results_path=(args.results or out_dir / "diff-output.json").expanduser().resolve(),
        report_path=(args.report or out_dir / "diff-output.htm").expanduser().resolve(),
        allowed_extensions=tuple(args.extensions) if args.extensions else DEFAULT_EXTS,
        split_mode=args.split_mode,
        outer_concurrency=args.outer_concurrency,
        inner_concurrency=args.inner_concurrency,
        fail_fast=args.fail_fast,
        max_equality=args.max_equality,
        thumbnail_size=args.thumbnail_size,
    )


def _setup_logging(verbosity: int) -> None:
    level = logging.WARNING
    if verbosity == 1:
        level = logging.INFO
    elif verbosity >= 2:
        level = logging.DEBUG
    logging.basicConfig(level=level, format="%(asctime)s %(levelname)s %(name)s: %(message)s")


def run_matching(config: Config, cache: ThumbnailCache, progress: bool = True) -> BatchOutcome:
    """List both folders once and match every A file against B."""

    files_from_a = list_directory(config.dir_a)
    files_from_b = list_directory(config.dir_b)
    logger.info("Found %d files in A and %d in B", len(files_from_a), len(files_from_b))

    workers = config.outer_concurrency * config.inner_concurrency
    with Processor(cache, workers=workers) as processor:
        matcher = Matcher(config, processor, files_from_b)
        orchestrator = BatchOrchestrator(
            matcher,
            concurrency=config.outer_concurrency,
            fail_fast=config.fail_fast,
            progress=progress,
        )
        return asyncio.run(orchestrator.run_all(files_from_a))


def _print_renames(results: List[MatchResult], config: Config, apply: bool) -> int:
    """Print (and optionally perform) the rename plans. Returns failed renames."""

    failed = 0
    for r in results:
        if not needs_review(r, config):
            continue
        plan = plan_renames(r, config.dir_a, config.dir_b, config.split_mode)
        for cmd in plan.commands():
            print(cmd)
        if not apply:
            continue
        try:
            plan.apply()
        except OSError as e:
            logger.error("Rename failed for %s: %s", r.file_name_from_a, e)
            failed += 1
    return failed


def main(argv: Optional[Sequence[str]] = None) -> int:
    """Run SnapPair.

    Returns
    -------
    int
        Process exit code (0 success, 1 on configuration/matching/rename errors).
    """
    args = _parse_args(argv)
    _setup_logging(args.verbose)

    config = _build_config(args)
    try:
        config.validate(need_sources=not args.from_results)
    except ConfigError as e:
        logger.error("%s", e)
        return 1

    cache = ThumbnailCache(config.cache_dir, size=config.thumbnail_size)
    if args.clear_cache:
        cache.clear()

    # 1) Match (or reload a previous run)
    failures = []
    if args.from_results:
        try:
            results = load_results(config.results_path)
        except (OSError, ValueError, KeyError) as e:
            logger.error("Cannot load results from %s: %s", config.results_path, e)
            return 1
    else:
        try:
            outcome = run_matching(config, cache, progress=not args.no_progress)
        except SnapPairError as e:
            logger.error("Matching aborted: %s", e)
            return 1
        results, failures = outcome.results, outcome.failures
        save_results(config.results_path, results)

    # 2) Reports
    page, broken = render_report(results, config, cache)
    write_text_atomic(config.report_path, page)

    rows = mapping_rows(results, config, failures)
    write_mapping_csv(rows, config.mapping_csv_path)
    if args.report_xlsx:
        ok = write_mapping_xlsx(rows, config.mapping_xlsx_path)
        if not ok:
            print(
                "Note: openpyxl is not installed, so mapping.xlsx was not created. "
                "Install with: pip install snappair[report]"
            )

    # 3) Renames
    rename_failures = _print_renames(results, config, apply=args.apply)

    print(f"\nDone. Matched: {len(results)} | Failed: {len(failures)} | Report errors: {len(broken)}")
    print(f"Results: {config.results_path}")
    print(f"Report: {config.report_path}")
    return 1 if rename_failures else 0


if __name__ == "__main__":
    raise SystemExit(main())
