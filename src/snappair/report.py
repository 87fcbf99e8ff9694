"""HTML review report for SnapPair.

One fragment per result: both thumbnails, the JSON record, the suggested
title and the proposed rename commands (displayed, not executed). A fragment
that fails to render is logged and left out; the rest of the report is still
written.
"""

from __future__ import annotations

import html
import json
import logging
from typing import List, Sequence, Tuple

from .config import Config
from .errors import ReportRenderingError, SnapPairError
from .files import FileEntry
from .matching import MatchResult
from .rename import plan_renames, suggest_title
from .thumbnails import ThumbnailCache

logger = logging.getLogger(__name__)

PAGE_HEAD = """<!DOCTYPE html>
<html>
<head>
<meta charset="utf-8">
<title>SnapPair report</title>
</head>
<body>
"""

PAGE_TAIL = """</body>
</html>
"""

CODE_STYLE = "background-color: black; color: white; padding: 2rem; display: block;"


def needs_review(result: MatchResult, config: Config) -> bool:
    """True if a result should be shown (and offered for renaming)."""
    if result.equality is None:
        return False
    title_a = FileEntry.parse(result.file_name_from_a, config.split_mode).title
    title_b = FileEntry.parse(result.file_name_from_b, config.split_mode).title
    if title_a == title_b:
        return False
    if config.max_equality is not None and result.equality > config.max_equality:
        return False
    return True


def render_fragment(result: MatchResult, config: Config, cache: ThumbnailCache) -> str:
    """Render one result as an HTML fragment.

    Returns an empty string for results that need no review (same title on
    both sides, no score, or above ``max_equality``).

    Raises
    ------
    ReportRenderingError
        If a thumbnail can't be produced or the record can't be rendered.
    """

    if not needs_review(result, config):
        return ""

    try:
        thumb_a = cache.get_thumbnail(config.dir_a, result.file_name_from_a)
        thumb_b = cache.get_thumbnail(config.dir_b, result.file_name_from_b)
        plan = plan_renames(result, config.dir_a, config.dir_b, config.split_mode)
    except (SnapPairError, OSError, ValueError) as e:
        raise ReportRenderingError(f"Cannot render {result.file_name_from_a}: {e}") from e

    record = json.dumps(result.to_json(), indent=2)
    commands = "\n".join(html.escape(c) for c in plan.commands())
    imgs = "\n".join(
        f'<img src="{html.escape(t.resolve().as_uri())}"/>' for t in (thumb_a, thumb_b) if t is not None
    )
    return (
        f"<section>\n{imgs}\n"
        f"<pre>{html.escape(record)}</pre>\n"
        f"<pre>Suggested Title: {html.escape(plan.title)}</pre>\n"
        f"<code style='{CODE_STYLE}'>\n{commands}\n</code>\n"
        "<br/>\n<br/>\n</section>\n"
    )


def render_report(
    results: Sequence[MatchResult], config: Config, cache: ThumbnailCache
) -> Tuple[str, List[MatchResult]]:
    """Render the whole report.

    Returns the HTML document and the results whose fragment failed.
    """

    parts = [PAGE_HEAD]
    failed: List[MatchResult] = []
    for r in results:
        try:
            parts.append(render_fragment(r, config, cache))
        except ReportRenderingError as e:
            logger.error("%s", e)
            failed.append(r)
    parts.append(PAGE_TAIL)
    return "".join(parts), failed


def mapping_rows(results: Sequence[MatchResult], config: Config, failures=()) -> List[dict]:
    """Rows for the CSV/XLSX summary: one per match plus one per failed A file."""

    rows = []
    for r in results:
        rows.append(
            {
                "file_a": r.file_name_from_a,
                "file_b": r.file_name_from_b,
                "equality": r.equality,
                "suggested_title": suggest_title(r, config.split_mode),
                "status": "matched",
            }
        )
    for f in failures:
        rows.append(
            {
                "file_a": f.file_name_from_a,
                "file_b": "",
                "equality": "",
                "suggested_title": "",
                "status": "failed",
            }
        )
    return rows

