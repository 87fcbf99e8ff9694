"""I/O helpers for SnapPair.

This module handles:
- saving/loading the result set (pretty-printed JSON)
- atomic text writes for every output file
- the mapping summary (CSV and optional XLSX)
"""

from __future__ import annotations

import csv
import json
import logging
import os
import tempfile
from pathlib import Path
from typing import Iterable, List

from .matching import MatchResult
from .orchestrator import sort_results

logger = logging.getLogger(__name__)

MAPPING_HEADERS = ["file_a", "file_b", "equality", "suggested_title", "status"]


def write_text_atomic(path: Path, text: str) -> None:
    """Write UTF-8 text to *path* via a temporary file and ``os.replace``."""

    path.parent.mkdir(parents=True, exist_ok=True)
    fd, tmp = tempfile.mkstemp(prefix=f".{path.name}.", dir=path.parent)
    try:
        with os.fdopen(fd, "w", encoding="utf-8", newline="") as f:
            f.write(text)
        os.replace(tmp, path)
    except BaseException:
        try:
            os.unlink(tmp)
        except FileNotFoundError:
            pass
        raise


def save_results(results_path: Path, results: Iterable[MatchResult]) -> None:
    """Persist the result set as a JSON array.

    Schema (one object per match, in this key order):
        equality, fileNameFromB, fileNameFromA
    """

    data = [r.to_json() for r in results]
    write_text_atomic(results_path, json.dumps(data, indent=2) + "\n")


def load_results(results_path: Path) -> List[MatchResult]:
    """Load a result set written by :func:`save_results`.

    The list is re-sorted by equality so hand-edited files still come back
    in best-first order. Records that aren't objects, or lack an equality or
    either file name (an A file with no candidate is written as just
    ``{"fileNameFromA": ...}``), are skipped with a warning.
    """

    with results_path.open("r", encoding="utf-8") as f:
        data = json.load(f)
    if not isinstance(data, list):
        raise ValueError(f"{results_path} does not contain a JSON array")
    results = []
    for d in data:
        r = MatchResult.from_json(d) if isinstance(d, dict) else None
        if r is None or r.equality is None or not r.file_name_from_b or not r.file_name_from_a:
            logger.warning("Dropping incomplete record: %s", d)
            continue
        results.append(r)
    return sort_results(results)


def write_mapping_csv(rows: List[dict], out_csv: Path) -> None:
    """Write the mapping summary as CSV."""

    out_csv.parent.mkdir(parents=True, exist_ok=True)
    with out_csv.open("w", newline="", encoding="utf-8") as f:
        writer = csv.DictWriter(f, fieldnames=MAPPING_HEADERS)
        writer.writeheader()
        writer.writerows(rows)


def write_mapping_xlsx(rows: List[dict], out_xlsx: Path) -> bool:
    """Write the mapping summary as XLSX.

    Returns False if openpyxl isn't installed.
    """

    try:
        from openpyxl import Workbook  # type: ignore
    except ImportError:
        return False

    out_xlsx.parent.mkdir(parents=True, exist_ok=True)
    wb = Workbook()
    ws = wb.active
    ws.title = "mapping"

    ws.append(MAPPING_HEADERS)
    for r in rows:
        ws.append([r.get(h, "") for h in MAPPING_HEADERS])

    wb.save(out_xlsx)
    return True
