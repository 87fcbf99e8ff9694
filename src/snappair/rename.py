"""Canonical-name suggestions for matched pairs.

Some files carry machine-generated names (scanner or export prefixes such as
``A_0``). When one side of a pair has such a name, the other side's title is
preferred and the generated name is kept as a suffix. Otherwise the longer
title wins.

Renames are only *proposed*: :func:`plan_renames` builds a
:class:`RenamePlan`, and nothing touches the file system until
:meth:`RenamePlan.apply` is called.
"""

from __future__ import annotations

import logging
import os
import shlex
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional

from .files import FileEntry
from .matching import MatchResult

logger = logging.getLogger(__name__)

MACHINE_PREFIXES = ("artworkCJ", "A_0", "JACK")

# Applied in order; each replaces the first occurrence only.
NORMALIZATIONS = (("A_0", "A00"), (" ", "_"))


def _is_machine_name(title: str) -> bool:
    return title.startswith(MACHINE_PREFIXES)


def canonical_title(title_a: str, title_b: str) -> str:
    """Choose the preferred title for a pair, before normalization."""

    if _is_machine_name(title_a):
        return title_b if title_b.endswith(title_a) else f"{title_b}_{title_a}"
    if _is_machine_name(title_b):
        return title_a if title_a.endswith(title_b) else f"{title_a}_{title_b}"
    if len(title_a) > len(title_b):
        return title_a
    return title_b


def normalize_title(title: str) -> str:
    for old, new in NORMALIZATIONS:
        title = title.replace(old, new, 1)
    return title


def suggest_title(result: MatchResult, split_mode: str = "first") -> str:
    """Suggested canonical title for a matched pair.

    >>> suggest_title(MatchResult(0.1, "beach_photo.jpg", "A_001.jpg"))
    'beach_photo_A0001'
    """

    a = FileEntry.parse(result.file_name_from_a, split_mode)
    b = FileEntry.parse(result.file_name_from_b, split_mode)
    return normalize_title(canonical_title(a.title, b.title))


@dataclass(frozen=True)
class ProposedRename:
    """One file move that would give a file its suggested name."""

    source: Path
    destination: Path

    def command(self) -> str:
        """Shell command equivalent, for display only."""
        return f"mv -- {shlex.quote(str(self.source))} {shlex.quote(str(self.destination))}"

    def apply(self) -> None:
        """Perform the rename. Refuses to overwrite an existing file."""
        if self.destination.exists():
            raise FileExistsError(f"Refusing to overwrite {self.destination}")
        os.rename(self.source, self.destination)
        logger.info("Renamed %s -> %s", self.source, self.destination)


@dataclass
class RenamePlan:
    """Suggested title for a pair plus the renames it implies."""

    title: str
    renames: List[ProposedRename] = field(default_factory=list)

    def commands(self) -> List[str]:
        return [r.command() for r in self.renames]

    def apply(self) -> List[ProposedRename]:
        """Execute every proposed rename in order and return those performed."""
        done = []
        for r in self.renames:
            r.apply()
            done.append(r)
        return done


def _target(directory: Path, title: str, extension: Optional[str]) -> Path:
    return directory / (f"{title}.{extension}" if extension else title)


def plan_renames(result: MatchResult, dir_a: Path, dir_b: Path, split_mode: str = "first") -> RenamePlan:
    """Build the rename plan for one result. No-op renames are left out.

    Each file keeps its own extension.
    """

    title = suggest_title(result, split_mode)
    plan = RenamePlan(title=title)
    for directory, name in ((dir_a, result.file_name_from_a), (dir_b, result.file_name_from_b)):
        entry = FileEntry.parse(name, split_mode)
        src = directory / name
        dst = _target(directory, title, entry.extension)
        if src != dst:
            plan.renames.append(ProposedRename(source=src, destination=dst))
    return plan
