"""File entries and directory listing for SnapPair.

A file name is split into a *title* and an *extension*. By default the name
is split on the **first** dot, so ``"holiday.v2.jpg"`` has title ``"holiday"``
and extension ``"v2"`` (and is therefore not an allowed image). Splitting on
the last dot is available as ``split_mode="last"``.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Collection, List, Optional


# Extensions eligible for comparison, without the leading dot.
DEFAULT_EXTS = ("tif", "jpg")

SPLIT_MODES = ("first", "last")


@dataclass(frozen=True)
class FileEntry:
    """A file name from set A or set B with its title/extension split."""

    name: str
    title: str
    extension: Optional[str]  # None when the name has no dot

    @classmethod
    def parse(cls, name: str, split_mode: str = "first") -> "FileEntry":
        """Split *name* into title and extension.

        Parameters
        ----------
        name:
            Bare file name (no directory part).
        split_mode:
            ``"first"`` splits on the first dot and ignores further segments;
            ``"last"`` treats everything before the last dot as the title.
        """

        if split_mode not in SPLIT_MODES:
            raise ValueError(f"Unknown split mode: {split_mode!r}. Use first|last.")

        if "." not in name:
            return cls(name=name, title=name, extension=None)

        if split_mode == "first":
            parts = name.split(".")
            return cls(name=name, title=parts[0], extension=parts[1])

        title, _, ext = name.rpartition(".")
        return cls(name=name, title=title, extension=ext)

    def allowed(self, allowed_extensions: Collection[str]) -> bool:
        """True if this entry's extension is in the allow-list (case-sensitive)."""
        return self.extension is not None and self.extension in allowed_extensions


def list_directory(root: Path) -> List[str]:
    """Return the names of regular files directly inside *root*, sorted.

    No extension filtering happens here; the matcher applies the allow-list.
    """

    root = Path(root).expanduser()
    with os.scandir(root) as it:
        names = [e.name for e in it if e.is_file()]
    return sorted(names)
