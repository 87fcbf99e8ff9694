"""Thumbnail cache for SnapPair.

Each source image gets one JPEG in the cache folder, scaled up or down to
fit the thumbnail box and named by the SHA-256 of ``directory + filename``.
The name depends only on the path, not the content, so a cached thumbnail is
reused across runs even if the source changed. Use :meth:`ThumbnailCache.clear` (``--clear-cache``) to start over.
"""

from __future__ import annotations

import hashlib
import logging
import os
import tempfile
from pathlib import Path
from typing import Optional, Union

from PIL import Image, ImageOps

from .errors import ImageProcessingError

logger = logging.getLogger(__name__)

THUMB_SUFFIX = ".jpg"


def _is_identifier(value) -> bool:
    return isinstance(value, (str, os.PathLike)) and str(value) != ""


class ThumbnailCache:
    """Lazily creates and reuses thumbnails under *cache_dir*."""

    def __init__(self, cache_dir: Path, size: int = 200):
        self.cache_dir = Path(cache_dir)
        self.size = size

    def path_for(self, directory: Union[str, Path], filename: str) -> Path:
        """Return the cache path for (directory, filename) without creating it."""
        digest = hashlib.sha256((str(directory) + filename).encode("utf-8")).hexdigest()
        return self.cache_dir / f"{digest}{THUMB_SUFFIX}"

    def get_thumbnail(self, directory, filename) -> Optional[Path]:
        """Return the path of the thumbnail for ``directory/filename``.

        Returns ``None`` if either argument isn't a usable name. An existing
        cache file is returned as-is; otherwise the source is scaled to fit
        ``size`` x ``size`` and written atomically.

        Raises
        ------
        ImageProcessingError
            If the source can't be read or the thumbnail can't be written.
        """

        if not _is_identifier(directory) or not _is_identifier(filename):
            return None

        dst = self.path_for(directory, str(filename))
        if dst.exists():
            return dst

        src = Path(directory) / filename
        logger.debug("Creating thumbnail for %s", src)
        try:
            with Image.open(src) as img:
                # scales up as well as down
                img = ImageOps.contain(img.convert("RGB"), (self.size, self.size))
                self._write_atomic(img, dst)
        except (OSError, ValueError, Image.DecompressionBombError) as e:
            raise ImageProcessingError(f"Cannot create thumbnail for {src}: {e}", path=src) from e
        return dst

    def _write_atomic(self, img: Image.Image, dst: Path) -> None:
        # Same-key writers produce the same bytes; os.replace keeps readers
        # from ever seeing a half-written file.
        fd, tmp = tempfile.mkstemp(prefix=".tmp-", suffix=THUMB_SUFFIX, dir=self.cache_dir)
        try:
            with os.fdopen(fd, "wb") as f:
                img.save(f, format="JPEG")
            os.replace(tmp, dst)
        except BaseException:
            try:
                os.unlink(tmp)
            except FileNotFoundError:
                pass
            raise

    def clear(self) -> int:
        """Delete every cached thumbnail. Returns how many files were removed."""
        removed = 0
        for p in self.cache_dir.glob(f"*{THUMB_SUFFIX}"):
            if len(p.stem) == 64 and p.is_file():
                p.unlink()
                removed += 1
        logger.info("Removed %d cached thumbnails from %s", removed, self.cache_dir)
        return removed
