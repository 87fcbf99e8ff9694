"""
Pytest fixtures and helpers shared by the SnapPair tests
"""
import asyncio
from pathlib import Path

import pytest
from PIL import Image, ImageDraw

from snappair.config import Config
from snappair.scoring import Difference, Dimensions


def make_image(path, size=(400, 300), color=(200, 120, 40), marks=()):
    """Write a gradient image with optional rectangles drawn on it."""
    w, h = size
    img = Image.new("RGB", size, color)
    draw = ImageDraw.Draw(img)
    for x in range(0, w, 4):
        draw.line([(x, 0), (x, h)], fill=(x * 255 // w, 80, 255 - x * 255 // w))
    for box, fill in marks:
        draw.rectangle(box, fill=fill)
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    img.save(path)
    return path


@pytest.fixture
def dirs(tmp_path):
    """Create A, B and cache folders."""
    a = tmp_path / "a"
    b = tmp_path / "b"
    cache = tmp_path / "cache"
    for d in (a, b, cache):
        d.mkdir()
    return a, b, cache


@pytest.fixture
def config(tmp_path, dirs):
    a, b, cache = dirs
    return Config(
        dir_a=a,
        dir_b=b,
        cache_dir=cache,
        results_path=tmp_path / "out" / "diff-output.json",
        report_path=tmp_path / "out" / "diff-output.htm",
    )


class FakeProcessor:
    """Stands in for Processor with canned sizes and scores.

    dims:   file name -> (width, height)
    scores: (name_a, name_b) -> equality, or an exception to raise
    """

    def __init__(self, dims=None, scores=None, missing=(), delay=0):
        self.dims = dims or {}
        self.scores = scores or {}
        self.missing = set(missing)
        self.delay = delay
        self.calls = []
        self.in_flight = 0
        self.max_in_flight = 0

    async def thumbnail(self, directory, filename):
        self.calls.append(("thumbnail", filename))
        if filename in self.missing:
            return None
        return Path(directory) / filename

    async def dimensions(self, path):
        self.calls.append(("dimensions", path.name))
        w, h = self.dims[path.name]
        return Dimensions(width=w, height=h)

    async def compare(self, a, b):
        self.calls.append(("compare", a.name, b.name))
        self.in_flight += 1
        self.max_in_flight = max(self.max_in_flight, self.in_flight)
        try:
            if self.delay:
                await asyncio.sleep(self.delay)
            value = self.scores[(a.name, b.name)]
            if isinstance(value, BaseException):
                raise value
            return Difference(is_equal=value == 0, equality=value)
        finally:
            self.in_flight -= 1
