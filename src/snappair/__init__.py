"""SnapPair package.

This package provides a small CLI for pairing visually similar images across
two folders, suggesting a shared name for each pair and writing an HTML
review report.
"""

__all__ = [
    "cli",
    "config",
    "errors",
    "files",
    "io_utils",
    "matching",
    "orchestrator",
    "processor",
    "rename",
    "report",
    "scoring",
    "thumbnails",
]
__version__ = "0.1.0"
