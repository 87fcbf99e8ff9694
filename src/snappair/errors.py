"""Exception types raised by SnapPair."""

from __future__ import annotations


class SnapPairError(Exception):
    """Base class for all SnapPair errors."""


class ConfigError(SnapPairError):
    """Raised when the run configuration is unusable (missing folders, bad limits)."""


class ImageProcessingError(SnapPairError):
    """Raised when an image can't be decoded, scaled, written or compared.

    The underlying exception is chained as ``__cause__``.
    """

    def __init__(self, message: str, path=None):
        super().__init__(message)
        self.path = path


class ReportRenderingError(SnapPairError):
    """Raised when one report fragment can't be built."""
