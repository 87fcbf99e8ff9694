"""Allow running the package with: `python -m snappair`.

This delegates to :func:`snappair.cli.main`.
"""

from .cli import main


if __name__ == "__main__":
    raise SystemExit(main())
