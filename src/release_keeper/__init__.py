"""release-keeper: release pull requests driven by conventional commits."""

from __future__ import annotations

__version__ = "0.4.0"

__all__ = ["__version__"]
