"""kiln-cli: Command line interface for kiln."""

from __future__ import annotations

__version__ = "0.1.0"
