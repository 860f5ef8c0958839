"""LedgerLab FanDuel core package."""

import logging
from importlib import metadata

from ledgerlab.parsing.fanduel import parse_fanduel

__all__ = ["__version__", "parse_fanduel"]

logging.getLogger(__name__).addHandler(logging.NullHandler())

try:
    __version__ = metadata.version("ledgerlab-fanduel")
except metadata.PackageNotFoundError:  # pragma: no cover - local dev fallback
    __version__ = "0.0.0"
