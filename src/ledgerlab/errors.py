"""Exceptions raised by the LedgerLab parsing core."""

from __future__ import annotations


class ParseError(ValueError):
    """Base error for input the parser cannot work with at all."""


class MalformedHTMLError(ParseError):
    """Raised when the payload is not HTML markup."""
