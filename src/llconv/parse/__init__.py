"""Parsers for the ``.h`` and ``.pll`` library formats."""

from ._scanner import ParseError
from .h import parse_h
from .pll import parse_pll

__all__ = [
    "ParseError",
    "parse_h",
    "parse_pll",
]
