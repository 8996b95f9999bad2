"""llconv: convert PLC libraries between the .h, .pll and .plclib formats.

Public API::

    from llconv import parse_pll, write_plclib

    issues = []
    lib = parse_pll(text, issues, strict=False, name="mylib")
    xml_text = write_plclib(lib)
"""

from .export import DEFAULT_SCHEMA_VERSION, SchemaVersion, write_plclib, write_pll
from .model import Library, LibraryCheckError
from .parse import ParseError, parse_h, parse_pll

__version__ = "0.1.0"

__all__ = [
    "DEFAULT_SCHEMA_VERSION",
    "Library",
    "LibraryCheckError",
    "ParseError",
    "SchemaVersion",
    "parse_h",
    "parse_pll",
    "write_plclib",
    "write_pll",
]
