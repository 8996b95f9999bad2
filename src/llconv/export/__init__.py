"""Writers for the ``.plclib`` and ``.pll`` library formats."""

from .plclib import DEFAULT_SCHEMA_VERSION, SchemaVersion, write_plclib
from .pll import write_pll

__all__ = [
    "DEFAULT_SCHEMA_VERSION",
    "SchemaVersion",
    "write_plclib",
    "write_pll",
]
