"""Type definitions for the library document model.

Numeric type names are kept as plain strings on variables; ``NumericType``
only lists the IEC 61131-3 elementary types that a header constant may be
exported as.
"""

from __future__ import annotations

from enum import Enum
from typing import Self

from pydantic import BaseModel, model_validator

from .variables import ArrayRange, Variable


# ---------------------------------------------------------------------------
# Numeric types
# ---------------------------------------------------------------------------

class NumericType(str, Enum):
    """IEC 61131-3 numeric elementary types."""

    # Boolean
    BOOL = "BOOL"

    # Signed integer
    SINT = "SINT"
    INT = "INT"
    DINT = "DINT"
    LINT = "LINT"

    # Unsigned integer
    USINT = "USINT"
    UINT = "UINT"
    UDINT = "UDINT"
    ULINT = "ULINT"

    # Floating point
    REAL = "REAL"
    LREAL = "LREAL"

    # Bit-string
    BYTE = "BYTE"
    WORD = "WORD"
    DWORD = "DWORD"
    LWORD = "LWORD"


_NUMERIC_NAMES = frozenset(t.value for t in NumericType)


def is_num_type(name: str) -> bool:
    """Tell if *name* is a recognized numeric type (case sensitive)."""
    return name in _NUMERIC_NAMES


# ---------------------------------------------------------------------------
# Type definitions (live in the library TYPE collections)
# ---------------------------------------------------------------------------

class StructType(BaseModel):
    """Named struct type definition."""

    name: str
    description: str = ""
    members: list[Variable] = []

    @model_validator(mode="after")
    def _members_check(self) -> Self:
        if not self.name:
            raise ValueError("Empty struct name")
        for m in self.members:
            if m.address is not None:
                raise ValueError(f"Struct member \"{m.name}\" cannot have an address")
        return self


class TypeDef(BaseModel):
    """Type alias: ``TYPE MyAlias : STRING[80]; END_TYPE``."""

    name: str
    type: str
    length: int = 0
    array: ArrayRange | None = None
    description: str = ""

    @classmethod
    def from_variable(cls, var: Variable) -> TypeDef:
        """Build a typedef from a fully collected declaration.

        The declaration must carry neither an initial value nor an address.
        """
        if var.has_value:
            raise ValueError(f"Typedef \"{var.name}\" cannot have a value ({var.value})")
        if var.address is not None:
            raise ValueError(f"Typedef \"{var.name}\" cannot have an address")
        return cls(
            name=var.name,
            type=var.type,
            length=var.length,
            array=var.array.model_copy() if var.array is not None else None,
            description=var.description,
        )


class EnumElement(BaseModel):
    """Member of an enum type."""

    name: str
    value: str
    description: str = ""

    @model_validator(mode="after")
    def _value_check(self) -> Self:
        if not self.name:
            raise ValueError("Empty enum constant name")
        if not self.value:
            raise ValueError(f"Enum constant {self.name} must have a value")
        return self


class EnumType(BaseModel):
    """Named enum type definition."""

    name: str
    description: str = ""
    elements: list[EnumElement] = []


class SubrangeType(BaseModel):
    """Constrained numeric subrange: ``TYPE Pct : INT (0..100); END_TYPE``."""

    name: str
    type: str
    min_value: int
    max_value: int
    description: str = ""

    @model_validator(mode="after")
    def _bounds_check(self) -> Self:
        if self.max_value < self.min_value:
            raise ValueError(
                f"Invalid range {self.min_value}..{self.max_value} "
                f"of subrange \"{self.name}\""
            )
        return self
