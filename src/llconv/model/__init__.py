"""Library document model.

Public API::

    from llconv.model import Library, Variable, Pou, POUType
"""

from .library import Library, LibraryCheckError
from .pou import Macro, MacroParameter, POUInterface, POUType, Pou
from .types import (
    EnumElement,
    EnumType,
    NumericType,
    StructType,
    SubrangeType,
    TypeDef,
    is_num_type,
)
from .variables import (
    ArrayRange,
    Variable,
    VariableAddress,
    VariableGroup,
    VariableGroups,
)

__all__ = [
    "ArrayRange",
    "EnumElement",
    "EnumType",
    "Library",
    "LibraryCheckError",
    "Macro",
    "MacroParameter",
    "NumericType",
    "POUInterface",
    "POUType",
    "Pou",
    "StructType",
    "SubrangeType",
    "TypeDef",
    "Variable",
    "VariableAddress",
    "VariableGroup",
    "VariableGroups",
    "is_num_type",
]
