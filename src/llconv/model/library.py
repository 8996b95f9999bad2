"""Top-level Library container for the document model."""

from __future__ import annotations

from pydantic import BaseModel

from .pou import Macro, Pou
from .types import EnumType, StructType, SubrangeType, TypeDef
from .variables import VariableGroups


class LibraryCheckError(ValueError):
    """A library violates a cross-entity invariant."""


def _by_name(item) -> str:
    return item.name


class Library(BaseModel):
    """A PLC library, as read from one ``.h`` or ``.pll`` file."""

    name: str
    version: str = "1.0.0"
    description: str = "PLC library"
    global_constants: VariableGroups = VariableGroups()
    global_retainvars: VariableGroups = VariableGroups()
    global_variables: VariableGroups = VariableGroups()
    programs: list[Pou] = []
    function_blocks: list[Pou] = []
    functions: list[Pou] = []
    macros: list[Macro] = []
    structs: list[StructType] = []
    typedefs: list[TypeDef] = []
    enums: list[EnumType] = []
    subranges: list[SubrangeType] = []

    def is_empty(self) -> bool:
        return (
            self.global_constants.size() == 0
            and self.global_retainvars.size() == 0
            and self.global_variables.size() == 0
            and not self.programs
            and not self.function_blocks
            and not self.functions
            and not self.macros
            and not self.structs
            and not self.typedefs
            and not self.enums
            and not self.subranges
        )

    def check(self) -> None:
        """Validate the invariants that span several entities.

        Raises ``LibraryCheckError`` on the first violation.
        """
        for var in self.global_constants.all_variables():
            if not var.has_value:
                raise LibraryCheckError(f"Global constant \"{var.name}\" has no value")

        for fn in self.functions:
            if not fn.return_type:
                raise LibraryCheckError(f"Function \"{fn.name}\" has no return type")
            if fn.interface.output_vars:
                raise LibraryCheckError(f"Function \"{fn.name}\" cannot have output variables")
            if fn.interface.inout_vars:
                raise LibraryCheckError(f"Function \"{fn.name}\" cannot have in-out variables")
            if fn.interface.external_vars:
                raise LibraryCheckError(f"Function \"{fn.name}\" cannot have external variables")

        for prog in self.programs:
            if prog.return_type:
                raise LibraryCheckError(f"Program \"{prog.name}\" cannot have a return type")
            if prog.interface.output_vars:
                raise LibraryCheckError(f"Program \"{prog.name}\" cannot have output variables")
            if prog.interface.inout_vars:
                raise LibraryCheckError(f"Program \"{prog.name}\" cannot have in-out variables")
            if prog.interface.external_vars:
                raise LibraryCheckError(f"Program \"{prog.name}\" cannot have external variables")

    def sort(self) -> None:
        """Order every named collection by name.

        POU variable lists, struct members, enum elements and macro
        parameters keep their declaration order.
        """
        self.global_constants.sort()
        self.global_retainvars.sort()
        self.global_variables.sort()
        for items in (
            self.programs,
            self.function_blocks,
            self.functions,
            self.macros,
            self.structs,
            self.typedefs,
            self.enums,
            self.subranges,
        ):
            items.sort(key=_by_name)

    def summary(self) -> str:
        parts = [f"Library {self.name}"]
        counts = [
            (self.global_constants.size(), "global constants"),
            (self.global_retainvars.size(), "global retain variables"),
            (self.global_variables.size(), "global variables"),
            (len(self.programs), "programs"),
            (len(self.function_blocks), "function blocks"),
            (len(self.functions), "functions"),
            (len(self.macros), "macros"),
            (len(self.structs), "structs"),
            (len(self.typedefs), "typedefs"),
            (len(self.enums), "enums"),
            (len(self.subranges), "subranges"),
        ]
        parts.extend(f"{n} {what}" for n, what in counts if n)
        return ", ".join(parts)
