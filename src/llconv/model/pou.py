"""Program Organization Units and macros for the library document model."""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel

from .variables import Variable


class POUType(str, Enum):
    PROGRAM = "PROGRAM"
    FUNCTION_BLOCK = "FUNCTION_BLOCK"
    FUNCTION = "FUNCTION"

    @property
    def end_keyword(self) -> str:
        return f"END_{self.value}"


class POUInterface(BaseModel):
    """The six variable lists of a POU, in pll declaration block order."""

    inout_vars: list[Variable] = []
    input_vars: list[Variable] = []
    output_vars: list[Variable] = []
    external_vars: list[Variable] = []
    local_vars: list[Variable] = []
    local_constants: list[Variable] = []


class Pou(BaseModel):
    """Program Organization Unit.

    The body is kept as an opaque text blob, exactly as found between the
    ``{ CODE:<type> }`` directive and the closing ``END_<POU>`` keyword.
    """

    pou_type: POUType
    name: str
    description: str = ""
    return_type: str = ""
    interface: POUInterface = POUInterface()
    code_type: str = ""
    body: str = ""


class MacroParameter(BaseModel):
    """A macro parameter: a name for textual expansion, no type."""

    name: str
    description: str = ""


class Macro(BaseModel):
    """A textual macro with an opaque body."""

    name: str
    description: str = ""
    parameters: list[MacroParameter] = []
    code_type: str = ""
    body: str = ""
