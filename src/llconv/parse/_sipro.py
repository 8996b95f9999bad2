"""Sipro register mnemonics (``vb``, ``vn``, ``vq``, ``vd``, ``va`` + index).

A register denotes a fixed PLC memory cell whose type is implied by the
second letter::

    vn1782  ->  INT  AT %MW400.1782
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from llconv.model import VariableAddress


class RegisterKind(str, Enum):
    BOOL = "b"
    INT = "n"
    DINT = "q"
    LREAL = "d"
    STRING = "a"

    @property
    def iec_type(self) -> str:
        return self.name

    @property
    def length(self) -> int:
        """String length, 0 for non-string registers."""
        return 80 if self is RegisterKind.STRING else 0


# (subtype, base index) of the address template per kind, area is always M
_ADDRESS_TEMPLATE: dict[RegisterKind, tuple[str, int]] = {
    RegisterKind.BOOL: ("B", 300),
    RegisterKind.INT: ("W", 400),
    RegisterKind.DINT: ("D", 500),
    RegisterKind.LREAL: ("L", 600),
    RegisterKind.STRING: ("B", 700),
}


@dataclass(frozen=True)
class Register:
    """A decoded register mnemonic."""

    kind: RegisterKind
    index: int

    @property
    def iec_type(self) -> str:
        return self.kind.iec_type

    @property
    def length(self) -> int:
        return self.kind.length

    def address(self) -> VariableAddress:
        subtype, base = _ADDRESS_TEMPLATE[self.kind]
        return VariableAddress(area="M", subtype=subtype, index=base, subindex=self.index)


def decode_register(token: str) -> Register | None:
    """Decode *token* as a register mnemonic, ``None`` if it isn't one.

    The suffix must be a plain base 10 number that fits 16 bits, with no
    sign and nothing left over.
    """
    if len(token) <= 2 or token[0] not in "vV":
        return None
    try:
        kind = RegisterKind(token[1].lower())
    except ValueError:
        return None
    digits = token[2:]
    if not digits.isascii() or not digits.isdigit():
        return None
    index = int(digits)
    if index > 0xFFFF:
        return None
    return Register(kind=kind, index=index)
