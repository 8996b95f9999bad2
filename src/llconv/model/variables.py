"""Variables and variable groups of the library document model.

A Variable does not know whether it is an input, a local or a global:
the list holding it says so (``POUInterface.input_vars``, a global
``VariableGroup``, a struct's members).
"""

from __future__ import annotations

from typing import Self

from pydantic import BaseModel, Field, model_validator


class VariableAddress(BaseModel):
    """Fixed PLC memory location, e.g. ``%MB700.320``.

    ::

        M     B        700  .  320
        area  subtype  index   subindex
    """

    area: str = Field(min_length=1, max_length=1)
    subtype: str = Field(min_length=1, max_length=1)
    index: int = Field(ge=0, le=0xFFFF)
    subindex: int = Field(ge=0, le=0xFFFF)

    def __str__(self) -> str:
        return f"%{self.area}{self.subtype}{self.index}.{self.subindex}"


class ArrayRange(BaseModel):
    """Single-dimension array bounds (inclusive)."""

    first: int = Field(default=0, ge=0)
    last: int

    @model_validator(mode="after")
    def _bounds_check(self) -> Self:
        if self.last < self.first:
            raise ValueError(f"Invalid array range {self.first}..{self.last}")
        return self

    @property
    def size(self) -> int:
        return self.last - self.first + 1


class Variable(BaseModel):
    """A named, typed data element."""

    name: str
    type: str
    address: VariableAddress | None = None
    length: int = Field(default=0, ge=0)
    array: ArrayRange | None = None
    value: str = ""
    description: str = ""

    @model_validator(mode="after")
    def _required_fields(self) -> Self:
        if not self.name:
            raise ValueError("Empty variable name")
        if not self.type:
            raise ValueError(f"Empty type of variable \"{self.name}\"")
        return self

    @property
    def has_value(self) -> bool:
        return bool(self.value)


class VariableGroup(BaseModel):
    """An optionally named group of variables.

    Maps to PLL ``{G:"name"}`` sections and PLCLIB workspace groups.
    """

    name: str = ""
    variables: list[Variable] = []

    def sort(self) -> None:
        self.variables.sort(key=lambda v: v.name)


class VariableGroups(BaseModel):
    """The ordered groups of one global variable category."""

    groups: list[VariableGroup] = []

    def is_empty(self) -> bool:
        return not self.groups

    def size(self) -> int:
        """Total number of variables across all groups."""
        return sum(len(g.variables) for g in self.groups)

    def has_named_group(self) -> bool:
        return any(g.name for g in self.groups)

    def group_named(self, name: str) -> VariableGroup:
        """Return the group called *name*, appending a new one if missing."""
        for group in self.groups:
            if group.name == name:
                return group
        self.groups.append(VariableGroup(name=name))
        return self.groups[-1]

    def last_group(self) -> VariableGroup:
        """Return the last group, appending an unnamed one if there is none."""
        if not self.groups:
            self.groups.append(VariableGroup())
        return self.groups[-1]

    def all_variables(self) -> list[Variable]:
        return [v for g in self.groups for v in g.variables]

    def sort(self) -> None:
        self.groups.sort(key=lambda g: g.name)
        for group in self.groups:
            group.sort()
