"""PLCLIB export: render a Library as a LogicLab 5 ``.plclib`` XML document.

Public API::

    from llconv.export import write_plclib, SchemaVersion

    xml_text = write_plclib(lib)
    xml_text = write_plclib(lib, SchemaVersion.parse("2.8"))

The document layout is fixed: heading, workspace folder listing every
named entity, then one block per entity category, self-closed when empty.
"""

from __future__ import annotations

import logging
from io import StringIO
from typing import Mapping
from xml.sax.saxutils import escape

from pydantic import BaseModel, ConfigDict, Field

from llconv.model import (
    EnumType,
    Library,
    Macro,
    POUType,
    Pou,
    StructType,
    SubrangeType,
    TypeDef,
    Variable,
    VariableGroups,
)

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Schema version
# ---------------------------------------------------------------------------

class SchemaVersion(BaseModel):
    """PLCLIB schema version, two 16 bit fields ``<major>.<minor>``."""

    model_config = ConfigDict(frozen=True)

    major: int = Field(default=2, ge=0, le=0xFFFF)
    minor: int = Field(default=8, ge=0, le=0xFFFF)

    @property
    def packed(self) -> int:
        return (self.major << 16) | self.minor

    @classmethod
    def from_packed(cls, value: int) -> SchemaVersion:
        return cls(major=(value >> 16) & 0xFFFF, minor=value & 0xFFFF)

    @classmethod
    def parse(cls, text: str) -> SchemaVersion:
        """Parse ``"<major>.<minor>"``, raising ``ValueError`` if malformed."""
        major, sep, minor = text.partition(".")
        try:
            if not major.isdigit():
                raise ValueError("Invalid major version")
            if not sep:
                raise ValueError("Missing '.' after major version")
            if not minor.isdigit():
                raise ValueError("Invalid minor version")
            major_v, minor_v = int(major), int(minor)
            if major_v > 0xFFFF or minor_v > 0xFFFF:
                raise ValueError("Version number out of range")
        except ValueError as e:
            raise ValueError(f"\"{text}\" is not a valid version: {e}") from None
        return cls(major=major_v, minor=minor_v)

    def __str__(self) -> str:
        return f"{self.major}.{self.minor}"


DEFAULT_SCHEMA_VERSION = SchemaVersion()


def folder_id(name: str) -> int:
    """Positional hash of a library name, used as workspace folder id."""
    data = name.encode("utf-8")
    size = len(data)
    return sum((size - i) * b for i, b in enumerate(data))


def _attr(value: object) -> str:
    return escape(str(value), {'"': "&quot;"})


def _cdata(text: str) -> str:
    return "<![CDATA[" + text.replace("]]>", "]]]]><![CDATA[>") + "]]>"


_GROUP_ATTRS = 'excludeFromBuild="FALSE" excludeFromBuildIfNotDef="" version="1.0.0"'
_POU_ATTRS = (
    'version="1.0.0" creationDate="0" lastModifiedDate="0" '
    'excludeFromBuild="FALSE" excludeFromBuildIfNotDef=""'
)

_POU_TAGS: dict[POUType, str] = {
    POUType.PROGRAM: "program",
    POUType.FUNCTION_BLOCK: "functionBlock",
    POUType.FUNCTION: "function",
}


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------

def write_plclib(
    library: Library,
    schema_version: SchemaVersion | None = None,
    options: Mapping[str, str] | None = None,
) -> str:
    """Render *library* as PLCLIB XML text.

    When *schema_version* is not given, the ``schema-ver`` option is used,
    falling back to ``DEFAULT_SCHEMA_VERSION``.
    """
    options = options or {}
    if schema_version is None:
        if "schema-ver" in options:
            schema_version = SchemaVersion.parse(options["schema-ver"])
        else:
            schema_version = DEFAULT_SCHEMA_VERSION
    w = PlclibWriter()
    w.write_library(library, schema_version)
    logger.debug("Wrote PLCLIB %s, schema %s", library.name, schema_version)
    return w.getvalue()


# ---------------------------------------------------------------------------
# PlclibWriter
# ---------------------------------------------------------------------------

class PlclibWriter:
    """Walks a Library and emits PLCLIB XML into an internal buffer."""

    def __init__(self) -> None:
        self._buf = StringIO()
        self._indent = 0
        self._indent_str = "\t"

    def getvalue(self) -> str:
        return self._buf.getvalue()

    # -- Low-level output helpers -------------------------------------------

    def _line(self, text: str) -> None:
        self._buf.write(self._indent_str * self._indent + text + "\n")

    def _open(self, tag: str, attrs: str = "") -> None:
        self._line(f"<{tag} {attrs}>" if attrs else f"<{tag}>")
        self._indent += 1

    def _close(self, tag: str) -> None:
        self._indent -= 1
        self._line(f"</{tag}>")

    def _text_element(self, tag: str, text: object) -> None:
        self._line(f"<{tag}>{escape(str(text))}</{tag}>")

    def _iec_declaration(self) -> None:
        self._line('<iecDeclaration active="FALSE"/>')

    def _section(self, tag: str, items: list, write_item) -> None:
        """A category block, self-closed when *items* is empty."""
        if not items:
            self._line(f"<{tag}/>")
            return
        self._open(tag)
        for item in items:
            write_item(item)
        self._close(tag)

    # ======================================================================
    # Library
    # ======================================================================

    def write_library(self, lib: Library, schema_version: SchemaVersion) -> None:
        self._line('<?xml version="1.0" encoding="UTF-8" standalone="no"?>')
        self._open("plcLibrary", f'schemaVersion="{schema_version}"')
        self._open("lib", f'version="{_attr(lib.version)}" name="{_attr(lib.name)}" fullXml="true"')
        self._text_element("descr", lib.description)

        self._write_workspace(lib)

        self._write_global_vars("globalVars", lib.global_variables, "var")
        self._write_global_vars("retainVars", lib.global_retainvars, "var")
        self._write_global_vars("constantVars", lib.global_constants, "const")
        self._write_iec_vars_declaration(lib)

        self._section("functions", lib.functions, self.write_pou)
        self._section("functionBlocks", lib.function_blocks, self.write_pou)
        self._section("programs", lib.programs, self.write_pou)
        self._section("macros", lib.macros, self.write_macro)
        self._section("structs", lib.structs, self._write_struct)
        self._section("typedefs", lib.typedefs, self._write_typedef)
        self._section("enums", lib.enums, self._write_enum)
        self._section("subranges", lib.subranges, self._write_subrange)
        self._line("<interfaces/>")

        self._close("lib")
        self._close("plcLibrary")

    def _write_workspace(self, lib: Library) -> None:
        self._open("libWorkspace")
        self._open("folder", f'name="{_attr(lib.name)}" id="{folder_id(lib.name)}"')
        for groups in (lib.global_constants, lib.global_retainvars, lib.global_variables):
            for group in groups.groups:
                if group.name:
                    self._line(f'<GlobalVars name="{_attr(group.name)}"/>')
        for pou in (*lib.function_blocks, *lib.functions, *lib.programs):
            self._line(f'<Pou name="{_attr(pou.name)}"/>')
        for definition in (*lib.macros, *lib.structs, *lib.typedefs, *lib.enums, *lib.subranges):
            self._line(f'<Definition name="{_attr(definition.name)}"/>')
        self._close("folder")
        self._close("libWorkspace")

    # ======================================================================
    # Variables
    # ======================================================================

    def write_variable(self, var: Variable, tag: str = "var") -> None:
        attrs = f'name="{_attr(var.name)}" type="{_attr(var.type)}"'
        if var.length:
            attrs += f' length="{var.length}"'
        if var.array is not None:
            attrs += f' dim0="{var.array.size}"'

        if not (var.description or var.has_value or var.address is not None):
            self._line(f"<{tag} {attrs}/>")
            return

        self._open(tag, attrs)
        if var.description:
            self._text_element("descr", var.description)
        if var.has_value:
            self._text_element("initValue", var.value)
        if var.address is not None:
            addr = var.address
            self._line(
                f'<address type="{_attr(addr.area)}" typeVar="{_attr(addr.subtype)}" '
                f'index="{addr.index}" subIndex="{addr.subindex}"/>'
            )
        self._close(tag)

    def _write_global_vars(self, tag: str, groups: VariableGroups, var_tag: str) -> None:
        if groups.is_empty():
            self._line(f"<{tag}/>")
            return
        self._open(tag)
        for group in groups.groups:
            self._open("group", f'name="{_attr(group.name)}" {_GROUP_ATTRS}')
            for var in group.variables:
                self.write_variable(var, var_tag)
            self._close("group")
        self._close(tag)

    def _write_iec_vars_declaration(self, lib: Library) -> None:
        all_groups = (lib.global_constants, lib.global_retainvars, lib.global_variables)
        if not any(groups.has_named_group() for groups in all_groups):
            return
        self._open("iecVarsDeclaration")
        for groups in all_groups:
            for group in groups.groups:
                if group.name:
                    self._open("group", f'name="{_attr(group.name)}"')
                    self._iec_declaration()
                    self._close("group")
        self._close("iecVarsDeclaration")

    # ======================================================================
    # POUs and macros
    # ======================================================================

    def write_pou(self, pou: Pou) -> None:
        tag = _POU_TAGS[pou.pou_type]
        self._open(tag, f'name="{_attr(pou.name)}" {_POU_ATTRS}')
        if pou.description:
            self._text_element("descr", pou.description)
        if pou.return_type:
            self._text_element("returnValue", pou.return_type)

        self._open("vars")
        iface = pou.interface
        for list_tag, variables, var_tag in (
            ("inoutVars", iface.inout_vars, "var"),
            ("inputVars", iface.input_vars, "var"),
            ("outputVars", iface.output_vars, "var"),
            ("externalVars", iface.external_vars, "var"),
            ("localVars", iface.local_vars, "var"),
            ("localConsts", iface.local_constants, "const"),
        ):
            if variables:
                self._open(list_tag)
                for var in variables:
                    self.write_variable(var, var_tag)
                self._close(list_tag)
        self._close("vars")

        self._iec_declaration()
        if pou.pou_type is POUType.FUNCTION_BLOCK:
            self._line("<interfaces/>")
            self._line("<methods/>")
        self._write_source_code(pou.code_type, pou.body)
        self._close(tag)

    def write_macro(self, macro: Macro) -> None:
        self._open("macro", f'name="{_attr(macro.name)}"')
        if macro.description:
            self._text_element("descr", macro.description)
        self._write_source_code(macro.code_type, macro.body)
        if not macro.parameters:
            self._line("<parameters/>")
        else:
            self._open("parameters")
            for par in macro.parameters:
                self._open("parameter", f'name="{_attr(par.name)}"')
                self._text_element("descr", par.description)
                self._close("parameter")
            self._close("parameters")
        self._close("macro")

    def _write_source_code(self, code_type: str, body: str) -> None:
        self._open("sourceCode", f'type="{_attr(code_type)}"')
        self._line(_cdata(body))
        self._close("sourceCode")

    # ======================================================================
    # Type definitions
    # ======================================================================

    def _write_struct(self, struct: StructType) -> None:
        self._open("struct", f'name="{_attr(struct.name)}" version="1.0.0"')
        self._text_element("descr", struct.description)
        self._open("vars")
        for member in struct.members:
            self.write_variable(member)
        self._close("vars")
        self._iec_declaration()
        self._close("struct")

    def _write_typedef(self, tdef: TypeDef) -> None:
        attrs = f'name="{_attr(tdef.name)}" type="{_attr(tdef.type)}"'
        if tdef.length:
            attrs += f' length="{tdef.length}"'
        if tdef.array is not None:
            attrs += f' dim0="{tdef.array.size}"'
        self._open("typedef", attrs)
        self._iec_declaration()
        self._text_element("descr", tdef.description)
        self._close("typedef")

    def _write_enum(self, enum: EnumType) -> None:
        self._open("enum", f'name="{_attr(enum.name)}" version="1.0.0"')
        self._text_element("descr", enum.description)
        self._open("elements")
        for elem in enum.elements:
            self._open("element", f'name="{_attr(elem.name)}"')
            self._text_element("descr", elem.description)
            self._text_element("value", elem.value)
            self._close("element")
        self._close("elements")
        self._iec_declaration()
        self._close("enum")

    def _write_subrange(self, subrange: SubrangeType) -> None:
        self._open(
            "subrange",
            f'name="{_attr(subrange.name)}" version="1.0.0" type="{_attr(subrange.type)}"',
        )
        self._text_element("descr", subrange.description)
        self._text_element("minValue", subrange.min_value)
        self._text_element("maxValue", subrange.max_value)
        self._iec_declaration()
        self._close("subrange")
