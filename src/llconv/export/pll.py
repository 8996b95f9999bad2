"""PLL export: render a Library as LogicLab ``.pll`` source text.

Public API::

    from llconv.export import write_pll

    pll_text = write_pll(lib)

The output reads back through ``llconv.parse.parse_pll``: global
variables, global constants, functions, function blocks, programs,
macros and one ``TYPE`` block with structs, typedefs, enums and subranges.
"""

from __future__ import annotations

import logging
from datetime import datetime
from io import StringIO
from typing import Mapping

from llconv.model import (
    EnumType,
    Library,
    Macro,
    Pou,
    StructType,
    SubrangeType,
    TypeDef,
    Variable,
    VariableGroups,
)

logger = logging.getLogger(__name__)

# Characters a quoted directive value cannot carry
_DIRECTIVE_REPLACEMENTS = {'"': "'", "<": "(", ">": ")", "\n": " "}


def sanitize_description(text: str, where: str = "") -> str:
    """Make *text* fit in a ``{ DE:"..." }`` directive."""
    clean = text
    for bad, good in _DIRECTIVE_REPLACEMENTS.items():
        clean = clean.replace(bad, good)
    if clean != text:
        logger.warning("Description of %s changed to fit pll syntax: %s", where or "item", clean)
    return clean


def _banner(title: str) -> list[str]:
    width = 26
    return [
        "(*" + "*" * width + "*)",
        "(*" + " " * width + "*)",
        "(*" + title.center(width) + "*)",
        "(*" + " " * width + "*)",
        "(*" + "*" * width + "*)",
    ]


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------

def write_pll(library: Library, options: Mapping[str, str] | None = None) -> str:
    """Render *library* as PLL source text.

    No writer options are recognized yet; *options* is accepted for
    symmetry with ``write_plclib``.
    """
    w = PllWriter()
    w.write_library(library)
    logger.debug("Wrote PLL %s", library.name)
    return w.getvalue()


# ---------------------------------------------------------------------------
# PllWriter
# ---------------------------------------------------------------------------

class PllWriter:
    """Walks a Library and emits PLL text into an internal buffer."""

    def __init__(self) -> None:
        self._buf = StringIO()
        self._indent = 0
        self._indent_str = "\t"

    def getvalue(self) -> str:
        return self._buf.getvalue()

    # -- Low-level output helpers -------------------------------------------

    def _write(self, text: str) -> None:
        self._buf.write(text)

    def _line(self, text: str = "") -> None:
        if text:
            self._buf.write(self._indent_str * self._indent + text + "\n")
        else:
            self._buf.write("\n")

    def _indent_inc(self) -> None:
        self._indent += 1

    def _indent_dec(self) -> None:
        self._indent = max(0, self._indent - 1)

    def _description(self, text: str, where: str) -> str:
        """`` { DE:"..." }`` suffix, empty when there is no description."""
        if not text:
            return ""
        return f' {{ DE:"{sanitize_description(text, where)}" }}'

    # ======================================================================
    # Library
    # ======================================================================

    def write_library(self, lib: Library) -> None:
        self._write_heading(lib)

        if not (lib.global_variables.is_empty() and lib.global_retainvars.is_empty()):
            self._indent_inc()
            for text in _banner("GLOBAL VARIABLES"):
                self._line(text)
            self._line()
            self._line("VAR_GLOBAL")
            # No RETAIN section in pll: retain groups are plain globals here
            self._write_groups(lib.global_variables)
            self._write_groups(lib.global_retainvars)
            self._line("END_VAR")
            self._indent_dec()
            self._line()
            self._line()

        if not lib.global_constants.is_empty():
            self._indent_inc()
            for text in _banner("GLOBAL CONSTANTS"):
                self._line(text)
            self._line()
            self._line("VAR_GLOBAL CONSTANT")
            self._write_groups(lib.global_constants)
            self._line("END_VAR")
            self._indent_dec()
            self._line()
            self._line()

        for pou in (*lib.functions, *lib.function_blocks, *lib.programs):
            self.write_pou(pou)
        for macro in lib.macros:
            self.write_macro(macro)

        if lib.structs or lib.typedefs or lib.enums or lib.subranges:
            self._indent_inc()
            self._line("TYPE")
            self._indent_inc()
            for struct in lib.structs:
                self._write_struct(struct)
            for tdef in lib.typedefs:
                self._write_typedef(tdef)
            for enum in lib.enums:
                self._write_enum(enum)
            for subrange in lib.subranges:
                self._write_subrange(subrange)
            self._indent_dec()
            self._line("END_TYPE")
            self._indent_dec()
            self._line()

    def _write_heading(self, lib: Library) -> None:
        def one_line(text: str) -> str:
            return text.replace("\n", " ").replace("*)", "* )")

        self._line("(*")
        self._line(f"    name: {one_line(lib.name)}")
        if lib.description:
            self._line(f"    descr: {one_line(lib.description)}")
        self._line(f"    version: {one_line(lib.version)}")
        self._line("    author: llconv")
        self._line(f"    date: {datetime.now():%Y-%m-%d %H:%M:%S}")
        self._line("*)")
        self._line()
        self._line()

    # ======================================================================
    # Variables
    # ======================================================================

    def write_variable(self, var: Variable) -> None:
        # vaProjName AT %MB700.0 : STRING[ 80 ]; { DE:"Project name" }
        decl = var.name
        if var.address is not None:
            decl += f" AT {var.address}"
        decl += " : "
        if var.array is not None:
            decl += f"ARRAY[ {var.array.first}..{var.array.last} ] OF "
        decl += var.type
        if var.length:
            decl += f"[ {var.length} ]"
        if var.has_value:
            decl += f" := {var.value}"
        decl += ";" + self._description(var.description, f"variable {var.name}")
        self._line(decl)

    def _write_groups(self, groups: VariableGroups) -> None:
        for group in groups.groups:
            if group.name:
                self._line(f'{{G:"{group.name}"}}')
            for var in group.variables:
                self.write_variable(var)

    def _write_var_block(self, keyword: str, variables: list[Variable]) -> None:
        if not variables:
            return
        self._line(keyword)
        self._indent_inc()
        for var in variables:
            self.write_variable(var)
        self._indent_dec()
        self._line("END_VAR")
        self._line()

    # ======================================================================
    # POUs and macros
    # ======================================================================

    def write_pou(self, pou: Pou) -> None:
        header = f"{pou.pou_type.value} {pou.name}"
        if pou.return_type:
            header += f" : {pou.return_type}"
        self._line(header)
        self._line()
        if pou.description:
            self._line(self._description(pou.description, f"{pou.pou_type.value} {pou.name}").lstrip())
            self._line()

        self._indent_inc()
        iface = pou.interface
        self._write_var_block("VAR_IN_OUT", iface.inout_vars)
        self._write_var_block("VAR_INPUT", iface.input_vars)
        self._write_var_block("VAR_OUTPUT", iface.output_vars)
        self._write_var_block("VAR_EXTERNAL", iface.external_vars)
        self._write_var_block("VAR", iface.local_vars)
        self._write_var_block("VAR CONSTANT", iface.local_constants)
        self._indent_dec()

        self._write_body(pou.code_type, pou.body, pou.pou_type.end_keyword)

    def write_macro(self, macro: Macro) -> None:
        self._line(f"MACRO {macro.name}")
        if macro.description:
            self._line(self._description(macro.description, f"macro {macro.name}").lstrip())
        self._line()

        if macro.parameters:
            self._indent_inc()
            self._line("PAR_MACRO")
            for par in macro.parameters:
                self._line(f"{par.name};" + self._description(par.description, f"macro parameter {par.name}"))
            self._line("END_PAR")
            self._indent_dec()
            self._line()

        self._write_body(macro.code_type, macro.body, "END_MACRO")

    def _write_body(self, code_type: str, body: str, end_keyword: str) -> None:
        # The body is kept verbatim from the CODE directive to the end keyword.
        # A construct read without a CODE directive is written the same way.
        if code_type:
            self._write(self._indent_str + f"{{ CODE:{code_type} }}")
            if not body.rstrip(" \t").endswith("\n"):
                body += "\n"
            self._write(body)
        self._write(end_keyword + "\n")
        self._line()
        self._line()

    # ======================================================================
    # Type definitions
    # ======================================================================

    def _write_struct(self, struct: StructType) -> None:
        self._line(f"{struct.name} : STRUCT" + self._description(struct.description, f"struct {struct.name}"))
        self._indent_inc()
        for member in struct.members:
            self.write_variable(member)
        self._indent_dec()
        self._line("END_STRUCT;")
        self._line()

    def _write_typedef(self, tdef: TypeDef) -> None:
        decl = f"{tdef.name} : "
        if tdef.array is not None:
            decl += f"ARRAY[ {tdef.array.first}..{tdef.array.last} ] OF "
        decl += tdef.type
        if tdef.length:
            decl += f"[ {tdef.length} ]"
        decl += ";" + self._description(tdef.description, f"typedef {tdef.name}")
        self._line(decl)
        self._line()

    def _write_enum(self, enum: EnumType) -> None:
        self._line(f"{enum.name} : (" + self._description(enum.description, f"enum {enum.name}"))
        self._indent_inc()
        last = len(enum.elements) - 1
        for i, elem in enumerate(enum.elements):
            sep = "," if i < last else ""
            self._line(
                f"{elem.name} := {elem.value}{sep}"
                + self._description(elem.description, f"enum element {elem.name}")
            )
        self._indent_dec()
        self._line(");")
        self._line()

    def _write_subrange(self, subrange: SubrangeType) -> None:
        self._line(
            f"{subrange.name} : {subrange.type} ({subrange.min_value}..{subrange.max_value});"
            + self._description(subrange.description, f"subrange {subrange.name}")
        )
        self._line()
