"""Parser for LogicLab ``.pll`` library sources.

The top level is an explicit state machine: the construct being filled
(which POU, which variable list, which global category) survives across
loop steps as a ``_Target``, resolved through the library by index.
Each step consumes one item of the current construct (a blank line, a
comment, a directive, a declaration, an opening or closing keyword).
The small grammars of a single item (variable declarations, directives,
struct/enum/subrange definitions) are plain recursive descent.

::

    (* name: mylib  descr: ...  version: 1.2.0 *)     HEADER
    VAR_GLOBAL                                        SEE -> GLOBAL_VARS
        {G:"System"}
        Cnc : fbCncM32; { DE:"Cnc device" }
    END_VAR
    FUNCTION_BLOCK Fb                                 SEE -> POU_HEADER
    { DE:"A function block" }
        VAR_INPUT                                     POU_HEADER -> POU_VARS
        In1 : BOOL; { DE:"Input" }
        END_VAR
        { CODE:ST }                                   POU_HEADER -> POU_BODY
    (* body *)
    END_FUNCTION_BLOCK                                POU_BODY -> SEE
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import NamedTuple

from llconv.model import (
    ArrayRange,
    EnumElement,
    EnumType,
    Library,
    Macro,
    MacroParameter,
    POUType,
    Pou,
    StructType,
    SubrangeType,
    TypeDef,
    Variable,
    VariableAddress,
    VariableGroup,
)

from ._scanner import ParseError, Scanner, error_message, escape

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Parser state
# ---------------------------------------------------------------------------

class State(Enum):
    HEADER = "header"
    SEE = "see"
    POU_HEADER = "pou_header"
    POU_VARS = "pou_vars"
    POU_BODY = "pou_body"
    MACRO_HEADER = "macro_header"
    MACRO_PARAMS = "macro_params"
    MACRO_BODY = "macro_body"
    GLOBAL_VARS = "global_vars"
    TYPE = "type"


class Collection(str, Enum):
    """Library collections a parser target can point into."""

    PROGRAMS = "programs"
    FUNCTION_BLOCKS = "function_blocks"
    FUNCTIONS = "functions"
    MACROS = "macros"
    GLOBAL_CONSTANTS = "global_constants"
    GLOBAL_VARIABLES = "global_variables"


class VarList(str, Enum):
    """The six variable lists of a POU interface."""

    INOUT = "inout_vars"
    INPUT = "input_vars"
    OUTPUT = "output_vars"
    EXTERNAL = "external_vars"
    LOCAL = "local_vars"
    LOCAL_CONSTANTS = "local_constants"


_POU_COLLECTION: dict[POUType, Collection] = {
    POUType.PROGRAM: Collection.PROGRAMS,
    POUType.FUNCTION_BLOCK: Collection.FUNCTION_BLOCKS,
    POUType.FUNCTION: Collection.FUNCTIONS,
}

# Opening keywords of the POU variable blocks, besides VAR [CONSTANT]
_POU_VAR_BLOCKS: list[tuple[str, VarList]] = [
    ("VAR_INPUT", VarList.INPUT),
    ("VAR_OUTPUT", VarList.OUTPUT),
    ("VAR_IN_OUT", VarList.INOUT),
    ("VAR_EXTERNAL", VarList.EXTERNAL),
]


@dataclass
class _Target:
    """What the parser is currently filling, as plain data."""

    collection: Collection
    index: int = -1
    var_list: VarList | None = None
    value_needed: bool = False


class Directive(NamedTuple):
    key: str
    value: str


# ---------------------------------------------------------------------------
# Parser
# ---------------------------------------------------------------------------

class PllParser(Scanner):
    """Builds a ``Library`` out of a pll buffer."""

    def __init__(
        self,
        text: str | bytes,
        issues: list[str],
        strict: bool = False,
        source: str = "<text>",
        *,
        name: str = "library",
    ) -> None:
        super().__init__(text, issues, strict, source)
        self.lib = Library(name=name)
        self.state = State.HEADER
        self.target: _Target | None = None
        self._handlers = {
            State.HEADER: self._on_header,
            State.SEE: self._on_see,
            State.POU_HEADER: self._on_pou_header,
            State.POU_VARS: self._on_pou_vars,
            State.POU_BODY: self._on_pou_body,
            State.MACRO_HEADER: self._on_macro_header,
            State.MACRO_PARAMS: self._on_macro_params,
            State.MACRO_BODY: self._on_macro_body,
            State.GLOBAL_VARS: self._on_global_vars,
            State.TYPE: self._on_type,
        }

    def parse(self) -> Library:
        try:
            while not self.at_end():
                self._handlers[self.state]()
            self._check_closed()
        except ParseError:
            raise
        except ValueError as e:
            raise self.error(error_message(e)) from e
        return self.lib

    # -- Target resolution ---------------------------------------------------

    def _pou(self) -> Pou:
        return getattr(self.lib, self.target.collection.value)[self.target.index]

    def _macro(self) -> Macro:
        return self.lib.macros[self.target.index]

    def _pou_vars(self) -> list[Variable]:
        return getattr(self._pou().interface, self.target.var_list.value)

    def _global_groups(self) -> list[VariableGroup]:
        return getattr(self.lib, self.target.collection.value).groups

    def _check_closed(self) -> None:
        """Fail if the buffer ended in the middle of a construct."""
        if self.state in (State.HEADER, State.SEE):
            return
        if self.state in (State.POU_BODY, State.MACRO_BODY):
            # Let the body collection report the unclosed region
            self._handlers[self.state]()
            return
        if self.state in (State.POU_HEADER, State.POU_VARS):
            pou = self._pou()
            raise self.error(f"{pou.pou_type.value} {pou.name} not closed by {pou.pou_type.end_keyword}")
        if self.state in (State.MACRO_HEADER, State.MACRO_PARAMS):
            raise self.error(f"MACRO {self._macro().name} not closed by END_MACRO")
        if self.state is State.GLOBAL_VARS:
            raise self.error("VAR_GLOBAL not closed by END_VAR")
        raise self.error("TYPE not closed by END_TYPE")

    # -- Shared small grammars -----------------------------------------------

    def eat_block_comment_start(self) -> bool:
        return self.eat("(*")

    def skip_comment(self) -> str:
        return self.skip_block_comment("*)")

    def collect_directive(self) -> Directive:
        """Collect ``{KEY:value}`` or ``{KEY:"quoted value"}``, after the ``{``."""
        self.skip_blanks()
        key = self.collect_identifier()
        self.skip_blanks()
        if not self.eat(":"):
            raise self.error(f"Missing ':' after directive {key}")
        self.skip_blanks()
        if self.at_end():
            raise self.error(f"Truncated directive {key}")

        if self.eat('"'):
            start = self.pos
            while (c := self.peek()) not in ("", '"'):
                if c == "\n":
                    raise self.error(f"Unclosed directive {key} value ('\"' expected)")
                if c in "<>":
                    raise self.error(f"Invalid character '{c}' in directive {key} value")
                self.pos += 1
            value = self.text[start:self.pos]
            if not self.eat('"'):
                raise self.error(f"Unclosed directive {key} value ('\"' expected)")
        else:
            value = self.collect_identifier()

        self.skip_blanks()
        if not self.eat("}"):
            raise self.error(f"Unclosed directive {key} after {value}")
        return Directive(key, value)

    def collect_description(self, where: str) -> str:
        """Collect an optional trailing ``{DE:"..."}`` directive."""
        self.skip_blanks()
        if not self.eat("{"):
            return ""
        at = self.mark()
        directive = self.collect_directive()
        if directive.key == "DE":
            return directive.value
        self.notify_error(f"Unexpected directive \"{directive.key}\" in {where}", at)
        return ""

    def collect_variable(self) -> Variable:
        """``NAME [AT %MB300.6000] : <rest of declaration>``"""
        self.skip_blanks()
        name = self.collect_identifier()
        self.skip_blanks()
        if self.peek() == ",":
            raise self.error(f"Multiple names not supported in declaration of variable \"{name}\"")

        address = None
        if self.eat_token("AT"):
            self.skip_blanks()
            if not self.eat("%"):
                raise self.error(f"Expected '%' in variable \"{name}\" address")
            area = self.peek()
            subtype = self.peek(1)
            self.pos += 2
            index = self.extract_index()
            if not self.eat("."):
                raise self.error(f"Expected '.' in variable \"{name}\" address")
            subindex = self.extract_index()
            address = VariableAddress(area=area, subtype=subtype, index=index, subindex=subindex)
            self.skip_blanks()

        if not self.eat(":"):
            raise self.error(f"Expected ':' before variable \"{name}\" type")
        return self.collect_rest_of_variable(name, address)

    def collect_rest_of_variable(self, name: str, address: VariableAddress | None = None) -> Variable:
        """``[ARRAY[a..b] OF] TYPE[[len]] [:= value] [;] [{DE:"..."}]`` + line end."""
        fields: dict = {"name": name, "address": address}

        self.skip_blanks()
        if self.eat_token("ARRAY"):
            self.skip_blanks()
            if not self.eat("["):
                raise self.error(f"Expected '[' in array variable \"{name}\"")
            self.skip_blanks()
            first = self.extract_index()
            self.skip_blanks()
            if not self.eat(".."):
                raise self.error(f"Expected \"..\" in array index of variable \"{name}\"")
            self.skip_blanks()
            last = self.extract_index()
            self.skip_blanks()
            if self.peek() == ",":
                raise self.error(f"Multidimensional arrays not yet supported in variable \"{name}\"")
            if not self.eat("]"):
                raise self.error(f"Expected ']' in array variable \"{name}\"")
            self.skip_blanks()
            if not self.eat_token("OF"):
                raise self.error(f"Expected \"OF\" in array variable \"{name}\"")
            fields["array"] = ArrayRange(first=first, last=last)
            self.skip_blanks()

        fields["type"] = self.collect_identifier()
        self.skip_blanks()
        if self.eat("["):
            self.skip_blanks()
            length = self.extract_index()
            if length <= 1:
                raise self.error(f"Invalid length ({length}) of variable \"{name}\"")
            self.skip_blanks()
            if not self.eat("]"):
                raise self.error(f"Expected ']' in variable length \"{name}\"")
            self.skip_blanks()
            fields["length"] = length

        if self.eat(":"):
            if not self.eat("="):
                raise self.error(f"Unexpected colon in variable \"{name}\" type")
            self.skip_blanks()
            fields["value"] = self._collect_value(name)
        else:
            self.eat(";")

        fields["description"] = self.collect_description(f"variable \"{name}\" declaration")
        var = Variable(**fields)
        self.check_line_end_after(f"variable {name} declaration")
        return var

    def _collect_value(self, name: str) -> str:
        """Initial value up to ``;``, trailing blanks trimmed."""
        if self.peek() == "[":
            raise self.error(f"Array initialization not yet supported in variable \"{name}\"")
        start = end = self.pos
        while True:
            c = self.peek()
            if c == ";":
                self.pos += 1
                return self.text[start:end]
            if c in ("", "\n"):
                raise self.error(
                    f"Unclosed variable \"{name}\" value {self.text[start:self.pos]} (';' expected)"
                )
            if c in ':=<>"':
                raise self.error(
                    f"Invalid character '{c}' in variable \"{name}\" value {self.text[start:self.pos]}"
                )
            self.pos += 1
            if not self.is_blank(c):
                end = self.pos

    # -- HEADER --------------------------------------------------------------

    def _on_header(self) -> None:
        """Read the optional heading comments with the library metadata.

        ::

            (*
                name: test
                descr: Libraries for strato machines
                version: 0.5.0
            *)
        """
        while not self.at_end():
            self.skip_blanks()
            if self.eat_line_end():
                continue
            if not self.eat_block_comment_start():
                break
            self._read_heading_comment(self.skip_comment())
        self.state = State.SEE

    def _read_heading_comment(self, content: str) -> None:
        for line in content.split("\n"):
            key, sep, value = line.strip().partition(":")
            key = key.rstrip()
            value = value.strip()
            if not sep or not value or not key.isalnum():
                continue
            if key.startswith("descr"):
                self.lib.description = value
            elif key == "version":
                self.lib.version = value

    # -- SEE -----------------------------------------------------------------

    def _on_see(self) -> None:
        self.skip_blanks()
        at = self.mark()
        if self.eat_line_end() or self.at_end():
            return
        if self.eat_block_comment_start():
            self.skip_comment()
        elif self.eat_token("PROGRAM"):
            self._open_pou(POUType.PROGRAM)
        elif self.eat_token("FUNCTION_BLOCK"):
            self._open_pou(POUType.FUNCTION_BLOCK)
        elif self.eat_token("FUNCTION"):
            self._open_pou(POUType.FUNCTION)
        elif self.eat_token("MACRO"):
            self._open_macro()
        elif self.eat_token("TYPE"):
            self.state = State.TYPE
        elif self.eat_token("VAR_GLOBAL"):
            self._open_global_vars()
        else:
            self.notify_error(f"Unexpected content: {escape(self.skip_line())}", at)

    def _open_global_vars(self) -> None:
        self.skip_blanks()
        if self.eat_token("CONSTANT"):
            self.check_line_end_after("VAR_GLOBAL CONSTANT")
            self.target = _Target(Collection.GLOBAL_CONSTANTS, value_needed=True)
        elif self.eat_token("RETAIN"):
            raise self.error("RETAIN variables not supported")
        elif self.eat_line_end() or self.at_end():
            self.target = _Target(Collection.GLOBAL_VARIABLES)
        else:
            raise self.error(f"Unexpected content in VAR_GLOBAL declaration: {escape(self.skip_line())}")
        self.state = State.GLOBAL_VARS

    # -- POU -----------------------------------------------------------------

    def _open_pou(self, pou_type: POUType) -> None:
        # POU NAME : RETURN_TYPE
        self.skip_blanks()
        name = self.collect_identifier()
        if not name:
            raise self.error(f"No name found for {pou_type.value}")

        collection = _POU_COLLECTION[pou_type]
        pous: list[Pou] = getattr(self.lib, collection.value)
        pous.append(Pou(pou_type=pou_type, name=name))
        self.target = _Target(collection, len(pous) - 1)

        self.skip_blanks()
        if self.eat(":"):
            self.skip_blanks()
            return_type = self.collect_until_char_trimmed("\n")
            if not return_type:
                raise self.error(f"Empty return type in {pou_type.value} {name}")
            if pou_type is not POUType.FUNCTION:
                raise self.error(f"Return type specified in {pou_type.value} {name}")
            pous[-1].return_type = return_type
        elif pou_type is POUType.FUNCTION:
            raise self.error(f"Return type not specified in {pou_type.value} {name}")
        self.state = State.POU_HEADER

    def _on_pou_header(self) -> None:
        pou = self._pou()
        what = f"{pou.pou_type.value} {pou.name}"
        self.skip_blanks()
        at = self.mark()
        if self.eat_line_end() or self.at_end():
            return
        if self.eat_block_comment_start():
            self.skip_comment()
        elif self.eat("{"):
            directive = self.collect_directive()
            if directive.key == "DE":
                if pou.description:
                    self.notify_error(f"{what} has already a description: {pou.description}", at)
                pou.description = directive.value
            elif directive.key == "CODE":
                pou.code_type = directive.value
                self.state = State.POU_BODY
            else:
                self.notify_error(f"Unexpected directive \"{directive.key}\" in {what}", at)
        elif self.eat_token("VAR"):
            self.skip_blanks()
            if self.eat_token("CONSTANT"):
                self.check_line_end_after(f"VAR CONSTANT of {pou.name}")
                self._open_pou_vars(VarList.LOCAL_CONSTANTS, value_needed=True)
            elif self.eat_line_end() or self.at_end():
                self._open_pou_vars(VarList.LOCAL)
            else:
                raise self.error(f"Unexpected content after VAR of {what}: {escape(self.skip_line())}")
        elif self.eat_token(pou.pou_type.end_keyword):
            self.notify_error(f"Truncated {what}", at)
            self.state = State.SEE
        else:
            for keyword, var_list in _POU_VAR_BLOCKS:
                if self.eat_token(keyword):
                    self.check_line_end_after(f"{keyword} of {pou.name}")
                    self._open_pou_vars(var_list)
                    return
            self.notify_error(f"Unexpected content in {what} header: {escape(self.skip_line())}", at)

    def _open_pou_vars(self, var_list: VarList, value_needed: bool = False) -> None:
        self.target.var_list = var_list
        self.target.value_needed = value_needed
        self.state = State.POU_VARS

    def _on_pou_vars(self) -> None:
        self.skip_blanks()
        if self.eat_line_end() or self.at_end():
            return
        if self.eat_token("END_VAR"):
            self.target.var_list = None
            self.state = State.POU_HEADER
        elif self.eat_block_comment_start():
            self.skip_comment()
        else:
            var = self.collect_variable()
            if self.target.value_needed and not var.has_value:
                raise self.error(f"Value not specified for var \"{var.name}\"")
            self._pou_vars().append(var)

    def _on_pou_body(self) -> None:
        pou = self._pou()
        if not pou.code_type:
            raise self.error(f"CODE not found in {pou.pou_type.value} {pou.name}")
        pou.body = self.collect_until_newline_token(pou.pou_type.end_keyword)
        logger.debug("Collected %s %s", pou.pou_type.value, pou.name)
        self.state = State.SEE

    # -- MACRO ---------------------------------------------------------------

    def _open_macro(self) -> None:
        self.skip_blanks()
        name = self.collect_identifier()
        if not name:
            raise self.error("No name found for MACRO")
        self.lib.macros.append(Macro(name=name))
        self.target = _Target(Collection.MACROS, len(self.lib.macros) - 1)
        self.state = State.MACRO_HEADER

    def _on_macro_header(self) -> None:
        macro = self._macro()
        self.skip_blanks()
        at = self.mark()
        if self.eat_line_end() or self.at_end():
            return
        if self.eat_block_comment_start():
            self.skip_comment()
        elif self.eat("{"):
            directive = self.collect_directive()
            if directive.key == "DE":
                if macro.description:
                    self.notify_error(f"Macro {macro.name} has already a description: {macro.description}", at)
                macro.description = directive.value
            elif directive.key == "CODE":
                macro.code_type = directive.value
                self.state = State.MACRO_BODY
            else:
                self.notify_error(f"Unexpected directive \"{directive.key}\" in macro {macro.name} header", at)
        elif self.eat_token("PAR_MACRO"):
            if macro.parameters:
                self.notify_error("Multiple groups of macro parameters", at)
            self.check_line_end_after(f"PAR_MACRO of {macro.name}")
            self.state = State.MACRO_PARAMS
        elif self.eat_token("END_MACRO"):
            self.notify_error(f"Truncated macro {macro.name}", at)
            self.state = State.SEE
        else:
            self.notify_error(f"Unexpected content in header of macro {macro.name}: {escape(self.skip_line())}", at)

    def _on_macro_params(self) -> None:
        macro = self._macro()
        self.skip_blanks()
        at = self.mark()
        if self.eat_line_end() or self.at_end():
            return
        if self.eat_token("END_PAR"):
            self.state = State.MACRO_HEADER
        elif self.eat_block_comment_start():
            self.skip_comment()
        elif self.eat_token("END_MACRO"):
            self.notify_error(f"Truncated params in macro {macro.name}", at)
            self.state = State.SEE
        else:
            macro.parameters.append(self._collect_macro_parameter())

    def _collect_macro_parameter(self) -> MacroParameter:
        # WHAT; {DE:"Parameter description"}
        self.skip_blanks()
        name = self.collect_identifier()
        self.skip_blanks()
        if not self.eat(";"):
            raise self.error(f"Missing ';' after macro parameter {name}")
        description = self.collect_description(f"macro parameter {name}")
        self.check_line_end_after(f"macro parameter {name}")
        return MacroParameter(name=name, description=description)

    def _on_macro_body(self) -> None:
        macro = self._macro()
        if not macro.code_type:
            raise self.error(f"CODE not found in MACRO {macro.name}")
        macro.body = self.collect_until_newline_token("END_MACRO")
        logger.debug("Collected MACRO %s", macro.name)
        self.state = State.SEE

    # -- VAR_GLOBAL ----------------------------------------------------------

    def _on_global_vars(self) -> None:
        self.skip_blanks()
        at = self.mark()
        if self.eat_line_end() or self.at_end():
            return
        groups = self._global_groups()
        if self.eat_block_comment_start():
            self.skip_comment()
        elif self.eat("{"):
            directive = self.collect_directive()
            if directive.key == "G":
                if " " in directive.value:
                    self.notify_error(f"Avoid spaces in var group name \"{directive.value}\"", at)
                groups.append(VariableGroup(name=directive.value))
            else:
                self.notify_error(f"Unexpected directive \"{directive.key}\" in global vars", at)
        elif self.eat_token("END_VAR"):
            self.state = State.SEE
        else:
            var = self.collect_variable()
            if self.target.value_needed and not var.has_value:
                raise self.error(f"Value not specified for variable \"{var.name}\"")
            if not groups:
                groups.append(VariableGroup())
            groups[-1].variables.append(var)

    # -- TYPE ----------------------------------------------------------------

    def _on_type(self) -> None:
        self.skip_blanks()
        at = self.mark()
        if self.eat_line_end() or self.at_end():
            return
        if self.eat_token("END_TYPE"):
            self.state = State.SEE
            return
        if self.eat_block_comment_start():
            self.skip_comment()
            return

        type_name = self.collect_identifier()
        if not type_name:
            self.notify_error(f"Type name not found: {escape(self.skip_line())}", at)
            return
        self.skip_blanks()
        if not self.eat(":"):
            raise self.error(f"Missing ':' after type name \"{type_name}\"")
        self.skip_blanks()

        if self.eat_token("STRUCT"):
            self.lib.structs.append(self._collect_rest_of_struct(type_name))
        elif self.eat("("):
            self.lib.enums.append(self._collect_rest_of_enum(type_name))
        elif self._peek_subrange():
            self.lib.subranges.append(self._collect_rest_of_subrange(type_name))
        else:
            var = self.collect_rest_of_variable(type_name)
            self.lib.typedefs.append(TypeDef.from_variable(var))
            logger.debug("Collected typedef %s", type_name)

    def _peek_subrange(self) -> bool:
        """Tell if the statement ahead is ``<type> (<min>..<max>);``."""
        j = self.pos
        while j < self.size and self.text[j] not in ";({\n":
            j += 1
        return j < self.size and self.text[j] == "("

    def _collect_rest_of_struct(self, name: str) -> StructType:
        # <name> : STRUCT { DE:"struct descr" }
        #     x : DINT; { DE:"member descr" }
        # END_STRUCT;
        description = self.collect_description(f"struct \"{name}\"")
        members: list[Variable] = []
        while True:
            self.skip_empty_lines()
            if self.at_end():
                raise self.error(f"Struct \"{name}\" not closed by END_STRUCT;")
            if self.eat("END_STRUCT;"):
                break
            if self.eat_block_comment_start():
                self.skip_comment()
                continue
            at = self.mark()
            member = self.collect_variable()
            if member.address is not None:
                raise self.error(f"Struct member \"{member.name}\" cannot have an address", *at)
            members.append(member)
        self.check_line_end_after(f"struct {name}")
        logger.debug("Collected struct %s, %d members", name, len(members))
        return StructType(name=name, description=description, members=members)

    def _collect_rest_of_enum(self, name: str) -> EnumType:
        # <name>: ( { DE:"enum descr" }
        #     VAL1 := 0, { DE:"elem descr" }
        #     VAL2 := -1 { DE:"elem desc" }
        # );
        self.skip_blanks()
        self.eat_line_end()
        description = self.collect_description(f"enum \"{name}\"")
        elements: list[EnumElement] = []
        has_next = True
        while has_next:
            self.skip_empty_lines()
            elem_name = self.collect_identifier()
            self.skip_blanks()
            if not self.eat(":="):
                raise self.error(f"Value not found in enum element \"{elem_name}\"")
            self.skip_blanks()
            value = self.collect_numeric_value()
            self.skip_blanks()
            has_next = self.eat(",")
            elem_descr = self.collect_description(f"enum element \"{elem_name}\"")
            elements.append(EnumElement(name=elem_name, value=value, description=elem_descr))
            self.check_line_end_after(f"enum element {elem_name}")

        self.skip_empty_lines()
        if not self.eat(");"):
            raise self.error(f"Expected termination \");\" after enum \"{name}\"")
        self.check_line_end_after(f"enum {name}")
        logger.debug("Collected enum %s, %d elements", name, len(elements))
        return EnumType(name=name, description=description, elements=elements)

    def _collect_rest_of_subrange(self, name: str) -> SubrangeType:
        # <name> : DINT (5..23); { DE:"descr" }
        type_name = self.collect_identifier()
        self.skip_blanks()
        if not self.eat("("):
            raise self.error(f"Expected \"(min..max)\" in subrange \"{name}\"")
        self.skip_blanks()
        min_value = self.extract_integer()
        self.skip_blanks()
        if not self.eat(".."):
            raise self.error(f"Expected \"..\" in subrange \"{name}\"")
        self.skip_blanks()
        max_value = self.extract_integer()
        self.skip_blanks()
        if not self.eat(")"):
            raise self.error(f"Expected ')' in subrange \"{name}\"")
        self.skip_blanks()
        if not self.eat(";"):
            raise self.error(f"Expected ';' in subrange \"{name}\"")
        subrange = SubrangeType(name=name, type=type_name, min_value=min_value, max_value=max_value)
        subrange.description = self.collect_description(f"subrange \"{name}\" declaration")
        self.check_line_end_after(f"subrange {name}")
        logger.debug("Collected subrange %s", name)
        return subrange


# ---------------------------------------------------------------------------
# Entry point
# ---------------------------------------------------------------------------

def parse_pll(
    text: str | bytes,
    issues: list[str],
    strict: bool = False,
    *,
    name: str = "library",
    source: str = "<text>",
) -> Library:
    """Parse a pll buffer into a new ``Library``.

    Style issues are appended to *issues* (or raised when *strict*).
    Raises ``ParseError`` on malformed input or when nothing was found.
    """
    parser = PllParser(text, issues, strict, source, name=name)
    lib = parser.parse()
    if lib.is_empty():
        raise ParseError("No content found", parser.line, parser.pos, source)
    logger.debug("%s", lib.summary())
    return lib
