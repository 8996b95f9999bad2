"""Parser for Sipro ``.h`` header files.

A header is a flat list of C preprocessor defines::

    #define vnLevel   vn1782   // tank level
    #define MAXV      23.9     // [LREAL] max voltage

Defines whose value is a register mnemonic become global variables,
numeric defines annotated with an IEC numeric type become global
constants. Everything else is not exported.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass

from llconv.model import Library, Variable, is_num_type

from ._scanner import ParseError, Scanner, error_message, escape
from ._sipro import decode_register

logger = logging.getLogger(__name__)

VARIABLES_GROUP = "Header_Variables"
CONSTANTS_GROUP = "Header_Constants"

# A complete decimal floating point literal
_NUMBER_RE = re.compile(r"-?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?")


@dataclass
class Define:
    """A collected ``#define`` entry."""

    label: str
    value: str
    comment: str = ""
    predecl: str = ""
    line: int = 0
    offset: int = 0

    def value_is_number(self) -> bool:
        return _NUMBER_RE.fullmatch(self.value) is not None


# ---------------------------------------------------------------------------
# Scanner
# ---------------------------------------------------------------------------

class HeaderScanner(Scanner):
    """Extracts the ``#define`` entries of a header, one at a time."""

    def next_define(self) -> Define | None:
        """Return the next define, ``None`` at the end of the buffer."""
        try:
            while not self.at_end():
                self.skip_blanks()
                at = self.mark()
                if self.eat("//"):
                    self.skip_line()
                elif self.eat("/*"):
                    self.skip_block_comment("*/")
                elif self.eat_line_end() or self.at_end():
                    pass
                elif self.eat_token("#define"):
                    return self._collect_define(*at)
                else:
                    self.notify_error(f"Unexpected content: {escape(self.skip_line())}", at)
        except ParseError:
            raise
        except ValueError as e:
            raise self.error(error_message(e)) from e
        return None

    def _collect_define(self, line: int, offset: int) -> Define:
        # LABEL       0  // [INT] Descr
        self.skip_blanks()
        label = self.collect_identifier()
        if not label:
            raise self.error("Empty define label")
        self.skip_blanks()
        value = self.collect_token()
        if not value:
            raise self.error(f"Empty value of define {label}")
        define = Define(label=label, value=value, line=line, offset=offset)

        self.skip_blanks()
        if self.eat("//"):
            self.skip_blanks()
            self._collect_comment(define)

        if not self.at_end() and not self.eat_line_end():
            at = self.mark()
            self.notify_error(f"Unexpected content after define: {escape(self.skip_line())}", at)
        return define

    def _collect_comment(self, define: Define) -> None:
        """Collect a define comment, with its optional ``[TYPE]`` pre-declarator."""
        start = self.pos
        if self.eat("["):
            self.skip_blanks()
            pre_start = pre_end = self.pos
            while True:
                c = self.peek()
                if c in ("", "\n"):
                    self.notify_error(f"Unclosed initial '[' in the comment of define {define.label}")
                    define.comment = self.text[start:pre_end]
                    return
                self.pos += 1
                if c == "]":
                    define.predecl = self.text[pre_start:pre_end]
                    break
                if not self.is_blank(c):
                    pre_end = self.pos
            self.skip_blanks()

        text_start = text_end = self.pos
        while self.peek() not in ("", "\n"):
            self.pos += 1
            if not self.is_blank(self.text[self.pos - 1]):
                text_end = self.pos
        define.comment = self.text[text_start:text_end]


# ---------------------------------------------------------------------------
# Entry point
# ---------------------------------------------------------------------------

def parse_h(
    text: str | bytes,
    issues: list[str],
    strict: bool = False,
    *,
    name: str = "library",
    source: str = "<text>",
) -> Library:
    """Parse a Sipro header into a new ``Library``.

    Style issues are appended to *issues* (or raised when *strict*).
    Raises ``ParseError`` on malformed input or when nothing is exportable.
    """
    scanner = HeaderScanner(text, issues, strict, source)
    lib = Library(name=name)

    while (define := scanner.next_define()) is not None:
        if (reg := decode_register(define.value)) is not None:
            var = Variable(
                name=define.label,
                type=reg.iec_type,
                address=reg.address(),
                length=reg.length,
                description=define.comment,
            )
            lib.global_variables.group_named(VARIABLES_GROUP).variables.append(var)
            logger.debug("Register %s %s -> %s", define.label, define.value, var.address)

        elif define.predecl and define.value_is_number():
            if not is_num_type(define.predecl):
                scanner.notify_error(
                    f"Define {define.label}: [{define.predecl}] is not a numeric type, not exported",
                    (define.line, define.offset),
                )
                continue
            var = Variable(
                name=define.label,
                type=define.predecl,
                value=define.value,
                description=define.comment,
            )
            lib.global_constants.group_named(CONSTANTS_GROUP).variables.append(var)
            logger.debug("Constant %s = %s", define.label, define.value)

        elif define.predecl:
            scanner.notify_error(
                f"Define {define.label}: value {define.value} is not a number, not exported",
                (define.line, define.offset),
            )

        else:
            logger.debug("Define %s not exported", define.label)

    if lib.global_variables.size() == 0 and lib.global_constants.size() == 0:
        raise ParseError("No exportable defines found", scanner.line, scanner.pos, source)
    return lib
