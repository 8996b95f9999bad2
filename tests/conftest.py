"""Shared test helpers for the llconv test suite."""

import textwrap

from llconv.model import Library
from llconv.parse import parse_h, parse_pll


def pll(source: str, strict: bool = False) -> tuple[Library, list[str]]:
    """Parse dedented pll source, returning the library and the issues."""
    issues: list[str] = []
    lib = parse_pll(textwrap.dedent(source).lstrip("\n"), issues, strict, name="test")
    return lib, issues


def header(source: str, strict: bool = False) -> tuple[Library, list[str]]:
    """Parse dedented header source, returning the library and the issues."""
    issues: list[str] = []
    lib = parse_h(textwrap.dedent(source).lstrip("\n"), issues, strict, name="test")
    return lib, issues


SAMPLE_PLL = """\
(*
    name: test
    descr: Test library
    version: 1.2.3
*)

VAR_GLOBAL
{G:"System"}
    vbFlag AT %MB300.2 : BOOL; { DE:"A flag" }
    vaName AT %MB700.0 : STRING[ 80 ]; { DE:"Project name" }
{G:"Arrays"}
    vbMsgs AT %MB300.6000 : ARRAY[ 0..999 ] OF BOOL; { DE:"Messages" }
END_VAR

VAR_GLOBAL CONSTANT
    MAX_ITEMS : INT := 100; { DE:"Max items" }
END_VAR

FUNCTION_BLOCK fbTest
{ DE:"A function block" }
    VAR_INPUT
    In1 : BOOL; { DE:"Input" }
    END_VAR
    VAR_OUTPUT
    Out1 : INT;
    END_VAR
    VAR
    cnt : DINT := 0;
    END_VAR
    { CODE:ST }
Out1 := 1;
END_FUNCTION_BLOCK

FUNCTION fnAdd : INT
    VAR_INPUT
    a : INT;
    b : INT;
    END_VAR
    { CODE:ST }
fnAdd := a + b;
END_FUNCTION

PROGRAM Main
    { CODE:ST }
fbTest();
END_PROGRAM

MACRO IS_MSG
{ DE:"Macro description" }
    PAR_MACRO
    WHAT; { DE:"Parameter" }
    END_PAR
    { CODE:ST }
WHAT
END_MACRO

TYPE
    stPoint : STRUCT { DE:"A point" }
        x : DINT; { DE:"X" }
        y : DINT;
    END_STRUCT;
    tName : STRING[ 32 ]; { DE:"A name" }
    enColor : ( { DE:"Colors" }
        RED := 0, { DE:"Red" }
        GREEN := 1
    );
    T1 : DINT (0..100); { DE:"Percent" }
END_TYPE
"""


SAMPLE_H = """\
// Machine registers
#define vbFlag      vb2       // A flag
#define vnLevel     vn1782    // [INT] tank level
#define vaName      va3       // Project name
/* numeric constants */
#define MAXV        23.9      // [LREAL] max voltage
#define MAX_ITEMS   100       // [INT] Max items
#define NOT_EXPORTED 5        // just a number
"""
