"""Tests for the LogicLab pll parser."""

import pytest

from llconv.model import POUType
from llconv.parse import ParseError, parse_pll

from conftest import SAMPLE_PLL, pll


# ===========================================================================
# Full sample
# ===========================================================================


class TestSampleLibrary:
    def test_heading(self):
        lib, issues = pll(SAMPLE_PLL)
        assert issues == []
        assert lib.name == "test"
        assert lib.description == "Test library"
        assert lib.version == "1.2.3"

    def test_global_variable_groups(self):
        lib, _ = pll(SAMPLE_PLL)
        groups = lib.global_variables.groups
        assert [g.name for g in groups] == ["System", "Arrays"]
        flag, name = groups[0].variables
        assert str(flag.address) == "%MB300.2"
        assert flag.description == "A flag"
        assert name.type == "STRING"
        assert name.length == 80
        msgs = groups[1].variables[0]
        assert msgs.array.first == 0
        assert msgs.array.last == 999
        assert msgs.type == "BOOL"

    def test_global_constants(self):
        lib, _ = pll(SAMPLE_PLL)
        (const,) = lib.global_constants.all_variables()
        assert const.name == "MAX_ITEMS"
        assert const.value == "100"
        assert lib.global_constants.groups[0].name == ""

    def test_function_block(self):
        lib, _ = pll(SAMPLE_PLL)
        (fb,) = lib.function_blocks
        assert fb.pou_type is POUType.FUNCTION_BLOCK
        assert fb.description == "A function block"
        assert [v.name for v in fb.interface.input_vars] == ["In1"]
        assert [v.name for v in fb.interface.output_vars] == ["Out1"]
        assert fb.interface.local_vars[0].value == "0"
        assert fb.code_type == "ST"
        assert fb.body == "\nOut1 := 1;\n"

    def test_function(self):
        lib, _ = pll(SAMPLE_PLL)
        (fn,) = lib.functions
        assert fn.return_type == "INT"
        assert [v.name for v in fn.interface.input_vars] == ["a", "b"]
        assert fn.body == "\nfnAdd := a + b;\n"

    def test_program(self):
        lib, _ = pll(SAMPLE_PLL)
        (prg,) = lib.programs
        assert prg.name == "Main"
        assert prg.return_type == ""

    def test_macro(self):
        lib, _ = pll(SAMPLE_PLL)
        (macro,) = lib.macros
        assert macro.description == "Macro description"
        assert [(p.name, p.description) for p in macro.parameters] == [("WHAT", "Parameter")]
        assert macro.body == "\nWHAT\n"

    def test_types(self):
        lib, _ = pll(SAMPLE_PLL)
        (struct,) = lib.structs
        assert struct.description == "A point"
        assert [m.name for m in struct.members] == ["x", "y"]
        (tdef,) = lib.typedefs
        assert (tdef.name, tdef.type, tdef.length) == ("tName", "STRING", 32)
        (enum,) = lib.enums
        assert enum.description == "Colors"
        assert [(e.name, e.value) for e in enum.elements] == [("RED", "0"), ("GREEN", "1")]
        assert enum.elements[0].description == "Red"
        (sub,) = lib.subranges
        assert (sub.type, sub.min_value, sub.max_value) == ("DINT", 0, 100)
        assert sub.description == "Percent"

    def test_library_checks_pass(self):
        lib, _ = pll(SAMPLE_PLL)
        lib.check()


# ===========================================================================
# Global variables
# ===========================================================================


class TestGlobalVars:
    def test_group_directive_always_appends(self):
        """Repeating a group name starts a new group."""
        lib, _ = pll("""
            VAR_GLOBAL
            {G:"A"}
                a : INT;
            {G:"A"}
                b : INT;
            END_VAR
        """)
        assert [g.name for g in lib.global_variables.groups] == ["A", "A"]

    def test_unnamed_group(self):
        lib, _ = pll("""
            VAR_GLOBAL
                a : INT;
            END_VAR
        """)
        (group,) = lib.global_variables.groups
        assert group.name == ""
        assert not lib.global_variables.has_named_group()

    def test_group_name_with_spaces(self):
        _, issues = pll("""
            VAR_GLOBAL
            {G:"my group"}
                a : INT;
            END_VAR
        """)
        assert issues == ['Avoid spaces in var group name "my group" (line 2, offset 11)']

    def test_unquoted_directive_value(self):
        lib, _ = pll("""
            VAR_GLOBAL
            { G : Sys }
                a : INT;
            END_VAR
        """)
        assert lib.global_variables.groups[0].name == "Sys"

    def test_constant_needs_value(self):
        with pytest.raises(ParseError, match='Value not specified for variable "K"'):
            pll("""
                VAR_GLOBAL CONSTANT
                    K : INT;
                END_VAR
            """)

    def test_retain_not_supported(self):
        with pytest.raises(ParseError, match="RETAIN variables not supported"):
            pll("VAR_GLOBAL RETAIN\n    a : INT;\nEND_VAR\n")

    def test_unclosed_block(self):
        with pytest.raises(ParseError, match="VAR_GLOBAL not closed by END_VAR"):
            pll("VAR_GLOBAL\n    a : INT;\n")

    def test_comments_skipped(self):
        lib, issues = pll("""
            (* globals *)
            VAR_GLOBAL
                (* a comment
                   on two lines *)
                a : INT;
            END_VAR
        """)
        assert issues == []
        assert lib.global_variables.size() == 1


# ===========================================================================
# Variable declarations
# ===========================================================================


class TestVariableDeclarations:
    def test_value_trimmed(self):
        lib, _ = pll("VAR_GLOBAL CONSTANT\n    K : LREAL := 1.5  ;\nEND_VAR\n")
        assert lib.global_constants.all_variables()[0].value == "1.5"

    def test_string_value(self):
        lib, _ = pll("VAR_GLOBAL CONSTANT\n    K : STRING[ 16 ] := 'abc';\nEND_VAR\n")
        k = lib.global_constants.all_variables()[0]
        assert k.value == "'abc'"
        assert k.length == 16

    def test_missing_semicolon_accepted(self):
        lib, _ = pll("VAR_GLOBAL\n    a : INT\nEND_VAR\n")
        assert lib.global_variables.all_variables()[0].type == "INT"

    def test_single_element_array(self):
        lib, _ = pll("VAR_GLOBAL\n    a : ARRAY[0..0] OF INT;\nEND_VAR\n")
        assert lib.global_variables.all_variables()[0].array.size == 1

    def test_descending_array(self):
        with pytest.raises(ParseError, match=r"Invalid array range 5\.\.3"):
            pll("VAR_GLOBAL\n    a : ARRAY[5..3] OF INT;\nEND_VAR\n")

    def test_negative_index_location(self):
        with pytest.raises(ParseError, match="Negative index") as exc_info:
            pll("VAR_GLOBAL\n    a : INT;\n    b : ARRAY[-1..3] OF INT;\nEND_VAR\n")
        assert exc_info.value.line == 3
        assert exc_info.value.offset == 38

    def test_multidimensional_array(self):
        with pytest.raises(ParseError, match="Multidimensional arrays not yet supported"):
            pll("VAR_GLOBAL\n    a : ARRAY[0..3, 0..3] OF INT;\nEND_VAR\n")

    def test_array_initialization(self):
        with pytest.raises(ParseError, match="Array initialization not yet supported"):
            pll("VAR_GLOBAL CONSTANT\n    a : ARRAY[0..1] OF INT := [1, 2];\nEND_VAR\n")

    def test_multiple_names(self):
        with pytest.raises(ParseError, match='Multiple names not supported in declaration of variable "a"'):
            pll("VAR_GLOBAL\n    a, b : INT;\nEND_VAR\n")

    def test_invalid_length(self):
        with pytest.raises(ParseError, match=r'Invalid length \(1\) of variable "s"'):
            pll("VAR_GLOBAL\n    s : STRING[1];\nEND_VAR\n")

    def test_unclosed_value(self):
        with pytest.raises(ParseError, match="';' expected") as exc_info:
            pll("VAR_GLOBAL CONSTANT\n    K : INT := 5\nEND_VAR\n")
        assert exc_info.value.line == 2

    def test_invalid_value_character(self):
        with pytest.raises(ParseError, match="Invalid character '<' in variable \"K\" value"):
            pll("VAR_GLOBAL CONSTANT\n    K : INT := 5<3;\nEND_VAR\n")

    def test_unexpected_colon(self):
        with pytest.raises(ParseError, match="Unexpected colon"):
            pll("VAR_GLOBAL\n    a : INT : 3;\nEND_VAR\n")

    def test_missing_type_colon(self):
        with pytest.raises(ParseError, match="Expected ':' before variable \"a\" type"):
            pll("VAR_GLOBAL\n    a INT;\nEND_VAR\n")

    def test_address_missing_percent(self):
        with pytest.raises(ParseError, match="Expected '%'"):
            pll("VAR_GLOBAL\n    a AT MW400.1 : INT;\nEND_VAR\n")

    def test_address_missing_dot(self):
        with pytest.raises(ParseError, match="Expected '.'"):
            pll("VAR_GLOBAL\n    a AT %MW400 : INT;\nEND_VAR\n")

    def test_content_after_declaration(self):
        lib, issues = pll("VAR_GLOBAL\n    a : INT; junk\nEND_VAR\n")
        assert issues == ["Unexpected content after variable a declaration: junk (line 2, offset 24)"]
        assert lib.global_variables.size() == 1


# ===========================================================================
# Directives
# ===========================================================================


class TestDirectives:
    def test_missing_colon(self):
        with pytest.raises(ParseError, match="Missing ':' after directive G"):
            pll('VAR_GLOBAL\n{G "x"}\nEND_VAR\n')

    def test_unclosed_quote(self):
        with pytest.raises(ParseError, match="Unclosed directive DE value"):
            pll('VAR_GLOBAL\n    a : INT; { DE:"never closed }\nEND_VAR\n')

    def test_angle_bracket_rejected(self):
        with pytest.raises(ParseError, match="Invalid character '<' in directive DE value"):
            pll('VAR_GLOBAL\n    a : INT; { DE:"a <b>" }\nEND_VAR\n')

    def test_unclosed_brace(self):
        with pytest.raises(ParseError, match="Unclosed directive DE after x"):
            pll('VAR_GLOBAL\n    a : INT; { DE:"x"\nEND_VAR\n')

    def test_unexpected_directive_on_variable(self):
        lib, issues = pll('VAR_GLOBAL\n    a : INT; { XX:"x" }\nEND_VAR\n')
        assert len(issues) == 1
        assert issues[0].startswith('Unexpected directive "XX" in variable "a" declaration')
        assert lib.global_variables.all_variables()[0].description == ""

    def test_unexpected_directive_in_globals(self):
        _, issues = pll('VAR_GLOBAL\n{XX:"x"}\n    a : INT;\nEND_VAR\n')
        assert issues == ['Unexpected directive "XX" in global vars (line 2, offset 11)']


# ===========================================================================
# POUs
# ===========================================================================


class TestPous:
    def test_var_constant(self):
        lib, _ = pll("""
            PROGRAM Main
                VAR CONSTANT
                K : INT := 3;
                END_VAR
                { CODE:ST }
            ;
            END_PROGRAM
        """)
        (k,) = lib.programs[0].interface.local_constants
        assert k.value == "3"

    def test_var_constant_needs_value(self):
        with pytest.raises(ParseError, match='Value not specified for var "K"'):
            pll("PROGRAM Main\n\tVAR CONSTANT\n\tK : INT;\n\tEND_VAR\n\t{ CODE:ST }\nEND_PROGRAM\n")

    def test_inout_and_external(self):
        lib, _ = pll("""
            FUNCTION_BLOCK fb
                VAR_IN_OUT
                io : INT;
                END_VAR
                VAR_EXTERNAL
                ext : INT;
                END_VAR
                { CODE:ST }
            ;
            END_FUNCTION_BLOCK
        """)
        iface = lib.function_blocks[0].interface
        assert [v.name for v in iface.inout_vars] == ["io"]
        assert [v.name for v in iface.external_vars] == ["ext"]

    def test_body_kept_verbatim(self):
        lib, _ = pll("PROGRAM Main\n{ CODE:IL }\n  LD 1\n  (* x *)\n  ST a\n  END_PROGRAM\n")
        prg = lib.programs[0]
        assert prg.code_type == "IL"
        assert prg.body == "\n  LD 1\n  (* x *)\n  ST a\n  "

    def test_body_word_containing_end_keyword(self):
        lib, _ = pll("PROGRAM Main\n{ CODE:ST }\nEND_PROGRAM_X := 1;\nEND_PROGRAM\n")
        assert lib.programs[0].body == "\nEND_PROGRAM_X := 1;\n"

    def test_missing_body_end(self):
        with pytest.raises(ParseError, match='"END_PROGRAM" expected'):
            pll("PROGRAM Main\n{ CODE:ST }\nx := 1;\n")

    def test_missing_code(self):
        with pytest.raises(ParseError, match="PROGRAM Main not closed by END_PROGRAM"):
            pll("PROGRAM Main\n\tVAR\n\ta : INT;\n\tEND_VAR\n")

    def test_truncated(self):
        """An end keyword before CODE keeps the POU and reports it."""
        lib, issues = pll("PROGRAM Main\nEND_PROGRAM\n")
        assert issues == ["Truncated PROGRAM Main (line 2, offset 13)"]
        assert lib.programs[0].name == "Main"

    def test_duplicate_description(self):
        lib, issues = pll('PROGRAM Main\n{ DE:"one" }\n{ DE:"two" }\n{ CODE:ST }\nEND_PROGRAM\n')
        assert issues == ["PROGRAM Main has already a description: one (line 3, offset 26)"]
        assert lib.programs[0].description == "two"

    def test_function_needs_return_type(self):
        with pytest.raises(ParseError, match="Return type not specified in FUNCTION f"):
            pll("FUNCTION f\n{ CODE:ST }\nEND_FUNCTION\n")

    def test_program_rejects_return_type(self):
        with pytest.raises(ParseError, match="Return type specified in PROGRAM p"):
            pll("PROGRAM p : INT\n{ CODE:ST }\nEND_PROGRAM\n")

    def test_empty_return_type(self):
        with pytest.raises(ParseError, match="Empty return type in FUNCTION f"):
            pll("FUNCTION f :\n{ CODE:ST }\nEND_FUNCTION\n")

    def test_missing_name(self):
        with pytest.raises(ParseError, match="No name found for FUNCTION_BLOCK"):
            pll("FUNCTION_BLOCK\nEND_FUNCTION_BLOCK\n")

    def test_unexpected_header_content(self):
        _, issues = pll("PROGRAM Main\nfoo bar\n{ CODE:ST }\nEND_PROGRAM\n")
        assert issues == ["Unexpected content in PROGRAM Main header: foo bar (line 2, offset 13)"]

    def test_unexpected_after_var(self):
        with pytest.raises(ParseError, match="Unexpected content after VAR of PROGRAM Main"):
            pll("PROGRAM Main\nVAR RETAIN\nEND_VAR\n{ CODE:ST }\nEND_PROGRAM\n")


# ===========================================================================
# Macros
# ===========================================================================


class TestMacros:
    def test_without_parameters(self):
        lib, _ = pll("MACRO M\n{ CODE:ST }\n1\nEND_MACRO\n")
        (macro,) = lib.macros
        assert macro.parameters == []
        assert macro.body == "\n1\n"

    def test_multiple_parameter_groups(self):
        lib, issues = pll(
            "MACRO M\nPAR_MACRO\nA;\nEND_PAR\nPAR_MACRO\nB;\nEND_PAR\n{ CODE:ST }\nA\nEND_MACRO\n"
        )
        assert issues == ["Multiple groups of macro parameters (line 5, offset 29)"]
        assert [p.name for p in lib.macros[0].parameters] == ["A", "B"]

    def test_parameter_needs_semicolon(self):
        with pytest.raises(ParseError, match="Missing ';' after macro parameter A"):
            pll("MACRO M\nPAR_MACRO\nA\nEND_PAR\n{ CODE:ST }\nA\nEND_MACRO\n")

    def test_truncated_params(self):
        lib, issues = pll("MACRO M\nPAR_MACRO\nA;\nEND_MACRO\n")
        assert issues == ["Truncated params in macro M (line 4, offset 21)"]
        assert lib.macros[0].name == "M"

    def test_truncated_macro(self):
        _, issues = pll("MACRO M\nEND_MACRO\n")
        assert issues == ["Truncated macro M (line 2, offset 8)"]

    def test_missing_name(self):
        with pytest.raises(ParseError, match="No name found for MACRO"):
            pll("MACRO\nEND_MACRO\n")

    def test_unclosed_header(self):
        with pytest.raises(ParseError, match="MACRO M not closed by END_MACRO"):
            pll('MACRO M\n{ DE:"x" }\n')


# ===========================================================================
# Types
# ===========================================================================


class TestTypes:
    def test_type_on_same_line(self):
        lib, _ = pll("TYPE T : INT;\nEND_TYPE\n")
        assert lib.typedefs[0].name == "T"

    def test_typedef_array(self):
        lib, _ = pll("TYPE\n    tArr : ARRAY[ 1..4 ] OF INT;\nEND_TYPE\n")
        assert lib.typedefs[0].array.size == 4

    def test_typedef_rejects_value(self):
        with pytest.raises(ParseError, match=r'Typedef "T" cannot have a value \(5\)'):
            pll("TYPE\n    T : INT := 5;\nEND_TYPE\n")

    def test_struct_member_address(self):
        with pytest.raises(ParseError, match='Struct member "x" cannot have an address') as exc_info:
            pll("TYPE\n    st : STRUCT\n        x AT %MW400.1 : INT;\n    END_STRUCT;\nEND_TYPE\n")
        assert exc_info.value.line == 3

    def test_struct_not_closed(self):
        with pytest.raises(ParseError, match='Struct "st" not closed by END_STRUCT;'):
            pll("TYPE\n    st : STRUCT\n        x : INT;\n")

    def test_struct_comment(self):
        lib, _ = pll("TYPE\n    st : STRUCT\n        (* c *)\n        x : INT;\n    END_STRUCT;\nEND_TYPE\n")
        assert [m.name for m in lib.structs[0].members] == ["x"]

    def test_enum_negative_value(self):
        lib, _ = pll("TYPE\n    en : (\n        A := -1,\n        B := 2\n    );\nEND_TYPE\n")
        assert [e.value for e in lib.enums[0].elements] == ["-1", "2"]

    def test_enum_without_value(self):
        with pytest.raises(ParseError, match='Value not found in enum element "A"'):
            pll("TYPE\n    en : (\n        A,\n        B := 2\n    );\nEND_TYPE\n")

    def test_enum_bad_termination(self):
        with pytest.raises(ParseError, match='Expected termination "\\);" after enum "en"'):
            pll("TYPE\n    en : (\n        A := 1\n    )\nEND_TYPE\n")

    def test_subrange_negative_bounds(self):
        lib, _ = pll("TYPE\n    sr : INT (-10..-1);\nEND_TYPE\n")
        sub = lib.subranges[0]
        assert (sub.min_value, sub.max_value) == (-10, -1)

    def test_subrange_descending(self):
        with pytest.raises(ParseError, match=r'Invalid range 5\.\.1 of subrange "sr"'):
            pll("TYPE\n    sr : INT (5..1);\nEND_TYPE\n")

    def test_subrange_missing_semicolon(self):
        with pytest.raises(ParseError, match="Expected ';' in subrange \"sr\""):
            pll("TYPE\n    sr : INT (0..1)\nEND_TYPE\n")

    def test_missing_colon(self):
        with pytest.raises(ParseError, match='Missing \':\' after type name "T"'):
            pll("TYPE\n    T INT;\nEND_TYPE\n")

    def test_type_not_closed(self):
        with pytest.raises(ParseError, match="TYPE not closed by END_TYPE"):
            pll("TYPE\n    T : INT;\n")


# ===========================================================================
# File level errors
# ===========================================================================


class TestFileLevel:
    def test_no_content(self):
        with pytest.raises(ParseError, match="No content found"):
            pll("(* only a heading *)\n")

    def test_unexpected_top_level(self):
        lib, issues = pll("garbage here\nVAR_GLOBAL\n    a : INT;\nEND_VAR\n")
        assert issues == ["Unexpected content: garbage here (line 1, offset 0)"]
        assert lib.global_variables.size() == 1

    def test_strict_mode(self):
        with pytest.raises(ParseError, match="Unexpected content"):
            pll("garbage here\nVAR_GLOBAL\n    a : INT;\nEND_VAR\n", strict=True)

    def test_bytes_with_bom_rejected(self):
        with pytest.raises(ParseError, match="Bad encoding"):
            parse_pll(b"\xfe\xff\x00V", [])

    def test_carriage_returns(self):
        with pytest.raises(ParseError, match="Use unix EOL"):
            parse_pll("VAR_GLOBAL\r\n", [])

    def test_default_name(self):
        lib = parse_pll("VAR_GLOBAL\n    a : INT;\nEND_VAR\n", [])
        assert lib.name == "library"


# ===========================================================================
# End-to-end scenarios
# ===========================================================================


class TestScenarios:
    def test_subrange_not_typedef(self):
        lib, _ = pll("TYPE\n    T1 : DINT (0..100);\nEND_TYPE\n")
        assert lib.typedefs == []
        (sub,) = lib.subranges
        assert (sub.name, sub.type, sub.min_value, sub.max_value) == ("T1", "DINT", 0, 100)

    def test_constant_without_value_permissive(self):
        with pytest.raises(ParseError, match="Value not specified"):
            pll("VAR_GLOBAL CONSTANT\n    K : INT;\nEND_VAR\n")

    def test_constant_without_value_strict(self):
        with pytest.raises(ParseError, match="Value not specified"):
            pll("VAR_GLOBAL CONSTANT\n    K : INT;\nEND_VAR\n", strict=True)

    def test_escaped_quote_in_directive(self):
        """Quotes cannot be escaped inside a directive value."""
        with pytest.raises(ParseError, match="Unclosed directive DE"):
            pll('VAR_GLOBAL\n    a : INT; { DE:"a \\"quote\\"" }\nEND_VAR\n')
