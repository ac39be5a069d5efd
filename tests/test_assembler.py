# =============================================================================
# test_assembler.py - Full Assembler Integration Tests
# =============================================================================
# End-to-end tests for the assembly driver, from source text to hex words.
#
# Test coverage includes:
#   - Complete programs and the hex output format
#   - Line structure rules (one newline between instructions)
#   - Error reporting with line numbers
#   - Discarding all output on failure
#   - File input and output
# =============================================================================

import logging

import pytest

from hexasm.assembler import (
    Assembler,
    AssemblyState,
    Shape,
    assemble,
    assemble_file,
    decode,
    decode_opcode,
    parse_hex,
)
from hexasm.assembler.formats import BUILTIN_FORMATS, FormatDescriptor, build_format_table
from hexasm.assembler.parser import ITypeFields, JTypeFields, RTypeFields
from hexasm.errors import (
    EmptyProgramError,
    FieldRangeError,
    FileUnavailableError,
    HexAsmError,
    LexError,
    ParseError,
)


LW_1_2_100 = (0b100011 << 26) | (1 << 21) | (2 << 16) | 100


# =============================================================================
# Full Assembly Pipeline Tests
# =============================================================================

class TestFullPipeline:
    """Test the complete assembly pipeline."""

    def test_two_instruction_program(self):
        asm = Assembler()
        words = asm.assemble_string("J 10\nLW $1, $2, 100\n")
        assert words == [(0b000010 << 26) | 10, LW_1_2_100]
        assert asm.get_hex() == "0800000A\n8C220064\n"
        assert asm.state is AssemblyState.DONE

    def test_compact_and_spaced_operands_agree(self):
        assert assemble("LW $1,$2,100") == assemble("LW $1, $2, 100") == [LW_1_2_100]

    def test_missing_space_after_mnemonic(self):
        with pytest.raises(ParseError):
            assemble("LW$1,$2,100")

    def test_no_trailing_newline(self):
        assert assemble("J 10") == [0x0800000A]

    def test_number_formats(self):
        assert assemble("J 012\nJ 0xA\nJ 10\n") == [0x0800000A] * 3

    def test_trailing_blank_lines_ignored(self):
        assert assemble("J 1\n\n\n") == [0x08000001]

    def test_get_words_returns_copy(self):
        asm = Assembler()
        asm.assemble_string("J 1")
        asm.get_words().append(99)
        assert asm.get_words() == [0x08000001]

    def test_custom_table_r_type(self):
        table = build_format_table([*BUILTIN_FORMATS, FormatDescriptor("ADD", Shape.R, 0)])
        asm = Assembler(formats=table)
        words = asm.assemble_string("ADD $1, $2, $3, 0, 32\nJ 4\n")
        assert decode(words[0], Shape.R) == RTypeFields(rs=1, rt=2, rd=3, shift=0, function=32)
        assert words[1] == 0x08000004


# =============================================================================
# Round-trip Tests
# =============================================================================

class TestRoundTrip:
    """Decoding the hex output reproduces every operand tuple."""

    def test_mixed_program(self):
        source = (
            "LW $0, $31, 0\n"
            "J 0x3FFFFFF\n"
            "LW $17,$4,0xFFFF\n"
            "J 0\n"
            "LW $5, $6, 0777\n"
        )
        expected = [
            (Shape.I, ITypeFields(0, 31, 0)),
            (Shape.J, JTypeFields(0x3FFFFFF)),
            (Shape.I, ITypeFields(17, 4, 0xFFFF)),
            (Shape.J, JTypeFields(0)),
            (Shape.I, ITypeFields(5, 6, 0o777)),
        ]
        asm = Assembler()
        asm.assemble_string(source)
        words = parse_hex(asm.get_hex())

        assert len(words) == len(expected)
        for word, (shape, fields) in zip(words, expected):
            assert decode(word, shape) == fields
            opcode = 0b100011 if shape is Shape.I else 0b000010
            assert decode_opcode(word) == opcode


# =============================================================================
# Error Handling Tests
# =============================================================================

class TestErrorHandling:
    """Test error detection, reporting and output discarding."""

    @pytest.mark.parametrize("source", ["", "\n\n", "   \n", "\t"])
    def test_empty_program(self, source):
        asm = Assembler()
        with pytest.raises(EmptyProgramError):
            asm.assemble_string(source)
        assert asm.state is AssemblyState.ABORTED

    def test_oversized_literal_aborts_run(self):
        asm = Assembler()
        with pytest.raises(LexError):
            asm.assemble_string("J " + "9" * 5000)
        assert asm.state is AssemblyState.ABORTED
        assert asm.get_words() == []

    def test_empty_program_names_file_as_location(self):
        with pytest.raises(EmptyProgramError) as exc_info:
            assemble("\n", "empty.s")
        assert str(exc_info.value).startswith("empty.s:1:0: error: file must have")
        assert exc_info.value.line == 1

    def test_register_out_of_range_cites_line(self):
        with pytest.raises(LexError) as exc_info:
            assemble("J 1\nLW $32, $1, 1\n")
        assert exc_info.value.line == 2

    def test_unknown_mnemonic(self):
        with pytest.raises(LexError) as exc_info:
            assemble("J 1\nSW $1, $2, 3\n")
        assert "unknown mnemonic 'SW'" in str(exc_info.value)

    @pytest.mark.parametrize(
        "source, field",
        [
            ("LW $1, $2, 65536", "immediate"),
            ("J 67108864", "target"),
        ],
    )
    def test_field_bounds(self, source, field):
        with pytest.raises(FieldRangeError) as exc_info:
            assemble(source)
        assert exc_info.value.field_name == field

    def test_r_type_field_bounds(self):
        table = build_format_table([FormatDescriptor("ADD", Shape.R, 0)])
        asm = Assembler(formats=table)
        with pytest.raises(FieldRangeError):
            asm.assemble_string("ADD $1, $2, $3, 32, 0")
        with pytest.raises(FieldRangeError):
            asm.assemble_string("ADD $1, $2, $3, 0, 64")

    def test_parse_error_line_number(self):
        with pytest.raises(ParseError) as exc_info:
            assemble("J 1\nJ 2\nLW $1, 2, 3\n")
        assert exc_info.value.line == 3
        assert ":3:" in str(exc_info.value)

    def test_blank_line_between_instructions(self):
        with pytest.raises(ParseError) as exc_info:
            assemble("J 1\n\nJ 2\n")
        assert "expected mnemonic" in str(exc_info.value)

    def test_leading_blank_line(self):
        with pytest.raises(ParseError):
            assemble("\nJ 1\n")

    def test_trailing_whitespace(self):
        with pytest.raises(ParseError) as exc_info:
            assemble("J 1 \n")
        assert "expected end of line" in str(exc_info.value)

    def test_two_instructions_on_one_line(self):
        with pytest.raises(ParseError):
            assemble("J 1,J 2\n")

    def test_failure_discards_partial_output(self):
        asm = Assembler()
        with pytest.raises(FieldRangeError):
            asm.assemble_string("J 1\nJ 2\nLW $1, $2, 0x10000\n")
        assert asm.get_words() == []
        assert asm.get_hex() == ""
        assert asm.state is AssemblyState.ABORTED

    def test_failure_discards_previous_run(self):
        asm = Assembler()
        asm.assemble_string("J 1")
        with pytest.raises(LexError):
            asm.assemble_string("J #")
        assert asm.get_words() == []

    def test_assembler_reusable_after_failure(self):
        asm = Assembler()
        with pytest.raises(ParseError):
            asm.assemble_string("LW$1,$2,3")
        assert asm.assemble_string("J 10") == [0x0800000A]
        assert asm.state is AssemblyState.DONE


# =============================================================================
# File I/O Tests
# =============================================================================

class TestFileIO:
    """Test reading source files and writing hex output."""

    def test_assemble_and_write(self, tmp_path):
        source = tmp_path / "prog.s"
        source.write_text("J 10\nLW $1, $2, 100\n")
        dest = tmp_path / "prog.hex"

        asm = Assembler()
        asm.assemble_file(source)
        asm.write_hex(dest)

        assert dest.read_text() == "0800000A\n8C220064\n"

    def test_assemble_file_function(self, tmp_path):
        source = tmp_path / "prog.s"
        source.write_text("J 10\n")
        assert assemble_file(source) == [0x0800000A]

    def test_errors_name_the_file(self, tmp_path):
        source = tmp_path / "bad.s"
        source.write_text("J 1\nLW $99, $1, 1\n")
        with pytest.raises(LexError) as exc_info:
            assemble_file(source)
        assert "bad.s:2:" in str(exc_info.value)

    def test_missing_source(self, tmp_path):
        asm = Assembler()
        with pytest.raises(FileUnavailableError):
            asm.assemble_file(tmp_path / "missing.s")
        assert asm.state is AssemblyState.ABORTED

    def test_undecodable_source(self, tmp_path):
        source = tmp_path / "binary.s"
        source.write_bytes(b"\xff\xfe\x00J")
        with pytest.raises(FileUnavailableError):
            assemble_file(source)

    def test_unwritable_destination(self, tmp_path):
        asm = Assembler()
        asm.assemble_string("J 1")
        with pytest.raises(FileUnavailableError):
            asm.write_hex(tmp_path / "no_such_dir" / "out.hex")

    def test_write_without_successful_run(self, tmp_path):
        asm = Assembler()
        with pytest.raises(HexAsmError):
            asm.write_hex(tmp_path / "out.hex")
        assert not (tmp_path / "out.hex").exists()


# =============================================================================
# Logging Tests
# =============================================================================

class TestLogging:
    """Per-instruction trace at DEBUG level."""

    def test_instruction_trace(self, caplog):
        caplog.set_level(logging.DEBUG, logger="hexasm")
        assemble("J 10\nLW $1, $2, 100\n")
        assert "line 2: LW opcode=35 rs=1 rt=2 imm=100 -> 8C220064" in caplog.text
        assert "-> 0800000A" in caplog.text
