# =============================================================================
# test_assembler.py - Assembler Tests
# =============================================================================
# End-to-end tests for the LMC assembler, from source text to the
# 100-word image and tag table.
#
# Test coverage includes:
#   - Line grammar (tags, mnemonics, operands, comments)
#   - Encoding of every instruction class
#   - Error reporting with line numbers
#   - Truncation of programs longer than memory
# =============================================================================

import logging

import pytest

from lmc_sdk.assembler import (
    Assembler,
    assemble,
    assemble_file,
    find_similar_tags,
    parse_line,
    parse_source,
)
from lmc_sdk.errors import (
    AssembledTooLargeError,
    AssemblerError,
    DatRangeError,
    DuplicateTagError,
    MissingOperandError,
    ParseError,
    UndefinedTagError,
    UnknownOpcodeError,
)


SCENARIO = """\
first   LDA     num
        OUT
        HLT
num     DAT     042
"""

ADDER = """\
        IN
        STO     first
        IN
        ADD     first
        OUT
        HLT
first   DAT     0
"""


# =============================================================================
# Parser Tests
# =============================================================================

class TestParseLine:
    """Test parsing of single source lines."""

    def test_blank_line(self):
        assert parse_line("", 1) is None
        assert parse_line("    \t", 1) is None

    def test_comment_only(self):
        assert parse_line("# just a comment", 1) is None
        assert parse_line("        # indented comment", 1) is None

    def test_tag_mnemonic_operand(self):
        line = parse_line("first   LDA     num", 1)
        assert line.tag == "first"
        assert line.mnemonic == "LDA"
        assert line.operand == "num"

    def test_indented_no_tag(self):
        line = parse_line("        OUT", 2)
        assert line.tag is None
        assert line.mnemonic == "OUT"
        assert line.operand is None
        assert line.line == 2

    def test_tag_before_bare_mnemonic(self):
        line = parse_line("done HLT", 1)
        assert line.tag == "done"
        assert line.mnemonic == "HLT"

    def test_column_one_without_tag(self):
        line = parse_line("LDA num", 1)
        assert line.tag is None
        assert line.mnemonic == "LDA"
        assert line.operand == "num"

    def test_mnemonic_case_insensitive(self):
        line = parse_line("        lda     num", 1)
        assert line.mnemonic == "LDA"

    def test_tags_keep_case(self):
        line = parse_line("Total   DAT     0", 1)
        assert line.tag == "Total"

    def test_trailing_comment(self):
        line = parse_line("        ADD     one   # add one", 1)
        assert line.operand == "one"

    def test_operand_column(self):
        line = parse_line("        LDA     num", 1)
        assert line.operand_location.column == 17

    def test_too_many_fields(self):
        with pytest.raises(ParseError) as exc_info:
            parse_line("a LDA b c", 3)
        assert exc_info.value.line == 3

    def test_leading_mnemonic_is_not_a_tag(self):
        line = parse_line("LDA out", 1)
        assert line.tag is None
        assert line.mnemonic == "LDA"
        assert line.operand == "out"

    def test_leading_mnemonic_with_mnemonic_named_tag(self):
        result = assemble("LDA out\n        HLT\nout DAT 5\n")
        assert result.image[:3] == [502, 0, 5]
        assert result.tags == {"out": 2}

    def test_indented_line_with_three_fields(self):
        with pytest.raises(ParseError):
            parse_line("    a LDA b", 1)

    def test_unknown_opcode(self):
        with pytest.raises(UnknownOpcodeError) as exc_info:
            parse_line("        JMP     loop", 1)
        assert exc_info.value.mnemonic == "JMP"

    def test_parse_source_skips_blank_lines(self):
        lines = parse_source("\n        IN\n\n        OUT\n")
        assert [line.line for line in lines] == [2, 4]


# =============================================================================
# Full Pipeline Tests
# =============================================================================

class TestFullPipeline:
    """Test assembly from source to image."""

    def test_scenario_image(self):
        result = assemble(SCENARIO)
        assert result.image[:4] == [503, 902, 0, 42]
        assert result.image[4:] == [0] * 96
        assert len(result.image) == 100

    def test_scenario_tags(self):
        result = assemble(SCENARIO)
        assert result.tags == {"first": 0, "num": 3}

    def test_tags_in_source_order(self):
        result = assemble("z DAT 1\na DAT 2\nm DAT 3\n")
        assert list(result.tags) == ["z", "a", "m"]

    def test_all_addressed_instructions(self):
        source = """\
top     ADD     data
        SUB     data
        STO     data
        LDA     data
        BR      top
        BRZ     top
        BRP     top
data    DAT     7
"""
        result = assemble(source)
        assert result.image[:8] == [107, 207, 307, 507, 600, 700, 800, 7]

    def test_adder(self):
        result = assemble(ADDER)
        assert result.image[:7] == [901, 306, 901, 106, 902, 0, 0]
        assert result.size == 7

    def test_blank_and_comment_lines_take_no_address(self):
        source = "# header\n\n        IN\n   # note\n        OUT\n"
        result = assemble(source)
        assert result.image[:2] == [901, 902]
        assert result.size == 2

    def test_io_operand_ignored(self):
        result = assemble("        IN      5\n        OUT     x\n")
        assert result.image[:2] == [901, 902]

    def test_hlt_with_operand_is_data(self):
        result = assemble("        HLT     5\n")
        assert result.image[0] == 5

    def test_bare_hlt_is_zero(self):
        result = assemble("        HLT\n")
        assert result.image[0] == 0

    def test_dat_bounds(self):
        result = assemble("a DAT 0\nb DAT 999\n")
        assert result.image[:2] == [0, 999]

    def test_forward_reference(self):
        result = assemble("        BR      end\n        OUT\nend     HLT\n")
        assert result.image[0] == 602

    def test_nonzero_statistics(self):
        result = assemble(SCENARIO)
        assert result.nonzero_count == 3
        assert result.last_nonzero_address == 3

    def test_address_of(self):
        result = assemble("\n        IN\n\n        OUT\n")
        assert result.address_of(2) == 0
        assert result.address_of(4) == 1
        assert result.address_of(3) is None

    def test_accepts_line_iterable(self):
        result = assemble(["        IN", "        OUT"])
        assert result.image[:2] == [901, 902]

    def test_assembler_keeps_last_result(self):
        asm = Assembler()
        assert asm.get_result() is None
        asm.assemble(SCENARIO)
        assert asm.get_image()[:4] == [503, 902, 0, 42]
        assert asm.get_tags() == {"first": 0, "num": 3}
        assert asm.get_warnings() == []

    def test_load_words(self):
        image = Assembler().load_words([503, 902, 0, 42])
        assert len(image) == 100
        assert image[:4] == [503, 902, 0, 42]

    def test_load_words_too_many(self):
        with pytest.raises(AssembledTooLargeError):
            Assembler().load_words([0] * 101)

    def test_load_words_bad_value(self):
        with pytest.raises(ValueError):
            Assembler().load_words([1, 1000])

    def test_assemble_file(self, tmp_path):
        path = tmp_path / "prog.lmc"
        path.write_text(SCENARIO, encoding="utf-8")
        result = assemble_file(path)
        assert result.image[:4] == [503, 902, 0, 42]
        assert result.filename == str(path)

    def test_assemble_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            assemble_file(tmp_path / "missing.lmc")


# =============================================================================
# Error Reporting Tests
# =============================================================================

class TestErrors:
    """Test assembly errors and their messages."""

    def test_dat_too_large(self):
        with pytest.raises(DatRangeError) as exc_info:
            assemble("big     DAT     1000\n")
        assert exc_info.value.literal == "1000"

    def test_dat_not_numeric(self):
        with pytest.raises(DatRangeError):
            assemble("x       DAT     abc\n")

    @pytest.mark.parametrize("literal", ["٤٢", "４２", "+5", "1_0"])
    def test_dat_non_ascii_or_signed_digits(self, literal):
        with pytest.raises(DatRangeError):
            assemble(f"x       DAT     {literal}\n")

    def test_dat_negative(self):
        with pytest.raises(DatRangeError):
            assemble("x       DAT     -1\n")

    def test_dat_without_operand(self):
        with pytest.raises(MissingOperandError):
            assemble("x       DAT\n")

    def test_addressed_instruction_without_operand(self):
        with pytest.raises(MissingOperandError) as exc_info:
            assemble("        IN\n        LDA\n")
        assert exc_info.value.line == 2

    def test_undefined_tag(self):
        with pytest.raises(UndefinedTagError) as exc_info:
            assemble("        LDA     nmu\nnum     DAT     1\n")
        error = exc_info.value
        assert error.tag == "nmu"
        assert error.similar_tags == ["num"]
        assert error.line == 1

    def test_undefined_tag_message(self):
        with pytest.raises(UndefinedTagError) as exc_info:
            assemble("        LDA     nmu\n", filename="prog.lmc")
        assert str(exc_info.value).startswith("prog.lmc:1:17: error: undefined tag 'nmu'")

    def test_tags_case_sensitive(self):
        with pytest.raises(UndefinedTagError):
            assemble("        LDA     Num\nnum     DAT     1\n")

    def test_duplicate_tag_reported_on_second(self):
        with pytest.raises(DuplicateTagError) as exc_info:
            assemble("x       DAT     1\n        OUT\nx       DAT     2\n")
        error = exc_info.value
        assert error.tag == "x"
        assert error.line == 3
        assert error.original_location.line == 1

    def test_unknown_opcode(self):
        with pytest.raises(UnknownOpcodeError):
            assemble("        IN\n        FOO\n")

    def test_errors_share_base_class(self):
        with pytest.raises(AssemblerError):
            assemble("        LDA     missing\n")

    def test_no_partial_result(self):
        asm = Assembler()
        with pytest.raises(UndefinedTagError):
            asm.assemble("        LDA     missing\n")
        assert asm.get_result() is None


# =============================================================================
# Truncation Tests
# =============================================================================

class TestTruncation:
    """Test programs longer than memory."""

    def setup_method(self):
        self.lines = [f"t{i}      DAT     {i}" for i in range(101)]

    def test_101_lines_assemble_with_warning(self):
        result = assemble(self.lines)
        assert result.truncated
        assert len(result.warnings) == 1
        assert "truncated" in result.warnings[0]

    def test_only_first_100_tags_registered(self):
        result = assemble(self.lines)
        assert "t99" in result.tags
        assert "t100" not in result.tags
        assert len(result.tags) == 100

    def test_image_holds_first_100_lines(self):
        result = assemble(self.lines)
        assert result.image == list(range(100))
        assert result.size == 100

    def test_warning_is_logged(self, caplog):
        with caplog.at_level(logging.WARNING, logger="lmc_sdk.assembler.assembler"):
            assemble(self.lines)
        assert any("truncated" in record.message for record in caplog.records)

    def test_dropped_lines_are_not_parsed(self):
        lines = ["        OUT"] * 100 + ["        FOO bar baz qux"]
        result = assemble(lines)
        assert result.truncated
        assert result.image == [902] * 100

    def test_exactly_100_lines_not_truncated(self):
        result = assemble(self.lines[:100])
        assert not result.truncated
        assert result.warnings == []


# =============================================================================
# Tag Suggestion Tests
# =============================================================================

class TestSimilarTags:
    """Test typo suggestions for undefined tags."""

    def test_one_letter_typo(self):
        assert find_similar_tags("totl", ["total", "count"]) == ["total"]

    def test_case_difference(self):
        assert find_similar_tags("COUNT", ["count"]) == ["count"]

    def test_no_match(self):
        assert find_similar_tags("xyz", ["total", "count"]) == []
