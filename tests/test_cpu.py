# =============================================================================
# test_cpu.py - LMC Instruction Set Tests
# =============================================================================
# Tests for the machine model shared by every other component:
#   - Opcode base tables in both directions
#   - Instruction encoding and decoding
#   - Address wrapping
#   - Accumulator normalization
# =============================================================================

import pytest

from lmc_sdk.cpu import (
    BASE_MNEMONICS,
    INPUT_WORD,
    MEMORY_SIZE,
    MNEMONICS,
    NO_OPERAND_OPCODES,
    OPCODE_BASES,
    OUTPUT_WORD,
    TAG_OPERAND_OPCODES,
    Opcode,
    decode_word,
    encode_instruction,
    get_base,
    is_valid_mnemonic,
    is_word,
    normalize_accumulator,
    wrap_address,
)


# =============================================================================
# Opcode Table Tests
# =============================================================================

class TestOpcodeTables:
    """Test the forward and reverse opcode tables."""

    def test_all_mnemonics_present(self):
        assert MNEMONICS == {
            "HLT", "DAT", "ADD", "SUB", "STO", "LDA",
            "BR", "BRZ", "BRP", "IN", "OUT",
        }

    def test_bases(self):
        assert OPCODE_BASES["ADD"] == 100
        assert OPCODE_BASES["SUB"] == 200
        assert OPCODE_BASES["STO"] == 300
        assert OPCODE_BASES["LDA"] == 500
        assert OPCODE_BASES["BR"] == 600
        assert OPCODE_BASES["BRZ"] == 700
        assert OPCODE_BASES["BRP"] == 800
        assert INPUT_WORD == 901
        assert OUTPUT_WORD == 902

    def test_hlt_and_dat_share_base(self):
        assert OPCODE_BASES["HLT"] == OPCODE_BASES["DAT"] == 0

    def test_base_zero_renders_as_hlt(self):
        assert BASE_MNEMONICS[0] == "HLT"

    def test_reverse_table_round_trip(self):
        for base, mnemonic in BASE_MNEMONICS.items():
            assert OPCODE_BASES[mnemonic] == base

    def test_no_400_base(self):
        assert 400 not in BASE_MNEMONICS

    def test_operand_classes_disjoint(self):
        assert not NO_OPERAND_OPCODES & TAG_OPERAND_OPCODES

    def test_opcode_enum_base(self):
        assert Opcode.LDA.base == 500
        assert Opcode("OUT").base == 902
        assert str(Opcode.BRZ) == "BRZ"


# =============================================================================
# Lookup Tests
# =============================================================================

class TestLookup:
    """Test mnemonic lookup helpers."""

    def test_valid_mnemonic_any_case(self):
        assert is_valid_mnemonic("lda")
        assert is_valid_mnemonic("Brp")
        assert not is_valid_mnemonic("JMP")

    def test_get_base(self):
        assert get_base("sto") == 300

    def test_get_base_unknown(self):
        with pytest.raises(KeyError):
            get_base("NOP")


# =============================================================================
# Encoding Tests
# =============================================================================

class TestEncoding:
    """Test instruction encoding, decoding and address arithmetic."""

    def test_encode(self):
        assert encode_instruction("LDA", 3) == 503
        assert encode_instruction("br", 0) == 600

    def test_encode_wraps_address(self):
        assert encode_instruction("ADD", 103) == 103

    def test_decode(self):
        assert decode_word(503) == (5, 3)
        assert decode_word(902) == (9, 2)
        assert decode_word(42) == (0, 42)

    def test_wrap_address(self):
        assert wrap_address(100) == 0
        assert wrap_address(-1) == 99
        assert wrap_address(57) == 57
        assert MEMORY_SIZE == 100

    def test_is_word(self):
        assert is_word(0)
        assert is_word(999)
        assert not is_word(1000)
        assert not is_word(-1)


# =============================================================================
# Accumulator Normalization Tests
# =============================================================================

class TestNormalization:
    """Test accumulator normalization and the negative flag."""

    def test_negative_five(self):
        assert normalize_accumulator(-5) == (995, True)

    def test_overflow(self):
        assert normalize_accumulator(1005) == (5, False)

    def test_in_range(self):
        assert normalize_accumulator(42) == (42, False)

    def test_zero(self):
        assert normalize_accumulator(0) == (0, False)

    def test_exactly_minus_thousand(self):
        assert normalize_accumulator(-1000) == (0, True)

    def test_large_negative(self):
        assert normalize_accumulator(-2500) == (500, True)

    @pytest.mark.parametrize("value", [-1999, -1, 0, 1, 999, 1000, 1998])
    def test_result_always_a_word(self, value):
        word, _ = normalize_accumulator(value)
        assert 0 <= word <= 999
