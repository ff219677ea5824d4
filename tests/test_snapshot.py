# =============================================================================
# test_snapshot.py - Machine State Snapshot Tests
# =============================================================================
# Tests for the 205-byte binary snapshot and the one-line text snapshot,
# including rejection of malformed data.
# =============================================================================

import struct

import pytest

from lmc_sdk.emulator import (
    SNAPSHOT_SIZE,
    InterpreterState,
    Memory,
    decode_binary,
    decode_text,
    encode_binary,
    encode_text,
    load_binary,
    save_binary,
)
from lmc_sdk.errors import MalformedStateError


def sample_state() -> InterpreterState:
    return InterpreterState(
        memory=Memory([503, 902, 0, 42]),
        pc=3,
        accumulator=42,
        negative=True,
    )


def text_for(flag: str, fields) -> str:
    return f"LMC[{flag} " + " ".join(str(value) for value in fields) + "]"


# =============================================================================
# Binary Format Tests
# =============================================================================

class TestBinary:
    """Test the binary snapshot layout."""

    def test_size(self):
        assert SNAPSHOT_SIZE == 205
        assert len(encode_binary(sample_state())) == 205

    def test_layout(self):
        data = encode_binary(sample_state())
        assert struct.unpack_from("<HH", data, 0) == (42, 3)
        assert data[4] == 1
        assert struct.unpack_from("<H", data, 5) == (503,)
        assert struct.unpack_from("<H", data, 11) == (42,)

    def test_round_trip(self):
        state = sample_state()
        assert decode_binary(encode_binary(state)) == state

    def test_positive_flag(self):
        state = sample_state()
        state.negative = False
        assert encode_binary(state)[4] == 0
        assert decode_binary(encode_binary(state)).negative is False

    def test_files(self, tmp_path):
        path = tmp_path / "state.bin"
        save_binary(path, sample_state())
        assert path.stat().st_size == 205
        assert load_binary(path) == sample_state()

    def test_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            load_binary(tmp_path / "none.bin")


class TestBinaryErrors:
    """Malformed binary snapshots are rejected."""

    def setup_method(self):
        self.data = bytearray(encode_binary(sample_state()))

    def test_short(self):
        with pytest.raises(MalformedStateError):
            decode_binary(bytes(self.data[:-1]))

    def test_long(self):
        with pytest.raises(MalformedStateError):
            decode_binary(bytes(self.data) + b"\x00")

    def test_bad_flag(self):
        self.data[4] = 2
        with pytest.raises(MalformedStateError) as exc_info:
            decode_binary(bytes(self.data))
        assert exc_info.value.position == 4

    def test_accumulator_out_of_range(self):
        struct.pack_into("<H", self.data, 0, 1000)
        with pytest.raises(MalformedStateError):
            decode_binary(bytes(self.data))

    def test_pc_out_of_range(self):
        struct.pack_into("<H", self.data, 2, 100)
        with pytest.raises(MalformedStateError) as exc_info:
            decode_binary(bytes(self.data))
        assert exc_info.value.token == "100"

    def test_word_out_of_range(self):
        struct.pack_into("<H", self.data, 5 + 2 * 7, 1000)
        with pytest.raises(MalformedStateError) as exc_info:
            decode_binary(bytes(self.data))
        assert "07" in exc_info.value.reason


# =============================================================================
# Text Format Tests
# =============================================================================

class TestText:
    """Test the text snapshot line."""

    def test_encode(self):
        text = encode_text(sample_state())
        assert text.startswith("LMC[N 003 042 503 902 000 042 000")
        assert text.endswith(" 000]")
        assert len(text.split()) == 103

    def test_round_trip(self):
        state = sample_state()
        assert decode_text(encode_text(state)) == state

    def test_surrounding_whitespace(self):
        text = "  " + encode_text(sample_state()) + "\n"
        assert decode_text(text) == sample_state()

    def test_short_fields_accepted(self):
        fields = [3, 42, 503, 902, 0, 42] + [0] * 96
        state = decode_text(text_for("N", fields))
        assert state == sample_state()

    def test_positive(self):
        state = decode_text(text_for("P", [0] * 102))
        assert state.negative is False
        assert state.pc == 0


class TestTextErrors:
    """Malformed text snapshots name the offending token."""

    def test_bad_prefix(self):
        with pytest.raises(MalformedStateError):
            decode_text("XYZ[P " + " ".join(["0"] * 102) + "]")

    def test_bad_flag(self):
        with pytest.raises(MalformedStateError) as exc_info:
            decode_text(text_for("Q", [0] * 102))
        assert exc_info.value.token == "Q"

    def test_too_few_values(self):
        with pytest.raises(MalformedStateError) as exc_info:
            decode_text(text_for("P", [0] * 101))
        assert exc_info.value.reason == "too few values"

    def test_too_many_values(self):
        with pytest.raises(MalformedStateError) as exc_info:
            decode_text(text_for("P", [0] * 103))
        assert exc_info.value.reason == "too many values"

    def test_non_numeric_token(self):
        fields = ["0"] * 102
        fields[5] = "12a"
        with pytest.raises(MalformedStateError) as exc_info:
            decode_text(text_for("P", fields))
        assert exc_info.value.token == "12a"

    def test_four_digit_token(self):
        fields = ["0"] * 102
        fields[1] = "1000"
        with pytest.raises(MalformedStateError) as exc_info:
            decode_text(text_for("P", fields))
        assert exc_info.value.token == "1000"

    @pytest.mark.parametrize("token", ["١٢", "４", "1٢"])
    def test_non_ascii_digits(self, token):
        fields = ["0"] * 102
        fields[0] = token
        with pytest.raises(MalformedStateError):
            decode_text(text_for("P", fields))

    def test_double_space(self):
        text = text_for("P", [0] * 102).replace(" ", "  ", 1)
        with pytest.raises(MalformedStateError):
            decode_text(text)

    def test_trailing_text(self):
        with pytest.raises(MalformedStateError):
            decode_text(text_for("P", [0] * 102) + " extra")

    def test_missing_close(self):
        with pytest.raises(MalformedStateError):
            decode_text(text_for("P", [0] * 102)[:-1])

    def test_pc_out_of_range(self):
        with pytest.raises(MalformedStateError):
            decode_text(text_for("P", [100] + [0] * 101))
