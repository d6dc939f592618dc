"""Tests for the G-code block parser."""

import pytest
from hypothesis import given, settings
from hypothesis import strategies as st

from gcdump.gcode import GCodeParser, MalformedBlockError, GCodeParseError, Word, next_dark, parse_block


class TestNextDark:
    def test_skips_all_whitespace_kinds(self) -> None:
        assert next_dark(b" \t\r\nG1", 6, 0) == 4

    def test_returns_start_when_already_dark(self) -> None:
        assert next_dark(b"G1", 2, 0) == 0

    def test_end_of_input_returns_length(self) -> None:
        assert next_dark(b"G1   ", 5, 2) == 5

    def test_empty_buffer(self) -> None:
        assert next_dark(b"", 0, 0) == 0

    def test_length_bounds_the_scan(self) -> None:
        assert next_dark(b"  G", 2, 0) == 2


class TestNoBlock:
    @pytest.mark.parametrize("line", ["", " ", "\t\t", "\r\n", "  \n  "])
    def test_blank_lines_have_no_block(self, line: str) -> None:
        assert parse_block(line) is None

    @given(st.text(alphabet=" \t\r\n", max_size=40))
    @settings(max_examples=50)
    def test_whitespace_only_is_never_a_block(self, line: str) -> None:
        assert parse_block(line.encode()) is None

    def test_zero_length_hides_content(self) -> None:
        assert parse_block(b"G1 X10", 0) is None


class TestWords:
    def test_simple_move(self) -> None:
        block = parse_block(b"G1 X10 Y20")
        assert block.delete_flag is False
        assert block.line_number == 0
        assert block.words == [Word('G', 1), Word('X', 10.0), Word('Y', 20.0)]
        assert type(block.words[0].value) is int
        assert type(block.words[1].value) is float
        assert type(block.words[2].value) is float

    def test_integer_letters_are_case_insensitive(self) -> None:
        block = parse_block("g28 m104 s200")
        assert block.words == [Word('g', 28), Word('m', 104), Word('s', 200.0)]

    def test_letter_case_is_preserved(self) -> None:
        block = parse_block("x1 Y2")
        assert [word.letter for word in block.words] == ['x', 'Y']

    def test_signed_and_fractional_values(self) -> None:
        block = parse_block("X-1.5 Y+.25 Z3. E1e2")
        assert [word.value for word in block.words] == [-1.5, 0.25, 3.0, 100.0]

    def test_whitespace_between_letter_and_value(self) -> None:
        assert parse_block("G 1 X 2").words == [Word('G', 1), Word('X', 2.0)]

    def test_words_without_separators(self) -> None:
        assert parse_block("G1X10Y20").words == [Word('G', 1), Word('X', 10.0), Word('Y', 20.0)]

    def test_duplicate_letters_pass_through(self) -> None:
        assert parse_block("X1 X2").words == [Word('X', 1.0), Word('X', 2.0)]

    def test_next_link_is_unset(self) -> None:
        assert parse_block("G1").next is None


class TestPrefix:
    def test_delete_flag(self) -> None:
        block = parse_block("/G1")
        assert block.delete_flag is True
        assert block.words == [Word('G', 1)]

    def test_delete_flag_with_spaces(self) -> None:
        block = parse_block("  /  N7 M104 S200")
        assert block.delete_flag is True
        assert block.line_number == 7
        assert block.words == [Word('M', 104), Word('S', 200.0)]

    def test_line_number(self) -> None:
        block = parse_block("N5 G1 X1")
        assert block.line_number == 5
        assert block.words == [Word('G', 1), Word('X', 1.0)]

    def test_lowercase_line_number(self) -> None:
        block = parse_block("n12")
        assert block.line_number == 12
        assert block.words == []

    def test_negative_line_number(self) -> None:
        assert parse_block("N-3 G0").line_number == -3

    def test_line_number_without_digits(self) -> None:
        block = parse_block("N G1")
        assert block.line_number == 0
        assert block.words == [Word('G', 1)]

    def test_lone_n_is_a_word_without_value(self) -> None:
        with pytest.raises(MalformedBlockError):
            parse_block("N")


class TestMalformed:
    def test_letter_without_value(self) -> None:
        with pytest.raises(MalformedBlockError) as excinfo:
            parse_block("G1 X")
        assert excinfo.value.offset == 4

    def test_letter_followed_by_text(self) -> None:
        with pytest.raises(MalformedBlockError) as excinfo:
            parse_block("G1 XABC")
        assert excinfo.value.offset == 4

    def test_integer_letter_with_float_text(self) -> None:
        with pytest.raises(MalformedBlockError):
            parse_block("G.5")

    def test_non_letter_word(self) -> None:
        with pytest.raises(MalformedBlockError) as excinfo:
            parse_block("G1 ;move")
        assert excinfo.value.offset == 3

    def test_is_parse_error(self) -> None:
        with pytest.raises(GCodeParseError):
            parse_block("X")

    def test_error_message_includes_offset(self) -> None:
        err = MalformedBlockError("Missing value for X", 4)
        assert str(err) == "Missing value for X (offset 4)"
        assert err.message == "Missing value for X"


class TestLengthBoundary:
    def test_number_stops_at_length(self) -> None:
        assert parse_block(b"G1 X10", 5).words == [Word('G', 1), Word('X', 1.0)]

    def test_trailing_letter_cut_by_length(self) -> None:
        with pytest.raises(MalformedBlockError):
            parse_block(b"G1 X10", 4)

    def test_length_past_buffer(self) -> None:
        with pytest.raises(ValueError):
            parse_block(b"G1", 3)

    def test_negative_length(self) -> None:
        with pytest.raises(ValueError):
            parse_block(b"G1", -1)

    @pytest.mark.parametrize("buffer", [bytearray(b"G1 X2"), memoryview(b"G1 X2")])
    def test_bytes_like_input(self, buffer) -> None:
        assert parse_block(buffer).words == [Word('G', 1), Word('X', 2.0)]


class TestReparse:
    def test_same_buffer_gives_equal_independent_blocks(self) -> None:
        buffer = b"/N3 G1 X1 Y2"
        first = parse_block(buffer)
        second = parse_block(buffer)
        assert first == second
        assert first is not second
        assert first.words is not second.words

    @given(st.lists(
        st.tuples(st.sampled_from("GMXYZEFSTgmxyzef"), st.integers(min_value=0, max_value=9999)),
        min_size=1, max_size=12,
    ))
    @settings(max_examples=100)
    def test_word_order_is_preserved(self, pairs) -> None:
        line = " ".join(f"{letter}{value}" for letter, value in pairs)
        block = parse_block(line)
        assert [word.letter for word in block.words] == [letter for letter, _ in pairs]
        for word, (letter, value) in zip(block.words, pairs):
            if letter in "GMgm":
                assert word.value == value and type(word.value) is int
            else:
                assert word.value == float(value) and type(word.value) is float


class TestGCodeParser:
    def test_parse_line_returns_block(self) -> None:
        parser = GCodeParser()
        assert parser.parse_line("G28").words == [Word('G', 28)]

    def test_parse_line_unifies_failures(self) -> None:
        parser = GCodeParser()
        assert parser.parse_line("   ") is None
        assert parser.parse_line("G1 X") is None
        assert parser.malformed_count == 1
