"""
Tests for the 2DA line tokenizer and column layout helpers
"""
import pytest

from parsers import Token, tokenize, tokenize_with_positions, TAB_WIDTH
from parsers.tokenizer import token_width
from parsers.tda_layout import place_tokens, render_line


class TestTokenize:
    """Test splitting lines into tokens"""

    def test_whitespace_split(self):
        assert tokenize("0   Foo  10") == ['0', 'Foo', '10']

    def test_empty_line(self):
        assert tokenize("") == []
        assert tokenize("   \t ") == []

    def test_quoted_token_keeps_quotes_and_spaces(self):
        assert tokenize('0 "Hello World" x') == ['0', '"Hello World"', 'x']

    def test_unterminated_quote_runs_to_end(self):
        assert tokenize('0 "open ended value') == ['0', '"open ended value']

    def test_quote_inside_token(self):
        assert tokenize('a"b c"d e') == ['a"b c"d', 'e']


class TestTokenPositions:
    """Test visual start columns"""

    def test_space_positions(self):
        line = tokenize_with_positions(" Label  Value")
        assert line.tokens == [Token('Label', 1), Token('Value', 8)]
        assert line.visual_length == 13

    def test_tabs_advance_to_next_stop(self):
        line = tokenize_with_positions("a\tb")
        assert TAB_WIDTH == 8
        assert line.tokens == [Token('a', 0), Token('b', 8)]
        assert line.visual_length == 9

    def test_tab_after_long_token(self):
        line = tokenize_with_positions("abcdefghij\tx")
        assert line.tokens[1] == Token('x', 16)

    def test_trailing_whitespace_counts(self):
        line = tokenize_with_positions("a  ")
        assert line.visual_length == 3

    def test_texts(self):
        assert tokenize_with_positions("x y").texts == ['x', 'y']


class TestTokenWidth:

    def test_width_to_next_token(self):
        tokens = tokenize_with_positions("ab     c").tokens
        assert token_width(tokens, 0) == 7

    def test_width_at_least_text_length(self):
        tokens = [Token('abcdef', 0), Token('x', 2)]
        assert token_width(tokens, 0) == 6

    def test_last_token_width(self):
        tokens = tokenize_with_positions("ab     cde").tokens
        assert token_width(tokens, 1) == 3

    @pytest.mark.parametrize("index", [-1, 2])
    def test_out_of_range(self, index):
        tokens = tokenize_with_positions("a b").tokens
        assert token_width(tokens, index) == 0


class TestPlacement:
    """Test choosing token start columns"""

    def test_desired_starts_used_when_free(self):
        assert place_tokens(['0', 'x'], [0, 4], 0, [1, 1]) == [0, 4]

    def test_previous_column_width_pushes_token(self):
        assert place_tokens(['0', 'Foo', '10'], [0, 1, 8], 0, [3, 7, 5]) == [0, 3, 10]

    def test_one_blank_between_tokens(self):
        assert place_tokens(['ab', 'c'], [0, 1], 0, [2, 1]) == [0, 3]

    def test_indent(self):
        assert place_tokens(['A'], [0], 2, [1]) == [2]

    def test_missing_desired_starts_are_packed(self):
        assert place_tokens(['A', 'B'], [], 2, [1, 2]) == [2, 4]

    def test_render_line(self):
        assert render_line(['a', 'b'], [0, 3], 6) == "a  b  "
        assert render_line(['a', 'b'], [0, 3]) == "a  b"
