"""
Tests for the formula tokenizer.
"""

import pytest

from formula_engine import LimitExceededError, FormulaLimits, tokenize
from formula_engine.tokenizer import (
    is_number,
    is_token_sequence,
    looks_numeric,
    render_token_context,
)


class TestNumbers:
    """Tests for number tokenization."""

    def test_tokenizes_integer(self):
        assert tokenize("42") == ["42"]

    def test_tokenizes_decimal(self):
        assert tokenize("3.14") == ["3.14"]

    def test_tokenizes_leading_dot(self):
        assert tokenize(".5") == [".5"]

    def test_second_decimal_point_starts_new_token(self):
        assert tokenize("1.2.3") == ["1.2", ".3"]

    def test_letter_after_number_starts_new_token(self):
        assert tokenize("2x") == ["2", "x"]


class TestIdentifiers:
    """Tests for identifier tokenization."""

    def test_identifier_may_contain_digits(self):
        assert tokenize("x1") == ["x1"]

    def test_identifier_may_contain_unreserved_symbols(self):
        assert tokenize("rate_%.max") == ["rate_%.max"]

    def test_comma_ends_identifier(self):
        assert tokenize("F(x,y)") == ["F", "(", "x", ",", "y", ")"]


class TestSymbols:
    """Tests for operator and punctuation tokenization."""

    def test_symbols_are_single_characters(self):
        assert tokenize("((--") == ["(", "(", "-", "-"]

    def test_tokenizes_full_expression(self):
        assert tokenize("1+3*(5-2)") == ["1", "+", "3", "*", "(", "5", "-", "2", ")"]

    def test_removes_spaces(self):
        assert tokenize("  x +  y  ") == ["x", "+", "y"]

    def test_empty_input_has_no_tokens(self):
        assert tokenize("") == []
        assert tokenize("   ") == []

    @pytest.mark.parametrize(
        "source",
        ["-100-2+x-(y+z)", "RIGHT(LEFT(1,2), RIGHT(4,3))", "a1 . b / 2.50 *c"],
    )
    def test_concatenation_reproduces_input_without_spaces(self, source):
        assert "".join(tokenize(source)) == source.replace(" ", "")


class TestTokenSequence:
    """Tests for the run extension rule."""

    def test_empty_run_always_extends(self):
        assert is_token_sequence("", "+")

    def test_symbol_run_never_extends(self):
        assert not is_token_sequence("(", "x")

    def test_integer_run_takes_a_dot(self):
        assert is_token_sequence("12", ".")

    def test_decimal_run_rejects_a_second_dot(self):
        assert not is_token_sequence("1.5", ".")

    def test_identifier_run_rejects_operators(self):
        assert not is_token_sequence("abc", "*")


class TestNumberHelpers:
    """Tests for number classification."""

    @pytest.mark.parametrize("text", ["0", "12", "1.", "1.25", ".5"])
    def test_well_formed_numbers(self, text):
        assert is_number(text)

    @pytest.mark.parametrize("text", [".", "1.2.3", "nan", "inf", "1e5", ""])
    def test_malformed_numbers(self, text):
        assert not is_number(text)

    def test_looks_numeric(self):
        assert looks_numeric(".x")
        assert looks_numeric("3")
        assert not looks_numeric("x3")


class TestContext:
    """Tests for error context rendering."""

    def test_marks_offending_token(self):
        assert render_token_context(["1", "+", "2"], 1) == "1‸‸+‸‸2"

    def test_marks_end_of_input(self):
        assert render_token_context(["1", "+"], 2) == "1+‸‸<end>‸‸"

    def test_limits_window(self):
        tokens = [str(i) for i in range(30)]
        context = render_token_context(tokens, 15, window=2)
        assert context == "1314‸‸15‸‸1617"


class TestLimits:
    """Tests for tokenizer limits."""

    def test_rejects_long_expression(self):
        with pytest.raises(LimitExceededError):
            tokenize("1+1", FormulaLimits(max_expression_length=2))

    def test_rejects_too_many_tokens(self):
        with pytest.raises(LimitExceededError) as exc_info:
            tokenize("1+1+1", FormulaLimits(max_tokens=4))
        assert exc_info.value.limit_name == "max_tokens"
