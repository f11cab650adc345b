"""
Tokenizer (lexer) for formula strings.

Converts a formula string into an ordered list of token strings. Tokens
carry no type tag: the parser classifies each token by its content.

A token is one of:
- a number literal (``42``, ``3.14``, ``1.``, ``.5``)
- an identifier (variable or function name)
- one of the single-character symbols ``+ - * / ( ) ,``
"""

import re
from typing import List, Optional, Sequence

from .limits import FormulaLimits, check_expression_length, check_token_count

# Single-character symbols, always tokens of their own
SYMBOLS = frozenset("+-*/(),")

# Characters that always start a fresh token
OPERATORS = frozenset("+-*/()")

# Well-formed decimal literal
NUMBER_PATTERN = re.compile(r"^(?:\d+\.?\d*|\.\d+)$")

END_OF_INPUT = "<end>"


def _is_digit(ch: str) -> bool:
    """Checks if a character is an ASCII digit."""
    return "0" <= ch <= "9"


def is_number(text: str) -> bool:
    """Checks if a token is a well-formed decimal literal."""
    return NUMBER_PATTERN.match(text) is not None


def looks_numeric(text: str) -> bool:
    """Checks if a token is in number position (starts with a digit or '.')."""
    return bool(text) and (_is_digit(text[0]) or text[0] == ".")


def is_token_sequence(current: str, ch: str) -> bool:
    """
    Decides whether ``ch`` extends the run ``current``.

    Symbols are always exactly one character. A number run only takes
    digits and, while it has none yet, a single decimal point. Any other
    run is an identifier and takes every character that is not a symbol.
    """
    if current == "":
        return True

    if current in SYMBOLS:
        return False

    if is_number(current):
        if _is_digit(ch):
            return True
        return ch == "." and "." not in current

    return ch not in SYMBOLS


class Tokenizer:
    """Tokenizer for formula strings."""

    def __init__(self, source: str, limits: Optional[FormulaLimits] = None):
        self._source = source
        self._limits = limits
        self._tokens: List[str] = []

    def tokenize(self) -> List[str]:
        """Tokenizes the source formula and returns all tokens."""
        check_expression_length(self._source, self._limits)

        current = ""
        for ch in self._source:
            if ch == " ":
                continue
            if is_token_sequence(current, ch):
                current += ch
            else:
                self._tokens.append(current)
                current = ch

        if current:
            self._tokens.append(current)

        check_token_count(len(self._tokens), self._limits)
        return self._tokens


def tokenize(source: str, limits: Optional[FormulaLimits] = None) -> List[str]:
    """
    Tokenizes a formula string into tokens.

    Args:
        source: The formula string to tokenize
        limits: Optional formula limits

    Returns:
        List of non-empty token strings, in source order

    Raises:
        LimitExceededError: If the formula or its token count is too large
    """
    tokenizer = Tokenizer(source, limits)
    return tokenizer.tokenize()


def render_token_context(tokens: Sequence[str], index: int, window: int = 10) -> str:
    """
    Renders the tokens around ``index`` with the token at ``index`` marked.

    Up to ``window`` tokens are shown on each side. An index at or past the
    end of the token list marks the end of input.
    """
    start = max(index - window, 0)
    stop = min(index + window + 1, len(tokens))

    parts = []
    for i in range(start, stop):
        if i == index:
            parts.append(f"‸‸{tokens[i]}‸‸")
        else:
            parts.append(tokens[i])

    if index >= len(tokens):
        parts.append(f"‸‸{END_OF_INPUT}‸‸")

    return "".join(parts)
