"""
Resource limits for formula parsing.

These limits bound the work done for a single formula and keep the
recursive-descent parser well clear of the interpreter recursion limit.
"""

from dataclasses import dataclass
from typing import Optional

from .errors import LimitExceededError

# Highest configurable AST depth. The checker and evaluator recurse once or
# twice per level and must stay below the interpreter recursion limit.
MAX_AST_DEPTH_CEILING = 384


@dataclass(frozen=True)
class FormulaLimits:
    """Formula limits configuration."""

    # Maximum formula string length in characters
    max_expression_length: int = 4096

    # Maximum number of tokens
    max_tokens: int = 1024

    # Maximum nesting of parentheses and function calls
    max_nesting_depth: int = 64

    # Maximum AST depth, counting every operator and call level
    max_ast_depth: int = 256

    # Maximum number of AST nodes
    max_ast_nodes: int = 1024

    # Maximum function call arguments
    max_function_args: int = 16

    # Tokens shown on each side of the offending token in error messages
    error_context_tokens: int = 10


# Default formula limits.
DEFAULT_FORMULA_LIMITS = FormulaLimits()


def check_expression_length(
    expression: str, limits: Optional[FormulaLimits] = None
) -> None:
    """Validates that formula length is within limits."""
    limits = limits or DEFAULT_FORMULA_LIMITS
    if len(expression) > limits.max_expression_length:
        raise LimitExceededError(
            "max_expression_length", limits.max_expression_length, len(expression)
        )


def check_token_count(count: int, limits: Optional[FormulaLimits] = None) -> None:
    """Validates the number of tokens produced by the tokenizer."""
    limits = limits or DEFAULT_FORMULA_LIMITS
    if count > limits.max_tokens:
        raise LimitExceededError("max_tokens", limits.max_tokens, count)


def check_nesting_depth(
    depth: int, position: int, limits: Optional[FormulaLimits] = None
) -> None:
    """Validates nesting depth during parsing."""
    limits = limits or DEFAULT_FORMULA_LIMITS
    if depth > limits.max_nesting_depth:
        raise LimitExceededError(
            "max_nesting_depth", limits.max_nesting_depth, depth, position
        )


def check_ast_depth(
    depth: int, position: Optional[int], limits: Optional[FormulaLimits] = None
) -> None:
    """Validates AST depth while nodes are built."""
    limits = limits or DEFAULT_FORMULA_LIMITS
    if depth > limits.max_ast_depth:
        raise LimitExceededError("max_ast_depth", limits.max_ast_depth, depth, position)


def check_ast_node_count(count: int, limits: Optional[FormulaLimits] = None) -> None:
    """Validates AST node count after parsing."""
    limits = limits or DEFAULT_FORMULA_LIMITS
    if count > limits.max_ast_nodes:
        raise LimitExceededError("max_ast_nodes", limits.max_ast_nodes, count)


def check_function_arg_count(
    count: int, position: int, limits: Optional[FormulaLimits] = None
) -> None:
    """Validates function argument count."""
    limits = limits or DEFAULT_FORMULA_LIMITS
    if count > limits.max_function_args:
        raise LimitExceededError(
            "max_function_args", limits.max_function_args, count, position
        )
