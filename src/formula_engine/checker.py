"""
Structural check of a parsed formula.

Runs once over a syntactically complete tree before it is accepted:
- number literals must not be NaN
- variable nodes must reference a variable
- binary operators must be one of + - * /
- function calls must pass exactly as many arguments as the function takes

Children are checked left to right and the first failure wins.
"""

import math
from typing import Optional, Sequence, cast

from .ast import (
    BINARY_OPERATORS,
    AstNode,
    BinaryOpNode,
    FunctionCallNode,
    NumberNode,
    VariableNode,
)
from .errors import StructureError
from .tokenizer import render_token_context


class Checker:
    """Validates an AST, raising StructureError on the first defect."""

    def __init__(self, tokens: Optional[Sequence[str]] = None, window: int = 10):
        self._tokens = tokens
        self._window = window

    def check(self, node: AstNode) -> None:
        node_type = node.type

        if node_type == "Number":
            n = cast(NumberNode, node)
            if math.isnan(n.value):
                raise self._error("Number literal is not a number", n.position)
            return

        if node_type == "Variable":
            n = cast(VariableNode, node)
            if n.variable is None:
                raise self._error("Unknown variable", n.position)
            return

        if node_type == "BinaryOp":
            n = cast(BinaryOpNode, node)
            if n.operator not in BINARY_OPERATORS:
                raise self._error(f"Unsupported operator: {n.operator}", n.position)
            self.check(n.left)
            self.check(n.right)
            return

        if node_type == "FunctionCall":
            n = cast(FunctionCallNode, node)
            expected = n.function.arity
            actual = len(n.args)
            if actual != expected:
                raise self._error(
                    f"Function {n.function.name} argument count mismatch: "
                    f"expected {expected}, got {actual}",
                    n.position,
                )
            for arg in n.args:
                self.check(arg)
            return

        raise self._error(f"Unknown node type: {node_type}", node.position)

    def _error(self, message: str, position: Optional[int]) -> StructureError:
        context = None
        if self._tokens is not None and position is not None:
            context = render_token_context(self._tokens, position, self._window)
        return StructureError(message, position, context)


def check(
    ast: AstNode, tokens: Optional[Sequence[str]] = None, window: int = 10
) -> None:
    """
    Structurally validates an AST.

    Args:
        ast: The AST to check
        tokens: Optional token list, used to render error context
        window: Tokens of context on each side of the offending token

    Raises:
        StructureError: On the first structural defect found
    """
    Checker(tokens, window).check(ast)
