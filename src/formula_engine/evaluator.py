"""
Formula evaluator.

Walks a checked AST and computes its numeric value. Evaluation never
mutates the tree.

Arithmetic semantics:
- All values are floats.
- Division by zero does not raise: x/0 is +inf or -inf, 0/0 is nan.
- Function arguments are evaluated left to right before the call.
"""

import logging
import math
from dataclasses import dataclass
from typing import Optional, Sequence, cast

from .ast import AstNode, BinaryOpNode, FunctionCallNode, NumberNode, VariableNode
from .errors import BindingError, EvaluationError, FormulaError, FunctionCallError
from .tokenizer import render_token_context

logger = logging.getLogger("formula_engine.evaluator")


@dataclass
class EvaluationResult:
    """Result of formula evaluation."""

    value: float
    """The evaluated value (0.0 when evaluation failed)."""

    success: bool
    """Whether evaluation succeeded."""

    error: Optional[FormulaError] = None
    """The error if evaluation failed."""

    @property
    def message(self) -> str:
        return self.error.message if self.error else ""


def divide(left: float, right: float) -> float:
    """Floating-point division with IEEE results for a zero divisor."""
    if right != 0:
        return left / right
    if left == 0 or math.isnan(left):
        return math.nan
    return math.copysign(math.inf, left) * math.copysign(1.0, right)


class Evaluator:
    """Evaluates an AST node and returns the result."""

    def __init__(self, tokens: Optional[Sequence[str]] = None, window: int = 10):
        self._tokens = tokens
        self._window = window

    def evaluate(self, node: AstNode) -> float:
        """Evaluates an AST node and returns the value."""
        node_type = node.type

        if node_type == "Number":
            return cast(NumberNode, node).value

        if node_type == "Variable":
            return self._evaluate_variable(cast(VariableNode, node))

        if node_type == "BinaryOp":
            n = cast(BinaryOpNode, node)
            return self._evaluate_binary_op(n)

        if node_type == "FunctionCall":
            return self._evaluate_function_call(cast(FunctionCallNode, node))

        raise EvaluationError(f"Unknown node type: {node_type}", node.position)

    def _evaluate_variable(self, node: VariableNode) -> float:
        variable = node.variable
        if variable is None:
            raise EvaluationError("Unknown variable", node.position)
        if not variable.has_value:
            raise BindingError(f"Variable {variable.name} not set", variable.name)
        return cast(float, variable.value)

    def _evaluate_binary_op(self, node: BinaryOpNode) -> float:
        left_value = self.evaluate(node.left)
        right_value = self.evaluate(node.right)

        if node.operator == "+":
            return left_value + right_value
        if node.operator == "-":
            return left_value - right_value
        if node.operator == "*":
            return left_value * right_value
        if node.operator == "/":
            return divide(left_value, right_value)

        raise EvaluationError(
            f"Unsupported operator: {node.operator}", node.position, self._context(node)
        )

    def _evaluate_function_call(self, node: FunctionCallNode) -> float:
        args = [self.evaluate(arg) for arg in node.args]

        try:
            result = node.function.call(args)
        except FormulaError:
            raise
        except Exception as e:
            raise FunctionCallError(
                node.function.name,
                str(e) or type(e).__name__,
                node.position,
                self._context(node),
            ) from e

        if not isinstance(result, (int, float)) or isinstance(result, bool):
            raise FunctionCallError(
                node.function.name,
                f"returned a non-numeric value: {result!r}",
                node.position,
                self._context(node),
            )
        return float(result)

    def _context(self, node: AstNode) -> Optional[str]:
        if self._tokens is None or node.position is None:
            return None
        return render_token_context(self._tokens, node.position, self._window)


def evaluate(
    ast: AstNode, tokens: Optional[Sequence[str]] = None, window: int = 10
) -> EvaluationResult:
    """
    Evaluates an AST and returns the result.

    Args:
        ast: The AST to evaluate; every referenced variable must be bound
        tokens: Optional token list, used to render error context
        window: Tokens of context on each side of the offending token

    Returns:
        The evaluation result with value and success status
    """
    try:
        value = Evaluator(tokens, window).evaluate(ast)
        return EvaluationResult(value=value, success=True)
    except FormulaError as error:
        logger.debug(
            "formula_evaluation_failed",
            extra={"error": error.message, "position": error.position},
        )
        return EvaluationResult(value=0.0, success=False, error=error)
