"""
Abstract Syntax Tree (AST) node types for formulas.

The AST is produced by the parser, validated by the checker and consumed
by the evaluator. Every node owns its children, except variable nodes,
which reference the shared Variable of the parse's variable table.
"""

from abc import ABC
from dataclasses import dataclass
from typing import Literal, Optional, Sequence, Union

from .functions import MathFunction
from .variables import Variable

# ============================================================
# Operator Types
# ============================================================

BinaryOperator = Literal["+", "-", "*", "/"]

BINARY_OPERATORS = ("+", "-", "*", "/")


# ============================================================
# AST Node Types
# ============================================================


@dataclass(frozen=True)
class AstNodeBase(ABC):
    """Base class for all AST nodes."""

    position: Optional[int]
    """Token index in the source formula (for error reporting)."""


@dataclass(frozen=True)
class NumberNode(AstNodeBase):
    """Number literal node."""

    value: float

    @property
    def type(self) -> Literal["Number"]:
        return "Number"


@dataclass(frozen=True)
class VariableNode(AstNodeBase):
    """Variable reference node."""

    variable: Optional[Variable]

    @property
    def type(self) -> Literal["Variable"]:
        return "Variable"


@dataclass(frozen=True)
class BinaryOpNode(AstNodeBase):
    """Binary operator node."""

    operator: BinaryOperator
    left: "AstNode"
    right: "AstNode"

    @property
    def type(self) -> Literal["BinaryOp"]:
        return "BinaryOp"


@dataclass(frozen=True)
class FunctionCallNode(AstNodeBase):
    """Call of a registered function."""

    function: MathFunction
    args: Sequence["AstNode"]

    @property
    def type(self) -> Literal["FunctionCall"]:
        return "FunctionCall"


# Union type for all AST nodes
AstNode = Union[
    NumberNode,
    VariableNode,
    BinaryOpNode,
    FunctionCallNode,
]


# ============================================================
# AST Utilities
# ============================================================


def count_ast_nodes(node: AstNode) -> int:
    """Counts the total number of nodes in an AST."""
    if isinstance(node, BinaryOpNode):
        return 1 + count_ast_nodes(node.left) + count_ast_nodes(node.right)

    if isinstance(node, FunctionCallNode):
        return 1 + sum(count_ast_nodes(arg) for arg in node.args)

    return 1


def calculate_ast_depth(node: AstNode) -> int:
    """Calculates the maximum depth of an AST."""
    if isinstance(node, BinaryOpNode):
        return 1 + max(calculate_ast_depth(node.left), calculate_ast_depth(node.right))

    if isinstance(node, FunctionCallNode):
        max_arg_depth = 0
        for arg in node.args:
            max_arg_depth = max(max_arg_depth, calculate_ast_depth(arg))
        return 1 + max_arg_depth

    return 1


def ast_to_string(node: AstNode, indent: int = 0) -> str:
    """Returns a human-readable representation of an AST node for debugging."""
    prefix = "  " * indent

    if isinstance(node, NumberNode):
        return f"{prefix}Number val={node.value}"

    if isinstance(node, VariableNode):
        variable = node.variable
        if variable is None:
            return f"{prefix}Variable <missing>"
        value = variable.value if variable.has_value else "<unset>"
        return f"{prefix}Variable name={variable.name} val={value}"

    if isinstance(node, BinaryOpNode):
        return (
            f"{prefix}BinaryOp op={node.operator}\n"
            f"{ast_to_string(node.left, indent + 1)}\n"
            f"{ast_to_string(node.right, indent + 1)}"
        )

    if isinstance(node, FunctionCallNode):
        header = (
            f"{prefix}FunctionCall name={node.function.name}, "
            f"arity={node.function.arity}"
        )
        if not node.args:
            return header
        args_str = "\n".join(ast_to_string(a, indent + 1) for a in node.args)
        return f"{header}\n{args_str}"

    return f"{prefix}Unknown: {node}"
