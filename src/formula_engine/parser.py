"""
Parser for formulas.

Parses a list of tokens into an Abstract Syntax Tree (AST).
Uses recursive descent parsing with one production per precedence level:

    expression   := term (('+' | '-') term)*
    term         := factor (('*' | '/') factor)*
    factor       := number
                  | '(' expression ')'
                  | functionCall
                  | identifier
                  | ('+' | '-')        (look-ahead only: implicit 0)
    functionCall := name '(' (expression (',' expression)*)? ')'

Binary operators are left-associative: each loop folds the node built so
far into the left child of the next operator node. A leading sign is read
as an implicit zero, so ``-x`` parses as ``0 - x``.

Every production leaves the cursor on the first token it did not consume.
"""

import math
from dataclasses import dataclass
from typing import Dict, List, Optional, Sequence, Tuple, cast

from .ast import (
    AstNode,
    BinaryOperator,
    BinaryOpNode,
    FunctionCallNode,
    NumberNode,
    VariableNode,
    count_ast_nodes,
)
from .checker import check
from .errors import FormulaError, ParseError
from .functions import FunctionRegistry
from .limits import (
    DEFAULT_FORMULA_LIMITS,
    FormulaLimits,
    check_ast_depth,
    check_ast_node_count,
    check_function_arg_count,
    check_nesting_depth,
)
from .tokenizer import is_number, looks_numeric, render_token_context, tokenize
from .variables import VariableTable


@dataclass
class ParsedExpression:
    """A successfully parsed and checked formula."""

    root: AstNode
    variables: VariableTable
    tokens: Tuple[str, ...]


class Parser:
    """Parser for formula token lists."""

    def __init__(
        self,
        tokens: Sequence[str],
        functions: Optional[FunctionRegistry] = None,
        variables: Optional[VariableTable] = None,
        limits: FormulaLimits = DEFAULT_FORMULA_LIMITS,
    ):
        self._tokens = list(tokens)
        self._functions = functions if functions is not None else FunctionRegistry()
        self._variables = variables if variables is not None else VariableTable()
        self._limits = limits
        self._current = 0
        self._depth = 0
        self._node_depths: Dict[int, int] = {}

    @property
    def variables(self) -> VariableTable:
        return self._variables

    def parse(self) -> AstNode:
        """
        Parses the token list into a checked AST.

        Raises:
            ParseError: On a syntax error or unparsed trailing tokens
            StructureError: If the tree fails the structural check
            LimitExceededError: If the formula is too deeply nested or large
        """
        try:
            ast = self._parse_expression()

            check(ast, self._tokens, self._limits.error_context_tokens)

            if not self._is_at_end():
                raise self._error("Unparsed trailing symbols")

            check_ast_node_count(count_ast_nodes(ast), self._limits)
        except FormulaError as error:
            if error.context is None and error.position is not None:
                error.context = self._render(error.position)
            raise

        return ast

    # ============================================================
    # Token Helpers
    # ============================================================

    def _is_at_end(self) -> bool:
        return self._current >= len(self._tokens)

    def _peek(self) -> Optional[str]:
        if self._is_at_end():
            return None
        return self._tokens[self._current]

    def _advance(self) -> Optional[str]:
        token = self._peek()
        if not self._is_at_end():
            self._current += 1
        return token

    def _check(self, *values: str) -> bool:
        return self._peek() in values

    def _consume(self, value: str, message: str) -> str:
        if self._check(value):
            self._advance()
            return value
        raise self._error(message)

    def _render(self, position: int) -> str:
        return render_token_context(
            self._tokens, position, self._limits.error_context_tokens
        )

    def _error(self, message: str, position: Optional[int] = None) -> ParseError:
        if position is None:
            position = self._current
        return ParseError(message, position, self._render(position))

    # ============================================================
    # Tree Depth
    # ============================================================

    def _depth_of(self, node: AstNode) -> int:
        # Leaves are never tracked
        return self._node_depths.get(id(node), 1)

    def _track(self, node: AstNode, depth: int) -> AstNode:
        check_ast_depth(depth, node.position, self._limits)
        self._node_depths[id(node)] = depth
        return node

    def _fold(
        self,
        position: int,
        operator: BinaryOperator,
        left: AstNode,
        right: AstNode,
    ) -> AstNode:
        node = BinaryOpNode(
            position=position,
            operator=operator,
            left=left,
            right=right,
        )
        depth = 1 + max(self._depth_of(left), self._depth_of(right))
        return self._track(node, depth)

    # ============================================================
    # Productions (by precedence, lowest to highest)
    # ============================================================

    def _parse_expression(self) -> AstNode:
        """Parses additive: +, -"""
        self._depth += 1
        check_nesting_depth(self._depth, self._current, self._limits)

        node = self._parse_term()

        while self._check("+", "-"):
            position = self._current
            operator = cast(BinaryOperator, self._advance())
            right = self._parse_term()
            node = self._fold(position, operator, node, right)

        if not self._is_at_end() and not self._check(")", ","):
            raise self._error(f"Unexpected symbol in expression: {self._peek()}")

        self._depth -= 1
        return node

    def _parse_term(self) -> AstNode:
        """Parses multiplicative: *, /"""
        node = self._parse_factor()

        while self._check("*", "/"):
            position = self._current
            operator = cast(BinaryOperator, self._advance())
            right = self._parse_factor()
            node = self._fold(position, operator, node, right)

        if not self._is_at_end() and not self._check(")", ",", "+", "-"):
            raise self._error(f"Unexpected symbol in term: {self._peek()}")

        return node

    def _parse_factor(self) -> AstNode:
        """Parses numbers, groups, function calls, variables and signs."""
        token = self._peek()
        position = self._current

        if token is None:
            raise self._error("Unexpected end of input")

        if token in (",", "*", "/", ")"):
            raise self._error(f"Unexpected symbol in factor: {token}")

        # A sign in operand position stands for an implicit leading zero
        if token in ("+", "-"):
            return NumberNode(position=position, value=0.0)

        if looks_numeric(token):
            self._advance()
            value = float(token) if is_number(token) else math.nan
            return NumberNode(position=position, value=value)

        if token in self._functions:
            return self._parse_function_call()

        if token == "(":
            self._advance()
            node = self._parse_expression()
            self._consume(")", "Expected ')' to close parenthesis")
            return node

        self._advance()
        variable = self._variables.get_or_create(token)
        return VariableNode(position=position, variable=variable)

    def _parse_function_call(self) -> AstNode:
        """Parses name '(' arguments ')' for a registered function."""
        position = self._current
        name = self._advance()
        function = self._functions.get(name) if name is not None else None
        if function is None:
            raise self._error(f"Unsupported function: {name}", position)

        self._consume("(", f"Expected '(' after function {name}")

        args: List[AstNode] = []
        if not self._check(")"):
            while True:
                args.append(self._parse_expression())
                if not self._check(","):
                    break
                self._advance()

        self._consume(")", f"Expected ')' to close arguments of function {name}")
        check_function_arg_count(len(args), position, self._limits)

        node = FunctionCallNode(position=position, function=function, args=tuple(args))
        depth = 1 + max((self._depth_of(arg) for arg in args), default=0)
        return self._track(node, depth)


def parse(
    source: str,
    functions: Optional[FunctionRegistry] = None,
    limits: FormulaLimits = DEFAULT_FORMULA_LIMITS,
) -> ParsedExpression:
    """
    Parses and checks a formula string.

    Args:
        source: The formula string to parse
        functions: Registered functions callable from the formula
        limits: Optional formula limits

    Returns:
        The parsed expression with its free variables

    Raises:
        LimitExceededError: If the formula exceeds a limit
        ParseError: If parsing fails
        StructureError: If the parsed tree is malformed
    """
    tokens = tokenize(source, limits)
    parser = Parser(tokens, functions, limits=limits)
    root = parser.parse()
    return ParsedExpression(root=root, variables=parser.variables, tokens=tuple(tokens))
