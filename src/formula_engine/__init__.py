"""
Embeddable formula engine.

Parses arithmetic formulas over numbers, free variables, + - * /,
parentheses and host-registered functions, then evaluates them once
every variable has been bound.
"""

# Core types and utilities
from .ast import (
    AstNode,
    AstNodeBase,
    BinaryOperator,
    BinaryOpNode,
    FunctionCallNode,
    NumberNode,
    VariableNode,
    ast_to_string,
    calculate_ast_depth,
    count_ast_nodes,
)
from .checker import Checker, check
from .config import FormulaConfig, load_config, normalize_config
from .errors import (
    BindingError,
    EvaluationError,
    FormulaError,
    FunctionCallError,
    LimitExceededError,
    ParseError,
    StateError,
    StructureError,
)

# Evaluator
from .evaluator import (
    EvaluationResult,
    Evaluator,
    evaluate,
)

# Facade
from .formula import Formula, FormulaState, OpResult
from .functions import FunctionRegistry, MathFunction, NativeFunction
from .limits import DEFAULT_FORMULA_LIMITS, FormulaLimits

# Parser
from .parser import (
    ParsedExpression,
    Parser,
    parse,
)

# Tokenizer
from .tokenizer import (
    Tokenizer,
    is_token_sequence,
    render_token_context,
    tokenize,
)
from .variables import Variable, VariableTable

__all__ = [
    # AST types
    "AstNode",
    "AstNodeBase",
    "NumberNode",
    "VariableNode",
    "BinaryOpNode",
    "FunctionCallNode",
    "BinaryOperator",
    "count_ast_nodes",
    "calculate_ast_depth",
    "ast_to_string",
    # Checker
    "Checker",
    "check",
    # Config
    "FormulaConfig",
    "load_config",
    "normalize_config",
    # Errors
    "FormulaError",
    "ParseError",
    "StructureError",
    "BindingError",
    "StateError",
    "EvaluationError",
    "FunctionCallError",
    "LimitExceededError",
    # Evaluator
    "EvaluationResult",
    "Evaluator",
    "evaluate",
    # Facade
    "Formula",
    "FormulaState",
    "OpResult",
    # Functions and variables
    "FunctionRegistry",
    "MathFunction",
    "NativeFunction",
    "Variable",
    "VariableTable",
    # Limits
    "FormulaLimits",
    "DEFAULT_FORMULA_LIMITS",
    # Parser
    "ParsedExpression",
    "Parser",
    "parse",
    # Tokenizer
    "Tokenizer",
    "is_token_sequence",
    "render_token_context",
    "tokenize",
]
