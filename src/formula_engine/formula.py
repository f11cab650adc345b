"""
Formula facade.

Binds the tokenizer, parser, checker and evaluator behind one object a
host application keeps around:

    formula = Formula()
    formula.register_function("MAX", 2, lambda args: max(args))
    result = formula.parse("MAX(x, 2) * (y - 1)")
    if result.success:
        formula.set_variables({"x": 1, "y": 3})
        value = formula.evaluate().value

Fallible operations return result objects instead of raising. A failed
parse discards the previously parsed formula.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any, List, Mapping, Optional, Tuple

from .ast import AstNode, ast_to_string, calculate_ast_depth
from .config import FormulaConfig, normalize_config
from .errors import BindingError, FormulaError, StateError
from .evaluator import EvaluationResult, evaluate
from .functions import FunctionRegistry, NativeFunction
from .limits import DEFAULT_FORMULA_LIMITS, FormulaLimits
from .parser import Parser
from .tokenizer import tokenize
from .variables import Variable, VariableTable

logger = logging.getLogger("formula_engine.formula")


class FormulaState(Enum):
    """Lifecycle state of a Formula."""

    EMPTY = "EMPTY"
    PARSED = "PARSED"
    BOUND = "BOUND"
    EVALUATED = "EVALUATED"


@dataclass
class OpResult:
    """Outcome of a fallible Formula operation."""

    success: bool
    error: Optional[FormulaError] = None

    @property
    def message(self) -> str:
        return self.error.message if self.error else ""

    @property
    def position(self) -> Optional[int]:
        return self.error.position if self.error else None

    @classmethod
    def ok(cls) -> "OpResult":
        return cls(success=True)

    @classmethod
    def fail(cls, error: FormulaError) -> "OpResult":
        return cls(success=False, error=error)


def _is_numeric(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


class Formula:
    """Parses, binds and evaluates one formula at a time."""

    def __init__(self, limits: Optional[FormulaLimits] = None):
        self._limits = limits or DEFAULT_FORMULA_LIMITS
        self._functions = FunctionRegistry()
        self._variables = VariableTable()
        self._tokens: Tuple[str, ...] = ()
        self._root: Optional[AstNode] = None
        self._evaluated = False

    @classmethod
    def from_config(cls, config: FormulaConfig | dict[str, Any] | None) -> "Formula":
        return cls(normalize_config(config).to_limits())

    @property
    def limits(self) -> FormulaLimits:
        return self._limits

    @property
    def root(self) -> Optional[AstNode]:
        return self._root

    @property
    def tokens(self) -> Tuple[str, ...]:
        return self._tokens

    @property
    def state(self) -> FormulaState:
        if self._root is None:
            return FormulaState.EMPTY
        if self._variables.unbound():
            return FormulaState.PARSED
        if self._evaluated:
            return FormulaState.EVALUATED
        return FormulaState.BOUND

    # ============================================================
    # Functions
    # ============================================================

    def register_function(self, name: str, arity: int, impl: NativeFunction) -> None:
        """
        Registers a function, replacing any previous one with the same name.

        No function is available until registered. Registration affects
        subsequent parses only.

        Raises:
            ValueError: If the name, arity or implementation is invalid
        """
        self._functions.register(name, arity, impl)

    def has_function(self, name: str) -> bool:
        return name in self._functions

    # ============================================================
    # Parse / bind / evaluate
    # ============================================================

    def parse(self, text: str) -> OpResult:
        """Parses and checks ``text``, replacing any previous formula."""
        self._variables.clear()
        self._root = None
        self._evaluated = False
        self._tokens = ()

        try:
            self._tokens = tuple(tokenize(text, self._limits))
            parser = Parser(self._tokens, self._functions, self._variables, self._limits)
            root = parser.parse()
        except FormulaError as error:
            self._variables.clear()
            logger.debug(
                "formula_parse_failed",
                extra={
                    "formula": text,
                    "error": error.message,
                    "position": error.position,
                },
            )
            return OpResult.fail(error)

        self._root = root
        logger.debug(
            "formula_parsed",
            extra={
                "formula": text,
                "token_count": len(self._tokens),
                "ast_depth": calculate_ast_depth(root),
                "variables": [v.name for v in self._variables],
            },
        )
        return OpResult.ok()

    def get_variables(self) -> List[Variable]:
        """Returns the free variables of the current formula, in first-use order."""
        return list(self._variables)

    def set_variables(self, values: Optional[Mapping[str, float]] = None) -> OpResult:
        """
        Binds variable values.

        Every name is validated before anything is bound, so a failed call
        leaves all bindings unchanged. Bindings accumulate across calls; the
        call fails if any variable is still unbound afterwards.
        """
        values = values or {}

        for name, value in values.items():
            if name not in self._variables:
                return self._binding_failed(
                    BindingError(f"Unknown variable {name}", name)
                )
            if not _is_numeric(value):
                return self._binding_failed(
                    BindingError(
                        f"Variable {name} requires a numeric value, got {value!r}", name
                    )
                )

        for name, value in values.items():
            self._variables.get_or_create(name).set_value(float(value))
        self._evaluated = False

        unbound = self._variables.unbound()
        if unbound:
            name = unbound[0].name
            return self._binding_failed(
                BindingError(f"Variable {name} not yet assigned", name)
            )

        logger.debug("variables_bound", extra={"variables": dict(values)})
        return OpResult.ok()

    def evaluate(self) -> EvaluationResult:
        """Evaluates the current formula with the bound variable values."""
        if self._root is None:
            error: FormulaError = StateError("No successfully parsed formula")
            return EvaluationResult(value=0.0, success=False, error=error)

        unbound = self._variables.unbound()
        if unbound:
            name = unbound[0].name
            error = BindingError(f"Variable {name} not set", name)
            return EvaluationResult(value=0.0, success=False, error=error)

        result = evaluate(self._root, self._tokens, self._limits.error_context_tokens)
        if result.success:
            self._evaluated = True
            logger.debug("formula_evaluated", extra={"value": result.value})
        return result

    def _binding_failed(self, error: BindingError) -> OpResult:
        logger.debug(
            "variable_binding_failed",
            extra={"variable": error.variable, "error": error.message},
        )
        return OpResult.fail(error)

    # ============================================================
    # Diagnostics
    # ============================================================

    def dump_tokens(self) -> str:
        if not self._tokens:
            return "No tokens"
        return "\n".join(self._tokens)

    def dump_variables(self) -> str:
        if not len(self._variables):
            return "No variables"
        return "\n".join(
            f"name:{v.name}----hasValue:{str(v.has_value).lower()}----value:{v.value}"
            for v in self._variables
        )

    def dump_tree(self) -> str:
        if self._root is None:
            return "No tree"
        return ast_to_string(self._root)
