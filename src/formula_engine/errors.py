"""
Error types for the formula engine.

All formula errors extend FormulaError for consistent handling. Positions
are token indexes (not character offsets); binding and state errors that
are not tied to the source text carry no position.
"""

from typing import Optional


class FormulaError(Exception):
    """
    Base error class for all formula-related errors.
    """

    def __init__(
        self,
        message: str,
        position: Optional[int] = None,
        context: Optional[str] = None,
    ):
        super().__init__(message)
        self.message = message
        self.position = position
        self.context = context

    def format_with_context(self) -> str:
        """
        Returns the error message followed by the rendered token window.
        """
        if self.context is None:
            return self.message

        return f"{self.message}\n  {self.context}"


class ParseError(FormulaError):
    """
    Error raised during parsing (unexpected symbol, unexpected end, ...).
    """

    pass


class StructureError(FormulaError):
    """
    Error raised by the structural check of a parsed tree.
    """

    pass


class BindingError(FormulaError):
    """
    Error raised when binding variable values.
    """

    def __init__(self, message: str, variable: Optional[str] = None):
        super().__init__(message)
        self.variable = variable


class StateError(FormulaError):
    """
    Error raised when an operation is not valid in the current state.
    """

    pass


class EvaluationError(FormulaError):
    """
    Error raised during evaluation.
    """

    pass


class FunctionCallError(EvaluationError):
    """
    Error raised when a registered function fails while being called.
    """

    def __init__(
        self,
        function_name: str,
        message: str,
        position: Optional[int] = None,
        context: Optional[str] = None,
    ):
        full_message = f"{function_name}: {message}"
        super().__init__(full_message, position, context)
        self.function_name = function_name


class LimitExceededError(FormulaError):
    """
    Error raised when formula limits are exceeded.
    """

    def __init__(
        self,
        limit_name: str,
        limit: int,
        actual: int,
        position: Optional[int] = None,
    ):
        message = f"Limit exceeded: {limit_name} (limit: {limit}, actual: {actual})"
        super().__init__(message, position)
        self.limit_name = limit_name
        self.limit = limit
        self.actual = actual
