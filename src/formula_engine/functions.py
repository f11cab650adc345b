"""
Registry of host-provided functions.

No function is built in: a formula can only call what the host has
registered. Each function has a fixed arity and a native callable taking
the evaluated arguments in order.
"""

import logging
from dataclasses import dataclass
from typing import Callable, Dict, Iterator, List, Optional, Sequence

from .tokenizer import SYMBOLS, looks_numeric

logger = logging.getLogger("formula_engine.functions")

# Signature of a registered function implementation.
NativeFunction = Callable[[Sequence[float]], float]


@dataclass(frozen=True)
class MathFunction:
    """A named function with a fixed number of arguments."""

    name: str
    arity: int
    impl: NativeFunction

    def call(self, args: Sequence[float]) -> float:
        return self.impl(args)


def _validate_name(name: str) -> None:
    if not isinstance(name, str) or not name:
        raise ValueError("Function name must be a non-empty string")
    if " " in name:
        raise ValueError(f'Function name "{name}" must not contain spaces')
    reserved = sorted(set(name) & SYMBOLS)
    if reserved:
        raise ValueError(
            f'Function name "{name}" must not contain reserved symbols: '
            f"{' '.join(reserved)}"
        )
    if looks_numeric(name):
        raise ValueError(f'Function name "{name}" must not start like a number')


class FunctionRegistry:
    """Mapping from function name to registered function."""

    def __init__(self) -> None:
        self._functions: Dict[str, MathFunction] = {}

    def __len__(self) -> int:
        return len(self._functions)

    def __iter__(self) -> Iterator[MathFunction]:
        return iter(list(self._functions.values()))

    def __contains__(self, name: object) -> bool:
        return name in self._functions

    def register(self, name: str, arity: int, impl: NativeFunction) -> MathFunction:
        """
        Registers a function, replacing any previous one with the same name.

        Raises:
            ValueError: If the name could never be tokenized as a single
                identifier, the arity is negative, or impl is not callable
        """
        _validate_name(name)
        if not isinstance(arity, int) or isinstance(arity, bool) or arity < 0:
            raise ValueError(f"Arity of {name} must be a non-negative integer")
        if not callable(impl):
            raise ValueError(f"Implementation of {name} must be callable")

        replaced = name in self._functions
        function = MathFunction(name=name, arity=arity, impl=impl)
        self._functions[name] = function

        logger.debug(
            "function_registered",
            extra={"function": name, "arity": arity, "replaced": replaced},
        )
        return function

    def get(self, name: str) -> Optional[MathFunction]:
        return self._functions.get(name)

    def names(self) -> List[str]:
        return list(self._functions)
