"""
Free variables of a parsed formula.

A variable is created the first time its name is seen while parsing and
is shared by every node that references it, so binding a value once makes
it visible to the whole tree.
"""

from dataclasses import dataclass
from typing import Dict, Iterator, List, Optional


@dataclass
class Variable:
    """A named free variable with an optional bound value."""

    name: str
    value: Optional[float] = None
    has_value: bool = False

    def set_value(self, value: float) -> None:
        self.value = value
        self.has_value = True


class VariableTable:
    """Ordered set of the variables seen during one parse."""

    def __init__(self) -> None:
        self._variables: Dict[str, Variable] = {}

    def __len__(self) -> int:
        return len(self._variables)

    def __iter__(self) -> Iterator[Variable]:
        return iter(list(self._variables.values()))

    def __contains__(self, name: object) -> bool:
        return name in self._variables

    def get(self, name: str) -> Optional[Variable]:
        return self._variables.get(name)

    def get_or_create(self, name: str) -> Variable:
        """Returns the variable named ``name``, registering it on first use."""
        variable = self._variables.get(name)
        if variable is None:
            variable = Variable(name)
            self._variables[name] = variable
        return variable

    def unbound(self) -> List[Variable]:
        """Returns the variables without a value, in first-use order."""
        return [v for v in self._variables.values() if not v.has_value]

    def clear(self) -> None:
        self._variables.clear()
