"""
Registry of named, year-parameterized date computations.

Definitions only declare that a function exists and which parameters it takes; the
computation itself is a Python callable handed to `FunctionRegistry.register`.
"""

from __future__ import annotations

import logging
import datetime as dt
from dataclasses import dataclass
from typing import Callable, Dict, Iterable, List, Optional, Tuple

from .errors import UnknownFunction

logger = logging.getLogger(__name__)

Compute = Callable[..., dt.date]


@dataclass(frozen=True)
class CustomFunction:
    name: str
    parameter_names: Tuple[str, ...]
    compute: Optional[Compute] = None

    def __call__(self, *args) -> dt.date:
        if self.compute is None:
            raise UnknownFunction(f"Function {self.name!r} is declared but has no computation bound")
        return self.compute(*args)


class FunctionRegistry:
    """Name -> CustomFunction. Registering an existing name overwrites it."""

    def __init__(self) -> None:
        self._functions: Dict[str, CustomFunction] = {}

    def __contains__(self, name: str) -> bool:
        return name in self._functions

    def __len__(self) -> int:
        return len(self._functions)

    def names(self) -> List[str]:
        return list(self._functions)

    def register(self, name: str, parameter_names: Iterable[str], compute: Compute) -> CustomFunction:
        if not callable(compute):
            raise TypeError(f"compute for {name!r} must be callable, got {type(compute).__name__}")
        fn = CustomFunction(name, tuple(parameter_names), compute)
        if name in self._functions:
            logger.debug("Overwriting function %r", name)
        self._functions[name] = fn
        return fn

    def declare(self, name: str, parameter_names: Iterable[str]) -> CustomFunction:
        """
        Record a function's parameter names without supplying a computation.

        An already bound computation is kept, so a definition file can declare functions
        that were registered in code beforehand.
        """
        existing = self._functions.get(name)
        fn = CustomFunction(name, tuple(parameter_names), existing.compute if existing else None)
        self._functions[name] = fn
        return fn

    def resolve(self, name: str) -> CustomFunction:
        fn = self._functions.get(name)
        if fn is None:
            raise UnknownFunction(f"Unknown function {name!r}")
        if fn.compute is None:
            raise UnknownFunction(f"Function {name!r} is declared but has no computation bound")
        return fn


# =========================
# Built-in functions
# =========================
def easter(year: int) -> dt.date:
    """
    Gregorian Easter Sunday (anonymous Gregorian algorithm).

    >>> easter(2024)
    datetime.date(2024, 3, 31)
    """
    a = year % 19
    b, c = divmod(year, 100)
    d, e = divmod(b, 4)
    f = (b + 8) // 25
    g = (b - f + 1) // 3
    h = (19 * a + b - d - g + 15) % 30
    i, k = divmod(c, 4)
    l = (32 + 2 * e + 2 * i - h - k) % 7
    m = (a + 11 * h + 22 * l) // 451
    month, day = divmod(h + l - 7 * m + 114, 31)
    return dt.date(year, month, day + 1)


BUILTIN_FUNCTIONS: Dict[str, Tuple[Tuple[str, ...], Compute]] = {
    "easter": (("year",), easter),
}


def default_registry() -> FunctionRegistry:
    registry = FunctionRegistry()
    for name, (params, compute) in BUILTIN_FUNCTIONS.items():
        registry.register(name, params, compute)
    return registry
