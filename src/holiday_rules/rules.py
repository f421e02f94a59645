"""
Holiday rule records.

A rule is a name, a set of regions and exactly one date rule. Date rules are a closed
union of three frozen dataclasses: a rule is either a fixed day of the month, the n-th
(or last) weekday of the month, or the result of a registered function.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Any, Dict, Tuple, Union

from .errors import InvalidDefinition, ParseError

_IDENTIFIER = re.compile(r"[A-Za-z_][A-Za-z0-9_]*\Z")

LAST_WEEK = -1

# Rules stored under month 0 are evaluated for every month (computed dates that can
# land in different months from year to year, like Easter).
ANY_MONTH = 0


@dataclass(frozen=True)
class FixedDay:
    mday: int

    def __post_init__(self):
        if isinstance(self.mday, bool) or not isinstance(self.mday, int) or not 1 <= self.mday <= 31:
            raise InvalidDefinition(f"mday must be an integer in 1..31, got {self.mday!r}")

    def as_dict(self) -> Dict[str, Any]:
        return {"mday": self.mday}


@dataclass(frozen=True)
class NthWeekday:
    """
    The `week`-th occurrence of weekday `wday` in the month.

    week: 1..5, or -1 for the last occurrence.
    wday: 0..6, Sunday = 0.
    """
    week: int
    wday: int

    def __post_init__(self):
        if isinstance(self.week, bool) or not isinstance(self.week, int) or not (1 <= self.week <= 5 or self.week == LAST_WEEK):
            raise InvalidDefinition(f"week must be 1..5 or -1, got {self.week!r}")
        if isinstance(self.wday, bool) or not isinstance(self.wday, int) or not 0 <= self.wday <= 6:
            raise InvalidDefinition(f"wday must be an integer in 0..6, got {self.wday!r}")

    def as_dict(self) -> Dict[str, Any]:
        return {"week": self.week, "wday": self.wday}


@dataclass(frozen=True)
class Computed:
    """
    Date produced by a registered function, shifted by `modifier` days.

    `expression` keeps the call text as written in the definition, `arguments` the parsed
    parameter identifiers in call order.
    """
    function_name: str
    arguments: Tuple[str, ...]
    expression: str = ""
    modifier: int = 0

    def __post_init__(self):
        if not self.expression:
            object.__setattr__(self, "expression", f"{self.function_name}({', '.join(self.arguments)})")
        if isinstance(self.modifier, bool) or not isinstance(self.modifier, int):
            raise InvalidDefinition(f"function_modifier must be an integer, got {self.modifier!r}")

    @classmethod
    def parse(cls, expression: str, modifier: int = 0) -> "Computed":
        name, arguments = parse_call(expression)
        return cls(function_name=name, arguments=arguments, expression=expression.strip(), modifier=modifier)

    def as_dict(self) -> Dict[str, Any]:
        d: Dict[str, Any] = {"function": self.expression, "function_arguments": list(self.arguments)}
        if self.modifier:
            d["function_modifier"] = self.modifier
        return d


DateRule = Union[FixedDay, NthWeekday, Computed]


@dataclass(frozen=True)
class HolidayRule:
    name: str
    regions: Tuple[str, ...]
    date_rule: DateRule

    def __post_init__(self):
        if not isinstance(self.name, str) or not self.name.strip():
            raise InvalidDefinition(f"Holiday name must be a non-empty string, got {self.name!r}")
        if not self.regions:
            raise InvalidDefinition(f"Holiday {self.name!r} has no regions")
        if not isinstance(self.date_rule, (FixedDay, NthWeekday, Computed)):
            raise InvalidDefinition(f"Holiday {self.name!r} has an invalid date rule: {self.date_rule!r}")

    def as_dict(self) -> Dict[str, Any]:
        """Plain mapping in the shape of the definition format (regions as a list)."""
        d = {"name": self.name, "regions": list(self.regions)}
        d.update(self.date_rule.as_dict())
        return d


# =========================
# Call-expression parsing
# =========================
def parse_arguments(text: str) -> Tuple[str, ...]:
    """
    Split a comma-separated parameter list into identifiers.

    "year" -> ("year",), "year, month" -> ("year", "month"), "" -> ().
    """
    if not isinstance(text, str):
        raise ParseError(f"Argument list must be a string, got {text!r}")
    if not text.strip():
        return ()
    tokens = tuple(t.strip() for t in text.split(","))
    for t in tokens:
        if not _IDENTIFIER.match(t):
            raise ParseError(f"Invalid argument name {t!r} in {text!r}")
    return tokens


def parse_call(expression: str) -> Tuple[str, Tuple[str, ...]]:
    """
    Decompose "name(arg1, arg2)" into ("name", ("arg1", "arg2")).

    Raises
    ------
    ParseError
        If the expression is not a single call with identifier arguments.
    """
    if not isinstance(expression, str):
        raise ParseError(f"Function expression must be a string, got {expression!r}")
    s = expression.strip()
    open_at = s.find("(")
    if open_at <= 0 or not s.endswith(")"):
        raise ParseError(f"Cannot parse function call {expression!r}")
    name = s[:open_at].strip()
    inner = s[open_at + 1:-1]
    if not _IDENTIFIER.match(name) or "(" in inner or ")" in inner:
        raise ParseError(f"Cannot parse function call {expression!r}")
    return name, parse_arguments(inner)
