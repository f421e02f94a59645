"""
holiday_rules

Answer "which holidays fall on this date in these regions?" from declarative rules.

Definitions are mappings (or YAML files) of the form:

    months:
      11:
        - name: Thanksgiving
          regions: [us]
          week: 4
          wday: 4
      0:
        - name: Good Friday
          regions: [gb, us]
          function: easter(year)
          function_modifier: -2
    methods:
      harvest_day:
        arguments: year

Each rule uses exactly one of `mday`, `week` + `wday` or `function`. Functions are plain
Python callables registered with `Holidays.register_function` (or handed over in the
`methods` body of a mapping); source text found in a definition is never evaluated.

Usage:
    hol = Holidays.default()
    hol.load_file("custom.yaml")
    hol.on("2024-11-28", "us")
"""

from __future__ import annotations

import datetime as dt
from pathlib import Path
from typing import Any, Iterable, List, Optional, Tuple, Union

from .date_universe import DateUniverse
from .errors import HolidayError, InvalidDefinition, ParseError, UnknownArgument, UnknownFunction
from .functions import CustomFunction, FunctionRegistry, default_registry, easter
from .loader import DefinitionLoader, LoadResult
from .mapping import Field, canonicalize, region_id
from .matcher import ANY_REGION, HolidayMatch, Matcher
from .rules import ANY_MONTH, Computed, DateRule, FixedDay, HolidayRule, NthWeekday, parse_arguments
from .store import RuleStore
from .utils import DateLike, _to_date, _to_internal_date

__all__ = [
    "Holidays",
    "HolidayError", "InvalidDefinition", "ParseError", "UnknownArgument", "UnknownFunction",
    "HolidayRule", "DateRule", "FixedDay", "NthWeekday", "Computed", "HolidayMatch",
    "FunctionRegistry", "CustomFunction", "RuleStore", "DefinitionLoader", "Matcher",
    "Field", "canonicalize", "region_id", "easter", "ANY_MONTH", "ANY_REGION",
]


class Holidays:
    """
    Owns one `RuleStore` and one `FunctionRegistry` and exposes loading and queries.

    Two instances never share state unless they are built on the same store/registry.
    `Holidays()` starts empty; `Holidays.default()` also registers the built-in functions.
    """

    def __init__(self,
                 store: Optional[RuleStore] = None,
                 registry: Optional[FunctionRegistry] = None,
                 *,
                 strict: bool = False):
        """
        Parameters
        ----------
        store: RuleStore, optional
            Rule storage to use, a new empty one by default.
        registry: FunctionRegistry, optional
            Function registry to use, a new empty one by default.
        strict: bool, default False
            If True, a rule referencing an unknown function (or an argument that cannot be
            bound) raises at query time instead of being logged and skipped.
        """
        self.store = store if store is not None else RuleStore()
        self.registry = registry if registry is not None else FunctionRegistry()
        self.loader = DefinitionLoader(self.store, self.registry)
        self.matcher = Matcher(self.store, self.registry, strict=strict)

    @classmethod
    def default(cls, *, strict: bool = False) -> "Holidays":
        return cls(registry=default_registry(), strict=strict)

    # =========================
    # Loading
    # =========================
    def load_definitions(self, definition: Any) -> LoadResult:
        return self.loader.load(definition)

    def load_file(self, path: Union[str, Path]) -> LoadResult:
        return self.loader.load_file(path)

    def register_function(self, name: str, parameter_names: Union[str, Iterable[str]], compute) -> CustomFunction:
        """
        Bind a computation to a function name.

        Example:
            hol.register_function("harvest_day", "year", lambda year: dt.date(year, 8, 10))
        """
        if isinstance(parameter_names, str):
            parameter_names = parse_arguments(parameter_names)
        return self.registry.register(name, parameter_names, compute)

    # =========================
    # Queries
    # =========================
    def rules_for_month(self, month: int) -> List[HolidayRule]:
        return self.store.rules_for_month(month)

    def on(self, date: DateLike, *regions: str) -> List[HolidayMatch]:
        """
        Holidays falling on `date` in any of `regions`, in registration order.

        Regions are compared case-insensitively; the region "any" matches every rule,
        and is used when no region is given.
        """
        return self.matcher.on(_to_date(date), _flatten_regions(regions))

    def between(self, start: DateLike, end: DateLike, *regions: str) -> List[Tuple[dt.date, HolidayMatch]]:
        """
        Holidays in [start, end] inclusive, as (date, match) pairs ordered by date.
        """
        universe = DateUniverse(_to_internal_date(start), _to_internal_date(end))
        wanted = _flatten_regions(regions)
        populated = set(self.store.months())
        if ANY_MONTH not in populated and populated.isdisjoint(universe.months()):
            return []
        out = []
        for d in universe:
            if d.month not in populated and ANY_MONTH not in populated:
                continue
            out.extend((d, m) for m in self.matcher.on(d, wanted))
        return out

    def is_holiday(self, date: DateLike, *regions: str) -> bool:
        return bool(self.on(date, *regions))


def _flatten_regions(regions: Tuple[Any, ...]) -> List[str]:
    # on(d, "us", "ca") and on(d, ["us", "ca"]) are equivalent, on(d) means on(d, "any")
    out = []
    for r in regions:
        if isinstance(r, (list, tuple, set, frozenset)):
            out.extend(r)
        else:
            out.append(r)
    return out or [ANY_REGION]
