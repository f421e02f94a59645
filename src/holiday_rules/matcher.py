"""
Date matching.

`Matcher.on` walks the rules of the query date's month in registration order, keeps the
ones sharing a region with the query, and evaluates each rule's date rule against the date.
"""

from __future__ import annotations

import logging
import datetime as dt
from dataclasses import dataclass
from enum import Enum
from typing import Dict, Iterable, List, Optional, Tuple, Union

from .errors import UnknownArgument, UnknownFunction
from .functions import FunctionRegistry
from .mapping import region_id
from .rules import ANY_MONTH, LAST_WEEK, Computed, DateRule, FixedDay, HolidayRule, NthWeekday
from .store import RuleStore
from .utils import _month_length

logger = logging.getLogger(__name__)

ANY_REGION = "any"


@dataclass(frozen=True)
class HolidayMatch:
    name: str
    regions: Tuple[str, ...]

    def as_dict(self) -> Dict[str, object]:
        return {"name": self.name, "regions": list(self.regions)}


def nth_weekday_mday(year: int, month: int, week: int, wday: int) -> Optional[int]:
    """
    Day of month of the `week`-th `wday` (Sunday = 0) in year/month.

    week = -1 is the last occurrence. Returns None when the occurrence falls past the
    end of the month (e.g. a 5th Monday in a month with only four).
    """
    length = _month_length(year, month)
    if week == LAST_WEEK:
        last_wday = (dt.date(year, month, length).weekday() + 1) % 7
        return length - (last_wday - wday) % 7
    first_wday = (dt.date(year, month, 1).weekday() + 1) % 7
    mday = 1 + (wday - first_wday) % 7 + (week - 1) * 7
    return mday if mday <= length else None


class Matcher:
    """
    Evaluate query dates against a `RuleStore`.

    In the default mode a rule whose function cannot be resolved, or whose arguments
    cannot be bound, is logged and treated as a non-match. With strict=True the
    `UnknownFunction` / `UnknownArgument` error propagates instead.
    """

    def __init__(self, store: RuleStore, registry: FunctionRegistry, *, strict: bool = False) -> None:
        self.store = store
        self.registry = registry
        self.strict = strict

    def on(self, date: dt.date, regions: Union[str, Enum, Iterable[str]]) -> List[HolidayMatch]:
        if isinstance(regions, (str, Enum)):
            regions = [regions]
        wanted = {region_id(r) for r in regions}
        candidates = self.store.rules_for_month(date.month) + self.store.rules_for_month(ANY_MONTH)
        matches = []
        for rule in candidates:
            if ANY_REGION not in wanted and wanted.isdisjoint(rule.regions):
                continue
            if self._evaluate(rule, date):
                matches.append(HolidayMatch(rule.name, rule.regions))
        return matches

    def _evaluate(self, rule: HolidayRule, date: dt.date) -> bool:
        date_rule: DateRule = rule.date_rule
        if isinstance(date_rule, FixedDay):
            return date.day == date_rule.mday
        if isinstance(date_rule, NthWeekday):
            return date.day == nth_weekday_mday(date.year, date.month, date_rule.week, date_rule.wday)
        if isinstance(date_rule, Computed):
            try:
                computed = self._compute(date_rule, date)
            except (UnknownFunction, UnknownArgument) as e:
                if self.strict:
                    raise
                logger.warning("Skipping holiday %r: %s", rule.name, e)
                return False
            return computed == date
        raise TypeError(f"Unsupported date rule: {date_rule!r}")

    def _compute(self, date_rule: Computed, date: dt.date) -> dt.date:
        fn = self.registry.resolve(date_rule.function_name)
        context = {"year": date.year}
        args = []
        for name in date_rule.arguments:
            if name not in context:
                raise UnknownArgument(
                    f"Cannot bind argument {name!r} of {date_rule.expression!r} "
                    f"(supported: {', '.join(context)})"
                )
            args.append(context[name])
        result = fn(*args)
        if isinstance(result, dt.datetime):
            result = result.date()
        return result + dt.timedelta(days=date_rule.modifier)
