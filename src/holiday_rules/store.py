from typing import Dict, Iterable, List

from .rules import HolidayRule


class RuleStore:
    """
    Month number -> holiday rules, in insertion order.

    The order is the order in which matches are reported. Rules are only ever appended:
    loading the same definition twice stores its rules twice.
    """

    def __init__(self) -> None:
        self._rules: Dict[int, List[HolidayRule]] = {}

    def __len__(self) -> int:
        return sum(len(rules) for rules in self._rules.values())

    def months(self) -> List[int]:
        return sorted(m for m, rules in self._rules.items() if rules)

    def rules_for_month(self, month: int) -> List[HolidayRule]:
        return list(self._rules.get(month, ()))

    def merge(self, month: int, rules: Iterable[HolidayRule]) -> None:
        self._rules.setdefault(month, []).extend(rules)
