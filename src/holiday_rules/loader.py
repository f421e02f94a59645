"""
Definition loading.

Turns a raw definition mapping (or a YAML file holding one) into `HolidayRule` records,
registers the functions it declares, and appends the rules to a `RuleStore`.

A load is all-or-nothing: the whole definition is validated and built before anything
is written to the store or the registry.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Callable, Dict, List, Mapping, Optional, Tuple, Union

import yaml

from .errors import InvalidDefinition
from .functions import FunctionRegistry
from .mapping import Field, TOP_LEVEL_FIELDS, canonicalize, key_collisions
from .rules import ANY_MONTH, Computed, DateRule, FixedDay, HolidayRule, NthWeekday, parse_arguments
from .store import RuleStore

logger = logging.getLogger(__name__)

LoadResult = Dict[int, List[HolidayRule]]
_MethodEntry = Tuple[str, Tuple[str, ...], Optional[Callable]]


class DefinitionLoader:

    def __init__(self, store: RuleStore, registry: FunctionRegistry) -> None:
        self.store = store
        self.registry = registry

    def load(self, definition: Any) -> LoadResult:
        """
        Validate, normalize and merge a holiday definition.

        Parameters
        ----------
        definition: Mapping
            {"months": {month: [rule, ...]}, "methods": {name: {"arguments": "year", ...}}}
            with keys written as strings or `Field` members.

        Returns
        -------
        Dict[int, List[HolidayRule]]
            Only the rules built by this call, per month, in definition order.

        Raises
        ------
        InvalidDefinition
            If the definition is missing, is not a mapping, has no recognized top-level
            key, or holds a malformed rule. Nothing is merged in that case.
        ParseError
            If a function expression or argument list cannot be parsed.
        """
        if definition is None:
            raise InvalidDefinition("Holiday definition is missing (got None)")
        if not isinstance(definition, Mapping):
            raise InvalidDefinition(f"Holiday definition must be a mapping, got {type(definition).__name__}")

        collisions = key_collisions(definition)
        if collisions:
            raise InvalidDefinition(
                "Holiday definition repeats fields under different spellings: "
                + ", ".join(f"{field.value!r} in {where}" for where, field in collisions)
            )

        data = canonicalize(definition)
        if not any(f in data for f in TOP_LEVEL_FIELDS):
            raise InvalidDefinition(
                "Holiday definition has no recognized top-level key "
                f"(expected one of: {', '.join(f.value for f in TOP_LEVEL_FIELDS)})"
            )

        methods = self._build_methods(data.get(Field.METHODS))
        result = self._build_months(data.get(Field.MONTHS))

        for name, params, compute in methods:
            if compute is None:
                self.registry.declare(name, params)
            else:
                self.registry.register(name, params, compute)
        for month, rules in result.items():
            self.store.merge(month, rules)
            logger.debug("Merged %d rule(s) into month %d", len(rules), month)

        logger.info(
            "Loaded %d rule(s) across %d month(s) and %d function(s)",
            sum(len(r) for r in result.values()), len(result), len(methods),
        )
        return result

    def load_file(self, path: Union[str, Path]) -> LoadResult:
        """Load a YAML definition file, see `load`."""
        path = Path(path)
        try:
            with open(path, "r", encoding="utf-8") as f:
                definition = yaml.safe_load(f)
        except OSError as e:
            raise InvalidDefinition(f"Cannot read definition file {str(path)!r}: {e}") from e
        except yaml.YAMLError as e:
            raise InvalidDefinition(f"Invalid YAML in definition file {str(path)!r}: {e}") from e
        logger.debug("Read definition file %s", path)
        return self.load(definition)

    # =========================
    # Building
    # =========================
    def _build_months(self, months: Any) -> LoadResult:
        if months is None:
            return {}
        if not isinstance(months, Mapping):
            raise InvalidDefinition(f"'months' must be a mapping of month -> rules, got {type(months).__name__}")

        result: LoadResult = {}
        for raw_month, raw_rules in months.items():
            month = _month_number(raw_month)
            if raw_rules is None:
                continue
            if not isinstance(raw_rules, list):
                raise InvalidDefinition(f"Rules for month {month} must be a list, got {type(raw_rules).__name__}")
            rules = [self._build_rule(month, raw) for raw in raw_rules]
            if rules:
                result.setdefault(month, []).extend(rules)
        return result

    def _build_rule(self, month: int, raw: Any) -> HolidayRule:
        if not isinstance(raw, Mapping):
            raise InvalidDefinition(f"Rule in month {month} must be a mapping, got {type(raw).__name__}")

        name = raw.get(Field.NAME)
        if not isinstance(name, str) or not name.strip():
            raise InvalidDefinition(f"Rule in month {month} is missing a name: {raw!r}")

        regions = raw.get(Field.REGIONS)
        if not isinstance(regions, list) or not regions or not all(isinstance(r, str) and r for r in regions):
            raise InvalidDefinition(f"Holiday {name!r} (month {month}) needs a non-empty list of regions")

        date_rule = _build_date_rule(name, month, raw)
        if month == ANY_MONTH and not isinstance(date_rule, Computed):
            raise InvalidDefinition(f"Holiday {name!r} in month 0 must use a function")
        return HolidayRule(name=name, regions=tuple(dict.fromkeys(regions)), date_rule=date_rule)

    def _build_methods(self, methods: Any) -> List[_MethodEntry]:
        if methods is None:
            return []
        if not isinstance(methods, Mapping):
            raise InvalidDefinition(f"'methods' must be a mapping, got {type(methods).__name__}")

        entries: List[_MethodEntry] = []
        for name, body in methods.items():
            if not isinstance(name, str) or not name.strip():
                raise InvalidDefinition(f"Invalid method name {name!r}")
            if body is None:
                body = {}
            if not isinstance(body, Mapping):
                raise InvalidDefinition(f"Method {name!r} must be a mapping, got {type(body).__name__}")
            params = parse_arguments(body.get(Field.ARGUMENTS, ""))
            computes = [v for k, v in body.items() if k is not Field.ARGUMENTS and callable(v)]
            if len(computes) > 1:
                raise InvalidDefinition(f"Method {name!r} has more than one callable body")
            entries.append((name.strip(), params, computes[0] if computes else None))
        return entries


# =========================
# Helpers
# =========================
def _month_number(raw: Any) -> int:
    if isinstance(raw, str) and raw.strip().isdecimal():
        try:
            raw = int(raw)
        except ValueError as e:
            raise InvalidDefinition(f"Invalid month {raw!r}, expected 1..12 (or 0 for computed dates)") from e
    if isinstance(raw, bool) or not isinstance(raw, int) or not ANY_MONTH <= raw <= 12:
        raise InvalidDefinition(f"Invalid month {raw!r}, expected 1..12 (or 0 for computed dates)")
    return raw


def _build_date_rule(name: str, month: int, raw: Mapping) -> DateRule:
    has_mday = raw.get(Field.MDAY) is not None
    has_week = raw.get(Field.WEEK) is not None
    has_wday = raw.get(Field.WDAY) is not None
    has_function = raw.get(Field.FUNCTION) is not None
    has_modifier = raw.get(Field.FUNCTION_MODIFIER) is not None

    variants = [v for v, present in (("mday", has_mday),
                                     ("week/wday", has_week or has_wday),
                                     ("function", has_function)) if present]
    if not variants:
        raise InvalidDefinition(f"Holiday {name!r} (month {month}) needs one of mday, week/wday or function")
    if len(variants) > 1:
        raise InvalidDefinition(
            f"Holiday {name!r} (month {month}) mixes date rules: {', '.join(variants)}"
        )
    if has_modifier and not has_function:
        raise InvalidDefinition(f"Holiday {name!r} (month {month}) sets function_modifier without a function")

    if has_mday:
        return FixedDay(raw[Field.MDAY])
    if has_week or has_wday:
        if not (has_week and has_wday):
            raise InvalidDefinition(f"Holiday {name!r} (month {month}) needs both week and wday")
        return NthWeekday(raw[Field.WEEK], raw[Field.WDAY])
    return Computed.parse(raw[Field.FUNCTION], modifier=raw.get(Field.FUNCTION_MODIFIER) or 0)
