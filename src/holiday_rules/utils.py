import re
import calendar
import numpy as np
import datetime as dt
from typing import Union, Any

PandasTimestamp = Any
DateLike = Union[dt.date, dt.datetime, str, np.datetime64, PandasTimestamp, Any]


_ISO_DATE = re.compile(r"(\d{4})[-/.](\d{1,2})[-/.](\d{1,2})")
_US_DATE = re.compile(r"(\d{1,2})[-/.](\d{1,2})[-/.](\d{4})")


def _parse_date_str(s: str) -> dt.date:
    """
    Parse a query date: "2024-11-28" (year first) or "11/28/2024" (month first).
    """
    s = s.strip()
    m = _ISO_DATE.fullmatch(s)
    if m:
        y, mo, d = (int(g) for g in m.groups())
    else:
        m = _US_DATE.fullmatch(s)
        if not m:
            raise ValueError(f"Invalid date string: {s!r}. Expected 'YYYY-MM-DD' or 'MM/DD/YYYY'.")
        mo, d, y = (int(g) for g in m.groups())
    try:
        return dt.date(y, mo, d)
    except ValueError as e:
        raise ValueError(f"Invalid calendar date parsed from {s!r}: (y={y}, m={mo}, d={d}).") from e


def _to_internal_date(x: DateLike) -> np.datetime64:
    """
    Convert various date-like inputs to np.datetime64[D].

    Supported input types :
        - np.datetime64 (converted to D precision)
        - datetime.date and datetime.datetime (time part ignored)
        - str (parsed with _parse_date_str)
        - pandas.Timestamp (if installed, time part ignored)
    """
    if isinstance(x, np.datetime64):
        return x.astype("datetime64[D]")
    if isinstance(x, dt.datetime):
        return np.datetime64(x.date()).astype("datetime64[D]")
    if isinstance(x, dt.date):
        return np.datetime64(x).astype("datetime64[D]")
    if isinstance(x, str):
        return np.datetime64(_parse_date_str(x)).astype("datetime64[D]")
    if hasattr(x, "to_pydatetime"):
        py = x.to_pydatetime()
        if isinstance(py, dt.datetime):
            return np.datetime64(py.date()).astype("datetime64[D]")
    raise ValueError(f"Unsupported date type: {type(x)}")


def _d64_to_pydate(d64: np.datetime64) -> dt.date:
    """Small helper to convert np.datetime64[D] to datetime.date."""
    s = np.datetime_as_string(d64.astype("datetime64[D]"), unit="D")
    return dt.date.fromisoformat(s)


def _to_date(x: DateLike) -> dt.date:
    """
    Convert any supported date-like input to a plain datetime.date.

    Plain dates are returned as is, everything else goes through np.datetime64[D].
    """
    if isinstance(x, dt.date) and not isinstance(x, dt.datetime):
        return x
    return _d64_to_pydate(_to_internal_date(x))


def _month_length(year: int, month: int) -> int:
    return calendar.monthrange(year, month)[1]
