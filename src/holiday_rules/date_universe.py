import numpy as np
import datetime as dt
from typing import Dict, Iterator, Tuple
from dataclasses import dataclass, field


@dataclass()
class DateUniverse:
    """
    Contiguous days between start and end (inclusive), used by range queries:
        1. Non-lazy fields (built at init):
            - Start and end date : np.datetime64
            - Contiguous days : np.ndarray
        2. Lazy fields (built on demand and cached):
            - Year : np.ndarray
            - Month (1 to 12) : np.ndarray
            - Day of month (1 to 31) : np.ndarray

    All dates are stored as np.datetime64[D]; the inputs are expected to be converted already.
    """
    start: np.datetime64
    end: np.datetime64

    days: np.ndarray = field(init=False)
    _cache: Dict[str, np.ndarray] = field(default_factory=dict, init=False, repr=False)

    def __post_init__(self) -> None:
        self.start64 = np.datetime64(self.start, "D")
        self.end64 = np.datetime64(self.end, "D")
        if self.end64 < self.start64:
            raise ValueError(f"End date {self.end64} is before start date {self.start64}")

        n_days = int((self.end64 - self.start64) / np.timedelta64(1, "D")) + 1
        self.days = self.start64 + np.arange(n_days, dtype="int64").astype("timedelta64[D]")

    def __len__(self) -> int:
        return int(self.days.shape[0])

    def __iter__(self) -> Iterator[dt.date]:
        for y, m, d in zip(self.year.tolist(), self.month.tolist(), self.mday.tolist()):
            yield dt.date(y, m, d)

    @property
    def year(self) -> np.ndarray:
        key = "year"
        if key not in self._cache:
            y = self.days.astype("datetime64[Y]").astype("int64") + 1970
            self._cache[key] = y.astype("int32")
        return self._cache[key]

    @property
    def month(self) -> np.ndarray:
        key = "month"
        if key not in self._cache:
            months = self.days.astype("datetime64[M]")
            years_as_months = self.days.astype("datetime64[Y]").astype("datetime64[M]")
            m = (months - years_as_months).astype("int64") + 1
            self._cache[key] = m.astype("uint8")
        return self._cache[key]

    @property
    def mday(self) -> np.ndarray:
        key = "mday"
        if key not in self._cache:
            d = (self.days - self.days.astype("datetime64[M]")).astype("int64") + 1
            self._cache[key] = d.astype("uint8")
        return self._cache[key]

    def months(self) -> Tuple[int, ...]:
        """Distinct month numbers present in the universe."""
        return tuple(int(m) for m in np.unique(self.month))
