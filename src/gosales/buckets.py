"""
Date buckets: ordered (interval, label) tables evaluated as "first containing interval wins, else default".
Intervals are closed on both ends and compared at day granularity.
"""
from dataclasses import dataclass
from datetime import date

import numpy as np
import pandas as pd

DEFAULT_LABEL = "other"


@dataclass(frozen=True)
class DateBucket:
    start: date
    end: date
    label: str

    def __post_init__(self):
        if self.end < self.start:
            raise ValueError(f"Bucket {self.label!r} ends before it starts: {self.start} > {self.end}")


def calendar_quarters(first_year: int, first_quarter: int, count: int) -> list[DateBucket]:
    """
    Consecutive calendar quarters starting at (first_year, first_quarter), labelled `YY_Qn` (e.g. 06_Q3).
    """
    buckets = []
    for period in pd.period_range(start=pd.Period(year=first_year, quarter=first_quarter, freq="Q"),
                                  periods=count, freq="Q"):
        buckets.append(DateBucket(
            start=period.start_time.date(),
            end=period.end_time.date(),
            label=f"{period.year % 100:02d}_Q{period.quarter}",
        ))
    return buckets


# July 1 - June 30
FISCAL_YEARS = [
    DateBucket(date(2004, 7, 1), date(2005, 6, 30), "FY_04_05"),
    DateBucket(date(2005, 7, 1), date(2006, 6, 30), "FY_05_06"),
    DateBucket(date(2006, 7, 1), date(2007, 6, 30), "FY_06_07"),
]

# 04_Q1 .. 07_Q3
QUARTERS_ALL = calendar_quarters(2004, 1, 15)

# 04_Q3 .. 07_Q2
QUARTERS_SELECTED = calendar_quarters(2004, 3, 12)


def _iso_to_us(value) -> np.datetime64:
    try:
        return np.datetime64(str(value).strip(), "us")
    except ValueError:
        return np.datetime64("NaT", "us")


def to_datetimes(values) -> pd.Series:
    """
    Parse dates, datetimes or ISO-like strings to naive datetime64[us]; unparsable values become NaT.

    Timezone-aware values keep their wall-clock time. Dates beyond the nanosecond range
    (e.g. a 9999-12-31 "never" sentinel) are kept rather than turned into NaT.
    """
    values = pd.Series(values)
    if pd.api.types.is_datetime64_any_dtype(values.dtype):
        parsed = values
    else:
        parsed = pd.to_datetime(values, errors="coerce", format="ISO8601")
    if isinstance(parsed.dtype, pd.DatetimeTZDtype):
        parsed = parsed.dt.tz_localize(None)
    out = parsed.to_numpy(dtype="datetime64[us]", copy=True)
    # nanosecond-resolution parsing coerces out-of-range dates to NaT
    for i in np.flatnonzero(parsed.isna().to_numpy() & values.notna().to_numpy()):
        out[i] = _iso_to_us(values.iloc[i])
    return pd.Series(out, index=values.index)


def to_days(values) -> pd.Series:
    """Midnight of each parsed date; see to_datetimes."""
    return to_datetimes(values).dt.normalize()


def classify_dates(values, buckets: list[DateBucket], default: str = DEFAULT_LABEL) -> pd.Series:
    """
    Label every value with the first bucket containing it, or `default`.

    Args:
        values: Series (or array-like) of dates, datetimes or ISO-like strings.
        buckets (list[DateBucket]): Buckets in priority order.
        default (str): Label for values outside every bucket, including nulls and unparsable strings.

    Returns:
        pd.Series: String labels aligned with `values`, in pandas' default string dtype; never null.
    """
    days = to_days(values)
    conditions = [
        days.between(pd.Timestamp(b.start), pd.Timestamp(b.end), inclusive="both").to_numpy()
        for b in buckets
    ]
    if conditions:
        out = np.select(conditions, [b.label for b in buckets], default=default)
    else:
        out = np.full(len(days), default)
    return pd.Series(out.tolist(), index=days.index)
