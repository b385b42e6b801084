"""
Tests for date buckets
======================
"""

from datetime import date

import pandas as pd
import pytest

from src.gosales.buckets import (
    FISCAL_YEARS,
    QUARTERS_ALL,
    QUARTERS_SELECTED,
    DateBucket,
    calendar_quarters,
    classify_dates,
    to_datetimes,
)


class TestBucketTables:
    """Fixed fiscal-year and quarter tables."""

    def test_fiscal_years(self):
        assert [b.label for b in FISCAL_YEARS] == ['FY_04_05', 'FY_05_06', 'FY_06_07']
        assert FISCAL_YEARS[0].start == date(2004, 7, 1)
        assert FISCAL_YEARS[-1].end == date(2007, 6, 30)

    def test_quarters_all_span(self):
        assert len(QUARTERS_ALL) == 15
        assert QUARTERS_ALL[0] == DateBucket(date(2004, 1, 1), date(2004, 3, 31), '04_Q1')
        assert QUARTERS_ALL[-1] == DateBucket(date(2007, 7, 1), date(2007, 9, 30), '07_Q3')

    def test_quarters_selected_span(self):
        assert len(QUARTERS_SELECTED) == 12
        assert QUARTERS_SELECTED[0].label == '04_Q3'
        assert QUARTERS_SELECTED[-1].label == '07_Q2'
        assert QUARTERS_SELECTED[-1].end == date(2007, 6, 30)

    def test_quarters_are_contiguous(self):
        for prev, nxt in zip(QUARTERS_ALL, QUARTERS_ALL[1:]):
            assert (pd.Timestamp(nxt.start) - pd.Timestamp(prev.end)).days == 1

    def test_leap_year_quarter_end(self):
        q1 = calendar_quarters(2004, 1, 1)[0]
        assert q1.end == date(2004, 3, 31)
        assert calendar_quarters(2004, 4, 2)[1].label == '05_Q1'

    def test_bucket_rejects_reversed_interval(self):
        with pytest.raises(ValueError):
            DateBucket(date(2005, 1, 2), date(2005, 1, 1), 'bad')


class TestClassifyDates:
    """First containing interval wins, else 'other'."""

    @pytest.mark.parametrize('value,expected', [
        ('2004-06-30', 'other'),
        ('2004-07-01', 'FY_04_05'),
        ('2005-06-30', 'FY_04_05'),
        ('2005-07-01', 'FY_05_06'),
        ('2007-06-30', 'FY_06_07'),
        ('2007-07-01', 'other'),
    ])
    def test_fiscal_year_boundaries_inclusive(self, value, expected):
        assert classify_dates(pd.Series([value]), FISCAL_YEARS).tolist() == [expected]

    def test_time_of_day_ignored(self):
        labels = classify_dates(pd.Series(['2005-06-30T23:59:00', '2005-06-30 08:00:00']), FISCAL_YEARS)
        assert labels.tolist() == ['FY_04_05', 'FY_04_05']

    def test_null_and_unparsable_are_other(self):
        labels = classify_dates(pd.Series([None, 'not a date', '2006-08-15']), QUARTERS_ALL)
        assert labels.tolist() == ['other', 'other', '06_Q3']
        assert labels.notna().all()

    def test_accepts_timestamps(self):
        values = pd.Series(pd.to_datetime(['2004-03-31', '2004-04-01']))
        assert classify_dates(values, QUARTERS_ALL).tolist() == ['04_Q1', '04_Q2']

    def test_first_match_wins(self):
        buckets = [
            DateBucket(date(2005, 1, 1), date(2005, 12, 31), 'year'),
            DateBucket(date(2005, 6, 1), date(2005, 6, 30), 'june'),
        ]
        assert classify_dates(pd.Series(['2005-06-15']), buckets).tolist() == ['year']

    def test_custom_default(self):
        assert classify_dates(pd.Series(['1999-01-01']), FISCAL_YEARS, default='n/a').tolist() == ['n/a']

    def test_keeps_index(self):
        values = pd.Series(['2006-08-15', '2003-01-01'], index=[7, 3])
        labels = classify_dates(values, QUARTERS_SELECTED)
        assert labels.index.tolist() == [7, 3]
        assert labels.loc[7] == '06_Q3'

    def test_empty_input(self):
        assert classify_dates(pd.Series([], dtype=object), FISCAL_YEARS).empty

    def test_labels_use_default_string_dtype(self):
        labels = classify_dates(pd.Series(['2006-08-15', None]), FISCAL_YEARS)
        assert labels.dtype == pd.Series(['FY_06_07']).dtype


class TestToDatetimes:
    """Date parsing shared by the buckets and the typed date columns."""

    def test_far_future_sentinel_kept(self):
        out = to_datetimes(pd.Series(['9999-12-31', '2007-01-01', None, 'junk']))
        assert out.dtype == 'datetime64[us]'
        assert out.dt.year.tolist()[:2] == [9999, 2007]
        assert out.iloc[2:].isna().all()

    def test_timezone_aware_keeps_wall_time(self):
        aware = pd.Series(pd.to_datetime(['2006-08-17 10:30:00'])).dt.tz_localize('Europe/Berlin')
        out = to_datetimes(aware)
        assert out.dtype == 'datetime64[us]'
        assert out.iloc[0] == pd.Timestamp('2006-08-17 10:30:00')

    def test_date_objects(self):
        out = to_datetimes(pd.Series([date(2006, 8, 15), date(9999, 12, 31)], dtype=object))
        assert out.dt.year.tolist() == [2006, 9999]

    def test_far_future_falls_outside_buckets(self):
        assert classify_dates(pd.Series(['9999-12-31']), QUARTERS_ALL).tolist() == ['other']
