# Daygrid
# Copyright (C) 2017 Jelmer Vernooĳ <jelmer@jelmer.uk>, et al.
#
# This program is free software; you can redistribute it and/or
# modify it under the terms of the GNU General Public License
# as published by the Free Software Foundation; version 3
# of the License or (at your option) any later version of
# the License.
#
# This program is distributed in the hope that it will be useful,
# but WITHOUT ANY WARRANTY; without even the implied warranty of
# MERCHANTABILITY or FITNESS FOR A PARTICULAR PURPOSE.  See the
# GNU General Public License for more details.
#
# You should have received a copy of the GNU General Public License
# along with this program; if not, write to the Free Software
# Foundation, Inc., 51 Franklin Street, Fifth Floor, Boston,
# MA  02110-1301, USA.

"""Day, span and time-of-day values.

All values are floating (naive) local times; timezone handling is left to
the caller.
"""

import functools
import math
import re
from datetime import date, datetime, time, timedelta
from typing import Optional, Union

import dateutil.parser
from dateutil.relativedelta import relativedelta

DAYS_IN_WEEK = 7

MILLIS_IN_SECOND = 1000
MILLIS_IN_MINUTE = MILLIS_IN_SECOND * 60
MILLIS_IN_HOUR = MILLIS_IN_MINUTE * 60
MILLIS_IN_DAY = MILLIS_IN_HOUR * 24
MILLIS_IN_WEEK = MILLIS_IN_DAY * DAYS_IN_WEEK

# Upper bounds; months and years vary in length.
DURATION_TO_MILLIS = {
    "millisecond": 1,
    "second": MILLIS_IN_SECOND,
    "minute": MILLIS_IN_MINUTE,
    "hour": MILLIS_IN_HOUR,
    "day": MILLIS_IN_DAY,
    "week": MILLIS_IN_WEEK,
    "month": MILLIS_IN_DAY * 31,
    "year": MILLIS_IN_DAY * 366,
}

# Maps a unit onto a relativedelta keyword and a multiplier.
_RELATIVEDELTA_UNITS = {
    "millisecond": ("microseconds", 1000),
    "second": ("seconds", 1),
    "minute": ("minutes", 1),
    "hour": ("hours", 1),
    "day": ("days", 1),
    "week": ("weeks", 1),
    "month": ("months", 1),
    "year": ("years", 1),
}

_TIME_RE = re.compile(r"^(\d{1,2}):(\d{2})(?::(\d{2})(?:\.(\d{1,6}))?)?$")


class InvalidDay(ValueError):
    """A value could not be interpreted as a day."""

    def __init__(self, value) -> None:
        super().__init__(f"Invalid day {value!r}")
        self.value = value


class InvalidTime(ValueError):
    """A value could not be interpreted as a time of day."""

    def __init__(self, value) -> None:
        super().__init__(f"Invalid time {value!r}")
        self.value = value


class InvalidUnit(ValueError):
    """Unknown duration unit."""

    def __init__(self, unit) -> None:
        super().__init__(f"Invalid duration unit {unit!r}")
        self.unit = unit


def normalize_unit(unit: str) -> str:
    """Normalize a duration unit to its singular lower-case name.

    Args:
      unit: Unit name, e.g. "Days" or "minute"
    Returns: singular unit name
    Raises:
      InvalidUnit: if the unit is not known
    """
    if not isinstance(unit, str):
        raise InvalidUnit(unit)
    name = unit.lower()
    if name.endswith("s"):
        name = name[:-1]
    if name not in _RELATIVEDELTA_UNITS:
        raise InvalidUnit(unit)
    return name


def duration_delta(amount, unit: str) -> relativedelta:
    keyword, factor = _RELATIVEDELTA_UNITS[normalize_unit(unit)]
    if keyword in ("months", "years") and amount != int(amount):
        # relativedelta refuses fractional months and years.
        raise InvalidUnit(unit)
    if keyword in ("months", "years"):
        amount = int(amount)
    return relativedelta(**{keyword: amount * factor})


def parse_time(value: Union[time, str, int]) -> time:
    """Parse a time of day.

    Args:
      value: a `datetime.time`, a string like "09:30" or "9:30:15.250",
        or a number of milliseconds since midnight
    Returns: `datetime.time`
    Raises:
      InvalidTime: if the value can not be parsed
    """
    if isinstance(value, time):
        return value
    if isinstance(value, bool):
        raise InvalidTime(value)
    if isinstance(value, int):
        if not 0 <= value < MILLIS_IN_DAY:
            raise InvalidTime(value)
        return millis_to_time(value)
    if isinstance(value, str):
        m = _TIME_RE.match(value.strip())
        if m is None:
            raise InvalidTime(value)
        hour, minute, second, fraction = m.groups()
        microsecond = int((fraction or "0").ljust(6, "0"))
        try:
            return time(int(hour), int(minute), int(second or 0), microsecond)
        except ValueError as exc:
            raise InvalidTime(value) from exc
    raise InvalidTime(value)


def time_to_millis(t: time) -> int:
    return (
        t.hour * MILLIS_IN_HOUR
        + t.minute * MILLIS_IN_MINUTE
        + t.second * MILLIS_IN_SECOND
        + t.microsecond // 1000
    )


def millis_to_time(millis: int) -> time:
    hours, millis = divmod(millis, MILLIS_IN_HOUR)
    minutes, millis = divmod(millis, MILLIS_IN_MINUTE)
    seconds, millis = divmod(millis, MILLIS_IN_SECOND)
    return time(hours, minutes, seconds, millis * 1000)


def format_time(t: time, fmt: Optional[str] = None) -> str:
    """Format a time of day.

    Without an explicit format the shortest of HH:MM and HH:MM:SS that
    loses no information is used.
    """
    if fmt:
        return t.strftime(fmt)
    if t.microsecond:
        return t.strftime("%H:%M:%S.") + "%03d" % (t.microsecond // 1000)
    if t.second:
        return t.strftime("%H:%M:%S")
    return t.strftime("%H:%M")


@functools.total_ordering
class Day(object):
    """A point in (floating) time, with calendar component accessors.

    Component conventions: day_of_week is 0 for Sunday, months are 1-based
    and weeks start on Sunday unless stated otherwise.
    """

    __slots__ = ("dt",)

    def __init__(self, value: Union[datetime, date]) -> None:
        if not isinstance(value, datetime):
            value = datetime.combine(value, time())
        elif value.tzinfo is not None:
            value = value.replace(tzinfo=None)
        self.dt = value

    @classmethod
    def parse(cls, value) -> Optional["Day"]:
        """Interpret a value as a day.

        Args:
          value: None, a Day, datetime, date, ISO 8601 string or a day
            identifier (e.g. 20240131)
        Returns: a Day, or None if value is None
        Raises:
          InvalidDay: if the value can not be interpreted
        """
        if value is None:
            return None
        if isinstance(value, Day):
            return value
        if isinstance(value, (datetime, date)):
            return cls(value)
        if isinstance(value, int) and not isinstance(value, bool):
            return cls.from_day_identifier(value)
        if isinstance(value, str):
            try:
                return cls(dateutil.parser.isoparse(value))
            except ValueError as exc:
                raise InvalidDay(value) from exc
        raise InvalidDay(value)

    @classmethod
    def build(
        cls, year, month, day=1, hour=0, minute=0, second=0, millisecond=0
    ) -> "Day":
        return cls(datetime(year, month, day, hour, minute, second, millisecond * 1000))

    @classmethod
    def today(cls) -> "Day":
        return cls(datetime.now()).start()

    @classmethod
    def from_day_identifier(cls, identifier: int) -> "Day":
        year, rest = divmod(identifier, 10000)
        month, day = divmod(rest, 100)
        try:
            return cls(datetime(year, month, day))
        except ValueError as exc:
            raise InvalidDay(identifier) from exc

    def __eq__(self, other):
        if isinstance(other, Day):
            return self.dt == other.dt
        return NotImplemented

    def __lt__(self, other):
        if isinstance(other, Day):
            return self.dt < other.dt
        return NotImplemented

    def __hash__(self):
        return hash(self.dt)

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.dt.isoformat()!r})"

    def __str__(self) -> str:
        return self.dt.isoformat()

    # Components

    @property
    def year(self) -> int:
        return self.dt.year

    @property
    def month(self) -> int:
        return self.dt.month

    @property
    def day_of_month(self) -> int:
        return self.dt.day

    @property
    def day_of_week(self) -> int:
        return (self.dt.weekday() + 1) % DAYS_IN_WEEK

    @property
    def day_of_year(self) -> int:
        return self.dt.timetuple().tm_yday

    @property
    def day_identifier(self) -> int:
        return self.dt.year * 10000 + self.dt.month * 100 + self.dt.day

    @property
    def week(self) -> int:
        """Sunday based week of the year; week 1 contains January 1st.

        The last days of December can therefore be in week 1 of the next
        year.
        """
        saturday = self.start_of_week().dt + timedelta(days=DAYS_IN_WEEK - 1)
        return (saturday.timetuple().tm_yday - 1) // DAYS_IN_WEEK + 1

    @property
    def week_of_year(self) -> int:
        """ISO 8601 week number."""
        return self.dt.isocalendar()[1]

    @property
    def weekspan_of_year(self) -> int:
        return (self.day_of_year - 1) // DAYS_IN_WEEK

    @property
    def full_week_of_year(self) -> int:
        return (self.day_of_year - 1 - self.day_of_week + DAYS_IN_WEEK) // DAYS_IN_WEEK

    @property
    def week_of_month(self) -> int:
        first_day_of_week = (self.day_of_week - self.day_of_month + 1) % DAYS_IN_WEEK
        return (self.day_of_month - 1 + first_day_of_week) // DAYS_IN_WEEK + 1

    @property
    def weekspan_of_month(self) -> int:
        return (self.day_of_month - 1) // DAYS_IN_WEEK

    @property
    def full_week_of_month(self) -> int:
        return (self.day_of_month - 1 - self.day_of_week + DAYS_IN_WEEK) // DAYS_IN_WEEK

    # Arithmetic

    def next(self) -> "Day":
        return self.relative_days(1)

    def prev(self) -> "Day":
        return self.relative_days(-1)

    def relative(self, millis: int) -> "Day":
        return Day(self.dt + timedelta(milliseconds=millis))

    def relative_days(self, days: int) -> "Day":
        return Day(self.dt + timedelta(days=days))

    def relative_weeks(self, weeks: int) -> "Day":
        return Day(self.dt + timedelta(weeks=weeks))

    def relative_months(self, months: int) -> "Day":
        return Day(self.dt + relativedelta(months=months))

    def relative_years(self, years: int) -> "Day":
        return Day(self.dt + relativedelta(years=years))

    def add(self, amount, unit: str) -> "Day":
        return Day(self.dt + duration_delta(amount, unit))

    def with_time(self, t: time) -> "Day":
        return Day(datetime.combine(self.dt.date(), t))

    def start(self) -> "Day":
        return Day(datetime.combine(self.dt.date(), time()))

    def end(self) -> "Day":
        return Day(datetime.combine(self.dt.date(), time.max))

    def start_of_week(self) -> "Day":
        return self.start().relative_days(-self.day_of_week)

    def end_of_week(self) -> "Day":
        return self.relative_days(DAYS_IN_WEEK - 1 - self.day_of_week).end()

    def start_of_month(self) -> "Day":
        return Day(self.dt.replace(day=1)).start()

    def end_of_month(self) -> "Day":
        return Day(
            self.start_of_month().dt + relativedelta(months=1, days=-1)
        ).end()

    def start_of_year(self) -> "Day":
        return Day(datetime(self.dt.year, 1, 1))

    def end_of_year(self) -> "Day":
        return Day(datetime.combine(date(self.dt.year, 12, 31), time.max))

    # Comparison

    def same_day(self, other: "Day") -> bool:
        return self.dt.date() == other.dt.date()

    def same_week(self, other: "Day") -> bool:
        return self.start_of_week().same_day(other.start_of_week())

    def same_month(self, other: "Day") -> bool:
        return (self.year, self.month) == (other.year, other.month)

    def same_year(self, other: "Day") -> bool:
        return self.year == other.year

    def same_time(self, t: time) -> bool:
        return self.dt.time() == t

    def days_between(self, other: "Day") -> int:
        """Number of calendar days from this day to another (signed)."""
        return (other.dt.date() - self.dt.date()).days


class DaySpan(object):
    """A span of time between two days, both inclusive for containment."""

    __slots__ = ("start", "end")

    def __init__(self, start: Day, end: Day) -> None:
        self.start = start
        self.end = end

    @classmethod
    def point(cls, day: Day) -> "DaySpan":
        return cls(day, day)

    @property
    def is_point(self) -> bool:
        return self.start == self.end

    def __eq__(self, other):
        if isinstance(other, DaySpan):
            return (self.start, self.end) == (other.start, other.end)
        return NotImplemented

    def __hash__(self):
        return hash((self.start, self.end))

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.start!r}, {self.end!r})"

    def contains(self, day: Day) -> bool:
        return self.start <= day <= self.end

    def matches_day(self, day: Day) -> bool:
        return (
            self.contains(day) or day.same_day(self.start) or day.same_day(self.end)
        )

    def matches_week(self, day: Day) -> bool:
        return (
            self.contains(day)
            or day.same_week(self.start)
            or day.same_week(self.end)
        )

    def matches_month(self, day: Day) -> bool:
        return (
            self.contains(day)
            or day.same_month(self.start)
            or day.same_month(self.end)
        )

    def matches_year(self, day: Day) -> bool:
        return (
            self.contains(day)
            or day.same_year(self.start)
            or day.same_year(self.end)
        )

    def days(self, round_up: bool = False) -> int:
        """Length of the span in days.

        Args:
          round_up: Count a partial trailing day as a whole day
        """
        days = (self.end.dt - self.start.dt) / timedelta(days=1)
        return int(math.ceil(days) if round_up else math.floor(days))
