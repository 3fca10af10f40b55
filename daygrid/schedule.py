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

"""Recurrence schedules.

A schedule combines an optional date range, a set of excluded days, a list
of times of day, an occurrence duration and twelve frequency checks over
calendar components. A day matches when it passes all of them.
"""

import logging
import math
from datetime import time
from typing import Callable, Optional

from .day import (
    DURATION_TO_MILLIS,
    MILLIS_IN_DAY,
    Day,
    DaySpan,
    InvalidDay,
    InvalidTime,
    InvalidUnit,
    duration_delta,
    format_time,
    normalize_unit,
    parse_time,
    time_to_millis,
)
from .frequency import FrequencyCheck, InvalidFrequency, compile_frequency

logger = logging.getLogger(__name__)

FREQUENCY_PROPERTIES = (
    "day_of_week",
    "day_of_month",
    "day_of_year",
    "month",
    "week",
    "week_of_year",
    "weekspan_of_year",
    "full_week_of_year",
    "week_of_month",
    "weekspan_of_month",
    "full_week_of_month",
    "year",
)

SCHEDULE_KEYS = frozenset(
    ("start", "end", "on", "duration", "duration_unit", "exclude", "times")
    + FREQUENCY_PROPERTIES
)

DURATION_DEFAULT = 1
DURATION_DEFAULT_UNIT_ALL_DAY = "days"
DURATION_DEFAULT_UNIT_TIMES = "hours"

DEFAULT_LOOKAHEAD = 366

DayCallback = Callable[[Day], Optional[bool]]


def default_duration_unit(full_day: bool) -> str:
    if full_day:
        return DURATION_DEFAULT_UNIT_ALL_DAY
    return DURATION_DEFAULT_UNIT_TIMES


class InvalidSchedule(ValueError):
    """A schedule definition is malformed."""

    def __init__(self, reason, value=None) -> None:
        super().__init__(reason)
        self.reason = reason
        self.value = value


class Schedule(object):
    """A recurrence definition.

    Attributes:
      start: first day (inclusive) occurrences may start on, or None
      end: day (exclusive) before which occurrences must start, or None
      duration: length of an occurrence, in duration_unit
      duration_unit: unit name, e.g. "minutes" or "days"
      times: sorted list of `datetime.time`; empty for full day schedules
      exclude: set of day identifiers on which no occurrence may start
      duration_in_days: number of days after its start day an occurrence
        can still reach
    """

    start: Optional[Day]
    end: Optional[Day]
    times: list[time]

    def __init__(self, input=None, **kwargs) -> None:
        self.set(input, **kwargs)

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.to_input()!r})"

    def set(self, input=None, **kwargs) -> "Schedule":
        """Redefine this schedule.

        Any key that is not given is reset to its default.

        Args:
          input: mapping with schedule keys (see SCHEDULE_KEYS)
          kwargs: schedule keys, overriding those in input
        Raises:
          InvalidSchedule: if the definition is malformed
        """
        values = dict(input or {})
        values.update(kwargs)
        unknown = set(values) - SCHEDULE_KEYS
        if unknown:
            raise InvalidSchedule(f"Unknown schedule keys: {sorted(unknown)!r}", unknown)

        try:
            on = Day.parse(values.get("on"))
            start = Day.parse(values.get("start"))
            end = Day.parse(values.get("end"))
            exclude = {
                Day.parse(excluded).day_identifier
                for excluded in values.get("exclude") or ()
            }
            times = sorted(parse_time(t) for t in values.get("times") or ())
        except (InvalidDay, InvalidTime) as exc:
            raise InvalidSchedule(str(exc), values) from exc

        if on is not None:
            start = on.start()
            end = on.end()
            values["year"] = [on.year]
            values["month"] = [on.month]
            values["day_of_month"] = [on.day_of_month]

        if start is not None and end is not None and start > end:
            raise InvalidSchedule(f"Start {start} is after end {end}", (start, end))

        duration = values.get("duration")
        if duration is None:
            duration = DURATION_DEFAULT
        if isinstance(duration, bool) or not isinstance(duration, (int, float)):
            raise InvalidSchedule(f"Invalid duration {duration!r}", duration)
        if duration < 0:
            raise InvalidSchedule(f"Negative duration {duration!r}", duration)
        duration_unit = values.get("duration_unit") or default_duration_unit(not times)
        try:
            duration_delta(duration, duration_unit)
        except InvalidUnit as exc:
            raise InvalidSchedule(str(exc), duration_unit) from exc

        checks = {}
        for name in FREQUENCY_PROPERTIES:
            try:
                checks[name] = compile_frequency(values.get(name), name)
            except InvalidFrequency as exc:
                raise InvalidSchedule(f"{name}: {exc}", values.get(name)) from exc

        self.start = start
        self.end = end
        self.duration = duration
        self.duration_unit = duration_unit
        self.times = times
        self.exclude = exclude
        for name, check in checks.items():
            setattr(self, name, check)
        self.update_duration_in_days()
        return self

    @property
    def last_time(self) -> Optional[time]:
        if not self.times:
            return None
        return self.times[-1]

    @property
    def checks(self) -> list[FrequencyCheck]:
        return [getattr(self, name) for name in FREQUENCY_PROPERTIES]

    def update_duration_in_days(self) -> None:
        start = time_to_millis(self.last_time) if self.times else 0
        duration = self.duration * DURATION_TO_MILLIS[normalize_unit(self.duration_unit)]
        self.duration_in_days = max(
            0, int(math.ceil((start + duration - MILLIS_IN_DAY) / MILLIS_IN_DAY))
        )

    def is_full_day(self) -> bool:
        return not self.times

    def matches_span(self, day: Day) -> bool:
        return (self.start is None or day >= self.start) and (
            self.end is None or day < self.end
        )

    def matches_range(self, start: Day, end: Day) -> bool:
        return (self.start is None or start <= self.start) and (
            self.end is None or end < self.end
        )

    def is_excluded(self, day: Day) -> bool:
        return day.day_identifier in self.exclude

    def is_included(self, day: Day) -> bool:
        return day.day_identifier not in self.exclude

    def matches_day(self, day: Day) -> bool:
        """Check whether an occurrence starts on a day."""
        if not self.is_included(day) or not self.matches_span(day):
            return False
        for name in FREQUENCY_PROPERTIES:
            if not getattr(self, name)(getattr(day, name)):
                return False
        return True

    def matches_time(self, day: Day) -> bool:
        if not self.matches_day(day):
            return False
        return any(day.same_time(t) for t in self.times)

    def covers_day(self, day: Day) -> bool:
        """Check whether some occurrence starts on or runs over a day."""
        return self.find_starting_day(day) is not None

    def iterate_days(
        self,
        day: Day,
        max_count: int,
        forward: bool,
        on_day: DayCallback,
        include_day: bool = False,
        lookahead: int = DEFAULT_LOOKAHEAD,
    ) -> None:
        """Walk day by day, calling on_day for each matching day.

        Iteration stops when on_day returns False, when max_count matches
        have been seen or when lookahead days have been visited.

        Args:
          day: Day to start from
          max_count: Maximum number of matches
          forward: Walk into the future rather than the past
          on_day: Callback invoked with each matching day
          include_day: Also test the starting day itself
          lookahead: Maximum number of days to visit
        """
        if max_count <= 0:
            return
        iterated = 0
        for visited in range(lookahead):
            if not include_day or visited > 0:
                day = day.next() if forward else day.prev()
            if self.matches_day(day):
                if on_day(day) is False:
                    return
                iterated += 1
                if iterated >= max_count:
                    return
        logger.debug(
            "Gave up after visiting %d days with %d matches", lookahead, iterated
        )

    def next_day(
        self, day: Day, include_day: bool = False, lookahead: int = DEFAULT_LOOKAHEAD
    ) -> Optional[Day]:
        found = self.next_days(day, 1, include_day, lookahead)
        return found[0] if found else None

    def next_days(
        self,
        day: Day,
        max_count: int,
        include_day: bool = False,
        lookahead: int = DEFAULT_LOOKAHEAD,
    ) -> list[Day]:
        ret: list[Day] = []
        self.iterate_days(day, max_count, True, ret.append, include_day, lookahead)
        return ret

    def prev_day(
        self, day: Day, include_day: bool = False, lookback: int = DEFAULT_LOOKAHEAD
    ) -> Optional[Day]:
        found = self.prev_days(day, 1, include_day, lookback)
        return found[0] if found else None

    def prev_days(
        self,
        day: Day,
        max_count: int,
        include_day: bool = False,
        lookback: int = DEFAULT_LOOKAHEAD,
    ) -> list[Day]:
        ret: list[Day] = []
        self.iterate_days(day, max_count, False, ret.append, include_day, lookback)
        return ret

    def find_starting_day(self, day: Day) -> Optional[Day]:
        """Find the start day of an occurrence that reaches a day.

        Searches backwards at most duration_in_days days, so the nearest
        matching day is returned.

        Returns: the starting Day, or None
        """
        behind = self.duration_in_days
        while behind >= 0:
            if self.matches_day(day):
                return day
            day = day.prev()
            behind -= 1
        return None

    def get_full_span(self, day: Day) -> DaySpan:
        start = day.start()
        return DaySpan(start, start.add(self.duration, self.duration_unit))

    def get_time_span(self, day: Day, t: time) -> DaySpan:
        start = day.with_time(t)
        return DaySpan(start, start.add(self.duration, self.duration_unit))

    def get_spans_over(self, day: Day) -> list[DaySpan]:
        """Spans of the occurrences that start on or run over a day."""
        start = self.find_starting_day(day)
        if start is None:
            return []
        if self.is_full_day():
            return [self.get_full_span(start)]
        spans = []
        for t in self.times:
            span = self.get_time_span(start, t)
            if span.matches_day(start):
                spans.append(span)
        return spans

    def get_span_over(self, day: Day) -> Optional[DaySpan]:
        start = self.find_starting_day(day)
        if start is None:
            return None
        return self.get_full_span(start)

    def get_spans_on(self, day: Day, check: bool = False) -> list[DaySpan]:
        """Spans of the occurrences that start on a day.

        Args:
          day: Day to generate spans for
          check: Return nothing unless the day matches
        """
        if check and not self.matches_day(day):
            return []
        if self.is_full_day():
            return [self.get_full_span(day)]
        return [self.get_time_span(day, t) for t in self.times]

    def get_exclusions(self, return_days: bool = True) -> list:
        identifiers = sorted(self.exclude)
        if return_days:
            return [Day.from_day_identifier(i) for i in identifiers]
        return identifiers

    def to_input(
        self,
        return_days: bool = False,
        return_times: bool = False,
        time_format: Optional[str] = None,
        always_duration: bool = False,
    ) -> dict:
        """Return a definition that `set` accepts.

        Args:
          return_days: Return Day objects rather than datetimes and
            day identifiers
          return_times: Return `datetime.time` objects rather than strings
          time_format: strftime format for times
          always_duration: Include duration even when it is the default
        """
        out: dict = {}
        if self.start is not None:
            out["start"] = self.start if return_days else self.start.dt
        if self.end is not None:
            out["end"] = self.end if return_days else self.end.dt
        for check in self.checks:
            if check.given:
                out[check.property] = check.input.to_input()
        if self.times:
            if return_times:
                out["times"] = list(self.times)
            else:
                out["times"] = [format_time(t, time_format) for t in self.times]
        exclusions = self.get_exclusions(return_days)
        if exclusions:
            out["exclude"] = exclusions
        if always_duration or self.duration != DURATION_DEFAULT:
            out["duration"] = self.duration
        if always_duration or self.duration_unit != default_duration_unit(
            self.is_full_day()
        ):
            out["duration_unit"] = self.duration_unit
        return out
