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

"""Calendar grids.

A `Calendar` covers a range of days and keeps one `CalendarDay` cell per
day. Each cell carries the `CalendarEvent` occurrences of the registered
schedules on that day.

Cells are kept in a list indexed by grid position. When the grid is
rebuilt, a cell is replaced only if the date at its position changed: same
position and same date means the same cell object.
"""

import logging
import math
from collections.abc import Iterator, Mapping
from typing import Callable, Generic, Optional, TypeVar

from .day import Day, DaySpan
from .schedule import Schedule

logger = logging.getLogger(__name__)

T = TypeVar("T")

# Event ids are schedule_index * MAX_EVENTS_PER_DAY + time index. A schedule
# with more times than this produces colliding ids.
MAX_EVENTS_PER_DAY = 24

UNIT_DAY = "day"
UNIT_WEEK = "week"
UNIT_MONTH = "month"
UNIT_YEAR = "year"

DEFAULT_FOCUS = 0.4999

OPTION_NAMES = (
    "fill",
    "minimum_size",
    "repeat_covers",
    "list_times",
    "events_outside",
)

CalendarMover = Callable[[Day, int], Day]


class CalendarDay(Generic[T]):
    """A single cell of a calendar grid."""

    def __init__(self, day: Day) -> None:
        self.day = day
        self.is_current_day = False
        self.is_current_week = False
        self.is_current_month = False
        self.is_current_year = False
        self.current_offset = 0
        self.is_selected_day = False
        self.is_selected_week = False
        self.is_selected_month = False
        self.is_selected_year = False
        self.is_in_range = False
        self.events: list[CalendarEvent[T]] = []

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.day!r})"

    def update_current(self, current: Day) -> None:
        self.is_current_day = self.day.same_day(current)
        self.is_current_week = self.day.same_week(current)
        self.is_current_month = self.day.same_month(current)
        self.is_current_year = self.day.same_year(current)
        self.current_offset = current.days_between(self.day)

    def update_selected(self, selected: DaySpan) -> None:
        self.is_selected_day = selected.matches_day(self.day)
        self.is_selected_week = selected.matches_week(self.day)
        self.is_selected_month = selected.matches_month(self.day)
        self.is_selected_year = selected.matches_year(self.day)

    def clear_selected(self) -> None:
        self.is_selected_day = False
        self.is_selected_week = False
        self.is_selected_month = False
        self.is_selected_year = False


class CalendarEvent(Generic[T]):
    """An occurrence of a schedule, as seen from one calendar cell.

    Attributes:
      id: schedule_index * MAX_EVENTS_PER_DAY + index of the occurrence
      payload: value registered with the schedule
      schedule: the Schedule that generated this occurrence
      time_span: DaySpan of the occurrence
      is_full_day: whether the schedule has no times
      is_start_day: whether the occurrence starts on the cell's day
      is_end_day: whether the occurrence ends on the cell's day
      row, col: layout slots for rendering code
    """

    def __init__(
        self, id: int, payload: T, schedule: Schedule, time_span: DaySpan, actual_day: Day
    ) -> None:
        self.id = id
        self.payload = payload
        self.schedule = schedule
        self.time_span = time_span
        self.is_full_day = schedule.is_full_day()
        # The end is exclusive, so step back a moment to find the last day.
        self.is_start_day = time_span.is_point or time_span.start.same_day(actual_day)
        self.is_end_day = time_span.is_point or time_span.end.relative(-1).same_day(
            actual_day
        )
        self.row = 0
        self.col = 0

    def __repr__(self) -> str:
        return "{}({!r}, {!r}, {!r})".format(
            type(self).__name__, self.id, self.payload, self.time_span
        )

    @property
    def schedule_id(self) -> int:
        return self.id // MAX_EVENTS_PER_DAY


class CalendarSchedule(Generic[T]):
    """A schedule registered with a calendar, with its payload."""

    def __init__(self, schedule: Schedule, payload: T) -> None:
        self.schedule = schedule
        self.payload = payload

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.schedule!r}, {self.payload!r})"


def parse_calendar_schedule(input) -> CalendarSchedule:
    """Interpret a schedule registration.

    Args:
      input: a CalendarSchedule, a (schedule, payload) tuple or a mapping
        with "schedule" and "payload" keys; the schedule can be a Schedule
        or a schedule definition
    Returns: CalendarSchedule
    """
    if isinstance(input, CalendarSchedule):
        return input
    if isinstance(input, Mapping):
        schedule, payload = input["schedule"], input.get("payload")
    else:
        schedule, payload = input
    if not isinstance(schedule, Schedule):
        schedule = Schedule(schedule)
    return CalendarSchedule(schedule, payload)


def _move_days(day: Day, amount: int) -> Day:
    return day.relative_days(amount)


def _move_weeks(day: Day, amount: int) -> Day:
    return day.relative_weeks(amount)


def _move_months(day: Day, amount: int) -> Day:
    return day.relative_months(amount)


def _move_month_end(day: Day, amount: int) -> Day:
    return day.start_of_month().relative_months(amount).end_of_month()


def _move_years(day: Day, amount: int) -> Day:
    return day.relative_years(amount)


class Calendar(Generic[T]):
    """A grid of days between two days, with events from schedules.

    Attributes:
      span: the nominal DaySpan of the calendar
      filled: span of the grid, padded to whole weeks when fill is set
      type: unit of the calendar (UNIT_DAY, UNIT_WEEK, ...)
      size: number of units the calendar covers
      cells: list of CalendarDay, one per grid position
      schedules: list of CalendarSchedule, in registration order
      selection: selected DaySpan, or None
    """

    def __init__(
        self,
        start: Day,
        end: Day,
        type: str,
        size: int,
        move_start: CalendarMover,
        move_end: CalendarMover,
        input: Optional[Mapping] = None,
        today: Optional[Day] = None,
    ) -> None:
        self.span = DaySpan(start, end)
        self.filled = DaySpan(start, end)
        self.type = type
        self.size = size
        self.move_start = move_start
        self.move_end = move_end
        self.length = 0

        self.fill = False
        self.minimum_size = 0
        self.repeat_covers = True
        self.list_times = False
        self.events_outside = False

        self.selection: Optional[DaySpan] = None
        self.cells: list[CalendarDay[T]] = []
        self.schedules: list[CalendarSchedule[T]] = []

        if input is not None:
            self.with_input(input, refresh=False)

        self.refresh(today)

    def __repr__(self) -> str:
        return "{}({!r}, {!r}, {!r}, {!r})".format(
            type(self).__name__, self.start, self.end, self.type, self.size
        )

    def __iter__(self) -> Iterator[CalendarDay[T]]:
        return iter(self.cells)

    def __len__(self) -> int:
        return len(self.cells)

    @property
    def start(self) -> Day:
        return self.span.start

    @start.setter
    def start(self, day: Day) -> None:
        self.span.start = day

    @property
    def end(self) -> Day:
        return self.span.end

    @end.setter
    def end(self, day: Day) -> None:
        self.span.end = day

    def to_input(self) -> dict:
        """Return options and schedules, as accepted by `with_input`."""
        out = {name: getattr(self, name) for name in OPTION_NAMES}
        out["schedules"] = list(self.schedules)
        return out

    def with_input(self, input: Mapping, refresh: bool = True) -> "Calendar[T]":
        """Apply options and, if given, replace the registered schedules.

        Args:
          input: mapping with keys from OPTION_NAMES and "schedules";
            missing or None values leave the current setting alone
          refresh: Rebuild the grid afterwards
        """
        for name in OPTION_NAMES:
            value = input.get(name)
            if value is not None:
                setattr(self, name, value)
        schedules = input.get("schedules")
        if schedules is not None:
            self.remove_schedules(delay_refresh=True)
            self.add_schedules(schedules, delay_refresh=True)
        if refresh:
            self.refresh()
        return self

    def with_minimum_size(self, minimum_size: int) -> "Calendar[T]":
        self.minimum_size = minimum_size
        self.refresh()
        return self

    def with_repeat_covers(self, repeat_covers: bool) -> "Calendar[T]":
        self.repeat_covers = repeat_covers
        self.refresh_events()
        return self

    def with_list_times(self, list_times: bool) -> "Calendar[T]":
        self.list_times = list_times
        self.refresh_events()
        return self

    def with_events_outside(self, events_outside: bool) -> "Calendar[T]":
        self.events_outside = events_outside
        self.refresh_events()
        return self

    def split(self, by: int = 1, today: Optional[Day] = None) -> list["Calendar[T]"]:
        """Split into calendars of `by` units each.

        The new calendars share this calendar's options and schedules.
        """
        ret = []
        start = self.start
        end = self.move_end(self.end, by - self.size)
        for i in range(self.size // by):
            ret.append(
                Calendar(
                    start,
                    end,
                    self.type,
                    by,
                    self.move_start,
                    self.move_end,
                    self.to_input(),
                    today,
                )
            )
            start = self.move_start(start, by)
            end = self.move_end(end, by)
        return ret

    def refresh(self, today: Optional[Day] = None) -> "Calendar[T]":
        """Rebuild the grid and all of its cell state.

        Args:
          today: Reference day for the "current" flags; defaults to today
        """
        if today is None:
            today = Day.today()
        self.length = self.span.days(round_up=True)
        self.reset_days()
        self.refresh_current(today)
        self.refresh_selection()
        self.refresh_events()
        logger.debug("Refreshed %r: %d cells", self, len(self.cells))
        return self

    def reset_filled(self) -> None:
        if self.fill:
            self.filled.start = self.start.start_of_week()
            self.filled.end = self.end.end_of_week()
        else:
            self.filled.start = self.start
            self.filled.end = self.end

    def reset_days(self) -> None:
        """Reconcile the cells with the filled span.

        A cell is reused when the date at its position is unchanged.
        """
        self.reset_filled()

        cells = self.cells
        current = self.filled.start
        total = max(self.minimum_size, self.filled.days(round_up=True))

        for i in range(total):
            if i < len(cells) and cells[i].day.same_day(current):
                cell = cells[i]
            else:
                cell = CalendarDay(current.start())
                if i < len(cells):
                    cells[i] = cell
                else:
                    cells.append(cell)
            cell.is_in_range = self.span.contains(cell.day)
            current = current.next()

        del cells[total:]

    def refresh_current(self, today: Optional[Day] = None) -> "Calendar[T]":
        if today is None:
            today = Day.today()
        for cell in self.cells:
            cell.update_current(today)
        return self

    def refresh_selection(self) -> "Calendar[T]":
        for cell in self.cells:
            if self.selection is not None:
                cell.update_selected(self.selection)
            else:
                cell.clear_selected()
        return self

    def refresh_events(self) -> "Calendar[T]":
        for cell in self.cells:
            if cell.is_in_range or self.events_outside:
                cell.events = self.events_for_day(
                    cell.day, self.list_times, self.repeat_covers
                )
            else:
                cell.events = []
        return self

    def events_for_day(
        self, day: Day, get_times: bool = True, covers: bool = True
    ) -> list[CalendarEvent[T]]:
        """Materialize the occurrences of all schedules on a day.

        Args:
          day: Day to look at
          get_times: Produce one event per time of day, rather than one
            event per schedule
          covers: Include occurrences that started on an earlier day
        Returns: list of CalendarEvent, in registration order
        """
        events = []
        for index, entry in enumerate(self.schedules):
            schedule = entry.schedule
            event_id = index * MAX_EVENTS_PER_DAY

            if covers:
                if not schedule.covers_day(day):
                    continue
            elif not schedule.matches_day(day):
                continue

            if get_times:
                if covers:
                    spans = schedule.get_spans_over(day)
                else:
                    spans = schedule.get_spans_on(day)
                for time_index, span in enumerate(spans):
                    events.append(
                        CalendarEvent(
                            event_id + time_index, entry.payload, schedule, span, day
                        )
                    )
            else:
                over = schedule.get_span_over(day)
                if over is not None:
                    events.append(
                        CalendarEvent(event_id, entry.payload, schedule, over, day)
                    )
        return events

    def find_schedule(self, input) -> Optional[CalendarSchedule[T]]:
        """Find a registration by identity of itself, its schedule or payload."""
        for entry in self.schedules:
            if entry is input or entry.schedule is input or entry.payload is input:
                return entry
        return None

    def remove_schedules(
        self, schedules=None, delay_refresh: bool = False
    ) -> "Calendar[T]":
        """Remove registrations, or all of them if schedules is None."""
        if schedules is not None:
            for schedule in schedules:
                self.remove_schedule(schedule, delay_refresh=True)
        else:
            self.schedules = []
        if not delay_refresh:
            self.refresh_events()
        return self

    def remove_schedule(self, schedule, delay_refresh: bool = False) -> "Calendar[T]":
        found = self.find_schedule(schedule)
        if found is not None:
            self.schedules.remove(found)
            logger.debug("Removed %r", found)
            if not delay_refresh:
                self.refresh_events()
        return self

    def add_schedule(
        self, schedule, allow_duplicates: bool = False, delay_refresh: bool = False
    ) -> "Calendar[T]":
        """Register a schedule.

        Args:
          schedule: anything parse_calendar_schedule accepts
          allow_duplicates: Register even if the same registration, or the
            same schedule with the same payload, is already present
          delay_refresh: Leave refreshing the events to the caller
        """
        parsed = parse_calendar_schedule(schedule)
        if not allow_duplicates and self._is_registered(parsed):
            logger.debug("Ignoring duplicate registration %r", parsed)
            return self
        self.schedules.append(parsed)
        if not delay_refresh:
            self.refresh_events()
        return self

    def add_schedules(
        self, schedules, allow_duplicates: bool = False, delay_refresh: bool = False
    ) -> "Calendar[T]":
        for schedule in schedules:
            self.add_schedule(schedule, allow_duplicates, delay_refresh=True)
        if not delay_refresh:
            self.refresh_events()
        return self

    def _is_registered(self, parsed: CalendarSchedule) -> bool:
        for entry in self.schedules:
            if entry is parsed or (
                entry.schedule is parsed.schedule and entry.payload is parsed.payload
            ):
                return True
        return False

    def select(self, start: Day, end: Optional[Day] = None) -> "Calendar[T]":
        if end is not None:
            self.selection = DaySpan(start, end)
        else:
            self.selection = DaySpan.point(start)
        self.refresh_selection()
        return self

    def unselect(self) -> "Calendar[T]":
        self.selection = None
        self.refresh_selection()
        return self

    def move(self, jump: Optional[int] = None, today: Optional[Day] = None) -> "Calendar[T]":
        if jump is None:
            jump = self.size
        self.start = self.move_start(self.start, jump)
        self.end = self.move_end(self.end, jump)
        return self.refresh(today)

    def next(self, jump: Optional[int] = None, today: Optional[Day] = None) -> "Calendar[T]":
        if jump is None:
            jump = self.size
        return self.move(jump, today)

    def prev(self, jump: Optional[int] = None, today: Optional[Day] = None) -> "Calendar[T]":
        if jump is None:
            jump = self.size
        return self.move(-jump, today)

    @classmethod
    def days(
        cls,
        days: int = 1,
        around: Optional[Day] = None,
        focus: float = DEFAULT_FOCUS,
        input: Optional[Mapping] = None,
        today: Optional[Day] = None,
    ) -> "Calendar":
        if around is None:
            around = Day.today()
        start = around.start().relative_days(-int(math.floor(days * focus)))
        end = start.relative_days(days - 1).end()
        return cls(start, end, UNIT_DAY, days, _move_days, _move_days, input, today)

    @classmethod
    def weeks(
        cls,
        weeks: int = 1,
        around: Optional[Day] = None,
        focus: float = DEFAULT_FOCUS,
        input: Optional[Mapping] = None,
        today: Optional[Day] = None,
    ) -> "Calendar":
        if around is None:
            around = Day.today()
        start = (
            around.start().start_of_week().relative_weeks(-int(math.floor(weeks * focus)))
        )
        end = start.relative_weeks(weeks - 1).end_of_week()
        return cls(start, end, UNIT_WEEK, weeks, _move_weeks, _move_weeks, input, today)

    @classmethod
    def months(
        cls,
        months: int = 1,
        around: Optional[Day] = None,
        focus: float = DEFAULT_FOCUS,
        input: Optional[Mapping] = None,
        today: Optional[Day] = None,
    ) -> "Calendar":
        if around is None:
            around = Day.today()
        if input is None:
            input = {"fill": True}
        start = (
            around.start()
            .start_of_month()
            .relative_months(-int(math.floor(months * focus)))
        )
        end = start.relative_months(months - 1).end_of_month()
        return cls(
            start, end, UNIT_MONTH, months, _move_months, _move_month_end, input, today
        )

    @classmethod
    def years(
        cls,
        years: int = 1,
        around: Optional[Day] = None,
        focus: float = DEFAULT_FOCUS,
        input: Optional[Mapping] = None,
        today: Optional[Day] = None,
    ) -> "Calendar":
        if around is None:
            around = Day.today()
        if input is None:
            input = {"fill": True}
        start = (
            around.start().start_of_year().relative_years(-int(math.floor(years * focus)))
        )
        end = start.relative_years(years - 1).end_of_year()
        return cls(start, end, UNIT_YEAR, years, _move_years, _move_years, input, today)
