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

"""Export of calendar occurrences as iCalendar."""

from datetime import date, datetime, time, timedelta, timezone
from typing import Callable, Optional

from icalendar.cal import Calendar as ICalendar
from icalendar.cal import Event
from icalendar.prop import vDate, vDatetime, vText

from .calendar import Calendar, CalendarEvent

PRODID = "-//Daygrid//Daygrid//EN"
DEFAULT_UID_DOMAIN = "daygrid"


def create_prop_from_date_or_datetime(dt):
    """Create appropriate vDate or vDatetime property based on input type."""
    if isinstance(dt, date) and not isinstance(dt, datetime):
        return vDate(dt)
    else:
        return vDatetime(dt)


def event_uid(event: CalendarEvent, domain: str = DEFAULT_UID_DOMAIN) -> str:
    return "{}-{}@{}".format(
        event.id, event.time_span.start.dt.strftime("%Y%m%dT%H%M%S"), domain
    )


def _full_day_bounds(event: CalendarEvent):
    start = event.time_span.start.dt.date()
    end = event.time_span.end.dt
    if event.time_span.is_point:
        return start, start
    if end.time() == time():
        return start, end.date()
    return start, end.date() + timedelta(days=1)


def event_to_vevent(
    event: CalendarEvent,
    summary: Callable = str,
    domain: str = DEFAULT_UID_DOMAIN,
    dtstamp: Optional[datetime] = None,
) -> Event:
    """Convert an occurrence to a VEVENT.

    Args:
      event: CalendarEvent to convert
      summary: Callable producing the SUMMARY text from the payload
      domain: Domain part of the UID
      dtstamp: DTSTAMP value; defaults to now
    Returns: icalendar Event
    """
    if dtstamp is None:
        dtstamp = datetime.now(timezone.utc)
    vevent = Event()
    vevent["UID"] = vText(event_uid(event, domain))
    vevent["DTSTAMP"] = vDatetime(dtstamp)
    if event.is_full_day:
        start, end = _full_day_bounds(event)
    else:
        start, end = event.time_span.start.dt, event.time_span.end.dt
    vevent["DTSTART"] = create_prop_from_date_or_datetime(start)
    vevent["DTEND"] = create_prop_from_date_or_datetime(end)
    vevent["SUMMARY"] = vText(summary(event.payload))
    return vevent


def calendar_to_ical(
    calendar: Calendar,
    summary: Callable = str,
    domain: str = DEFAULT_UID_DOMAIN,
    dtstamp: Optional[datetime] = None,
) -> ICalendar:
    """Build an iCalendar object from the occurrences in a calendar grid.

    Occurrences that show up in several cells (multi-day events) are only
    exported once.
    """
    if dtstamp is None:
        dtstamp = datetime.now(timezone.utc)
    ret = ICalendar()
    ret.add("VERSION", "2.0")
    ret.add("PRODID", PRODID)
    seen = set()
    for cell in calendar.cells:
        for event in cell.events:
            key = (event.id, event.time_span.start)
            if key in seen:
                continue
            seen.add(key)
            ret.add_component(event_to_vevent(event, summary, domain, dtstamp))
    return ret
