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

"""Daygrid command-line handling."""

import argparse
import logging
import sys

from . import __version__
from .calendar import UNIT_DAY, UNIT_MONTH, UNIT_WEEK, UNIT_YEAR, Calendar
from .config import CalendarConfig, InvalidConfiguration
from .day import Day, InvalidDay

FACTORIES = {
    UNIT_DAY: Calendar.days,
    UNIT_WEEK: Calendar.weeks,
    UNIT_MONTH: Calendar.months,
    UNIT_YEAR: Calendar.years,
}

WEEKDAY_HEADER = " Su  Mo  Tu  We  Th  Fr  Sa"


def add_range_arguments(parser):
    parser.add_argument(
        "--date", default=None,
        help="Day to center the calendar on (YYYY-MM-DD). [today]")
    parser.add_argument(
        "--unit", choices=sorted(FACTORIES), default=UNIT_MONTH,
        help="Unit of the calendar. [%(default)s]")
    parser.add_argument(
        "--size", type=int, default=1,
        help="Number of units to show. [%(default)s]")


def load_config(path):
    if path is None:
        return CalendarConfig()
    with open(path) as f:
        return CalendarConfig.from_file(f)


def build_calendar(config, unit, size, around=None, today=None):
    """Create a calendar with the options and schedules from a config.

    The schedule names are used as payloads. Timed schedules are listed
    with one event per time unless the config says otherwise.
    """
    input = {"list_times": True}
    if unit in (UNIT_MONTH, UNIT_YEAR):
        input["fill"] = True
    input.update(config.get_options())
    input["schedules"] = [
        (schedule, name) for (name, schedule) in config.get_schedules()]
    return FACTORIES[unit](size, around=around, input=input, today=today)


def format_event(event):
    if event.is_full_day:
        when = "all day"
    else:
        when = "%s-%s" % (
            event.time_span.start.dt.strftime("%H:%M"),
            event.time_span.end.dt.strftime("%H:%M"))
    line = "%-11s %s" % (when, event.payload)
    if not event.is_start_day:
        line += " (continued)"
    return line


def write_grid(calendar, out):
    out.write("%s - %s\n" % (
        calendar.start.dt.strftime("%d %b %Y"),
        calendar.end.dt.strftime("%d %b %Y")))
    out.write(WEEKDAY_HEADER + "\n")
    if not calendar.cells:
        return
    row = ["    "] * calendar.cells[0].day.day_of_week
    for cell in calendar.cells:
        if cell.is_in_range:
            marker = "*" if cell.events else " "
            if cell.is_current_day:
                marker = "<"
            row.append("%3d%s" % (cell.day.day_of_month, marker))
        else:
            row.append("    ")
        if cell.day.day_of_week == 6:
            out.write("".join(row).rstrip() + "\n")
            row = []
    if row:
        out.write("".join(row).rstrip() + "\n")


def write_agenda(calendar, out):
    for cell in calendar.cells:
        if not cell.events:
            continue
        out.write(cell.day.dt.strftime("%a %d %b %Y") + "\n")
        for event in cell.events:
            out.write("  " + format_event(event) + "\n")


def write_next(config, around, count, out):
    for name, schedule in config.get_schedules():
        days = schedule.next_days(around, count, include_day=True)
        if days:
            listed = ", ".join(day.dt.strftime("%Y-%m-%d") for day in days)
        else:
            listed = "none"
        out.write("%s: %s\n" % (name, listed))


def main(argv=None, out=None):
    from .ical import calendar_to_ical

    if argv is None:
        argv = sys.argv[1:]
    else:
        argv = list(argv)
    if out is None:
        out = sys.stdout

    parser = argparse.ArgumentParser(prog="daygrid")
    parser.add_argument(
        "--version",
        action="version",
        version="%(prog)s " + ".".join(map(str, __version__)),
    )
    parser.add_argument(
        "-c", "--config", dest="config", default=None,
        help="Configuration file with calendar options and schedules.")
    parser.add_argument(
        "--debug", action="store_true", help="Print debug messages.")

    subparsers = parser.add_subparsers(help="Subcommands", dest="subcommand")
    grid_parser = subparsers.add_parser(
        "grid", help="Print a calendar grid with its events")
    add_range_arguments(grid_parser)
    next_parser = subparsers.add_parser(
        "next", help="List the next days each schedule occurs on")
    next_parser.add_argument(
        "--date", default=None, help="Day to start from. [today]")
    next_parser.add_argument(
        "-n", "--count", type=int, default=5,
        help="Number of days to list per schedule. [%(default)s]")
    export_parser = subparsers.add_parser(
        "export", help="Write the occurrences in a calendar as iCalendar")
    add_range_arguments(export_parser)

    args = parser.parse_args(argv)
    if args.subcommand is None:
        # If no subcommand is given, default to 'grid'
        args = parser.parse_args(argv + ["grid"])

    logging.basicConfig(level=logging.DEBUG if args.debug else logging.INFO)

    try:
        config = load_config(args.config)
        around = Day.parse(args.date)
        if args.subcommand == "next":
            write_next(config, around or Day.today(), args.count, out)
            return 0
        calendar = build_calendar(config, args.unit, args.size, around)
    except (OSError, InvalidConfiguration, InvalidDay) as exc:
        logging.error("%s", exc)
        return 1

    if args.subcommand == "grid":
        write_grid(calendar, out)
        write_agenda(calendar, out)
        return 0
    elif args.subcommand == "export":
        out.write(calendar_to_ical(calendar).to_ical().decode("utf-8"))
        return 0
    else:
        parser.print_help()
        return 1


if __name__ == "__main__":
    sys.exit(main(sys.argv[1:]))
