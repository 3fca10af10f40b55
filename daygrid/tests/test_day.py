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

"""Tests for daygrid.day."""

import unittest
from datetime import date, datetime, time

from ..day import (
    Day,
    DaySpan,
    InvalidDay,
    InvalidTime,
    InvalidUnit,
    format_time,
    normalize_unit,
    parse_time,
    time_to_millis,
)


class DayParseTests(unittest.TestCase):
    def test_none(self):
        self.assertIs(None, Day.parse(None))

    def test_day(self):
        day = Day.build(2024, 5, 1)
        self.assertIs(day, Day.parse(day))

    def test_iso_string(self):
        self.assertEqual(Day.build(2024, 5, 1), Day.parse("2024-05-01"))
        self.assertEqual(Day.build(2024, 5, 1, 9, 30), Day.parse("2024-05-01T09:30"))

    def test_date_and_datetime(self):
        self.assertEqual(Day.build(2024, 5, 1), Day.parse(date(2024, 5, 1)))
        self.assertEqual(
            Day.build(2024, 5, 1, 12), Day.parse(datetime(2024, 5, 1, 12))
        )

    def test_day_identifier(self):
        self.assertEqual(Day.build(2024, 2, 29), Day.parse(20240229))

    def test_invalid(self):
        self.assertRaises(InvalidDay, Day.parse, "not a day")
        self.assertRaises(InvalidDay, Day.parse, 20240230)
        self.assertRaises(InvalidDay, Day.parse, 1.5)


class DayComponentTests(unittest.TestCase):
    def test_day_of_week(self):
        self.assertEqual(0, Day.build(2024, 1, 7).day_of_week)
        self.assertEqual(1, Day.build(2024, 1, 8).day_of_week)
        self.assertEqual(6, Day.build(2024, 1, 13).day_of_week)

    def test_simple_components(self):
        day = Day.build(2024, 3, 1)
        self.assertEqual(2024, day.year)
        self.assertEqual(3, day.month)
        self.assertEqual(1, day.day_of_month)
        self.assertEqual(61, day.day_of_year)

    def test_day_identifier(self):
        self.assertEqual(20240131, Day.build(2024, 1, 31).day_identifier)
        self.assertEqual(
            Day.build(2024, 1, 31),
            Day.from_day_identifier(Day.build(2024, 1, 31, 15).day_identifier),
        )

    def test_week(self):
        self.assertEqual(1, Day.build(2025, 1, 1).week)
        self.assertEqual(1, Day.build(2025, 1, 4).week)
        self.assertEqual(2, Day.build(2025, 1, 5).week)
        # The week containing January 1st 2026.
        self.assertEqual(1, Day.build(2025, 12, 31).week)

    def test_week_of_year(self):
        self.assertEqual(1, Day.build(2024, 1, 1).week_of_year)
        self.assertEqual(53, Day.build(2021, 1, 1).week_of_year)

    def test_weekspan_of_year(self):
        self.assertEqual(0, Day.build(2024, 1, 7).weekspan_of_year)
        self.assertEqual(1, Day.build(2024, 1, 8).weekspan_of_year)

    def test_full_week_of_year(self):
        self.assertEqual(0, Day.build(2024, 1, 1).full_week_of_year)
        self.assertEqual(0, Day.build(2024, 1, 6).full_week_of_year)
        self.assertEqual(1, Day.build(2024, 1, 7).full_week_of_year)
        self.assertEqual(1, Day.build(2023, 1, 1).full_week_of_year)

    def test_week_of_month(self):
        # May 1st 2024 is a Wednesday.
        self.assertEqual(1, Day.build(2024, 5, 1).week_of_month)
        self.assertEqual(1, Day.build(2024, 5, 4).week_of_month)
        self.assertEqual(2, Day.build(2024, 5, 5).week_of_month)

    def test_weekspan_of_month(self):
        self.assertEqual(0, Day.build(2024, 5, 7).weekspan_of_month)
        self.assertEqual(1, Day.build(2024, 5, 8).weekspan_of_month)

    def test_full_week_of_month(self):
        self.assertEqual(0, Day.build(2024, 5, 1).full_week_of_month)
        self.assertEqual(1, Day.build(2024, 5, 5).full_week_of_month)
        self.assertEqual(1, Day.build(2024, 5, 11).full_week_of_month)
        self.assertEqual(2, Day.build(2024, 5, 12).full_week_of_month)


class DayArithmeticTests(unittest.TestCase):
    def test_next_prev(self):
        day = Day.build(2024, 2, 28, 10)
        self.assertEqual(Day.build(2024, 2, 29, 10), day.next())
        self.assertEqual(Day.build(2024, 2, 27, 10), day.prev())

    def test_start_end(self):
        day = Day.build(2024, 5, 1, 10, 30)
        self.assertEqual(Day.build(2024, 5, 1), day.start())
        self.assertEqual(Day(datetime(2024, 5, 1, 23, 59, 59, 999999)), day.end())

    def test_week_bounds(self):
        day = Day.build(2024, 5, 1, 12)
        self.assertEqual(Day.build(2024, 4, 28), day.start_of_week())
        self.assertEqual(Day.build(2024, 5, 4).end(), day.end_of_week())

    def test_month_bounds(self):
        day = Day.build(2024, 2, 10, 8)
        self.assertEqual(Day.build(2024, 2, 1), day.start_of_month())
        self.assertEqual(Day.build(2024, 2, 29).end(), day.end_of_month())

    def test_year_bounds(self):
        day = Day.build(2024, 6, 10)
        self.assertEqual(Day.build(2024, 1, 1), day.start_of_year())
        self.assertEqual(Day.build(2024, 12, 31).end(), day.end_of_year())

    def test_relative_months(self):
        self.assertEqual(
            Day.build(2024, 2, 29), Day.build(2024, 1, 31).relative_months(1)
        )
        self.assertEqual(
            Day.build(2023, 12, 31), Day.build(2024, 1, 31).relative_months(-1)
        )

    def test_add(self):
        day = Day.build(2024, 5, 1, 9)
        self.assertEqual(Day.build(2024, 5, 1, 10, 30), day.add(90, "minutes"))
        self.assertEqual(Day.build(2024, 5, 2, 9), day.add(1, "Day"))
        self.assertEqual(Day.build(2024, 6, 1, 9), day.add(1, "month"))
        self.assertEqual(Day.build(2024, 5, 1, 9, 0, 0, 250), day.add(250, "milliseconds"))
        self.assertRaises(InvalidUnit, day.add, 1, "fortnights")

    def test_with_time(self):
        self.assertEqual(
            Day.build(2024, 5, 1, 17, 45),
            Day.build(2024, 5, 1, 9).with_time(time(17, 45)),
        )

    def test_relative_millis(self):
        self.assertEqual(
            Day(datetime(2024, 5, 1, 23, 59, 59, 999000)),
            Day.build(2024, 5, 2).relative(-1),
        )

    def test_days_between(self):
        self.assertEqual(3, Day.build(2024, 5, 1, 23).days_between(Day.build(2024, 5, 4)))
        self.assertEqual(-1, Day.build(2024, 5, 1).days_between(Day.build(2024, 4, 30)))


class DayComparisonTests(unittest.TestCase):
    def test_ordering(self):
        self.assertLess(Day.build(2024, 5, 1), Day.build(2024, 5, 1, 0, 0, 1))
        self.assertGreaterEqual(Day.build(2024, 5, 2), Day.build(2024, 5, 1))
        self.assertEqual(
            hash(Day.build(2024, 5, 1)), hash(Day(date(2024, 5, 1)))
        )

    def test_same(self):
        day = Day.build(2024, 5, 1, 10)
        self.assertTrue(day.same_day(Day.build(2024, 5, 1, 23)))
        self.assertTrue(day.same_week(Day.build(2024, 4, 28)))
        self.assertFalse(day.same_week(Day.build(2024, 5, 5)))
        self.assertTrue(day.same_month(Day.build(2024, 5, 31)))
        self.assertFalse(day.same_month(Day.build(2023, 5, 1)))
        self.assertTrue(day.same_year(Day.build(2024, 12, 31)))
        self.assertTrue(day.same_time(time(10)))
        self.assertFalse(day.same_time(time(10, 1)))


class DaySpanTests(unittest.TestCase):
    def test_point(self):
        span = DaySpan.point(Day.build(2024, 5, 1))
        self.assertTrue(span.is_point)
        self.assertFalse(DaySpan(Day.build(2024, 5, 1), Day.build(2024, 5, 2)).is_point)

    def test_contains(self):
        span = DaySpan(Day.build(2024, 5, 1), Day.build(2024, 5, 3).end())
        self.assertTrue(span.contains(Day.build(2024, 5, 1)))
        self.assertTrue(span.contains(Day.build(2024, 5, 3, 12)))
        self.assertFalse(span.contains(Day.build(2024, 5, 4)))

    def test_matches(self):
        span = DaySpan.point(Day.build(2024, 5, 6, 12))
        self.assertTrue(span.matches_day(Day.build(2024, 5, 6)))
        self.assertFalse(span.matches_day(Day.build(2024, 5, 7)))
        self.assertTrue(span.matches_week(Day.build(2024, 5, 11)))
        self.assertFalse(span.matches_week(Day.build(2024, 5, 12)))
        self.assertTrue(span.matches_month(Day.build(2024, 5, 31)))
        self.assertFalse(span.matches_month(Day.build(2024, 4, 30)))
        self.assertTrue(span.matches_year(Day.build(2024, 1, 1)))

    def test_days(self):
        span = DaySpan(Day.build(2024, 5, 1), Day.build(2024, 5, 7).end())
        self.assertEqual(7, span.days(round_up=True))
        self.assertEqual(6, span.days())


class TimeTests(unittest.TestCase):
    def test_parse(self):
        self.assertEqual(time(9, 30), parse_time("9:30"))
        self.assertEqual(time(9, 30, 15, 250000), parse_time("09:30:15.250"))
        self.assertEqual(time(1), parse_time(3600000))
        t = time(8)
        self.assertIs(t, parse_time(t))

    def test_parse_invalid(self):
        self.assertRaises(InvalidTime, parse_time, "25:00")
        self.assertRaises(InvalidTime, parse_time, "noon")
        self.assertRaises(InvalidTime, parse_time, -1)
        self.assertRaises(InvalidTime, parse_time, None)

    def test_millis(self):
        self.assertEqual(34200250, time_to_millis(time(9, 30, 0, 250000)))

    def test_format(self):
        self.assertEqual("09:00", format_time(time(9)))
        self.assertEqual("09:00:05", format_time(time(9, 0, 5)))
        self.assertEqual("09:00:05.250", format_time(time(9, 0, 5, 250000)))
        self.assertEqual("09 AM", format_time(time(9), "%I %p"))

    def test_normalize_unit(self):
        self.assertEqual("minute", normalize_unit("Minutes"))
        self.assertEqual("day", normalize_unit("day"))
        self.assertRaises(InvalidUnit, normalize_unit, "eons")
        self.assertRaises(InvalidUnit, normalize_unit, None)
