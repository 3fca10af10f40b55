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

"""Tests for the daygrid command-line interface."""

import os
import shutil
import tempfile
import unittest
from io import StringIO

from ..__main__ import build_calendar, main
from ..config import CalendarConfig
from ..day import Day
from ..schedule import Schedule

CONFIG = """\
[calendar]
minimum_size = 35

[schedule gym]
day_of_week = 1, 3, 5
times = 07:00
duration = 90
duration_unit = minutes
"""


class MainTests(unittest.TestCase):
    def setUp(self):
        super().setUp()
        d = tempfile.mkdtemp()
        self.addCleanup(shutil.rmtree, d)
        self.path = os.path.join(d, "daygrid.conf")
        with open(self.path, "w") as f:
            f.write(CONFIG)

    def run_main(self, *args):
        out = StringIO()
        ret = main(["-c", self.path] + list(args), out=out)
        return ret, out.getvalue()

    def test_next(self):
        ret, output = self.run_main("next", "--date", "2024-05-15", "--count", "3")
        self.assertEqual(0, ret)
        self.assertEqual("gym: 2024-05-15, 2024-05-17, 2024-05-20\n", output)

    def test_grid(self):
        ret, output = self.run_main("grid", "--date", "2024-05-15")
        self.assertEqual(0, ret)
        lines = output.splitlines()
        self.assertEqual("01 May 2024 - 31 May 2024", lines[0])
        self.assertEqual(" Su  Mo  Tu  We  Th  Fr  Sa", lines[1])
        self.assertEqual(" " * 12 + "  1*  2   3*  4", lines[2])
        self.assertIn("Mon 06 May 2024", lines)
        self.assertIn("  07:00-08:30 gym", lines)

    def test_export(self):
        ret, output = self.run_main("export", "--date", "2024-05-15")
        self.assertEqual(0, ret)
        self.assertTrue(output.startswith("BEGIN:VCALENDAR"))
        self.assertEqual(14, output.count("BEGIN:VEVENT"))
        self.assertIn("SUMMARY:gym", output)

    def test_default_subcommand(self):
        ret, output = self.run_main()
        self.assertEqual(0, ret)
        self.assertIn(" Su  Mo  Tu  We  Th  Fr  Sa\n", output)

    def test_missing_config(self):
        out = StringIO()
        with self.assertLogs(level="ERROR"):
            ret = main(["-c", self.path + ".missing", "grid"], out=out)
        self.assertEqual(1, ret)
        self.assertEqual("", out.getvalue())

    def test_invalid_date(self):
        with self.assertLogs(level="ERROR"):
            ret, output = self.run_main("grid", "--date", "someday")
        self.assertEqual(1, ret)

    def test_invalid_config(self):
        with open(self.path, "a") as f:
            f.write("\n[schedule bad]\nday_of_week = monday\n")
        with self.assertLogs(level="ERROR"):
            ret, output = self.run_main("next")
        self.assertEqual(1, ret)


class BuildCalendarTests(unittest.TestCase):
    def test_options_and_payloads(self):
        config = CalendarConfig()
        config.set_option("minimum_size", 42)
        config.set_schedule("daily", Schedule())
        cal = build_calendar(
            config, "month", 1, around=Day.build(2024, 5, 15),
            today=Day.build(2024, 5, 15))
        self.assertEqual(42, len(cal))
        self.assertTrue(cal.fill)
        self.assertEqual(["daily"], [entry.payload for entry in cal.schedules])

    def test_week_not_filled(self):
        cal = build_calendar(
            CalendarConfig(), "day", 3, around=Day.build(2024, 5, 15),
            today=Day.build(2024, 5, 15))
        self.assertFalse(cal.fill)
        self.assertEqual(3, len(cal))
