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

"""Calendar configuration file.

An INI file with a [calendar] section for the grid options and one
[schedule NAME] section per schedule, e.g.::

  [calendar]
  fill = true
  minimum_size = 42

  [schedule gym]
  day_of_week = 1, 3, 5
  times = 07:00
  duration = 90
  duration_unit = minutes

  [schedule bins]
  week = every 2 offset 1
  day_of_week = 2
"""

import configparser
import logging
import re

from .calendar import OPTION_NAMES
from .schedule import FREQUENCY_PROPERTIES, InvalidSchedule, Schedule

logger = logging.getLogger(__name__)

CALENDAR_SECTION = "calendar"
SCHEDULE_SECTION_PREFIX = "schedule "

_BOOLEAN_OPTIONS = ("fill", "repeat_covers", "list_times", "events_outside")

_EVERY_RE = re.compile(r"^every\s+(-?\d+)(?:\s+offset\s+(-?\d+))?$")


class InvalidConfiguration(Exception):
    """The configuration file is malformed."""

    def __init__(self, section, key, reason) -> None:
        super().__init__(f"[{section}] {key}: {reason}")
        self.section = section
        self.key = key
        self.reason = reason


def _split_list(text):
    return [item.strip() for item in text.split(",") if item.strip()]


def parse_frequency_text(text):
    """Parse a frequency rule as written in a configuration file.

    Either a comma-separated list of integers or "every N [offset K]".
    """
    text = text.strip()
    m = _EVERY_RE.match(text)
    if m:
        return {"every": int(m.group(1)), "offset": int(m.group(2) or 0)}
    return [int(item) for item in _split_list(text)]


def format_frequency_text(value):
    if isinstance(value, dict):
        return "every %d offset %d" % (value["every"], value["offset"])
    return ", ".join(str(item) for item in value)


class CalendarConfig(object):
    """Calendar options and schedule definitions."""

    def __init__(self, cp=None, save=None):
        if cp is None:
            cp = configparser.ConfigParser()
        self._configparser = cp
        self._save_cb = save

    def _save(self, message):
        if self._save_cb is None:
            return
        self._save_cb(self._configparser, message)

    @classmethod
    def from_file(cls, f):
        cp = configparser.ConfigParser()
        cp.read_file(f)
        return cls(cp)

    def write(self, f):
        self._configparser.write(f)

    def get_options(self):
        """Return the calendar options that are set.

        Returns: dictionary suitable for `Calendar.with_input`
        """
        ret = {}
        if not self._configparser.has_section(CALENDAR_SECTION):
            return ret
        section = self._configparser[CALENDAR_SECTION]
        for key in section:
            if key not in OPTION_NAMES:
                logger.warning("Ignoring unknown calendar option %r", key)
                continue
            try:
                if key in _BOOLEAN_OPTIONS:
                    ret[key] = section.getboolean(key)
                else:
                    ret[key] = section.getint(key)
            except ValueError as exc:
                raise InvalidConfiguration(CALENDAR_SECTION, key, str(exc)) from exc
        return ret

    def set_option(self, name, value):
        if name not in OPTION_NAMES:
            raise KeyError(name)
        if not self._configparser.has_section(CALENDAR_SECTION):
            self._configparser.add_section(CALENDAR_SECTION)
        if value is None:
            self._configparser.remove_option(CALENDAR_SECTION, name)
        elif name in _BOOLEAN_OPTIONS:
            self._configparser[CALENDAR_SECTION][name] = "true" if value else "false"
        else:
            self._configparser[CALENDAR_SECTION][name] = str(value)
        self._save("Set %s." % name)

    def get_schedule_names(self):
        return [
            section[len(SCHEDULE_SECTION_PREFIX):].strip()
            for section in self._configparser.sections()
            if section.startswith(SCHEDULE_SECTION_PREFIX)
        ]

    def get_schedule(self, name):
        """Build the schedule defined in a [schedule NAME] section.

        Raises:
          KeyError: if there is no such section
          InvalidConfiguration: if the definition is malformed
        """
        section_name = SCHEDULE_SECTION_PREFIX + name
        section = self._configparser[section_name]
        values = {}
        for key, text in section.items():
            try:
                if key in FREQUENCY_PROPERTIES:
                    values[key] = parse_frequency_text(text)
                elif key == "times":
                    values[key] = _split_list(text)
                elif key == "exclude":
                    # Day identifiers or ISO dates.
                    values[key] = [
                        int(item) if item.isdigit() else item
                        for item in _split_list(text)
                    ]
                elif key == "duration":
                    values[key] = float(text) if "." in text else int(text)
                else:
                    values[key] = text.strip()
            except ValueError as exc:
                raise InvalidConfiguration(section_name, key, str(exc)) from exc
        try:
            return Schedule(values)
        except InvalidSchedule as exc:
            raise InvalidConfiguration(section_name, None, str(exc)) from exc

    def get_schedules(self):
        """Return (name, Schedule) tuples in file order."""
        return [(name, self.get_schedule(name)) for name in self.get_schedule_names()]

    def set_schedule(self, name, schedule):
        """Store a schedule definition, replacing any existing one."""
        section_name = SCHEDULE_SECTION_PREFIX + name
        if self._configparser.has_section(section_name):
            self._configparser.remove_section(section_name)
        self._configparser.add_section(section_name)
        section = self._configparser[section_name]
        for key, value in schedule.to_input().items():
            if key in FREQUENCY_PROPERTIES:
                section[key] = format_frequency_text(value)
            elif key in ("start", "end"):
                section[key] = value.isoformat()
            elif key == "exclude":
                section[key] = ", ".join(str(identifier) for identifier in value)
            elif key == "times":
                section[key] = ", ".join(value)
            else:
                section[key] = str(value)
        self._save("Set schedule %s." % name)

    def remove_schedule(self, name):
        if not self._configparser.remove_section(SCHEDULE_SECTION_PREFIX + name):
            raise KeyError(name)
        self._save("Remove schedule %s." % name)
