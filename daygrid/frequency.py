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

"""Frequency rules over a single calendar component.

A rule is one of `Always`, `Every` or `OneOf`. Compiling a rule produces a
`FrequencyCheck`, a callable predicate that remembers the rule it was
built from.
"""

from collections.abc import Mapping
from typing import Callable, Optional


class InvalidFrequency(ValueError):
    """A frequency rule is malformed."""

    def __init__(self, value, reason) -> None:
        super().__init__(f"Invalid frequency {value!r}: {reason}")
        self.value = value
        self.reason = reason


class FrequencyValue(object):
    """A declarative rule over an integer calendar component."""

    def matches(self, value: int) -> bool:
        raise NotImplementedError(self.matches)

    def to_input(self):
        """Return the declarative (plain data) form of this rule."""
        raise NotImplementedError(self.to_input)

    def compile(self, property: Optional[str] = None) -> "FrequencyCheck":
        return FrequencyCheck(self.matches, self, property)


class Always(FrequencyValue):
    """No constraint; matches every value."""

    def __repr__(self) -> str:
        return f"{type(self).__name__}()"

    def __eq__(self, other):
        return isinstance(other, Always)

    def __hash__(self):
        return hash(Always)

    def matches(self, value):
        return True

    def to_input(self):
        return None


class Every(FrequencyValue):
    """Matches every n-th value, starting at offset."""

    def __init__(self, every: int, offset: int = 0) -> None:
        if isinstance(every, bool) or not isinstance(every, int):
            raise InvalidFrequency(every, "every must be an integer")
        if every < 1:
            raise InvalidFrequency(every, "every must be at least 1")
        if isinstance(offset, bool) or not isinstance(offset, int):
            raise InvalidFrequency(offset, "offset must be an integer")
        self.every = every
        self.offset = offset

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.every!r}, {self.offset!r})"

    def __eq__(self, other):
        if isinstance(other, Every):
            return (self.every, self.offset) == (other.every, other.offset)
        return False

    def __hash__(self):
        return hash((Every, self.every, self.offset))

    def matches(self, value):
        return (value - self.offset) % self.every == 0

    def to_input(self):
        return {"every": self.every, "offset": self.offset}

    def compile(self, property=None):
        every = self.every
        offset = self.offset % every
        return FrequencyCheck(lambda value: value % every == offset, self, property)


class OneOf(FrequencyValue):
    """Matches any of a list of values.

    The values are kept exactly as given, including order and duplicates.
    """

    def __init__(self, values) -> None:
        values = list(values)
        for value in values:
            if isinstance(value, bool) or not isinstance(value, int):
                raise InvalidFrequency(value, "values must be integers")
        self.values = values

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.values!r})"

    def __eq__(self, other):
        if isinstance(other, OneOf):
            return self.values == other.values
        return False

    def __hash__(self):
        return hash((OneOf, tuple(self.values)))

    def matches(self, value):
        return value in self.values

    def to_input(self):
        return list(self.values)

    def compile(self, property=None):
        lookup = frozenset(self.values)
        return FrequencyCheck(lookup.__contains__, self, property)


class FrequencyCheck(object):
    """Compiled predicate for a frequency rule.

    Attributes:
      input: the `FrequencyValue` this check was compiled from
      property: name of the calendar component checked, if known
    """

    __slots__ = ("_predicate", "input", "property")

    def __init__(
        self,
        predicate: Callable[[int], bool],
        input: FrequencyValue,
        property: Optional[str] = None,
    ) -> None:
        self._predicate = predicate
        self.input = input
        self.property = property

    def __call__(self, value: int) -> bool:
        return self._predicate(value)

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.input!r}, property={self.property!r})"

    @property
    def given(self) -> bool:
        """Whether a constraint was configured."""
        return not isinstance(self.input, Always)


def parse_frequency(value) -> FrequencyValue:
    """Interpret a declarative frequency rule.

    Args:
      value: None (no constraint), a sequence of integers, a mapping with
        "every" and optional "offset" keys, or a FrequencyValue
    Returns: FrequencyValue
    Raises:
      InvalidFrequency: if the value is not a recognized rule
    """
    if value is None:
        return Always()
    if isinstance(value, FrequencyValue):
        return value
    if isinstance(value, Mapping):
        if "every" not in value:
            raise InvalidFrequency(value, "missing 'every'")
        extra = set(value) - {"every", "offset"}
        if extra:
            raise InvalidFrequency(value, f"unknown keys {sorted(extra)!r}")
        return Every(value["every"], value.get("offset") or 0)
    if isinstance(value, (list, tuple)):
        return OneOf(value)
    raise InvalidFrequency(value, "unrecognized rule")


def compile_frequency(value, property: Optional[str] = None) -> FrequencyCheck:
    return parse_frequency(value).compile(property)
