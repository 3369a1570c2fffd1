"""Presigned URL lifetimes expressed as (number, unit).

Durations are capped at seven days, the longest lifetime S3 accepts for a
presigned URL.
"""

import re
from dataclasses import dataclass
from typing import Union

from s3compat.errors import InvalidParameters

# Minutes per unit
UNIT_MINUTES = {
    "minutes": 1,
    "hours": 60,
    "days": 1440,
}

# 7 days
MAX_MINUTES = 10080

MAX_PER_UNIT = {
    "minutes": 10080,
    "hours": 168,
    "days": 7,
}

_SHORT_UNITS = {"m": "minutes", "h": "hours", "d": "days"}
_DURATION_RE = re.compile(r"^\s*(\d+)\s*([a-z]*)\s*$")


@dataclass(frozen=True)
class Duration:
    number: int
    unit: str = "minutes"

    @property
    def minutes(self) -> int:
        return to_minutes(self.number, self.unit)

    @property
    def seconds(self) -> int:
        return self.minutes * 60

    def __str__(self) -> str:
        unit = self.unit if self.number != 1 else self.unit[:-1]
        return f"{self.number} {unit}"


def to_minutes(number: int, unit: str) -> int:
    """Convert to minutes, capped at seven days. Unknown units are minutes."""
    minutes = int(number) * UNIT_MINUTES.get(unit, 1)
    return min(minutes, MAX_MINUTES)


def max_for_unit(unit: str) -> int:
    return MAX_PER_UNIT.get(unit, MAX_MINUTES)


def from_minutes(minutes: int) -> Duration:
    """Express a number of minutes in the largest unit that divides it."""
    minutes = max(1, int(minutes))
    if minutes >= 1440 and minutes % 1440 == 0:
        return Duration(minutes // 1440, "days")
    if minutes >= 60 and minutes % 60 == 0:
        return Duration(minutes // 60, "hours")
    return Duration(minutes, "minutes")


def parse_duration(value: Union[int, str, dict]) -> Duration:
    """Parse a stored or user-supplied duration.

    Accepts a {"number": .., "unit": ..} dict, a bare number of minutes,
    or a string such as "15m", "2 hours" or "7d".

    Raises:
        InvalidParameters: If a string cannot be parsed
    """
    if isinstance(value, dict) and "number" in value and "unit" in value:
        unit = value["unit"] if value["unit"] in UNIT_MINUTES else "minutes"
        return Duration(max(1, int(value["number"])), unit)

    if isinstance(value, int):
        return from_minutes(value)

    match = _DURATION_RE.match(str(value).lower())
    if not match:
        raise InvalidParameters(f"Invalid duration: {value!r}")
    number, unit = int(match.group(1)), match.group(2)
    if not unit:
        return from_minutes(number)
    unit = _SHORT_UNITS.get(unit, unit)
    if not unit.endswith("s"):
        unit += "s"
    if unit not in UNIT_MINUTES:
        raise InvalidParameters(f"Invalid duration unit in {value!r}")
    return Duration(max(1, number), unit)
