"""Per-day classification of a calendar year.

Every day of the target year is classified once as a weekend day, a holiday
or a working day.  The resulting records are immutable; annotating leave days
for display produces a fresh set of records instead of editing the map used
by the optimizer.
"""

from __future__ import annotations

import datetime
from collections.abc import Iterable
from typing import TYPE_CHECKING, NamedTuple

if TYPE_CHECKING:
    from leaveplan.optimizer import OptimizationResult


class InvalidArgumentError(ValueError):
    """Raised for malformed inputs such as a negative budget or a bad year."""


class Holiday(NamedTuple):
    """A public holiday supplied by a regional preset or the user."""

    date: datetime.date | str
    name: str
    category: str = "public"


class CalendarDay(NamedTuple):
    """Classification of a single calendar day.

    ``weekday_index`` counts from Sunday: 0 = Sunday … 6 = Saturday.
    """

    date: datetime.date
    weekday_index: int
    is_weekend: bool
    is_holiday: bool
    holiday_name: str | None = None
    is_leave_day: bool = False
    is_bridge: bool = False

    @property
    def is_free(self) -> bool:
        """True when the day costs no leave (weekend or holiday)."""
        return self.is_weekend or self.is_holiday


DayMap = dict[datetime.date, CalendarDay]


def validate_year(year: object) -> int:
    if isinstance(year, bool) or not isinstance(year, int):
        raise InvalidArgumentError(f"Year must be an integer, got {year!r}.")
    if not datetime.MINYEAR <= year <= datetime.MAXYEAR:
        raise InvalidArgumentError(
            f"Year {year} is outside {datetime.MINYEAR}..{datetime.MAXYEAR}."
        )
    return year


def _as_date(value: datetime.date | str) -> datetime.date:
    if isinstance(value, datetime.date):
        return value
    try:
        return datetime.date.fromisoformat(value)
    except ValueError:
        raise InvalidArgumentError(f"Invalid holiday date {value!r}. Use YYYY-MM-DD.") from None


def build_year_day_map(year: int, holidays: Iterable[Holiday]) -> DayMap:
    """Classify every day of *year* against *holidays*.

    Returns a chronologically ordered mapping with 365 or 366 entries.
    Holidays outside *year* are ignored; on duplicate dates the last
    name wins.
    """
    year = validate_year(year)

    holiday_names: dict[datetime.date, str] = {}
    for h in holidays:
        holiday_names[_as_date(h.date)] = h.name

    start = datetime.date(year, 1, 1)
    num_days = (datetime.date(year, 12, 31) - start).days + 1

    day_map: DayMap = {}
    for offset in range(num_days):
        d = start + datetime.timedelta(days=offset)
        weekday_index = d.isoweekday() % 7
        name = holiday_names.get(d)
        day_map[d] = CalendarDay(
            date=d,
            weekday_index=weekday_index,
            is_weekend=weekday_index in (0, 6),
            is_holiday=name is not None,
            holiday_name=name,
        )
    return day_map


def materialize_calendar(
    year: int,
    holidays: Iterable[Holiday],
    result: OptimizationResult,
) -> list[CalendarDay]:
    """Return the year's days with leave days from *result* flagged.

    Working days inside a selected period are marked as both leave and
    bridge days.  Weekends and holidays are left untouched.
    """
    day_map = build_year_day_map(year, holidays)

    for period in result.periods:
        d = period.start_date
        while d <= period.end_date:
            day = day_map.get(d)
            if day is not None and not day.is_free:
                day_map[d] = day._replace(is_leave_day=True, is_bridge=True)
            d += datetime.timedelta(days=1)

    return list(day_map.values())
