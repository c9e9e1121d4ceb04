"""Built-in public holiday presets for supported regions.

Each preset returns the holidays of one year, sorted by date.  US federal
holidays follow the *observed* rule: a fixed-date holiday falling on a
Saturday is observed the preceding Friday, one falling on a Sunday the
following Monday.  Other regions list holidays on their calendar dates.
"""

from __future__ import annotations

import datetime
from collections.abc import Callable

from leaveplan.daymap import Holiday

# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _nth_weekday(year: int, month: int, weekday: int, n: int) -> datetime.date:
    """Return the *n*-th occurrence of *weekday* in *month* of *year*.

    *weekday* follows ``datetime`` convention: 0 = Monday … 6 = Sunday.
    *n* is 1-based (1 = first, 2 = second, …).
    """
    first = datetime.date(year, month, 1)
    delta = (weekday - first.weekday()) % 7
    return first + datetime.timedelta(days=delta, weeks=n - 1)


def _last_weekday(year: int, month: int, weekday: int) -> datetime.date:
    """Return the last occurrence of *weekday* in *month* of *year*."""
    if month == 12:
        last = datetime.date(year, 12, 31)
    else:
        last = datetime.date(year, month + 1, 1) - datetime.timedelta(days=1)
    delta = (last.weekday() - weekday) % 7
    return last - datetime.timedelta(days=delta)


def _weekday_before(d: datetime.date, weekday: int) -> datetime.date:
    """Return the last *weekday* strictly before *d*."""
    delta = (d.weekday() - weekday) % 7 or 7
    return d - datetime.timedelta(days=delta)


def _easter_sunday(year: int) -> datetime.date:
    """Western Easter Sunday (anonymous Gregorian algorithm)."""
    a = year % 19
    b, c = divmod(year, 100)
    d, e = divmod(b, 4)
    f = (b + 8) // 25
    g = (b - f + 1) // 3
    h = (19 * a + b - d - g + 15) % 30
    i, k = divmod(c, 4)
    l = (32 + 2 * e + 2 * i - h - k) % 7  # noqa: E741
    m = (a + 11 * h + 22 * l) // 451
    month, day = divmod(h + l - 7 * m + 114, 31)
    return datetime.date(year, month, day + 1)


def _observed(year: int, month: int, day: int, name: str) -> Holiday:
    """US fixed-date holiday, shifted Sat→Fri / Sun→Mon within *year*."""
    d = datetime.date(year, month, day)
    shifted = d
    if d.weekday() == 5:  # Saturday
        shifted = d - datetime.timedelta(days=1)
    elif d.weekday() == 6:  # Sunday
        shifted = d + datetime.timedelta(days=1)
    if shifted == d or shifted.year != year:
        return Holiday(d, name, "federal")
    return Holiday(shifted, name, "observed")


# ---------------------------------------------------------------------------
# Region presets
# ---------------------------------------------------------------------------

PRESETS: dict[str, str] = {
    "us": "United States federal holidays",
    "de": "Germany public holidays",
    "uk": "United Kingdom bank holidays",
    "ca": "Canada statutory holidays",
    "au": "Australia national public holidays",
    "fr": "France public holidays",
}


def us_holidays(year: int) -> list[Holiday]:
    """US federal holidays (observed) for *year*."""
    return sorted(
        [
            _observed(year, 1, 1, "New Year's Day"),
            Holiday(_nth_weekday(year, 1, 0, 3), "Martin Luther King Jr. Day", "federal"),
            Holiday(_nth_weekday(year, 2, 0, 3), "Presidents' Day", "federal"),
            Holiday(_last_weekday(year, 5, 0), "Memorial Day", "federal"),
            _observed(year, 6, 19, "Juneteenth"),
            _observed(year, 7, 4, "Independence Day"),
            Holiday(_nth_weekday(year, 9, 0, 1), "Labor Day", "federal"),
            Holiday(_nth_weekday(year, 10, 0, 2), "Columbus Day", "federal"),
            _observed(year, 11, 11, "Veterans Day"),
            Holiday(_nth_weekday(year, 11, 3, 4), "Thanksgiving", "federal"),
            _observed(year, 12, 25, "Christmas Day"),
        ]
    )


def de_holidays(year: int) -> list[Holiday]:
    """German nationwide public holidays for *year*."""
    easter = _easter_sunday(year)
    return sorted(
        [
            Holiday(datetime.date(year, 1, 1), "Neujahrstag"),
            Holiday(easter - datetime.timedelta(days=2), "Karfreitag"),
            Holiday(easter + datetime.timedelta(days=1), "Ostermontag"),
            Holiday(datetime.date(year, 5, 1), "Tag der Arbeit"),
            Holiday(easter + datetime.timedelta(days=39), "Christi Himmelfahrt"),
            Holiday(easter + datetime.timedelta(days=50), "Pfingstmontag"),
            Holiday(datetime.date(year, 10, 3), "Tag der Deutschen Einheit"),
            Holiday(datetime.date(year, 12, 25), "1. Weihnachtstag"),
            Holiday(datetime.date(year, 12, 26), "2. Weihnachtstag"),
        ]
    )


def uk_holidays(year: int) -> list[Holiday]:
    """England & Wales bank holidays for *year*."""
    easter = _easter_sunday(year)
    return sorted(
        [
            Holiday(datetime.date(year, 1, 1), "New Year's Day"),
            Holiday(easter - datetime.timedelta(days=2), "Good Friday"),
            Holiday(easter + datetime.timedelta(days=1), "Easter Monday"),
            Holiday(_nth_weekday(year, 5, 0, 1), "Early May Bank Holiday"),
            Holiday(_last_weekday(year, 5, 0), "Spring Bank Holiday"),
            Holiday(_last_weekday(year, 8, 0), "Summer Bank Holiday"),
            Holiday(datetime.date(year, 12, 25), "Christmas Day"),
            Holiday(datetime.date(year, 12, 26), "Boxing Day"),
        ]
    )


def ca_holidays(year: int) -> list[Holiday]:
    """Canadian federal statutory holidays for *year*."""
    easter = _easter_sunday(year)
    return sorted(
        [
            Holiday(datetime.date(year, 1, 1), "New Year's Day"),
            Holiday(easter - datetime.timedelta(days=2), "Good Friday"),
            Holiday(_weekday_before(datetime.date(year, 5, 25), 0), "Victoria Day"),
            Holiday(datetime.date(year, 7, 1), "Canada Day"),
            Holiday(_nth_weekday(year, 9, 0, 1), "Labour Day"),
            Holiday(datetime.date(year, 9, 30), "National Day for Truth and Reconciliation"),
            Holiday(_nth_weekday(year, 10, 0, 2), "Thanksgiving"),
            Holiday(datetime.date(year, 11, 11), "Remembrance Day"),
            Holiday(datetime.date(year, 12, 25), "Christmas Day"),
            Holiday(datetime.date(year, 12, 26), "Boxing Day"),
        ]
    )


def au_holidays(year: int) -> list[Holiday]:
    """Australian national public holidays for *year*."""
    easter = _easter_sunday(year)
    return sorted(
        [
            Holiday(datetime.date(year, 1, 1), "New Year's Day"),
            Holiday(datetime.date(year, 1, 26), "Australia Day"),
            Holiday(easter - datetime.timedelta(days=2), "Good Friday"),
            Holiday(easter - datetime.timedelta(days=1), "Easter Saturday"),
            Holiday(easter + datetime.timedelta(days=1), "Easter Monday"),
            Holiday(datetime.date(year, 4, 25), "Anzac Day"),
            Holiday(_nth_weekday(year, 6, 0, 2), "King's Birthday"),
            Holiday(datetime.date(year, 12, 25), "Christmas Day"),
            Holiday(datetime.date(year, 12, 26), "Boxing Day"),
        ]
    )


def fr_holidays(year: int) -> list[Holiday]:
    """French public holidays for *year*."""
    easter = _easter_sunday(year)
    return sorted(
        [
            Holiday(datetime.date(year, 1, 1), "Jour de l'an"),
            Holiday(easter + datetime.timedelta(days=1), "Lundi de Pâques"),
            Holiday(datetime.date(year, 5, 1), "Fête du Travail"),
            Holiday(datetime.date(year, 5, 8), "Victoire 1945"),
            Holiday(easter + datetime.timedelta(days=39), "Ascension"),
            Holiday(easter + datetime.timedelta(days=50), "Lundi de Pentecôte"),
            Holiday(datetime.date(year, 7, 14), "Fête Nationale"),
            Holiday(datetime.date(year, 8, 15), "Assomption"),
            Holiday(datetime.date(year, 11, 1), "Toussaint"),
            Holiday(datetime.date(year, 11, 11), "Armistice"),
            Holiday(datetime.date(year, 12, 25), "Noël"),
        ]
    )


_PRESET_FNS: dict[str, Callable[[int], list[Holiday]]] = {
    "us": us_holidays,
    "de": de_holidays,
    "uk": uk_holidays,
    "ca": ca_holidays,
    "au": au_holidays,
    "fr": fr_holidays,
}


def get_holidays(region: str, year: int) -> list[Holiday]:
    """Return the holidays of *region* for *year*, sorted by date.

    Region codes are case-insensitive.  Raises ``KeyError`` if the region
    is not supported.
    """
    fn = _PRESET_FNS.get(region.lower())
    if fn is None:
        supported = ", ".join(sorted(PRESETS))
        msg = f"Unknown country preset {region!r}. Supported: {supported}"
        raise KeyError(msg)
    return fn(year)
