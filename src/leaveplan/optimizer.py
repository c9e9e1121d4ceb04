"""Leave Day Optimizer

Spend a fixed budget of leave days where they buy the most consecutive time
off, by bridging weekends and public holidays into longer breaks.

Pipeline:
  1. Day map        - classify every day of the year (see ``daymap``)
  2. Bridge finder  - for each run of free days, the cheapest way to join it
                      to a neighbouring free run
  3. Deduplication  - drop overlapping candidates, most efficient first
  4. Allocation     - greedy selection under the budget and a policy
  5. Summary        - totals, efficiency ratio and a one-line synopsis
"""

from __future__ import annotations

import calendar
import datetime
import enum
import logging
from collections.abc import Callable, Iterable, Sequence
from typing import NamedTuple

from leaveplan.daymap import (
    CalendarDay,
    DayMap,
    Holiday,
    InvalidArgumentError,
    build_year_day_map,
    validate_year,
)

logger = logging.getLogger(__name__)

DEFAULT_MAX_BRIDGE_DAYS = 5
DEFAULT_MAX_CONSECUTIVE_DAYS = 14

NO_OPPORTUNITIES_SUMMARY = "No optimization opportunities found for the given parameters."

# ---------------------------------------------------------------------------
# Data types
# ---------------------------------------------------------------------------


class BridgeOpportunity(NamedTuple):
    """A candidate block of time off obtainable by spending leave days."""

    start_date: datetime.date
    end_date: datetime.date
    leave_days_needed: int
    total_days_off: int
    efficiency: float
    holiday_names: tuple[str, ...] = ()


class VacationPeriod(NamedTuple):
    """A selected, budget-accepted block of consecutive days off."""

    start_date: datetime.date
    end_date: datetime.date
    total_days: int
    leave_days_used: int
    weekend_days: int
    holiday_days: int
    holiday_names: tuple[str, ...]
    efficiency: float


class OptimizationResult(NamedTuple):
    """The final plan: chronologically ordered periods plus totals."""

    total_days_off: int
    leave_days_used: int
    efficiency: float
    periods: tuple[VacationPeriod, ...]
    summary: str


SortKey = Callable[[BridgeOpportunity], tuple[float, ...]]


def _by_efficiency(opp: BridgeOpportunity) -> tuple[float, ...]:
    return (-opp.efficiency,)


def _short_breaks_first(opp: BridgeOpportunity) -> tuple[float, ...]:
    return (0 if opp.leave_days_needed <= 2 else 1, -opp.efficiency)


def _long_vacations_first(opp: BridgeOpportunity) -> tuple[float, ...]:
    return (0 if opp.total_days_off >= 7 else 1, -opp.efficiency)


class Policy(enum.Enum):
    """Ordering preference used by the allocator.

    DEFAULT       - most efficient opportunities first
    PREFER_SHORT  - opportunities needing at most 2 leave days first
    PREFER_LONG   - opportunities yielding at least 7 days off first

    Within each group, ties are broken by efficiency.
    """

    DEFAULT = "default"
    PREFER_SHORT = "short"
    PREFER_LONG = "long"

    @property
    def sort_key(self) -> SortKey:
        return _POLICY_SORT_KEYS[self]

    @classmethod
    def from_flags(
        cls, prefer_short_breaks: bool = False, prefer_long_vacations: bool = False
    ) -> Policy:
        """Map the boolean preference toggles to a policy (short wins)."""
        if prefer_short_breaks:
            return cls.PREFER_SHORT
        if prefer_long_vacations:
            return cls.PREFER_LONG
        return cls.DEFAULT


_POLICY_SORT_KEYS: dict[Policy, SortKey] = {
    Policy.DEFAULT: _by_efficiency,
    Policy.PREFER_SHORT: _short_breaks_first,
    Policy.PREFER_LONG: _long_vacations_first,
}


# ---------------------------------------------------------------------------
# Bridge finder
# ---------------------------------------------------------------------------


def _make_opportunity(days: Sequence[CalendarDay], start: int, end: int) -> BridgeOpportunity:
    rng = range(start, end + 1)
    total = end - start + 1
    leave = sum(1 for i in rng if not days[i].is_free)
    return BridgeOpportunity(
        start_date=days[start].date,
        end_date=days[end].date,
        leave_days_needed=leave,
        total_days_off=total,
        efficiency=total / leave,
        holiday_names=tuple(days[i].holiday_name for i in rng if days[i].holiday_name),
    )


def _explore(
    days: Sequence[CalendarDay],
    free: Sequence[bool],
    index: int,
    max_bridge_days: int,
) -> BridgeOpportunity | None:
    """Best bridge from the free run containing day *index*, if any."""
    num_days = len(free)

    # Maximal free run around the starting day
    run_start = run_end = index
    while run_start > 0 and free[run_start - 1]:
        run_start -= 1
    while run_end < num_days - 1 and free[run_end + 1]:
        run_end += 1

    best: BridgeOpportunity | None = None

    # Forward: spend g days after the run, land on a free day, extend
    for g in range(1, max_bridge_days + 1):
        bridge_end = run_end + g
        if bridge_end >= num_days:
            break
        far = bridge_end + 1
        if far >= num_days or not free[far]:
            continue
        while far < num_days - 1 and free[far + 1]:
            far += 1
        candidate = _make_opportunity(days, run_start, far)
        if best is None or candidate.efficiency > best.efficiency:
            best = candidate

    # Backward: mirror image
    for g in range(1, max_bridge_days + 1):
        bridge_start = run_start - g
        if bridge_start < 0:
            break
        far = bridge_start - 1
        if far < 0 or not free[far]:
            continue
        while far > 0 and free[far - 1]:
            far -= 1
        candidate = _make_opportunity(days, far, run_end)
        if best is None or candidate.efficiency > best.efficiency:
            best = candidate

    return best


def _scan_opportunities(day_map: DayMap, max_bridge_days: int) -> list[BridgeOpportunity]:
    days = list(day_map.values())
    free = [d.is_free for d in days]

    opportunities: list[BridgeOpportunity] = []
    for i in range(len(days)):
        if not free[i]:
            continue
        opp = _explore(days, free, i, max_bridge_days)
        # A leave day that only buys itself back is not worth proposing
        if opp is not None and opp.efficiency > 1:
            opportunities.append(opp)
    return opportunities


def _check_max_bridge_days(max_bridge_days: int) -> None:
    if max_bridge_days < 1:
        raise InvalidArgumentError(f"max_bridge_days must be at least 1, got {max_bridge_days}.")


def find_bridge_opportunities(
    year: int,
    holidays: Iterable[Holiday],
    max_bridge_days: int = DEFAULT_MAX_BRIDGE_DAYS,
) -> list[BridgeOpportunity]:
    """Find every way to join a run of free days to a neighbouring one.

    For each free day the surrounding free run is located, then bridges of
    1..*max_bridge_days* working days are tried forwards and backwards.  The
    most efficient candidate represents the run; equal efficiencies keep
    the first one found.  Runs are revisited from each of their days, so
    the returned list contains duplicates; see
    :func:`deduplicate_opportunities`.
    """
    _check_max_bridge_days(max_bridge_days)
    day_map = build_year_day_map(year, holidays)
    opportunities = _scan_opportunities(day_map, max_bridge_days)
    logger.debug("Found %d bridge candidates in %d", len(opportunities), year)
    return opportunities


def deduplicate_opportunities(
    opportunities: Iterable[BridgeOpportunity],
) -> list[BridgeOpportunity]:
    """Keep the most efficient opportunities whose spans do not overlap."""
    result: list[BridgeOpportunity] = []
    claimed: set[datetime.date] = set()

    for opp in sorted(opportunities, key=_by_efficiency):
        span = _span(opp.start_date, opp.end_date)
        if any(d in claimed for d in span):
            continue
        result.append(opp)
        claimed.update(span)

    return result


def _span(start: datetime.date, end: datetime.date) -> list[datetime.date]:
    return [start + datetime.timedelta(days=i) for i in range((end - start).days + 1)]


# ---------------------------------------------------------------------------
# Allocation
# ---------------------------------------------------------------------------


def _make_period(opp: BridgeOpportunity, day_map: DayMap) -> VacationPeriod:
    days = [day_map[d] for d in _span(opp.start_date, opp.end_date) if d in day_map]
    return VacationPeriod(
        start_date=opp.start_date,
        end_date=opp.end_date,
        total_days=opp.total_days_off,
        leave_days_used=opp.leave_days_needed,
        weekend_days=sum(1 for d in days if d.is_weekend),
        holiday_days=sum(1 for d in days if d.is_holiday),
        holiday_names=tuple(d.holiday_name for d in days if d.holiday_name),
        efficiency=opp.efficiency,
    )


def allocate_periods(
    opportunities: Iterable[BridgeOpportunity],
    day_map: DayMap,
    budget: int,
    policy: Policy = Policy.DEFAULT,
    max_consecutive_days: int = DEFAULT_MAX_CONSECUTIVE_DAYS,
) -> tuple[tuple[VacationPeriod, ...], int]:
    """Greedily pick non-overlapping opportunities within *budget*.

    Opportunities are visited in *policy* order.  One is skipped when it
    needs more leave than remains, is longer than *max_consecutive_days*,
    or touches a day already taken by an accepted period.

    Returns the accepted periods sorted by start date and the unspent budget.
    """
    remaining = budget
    claimed: set[datetime.date] = set()
    periods: list[VacationPeriod] = []

    for opp in sorted(opportunities, key=policy.sort_key):
        if remaining <= 0:
            break
        if opp.leave_days_needed > remaining:
            continue
        if opp.total_days_off > max_consecutive_days:
            continue
        span = _span(opp.start_date, opp.end_date)
        if any(d in claimed for d in span):
            continue

        claimed.update(span)
        periods.append(_make_period(opp, day_map))
        remaining -= opp.leave_days_needed

    periods.sort(key=lambda p: p.start_date)
    return tuple(periods), remaining


# ---------------------------------------------------------------------------
# Summary
# ---------------------------------------------------------------------------


def summarize(
    periods: Sequence[VacationPeriod],
    budget: int,
    remaining: int,
) -> OptimizationResult:
    """Aggregate accepted periods into an :class:`OptimizationResult`."""
    total_days_off = sum(p.total_days for p in periods)
    leave_days_used = budget - remaining
    efficiency = total_days_off / leave_days_used if leave_days_used > 0 else 0.0

    if not periods:
        summary = NO_OPPORTUNITIES_SUMMARY
    else:
        bonus = round((efficiency - 1) * 100)
        longest = max(p.total_days for p in periods)
        n = len(periods)
        summary = (
            f"Using {leave_days_used} leave days, you can get {total_days_off} days off "
            f"({bonus}% bonus). That's {n} vacation period{'s' if n > 1 else ''}, "
            f"with the longest being {longest} days."
        )

    return OptimizationResult(
        total_days_off=total_days_off,
        leave_days_used=leave_days_used,
        efficiency=efficiency,
        periods=tuple(periods),
        summary=summary,
    )


# ---------------------------------------------------------------------------
# Entry point
# ---------------------------------------------------------------------------


def optimize_leave_plan(
    year: int,
    holidays: Iterable[Holiday],
    available_leave_days: int,
    *,
    policy: Policy = Policy.DEFAULT,
    max_consecutive_days: int = DEFAULT_MAX_CONSECUTIVE_DAYS,
    max_bridge_days: int = DEFAULT_MAX_BRIDGE_DAYS,
) -> OptimizationResult:
    """Recommend where to spend *available_leave_days* in *year*.

    Raises :class:`InvalidArgumentError` for a negative budget, a malformed
    year, or non-positive ``max_consecutive_days`` / ``max_bridge_days``.
    An empty holiday list is valid and bridges weekends only.
    """
    validate_year(year)
    if isinstance(available_leave_days, bool) or not isinstance(available_leave_days, int):
        raise InvalidArgumentError(
            f"Leave budget must be an integer, got {available_leave_days!r}."
        )
    if available_leave_days < 0:
        raise InvalidArgumentError(
            f"Leave budget cannot be negative, got {available_leave_days}."
        )
    if max_consecutive_days < 1:
        raise InvalidArgumentError(
            f"max_consecutive_days must be at least 1, got {max_consecutive_days}."
        )
    _check_max_bridge_days(max_bridge_days)

    day_map = build_year_day_map(year, holidays)
    candidates = _scan_opportunities(day_map, max_bridge_days)
    opportunities = deduplicate_opportunities(candidates)
    logger.debug(
        "%d candidates reduced to %d non-overlapping opportunities",
        len(candidates),
        len(opportunities),
    )

    periods, remaining = allocate_periods(
        opportunities,
        day_map,
        available_leave_days,
        policy=policy,
        max_consecutive_days=max_consecutive_days,
    )
    logger.debug(
        "Policy %s accepted %d periods, %d of %d leave days left",
        policy.value,
        len(periods),
        remaining,
        available_leave_days,
    )
    return summarize(periods, available_leave_days, remaining)


# ---------------------------------------------------------------------------
# Output formatting
# ---------------------------------------------------------------------------


def _date_range(start: datetime.date, end: datetime.date) -> str:
    if start == end:
        return start.strftime("%a, %b %d")
    return f"{start.strftime('%a, %b %d')} -> {end.strftime('%a, %b %d')}"


def format_result(result: OptimizationResult, budget: int | None = None) -> str:
    """Return a human-readable summary of an optimization result."""
    lines: list[str] = []
    w = 64

    lines.append("")
    lines.append("=" * w)
    lines.append("  RECOMMENDED PLAN")
    lines.append("=" * w)

    used = f"{result.leave_days_used}"
    if budget is not None:
        used += f" / {budget}"
    lines.append(f"  Leave days used: {used}")
    lines.append(f"  Total days off: {result.total_days_off}")
    if result.leave_days_used > 0:
        lines.append(
            f"  Efficiency: {result.efficiency:.1f}x (days off per leave day)"
        )
    lines.append("")
    lines.append(f"  {result.summary}")
    lines.append("")

    if not result.periods:
        return "\n".join(lines)

    lines.append("  Vacation Periods:")
    lines.append("  " + "-" * (w - 4))

    for i, period in enumerate(result.periods, 1):
        n = period.total_days
        lines.append(
            f"  {i:>2}. {_date_range(period.start_date, period.end_date)}  "
            f"({n} day{'s' if n != 1 else ''}, {period.efficiency:.1f}x)"
        )

        parts: list[str] = [f"{period.leave_days_used} leave"]
        if period.holiday_days:
            parts.append(f"{period.holiday_days} holiday{'s' if period.holiday_days > 1 else ''}")
        if period.weekend_days:
            parts.append(f"{period.weekend_days} weekend")
        lines.append(f"      {' + '.join(parts)}")
        if period.holiday_names:
            lines.append(f"      {', '.join(period.holiday_names)}")
        lines.append("")

    return "\n".join(lines)


def format_calendar_view(days: Sequence[CalendarDay]) -> str:
    """Return a month-by-month calendar highlighting leave days and holidays.

    *days* is the output of :func:`leaveplan.daymap.materialize_calendar`.
    """
    by_date = {d.date: d for d in days}
    active_months = {d.date.month for d in days if d.is_leave_day or d.is_holiday}

    if not active_months:
        return ""

    year = days[0].date.year
    lines: list[str] = [
        "",
        f"  Calendar View {year}",
        "  Legend: L=Leave day  H=Holiday",
        "",
    ]

    cal = calendar.Calendar(firstweekday=0)

    for month in sorted(active_months):
        lines.append(f"  {calendar.month_name[month]} {year}")
        lines.append("  Mo  Tu  We  Th  Fr  Sa  Su")

        row = ""
        for day_num, weekday in cal.itermonthdays2(year, month):
            if day_num == 0:
                row += "    "
            else:
                day = by_date[datetime.date(year, month, day_num)]
                if day.is_leave_day:
                    cell = f" {day_num:>2}L"
                elif day.is_holiday:
                    cell = f" {day_num:>2}H"
                else:
                    cell = f"  {day_num:>2}"
                row += cell

            if weekday == 6:
                lines.append(row)
                row = ""

        if row.strip():
            lines.append(row)
        lines.append("")

    return "\n".join(lines)
