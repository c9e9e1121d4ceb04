"""Leave Day Optimizer.

Recommend where to spend a limited budget of leave days so that, together
with weekends and public holidays, they add up to the longest breaks.
"""

from leaveplan.daymap import (
    CalendarDay,
    Holiday,
    InvalidArgumentError,
    build_year_day_map,
    materialize_calendar,
)
from leaveplan.holidays import get_holidays
from leaveplan.optimizer import (
    BridgeOpportunity,
    OptimizationResult,
    Policy,
    VacationPeriod,
    allocate_periods,
    deduplicate_opportunities,
    find_bridge_opportunities,
    optimize_leave_plan,
    summarize,
)

__all__ = [
    "BridgeOpportunity",
    "CalendarDay",
    "Holiday",
    "InvalidArgumentError",
    "OptimizationResult",
    "Policy",
    "VacationPeriod",
    "allocate_periods",
    "build_year_day_map",
    "deduplicate_opportunities",
    "find_bridge_opportunities",
    "get_holidays",
    "materialize_calendar",
    "optimize_leave_plan",
    "summarize",
]
