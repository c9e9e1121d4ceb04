"""Typer CLI for the leave day optimizer."""

from __future__ import annotations

import datetime
import json
import logging
import pathlib
import sys

import typer

from leaveplan.daymap import (
    Holiday,
    InvalidArgumentError,
    materialize_calendar,
    validate_year,
)
from leaveplan.holidays import PRESETS, get_holidays
from leaveplan.optimizer import (
    DEFAULT_MAX_BRIDGE_DAYS,
    DEFAULT_MAX_CONSECUTIVE_DAYS,
    BridgeOpportunity,
    OptimizationResult,
    Policy,
    deduplicate_opportunities,
    find_bridge_opportunities,
    format_calendar_view,
    format_result,
    optimize_leave_plan,
)

app = typer.Typer(
    name="leaveplan",
    help="Leave day optimizer: spend your leave days where they bridge "
    "weekends and holidays into the longest breaks.",
    add_completion=False,
)

POLICY_CHOICES = [p.value for p in Policy]


def _parse_date(value: str) -> datetime.date:
    """Parse a YYYY-MM-DD date string."""
    try:
        return datetime.date.fromisoformat(value)
    except ValueError:
        raise typer.BadParameter(f"Invalid date format {value!r}. Use YYYY-MM-DD.") from None


def _current_year() -> int:
    return datetime.date.today().year


def _fail(message: str) -> typer.Exit:
    typer.echo(f"Error: {message}", err=True)
    return typer.Exit(code=1)


def _configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )


def _collect_holidays(
    country: str | None, year: int, extra: list[str] | None
) -> list[Holiday]:
    """Preset holidays for *country* plus custom dates, sorted and unique."""
    by_date: dict[datetime.date, Holiday] = {}

    if country and country.lower() != "none":
        try:
            preset = get_holidays(country, year)
        except KeyError as exc:
            raise _fail(str(exc.args[0])) from None
        for h in preset:
            by_date[h.date] = h  # type: ignore[index]

    for value in extra or []:
        d = _parse_date(value)
        by_date.setdefault(d, Holiday(d, "Custom holiday", "custom"))

    return [by_date[d] for d in sorted(by_date)]


def _load_config(path: str) -> dict[str, object]:
    """Load an optimize config file (a JSON object)."""
    p = pathlib.Path(path)
    if not p.exists():
        raise _fail(f"Config file not found: {path}")

    try:
        data = json.loads(p.read_text())
    except json.JSONDecodeError as exc:
        raise _fail(f"Invalid JSON in config file: {exc}") from None

    if not isinstance(data, dict):
        raise _fail("Config file must contain a JSON object.")

    return data


def _resolve(value: object, config: dict[str, object], key: str, default: object) -> object:
    """Explicit flag beats config file beats built-in default."""
    if value is not None:
        return value
    return config.get(key, default)


def _require_int(value: object, key: str) -> int:
    # JSON booleans and floats must not slip through as integers
    if isinstance(value, bool) or not isinstance(value, int):
        raise _fail(f"Config value {key!r} must be an integer, got {value!r}.")
    return value


def _check_year(year: int) -> int:
    try:
        return validate_year(year)
    except InvalidArgumentError as exc:
        raise _fail(str(exc)) from None


# ---------------------------------------------------------------------------
# Commands
# ---------------------------------------------------------------------------


@app.command()
def optimize(
    budget: int = typer.Option(
        None,
        "--budget",
        "-b",
        help="Number of leave days available.",
    ),
    year: int = typer.Option(
        None,
        "--year",
        "-y",
        help="Target year. Defaults to the current year.",
    ),
    country: str | None = typer.Option(
        None,
        "--country",
        "-c",
        help=f"Holiday preset ({', '.join(sorted(PRESETS))}). Use 'none' to skip. "
        "Defaults to 'us'.",
    ),
    holiday: list[str] | None = typer.Option(  # noqa: B008
        None,
        "--holiday",
        "-H",
        help="Additional holiday date (YYYY-MM-DD). Repeatable.",
    ),
    policy: str = typer.Option(
        None,
        "--policy",
        "-p",
        help="Selection policy: default, short (long weekends), long (week-long breaks).",
    ),
    max_consecutive: int = typer.Option(
        None,
        "--max-consecutive",
        help=f"Skip breaks longer than this many days. Default {DEFAULT_MAX_CONSECUTIVE_DAYS}.",
    ),
    max_bridge: int = typer.Option(
        None,
        "--max-bridge",
        help=f"Longest run of leave days used as a bridge. Default {DEFAULT_MAX_BRIDGE_DAYS}.",
    ),
    calendar: bool = typer.Option(
        True,
        "--calendar/--no-calendar",
        help="Show month-by-month calendar view.",
    ),
    output_json: bool = typer.Option(
        False,
        "--json",
        help="Output results as JSON.",
    ),
    config: str | None = typer.Option(
        None,
        "--config",
        help="Path to a JSON config file supplying defaults for these options.",
    ),
    verbose: bool = typer.Option(
        False,
        "--verbose",
        "-v",
        help="Log optimizer progress to stderr.",
    ),
) -> None:
    """Recommend where to spend your leave days for maximum time off."""
    _configure_logging(verbose)
    settings = _load_config(config) if config is not None else {}

    resolved_budget = _resolve(budget, settings, "budget", None)
    if resolved_budget is None:
        raise _fail("--budget is required (or set 'budget' in the config file).")

    resolved_year = _resolve(year, settings, "year", None)
    if resolved_year is None:
        resolved_year = _current_year()

    policy_name = str(_resolve(policy, settings, "policy", Policy.DEFAULT.value))
    if policy_name not in POLICY_CHOICES:
        raise _fail(
            f"Invalid policy {policy_name!r}. Choose from: {', '.join(POLICY_CHOICES)}"
        )

    resolved_country = _resolve(country, settings, "country", "us")
    extra = holiday if holiday else list(settings.get("holidays", []))  # type: ignore[call-overload]

    resolved_year = _check_year(_require_int(resolved_year, "year"))
    resolved_budget = _require_int(resolved_budget, "budget")
    max_consecutive_days = _require_int(
        _resolve(max_consecutive, settings, "max_consecutive_days", DEFAULT_MAX_CONSECUTIVE_DAYS),
        "max_consecutive_days",
    )
    max_bridge_days = _require_int(
        _resolve(max_bridge, settings, "max_bridge_days", DEFAULT_MAX_BRIDGE_DAYS),
        "max_bridge_days",
    )

    holidays = _collect_holidays(resolved_country, resolved_year, extra)  # type: ignore[arg-type]

    try:
        result = optimize_leave_plan(
            resolved_year,
            holidays,
            resolved_budget,
            policy=Policy(policy_name),
            max_consecutive_days=max_consecutive_days,
            max_bridge_days=max_bridge_days,
        )
    except InvalidArgumentError as exc:
        raise _fail(str(exc)) from None

    if output_json:
        _print_json(result, resolved_year, resolved_budget, policy_name, holidays)
    else:
        _print_text(result, resolved_year, resolved_budget, holidays, calendar)


def _print_text(
    result: OptimizationResult,
    year: int,
    budget: int,
    holidays: list[Holiday],
    show_calendar: bool,
) -> None:
    w = 64
    typer.echo("=" * w)
    typer.echo("  LEAVE DAY OPTIMIZER")
    typer.echo("=" * w)
    typer.echo(f"  Year:              {year}")
    typer.echo(f"  Leave budget:      {budget} days")
    typer.echo(f"  Public holidays:   {len(holidays)}")
    typer.echo()
    for h in holidays:
        typer.echo(f"    {h.date.strftime('%a, %b %d'):>12}  {h.name}")  # type: ignore[union-attr]

    typer.echo(format_result(result, budget))
    if show_calendar:
        typer.echo(format_calendar_view(materialize_calendar(year, holidays, result)))


def _print_json(
    result: OptimizationResult,
    year: int,
    budget: int,
    policy: str,
    holidays: list[Holiday],
) -> None:
    output = {
        "year": year,
        "leave_budget": budget,
        "policy": policy,
        "holidays": [
            {"date": h.date.isoformat(), "name": h.name, "category": h.category}  # type: ignore[union-attr]
            for h in holidays
        ],
        "total_days_off": result.total_days_off,
        "leave_days_used": result.leave_days_used,
        "efficiency": result.efficiency,
        "summary": result.summary,
        "periods": [
            {
                "start_date": p.start_date.isoformat(),
                "end_date": p.end_date.isoformat(),
                "total_days": p.total_days,
                "leave_days_used": p.leave_days_used,
                "weekend_days": p.weekend_days,
                "holiday_days": p.holiday_days,
                "holidays": list(p.holiday_names),
                "efficiency": p.efficiency,
            }
            for p in result.periods
        ],
    }
    json.dump(output, sys.stdout, indent=2)
    typer.echo()


@app.command()
def opportunities(
    year: int = typer.Option(
        None,
        "--year",
        "-y",
        help="Target year. Defaults to the current year.",
    ),
    country: str = typer.Option(
        "us",
        "--country",
        "-c",
        help=f"Holiday preset ({', '.join(sorted(PRESETS))}). Use 'none' to skip.",
    ),
    holiday: list[str] | None = typer.Option(  # noqa: B008
        None,
        "--holiday",
        "-H",
        help="Additional holiday date (YYYY-MM-DD). Repeatable.",
    ),
    max_bridge: int = typer.Option(
        DEFAULT_MAX_BRIDGE_DAYS,
        "--max-bridge",
        help="Longest run of leave days used as a bridge.",
    ),
    output_json: bool = typer.Option(
        False,
        "--json",
        help="Output results as JSON.",
    ),
) -> None:
    """List non-overlapping bridge opportunities, most efficient first."""
    resolved_year = _check_year(year if year is not None else _current_year())
    holidays = _collect_holidays(country, resolved_year, holiday)

    try:
        found = deduplicate_opportunities(
            find_bridge_opportunities(resolved_year, holidays, max_bridge)
        )
    except InvalidArgumentError as exc:
        raise _fail(str(exc)) from None

    if output_json:
        json.dump([_serialize_opportunity(o) for o in found], sys.stdout, indent=2)
        typer.echo()
        return

    typer.echo(f"  Bridge opportunities — {resolved_year}")
    typer.echo()
    if not found:
        typer.echo("    (none)")
    for o in found:
        span = f"{o.start_date.strftime('%a, %b %d')} -> {o.end_date.strftime('%a, %b %d')}"
        typer.echo(
            f"    {span}  {o.leave_days_needed} leave -> {o.total_days_off} days"
            f"  ({o.efficiency:.1f}x)"
        )


def _serialize_opportunity(o: BridgeOpportunity) -> dict[str, object]:
    return {
        "start_date": o.start_date.isoformat(),
        "end_date": o.end_date.isoformat(),
        "leave_days_needed": o.leave_days_needed,
        "total_days_off": o.total_days_off,
        "efficiency": o.efficiency,
        "holidays": list(o.holiday_names),
    }


@app.command()
def holidays(
    country: str = typer.Option(
        "us",
        "--country",
        "-c",
        help=f"Country preset ({', '.join(sorted(PRESETS))}).",
    ),
    year: int = typer.Option(
        None,
        "--year",
        "-y",
        help="Year to list holidays for. Defaults to the current year.",
    ),
) -> None:
    """List holidays for a country preset."""
    resolved_year = _check_year(year if year is not None else _current_year())

    try:
        preset = get_holidays(country, resolved_year)
    except KeyError as exc:
        raise _fail(str(exc.args[0])) from None

    typer.echo(f"  {PRESETS[country.lower()]} — {resolved_year}")
    typer.echo()
    for h in preset:
        typer.echo(f"    {h.date.strftime('%a, %b %d'):>12}  {h.name}")  # type: ignore[union-attr]


def main() -> None:
    """Entry point for the CLI."""
    app()
