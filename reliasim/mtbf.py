"""Failure rate to mean-time-between-failures conversion for display."""

from __future__ import annotations

from enum import IntEnum

from reliasim.config import RELIABILITY_CONFIG


class MTBFUnit(IntEnum):
    """Display units for MTBF, ordered from smallest to largest."""

    SECONDS = 0
    MINUTES = 1
    HOURS = 2
    DAYS = 3
    MONTHS = 4
    YEARS = 5


_UNIT_SECONDS = {
    MTBFUnit.SECONDS: 1.0,
    MTBFUnit.MINUTES: 60.0,
    MTBFUnit.HOURS: 3600.0,
    MTBFUnit.DAYS: 86400.0,
    MTBFUnit.MONTHS: 30.0 * 86400.0,
    MTBFUnit.YEARS: 365.0 * 86400.0,
}

_UNIT_NAMES = {
    MTBFUnit.SECONDS: ("seconds", "s"),
    MTBFUnit.MINUTES: ("minutes", "m"),
    MTBFUnit.HOURS: ("hours", "h"),
    MTBFUnit.DAYS: ("days", "d"),
    MTBFUnit.MONTHS: ("months", "mo"),
    MTBFUnit.YEARS: ("years", "y"),
}


def failure_rate_to_mtbf(failure_rate: float, units: MTBFUnit = MTBFUnit.SECONDS) -> float:
    """Return MTBF in ``units`` for a per-second failure rate.

    Rates below the configured minimum (including zero) are raised to it so the
    result stays finite.
    """
    rate = max(float(failure_rate), RELIABILITY_CONFIG.min_failure_rate)
    return (1.0 / rate) / _UNIT_SECONDS[MTBFUnit(units)]


def failure_rate_to_mtbf_string(
    failure_rate: float,
    units: MTBFUnit = MTBFUnit.SECONDS,
    maximum: int = 999,
    short_form: bool = False,
) -> str:
    """Format a failure rate as MTBF, escalating units to keep the number small.

    Starting at ``units``, larger units are tried while the value exceeds
    ``maximum``. The largest unit is used as is, however big the value.

    Examples:
        0.01 -> "100.00 seconds"; 1e-5 -> "27.78 hours"; 1e-5 short -> "27.78h".
    """
    unit = MTBFUnit(units)
    mtbf = failure_rate_to_mtbf(failure_rate, unit)
    while mtbf > maximum and unit < MTBFUnit.YEARS:
        unit = MTBFUnit(unit + 1)
        mtbf = failure_rate_to_mtbf(failure_rate, unit)

    long_name, short_name = _UNIT_NAMES[unit]
    if short_form:
        return f"{mtbf:.2f}{short_name}"
    return f"{mtbf:.2f} {long_name}"
