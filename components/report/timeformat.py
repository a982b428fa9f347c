"""Conversions between ``H:MM`` strings, decimal hours and amounts."""

import math


def hours_to_decimal(value: str) -> float:
    """Parse ``"H:MM"`` or a decimal string into decimal hours."""
    if not value:
        return 0.0

    if ":" in value:
        hours_part, minutes_part = value.split(":", 1)
        hours = _to_int(hours_part)
        minutes = _to_int(minutes_part)
        return (hours * 60 + minutes) / 60

    try:
        return float(value)
    except ValueError:
        return 0.0


def decimal_to_hours(value: float) -> str:
    """Format decimal hours as ``"H"`` or ``"H:MM"``."""
    if not value:
        return "0"
    total_minutes = int(round(value * 60))
    hours, minutes = divmod(total_minutes, 60)
    if minutes == 0:
        return f"{hours}"
    return f"{hours}:{minutes:02d}"


def amount_for_hours(hours: float, hourly_rate: float) -> float:
    """Price hours at the given rate."""
    return round(hours * hourly_rate, 2)


def hours_for_amount(amount: float, hourly_rate: float) -> float:
    """Back-solve hours from a directly entered amount.

    The result is rounded to the nearest minute, not to the ten-minute steps
    used for picked times. A non-positive rate yields zero hours.
    """
    if hourly_rate <= 0 or not math.isfinite(amount):
        return 0.0
    total_hours = amount / hourly_rate
    hours = math.floor(total_hours)
    minutes = int(round((total_hours - hours) * 60))
    if minutes >= 60:
        hours += 1
        minutes = 0
    return hours + minutes / 60


def round_to_ten_minutes(hours: float) -> float:
    """Snap decimal hours to the picker's ten-minute grid."""
    whole = math.floor(hours)
    minutes = int(round((hours - whole) * 60 / 10)) * 10
    return whole + minutes / 60


def _to_int(value: str) -> int:
    try:
        return int(value)
    except ValueError:
        return 0
