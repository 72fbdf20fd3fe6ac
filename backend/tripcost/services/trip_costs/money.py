"""Money and duration helpers shared by every cost line."""

import math


def round_money(value: float | None) -> float:
    """Round half-up to cents.

    Applied at every aggregation step so totals reproduce line by line.
    """
    if not value:
        return 0.0
    return math.floor(value * 100 + 0.5) / 100


def percent_of(amount: float, percent: float) -> float:
    return round_money(amount * percent / 100)


def format_hours(decimal_hours: float | None) -> str:
    """Render 14.3 as "14 hours 18 minutes"."""
    if not decimal_hours:
        return "0 hours"
    hours = math.floor(decimal_hours)
    minutes = round((decimal_hours - hours) * 60)
    if minutes == 60:
        hours, minutes = hours + 1, 0
    if hours > 0 and minutes > 0:
        return f"{plural(hours, 'hour')} {plural(minutes, 'minute')}"
    if hours > 0:
        return plural(hours, "hour")
    return plural(minutes, "minute")


def plural(count: int, word: str) -> str:
    return f"{count} {word}{'s' if count != 1 else ''}"
