"""Cron scheduling — crontab entries for periodic collection."""

from __future__ import annotations

import shlex


def cron_expression(every_minutes: int) -> str:
    """Cron schedule for "every N minutes".

    Sub-hourly intervals must divide the hour evenly; longer ones must
    be whole hours dividing the day, so runs stay evenly spaced.

    Raises:
        ValueError: For intervals cron can't express evenly.
    """
    if every_minutes <= 0:
        raise ValueError("Interval must be a positive number of minutes")
    if every_minutes < 60:
        if 60 % every_minutes:
            raise ValueError(f"{every_minutes} does not divide an hour evenly")
        return "* * * * *" if every_minutes == 1 else f"*/{every_minutes} * * * *"
    if every_minutes % 60:
        raise ValueError("Intervals of an hour or more must be whole hours")
    hours = every_minutes // 60
    if hours == 24:
        return "0 0 * * *"
    if hours > 24 or 24 % hours:
        raise ValueError(f"{hours}h does not divide a day evenly")
    return "0 * * * *" if hours == 1 else f"0 */{hours} * * *"


def cron_line(every_minutes: int, program: str, log_path: str | None = None) -> str:
    """Full crontab line that collects (and stores) a snapshot.

    Args:
        every_minutes: Collection interval.
        program: Path to the ``ocsec`` executable.
        log_path: Where to append output (default: discard).
    """
    command = f"{shlex.quote(program)} --quiet collect"
    redirect = f">> {shlex.quote(log_path)} 2>&1" if log_path else ">/dev/null 2>&1"
    return f"{cron_expression(every_minutes)} {command} {redirect}"
