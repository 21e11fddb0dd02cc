from __future__ import annotations

from datetime import date, timedelta
from typing import TYPE_CHECKING

from leavedesk.services.holiday import holidays_in_range

if TYPE_CHECKING:
    from collections.abc import Collection

    from sqlalchemy.ext.asyncio import AsyncSession

_SATURDAY = 5
_SUNDAY = 6


def calculate_working_days(
    start_date: date,
    end_date: date,
    works_on_saturday: bool,
    holidays: Collection[date],
) -> int:
    """Count billable days in ``[start_date, end_date]``, both ends inclusive.

    Sundays never count. Saturdays count only for employees who work them.
    Any date in ``holidays`` is skipped. An inverted range counts zero.
    """
    total = 0
    current = start_date
    one_day = timedelta(days=1)

    while current <= end_date:
        weekday = current.weekday()
        if weekday == _SUNDAY or (weekday == _SATURDAY and not works_on_saturday):
            current += one_day
            continue
        if current not in holidays:
            total += 1
        current += one_day

    return total


async def count_working_days(
    session: AsyncSession,
    start_date: date,
    end_date: date,
    works_on_saturday: bool,
) -> int:
    """Fetch the active holidays for the range once, then count working days."""
    holidays = await holidays_in_range(session, start_date, end_date)
    return calculate_working_days(start_date, end_date, works_on_saturday, holidays)
