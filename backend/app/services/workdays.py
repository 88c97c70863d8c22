"""Working-day calendar for a yearly policy.

A day is a working day when it is neither a holiday nor a weekend day under
the policy's working-days-per-week rule:

    6 days  ->  Sunday off
    5 days  ->  Saturday and Sunday off
    4 days  ->  Friday, Saturday and Sunday off
"""

from __future__ import annotations

from datetime import date, datetime, timedelta
from typing import TYPE_CHECKING, Literal

from pydantic import BaseModel, Field

if TYPE_CHECKING:
    from collections.abc import Iterator

# date.weekday() values (Monday == 0) that are off for each rule.
_WEEKEND_DAYS: dict[int, frozenset[int]] = {
    4: frozenset({4, 5, 6}),
    5: frozenset({5, 6}),
    6: frozenset({6}),
}
_ONE_DAY = timedelta(days=1)


def _as_date(value: date | datetime) -> date:
    """Strip the time of day; holidays and weekends match on calendar date only."""
    if isinstance(value, datetime):
        return value.date()
    return value


class CalendarPolicy(BaseModel):
    """Holiday set plus weekly working-day rule."""

    working_days_per_week: Literal[4, 5, 6] = 5
    holidays: dict[date, str] = Field(default_factory=dict)

    def is_holiday(self, day: date | datetime) -> bool:
        return _as_date(day) in self.holidays

    def is_weekend(self, day: date | datetime) -> bool:
        return _as_date(day).weekday() in _WEEKEND_DAYS[self.working_days_per_week]

    def is_working_day(self, day: date | datetime) -> bool:
        return not self.is_holiday(day) and not self.is_weekend(day)

    def working_days_between(self, from_date: date | datetime, to_date: date | datetime) -> Iterator[date]:
        """Yield each working day in [from_date, to_date]. Nothing when to_date < from_date."""
        current = _as_date(from_date)
        end = _as_date(to_date)
        while current <= end:
            if self.is_working_day(current):
                yield current
            current += _ONE_DAY

    def count_working_days(self, from_date: date | datetime, to_date: date | datetime) -> int:
        """Count working days in the inclusive range."""
        return sum(1 for _ in self.working_days_between(from_date, to_date))
