"""
Streak Logic - pure functions over study dates.

NO database, NO Flask here.
"""
from datetime import date, datetime, timedelta, timezone
from typing import Iterable, Optional, Union


def _to_date(value: Union[date, datetime, str, None]) -> Optional[date]:
    if value is None:
        return None
    if isinstance(value, datetime):
        if value.tzinfo is not None:
            value = value.astimezone(timezone.utc)
        return value.date()
    if isinstance(value, date):
        return value
    try:
        return datetime.fromisoformat(str(value).replace('Z', '+00:00')).date()
    except ValueError:
        return None


def calculate_streak(activity: Iterable[Union[date, datetime, str]]) -> int:
    """
    Number of consecutive days ending at the newest study day.

    Datetimes are reduced to their UTC date; duplicates collapse.

        >>> calculate_streak([date(2024, 1, 3), date(2024, 1, 2), date(2024, 1, 2)])
        2
        >>> calculate_streak([date(2024, 1, 3), date(2024, 1, 1)])
        1
    """
    days = {d for d in (_to_date(v) for v in activity) if d is not None}
    if not days:
        return 0

    check = max(days)
    streak = 0
    while check in days:
        streak += 1
        check -= timedelta(days=1)
    return streak
