"""Clock abstractions so date-dependent rules can be tested without wall time."""

from datetime import date, datetime, timedelta, timezone
from functools import lru_cache
from zoneinfo import ZoneInfo


@lru_cache(maxsize=8)
def _get_tz(tz_name):
    return ZoneInfo(tz_name)


class SystemClock:
    """Wall clock in the club's configured timezone."""

    def __init__(self, tz_name='Asia/Shanghai'):
        self.tz_name = tz_name

    def now(self) -> datetime:
        return datetime.now(timezone.utc).astimezone(_get_tz(self.tz_name))

    def today(self) -> date:
        return self.now().date()


class FixedClock:
    """Clock pinned to a given day. Used by tests and backfills."""

    def __init__(self, today: date):
        self._today = today

    def now(self) -> datetime:
        return datetime(self._today.year, self._today.month, self._today.day, 12, 0)

    def today(self) -> date:
        return self._today

    def advance(self, days: int = 1):
        self._today = self._today + timedelta(days=days)


def clock_from_config(app_config):
    """Build the default clock for an app config mapping."""
    return SystemClock(app_config.get('APP_TIMEZONE', 'Asia/Shanghai'))
