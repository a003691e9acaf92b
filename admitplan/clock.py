"""Sources of "now".

Every top-level operation reads the clock once and passes the captured value
down, so day-boundary arithmetic stays consistent within a call.
"""

from datetime import date, datetime, timedelta
from zoneinfo import ZoneInfo

from admitplan.config import settings


class Clock:
    """Supplies the current local time as a naive datetime."""

    def now(self) -> datetime:
        raise NotImplementedError

    def today(self) -> date:
        return self.now().date()


class SystemClock(Clock):
    """Wall clock read in the configured timezone"""

    def __init__(self, timezone: str = None):
        self.tz = ZoneInfo(timezone or settings.timezone)

    def now(self) -> datetime:
        return datetime.now(self.tz).replace(tzinfo=None)


class FixedClock(Clock):
    """Frozen clock for tests and replays"""

    def __init__(self, moment: datetime):
        self.moment = moment

    def now(self) -> datetime:
        return self.moment

    def advance(self, **delta) -> None:
        self.moment = self.moment + timedelta(**delta)


def default_clock() -> Clock:
    return SystemClock()


def local_now() -> datetime:
    """Column default for timestamps, on the same time base as SystemClock"""
    return default_clock().now()
