'''
Time helpers.

Check-in timestamps are epoch milliseconds. Every conversion to a calendar
date or an hour of day goes through the single configured zone.
'''
import time
from datetime import date, datetime
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from ..common.config import settings
from ..common.logger import log


def local_zone() -> ZoneInfo:
    try:
        return ZoneInfo(settings.TIMEZONE)
    except (ZoneInfoNotFoundError, ValueError):
        log.warning(f"Invalid timezone '{settings.TIMEZONE}', defaulting to UTC.")
        return ZoneInfo("UTC")


def now_ms() -> int:
    return int(time.time() * 1000)


def to_local_datetime(timestamp_ms: int) -> datetime:
    return datetime.fromtimestamp(timestamp_ms / 1000, tz=local_zone())


def to_local_date(timestamp_ms: int) -> date:
    return to_local_datetime(timestamp_ms).date()


def today() -> date:
    return datetime.now(local_zone()).date()
