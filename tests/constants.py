from datetime import date, datetime, timezone
from decimal import Decimal


def utc_ms(year: int, month: int, day: int, hour: int = 0, minute: int = 0) -> int:
    """Epoch milliseconds for a UTC wall-clock time (the test zone is UTC)."""
    return int(datetime(year, month, day, hour, minute, tzinfo=timezone.utc).timestamp() * 1000)


TEST_LESSON_TYPE = "Reading"
TEST_LESSON_COST = Decimal("50")
TEST_SIGNED_UP_LESSONS = 10

# March 2024 starts on a Friday; its Mondays are the 4th, 11th, 18th and 25th
MARCH_2024_START = "2024-03-01"
MARCH_2024_END = "2024-03-31"
MARCH_2024_MONDAYS = [date(2024, 3, 4), date(2024, 3, 11), date(2024, 3, 18), date(2024, 3, 25)]

TEST_CHECK_IN_TIME = utc_ms(2024, 3, 4, 10, 15)

TEST_CLASSROOM = "Room A"
TEST_SUBJECT = "English"
TEST_TEACHER_NAME = "Ken"
