"""Parsing of locale-formatted (day-first) dates into timezone-aware datetimes.

Usage exports write dates as ``"tiistai 1.1.2019 00:00"``: a weekday name,
then day.month.year and a 24-hour clock time. Spot price feeds use UTC ISO
strings such as ``"2019-12-31T23:00:00.000Z"``, which also serve as the
canonical key joining usage to prices.
"""

import re
from datetime import datetime, timezone
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

DATE_PATTERN = re.compile(r"^(\d{1,2})\.(\d{1,2})\.(\d{4})$")
TIME_PATTERN = re.compile(r"^(\d{1,2}):(\d{2})$")


class ParseError(ValueError):
    """Raised when date or time text cannot be turned into a timestamp."""
    pass


def canonical_key(timestamp: datetime) -> str:
    """Canonical UTC string form of a timestamp, e.g. 2019-12-31T23:00:00.000Z."""
    if timestamp.tzinfo is None:
        raise ParseError(f"Timestamp {timestamp} has no timezone")
    utc = timestamp.astimezone(timezone.utc)
    return utc.strftime("%Y-%m-%dT%H:%M:%S.") + f"{utc.microsecond // 1000:03d}Z"


def parse_iso_timestamp(text: str) -> datetime:
    """Parse an ISO timestamp from a spot price feed.

    Accepts a trailing ``Z`` as well as explicit offsets. Naive values are
    rejected since they cannot be placed on the UTC timeline.
    """
    value = text.strip()
    if value.endswith("Z"):
        value = value[:-1] + "+00:00"
    try:
        parsed = datetime.fromisoformat(value)
    except ValueError as e:
        raise ParseError(f"Invalid ISO timestamp {text!r}: {e}") from e
    if parsed.tzinfo is None:
        raise ParseError(f"ISO timestamp {text!r} has no timezone offset")
    return parsed


class TimeParser:
    """Builds timestamps from day-first calendar text in a fixed timezone.

    Wall-clock times that do not exist in the timezone (the hour skipped
    when DST starts) raise ParseError. Ambiguous times (the hour repeated
    when DST ends) resolve to their first occurrence.
    """

    def __init__(self, tz: ZoneInfo | str):
        if isinstance(tz, str):
            try:
                tz = ZoneInfo(tz)
            except (ZoneInfoNotFoundError, ValueError) as e:
                raise ParseError(f"Unknown timezone {tz!r}") from e
        elif not isinstance(tz, ZoneInfo):
            raise ParseError(f"Timezone must be a name or ZoneInfo, not {type(tz).__name__}")
        self.tz = tz

    def parse(self, date_text: str, time_text: str) -> datetime:
        """Parse "D.M.YYYY" and "HH:MM" into an aware datetime."""
        date_match = DATE_PATTERN.match(date_text.strip())
        if not date_match:
            raise ParseError(f"Invalid date {date_text!r}, expected D.M.YYYY")
        time_match = TIME_PATTERN.match(time_text.strip())
        if not time_match:
            raise ParseError(f"Invalid time {time_text!r}, expected HH:MM")

        day, month, year = (int(part) for part in date_match.groups())
        hour, minute = (int(part) for part in time_match.groups())

        try:
            naive = datetime(year, month, day, hour, minute)
        except ValueError as e:
            raise ParseError(f"Invalid date/time {date_text} {time_text}: {e}") from e

        local = naive.replace(tzinfo=self.tz)
        # Round-trip through UTC to detect times skipped by a DST change
        if local.astimezone(timezone.utc).astimezone(self.tz).replace(tzinfo=None) != naive:
            raise ParseError(f"{date_text} {time_text} does not exist in {self.tz.key}")
        return local

    def parse_datetime(self, text: str) -> datetime:
        """Parse "D.M.YYYY HH:MM"."""
        parts = text.split()
        if len(parts) != 2:
            raise ParseError(f"Invalid date/time {text!r}, expected 'D.M.YYYY HH:MM'")
        return self.parse(parts[0], parts[1])

    def parse_usage_date(self, text: str) -> datetime:
        """Parse a usage export date, e.g. "tiistai 1.1.2019 00:00".

        The leading weekday name is dropped whatever the locale.
        """
        parts = text.split()
        if len(parts) < 2:
            raise ParseError(f"Invalid usage date {text!r}")
        return self.parse_datetime(" ".join(parts[1:]))

    def format_timestamp(self, timestamp: datetime) -> str:
        """Format as "D.M.YYYY HH:MM" in this parser's timezone."""
        local = timestamp.astimezone(self.tz)
        return f"{local.day}.{local.month}.{local.year} {local.hour:02d}:{local.minute:02d}"
