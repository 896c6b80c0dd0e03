"""Italian date/time extraction.

Dates are resolved by an ordered list of resolvers; the first one that
matches wins, even when a later one would also match:

1. relative days: oggi, domani, dopodomani
2. weekday names (next future occurrence)
3. numeric dates: 6/1, 06-01-2025, 6/1/25
4. month-name dates: 6 gennaio, 15 marzo 2025

A time of day ("alle 15", "ore 8.30", "h14", "15:30") is looked up
separately and applied to the resolved date. All computation happens in
the reference timezone; results are returned in UTC.
"""

import logging
import re
from collections.abc import Callable
from dataclasses import dataclass
from datetime import UTC, date, datetime, timedelta

import pytz

from azione.config import settings

logger = logging.getLogger(__name__)

# Weekday index (Monday=0) per Italian name; order matters for matching
WEEKDAYS: dict[str, int] = {
    "lunedì": 0,
    "lunedi": 0,
    "lun": 0,
    "martedì": 1,
    "martedi": 1,
    "mart": 1,
    "mar": 1,
    "mercoledì": 2,
    "mercoledi": 2,
    "merc": 2,
    "mer": 2,
    "giovedì": 3,
    "giovedi": 3,
    "giov": 3,
    "gio": 3,
    "venerdì": 4,
    "venerdi": 4,
    "ven": 4,
    "sabato": 5,
    "sab": 5,
    "domenica": 6,
    "dom": 6,
}

MONTHS: dict[str, int] = {
    "gennaio": 1,
    "febbraio": 2,
    "marzo": 3,
    "aprile": 4,
    "maggio": 5,
    "giugno": 6,
    "luglio": 7,
    "agosto": 8,
    "settembre": 9,
    "ottobre": 10,
    "novembre": 11,
    "dicembre": 12,
    "gen": 1,
    "feb": 2,
    "mar": 3,
    "apr": 4,
    "mag": 5,
    "giu": 6,
    "lug": 7,
    "ago": 8,
    "set": 9,
    "ott": 10,
    "nov": 11,
    "dic": 12,
}

MONTH_NAMES = [
    "gennaio",
    "febbraio",
    "marzo",
    "aprile",
    "maggio",
    "giugno",
    "luglio",
    "agosto",
    "settembre",
    "ottobre",
    "novembre",
    "dicembre",
]

WEEKDAY_NAMES = ["lunedì", "martedì", "mercoledì", "giovedì", "venerdì", "sabato", "domenica"]

RELATIVE_DAYS = [
    (re.compile(r"\boggi\b"), "oggi", 0),
    (re.compile(r"\bdomani\b"), "domani", 1),
    (re.compile(r"\bdopodomani\b"), "dopodomani", 2),
]

WEEKDAY_PATTERNS = [
    (re.compile(rf"\b{re.escape(name)}\b", re.IGNORECASE), name, weekday)
    for name, weekday in WEEKDAYS.items()
]

NUMERIC_DATE_PATTERN = re.compile(r"\b(\d{1,2})[/\-](\d{1,2})(?:[/\-](\d{2,4}))?\b")

MONTH_NAME_DATE_PATTERN = re.compile(
    r"\b(\d{1,2})\s+("
    + "|".join(MONTHS.keys())
    + r")(?:\s+(\d{4}))?\b",
    re.IGNORECASE,
)

TIME_PATTERNS = [
    re.compile(r"\b(?:alle|ore|h\.?)\s*(\d{1,2})(?:[:.](\d{2}))?\b", re.IGNORECASE),
    re.compile(r"\b(\d{1,2})[:.](\d{2})\b"),
    re.compile(r"\b(?:alle|ore)\s*(\d{1,2})\b", re.IGNORECASE),
]

SEGMENT_SEPARATORS = re.compile(r"[,.\n;]")


@dataclass(frozen=True)
class ParsedDateTime:
    """A date/time found in a message.

    `date` is always timezone-aware and expressed in UTC.
    """

    date: datetime
    has_time: bool
    is_confirmed: bool
    original: str


@dataclass(frozen=True)
class ParsedTime:
    hours: int
    minutes: int
    original: str


# A resolver gets the lowercased text and the local "now", and returns the
# local calendar day plus the matched fragment.
Resolver = Callable[[str, datetime], tuple[date, str] | None]


class ItalianDateParser:
    def __init__(self, timezone: str | None = None):
        self.timezone = pytz.timezone(timezone or settings.timezone)
        self.resolvers: tuple[Resolver, ...] = (
            self._resolve_relative_day,
            self._resolve_weekday,
            self._resolve_numeric_date,
            self._resolve_month_name_date,
        )

    def local_now(self, now: datetime | None = None) -> datetime:
        """Current time in the reference timezone.

        A naive `now` is taken to be wall-clock time in the reference zone.
        """
        if now is None:
            return datetime.now(self.timezone)
        if now.tzinfo is None:
            return self.timezone.localize(now)
        return now.astimezone(self.timezone)

    def parse_date(self, text: str, now: datetime | None = None) -> ParsedDateTime | None:
        lowered = text.lower().strip()
        local_now = self.local_now(now)

        for resolver in self.resolvers:
            resolved = resolver(lowered, local_now)
            if resolved is not None:
                break
        else:
            return None

        day, original = resolved
        naive = datetime(day.year, day.month, day.day)
        has_time = False

        parsed_time = parse_time(text)
        if parsed_time:
            naive = naive.replace(hour=parsed_time.hours, minute=parsed_time.minutes)
            has_time = True

        result = ParsedDateTime(
            date=self.timezone.localize(naive).astimezone(UTC),
            has_time=has_time,
            is_confirmed=True,
            original=original,
        )
        logger.debug("Resolved %r to %s (has_time=%s)", original, result.date, has_time)
        return result

    def extract_all_dates(self, text: str, now: datetime | None = None) -> list[ParsedDateTime]:
        """Parse every separator-delimited segment, then the whole text.

        Results are deduplicated by instant and kept in first-seen order.
        """
        results: list[ParsedDateTime] = []
        seen: set[datetime] = set()

        candidates = SEGMENT_SEPARATORS.split(text) + [text]
        for candidate in candidates:
            parsed = self.parse_date(candidate, now)
            if parsed and parsed.date not in seen:
                seen.add(parsed.date)
                results.append(parsed)

        return results

    def _resolve_relative_day(self, text: str, now: datetime) -> tuple[date, str] | None:
        for pattern, name, offset in RELATIVE_DAYS:
            if pattern.search(text):
                return now.date() + timedelta(days=offset), name
        return None

    def _resolve_weekday(self, text: str, now: datetime) -> tuple[date, str] | None:
        for pattern, name, weekday in WEEKDAY_PATTERNS:
            if pattern.search(text):
                days_ahead = weekday - now.weekday()
                if days_ahead <= 0:
                    days_ahead += 7
                return now.date() + timedelta(days=days_ahead), name
        return None

    def _resolve_numeric_date(self, text: str, now: datetime) -> tuple[date, str] | None:
        match = NUMERIC_DATE_PATTERN.search(text)
        if not match:
            return None

        day = int(match.group(1))
        month = int(match.group(2))
        year = int(match.group(3)) if match.group(3) else now.year
        if year < 100:
            year += 2000

        try:
            return date(year, month, day), match.group(0)
        except ValueError:
            logger.debug("Ignoring impossible date %r", match.group(0))
            return None

    def _resolve_month_name_date(self, text: str, now: datetime) -> tuple[date, str] | None:
        match = MONTH_NAME_DATE_PATTERN.search(text)
        if not match:
            return None

        day = int(match.group(1))
        month = MONTHS[match.group(2).lower()]
        year = int(match.group(3)) if match.group(3) else now.year

        try:
            return date(year, month, day), match.group(0)
        except ValueError:
            logger.debug("Ignoring impossible date %r", match.group(0))
            return None

    def to_local(self, value: datetime) -> datetime:
        if value.tzinfo is None:
            value = value.replace(tzinfo=UTC)
        return value.astimezone(self.timezone)

    def format_date(self, value: datetime, with_weekday: bool = False) -> str:
        """Format as "6 gennaio 2025" (or "lunedì 6 gennaio 2025")."""
        local = self.to_local(value)
        formatted = f"{local.day} {MONTH_NAMES[local.month - 1]} {local.year}"
        if with_weekday:
            formatted = f"{WEEKDAY_NAMES[local.weekday()]} {formatted}"
        return formatted

    def format_datetime(self, value: datetime) -> str:
        """Format as "6 gennaio 2025 alle 15:00"."""
        return f"{self.format_date(value)} alle {self.format_time(value)}"

    def format_time(self, value: datetime) -> str:
        return self.to_local(value).strftime("%H:%M")


def parse_time(text: str) -> ParsedTime | None:
    """Find a time of day; out-of-range values fall through to the next pattern."""
    lowered = text.lower()

    for pattern in TIME_PATTERNS:
        match = pattern.search(lowered)
        if match:
            groups = match.groups()
            hours = int(groups[0])
            minutes = int(groups[1]) if len(groups) > 1 and groups[1] else 0

            if 0 <= hours <= 23 and 0 <= minutes <= 59:
                return ParsedTime(hours=hours, minutes=minutes, original=match.group(0))

    return None


# Module-level singleton
_date_parser: ItalianDateParser | None = None


def get_date_parser(timezone: str | None = None) -> ItalianDateParser:
    """Get the shared parser; passing a timezone replaces it."""
    global _date_parser
    if _date_parser is None or timezone is not None:
        _date_parser = ItalianDateParser(timezone)
    return _date_parser


def parse_date(text: str, now: datetime | None = None) -> ParsedDateTime | None:
    return get_date_parser().parse_date(text, now)


def extract_all_dates(text: str, now: datetime | None = None) -> list[ParsedDateTime]:
    return get_date_parser().extract_all_dates(text, now)


def format_date_it(value: datetime) -> str:
    return get_date_parser().format_date(value)


def format_datetime_it(value: datetime) -> str:
    return get_date_parser().format_datetime(value)


def format_time_it(value: datetime) -> str:
    return get_date_parser().format_time(value)
