"""iCalendar (RFC 5545) export for events and task due dates.

Lines are CRLF-terminated; instants are written in UTC with a trailing Z.
Task due dates become all-day events on the local calendar day.
"""

import re
import unicodedata
from datetime import UTC, datetime

from azione.schemas import CalendarEvent, Priority, Task, generate_id
from azione.services.dates import ItalianDateParser, get_date_parser

PRODID = "-//Messaggio Azione//IT//1.0"

# iCalendar PRIORITY: 1 is the highest, 9 the lowest
TASK_PRIORITIES: dict[Priority, int] = {
    Priority.HIGH: 1,
    Priority.MEDIUM: 5,
    Priority.LOW: 9,
}

SLUG_MAX_LENGTH = 30


def format_ics_datetime(value: datetime) -> str:
    if value.tzinfo is None:
        value = value.replace(tzinfo=UTC)
    return value.astimezone(UTC).strftime("%Y%m%dT%H%M%SZ")


def escape_ics(text: str) -> str:
    return (
        text.replace("\\", "\\\\")
        .replace(";", "\\;")
        .replace(",", "\\,")
        .replace("\n", "\\n")
        .replace("\r", "")
    )


def slugify(text: str) -> str:
    """ASCII slug for filenames: "Caffè con Marco" -> "caffe-con-marco"."""
    ascii_text = unicodedata.normalize("NFKD", text).encode("ascii", "ignore").decode("ascii")
    slug = re.sub(r"[^a-z0-9]+", "-", ascii_text.lower()).strip("-")
    return slug[:SLUG_MAX_LENGTH]


def _calendar(event_lines: list[str]) -> str:
    lines = [
        "BEGIN:VCALENDAR",
        "VERSION:2.0",
        f"PRODID:{PRODID}",
        "CALSCALE:GREGORIAN",
        "METHOD:PUBLISH",
        *event_lines,
        "END:VCALENDAR",
    ]
    return "\r\n".join(lines)


def event_to_vevent(event: CalendarEvent, now: datetime | None = None) -> list[str]:
    lines = [
        "BEGIN:VEVENT",
        f"UID:{generate_id()}",
        f"DTSTAMP:{format_ics_datetime(now or datetime.now(UTC))}",
        f"DTSTART:{format_ics_datetime(event.start_date)}",
        f"DTEND:{format_ics_datetime(event.end_date)}",
        f"SUMMARY:{escape_ics(event.title)}",
    ]
    if event.location:
        lines.append(f"LOCATION:{escape_ics(event.location)}")
    if event.notes:
        lines.append(f"DESCRIPTION:{escape_ics(event.notes)}")
    lines.append("STATUS:CONFIRMED" if event.is_confirmed else "STATUS:TENTATIVE")
    lines.append("END:VEVENT")
    return lines


def task_to_vevent(
    task: Task,
    now: datetime | None = None,
    date_parser: ItalianDateParser | None = None,
) -> list[str] | None:
    """All-day VEVENT on the task's due date; None without one."""
    if task.due_date is None:
        return None

    date_parser = date_parser or get_date_parser()
    due = date_parser.to_local(task.due_date)

    description_parts = [
        task.description,
        f"Priorità: {task.priority.value}",
        f"Scadenza: {task.due_date_reason}" if task.due_date_reason else "",
        f"Tag: {', '.join(tag.value for tag in task.tags)}" if task.tags else "",
    ]
    description = "\n".join(part for part in description_parts if part)

    return [
        "BEGIN:VEVENT",
        f"UID:{generate_id()}",
        f"DTSTAMP:{format_ics_datetime(now or datetime.now(UTC))}",
        f"DTSTART;VALUE=DATE:{due.strftime('%Y%m%d')}",
        f"SUMMARY:{escape_ics('📋 ' + task.title)}",
        f"DESCRIPTION:{escape_ics(description)}",
        f"PRIORITY:{TASK_PRIORITIES[task.priority]}",
        "END:VEVENT",
    ]


def generate_event_ics(event: CalendarEvent, now: datetime | None = None) -> str:
    return _calendar(event_to_vevent(event, now))


def generate_task_ics(
    task: Task,
    now: datetime | None = None,
    date_parser: ItalianDateParser | None = None,
) -> str | None:
    vevent = task_to_vevent(task, now, date_parser)
    if vevent is None:
        return None
    return _calendar(vevent)


def generate_tasks_ics(
    tasks: list[Task],
    now: datetime | None = None,
    date_parser: ItalianDateParser | None = None,
) -> str | None:
    """One calendar with an all-day VEVENT per dated task; None when no task has a due date."""
    event_lines: list[str] = []
    for task in tasks:
        event_lines += task_to_vevent(task, now, date_parser) or []
    if not event_lines:
        return None
    return _calendar(event_lines)
