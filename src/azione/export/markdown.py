from datetime import UTC, datetime

from azione.schemas import AnalysisResult, CalendarEvent, NextStep, Priority, Replies, Task
from azione.services.dates import ItalianDateParser, get_date_parser

PRIORITY_MARKERS: dict[Priority, str] = {
    Priority.HIGH: "🔴",
    Priority.MEDIUM: "🟡",
    Priority.LOW: "🟢",
}


def generate_analysis_markdown(
    result: AnalysisResult,
    raw_text: str,
    person_name: str | None = None,
    generated_at: datetime | None = None,
    date_parser: ItalianDateParser | None = None,
) -> str:
    """Full analysis as a Markdown document."""
    date_parser = date_parser or get_date_parser()
    generated = date_parser.format_datetime(generated_at or datetime.now(UTC))

    sections = ["# Analisi Messaggio", f"*Generato il {generated}*"]
    if person_name:
        sections.append(f"**Da:** {person_name}")
    sections.append("")

    sections += ["## Messaggio Originale", "```", raw_text, "```", ""]

    sections.append("## Task")
    if result.tasks:
        sections.append(generate_tasks_markdown(result.tasks, date_parser))
    else:
        sections.append("*Nessun task rilevato*")
    sections.append("")

    sections += ["## Risposte Pronte", generate_replies_markdown(result.replies), ""]

    if result.event:
        sections += [
            "## Evento Calendario",
            generate_event_markdown(result.event, date_parser),
            "",
        ]

    sections += ["## Prossimo Passo", generate_next_step_markdown(result.next_step)]
    return "\n".join(sections)


def generate_tasks_markdown(
    tasks: list[Task],
    date_parser: ItalianDateParser | None = None,
) -> str:
    if not tasks:
        return "*Nessun task*"

    date_parser = date_parser or get_date_parser()
    lines: list[str] = []

    for task in tasks:
        lines += [
            f"### {PRIORITY_MARKERS[task.priority]} {task.title}",
            "",
            f"- **Priorità:** {task.priority.value}",
        ]
        if task.due_date:
            lines.append(f"- **Scadenza:** {date_parser.format_date(task.due_date)}")
            if task.due_date_reason:
                lines.append(f"  - *{task.due_date_reason}*")
        if task.tags:
            lines.append("- **Tag:** " + ", ".join(f"`{tag.value}`" for tag in task.tags))
        if task.description:
            lines.append(f"- **Note:** {task.description}")
        lines.append("")

    return "\n".join(lines)


def generate_replies_markdown(replies: Replies) -> str:
    blocks = [
        ("📝 Formale", replies.formal),
        ("💬 Cordiale", replies.cordial),
        ("⚡ Sintetica", replies.terse),
    ]
    return "\n\n".join(f"### {heading}\n```\n{text}\n```" for heading, text in blocks)


def generate_event_markdown(
    event: CalendarEvent,
    date_parser: ItalianDateParser | None = None,
) -> str:
    date_parser = date_parser or get_date_parser()
    start = date_parser.format_time(event.start_date)
    end = date_parser.format_time(event.end_date)

    lines = [
        f"**{event.title}**",
        "",
        f"- 📅 **Data:** {date_parser.format_date(event.start_date, with_weekday=True)}",
        f"- ⏰ **Orario:** {start} - {end}",
    ]
    if event.location:
        lines.append(f"- 📍 **Luogo:** {event.location}")
    if not event.is_confirmed:
        lines += ["", "⚠️ *Data/orario da confermare*"]
    if event.notes:
        lines += ["", "**Note:**", event.notes]

    return "\n".join(lines)


def generate_next_step_markdown(next_step: NextStep) -> str:
    lines = [f"**🎯 {next_step.action}**", ""]
    if next_step.checklist:
        lines.append("Checklist:")
        lines += [f"- [ ] {item}" for item in next_step.checklist]
    return "\n".join(lines)
