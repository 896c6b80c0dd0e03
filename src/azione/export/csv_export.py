import csv
import io

from azione.schemas import Task
from azione.services.dates import ItalianDateParser, get_date_parser

HEADERS = ["Titolo", "Priorità", "Scadenza", "Tag", "Note"]

# Spreadsheet apps need the BOM to read the file as UTF-8
UTF8_BOM = "\ufeff"


def task_notes(task: Task) -> str:
    parts = [task.description]
    if task.due_date_reason:
        parts.append(f"({task.due_date_reason})")
    return " ".join(part for part in parts if part)


def generate_tasks_csv(
    tasks: list[Task],
    with_bom: bool = False,
    date_parser: ItalianDateParser | None = None,
) -> str:
    """Tasks as CSV, one row per task, due dates as dd/mm/YYYY."""
    date_parser = date_parser or get_date_parser()
    buffer = io.StringIO()
    writer = csv.writer(buffer, lineterminator="\n")

    writer.writerow(HEADERS)
    for task in tasks:
        due = date_parser.to_local(task.due_date).strftime("%d/%m/%Y") if task.due_date else ""
        writer.writerow(
            [
                task.title,
                task.priority.value,
                due,
                "; ".join(tag.value for tag in task.tags),
                task_notes(task),
            ]
        )

    content = buffer.getvalue().rstrip("\n")
    return UTF8_BOM + content if with_bom else content
