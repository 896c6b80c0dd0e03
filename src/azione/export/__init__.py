"""Export formatters: CSV task lists, iCalendar files and Markdown reports."""

from azione.export.csv_export import generate_tasks_csv
from azione.export.ics import (
    generate_event_ics,
    generate_task_ics,
    generate_tasks_ics,
    slugify,
)
from azione.export.markdown import generate_analysis_markdown

__all__ = [
    "generate_analysis_markdown",
    "generate_event_ics",
    "generate_task_ics",
    "generate_tasks_csv",
    "generate_tasks_ics",
    "slugify",
]
