import argparse
import logging
import sys

import pytz
from pydantic import ValidationError

from azione.config import settings
from azione.export import (
    generate_analysis_markdown,
    generate_event_ics,
    generate_tasks_csv,
    generate_tasks_ics,
)
from azione.schemas import (
    CONTEXT_LABELS,
    AnalysisInput,
    AnalysisRecord,
    AnalysisResult,
    ContextType,
    SourceType,
)
from azione.sentry import flush as sentry_flush
from azione.sentry import init_sentry
from azione.services.dates import ItalianDateParser

FORMATS = ["json", "markdown", "csv", "ics", "tasks-ics"]

NOTHING_TO_EXPORT = {
    "ics": "Nessun evento rilevato nel messaggio",
    "tasks-ics": "Nessuna scadenza da esportare",
}


def setup_logging() -> None:
    logging.basicConfig(
        level=getattr(logging, settings.log_level.upper(), logging.INFO),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )


def _read_text(value: str) -> str:
    if value == "-":
        return sys.stdin.read()
    return value


def render(
    result: AnalysisResult,
    data: AnalysisInput,
    fmt: str,
    record: AnalysisRecord | None = None,
    date_parser: ItalianDateParser | None = None,
) -> str | None:
    """Render a result in the requested format; None when there is nothing to render."""
    if fmt == "json":
        if record is not None:
            return record.model_dump_json(indent=2)
        return result.model_dump_json(indent=2)
    if fmt == "markdown":
        return generate_analysis_markdown(
            result,
            data.raw_text,
            person_name=data.person_name,
            generated_at=record.created_at if record else None,
            date_parser=date_parser,
        )
    if fmt == "csv":
        return generate_tasks_csv(result.tasks, date_parser=date_parser)
    if fmt == "tasks-ics":
        return generate_tasks_ics(result.tasks, date_parser=date_parser)
    if result.event is None:
        return None
    return generate_event_ics(result.event)


def analyze_message(args: argparse.Namespace) -> int:
    from azione.services.analyses import AnalysisService
    from azione.services.analyzer import AnalyzerOptions, analyze

    try:
        data = AnalysisInput(
            raw_text=_read_text(args.text),
            context_type=ContextType(args.context),
            source_type=SourceType(args.source),
            person_name=args.person,
            role=args.role,
        )
    except ValidationError as e:
        print(f"Error: invalid input\n{e}", file=sys.stderr)
        return 2

    record = None
    if args.save:
        service = AnalysisService()
        record = service.create(data)
        result = record.result
        date_parser = service.date_parser()
    else:
        try:
            options = AnalyzerOptions(
                call_duration_minutes=settings.event_duration_call_min,
                meeting_duration_minutes=settings.event_duration_meet_min,
                timezone=settings.timezone,
            )
        except ValueError as e:
            print(f"Error: invalid configuration: {e}", file=sys.stderr)
            return 1
        result = analyze(data, options)
        date_parser = ItalianDateParser(options.timezone)

    output = render(result, data, args.format, record, date_parser)
    if output is None:
        print(NOTHING_TO_EXPORT[args.format], file=sys.stderr)
        return 1

    print(output)
    if record is not None:
        print(f"\nSaved as {record.id}", file=sys.stderr)
    return 0


def show_history(args: argparse.Namespace) -> int:
    from azione.services.analyses import AnalysisService, result_summary

    context = ContextType(args.context) if args.context else None
    records, total = AnalysisService().list(
        context_type=context,
        search=args.search,
        limit=args.limit,
    )

    if not records:
        print("No saved analyses")
        return 0

    print(f"Showing {len(records)} of {total} analyses:\n")
    for record in records:
        text = record.input.raw_text.replace("\n", " ")
        preview = text if len(text) <= 60 else text[:57] + "..."
        label = CONTEXT_LABELS[record.input.context_type]
        print(f"  {record.id}  {record.created_at:%d/%m/%Y %H:%M}  [{label}]  {preview}")
        print(f"      {result_summary(record.result)}")
    return 0


def show_analysis(args: argparse.Namespace) -> int:
    from azione.services.analyses import AnalysisNotFoundError, AnalysisService

    service = AnalysisService()
    try:
        record = service.get(args.id)
    except AnalysisNotFoundError:
        print(f"Error: analysis {args.id} not found", file=sys.stderr)
        return 1

    output = render(record.result, record.input, args.format, record, service.date_parser())
    if output is None:
        print(NOTHING_TO_EXPORT[args.format], file=sys.stderr)
        return 1

    print(output)
    return 0


def serve(args: argparse.Namespace) -> int:
    import uvicorn

    uvicorn.run(
        "azione.api.app:create_application",
        factory=True,
        host=args.host,
        port=args.port,
        log_level=settings.log_level.lower(),
    )
    return 0


def check_config() -> int:
    print("Messaggio Azione Configuration Check\n")

    timezone_ok = settings.timezone in pytz.all_timezones_set
    durations_ok = settings.event_duration_call_min > 0 and settings.event_duration_meet_min > 0

    checks = [
        (f"Timezone ({settings.timezone})", timezone_ok, True),
        ("Event durations", durations_ok, True),
        (f"Data directory ({settings.data_path})", settings.data_path.exists(), False),
        ("Sentry DSN", settings.has_sentry, False),
    ]

    all_required_ok = True
    for name, configured, required in checks:
        status = "OK" if configured else "MISSING"
        symbol = "+" if configured else "-"
        print(f"  [{symbol}] {name}: {status}")
        if required and not configured:
            all_required_ok = False

    print()
    if all_required_ok:
        print("Required configuration present. Ready to run.")
        return 0

    print("Invalid configuration. Check the AZIONE_* environment variables.")
    return 1


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Turn an Italian message into tasks, replies, an event and a next step"
    )
    subparsers = parser.add_subparsers(dest="command", help="Commands")

    analyze_parser = subparsers.add_parser("analyze", help="Analyze a message")
    analyze_parser.add_argument("text", help="Message text, or - to read from stdin")
    analyze_parser.add_argument(
        "--context",
        default=ContextType.OTHER.value,
        choices=[c.value for c in ContextType],
    )
    analyze_parser.add_argument(
        "--source",
        default=SourceType.OTHER.value,
        choices=[s.value for s in SourceType],
    )
    analyze_parser.add_argument("--person", help="Sender name")
    analyze_parser.add_argument("--role", help="Sender role")
    analyze_parser.add_argument("--format", default="json", choices=FORMATS)
    analyze_parser.add_argument("--save", action="store_true", help="Store the analysis")

    history_parser = subparsers.add_parser("history", help="List saved analyses")
    history_parser.add_argument("--limit", type=int, default=20)
    history_parser.add_argument("--context", choices=[c.value for c in ContextType])
    history_parser.add_argument("--search")

    show_parser = subparsers.add_parser("show", help="Show a saved analysis")
    show_parser.add_argument("id")
    show_parser.add_argument("--format", default="json", choices=FORMATS)

    serve_parser = subparsers.add_parser("serve", help="Start the HTTP API")
    serve_parser.add_argument("--host", default="127.0.0.1")
    serve_parser.add_argument("--port", type=int, default=8000)

    subparsers.add_parser("check", help="Check configuration")

    return parser


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    setup_logging()

    # Initialize Sentry for error tracking (disabled if no DSN configured)
    init_sentry(
        dsn=settings.sentry_dsn if settings.has_sentry else None,
        environment=settings.sentry_environment,
    )

    try:
        if args.command == "analyze":
            return analyze_message(args)
        elif args.command == "history":
            return show_history(args)
        elif args.command == "show":
            return show_analysis(args)
        elif args.command == "serve":
            return serve(args)
        elif args.command == "check":
            return check_config()
        else:
            parser.print_help()
            return 0
    finally:
        # Flush any pending Sentry events before exit
        sentry_flush(timeout=2.0)


if __name__ == "__main__":
    sys.exit(main())
