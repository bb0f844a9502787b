"""
CLI entry point for daylog. Wires the pipeline: validate -> collect (GitHub, optional notes) -> render -> write
"""

import argparse
import asyncio
import logging
import os
import sys
import webbrowser
from datetime import datetime, timezone

from collector import collect_range, collect_with_notes
from correlate.aggregator import ActivityAggregator
from dates.days import InvalidDateError, parse_date, is_valid_timezone, today_key
from ingest.github import GitHubClient
from notes.parser import parse_notes_file
from report.renderer import render
from throttle.context import ThrottleContext
from throttle.retry import RateLimitController

logger = logging.getLogger("daylog")

DEFAULT_TIMEZONE = 'America/Los_Angeles'
DEFAULT_OUTPUT_FILE = 'output.html'
LOG_FORMAT = '%(asctime)s %(levelname)s %(name)s: %(message)s'


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Summarize your GitHub activity per day, optionally merged with a daily-note dump")
    parser.add_argument("-t", "--token", type=str, default="", help="GitHub personal access token (or set GITHUB_TOKEN env)")
    parser.add_argument("-d", "--date", type=str, default="", help="Single date to collect activity for")
    parser.add_argument("--start-date", type=str, default="", help="Beginning of the date range (requires --end-date)")
    parser.add_argument("--end-date", type=str, default="", help="End of the date range (requires --start-date)")
    parser.add_argument("--notes-file", type=str, default="", help="Daily-note dump file to merge with GitHub activity")
    parser.add_argument("-o", "--output-file", type=str, default=DEFAULT_OUTPUT_FILE, help="Output file path")
    parser.add_argument("--format", type=str, choices=("html", "json"), default="html", help="Output format")
    parser.add_argument(
        "--timezone",
        type=str,
        default=os.getenv("DAYLOG_TIMEZONE", DEFAULT_TIMEZONE),
        help="Timezone you worked from on the given dates (overrides DAYLOG_TIMEZONE env)",
    )
    parser.add_argument("--org", type=str, default="", help="Restrict searches to one GitHub organization")
    # throttling knobs: DAYLOG_MAX_RETRIES, DAYLOG_THROTTLE_BASE, DAYLOG_THROTTLE_INCREMENT env vars set the defaults
    parser.add_argument("--max-retries", type=int, default=None, help="Rate-limit retries per request (overrides DAYLOG_MAX_RETRIES env)")
    parser.add_argument("--throttle-base", type=float, default=None, help="Seconds between search requests (overrides DAYLOG_THROTTLE_BASE env)")
    parser.add_argument("--throttle-increment", type=float, default=None, help="Seconds added per rate-limit retry (overrides DAYLOG_THROTTLE_INCREMENT env)")
    parser.add_argument("--open", action="store_true", help="Open the generated HTML report in the default browser")
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")
    return parser


def _configure_logging(verbose: bool):
    logging.basicConfig(level=logging.DEBUG if verbose else logging.INFO, format=LOG_FORMAT)


def _resolve_token(args, parser):
    """Resolve the token from the CLI flag or GITHUB_TOKEN; parser.error() if neither is set."""
    token = args.token or os.getenv('GITHUB_TOKEN')
    if not token:
        parser.error('Missing GitHub token (CLI flag --token or env GITHUB_TOKEN)')
    args.token = token


def _check_dates(args, parser):
    for option in ('date', 'start_date', 'end_date'):
        value = getattr(args, option)
        if not value:
            continue
        try:
            parse_date(value)
        except InvalidDateError:
            parser.error(f"--{option.replace('_', '-')} {value} is not a valid date")
    if args.start_date and args.end_date and parse_date(args.start_date).date() > parse_date(args.end_date).date():
        parser.error(f"--start-date {args.start_date} is after --end-date {args.end_date}")


def _validate_args(args, parser):
    """Reject bad input before any network call. parser.error() exits with status 2."""
    has_range = bool(args.start_date or args.end_date)
    if bool(args.start_date) != bool(args.end_date):
        parser.error('--start-date and --end-date must be given together')
    modes = [name for name, used in (('--date', bool(args.date)), ('--start-date/--end-date', has_range), ('--notes-file', bool(args.notes_file))) if used]
    if len(modes) > 1:
        parser.error(f"{' and '.join(modes)} cannot be combined")
    _check_dates(args, parser)
    if args.notes_file and not os.path.exists(args.notes_file):
        parser.error(f"Could not find file {args.notes_file}")
    if not is_valid_timezone(args.timezone):
        parser.error(f"Timezone {args.timezone} is not valid")


def _scope(args) -> str:
    if args.notes_file:
        return f"Notes from {args.notes_file}"
    start = args.start_date or args.date or today_key(args.timezone)
    end = args.end_date or args.date or start
    return start if start == end else f"{start} to {end}"


async def run_pipeline(args):
    """Collect and render; returns the rendered report."""
    throttle = ThrottleContext(args.throttle_base, args.throttle_increment)
    controller = RateLimitController(throttle, max_retries=args.max_retries)
    client = GitHubClient(args.token, controller)

    username = await client.get_username()
    aggregator = ActivityAggregator(client, username, args.timezone, throttle, org=args.org or None)

    if args.notes_file:
        notes = parse_notes_file(args.notes_file)
        report = await collect_with_notes(aggregator, args.timezone, notes)
    else:
        start = args.start_date or args.date or today_key(args.timezone)
        end = args.end_date or args.date or start
        report = await collect_range(aggregator, args.timezone, start, end)

    return render(
        report,
        fmt=args.format,
        username=username,
        generated_at=datetime.now(timezone.utc).isoformat(),
        scope=_scope(args),
    )


def _open_file_in_browser(path: str):
    """Open a file URL in the system default web browser."""
    webbrowser.open("file://" + os.path.abspath(path))


def write_output(path: str, rendered: str, open_html: bool = False):
    """Write the rendered report and optionally open it in the browser."""
    out_dir = os.path.dirname(path)
    if out_dir:
        os.makedirs(out_dir, exist_ok=True)
    with open(path, 'w', encoding='utf-8') as fh:
        fh.write(rendered)
    print(f"Wrote report to {path}")
    if open_html:
        try:
            _open_file_in_browser(path)
        except webbrowser.Error:
            print("Failed to open browser automatically; file saved at", path)


def main(argv=None):
    parser = build_parser()
    args = parser.parse_args(argv)
    _configure_logging(args.verbose)
    _resolve_token(args, parser)
    _validate_args(args, parser)

    try:
        rendered = asyncio.run(run_pipeline(args))
    except Exception:
        # nothing is written when collection fails part-way
        logger.exception("Unexpected error while collecting GitHub data")
        sys.exit(1)

    write_output(args.output_file, rendered, open_html=args.open and args.format == 'html')


if __name__ == "__main__":
    main()
