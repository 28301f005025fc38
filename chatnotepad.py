#!/usr/bin/env python3
"""
chatnotepad.py - command-line front for the editor session.

Runs one transformation against the backend, or inspects / clears the
local command history. Results go to stdout, messages to stderr.
"""

import argparse
import sys
from typing import List, Optional

from core.ledger import SEARCH_FIELDS, STATUS_FILTERS
from core.records import CommandRecord, confidence_band
from core.stats import TIME_RANGES, format_processing_time
from session import EditorSession, build_session
from utils.logger import set_level

APP_NAME = "ChatNotePad"


# --- DISPLAY HELPERS ---
def show_message(message: str) -> str:
    print(f"[{APP_NAME}]: {message}", file=sys.stderr)
    return message


def _describe(record: CommandRecord) -> str:
    when = record.timestamp.astimezone().strftime("%Y-%m-%d %H:%M:%S")
    status = "ok " if record.success else "ERR"
    line = f"{when}  {status}  {record.command}"
    info = record.agent_info
    if info is not None:
        extra = [info.display_model, format_processing_time(info.processing_time_ms)]
        if info.tokens_used:
            extra.append(f"{info.tokens_used} tokens")
        band = confidence_band(info.confidence_score)
        if band:
            extra.append(f"{round(info.confidence_score * 100)}% ({band})")
        line += f"  [{', '.join(extra)}]"
    if record.error:
        line += f"  -- {record.error}"
    return line


# --- SUB-COMMANDS ---
def cmd_transform(session: EditorSession, args) -> int:
    if args.file:
        try:
            with open(args.file, encoding="utf-8") as fh:
                text = fh.read()
        except (OSError, UnicodeDecodeError) as e:
            show_message(f"Cannot read {args.file}: {e}")
            return 1
    else:
        text = sys.stdin.read()

    session.set_original_text(text)
    outcome = session.submit(args.command)
    attempts = 0
    while not outcome.ok and args.retries and attempts < args.retries and session.can_retry:
        attempts += 1
        show_message(f"{outcome.message} Retrying ({attempts}/{args.retries})...")
        outcome = session.retry()

    if outcome.ok:
        sys.stdout.write(outcome.text)
        if not outcome.text.endswith("\n"):
            sys.stdout.write("\n")
        return 0

    show_message(outcome.message)
    if outcome.details:
        show_message(f"Details: {outcome.details}")
    return 1


def cmd_history(session: EditorSession, args) -> int:
    records = session.ledger.search(args.search or "", status=args.status, search_in=args.search_in)
    if args.limit:
        records = records[: args.limit]
    if not records:
        show_message("No commands yet." if not len(session.ledger) else "No commands match your search.")
        return 0
    for record in records:
        print(_describe(record))
    return 0


def cmd_stats(session: EditorSession, args) -> int:
    stats = session.stats(args.range)
    print(f"Commands ({args.range}): {stats.total_commands}")
    print(f"Success rate:  {stats.success_rate:.0f}%")
    print(f"Avg time:      {format_processing_time(stats.avg_processing_time_ms)}")
    if stats.popular_commands:
        print("Popular commands:")
        for item in stats.popular_commands:
            print(f"  {item.count:>3}x  {item.command}  ({item.success_rate:.0f}% ok)")
    if stats.daily_usage:
        print("Last 7 days:")
        for day in stats.daily_usage:
            print(f"  {day.date}  {day.count:>3}  ({day.success_count} ok)")
    return 0


def cmd_clear(session: EditorSession, args) -> int:
    session.clear_history()
    show_message("Command history cleared.")
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="chatnotepad", description=__doc__.strip().splitlines()[0])
    parser.add_argument("-v", "--verbose", action="store_true", help="debug logging")
    sub = parser.add_subparsers(dest="action", required=True)

    p = sub.add_parser("transform", help="transform text with a natural-language command")
    p.add_argument("command", help='e.g. "Make it more formal"')
    p.add_argument("--file", help="read source text from this file instead of stdin")
    p.add_argument("--retries", type=int, default=0, help="retry retryable failures up to N times")
    p.set_defaults(func=cmd_transform)

    p = sub.add_parser("history", help="list past commands, newest first")
    p.add_argument("--status", choices=STATUS_FILTERS, default="all")
    p.add_argument("--search", help="case-insensitive text to look for")
    p.add_argument("--search-in", choices=SEARCH_FIELDS, default="command")
    p.add_argument("--limit", type=int, default=0)
    p.set_defaults(func=cmd_history)

    p = sub.add_parser("stats", help="usage statistics")
    p.add_argument("--range", choices=sorted(TIME_RANGES), default="7d")
    p.set_defaults(func=cmd_stats)

    p = sub.add_parser("clear", help="delete the command history")
    p.set_defaults(func=cmd_clear)
    return parser


def main(argv: Optional[List[str]] = None, session: Optional[EditorSession] = None) -> int:
    args = build_parser().parse_args(argv)
    if args.verbose:
        set_level("DEBUG")
    session = session or build_session()
    return args.func(session, args)


if __name__ == "__main__":
    sys.exit(main())
