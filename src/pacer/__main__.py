"""PACER CLI Entry Point.

Usage:
    pacer                       Refresh once and show the pacing bar
    pacer status                Same as above
    pacer pace --used N         Offline pacing for a given usage
    pacer watch                 Refresh periodically
    pacer config show           Show effective configuration
    pacer config set KEY VALUE  Persist a setting (e.g. usage.monthly_limit 500)
    pacer init                  Initialize .pacer directory
    pacer logs                  Show recent log entries
"""

import argparse
import json
import sys
from datetime import date, datetime

from . import __version__
from .config import Config, ensure_pacer_dir, is_valid_limit, load_config, save_setting
from .display import StatusDisplay, build_status
from .pacing import CalendarContext, calculate_pacing
from .refresher import Refresher


EXIT_OK = 0
EXIT_ERROR = 1
EXIT_NEEDS_TOKEN = 3


def _print_status(status: StatusDisplay, as_json: bool) -> int:
    if as_json:
        print(json.dumps(status.to_dict(), indent=2, ensure_ascii=False))
    else:
        print(status.text)
        if status.tooltip:
            print(status.tooltip)

    if status.needs_token:
        return EXIT_NEEDS_TOKEN
    if status.result is None and status.is_error:
        return EXIT_ERROR
    return EXIT_OK


def cmd_status(args, config: Config) -> int:
    """Refresh once against the usage source."""
    ensure_pacer_dir(config)
    refresher = Refresher(config)
    return _print_status(refresher.refresh(), args.json)


def _parse_date(value: str) -> date:
    try:
        return datetime.strptime(value, "%Y-%m-%d").date()
    except ValueError:
        raise argparse.ArgumentTypeError(f"invalid date (expected YYYY-MM-DD): {value}")


def cmd_pace(args, config: Config) -> int:
    """Offline pacing computation."""
    monthly_limit = args.limit if args.limit is not None else config.usage.monthly_limit
    if not is_valid_limit(monthly_limit):
        print(f"Error: monthly limit must be a positive number, got {monthly_limit}", file=sys.stderr)
        return EXIT_ERROR

    today = args.date or date.today()
    cal = CalendarContext.for_date(today)
    result = calculate_pacing(args.used, monthly_limit, cal)
    status = build_status(result, show_zone=config.display.show_zone)

    if args.json:
        data = status.to_dict()
        data["date"] = today.isoformat()
        data["day"] = cal.current_day
        data["days_in_month"] = cal.days_in_month
        print(json.dumps(data, indent=2, ensure_ascii=False))
        return EXIT_OK

    print(f"Day {cal.current_day} of {cal.days_in_month}")
    print(result.progress_bar)
    print(f"Zone:   {result.zone.value}")
    print(status.tooltip)
    return EXIT_OK


def cmd_watch(args, config: Config) -> int:
    """Refresh periodically."""
    ensure_pacer_dir(config)
    refresher = Refresher(config)
    interval = args.interval * 60 if args.interval is not None else None

    def on_update(status: StatusDisplay) -> None:
        stamp = datetime.now().strftime("%H:%M:%S")
        if args.json:
            print(json.dumps({"ts": stamp, **status.to_dict()}, ensure_ascii=False), flush=True)
        else:
            detail = status.tooltip.replace("\n", " | ")
            print(f"[{stamp}] {status.text}  {detail}", flush=True)

    try:
        refresher.watch(iterations=args.count, on_update=on_update, interval_seconds=interval)
    except KeyboardInterrupt:
        refresher.stop()

    last = refresher.last_status
    if last is not None and last.needs_token:
        return EXIT_NEEDS_TOKEN
    return EXIT_OK


def _parse_value(raw: str):
    """Parse a CLI config value as JSON when possible, else keep the string."""
    try:
        return json.loads(raw)
    except json.JSONDecodeError:
        return raw


def cmd_config(args, config: Config) -> int:
    """Show or set configuration."""
    if args.config_action == "show":
        data = config.to_dict()
        if args.json:
            print(json.dumps(data, indent=2))
        else:
            print(f"Config file: {config.config_path}")
            print("-" * 40)
            for section, values in data.items():
                print(f"[{section}]")
                for key, value in values.items():
                    print(f"  {key} = {value!r}")
        return EXIT_OK

    # set
    if not args.key or args.value is None:
        print("Error: Use: pacer config set SECTION.KEY VALUE", file=sys.stderr)
        return EXIT_ERROR
    if "." not in args.key:
        print(f"Error: Key must be SECTION.KEY, got {args.key}", file=sys.stderr)
        return EXIT_ERROR

    section, key = args.key.split(".", 1)
    value = _parse_value(args.value)
    if (section, key) == ("usage", "monthly_limit") and not is_valid_limit(value):
        print(f"[X] monthly_limit must be a positive number, got {args.value}")
        return EXIT_ERROR

    try:
        save_setting(config, section, key, value)
    except KeyError as e:
        print(f"[X] {e.args[0]}")
        return EXIT_ERROR
    except IOError as e:
        print(f"[X] Failed to save config: {e}")
        return EXIT_ERROR

    print(f"[OK] {section}.{key} = {value!r}")
    return EXIT_OK


def cmd_init(args, config: Config) -> int:
    """Initialize .pacer directory."""
    ensure_pacer_dir(config)
    print(f"[OK] Initialized {config.pacer_dir}")
    return EXIT_OK


def cmd_logs(args, config: Config) -> int:
    """Show recent log entries."""
    from .utils.logging import JsonlLogger

    logger = JsonlLogger(config.pacer_dir / "logs" / "pacer.jsonl")
    entries = logger.read_recent(args.limit or 20)

    if args.json:
        print(json.dumps(entries, indent=2, ensure_ascii=False))
        return EXIT_OK

    if not entries:
        print("No log entries")
        return EXIT_OK

    for entry in entries:
        ts = entry.get("ts", "?")[:19]
        event = entry.get("event", "unknown")
        if event == "refresh_end":
            print(
                f"{ts}  {event}: {entry.get('zone')} "
                f"used {entry.get('used_units')}/{entry.get('monthly_limit')} "
                f"buffer {entry.get('buffer')}"
            )
        elif event == "error":
            print(f"{ts}  {event}: {entry.get('error')}")
        else:
            print(f"{ts}  {event}")
    return EXIT_OK


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="pacer",
        description="Track a monthly request quota against a linear daily pace",
    )
    parser.add_argument(
        "-V", "--version",
        action="version",
        version=f"pacer {__version__}",
    )
    parser.add_argument(
        "--json",
        action="store_true",
        help="Output in JSON format",
    )

    subparsers = parser.add_subparsers(dest="command")

    # pacer status (default when no command)
    status_parser = subparsers.add_parser("status", help="Refresh once and show the pacing bar")
    status_parser.add_argument("--json", action="store_true")

    # pacer pace
    pace_parser = subparsers.add_parser("pace", help="Offline pacing for a given usage")
    pace_parser.add_argument("--used", type=float, required=True, help="Units used so far this month")
    pace_parser.add_argument("--limit", type=float, help="Monthly limit (defaults to usage.monthly_limit)")
    pace_parser.add_argument("--date", type=_parse_date, help="Date to pace for, YYYY-MM-DD (defaults to today)")
    pace_parser.add_argument("--json", action="store_true")

    # pacer watch
    watch_parser = subparsers.add_parser("watch", help="Refresh periodically")
    watch_parser.add_argument("--interval", type=float, metavar="MIN", help="Minutes between refreshes")
    watch_parser.add_argument("--count", "-n", type=int, help="Stop after N refreshes")
    watch_parser.add_argument("--json", action="store_true")

    # pacer config
    config_parser = subparsers.add_parser("config", help="Configuration commands")
    config_parser.add_argument(
        "config_action",
        choices=["show", "set"],
        help="Config action: show (effective config), set (persist SECTION.KEY VALUE)",
    )
    config_parser.add_argument("key", nargs="?", help="SECTION.KEY (for 'set')")
    config_parser.add_argument("value", nargs="?", help="Value (for 'set'); parsed as JSON when possible")
    config_parser.add_argument("--json", action="store_true")

    # pacer init
    subparsers.add_parser("init", help="Initialize .pacer directory")

    # pacer logs
    logs_parser = subparsers.add_parser("logs", help="Show recent log entries")
    logs_parser.add_argument("--limit", "-n", type=int, help="Limit entries")
    logs_parser.add_argument("--json", action="store_true")

    return parser


def main() -> int:
    """Main entry point."""
    parser = build_parser()
    args = parser.parse_args()

    try:
        config = load_config()
    except Exception as e:
        print(f"Error initializing PACER: {e}", file=sys.stderr)
        return EXIT_ERROR

    if args.command is None or args.command == "status":
        return cmd_status(args, config)
    elif args.command == "pace":
        return cmd_pace(args, config)
    elif args.command == "watch":
        return cmd_watch(args, config)
    elif args.command == "config":
        return cmd_config(args, config)
    elif args.command == "init":
        return cmd_init(args, config)
    elif args.command == "logs":
        return cmd_logs(args, config)
    else:
        parser.print_help()
        return EXIT_OK


if __name__ == "__main__":
    sys.exit(main())
