#!/usr/bin/env python3
"""
Command-line interface for the filterdesk console.

Subcommands drive the same view stores a graphical console would use:
- filterdesk login / register: obtain a session token
- filterdesk rules ...: manage white-traffic filter rules
- filterdesk alerts ...: list, resolve and dismiss alerts
- filterdesk traffic show: traffic analysis for a time range

Usage:
    filterdesk login -u admin -p secret
    filterdesk --token TOKEN rules list
    filterdesk --token TOKEN alerts list --all
    filterdesk --token TOKEN --format table traffic show --range 7d
"""

import argparse
import asyncio
import getpass
import os
import sys
from pathlib import Path
from typing import Any

from . import __version__
from .console import Console
from .domain.models import Outcome, RuleId, TimeRange
from .formatters import TableFormatter, to_json
from .infrastructure.config import ConfigManager, ConsoleConfig
from .infrastructure.logging_config import (
    configure_from_config,
    configure_stderr_logging,
)

ENV_TOKEN = "FILTERDESK_TOKEN"


def create_parser() -> argparse.ArgumentParser:
    """Create the main argument parser with subcommands."""
    parser = argparse.ArgumentParser(
        prog="filterdesk",
        description="Administrative console for a white-traffic filtering appliance",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Sign in and reuse the printed token
  filterdesk login -u admin
  export FILTERDESK_TOKEN=<token>

  # Rules
  filterdesk rules list
  filterdesk rules create --name block-bots --conditions '{"user_agent": "bot"}'
  filterdesk rules update 42 --inactive
  filterdesk rules delete 42 --yes
  filterdesk rules test 42

  # Alerts
  filterdesk alerts list --all
  filterdesk alerts resolve 7

  # Traffic
  filterdesk --format table traffic show --range 7d
        """,
    )

    parser.add_argument(
        "--version", action="version", version=f"filterdesk {__version__}"
    )
    parser.add_argument(
        "-c",
        "--config",
        type=Path,
        help="Path to configuration file (default: config/filterdesk.yaml)",
        metavar="PATH",
    )
    parser.add_argument(
        "--url", type=str, help="Backend API base URL", metavar="URL"
    )
    parser.add_argument(
        "--token",
        type=str,
        default=os.environ.get(ENV_TOKEN),
        help=f"Session token (default: ${ENV_TOKEN})",
        metavar="TOKEN",
    )
    parser.add_argument(
        "--timeout-ms",
        type=int,
        help="Request timeout in milliseconds",
        metavar="MS",
    )
    parser.add_argument(
        "--format",
        choices=["json", "table"],
        default="json",
        help="Output format (default: json)",
    )
    parser.add_argument(
        "-v", "--verbose", action="store_true", help="Log debug output to stderr"
    )

    subparsers = parser.add_subparsers(
        dest="command",
        help="Available commands",
        metavar="{login,register,rules,alerts,traffic}",
    )

    for name, help_text in (
        ("login", "Sign in and print the session token"),
        ("register", "Create an account and print the session token"),
    ):
        auth_parser = subparsers.add_parser(name, help=help_text)
        auth_parser.add_argument("-u", "--username", required=True)
        auth_parser.add_argument(
            "-p", "--password", help="Password (prompted when omitted)"
        )
        if name == "register":
            auth_parser.add_argument(
                "--confirm", help="Password confirmation (prompted when omitted)"
            )

    rules_parser = subparsers.add_parser("rules", help="Manage filter rules")
    rules_sub = rules_parser.add_subparsers(dest="action", required=True)
    rules_sub.add_parser("list", help="List rules in server order")

    create_parser_ = rules_sub.add_parser("create", help="Create a rule")
    create_parser_.add_argument("--name", required=True)
    create_parser_.add_argument(
        "--conditions", required=True, help="Serialized filter expression (JSON)"
    )
    create_parser_.add_argument("--description", default="")
    create_parser_.add_argument(
        "--inactive", action="store_true", help="Create the rule disabled"
    )

    update_parser = rules_sub.add_parser("update", help="Edit a rule")
    update_parser.add_argument("rule_id")
    update_parser.add_argument("--name")
    update_parser.add_argument("--conditions")
    update_parser.add_argument("--description")
    active_group = update_parser.add_mutually_exclusive_group()
    active_group.add_argument(
        "--active", dest="active", action="store_true", default=None
    )
    active_group.add_argument("--inactive", dest="active", action="store_false")
    update_parser.set_defaults(active=None)

    delete_parser = rules_sub.add_parser("delete", help="Delete a rule")
    delete_parser.add_argument("rule_id")
    delete_parser.add_argument(
        "-y", "--yes", action="store_true", help="Skip the confirmation prompt"
    )

    test_parser = rules_sub.add_parser("test", help="Run the backend rule test")
    test_parser.add_argument("rule_id")

    alerts_parser = subparsers.add_parser("alerts", help="Triage alerts")
    alerts_sub = alerts_parser.add_subparsers(dest="action", required=True)
    list_alerts = alerts_sub.add_parser("list", help="List alerts")
    list_alerts.add_argument(
        "--all",
        dest="show_resolved",
        action="store_true",
        default=None,
        help="Include resolved alerts",
    )
    for name, help_text in (
        ("resolve", "Mark an alert as resolved"),
        ("dismiss", "Dismiss an alert"),
    ):
        alert_action = alerts_sub.add_parser(name, help=help_text)
        alert_action.add_argument("alert_id")

    traffic_parser = subparsers.add_parser("traffic", help="Traffic analysis")
    traffic_sub = traffic_parser.add_subparsers(dest="action", required=True)
    show_parser = traffic_sub.add_parser("show", help="Show traffic analysis")
    show_parser.add_argument(
        "--range",
        dest="time_range",
        choices=[r.value for r in TimeRange],
        help="Time range (default from config, normally 24h)",
    )

    return parser


def parse_id(raw: str) -> RuleId:
    """Identifiers are opaque; numeric strings are sent as numbers."""
    return int(raw) if raw.isdigit() else raw


def load_config(args: argparse.Namespace) -> ConsoleConfig:
    config = ConfigManager(str(args.config) if args.config else None).load_config()
    api_overrides: dict[str, Any] = {}
    if args.url:
        api_overrides["base_url"] = args.url
    if args.timeout_ms:
        api_overrides["request_timeout_ms"] = args.timeout_ms
    if api_overrides:
        config = config.model_copy(
            update={"api": config.api.model_copy(update=api_overrides)}
        )
    return config


def _report(outcome: Outcome[Any], args: argparse.Namespace, render: Any = None) -> int:
    if not outcome.ok:
        print(f"Error: {outcome.message}", file=sys.stderr)
        return 1
    if args.format == "table" and render is not None:
        render()
    else:
        print(to_json(outcome.value))
    return 0


async def cmd_auth(console: Console, args: argparse.Namespace) -> int:
    password = args.password or getpass.getpass("Password: ")
    if args.command == "register":
        confirm = args.confirm or getpass.getpass("Confirm password: ")
        outcome = await console.auth.register(args.username, password, confirm)
    else:
        outcome = await console.auth.login(args.username, password)
    return _report(outcome, args)


async def cmd_rules(console: Console, args: argparse.Namespace) -> int:
    registry = console.rules
    table = TableFormatter()

    if args.action == "list":
        outcome = await registry.load()
        return _report(outcome, args, lambda: table.rules(registry.list()))

    if args.action == "create":
        draft = registry.new_draft
        for field, value in (
            ("name", args.name),
            ("description", args.description),
            ("conditions", args.conditions),
            ("active", not args.inactive),
        ):
            changed = registry.update_field(draft, field, value)
            if not changed.ok:
                return _report(changed, args)
        return _report(await registry.create(), args)

    if args.action == "update":
        loaded = await registry.load()
        if not loaded.ok:
            return _report(loaded, args)
        rule_id = next(
            (rule.id for rule in registry.list() if str(rule.id) == args.rule_id),
            parse_id(args.rule_id),
        )
        opened = registry.begin_edit(rule_id)
        if opened.value is None:
            return _report(opened, args)
        session = opened.value
        for field in ("name", "description", "conditions", "active"):
            value = getattr(args, field)
            if value is not None:
                changed = registry.update_field(session, field, value)
                if not changed.ok:
                    return _report(changed, args)
        return _report(await registry.commit_edit(session), args)

    if args.action == "delete":
        if not args.yes:
            answer = input(f"Delete rule {args.rule_id}? [y/N] ")
            if answer.strip().lower() not in ("y", "yes"):
                print("Aborted", file=sys.stderr)
                return 1
        outcome = await registry.remove(parse_id(args.rule_id))
        return _report(outcome, args)

    return _report(await registry.test(parse_id(args.rule_id)), args)


async def cmd_alerts(console: Console, args: argparse.Namespace) -> int:
    board = console.alerts
    if args.action == "list":
        show_resolved = (
            args.show_resolved
            if args.show_resolved is not None
            else console.config.views.show_resolved
        )
        outcome = await board.list(show_resolved)
        return _report(
            outcome,
            args,
            lambda: TableFormatter().alerts(
                board.alerts, board.empty_message, board.counts_by_severity()
            ),
        )

    alert_id = parse_id(args.alert_id)
    if args.action == "resolve":
        return _report(await board.resolve(alert_id), args)
    return _report(await board.dismiss(alert_id), args)


async def cmd_traffic(console: Console, args: argparse.Namespace) -> int:
    view = console.traffic
    if args.time_range:
        outcome = await view.set_range(args.time_range)
    else:
        outcome = await view.load()

    if not outcome.ok:
        return _report(outcome, args)
    if args.format == "table":
        TableFormatter().traffic(
            view.summary_metrics(),
            view.summary_distribution(),
            view.source_distribution(),
            view.trend_series(),
        )
        return 0
    print(
        to_json(
            {
                "range": view.range.value,
                "summary": view.summary_metrics(),
                "composition": view.summary_distribution(),
                "sources": view.source_distribution(),
                "trends": view.trend_series(),
            }
        )
    )
    return 0


COMMANDS = {
    "login": cmd_auth,
    "register": cmd_auth,
    "rules": cmd_rules,
    "alerts": cmd_alerts,
    "traffic": cmd_traffic,
}


async def run(args: argparse.Namespace, config: ConsoleConfig) -> int:

    def signed_out() -> None:
        print("Session expired, sign in again with 'filterdesk login'", file=sys.stderr)

    async with Console(config, token=args.token, on_unauthenticated=signed_out) as console:
        return await COMMANDS[args.command](console, args)


def main() -> int:
    """Main entry point for the CLI."""
    parser = create_parser()
    args = parser.parse_args()

    if not args.command:
        parser.print_help()
        return 1

    config = load_config(args)
    if args.verbose:
        configure_stderr_logging(level="DEBUG")
    else:
        configure_from_config(config.logging)

    try:
        return asyncio.run(run(args, config))
    except KeyboardInterrupt:
        print("\nInterrupted", file=sys.stderr)
        return 130


if __name__ == "__main__":
    sys.exit(main())
