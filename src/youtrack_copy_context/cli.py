"""
Command-line interface for the YouTrack copy-context tool.
"""

from __future__ import annotations

import argparse
import logging
import sys

from . import youtrack_utils as ytu
from .models import EntityType
from .options import OPTION_KEYS, apply_overrides, option_labels
from .protocols import HostAPI, NotificationLevel
from .utils import setup_logging
from .widgets import ContextExportSession, LinkCopySession, LoadState


class ConsoleNotifier:
    """Notifier that writes user messages to stderr."""

    def notify(self, message: str, level: NotificationLevel) -> None:
        prefix = "Error: " if level == "error" else ""
        print(f"{prefix}{message}", file=sys.stderr)

    def close_view(self) -> None:
        pass


def _sections_help() -> str:
    """List the section keys with their labels, e.g. ``description (Description / Content)``."""
    issue_labels = option_labels(EntityType.ISSUE)
    article_labels = option_labels(EntityType.ARTICLE)
    entries: list[str] = []
    for key in OPTION_KEYS:
        label = issue_labels[key]
        if article_labels[key] != label:
            label = f"{label} / {article_labels[key]}"
        entries.append(f"{key} ({label})")
    return ", ".join(entries)


def parse_arguments(argv: list[str] | None = None) -> argparse.Namespace:
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(
        description="Copy a YouTrack issue or article as Markdown, or copy a Markdown link to it"
    )

    _ = parser.add_argument("--url", help="YouTrack base URL (default: $YOUTRACK_URL)")
    _ = parser.add_argument(
        "--pass-token",
        dest="token_pass_path",
        help="Path for YouTrack token in pass utility (default: $YOUTRACK_TOKEN, then youtrack/cli/token)",
    )
    _ = parser.add_argument(
        "--app", default=ytu.DEFAULT_APP_NAME, help=f"Name of the installed YouTrack app (default: {ytu.DEFAULT_APP_NAME})"
    )
    _ = parser.add_argument("--verbose", "-v", action="store_true", help="Enable verbose logging")
    _ = parser.add_argument("--log-file", help="Also append log output to this file")

    subparsers = parser.add_subparsers(dest="command", required=True)
    entity_types = [entity_type.value for entity_type in EntityType]

    context_parser = subparsers.add_parser("context", help="Copy the issue or article content as Markdown")
    _ = context_parser.add_argument("entity_type", choices=entity_types, help="Kind of entity")
    _ = context_parser.add_argument("entity_id", help="Issue or article ID (e.g. PRJ-1, PRJ-A-3)")
    _ = context_parser.add_argument(
        "--include",
        "-i",
        action="append",
        choices=OPTION_KEYS,
        metavar="SECTION",
        help=f"Include a section. Can be specified multiple times. One of: {_sections_help()}",
    )
    _ = context_parser.add_argument(
        "--exclude",
        "-x",
        action="append",
        choices=OPTION_KEYS,
        metavar="SECTION",
        help="Exclude a section. Can be specified multiple times.",
    )
    _ = context_parser.add_argument(
        "--print", dest="print_only", action="store_true", help="Write to stdout instead of the clipboard"
    )

    link_parser = subparsers.add_parser("link", help="Copy a Markdown link to the issue or article")
    _ = link_parser.add_argument("entity_type", choices=entity_types, help="Kind of entity")
    _ = link_parser.add_argument("entity_id", help="Issue or article ID")
    _ = link_parser.add_argument(
        "--template", help="Link template using {{id}}, {{url}} and {{summary}} (default: the app setting)"
    )
    _ = link_parser.add_argument(
        "--print", dest="print_only", action="store_true", help="Write to stdout instead of the clipboard"
    )

    return parser.parse_args(argv)


def run_context(host: HostAPI, args: argparse.Namespace) -> bool:
    """Export an issue or article as Markdown."""
    session = ContextExportSession(host, EntityType(args.entity_type), args.entity_id, notifier=ConsoleNotifier())
    try:
        session.load()
        if session.state is LoadState.ERROR:
            print(f"Error: {session.error}", file=sys.stderr)
            return False

        session.update_options(apply_overrides(session.options, include=args.include, exclude=args.exclude))
        if args.print_only:
            print(session.markdown)
            return True
        return session.copy()
    finally:
        session.close()


def run_link(host: HostAPI, args: argparse.Namespace) -> bool:
    """Build a Markdown link to an issue or article."""
    session = LinkCopySession(
        host, EntityType(args.entity_type), args.entity_id, notifier=ConsoleNotifier(), template=args.template
    )
    session.load()
    if session.state is LoadState.ERROR:
        print(f"Error: {session.error}", file=sys.stderr)
        return False

    if args.print_only:
        print(session.link)
        return True
    if not session.copy():
        # Leave the link visible so it can be copied by hand
        print(session.link)
        return False
    return True


def main(argv: list[str] | None = None) -> None:
    """Main entry point."""
    args = parse_arguments(argv)

    # Setup logging
    verbose: bool = getattr(args, "verbose", False)
    setup_logging(verbose=verbose, log_file=args.log_file)

    try:
        token = ytu.get_token(args.token_pass_path)
        host = ytu.get_client(args.url, token, app_name=args.app)

        ok = run_context(host, args) if args.command == "context" else run_link(host, args)
        sys.exit(0 if ok else 1)

    except Exception:
        logger = logging.getLogger(__name__)
        logger.exception("Copy failed")
        sys.exit(1)
