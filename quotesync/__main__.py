"""CLI entry point for quotesync."""

import argparse
import asyncio
import inspect
import json
import logging
import sys
import traceback
from datetime import datetime
from pathlib import Path

from .app import NO_QUOTES_MESSAGE, QuoteApp
from .config import load_config
from .exceptions import ConfigurationError, FormatError, ValidationError
from .sync import NotificationLevel, always_accept, always_decline
from .sync.notifications import Notification


class JSONFormatter(logging.Formatter):
    """JSON formatter for structured logging."""

    def format(self, record: logging.LogRecord) -> str:
        """Format log record as JSON."""
        log_data = {
            "timestamp": datetime.fromtimestamp(record.created).isoformat(),
            "level": record.levelname,
            "component": record.name,
            "message": record.getMessage(),
        }

        # Add exception info if present
        if record.exc_info:
            log_data["exception"] = "".join(traceback.format_exception(*record.exc_info))

        try:
            return json.dumps(log_data)
        except (TypeError, ValueError):
            log_data["message"] = str(log_data["message"])
            return json.dumps(log_data)


def setup_logging(verbose: bool = False, log_level: str | None = None, json_output: bool = False) -> None:
    """Configure logging.

    Args:
        verbose: Enable debug logging (ignored if log_level is set).
        log_level: Explicit log level (warning, info, debug).
        json_output: Output logs as JSON lines for machine parsing.
    """
    if log_level:
        level_map = {
            "warning": logging.WARNING,
            "info": logging.INFO,
            "debug": logging.DEBUG,
        }
        level = level_map.get(log_level, logging.INFO)
    else:
        level = logging.DEBUG if verbose else logging.WARNING

    handler = logging.StreamHandler()
    if json_output:
        handler.setFormatter(JSONFormatter())
    else:
        formatter = logging.Formatter(
            fmt="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        )
        handler.setFormatter(formatter)

    logging.basicConfig(
        level=level,
        handlers=[handler],
    )


def print_notification(notification: Notification) -> None:
    """Show a notification on the terminal."""
    prefix = {
        NotificationLevel.INFO: "i",
        NotificationLevel.SUCCESS: "+",
        NotificationLevel.CONFLICT: "!",
    }[notification.level]
    print(f"[{prefix}] {notification.message}")


def build_app(args: argparse.Namespace, resolver=None) -> QuoteApp:
    config = load_config(args.config)
    return QuoteApp(config, resolver=resolver, notifier=print_notification)


def cmd_list(args: argparse.Namespace) -> int:
    """List quotes."""
    app = build_app(args)
    try:
        quotes = app.quotes_for(args.category)
        if not quotes:
            print(NO_QUOTES_MESSAGE)
        for quote in quotes:
            print(f'"{quote.text}" ({quote.category})')
    finally:
        app.close()
    return 0


def cmd_categories(args: argparse.Namespace) -> int:
    """List categories in first-seen order."""
    app = build_app(args)
    try:
        selected = app.selected_category
        for category in app.categories:
            marker = "*" if category == selected else " "
            print(f"{marker} {category}")
    finally:
        app.close()
    return 0


def cmd_random(args: argparse.Namespace) -> int:
    """Show a random quote."""
    app = build_app(args)
    try:
        quote = app.show_random_quote(args.category)
        if quote is None:
            print(NO_QUOTES_MESSAGE)
        else:
            print(f'"{quote.text}"')
    finally:
        app.close()
    return 0


def cmd_select(args: argparse.Namespace) -> int:
    """Remember a category filter."""
    app = build_app(args)
    try:
        resolved = app.select_category(args.category)
        if resolved != args.category:
            print(f"Unknown category {args.category!r}, showing all quotes")
        else:
            print(f"Selected category: {resolved}")
    finally:
        app.close()
    return 0


async def cmd_add(args: argparse.Namespace) -> int:
    """Add a quote."""
    app = build_app(args)
    try:
        quote = app.add_quote(args.text, args.category)
        print("Quote added successfully!")
        if args.post:
            response = await app.post_quote(quote)
            if response is None:
                print("Could not post quote to server", file=sys.stderr)
            else:
                print(f"Posted to server (id={response.get('id')})")
    except ValidationError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1
    finally:
        app.close()
    return 0


def cmd_export(args: argparse.Namespace) -> int:
    """Export quotes to a JSON file."""
    app = build_app(args)
    try:
        path = Path(args.path or app.config.transfer.export_path)
        path.write_text(app.export_json(), encoding="utf-8")
        print(f"Exported {len(app.collection)} quotes to {path}")
    except OSError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1
    finally:
        app.close()
    return 0


def cmd_import(args: argparse.Namespace) -> int:
    """Import quotes from a JSON file."""
    app = build_app(args)
    try:
        document = Path(args.path).read_text(encoding="utf-8")
        strict = False if args.lax else None
        count = app.import_json(document, strict=strict)
        print(f"Quotes imported successfully! ({count})")
    except (FormatError, ValidationError, OSError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1
    finally:
        app.close()
    return 0


def _resolver_from_args(args: argparse.Namespace):
    if getattr(args, "accept", False):
        return always_accept
    if getattr(args, "decline", False):
        return always_decline
    return None


async def cmd_sync(args: argparse.Namespace) -> int:
    """Run a single sync cycle."""
    app = build_app(args, resolver=_resolver_from_args(args))
    try:
        result = await app.engine.sync_now(manual=True)
        print(
            f"Sync: {result.outcome.value} "
            f"(local={result.local_count}, remote={result.remote_count})"
        )
    finally:
        app.close()
    return 0


async def cmd_run(args: argparse.Namespace) -> int:
    """Sync periodically until interrupted."""
    app = build_app(args, resolver=_resolver_from_args(args))
    interval = app.config.sync.interval_seconds

    if not app.config.sync.enabled:
        print("Sync is disabled in configuration", file=sys.stderr)
        app.close()
        return 1

    print(f"Syncing with {app.config.remote.url} every {interval}s (Ctrl+C to stop)")
    try:
        await app.engine.sync_now()
        await app.engine.start(interval)
        await asyncio.Event().wait()
    except (KeyboardInterrupt, asyncio.CancelledError):
        print("\nShutting down...")
    finally:
        await app.engine.stop()
        app.close()

    return 0


def cmd_status(args: argparse.Namespace) -> int:
    """Show collection and sync status."""
    app = build_app(args)
    try:
        status = app.get_status()
        status["timestamp"] = datetime.now().isoformat()
        status["last_viewed"] = app.last_viewed()
        status["remote_url"] = app.config.remote.url
        status["db_path"] = str(app.store.db_path)
    finally:
        app.close()

    if args.json:
        print(json.dumps(status, indent=2))
        return 0

    print(f"Quotes: {status['quotes']}")
    print(f"Categories: {', '.join(status['categories']) or '-'}")
    print(f"Selected: {status['selected_category']}")
    print(f"Remote: {status['remote_url']}")
    print(f"Database: {status['db_path']}")
    return 0


def main() -> int:
    """Main entry point."""
    parser = argparse.ArgumentParser(
        prog="quotesync",
        description="Offline-first quote collection with server sync",
    )
    parser.add_argument(
        "-c", "--config",
        type=Path,
        default=None,
        help="Path to config file (default: built-in defaults)",
    )
    parser.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="Enable verbose logging",
    )
    parser.add_argument(
        "--log-level",
        type=str,
        choices=["warning", "info", "debug"],
        default=None,
        help="Set log level explicitly (overrides -v/--verbose)",
    )
    parser.add_argument(
        "--json-logs",
        dest="json_logs",
        action="store_true",
        help="Output logs as JSON for machine parsing",
    )

    subparsers = parser.add_subparsers(dest="command", help="Commands")

    # List command
    list_parser = subparsers.add_parser("list", help="List quotes")
    list_parser.add_argument("--category", default=None, help="Category or 'all'")
    list_parser.set_defaults(func=cmd_list)

    # Categories command
    categories_parser = subparsers.add_parser("categories", help="List categories")
    categories_parser.set_defaults(func=cmd_categories)

    # Random command
    random_parser = subparsers.add_parser("random", help="Show a random quote")
    random_parser.add_argument("--category", default=None, help="Category or 'all'")
    random_parser.set_defaults(func=cmd_random)

    # Select command
    select_parser = subparsers.add_parser("select", help="Remember a category filter")
    select_parser.add_argument("category", help="Category name or 'all'")
    select_parser.set_defaults(func=cmd_select)

    # Add command
    add_parser = subparsers.add_parser("add", help="Add a quote")
    add_parser.add_argument("text", help="Quote text")
    add_parser.add_argument("category", help="Quote category")
    add_parser.add_argument(
        "--post",
        action="store_true",
        help="Also post the quote to the server",
    )
    add_parser.set_defaults(func=cmd_add)

    # Export command
    export_parser = subparsers.add_parser("export", help="Export quotes to JSON")
    export_parser.add_argument("path", nargs="?", default=None, help="Output file")
    export_parser.set_defaults(func=cmd_export)

    # Import command
    import_parser = subparsers.add_parser("import", help="Import quotes from JSON")
    import_parser.add_argument("path", help="JSON file to import")
    import_parser.add_argument(
        "--lax",
        action="store_true",
        help="Skip malformed quotes instead of rejecting the file",
    )
    import_parser.set_defaults(func=cmd_import)

    # Sync and run commands share resolution flags
    for name, func, help_text in (
        ("sync", cmd_sync, "Sync once with the server"),
        ("run", cmd_run, "Sync periodically until interrupted"),
    ):
        sub = subparsers.add_parser(name, help=help_text)
        policy = sub.add_mutually_exclusive_group()
        policy.add_argument(
            "--accept",
            action="store_true",
            help="Overwrite local quotes on conflict without asking",
        )
        policy.add_argument(
            "--decline",
            action="store_true",
            help="Keep local quotes on conflict without asking",
        )
        sub.set_defaults(func=func)

    # Status command
    status_parser = subparsers.add_parser("status", help="Show status")
    status_parser.add_argument(
        "--json",
        action="store_true",
        help="Output status as JSON",
    )
    status_parser.set_defaults(func=cmd_status)

    args = parser.parse_args()

    setup_logging(args.verbose, args.log_level, args.json_logs)

    if not args.command:
        parser.print_help()
        return 1

    func = args.func
    try:
        if inspect.iscoroutinefunction(func):
            return asyncio.run(func(args))
        return func(args)
    except ConfigurationError as e:
        print(f"Configuration error: {e}", file=sys.stderr)
        return 1
    except KeyboardInterrupt:
        return 130


if __name__ == "__main__":
    sys.exit(main())
