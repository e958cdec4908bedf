"""
CLI script for the daily cycle notification run.

Usage:
    # Decide, generate and send today's notification (Europe/Berlin day)
    uv run python -m notifications.send_cycle_notifications

    # Preview: decide and generate without sending or writing the log
    uv run python -m notifications.send_cycle_notifications --dry-run

    # Preview a specific day (only together with --dry-run)
    uv run python -m notifications.send_cycle_notifications --dry-run --date 2025-02-26
"""

import argparse
import sys
from datetime import date
from functools import partial

from notifications.dispatcher import run_daily_notifications
from notifications.push_sender import send_push
from shared.errors import SetupError
from shared.settings import load_settings
from shared.utils import print_summary, reference_noon
from storage.records import build_document_store


def _parse_day(value: str) -> date:
    try:
        return date.fromisoformat(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"Invalid date '{value}', expected YYYY-MM-DD")


def main(argv: list[str] | None = None) -> int:
    """CLI entry point. Returns the process exit code."""
    parser = argparse.ArgumentParser(
        description="Send today's cycle notification to push subscribers"
    )

    parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Dry run mode (generate the message, don't send or write the log)",
    )

    parser.add_argument(
        "--date",
        type=_parse_day,
        help="Preview this day instead of today (YYYY-MM-DD, Europe/Berlin); requires --dry-run",
    )

    args = parser.parse_args(argv)

    if args.date and not args.dry_run:
        parser.error("--date only previews a day and requires --dry-run")

    sender = None
    try:
        settings = load_settings(require_push=not args.dry_run)
        store = build_document_store(settings)
        if not args.dry_run:
            if not settings.vapid_private_key:
                raise SetupError("VAPID_PRIVATE_KEY is required to send notifications")
            sender = partial(
                send_push,
                vapid_private_key=settings.vapid_private_key,
                vapid_subject=settings.vapid_subject,
            )
    except (SetupError, ValueError) as e:
        print(f"✗ Setup error: {e}")
        return 1

    now = reference_noon(args.date) if args.date else None

    result = run_daily_notifications(
        store,
        sender,
        model=settings.ollama_model if settings.enable_llm else None,
        recipient_name=settings.recipient_name,
        url=settings.notifications_url,
        now=now,
        dry_run=args.dry_run,
    )

    print_summary(result, result.get("type"))
    return 0


if __name__ == "__main__":
    sys.exit(main())
