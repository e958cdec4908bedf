"""
Error logging utility for the cycle notification run.

Writes failures that need a closer look later (a rejected push, a log that
could not be read or written) to timestamped report files.
"""

import os
from datetime import datetime
from typing import Any

ERROR_LOG_DIR_ENV = "NOTIFICATION_ERROR_LOG_DIR"
DEFAULT_ERROR_LOG_DIR = os.path.join(os.path.dirname(__file__), "logs")


def log_notification_error(
    error_type: str,
    error_message: str,
    context: dict[str, Any] | None = None,
    log_dir: str | None = None,
) -> str:
    """
    Log a notification error to a timestamped file.

    Args:
        error_type: Failure stage ('delivery', 'persistence' or 'ledger')
        error_message: The error message
        context: Optional details (notification_id, endpoint, status_code, ...).
            Keys with a None value are left out.
        log_dir: Target directory (default: $NOTIFICATION_ERROR_LOG_DIR or notifications/logs)

    Returns:
        Path to the report file created
    """
    directory = log_dir or os.getenv(ERROR_LOG_DIR_ENV) or DEFAULT_ERROR_LOG_DIR
    os.makedirs(directory, exist_ok=True)

    created = datetime.now()
    filename = os.path.join(
        directory, f"cycle_notification_{error_type}_{created:%Y%m%d_%H%M%S_%f}.txt"
    )

    details = {key: value for key, value in (context or {}).items() if value is not None}

    with open(filename, "w", encoding="utf-8") as f:
        f.write(f"Cycle Notification Error Report - {created.isoformat(timespec='seconds')}\n")
        f.write("=" * 60 + "\n\n")
        f.write(f"Stage: {error_type}\n")
        f.write(f"Error: {error_message}\n")

        if details:
            f.write("\nContext:\n")
            f.write("-" * 60 + "\n")
            for key in sorted(details):
                f.write(f"{key}: {details[key]}\n")

    return filename
