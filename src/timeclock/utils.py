"""
Utility functions for the time clock punch history scraper.
"""
import logging
import random
import sys
from pathlib import Path
from typing import Optional, TYPE_CHECKING

if TYPE_CHECKING:
    from timeclock.timeclock_models import PunchHistorySummary

LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'


class ColoredFormatter(logging.Formatter):
    """Custom formatter that adds colors to log levels."""
    COLORS = {
        "DEBUG": "\033[94m",      # Blue
        "INFO": "\033[92m",       # Green
        "WARNING": "\033[93m",    # Yellow
        "ERROR": "\033[91m",      # Red
        "CRITICAL": "\033[91m",   # Red
        "RESET": "\033[0m",       # Reset to default color
    }

    def format(self, record):
        log_message = super().format(record)
        if hasattr(record, 'no_color') and record.no_color:
            return log_message
        color = self.COLORS.get(record.levelname, self.COLORS["RESET"])
        return f"{color}{log_message}{self.COLORS['RESET']}"


def setup_logging(verbose: bool = False, log_file: Optional[str] = None) -> None:
    """
    Set up logging configuration with colored console output.

    Logs go to stderr so that stdout stays clean for the history output.

    Args:
        verbose: If True, set log level to DEBUG
        log_file: Optional path to log file (written without colors)
    """
    log_level = logging.DEBUG if verbose else logging.INFO

    stream_handler = logging.StreamHandler(sys.stderr)
    stream_handler.setFormatter(ColoredFormatter(LOG_FORMAT))
    handlers = [stream_handler]

    if log_file:
        ensure_directory(str(Path(log_file).parent))
        file_handler = logging.FileHandler(log_file)
        file_handler.setFormatter(logging.Formatter(LOG_FORMAT))
        handlers.append(file_handler)

    logging.basicConfig(
        level=log_level,
        format=LOG_FORMAT,
        handlers=handlers,
        force=True
    )


def obfuscate_credential(value: str) -> str:
    """
    Obfuscate a credential by overwriting with random-length null bytes.

    This keeps the original credential length from being inferred if memory
    is dumped.

    Args:
        value: The credential string to obfuscate

    Returns:
        String of null bytes with random length
    """
    random_length = random.randint(8, 64)
    return "\x00" * random_length


def format_summary_message(summary: "PunchHistorySummary") -> str:
    """
    Format a punch history summary into a readable, multi-line message.

    Args:
        summary: The PunchHistorySummary object

    Returns:
        Formatted message string
    """
    lines = [
        f"Punch history for {summary.year}-{summary.month}",
        f"Time worked: {summary.time_worked}",
        f"Work days: {summary.work_days}",
        f"Punches: {len(summary.entries)}",
    ]

    if summary.entries:
        widths = [len(column) for column in summary.entries[0].COLUMNS]
        rows = [list(entry.to_dict().values()) for entry in summary.entries]
        for row in rows:
            widths = [max(width, len(value)) for width, value in zip(widths, row)]

        def _line(values):
            return "  ".join(value.ljust(width) for value, width in zip(values, widths)).rstrip()

        lines.append("")
        lines.append(_line(summary.entries[0].COLUMNS))
        lines.append(_line(["-" * width for width in widths]))
        lines.extend(_line(row) for row in rows)

    return "\n".join(lines)


def ensure_directory(path: str) -> Path:
    """
    Ensure a directory exists, creating it if necessary.

    Args:
        path: Path to the directory

    Returns:
        Path object for the directory
    """
    dir_path = Path(path)
    dir_path.mkdir(parents=True, exist_ok=True)
    return dir_path
