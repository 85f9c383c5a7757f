#!/usr/bin/env python3
"""
Command-line script for fetching a month of punch history from the time clock.
Handles login, fetching, parsing and printing the result.
"""
import sys
import json
import argparse
import logging
from pathlib import Path

from timeclock.config import load_credentials, get_app_config
from timeclock.errors import TimeclockError
from timeclock.timeclock_client import TimeclockClient
from timeclock.utils import setup_logging, format_summary_message, obfuscate_credential

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Fetch your monthly punch history from the time clock")
    parser.add_argument("--year", type=int, help="Year to fetch (defaults to the current year)")
    parser.add_argument("--month", type=int, choices=range(1, 13), metavar="MONTH",
                        help="Month to fetch, 1-12 (defaults to the current month)")
    parser.add_argument("--config", type=str, help="Path to credentials.json configuration file")
    parser.add_argument("--base-url", type=str, help="Time clock base URL")
    parser.add_argument("--timeout", type=float, help="Request timeout in milliseconds")
    parser.add_argument("--insecure", action="store_true", help="Do not verify TLS certificates")
    parser.add_argument("--json", action="store_true", help="Print the history as JSON")
    parser.add_argument("--save-html", type=str, help="Save the raw history page to this file")
    parser.add_argument("--verbose", "-v", action="store_true", help="Enable verbose logging")
    parser.add_argument("--log-file", type=str, help="Path to log file")
    return parser


def main(argv=None) -> int:
    """Main execution function. Returns the process exit code."""
    args = build_parser().parse_args(argv)

    setup_logging(verbose=args.verbose, log_file=args.log_file)

    try:
        credentials = load_credentials(config_path=args.config)
        app_config = get_app_config()

        client = TimeclockClient(
            base_url=args.base_url or app_config["base_url"],
            timeout=args.timeout,
            verify_ssl=False if args.insecure else None
        )

        with client:
            try:
                authenticated = client.authenticate(credentials.email_address, credentials.password)
            finally:
                # Clear plaintext password as soon as it has been sent
                credentials.password = obfuscate_credential(credentials.password)

            if not authenticated:
                logger.error(f"Login failed for {credentials.email_address}")
                return 1

            page = client.get_punch_history(args.year, args.month)

            if args.save_html:
                Path(args.save_html).write_text(page.to_html(), encoding="utf-8")
                logger.info(f"Raw punch history page saved to {args.save_html}")

            summary = page.summary()

        if args.json:
            print(json.dumps(summary.to_dict(), indent=2))
        else:
            print(format_summary_message(summary))
        return 0

    except KeyboardInterrupt:
        logger.info("Interrupted by user")
        return 130
    except (TimeclockError, ValueError) as e:
        logger.error(f"{type(e).__name__}: {e}")
        return 1
    except Exception as e:
        logger.error(f"Fatal error: {e}", exc_info=True)
        return 1


def run() -> None:
    sys.exit(main())


if __name__ == "__main__":
    run()
