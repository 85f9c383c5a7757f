"""
Configuration management for the time clock punch history scraper.
"""
import os
import json
from pathlib import Path
from typing import Optional, Dict, Any
import logging

from dotenv import load_dotenv

from timeclock.timeclock_models import Credentials

load_dotenv()  # Load .env file if it exists

logger = logging.getLogger(__name__)

DEFAULT_BASE_URL = "http://codingavenue.com/clock"
DEFAULT_TIMEOUT_MS = 30000


def _env_flag(name: str, default: bool) -> bool:
    value = os.getenv(name)
    if value is None or value.strip() == "":
        return default
    return value.strip().lower() in ("1", "true", "yes", "on")


def load_credentials(config_path: Optional[str] = None) -> Credentials:
    """
    Load login credentials from a JSON configuration file or environment variables.

    The JSON file holds a single object with ``email_address`` and ``password``.

    Args:
        config_path: Path to credentials.json. If None, looks for credentials.json
            in the package directory.

    Returns:
        Credentials object

    Raises:
        ValueError: If no credentials can be found
    """
    if config_path is None:
        config_path = Path(__file__).parent / "credentials.json"

    config_file = Path(config_path)

    if config_file.exists():
        try:
            with open(config_file, 'r') as f:
                data = json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            logger.error(f"Error loading credentials from {config_file}: {e}")
            raise

        email_address = data.get('email_address') or data.get('email', '')
        password = data.get('password', '')
        if not email_address or not password:
            raise ValueError(f"{config_file} must define 'email_address' and 'password'")

        logger.info(f"Loaded credentials for {email_address} from {config_file}")
        return Credentials(email_address=email_address, password=password)

    logger.warning(f"Config file not found: {config_file}. Trying environment variables.")

    email_address = os.getenv("TIMECLOCK_EMAIL")
    password = os.getenv("TIMECLOCK_PASSWORD")

    if not email_address or not password:
        raise ValueError(
            "No credentials found. Either create credentials.json or set "
            "TIMECLOCK_EMAIL and TIMECLOCK_PASSWORD environment variables."
        )

    logger.info("Loaded credentials from environment variables")
    return Credentials(email_address=email_address, password=password)


def get_app_config() -> Dict[str, Any]:
    """
    Get application configuration settings.

    Returns:
        Dictionary with application configuration. ``default_timeout`` is in
        milliseconds.
    """
    return {
        "base_url": os.getenv("TIMECLOCK_BASE_URL", DEFAULT_BASE_URL).rstrip("/"),
        "default_timeout": int(os.getenv("TIMECLOCK_TIMEOUT", str(DEFAULT_TIMEOUT_MS))),
        "verify_ssl": _env_flag("TIMECLOCK_VERIFY_SSL", True),
    }


def validate_config(config_path: Optional[str] = None) -> bool:
    """
    Validate that required configuration exists.

    Returns:
        True if configuration is valid

    Raises:
        ValueError: If configuration is invalid
    """
    try:
        credentials = load_credentials(config_path)
        app_config = get_app_config()

        if app_config["default_timeout"] <= 0:
            raise ValueError("TIMECLOCK_TIMEOUT must be a positive number of milliseconds")

        logger.info("Configuration validated successfully")
        logger.info(f"Base URL: {app_config['base_url']}")
        logger.info(f"Login: {credentials.email_address}")
        if not app_config["verify_ssl"]:
            logger.warning("TLS certificate verification is disabled")

        return True
    except Exception as e:
        logger.error(f"Configuration validation failed: {e}")
        raise
