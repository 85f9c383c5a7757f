"""
Unofficial client for reading your punch history from the time clock web application.
"""
from .errors import (
    TimeclockError,
    NotAuthenticatedError,
    TransportError,
    InvalidRequestError,
    PageParseError,
    PageStructureError,
    UnexpectedFormatError,
)
from .timeclock_models import (
    Credentials,
    PunchEntry,
    PunchHistorySummary,
    SessionState,
    TimeclockResponse,
)
from .timeclock_client import TimeclockClient
from .play.pages import PunchHistoryPage

__all__ = [
    "TimeclockClient",
    "PunchHistoryPage",
    "Credentials",
    "PunchEntry",
    "PunchHistorySummary",
    "SessionState",
    "TimeclockResponse",
    "TimeclockError",
    "NotAuthenticatedError",
    "TransportError",
    "InvalidRequestError",
    "PageParseError",
    "PageStructureError",
    "UnexpectedFormatError",
]
