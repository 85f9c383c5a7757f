"""
Data models for the time clock punch history scraper.

These are plain dataclasses passed between the session client and the page
objects. Credentials only live in memory for the duration of a login.
"""
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional


class SessionState(str, Enum):
    """Authentication state of a TimeclockClient."""
    UNAUTHENTICATED = "unauthenticated"
    AUTHENTICATED = "authenticated"


@dataclass
class Credentials:
    """
    Email/password pair used to log in to the time clock.

    Contains the plaintext password temporarily. Callers should overwrite it
    (see utils.obfuscate_credential) once authentication is done.
    """
    email_address: str
    password: str


@dataclass
class TimeclockResponse:
    """Raw HTML body of a time clock page plus the response metadata."""
    url: str
    status: int
    body: str
    headers: Dict[str, str] = field(default_factory=dict)

    @property
    def ok(self) -> bool:
        return 200 <= self.status <= 299


@dataclass
class PunchEntry:
    """
    A single punch, one row of the punch history table.

    Values are kept exactly as rendered by the site (trimmed only). Callers that
    need datetimes must parse ``punch_in``/``punch_out`` themselves.
    """
    punch_in: str
    punch_out: str
    time_logged: str
    client: str

    # Column labels as the site renders them, in column order
    COLUMNS = ("Punch In", "Punch Out", "Time Logged", "Client")

    def to_dict(self) -> Dict[str, str]:
        return dict(zip(self.COLUMNS, (self.punch_in, self.punch_out, self.time_logged, self.client)))


@dataclass
class PunchHistorySummary:
    """
    Month-long punch clock history.

    ``year`` and ``month`` are the values echoed back by the server, which may
    differ from the ones requested. ``month`` is always a zero-padded string.
    """
    year: int
    month: str
    time_worked: str
    work_days: int
    entries: List[PunchEntry] = field(default_factory=list)
    source_url: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        """Return a JSON-ready representation of the summary."""
        return {
            "year": self.year,
            "month": self.month,
            "time_worked": self.time_worked,
            "work_days": self.work_days,
            "entries": [entry.to_dict() for entry in self.entries],
        }
