"""
Exceptions raised while talking to the time clock and reading its pages.
"""


class TimeclockError(Exception):
    """Base exception for everything raised by this package."""


class NotAuthenticatedError(TimeclockError):
    """Raised when a history page is requested before a successful login."""


class TransportError(TimeclockError):
    """Raised on network failures, timeouts and non-2xx responses."""


class PageParseError(TimeclockError):
    """Raised when a response body cannot be parsed into a document tree."""


class PageStructureError(TimeclockError):
    """Raised when an expected element or text node is missing from a page."""


class UnexpectedFormatError(PageStructureError):
    """Raised when an extracted value is present but has the wrong shape."""


class InvalidRequestError(TimeclockError, ValueError):
    """Raised when a history page is requested for an invalid year or month."""
