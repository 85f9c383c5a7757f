"""
Session client for the time clock web application.

The time clock does not offer a RESTful API, so this logs in with the same form
a browser would post, keeps the session cookie in a Playwright request context,
and hands the returned HTML to the page objects for parsing.
"""
import logging
import re
from datetime import datetime
from typing import Optional, Tuple, Union

from playwright.sync_api import (
    APIRequest,
    APIRequestContext,
    APIResponse,
    Error as PlaywrightError,
    Playwright,
    sync_playwright,
)

from timeclock.config import get_app_config
from timeclock.errors import InvalidRequestError, NotAuthenticatedError, PageParseError, TransportError
from timeclock.play.pages.login_page import LoginPage
from timeclock.play.pages.punch_history_page import PunchHistoryPage
from timeclock.timeclock_models import SessionState, TimeclockResponse

logger = logging.getLogger(__name__)


class TimeclockClient:
    """
    Authenticated session against the time clock.

    A client starts unauthenticated; authenticate() moves it to the
    authenticated state and only then can history pages be fetched. Instances
    hold mutable cookie state and must not be shared between threads.

    Example:
        with TimeclockClient() as client:
            if client.authenticate("me@example.com", "secret"):
                summary = client.get_punch_history(2015, 3).summary()
    """

    HISTORY_PATH = "/punch_history"
    # Value of the "Show History" submit button, sent along like a browser would
    SHOW_HISTORY = "Show History"

    def __init__(
        self,
        base_url: Optional[str] = None,
        timeout: Optional[float] = None,
        verify_ssl: Optional[bool] = None,
        request: Optional[APIRequest] = None
    ) -> None:
        """
        Prepare the client. No network I/O happens until the first request.

        Args:
            base_url: Time clock base URL. Defaults to the configured one.
            timeout: Request timeout in milliseconds. Defaults to the configured one.
            verify_ssl: Whether to verify TLS certificates. Defaults to the configured one.
            request: Optional Playwright APIRequest (``playwright.request``). When
                omitted the client starts, and later stops, its own Playwright driver.
        """
        app_config = get_app_config()
        self.base_url = (base_url or app_config["base_url"]).rstrip("/")
        self.timeout = app_config["default_timeout"] if timeout is None else timeout
        self.verify_ssl = app_config["verify_ssl"] if verify_ssl is None else verify_ssl

        if not self.verify_ssl:
            logger.warning(f"TLS certificate verification disabled for {self.base_url}")

        self.login_page = LoginPage(self.base_url)

        self._request = request
        self._playwright: Optional[Playwright] = None
        self._context: Optional[APIRequestContext] = None
        self._state = SessionState.UNAUTHENTICATED

    def __enter__(self) -> "TimeclockClient":
        return self

    def __exit__(self, exc_type, exc_value, traceback) -> None:
        self.close()

    @property
    def state(self) -> SessionState:
        return self._state

    @property
    def is_authenticated(self) -> bool:
        return self._state is SessionState.AUTHENTICATED

    @property
    def history_url(self) -> str:
        return f"{self.base_url}{self.HISTORY_PATH}"

    def _get_context(self) -> APIRequestContext:
        """Return the request context holding the cookie store, creating it on first use."""
        if self._context is None:
            if self._request is None:
                logger.debug("Starting Playwright driver")
                self._playwright = sync_playwright().start()
                self._request = self._playwright.request
            self._context = self._request.new_context(
                ignore_https_errors=not self.verify_ssl,
                timeout=self.timeout
            )
        return self._context

    def _reset_context(self) -> None:
        """Drop the request context, and every cookie it holds."""
        if self._context is not None:
            self._context.dispose()
            self._context = None

    def close(self) -> None:
        """Dispose the request context and stop the Playwright driver if this client started it."""
        self._reset_context()
        self._state = SessionState.UNAUTHENTICATED
        if self._playwright is not None:
            self._playwright.stop()
            self._playwright = None
            self._request = None

    @staticmethod
    def _to_response(response: APIResponse) -> TimeclockResponse:
        try:
            return TimeclockResponse(
                url=response.url,
                status=response.status,
                body=response.text(),
                headers=dict(response.headers)
            )
        finally:
            response.dispose()

    def authenticate(self, email_address: str, password: str) -> bool:
        """
        Log in with the email-password pair and set the authentication status.

        Args:
            email_address: Account email address
            password: Account password

        Returns:
            True if the site redirected to the home page after login

        Raises:
            TransportError: If the login request fails or the final response is not 2xx
        """
        self._state = SessionState.UNAUTHENTICATED
        context = self._get_context()

        logger.info(f"Logging in to {self.base_url} as {email_address}")
        try:
            response = self._to_response(context.post(
                self.login_page.login_url,
                form=self.login_page.build_form(email_address, password)
            ))
        except PlaywrightError as e:
            logger.error(f"Login request to {self.login_page.login_url} failed: {e}")
            self._reset_context()
            raise TransportError(f"Login request failed: {e}") from e

        if not response.ok:
            logger.error(f"Login failed with HTTP {response.status} at {response.url}")
            self._reset_context()
            raise TransportError(f"Login failed with HTTP {response.status}")

        if not self.login_page.is_login_successful(response.url):
            logger.warning(
                f"Login rejected for {email_address}: landed on {response.url} "
                f"instead of {self.login_page.home_url}"
            )
            error_message = self._login_error_message(response)
            if error_message:
                logger.warning(f"Login page says: {error_message}")
            # Discard cookies handed out during the failed attempt
            self._reset_context()
            return False

        self._state = SessionState.AUTHENTICATED
        logger.info("Login successful")
        return True

    def _login_error_message(self, response: TimeclockResponse) -> Optional[str]:
        try:
            return LoginPage(self.base_url, html=response.body).get_login_error_message()
        except PageParseError:
            logger.debug(f"Rejected login response from {response.url} has no HTML to inspect")
            return None

    @staticmethod
    def _query_period(
        year: Optional[Union[int, str]],
        month: Optional[Union[int, str]]
    ) -> Tuple[str, str]:
        """Return the year and zero-padded month sent to the site, defaulting to today."""
        now = datetime.now()
        year = now.strftime("%Y") if year is None else str(year).strip()
        if not re.match(r"^\d{4}$", year):
            raise InvalidRequestError(f"Year must be a four-digit number: {year!r}")

        if month is None:
            return year, now.strftime("%m")
        month = str(month).strip()
        # Out-of-range months are left to the site, which clamps them
        if not re.match(r"^\d{1,2}$", month) or int(month) == 0:
            raise InvalidRequestError(f"Month must be a positive number: {month!r}")
        return year, month.zfill(2)

    def fetch_punch_history_page(
        self,
        year: Optional[Union[int, str]] = None,
        month: Optional[Union[int, str]] = None
    ) -> TimeclockResponse:
        """
        Fetch the raw punch history page for the given year and month.

        Args:
            year: optional, defaults to current year
            month: optional, defaults to current month

        Returns:
            The raw response (HTML body plus URL, status and headers)

        Raises:
            NotAuthenticatedError: If not yet authenticated, or the session expired
            InvalidRequestError: If year or month is not a number
            TransportError: If the request fails or returns a non-2xx status
        """
        if not self.is_authenticated:
            raise NotAuthenticatedError("Must be authenticated first before calling method.")

        year, month = self._query_period(year, month)

        params = {
            "show": self.SHOW_HISTORY,
            "year": year,
            "month": month,
        }

        logger.info(f"Fetching punch history for {year}-{month}")
        try:
            response = self._to_response(self._get_context().get(self.history_url, params=params))
        except PlaywrightError as e:
            logger.error(f"Punch history request failed: {e}")
            raise TransportError(f"Punch history request failed: {e}") from e

        if self.login_page.is_login_url(response.url):
            logger.error("Session expired: punch history request was redirected to the login page")
            self._state = SessionState.UNAUTHENTICATED
            self._reset_context()
            raise NotAuthenticatedError("Session expired, authenticate again.")

        if not response.ok:
            logger.error(f"Punch history request returned HTTP {response.status} at {response.url}")
            raise TransportError(f"Punch history request returned HTTP {response.status}")

        logger.debug(f"Received {len(response.body)} characters from {response.url}")
        return response

    def get_punch_history(
        self,
        year: Optional[Union[int, str]] = None,
        month: Optional[Union[int, str]] = None
    ) -> PunchHistoryPage:
        """
        Return a PunchHistoryPage with the punch clock history for the given
        year and month.

        Raises:
            NotAuthenticatedError: If not yet authenticated
            TransportError: If the request fails
            PageParseError: If the body cannot be parsed
        """
        return PunchHistoryPage.from_response(self.fetch_punch_history_page(year, month))
