"""
Page Object Model for the time clock Login Page.
Encapsulates the login endpoint, its form fields and how a successful login is recognised.
"""
from typing import Dict, Optional
from urllib.parse import urlsplit

from timeclock.play.pages.base_page import BasePage


class LoginPage(BasePage):
    """
    Represents the time clock login page.

    Whether a login succeeded is decided by the final URL alone. The body of a
    rejected login is only read to add the site's message to the log.
    """

    LOGIN_PATH = "/login"
    HOME_PATH = "/home"

    # Form field names expected by the login endpoint
    EMAIL_FIELD = "email_address"
    PASSWORD_FIELD = "password"

    # Best-effort guesses at where a rejected login message is rendered; a page
    # matching none of them only loses the extra log line
    ERROR_SELECTORS = (".error", ".alert", ".flash", "#error")

    def __init__(self, base_url: str, html: Optional[str] = None):
        # The login page is usually only addressed, not parsed; the body is
        # parsed when a caller wants to inspect a rejected login.
        self.base_url = base_url.rstrip("/")
        if html is not None:
            super().__init__(html, url=self.login_url)
        else:
            self.url = self.login_url
            self.status = None
            self._html = None
            self.soup = None
            self._text_nodes = None

    @property
    def login_url(self) -> str:
        """URL the login form is posted to."""
        return f"{self.base_url}{self.LOGIN_PATH}"

    @property
    def home_url(self) -> str:
        """URL the site redirects to after a successful login."""
        return f"{self.base_url}{self.HOME_PATH}"

    def build_form(self, email_address: str, password: str) -> Dict[str, str]:
        """Build the form-encoded payload for the login POST."""
        return {
            self.EMAIL_FIELD: email_address,
            self.PASSWORD_FIELD: password,
        }

    def is_login_successful(self, final_url: str) -> bool:
        """
        Check if a login succeeded by comparing the URL reached after following
        redirects with the home URL.

        The site returns no other success signal: a wrong password and an
        unexpected landing page look the same.
        """
        return _normalize_url(final_url) == _normalize_url(self.home_url)

    def is_login_url(self, url: str) -> bool:
        """Check if a URL points at the login page (e.g. after a session expired)."""
        return _normalize_url(url).split("?")[0] == _normalize_url(self.login_url)

    def get_login_error_message(self) -> Optional[str]:
        """
        Get the error message shown on a rejected login, if the page has one.

        Returns None when the page was created without an HTML body, or when
        none of ERROR_SELECTORS matches.
        """
        if self.soup is None:
            return None
        for selector in self.ERROR_SELECTORS:
            element = self.soup.select_one(selector)
            if element is not None:
                text = element.get_text(" ", strip=True)
                if text:
                    return text
        return None


def _normalize_url(url: str) -> str:
    # Ignore a trailing slash and scheme/host case, keep query strings significant
    parts = urlsplit(url)
    path = parts.path.rstrip("/")
    query = f"?{parts.query}" if parts.query else ""
    return f"{parts.scheme.lower()}://{parts.netloc.lower()}{path}{query}"
