"""
Fixtures for the time clock tests: a local fake of the time clock site and a
Playwright driver whose request API talks to it.
"""
import threading
import time
from http.cookies import SimpleCookie
from http.server import BaseHTTPRequestHandler, ThreadingHTTPServer
from urllib.parse import parse_qs, urlsplit

import pytest
from playwright.sync_api import sync_playwright

from timeclock.play.tests.history_html import (
    HOME_PAGE,
    LOGIN_PAGE,
    SESSION_COOKIE,
    VALID_EMAIL,
    VALID_PASSWORD,
    render_history_page,
)


class FakeTimeclockHandler(BaseHTTPRequestHandler):
    """Serves /clock/login, /clock/home and /clock/punch_history like the real site."""

    def log_message(self, format, *args):
        pass

    def _cookies(self):
        cookie = SimpleCookie(self.headers.get("Cookie", ""))
        return {key: morsel.value for key, morsel in cookie.items()}

    def _send_html(self, body, status=200):
        payload = body.encode("utf-8")
        self.send_response(status)
        self.send_header("Content-Type", "text/html; charset=utf-8")
        self.send_header("Content-Length", str(len(payload)))
        self.end_headers()
        self.wfile.write(payload)

    def _redirect(self, location, cookie=None):
        self.send_response(302)
        self.send_header("Location", location)
        if cookie:
            self.send_header("Set-Cookie", f"session={cookie}; Path=/")
        self.send_header("Content-Length", "0")
        self.end_headers()

    def do_POST(self):
        url = urlsplit(self.path)
        if url.path != "/clock/login":
            self._send_html("<html><body>Not found</body></html>", 404)
            return

        length = int(self.headers.get("Content-Length", 0))
        form = {key: values[0] for key, values in parse_qs(self.rfile.read(length).decode("utf-8")).items()}
        self.server.login_attempts.append({
            "form": form,
            "content_type": self.headers.get("Content-Type", ""),
            "cookies": self._cookies(),
        })

        if self.server.login_delay:
            time.sleep(self.server.login_delay)
        if self.server.login_status:
            self._send_html("<html><body>Server error</body></html>", self.server.login_status)
            return

        if form.get("email_address") == VALID_EMAIL and form.get("password") == VALID_PASSWORD:
            self._redirect(self.server.success_location, cookie=SESSION_COOKIE)
        else:
            self._redirect("/clock/login?error=1", cookie="stale-session")

    def do_GET(self):
        url = urlsplit(self.path)
        query = {key: values[0] for key, values in parse_qs(url.query).items()}

        if url.path == "/clock/home":
            self._send_html(HOME_PAGE)
        elif url.path == "/clock/login":
            error = self.server.login_error_html if "error" in query else ""
            self._send_html(LOGIN_PAGE.format(error=error))
        elif url.path == "/clock/punch_history":
            cookies = self._cookies()
            self.server.history_requests.append({"query": query, "cookies": cookies})
            if cookies.get("session") != SESSION_COOKIE:
                self._redirect("/clock/login")
                return
            if self.server.history_status != 200:
                self._send_html("<html><body>Oops</body></html>", self.server.history_status)
                return
            # The site clamps out-of-range months instead of rejecting them
            month = query.get("month", "01")
            if month.isdigit() and int(month) > 12:
                month = "12"
            self._send_html(render_history_page(year=query.get("year", "2015"), month=month))
        else:
            self._send_html("<html><body>Not found</body></html>", 404)


@pytest.fixture
def timeclock_server():
    """Run the fake time clock on a free local port."""
    server = ThreadingHTTPServer(("127.0.0.1", 0), FakeTimeclockHandler)
    server.daemon_threads = True
    server.login_attempts = []
    server.history_requests = []
    server.success_location = "/clock/home"
    server.login_status = None
    server.login_delay = 0
    server.login_error_html = '<div class="error">Invalid email address or password</div>'
    server.history_status = 200
    server.base_url = f"http://127.0.0.1:{server.server_address[1]}/clock"

    thread = threading.Thread(target=server.serve_forever, daemon=True)
    thread.start()
    try:
        yield server
    finally:
        server.shutdown()
        server.server_close()


@pytest.fixture(scope="session")
def playwright_driver():
    with sync_playwright() as p:
        yield p
