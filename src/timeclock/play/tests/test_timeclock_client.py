"""
End-to-end tests for the session client against a local fake of the time clock.
"""
import socket
from datetime import datetime

import pytest

from timeclock.errors import InvalidRequestError, NotAuthenticatedError, TransportError
from timeclock.timeclock_client import TimeclockClient
from timeclock.timeclock_models import SessionState
from timeclock.play.tests.history_html import SESSION_COOKIE, VALID_EMAIL, VALID_PASSWORD


@pytest.fixture
def client(timeclock_server, playwright_driver):
    with TimeclockClient(
        base_url=timeclock_server.base_url,
        timeout=5000,
        request=playwright_driver.request
    ) as c:
        yield c


def _free_port() -> int:
    with socket.socket() as s:
        s.bind(("127.0.0.1", 0))
        return s.getsockname()[1]


def test_fetch_before_login_fails_without_network():
    # Nothing listens on this address; the precondition is checked first
    client = TimeclockClient(base_url=f"http://127.0.0.1:{_free_port()}/clock")

    with pytest.raises(NotAuthenticatedError):
        client.fetch_punch_history_page(2015, 3)
    with pytest.raises(NotAuthenticatedError):
        client.get_punch_history()

    assert client.state is SessionState.UNAUTHENTICATED
    assert client._playwright is None
    client.close()


def test_successful_login_posts_form_and_follows_redirect(client, timeclock_server):
    assert client.authenticate(VALID_EMAIL, VALID_PASSWORD) is True
    assert client.is_authenticated
    assert client.state is SessionState.AUTHENTICATED

    attempt = timeclock_server.login_attempts[0]
    assert attempt["form"] == {"email_address": VALID_EMAIL, "password": VALID_PASSWORD}
    assert attempt["content_type"].startswith("application/x-www-form-urlencoded")


def test_history_fetch_after_login(client, timeclock_server):
    client.authenticate(VALID_EMAIL, VALID_PASSWORD)

    response = client.fetch_punch_history_page(2015, 3)

    assert response.status == 200
    assert "punch_history" in response.url
    request = timeclock_server.history_requests[0]
    assert request["query"] == {"show": "Show History", "year": "2015", "month": "03"}
    assert request["cookies"]["session"] == SESSION_COOKIE


def test_get_punch_history_returns_parsed_page(client):
    client.authenticate(VALID_EMAIL, VALID_PASSWORD)

    summary = client.get_punch_history(2015, 3).summary()

    assert summary.year == 2015
    assert summary.month == "03"
    assert summary.work_days == 22
    assert len(summary.entries) == 3


def test_year_and_month_are_echoed_by_server(client):
    client.authenticate(VALID_EMAIL, VALID_PASSWORD)

    # The site clamps the month, the summary reports what the site used
    summary = client.get_punch_history(2015, 13).summary()
    assert summary.month == "12"


@pytest.mark.parametrize("year, month", [
    (2015, "March"),
    ("15a", 3),
    (15, 3),
    (2015, 0),
    (2015, "-1"),
])
def test_invalid_year_or_month_is_rejected_before_request(client, timeclock_server, year, month):
    client.authenticate(VALID_EMAIL, VALID_PASSWORD)

    with pytest.raises(InvalidRequestError):
        client.fetch_punch_history_page(year, month)
    assert timeclock_server.history_requests == []
    assert client.is_authenticated


def test_month_given_as_string_is_zero_padded(client, timeclock_server):
    client.authenticate(VALID_EMAIL, VALID_PASSWORD)

    client.fetch_punch_history_page("2015", " 3")

    assert timeclock_server.history_requests[0]["query"]["month"] == "03"


def test_history_defaults_to_current_month(client, timeclock_server):
    client.authenticate(VALID_EMAIL, VALID_PASSWORD)
    now = datetime.now()

    client.fetch_punch_history_page()

    query = timeclock_server.history_requests[0]["query"]
    assert query["year"] == now.strftime("%Y")
    assert query["month"] == now.strftime("%m")


def test_wrong_password_returns_false(client, timeclock_server):
    assert client.authenticate(VALID_EMAIL, "wrong") is False
    assert not client.is_authenticated

    with pytest.raises(NotAuthenticatedError):
        client.fetch_punch_history_page(2015, 3)
    assert timeclock_server.history_requests == []


def test_redirect_elsewhere_is_a_failed_login(client, timeclock_server):
    timeclock_server.success_location = "/clock/dashboard"

    assert client.authenticate(VALID_EMAIL, VALID_PASSWORD) is False
    with pytest.raises(NotAuthenticatedError):
        client.fetch_punch_history_page(2015, 3)


def test_failed_login_discards_its_cookies(client, timeclock_server):
    client.authenticate(VALID_EMAIL, "wrong")
    client.authenticate(VALID_EMAIL, VALID_PASSWORD)

    assert "session" not in timeclock_server.login_attempts[1]["cookies"]


def test_failed_relogin_drops_authentication(client):
    assert client.authenticate(VALID_EMAIL, VALID_PASSWORD)
    assert not client.authenticate(VALID_EMAIL, "wrong")

    with pytest.raises(NotAuthenticatedError):
        client.fetch_punch_history_page(2015, 3)


def test_server_error_on_login_raises_transport_error(client, timeclock_server):
    timeclock_server.login_status = 503

    with pytest.raises(TransportError):
        client.authenticate(VALID_EMAIL, VALID_PASSWORD)
    assert not client.is_authenticated


def test_client_error_on_login_raises_transport_error(client, timeclock_server):
    timeclock_server.login_status = 404

    with pytest.raises(TransportError, match="HTTP 404"):
        client.authenticate(VALID_EMAIL, VALID_PASSWORD)
    assert client.state is SessionState.UNAUTHENTICATED


def test_rejected_login_with_unknown_markup_returns_false(client, timeclock_server):
    timeclock_server.login_error_html = '<p class="notice-danger">Wrong credentials</p>'

    assert client.authenticate(VALID_EMAIL, "wrong") is False
    assert not client.is_authenticated


def test_server_error_on_history_raises_transport_error(client, timeclock_server):
    client.authenticate(VALID_EMAIL, VALID_PASSWORD)
    timeclock_server.history_status = 500

    with pytest.raises(TransportError, match="HTTP 500"):
        client.fetch_punch_history_page(2015, 3)


def test_unreachable_site_raises_transport_error(playwright_driver):
    with TimeclockClient(
        base_url=f"http://127.0.0.1:{_free_port()}/clock",
        timeout=5000,
        request=playwright_driver.request
    ) as client:
        with pytest.raises(TransportError):
            client.authenticate(VALID_EMAIL, VALID_PASSWORD)
        assert client.state is SessionState.UNAUTHENTICATED


def test_slow_site_times_out(timeclock_server, playwright_driver):
    timeclock_server.login_delay = 1.5

    with TimeclockClient(
        base_url=timeclock_server.base_url,
        timeout=200,
        request=playwright_driver.request
    ) as client:
        with pytest.raises(TransportError):
            client.authenticate(VALID_EMAIL, VALID_PASSWORD)


def test_expired_session_requires_new_login(client, timeclock_server):
    client.authenticate(VALID_EMAIL, VALID_PASSWORD)
    # Forget the session on the client side, the site bounces to the login page
    client._context.dispose()
    client._context = None

    with pytest.raises(NotAuthenticatedError, match="expired"):
        client.fetch_punch_history_page(2015, 3)
    assert client.state is SessionState.UNAUTHENTICATED


def test_close_resets_state(client):
    client.authenticate(VALID_EMAIL, VALID_PASSWORD)
    client.close()

    assert client.state is SessionState.UNAUTHENTICATED
    with pytest.raises(NotAuthenticatedError):
        client.fetch_punch_history_page(2015, 3)
