"""Page Object Model classes for the time clock pages."""

from .base_page import BasePage
from .login_page import LoginPage
from .punch_history_page import PunchHistoryPage

__all__ = [
    "BasePage",
    "LoginPage",
    "PunchHistoryPage",
]
