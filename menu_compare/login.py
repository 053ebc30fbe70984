"""Login page detection and login form handling"""

from typing import Dict, Iterable, Optional
from urllib.parse import urlencode, urljoin

from bs4 import BeautifulSoup

from .config import DEFAULT_LOGIN_PATH, LOGIN_FORM_SELECTOR, LOGIN_PAGE_PHRASES
from .exceptions import LoginFormNotFoundError
from .models import LoginForm


class LoginPageDetector:
    """
    String-sniffing predicate for login pages.

    A body is a login page when it carries one of the configured branded
    phrases plus a form marker, a username or email field marker and a
    password field marker. Swap the phrases (or subclass) to change the
    detection strategy without touching the orchestrator.
    """

    def __init__(self, phrases: Optional[Iterable[str]] = None):
        self.phrases = tuple(phrases) if phrases else LOGIN_PAGE_PHRASES

    def __call__(self, body: str) -> bool:
        return self.is_login_page(body)

    def is_login_page(self, body: str) -> bool:
        if not body or not isinstance(body, str):
            return False
        return (
            any(phrase in body for phrase in self.phrases)
            and "form" in body
            and ("username" in body or "email" in body)
            and "password" in body
        )


def parse_login_form(body: str, page_url: str) -> LoginForm:
    """
    Locate the primary login form and collect what must be echoed back.

    Raises:
        LoginFormNotFoundError: If the page has no primary login form
    """
    soup = BeautifulSoup(body, "lxml")
    form = soup.select_one(LOGIN_FORM_SELECTOR)
    if form is None:
        raise LoginFormNotFoundError(f"Login form not found on {page_url}")

    action = form.get("action") or DEFAULT_LOGIN_PATH
    hidden: Dict[str, str] = {}
    for field in form.select('input[type="hidden"]'):
        name = field.get("name")
        value = field.get("value")
        if name and value:
            hidden[name] = value

    return LoginForm(submit_url=urljoin(page_url, action), hidden_fields=hidden)


def encode_login_body(form: LoginForm, username: str, password: str) -> str:
    """URL-encoded POST body: hidden fields, credentials and ``action=default``"""
    fields = dict(form.hidden_fields)
    fields[form.username_field] = username
    fields[form.password_field] = password
    fields["action"] = "default"
    return urlencode(fields)
