"""Redirect/login state machine for authenticated page retrieval"""

from dataclasses import dataclass
from typing import Dict, Optional, Union
from urllib.parse import parse_qs, urljoin, urlsplit

import httpx
from loguru import logger

from .config import MAX_REDIRECTS
from .exceptions import LoginFormNotFoundError
from .headers import build_login_headers, refresh_for_hop
from .login import LoginPageDetector, encode_login_body, parse_login_form
from .models import FlowFlags, FlowState
from .retry import send_with_retry
from .session_store import SessionHandle


def is_oauth2_authorize_url(url: str) -> bool:
    """Authorization-code request: ``/authorize`` with the three core params"""
    try:
        parts = urlsplit(url)
    except ValueError:
        return False
    params = parse_qs(parts.query, keep_blank_values=True)
    return "/authorize" in parts.path and all(
        key in params for key in ("response_type", "client_id", "redirect_uri")
    )


def is_oauth2_callback_url(url: str) -> bool:
    """Callback hop carrying either an authorization code or an error"""
    try:
        parts = urlsplit(url)
    except ValueError:
        return False
    params = parse_qs(parts.query, keep_blank_values=True)
    return "/auth_callback" in parts.path and ("code" in params or "error" in params)


def _hop_label(url: str) -> str:
    if is_oauth2_authorize_url(url):
        return " [oauth2 authorize]"
    if is_oauth2_callback_url(url):
        return " [oauth2 callback]"
    return ""


@dataclass
class FlowOutcome:
    """Where the loop stopped. ``response`` is None for the synthetic failure."""

    response: Optional[httpx.Response]
    state: FlowState
    final_url: str
    hops: int


class AuthFlowOrchestrator:
    """
    Follows redirects by hand and submits login forms when it meets one.

    Each call to ``run`` is a bounded loop over hops: a 500 stops it, a 3xx
    with ``Location`` moves to the next URL, a recognised login page with
    credentials configured triggers a form POST, and anything else is
    returned as-is. Hitting ``max_redirects`` yields a synthetic failure
    instead of raising.
    """

    def __init__(
        self,
        client: httpx.AsyncClient,
        session: SessionHandle,
        max_retries: int = 0,
        username: str = "",
        password: str = "",
        login_detector: Optional[LoginPageDetector] = None,
        max_redirects: int = MAX_REDIRECTS,
    ):
        self.client = client
        self.session = session
        self.max_retries = max_retries
        self.username = username
        self.password = password
        self.login_detector = login_detector or LoginPageDetector()
        self.max_redirects = max_redirects

    @property
    def has_credentials(self) -> bool:
        return bool(self.username and self.password)

    def classify(self, response: httpx.Response) -> FlowState:
        """Next state for a response to the current request"""
        status = response.status_code
        if status == 500:
            return FlowState.TERMINAL_ERROR
        if 300 <= status < 400:
            if response.headers.get("location"):
                return FlowState.REDIRECT
            return FlowState.TERMINAL_SUCCESS
        if status == 200 and self.has_credentials and self.login_detector(response.text):
            return FlowState.LOGIN_DETECTED
        return FlowState.TERMINAL_SUCCESS

    async def run(self, url: str, headers: Dict[str, str], flags: FlowFlags) -> FlowOutcome:
        """
        Drive the loop from ``url``.

        Args:
            url: Initial request URL
            headers: Browser headers; Sec-Fetch-Site is rewritten per hop
            flags: Accumulator updated in place as redirects and logins happen

        Raises:
            httpx.HTTPError: Transport failures of the GET hops
        """
        current_url = url
        redirect_count = 0

        while redirect_count < self.max_redirects:
            response = await send_with_retry(
                self.client,
                "GET",
                current_url,
                headers,
                max_retries=self.max_retries,
                session=self.session,
            )
            state = self.classify(response)

            if state == FlowState.TERMINAL_ERROR:
                logger.warning(f"HTTP 500 during auth flow at {current_url}, stopping")
                return FlowOutcome(response, state, current_url, redirect_count)

            if state == FlowState.REDIRECT:
                next_url = urljoin(current_url, response.headers["location"])
                redirect_count += 1
                flags.mark_redirect()
                refresh_for_hop(headers, current_url, next_url)
                logger.debug(
                    f"Redirect {redirect_count}/{self.max_redirects}: "
                    f"{next_url}{_hop_label(next_url)}"
                )
                current_url = next_url
                continue

            if state == FlowState.LOGIN_DETECTED:
                result = await self._attempt_login(current_url, response, headers, flags)
                if isinstance(result, FlowOutcome):
                    result.hops = redirect_count
                    return result
                redirect_count += 1
                flags.mark_redirect()
                refresh_for_hop(headers, current_url, result)
                logger.info(f"🔑 Login accepted, continuing at {result}")
                current_url = result
                continue

            if 300 <= response.status_code < 400:
                logger.debug(f"HTTP {response.status_code} without Location at {current_url}")
            return FlowOutcome(response, state, current_url, redirect_count)

        logger.warning(
            f"Maximum redirects exceeded ({self.max_redirects}), returning empty response"
        )
        return FlowOutcome(None, FlowState.TERMINAL_ERROR, current_url, redirect_count)

    async def _attempt_login(
        self,
        page_url: str,
        page_response: httpx.Response,
        headers: Dict[str, str],
        flags: FlowFlags,
    ) -> Union[FlowOutcome, str]:
        """
        Submit the login form found on ``page_response``.

        Returns the URL to continue at when the submission redirects,
        otherwise the terminal outcome.
        """
        logger.info(f"🔑 Login form detected at {page_url}, attempting automatic login...")
        try:
            form = parse_login_form(page_response.text, page_url)
        except LoginFormNotFoundError as e:
            logger.warning(f"Login attempt skipped: {e}")
            return FlowOutcome(page_response, FlowState.TERMINAL_SUCCESS, page_url, 0)

        body = encode_login_body(form, self.username, self.password)
        login_headers = build_login_headers(headers, page_url, len(body.encode()))

        try:
            login_response = await send_with_retry(
                self.client,
                "POST",
                form.submit_url,
                login_headers,
                session=self.session,
                content=body,
            )
        except httpx.HTTPError as e:
            logger.warning(f"Login submission failed: {e!r}")
            return FlowOutcome(page_response, FlowState.TERMINAL_SUCCESS, page_url, 0)

        flags.mark_login()
        status = login_response.status_code

        if 300 <= status < 400 and login_response.headers.get("location"):
            return urljoin(form.submit_url, login_response.headers["location"])

        if 200 <= status < 300:
            logger.success("✓ Login completed")
            return FlowOutcome(login_response, FlowState.TERMINAL_SUCCESS, form.submit_url, 0)

        logger.warning(f"Login failed with status {status}")
        return FlowOutcome(page_response, FlowState.TERMINAL_SUCCESS, page_url, 0)
